"""
Autocomplete module.
Turns a typed prefix into a ranked list of completed (normalized) titles.
"""

from typing import List, Optional

from .exceptions import InvalidArgument
from .ranking import popularity_key, suggestion_key
from .title_index import TitleIndex, check_limit, normalize_title

from loguru import logger

# Prefixes shorter than this get the popular titles instead of completions
MIN_PREFIX_LENGTH = 2


class Autocompleter:
	"""
	Prefix -> suggestions, ranked by the aggregate node weight rather than by
	movie rating. Suggestions are the lowercased titles spelled by the tree.
	"""

	def __init__(self, index: TitleIndex):
		self.index = index

	def autocomplete(self, prefix: str, limit: Optional[int] = 10) -> List[str]:
		if not isinstance(prefix, str):
			raise InvalidArgument(f"prefix must be a string, got {type(prefix).__name__}")
		check_limit(limit)

		key = normalize_title(prefix)
		if len(key) < MIN_PREFIX_LENGTH:
			return self.popular_titles(limit)

		suggestions = self.index.completions(key)
		if suggestions is None:
			logger.debug(f"[Autocomplete] '{key}' -> no prefix path, using popular titles")
			return self.popular_titles(limit)

		suggestions.sort(key=suggestion_key)
		if limit is not None:
			suggestions = suggestions[:limit]
		logger.debug(f"[Autocomplete] '{key}' -> {len(suggestions)} suggestions")
		return [s.word for s in suggestions]

	def popular_titles(self, limit: Optional[int] = 10) -> List[str]:
		"""Display titles of the best rated movies (rating desc, year desc)."""
		check_limit(limit)
		movies = sorted(
			self.index.all_movies(),
			key=lambda m: popularity_key(m, self.index.insertion_order(m.id)),
		)
		if limit is not None:
			movies = movies[:limit]
		return [m.title for m in movies]
