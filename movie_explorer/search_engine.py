"""
Search engine module.
Ranked prefix search over the title index, with a popularity fallback for
empty queries.
"""

import time  # measure query latency for debug logs
from typing import List, Optional  # type annotations for clarity

# Import project modules for data structures and components
from .exceptions import InvalidArgument  # argument errors
from .models import Movie  # movie record
from .ranking import popularity_key, search_key  # composite sort keys
from .title_index import TitleIndex, check_limit, normalize_title  # prefix tree

# Import loguru for console logging
from loguru import logger  # simple structured logger


class TitleSearchEngine:
	"""
	High-level search API over a TitleIndex.
	The engine holds no state of its own: identical queries against the same
	index state always return the same ordered results.
	"""
	def __init__(self, index: TitleIndex):
		self.index = index  # shared, read-only after startup

	def search(self, prefix: str, limit: Optional[int] = 50) -> List[Movie]:
		"""
		Return up to `limit` movies whose normalized title starts with `prefix`,
		best first. An empty prefix returns the popularity fallback; an unknown
		prefix returns an empty list. `limit=None` means no limit.
		"""
		if not isinstance(prefix, str):  # reject non-text queries early
			raise InvalidArgument(f"prefix must be a string, got {type(prefix).__name__}")
		check_limit(limit)  # negative or non-int limits are errors

		start = time.perf_counter()  # start timer
		key = normalize_title(prefix)  # lowercase + trim
		if not key:
			return self.popular_movies(limit)  # nothing to match on

		ids = self.index.collect_ids(key)  # walk to the prefix node and gather the subtree
		if ids is None:  # path missing -> no match, not an error
			logger.debug(f"[Search] '{key}' -> no prefix path")
			return []

		# Resolve ids to records; ids without a record are skipped
		movies: List[Movie] = []
		for movie_id in ids:
			movie = self.index.lookup(movie_id)
			if movie is not None:
				movies.append(movie)

		movies.sort(key=search_key(key, self.index.insertion_order))  # tier, rating, year, order
		results = movies if limit is None else movies[:limit]  # truncate
		elapsed_ms = (time.perf_counter() - start) * 1000  # compute ms
		logger.debug(f"[Search] '{key}' -> {len(results)} of {len(movies)} candidates ({elapsed_ms:.2f} ms)")
		return results

	def popular_movies(self, limit: Optional[int] = 50) -> List[Movie]:
		"""Every indexed movie ordered by rating, then year, truncated to `limit`."""
		check_limit(limit)
		movies = sorted(
			self.index.all_movies(),
			key=lambda m: popularity_key(m, self.index.insertion_order(m.id)),
		)
		return movies if limit is None else movies[:limit]
