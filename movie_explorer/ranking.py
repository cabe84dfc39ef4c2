"""
Ranking module.
Composite sort keys shared by the search and autocomplete engines.
Each key is a plain tuple so ordering never depends on comparator callbacks.
"""

from typing import Callable, Tuple

from .models import Movie, Suggestion
from .title_index import normalize_title


def popularity_key(movie: Movie, insertion_order: int) -> Tuple[float, int, int]:
	"""Popularity fallback order: rating desc, year desc, then insertion order."""
	return (-movie.rating, -movie.year, insertion_order)


def search_key(prefix: str, order_of: Callable[[int], int]) -> Callable[[Movie], Tuple[int, float, int, int]]:
	"""
	Build the key for ranked prefix search.
	Titles that literally start with the prefix form the first tier; inside a
	tier the popularity order applies.
	"""
	def key(movie: Movie) -> Tuple[int, float, int, int]:
		tier = 0 if normalize_title(movie.title).startswith(prefix) else 1
		return (tier,) + popularity_key(movie, order_of(movie.id))
	return key


def suggestion_key(suggestion: Suggestion) -> Tuple[int, str]:
	"""Autocomplete order: higher weight first, then alphabetical."""
	return (-suggestion.score, suggestion.word)
