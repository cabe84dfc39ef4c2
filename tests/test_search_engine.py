"""
Tests for ranked prefix search and the popularity fallback.
"""

import pytest

from movie_explorer.exceptions import InvalidArgument
from movie_explorer.models import Movie
from movie_explorer.search_engine import TitleSearchEngine
from movie_explorer.title_index import TitleIndex


def titles(movies):
	return [m.title for m in movies]


def test_search_orders_by_rating(engine):
	assert titles(engine.search("the", 10)) == ["The Shawshank Redemption", "The Dark Knight"]


def test_search_breaks_rating_ties_by_year(engine):
	assert titles(engine.search("in", 10)) == ["Inception", "Interstellar"]
	# Parasite and Interstellar share 8.6; the newer one wins
	assert titles(engine.search("", None))[-2:] == ["Parasite", "Interstellar"]


def test_search_unknown_prefix_is_empty(engine):
	assert engine.search("xyz", 10) == []


def test_empty_prefix_uses_popularity_fallback(engine):
	assert titles(engine.search("", 3)) == ["The Shawshank Redemption", "The Dark Knight", "Inception"]
	assert titles(engine.search("   ", 3)) == titles(engine.search("", 3))


def test_search_is_case_and_whitespace_insensitive(engine):
	assert titles(engine.search("  THE dark ", 10)) == ["The Dark Knight"]


def test_exact_title_matches(engine, movies):
	for movie in movies:
		assert movie in engine.search(movie.title, None)


def test_every_prefix_of_a_title_matches(engine, index, movies):
	for movie in movies:
		key = movie.title.lower()
		for end in range(1, len(key) + 1):
			assert index.starts_with(key[:end])
			assert engine.search(key[:end], None)


def test_limit_truncates_ranked_list(engine):
	full = engine.search("", None)
	for k in range(len(full) + 1):
		assert engine.search("", k) == full[:k]
	assert engine.search("the", 0) == []


def test_invalid_arguments(engine):
	with pytest.raises(InvalidArgument):
		engine.search("the", -1)
	with pytest.raises(InvalidArgument):
		engine.search(None, 10)
	with pytest.raises(InvalidArgument):
		engine.search(42, 10)
	with pytest.raises(InvalidArgument):
		engine.popular_movies(-5)


def test_equal_rank_keeps_insertion_order():
	idx = TitleIndex()
	idx.insert_all([
		Movie(id=10, title="Alien", year=1979, rating=8.5),
		Movie(id=11, title="Aliens", year=1979, rating=8.5),
		Movie(id=12, title="Alien 3", year=1979, rating=8.5),
	])
	assert [m.id for m in TitleSearchEngine(idx).search("alien", None)] == [10, 11, 12]


def test_heavier_branches_do_not_change_ranking():
	idx = TitleIndex()
	idx.insert("Star Trek", Movie(id=1, title="Star Trek", year=2009, rating=7.9), weight=20)
	idx.insert("Star Wars", Movie(id=2, title="Star Wars", year=1977, rating=8.6))
	assert [m.id for m in TitleSearchEngine(idx).search("star", None)] == [2, 1]


def test_prefix_tier_ranks_before_rating():
	# A movie filed under an alternate title that does not share the prefix
	idx = TitleIndex()
	idx.insert("Leon", Movie(id=1, title="Leon", year=1994, rating=8.5))
	idx.insert("Leon", Movie(id=2, title="The Professional", year=1994, rating=9.9))
	assert [m.id for m in TitleSearchEngine(idx).search("leon", None)] == [1, 2]


def test_search_after_removal(engine, index):
	index.remove("Inception", 1)
	assert engine.search("inc", 10) == []
	assert titles(engine.search("in", 10)) == ["Interstellar"]
