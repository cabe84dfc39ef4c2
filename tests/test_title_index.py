"""
Unit tests for TitleIndex: insertion, removal with pruning, lookups, stats
and invariant checking.
Run: pytest tests/test_title_index.py
"""

import pytest

from movie_explorer.exceptions import IndexCorrupted, InvalidArgument
from movie_explorer.models import Movie
from movie_explorer.title_index import TitleIndex, normalize_title


def test_insert_counts_each_entry(index):
	assert index.size() == 5
	assert len(index) == 5
	assert {m.id for m in index.all_movies()} == {1, 2, 3, 4, 5}
	index.verify()


def test_titles_are_stored_normalized(index):
	assert index.starts_with("the shaw")
	assert index.starts_with("  THE SHAW")  # prefix is normalized too
	assert index.starts_with("")
	assert not index.starts_with("thx")
	assert normalize_title("  The Dark Knight ") == "the dark knight"


def test_lookup_returns_record_or_none(index):
	assert index.lookup(3).title == "The Dark Knight"
	assert index.lookup(99) is None


def test_reinsert_same_id_updates_record(index):
	updated = Movie(id=1, title="Inception", year=2010, rating=8.8, runtime=148)
	index.insert("Inception", updated)
	assert index.size() == 5  # same (title, id) entry
	assert index.lookup(1).runtime == 148
	index.verify()


def test_insert_distinct_id_same_title(index):
	twin = Movie(id=6, title="Inception", year=2010, rating=8.8)
	index.insert("Inception", twin)
	assert index.size() == 6
	assert index.lookup(6) is twin
	assert index.collect_ids("inception") == [1, 6]
	index.verify()


def test_insert_rejects_bad_arguments():
	idx = TitleIndex()
	movie = Movie(id=1, title="Inception", year=2010, rating=8.8)
	with pytest.raises(InvalidArgument):
		idx.insert("   ", movie)
	with pytest.raises(InvalidArgument):
		idx.insert("Inception", Movie(id=0, title="Inception", year=2010, rating=8.8))
	with pytest.raises(InvalidArgument):
		idx.insert("Inception", movie, weight=0)
	with pytest.raises(InvalidArgument):
		idx.insert(None, movie)
	# Nothing was mutated by the failed calls
	assert idx.size() == 0
	assert idx.lookup(1) is None
	assert idx.stats().total_nodes == 1


def test_insert_all_skips_invalid_records():
	idx = TitleIndex()
	good = Movie(id=1, title="Inception", year=2010, rating=8.8)
	blank = Movie(id=2, title="  ", year=2010, rating=7.0)
	no_id = Movie(id=-3, title="Memento", year=2000, rating=8.4)
	assert idx.insert_all([good, blank, no_id]) == 1
	assert idx.size() == 1
	assert idx.lookup(2) is None


def test_insert_all_skips_id_already_indexed_under_another_title():
	idx = TitleIndex()
	alien = Movie(id=1, title="Alien", year=1979, rating=8.5)
	heat = Movie(id=1, title="Heat", year=1995, rating=8.3)
	assert idx.insert_all([alien, heat]) == 1
	assert idx.size() == 1
	assert idx.lookup(1).title == "Alien"
	assert not idx.starts_with("heat")
	idx.verify()


def test_insert_all_accepts_repeated_record_with_same_title():
	idx = TitleIndex()
	first = Movie(id=1, title="Alien", year=1979, rating=8.5)
	again = Movie(id=1, title=" ALIEN ", year=1979, rating=8.6)
	assert idx.insert_all([first, again]) == 2
	assert idx.size() == 1
	assert idx.lookup(1).rating == 8.6


def test_weight_accumulates_along_path():
	idx = TitleIndex()
	idx.insert("ab", Movie(id=1, title="ab", year=2000, rating=5.0), weight=3)
	idx.insert("ac", Movie(id=2, title="ac", year=2000, rating=5.0))
	suggestions = {s.word: s.score for s in idx.completions("a")}
	assert suggestions == {"ab": 3, "ac": 1}
	assert idx.most_common_prefixes(5) == []  # nothing longer than one char above 5


def test_remove_prunes_dead_branch(index):
	assert index.remove("Inception", 1) is True
	assert index.size() == 4
	assert index.lookup(1) is None
	assert not index.starts_with("inc")
	# "in" still branches towards interstellar
	assert index.starts_with("int")
	index.verify()


def test_remove_missing_entry_returns_false(index):
	assert index.remove("Inception", 2) is False  # wrong id
	assert index.remove("Incep", 1) is False  # not a terminal
	assert index.remove("Nope", 1) is False  # no path
	assert index.remove("", 1) is False
	assert index.size() == 5


def test_remove_keeps_record_while_another_title_holds_it(index):
	movie = index.lookup(4)
	index.insert("Gisaengchung", movie)
	assert index.remove("Parasite", 4) is True
	assert index.lookup(4) is movie
	assert index.remove("Gisaengchung", 4) is True
	assert index.lookup(4) is None
	index.verify()


def test_remove_keeps_weight_by_default():
	idx = TitleIndex()
	idx.insert("abc", Movie(id=1, title="abc", year=2000, rating=5.0))
	idx.insert("abd", Movie(id=2, title="abd", year=2000, rating=5.0))
	idx.remove("abc", 1)
	assert idx.completions("ab")[0].score == 1
	assert idx.most_common_prefixes(1) == []
	# The shared "ab" node still counts both historical inserts
	assert "(weight: 2)" in idx.dump().splitlines()[2]


def test_exact_weights_subtracts_on_remove():
	idx = TitleIndex(exact_weights=True)
	idx.insert("abc", Movie(id=1, title="abc", year=2000, rating=5.0), weight=2)
	idx.insert("abd", Movie(id=2, title="abd", year=2000, rating=5.0))
	idx.remove("abc", 1)
	assert "(weight: 1)" in idx.dump().splitlines()[2]
	idx.verify()


def test_prefix_with_common_chain_is_pruned_to_branch_point():
	idx = TitleIndex()
	idx.insert("star", Movie(id=1, title="Star", year=2000, rating=5.0))
	idx.insert("star wars", Movie(id=2, title="Star Wars", year=1977, rating=8.6))
	idx.remove("star wars", 2)
	assert idx.starts_with("star")
	assert idx.starts_with("star ")  # trimmed back to "star"
	assert not idx.starts_with("star w")
	assert idx.stats().total_nodes == 5  # root + s,t,a,r
	idx.verify()


def test_stats(index):
	stats = index.stats()
	assert stats.total_movies == 5
	assert stats.unique_titles == 5
	expected_depth = sum(len(m.title) for m in index.all_movies()) / 5
	assert stats.average_terminal_depth == pytest.approx(expected_depth)
	assert stats.memory_estimate == "4.9 KB"
	assert TitleIndex().stats().average_terminal_depth == 0.0
	assert TitleIndex().stats().memory_estimate == "0 bytes"


def test_most_common_prefixes_sorted_by_weight():
	idx = TitleIndex()
	for i in range(7):
		idx.insert(f"the movie {i}", Movie(id=i + 1, title=f"The Movie {i}", year=2000, rating=5.0))
	idx.insert("thx 1138", Movie(id=50, title="THX 1138", year=1971, rating=6.7))
	top = idx.most_common_prefixes(3)
	assert top == [("th", 8), ("the", 7), ("the ", 7)]
	with pytest.raises(InvalidArgument):
		idx.most_common_prefixes(-1)


def test_clear(index):
	index.clear()
	assert index.size() == 0
	assert index.all_movies() == []
	assert index.stats().total_nodes == 1


def test_corruption_poisons_index(index):
	# Break invariant 1 behind the index's back
	node = index._descend("parasite")
	node.terminal = False
	with pytest.raises(IndexCorrupted) as excinfo:
		index.verify()
	assert excinfo.value.path == "parasite"
	# Every later operation refuses to run
	with pytest.raises(IndexCorrupted):
		index.size()
	with pytest.raises(IndexCorrupted):
		index.lookup(1)


def test_traversal_detects_corruption(index):
	node = index._descend("inception")
	node.ids.clear()
	with pytest.raises(IndexCorrupted):
		index.collect_ids("in")
	with pytest.raises(IndexCorrupted):
		index.starts_with("in")


def test_dump_lists_every_node(index):
	lines = index.dump().splitlines()
	assert len(lines) == index.stats().total_nodes
	assert lines[0].startswith("[]")
	assert any("[parasite] ★ 1 movies" in line for line in lines)
