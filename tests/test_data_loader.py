"""
Tests for catalog loading: JSONL parsing, skipped lines and the seed catalog.
"""

import json

import pytest

from movie_explorer.data_loader import DataLoader
from movie_explorer.title_index import TitleIndex


def write_jsonl(path, lines):
	path.write_text("\n".join(lines) + "\n", encoding="utf-8")
	return str(path)


def test_load_movies_from_jsonl(tmp_path):
	path = write_jsonl(tmp_path / "movies.jsonl", [
		json.dumps({"id": 1, "title": " Inception ", "year": 2010, "rating": 8.8,
					"genres": "action, sci fi", "url": "http://img/1.jpg", "overview": "Dreams."}),
		"",
		json.dumps({"id": "2", "title": "Parasite", "year": "2019", "rating": "8.6",
					"genres": ["Comedy", "Thriller"], "popularity": 12.5, "runtime": 132}),
	])
	movies = DataLoader().load_movies_from_jsonl(path)

	assert [m.id for m in movies] == [1, 2]
	first, second = movies
	assert first.title == "Inception"  # trimmed, case kept
	assert first.genres == ["Action", "Sci-Fi"]
	assert first.poster_url == "http://img/1.jpg"
	assert first.description == "Dreams."
	assert (second.year, second.rating, second.runtime) == (2019, 8.6, 132)
	assert second.popularity == 12.5


def test_malformed_lines_are_skipped(tmp_path):
	path = write_jsonl(tmp_path / "movies.jsonl", [
		"{not json",
		json.dumps({"title": "No id"}),
		json.dumps({"id": 3, "title": "Bad year", "year": "soon"}),
		json.dumps([1, 2, 3]),
		json.dumps({"id": 4, "title": "Okay", "year": 2001, "rating": 7.0}),
	])
	movies = DataLoader().load_movies_from_jsonl(path)
	assert [m.id for m in movies] == [4]


def test_missing_file_raises(tmp_path):
	with pytest.raises(FileNotFoundError):
		DataLoader().load_movies_from_jsonl(str(tmp_path / "missing.jsonl"))


def test_load_catalog_falls_back_to_seed(tmp_path):
	movies = DataLoader().load_catalog(str(tmp_path / "missing.jsonl"))
	assert len(movies) == 10
	assert movies[0].title == "Inception"
	assert all(m.is_valid() for m in movies)


def test_seed_catalog_builds_clean_index():
	loader = DataLoader()
	idx = TitleIndex()
	assert idx.insert_all(loader.seed_movies()) == 10
	idx.verify()
	assert "Sci-Fi" in loader.get_all_genres(loader.seed_movies())
