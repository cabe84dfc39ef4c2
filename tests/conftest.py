"""
Shared fixtures: the five-movie scenario catalog and engines built over it.
"""

import pytest

from movie_explorer.autocomplete import Autocompleter
from movie_explorer.models import Movie
from movie_explorer.search_engine import TitleSearchEngine
from movie_explorer.title_index import TitleIndex


def scenario_movies():
	return [
		Movie(id=1, title="Inception", year=2010, rating=8.8, genres=["Action", "Sci-Fi"]),
		Movie(id=2, title="The Shawshank Redemption", year=1994, rating=9.3, genres=["Drama"]),
		Movie(id=3, title="The Dark Knight", year=2008, rating=9.0, genres=["Action", "Crime"]),
		Movie(id=4, title="Parasite", year=2019, rating=8.6, genres=["Comedy", "Thriller"]),
		Movie(id=5, title="Interstellar", year=2014, rating=8.6, genres=["Adventure", "Sci-Fi"]),
	]


@pytest.fixture
def movies():
	return scenario_movies()


@pytest.fixture
def index(movies):
	idx = TitleIndex()
	idx.insert_all(movies)
	return idx


@pytest.fixture
def engine(index):
	return TitleSearchEngine(index)


@pytest.fixture
def completer(index):
	return Autocompleter(index)
