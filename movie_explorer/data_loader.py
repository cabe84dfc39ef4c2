"""
Data loading module.
Loads the movie catalog from JSONL and provides the built-in seed catalog used
when no data file is available.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON lines
from typing import Dict, List  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our Movie data class used across the project
from .models import Movie  # structured movie record

# Console logging
from loguru import logger  # console logger


# Built-in catalog: (id, title, year, rating, poster path, genres, description)
SEED_CATALOG = [
	(1, "Inception", 2010, 8.8, "/9gk7adHYeDvHkCSEqAvQNLV5Uge.jpg",
		["Action", "Sci-Fi", "Thriller"],
		"A thief who steals corporate secrets through dream-sharing technology."),
	(2, "The Shawshank Redemption", 1994, 9.3, "/q6y0Go1tsGEsmtFryDOJo3dEmqu.jpg",
		["Drama"],
		"Two imprisoned men bond over a number of years."),
	(3, "The Dark Knight", 2008, 9.0, "/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
		["Action", "Crime", "Drama"],
		"Batman faces the Joker in Gotham City."),
	(4, "Parasite", 2019, 8.6, "/3h1JZJeh5zqTn2birTk6qOB2KzJ.jpg",
		["Comedy", "Drama", "Thriller"],
		"A poor family schemes to become employed by a wealthy family."),
	(5, "Interstellar", 2014, 8.6, "/gEU2QniE6E77NI6lCU6MxlNBvIx.jpg",
		["Adventure", "Drama", "Sci-Fi"],
		"A team of explorers travel through a wormhole in space."),
	(6, "The Godfather", 1972, 9.2, "/3bhkrj58Vtu7enYsRolD1fZdja1.jpg",
		["Crime", "Drama"],
		"The aging patriarch of an organized crime dynasty transfers control."),
	(7, "Pulp Fiction", 1994, 8.9, "/d5iIlFn5s0ImszYzBPb8JPIfbXD.jpg",
		["Crime", "Drama"],
		"The lives of two mob hitmen, a boxer, and a pair of diner bandits intertwine."),
	(8, "Fight Club", 1999, 8.8, "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
		["Drama"],
		"An insomniac office worker forms an underground fight club."),
	(9, "Forrest Gump", 1994, 8.8, "/saHP97rTPS5eLmrLQEcANmKrsFl.jpg",
		["Drama", "Romance"],
		"The presidencies of Kennedy and Johnson, Vietnam, and other events shape Forrest's life."),
	(10, "The Matrix", 1999, 8.7, "/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
		["Action", "Sci-Fi"],
		"A computer hacker learns about the true nature of reality."),
]

POSTER_BASE = "https://image.tmdb.org/t/p/w500"  # poster size used for seed records
BACKDROP_BASE = "https://image.tmdb.org/t/p/w1280"  # backdrop size used for seed records


class DataLoader:
	"""
	Handles loading and light cleanup of movie data.
	Titles keep their original case; the title index normalizes its own keys.
	"""

	# Genre synonym mapping: common spellings → single display name
	GENRE_SYNONYMS = {
		'sci-fi': 'Sci-Fi',  # canonical form used by the catalog
		'sci fi': 'Sci-Fi',  # spaced form
		'scifi': 'Sci-Fi',  # common variant
		'science fiction': 'Sci-Fi',  # TMDb's name
		'science-fiction': 'Sci-Fi',  # with dash
		'romantic': 'Romance',
		'funny': 'Comedy',
		'animated': 'Animation',
	}

	def __init__(self):
		"""Initialize the data loader and expose the synonyms mapping."""
		self.genre_synonyms = self.GENRE_SYNONYMS  # store mapping for reuse

	def load_catalog(self, filepath: str) -> List[Movie]:
		"""Load the JSONL catalog, falling back to the seed movies when the file is absent."""
		if not Path(filepath).exists():
			logger.warning(f"[DataLoader] {filepath} not found; using the built-in seed catalog")
			return self.seed_movies()
		return self.load_movies_from_jsonl(filepath)

	def load_movies_from_jsonl(self, filepath: str) -> List[Movie]:
		"""
		Load movies from a JSON Lines (JSONL) file where each line is one JSON object.
		Returns a list of Movie objects.
		"""
		movies = []  # accumulator for parsed Movie objects
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading movies from {filepath}...")  # log action

		# Open the file and read line-by-line to handle large datasets efficiently
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # tolerate blank lines
					continue
				try:
					data = json.loads(line)  # parse JSON object per line
					movie = self._parse_movie_data(data)  # convert dict -> Movie
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue  # move on
				except (KeyError, TypeError, ValueError, AttributeError) as e:
					logger.warning(f"[DataLoader] Error parsing movie at line {line_num}: {e}")  # bad field values
					continue  # move on
				movies.append(movie)  # collect

		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies  # return list

	def _parse_movie_data(self, data: Dict) -> Movie:
		"""
		Convert a raw dictionary (from file) into a Movie object.
		Numeric fields get safe defaults when missing.
		"""
		genres = [self._normalize_genre(g) for g in self._parse_comma_separated(data.get('genres', []))]
		description = (data.get('description') or '').strip()  # short synopsis
		overview = (data.get('overview') or '').strip()  # long synopsis

		return Movie(
			id=int(data['id']),  # ids are integers in the index
			title=(data.get('title') or '').strip(),  # display title keeps its case
			year=int(data.get('year') or 0),
			rating=float(data.get('rating') or 0.0),
			poster_url=data.get('poster_url') or data.get('url'),  # prefer 'poster_url' then 'url'
			backdrop_url=data.get('backdrop_url'),
			genres=[g for g in genres if g],
			description=description,
			overview=overview,
			runtime=int(data.get('runtime') or 0),
			language=data.get('language') or 'en',
			popularity=float(data['popularity']) if data.get('popularity') is not None else None,
		)

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty

	def _normalize_genre(self, genre: str) -> str:
		"""Map a raw genre to its display form using synonyms; fall back to Title Case."""
		if not genre:  # missing genre
			return ''
		genre_lower = genre.strip().lower()  # prepare for lookup
		if genre_lower in self.genre_synonyms:
			return self.genre_synonyms[genre_lower]
		return genre.strip().title()

	def seed_movies(self) -> List[Movie]:
		"""The built-in ten-movie catalog."""
		return [
			Movie(
				id=movie_id,
				title=title,
				year=year,
				rating=rating,
				poster_url=POSTER_BASE + poster_path,
				backdrop_url=BACKDROP_BASE + poster_path,
				genres=list(genres),
				description=description,
				runtime=120,
			)
			for movie_id, title, year, rating, poster_path, genres, description in SEED_CATALOG
		]

	def get_all_genres(self, movies: List[Movie]) -> List[str]:
		"""Return a sorted list of all unique genres in the dataset."""
		genres = set()  # unique genres
		for movie in movies:  # iterate
			genres.update(movie.genres)
		return sorted(genres)  # sorted output
