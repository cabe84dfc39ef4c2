"""
Data models for the Movie Explorer backend.
Defines the movie record stored in the title index and the small value types
returned by autocomplete and stats.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, asdict  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # lists, optional values, raw payloads

# Image CDN used to expand TMDb poster/backdrop paths into full URLs
TMDB_POSTER_BASE = "https://image.tmdb.org/t/p/w500"
TMDB_BACKDROP_BASE = "https://image.tmdb.org/t/p/w1280"
PLACEHOLDER_POSTER = "https://via.placeholder.com/500x750?text=No+Poster"


@dataclass(eq=False)
class Movie:
	"""
	Represents a single movie in the catalog.
	Identity is the integer id: two records with the same id are the same movie,
	whatever their other fields say.
	"""
	id: int  # unique identifier (> 0)
	title: str  # display title in its original case
	year: int  # release year (valid when > 1900)
	rating: float  # average rating on a 0-10 scale
	poster_url: Optional[str] = None  # optional: URL for the poster image
	backdrop_url: Optional[str] = None  # optional: wide image for detail pages
	genres: List[str] = field(default_factory=list)  # ordered genre names
	description: str = ''  # short synopsis
	overview: str = ''  # full synopsis (defaults to description)
	runtime: int = 0  # minutes; 0 when unknown
	language: str = 'en'  # original language code
	popularity: Optional[float] = None  # popularity score; derived from rating when missing

	def __post_init__(self):
		# Mirror the two synopsis fields so either one can be supplied
		if not self.overview:
			self.overview = self.description
		if not self.description and self.overview:
			self.description = self.overview if len(self.overview) <= 150 else self.overview[:147] + '...'
		if self.popularity is None:
			self.popularity = self.rating * 100  # simple popularity proxy

	def __eq__(self, other):
		if not isinstance(other, Movie):
			return NotImplemented
		return self.id == other.id

	def __hash__(self):
		return hash(self.id)

	@classmethod
	def from_tmdb(cls, data: Dict[str, Any]) -> 'Movie':
		"""
		Build a Movie from a TMDb movie payload (search result or details).
		Missing fields fall back to the same defaults the catalog uses.
		"""
		release_date = data.get('release_date') or ''  # "YYYY-MM-DD" or empty
		year = int(release_date[:4]) if release_date[:4].isdigit() else 0  # parse year prefix

		poster_path = data.get('poster_path')
		backdrop_path = data.get('backdrop_path')
		poster = TMDB_POSTER_BASE + poster_path if poster_path else PLACEHOLDER_POSTER
		backdrop = TMDB_BACKDROP_BASE + backdrop_path if backdrop_path else poster  # fall back to poster

		genres = [g.get('name') for g in (data.get('genres') or []) if isinstance(g, dict) and g.get('name')]
		if not genres:
			genres = ['Movie']

		overview = data.get('overview') or 'No description available.'
		return cls(
			id=int(data.get('id') or 0),
			title=data.get('title') or 'Unknown',
			year=year,
			rating=float(data.get('vote_average') or 0.0),
			poster_url=poster,
			backdrop_url=backdrop,
			genres=genres,
			overview=overview,
			runtime=int(data.get('runtime') or 0),
			language=data.get('original_language') or 'en',
			popularity=float(data.get('popularity') or 0.0),
		)

	def is_valid(self) -> bool:
		"""True when the record has an id, a non-blank title and a plausible year."""
		return self.id > 0 and bool(self.title and self.title.strip()) and self.year > 1900

	def formatted_runtime(self) -> str:
		"""Runtime as "2h 15m", "2h" or "45m"; "N/A" when unknown."""
		if self.runtime <= 0:
			return 'N/A'
		hours, minutes = divmod(self.runtime, 60)
		if hours and minutes:
			return f"{hours}h {minutes}m"
		if hours:
			return f"{hours}h"
		return f"{minutes}m"

	def star_rating(self) -> str:
		"""Map the 0-10 rating onto five stars, with an optional half star."""
		full = int(self.rating // 2)
		half = 1 if (self.rating % 2) >= 1 else 0
		empty = max(0, 5 - full - half)
		return '★' * full + ('½' if half else '') + '☆' * empty

	def primary_genre(self) -> str:
		return self.genres[0] if self.genres else 'Movie'

	def genres_text(self) -> str:
		return ', '.join(self.genres) if self.genres else 'Movie'

	def short_description(self, max_length: int = 150) -> str:
		text = self.overview or self.description
		if not text:
			return 'No description available.'
		if len(text) <= max_length:
			return text
		return text[:max_length - 3] + '...'

	def to_dict(self) -> Dict[str, Any]:
		"""Plain dict for JSON responses."""
		return asdict(self)


@dataclass
class Suggestion:
	"""One autocomplete candidate: the normalized title path and its weight."""
	word: str  # normalized title spelled by the root-to-terminal path
	score: int  # aggregate weight of the terminal node


@dataclass
class IndexStats:
	"""
	Advisory statistics about the title index.
	Computed by a read-only walk; nothing here is part of a ranking contract.
	"""
	total_movies: int  # counted (title, id) entries
	unique_titles: int  # terminal nodes
	total_nodes: int  # nodes including the root
	average_terminal_depth: float  # mean depth of terminals, 0.0 when empty
	memory_estimate: str  # human-readable rough size

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)
