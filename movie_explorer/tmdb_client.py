"""
TMDb client.
Thin wrapper over the TMDb v3 REST API used by the search proxy endpoint and
the optional catalog enrichment at startup.
"""

from typing import Any, Dict, List, Optional

import requests  # HTTP client

from .exceptions import TMDbError
from .models import Movie

from loguru import logger


class TMDbClient:
	"""Calls TMDb with an API key; disabled when the key is empty."""

	def __init__(self, api_key: str, base_url: str = "https://api.themoviedb.org/3",
				 timeout: float = 10.0, session: Optional[requests.Session] = None):
		self.api_key = api_key
		self.base_url = base_url.rstrip('/')
		self.timeout = timeout
		self.session = session or requests.Session()

	@property
	def enabled(self) -> bool:
		return bool(self.api_key)

	def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
		if not self.enabled:
			raise TMDbError("TMDb API key not configured")
		query = dict(params, api_key=self.api_key)
		try:
			resp = self.session.get(
				f"{self.base_url}{path}",
				params=query,
				headers={"Accept": "application/json"},
				timeout=self.timeout,
			)
			resp.raise_for_status()
			return resp.json()
		except requests.HTTPError as e:
			status = e.response.status_code if e.response is not None else None
			raise TMDbError(f"TMDb API error: {e}", status_code=status) from e
		except (requests.RequestException, ValueError) as e:
			raise TMDbError(f"TMDb API error: {e}") from e

	def search(self, query: str, page: int = 1) -> Dict[str, Any]:
		"""Raw `/search/movie` payload for `query`."""
		logger.debug(f"[TMDb] search query='{query}' page={page}")
		return self._get("/search/movie", {"query": query, "page": page})

	def popular_movies(self, page: int = 1) -> List[Movie]:
		"""`/movie/popular` results converted to Movie records."""
		payload = self._get("/movie/popular", {"page": page})
		movies = [Movie.from_tmdb(item) for item in payload.get("results", [])]
		logger.info(f"[TMDb] Loaded {len(movies)} popular movies (page {page})")
		return movies
