"""
Application settings.
Environment-driven configuration (prefix MOVIE_EXPLORER_, optional .env file).

Usage:
	from movie_explorer.settings import get_settings
	settings = get_settings()
"""

from functools import lru_cache  # build settings once per process
from typing import List  # type hints

from pydantic import Field  # field defaults and constraints
from pydantic_settings import BaseSettings, SettingsConfigDict  # env loading


class Settings(BaseSettings):
	"""Runtime configuration for the API, the catalog loader and the TMDb proxy."""

	model_config = SettingsConfigDict(
		env_prefix="MOVIE_EXPLORER_",
		env_file=".env",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",  # don't crash on unknown keys
	)

	# Catalog
	data_path: str = "data/movies.jsonl"  # JSONL catalog; seed movies are used when missing

	# TMDb proxy (empty key disables it)
	tmdb_api_key: str = ""
	tmdb_base_url: str = "https://api.themoviedb.org/3"
	tmdb_timeout: float = Field(default=10.0, gt=0)

	# HTTP
	cors_origins: List[str] = ["http://localhost:8000", "*"]
	search_limit: int = Field(default=50, ge=0)  # results ranked before pagination
	page_size: int = Field(default=20, ge=1)  # default search page size
	suggestion_limit: int = Field(default=10, ge=0)

	# Accounts
	database_url: str = "sqlite:///movie_explorer.db"  # users and favorites
	session_max_age: int = Field(default=86400, gt=0)  # seconds
	session_cookie_secure: bool = False  # set on HTTPS deployments

	# Index
	exact_weights: bool = False  # subtract weights on removal

	# Logging
	log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
	return Settings()
