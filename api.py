"""
FastAPI server exposing the movie explorer API.
Endpoints:
- GET /api/hello, /api/health: liveness and index size
- GET /api/movies, /api/movies/popular, /api/movies/{id}: catalog access
- GET /api/search?q=...&page=1&limit=20: ranked prefix search, paginated
- GET /api/suggestions?q=...&limit=10: title autocomplete
- GET /api/trie/stats: title index statistics
- GET /api/tmdb/search?query=...: TMDb search proxy (needs an API key)
- POST /api/register, /api/login, /api/logout; GET /api/profile: cookie sessions
- GET/POST /api/favorites: list or toggle the signed-in user's favorites

Startup loads the catalog (JSONL file or the built-in seed movies), optionally
adds TMDb's popular movies, and builds the title index once.

Run: uvicorn api:app --reload
"""

# Import standard libraries for timing, logging sinks and math
import math  # page counts
import sys  # loguru sink
import time  # measure startup and request latencies
from contextlib import asynccontextmanager  # startup/shutdown hook
from datetime import datetime  # timestamps in responses
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import Cookie, Depends, FastAPI, HTTPException, Query, Request, Response  # FastAPI primitives
from fastapi.middleware.cors import CORSMiddleware  # browser access from the frontend
from fastapi.responses import JSONResponse  # error bodies
from pydantic import AliasChoices, BaseModel, Field  # request/response schema definitions
from starlette.exceptions import HTTPException as StarletteHTTPException  # routing errors

# Import our internal modules for data loading and search
from movie_explorer.accounts import Account, AccountService, SessionStore  # users, sessions, favorites
from movie_explorer.autocomplete import Autocompleter  # suggestions
from movie_explorer.data_loader import DataLoader  # loads movies
from movie_explorer.database import Database  # account store
from movie_explorer.exceptions import AuthenticationFailed, Conflict, IndexCorrupted, InvalidArgument, TMDbError  # error kinds
from movie_explorer.models import Movie  # movie record
from movie_explorer.search_engine import TitleSearchEngine  # ranked search
from movie_explorer.settings import Settings, get_settings  # configuration
from movie_explorer.title_index import TitleIndex, normalize_title  # prefix tree
from movie_explorer.tmdb_client import TMDbClient  # TMDb proxy

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: int  # unique id
	title: str  # human-readable title
	year: int  # release year
	rating: float  # average rating
	poster_url: Optional[str] = None  # optional poster image URL
	backdrop_url: Optional[str] = None  # optional backdrop image URL
	genres: List[str]  # list of genres
	description: str  # short synopsis
	overview: str  # full synopsis
	runtime: int  # minutes
	language: str  # original language
	popularity: Optional[float] = None  # popularity score

	@classmethod
	def from_movie(cls, movie: Movie) -> 'MovieOut':
		return cls(**movie.to_dict())


# Pydantic model for paginated movie lists (search and popular)
class MoviePage(BaseModel):
	page: int  # 1-based page number
	total_pages: int  # pages available at this page size
	total_results: int  # ranked results before pagination
	results: List[MovieOut]  # movies on this page


class SearchResponse(MoviePage):
	query: str  # query as received (trimmed)


class SuggestionsResponse(BaseModel):
	prefix: str  # normalized prefix
	suggestions: List[str]  # ranked titles
	count: int  # number of suggestions


class MoviesResponse(BaseModel):
	count: int
	movies: List[MovieOut]


class PrefixOut(BaseModel):
	prefix: str
	weight: int


class StatsResponse(BaseModel):
	total_movies: int
	unique_titles: int
	total_nodes: int
	average_terminal_depth: float
	memory_estimate: str
	most_common_prefixes: List[PrefixOut]
	cache_size: int
	data_structure: str = "Trie (Prefix Tree)"
	search_time_complexity: str = "O(m + k log k) where m = prefix length, k = matching titles"
	insert_time_complexity: str = "O(m) where m = title length"
	autocomplete_time_complexity: str = "O(m + n log n) where n = completions under the prefix"


# Account payloads; blank fields are reported by the account service as 400s
class RegisterIn(BaseModel):
	name: str = ""
	email: str = ""
	password: str = ""


class LoginIn(BaseModel):
	email: str = ""
	password: str = ""


class FavoriteIn(BaseModel):
	movie_id: int = Field(validation_alias=AliasChoices("movie_id", "movieId"))


class AccountOut(BaseModel):
	id: int
	name: str
	email: str
	created_at: str


class AuthResponse(BaseModel):
	success: bool = True
	message: str
	user: AccountOut
	session: str  # also set as the session cookie


class ProfileResponse(BaseModel):
	success: bool = True
	user: AccountOut


class FavoritesResponse(BaseModel):
	success: bool = True
	favorites: List[MovieOut]
	count: int


class FavoriteToggleResponse(BaseModel):
	success: bool = True
	message: str
	favorited: bool  # state after the toggle


SESSION_COOKIE = "session"


def paginate(items: List[Movie], page: int, limit: int) -> Dict[str, Any]:
	"""Slice an already ranked list into one page."""
	start = (page - 1) * limit  # first index on the page
	return {
		"page": page,
		"total_pages": math.ceil(len(items) / limit) if items else 0,
		"total_results": len(items),
		"results": [MovieOut.from_movie(m) for m in items[start:start + limit]],
	}


def _error_response(message: str, status_code: int) -> JSONResponse:
	"""Error body shared by every handler."""
	return JSONResponse(
		status_code=status_code,
		content={
			"error": True,
			"message": message,
			"status": status_code,
			"timestamp": datetime.now().isoformat(timespec='seconds'),
		},
	)


def build_catalog(settings: Settings, tmdb: TMDbClient) -> List[Movie]:
	"""Catalog file (or seed movies), plus TMDb's popular movies when a key is set."""
	movies = DataLoader().load_catalog(settings.data_path)  # read dataset
	if tmdb.enabled:
		try:
			movies.extend(tmdb.popular_movies())  # enrichment is best effort
		except TMDbError as e:
			logger.warning(f"[API] Skipping TMDb enrichment: {e}")
	return movies


def create_app(settings: Optional[Settings] = None,
			   movies: Optional[List[Movie]] = None,
			   tmdb_client: Optional[TMDbClient] = None) -> FastAPI:
	"""
	Build the FastAPI application.
	`movies` replaces the catalog source (tests); `tmdb_client` replaces the
	TMDb client built from settings.
	"""
	settings = settings or get_settings()  # explicit settings win
	tmdb = tmdb_client or TMDbClient(settings.tmdb_api_key, settings.tmdb_base_url, settings.tmdb_timeout)
	database = Database(settings.database_url)  # users and favorites

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		"""Load the catalog and build the title index once."""
		logger.remove()  # replace default sink with the configured level
		logger.add(sys.stderr, level=settings.log_level.upper())

		start = time.time()  # start timer for startup latency
		logger.info("[API] Startup: loading movies and building title index...")
		catalog = movies if movies is not None else build_catalog(settings, tmdb)

		index = TitleIndex(exact_weights=settings.exact_weights)  # empty index
		index.insert_all(catalog)  # bulk insert, single writer
		app.state.index = index
		app.state.search_engine = TitleSearchEngine(index)
		app.state.autocompleter = Autocompleter(index)
		app.state.tmdb = tmdb

		database.create_all()  # account tables
		app.state.accounts = AccountService(database)
		app.state.sessions = SessionStore(max_age=settings.session_max_age)

		app.state.startup_seconds = time.time() - start
		logger.info(f"[API] Startup complete in {app.state.startup_seconds:.2f}s with {index.size()} indexed titles.")
		yield
		database.dispose()

	# Instantiate the FastAPI application with metadata
	app = FastAPI(title="Movie Explorer API", version="1.0.0", lifespan=lifespan)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=True,  # session cookie
		allow_methods=["GET", "POST", "OPTIONS"],
		allow_headers=["Content-Type"],
	)

	@app.exception_handler(InvalidArgument)
	async def invalid_argument_handler(request: Request, exc: InvalidArgument):
		return _error_response(str(exc), 400)

	@app.exception_handler(IndexCorrupted)
	async def index_corrupted_handler(request: Request, exc: IndexCorrupted):
		logger.error(f"[API] {request.url.path} failed: {exc}")
		return _error_response("Title index is corrupted", 500)

	@app.exception_handler(TMDbError)
	async def tmdb_error_handler(request: Request, exc: TMDbError):
		logger.warning(f"[API] {request.url.path} upstream failure: {exc}")
		return _error_response(str(exc), 502)

	@app.exception_handler(AuthenticationFailed)
	async def authentication_failed_handler(request: Request, exc: AuthenticationFailed):
		return _error_response(str(exc), 401)

	@app.exception_handler(Conflict)
	async def conflict_handler(request: Request, exc: Conflict):
		return _error_response(str(exc), 409)

	@app.exception_handler(StarletteHTTPException)
	async def http_error_handler(request: Request, exc: StarletteHTTPException):
		return _error_response(str(exc.detail), exc.status_code)

	@app.get("/api/hello")
	async def hello(request: Request):
		return {
			"message": "Movie Explorer API v1.0",
			"status": "running",
			"timestamp": datetime.now().isoformat(timespec='seconds'),
			"index_movies": request.app.state.index.size(),
		}

	# Simple health endpoint for readiness checks
	@app.get("/api/health")
	async def health(request: Request):
		"""Return minimal health info for liveness/readiness probes."""
		state = request.app.state
		return {
			"status": "healthy",  # constant indicator
			"service": "Movie Explorer Backend",
			"movies_in_index": state.index.size(),  # counted title entries
			"total_movies_cached": len(state.index.all_movies()),  # distinct movie records
			"startup_seconds": round(state.startup_seconds, 2),  # startup latency
		}

	@app.get("/api/movies", response_model=MoviesResponse)
	async def list_movies(request: Request):
		movies = request.app.state.index.all_movies()
		return {"count": len(movies), "movies": [MovieOut.from_movie(m) for m in movies]}

	# Registered before /api/movies/{movie_id} so "popular" is not parsed as an id
	@app.get("/api/movies/popular", response_model=MoviePage)
	async def popular_movies(request: Request, page: int = Query(1, ge=1), limit: int = Query(10, ge=1)):
		ranked = request.app.state.search_engine.popular_movies(None)
		return paginate(ranked, page, limit)

	@app.get("/api/movies/{movie_id}", response_model=MovieOut)
	async def movie_details(request: Request, movie_id: int):
		movie = request.app.state.index.lookup(movie_id)
		if movie is None:
			raise HTTPException(status_code=404, detail="Movie not found")
		return MovieOut.from_movie(movie)

	# Main search endpoint: rank once, then paginate the ranked list
	@app.get("/api/search", response_model=SearchResponse)
	async def search(
		request: Request,
		q: str = Query("", description="Title prefix"),
		page: int = Query(1, ge=1),
		limit: Optional[int] = Query(None, ge=1),
	):
		"""Execute a ranked prefix search and return one page of results."""
		start = time.time()  # start timer
		results = request.app.state.search_engine.search(q, settings.search_limit)  # run search
		body = paginate(results, page, limit or settings.page_size)
		body["query"] = q.strip()
		elapsed_ms = (time.time() - start) * 1000  # compute ms
		logger.info(f"[API] /api/search q='{q}' served {len(body['results'])} of {len(results)} results in {elapsed_ms:.2f} ms")
		return body

	@app.get("/api/suggestions", response_model=SuggestionsResponse)
	async def suggestions(
		request: Request,
		q: str = Query("", description="Title prefix"),
		limit: Optional[int] = Query(None, ge=0),
	):
		words = request.app.state.autocompleter.autocomplete(q, settings.suggestion_limit if limit is None else limit)
		logger.debug(f"[API] /api/suggestions q='{q}' -> {len(words)} suggestions")
		return {"prefix": normalize_title(q), "suggestions": words, "count": len(words)}

	@app.get("/api/trie/stats", response_model=StatsResponse)
	async def trie_stats(request: Request, top: int = Query(10, ge=0)):
		index = request.app.state.index
		body = index.stats().to_dict()
		body["most_common_prefixes"] = [
			{"prefix": prefix, "weight": weight} for prefix, weight in index.most_common_prefixes(top)
		]
		body["cache_size"] = len(index.all_movies())
		return body

	@app.get("/api/tmdb/search")
	def tmdb_search(request: Request, query: str = "", page: int = Query(1, ge=1)):
		"""Pass a search straight through to TMDb."""
		client = request.app.state.tmdb
		if not client.enabled:
			raise HTTPException(status_code=501, detail="TMDb API key not configured; set MOVIE_EXPLORER_TMDB_API_KEY")
		if not query.strip():
			raise HTTPException(status_code=400, detail="Query parameter 'query' is required")
		return client.search(query.strip(), page)

	# Accounts: database-backed routes are sync so they run in the threadpool
	def start_session(response: Response, account: Account, message: str) -> Dict[str, Any]:
		token = app.state.sessions.create(account)
		response.set_cookie(
			SESSION_COOKIE,
			token,
			max_age=settings.session_max_age,
			path="/",
			httponly=True,
			samesite="lax",
			secure=settings.session_cookie_secure,
		)
		return {"message": message, "user": account.to_dict(), "session": token}

	def current_account(request: Request, session: Optional[str] = Cookie(None)) -> Account:
		"""Signed-in account for the request's session cookie."""
		account = request.app.state.sessions.get(session)
		if account is None:
			raise AuthenticationFailed("Not authenticated")
		return account

	@app.post("/api/register", status_code=201, response_model=AuthResponse)
	def register(body: RegisterIn, request: Request, response: Response):
		account = request.app.state.accounts.register(body.name, body.email, body.password)
		return start_session(response, account, "Registration successful")

	@app.post("/api/login", response_model=AuthResponse)
	def login(body: LoginIn, request: Request, response: Response):
		account = request.app.state.accounts.authenticate(body.email, body.password)
		logger.info(f"[API] User {account.id} logged in")
		return start_session(response, account, "Login successful")

	@app.post("/api/logout")
	def logout(request: Request, response: Response, session: Optional[str] = Cookie(None)):
		request.app.state.sessions.revoke(session)
		response.delete_cookie(SESSION_COOKIE, path="/")
		return {"success": True, "message": "Logged out"}

	@app.get("/api/profile", response_model=ProfileResponse)
	def profile(request: Request, account: Account = Depends(current_account)):
		stored = request.app.state.accounts.get(account.id)  # re-read; the row may be gone
		if stored is None:
			raise HTTPException(status_code=404, detail="User not found")
		return {"user": stored.to_dict()}

	@app.get("/api/favorites", response_model=FavoritesResponse)
	def list_favorites(request: Request, account: Account = Depends(current_account)):
		index = request.app.state.index
		favorites = []
		for movie_id in request.app.state.accounts.favorite_ids(account.id):
			movie = index.lookup(movie_id)
			if movie is not None:  # dropped from the catalog since it was saved
				favorites.append(MovieOut.from_movie(movie))
		return {"favorites": favorites, "count": len(favorites)}

	@app.post("/api/favorites", response_model=FavoriteToggleResponse)
	def toggle_favorite(body: FavoriteIn, request: Request, account: Account = Depends(current_account)):
		if request.app.state.index.lookup(body.movie_id) is None:
			raise HTTPException(status_code=404, detail="Movie not found")
		added = request.app.state.accounts.toggle_favorite(account.id, body.movie_id)
		message = "Added to favorites" if added else "Removed from favorites"
		return {"message": message, "favorited": added}

	return app


app = create_app()
