"""
Streamlit UI for Movie Explorer.
Calls the local FastAPI server at http://localhost:8080 for search and
suggestions, or runs locally by building the title index in-process like the
API does.

Run API (optional):   uvicorn api:app --port 8080 --reload
Run UI:                streamlit run streamlit_app.py
"""

# HTTP client to call the API when running in API mode
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Optional, Tuple  # indicates values can be None

# Local engine imports for fallback/local mode (when API isn't used)
from movie_explorer.autocomplete import Autocompleter  # suggestions
from movie_explorer.data_loader import DataLoader  # load movies from file
from movie_explorer.search_engine import TitleSearchEngine  # ranked prefix search
from movie_explorer.settings import get_settings  # data path
from movie_explorer.title_index import TitleIndex  # prefix tree

# Default URL where the FastAPI server is expected to run locally
DEFAULT_API_URL = "http://localhost:8080"  # default API base URL

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Movie Explorer", layout="wide")  # wide layout

# Main page title
st.title("🎬 Movie Explorer")  # friendly header

# Cache the local engines so the index is only built once per session
@st.cache_resource(show_spinner=True)
def init_local_engines() -> Optional[Tuple[TitleSearchEngine, Autocompleter]]:
	"""Load the catalog and build a local title index."""
	try:
		movies = DataLoader().load_catalog(get_settings().data_path)  # read dataset or seed
		index = TitleIndex()
		index.insert_all(movies)  # bulk insert
		return TitleSearchEngine(index), Autocompleter(index)  # success
	except (OSError, ValueError) as e:
		# Show an error in the UI so users know local mode failed
		st.error(f"Failed to initialize local index: {e}")
		return None  # signal failure

# Sidebar contains configuration controls
with st.sidebar:
	st.header("Settings")  # section label
	page_size = st.slider("Results per page", min_value=5, max_value=50, value=20)  # number of results to show
	api_url = st.text_input("API URL", DEFAULT_API_URL)  # where the API lives
	use_local = st.toggle("Use local index", value=False, help="If enabled or API is unreachable, the app will run fully locally.")

# If not forcing local, check quickly whether the API is reachable
api_available = False  # default assumption
if not use_local:
	try:
		h = requests.get(f"{api_url}/api/health", timeout=3)  # ping API health endpoint
		api_available = h.ok  # True if server responded 200 OK
	except requests.RequestException:
		st.sidebar.info("API not reachable; will use local index.")  # inform user

# Initialize local engines only when needed (user toggle or API not available)
local = None  # placeholder
if use_local or not api_available:
	local = init_local_engines()
	if local is not None:
		st.sidebar.success("Local index ready.")
	else:
		st.sidebar.error("Local index failed to initialize.")

query = st.text_input("Movie title", placeholder="e.g., the dark")
page = st.number_input("Page", min_value=1, value=1, step=1)

try:
	# Suggestions refresh on every keystroke-commit
	if local is not None:
		suggestions = local[1].autocomplete(query)
	else:
		resp = requests.get(f"{api_url}/api/suggestions", params={"q": query}, timeout=10)
		resp.raise_for_status()
		suggestions = resp.json().get("suggestions", [])
	if suggestions:
		st.caption("Suggestions: " + " · ".join(suggestions))

	if local is not None:
		ranked = local[0].search(query)
		start = (page - 1) * page_size
		payload = {
			"total_results": len(ranked),
			"results": [m.to_dict() for m in ranked[start:start + page_size]],
		}
	else:
		resp = requests.get(f"{api_url}/api/search", params={"q": query, "page": page, "limit": page_size}, timeout=10)
		resp.raise_for_status()  # raise error if server responded with an error code
		payload = resp.json()  # parse JSON returned by API

	st.success(f"{payload.get('total_results', 0)} matching movies")
	st.divider()  # visual separator

	# Render each result as an image + details row
	for i, movie in enumerate(payload.get("results", []), start=(page - 1) * page_size + 1):
		c1, c2 = st.columns([1, 4])  # small image column + large text column
		with c1:
			if movie.get("poster_url"):
				st.image(movie["poster_url"], width='stretch')  # poster
		with c2:
			st.subheader(f"{i}. {movie['title']} ({movie['year']})")  # title + year
			st.caption(f"Rating: {movie['rating']:.1f}")
			st.write(f"Genres: {', '.join(movie['genres'])}")  # genres
			if movie.get("overview"):
				st.write(movie["overview"])  # synopsis
		st.divider()  # separator

except requests.RequestException as e:  # network/API errors
	st.error(f"API request failed: {e}")  # show human-friendly message

# Show a footer indicator of current mode
st.sidebar.markdown("---")  # separator
if local is not None:
	st.sidebar.caption("Mode: Local index")  # mode label
else:
	st.sidebar.caption("Mode: API client (ensure uvicorn api:app --port 8080 is running)")  # mode label
