"""
Title index module.
An in-memory prefix tree over normalized movie titles plus an id -> Movie map.
Nodes hold movie ids only; the Movie records live in the id map.

The index is built once at startup and then read by the search and
autocomplete engines. Mutations are not synchronized: callers that insert or
remove at runtime must serialize those calls themselves.
"""

# Typing helpers for the public API
from typing import Dict, Iterable, List, Optional, Tuple  # type hints

# Project modules
from .exceptions import IndexCorrupted, InvalidArgument  # error kinds
from .models import IndexStats, Movie, Suggestion  # value types

# Console logging
from loguru import logger  # console logger


def normalize_title(title: str) -> str:
	"""Lowercase and trim; the form stored along the tree edges."""
	return title.strip().lower()


def check_limit(limit: Optional[int]) -> None:
	"""Validate a result limit: None (unbounded) or a non-negative int."""
	if limit is None:
		return
	if isinstance(limit, bool) or not isinstance(limit, int):
		raise InvalidArgument(f"limit must be an int or None, got {type(limit).__name__}")
	if limit < 0:
		raise InvalidArgument(f"limit must be >= 0, got {limit}")


class _TitleNode:
	"""One position in the tree. Internal to TitleIndex."""

	__slots__ = ("children", "terminal", "ids", "weight")

	def __init__(self) -> None:
		self.children: Dict[str, "_TitleNode"] = {}  # char -> child
		self.terminal = False  # some title ends exactly here
		self.ids: List[int] = []  # movie ids ending here, insertion ordered
		self.weight = 0  # insertion weight of every title passing through

	def sorted_children(self) -> List[Tuple[str, "_TitleNode"]]:
		return sorted(self.children.items())

	def children_by_weight(self) -> List[Tuple[str, "_TitleNode"]]:
		# Heavier branches first, ties by character
		return sorted(self.children.items(), key=lambda item: (-item[1].weight, item[0]))


class TitleIndex:
	"""
	Prefix tree over movie titles with a movie lookup table.
	- insert/insert_all/remove mutate the tree
	- lookup/starts_with/size/all_movies read the id map or the tree
	- collect_ids/completions feed the search and autocomplete engines
	- stats/most_common_prefixes/verify/dump are read-only introspection

	`exact_weights=False` keeps node weights as a monotonic traffic counter:
	removing a title leaves the weight of surviving ancestors untouched.
	With `exact_weights=True` a removal subtracts the weight that title added.
	"""

	def __init__(self, exact_weights: bool = False):
		self.exact_weights = exact_weights
		self._reset()
		self._corruption: Optional[IndexCorrupted] = None  # set once an invariant breaks

	def _reset(self) -> None:
		self._root = _TitleNode()
		self._by_id: Dict[int, Movie] = {}
		self._count = 0  # (terminal, id) entries
		self._refs: Dict[int, int] = {}  # id -> number of terminals holding it
		self._sequence: Dict[int, int] = {}  # id -> first-insert order
		self._next_sequence = 0
		self._inserted_weight: Dict[Tuple[str, int], int] = {}  # (key, id) -> weight added

	# validation ----------------------------------------------------------

	def _ensure_usable(self) -> None:
		if self._corruption is not None:
			raise IndexCorrupted(self._corruption.detail, self._corruption.path)

	def _fail(self, detail: str, path: str) -> None:
		error = IndexCorrupted(detail, path)
		self._corruption = error
		logger.error(f"[Index] {error}")
		raise error

	@staticmethod
	def _title_key(title) -> str:
		if not isinstance(title, str):
			raise InvalidArgument(f"title must be a string, got {type(title).__name__}")
		key = normalize_title(title)
		if not key:
			raise InvalidArgument("title is empty after normalization")
		return key

	@staticmethod
	def _check_movie(movie) -> None:
		if not isinstance(movie, Movie):
			raise InvalidArgument(f"expected a Movie, got {type(movie).__name__}")
		if isinstance(movie.id, bool) or not isinstance(movie.id, int) or movie.id <= 0:
			raise InvalidArgument(f"movie id must be a positive int, got {movie.id!r}")

	# mutation ------------------------------------------------------------

	def insert(self, title: str, movie: Movie, weight: int = 1) -> None:
		"""
		Insert `movie` under `title`.
		Re-inserting an id overwrites its Movie record; the (title, id) entry
		is only counted once, but every call adds `weight` along the path.
		"""
		self._ensure_usable()
		key = self._title_key(title)
		self._check_movie(movie)
		if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
			raise InvalidArgument(f"weight must be an int >= 1, got {weight!r}")

		self._by_id[movie.id] = movie  # insert or update the record
		if movie.id not in self._sequence:
			self._sequence[movie.id] = self._next_sequence
			self._next_sequence += 1

		node = self._root
		for ch in key:
			child = node.children.get(ch)
			if child is None:
				child = _TitleNode()
				node.children[ch] = child
			child.weight += weight
			node = child

		entry = (key, movie.id)
		self._inserted_weight[entry] = self._inserted_weight.get(entry, 0) + weight
		if movie.id not in node.ids:
			node.ids.append(movie.id)
			self._refs[movie.id] = self._refs.get(movie.id, 0) + 1
			self._count += 1
		node.terminal = True

	def insert_all(self, movies: Iterable[Movie]) -> int:
		"""
		Insert every movie under its own title with weight 1.
		Records with a non-positive id, a blank title, or an id already indexed
		under a different title are skipped with a warning. Returns the number
		of inserted records.
		"""
		self._ensure_usable()
		inserted = 0
		skipped = 0
		for movie in movies:
			movie_id = getattr(movie, 'id', None)
			existing = self._by_id.get(movie_id) if isinstance(movie_id, int) else None
			title = getattr(movie, 'title', None)
			if existing is not None and isinstance(title, str) and normalize_title(existing.title) != normalize_title(title):
				skipped += 1
				logger.warning(f"[Index] Skipping catalog record {movie_id!r} '{title}': id already indexed as '{existing.title}'")
				continue
			try:
				self.insert(title, movie)
			except InvalidArgument as e:
				skipped += 1
				logger.warning(f"[Index] Skipping catalog record {movie_id!r}: {e}")
				continue
			inserted += 1
		logger.info(f"[Index] Inserted {inserted} movies ({skipped} skipped); {self._count} entries indexed")
		return inserted

	def remove(self, title: str, movie_id: int) -> bool:
		"""
		Remove the (title, id) entry. Returns False when it is not present.
		Branches left without titles are pruned up to the first ancestor that
		is terminal or still has other children.
		"""
		self._ensure_usable()
		if not isinstance(title, str):
			raise InvalidArgument(f"title must be a string, got {type(title).__name__}")
		key = normalize_title(title)
		if not key:
			return False

		path: List[Tuple[str, _TitleNode]] = [('', self._root)]  # (edge, node) from the root down
		node = self._root
		for ch in key:
			node = node.children.get(ch)
			if node is None:
				return False
			path.append((ch, node))

		if movie_id not in node.ids:
			return False

		node.ids.remove(movie_id)
		if not node.ids:
			node.terminal = False
		self._count -= 1
		self._release(movie_id)

		released = self._inserted_weight.pop((key, movie_id), 0)
		if self.exact_weights:
			for _, visited in path[1:]:
				visited.weight = max(0, visited.weight - released)

		# Unwind, dropping links to subtrees that no longer hold any title
		for depth in range(len(path) - 1, 0, -1):
			edge, current = path[depth]
			if current.terminal or current.children:
				break
			del path[depth - 1][1].children[edge]

		logger.debug(f"[Index] Removed '{key}' -> {movie_id}; {self._count} entries left")
		return True

	def _release(self, movie_id: int) -> None:
		remaining = self._refs.get(movie_id, 0) - 1
		if remaining > 0:
			self._refs[movie_id] = remaining
			return
		# Last terminal holding this id is gone
		self._refs.pop(movie_id, None)
		self._by_id.pop(movie_id, None)
		self._sequence.pop(movie_id, None)

	def clear(self) -> None:
		"""Drop every title and movie."""
		self._ensure_usable()
		self._reset()
		logger.info("[Index] Cleared")

	# lookup --------------------------------------------------------------

	def lookup(self, movie_id: int) -> Optional[Movie]:
		self._ensure_usable()
		return self._by_id.get(movie_id)

	def starts_with(self, prefix: str) -> bool:
		"""True when the normalized prefix can be followed from the root."""
		self._ensure_usable()
		if not isinstance(prefix, str):
			raise InvalidArgument(f"prefix must be a string, got {type(prefix).__name__}")
		return self._descend(normalize_title(prefix)) is not None

	def size(self) -> int:
		self._ensure_usable()
		return self._count

	def __len__(self) -> int:
		return self.size()

	def all_movies(self) -> List[Movie]:
		self._ensure_usable()
		return list(self._by_id.values())

	def insertion_order(self, movie_id: int) -> int:
		"""Position of the id's first insert; used as the last ranking tiebreak."""
		return self._sequence.get(movie_id, self._next_sequence)

	def _descend(self, key: str) -> Optional[_TitleNode]:
		node = self._root
		for ch in key:
			node = node.children.get(ch)
			if node is None:
				return None
		return node

	# traversal for the query engines ---------------------------------------

	def collect_ids(self, prefix: str) -> Optional[List[int]]:
		"""
		Ids of every terminal in the subtree under `prefix`, deduplicated.
		Heavier branches are visited first. None when the prefix path is missing.
		"""
		self._ensure_usable()
		key = normalize_title(prefix)
		start = self._descend(key)
		if start is None:
			return None

		seen = set()
		ids: List[int] = []
		stack: List[Tuple[str, _TitleNode]] = [(key, start)]
		while stack:
			path, node = stack.pop()
			if node.terminal != bool(node.ids):
				self._fail(f"terminal={node.terminal} but ids={node.ids}", path)
			for movie_id in node.ids:
				if movie_id not in seen:
					seen.add(movie_id)
					ids.append(movie_id)
			# Reverse so the heaviest child is popped first
			for ch, child in reversed(node.children_by_weight()):
				stack.append((path + ch, child))
		return ids

	def completions(self, prefix: str) -> Optional[List[Suggestion]]:
		"""
		One Suggestion per terminal with weight > 0 under `prefix`, in
		depth-first, character order. None when the prefix path is missing.
		"""
		self._ensure_usable()
		key = normalize_title(prefix)
		start = self._descend(key)
		if start is None:
			return None

		suggestions: List[Suggestion] = []
		stack: List[Tuple[str, _TitleNode]] = [(key, start)]
		while stack:
			path, node = stack.pop()
			if node.terminal != bool(node.ids):
				self._fail(f"terminal={node.terminal} but ids={node.ids}", path)
			if node.terminal and node.weight > 0:
				suggestions.append(Suggestion(word=path, score=node.weight))
			for ch, child in reversed(node.sorted_children()):
				stack.append((path + ch, child))
		return suggestions

	# introspection --------------------------------------------------------

	def _walk(self) -> Iterable[Tuple[str, _TitleNode]]:
		"""Yield (path, node) for every node, root first, in character order."""
		stack: List[Tuple[str, _TitleNode]] = [('', self._root)]
		while stack:
			path, node = stack.pop()
			yield path, node
			for ch, child in reversed(node.sorted_children()):
				stack.append((path + ch, child))

	def stats(self) -> IndexStats:
		self._ensure_usable()
		total_nodes = 0
		depths: List[int] = []
		for path, node in self._walk():
			total_nodes += 1
			if node.terminal:
				depths.append(len(path))
		average = sum(depths) / len(depths) if depths else 0.0
		return IndexStats(
			total_movies=self._count,
			unique_titles=len(depths),
			total_nodes=total_nodes,
			average_terminal_depth=average,
			memory_estimate=self._memory_estimate(),
		)

	def _memory_estimate(self) -> str:
		estimated = self._count * 1000  # roughly 1KB per indexed movie
		if estimated < 1024:
			return f"{estimated} bytes"
		if estimated < 1024 * 1024:
			return f"{estimated / 1024:.1f} KB"
		return f"{estimated / (1024 * 1024):.1f} MB"

	def most_common_prefixes(self, n: int = 10) -> List[Tuple[str, int]]:
		"""Top `n` prefixes longer than one character with weight > 5."""
		self._ensure_usable()
		check_limit(n)
		prefixes = [
			(path, node.weight)
			for path, node in self._walk()
			if len(path) > 1 and node.weight > 5
		]
		prefixes.sort(key=lambda item: (-item[1], item[0]))
		return prefixes[:n]

	def verify(self) -> None:
		"""
		Check every structural invariant; raise IndexCorrupted on the first
		violation. A failed check poisons the index.
		"""
		self._ensure_usable()
		counted = 0
		referenced = set()
		for path, node in self._walk():
			if node.terminal != bool(node.ids):
				self._fail(f"terminal={node.terminal} but ids={node.ids}", path)
			if len(set(node.ids)) != len(node.ids):
				self._fail(f"duplicate ids {node.ids}", path)
			for movie_id in node.ids:
				if movie_id not in self._by_id:
					self._fail(f"id {movie_id} has no movie record", path)
			counted += len(node.ids)
			referenced.update(node.ids)
			if node is self._root:
				continue
			if not node.terminal and not node.children:
				self._fail("non-terminal node without children", path)
			child_weight = sum(child.weight for child in node.children.values())
			if node.weight < child_weight:
				self._fail(f"weight {node.weight} below children total {child_weight}", path)
		if counted != self._count:
			self._fail(f"count is {self._count} but terminals hold {counted} ids", '')
		orphans = set(self._by_id) - referenced
		if orphans:
			self._fail(f"movie records not reachable from any title: {sorted(orphans)}", '')

	def dump(self) -> str:
		"""Indented text rendering of the tree, for debugging."""
		self._ensure_usable()
		lines = []
		for path, node in self._walk():
			marker = f"★ {len(node.ids)} movies " if node.terminal else ''
			lines.append(f"{'  ' * len(path)}[{path}] {marker}(weight: {node.weight})")
		return '\n'.join(lines)
