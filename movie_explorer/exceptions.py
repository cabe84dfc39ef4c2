"""
Exception types raised by the Movie Explorer core and its collaborators.

Missing data (an unknown id, a title that was never inserted) is not an error:
lookups return None and removals return False.
"""

from typing import Optional


class MovieExplorerError(Exception):
	"""Base class for all errors raised by this package."""


class InvalidArgument(MovieExplorerError, ValueError):
	"""A caller passed a value the operation cannot accept; nothing was mutated."""


class IndexCorrupted(MovieExplorerError, RuntimeError):
	"""
	The title index observed a broken invariant.
	`path` is the normalized title prefix of the offending node ('' for the root).
	"""

	def __init__(self, detail: str, path: Optional[str] = None):
		self.detail = detail
		self.path = path
		location = f" at node '{path}'" if path is not None else ''
		super().__init__(f"Title index corrupted{location}: {detail}")


class TMDbError(MovieExplorerError):
	"""The TMDb API could not be reached or answered with an error."""

	def __init__(self, message: str, status_code: Optional[int] = None):
		self.status_code = status_code
		super().__init__(message)


class AuthenticationFailed(MovieExplorerError):
	"""Missing or expired session, or credentials that do not match."""


class Conflict(MovieExplorerError):
	"""The request collides with existing state, such as a registered email."""
