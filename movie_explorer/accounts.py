"""
Accounts module.
User registration and login with salted password hashes, cookie sessions and
per-user favorites. Favorites store title index ids; the API resolves them to
Movie records.
"""

import re  # email format check
import secrets  # session tokens
import time  # session expiry
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from passlib.context import CryptContext  # salted password hashing
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .database import Database, Favorite, User
from .exceptions import AuthenticationFailed, Conflict, InvalidArgument

from loguru import logger

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")
MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
	"""Salted hash of `password`; the salt is embedded in the returned string."""
	return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
	return pwd_context.verify(password, password_hash)


@dataclass
class Account:
	"""A user as seen by the API; never carries the password hash."""
	id: int
	name: str
	email: str
	created_at: datetime

	@classmethod
	def from_user(cls, user: User) -> 'Account':
		return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at)

	def to_dict(self) -> Dict:
		return {
			"id": self.id,
			"name": self.name,
			"email": self.email,
			"created_at": self.created_at.isoformat(timespec='seconds'),
		}


class SessionStore:
	"""
	In-memory session tokens with a fixed lifetime.
	Sessions do not survive a restart; users log in again.
	"""

	def __init__(self, max_age: int = 86400, clock: Callable[[], float] = time.time):
		self.max_age = max_age
		self._clock = clock
		self._sessions: Dict[str, Tuple[Account, float]] = {}  # token -> (account, expires_at)

	def create(self, account: Account) -> str:
		token = secrets.token_hex(16)
		self._sessions[token] = (account, self._clock() + self.max_age)
		return token

	def get(self, token: Optional[str]) -> Optional[Account]:
		"""Account for a live token; expired tokens are dropped."""
		if not token:
			return None
		entry = self._sessions.get(token)
		if entry is None:
			return None
		account, expires_at = entry
		if self._clock() >= expires_at:
			del self._sessions[token]
			return None
		return account

	def revoke(self, token: Optional[str]) -> bool:
		if not token:
			return False
		return self._sessions.pop(token, None) is not None

	def __len__(self) -> int:
		return len(self._sessions)


class AccountService:
	"""Users and favorites over the relational store."""

	def __init__(self, database: Database):
		self.database = database

	def register(self, name: str, email: str, password: str) -> Account:
		name = (name or '').strip()
		email = (email or '').strip().lower()
		if not name or not email or not password:
			raise InvalidArgument("Missing required fields")
		if not EMAIL_PATTERN.match(email):
			raise InvalidArgument("Invalid email format")
		if len(password) < MIN_PASSWORD_LENGTH:
			raise InvalidArgument(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

		try:
			with self.database.session() as db:
				if db.scalar(select(User.id).where(User.email == email)) is not None:
					raise Conflict("Email already registered")
				user = User(name=name, email=email, password_hash=hash_password(password))
				db.add(user)
				db.flush()  # assigns the id
				account = Account.from_user(user)
		except IntegrityError as e:
			raise Conflict("Email already registered") from e
		logger.info(f"[Accounts] Registered user {account.id}")
		return account

	def authenticate(self, email: str, password: str) -> Account:
		"""Account for matching credentials; AuthenticationFailed otherwise."""
		email = (email or '').strip().lower()
		if not email or not password:
			raise InvalidArgument("Missing credentials")
		with self.database.session() as db:
			user = db.scalar(select(User).where(User.email == email))
			if user is None or not verify_password(password, user.password_hash):
				logger.info("[Accounts] Failed login attempt")
				raise AuthenticationFailed("Invalid email or password")
			return Account.from_user(user)

	def get(self, user_id: int) -> Optional[Account]:
		with self.database.session() as db:
			user = db.get(User, user_id)
			return Account.from_user(user) if user is not None else None

	def toggle_favorite(self, user_id: int, movie_id: int) -> bool:
		"""Add the movie to the user's favorites, or remove it when present. True when added."""
		with self.database.session() as db:
			favorite = db.scalar(
				select(Favorite).where(Favorite.user_id == user_id, Favorite.movie_id == movie_id)
			)
			if favorite is not None:
				db.delete(favorite)
				logger.debug(f"[Accounts] User {user_id} unfavorited {movie_id}")
				return False
			db.add(Favorite(user_id=user_id, movie_id=movie_id))
			logger.debug(f"[Accounts] User {user_id} favorited {movie_id}")
			return True

	def favorite_ids(self, user_id: int) -> List[int]:
		"""Favorite movie ids, most recently added first."""
		with self.database.session() as db:
			rows = db.scalars(
				select(Favorite.movie_id)
				.where(Favorite.user_id == user_id)
				.order_by(Favorite.added_at.desc(), Favorite.id.desc())
			)
			return list(rows)
