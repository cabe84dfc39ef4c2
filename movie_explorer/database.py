"""
Relational store for user accounts and favorites.
Movies are not stored here: favorites keep a movie id that the API resolves
through the title index, so a favorite whose movie left the catalog simply
stops being listed.

Usage:
	db = Database("sqlite:///movie_explorer.db")
	db.create_all()
	with db.session() as s:
		...
"""

from contextlib import contextmanager  # scoped sessions
from datetime import datetime  # row timestamps
from typing import Iterator, List

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from loguru import logger


class Base(DeclarativeBase):
	"""Declarative base for the account tables."""


class User(Base):
	__tablename__ = "users"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	name: Mapped[str] = mapped_column(String(100))
	email: Mapped[str] = mapped_column(String(150), unique=True, index=True)
	password_hash: Mapped[str] = mapped_column(String(255))
	created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

	favorites: Mapped[List["Favorite"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class Favorite(Base):
	__tablename__ = "favorites"
	__table_args__ = (UniqueConstraint("user_id", "movie_id"),)

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
	movie_id: Mapped[int] = mapped_column(Integer)  # title index id
	added_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

	user: Mapped[User] = relationship(back_populates="favorites")


def make_engine(url: str) -> Engine:
	"""Engine for `url`; in-memory SQLite shares one connection across threads."""
	if url.startswith("sqlite"):
		kwargs = {"connect_args": {"check_same_thread": False}}
		if url in ("sqlite://", "sqlite:///:memory:"):
			kwargs["poolclass"] = StaticPool
		return create_engine(url, **kwargs)
	return create_engine(url, pool_pre_ping=True)


class Database:
	"""Engine plus session factory for one database URL."""

	def __init__(self, url: str):
		self.url = url
		self.engine = make_engine(url)
		self._session_factory = sessionmaker(
			bind=self.engine,
			autocommit=False,
			autoflush=False,
			expire_on_commit=False,
		)

	def create_all(self) -> None:
		Base.metadata.create_all(self.engine)
		logger.info(f"[DB] Tables ready at {self.engine.url.render_as_string(hide_password=True)}")

	@contextmanager
	def session(self) -> Iterator[Session]:
		"""Session that commits on success and rolls back on error."""
		db = self._session_factory()
		try:
			yield db
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()

	def dispose(self) -> None:
		self.engine.dispose()
