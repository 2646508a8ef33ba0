"""
Durable store of recently used items, backed by SQLAlchemy.

Each namespace keeps at most ``capacity`` entries ordered by the time they
were last touched. Putting an existing key again updates its payload and
moves it back to the front.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

import pendulum
from pendulum import DateTime
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import DateTime as SqlDateTime
from sqlalchemy import Integer, String, Text, UniqueConstraint, create_engine, delete, func, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from ..domain.exceptions import StorageError
from ..domain.recency import Namespace, RecentEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    """Base class for recents store models."""


class RecentDataModel(Base):
    """One remembered item; ``data`` is the JSON-encoded payload."""

    __tablename__ = "recent_data"
    __table_args__ = (
        UniqueConstraint("namespace", "key", name="uq_recent_data_namespace_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    namespace: Mapped[str] = mapped_column(String(255), index=True)
    key: Mapped[str] = mapped_column(String(255))
    data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Stored as naive UTC
    touched_at: Mapped[datetime] = mapped_column(SqlDateTime)
    # Tie-breaker for entries touched within the same clock tick
    revision: Mapped[int] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<RecentDataModel(namespace={self.namespace!r}, key={self.key!r})>"


def _utc_now() -> DateTime:
    return pendulum.now("UTC")


class RecentStore:
    """
    Size-bounded, per-namespace recents store.

    Writes to a namespace are serialized with a per-namespace lock so the
    check-then-evict step keeps ``count <= capacity`` under concurrent puts.
    """

    def __init__(self, engine: Engine, clock: Callable[[], DateTime] | None = None):
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine; the table must already exist
            clock: Optional source of "now", defaults to UTC wall clock
        """
        self.engine = engine
        self._clock = clock or _utc_now
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._adapters: Dict[Any, TypeAdapter] = {}

    def __enter__(self) -> "RecentStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    def put(self, namespace: Namespace[T], key: str, payload: T) -> None:
        """
        Insert or re-touch an entry, evicting the oldest beyond capacity.

        Raises:
            StorageError: If the entry could not be written
        """
        encoded = self._adapter(namespace).dump_json(payload).decode("utf-8")
        touched_at = self._now()

        with self._lock_for(namespace):
            try:
                with self._session_factory.begin() as session:
                    revision = self._next_revision(session, namespace)
                    existing = session.scalars(
                        select(RecentDataModel).where(
                            RecentDataModel.namespace == namespace.name,
                            RecentDataModel.key == key,
                        )
                    ).one_or_none()

                    if existing is not None:
                        existing.data = encoded
                        existing.touched_at = touched_at
                        existing.revision = revision
                        return

                    session.add(
                        RecentDataModel(
                            namespace=namespace.name,
                            key=key,
                            data=encoded,
                            touched_at=touched_at,
                            revision=revision,
                        )
                    )
                    session.flush()
                    self._evict(session, namespace)
            except SQLAlchemyError as exc:
                raise StorageError(
                    f"Could not save '{key}' to recents '{namespace.name}': {exc}"
                ) from exc

    def list(self, namespace: Namespace[T], limit: int | None = None) -> List[T]:
        """
        Return payloads newest first, truncated to ``limit``.

        Entries that no longer decode as the namespace's payload type are
        skipped and do not count toward the limit.

        Raises:
            StorageError: If the store cannot be read
        """
        limit = namespace.capacity if limit is None else limit
        if limit <= 0:
            return []

        rows = self._ordered_rows(namespace)
        adapter = self._adapter(namespace)

        items: List[T] = []
        for row in rows:
            if row.data is None:
                continue
            try:
                items.append(adapter.validate_json(row.data))
            except ValidationError as exc:
                logger.debug(
                    "Skipping undecodable recent %s/%s: %s",
                    namespace.name, row.key, exc.error_count(),
                )
                continue

            if len(items) >= limit:
                break

        return items

    def entries(self, namespace: Namespace) -> List[RecentEntry]:
        """Return the raw stored entries newest first, without decoding."""
        return [
            RecentEntry(
                namespace=row.namespace,
                key=row.key,
                payload=row.data,
                touched_at=pendulum.instance(row.touched_at, tz="UTC"),
            )
            for row in self._ordered_rows(namespace)
        ]

    def clear(self, namespace: Namespace) -> None:
        """
        Remove every entry of a namespace. Clearing an empty namespace is a no-op.

        Raises:
            StorageError: If the store cannot be written
        """
        with self._lock_for(namespace):
            try:
                with self._session_factory.begin() as session:
                    result = session.execute(
                        delete(RecentDataModel).where(RecentDataModel.namespace == namespace.name)
                    )
            except SQLAlchemyError as exc:
                raise StorageError(f"Could not clear recents '{namespace.name}': {exc}") from exc

        logger.debug("Cleared %s entries from %s", result.rowcount, namespace.name)

    def _ordered_rows(self, namespace: Namespace) -> List[RecentDataModel]:
        try:
            with self._session_factory() as session:
                return list(
                    session.scalars(
                        select(RecentDataModel)
                        .where(RecentDataModel.namespace == namespace.name)
                        .order_by(RecentDataModel.touched_at.desc(), RecentDataModel.revision.desc())
                    )
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load recents '{namespace.name}': {exc}") from exc

    def _evict(self, session: Session, namespace: Namespace) -> None:
        count = session.scalar(
            select(func.count()).select_from(RecentDataModel).where(
                RecentDataModel.namespace == namespace.name
            )
        )
        if count <= namespace.capacity:
            return

        stale_ids = session.scalars(
            select(RecentDataModel.id)
            .where(RecentDataModel.namespace == namespace.name)
            .order_by(RecentDataModel.touched_at.desc(), RecentDataModel.revision.desc())
            .offset(namespace.capacity)
        ).all()
        session.execute(delete(RecentDataModel).where(RecentDataModel.id.in_(stale_ids)))
        logger.debug("Evicted %d entries from %s", len(stale_ids), namespace.name)

    @staticmethod
    def _next_revision(session: Session, namespace: Namespace) -> int:
        current = session.scalar(
            select(func.max(RecentDataModel.revision)).where(
                RecentDataModel.namespace == namespace.name
            )
        )
        return (current or 0) + 1

    def _now(self) -> datetime:
        return self._clock().in_timezone("UTC").naive()

    def _lock_for(self, namespace: Namespace) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(namespace.name, threading.Lock())

    def _adapter(self, namespace: Namespace) -> TypeAdapter:
        # Keyed by payload type: one name may be read with different shapes
        adapter = self._adapters.get(namespace.payload_type)
        if adapter is None:
            adapter = TypeAdapter(namespace.payload_type)
            self._adapters[namespace.payload_type] = adapter
        return adapter


def create_recent_store(
    database_url: str,
    clock: Callable[[], DateTime] | None = None,
) -> RecentStore:
    """
    Build a store for ``database_url`` and create its table if missing.

    Raises:
        StorageError: If the database cannot be opened
    """
    url = make_url(database_url)

    try:
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            database_path = Path(url.database).expanduser()
            database_path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(database_path))

        engine = create_engine(url)
        Base.metadata.create_all(engine)
    except (OSError, SQLAlchemyError) as exc:
        raise StorageError(f"Could not open recents database {database_url}: {exc}") from exc

    logger.debug("Opened recents store at %s", url.render_as_string(hide_password=True))
    return RecentStore(engine, clock=clock)
