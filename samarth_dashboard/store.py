"""
store.py
--------
Document store backed by SQLAlchemy.

Documents are JSON objects addressed by (collection, doc_id), the same shape
the dashboard front end reads. Scan order within a collection is insertion
order. Writes come in two flavours:

- set(): replace the document, or merge into it when merge=True.
- batch(): collect set/update operations and commit them in one transaction.

Every SQLAlchemy failure surfaces as StoreError. Components receive a
DocumentStore instance explicitly; there is no module-level handle.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .errors import StoreError

Base = declarative_base()
logger = logging.getLogger(__name__)


class Document(Base):
    """One JSON document in a named collection."""

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_collection_doc"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False, index=True)
    doc_id = Column(String(255), nullable=False)
    data = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class DocumentStore:
    """Collections of JSON documents over any SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, autoflush=False, future=True)

    @classmethod
    def from_url(cls, url: str) -> "DocumentStore":
        """Create an engine for `url` and make sure the documents table exists."""
        logger.info("Connecting: %s", url.split("@")[1] if "@" in url else url)
        engine = create_engine(url, pool_pre_ping=True, future=True)
        store = cls(engine)
        store.create_tables()
        return store

    def create_tables(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("create_tables", exc) from exc

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self._sessions() as session:
                with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            logger.error("Store operation '%s' failed: %s", operation, exc)
            raise StoreError(operation, exc) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, collection: str, doc_id: str) -> dict | None:
        with self._session("get") as session:
            doc = _find(session, collection, doc_id)
            return dict(doc.data) if doc is not None else None

    def list_documents(self, collection: str) -> list[tuple[str, dict]]:
        """Return (doc_id, data) pairs for a full collection scan."""
        with self._session("list_documents") as session:
            rows = session.execute(
                select(Document.doc_id, Document.data)
                .where(Document.collection == collection)
                .order_by(Document.seq)
            ).all()
            return [(doc_id, dict(data)) for doc_id, data in rows]

    def list_ids(self, collection: str) -> set[str]:
        with self._session("list_ids") as session:
            rows = session.execute(
                select(Document.doc_id).where(Document.collection == collection)
            ).scalars()
            return set(rows)

    def count(self, collection: str) -> int:
        with self._session("count") as session:
            return session.execute(
                select(func.count()).select_from(Document).where(Document.collection == collection)
            ).scalar_one()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        with self._session("set") as session:
            _write(session, "set", collection, doc_id, data, merge)

    def batch(self) -> "WriteBatch":
        return WriteBatch(self)

    def _apply(self, operations: list[tuple]) -> None:
        with self._session("batch_commit") as session:
            for op in operations:
                _write(session, *op)


class WriteBatch:
    """Operations committed together in one transaction.

    Either every operation in the batch is applied or none is.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._operations: list[tuple] = []

    def __len__(self) -> int:
        return len(self._operations)

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        self._operations.append(("set", collection, doc_id, dict(data), merge))

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        """Merge fields into an existing document; the commit fails if it is missing."""
        self._operations.append(("update", collection, doc_id, dict(data), True))

    def commit(self) -> None:
        if not self._operations:
            return
        self._store._apply(self._operations)
        logger.debug("Committed batch of %d writes", len(self._operations))
        self._operations = []


def _find(session: Session, collection: str, doc_id: str) -> Document | None:
    return session.execute(
        select(Document).where(Document.collection == collection, Document.doc_id == doc_id)
    ).scalar_one_or_none()


def _write(
    session: Session,
    verb: str,
    collection: str,
    doc_id: str,
    data: dict[str, Any],
    merge: bool,
) -> None:
    existing = _find(session, collection, doc_id)

    if existing is None:
        if verb == "update":
            raise StoreError("update", KeyError(f"{collection}/{doc_id}"))
        session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
        # Later operations in the same transaction must see this document
        session.flush()
        return

    if merge:
        merged = dict(existing.data)
        merged.update(data)
        existing.data = merged
    else:
        existing.data = dict(data)
    session.flush()
