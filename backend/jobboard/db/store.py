"""
Persisted Record Store.

Named collections (``users``, ``analytics``) are loaded and stored as whole
documents. Every mutation is read-modify-write; ``update`` holds a
process-wide lock across the whole cycle so concurrent requests inside one
process never lose an append. There is no cross-process guarantee.
"""

import copy
import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import Column, DateTime, JSON, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard.core.logger import get_logger
from jobboard.db.base import Base

logger = get_logger("store")

T = TypeVar("T")


class RecordStore:
    """Base class: subclasses implement ``_load`` and ``_save``."""

    def __init__(self):
        self._lock = threading.RLock()

    def _load(self, name: str) -> Optional[Any]:
        """Return the raw document, or None if it was never written."""
        raise NotImplementedError

    def _save(self, name: str, document: Any) -> None:
        raise NotImplementedError

    def read_all(self, name: str, default: T) -> T:
        """
        Load a whole collection.

        Missing or unparseable resources fall back to a fresh copy of
        ``default``; this never raises.
        """
        try:
            document = self._load(name)
        except (OSError, ValueError, SQLAlchemyError) as e:
            logger.warning(f"Could not read collection '{name}', using empty default: {e}")
            return copy.deepcopy(default)

        if document is None:
            return copy.deepcopy(default)
        if not isinstance(document, type(default)):
            logger.warning(
                f"Collection '{name}' has unexpected shape "
                f"{type(document).__name__}, using empty default"
            )
            return copy.deepcopy(default)
        return document

    def write_all(self, name: str, document: Any) -> None:
        """Overwrite a whole collection."""
        with self._lock:
            self._save(name, document)

    def update(self, name: str, default: T, mutator: Callable[[T], Any]) -> Any:
        """
        Atomically read, mutate in memory, and write back one collection.

        Returns whatever ``mutator`` returns. If the mutator raises, nothing
        is written.
        """
        with self._lock:
            document = self.read_all(name, default)
            result = mutator(document)
            self._save(name, document)
            return result


class JsonFileRecordStore(RecordStore):
    """One pretty-printed ``<name>.json`` file per collection."""

    def __init__(self, data_dir: str | os.PathLike):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def _load(self, name: str) -> Optional[Any]:
        path = self.path_for(name)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def _save(self, name: str, document: Any) -> None:
        path = self.path_for(name)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class CollectionDocument(Base):
    """A named collection stored as a single JSON document."""

    __tablename__ = "collections"

    name = Column(String, primary_key=True)
    document = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class SqlRecordStore(RecordStore):
    """Collections stored as rows of the ``collections`` table."""

    def __init__(self, database_url: str):
        super().__init__()
        engine_kwargs: dict[str, Any] = {}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    def _load(self, name: str) -> Optional[Any]:
        with self.SessionLocal() as db:
            row = db.execute(
                select(CollectionDocument).where(CollectionDocument.name == name)
            ).scalar_one_or_none()
            return None if row is None else row.document

    def _save(self, name: str, document: Any) -> None:
        with self.SessionLocal() as db:
            row = db.get(CollectionDocument, name)
            if row is None:
                row = CollectionDocument(name=name)
                db.add(row)
            # Assign a fresh copy so the JSON column registers the change.
            row.document = copy.deepcopy(document)
            row.updated_at = datetime.now(timezone.utc)
            db.commit()


def build_store(backend: str, *, database_url: str, data_dir: str) -> RecordStore:
    """Build the configured store backend ('sql' or 'json')."""
    if backend == "json":
        logger.info(f"Using JSON file store at {data_dir}")
        return JsonFileRecordStore(data_dir)
    if backend == "sql":
        logger.info(f"Using SQL store at {database_url}")
        return SqlRecordStore(database_url)
    raise ValueError(f"Unknown STORE_BACKEND '{backend}'. Must be 'sql' or 'json'")
