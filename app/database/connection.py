"""Lazily established, process-wide handle to the record store.

A ``ConnectionManager`` opens the engine on first use and then hands the same
``ConnectionHandle`` to every caller. Callers that arrive while the first
attempt is still running wait on that attempt instead of starting their own.
A failed attempt is reported to everyone who waited on it and is not cached,
so the next call starts over.
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass

from sqlalchemy import Engine, create_engine, make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.errors import ConnectionError
from app.database.base import Base

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionHandle:
    engine: Engine
    session_factory: sessionmaker


class ConnectionManager:
    def __init__(self, database_url: str, **engine_options):
        self.database_url = database_url
        self._engine_options = engine_options
        self._handle: ConnectionHandle | None = None
        self._pending: Future | None = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    def connect(self) -> ConnectionHandle:
        handle = self._handle
        if handle is not None:
            return handle

        with self._lock:
            if self._handle is not None:
                return self._handle
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = Future()

        if not owner:
            # Another caller is already connecting; share its outcome
            return pending.result()

        try:
            handle = self._open()
        except Exception as exc:
            with self._lock:
                self._pending = None
            pending.set_exception(exc)
            raise

        with self._lock:
            self._handle = handle
            self._pending = None
        pending.set_result(handle)
        return handle

    def _open(self) -> ConnectionHandle:
        # Import models so that they register with Base.metadata
        import app.models.books  # noqa: F401
        import app.models.events  # noqa: F401

        logger.info("Connecting to database %s", self._safe_url())
        engine = None
        try:
            engine = create_engine(self.database_url, **self._engine_options)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            # Create all tables and unique indexes (in production, use migrations such as Alembic)
            Base.metadata.create_all(bind=engine)
        except (SQLAlchemyError, OSError, ImportError) as exc:
            if engine is not None:
                engine.dispose()
            logger.error("Database connection failed: %s", exc)
            raise ConnectionError(f"Failed to connect to database: {exc}") from exc

        session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
        logger.info("Database connection established")
        return ConnectionHandle(engine=engine, session_factory=session_factory)

    def dispose(self) -> None:
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.engine.dispose()
            logger.info("Database connection disposed")

    def _safe_url(self) -> str:
        try:
            return make_url(self.database_url).render_as_string(hide_password=True)
        except (SQLAlchemyError, ValueError):
            return "<invalid url>"
