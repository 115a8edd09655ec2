"""
Connection handling for the saved-project store.

One module-level engine backs every session.  The store is SQLite by
default: a file next to the working directory for the CLI, ``sqlite://``
(a single shared in-memory connection) for tests.  Callers that want a
unit of work use ``session_scope()``; services themselves only flush.

get_engine() and get_session() raise RuntimeError until
init_engine_from_url() has run.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from variance_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite:///variance_projects.db"

_IN_MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def _engine_options(database_url: str, echo: bool) -> dict:
    options: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    if database_url in _IN_MEMORY_URLS:
        options["poolclass"] = StaticPool
    return options


def init_engine_from_url(database_url: str = DEFAULT_DATABASE_URL, echo: bool = False) -> Engine:
    """Open the project store, disposing of any engine opened earlier."""
    global _engine, _sessions

    reset_engine()
    _engine = create_engine(database_url, **_engine_options(database_url, echo))
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "project_store_opened",
        extra={
            "dialect": _engine.dialect.name,
            "in_memory": database_url in _IN_MEMORY_URLS,
        },
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Project store not opened; call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    if _sessions is None:
        raise RuntimeError("Project store not opened; call init_engine_from_url() first.")
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit what the block did, or roll all of it back if it raised.

    The session is closed either way; the exception is re-raised.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("project_store_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the saved-project tables that do not exist yet."""
    from variance_kernel.db.base import Base
    import variance_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("project_tables_ready", extra={"tables": sorted(Base.metadata.tables)})


def reset_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _sessions

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None
