import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, Session, create_engine

from .config import settings


logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_MS = 60000


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    # SQLite leaves foreign key enforcement off unless asked, per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")
    cursor.close()


def build_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``database_url``.

    SQLite engines get a generous lock timeout and have foreign keys switched
    on for every new connection. Extra keyword arguments go straight to
    ``create_engine`` (tests pass ``poolclass=StaticPool`` for in-memory DBs).
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("poolclass", NullPool)
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_MS / 1000},
            **kwargs,
        )
        event.listen(engine, "connect", _set_sqlite_pragmas)
    else:
        engine = create_engine(database_url, echo=echo, **kwargs)
    logger.debug("Engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


engine = build_engine(settings.database_url, echo=settings.sql_echo)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope(bind: Optional[Engine] = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = Session(bind or engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    from . import models  # noqa: F401  # registers the table models on the metadata

    SQLModel.metadata.create_all(bind or engine)
