from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from hrdesk.core.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.sql_echo}
    if url.startswith("sqlite"):
        # Sessions are handed across threads by FastAPI's threadpool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
    return options


def enable_sqlite_foreign_keys(bound: Engine) -> None:
    """SQLite ignores ON DELETE clauses unless each connection opts in."""

    @event.listens_for(bound, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

# Services commit explicitly; nothing is flushed behind their back
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """One session per request, closed when the response is sent."""
    with SessionLocal() as db:
        yield db


def init_db(bind: Engine = engine) -> None:
    """Create any missing tables. Called from the app lifespan."""
    import hrdesk.models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=bind)
