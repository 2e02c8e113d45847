"""
Engine and session wiring.

DATABASE_URL selects the backend (SQLite file by default). SQL_ECHO=true
logs every statement.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dinner_circles.db")


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite files get their parent directory created."""
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are handed across FastAPI's threadpool
        connect_args["check_same_thread"] = False
        if ":memory:" not in url:
            Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=echo, connect_args=connect_args)


engine: Engine = build_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes"),
)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request"""
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts run outside a request."""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create any missing tables (migrations remain the source of truth for changes)"""
    # Models must be imported so their tables are registered on the metadata
    from dinner_circles.models.circle import Circle, CircleMember  # noqa: F401
    from dinner_circles.models.event import Event  # noqa: F401
    from dinner_circles.models.opt_in import MatchingOptIn  # noqa: F401
    from dinner_circles.models.user import User  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
