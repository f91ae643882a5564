"""Engine and session handling."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from codeagent.config import config
from codeagent.db.models import Base
from codeagent.utils import logger

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def create_db_engine(url: Optional[str] = None, **kwargs) -> Engine:
    url = url or config.database_url
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=config.database_echo, **kwargs)


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables."""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info(f"Database initialized ({engine.url.render_as_string(hide_password=True)})")
