"""Database configuration and session management."""

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Engine, String, create_engine, func
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from hivqi.core.config import settings

# Lazy initialized sync engine
_sync_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_sync_engine() -> Engine:
    """Get or create the sync engine.

    Lazily creates the engine on first use so importing the models does not
    require a reachable database.
    """
    global _sync_engine
    if _sync_engine is None:
        _sync_engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            future=True,
        )
    return _sync_engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory bound to the sync engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_sync_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Provides common columns for all models:
    - uuid: Stable external identifier (auto-generated)
    - date_created: Timestamp when record was created
    """

    uuid: Mapped[str] = mapped_column(
        String(38),
        unique=True,
        nullable=False,
        default=lambda: str(uuid4()),
    )
    date_created: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations.

    Usage:
        with session_scope() as session:
            data_service = SqlClinicalDataService(session)
            ...
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables.

    For development only - use Alembic migrations in production.
    """
    # Import models so they register with Base.metadata
    import hivqi.models  # noqa: F401

    Base.metadata.create_all(bind=get_sync_engine())


def close_db() -> None:
    """Dispose of the engine and its connection pool."""
    global _sync_engine, _session_factory
    if _sync_engine is not None:
        _sync_engine.dispose()
        _sync_engine = None
        _session_factory = None
