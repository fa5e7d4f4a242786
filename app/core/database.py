"""Database connection, session management and startup checks."""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised at startup when the datastore cannot be reached."""


def _connect_args(url: str) -> dict[str, object]:
    # SQLite connections are shared with the request thread pool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    connect_args=_connect_args(settings.DATABASE_URL),
)


def enable_sqlite_foreign_keys(bind: Engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection."""

    @event.listens_for(bind, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


def init_database(bind: Engine | None = None) -> None:
    """
    Verify the datastore is reachable before serving requests.

    Raises DatabaseUnavailableError so the application lifespan aborts startup.
    """
    logger.info("Checking database connection...")
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Failed to connect to database: %s", e)
        raise DatabaseUnavailableError("Database connection failed") from e
    logger.info("Database connection successful")
    if settings.APP_ENV == "dev":
        logger.info("Development mode - schema managed with 'alembic upgrade head'")


def count_users(db: Session) -> int:
    """Return the number of registered users."""
    return db.scalar(select(func.count()).select_from(User)) or 0


def is_system_initialized(db: Session) -> bool:
    """The system is initialized once at least one user exists."""
    return count_users(db) > 0
