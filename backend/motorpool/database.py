import os
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from contextlib import contextmanager
from motorpool.config import settings

database_url = settings.database_url

# SQLAlchemy QueuePool settings are process-local. Keep defaults conservative to
# reduce contention when environments share a database user.
POOL_DEFAULTS = {
    "pool_size": 5,
    "max_overflow": 5,
    "pool_timeout": 10,
    "pool_recycle": 3600,
}

POOL_LIMITS = {
    "pool_size": (1, 20),
    "max_overflow": (0, 20),
    "pool_timeout": (2, 60),
    "pool_recycle": (300, 7200),
}


def _get_env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default

    try:
        return int(str(raw_value).strip())
    except (TypeError, ValueError):
        return default


def _bounded_env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    value = _get_env_int(name, default)
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def is_sqlite_url(url: str) -> bool:
    return str(url).strip().lower().startswith("sqlite")


def build_engine(url: str):
    """Create an engine for ``url`` using the pool rules for its backend."""
    # SQLite does not support the QueuePool arguments used in production.
    if is_sqlite_url(url):
        return create_engine(
            url,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False},
        )

    # Every statement sees rows committed before it started. Writers rely on
    # this after waiting on a vehicle row lock.
    return create_engine(
        url,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        pool_size=_bounded_env_int("DB_POOL_SIZE", POOL_DEFAULTS["pool_size"], *POOL_LIMITS["pool_size"]),
        max_overflow=_bounded_env_int("DB_MAX_OVERFLOW", POOL_DEFAULTS["max_overflow"], *POOL_LIMITS["max_overflow"]),
        pool_recycle=_bounded_env_int("DB_POOL_RECYCLE", POOL_DEFAULTS["pool_recycle"], *POOL_LIMITS["pool_recycle"]),
        pool_timeout=_bounded_env_int("DB_POOL_TIMEOUT", POOL_DEFAULTS["pool_timeout"], *POOL_LIMITS["pool_timeout"]),
    )


engine = build_engine(database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def begin_write(session: Session) -> None:
    """
    Start a fresh write transaction on ``session``.

    A clean transaction left open by earlier lookups is closed first, so the
    caller's next statement (the vehicle row lock) opens the new one.
    SQLite has no row locks. There the transaction is opened with
    ``BEGIN IMMEDIATE`` and a second writer, from any process, waits here
    until the first commits.
    """
    if session.in_transaction() and not (session.new or session.dirty or session.deleted):
        session.rollback()

    connection = session.connection()
    if connection.dialect.name != "sqlite":
        return
    if not connection.connection.driver_connection.in_transaction:
        connection.exec_driver_sql("BEGIN IMMEDIATE")


@contextmanager
def get_db():
    """Context manager for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

