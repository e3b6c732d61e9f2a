from __future__ import annotations

from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.orm import sessionmaker

from deckshare.config import DB_CONNECTION_STRING, LOGGER
from deckshare.models import register_models
from deckshare.models.base import Base

# Seconds a SQLite writer waits for another writer's lock
SQLITE_BUSY_TIMEOUT = 30


def engine_options(url: str) -> dict:
    """
    Engine options for a connection string.

    SQLite connections are shared across threads by the pool, and
    concurrent toggles queue on the database lock instead of failing.
    """
    if url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": SQLITE_BUSY_TIMEOUT,
            }
        }
    return {"pool_pre_ping": True}


def create_db_engine(url: str) -> Engine:
    return create_engine(url, **engine_options(url))


def make_sessionmaker(bind: Engine) -> sessionmaker:
    """Sessions whose loaded objects stay readable after commit."""
    return sessionmaker(bind, expire_on_commit=False)


engine = create_db_engine(DB_CONNECTION_STRING)
Session = make_sessionmaker(engine)

_db_initialized = False


def initialize_database() -> bool:
    """Create the tables missing from the database. Safe to call repeatedly."""
    global _db_initialized

    if _db_initialized:
        return True

    try:
        register_models()
        missing = set(Base.metadata.tables) - set(inspect(engine).get_table_names())

        if missing:
            LOGGER.info(f"Creating missing database tables: {sorted(missing)}")
            Base.metadata.create_all(bind=engine)
        else:
            LOGGER.debug(
                f"Database already initialized with {len(Base.metadata.tables)} tables"
            )

        _db_initialized = True
        return True
    except Exception as e:
        LOGGER.error(f"Error initializing database: {e}")
        return False
