"""Tests for database engine setup."""

from unittest.mock import patch

from sqlalchemy import inspect

from deckshare import db
from deckshare.db import SQLITE_BUSY_TIMEOUT, create_db_engine, engine_options


class TestEngineOptions:
    def test_sqlite_waits_for_locks(self):
        options = engine_options("sqlite:///decks.db")

        assert options["connect_args"] == {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }

    def test_server_database(self):
        assert engine_options("postgresql://localhost/decks") == {"pool_pre_ping": True}


class TestInitializeDatabase:
    """Test cases for table creation at startup."""

    def test_creates_missing_tables(self, tmp_path, mock_logger):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'fresh.db'}")

        with (
            patch.object(db, "engine", engine),
            patch.object(db, "_db_initialized", False),
        ):
            assert db.initialize_database() is True
            assert db._db_initialized is True

        tables = set(inspect(engine).get_table_names())
        assert {"users", "decklists", "favorite", "vote"} <= tables
        mock_logger["info"].assert_called_once()
        engine.dispose()

    def test_second_call_is_a_no_op(self):
        with (
            patch.object(db, "_db_initialized", True),
            patch.object(db, "inspect") as mock_inspect,
        ):
            assert db.initialize_database() is True

        mock_inspect.assert_not_called()
