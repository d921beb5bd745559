import os
import pickle
import sqlite3

import pytest

from src.preferences.adapters.db_manager import DatabaseManager


def _columns(db):
    cursor = db.get_connection().execute("PRAGMA table_info(preferences)")
    return [row[1] for row in cursor.fetchall()]


class TestDatabaseManagerInit:
    def test_init_creates_file_db(self, tmp_path):
        """Test initialization creates database file."""
        db_path = str(tmp_path / "prefs.db")
        db = DatabaseManager(db_path)

        assert os.path.exists(db_path)
        db.close()

    def test_init_creates_directory_if_missing(self, tmp_path):
        db_path = str(tmp_path / "subdir" / "nested" / "prefs.db")
        db = DatabaseManager(db_path)

        assert os.path.exists(db_path)
        db.close()

    def test_init_memory_db_keeps_connection_open(self):
        db = DatabaseManager(":memory:")

        assert db._shared_connection is not None
        assert db._shared_connection.execute("SELECT 1").fetchone() == (1,)
        db.close()

    def test_schema_declares_every_column(self):
        db = DatabaseManager(":memory:")

        assert _columns(db) == ["scope", "key", "value", "updated_at"]
        db.close()

    def test_reopening_keeps_rows(self, tmp_path):
        db_path = str(tmp_path / "prefs.db")
        first = DatabaseManager(db_path)
        conn = first.get_connection()
        conn.execute(
            "INSERT INTO preferences (scope, key, value) VALUES (?, ?, ?)",
            ("visitor-a", "vscode-plugin-theme", "dark"),
        )
        conn.commit()
        first.close()

        second = DatabaseManager(db_path)

        row = second.get_connection().execute("SELECT value FROM preferences").fetchone()
        assert row == ("dark",)
        second.close()

    def test_same_key_is_unique_per_scope_only(self):
        db = DatabaseManager(":memory:")
        conn = db.get_connection()
        insert = "INSERT INTO preferences (scope, key, value) VALUES (?, ?, ?)"
        conn.execute(insert, ("visitor-a", "vscode-plugin-theme", "dark"))
        conn.execute(insert, ("visitor-b", "vscode-plugin-theme", "light"))

        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(insert, ("visitor-a", "vscode-plugin-theme", "light"))
        db.close()


class TestConnectionManagement:
    def test_get_connection_reuses_existing_connection(self, tmp_path):
        db = DatabaseManager(str(tmp_path / "prefs.db"))

        assert db.get_connection() is db.get_connection()
        db.close()

    def test_get_connection_handles_closed_connection(self, tmp_path):
        db = DatabaseManager(str(tmp_path / "prefs.db"))

        db.get_connection().close()  # Simulate external close

        assert db.get_connection().execute("SELECT 1").fetchone() == (1,)
        db.close()

    def test_get_connection_enables_wal_mode(self, tmp_path):
        db = DatabaseManager(str(tmp_path / "prefs.db"))

        result = db.get_connection().execute("PRAGMA journal_mode").fetchone()

        assert result[0].lower() == "wal"
        db.close()


class TestPickleSafety:
    def test_pickle_round_trip_reconnects(self, tmp_path):
        """Streamlit may pickle session objects; the connection is rebuilt lazily."""
        db = DatabaseManager(str(tmp_path / "prefs.db"))
        db.get_connection()

        restored = pickle.loads(pickle.dumps(db))

        assert restored._shared_connection is None
        assert restored.get_connection().execute("SELECT 1").fetchone() == (1,)
        db.close()
        restored.close()
