from src.preferences.adapters.db_manager import DatabaseManager
from src.preferences.domain.ports import IKeyValueStore
from src.shared.telemetry import Telemetry, measure_time


class SQLiteKeyValueStore(IKeyValueStore):
    """
    Durable key/value storage on top of the `preferences` table.

    Rows are scoped to one visitor: two browsers sharing a database file
    never see each other's choices. The DatabaseManager may be shared
    across sessions; the scope may not.
    Errors propagate; PreferencePersistence decides what to do with them.
    """

    def __init__(self, db_manager: DatabaseManager, scope: str) -> None:
        if not scope:
            raise ValueError("SQLiteKeyValueStore needs a non-empty visitor scope")
        self.db = db_manager
        self.scope = scope
        self.telemetry = Telemetry("SQLiteKeyValueStore")

    @measure_time("kv_get")
    def get(self, key: str) -> str | None:
        conn = self.db.get_connection()
        row = conn.execute(
            "SELECT value FROM preferences WHERE scope = ? AND key = ?",
            (self.scope, key),
        ).fetchone()
        return row[0] if row else None

    @measure_time("kv_set")
    def set(self, key: str, value: str) -> None:
        conn = self.db.get_connection()
        conn.execute(
            """
            INSERT INTO preferences (scope, key, value, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(scope, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (self.scope, key, value),
        )
        conn.commit()
