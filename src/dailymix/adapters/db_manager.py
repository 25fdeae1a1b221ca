import os
import sqlite3
from typing import Any

from src.shared.telemetry import Telemetry, measure_time


class DatabaseManager:
    """
    Responsible for:
    1. Managing the SQLite connection lifecycle.
    2. Creating the local schema (questions, profiles, activity_log, user_answers).
    3. Staying pickle-safe inside Streamlit session state.
    """

    def __init__(self, db_path: str = "data/dailymix.db") -> None:
        self.db_path = db_path
        self.telemetry = Telemetry("DatabaseManager")
        self._shared_connection: sqlite3.Connection | None = None

        self._ensure_db_exists()

        # An in-memory DB only lives as long as its first connection
        if self.db_path == ":memory:":
            self._shared_connection = sqlite3.connect(
                ":memory:", check_same_thread=False
            )

        self._init_schema()

    def __getstate__(self) -> dict[str, Any]:
        state = self.__dict__.copy()
        state.pop("_shared_connection", None)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        # Reconnected lazily by get_connection(); ":memory:" data does not survive
        self.__dict__.update(state)
        self._shared_connection = None

    def get_connection(self) -> sqlite3.Connection:
        """Returns a usable database connection, reconnecting if necessary."""
        if self._shared_connection:
            try:
                self._shared_connection.execute("SELECT 1")
                return self._shared_connection
            except sqlite3.ProgrammingError:
                # Closed externally
                self._shared_connection = None

        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        if self.db_path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")

        self._shared_connection = conn
        return conn

    def release(self, conn: sqlite3.Connection) -> None:
        if not self._shared_connection:
            conn.close()

    def close(self) -> None:
        if self._shared_connection:
            self._shared_connection.close()
            self._shared_connection = None

    def _ensure_db_exists(self) -> None:
        if self.db_path == ":memory:":
            return
        dir_name = os.path.dirname(self.db_path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)

    @measure_time("db_init_schema")
    def _init_schema(self) -> None:
        conn = self.get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS questions
                (
                    id         TEXT PRIMARY KEY,
                    subject    TEXT,
                    difficulty TEXT NOT NULL,
                    json_data  TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_questions_difficulty "
                "ON questions (difficulty)"
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS profiles
                (
                    id               TEXT PRIMARY KEY,
                    difficulty_ratio TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS activity_log
                (
                    id         INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id    TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    details    TEXT,
                    timestamp  DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS user_answers
                (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id       TEXT NOT NULL,
                    question_id   TEXT NOT NULL,
                    chosen_answer TEXT NOT NULL,
                    correct       BOOLEAN NOT NULL,
                    created_at    DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error("Schema Init Failed", e)
            raise
