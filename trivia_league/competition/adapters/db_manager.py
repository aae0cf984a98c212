import os
import sqlite3

from trivia_league.shared.telemetry import Telemetry, measure_time


class DatabaseManager:
    """
    Responsible for:
    1. Managing the SQLite connection lifecycle.
    2. Initializing the database schema (DDL).
    3. Handling migrations.
    """

    def __init__(self, db_path: str = "data/trivia.db") -> None:
        self.db_path = db_path
        self.telemetry = Telemetry("DatabaseManager")
        self._shared_connection: sqlite3.Connection | None = None

        self._ensure_db_exists()

        # For in-memory DBs, we must keep the connection open immediately
        if self.db_path == ":memory:":
            self._shared_connection = sqlite3.connect(
                ":memory:", check_same_thread=False
            )

        self._init_schema()
        self._migrate_schema()

    def get_connection(self) -> sqlite3.Connection:
        """Returns a usable database connection, reconnecting if necessary."""
        if self._shared_connection:
            try:
                self._shared_connection.execute("SELECT 1")
                return self._shared_connection
            except sqlite3.ProgrammingError:
                # Connection was closed externally
                self._shared_connection = None

        conn = sqlite3.connect(self.db_path, check_same_thread=False)

        if self.db_path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")

        self._shared_connection = conn
        return conn

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
                CREATE TABLE IF NOT EXISTS competitions
                (
                    id   TEXT PRIMARY KEY,
                    name TEXT
                )
                """
            )

            # competition_id IS NULL marks a question of the shared pool
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS competition_questions
                (
                    id             TEXT PRIMARY KEY,
                    competition_id TEXT,
                    difficulty     TEXT,
                    status         BOOLEAN DEFAULT 1,
                    created_at     TEXT,
                    json_data      TEXT
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error("Schema Init Failed", e)
            raise

    def _migrate_schema(self) -> None:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("PRAGMA index_list(competition_questions)")
            indexes = [info[1] for info in cursor.fetchall()]

            # Migration: pool lookups filter on owner + status
            if "idx_competition_questions_pool" not in indexes:
                self.telemetry.log_info(
                    "Migrating: Adding pool index to competition_questions"
                )
                cursor.execute(
                    "CREATE INDEX idx_competition_questions_pool "
                    "ON competition_questions (competition_id, status)"
                )

            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error("Schema migration failed", e)
