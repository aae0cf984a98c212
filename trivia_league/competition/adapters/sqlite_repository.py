import sqlite3

from pydantic import ValidationError

from trivia_league.competition.adapters.db_manager import DatabaseManager
from trivia_league.competition.domain.models import Competition, Question
from trivia_league.competition.domain.ports import (
    ICompetitionRepository,
    PoolUnavailableError,
)
from trivia_league.shared.telemetry import Telemetry, measure_time


class SQLiteCompetitionRepository(ICompetitionRepository):
    def __init__(self, db_manager: DatabaseManager) -> None:
        self.telemetry = Telemetry("SQLiteRepository")
        self.db_manager = db_manager

    def _get_connection(self) -> sqlite3.Connection:
        return self.db_manager.get_connection()

    def is_empty(self) -> bool:
        """Helper for the Seeder."""
        conn = self._get_connection()
        cursor = conn.execute("SELECT count(*) FROM competition_questions")
        result = cursor.fetchone()
        count = result[0] if result else 0
        if not self.db_manager._shared_connection:
            conn.close()
        return count == 0

    @measure_time("db_get_competition")
    def get_competition(self, competition_id: str) -> Competition | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT id, name FROM competitions WHERE id = ?", (competition_id,)
            ).fetchone()
        except sqlite3.Error as e:
            self.telemetry.log_error(
                f"get_competition failed for {competition_id}", e
            )
            raise PoolUnavailableError(str(e)) from e
        finally:
            if not self.db_manager._shared_connection:
                conn.close()

        if not row:
            return None
        return Competition(id=row[0], name=row[1])

    @measure_time("db_get_question_pool")
    def get_question_pool(self, competition_id: str) -> list[Question]:
        conn = self._get_connection()
        try:
            query = """
                    SELECT id, json_data
                    FROM competition_questions
                    WHERE (competition_id = ? OR competition_id IS NULL)
                      AND status = 1
                    ORDER BY created_at ASC, id ASC
                    """
            rows = conn.execute(query, (competition_id,)).fetchall()
        except sqlite3.Error as e:
            self.telemetry.log_error(
                f"get_question_pool failed for {competition_id}", e
            )
            raise PoolUnavailableError(str(e)) from e
        finally:
            if not self.db_manager._shared_connection:
                conn.close()

        pool = []
        for row_id, q_json in rows:
            try:
                pool.append(Question.model_validate_json(q_json))
            except ValidationError as e:
                self.telemetry.log_error(f"Skipping malformed question {row_id}", e)

        self.telemetry.log_info(
            "Pool fetched", competition_id=competition_id, rows=len(pool)
        )
        return pool

    def seed_questions(self, questions: list[Question]) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            for q in questions:
                cursor.execute(
                    "INSERT OR REPLACE INTO competition_questions "
                    "(id, competition_id, difficulty, status, created_at, json_data) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        str(q.id),
                        q.competition_id,
                        q.difficulty.value,
                        q.status,
                        q.created_at,
                        q.model_dump_json(),
                    ),
                )
            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error("seed_questions failed", e)
        finally:
            if not self.db_manager._shared_connection:
                conn.close()

    def save_competition(self, competition: Competition) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO competitions (id, name) VALUES (?, ?)",
                (competition.id, competition.name),
            )
            conn.commit()
        finally:
            if not self.db_manager._shared_connection:
                conn.close()
