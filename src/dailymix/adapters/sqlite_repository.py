import json
import sqlite3
from typing import Any

from pydantic import ValidationError

from src.dailymix.adapters.db_manager import DatabaseManager
from src.dailymix.domain.models import Difficulty, DifficultyRatio, Question
from src.dailymix.domain.ports import IQuestionRepository
from src.shared.telemetry import Telemetry, measure_time


class SQLiteQuestionRepository(IQuestionRepository):
    """Local backend used for development and tests."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.telemetry = Telemetry("SQLiteRepository")
        self.db_manager = db_manager

    def _get_connection(self) -> sqlite3.Connection:
        return self.db_manager.get_connection()

    def is_empty(self) -> bool:
        """Helper for the Seeder."""
        conn = self._get_connection()
        try:
            result = conn.execute("SELECT count(*) FROM questions").fetchone()
            return (result[0] if result else 0) == 0
        finally:
            self.db_manager.release(conn)

    def seed_questions(self, questions: list[Question]) -> None:
        conn = self._get_connection()
        try:
            conn.executemany(
                "INSERT OR REPLACE INTO questions (id, subject, difficulty, json_data) "
                "VALUES (?, ?, ?, ?)",
                [
                    (q.id, q.subject, q.difficulty.value, q.model_dump_json())
                    for q in questions
                ],
            )
            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error("seed_questions failed", e)
        finally:
            self.db_manager.release(conn)

    @measure_time("db_get_questions_by_difficulty")
    def get_questions_by_difficulty(
        self, difficulty: Difficulty, limit: int
    ) -> list[Question]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT json_data FROM questions WHERE difficulty = ? LIMIT ?",
                (difficulty.value, limit),
            )
            return [Question.model_validate_json(row[0]) for row in cursor.fetchall()]
        finally:
            self.db_manager.release(conn)

    def get_difficulty_ratio(self, user_id: str) -> DifficultyRatio | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT difficulty_ratio FROM profiles WHERE id = ?", (user_id,)
            ).fetchone()
            if not row or not row[0]:
                return None
            return DifficultyRatio.model_validate_json(row[0])
        except ValidationError as e:
            self.telemetry.log_error(f"Malformed difficulty_ratio for {user_id}", e)
            return None
        finally:
            self.db_manager.release(conn)

    def save_difficulty_ratio(self, user_id: str, ratio: DifficultyRatio) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO profiles (id, difficulty_ratio)
                VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET difficulty_ratio = excluded.difficulty_ratio
                """,
                (user_id, ratio.model_dump_json()),
            )
            conn.commit()
        finally:
            self.db_manager.release(conn)

    @measure_time("db_log_activity")
    def log_activity(
        self, user_id: str, event_type: str, details: dict[str, Any]
    ) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO activity_log (user_id, event_type, details) VALUES (?, ?, ?)",
                (user_id, event_type, json.dumps(details)),
            )
            conn.commit()
        finally:
            self.db_manager.release(conn)

    @measure_time("db_save_answer")
    def save_answer(
        self, user_id: str, question_id: str, chosen_answer: str, correct: bool
    ) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO user_answers (user_id, question_id, chosen_answer, correct) "
                "VALUES (?, ?, ?, ?)",
                (user_id, question_id, chosen_answer, 1 if correct else 0),
            )
            conn.commit()
        except sqlite3.Error as e:
            self.telemetry.log_error(f"save_answer failed for {user_id}", e)
            raise
        finally:
            self.db_manager.release(conn)

    def get_activity(self, user_id: str) -> list[dict[str, Any]]:
        """Debug helper: the user's activity log, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """
                SELECT event_type, details, timestamp
                FROM activity_log
                WHERE user_id = ?
                ORDER BY id DESC
                """,
                (user_id,),
            )
            return [
                {
                    "event_type": event_type,
                    "details": json.loads(details) if details else None,
                    "timestamp": timestamp,
                }
                for event_type, details, timestamp in cursor.fetchall()
            ]
        finally:
            self.db_manager.release(conn)
