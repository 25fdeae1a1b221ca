from typing import Any, cast

from postgrest.types import CountMethod
from pydantic import ValidationError

from src.dailymix.domain.models import Difficulty, DifficultyRatio, OptionKey, Question
from src.dailymix.domain.ports import IQuestionRepository
from src.shared.telemetry import Telemetry, measure_time
from supabase import Client, create_client

QUESTION_COLUMNS = (
    "id, subject, difficulty, question_text, option_a, option_b, option_c, "
    "option_d, correct_answer, reasoning"
)


def question_from_row(row: dict[str, Any]) -> Question:
    """Maps a `questions` table row (option_a..option_d columns) to a Question."""
    options = {
        key: str(row[f"option_{key.value.lower()}"])
        for key in OptionKey
        if row.get(f"option_{key.value.lower()}") is not None
    }
    return Question(
        id=str(row["id"]),
        subject=str(row.get("subject") or "General"),
        difficulty=Difficulty(row["difficulty"]),
        text=str(row["question_text"]),
        options=options,
        correct_option=OptionKey(str(row["correct_answer"]).strip().upper()),
        reasoning=row.get("reasoning"),
    )


def question_to_row(question: Question) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": question.id,
        "subject": question.subject,
        "difficulty": question.difficulty.value,
        "question_text": question.text,
        "correct_answer": question.correct_option.value.lower(),
        "reasoning": question.reasoning,
    }
    for key in OptionKey:
        row[f"option_{key.value.lower()}"] = question.options.get(key)
    return row


class SupabaseQuestionRepository(IQuestionRepository):
    def __init__(self, url: str, key: str) -> None:
        self.telemetry = Telemetry("SupabaseRepository")
        try:
            self.client: Client = create_client(url, key)
        except Exception as e:
            self.telemetry.log_error("Failed to initialize Supabase client", e)
            raise

    def is_empty(self) -> bool:
        """Used by DataSeeder to decide whether to upload the seed file."""
        try:
            response = (
                self.client.table("questions")
                .select("id", count=cast(CountMethod, "exact"))
                .limit(1)
                .execute()
            )
            return (response.count or 0) == 0
        except Exception as e:
            self.telemetry.log_error("is_empty check failed", e)
            return True

    def seed_questions(self, questions: list[Question]) -> None:
        try:
            data = [question_to_row(q) for q in questions]

            # Upsert in chunks of 100 to keep payloads small
            chunk_size = 100
            for i in range(0, len(data), chunk_size):
                chunk = data[i : i + chunk_size]
                self.client.table("questions").upsert(chunk).execute()

            self.telemetry.log_info(f"Seeded {len(questions)} questions to Supabase")
        except Exception as e:
            self.telemetry.log_error("seed_questions failed", e)

    @measure_time("sb_get_questions_by_difficulty")
    def get_questions_by_difficulty(
        self, difficulty: Difficulty, limit: int
    ) -> list[Question]:
        response = (
            self.client.table("questions")
            .select(QUESTION_COLUMNS)
            .eq("difficulty", difficulty.value)
            .limit(limit)
            .execute()
        )
        data = cast(list[dict[str, Any]], response.data or [])
        return [question_from_row(row) for row in data]

    @measure_time("sb_get_difficulty_ratio")
    def get_difficulty_ratio(self, user_id: str) -> DifficultyRatio | None:
        response = (
            self.client.table("profiles")
            .select("difficulty_ratio")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        data = cast(list[dict[str, Any]], response.data or [])
        if not data or not data[0].get("difficulty_ratio"):
            return None
        try:
            return DifficultyRatio.model_validate(data[0]["difficulty_ratio"])
        except ValidationError as e:
            self.telemetry.log_error(f"Malformed difficulty_ratio for {user_id}", e)
            return None

    @measure_time("sb_log_activity")
    def log_activity(
        self, user_id: str, event_type: str, details: dict[str, Any]
    ) -> None:
        self.client.table("activity_log").insert(
            {"user_id": user_id, "event_type": event_type, "details": details}
        ).execute()

    @measure_time("sb_save_answer")
    def save_answer(
        self, user_id: str, question_id: str, chosen_answer: str, correct: bool
    ) -> None:
        try:
            self.client.table("user_answers").insert(
                {
                    "user_id": user_id,
                    "question_id": question_id,
                    "chosen_answer": chosen_answer,
                    "correct": correct,
                }
            ).execute()
        except Exception as e:
            self.telemetry.log_error(f"save_answer failed for {user_id}", e)
            raise
