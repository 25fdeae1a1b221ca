from abc import ABC, abstractmethod
from typing import Any

from src.dailymix.domain.models import Difficulty, DifficultyRatio, Question


class IQuestionRepository(ABC):
    @abstractmethod
    def get_difficulty_ratio(self, user_id: str) -> DifficultyRatio | None:
        """Returns the user's stored ratio, or None when the profile has none."""
        pass

    @abstractmethod
    def get_questions_by_difficulty(
        self, difficulty: Difficulty, limit: int
    ) -> list[Question]:
        pass

    @abstractmethod
    def seed_questions(self, questions: list[Question]) -> None:
        pass

    @abstractmethod
    def log_activity(
        self, user_id: str, event_type: str, details: dict[str, Any]
    ) -> None:
        pass

    @abstractmethod
    def save_answer(
        self, user_id: str, question_id: str, chosen_answer: str, correct: bool
    ) -> None:
        pass


class IBundleCache(ABC):
    """
    Key/value store for the day's selection. Values are JSON-compatible.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass
