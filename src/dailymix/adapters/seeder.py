import json
import os

from src.dailymix.domain.models import Question
from src.dailymix.domain.ports import IQuestionRepository
from src.shared.telemetry import Telemetry


class DataSeeder:
    """
    Populates an empty question bank from a JSON file.

    Emptiness is checked by duck-typing: repositories that can answer
    ``is_empty()`` cheaply expose it, the port does not require it.
    """

    def __init__(self, repo: IQuestionRepository) -> None:
        self.repo = repo
        self.telemetry = Telemetry("DataSeeder")

    def seed_if_empty(self, seed_file: str = "data/seed_questions.json") -> int:
        """Returns the number of questions seeded (0 when nothing was done)."""
        try:
            if hasattr(self.repo, "is_empty") and not self.repo.is_empty():
                return 0

            if not os.path.exists(seed_file):
                self.telemetry.log_error(
                    "Seed file NOT found", FileNotFoundError(seed_file)
                )
                return 0

            self.telemetry.log_info("Question bank empty. Seeding...", file=seed_file)
            with open(seed_file, encoding="utf-8") as f:
                questions = [Question.model_validate(q) for q in json.load(f)]

            self.repo.seed_questions(questions)
            self.telemetry.log_info(f"Seeded {len(questions)} questions.")
            return len(questions)
        except (OSError, ValueError) as e:
            self.telemetry.log_error("Auto-seeding failed", e)
            return 0
