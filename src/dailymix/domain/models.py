from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# --- Enums ---
class Difficulty(str, Enum):
    # Definition order is the band order used for allocation and sampling
    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"


class OptionKey(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


# --- Entities ---
class Question(BaseModel):
    id: str
    subject: str = "General"
    difficulty: Difficulty
    text: str
    options: dict[OptionKey, str]
    correct_option: OptionKey
    reasoning: str | None = None

    def is_correct(self, selected: OptionKey) -> bool:
        return selected == self.correct_option


# --- Value Objects ---
class DifficultyRatio(BaseModel):
    """
    A user's preferred share per band. Weights against the session total,
    so the three values do not have to sum to 1.
    """

    easy: float = Field(default=0.0, le=1.0)
    moderate: float = Field(default=0.0, le=1.0)
    difficult: float = Field(default=0.0, le=1.0)

    def as_mapping(self) -> dict[str, float]:
        return {"easy": self.easy, "moderate": self.moderate, "difficult": self.difficult}


class MixCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    easy: int = Field(ge=0)
    moderate: int = Field(ge=0)
    difficult: int = Field(ge=0)

    @property
    def total(self) -> int:
        return self.easy + self.moderate + self.difficult

    def get(self, band: Difficulty) -> int:
        return int(getattr(self, band.value))

    def items(self) -> Iterator[tuple[Difficulty, int]]:
        for band in Difficulty:
            yield band, self.get(band)


class DailyBundle(BaseModel):
    """Today's selection for one user, as cached and as rendered."""

    date: str
    counts: MixCounts
    questions: list[Question] = []

    @property
    def is_short(self) -> bool:
        return len(self.questions) < self.counts.total
