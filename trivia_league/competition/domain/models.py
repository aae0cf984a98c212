from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, model_validator


# --- Enums ---
class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


# --- Entities ---
class Question(BaseModel):
    """A row of the candidate pool (`competition_questions`)."""

    id: int | str
    question_text: str
    choices: list[str]
    correct_answer: str
    difficulty: Difficulty
    category: str | None = None
    explanation: str | None = None
    status: bool = True
    competition_id: str | None = None
    source_question_id: int | str | None = None
    created_at: str | None = None

    @model_validator(mode="after")
    def _correct_answer_is_a_choice(self) -> "Question":
        if self.choices.count(self.correct_answer) != 1:
            raise ValueError(
                f"correct_answer must match exactly one choice (question {self.id})"
            )
        return self


class Competition(BaseModel):
    id: str
    name: str | None = None


class SelectedQuestion(BaseModel):
    """
    Per-request projection of a pool Question for one competition.
    Field names follow the public response shape.
    """

    competition_question_id: int | str
    competition_id: str
    question_id: None = None
    source_question_id: int | str | None = None
    question_text: str
    choices: list[str]
    correct_answer: str
    explanation: str | None = None
    difficulty: Difficulty
    category: str | None = None
    question_order: int
    created_at: str | None = None


# --- Value Objects ---
@dataclass(frozen=True)
class DifficultyQuota:
    easy: int
    medium: int
    hard: int

    @property
    def total(self) -> int:
        return self.easy + self.medium + self.hard

    def for_difficulty(self, difficulty: Difficulty) -> int:
        return {
            Difficulty.EASY: self.easy,
            Difficulty.MEDIUM: self.medium,
            Difficulty.HARD: self.hard,
        }[difficulty]


@dataclass
class SelectionOutcome:
    """
    Result of the pure selection pipeline.
    `shortfall` maps a difficulty to how many questions its bucket lacked.
    """

    questions: list[SelectedQuestion]
    quota: DifficultyQuota
    shortfall: dict[Difficulty, int] = field(default_factory=dict)

    @property
    def is_short(self) -> bool:
        return any(missing > 0 for missing in self.shortfall.values())


# --- (Data Transfer Object) ---
@dataclass
class QuestionLoadResult:
    """
    What the service hands back to in-process callers.

    `ok` is False only when the pool could not be fetched, so an empty
    `questions` list with `ok=True` really means "nothing to play".
    """

    ok: bool
    questions: list[SelectedQuestion] = field(default_factory=list)
    reason: str | None = None
    shortfall: dict[Difficulty, int] = field(default_factory=dict)
