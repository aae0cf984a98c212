import os
from enum import Enum
from typing import Final


class League(Enum):
    # Enum Member = ("Competition Name", question count)
    STARTER = ("Starter League", 15)
    PRO = ("Pro League", 20)
    ELITE = ("Elite League", 30)

    def __init__(self, label: str, question_count: int):
        self.label = label
        self.question_count = question_count

    @classmethod
    def get_question_count(cls, name: str | None) -> int:
        """Returns the question count for a competition name, or the default."""
        for league in cls:
            if league.label == name:
                return league.question_count
        return SelectionConfig.DEFAULT_QUESTION_COUNT

    @classmethod
    def all_labels(cls) -> list[str]:
        return [league.label for league in cls]


class SelectionConfig:
    # --- Quota ---
    DEFAULT_QUESTION_COUNT: Final[int] = 20
    EASY_RATIO: Final[float] = 0.4
    MEDIUM_RATIO: Final[float] = 0.4

    # --- Seeded Generator (Numerical Recipes LCG) ---
    LCG_MULTIPLIER: Final[int] = 1664525
    LCG_INCREMENT: Final[int] = 1013904223
    LCG_MODULUS: Final[int] = 2**32

    # --- Seed Purpose Tags ---
    FINAL_ORDER_TAG: Final[str] = "final"
    CHOICES_TAG: Final[str] = "choices"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Infrastructure settings, read from the environment at call time
    so tests can patch os.environ.
    """

    @staticmethod
    def use_sqlite() -> bool:
        return _env_flag("USE_SQLITE", True)

    @staticmethod
    def db_path() -> str:
        return os.getenv("QUIZ_DB_PATH", "data/trivia.db")

    @staticmethod
    def seed_file() -> str:
        return os.getenv("SEED_FILE", "data/seed_competition_questions.json")

    @staticmethod
    def supabase_url() -> str | None:
        return os.getenv("SUPABASE_URL")

    @staticmethod
    def supabase_key() -> str | None:
        return os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    @staticmethod
    def metrics_port() -> int:
        return int(os.getenv("METRICS_PORT", "8000"))
