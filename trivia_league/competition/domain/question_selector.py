import math

from trivia_league.competition.domain.models import (
    Difficulty,
    DifficultyQuota,
    Question,
    SelectedQuestion,
    SelectionOutcome,
)
from trivia_league.competition.domain.seeded_random import seeded_shuffle
from trivia_league.config import League, SelectionConfig
from trivia_league.shared.telemetry import Telemetry


def _round_half_away_from_zero(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_quota(target_count: int) -> DifficultyQuota:
    """
    Splits a target count into easy/medium/hard.
    Rounding losses land in `hard`, so the parts always sum to the target.

    Example:
        >>> compute_quota(15)
        DifficultyQuota(easy=6, medium=6, hard=3)
    """
    easy = _round_half_away_from_zero(target_count * SelectionConfig.EASY_RATIO)
    medium = _round_half_away_from_zero(target_count * SelectionConfig.MEDIUM_RATIO)
    return DifficultyQuota(easy=easy, medium=medium, hard=target_count - easy - medium)


def bucket_seed(competition_id: str, difficulty: Difficulty) -> str:
    return f"{competition_id}-{difficulty.value.lower()}"


def final_order_seed(competition_id: str) -> str:
    return f"{competition_id}-{SelectionConfig.FINAL_ORDER_TAG}"


def choices_seed(competition_id: str, question_id: int | str) -> str:
    return f"{competition_id}-{question_id}-{SelectionConfig.CHOICES_TAG}"


class StratifiedQuestionSelector:
    """
    Pure Domain Logic.
    Picks a difficulty-stratified subset of the pool and orders it
    identically for every participant of the same competition.
    """

    def __init__(self) -> None:
        self.telemetry = Telemetry("StratifiedQuestionSelector")

    def select(
        self,
        competition_id: str,
        pool: list[Question],
        competition_name: str | None = None,
    ) -> SelectionOutcome:
        target_count = League.get_question_count(competition_name)
        quota = compute_quota(target_count)

        # 1. Partition (pool order is preserved inside each bucket)
        buckets: dict[Difficulty, list[Question]] = {d: [] for d in Difficulty}
        for question in pool:
            buckets[question.difficulty].append(question)

        self.telemetry.log_info(
            "Difficulty Pools",
            competition_id=competition_id,
            easy=len(buckets[Difficulty.EASY]),
            medium=len(buckets[Difficulty.MEDIUM]),
            hard=len(buckets[Difficulty.HARD]),
        )

        # 2. Shuffle each bucket with its own seed and take its quota
        combined: list[Question] = []
        shortfall: dict[Difficulty, int] = {}
        for difficulty in Difficulty:
            wanted = quota.for_difficulty(difficulty)
            shuffled = seeded_shuffle(
                buckets[difficulty], bucket_seed(competition_id, difficulty)
            )
            taken = shuffled[:wanted]
            if len(taken) < wanted:
                shortfall[difficulty] = wanted - len(taken)
            combined.extend(taken)

        # 3. Interleave difficulties
        ordered = seeded_shuffle(combined, final_order_seed(competition_id))

        selected = [
            self._project(competition_id, question, order)
            for order, question in enumerate(ordered, start=1)
        ]

        if shortfall:
            self._report_shortfall(competition_id, quota, shortfall, len(selected))

        return SelectionOutcome(questions=selected, quota=quota, shortfall=shortfall)

    @staticmethod
    def _project(
        competition_id: str, question: Question, order: int
    ) -> SelectedQuestion:
        return SelectedQuestion(
            competition_question_id=question.id,
            competition_id=competition_id,
            question_id=None,
            source_question_id=question.source_question_id,
            question_text=question.question_text,
            choices=seeded_shuffle(
                question.choices, choices_seed(competition_id, question.id)
            ),
            correct_answer=question.correct_answer,
            explanation=question.explanation,
            difficulty=question.difficulty,
            category=question.category,
            question_order=order,
            created_at=question.created_at,
        )

    def _report_shortfall(
        self,
        competition_id: str,
        quota: DifficultyQuota,
        shortfall: dict[Difficulty, int],
        actual: int,
    ) -> None:
        for difficulty, missing in shortfall.items():
            Telemetry.record_shortfall(difficulty.value, missing)

        self.telemetry.log_warning(
            "Question quota shortfall",
            competition_id=competition_id,
            expected=quota.total,
            actual=actual,
            missing={d.value: n for d, n in shortfall.items()},
        )
