from trivia_league.competition.domain.models import QuestionLoadResult
from trivia_league.competition.domain.ports import (
    ICompetitionRepository,
    PoolUnavailableError,
)
from trivia_league.competition.domain.question_selector import (
    StratifiedQuestionSelector,
)
from trivia_league.shared.telemetry import Telemetry, measure_time


class CompetitionQuestionService:
    """
    Read path for a competition's question set.
    Never raises: every failure becomes a QuestionLoadResult.
    """

    def __init__(
        self,
        repo: ICompetitionRepository,
        selector: StratifiedQuestionSelector | None = None,
    ) -> None:
        self.repo = repo
        self.selector = selector or StratifiedQuestionSelector()
        self.telemetry = Telemetry("CompetitionQuestionService")

    @property
    def repository(self) -> ICompetitionRepository:
        return self.repo

    @measure_time("load_competition_questions")
    def load_questions(self, competition_id: str | None) -> QuestionLoadResult:
        if not competition_id:
            self.telemetry.log_info("No competition id supplied")
            return QuestionLoadResult(ok=True, reason="missing_competition_id")

        try:
            competition = self.repo.get_competition(competition_id)
            pool = self.repo.get_question_pool(competition_id)
        except PoolUnavailableError as e:
            self.telemetry.log_error(
                "Question pool unavailable", e, competition_id=competition_id
            )
            return QuestionLoadResult(ok=False, reason="pool_unavailable")

        name = competition.name if competition else None
        outcome = self.selector.select(competition_id, pool, name)

        if not outcome.questions:
            self.telemetry.log_info(
                "No questions selected", competition_id=competition_id
            )

        self.telemetry.log_info(
            "Questions Selected",
            competition_id=competition_id,
            expected=outcome.quota.total,
            actual=len(outcome.questions),
        )
        return QuestionLoadResult(
            ok=True,
            questions=outcome.questions,
            reason="quota_shortfall" if outcome.is_short else None,
            shortfall=outcome.shortfall,
        )

    def get_competition_questions(self, competition_id: str | None) -> list[dict]:
        """
        Public response body: `{"questions": [...]}` semantics, failures
        collapse to an empty list.
        """
        result = self.load_questions(competition_id)
        return [q.model_dump(mode="json") for q in result.questions]
