from abc import ABC, abstractmethod

from trivia_league.competition.domain.models import Competition, Question


class PoolUnavailableError(Exception):
    """The datastore could not be reached or answered with an error."""


class ICompetitionRepository(ABC):
    @abstractmethod
    def get_competition(self, competition_id: str) -> Competition | None:
        """
        Returns None when no such competition exists.
        Raises PoolUnavailableError when the lookup itself fails.
        """
        pass

    @abstractmethod
    def get_question_pool(self, competition_id: str) -> list[Question]:
        """
        Active (`status = true`) questions owned by the competition or shared
        (no owner), oldest first. Raises PoolUnavailableError on failure.
        """
        pass

    @abstractmethod
    def seed_questions(self, questions: list[Question]) -> None:
        pass

    @abstractmethod
    def save_competition(self, competition: Competition) -> None:
        pass
