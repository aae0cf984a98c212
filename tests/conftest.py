import pytest

from tests.factories import create_pool
from trivia_league.competition.adapters.db_manager import DatabaseManager
from trivia_league.competition.adapters.sqlite_repository import (
    SQLiteCompetitionRepository,
)
from trivia_league.competition.domain.models import Competition, Difficulty, Question


@pytest.fixture
def sample_question():
    return Question(
        id=101,
        question_text="Which club won the first European Cup in 1956?",
        choices=["AC Milan", "Real Madrid", "Benfica", "Reims"],
        correct_answer="Real Madrid",
        difficulty=Difficulty.MEDIUM,
        category="European Cup",
        explanation="Real Madrid beat Reims 4-3 in Paris.",
        created_at="2025-01-01T10:00:00+00:00",
    )


@pytest.fixture
def full_pool():
    """50 questions per difficulty."""
    return create_pool(50, 50, 50)


@pytest.fixture
def in_memory_repo():
    """Returns a clean, empty in-memory repository."""
    db_manager = DatabaseManager(db_path=":memory:")
    repo = SQLiteCompetitionRepository(db_manager=db_manager)
    yield repo
    db_manager.close()


@pytest.fixture
def populated_repo(in_memory_repo, full_pool):
    """In-memory repo with a Starter League competition and a shared pool."""
    in_memory_repo.save_competition(Competition(id="c1", name="Starter League"))
    in_memory_repo.seed_questions(full_pool)
    return in_memory_repo
