import pytest

from tests.factories import create_question
from trivia_league.competition.domain.models import Competition, Difficulty
from trivia_league.competition.domain.ports import PoolUnavailableError


class TestSQLiteRepository:
    def test_is_empty_returns_true_initially(self, in_memory_repo):
        assert in_memory_repo.is_empty() is True

    def test_seed_questions_inserts_data(self, in_memory_repo, sample_question):
        in_memory_repo.seed_questions([sample_question])

        assert in_memory_repo.is_empty() is False
        pool = in_memory_repo.get_question_pool("any")
        assert len(pool) == 1
        assert pool[0] == sample_question

    def test_get_competition(self, in_memory_repo):
        in_memory_repo.save_competition(Competition(id="c1", name="Elite League"))

        competition = in_memory_repo.get_competition("c1")

        assert competition == Competition(id="c1", name="Elite League")

    def test_get_competition_missing_returns_none(self, in_memory_repo):
        assert in_memory_repo.get_competition("nope") is None

    def test_save_competition_replaces_name(self, in_memory_repo):
        in_memory_repo.save_competition(Competition(id="c1", name="Pro League"))
        in_memory_repo.save_competition(Competition(id="c1", name="Elite League"))

        assert in_memory_repo.get_competition("c1").name == "Elite League"


class TestQuestionPool:
    def test_includes_own_and_shared_questions(self, in_memory_repo):
        in_memory_repo.seed_questions(
            [
                create_question("own", competition_id="c1"),
                create_question("shared", competition_id=None),
                create_question("other", competition_id="c2"),
            ]
        )

        ids = {q.id for q in in_memory_repo.get_question_pool("c1")}

        assert ids == {"own", "shared"}

    def test_excludes_disabled_questions(self, in_memory_repo):
        in_memory_repo.seed_questions(
            [
                create_question("on", status=True),
                create_question("off", status=False),
            ]
        )

        ids = [q.id for q in in_memory_repo.get_question_pool("c1")]

        assert ids == ["on"]

    def test_orders_by_created_at_then_id(self, in_memory_repo):
        in_memory_repo.seed_questions(
            [
                create_question("b", created_at="2025-01-02T00:00:00"),
                create_question("z", created_at="2025-01-01T00:00:00"),
                create_question("a", created_at="2025-01-02T00:00:00"),
            ]
        )

        ids = [q.id for q in in_memory_repo.get_question_pool("c1")]

        assert ids == ["z", "a", "b"]

    def test_order_does_not_depend_on_insert_order(self, in_memory_repo):
        questions = [
            create_question(f"q{i}", Difficulty.HARD, created_at=f"2025-01-{i + 1:02d}")
            for i in range(5)
        ]
        in_memory_repo.seed_questions(list(reversed(questions)))

        pool = in_memory_repo.get_question_pool("c1")

        assert [q.id for q in pool] == [q.id for q in questions]

    def test_skips_malformed_rows(self, in_memory_repo):
        in_memory_repo.seed_questions([create_question("good")])
        conn = in_memory_repo._get_connection()
        conn.execute(
            "INSERT INTO competition_questions "
            "(id, competition_id, difficulty, status, created_at, json_data) "
            "VALUES (?, NULL, 'Easy', 1, NULL, ?)",
            ("bad", '{"id": "bad", "question_text": "Q", "choices": ["a"], '
                    '"correct_answer": "zzz", "difficulty": "Easy"}'),
        )
        conn.commit()

        ids = [q.id for q in in_memory_repo.get_question_pool("c1")]

        assert ids == ["good"]

    def test_datastore_failure_raises_pool_unavailable(self, in_memory_repo):
        conn = in_memory_repo._get_connection()
        conn.execute("DROP TABLE competition_questions")

        with pytest.raises(PoolUnavailableError):
            in_memory_repo.get_question_pool("c1")

    def test_competition_lookup_failure_raises_pool_unavailable(self, in_memory_repo):
        conn = in_memory_repo._get_connection()
        conn.execute("DROP TABLE competitions")

        with pytest.raises(PoolUnavailableError):
            in_memory_repo.get_competition("c1")
