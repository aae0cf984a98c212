from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from tests.factories import create_question
from trivia_league.competition.adapters.supabase_repository import (
    SupabaseCompetitionRepository,
)
from trivia_league.competition.domain.models import Competition, Difficulty
from trivia_league.competition.domain.ports import PoolUnavailableError


def make_row(id, created_at=None, difficulty="Easy", correct="A"):
    return {
        "id": id,
        "competition_id": None,
        "question_id": None,
        "source_question_id": 12,
        "question_text": f"Question {id}",
        "choices": ["A", "B", "C"],
        "correct_answer": correct,
        "explanation": "",
        "difficulty": difficulty,
        "category": "World Cup",
        "status": True,
        "created_at": created_at,
        "times_used": 3,
    }


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def repo(client):
    return SupabaseCompetitionRepository(
        "https://example.supabase.co", "key", client=client
    )


def pool_query(client):
    return (
        client.table.return_value.select.return_value.or_.return_value.eq.return_value.order.return_value
    )


class TestGetQuestionPool:
    def test_filters_owner_or_shared_and_active(self, repo, client):
        pool_query(client).execute.return_value = MagicMock(data=[])

        repo.get_question_pool("c1")

        client.table.assert_called_with("competition_questions")
        table = client.table.return_value
        table.select.assert_called_once_with("*")
        table.select.return_value.or_.assert_called_once_with(
            'competition_id.eq."c1",competition_id.is.null'
        )
        table.select.return_value.or_.return_value.eq.assert_called_once_with(
            "status", True
        )

    @pytest.mark.parametrize(
        "competition_id, expected",
        [
            ("c1),id.neq.0,(x", 'competition_id.eq."c1),id.neq.0,(x",competition_id.is.null'),
            ('a"b\\c', 'competition_id.eq."a\\"b\\\\c",competition_id.is.null'),
        ],
    )
    def test_competition_id_is_quoted_in_filter(
        self, repo, client, competition_id, expected
    ):
        """Reserved characters in the id cannot widen the owner filter."""
        pool_query(client).execute.return_value = MagicMock(data=[])

        repo.get_question_pool(competition_id)

        or_filter = client.table.return_value.select.return_value.or_
        or_filter.assert_called_once_with(expected)

    def test_maps_rows_and_breaks_created_at_ties_by_id(self, repo, client):
        pool_query(client).execute.return_value = MagicMock(
            data=[
                make_row("b", "2025-01-02"),
                make_row("a", "2025-01-02", difficulty="Hard"),
                make_row("z", "2025-01-01"),
            ]
        )

        pool = repo.get_question_pool("c1")

        assert [q.id for q in pool] == ["z", "a", "b"]
        assert pool[1].difficulty is Difficulty.HARD
        assert pool[0].source_question_id == 12

    def test_skips_malformed_rows(self, repo, client):
        pool_query(client).execute.return_value = MagicMock(
            data=[make_row("ok"), make_row("broken", correct="Z")]
        )

        assert [q.id for q in repo.get_question_pool("c1")] == ["ok"]

    def test_none_data_is_empty_pool(self, repo, client):
        pool_query(client).execute.return_value = MagicMock(data=None)
        assert repo.get_question_pool("c1") == []

    def test_client_error_raises_pool_unavailable(self, repo, client):
        pool_query(client).execute.side_effect = ConnectionError("timeout")

        with pytest.raises(PoolUnavailableError):
            repo.get_question_pool("c1")


class TestIsEmpty:
    def is_empty_query(self, client):
        return client.table.return_value.select.return_value.limit.return_value

    def test_true_without_rows(self, repo, client):
        self.is_empty_query(client).execute.return_value = MagicMock(data=[])
        assert repo.is_empty() is True

    def test_false_with_rows(self, repo, client):
        self.is_empty_query(client).execute.return_value = MagicMock(data=[{"id": "q1"}])

        assert repo.is_empty() is False
        client.table.assert_called_with("competition_questions")

    def test_api_error_counts_as_empty(self, repo, client):
        self.is_empty_query(client).execute.side_effect = APIError(
            {"message": "relation does not exist", "code": "42P01"}
        )

        assert repo.is_empty() is True


class TestGetCompetition:
    def competition_query(self, client):
        return client.table.return_value.select.return_value.eq.return_value.limit.return_value

    def test_returns_competition(self, repo, client):
        self.competition_query(client).execute.return_value = MagicMock(
            data=[{"id": "c1", "name": "Pro League"}]
        )

        assert repo.get_competition("c1") == Competition(id="c1", name="Pro League")

    def test_missing_returns_none(self, repo, client):
        self.competition_query(client).execute.return_value = MagicMock(data=[])
        assert repo.get_competition("c1") is None

    def test_error_raises_pool_unavailable(self, repo, client):
        self.competition_query(client).execute.side_effect = RuntimeError("503")

        with pytest.raises(PoolUnavailableError):
            repo.get_competition("c1")


class TestWrites:
    def test_seed_questions_upserts_in_chunks(self, repo, client):
        repo.seed_questions([create_question(f"q{i}") for i in range(250)])

        upsert = client.table.return_value.upsert
        assert upsert.call_count == 3
        assert len(upsert.call_args_list[0].args[0]) == 100
        assert len(upsert.call_args_list[2].args[0]) == 50

    def test_save_competition(self, repo, client):
        repo.save_competition(Competition(id="c1", name="Elite League"))

        client.table.assert_called_with("competitions")
        client.table.return_value.upsert.assert_called_once_with(
            {"id": "c1", "name": "Elite League"}
        )
