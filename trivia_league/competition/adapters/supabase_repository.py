from typing import Any, cast

from postgrest.exceptions import APIError
from pydantic import ValidationError

from supabase import Client, create_client
from trivia_league.competition.domain.models import Competition, Question
from trivia_league.competition.domain.ports import (
    ICompetitionRepository,
    PoolUnavailableError,
)
from trivia_league.shared.telemetry import Telemetry, measure_time


def _pool_order_key(row: dict[str, Any]) -> tuple[str, str]:
    return (str(row.get("created_at") or ""), str(row.get("id")))


def _quote_filter_value(value: str) -> str:
    """Double-quotes a value for a PostgREST logic filter such as `or=(...)`."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseCompetitionRepository(ICompetitionRepository):
    def __init__(self, url: str, key: str, client: Client | None = None) -> None:
        self.telemetry = Telemetry("SupabaseRepository")
        if client is not None:
            self.client = client
            return
        try:
            self.client = create_client(url, key)
        except Exception as e:
            self.telemetry.log_error("Failed to initialize Supabase client", e)
            raise

    def is_empty(self) -> bool:
        """
        Used by DataSeeder to check if we need to parse the JSON and upload.
        """
        try:
            response = (
                self.client.table("competition_questions")
                .select("id")
                .limit(1)
                .execute()
            )
            return not response.data
        except APIError as e:
            self.telemetry.log_error("is_empty check failed", e)
            return True

    @measure_time("sb_get_competition")
    def get_competition(self, competition_id: str) -> Competition | None:
        try:
            response = (
                self.client.table("competitions")
                .select("id, name")
                .eq("id", competition_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            self.telemetry.log_error(f"get_competition failed for {competition_id}", e)
            raise PoolUnavailableError(str(e)) from e

        data = cast(list[dict[str, Any]], response.data)
        if not data:
            return None
        row = data[0]
        return Competition(id=str(row["id"]), name=row.get("name"))

    @measure_time("sb_get_question_pool")
    def get_question_pool(self, competition_id: str) -> list[Question]:
        try:
            response = (
                self.client.table("competition_questions")
                .select("*")
                .or_(
                    f"competition_id.eq.{_quote_filter_value(competition_id)},"
                    "competition_id.is.null"
                )
                .eq("status", True)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            self.telemetry.log_error(
                f"get_question_pool failed for {competition_id}", e
            )
            raise PoolUnavailableError(str(e)) from e

        data = cast(list[dict[str, Any]], response.data or [])
        # Ties on created_at would otherwise come back in arbitrary order
        data.sort(key=_pool_order_key)

        pool = []
        for row in data:
            try:
                pool.append(Question.model_validate(row))
            except ValidationError as e:
                self.telemetry.log_error(f"Skipping malformed question {row.get('id')}", e)

        self.telemetry.log_info(
            "Pool fetched", competition_id=competition_id, rows=len(pool)
        )
        return pool

    def seed_questions(self, questions: list[Question]) -> None:
        """
        Upserts the list of Questions (from JSON) to Supabase.
        """
        try:
            data: list[dict[str, Any]] = [
                q.model_dump(mode="json") for q in questions
            ]

            # Upsert in chunks of 100 to prevent payload size issues
            chunk_size = 100
            for i in range(0, len(data), chunk_size):
                chunk = data[i : i + chunk_size]
                self.client.table("competition_questions").upsert(chunk).execute()

            self.telemetry.log_info(f"Seeded {len(questions)} questions to Supabase")
        except APIError as e:
            self.telemetry.log_error("seed_questions failed", e)

    def save_competition(self, competition: Competition) -> None:
        self.client.table("competitions").upsert(
            competition.model_dump(mode="json")
        ).execute()
