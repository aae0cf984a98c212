from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from trivia_league.competition.application.service import CompetitionQuestionService
from trivia_league.shared.telemetry import Telemetry

telemetry = Telemetry("API")


class CompetitionQuestionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    competition_id: str | None = Field(default=None, alias="competitionId")


def _empty() -> JSONResponse:
    return JSONResponse({"questions": []})


def create_app(service: CompetitionQuestionService) -> FastAPI:
    app = FastAPI(title="Trivia League Questions")

    @app.get("/health")
    def health():
        return JSONResponse({"status": "ok"})

    @app.post("/api/competition-questions")
    async def competition_questions(request: Request):
        Telemetry.start_trace()
        try:
            raw = await request.json()
        except ValueError as e:
            telemetry.log_error("Unreadable request body", e)
            return _empty()

        try:
            body = CompetitionQuestionsRequest.model_validate(raw)
        except ValidationError as e:
            telemetry.log_error("Invalid request body", e)
            return _empty()

        try:
            # Blocking datastore I/O stays off the event loop
            questions = await run_in_threadpool(
                service.get_competition_questions, body.competition_id
            )
        except Exception as e:
            # Best-effort read path: the caller always gets a list
            telemetry.log_error(
                "Failed to build competition questions",
                e,
                competition_id=body.competition_id,
            )
            return _empty()

        return JSONResponse({"questions": questions})

    return app
