import logging
import os

import uvicorn

# --- OTel & Observability Imports ---
from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

# --- Prometheus Import ---
from prometheus_client import start_http_server

# --- Application Imports ---
from trivia_league.api import create_app
from trivia_league.competition.adapters.db_manager import DatabaseManager
from trivia_league.competition.adapters.seeder import DataSeeder
from trivia_league.competition.adapters.sqlite_repository import (
    SQLiteCompetitionRepository,
)
from trivia_league.competition.adapters.supabase_repository import (
    SupabaseCompetitionRepository,
)
from trivia_league.competition.application.service import CompetitionQuestionService
from trivia_league.competition.domain.ports import ICompetitionRepository
from trivia_league.config import Settings

logger = logging.getLogger("app")


# --- 1. Configure Observability ---
def configure_observability() -> None:
    """
    Sends Traces and Logs via OTLP when configured.
    Starts a background Prometheus server for Metrics.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    headers = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")

    if endpoint and headers:
        resource = Resource.create({"service.name": "trivia-league-questions"})

        # --- A. TRACING SETUP ---
        trace_provider = TracerProvider(resource=resource)
        otlp_trace_exporter = OTLPSpanExporter(endpoint=endpoint, headers=headers)
        trace_provider.add_span_processor(BatchSpanProcessor(otlp_trace_exporter))
        trace.set_tracer_provider(trace_provider)

        # --- B. LOGGING SETUP ---
        logger_provider = LoggerProvider(resource=resource)
        otlp_log_exporter = OTLPLogExporter(endpoint=endpoint, headers=headers)
        logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(otlp_log_exporter)
        )
        set_logger_provider(logger_provider)

        handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
        logging.getLogger().addHandler(handler)
    else:
        logger.warning("OTEL env vars not set. Telemetry stays local.")

    # --- C. METRICS SETUP (Prometheus) ---
    port = Settings.metrics_port()
    try:
        start_http_server(port)
        logger.info("Prometheus metrics server started on port %s", port)
    except OSError:
        logger.warning("Prometheus port %s already in use. Skipping.", port)


# --- 2. Dependency Injection (Composition Root) ---
def build_repository() -> ICompetitionRepository:
    url, key = Settings.supabase_url(), Settings.supabase_key()
    repo: ICompetitionRepository
    if not Settings.use_sqlite() and url and key:
        repo = SupabaseCompetitionRepository(url, key)
    else:
        repo = SQLiteCompetitionRepository(DatabaseManager(Settings.db_path()))
    DataSeeder(repo).seed_if_empty(Settings.seed_file())
    return repo


def build_service() -> CompetitionQuestionService:
    return CompetitionQuestionService(build_repository())


def main() -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
    )
    configure_observability()
    uvicorn.run(create_app(build_service()), host="0.0.0.0", port=8080)


if __name__ == "__main__":
    main()
