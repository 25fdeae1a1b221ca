import logging
import os

import streamlit as st

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
from prometheus_client import start_http_server

# --- Application Imports ---
from src.config import MixConfig
from src.dailymix.adapters.bundle_cache import StateBundleCache
from src.dailymix.adapters.db_manager import DatabaseManager
from src.dailymix.adapters.seeder import DataSeeder
from src.dailymix.adapters.sqlite_repository import SQLiteQuestionRepository
from src.dailymix.adapters.supabase_repository import SupabaseQuestionRepository
from src.dailymix.application.service import DailyQuestionService
from src.dailymix.domain.ports import IQuestionRepository
from src.dailymix.presentation.feedback import answer_feedback
from src.dailymix.presentation.state_provider import StreamlitStateProvider
from src.shared.telemetry import Telemetry

logger = logging.getLogger(__name__)


# --- 1. Observability ---
def configure_observability() -> None:
    """
    Sends traces and logs over OTLP when OTEL_EXPORTER_OTLP_* is configured
    and exposes Prometheus metrics on :8000.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    headers = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")

    if not endpoint or not headers:
        logger.warning("OTEL env vars not set. Telemetry stays local.")
        return

    resource = Resource.create({"service.name": "dailymix-app"})

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, headers=headers))
    )
    trace.set_tracer_provider(trace_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, headers=headers))
    )
    set_logger_provider(logger_provider)
    logging.getLogger().addHandler(
        LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    )

    try:
        start_http_server(8000)
        logger.info("Prometheus metrics server started on port 8000")
    except OSError:
        logger.warning("Prometheus port 8000 already in use (Streamlit reload).")


if "observability_configured" not in st.session_state:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
    )
    configure_observability()
    st.session_state.observability_configured = True


# --- 2. Composition Root ---
@st.cache_resource
def get_repository() -> IQuestionRepository:
    credentials = MixConfig.supabase_credentials()
    repo: IQuestionRepository
    if MixConfig.USE_SQLITE or credentials is None:
        repo = SQLiteQuestionRepository(DatabaseManager(MixConfig.SQLITE_PATH))
    else:
        repo = SupabaseQuestionRepository(*credentials)
    DataSeeder(repo).seed_if_empty(MixConfig.SEED_FILE)
    return repo


def get_service() -> DailyQuestionService:
    return DailyQuestionService(
        get_repository(), StateBundleCache(StreamlitStateProvider())
    )


# --- 3. Views ---
def render_finished() -> None:
    st.subheader("Nice work!")
    st.write("You finished today's session.")
    if st.button("Start over", use_container_width=True):
        st.session_state.play_index = 0
        st.session_state.play_feedback = None
        st.rerun()


def main() -> None:
    st.set_page_config(page_title=f"Play | {MixConfig.APP_TITLE}", layout="centered")
    Telemetry.start_trace()

    user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", ""))
    if not user_id:
        st.info("Enter a user id in the sidebar to load today's questions.")
        return
    if user_id != st.session_state.get("user_id"):
        st.session_state.user_id = user_id
        st.session_state.play_index = 0
        st.session_state.play_feedback = None

    service = get_service()
    try:
        bundle = service.get_daily_bundle(user_id)
    except Exception:
        logger.exception("Failed to load daily questions")
        st.error("Failed to load daily questions.")
        return

    idx: int = st.session_state.get("play_index", 0)
    total = len(bundle.questions)
    if idx >= total:
        render_finished()
        return

    question = bundle.questions[idx]
    feedback: str | None = st.session_state.get("play_feedback")

    st.title(f"Question {idx + 1} of {total}")
    st.caption(f"{question.subject} • {question.difficulty.value}")
    st.write(question.text)

    for key, text in question.options.items():
        if st.button(
            f"{key.value}. {text}",
            key=f"opt_{question.id}_{key.value}",
            disabled=feedback is not None,
            use_container_width=True,
        ):
            feedback_value, saved = answer_feedback(service, user_id, question, key)
            st.session_state.play_feedback = feedback_value
            st.session_state.play_save_failed = not saved
            st.rerun()

    if feedback == "correct":
        st.success("Correct!")
    elif feedback == "wrong":
        st.error(f"Incorrect. Correct answer is {question.correct_option.value}.")
    if feedback and question.reasoning:
        st.caption(question.reasoning)
    if feedback and st.session_state.get("play_save_failed"):
        st.warning("Your answer could not be saved.")

    label = "Finish" if idx == total - 1 else "Next"
    if st.button(label, disabled=feedback is None, type="primary"):
        st.session_state.play_index = idx + 1
        st.session_state.play_feedback = None
        st.rerun()


if __name__ == "__main__":
    main()
