import os
import logging
import streamlit as st

# --- OTel & Observability Imports ---
from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource

# --- OTel Logging Imports ---
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter

# --- Prometheus Import ---
from prometheus_client import start_http_server

# --- Application Imports ---
from src.config import PreferenceConfig, StorageBackend
from src.preferences.adapters.db_manager import DatabaseManager
from src.preferences.application.context import (
    PreferenceContext,
    build_signals,
    build_store,
    create_preference_context,
    resolve_visitor_id,
)
from src.preferences.presentation.state_provider import StreamlitStateProvider
from src.preferences.presentation.viewmodel import PreferencesViewModel
from src.preferences.presentation.views import components


# --- 1. Configure Observability ---
def configure_observability():
    """
    Sends traces and logs over OTLP when the OTEL_* variables are set,
    and exposes Prometheus metrics on port 8000.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    headers = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")

    if not endpoint or not headers:
        logging.warning("OTEL env vars not set. Telemetry will not be exported.")
        return

    resource = Resource.create({"service.name": "preference-center"})

    # --- A. TRACING SETUP ---
    trace_provider = TracerProvider(resource=resource)
    otlp_trace_exporter = OTLPSpanExporter(endpoint=endpoint, headers=headers)
    trace_provider.add_span_processor(BatchSpanProcessor(otlp_trace_exporter))
    trace.set_tracer_provider(trace_provider)

    # --- B. LOGGING SETUP ---
    logger_provider = LoggerProvider(resource=resource)
    otlp_log_exporter = OTLPLogExporter(endpoint=endpoint, headers=headers)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(otlp_log_exporter))
    set_logger_provider(logger_provider)

    handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)

    # --- C. METRICS SETUP (Prometheus) ---
    try:
        start_http_server(8000)
        logging.info("Prometheus metrics server started on port 8000")
    except OSError:
        logging.warning("Prometheus port 8000 already in use (likely Streamlit reload). Skipping.")


# --- 2. Bootstrap Application ---
if "observability_configured" not in st.session_state:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')

    configure_observability()
    st.session_state.observability_configured = True


# --- 3. Composition Root (one context per session) ---
@st.cache_resource
def get_database(db_path: str) -> DatabaseManager:
    # One connection for the whole server; rows are scoped per visitor
    return DatabaseManager(db_path)


def _seed_visitor_id(state_provider: StreamlitStateProvider) -> None:
    """Carries the visitor id in the URL so a reload finds the same rows."""
    param = PreferenceConfig.VISITOR_QUERY_PARAM
    visitor_id = st.query_params.get(param)
    if visitor_id:
        state_provider.set(PreferenceConfig.VISITOR_ID_KEY, visitor_id)
    else:
        st.query_params[param] = resolve_visitor_id(state_provider)


def get_context() -> PreferenceContext:
    state_provider = StreamlitStateProvider()
    if not state_provider.contains("preference_context"):
        config = PreferenceConfig.from_env()
        db_manager = None
        if config.storage_backend is StorageBackend.SQLITE:
            _seed_visitor_id(state_provider)
            try:
                db_manager = get_database(config.db_path)
            except Exception as e:
                # build_store logs and falls back to session storage
                logging.warning("Shared database unavailable: %s", e)
        theme_signal, locale_signal = build_signals(config)
        store = build_store(config, state_provider, db_manager)
        context = create_preference_context(store, theme_signal, locale_signal, config)
        context.init_preferences()
        state_provider.set("preference_context", context)
    return state_provider.get("preference_context")


def main():
    st.set_page_config(page_title=PreferenceConfig.APP_TITLE, layout="centered")

    context = get_context()
    # The browser theme may have changed since the last rerun
    context.poll_system_signals()

    vm = PreferencesViewModel(context)
    components.apply_theme_styles(vm)

    toggle, locale = components.render_preference_controls(vm)
    if toggle:
        vm.toggle_theme()
        st.rerun()
    if locale is not vm.locale:
        vm.select_locale(locale)
        st.rerun()

    st.title(PreferenceConfig.APP_TITLE)
    st.markdown(
        f'<div class="pref-card">{vm.theme.icon} {vm.theme.value} · {vm.locale.label}</div>',
        unsafe_allow_html=True,
    )
    components.render_snapshots(vm)


if __name__ == "__main__":
    main()
