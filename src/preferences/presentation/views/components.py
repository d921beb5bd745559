import streamlit as st

from src.preferences.domain.models import Locale
from src.preferences.presentation.viewmodel import PreferencesViewModel
from src.shared.telemetry import Telemetry

_PALETTES = {
    "dark": {"bg": "#0e1117", "fg": "#fafafa", "card": "#262730"},
    "": {"bg": "#ffffff", "fg": "#31333f", "card": "#f0f2f6"},
}


def apply_theme_styles(vm: PreferencesViewModel) -> None:
    palette = _PALETTES[vm.root_css_class]
    st.markdown(
        f"""
        <style>
            .stApp {{ background-color: {palette["bg"]}; color: {palette["fg"]}; }}
            .pref-card {{ padding: 10px; background-color: {palette["card"]}; border-radius: 5px; }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_preference_controls(vm: PreferencesViewModel) -> tuple[bool, Locale]:
    st.sidebar.header("⚙️ Preferences")

    toggle = st.sidebar.button(f"{vm.theme.icon} Toggle theme")

    locales = vm.available_locales
    locale = st.sidebar.selectbox(
        "Language",
        locales,
        index=locales.index(vm.locale),
        format_func=lambda loc: loc.label,
    )

    source = "system" if vm.follows_system else "pinned"
    st.sidebar.caption(f"Theme: {vm.theme.value} ({source})")

    return toggle, locale


def render_snapshots(vm: PreferencesViewModel) -> None:
    with st.expander("🕵️‍♂️ Preference state"):
        for snapshot in vm.context.snapshots():
            st.json(snapshot.model_dump())
        st.caption("Trace ID: " + Telemetry.get_trace_id())
