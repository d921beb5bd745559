# ==============================================================================
# Presentation layer: the streamlit module is mocked, only view logic is checked.
# ==============================================================================
from unittest.mock import patch

import pytest

from src.preferences.adapters.system_signals import ManualLocaleSignal, ManualThemeSignal
from src.preferences.application.context import create_preference_context
from src.preferences.domain.models import Locale, Theme
from src.preferences.presentation.viewmodel import PreferencesViewModel
from src.preferences.presentation.views import components


@pytest.fixture
def vm(memory_store):
    context = create_preference_context(
        memory_store, ManualThemeSignal(Theme.DARK), ManualLocaleSignal(Locale.EN_US)
    )
    context.init_preferences()
    return PreferencesViewModel(context)


@pytest.fixture
def mock_st():
    with patch("src.preferences.presentation.views.components.st") as mock_st:
        yield mock_st


def test_dark_styles_injected_for_dark_theme(vm, mock_st):
    components.apply_theme_styles(vm)

    css = mock_st.markdown.call_args.args[0]
    assert "#0e1117" in css


def test_light_styles_injected_after_toggle(vm, mock_st):
    vm.toggle_theme()

    components.apply_theme_styles(vm)

    css = mock_st.markdown.call_args.args[0]
    assert "#ffffff" in css


def test_controls_report_toggle_and_locale(vm, mock_st):
    mock_st.sidebar.button.return_value = True
    mock_st.sidebar.selectbox.return_value = Locale.ZH_CN

    toggle, locale = components.render_preference_controls(vm)

    assert toggle is True
    assert locale is Locale.ZH_CN
    # Current locale is preselected
    assert mock_st.sidebar.selectbox.call_args.kwargs["index"] == 1


def test_controls_caption_shows_tracking_source(vm, mock_st):
    components.render_preference_controls(vm)
    assert "(system)" in mock_st.sidebar.caption.call_args.args[0]

    vm.toggle_theme()
    components.render_preference_controls(vm)
    assert "(pinned)" in mock_st.sidebar.caption.call_args.args[0]
