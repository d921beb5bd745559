import pytest
import streamlit as st

from src.preferences.adapters.session_store import SessionKeyValueStore
from src.preferences.adapters.system_signals import ManualLocaleSignal, ManualThemeSignal
from src.preferences.domain.ports import IKeyValueStore
from src.preferences.presentation.state_provider import DictStateProvider


class MockSessionState(dict):
    """
    Mock for st.session_state that behaves like both a dict and an object.
    Allows both dict-style and attribute-style access.
    """

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as err:
            raise AttributeError(
                f"'MockSessionState' object has no attribute '{name}'"
            ) from err

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        try:
            del self[name]
        except KeyError as err:
            raise AttributeError(
                f"'MockSessionState' object has no attribute '{name}'"
            ) from err


class BrokenStore(IKeyValueStore):
    """Storage that is never available (private mode, quota exceeded...)."""

    def __init__(self):
        self.get_calls = 0
        self.set_calls = 0

    def get(self, key):
        self.get_calls += 1
        raise OSError("storage unavailable")

    def set(self, key, value):
        self.set_calls += 1
        raise OSError("quota exceeded")


@pytest.fixture(autouse=True)
def mock_streamlit_session():
    """
    Auto-use fixture that ensures st.session_state exists for all tests.
    """
    original_session_state = getattr(st, "session_state", None)

    st.session_state = MockSessionState()

    yield st.session_state

    st.session_state.clear()

    if original_session_state is not None:
        st.session_state = original_session_state


@pytest.fixture
def memory_store():
    """A clean, empty in-memory key/value store."""
    return SessionKeyValueStore(DictStateProvider())


@pytest.fixture
def broken_store():
    return BrokenStore()


@pytest.fixture
def theme_signal():
    return ManualThemeSignal()


@pytest.fixture
def locale_signal():
    return ManualLocaleSignal()
