from unittest.mock import Mock

from src.preferences.domain.models import Locale, Theme
from src.preferences.domain.persistence import PreferencePersistence


def test_read_returns_none_when_key_absent(memory_store):
    persistence = PreferencePersistence(memory_store, "theme-key", Theme.parse)

    assert persistence.read() is None


def test_write_then_read_returns_member(memory_store):
    persistence = PreferencePersistence(memory_store, "theme-key", Theme.parse)

    persistence.write(Theme.DARK)

    assert memory_store.get("theme-key") == "dark"
    assert persistence.read() is Theme.DARK


def test_invalid_stored_value_is_treated_as_absent(memory_store):
    memory_store.set("locale-key", "xx-XX")
    persistence = PreferencePersistence(memory_store, "locale-key", Locale.parse)

    assert persistence.read() is None


def test_read_swallows_storage_failure(broken_store):
    persistence = PreferencePersistence(broken_store, "theme-key", Theme.parse)

    assert persistence.read() is None
    assert broken_store.get_calls == 1


def test_write_swallows_storage_failure(broken_store):
    persistence = PreferencePersistence(broken_store, "theme-key", Theme.parse)

    persistence.write(Theme.LIGHT)

    assert broken_store.set_calls == 1


def test_failures_are_logged_as_warnings(broken_store):
    persistence = PreferencePersistence(broken_store, "theme-key", Theme.parse)
    persistence.telemetry = Mock()

    persistence.read()
    persistence.write(Theme.DARK)

    assert persistence.telemetry.log_warning.call_count == 2


def test_write_stores_raw_string_not_enum_repr(memory_store):
    persistence = PreferencePersistence(memory_store, "locale-key", Locale.parse)

    persistence.write(Locale.ZH_CN)

    assert memory_store.get("locale-key") == "zh-CN"
