import os
from enum import Enum
from typing import Final


class StorageBackend(str, Enum):
    SQLITE = "sqlite"  # Durable, rows scoped per visitor id
    SESSION = "session"  # Streamlit session state only (default)


class SignalSource(str, Enum):
    BROWSER = "browser"  # st.context (the visitor's browser)
    OS = "os"  # The host machine running the app


def _getenv(key: str, default: str) -> str:
    """Return the environment value, or the default if unset or blank."""
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return value.strip()


class PreferenceConfig:
    # --- App Identity ---
    APP_TITLE = "Preference Center"

    # --- Storage Keys (one per preference kind) ---
    THEME_STORAGE_KEY: Final[str] = "vscode-plugin-theme"
    LOCALE_STORAGE_KEY: Final[str] = "vscode-plugin-locale"

    # --- Fixed fallbacks when the system signal is unavailable ---
    FALLBACK_THEME: Final[str] = "light"
    FALLBACK_LOCALE: Final[str] = "en-US"

    # --- Session state namespace for the session backend ---
    SESSION_KEY_PREFIX: Final[str] = "pref:"

    # --- Visitor scope for the sqlite backend ---
    VISITOR_ID_KEY: Final[str] = "visitor_id"
    VISITOR_QUERY_PARAM: Final[str] = "visitor"

    def __init__(
        self,
        storage_backend: StorageBackend | None = None,
        db_path: str | None = None,
        signal_source: SignalSource | None = None,
    ) -> None:
        self.storage_backend = storage_backend or StorageBackend(
            _getenv("PREFS_STORAGE_BACKEND", StorageBackend.SESSION.value).lower()
        )
        self.db_path = db_path or _getenv("PREFS_DB_PATH", "data/preferences.db")
        self.signal_source = signal_source or SignalSource(
            _getenv("PREFS_SIGNAL_SOURCE", SignalSource.BROWSER.value).lower()
        )

    @classmethod
    def from_env(cls) -> "PreferenceConfig":
        """Builds the config from PREFS_* environment variables."""
        return cls()
