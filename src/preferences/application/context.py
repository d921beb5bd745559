import uuid
from dataclasses import dataclass, field

from src.config import PreferenceConfig, SignalSource, StorageBackend
from src.preferences.adapters.db_manager import DatabaseManager
from src.preferences.adapters.session_store import SessionKeyValueStore
from src.preferences.adapters.sqlite_store import SQLiteKeyValueStore
from src.preferences.adapters.system_signals import (
    EnvLocaleSignal,
    OsThemeSignal,
    PolledSignal,
    StreamlitLocaleSignal,
    StreamlitThemeSignal,
)
from src.preferences.domain.models import Locale, PreferenceSnapshot, Theme
from src.preferences.domain.persistence import PreferencePersistence
from src.preferences.domain.ports import IKeyValueStore, ISystemSignal
from src.preferences.domain.reconciler import LocaleStore, ThemeStore
from src.preferences.presentation.state_provider import IStateProvider
from src.shared.telemetry import Telemetry


@dataclass
class PreferenceContext:
    """
    The one place preference state lives for a session.
    Built once at startup and handed to every consumer.
    """

    theme: ThemeStore
    locale: LocaleStore
    telemetry: Telemetry = field(default_factory=lambda: Telemetry("PreferenceContext"))

    def init_preferences(self) -> None:
        Telemetry.start_trace()
        self.theme.init_preference()
        self.locale.init_preference()
        self.telemetry.log_info(
            "Preferences ready",
            theme=self.theme.value.value,
            locale=self.locale.value.value,
            theme_follows_system=self.theme.follows_system,
        )

    def poll_system_signals(self) -> bool:
        """
        Delivers pending system theme changes. Returns True if the signal
        moved; the theme store decides whether that still matters.
        """
        signal = self.theme.signal
        if isinstance(signal, PolledSignal):
            return signal.poll()
        return False

    def snapshots(self) -> list[PreferenceSnapshot]:
        return [self.theme.snapshot(), self.locale.snapshot()]


def create_preference_context(
    store: IKeyValueStore,
    theme_signal: ISystemSignal[Theme],
    locale_signal: ISystemSignal[Locale],
    config: PreferenceConfig | None = None,
) -> PreferenceContext:
    config = config or PreferenceConfig()
    theme_persistence = PreferencePersistence(
        store, config.THEME_STORAGE_KEY, Theme.parse
    )
    locale_persistence = PreferencePersistence(
        store, config.LOCALE_STORAGE_KEY, Locale.parse
    )
    return PreferenceContext(
        theme=ThemeStore(
            theme_persistence, theme_signal, default=Theme(config.FALLBACK_THEME)
        ),
        locale=LocaleStore(
            locale_persistence, locale_signal, default=Locale(config.FALLBACK_LOCALE)
        ),
    )


def resolve_visitor_id(state_provider: IStateProvider) -> str:
    """
    Returns the id that scopes this visitor's durable rows, minting one on
    first use. Hosts that can remember a browser (a query param, a cookie)
    seed it into the state provider before calling build_store.
    """
    visitor_id = state_provider.get(PreferenceConfig.VISITOR_ID_KEY)
    if not isinstance(visitor_id, str) or not visitor_id:
        visitor_id = uuid.uuid4().hex
        state_provider.set(PreferenceConfig.VISITOR_ID_KEY, visitor_id)
    return visitor_id


def build_store(
    config: PreferenceConfig,
    state_provider: IStateProvider,
    db_manager: DatabaseManager | None = None,
) -> IKeyValueStore:
    """
    Picks the key/value backend. A DatabaseManager passed in is shared and
    owned by the caller; otherwise one is opened for config.db_path.
    """
    session_store = SessionKeyValueStore(state_provider, prefix=config.SESSION_KEY_PREFIX)
    if config.storage_backend is StorageBackend.SESSION:
        return session_store

    try:
        db = db_manager or DatabaseManager(config.db_path)
        return SQLiteKeyValueStore(db, scope=resolve_visitor_id(state_provider))
    except Exception as e:
        # e.g. read-only filesystem: keep working for this session only
        Telemetry("PreferenceContext").log_warning(
            "SQLite storage unavailable, falling back to session storage",
            e,
            db_path=config.db_path,
        )
        return session_store


def build_signals(
    config: PreferenceConfig,
) -> tuple[ISystemSignal[Theme], ISystemSignal[Locale]]:
    if config.signal_source is SignalSource.OS:
        return OsThemeSignal(), EnvLocaleSignal()
    return StreamlitThemeSignal(), StreamlitLocaleSignal()
