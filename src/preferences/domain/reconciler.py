from collections.abc import Callable
from typing import Any, Generic, TypeVar

from src.preferences.domain.models import Locale, PreferenceSnapshot, Theme
from src.preferences.domain.observable import Observable
from src.preferences.domain.persistence import PreferencePersistence
from src.preferences.domain.ports import ISystemSignal, IWatchableSignal, Unsubscribe
from src.shared.telemetry import Telemetry, measure_time, record_preference_change

T = TypeVar("T")


class PreferenceStore(Generic[T]):
    """
    Owns the current value of one preference kind and its `follows_system`
    flag. No other component mutates either.

    Precedence at startup: stored value > system signal > signal fallback.
    """

    kind: str = "preference"
    # Only kinds that opt in re-read the system signal after startup
    tracks_system_changes: bool = False

    def __init__(
        self,
        persistence: PreferencePersistence[T],
        signal: ISystemSignal[T],
        parse: Callable[[Any], T | None],
        default: T,
    ) -> None:
        self.persistence = persistence
        self.signal = signal
        self._parse = parse
        self._current: Observable[T] = Observable(default, name=f"{self.kind}.value")
        self._follows_system = False
        self._initialized = False
        self._unsubscribe: Unsubscribe | None = None
        self.telemetry = Telemetry(self.__class__.__name__)

    # --- Reactive read ---
    @property
    def value(self) -> T:
        return self._current.value

    @property
    def follows_system(self) -> bool:
        return self._follows_system

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def is_tracking(self) -> bool:
        """True while a system-signal subscription is registered."""
        return self._unsubscribe is not None

    def observe(self, listener: Callable[[T], None]) -> Unsubscribe:
        return self._current.subscribe(listener)

    def snapshot(self) -> PreferenceSnapshot:
        value = self.value
        return PreferenceSnapshot(
            kind=self.kind,
            value=getattr(value, "value", str(value)),
            follows_system=self._follows_system,
            initialized=self._initialized,
        )

    # --- Actions ---
    @measure_time("init_preference")
    def init_preference(self) -> T:
        if self._initialized:
            self.telemetry.log_info(
                "Already initialized, keeping current value", kind=self.kind
            )
            return self.value

        stored = self.persistence.read()
        if stored is not None:
            value = stored
            self._follows_system = False
        else:
            value = self.signal.current_value()
            self._follows_system = True

        self._initialized = True
        self._apply(value, source="init")

        if self._follows_system:
            self._start_tracking()

        self.telemetry.log_info(
            "Preference initialized",
            kind=self.kind,
            value=value.value,
            follows_system=self._follows_system,
        )
        return value

    def set_preference(self, value: T | str) -> T:
        parsed = self._parse(value)
        if parsed is None:
            raise ValueError(f"Unsupported {self.kind} value: {value!r}")

        # Pin first, so nothing system-driven can land after we return
        self._follows_system = False
        self._stop_tracking()
        self._initialized = True

        self._apply(parsed, source="explicit")
        self.telemetry.log_info("Preference pinned", kind=self.kind, value=parsed.value)
        return parsed

    # --- System tracking ---
    def _start_tracking(self) -> None:
        if not self.tracks_system_changes:
            return
        if not isinstance(self.signal, IWatchableSignal):
            return
        if self._unsubscribe is not None:
            # Already subscribed: never stack a second subscription
            return
        self._unsubscribe = self.signal.subscribe(self._on_system_change)

    def _stop_tracking(self) -> None:
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()

    def _on_system_change(self, value: T) -> None:
        if not self._follows_system:
            # Stale notification after a pin
            return
        parsed = self._parse(value)
        if parsed is None:
            self.telemetry.log_warning(
                "Ignoring unsupported system value",
                kind=self.kind,
                value=getattr(value, "value", value),
            )
            return
        self._apply(parsed, source="system")

    # --- Side effects ---
    def _apply(self, value: T, source: str) -> None:
        # (a) publish to consumers, (b) persist best-effort
        self._current.set(value)
        self.persistence.write(value)
        record_preference_change(self.kind, source)


class ThemeStore(PreferenceStore[Theme]):
    kind = "theme"
    tracks_system_changes = True

    def __init__(
        self,
        persistence: PreferencePersistence[Theme],
        signal: ISystemSignal[Theme],
        default: Theme = Theme.LIGHT,
    ) -> None:
        super().__init__(persistence, signal, Theme.parse, default)

    @property
    def is_dark(self) -> bool:
        return self.value is Theme.DARK

    def toggle_preference(self) -> Theme:
        return self.set_preference(self.value.complement())


class LocaleStore(PreferenceStore[Locale]):
    """Locale is read from the system once at startup, never re-polled."""

    kind = "locale"

    def __init__(
        self,
        persistence: PreferencePersistence[Locale],
        signal: ISystemSignal[Locale],
        default: Locale = Locale.EN_US,
    ) -> None:
        super().__init__(persistence, signal, Locale.parse, default)
