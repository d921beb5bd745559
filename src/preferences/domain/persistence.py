from collections.abc import Callable
from typing import Generic, TypeVar

from src.preferences.domain.ports import IKeyValueStore
from src.shared.telemetry import Telemetry

T = TypeVar("T")


class PreferencePersistence(Generic[T]):
    """
    Best-effort storage for one preference kind.

    Neither read() nor write() ever raises: an unavailable store, a failed
    write or a value outside the valid set all degrade to "no stored value"
    or "write skipped", with a warning in the log.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        key: str,
        parse: Callable[[str], T | None],
    ) -> None:
        self.store = store
        self.key = key
        self._parse = parse
        self.telemetry = Telemetry("PreferencePersistence")

    def read(self) -> T | None:
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            self.telemetry.log_warning(
                "Storage unavailable, ignoring stored value", e, key=self.key
            )
            return None

        if raw is None:
            return None

        value = self._parse(raw)
        if value is None:
            self.telemetry.log_warning(
                "Ignoring invalid stored value", key=self.key, raw=raw
            )
        return value

    def write(self, value: T) -> None:
        raw = value.value if hasattr(value, "value") else str(value)
        try:
            self.store.set(self.key, raw)
        except Exception as e:
            self.telemetry.log_warning(
                "Failed to persist preference", e, key=self.key, value=raw
            )
