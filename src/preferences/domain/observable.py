from collections.abc import Callable
from typing import Generic, TypeVar

from src.preferences.domain.ports import Unsubscribe
from src.shared.telemetry import Telemetry

T = TypeVar("T")


class Observable(Generic[T]):
    """
    Single-value subject. Consumers subscribe instead of polling;
    listeners fire only when the value actually changes.
    """

    def __init__(self, initial: T, name: str = "Observable") -> None:
        self._value = initial
        self._listeners: list[Callable[[T], None]] = []
        self.telemetry = Telemetry(name)

    @property
    def value(self) -> T:
        return self._value

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def set(self, value: T) -> bool:
        """Publishes a new value. Returns True if listeners were notified."""
        if value == self._value:
            return False
        self._value = value
        # Copy: a listener may unsubscribe while we iterate
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                # A broken consumer must not block the others or the publisher
                self.telemetry.log_error(
                    "Listener failed", e, value=getattr(value, "value", value)
                )
        return True

    def subscribe(self, listener: Callable[[T], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
