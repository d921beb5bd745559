from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

# Deregisters a previously registered callback. Calling it twice is a no-op.
Unsubscribe = Callable[[], None]


class IKeyValueStore(ABC):
    """
    Raw string storage. Implementations MAY raise; the persistence
    adapter is responsible for absorbing failures.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class ISystemSignal(ABC, Generic[T]):
    @abstractmethod
    def current_value(self) -> T:
        """
        Best-effort snapshot of the live external signal.
        Must return a fixed fallback instead of raising.
        """
        pass


class IWatchableSignal(ISystemSignal[T]):
    @abstractmethod
    def subscribe(self, on_change: Callable[[T], None]) -> Unsubscribe:
        pass
