from src.config import PreferenceConfig
from src.preferences.domain.ports import IKeyValueStore
from src.preferences.presentation.state_provider import IStateProvider


class SessionKeyValueStore(IKeyValueStore):
    """
    Keeps preferences in the session state under a namespaced key.
    Values live only as long as the browser session.
    """

    def __init__(
        self,
        state_provider: IStateProvider,
        prefix: str = PreferenceConfig.SESSION_KEY_PREFIX,
    ) -> None:
        self.state = state_provider
        self.prefix = prefix

    def _scoped(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> str | None:
        value = self.state.get(self._scoped(key))
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.state.set(self._scoped(key), value)
