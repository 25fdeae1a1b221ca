import json
from typing import Any

from src.dailymix.domain.ports import IBundleCache
from src.dailymix.presentation.state_provider import IStateProvider
from src.shared.telemetry import Telemetry


class StateBundleCache(IBundleCache):
    """
    Stores values as JSON strings in a state provider.

    A missing or unreadable entry reads as None and a value that cannot be
    serialized is skipped, so the cache never breaks a session.
    """

    def __init__(self, state: IStateProvider) -> None:
        self.state = state
        self.telemetry = Telemetry("StateBundleCache")

    def get(self, key: str) -> Any | None:
        raw = self.state.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            self.telemetry.log_error("Dropping unreadable cache entry", e, key=key)
            self.state.delete(key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.state.set(key, json.dumps(value))
        except (TypeError, ValueError) as e:
            self.telemetry.log_error("Cache write skipped", e, key=key)
