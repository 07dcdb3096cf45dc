"""Allow-list check for inbound chats."""

from __future__ import annotations

from collections.abc import Hashable, Iterable


class AccessFilter:
    """Decide whether events from a chat may reach the bridge."""

    def __init__(self, allowed: Iterable[Hashable]) -> None:
        self._allowed: frozenset[Hashable] = frozenset(allowed)

    @property
    def allowed(self) -> frozenset[Hashable]:
        return self._allowed

    def is_authorized(self, chat_id: Hashable) -> bool:
        return chat_id in self._allowed

    def __len__(self) -> int:
        return len(self._allowed)
