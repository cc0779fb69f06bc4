"""Navigation primitive used after a successful revocation."""

from typing import Protocol


class Navigator(Protocol):
    def go_back(self) -> None:
        """Return to the previous location."""


class HistoryNavigator:
    """Location stack. go_back() pops one entry but never empties the stack."""

    def __init__(self, entries: list[str]) -> None:
        if not entries:
            raise ValueError("navigation history must not be empty")
        self._entries = list(entries)

    @property
    def location(self) -> str:
        return self._entries[-1]

    @property
    def depth(self) -> int:
        return len(self._entries)

    def push(self, location: str) -> None:
        self._entries.append(location)

    def go_back(self) -> None:
        if len(self._entries) > 1:
            self._entries.pop()
