"""Fire-and-forget notifications for the collaborators around a session."""

from __future__ import annotations

import logging
from typing import Iterable, List


logger = logging.getLogger(__name__)


class GameEvents:
    """Listener base class; override the hooks you care about."""

    def on_scored(self, delta: int, score: int) -> None:
        pass

    def on_game_over(self, final_score: int) -> None:
        pass

    def on_revive(self, count: int) -> None:
        pass


class EventFanout(GameEvents):
    """Forwards each event to several listeners.

    A failing listener is logged and skipped so it cannot disturb the
    session that emitted the event.
    """

    def __init__(self, listeners: Iterable[GameEvents] = ()) -> None:
        self.listeners: List[GameEvents] = list(listeners)

    def add(self, listener: GameEvents) -> None:
        self.listeners.append(listener)

    def _emit(self, name: str, *args: int) -> None:
        for listener in self.listeners:
            try:
                getattr(listener, name)(*args)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, name)

    def on_scored(self, delta: int, score: int) -> None:
        self._emit("on_scored", delta, score)

    def on_game_over(self, final_score: int) -> None:
        self._emit("on_game_over", final_score)

    def on_revive(self, count: int) -> None:
        self._emit("on_revive", count)
