"""Reentrancy guard and all-or-nothing rollback for mutating operations."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from .errors import ReentrantCallError
from .interfaces.snapshot import Snapshottable

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Idle/in-progress flag shared by every mutating entry point of an owner."""

    def __init__(self) -> None:
        self._entered = False
        self._entry_point: str | None = None

    @property
    def entered(self) -> bool:
        return self._entered

    @contextmanager
    def enter(self, entry_point: str) -> Iterator[None]:
        """Hold the guard for the duration of one top-level call."""
        if self._entered:
            logger.debug(
                "Rejected reentrant call to %s while %s is in flight",
                entry_point,
                self._entry_point,
            )
            raise ReentrantCallError(entry_point)
        self._entered = True
        self._entry_point = entry_point
        try:
            yield
        finally:
            self._entered = False
            self._entry_point = None


@contextmanager
def atomic(participants: Iterable[Any]) -> Iterator[None]:
    """Restore every snapshottable participant if the block raises.

    Participants that do not implement ``snapshot``/``restore`` are skipped;
    changes they make are outside the rollback.
    """
    saved: list[tuple[Snapshottable, Any]] = []
    seen: set[int] = set()
    for participant in participants:
        if id(participant) in seen or not isinstance(participant, Snapshottable):
            continue
        seen.add(id(participant))
        saved.append((participant, participant.snapshot()))

    try:
        yield
    except Exception:
        for participant, state in reversed(saved):
            participant.restore(state)
        raise
