"""Snapshot protocol — participants that can roll back a failed operation."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Snapshottable(Protocol):
    """State holder that can capture and restore its own state."""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...
