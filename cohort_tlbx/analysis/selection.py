"""Brushed selection and pinned reference group shared by all linked views.

Only four transitions change the state: :meth:`SelectionState.brush`,
:meth:`SelectionState.pin`, :meth:`SelectionState.clear_pin` and
:meth:`SelectionState.clear_selection`. Views never hold their own copy; they
read :attr:`SelectionState.snapshot` or subscribe to changes.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSnapshot:
    """Immutable view of the selection at one point in time."""

    selected: frozenset[int] = frozenset()
    pinned: frozenset[int] = frozenset()

    @property
    def has_selection(self) -> bool:
        return bool(self.selected)

    @property
    def has_pin(self) -> bool:
        return bool(self.pinned)


Listener = Callable[[SelectionSnapshot], None]


def _as_index_set(indices: Iterable[int]) -> frozenset[int]:
    result = frozenset(operator.index(i) for i in indices)
    negative = sorted(i for i in result if i < 0)
    if negative:
        raise ValueError(f"Record indices must be non-negative, got {negative[:5]}")
    return result


class SelectionState:
    """Owner of the current selection ``S`` and pinned set ``P`` of original record indices."""

    def __init__(self) -> None:
        self._snapshot = SelectionSnapshot()
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> SelectionSnapshot:
        return self._snapshot

    @property
    def selected(self) -> frozenset[int]:
        return self._snapshot.selected

    @property
    def pinned(self) -> frozenset[int]:
        return self._snapshot.pinned

    def brush(self, indices: Iterable[int]) -> SelectionSnapshot:
        """Replace the selection with ``indices``; the pinned set is untouched."""
        return self._update(selected=_as_index_set(indices), pinned=self.pinned, transition="brush")

    def pin(self) -> SelectionSnapshot:
        """Copy the current selection into the pinned set (pinning nothing clears the pin)."""
        return self._update(selected=self.selected, pinned=self.selected, transition="pin")

    def clear_pin(self) -> SelectionSnapshot:
        return self._update(selected=self.selected, pinned=frozenset(), transition="clear_pin")

    def clear_selection(self) -> SelectionSnapshot:
        return self._update(selected=frozenset(), pinned=self.pinned, transition="clear_selection")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every transition; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, *, selected: frozenset[int], pinned: frozenset[int], transition: str) -> SelectionSnapshot:
        self._snapshot = SelectionSnapshot(selected=selected, pinned=pinned)
        logger.debug("Selection %s: %d selected, %d pinned", transition, len(selected), len(pinned))
        for listener in list(self._listeners):
            listener(self._snapshot)
        return self._snapshot
