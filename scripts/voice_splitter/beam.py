"""Bounded, rank-ordered collection of model states."""

from __future__ import annotations

from bisect import insort
from dataclasses import dataclass
from functools import cmp_to_key
from itertools import count
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional

if TYPE_CHECKING:
    from .state import ModelState


@dataclass(frozen=True)
class _Entry:
    state: "ModelState"
    seq: int

    def __lt__(self, other: "_Entry") -> bool:
        result = self.state.compare(other.state)
        if result != 0:
            return result < 0
        return self.seq < other.seq


class Beam:
    """Keeps at most ``capacity`` states, best first.

    States that tie under :meth:`ModelState.compare` are all kept, in
    insertion order.  Adding beyond capacity evicts the worst entry.
    """

    def __init__(self, capacity: int, states: Iterable["ModelState"] = ()) -> None:
        if capacity < 1:
            raise ValueError(f"beam capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: List[_Entry] = []
        self._counter = count()
        for state in states:
            self.add(state)

    def add(self, state: "ModelState") -> bool:
        """Insert ``state``; return False if it fell straight off the end."""
        entry = _Entry(state, next(self._counter))
        if len(self._entries) >= self.capacity and not entry < self._entries[-1]:
            return False
        insort(self._entries, entry)
        if len(self._entries) > self.capacity:
            self._entries.pop()
        return True

    def extend(self, states: Iterable["ModelState"]) -> None:
        for state in states:
            self.add(state)

    @property
    def best(self) -> Optional["ModelState"]:
        return self._entries[0].state if self._entries else None

    def to_list(self) -> List["ModelState"]:
        return [e.state for e in self._entries]

    def __iter__(self) -> Iterator["ModelState"]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


def rank_states(
    states: Iterable["ModelState"], limit: Optional[int] = None
) -> List["ModelState"]:
    """Sort states best first (stable on ties), optionally keeping ``limit``."""
    ranked = sorted(states, key=cmp_to_key(lambda a, b: a.compare(b)))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
