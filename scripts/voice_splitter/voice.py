"""Persistent monophonic voices.

A :class:`Voice` is one version of a voice: its most recent note plus a link
to the version before that note was appended.  Appending never modifies a
voice, so many hypotheses can share the same history and rolling back is
just following ``previous``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .model import Note
from .numeric import gaussian_window, safe_log
from .params import SplitterParameters


@dataclass(frozen=True, eq=False)
class Voice:
    """An append-only monophonic sequence of notes."""
    most_recent_note: Note
    previous: Optional["Voice"] = None
    size: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "size", 1 if self.previous is None else self.previous.size + 1
        )

    def __len__(self) -> int:
        return self.size

    def with_appended(self, note: Note) -> "Voice":
        """Return a new voice ending with ``note``; this one stays unchanged."""
        return Voice(note, self)

    def iter_recent(self) -> Iterator[Note]:
        """Yield notes newest first."""
        node: Optional[Voice] = self
        while node is not None:
            yield node.most_recent_note
            node = node.previous

    @property
    def notes(self) -> List[Note]:
        """Notes in chronological order."""
        result = list(self.iter_recent())
        result.reverse()
        return result

    # ------------------------------------------------------------------
    # Legality / likelihood
    # ------------------------------------------------------------------

    def can_add_note_at_time(
        self, onset: int, duration: int, params: SplitterParameters
    ) -> bool:
        """True if a note at ``onset`` lasting ``duration`` may follow this voice."""
        last = self.most_recent_note
        overlap = last.end_tick - onset
        if overlap <= 0:
            return True
        ratio = params.max_overlap_ratio
        return overlap < last.duration * ratio and overlap < duration * ratio

    def probability(self, note: Note, params: SplitterParameters) -> float:
        """Probability that ``note`` continues this voice."""
        pitch_score = gaussian_window(
            self.weighted_recent_pitch(params), note.pitch, params.pitch_std
        )
        return pitch_score * self.gap_score(note.start_tick, params)

    def log_probability(self, note: Note, params: SplitterParameters) -> float:
        return safe_log(self.probability(note, params))

    def weighted_recent_pitch(self, params: SplitterParameters) -> float:
        # Each older note counts half as much as the next newer one.
        weight = 1.0
        total_weight = 0.0
        weighted_sum = 0.0
        for i, n in enumerate(self.iter_recent()):
            if i >= params.pitch_history_length:
                break
            weighted_sum += n.pitch * weight
            total_weight += weight
            weight *= 0.5
        return weighted_sum / total_weight

    def gap_score(self, onset: int, params: SplitterParameters) -> float:
        gap = max(0, onset - self.most_recent_note.end_tick)
        inside = 1.0 - gap / params.gap_std
        if inside <= 0.0:
            return params.min_gap_score
        return max(safe_log(inside) + 1.0, params.min_gap_score)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def compare(self, other: "Voice") -> int:
        """Deterministic ordering, newest notes first; shorter history first."""
        a: Optional[Voice] = self
        b: Optional[Voice] = other
        while a is not b:
            if a is None:
                return -1
            if b is None:
                return 1
            ka = a.most_recent_note.sort_key
            kb = b.most_recent_note.sort_key
            if ka != kb:
                return -1 if ka < kb else 1
            a = a.previous
            b = b.previous
        return 0

    def __repr__(self) -> str:
        return f"Voice({self.notes!r})"
