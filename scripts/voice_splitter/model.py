"""Note data model shared by the splitter, loaders and evaluation.

Notes are immutable events.  Tracks carry the gold-standard grouping read
from the input file; the splitter itself never looks at it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

# ---------------------------------------------------------------------------
# Time / pitch constants
# ---------------------------------------------------------------------------

TICKS_PER_BEAT = 480

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


# ---------------------------------------------------------------------------
# Note / Track / Score
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Note:
    """A single note event.

    Equality is identity: two notes with the same pitch and timing are still
    two separate events.
    """
    pitch: int
    velocity: int
    start_tick: int
    duration: int
    voice: str = ""
    channel: int = 0

    @property
    def end_tick(self) -> int:
        return self.start_tick + self.duration

    @property
    def sort_key(self) -> tuple:
        return (self.start_tick, self.pitch, self.duration, self.velocity)

    @property
    def note_name(self) -> str:
        return pitch_to_name(self.pitch)

    def __repr__(self) -> str:
        return f"Note({self.note_name}@{self.start_tick}+{self.duration})"


@dataclass
class Track:
    """A gold-standard voice as read from the input file."""
    name: str
    channel: int = 0
    program: int = 0
    notes: List[Note] = field(default_factory=list)

    @property
    def sorted_notes(self) -> List[Note]:
        return sorted(self.notes, key=lambda n: (n.start_tick, n.pitch))


@dataclass
class Score:
    """All tracks of one input file."""
    tracks: List[Track] = field(default_factory=list)
    ticks_per_beat: int = TICKS_PER_BEAT
    source_file: str = ""

    @property
    def all_notes(self) -> List[Note]:
        """All notes across all tracks, sorted by start_tick then pitch."""
        notes: List[Note] = []
        for track in self.tracks:
            notes.extend(track.notes)
        return sorted(notes, key=lambda n: (n.start_tick, n.pitch))

    @property
    def num_voices(self) -> int:
        return len(self.tracks)

    @property
    def total_notes(self) -> int:
        return sum(len(t.notes) for t in self.tracks)


# ---------------------------------------------------------------------------
# Utility functions
# ---------------------------------------------------------------------------


def pitch_to_name(pitch: int) -> str:
    """Convert MIDI pitch to note name with octave (e.g., 'C4')."""
    return f"{NOTE_NAMES[pitch % 12]}{pitch // 12 - 1}"


def group_by_onset(notes: Iterable[Note]) -> List[List[Note]]:
    """Split notes into chronological batches of strictly simultaneous onsets.

    Within a batch notes are ordered by ascending pitch.
    """
    groups: Dict[int, List[Note]] = {}
    for n in notes:
        groups.setdefault(n.start_tick, []).append(n)
    return [
        sorted(groups[tick], key=lambda n: n.pitch)
        for tick in sorted(groups)
    ]
