"""Model states and the transition engine.

A :class:`ModelState` is one hypothesis: an ordered tuple of voices (kept
roughly low-to-high in pitch) and the log probability of every transition
that produced it.  :meth:`ModelState.handle_incoming` expands a state over
the next batch of simultaneous notes.

The expansion is a depth-first search that assigns one note per level.  All
levels share one working list of voices and one open-voice table; each
branch mutates them, recurses, and restores them before the next branch is
tried.  Finished states go into a single :class:`~.beam.Beam`, which drops
the worst state as soon as it holds more than ``beam_size``.
"""

from __future__ import annotations

import logging
from bisect import insort
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .beam import Beam
from .model import Note
from .numeric import LOG_2, clamp_log_prob, max_indices, safe_log
from .params import SplitterParameters
from .voice import Voice

logger = logging.getLogger(__name__)


class InvalidBatchError(ValueError):
    """A batch of notes that cannot be transitioned on."""


def check_batch(notes: Sequence[Note]) -> int:
    """Return the shared onset of ``notes`` or raise InvalidBatchError."""
    if not notes:
        raise InvalidBatchError("batch must contain at least one note")
    onset = notes[0].start_tick
    for n in notes:
        if n.start_tick != onset:
            raise InvalidBatchError(
                f"batch mixes onsets {onset} and {n.start_tick}"
            )
    return onset


@dataclass(frozen=True, eq=False)
class ModelState:
    """One hypothesis: voices plus cumulative log probability."""
    voices: Tuple[Voice, ...]
    log_prob: float
    params: SplitterParameters

    @classmethod
    def initial(cls, params: SplitterParameters) -> "ModelState":
        """The empty state: no voices, probability 1."""
        return cls((), 0.0, params)

    @property
    def notes(self) -> List[Note]:
        result: List[Note] = []
        for voice in self.voices:
            result.extend(voice.iter_recent())
        return result

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def handle_incoming(self, notes: Sequence[Note]) -> List["ModelState"]:
        """Return the best successor states after assigning ``notes``.

        ``notes`` must share one onset later than every voice's latest
        note.  The result holds at most ``params.beam_size`` states, best
        first, and is empty when no complete assignment exists.
        """
        onset = check_batch(notes)
        for voice in self.voices:
            if voice.most_recent_note.start_tick >= onset:
                raise InvalidBatchError(
                    f"batch at tick {onset} does not follow note at tick "
                    f"{voice.most_recent_note.start_tick}"
                )

        incoming = list(notes)
        working = list(self.voices)
        open_indices = self._open_voice_indices(incoming, working, onset)
        beam = Beam(self.params.beam_size)
        self._expand(open_indices, incoming, working, self.log_prob, 0, beam)
        logger.debug(
            "tick %d: %d note(s) over %d voice(s) -> %d successor(s)",
            onset, len(incoming), len(self.voices), len(beam),
        )
        return beam.to_list()

    def _open_voice_indices(
        self, incoming: List[Note], voices: List[Voice], onset: int
    ) -> List[List[int]]:
        return [
            [
                i for i, voice in enumerate(voices)
                if voice.can_add_note_at_time(onset, note.duration, self.params)
            ]
            for note in incoming
        ]

    def _expand(
        self,
        open_indices: List[List[int]],
        incoming: List[Note],
        working: List[Voice],
        log_prob_sum: float,
        note_index: int,
        beam: Beam,
    ) -> None:
        if note_index == len(incoming):
            beam.add(ModelState(tuple(working), log_prob_sum, self.params))
            return

        note = incoming[note_index]

        if self._can_start_voice(len(working)):
            new_voice_probs = [
                self._new_voice_log_prob(note, position, working)
                for position in range(len(working) + 1)
            ]
            for position in max_indices(new_voice_probs):
                self._try_new_voice(
                    open_indices, incoming, working,
                    clamp_log_prob(log_prob_sum + new_voice_probs[position]),
                    note_index, position, beam,
                )

        candidates = open_indices[note_index]
        existing_probs = [
            self._existing_voice_log_prob(note, voice_index, working)
            for voice_index in candidates
        ]
        for voice_index, log_prob in zip(list(candidates), existing_probs):
            self._try_existing_voice(
                open_indices, incoming, working,
                clamp_log_prob(log_prob_sum + log_prob),
                note_index, voice_index, beam,
            )

    def _try_new_voice(
        self,
        open_indices: List[List[int]],
        incoming: List[Note],
        working: List[Voice],
        log_prob_sum: float,
        note_index: int,
        position: int,
        beam: Beam,
    ) -> None:
        later = open_indices[note_index + 1:]
        working.insert(position, Voice(incoming[note_index]))
        for indices in later:
            indices[:] = [i + 1 if i >= position else i for i in indices]
        try:
            self._expand(
                open_indices, incoming, working, log_prob_sum, note_index + 1, beam
            )
        finally:
            del working[position]
            for indices in later:
                indices[:] = [i - 1 if i > position else i for i in indices]

    def _try_existing_voice(
        self,
        open_indices: List[List[int]],
        incoming: List[Note],
        working: List[Voice],
        log_prob_sum: float,
        note_index: int,
        voice_index: int,
        beam: Beam,
    ) -> None:
        # Two notes of one batch may not share a voice.
        removed_from: List[List[int]] = []
        working[voice_index] = working[voice_index].with_appended(incoming[note_index])
        for indices in open_indices[note_index + 1:]:
            if voice_index in indices:
                indices.remove(voice_index)
                removed_from.append(indices)
        try:
            self._expand(
                open_indices, incoming, working, log_prob_sum, note_index + 1, beam
            )
        finally:
            working[voice_index] = working[voice_index].previous
            for indices in removed_from:
                insort(indices, voice_index)

    def _can_start_voice(self, voice_count: int) -> bool:
        return self.params.allows_new_voices and voice_count < self.params.max_voices

    # ------------------------------------------------------------------
    # Transition probabilities
    # ------------------------------------------------------------------

    def _new_voice_log_prob(self, note: Note, position: int, voices: List[Voice]) -> float:
        """Log probability of a new voice for ``note`` inserted at ``position``."""
        prev = voices[position - 1] if position > 0 else None
        nxt = voices[position] if position < len(voices) else None
        log_prob = safe_log(self.params.new_voice_probability)
        return clamp_log_prob(log_prob - _order_penalty(note, prev, nxt))

    def _existing_voice_log_prob(self, note: Note, index: int, voices: List[Voice]) -> float:
        """Log probability of appending ``note`` to ``voices[index]``."""
        prev = voices[index - 1] if index > 0 else None
        nxt = voices[index + 1] if index < len(voices) - 1 else None
        log_prob = voices[index].log_probability(note, self.params)
        return clamp_log_prob(log_prob - _order_penalty(note, prev, nxt))

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def compare(self, other: "ModelState") -> int:
        """Negative if this state ranks before ``other``, 0 if indistinguishable."""
        if self.log_prob != other.log_prob:
            return -1 if self.log_prob > other.log_prob else 1

        if len(self.voices) != len(other.voices):
            return -1 if len(self.voices) < len(other.voices) else 1

        for mine, theirs in zip(self.voices, other.voices):
            result = mine.compare(theirs)
            if result != 0:
                return result

        mine_key = self.params.sort_key()
        theirs_key = other.params.sort_key()
        if mine_key != theirs_key:
            return -1 if mine_key < theirs_key else 1
        return 0

    def __lt__(self, other: "ModelState") -> bool:
        return self.compare(other) < 0

    def __repr__(self) -> str:
        return f"ModelState({list(self.voices)!r}, {self.log_prob})"


def _order_penalty(note: Note, prev: Optional[Voice], nxt: Optional[Voice]) -> float:
    """log 2 for each neighbour the note would sit on the wrong side of."""
    penalty = 0.0
    if prev is not None and note.pitch < prev.most_recent_note.pitch:
        penalty += LOG_2
    if nxt is not None and note.pitch > nxt.most_recent_note.pitch:
        penalty += LOG_2
    return penalty
