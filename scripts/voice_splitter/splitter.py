"""Beam-search driver: carries hypotheses across chronological note batches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .beam import Beam
from .model import Note, Score, group_by_onset
from .params import SplitterParameters
from .state import InvalidBatchError, ModelState, check_batch

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """Output of a voice-splitting run."""
    voices: List[List[Note]]
    log_prob: float
    unassigned: List[Note] = field(default_factory=list)
    num_batches: int = 0

    @property
    def num_voices(self) -> int:
        return len(self.voices)

    @property
    def total_notes(self) -> int:
        return sum(len(v) for v in self.voices)


class VoiceSplittingModel:
    """Keeps the live beam of model states between batches."""

    def __init__(self, params: Optional[SplitterParameters] = None) -> None:
        self.params = params or SplitterParameters()
        self._beam = Beam(self.params.beam_size, [ModelState.initial(self.params)])
        self._last_onset: Optional[int] = None
        self.batches_processed = 0
        self.unassigned: List[Note] = []

    @property
    def states(self) -> List[ModelState]:
        """Live states, best first."""
        return self._beam.to_list()

    @property
    def best_state(self) -> ModelState:
        return self._beam.best

    def handle_incoming(self, notes: Sequence[Note]) -> List[ModelState]:
        """Transition every live state on one batch of simultaneous notes.

        Raises InvalidBatchError for an empty batch, mixed onsets, or a batch
        that does not come strictly after the previous one.
        """
        onset = check_batch(notes)
        if self._last_onset is not None and onset <= self._last_onset:
            raise InvalidBatchError(
                f"batch at tick {onset} is not after previous batch at tick {self._last_onset}"
            )

        successors = Beam(self.params.beam_size)
        for state in self._beam:
            successors.extend(state.handle_incoming(notes))

        self._last_onset = onset
        self.batches_processed += 1

        if not successors:
            logger.warning(
                "no hypothesis can place %d note(s) at tick %d; leaving them unassigned",
                len(notes), onset,
            )
            self.unassigned.extend(notes)
            return self.states

        self._beam = successors
        logger.debug(
            "batch %d (tick %d): %d state(s), best log prob %.4f",
            self.batches_processed, onset, len(successors), successors.best.log_prob,
        )
        return self.states

    def run(self, notes: Iterable[Note]) -> ModelState:
        """Feed all ``notes`` in onset order and return the best state."""
        for batch in group_by_onset(notes):
            self.handle_incoming(batch)
        return self.best_state

    def result(self) -> SplitResult:
        best = self.best_state
        return SplitResult(
            voices=[voice.notes for voice in best.voices],
            log_prob=best.log_prob,
            unassigned=list(self.unassigned),
            num_batches=self.batches_processed,
        )


def split_notes(
    notes: Iterable[Note],
    params: Optional[SplitterParameters] = None,
) -> SplitResult:
    """Split ``notes`` into voices.

    Args:
        notes: Note events in any order; they are batched by onset.
        params: Splitter parameters (defaults if None).

    Returns:
        SplitResult whose voices are ordered as in the best hypothesis.
    """
    model = VoiceSplittingModel(params)
    model.run(notes)
    return model.result()


def split_score(
    score: Score,
    params: Optional[SplitterParameters] = None,
) -> SplitResult:
    """Split all notes of ``score``, ignoring its track grouping."""
    return split_notes(score.all_notes, params)
