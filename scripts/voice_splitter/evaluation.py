"""Compare a voice split against the gold-standard voices of a score.

A *link* is a pair of notes that are consecutive in one voice.  Precision
and recall are measured over links: an output link is correct when its two
notes are also consecutive in the same gold voice.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .model import Note, Score


@dataclass
class EvaluationResult:
    """Link-based accuracy of one split."""
    true_positives: int
    output_links: int
    gold_links: int
    consistent_notes: int
    total_notes: int

    @property
    def precision(self) -> float:
        if self.output_links == 0:
            return 0.0
        return self.true_positives / self.output_links

    @property
    def recall(self) -> float:
        if self.gold_links == 0:
            return 0.0
        return self.true_positives / self.gold_links

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        if p + r == 0:
            return 0.0
        return 2 * p * r / (p + r)

    @property
    def consistency(self) -> float:
        """Share of notes in the majority gold voice of their output voice."""
        if self.total_notes == 0:
            return 0.0
        return self.consistent_notes / self.total_notes

    def to_dict(self) -> Dict:
        return {
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1": round(self.f1, 4),
            "consistency": round(self.consistency, 4),
            "true_positives": self.true_positives,
            "output_links": self.output_links,
            "gold_links": self.gold_links,
        }


def _chronological(voice: Sequence[Note]) -> List[Note]:
    return sorted(voice, key=lambda n: (n.start_tick, n.pitch))


def _links(voices: Sequence[Sequence[Note]]) -> List[Tuple[Note, Note]]:
    links: List[Tuple[Note, Note]] = []
    for voice in voices:
        ordered = _chronological(voice)
        links.extend(zip(ordered, ordered[1:]))
    return links


def gold_voices_from_score(score: Score) -> List[List[Note]]:
    """The score's tracks as the gold-standard partition."""
    return [track.sorted_notes for track in score.tracks if track.notes]


def evaluate(
    voices: Sequence[Sequence[Note]],
    gold_voices: Sequence[Sequence[Note]],
) -> EvaluationResult:
    """Score ``voices`` against ``gold_voices``.

    Notes are matched by identity, so both partitions must be built from the
    same Note objects.
    """
    gold_label: Dict[int, int] = {}
    for label, voice in enumerate(gold_voices):
        for n in voice:
            gold_label[id(n)] = label

    gold_pairs = {(id(a), id(b)) for a, b in _links(gold_voices)}
    output = _links(voices)
    tp = sum(1 for a, b in output if (id(a), id(b)) in gold_pairs)

    consistent = 0
    total = 0
    for voice in voices:
        labels = Counter(gold_label.get(id(n), -1) for n in voice)
        total += len(voice)
        if labels:
            label, hits = labels.most_common(1)[0]
            if label != -1:
                consistent += hits

    return EvaluationResult(
        true_positives=tp,
        output_links=len(output),
        gold_links=len(gold_pairs),
        consistent_notes=consistent,
        total_notes=total,
    )
