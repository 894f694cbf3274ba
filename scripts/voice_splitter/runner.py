"""Single-file orchestration: load, split, evaluate."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

from .evaluation import EvaluationResult, evaluate, gold_voices_from_score
from .loaders import load_json, load_midi
from .model import Score
from .params import SplitterParameters
from .splitter import SplitResult, split_score


def load_score(path: Union[str, Path]) -> Score:
    """Auto-detect format and load a Score."""
    p = Path(path)
    if p.suffix.lower() in (".mid", ".midi"):
        return load_midi(p)
    return load_json(p)


def split_file(
    path: Union[str, Path],
    params: Optional[SplitterParameters] = None,
    with_evaluation: bool = False,
) -> Tuple[Score, SplitResult, Optional[EvaluationResult]]:
    """Load ``path``, split it, and optionally score it against its tracks."""
    score = load_score(path)
    result = split_score(score, params)
    evaluation = None
    if with_evaluation:
        evaluation = evaluate(result.voices, gold_voices_from_score(score))
    return score, result, evaluation
