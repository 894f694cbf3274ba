"""Probabilistic voice splitting for symbolic music.

Usage:
    python -m voice_splitter split piece.mid --evaluate
    python -m voice_splitter batch corpus/*.mid --beam-size 10
    python -m voice_splitter presets
"""

from .beam import Beam, rank_states
from .evaluation import EvaluationResult, evaluate
from .model import Note, Score, Track, group_by_onset
from .params import SplitterParameters, get_parameters, load_parameters
from .runner import load_score, split_file
from .splitter import SplitResult, VoiceSplittingModel, split_notes, split_score
from .state import InvalidBatchError, ModelState
from .voice import Voice

__all__ = [
    "Beam",
    "EvaluationResult",
    "InvalidBatchError",
    "ModelState",
    "Note",
    "Score",
    "SplitResult",
    "SplitterParameters",
    "Track",
    "Voice",
    "VoiceSplittingModel",
    "evaluate",
    "get_parameters",
    "group_by_onset",
    "load_parameters",
    "load_score",
    "rank_states",
    "split_file",
    "split_notes",
    "split_score",
]
