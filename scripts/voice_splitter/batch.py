"""Batch evaluation: split and score many files with one parameter set."""

from __future__ import annotations

import logging
import statistics
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .params import SplitterParameters
from .runner import split_file

logger = logging.getLogger(__name__)

# mido raises OSError/EOFError for unreadable files, ValueError for bad data.
_LOAD_ERRORS = (OSError, EOFError, ValueError, KeyError)


def evaluate_file(
    path: Union[str, Path],
    params: Optional[SplitterParameters] = None,
) -> Dict[str, Any]:
    """Split and evaluate a single file.

    Returns:
        Dict with file, num_voices, gold_voices, total_notes, unassigned,
        the evaluation metrics, and error (None on success).
    """
    result: Dict[str, Any] = {
        "file": str(path),
        "num_voices": 0,
        "gold_voices": 0,
        "total_notes": 0,
        "unassigned": 0,
        "precision": 0.0,
        "recall": 0.0,
        "f1": 0.0,
        "consistency": 0.0,
        "error": None,
    }
    try:
        score, split, evaluation = split_file(path, params, with_evaluation=True)
    except _LOAD_ERRORS as exc:
        logger.warning("skipping %s: %s", path, exc)
        result["error"] = str(exc)
        return result

    result["num_voices"] = split.num_voices
    result["gold_voices"] = score.num_voices
    result["total_notes"] = score.total_notes
    result["unassigned"] = len(split.unassigned)
    metrics = evaluation.to_dict()
    for key in ("precision", "recall", "f1", "consistency"):
        result[key] = metrics[key]
    return result


def run_batch(
    paths: Sequence[Union[str, Path]],
    params: Optional[SplitterParameters] = None,
    on_progress: Optional[Callable[[str, int, int], None]] = None,
) -> List[Dict[str, Any]]:
    """Run evaluate_file over ``paths``.

    Args:
        paths: Input files (.json, .mid, .midi).
        params: Splitter parameters shared by every file.
        on_progress: Optional callback(path, idx, total) for progress.

    Returns:
        List of per-file result dicts, in input order.
    """
    results = []
    total = len(paths)
    for idx, path in enumerate(paths):
        if on_progress:
            on_progress(str(path), idx, total)
        logger.info("[%d/%d] %s", idx + 1, total, path)
        results.append(evaluate_file(path, params))
    return results


def compute_batch_statistics(batch_results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Aggregate per-file results.

    Files that failed to load are counted but excluded from the metric
    averages.
    """
    total = len(batch_results)
    ok = [r for r in batch_results if not r.get("error")]
    failed = [r["file"] for r in batch_results if r.get("error")]

    if not ok:
        return {
            "total_files": total,
            "evaluated_files": 0,
            "failed_files": failed,
            "metrics": {},
            "worst_files": [],
        }

    metrics: Dict[str, Dict[str, float]] = {}
    for key in ("precision", "recall", "f1", "consistency"):
        values = [r[key] for r in ok]
        metrics[key] = {
            "mean": round(statistics.mean(values), 4),
            "median": round(statistics.median(values), 4),
            "min": min(values),
            "max": max(values),
        }

    worst = sorted(ok, key=lambda r: r["f1"])[:5]
    return {
        "total_files": total,
        "evaluated_files": len(ok),
        "failed_files": failed,
        "metrics": metrics,
        "worst_files": [{"file": r["file"], "f1": r["f1"]} for r in worst],
    }
