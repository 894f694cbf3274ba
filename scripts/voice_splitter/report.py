"""Report generation: text and JSON output."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .evaluation import EvaluationResult
from .model import Note, Score, pitch_to_name
from .params import SplitterParameters
from .splitter import SplitResult


def _note_dict(n: Note) -> Dict[str, Any]:
    return {
        "pitch": n.pitch,
        "velocity": n.velocity,
        "start_tick": n.start_tick,
        "duration": n.duration,
        "gold_voice": n.voice,
    }


def _pitch_range(voice: List[Note]) -> str:
    if not voice:
        return "-"
    lo = min(n.pitch for n in voice)
    hi = max(n.pitch for n in voice)
    return f"{pitch_to_name(lo)}-{pitch_to_name(hi)}"


def format_text(
    score: Score,
    result: SplitResult,
    evaluation: Optional[EvaluationResult] = None,
    params: Optional[SplitterParameters] = None,
) -> str:
    """Format a split as human-readable text."""
    lines = []

    meta_parts = []
    if score.source_file:
        meta_parts.append(score.source_file)
    meta_parts.append(f"{score.total_notes} notes")
    meta_parts.append(f"{result.num_batches} onsets")
    lines.append(f"=== Voice split: {', '.join(meta_parts)} ===")
    if params is not None:
        lines.append(
            f"beam={params.beam_size} max_voices={params.max_voices} "
            f"new_voice_p={params.new_voice_probability:g}"
        )
    lines.append("")

    lines.append(f"Voices: {result.num_voices} (log prob {result.log_prob:.4f})")
    # Hypothesis order is low to high; print the top voice first.
    for idx in range(result.num_voices - 1, -1, -1):
        voice = result.voices[idx]
        lines.append(
            f"  v{result.num_voices - idx:<3} {len(voice):>5} notes  {_pitch_range(voice)}"
        )
    if result.unassigned:
        lines.append(f"  unassigned: {len(result.unassigned)} notes")
    lines.append("")

    if evaluation is not None:
        lines.append("Evaluation against input tracks:")
        lines.append(f"  gold voices:  {score.num_voices}")
        lines.append(f"  precision:    {evaluation.precision:.4f}")
        lines.append(f"  recall:       {evaluation.recall:.4f}")
        lines.append(f"  F1:           {evaluation.f1:.4f}")
        lines.append(f"  consistency:  {evaluation.consistency:.4f}")
        lines.append("")

    return "\n".join(lines)


def format_json(
    score: Score,
    result: SplitResult,
    evaluation: Optional[EvaluationResult] = None,
    params: Optional[SplitterParameters] = None,
) -> str:
    """Format a split as JSON."""
    data: Dict[str, Any] = {
        "metadata": {
            "source_file": score.source_file,
            "total_notes": score.total_notes,
            "gold_voices": score.num_voices,
            "onsets": result.num_batches,
        },
        "log_prob": result.log_prob,
        "voices": [
            {"index": idx, "notes": [_note_dict(n) for n in voice]}
            for idx, voice in enumerate(result.voices)
        ],
        "unassigned": [_note_dict(n) for n in result.unassigned],
    }
    if params is not None:
        data["parameters"] = params.to_dict()
    if evaluation is not None:
        data["evaluation"] = evaluation.to_dict()
    return json.dumps(data, indent=2)


def format_batch_text(results: List[Dict[str, Any]], stats: Dict[str, Any]) -> str:
    """Format batch evaluation results as text."""
    lines = [f"=== Batch evaluation: {stats['total_files']} files ===", ""]
    for r in results:
        if r.get("error"):
            lines.append(f"[ERROR] {r['file']}: {r['error']}")
            continue
        lines.append(
            f"{r['file']}: F1={r['f1']:.4f} P={r['precision']:.4f} "
            f"R={r['recall']:.4f} voices={r['num_voices']}/{r['gold_voices']}"
        )
    lines.append("")

    metrics = stats.get("metrics", {})
    if metrics:
        lines.append("Summary:")
        for key in ("f1", "precision", "recall", "consistency"):
            m = metrics[key]
            lines.append(
                f"  {key:<12} mean={m['mean']:.4f} median={m['median']:.4f} "
                f"min={m['min']:.4f} max={m['max']:.4f}"
            )
    if stats.get("failed_files"):
        lines.append(f"  failed: {len(stats['failed_files'])} file(s)")
    lines.append("")
    return "\n".join(lines)
