"""Splitter parameters and named presets.

Every tunable the transition engine and the voice likelihood model use lives
on :class:`SplitterParameters`.  Instances are immutable and validated at
construction; the engine receives them explicitly on every call.
"""

from __future__ import annotations

import json
import math
from dataclasses import astuple, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

_INT_FIELDS = frozenset({"max_voices", "beam_size", "pitch_history_length"})


@dataclass(frozen=True)
class SplitterParameters:
    """Configuration for one voice-splitting run."""

    # Voice cap.  Zero or less means no voice is ever created.
    max_voices: int = 16
    new_voice_probability: float = 1e-8
    beam_size: int = 2

    # Likelihood model
    pitch_history_length: int = 6
    pitch_std: float = 4.0
    gap_std: float = 240.0  # ticks
    min_gap_score: float = 1e-4

    # Legality: tolerated overlap as a fraction of either note's duration.
    max_overlap_ratio: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            expected = int if f.name in _INT_FIELDS else (int, float)
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ValueError(f"{f.name} must be a number, got {value!r}")
            if isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
        if not 0.0 < self.new_voice_probability <= 1.0:
            raise ValueError(
                f"new_voice_probability must be in (0, 1], got {self.new_voice_probability}"
            )
        if self.beam_size < 1:
            raise ValueError(f"beam_size must be a positive integer, got {self.beam_size!r}")
        if self.pitch_history_length < 1:
            raise ValueError("pitch_history_length must be at least 1")
        if self.pitch_std <= 0:
            raise ValueError("pitch_std must be positive")
        if self.gap_std <= 0:
            raise ValueError("gap_std must be positive")
        if not 0.0 < self.min_gap_score <= 1.0:
            raise ValueError("min_gap_score must be in (0, 1]")
        if not 0.0 <= self.max_overlap_ratio < 1.0:
            raise ValueError("max_overlap_ratio must be in [0, 1)")

    @property
    def allows_new_voices(self) -> bool:
        return self.max_voices > 0

    def sort_key(self) -> tuple:
        """Field tuple used as the last-resort hypothesis tie-break."""
        return astuple(self)

    def with_overrides(self, **overrides: Any) -> "SplitterParameters":
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

_PRESETS: Dict[str, SplitterParameters] = {
    "default": SplitterParameters(),
    # No overlap tolerance, single best hypothesis.
    "strict": SplitterParameters(beam_size=1),
    # Lets a voice's next note start before the previous one ends, as long as
    # the overlap is under half of both durations.
    "tolerant": SplitterParameters(max_overlap_ratio=0.5),
    "wide_beam": SplitterParameters(beam_size=25),
}


def get_parameters(name: str = "default") -> SplitterParameters:
    """Look up a preset by name.  Raises KeyError for unknown names."""
    try:
        return _PRESETS[name]
    except KeyError:
        raise KeyError(
            f"unknown preset {name!r}; expected one of {', '.join(all_preset_names())}"
        ) from None


def all_preset_names() -> list[str]:
    """Return all registered preset names."""
    return list(_PRESETS.keys())


def load_parameters(source: Union[str, Path, dict]) -> SplitterParameters:
    """Build parameters from a JSON file or pre-parsed dict.

    The object may name a ``"preset"`` to start from; every other key must be
    a SplitterParameters field.
    """
    if isinstance(source, dict):
        data = dict(source)
    else:
        with open(Path(source)) as fh:
            data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError("parameter file must contain a JSON object")

    preset = data.pop("preset", "default")
    if not isinstance(preset, str):
        raise ValueError(f"preset must be a string, got {preset!r}")
    base = get_parameters(preset)
    known = {f.name for f in fields(SplitterParameters)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown parameter(s): {', '.join(unknown)}")
    return replace(base, **data)
