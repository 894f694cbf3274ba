"""Log-domain helpers used by the likelihood model and the transition engine."""

from __future__ import annotations

import math
import sys
from typing import List, Sequence

# Stand-in for log(0): the most negative finite double.
MIN_LOG_PROB = -sys.float_info.max

LOG_2 = math.log(2)


def clamp_log_prob(log_prob: float) -> float:
    """Replace negative infinity with MIN_LOG_PROB."""
    if log_prob == -math.inf:
        return MIN_LOG_PROB
    return log_prob


def safe_log(prob: float) -> float:
    """Natural log of a probability, with 0 mapped to MIN_LOG_PROB."""
    if prob <= 0.0:
        return MIN_LOG_PROB
    return math.log(prob)


def gaussian_window(mean: float, value: float, std: float) -> float:
    """Unnormalised Gaussian: 1.0 at the mean, falling towards 0."""
    diff = value - mean
    return math.exp(-(diff * diff) / (2.0 * std * std))


def max_index(values: Sequence[float]) -> int:
    """Index of the first maximum, or -1 for an empty sequence."""
    best = -1
    for i, v in enumerate(values):
        if best == -1 or v > values[best]:
            best = i
    return best


def max_indices(values: Sequence[float]) -> List[int]:
    """All indices holding the maximum value, ascending."""
    best = max_index(values)
    if best == -1:
        return []
    top = values[best]
    return [i for i, v in enumerate(values) if v == top]
