"""Descriptive statistics and Pearson correlation for paired daily series."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient of two equal-length series.

        r = Σ(xᵢ - x̄)(yᵢ - ȳ) / √(Σ(xᵢ - x̄)² · Σ(yᵢ - ȳ)²)

    Returns 0.0 when either series is constant.  Callers guarantee
    ``len(x) == len(y) >= 2``; anything else is a contract violation and
    raises ValueError.
    """
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if xs.shape != ys.shape:
        raise ValueError(
            f"Series must have the same length (got {xs.size} and {ys.size})"
        )
    if xs.ndim != 1 or xs.size < 2:
        raise ValueError("Series must have at least 2 values")

    # Exact check first: float means of constant data can leave residue.
    if np.all(xs == xs[0]) or np.all(ys == ys[0]):
        return 0.0

    dx = xs - xs.mean()
    dy = ys - ys.mean()
    sum_sq_x = float(np.dot(dx, dx))
    sum_sq_y = float(np.dot(dy, dy))
    if sum_sq_x == 0.0 or sum_sq_y == 0.0:
        return 0.0

    r = float(np.dot(dx, dy)) / math.sqrt(sum_sq_x * sum_sq_y)
    return max(-1.0, min(1.0, r))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def stddev(values: Sequence[float]) -> float:
    """Sample standard deviation (n-1 denominator); 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=1))


def percentage_diff(a: float, b: float) -> float:
    """(a - b) / b · 100, or 0.0 when b is zero."""
    if b == 0:
        return 0.0
    return (a - b) / b * 100.0
