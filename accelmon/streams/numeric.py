"""
Shared numeric helpers: mean, variance, exponential smoothing and range mapping.

Batch statistics run on numpy arrays; the per-sample helpers are plain floats
because they sit on the hot ingestion path.
"""

import math
from typing import Sequence, Tuple

import numpy as np


def axis_means(samples: Sequence[Tuple[float, float, float]]) -> np.ndarray:
    """
    Per-axis arithmetic mean of (x, y, z) samples.

    Raises:
        ValueError: if ``samples`` is empty
    """
    data = np.asarray(samples, dtype=float)
    if data.size == 0:
        raise ValueError("cannot average an empty sample set")
    return data.mean(axis=0)


def axis_variances(samples: Sequence[Tuple[float, float, float]], means=None) -> np.ndarray:
    """
    Per-axis population variance, ``mean((v - mean)^2)``.

    Args:
        samples: (x, y, z) samples
        means: Precomputed per-axis means, computed when omitted
    """
    data = np.asarray(samples, dtype=float)
    if data.size == 0:
        raise ValueError("cannot compute variance of an empty sample set")
    centre = axis_means(data) if means is None else np.asarray(means, dtype=float)
    return ((data - centre) ** 2).mean(axis=0)


def axis_std_devs(samples: Sequence[Tuple[float, float, float]], means=None) -> np.ndarray:
    """Per-axis population standard deviation."""
    return np.sqrt(axis_variances(samples, means))


def composite_noise(std_devs: Sequence[float]) -> float:
    """Combine per-axis standard deviations into one magnitude."""
    return float(math.sqrt(sum(s * s for s in std_devs)))


def ema(current: float, target: float, alpha: float) -> float:
    """One exponential moving average step: ``current + (target - current) * alpha``."""
    return current + (target - current) * alpha


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def linear_map(value: float, in_low: float, in_high: float, out_low: float, out_high: float) -> float:
    """Map ``value`` linearly from one range onto another (no clamping)."""
    if in_high == in_low:
        return out_low
    return out_low + (value - in_low) * (out_high - out_low) / (in_high - in_low)
