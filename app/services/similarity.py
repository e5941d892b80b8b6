from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


def cosine_similarity(vec_a: Optional[Sequence[float]], vec_b: Optional[Sequence[float]]) -> float:
    """Cosine of the angle between two vectors.

    Never raises. Missing vectors, length mismatch, non-numeric or non-finite
    values, or a zero magnitude all give 0.0. The result is not clamped.
    """
    if vec_a is None or vec_b is None:
        return 0.0
    try:
        a = np.asarray(vec_a, dtype="float64")
        b = np.asarray(vec_b, dtype="float64")
    except (TypeError, ValueError):
        return 0.0
    if a.ndim != 1 or b.ndim != 1 or a.shape[0] != b.shape[0] or a.shape[0] == 0:
        return 0.0

    if not (np.isfinite(a).all() and np.isfinite(b).all()):
        return 0.0
    # scale into [-1, 1] so the squared norms cannot overflow
    scale_a = np.abs(a).max()
    scale_b = np.abs(b).max()
    if scale_a == 0.0 or scale_b == 0.0:
        return 0.0
    a = a / scale_a
    b = b / scale_b

    dot = float(np.dot(a, b))
    norm_a = float(np.dot(a, a))
    norm_b = float(np.dot(b, b))
    return float(dot / (np.sqrt(norm_a) * np.sqrt(norm_b)))
