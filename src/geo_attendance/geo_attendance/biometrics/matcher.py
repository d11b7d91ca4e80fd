from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class FaceMatchResult:
    similarity: float
    threshold: float
    match: bool


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|); zero-magnitude or mismatched vectors are rejected."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or va.shape != vb.shape:
        raise ValidationError(
            f"Face descriptor dimensions do not match (registered {vb.size}, received {va.size})"
        )
    if not (np.all(np.isfinite(va)) and np.all(np.isfinite(vb))):
        raise ValidationError("Face descriptor must contain only valid numbers")

    scale_a = float(np.max(np.abs(va))) if va.size else 0.0
    scale_b = float(np.max(np.abs(vb))) if vb.size else 0.0
    if scale_a == 0.0 or scale_b == 0.0:
        raise ValidationError("Face descriptor has zero magnitude")

    # Scaling to max-abs 1 keeps the norms and the dot product finite.
    va = va / scale_a
    vb = vb / scale_b
    similarity = float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb)))
    if not np.isfinite(similarity):
        raise ValidationError("Face descriptor could not be compared")
    return max(-1.0, min(1.0, similarity))


class FaceMatcher:
    """Compares a submitted descriptor against a registered one.

    ``match`` uses a strict ``similarity > threshold`` comparison.
    """

    def __init__(self, threshold: float):
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def compare(self, submitted: Sequence[float], registered: Sequence[float]) -> FaceMatchResult:
        similarity = cosine_similarity(submitted, registered)
        return FaceMatchResult(similarity=similarity, threshold=self._threshold, match=similarity > self._threshold)
