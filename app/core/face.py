# app/core/face.py
from typing import Iterable, Optional, Sequence

import numpy as np

from app.core.config import settings
from app.core.exceptions import DescriptorMismatch


def to_vector(descriptor: Sequence[float]) -> np.ndarray:
    return np.asarray(descriptor, dtype=np.float64).ravel()


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    va = to_vector(a)
    vb = to_vector(b)
    if va.shape != vb.shape:
        raise DescriptorMismatch(
            f"Face descriptor has {vb.size} values, expected {va.size}"
        )
    return float(np.linalg.norm(va - vb))


def identify(candidates: Iterable, probe: Sequence[float], threshold: Optional[float] = None) -> Optional[int]:
    """Return the student id of the first candidate within ``threshold`` of ``probe``.

    ``candidates`` are attendance records (anything with ``student_id`` and
    ``face_descriptor``) in a stable order. This is first-match, not
    best-match: the earliest record under the threshold wins even if a later
    one is closer.
    """
    if threshold is None:
        threshold = settings.FACE_MATCH_THRESHOLD

    probe_vec = to_vector(probe)
    if probe_vec.size == 0:
        raise DescriptorMismatch("Face descriptor is empty")

    for record in candidates:
        stored = record.face_descriptor
        if not stored:
            continue
        distance = euclidean_distance(stored, probe_vec)
        if distance <= threshold:
            return record.student_id
    return None
