"""Vector similarity scoring."""

import math
from typing import Sequence


def vector_norm(vector: Sequence[float]) -> float:
    return math.sqrt(sum(value * value for value in vector))


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine of the angle between two equal-length vectors.

    Returns exactly 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(vec_a) != len(vec_b):
        raise ValueError(
            f"Cannot compare vectors of different lengths: {len(vec_a)} != {len(vec_b)}"
        )

    dot = math.fsum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = vector_norm(vec_a)
    norm_b = vector_norm(vec_b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)
