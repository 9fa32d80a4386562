"""Shape checks for embedding vectors."""

import math
from typing import Any, Optional, Sequence


def is_valid_embedding(embedding: Any, dimension: Optional[int] = None) -> bool:
    """Check that a value is a usable embedding vector."""
    if not isinstance(embedding, Sequence) or isinstance(embedding, (str, bytes)):
        return False
    if not embedding:
        return False
    if dimension is not None and len(embedding) != dimension:
        return False
    return all(
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        for value in embedding
    )
