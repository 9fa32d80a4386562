from .relevance_matcher import (
    KEYWORD_WEIGHT,
    MIN_OVERLAP,
    TAG_WEIGHT,
    RelatedMatch,
    match_related,
)

__all__ = [
    "KEYWORD_WEIGHT",
    "MIN_OVERLAP",
    "TAG_WEIGHT",
    "RelatedMatch",
    "match_related",
]
