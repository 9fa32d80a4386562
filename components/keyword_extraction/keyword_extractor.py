"""Keyword extraction for memory note descriptions."""

import re
from typing import List, Optional

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 3

STOPWORDS = frozenset(
    [
        "the", "a", "an", "is", "was", "were", "are", "with", "for", "from",
        "to", "of", "in", "on", "at", "by", "this", "that", "be", "been",
        "has", "have", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "can", "about", "into", "through", "during",
        "before", "after", "above", "below", "between", "under", "again",
        "further", "then", "once", "here", "there", "when", "where", "why",
        "how", "all", "both", "each", "few", "more", "most", "other", "some",
        "such", "no", "nor", "not", "only", "own", "same", "so", "than", "too",
        "very", "just", "but", "or", "and", "if", "as", "what", "which", "who",
        "whom", "whose", "these", "those", "am", "being", "any", "every", "many",
    ]
)  # fmt: skip

BOUNDARY_PUNCTUATION = ".,!?;:()[]{}\"'"

_ALPHA_WORD = re.compile(r"^[a-z]+$")
# Compound terms such as "ci-cd" or "zmk-firmware"
_HYPHENATED_WORD = re.compile(r"^[a-z]+-[a-z-]+$")


def _is_keyword_shape(token: str) -> bool:
    return bool(_ALPHA_WORD.match(token) or _HYPHENATED_WORD.match(token))


def extract_keywords(description: Optional[str]) -> List[str]:
    """Extract up to ten meaningful keywords from a note description.

    Tokens are lowercased, split on whitespace and stripped of boundary
    punctuation. Short tokens, stopwords and anything that is not a plain
    or hyphen-joined alphabetic word are dropped. The survivors are
    deduplicated in first-occurrence order.

    Args:
        description: The free-text description of a note.

    Returns:
        The ordered list of keywords, at most ``MAX_KEYWORDS`` long.
    """
    if not description:
        return []

    keywords: List[str] = []
    seen = set()
    for word in description.lower().split():
        cleaned = word.strip(BOUNDARY_PUNCTUATION)

        if len(cleaned) < MIN_KEYWORD_LENGTH or cleaned in STOPWORDS:
            continue
        if not _is_keyword_shape(cleaned) or cleaned in seen:
            continue

        seen.add(cleaned)
        keywords.append(cleaned)
        if len(keywords) == MAX_KEYWORDS:
            break

    return keywords
