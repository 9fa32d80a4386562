"""Keyword extraction component.

Derives the bounded, ordered keyword list stored with every index entry.
"""

from .keyword_extractor import MAX_KEYWORDS, STOPWORDS, extract_keywords

__all__ = ["MAX_KEYWORDS", "STOPWORDS", "extract_keywords"]
