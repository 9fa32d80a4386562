"""Similarity scoring component."""

from .cosine import cosine_similarity, vector_norm
from .validation import is_valid_embedding

__all__ = ["cosine_similarity", "is_valid_embedding", "vector_norm"]
