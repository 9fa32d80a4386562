from .embedding_factory import (
    EmbeddingError,
    OpenAIEndpointEmbedding,
    SentenceTransformersEmbedding,
    create_embedding_model,
    embed_text,
)

__all__ = [
    "EmbeddingError",
    "OpenAIEndpointEmbedding",
    "SentenceTransformersEmbedding",
    "create_embedding_model",
    "embed_text",
]
