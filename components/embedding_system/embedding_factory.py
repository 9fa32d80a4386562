import logging
from typing import Any, List, Optional, cast

from components.similarity import is_valid_embedding
from llama_index.core.embeddings import BaseEmbedding
from pydantic import Field
from shared.config import EmbeddingModelConfig

logger = logging.getLogger(__name__)


class EmbeddingError(Exception):
    """Raised when an embedding cannot be generated."""


class SentenceTransformersEmbedding(BaseEmbedding):
    """Wrapper for SentenceTransformers embedding models.

    Vectors are mean pooled and L2-normalised, matching the output of
    all-MiniLM-L6-v2 feature extraction with ``normalize=True``.
    """

    # Add model configuration to allow arbitrary attributes
    model_config = {"arbitrary_types_allowed": True}

    def __init__(self, model_name: str, **kwargs: Any):
        """Initialize SentenceTransformers model.

        Args:
            model_name: Name of the SentenceTransformers model
            **kwargs: Additional arguments for BaseEmbedding
        """
        try:
            from sentence_transformers import SentenceTransformer

            # Initialize the model before calling super()
            _model = SentenceTransformer(model_name)
            logger.info(f"Loaded SentenceTransformers model: {model_name}")
        except ImportError as e:
            raise ImportError(
                "sentence-transformers is required for this provider. "
                "Install with: pip install sentence-transformers"
            ) from e

        super().__init__(model_name=model_name, **kwargs)
        # Store the model in private attributes to avoid Pydantic validation
        object.__setattr__(self, "_sentence_model", _model)
        self._sentence_model: Any = _model

    def encode(self, texts: List[str]) -> List[List[float]]:
        """Encode texts into normalised embeddings."""
        return cast(
            List[List[float]],
            self._sentence_model.encode(texts, normalize_embeddings=True).tolist(),
        )

    def _get_query_embedding(self, query: str) -> List[float]:
        """Get query embedding."""
        return self.encode([query])[0]

    def _get_text_embedding(self, text: str) -> List[float]:
        """Get text embedding."""
        return self.encode([text])[0]

    async def _aget_query_embedding(self, query: str) -> List[float]:
        """Get query embedding asynchronously."""
        return self._get_query_embedding(query)


class OpenAIEndpointEmbedding(BaseEmbedding):
    """Wrapper for OpenAI-compatible API endpoints."""

    model_config = {"arbitrary_types_allowed": True}

    # Define the fields that will be set dynamically
    client: Any = Field(default=None, exclude=True)
    api_model_name: str = Field(default="", exclude=True)

    def __init__(self, model_name: str, endpoint_url: str, api_key: str, **kwargs: Any):
        """Initialize OpenAI-compatible embedding client.

        Args:
            model_name: Name of the embedding model
            endpoint_url: API endpoint URL
            api_key: API key for authentication
            **kwargs: Additional arguments for BaseEmbedding
        """
        try:
            from openai import OpenAI

            client = OpenAI(api_key=api_key, base_url=endpoint_url)
            logger.info(
                f"Initialized OpenAI-compatible client for {model_name} "
                f"at {endpoint_url}"
            )
        except ImportError as e:
            raise ImportError(
                "openai is required for this provider. Install with: pip install openai"
            ) from e

        super().__init__(model_name=model_name, **kwargs)
        object.__setattr__(self, "client", client)
        object.__setattr__(self, "api_model_name", model_name)

    def encode(self, texts: List[str]) -> List[List[float]]:
        """Encode texts into embeddings using OpenAI-compatible API."""
        response = self.client.embeddings.create(model=self.api_model_name, input=texts)
        return [embedding.embedding for embedding in response.data]

    def _get_query_embedding(self, query: str) -> List[float]:
        """Get query embedding."""
        return self.encode([query])[0]

    def _get_text_embedding(self, text: str) -> List[float]:
        """Get text embedding."""
        return self.encode([text])[0]

    async def _aget_query_embedding(self, query: str) -> List[float]:
        """Get query embedding asynchronously."""
        return self._get_query_embedding(query)


def create_embedding_model(config: EmbeddingModelConfig) -> BaseEmbedding:
    """Factory function to create embedding models based on configuration."""
    provider = config.provider.lower()

    if provider == "sentence_transformers":
        return SentenceTransformersEmbedding(config.model_name)

    elif provider == "openai_endpoint":
        if not config.endpoint_url or not config.api_key:
            raise ValueError(
                "endpoint_url and api_key are required for openai_endpoint provider"
            )
        return OpenAIEndpointEmbedding(
            config.model_name, config.endpoint_url, config.api_key
        )

    else:
        raise ValueError(
            f"Unsupported embedding provider: {provider}. "
            f"Supported providers: sentence_transformers, openai_endpoint"
        )


def embed_text(
    model: BaseEmbedding, text: str, dimension: Optional[int] = None
) -> List[float]:
    """Embed a single text, raising EmbeddingError on any failure.

    Args:
        model: The embedding model to use.
        text: The text to embed.
        dimension: Expected vector length, checked when given.
    """
    try:
        vector = [float(value) for value in model.get_text_embedding(text)]
    except Exception as e:
        raise EmbeddingError(f"Failed to embed text: {e}") from e

    if not is_valid_embedding(vector, dimension):
        raise EmbeddingError(
            f"Embedding model returned a malformed vector of length {len(vector)}"
            + (f" (expected {dimension})" if dimension is not None else "")
        )
    return vector
