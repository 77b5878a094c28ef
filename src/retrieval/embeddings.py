"""Question embedding using OpenAI text-embedding-3-small."""

from __future__ import annotations

from openai import OpenAI, OpenAIError

from src.config import Settings
from src.errors import EmbeddingFailedError


class Embedder:
    """Turns text into a fixed-length embedding vector.

    Holds one long-lived OpenAI client; build it once at startup and share it
    across requests.
    """

    def __init__(self, client: OpenAI, model: str, dimensions: int) -> None:
        self._client = client
        self.model = model
        self.dimensions = dimensions

    @classmethod
    def from_settings(cls, settings: Settings) -> Embedder:
        client = OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.embedding_timeout_seconds,
            max_retries=0,
        )
        return cls(client, settings.embedding_model, settings.embedding_dimensions)

    def embed(self, text: str) -> list[float]:
        """Embed ``text`` and check the vector has the configured size.

        Raises:
            EmbeddingFailedError: Provider error, timeout, or unexpected shape.
        """
        try:
            response = self._client.embeddings.create(input=[text], model=self.model)
        except OpenAIError as exc:
            raise EmbeddingFailedError(f"Embedding request failed: {exc}") from exc

        if not response.data:
            raise EmbeddingFailedError("Embedding response contained no vectors")
        embedding = list(response.data[0].embedding)
        if len(embedding) != self.dimensions:
            raise EmbeddingFailedError(
                f"Embedding has {len(embedding)} dimensions, expected {self.dimensions}"
            )
        return embedding
