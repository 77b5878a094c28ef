"""Claude-powered answer generation grounded in room transcripts."""

from __future__ import annotations

from anthropic import Anthropic, AnthropicError
from anthropic.types import TextBlock

from src.config import Settings
from src.errors import SynthesisFailedError

SYSTEM_PROMPT = (
    "You are assisting in a live session. Answer questions using only the "
    "transcript excerpts of what was said in the room.\n\n"
    "Rules:\n"
    "- Only answer based on the provided context. If the answer isn't "
    "in the context, say you don't have enough information.\n"
    "- Excerpts are ordered from most to least relevant; prefer earlier ones.\n"
    "- Be concise and direct, and answer in the language of the question."
)


def format_context(snippets: list[str]) -> str:
    """Number the snippets in the order given (most relevant first)."""
    return "\n\n".join(f"[Excerpt {i + 1}] {text}" for i, text in enumerate(snippets))


class AnswerSynthesizer:
    """Writes an answer from a question and supporting transcript snippets."""

    def __init__(self, client: Anthropic, model: str, max_tokens: int = 1024) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> AnswerSynthesizer:
        client = Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.synthesis_timeout_seconds,
            max_retries=0,
        )
        return cls(client, settings.llm_model, settings.max_answer_tokens)

    def synthesize(self, question: str, snippets: list[str]) -> str:
        """Generate an answer to ``question`` from ``snippets``.

        Args:
            question: The user's question.
            snippets: Transcript texts, best match first.

        Returns:
            The answer text.

        Raises:
            SynthesisFailedError: Provider error, timeout or non-text reply.
        """
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": (
                            f"Context from the room transcript:\n\n{format_context(snippets)}"
                            f"\n\nQuestion: {question}"
                        ),
                    }
                ],
            )
        except AnthropicError as exc:
            raise SynthesisFailedError(f"Answer generation failed: {exc}") from exc

        # We always request plain text, so the first block should be a TextBlock.
        block = response.content[0] if response.content else None
        if not isinstance(block, TextBlock):
            raise SynthesisFailedError(
                f"Expected TextBlock from Claude, got {type(block).__name__}"
            )
        return block.text
