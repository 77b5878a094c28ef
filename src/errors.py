"""Failure kinds raised by the question-answering pipeline.

Each external step has its own error so callers can tell a failed request
apart from a successful one that simply found no relevant evidence.
"""

from __future__ import annotations


class QuestionPipelineError(Exception):
    """Base class for every pipeline failure."""


class InvalidInputError(QuestionPipelineError):
    """Question text (or room id) is empty or malformed."""


class DimensionMismatchError(QuestionPipelineError):
    """A vector does not have the configured embedding dimensionality."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected a vector of {expected} dimensions, got {actual}")
        self.expected = expected
        self.actual = actual


class StoreUnavailableError(QuestionPipelineError):
    """The segment or question store could not be reached."""


class EmbeddingFailedError(QuestionPipelineError):
    """The embedding provider errored, timed out or returned a bad vector."""


class RetrievalFailedError(QuestionPipelineError):
    """Ranking stored segments failed."""


class SynthesisFailedError(QuestionPipelineError):
    """The answer provider errored or timed out after evidence was found."""


class PersistenceFailedError(QuestionPipelineError):
    """The question insert failed or did not return the created record."""
