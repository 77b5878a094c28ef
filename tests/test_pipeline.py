"""Tests for the question answering pipeline (all collaborators mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.errors import (
    DimensionMismatchError,
    EmbeddingFailedError,
    InvalidInputError,
    PersistenceFailedError,
    RetrievalFailedError,
    StoreUnavailableError,
    SynthesisFailedError,
)
from src.retrieval.embeddings import Embedder
from src.retrieval.generation import AnswerSynthesizer
from src.retrieval.pipeline import QuestionPipeline
from src.retrieval.ranking import SimilarityRanker


@pytest.fixture
def embedder(query_vector) -> MagicMock:
    mock = MagicMock(spec=Embedder)
    mock.embed.return_value = query_vector
    return mock


@pytest.fixture
def synthesizer() -> MagicMock:
    mock = MagicMock(spec=AnswerSynthesizer)
    mock.synthesize.return_value = "The sky is blue."
    return mock


@pytest.fixture
def pipeline(embedder, segment_store, synthesizer, question_store) -> QuestionPipeline:
    ranker = SimilarityRanker(segment_store, dimensions=3)
    return QuestionPipeline(embedder, ranker, synthesizer, question_store)


class TestAnswerQuestion:
    def test_scenario_a_answers_from_relevant_segment(
        self, pipeline, segment_store, make_segment, synthesizer, question_store
    ) -> None:
        segment_store.list_by_room.return_value = [
            make_segment("1", "the sky is blue", 0.9),
            make_segment("2", "cats are mammals", 0.3),
        ]

        question = pipeline.answer_question("R1", "what color is the sky")

        assert question.answer == "The sky is blue."
        synthesizer.synthesize.assert_called_once_with("what color is the sky", ["the sky is blue"])
        question_store.insert.assert_called_once_with("what color is the sky", "R1", "The sky is blue.")

    def test_scenario_b_empty_room_persists_null_answer(
        self, pipeline, synthesizer, question_store
    ) -> None:
        question = pipeline.answer_question("R2", "anything")

        assert question.answer is None
        assert question.question == "anything"
        synthesizer.synthesize.assert_not_called()
        question_store.insert.assert_called_once_with("anything", "R2", None)

    def test_snippets_passed_best_first(
        self, pipeline, segment_store, make_segment, synthesizer
    ) -> None:
        segment_store.list_by_room.return_value = [
            make_segment("1", "third", 0.75),
            make_segment("2", "first", 0.95),
            make_segment("3", "second", 0.85),
            make_segment("4", "dropped", 0.72),
        ]

        pipeline.answer_question("R1", "question")

        _, snippets = synthesizer.synthesize.call_args.args
        assert snippets == ["first", "second", "third"]

    def test_returns_persisted_record(self, pipeline, question_store) -> None:
        question = pipeline.answer_question("R2", "anything")
        assert question.id == "q-1"
        assert question.room_id == "R2"


class TestValidation:
    def test_empty_question_rejected_before_any_call(
        self, pipeline, embedder, question_store
    ) -> None:
        with pytest.raises(InvalidInputError):
            pipeline.answer_question("R1", "")
        embedder.embed.assert_not_called()
        question_store.insert.assert_not_called()

    def test_whitespace_question_is_accepted(self, pipeline, embedder, question_store) -> None:
        question = pipeline.answer_question("R2", "   ")

        embedder.embed.assert_called_once_with("   ")
        assert question.answer is None
        question_store.insert.assert_called_once_with("   ", "R2", None)

    def test_empty_room_id_rejected(self, pipeline, embedder) -> None:
        with pytest.raises(InvalidInputError):
            pipeline.answer_question("", "what color is the sky")
        embedder.embed.assert_not_called()


class TestFailures:
    def test_scenario_c_embedding_failure_persists_nothing(
        self, pipeline, embedder, segment_store, question_store
    ) -> None:
        embedder.embed.side_effect = EmbeddingFailedError("provider timeout")

        with pytest.raises(EmbeddingFailedError):
            pipeline.answer_question("R1", "what color is the sky")

        segment_store.list_by_room.assert_not_called()
        question_store.insert.assert_not_called()

    def test_store_failure_becomes_retrieval_failed(
        self, pipeline, segment_store, question_store
    ) -> None:
        segment_store.list_by_room.side_effect = StoreUnavailableError("connection refused")

        with pytest.raises(RetrievalFailedError) as exc_info:
            pipeline.answer_question("R1", "what color is the sky")

        assert isinstance(exc_info.value.__cause__, StoreUnavailableError)
        question_store.insert.assert_not_called()

    def test_dimension_mismatch_propagates(self, pipeline, embedder, question_store) -> None:
        embedder.embed.return_value = [1.0, 0.0]

        with pytest.raises(DimensionMismatchError):
            pipeline.answer_question("R1", "what color is the sky")
        question_store.insert.assert_not_called()

    def test_synthesis_failure_does_not_persist_null_answer(
        self, pipeline, segment_store, make_segment, synthesizer, question_store
    ) -> None:
        segment_store.list_by_room.return_value = [make_segment("1", "the sky is blue", 0.9)]
        synthesizer.synthesize.side_effect = SynthesisFailedError("overloaded")

        with pytest.raises(SynthesisFailedError):
            pipeline.answer_question("R1", "what color is the sky")
        question_store.insert.assert_not_called()

    def test_persistence_failure_surfaces(self, pipeline, question_store) -> None:
        question_store.insert.side_effect = PersistenceFailedError("no record")

        with pytest.raises(PersistenceFailedError):
            pipeline.answer_question("R1", "what color is the sky")
        question_store.insert.assert_called_once()
