"""Question answering pipeline: validate -> embed -> rank -> gate -> synthesize -> persist."""

from __future__ import annotations

import logging

from src.errors import InvalidInputError, RetrievalFailedError, StoreUnavailableError
from src.models import Question
from src.retrieval.embeddings import Embedder
from src.retrieval.generation import AnswerSynthesizer
from src.retrieval.ranking import SimilarityRanker
from src.storage import QuestionStore

logger = logging.getLogger(__name__)


class QuestionPipeline:
    """Answers a question about a room from its transcript, or records no answer.

    The collaborators are long-lived and shared; the pipeline itself keeps no
    per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        embedder: Embedder,
        ranker: SimilarityRanker,
        synthesizer: AnswerSynthesizer,
        questions: QuestionStore,
    ) -> None:
        self.embedder = embedder
        self.ranker = ranker
        self.synthesizer = synthesizer
        self.questions = questions

    def answer_question(self, room_id: str, question_text: str) -> Question:
        """Answer ``question_text`` using the segments of ``room_id``.

        An answer is only synthesized when at least one segment clears the
        similarity gate; otherwise the question is stored with no answer.
        Any failure aborts the request before the question is written.

        Returns:
            The persisted Question.

        Raises:
            InvalidInputError: Empty question or room id.
            EmbeddingFailedError: The question could not be embedded.
            DimensionMismatchError: Query and stored vectors disagree in size.
            RetrievalFailedError: The segment store could not be queried.
            SynthesisFailedError: Evidence was found but no answer was produced.
            PersistenceFailedError: The question could not be stored.
        """
        # 1. Validate
        if not room_id:
            raise InvalidInputError("Room id must not be empty")
        if not question_text:
            raise InvalidInputError("Question must not be empty")

        # 2. Embed
        query_vector = self.embedder.embed(question_text)

        # 3. Rank
        try:
            ranked = self.ranker.rank(room_id, query_vector)
        except StoreUnavailableError as exc:
            logger.warning("Segment retrieval failed for room %s", room_id)
            raise RetrievalFailedError(str(exc)) from exc

        # 4. Gate + 5. Synthesize
        answer: str | None = None
        if ranked:
            logger.info(
                "Room %s: %d segment(s) cleared the gate (best %.3f)",
                room_id,
                len(ranked),
                ranked[0].similarity,
            )
            answer = self.synthesizer.synthesize(question_text, [r.transcription for r in ranked])
        else:
            logger.info("Room %s: no segment cleared the gate, storing without answer", room_id)

        # 6. Persist
        question = self.questions.insert(question_text, room_id, answer)
        logger.info("Created question %s in room %s", question.id, room_id)
        return question
