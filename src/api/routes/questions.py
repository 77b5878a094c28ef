"""Question endpoints: ask a question about a room and list past questions."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.models import CreateQuestionRequest, CreateQuestionResponse, QuestionResponse
from src.errors import (
    DimensionMismatchError,
    EmbeddingFailedError,
    InvalidInputError,
    PersistenceFailedError,
    QuestionPipelineError,
    RetrievalFailedError,
    StoreUnavailableError,
    SynthesisFailedError,
)
from src.retrieval.pipeline import QuestionPipeline
from src.storage import QuestionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rooms"])

_STATUS_BY_ERROR: list[tuple[type[QuestionPipelineError], int]] = [
    (InvalidInputError, 422),
    (EmbeddingFailedError, 503),
    (RetrievalFailedError, 503),
    (SynthesisFailedError, 503),
    (StoreUnavailableError, 503),
    (DimensionMismatchError, 500),
    (PersistenceFailedError, 500),
]


def get_pipeline(request: Request) -> QuestionPipeline:
    """The pipeline built once at startup (see ``src.api.main.lifespan``)."""
    return request.app.state.pipeline  # type: ignore[no-any-return]


def get_question_store(request: Request) -> QuestionStore:
    return request.app.state.question_store  # type: ignore[no-any-return]


def to_http_error(exc: QuestionPipelineError) -> HTTPException:
    """Map a pipeline failure to an HTTP error; unknown kinds become 500."""
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
    return HTTPException(status_code=status, detail=str(exc))


@router.post(
    "/rooms/{room_id}/questions",
    response_model=CreateQuestionResponse,
    status_code=201,
    summary="Create a new question",
)
def create_question(
    room_id: str,
    body: CreateQuestionRequest,
    pipeline: Annotated[QuestionPipeline, Depends(get_pipeline)],
) -> CreateQuestionResponse:
    """Answer a question from the room's transcript, or store it unanswered.

    A null ``answer`` means no transcript segment was relevant enough; it is
    a successful result, not an error.
    """
    try:
        question = pipeline.answer_question(room_id, body.question)
    except QuestionPipelineError as exc:
        logger.warning("Question in room %s failed: %s: %s", room_id, type(exc).__name__, exc)
        raise to_http_error(exc) from exc

    return CreateQuestionResponse(question_id=question.id, answer=question.answer)


@router.get("/rooms/{room_id}/questions", response_model=list[QuestionResponse])
def list_questions(
    room_id: str,
    store: Annotated[QuestionStore, Depends(get_question_store)],
) -> list[QuestionResponse]:
    """List the questions asked in a room, newest first."""
    try:
        questions = store.list_by_room(room_id)
    except QuestionPipelineError as exc:
        raise to_http_error(exc) from exc
    return [QuestionResponse.from_question(q) for q in questions]


@router.get("/questions/{question_id}", response_model=QuestionResponse)
def get_question(
    question_id: str,
    store: Annotated[QuestionStore, Depends(get_question_store)],
) -> QuestionResponse:
    """Read back a stored question with the answer decided at creation."""
    try:
        question = store.get(question_id)
    except QuestionPipelineError as exc:
        raise to_http_error(exc) from exc
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return QuestionResponse.from_question(question)
