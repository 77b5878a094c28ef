"""Pydantic request/response schemas for the Room Questions API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models import Question


class CamelModel(BaseModel):
    """Serialises snake_case fields as camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateQuestionRequest(BaseModel):
    """Request body for POST /rooms/{room_id}/questions."""

    question: str = Field(min_length=1)


class CreateQuestionResponse(CamelModel):
    """Response body for POST /rooms/{room_id}/questions."""

    question_id: str
    answer: str | None


class QuestionResponse(CamelModel):
    """A stored question as returned by GET /rooms/{room_id}/questions."""

    id: str
    room_id: str
    question: str
    answer: str | None = None
    created_at: str | None = None

    @classmethod
    def from_question(cls, question: Question) -> QuestionResponse:
        return cls(
            id=question.id,
            room_id=question.room_id,
            question=question.question,
            answer=question.answer,
            created_at=question.created_at,
        )
