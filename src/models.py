"""Data models for rooms, transcript segments and questions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


def parse_embedding(value: Any) -> list[float]:
    """Normalise a stored embedding to a list of floats.

    PostgREST serialises pgvector columns as text (``"[0.1,0.2]"``), while
    RPC results and tests may hand back plain lists.
    """
    if isinstance(value, str):
        value = json.loads(value)
    return [float(v) for v in value]


@dataclass(frozen=True)
class Segment:
    """A transcribed audio chunk belonging to exactly one room."""

    id: str
    room_id: str
    transcription: str
    embedding: list[float] = field(default_factory=list, repr=False)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Segment:
        return cls(
            id=str(row["id"]),
            room_id=str(row["room_id"]),
            transcription=row["transcription"],
            embedding=parse_embedding(row["embeddings"]),
        )


@dataclass(frozen=True)
class RankedSegment:
    """A segment paired with its cosine similarity to the query."""

    segment: Segment
    similarity: float

    @property
    def transcription(self) -> str:
        return self.segment.transcription


@dataclass(frozen=True)
class Question:
    """A persisted question and the answer decided when it was created."""

    id: str
    room_id: str
    question: str
    answer: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Question:
        return cls(
            id=str(row["id"]),
            room_id=str(row["room_id"]),
            question=row["question"],
            answer=row.get("answer"),
            created_at=row.get("created_at"),
        )
