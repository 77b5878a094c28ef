"""Shared fixtures: unit vectors with a known similarity and a fake room."""

from __future__ import annotations

import math
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.models import Question, Segment
from src.storage import QuestionStore, SegmentStore

QUERY = [1.0, 0.0, 0.0]


def vector_with_similarity(similarity: float) -> list[float]:
    """A unit vector whose cosine similarity to ``QUERY`` is ``similarity``."""
    return [similarity, math.sqrt(1.0 - similarity**2), 0.0]


@pytest.fixture
def query_vector() -> list[float]:
    return list(QUERY)


@pytest.fixture
def make_segment() -> Callable[..., Segment]:
    def _make(seg_id: str, text: str, similarity: float, room_id: str = "R1") -> Segment:
        return Segment(
            id=seg_id,
            room_id=room_id,
            transcription=text,
            embedding=vector_with_similarity(similarity),
        )

    return _make


@pytest.fixture
def segment_store() -> MagicMock:
    store = MagicMock(spec=SegmentStore)
    store.list_by_room.return_value = []
    return store


@pytest.fixture
def question_store() -> MagicMock:
    """Question store whose insert echoes back a created record."""
    store = MagicMock(spec=QuestionStore)
    store.insert.side_effect = lambda question, room_id, answer: Question(
        id="q-1", room_id=room_id, question=question, answer=answer
    )
    return store


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
