"""Supabase storage helpers for room segments and questions."""

from __future__ import annotations

from typing import Any, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from src.config import Settings, settings
from src.errors import PersistenceFailedError, StoreUnavailableError
from src.models import Question, RankedSegment, Segment

SEGMENTS_TABLE = "audio_chunks"
QUESTIONS_TABLE = "questions"
MATCH_SEGMENTS_RPC = "match_room_segments"

# Supabase default for PostgREST max-rows
SEGMENT_PAGE_SIZE = 1000

# Errors raised by supabase-py when PostgREST rejects a request or the
# network call itself fails (including timeouts).
STORE_ERRORS: tuple[type[Exception], ...] = (APIError, httpx.HTTPError)


def get_supabase_client(config: Settings | None = None) -> Client:
    """Create a Supabase client with the configured request timeout."""
    config = config or settings
    return create_client(
        config.supabase_url,
        config.supabase_key,
        options=ClientOptions(postgrest_client_timeout=config.store_timeout_seconds),
    )


class SegmentStore:
    """Read-only access to the transcript segments of a room."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def list_by_room(self, room_id: str) -> list[Segment]:
        """Return every segment of ``room_id`` ordered by id.

        PostgREST caps each response at its ``max-rows`` setting, so rows are
        read in pages of ``SEGMENT_PAGE_SIZE`` until a short page comes back.
        """
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            try:
                result = (
                    self._client.table(SEGMENTS_TABLE)
                    .select("id,room_id,transcription,embeddings")
                    .eq("room_id", room_id)
                    .order("id")
                    .range(start, start + SEGMENT_PAGE_SIZE - 1)
                    .execute()
                )
            except STORE_ERRORS as exc:
                raise StoreUnavailableError(f"Could not load segments for room {room_id}") from exc
            page = cast(list[dict[str, Any]], result.data)
            rows.extend(page)
            if len(page) < SEGMENT_PAGE_SIZE:
                break
            start += SEGMENT_PAGE_SIZE
        return [Segment.from_row(r) for r in rows]

    def match_by_room(
        self,
        room_id: str,
        query_embedding: list[float],
        match_threshold: float,
        match_count: int,
    ) -> list[RankedSegment]:
        """Rank segments inside Postgres using the pgvector cosine operator.

        Expects a ``match_room_segments`` SQL function returning
        ``id, transcription, similarity`` where
        ``similarity = 1 - (embeddings <=> query_embedding)``, keeping rows with
        ``similarity > match_threshold`` ordered by similarity descending and
        limited to ``match_count``. Ties at the limit may be cut in any order;
        the ranker widens ``match_count`` until the cut-off is unambiguous.
        """
        try:
            result = self._client.rpc(
                MATCH_SEGMENTS_RPC,
                {
                    "query_embedding": query_embedding,
                    "filter_room_id": room_id,
                    "match_threshold": match_threshold,
                    "match_count": match_count,
                },
            ).execute()
        except STORE_ERRORS as exc:
            raise StoreUnavailableError(f"Could not match segments for room {room_id}") from exc
        rows = cast(list[dict[str, Any]], result.data)
        return [
            RankedSegment(
                segment=Segment(id=str(r["id"]), room_id=room_id, transcription=r["transcription"]),
                similarity=float(r["similarity"]),
            )
            for r in rows
        ]


class QuestionStore:
    """Insert-and-return persistence for questions."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def insert(self, question: str, room_id: str, answer: str | None) -> Question:
        """Insert a question and return the created record.

        Raises:
            PersistenceFailedError: The insert errored or returned no row.
        """
        try:
            result = (
                self._client.table(QUESTIONS_TABLE)
                .insert({"question": question, "room_id": room_id, "answer": answer})
                .execute()
            )
        except STORE_ERRORS as exc:
            raise PersistenceFailedError(f"Failed to create question in room {room_id}") from exc

        rows = cast(list[dict[str, Any]], result.data)
        if not rows:
            raise PersistenceFailedError("Failed to create question: insert returned no record")
        return Question.from_row(rows[0])

    def get(self, question_id: str) -> Question | None:
        try:
            result = self._client.table(QUESTIONS_TABLE).select("*").eq("id", question_id).execute()
        except STORE_ERRORS as exc:
            raise StoreUnavailableError(f"Could not load question {question_id}") from exc
        rows = cast(list[dict[str, Any]], result.data)
        return Question.from_row(rows[0]) if rows else None

    def list_by_room(self, room_id: str) -> list[Question]:
        """List questions of a room, newest first."""
        try:
            result = (
                self._client.table(QUESTIONS_TABLE)
                .select("*")
                .eq("room_id", room_id)
                .order("created_at", desc=True)
                .execute()
            )
        except STORE_ERRORS as exc:
            raise StoreUnavailableError(f"Could not list questions for room {room_id}") from exc
        rows = cast(list[dict[str, Any]], result.data)
        return [Question.from_row(r) for r in rows]
