"""Cosine-similarity ranking of a room's transcript segments."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from src.errors import DimensionMismatchError
from src.models import RankedSegment, Segment
from src.pipeline_config import RankingConfig, RankingStrategy
from src.storage import SegmentStore


def cosine_similarities(query: Sequence[float], embeddings: Sequence[Sequence[float]]) -> np.ndarray:
    """Return ``1 - cosine_distance`` between ``query`` and each embedding.

    Zero-norm vectors get a similarity of 0.
    """
    if not embeddings:
        return np.zeros(0)
    matrix = np.asarray(embeddings, dtype=np.float64)
    q = np.asarray(query, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(norms > 0, dots / norms, 0.0)
    return np.clip(sims, -1.0, 1.0)


def segment_id_key(seg_id: str) -> tuple[int, int, str]:
    """Sort key matching Postgres ``order by id``: numeric ids by value, others as text."""
    if seg_id.isdigit():
        return (0, int(seg_id), "")
    return (1, 0, seg_id)


def select_top(candidates: list[RankedSegment], config: RankingConfig) -> list[RankedSegment]:
    """Apply the similarity gate, order best-first and truncate to top_k.

    Ties are broken by segment id so the ordering never depends on storage.
    """
    relevant = [c for c in candidates if c.similarity > config.similarity_threshold]
    relevant.sort(key=lambda c: (-c.similarity, segment_id_key(c.segment.id)))
    return relevant[: config.top_k]


def rank_segments(
    segments: Sequence[Segment],
    query_vector: Sequence[float],
    config: RankingConfig,
) -> list[RankedSegment]:
    """Rank already-loaded segments against ``query_vector``."""
    for segment in segments:
        if len(segment.embedding) != len(query_vector):
            raise DimensionMismatchError(len(query_vector), len(segment.embedding))

    sims = cosine_similarities(query_vector, [s.embedding for s in segments])
    candidates = [
        RankedSegment(segment=s, similarity=float(sim)) for s, sim in zip(segments, sims, strict=True)
    ]
    return select_top(candidates, config)


class SimilarityRanker:
    """Returns the most relevant segments of a room for a query vector."""

    def __init__(self, store: SegmentStore, dimensions: int, config: RankingConfig | None = None) -> None:
        self._store = store
        self.dimensions = dimensions
        self.config = config or RankingConfig()

    def rank(self, room_id: str, query_vector: Sequence[float]) -> list[RankedSegment]:
        """Rank the segments of ``room_id`` by similarity to ``query_vector``.

        Returns at most ``top_k`` segments, each strictly above the threshold,
        best first. A room without segments yields an empty list.

        Raises:
            DimensionMismatchError: The query vector has the wrong length.
            StoreUnavailableError: The segment store could not be reached.
        """
        if len(query_vector) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(query_vector))

        if self.config.strategy is RankingStrategy.DATABASE:
            return self._rank_in_database(room_id, list(query_vector))

        segments = self._store.list_by_room(room_id)
        return rank_segments(segments, query_vector, self.config)

    def _rank_in_database(self, room_id: str, query_vector: list[float]) -> list[RankedSegment]:
        """Rank via the pgvector RPC, widening the fetch while the cut-off is tied.

        The RPC truncates ties at ``match_count`` in its own order, so fetch one
        row past ``top_k`` and keep doubling while the last fetched row still
        ties the last selected one. ``select_top`` then applies the id tie-break.
        """
        count = self.config.top_k + 1
        while True:
            matched = self._store.match_by_room(
                room_id,
                query_vector,
                match_threshold=self.config.similarity_threshold,
                match_count=count,
            )
            top = select_top(matched, self.config)
            if not top or len(matched) < count or len(top) < self.config.top_k:
                return top
            if min(m.similarity for m in matched) < top[-1].similarity:
                return top
            count *= 2
