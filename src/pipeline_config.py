"""Ranking configuration: strategy enum and RankingConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.config import Settings

TOP_K = 3
SIMILARITY_THRESHOLD = 0.7


class RankingStrategy(str, Enum):
    """Where cosine similarity is computed."""

    IN_PROCESS = "in_process"
    DATABASE = "database"


@dataclass(frozen=True)
class RankingConfig:
    """Immutable configuration for the similarity ranker.

    A segment is relevant only if its similarity is strictly greater than
    ``similarity_threshold``; at most ``top_k`` segments are returned.
    """

    top_k: int = TOP_K
    similarity_threshold: float = SIMILARITY_THRESHOLD
    strategy: RankingStrategy = RankingStrategy.IN_PROCESS

    @classmethod
    def from_settings(cls, settings: Settings) -> RankingConfig:
        return cls(
            top_k=settings.top_k,
            similarity_threshold=settings.similarity_threshold,
            strategy=RankingStrategy(settings.ranking_strategy),
        )
