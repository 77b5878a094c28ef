import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.questions import router as questions_router
from src.config import settings
from src.pipeline_config import RankingConfig
from src.retrieval.embeddings import Embedder
from src.retrieval.generation import AnswerSynthesizer
from src.retrieval.pipeline import QuestionPipeline
from src.retrieval.ranking import SimilarityRanker
from src.storage import QuestionStore, SegmentStore, get_supabase_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the provider clients and the pipeline once, shared by all requests."""
    client = get_supabase_client(settings)
    app.state.question_store = QuestionStore(client)
    app.state.pipeline = QuestionPipeline(
        embedder=Embedder.from_settings(settings),
        ranker=SimilarityRanker(
            SegmentStore(client),
            dimensions=settings.embedding_dimensions,
            config=RankingConfig.from_settings(settings),
        ),
        synthesizer=AnswerSynthesizer.from_settings(settings),
        questions=app.state.question_store,
    )
    yield


app = FastAPI(
    title="Room Questions API",
    description="Answers questions grounded in a room's transcribed audio",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(questions_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
