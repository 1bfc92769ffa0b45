import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from asma.application.config import resolve_config
from asma.application.factory import get_practice_service
from asma.application.practice_service import PracticeService
from asma.application.session_composer import SessionOrdering
from asma.consts import VERSION

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("asma.server")

_service: PracticeService | None = None


def get_service() -> PracticeService:
    global _service
    if _service is None:
        _service = get_practice_service(resolve_config())
    return _service


def set_service(service: PracticeService | None) -> None:
    """Replace the process-wide service (used by tests and embedders)."""
    global _service
    _service = service


def _now() -> datetime:
    return datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"asma server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("asma server shutting down...")


app = FastAPI(
    title="asma server",
    description="Practice engine API for the 99 Names.",
    version=VERSION,
    lifespan=lifespan,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class StateModel(BaseModel):
    item_id: int
    interval: int
    ease_factor: float
    consecutive_correct: int
    last_reviewed: datetime | None
    next_review: datetime
    stage: str


class SessionEntry(BaseModel):
    item_id: int
    name: str
    arabic: str
    meaning: str
    type: str
    priority: int
    state: StateModel | None = None


class AnswerRequest(BaseModel):
    item_id: int
    answer: str


class AnswerResponse(BaseModel):
    correct: bool
    state: StateModel


class RateRequest(BaseModel):
    item_id: int
    quality: int = Field(ge=0, le=5)


class StatsResponse(BaseModel):
    total: int
    due: int
    new: int
    learning: int
    young: int
    mature: int
    total_sessions: int
    average_accuracy: float | None


start_time = time.time()


def _state_model(state) -> StateModel:
    return StateModel(**state.to_dict())


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/session", response_model=list[SessionEntry])
async def build_session(seconds: int | None = None, ordering: SessionOrdering | None = None):
    """Compose the next practice session."""
    try:
        entries = await get_service().build_session(_now(), seconds, ordering)
    except Exception as e:
        logger.error(f"Session build failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return [
        SessionEntry(
            item_id=e.item.id,
            name=e.item.name,
            arabic=e.item.arabic,
            meaning=e.item.meaning,
            type=e.item_type.value,
            priority=e.priority,
            state=_state_model(e.state) if e.state else None,
        )
        for e in entries
    ]


@app.post("/answer", response_model=AnswerResponse)
async def submit_answer(req: AnswerRequest):
    """Judge a free-text answer and record the review."""
    try:
        correct, state = await get_service().answer(req.item_id, req.answer, _now())
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0])) from None
    except Exception as e:
        logger.error(f"Answer failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return AnswerResponse(correct=correct, state=_state_model(state))


@app.post("/rate", response_model=StateModel)
async def rate_item(req: RateRequest):
    """Record a self-assessed 0-5 review."""
    try:
        state = await get_service().rate(req.item_id, req.quality, _now())
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0])) from None
    except Exception as e:
        logger.error(f"Rate failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return _state_model(state)


@app.get("/stats", response_model=StatsResponse)
async def get_stats():
    try:
        progress = await get_service().progress(_now())
    except Exception as e:
        logger.error(f"Stats failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return StatsResponse(
        total=progress.total,
        due=progress.due,
        new=progress.new,
        learning=progress.learning,
        young=progress.young,
        mature=progress.mature,
        total_sessions=progress.total_sessions,
        average_accuracy=progress.average_accuracy,
    )
