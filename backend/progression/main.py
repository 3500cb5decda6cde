"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from progression.config import settings
from progression.core.errors import GameError
from progression.db.database import engine, Base
from progression.db.redis import close_redis
from progression.services.catalog_service import catalog_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables (dev only; use Alembic in production)
    import progression.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    for problem in catalog_service.validate():
        logger.warning("Catalog problem: %s", problem)
    yield
    # Shutdown: close connections
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title="Progression Engine API",
    description="Backend API for the puzzle, mission, room and alarm progression of a hacking adventure game",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind, **exc.details},
    )


# --- Routes ---
from progression.api.routes import alarm, missions, puzzles, rewards, rooms, session  # noqa: E402

app.include_router(session.router, prefix="/api/session", tags=["session"])
app.include_router(puzzles.router, prefix="/api/puzzles", tags=["puzzles"])
app.include_router(missions.router, prefix="/api/missions", tags=["missions"])
app.include_router(rooms.router, prefix="/api/rooms", tags=["rooms"])
app.include_router(alarm.router, prefix="/api/alarm", tags=["alarm"])
app.include_router(rewards.router, prefix="/api/rewards", tags=["rewards"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}
