"""Puzzle endpoints - view, solve, hints and attempt resets."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.db.redis import get_redis
from progression.schemas.puzzle import (
    HintResponse,
    PuzzleView,
    ResetAttemptsRequest,
    ResetAttemptsResponse,
    SolvePuzzleRequest,
    SolvePuzzleResponse,
)
from progression.services.operation_service import run_player_operation
from progression.services.puzzle_service import puzzle_service
from progression.services.session_service import session_service

router = APIRouter()


@router.get("/{puzzle_id}", response_model=PuzzleView)
async def get_puzzle(puzzle_id: str, player_id: int, db: AsyncSession = Depends(get_db)):
    """Puzzle definition (without its solution) and the player's progress on it."""
    player = await session_service.require(db, player_id)
    return await puzzle_service.describe(db, player, puzzle_id)


@router.post("/{puzzle_id}/solve", response_model=SolvePuzzleResponse)
async def solve_puzzle(
    puzzle_id: str,
    req: SolvePuzzleRequest,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    """Submit an answer. Wrong answers and exhausted attempts are results, not errors."""
    return await run_player_operation(
        db, redis, player_id, "solve_puzzle",
        lambda player: puzzle_service.solve(
            db, player, puzzle_id, req.answer, req.time_spent, question_id=req.question_id
        ),
        response_model=SolvePuzzleResponse, request_id=idempotency_key,
    )


@router.post("/{puzzle_id}/hint", response_model=HintResponse)
async def request_hint(
    puzzle_id: str,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    return await run_player_operation(
        db, redis, player_id, "request_hint",
        lambda player: puzzle_service.request_hint(db, player, puzzle_id),
        response_model=HintResponse, request_id=idempotency_key,
    )


@router.post("/{puzzle_id}/reset-attempts", response_model=ResetAttemptsResponse)
async def reset_puzzle_attempts(
    puzzle_id: str,
    player_id: int,
    req: ResetAttemptsRequest | None = None,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    """Administrative reset of a puzzle's attempt counter."""
    reason = req.reason if req else ResetAttemptsRequest().reason
    return await run_player_operation(
        db, redis, player_id, "reset_attempts",
        lambda player: puzzle_service.reset_attempts(db, player, puzzle_id, reason),
        response_model=ResetAttemptsResponse,
    )
