"""Puzzle service - the solve protocol, hints and attempt resets.

Every decision is recomputed from the server-held attempt ledger; the
client's elapsed time is only compared against the configured limit.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.core import answer_checker
from progression.core.errors import InvalidRequestError, NotFoundError
from progression.models.attempt import AttemptRecord
from progression.models.player import PlayerSession
from progression.models.reward import KIND_BITCOIN, KIND_EXP
from progression.schemas.notification import Notification
from progression.schemas.puzzle import (
    HintResponse,
    PuzzleProgress,
    PuzzleRewards,
    PuzzleView,
    ResetAttemptsResponse,
    SolvePuzzleResponse,
)
from progression.services.alarm_service import alarm_service
from progression.services.catalog_service import CatalogService, catalog_service
from progression.services.reward_service import puzzle_source, reward_service

logger = logging.getLogger(__name__)

EXHAUSTED_REASON = "puzzle exhausted"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PuzzleService:
    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    @staticmethod
    async def get_record(db: AsyncSession, player_id: int, puzzle_id: str) -> AttemptRecord | None:
        result = await db.execute(
            select(AttemptRecord).where(
                AttemptRecord.player_id == player_id, AttemptRecord.puzzle_id == puzzle_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_or_create_record(db: AsyncSession, player_id: int, puzzle_id: str) -> AttemptRecord:
        record = await PuzzleService.get_record(db, player_id, puzzle_id)
        if record is None:
            record = AttemptRecord(
                player_id=player_id, puzzle_id=puzzle_id, attempts=0, hints_used=0, answered_questions=[]
            )
            db.add(record)
            await db.flush()
        return record

    async def solve(
        self,
        db: AsyncSession,
        player: PlayerSession,
        puzzle_id: str,
        answer: str,
        time_spent: int | None = None,
        question_id: str | None = None,
    ) -> SolvePuzzleResponse:
        puzzle = self.catalog.get_puzzle(puzzle_id)
        if puzzle.is_multi_question:
            if not question_id:
                raise InvalidRequestError("question_id is required for this puzzle", puzzle_id=puzzle_id)
            if question_id not in puzzle.question_ids:
                raise NotFoundError(
                    f"Question {question_id} not found in puzzle {puzzle_id}", question_id=question_id
                )
        record = await self.get_or_create_record(db, player.id, puzzle_id)

        if record.is_completed:
            return SolvePuzzleResponse(
                puzzle_id=puzzle_id,
                is_correct=False,
                attempts=record.attempts,
                max_attempts=puzzle.max_attempts,
                new_alarm_level=player.alarm_level,
                already_completed=True,
                message="Puzzle already solved",
                **self._question_fields(puzzle, record, question_id),
            )

        # Stale or duplicate submission: the server never grants an extra attempt
        if record.attempts >= puzzle.max_attempts:
            return SolvePuzzleResponse(
                puzzle_id=puzzle_id,
                is_correct=False,
                attempts=record.attempts,
                max_attempts=puzzle.max_attempts,
                max_attempts_reached=True,
                new_alarm_level=player.alarm_level,
                message="Maximum number of attempts reached",
                **self._question_fields(puzzle, record, question_id),
            )

        if puzzle.is_multi_question and record.has_answered(question_id):
            return SolvePuzzleResponse(
                puzzle_id=puzzle_id,
                is_correct=False,
                attempts=record.attempts,
                max_attempts=puzzle.max_attempts,
                new_alarm_level=player.alarm_level,
                message="Question already answered",
                **self._question_fields(puzzle, record, question_id),
            )

        time_limit_exceeded = (
            puzzle.time_limit_seconds is not None
            and time_spent is not None
            and time_spent > puzzle.time_limit_seconds
        )
        if time_limit_exceeded:
            correct = False
        elif puzzle.is_multi_question:
            correct = answer_checker.check_question(answer, puzzle.solution, question_id)
        else:
            correct = answer_checker.is_correct(puzzle.type, answer, puzzle.solution)

        record.attempts += 1
        if correct and puzzle.is_multi_question:
            record.mark_answered(question_id)
        completed = correct and all(record.has_answered(q) for q in puzzle.question_ids)

        if completed:
            record.completed_at = _utcnow()
            if puzzle.time_limit_seconds is not None and time_spent is not None:
                if record.best_time_seconds is None or time_spent < record.best_time_seconds:
                    record.best_time_seconds = time_spent
            player.mark_puzzle_completed(puzzle_id)
            rewards = await self._grant_rewards(db, player, puzzle)
            await db.flush()
            logger.info("Player %s solved %s in %s attempt(s)", player.id, puzzle_id, record.attempts)
            return SolvePuzzleResponse(
                puzzle_id=puzzle_id,
                is_correct=True,
                attempts=record.attempts,
                max_attempts=puzzle.max_attempts,
                new_alarm_level=player.alarm_level,
                message="Correct answer",
                rewards=rewards,
                notifications=[
                    Notification(
                        type="puzzle_solved",
                        message=f"{puzzle.name or puzzle_id} solved",
                        data={"puzzle_id": puzzle_id, "exp": rewards.exp, "items": rewards.items},
                    )
                ],
                **self._question_fields(puzzle, record, question_id, correct=True),
            )

        if correct:
            remaining = len(puzzle.question_ids) - len(record.answered_questions)
            message = f"Correct answer, {remaining} question(s) left"
        elif time_limit_exceeded:
            message = "Time limit exceeded"
        else:
            message = "Wrong answer"

        if record.attempts < puzzle.max_attempts:
            await db.flush()
            return SolvePuzzleResponse(
                puzzle_id=puzzle_id,
                is_correct=correct,
                attempts=record.attempts,
                max_attempts=puzzle.max_attempts,
                new_alarm_level=player.alarm_level,
                time_limit_exceeded=time_limit_exceeded,
                message=message,
                **self._question_fields(puzzle, record, question_id, correct=correct),
            )

        # Exhausted without completing: the attempt counter (and any partial
        # multi_question progress) starts over and the alarm goes up by one
        record.attempts = 0
        record.answered_questions = []
        await db.flush()
        question_fields = self._question_fields(puzzle, record, question_id, correct=correct)
        outcome = await alarm_service.increase(db, player, EXHAUSTED_REASON, puzzle_id=puzzle_id)
        logger.info("Player %s exhausted %s, alarm now %s", player.id, puzzle_id, outcome.new_level)

        return SolvePuzzleResponse(
            puzzle_id=puzzle_id,
            is_correct=correct,
            attempts=0,
            max_attempts=puzzle.max_attempts,
            max_attempts_reached=True,
            alarm_level_increased=True,
            new_alarm_level=outcome.new_level,
            is_first_alarm_level=outcome.is_first_alarm,
            caught=outcome.caught,
            time_limit_exceeded=time_limit_exceeded,
            message=f"{message}. Maximum number of attempts reached",
            notifications=outcome.notifications,
            **question_fields,
        )

    @staticmethod
    def _question_fields(puzzle, record, question_id, correct: bool = False) -> dict:
        if not puzzle.is_multi_question:
            return {}
        explanation = None
        if correct:
            explanation = puzzle.solution["questions"][question_id].get("explanation")
        return {
            "question_id": question_id,
            "answered_questions": list(record.answered_questions or []),
            "total_questions": len(puzzle.question_ids),
            "explanation": explanation,
        }

    @staticmethod
    async def _grant_rewards(db, player, puzzle) -> PuzzleRewards:
        source = puzzle_source(puzzle.id)
        exp = 0
        bitcoins = Decimal("0")
        if puzzle.reward_exp > 0 and await reward_service.apply(db, player, source, KIND_EXP, puzzle.reward_exp):
            exp = puzzle.reward_exp
        if puzzle.reward_bitcoins > 0 and await reward_service.apply(
            db, player, source, KIND_BITCOIN, puzzle.reward_bitcoins
        ):
            bitcoins = puzzle.reward_bitcoins
        for item_id in puzzle.reward_items:
            player.add_item(item_id)
        return PuzzleRewards(exp=exp, bitcoins=bitcoins, items=list(puzzle.reward_items))

    async def request_hint(self, db: AsyncSession, player: PlayerSession, puzzle_id: str) -> HintResponse:
        """Hand out the next unused hint. Never touches attempts."""
        puzzle = self.catalog.get_puzzle(puzzle_id)
        record = await self.get_or_create_record(db, player.id, puzzle_id)

        hint = None
        if record.hints_used < len(puzzle.hints):
            hint = puzzle.hints[record.hints_used]
            record.hints_used += 1
            await db.flush()

        return HintResponse(
            puzzle_id=puzzle_id,
            hint=hint,
            hints_used=record.hints_used,
            hints_remaining=len(puzzle.hints) - record.hints_used,
        )

    async def reset_attempts(
        self, db: AsyncSession, player: PlayerSession, puzzle_id: str, reason: str
    ) -> ResetAttemptsResponse:
        """Explicit administrative reset of a puzzle's attempt counter."""
        self.catalog.get_puzzle(puzzle_id)
        record = await self.get_or_create_record(db, player.id, puzzle_id)
        previous = record.attempts
        record.attempts = 0
        await db.flush()
        logger.info(
            "Reset attempts for player %s puzzle %s from %s to 0: %s", player.id, puzzle_id, previous, reason
        )
        return ResetAttemptsResponse(puzzle_id=puzzle_id, attempts=0, reason=reason)

    async def describe(self, db: AsyncSession, player: PlayerSession, puzzle_id: str) -> PuzzleView:
        puzzle = self.catalog.get_puzzle(puzzle_id)
        record = await self.get_record(db, player.id, puzzle_id)
        progress = PuzzleProgress()
        if record is not None:
            progress = PuzzleProgress(
                is_completed=record.is_completed,
                attempts=record.attempts,
                hints_used=record.hints_used,
                best_time_seconds=record.best_time_seconds,
                completed_at=record.completed_at,
                answered_questions=list(record.answered_questions or []),
            )
        return PuzzleView(
            id=puzzle.id,
            room_id=puzzle.room_id,
            name=puzzle.name,
            description=puzzle.description,
            type=puzzle.type,
            max_attempts=puzzle.max_attempts,
            time_limit_seconds=puzzle.time_limit_seconds,
            hint_count=len(puzzle.hints),
            data=puzzle.data,
            progress=progress,
        )


puzzle_service = PuzzleService(catalog_service)
