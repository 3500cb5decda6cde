"""Error kinds raised by the game services and mapped to HTTP responses in main.py.

Game-rule outcomes (wrong answer, exhausted attempts, locked exit, already
completed) are not errors: they come back as regular results.
"""


class GameError(Exception):
    status_code = 400
    kind = "game_error"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(GameError):
    """Unknown player, puzzle, mission, room, exit or step id."""

    status_code = 404
    kind = "not_found"


class ConcurrencyConflictError(GameError):
    """Another mutating call for the same player overlapped; the caller must retry."""

    status_code = 409
    kind = "concurrency_conflict"


class MissionIncompleteError(GameError):
    status_code = 409
    kind = "mission_incomplete"


class IdempotencyKeyReusedError(GameError):
    status_code = 422
    kind = "idempotency_key_reused"


class InvalidRequestError(GameError):
    status_code = 422
    kind = "invalid_request"


class ContentError(GameError):
    """The read-only catalog references something that does not exist or cannot be evaluated."""

    status_code = 500
    kind = "content_error"
