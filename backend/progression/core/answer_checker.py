"""Type-specific correctness rules for puzzle answers.

Each rule reads its configuration from the puzzle's ``solution`` mapping:

- multiple_choice: ``correct_answer``
- code: ``expected_input``, ``case_sensitive`` (default False), ``allow_partial``
- password: ``hash_type`` + ``expected_hash``, or ``plaintext`` + ``case_sensitive`` (default True)
- terminal_command: ``allowed_commands`` (prefix allow-list) or ``expected_command``
- sequence: ``next_number`` or ``solution``
- logic: ``solution``
- multi_question: ``questions`` mapping question id -> ``correct_answer`` (+ ``explanation``),
  checked one question at a time with :func:`check_question`
- anything else: ``expected_input``
"""

import hashlib
import hmac
from collections.abc import Callable
from typing import Any

from progression.core.errors import ContentError

SUPPORTED_HASHES = {"md5", "sha1", "sha256"}


def _norm(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _ci_equal(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def check_multiple_choice(answer: str, solution: dict) -> bool:
    expected = _norm(solution.get("correct_answer"))
    return bool(expected) and _ci_equal(_norm(answer), expected)


def check_code(answer: str, solution: dict) -> bool:
    expected = _norm(solution.get("expected_input"))
    if not expected:
        return False
    given = _norm(answer)
    case_sensitive = bool(solution.get("case_sensitive", False))

    if case_sensitive:
        correct = given == expected
    else:
        correct = _ci_equal(given, expected)

    if not correct and solution.get("allow_partial"):
        if case_sensitive:
            correct = expected in given
        else:
            correct = expected.casefold() in given.casefold()
    return correct


def check_password(answer: str, solution: dict) -> bool:
    hash_type = solution.get("hash_type")
    expected_hash = solution.get("expected_hash")
    if hash_type and expected_hash:
        if hash_type not in SUPPORTED_HASHES:
            raise ContentError(f"Unsupported hash type: {hash_type}", hash_type=hash_type)
        digest = hashlib.new(hash_type, answer.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, str(expected_hash).lower())

    plaintext = solution.get("plaintext")
    if plaintext is None:
        return False
    if solution.get("case_sensitive", True):
        return answer == str(plaintext)
    return _ci_equal(answer, str(plaintext))


def check_terminal_command(answer: str, solution: dict) -> bool:
    given = " ".join(answer.split())
    if not given:
        return False

    expected = solution.get("expected_command")
    if expected is not None:
        return given == " ".join(str(expected).split())

    allowed = solution.get("allowed_commands") or []
    command = given.split(" ", 1)[0].casefold()
    return any(command == str(cmd).strip().casefold() for cmd in allowed)


def check_sequence(answer: str, solution: dict) -> bool:
    if "next_number" in solution:
        try:
            return int(_norm(answer)) == int(solution["next_number"])
        except (TypeError, ValueError):
            return False
    return _norm(answer) == _norm(solution.get("solution"))


def check_logic(answer: str, solution: dict) -> bool:
    expected = solution.get("solution")
    return expected is not None and _norm(answer) == _norm(expected)


def check_literal(answer: str, solution: dict) -> bool:
    expected = solution.get("expected_input")
    return expected is not None and _norm(answer) == _norm(expected)


def check_question(answer: str, solution: dict, question_id: str) -> bool:
    """One question of a multi_question puzzle, compared like a multiple choice answer."""
    question = (solution.get("questions") or {}).get(question_id) or {}
    return check_multiple_choice(answer or "", question)


RULES: dict[str, Callable[[str, dict], bool]] = {
    "multiple_choice": check_multiple_choice,
    "code": check_code,
    "password": check_password,
    "terminal_command": check_terminal_command,
    "sequence": check_sequence,
    "logic": check_logic,
}


def is_correct(puzzle_type: str, answer: str, solution: dict) -> bool:
    """Evaluate an answer with the rule registered for the puzzle type."""
    rule = RULES.get(puzzle_type, check_literal)
    return rule(answer or "", solution or {})
