import re
from typing import Any, Optional, Tuple

from ..exceptions import ScoreValidationError

# Each side of a score is capped at three digits.
MAX_SCORE_DIGITS = 3
RESULT_PATTERN = re.compile(
    rf"[0-9]{{1,{MAX_SCORE_DIGITS}}}-[0-9]{{1,{MAX_SCORE_DIGITS}}}"
)


class ValidationError(Exception):
    """Raised when a submitted request payload is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_result(value: Any) -> Optional[str]:
    """Validate a match result string.

    Rules:
    - ``None`` means the match is unplayed and is always accepted
    - otherwise the value must be a string in the exact form ``"<int>-<int>"``
    - both integers are non-negative (the pattern admits no sign) and have
      at most ``MAX_SCORE_DIGITS`` digits

    Returns the accepted value unchanged so callers can chain it.
    """

    if value is None:
        return None
    if not isinstance(value, str):
        raise ScoreValidationError("Score must be in 'X-Y' format.")
    if not RESULT_PATTERN.fullmatch(value):
        raise ScoreValidationError("Score must be in 'X-Y' format.")
    return value


def parse_result(value: str) -> Tuple[int, int]:
    """Split a validated ``"home-away"`` string into integer scores."""

    validate_result(value)
    home, away = value.split("-")
    return int(home), int(away)


def validate_vote(
    participants: list[str], best_player_id: str, worst_player_id: str
) -> None:
    if not best_player_id or not worst_player_id:
        raise ValidationError("Both a best and a worst player are required.")
    if best_player_id == worst_player_id:
        raise ValidationError("Best and worst player must be different players.")
    for pid in (best_player_id, worst_player_id):
        if pid not in participants:
            raise ValidationError(f"Player '{pid}' did not take part in this match.")
