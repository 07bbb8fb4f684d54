from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class PlayerAlreadyExists(DomainException):
    def __init__(self, name: str) -> None:
        super().__init__(
            status_code=400,
            title="Player exists",
            detail=f"player name '{name}' already exists",
            code="player_exists",
        )


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class CompetitionNotFound(DomainException):
    def __init__(self, competition_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Competition not found",
            detail=f"competition '{competition_id}' not found",
            code="competition_not_found",
        )


class ScoreValidationError(DomainException):
    """Raised when a submitted result is not a ``"<home>-<away>"`` pair."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=422,
            title="Invalid score",
            detail=detail,
            code="invalid_score",
        )


class TransactionConflictError(DomainException):
    """Another writer changed the match between our read and our commit."""

    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Transaction conflict",
            detail=f"match '{match_id}' was modified concurrently; retry the update",
            code="transaction_conflict",
        )


class CommitFailure(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=503,
            title="Transactional commit failure",
            detail=f"could not commit changes for match '{match_id}'",
            code="commit_failed",
        )


class VoteAlreadyCast(DomainException):
    def __init__(self, match_id: str, voter_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Vote already cast",
            detail=f"'{voter_id}' has already voted on match '{match_id}'",
            code="vote_already_cast",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
