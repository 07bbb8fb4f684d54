from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict


class PlayerStatsOut(BaseModel):
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goalsFor: int = 0
    goalsAgainst: int = 0
    goalDifference: int = 0
    points: int = 0
    assists: int = 0


class PlayerCreate(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: str = Field(
        ..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9 '-]+$"
    )
    nickname: Optional[str] = Field(default=None, max_length=50)
    role: Literal["player", "admin"] = "player"

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("name must be a string")
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class PlayerOut(BaseModel):
    id: str
    name: str
    nickname: Optional[str] = None
    role: str
    isActive: bool = True
    stats: PlayerStatsOut = Field(default_factory=PlayerStatsOut)
    bestPlayerVotes: int = 0
    worstPlayerVotes: int = 0


class PlayerListOut(BaseModel):
    players: List[PlayerOut]
    total: int
    limit: int
    offset: int


class PlayerFormOut(BaseModel):
    """Recent form indicators for a player."""

    playerId: str
    results: List[str] = Field(default_factory=list)
    lastFive: List[str] = Field(default_factory=list)
    rollingWinPct: List[float] = Field(default_factory=list)
    currentStreak: str = ""
    longestWin: int = 0
    longestLoss: int = 0
    longestUnbeaten: int = 0


class CompetitionCreate(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("name must be a string")
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class CompetitionOut(BaseModel):
    id: str
    name: str


class StageGenerateRequest(BaseModel):
    stageName: str


class StageGenerateOut(BaseModel):
    competitionId: str
    stageName: str
    matchCount: int


class MatchCreate(BaseModel):
    player1Id: str
    player2Id: Optional[str] = None
    player2Ids: Optional[List[str]] = None
    competitionId: Optional[str] = None
    stageName: Optional[str] = None
    matchNum: Optional[int] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _validate_away_side(self) -> "MatchCreate":
        if self.player2Ids is not None:
            if self.player2Id is not None:
                raise ValueError("provide either player2Id or player2Ids, not both")
            if not 1 <= len(self.player2Ids) <= 3:
                raise ValueError("player2Ids must list between one and three players")
            if len(set(self.player2Ids)) != len(self.player2Ids):
                raise ValueError("player2Ids must not repeat a player")
            if self.player1Id in self.player2Ids:
                raise ValueError("the home player cannot also play away")
        elif self.player2Id is None:
            raise ValueError("an away player is required")
        elif self.player2Id == self.player1Id:
            raise ValueError("the home player cannot also play away")
        return self

    def away_ids(self) -> List[str]:
        return list(self.player2Ids) if self.player2Ids else [self.player2Id]


class MatchOut(BaseModel):
    """Match information returned by the API."""

    id: str
    matchNum: Optional[int] = None
    stageName: Optional[str] = None
    matchType: Optional[str] = None
    competitionId: Optional[str] = None
    player1Id: str
    player2Id: Optional[str] = None
    player2Ids: Optional[List[str]] = None
    result: Optional[str] = None
    timestamp: Optional[datetime] = None
    votes: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    version: int


class MatchResultUpdate(BaseModel):
    """Body for setting, changing or clearing a match result."""

    result: Optional[str] = Field(
        ..., description="Final score as 'home-away', or null to clear it"
    )


class VoteCreate(BaseModel):
    voterId: str = Field(..., min_length=1)
    bestPlayerId: str = Field(..., min_length=1)
    worstPlayerId: str = Field(..., min_length=1)


class StandingEntryOut(BaseModel):
    rank: int
    playerId: str
    playerName: str
    stats: PlayerStatsOut


class StandingsOut(BaseModel):
    scope: str
    competitionId: Optional[str] = None
    standings: List[StandingEntryOut]
    total: int


class LeaderCardOut(BaseModel):
    playerId: Optional[str] = None
    name: str = "N/A"
    value: float = 0


class StatLeadersOut(BaseModel):
    totalPlayers: int
    totalMatches: int
    totalGoals: int
    avgGoalsPerMatch: float
    topScorer: LeaderCardOut
    bestDefense: LeaderCardOut
    mostWins: LeaderCardOut
    fanFavorite: LeaderCardOut
    mostScrutinized: LeaderCardOut


class PlayerDriftOut(BaseModel):
    playerId: str
    name: str
    fields: List[str]
    stored: PlayerStatsOut
    expected: PlayerStatsOut


class ReconciliationOut(BaseModel):
    checked: int
    consistent: bool
    repaired: bool
    drifted: List[PlayerDriftOut] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)


def stats_out(stats: Any) -> PlayerStatsOut:
    """Build a ``PlayerStatsOut`` from a player row or a ``PlayerStats``."""

    return PlayerStatsOut(
        played=stats.played or 0,
        wins=stats.wins or 0,
        draws=stats.draws or 0,
        losses=stats.losses or 0,
        goalsFor=stats.goals_for or 0,
        goalsAgainst=stats.goals_against or 0,
        goalDifference=stats.goal_difference or 0,
        points=stats.points or 0,
        assists=stats.assists or 0,
    )
