from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Boolean,
    Index,
)
from sqlalchemy.sql import func
from .db import Base


class Competition(Base):
    __tablename__ = "competition"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    nickname = Column(String, nullable=True)
    role = Column(String, nullable=False, default="player")  # "player" | "admin"
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # Running aggregate maintained by the score transition engine.
    played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    goals_for = Column(Integer, nullable=False, default=0)
    goals_against = Column(Integer, nullable=False, default=0)
    goal_difference = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)

    best_player_votes = Column(Integer, nullable=False, default=0)
    worst_player_votes = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("uq_player_name_lower", func.lower(name), unique=True),
    )


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    match_num = Column(Integer, nullable=True)
    stage_name = Column(String, nullable=True)
    match_type = Column(String, nullable=True)  # "1v1" | "1v2" | "1v3"
    competition_id = Column(String, ForeignKey("competition.id"), nullable=True)
    player1_id = Column(String, ForeignKey("player.id"), nullable=False)
    player2_id = Column(String, ForeignKey("player.id"), nullable=True)
    player2_ids = Column(JSON(none_as_null=True), nullable=True)
    result = Column(String, nullable=True)  # "3-1"; NULL while unplayed
    timestamp = Column(DateTime, server_default=func.now(), nullable=False)
    votes = Column(JSON, nullable=False, default=dict)
    best_player_vote_id = Column(String, nullable=True)
    worst_player_vote_id = Column(String, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_match_competition_id", "competition_id"),
    )
