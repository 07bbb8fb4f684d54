"""Internal application services."""

from .validation import ValidationError, validate_result, parse_result
from .standings import (
    PlayerStats,
    PlayerStanding,
    compute_standings,
    compute_stat_leaders,
)
from .score_transition import apply_result, transition_deltas
from .reconciliation import reconcile_player_stats
from .scheduling import generate_stage_matches
from .votes import submit_vote
from .stats import player_form, rolling_win_percentage, compute_streaks

__all__ = [
    "ValidationError",
    "validate_result",
    "parse_result",
    "PlayerStats",
    "PlayerStanding",
    "compute_standings",
    "compute_stat_leaders",
    "apply_result",
    "transition_deltas",
    "reconcile_player_stats",
    "generate_stage_matches",
    "submit_vote",
    "player_form",
    "rolling_win_percentage",
    "compute_streaks",
]
