from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterable, Sequence

from .standings import result_contributions

WIN, DRAW, LOSS = "W", "D", "L"


def player_form(player_id: str, matches: Iterable[Any]) -> list[str]:
    """Return a player's completed results as ``"W"``/``"D"``/``"L"``.

    Matches are taken in the order given; callers sort by kick-off time.
    """
    form: list[str] = []
    for match in matches:
        if not match.result:
            continue
        contribution = result_contributions(match, match.result).get(player_id)
        if contribution is None:
            continue
        if contribution.wins:
            form.append(WIN)
        elif contribution.draws:
            form.append(DRAW)
        else:
            form.append(LOSS)
    return form


def rolling_win_percentage(results: Sequence[str], span: int) -> list[float]:
    """Return rolling win percentage for a sequence of results.

    Args:
        results: Sequence of ``"W"``, ``"D"`` or ``"L"``; only wins count.
        span: Size of the rolling window.
    """
    if span <= 0:
        raise ValueError("span must be positive")
    wins = 0
    window: deque[str] = deque()
    percentages: list[float] = []
    for r in results:
        window.append(r)
        if r == WIN:
            wins += 1
        if len(window) > span:
            old = window.popleft()
            if old == WIN:
                wins -= 1
        percentages.append(wins / len(window))
    return percentages


def compute_streaks(results: Sequence[str]) -> Dict[str, Any]:
    """Compute current, longest win, longest loss and longest unbeaten streaks."""
    longest_win = longest_loss = longest_unbeaten = 0
    curr_win = curr_loss = curr_unbeaten = 0
    for r in results:
        curr_win = curr_win + 1 if r == WIN else 0
        curr_loss = curr_loss + 1 if r == LOSS else 0
        curr_unbeaten = curr_unbeaten + 1 if r != LOSS else 0
        longest_win = max(longest_win, curr_win)
        longest_loss = max(longest_loss, curr_loss)
        longest_unbeaten = max(longest_unbeaten, curr_unbeaten)
    current = ""
    if results:
        last = results[-1]
        count = 0
        for r in reversed(results):
            if r == last:
                count += 1
            else:
                break
        current = f"{last}{count}"
    return {
        "current": current,
        "longestWin": longest_win,
        "longestLoss": longest_loss,
        "longestUnbeaten": longest_unbeaten,
    }
