"""
Immutable state update utilities using Pydantic model_copy.

These helpers never mutate their input; they return new state objects
with the requested changes applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scorekeeper.logic.ranking import rank

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from scorekeeper.logic.enums import VictoryCondition
    from scorekeeper.logic.state import AppState, GameSession, Player, Team, Tournament


def replace_participants(
    session: GameSession,
    participants: Sequence[Player] | Sequence[Team],
) -> GameSession:
    """
    Return new session with its ranked participants replaced.

    Writes to teams in team games and to players otherwise.
    """
    field = "teams" if session.is_team_game else "players"
    return session.model_copy(update={field: tuple(participants)})


def rerank(session: GameSession, victory_condition: VictoryCondition) -> GameSession:
    """Return new session with participants sorted and positions recomputed."""
    return replace_participants(session, rank(session.participants, victory_condition))


def append_round_score(participant: Player | Team, value: float) -> Player | Team:
    """Return participant with value appended to its round scores."""
    return participant.model_copy(update={"round_scores": (*participant.round_scores, float(value))})


def update_tournament(
    state: AppState,
    tournament_id: str,
    transform: Callable[[Tournament], Tournament],
) -> AppState:
    """Return new app state with one tournament replaced by transform(tournament)."""
    tournaments = tuple(transform(t) if t.id == tournament_id else t for t in state.tournaments)
    return state.model_copy(update={"tournaments": tournaments})
