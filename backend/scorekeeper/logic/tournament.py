"""
Tournament ledger: cumulative standings over finished sessions of one game.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from scorekeeper.logic.enums import SessionStatus, TournamentStatus
from scorekeeper.logic.exceptions import (
    InvalidScoringActionError,
    SessionAlreadyLinkedError,
    SessionGameMismatchError,
    TournamentFinishedError,
)
from scorekeeper.logic.session import session_winner
from scorekeeper.logic.state import GameSession, Tournament, TournamentStanding

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scorekeeper.logic.enums import VictoryCondition


def create_tournament(
    name: str,
    game_id: str,
    player_ids: Sequence[str],
    *,
    tournament_id: str | None = None,
    now: datetime | None = None,
) -> Tournament:
    """
    Create an active tournament with a zeroed standings row per roster player.

    The game id is not resolved here; sessions are checked against it when
    they are linked.
    """
    roster = tuple(dict.fromkeys(player_ids))
    return Tournament(
        id=tournament_id or str(uuid4()),
        name=name,
        game_id=game_id,
        player_ids=roster,
        standings=tuple(TournamentStanding(player_id=player_id) for player_id in roster),
        status=TournamentStatus.ACTIVE,
        created_at=now or datetime.now(tz=UTC),
    )


def _session_results(session: GameSession, victory_condition: VictoryCondition) -> dict[str, tuple[float, bool]]:
    """
    Map player id -> (points, won) for everyone who played in a session.

    In team games each member is credited with the team's total and shares
    the team's win.
    """
    winner = session_winner(session, victory_condition)
    winner_id = winner.id if winner is not None else None

    if not session.is_team_game:
        return {p.id: (p.total_score, p.id == winner_id) for p in session.players}

    results: dict[str, tuple[float, bool]] = {}
    for team in session.teams:
        for member_id in team.member_ids:
            results[member_id] = (team.total_score, team.id == winner_id)
    return results


def link_session(
    tournament: Tournament,
    session: GameSession,
    victory_condition: VictoryCondition,
) -> Tournament:
    """
    Count a finished session toward the tournament's standings.

    The winner is computed with the tournament's victory condition. Roster
    players who took part gain the session total, one game played and, for
    the winner, one win. Participants outside the roster are ignored and
    roster players absent from the session are untouched.

    A session can be linked only once and only if it was played with the
    tournament's game.
    """
    if tournament.status == TournamentStatus.FINISHED:
        raise TournamentFinishedError(tournament.id)
    if session.id in tournament.linked_session_ids:
        raise SessionAlreadyLinkedError(tournament.id, session.id)
    if session.status != SessionStatus.FINISHED:
        raise InvalidScoringActionError(f"session '{session.id}' is not finished")
    if session.game_id != tournament.game_id:
        raise SessionGameMismatchError(tournament_game_id=tournament.game_id, session_game_id=session.game_id)

    results = _session_results(session, victory_condition)
    standings = []
    for standing in tournament.standings:
        result = results.get(standing.player_id)
        if result is None:
            standings.append(standing)
            continue
        points, won = result
        standings.append(
            standing.model_copy(
                update={
                    "total_points": standing.total_points + points,
                    "wins": standing.wins + int(won),
                    "games_played": standing.games_played + 1,
                },
            ),
        )

    return tournament.model_copy(
        update={
            "standings": tuple(standings),
            "linked_session_ids": (*tournament.linked_session_ids, session.id),
        },
    )


def finish_tournament(tournament: Tournament, now: datetime | None = None) -> Tournament:
    """Mark a tournament finished. Standings are frozen by convention from here on."""
    if tournament.status == TournamentStatus.FINISHED:
        raise TournamentFinishedError(tournament.id)
    return tournament.model_copy(
        update={"status": TournamentStatus.FINISHED, "finished_at": now or datetime.now(tz=UTC)},
    )


def standings(tournament: Tournament) -> list[TournamentStanding]:
    """Return standings sorted by total points, then wins, both descending; stable otherwise."""
    return sorted(tournament.standings, key=lambda s: (-s.total_points, -s.wins))


def linkable_sessions(tournament: Tournament, history: Sequence[GameSession]) -> list[GameSession]:
    """Return finished sessions of the tournament's game that are not linked yet."""
    linked = set(tournament.linked_session_ids)
    return [
        session
        for session in history
        if session.status == SessionStatus.FINISHED
        and session.game_id == tournament.game_id
        and session.id not in linked
    ]
