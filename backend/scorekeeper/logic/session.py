"""
Game session lifecycle: start, score submission, round advancement and finish.

Every function takes the current frozen GameSession and returns a new one.
Rejected actions raise ScoreKeeperError subclasses; the store turns those
into no-op results.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from scorekeeper.logic.enums import ScoringMode, SessionStatus, VictoryCondition
from scorekeeper.logic.exceptions import (
    AlreadyScoredError,
    InvalidRosterError,
    InvalidScoringActionError,
    NoActiveSessionError,
    UnknownParticipantError,
)
from scorekeeper.logic.ranking import leader
from scorekeeper.logic.state import GameSession, Player, SavedPlayer, Team
from scorekeeper.logic.state_utils import append_round_score, replace_participants, rerank

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scorekeeper.logic.rules import GameRuleSet


class TeamConfig(BaseModel):
    """Configuration for a single team at session start."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    member_ids: tuple[str, ...]
    id: str | None = None


def players_from_saved(saved_players: Sequence[SavedPlayer]) -> tuple[Player, ...]:
    """Snapshot saved roster entries into session players."""
    return tuple(
        Player(id=saved.id, display_name=saved.name, color=saved.color, avatar=saved.avatar)
        for saved in saved_players
    )


def _validate_roster(players: Sequence[Player], teams: Sequence[TeamConfig]) -> None:
    if not players:
        raise InvalidRosterError("a session needs at least one participant")

    player_ids = [p.id for p in players]
    if len(set(player_ids)) != len(player_ids):
        raise InvalidRosterError("duplicate player ids in roster")

    known = set(player_ids)
    assigned: set[str] = set()
    for team in teams:
        if not team.member_ids:
            raise InvalidRosterError(f"team '{team.name}' has no members")
        unknown = set(team.member_ids) - known
        if unknown:
            raise InvalidRosterError(f"team '{team.name}' references unknown players: {sorted(unknown)}")
        overlap = assigned & set(team.member_ids)
        if overlap:
            raise InvalidRosterError(f"players {sorted(overlap)} are assigned to more than one team")
        assigned.update(team.member_ids)

    team_ids = [t.id for t in teams if t.id is not None]
    if len(set(team_ids)) != len(team_ids):
        raise InvalidRosterError("duplicate team ids in roster")


def _build_teams(players: Sequence[Player], teams: Sequence[TeamConfig]) -> tuple[Team, ...]:
    names = {p.id: p.display_name for p in players}
    return tuple(
        Team(
            id=config.id or str(uuid4()),
            display_name=config.name,
            member_ids=config.member_ids,
            member_names=tuple(names[member_id] for member_id in config.member_ids),
        )
        for config in teams
    )


def start_session(
    rule_set: GameRuleSet,
    players: Sequence[Player],
    teams: Sequence[TeamConfig] = (),
    *,
    session_id: str | None = None,
    now: datetime | None = None,
) -> GameSession:
    """
    Create a new active session for a resolved rule set.

    Scores are reset on every participant and the roster is ranked once so
    positions are valid from the start. When teams are given, the teams become
    the ranked participants and players are kept for identity only.
    """
    _validate_roster(players, teams)

    fresh_players = tuple(p.model_copy(update={"round_scores": (), "position": 1}) for p in players)
    session = GameSession(
        id=session_id or str(uuid4()),
        game_id=rule_set.id,
        players=fresh_players,
        teams=_build_teams(fresh_players, teams),
        current_round=1,
        status=SessionStatus.ACTIVE,
        started_at=now or datetime.now(tz=UTC),
    )
    return rerank(session, rule_set.victory_condition)


def _require_active(session: GameSession) -> None:
    if session.status != SessionStatus.ACTIVE:
        raise NoActiveSessionError(f"session '{session.id}' is {session.status}")


def submit_score(
    session: GameSession,
    rule_set: GameRuleSet,
    participant_id: str,
    value: float = 1,
) -> GameSession:
    """
    Record a score for the current round.

    numeric: value is appended to one participant; the round does not advance.
    winner_takes_all: participant_id is the round winner. The winner gets 1,
    everyone else 0, all in the same step, and the round advances. value is
    ignored.

    Participants are re-ranked after either mode.
    """
    _require_active(session)
    participant = session.get_participant(participant_id)
    if participant is None:
        raise UnknownParticipantError(participant_id)

    if rule_set.scoring_mode == ScoringMode.WINNER_TAKES_ALL:
        return _submit_round_winner(session, rule_set, participant_id)

    # inf and nan cannot be persisted
    if not math.isfinite(value):
        raise InvalidScoringActionError(f"score must be a finite number, got {value!r}")
    if session.has_scored_this_round(participant):
        raise AlreadyScoredError(participant_id, session.current_round)

    participants = tuple(
        append_round_score(p, value) if p.id == participant_id else p for p in session.participants
    )
    return rerank(replace_participants(session, participants), rule_set.victory_condition)


def _submit_round_winner(session: GameSession, rule_set: GameRuleSet, winner_id: str) -> GameSession:
    scored = [p.id for p in session.participants if session.has_scored_this_round(p)]
    if scored:
        # a numeric entry slipped into this round; refusing keeps round lengths aligned
        raise AlreadyScoredError(scored[0], session.current_round)

    participants = tuple(append_round_score(p, 1 if p.id == winner_id else 0) for p in session.participants)
    updated = replace_participants(session, participants).model_copy(
        update={"current_round": session.current_round + 1},
    )
    return rerank(updated, rule_set.victory_condition)


def all_scored_this_round(session: GameSession) -> bool:
    """
    Check whether every participant has a score for the current round.

    After a winner_takes_all submission this is True by construction for the
    previous round; the round counter has already moved on.
    """
    return all(session.has_scored_this_round(p) for p in session.participants)


def advance_round(session: GameSession, rule_set: GameRuleSet) -> GameSession:
    """
    Move a numeric session to the next round.

    Callers should wait for all_scored_this_round(), but advancing early loses
    nothing: round scores are append-only and already attributed.
    """
    _require_active(session)
    if rule_set.scoring_mode == ScoringMode.WINNER_TAKES_ALL:
        raise InvalidScoringActionError("winner_takes_all sessions advance rounds on score submission")
    return session.model_copy(update={"current_round": session.current_round + 1})


def check_win_condition(session: GameSession, rule_set: GameRuleSet) -> bool:
    """
    Check whether any participant reached the rule set's winning score.

    Direction-agnostic: for lowest_score games reaching the cap is what ends
    the game. Advisory only; the session keeps going until finished.
    """
    if rule_set.winning_score is None:
        return False
    return any(p.total_score >= rule_set.winning_score for p in session.participants)


def finish_session(session: GameSession, now: datetime | None = None) -> GameSession:
    """Return the session marked finished. Positions are already current."""
    _require_active(session)
    return session.model_copy(
        update={
            "status": SessionStatus.FINISHED,
            "finished_at": now or datetime.now(tz=UTC),
        },
    )


def session_winner(session: GameSession, victory_condition: VictoryCondition) -> Player | Team | None:
    """Return the rank-1 participant of a session under victory_condition."""
    return leader(session.participants, victory_condition)
