from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from scorekeeper.logic.enums import ScoringMode, SessionStatus, VictoryCondition
from scorekeeper.logic.rules import GameRuleSet
from scorekeeper.logic.state import GameSession, Player, SavedPlayer, Team
from scorekeeper.store.store import AppStateStore
from shared.storage import MemoryStateStorage

if TYPE_CHECKING:
    from collections.abc import Sequence

FIXED_NOW = datetime(2026, 3, 14, 19, 30, tzinfo=UTC)


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def create_rule_set(
    game_id: str = "test_game",
    *,
    victory_condition: VictoryCondition = VictoryCondition.HIGHEST_SCORE,
    winning_score: float | None = None,
    scoring_mode: ScoringMode = ScoringMode.NUMERIC,
    is_custom: bool = False,
) -> GameRuleSet:
    """Create a GameRuleSet with sensible defaults for testing."""
    return GameRuleSet(
        id=game_id,
        name=game_id.replace("_", " ").title(),
        victory_condition=victory_condition,
        winning_score=winning_score,
        scoring_mode=scoring_mode,
        is_custom=is_custom,
    )


def create_player(
    player_id: str = "p1",
    name: str | None = None,
    *,
    round_scores: Sequence[float] = (),
    position: int = 1,
    color: str = "#ef4444",
    avatar: str = "dice",
) -> Player:
    """Create a session Player with sensible defaults for testing."""
    return Player(
        id=player_id,
        display_name=name if name is not None else player_id.upper(),
        color=color,
        avatar=avatar,
        round_scores=tuple(round_scores),
        position=position,
    )


def create_players(*player_ids: str) -> tuple[Player, ...]:
    return tuple(create_player(player_id) for player_id in player_ids)


def create_saved_player(player_id: str = "p1", name: str | None = None) -> SavedPlayer:
    return SavedPlayer(id=player_id, name=name if name is not None else player_id.upper(), color="#3b82f6", avatar="dice")


def create_team(
    team_id: str,
    member_ids: Sequence[str],
    *,
    round_scores: Sequence[float] = (),
    position: int = 1,
) -> Team:
    return Team(
        id=team_id,
        display_name=team_id.title(),
        member_ids=tuple(member_ids),
        member_names=tuple(m.upper() for m in member_ids),
        round_scores=tuple(round_scores),
        position=position,
    )


def create_session(
    session_id: str = "s1",
    game_id: str = "test_game",
    *,
    players: Sequence[Player] | None = None,
    teams: Sequence[Team] = (),
    current_round: int = 1,
    status: SessionStatus = SessionStatus.ACTIVE,
    finished_at: datetime | None = None,
) -> GameSession:
    """Create a GameSession with sensible defaults for testing."""
    return GameSession(
        id=session_id,
        game_id=game_id,
        players=tuple(players) if players is not None else create_players("p1", "p2"),
        teams=tuple(teams),
        current_round=current_round,
        status=status,
        started_at=FIXED_NOW,
        finished_at=finished_at if finished_at is not None or status == SessionStatus.ACTIVE else FIXED_NOW,
    )


@pytest.fixture
def storage():
    return MemoryStateStorage()


@pytest.fixture
def store(storage):
    return AppStateStore(storage)
