"""
Reducers over the root AppState.

Each function maps (state, args) to a new AppState and performs no I/O.
Rejected actions raise ScoreKeeperError subclasses; AppStateStore converts
them into unchanged-state results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scorekeeper.logic import session as session_engine
from scorekeeper.logic import tournament as ledger
from scorekeeper.logic.exceptions import (
    BuiltinRuleSetError,
    HistorySessionNotFoundError,
    InvalidSavedPlayerError,
    NoActiveSessionError,
    RuleSetConflictError,
    RuleSetInUseError,
    SavedPlayerNotFoundError,
    SessionAlreadyActiveError,
    TournamentNotFoundError,
    UnknownGameError,
)
from scorekeeper.logic.rules import (
    BUILTIN_RULE_SET_IDS,
    BUILTIN_RULE_SETS,
    RuleSetPatch,
    apply_patch,
    available_rule_sets,
    resolve_rule_set,
)
from scorekeeper.logic.state import AppState, GameSession, SavedPlayer, Tournament
from scorekeeper.logic.state_utils import rerank, update_tournament

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from scorekeeper.logic.rules import GameRuleSet
    from scorekeeper.logic.session import TeamConfig
    from scorekeeper.logic.state import Player


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------


def effective_rule_sets(state: AppState) -> list[GameRuleSet]:
    """Return every playable rule set in the user's preferred order."""
    return available_rule_sets(
        BUILTIN_RULE_SETS,
        state.rule_overrides,
        state.custom_rule_sets,
        state.game_order,
    )


def resolve_game(state: AppState, game_id: str) -> GameRuleSet:
    """Resolve a game id against the state's overrides and custom sets, or raise UnknownGameError."""
    rule_set = resolve_rule_set(game_id, BUILTIN_RULE_SETS, state.rule_overrides, state.custom_rule_sets)
    if rule_set is None:
        raise UnknownGameError(game_id)
    return rule_set


def add_custom_rule_set(state: AppState, rule_set: GameRuleSet) -> AppState:
    if rule_set.id in BUILTIN_RULE_SET_IDS or any(c.id == rule_set.id for c in state.custom_rule_sets):
        raise RuleSetConflictError(rule_set.id)
    custom = rule_set.model_copy(update={"is_custom": True})
    return state.model_copy(update={"custom_rule_sets": (*state.custom_rule_sets, custom)})


def delete_custom_rule_set(state: AppState, game_id: str) -> AppState:
    """Delete a custom rule set. Built-ins and the active session's game are protected."""
    if not any(c.id == game_id for c in state.custom_rule_sets):
        if game_id in BUILTIN_RULE_SET_IDS:
            raise BuiltinRuleSetError(game_id)
        raise UnknownGameError(game_id)
    if state.current_session is not None and state.current_session.game_id == game_id:
        raise RuleSetInUseError(game_id)
    return state.model_copy(
        update={
            "custom_rule_sets": tuple(c for c in state.custom_rule_sets if c.id != game_id),
            "game_order": tuple(g for g in state.game_order if g != game_id),
        },
    )


def _apply_rules_to_active_session(state: AppState, updated: AppState) -> AppState:
    """
    Carry a rule change over to the active session of the same game.

    A scoring mode switch mid-session is refused: rounds already played under
    one mode cannot be continued under the other. A victory condition change
    re-ranks the session right away.
    """
    current = state.current_session
    if current is None:
        return updated
    before = resolve_game(state, current.game_id)
    after = resolve_game(updated, current.game_id)
    if after.scoring_mode != before.scoring_mode:
        raise RuleSetInUseError(current.game_id)
    if after.victory_condition == before.victory_condition:
        return updated
    return updated.model_copy(update={"current_session": rerank(current, after.victory_condition)})


def update_rule_override(state: AppState, game_id: str, patch: RuleSetPatch) -> AppState:
    """
    Customise a rule set.

    Custom rule sets are rewritten in place. Built-ins keep their base data and
    accumulate the patch in rule_overrides, newer fields winning.
    """
    if any(c.id == game_id for c in state.custom_rule_sets):
        custom_sets = tuple(apply_patch(c, patch) if c.id == game_id else c for c in state.custom_rule_sets)
        return _apply_rules_to_active_session(state, state.model_copy(update={"custom_rule_sets": custom_sets}))

    if game_id not in BUILTIN_RULE_SET_IDS:
        raise UnknownGameError(game_id)

    existing = state.rule_overrides.get(game_id)
    merged = existing.merged_with(patch) if existing is not None else patch
    updated = state.model_copy(update={"rule_overrides": {**state.rule_overrides, game_id: merged}})
    return _apply_rules_to_active_session(state, updated)


def reset_rule_override(state: AppState, game_id: str) -> AppState:
    """Drop a built-in's override patch, restoring its base rules."""
    if game_id not in BUILTIN_RULE_SET_IDS:
        raise UnknownGameError(game_id)
    overrides = {k: v for k, v in state.rule_overrides.items() if k != game_id}
    return _apply_rules_to_active_session(state, state.model_copy(update={"rule_overrides": overrides}))


def set_game_order(state: AppState, game_order: Sequence[str]) -> AppState:
    return state.model_copy(update={"game_order": tuple(dict.fromkeys(game_order))})


# ---------------------------------------------------------------------------
# Active session
# ---------------------------------------------------------------------------


def _require_session(state: AppState) -> GameSession:
    if state.current_session is None:
        raise NoActiveSessionError("no active session")
    return state.current_session


def start_game(
    state: AppState,
    game_id: str,
    players: Sequence[Player],
    teams: Sequence[TeamConfig] = (),
    *,
    session_id: str | None = None,
    now: datetime | None = None,
) -> AppState:
    """Start a session. Refused while another session is active or when the game is unknown."""
    if state.current_session is not None:
        raise SessionAlreadyActiveError(state.current_session.id)
    rule_set = resolve_game(state, game_id)
    new_session = session_engine.start_session(rule_set, players, teams, session_id=session_id, now=now)
    return state.model_copy(update={"current_session": new_session})


def submit_score(state: AppState, participant_id: str, value: float = 1) -> AppState:
    current = _require_session(state)
    rule_set = resolve_game(state, current.game_id)
    updated = session_engine.submit_score(current, rule_set, participant_id, value)
    return state.model_copy(update={"current_session": updated})


def advance_round(state: AppState) -> AppState:
    current = _require_session(state)
    rule_set = resolve_game(state, current.game_id)
    return state.model_copy(update={"current_session": session_engine.advance_round(current, rule_set)})


def finish_game(state: AppState, now: datetime | None = None) -> AppState:
    """Move the active session to the front of history and clear the slot."""
    current = _require_session(state)
    finished = session_engine.finish_session(current, now)
    return state.model_copy(
        update={
            "current_session": None,
            "game_history": (finished, *state.game_history),
        },
    )


def quit_game(state: AppState) -> AppState:
    """Discard the active session without recording it."""
    _require_session(state)
    return state.model_copy(update={"current_session": None})


def delete_history_session(state: AppState, session_id: str) -> AppState:
    """Remove a finished session from history. Tournament standings already counted are kept."""
    if state.get_history_session(session_id) is None:
        raise HistorySessionNotFoundError(session_id)
    return state.model_copy(update={"game_history": tuple(s for s in state.game_history if s.id != session_id)})


# ---------------------------------------------------------------------------
# Saved players
# ---------------------------------------------------------------------------


def add_saved_player(state: AppState, player: SavedPlayer) -> AppState:
    if not player.name.strip():
        raise InvalidSavedPlayerError("saved player name must not be blank")
    if state.get_saved_player(player.id) is not None:
        raise InvalidSavedPlayerError(f"saved player '{player.id}' already exists")
    player = player.model_copy(update={"name": player.name.strip()})
    return state.model_copy(update={"saved_players": (*state.saved_players, player)})


def update_saved_player(
    state: AppState,
    player_id: str,
    *,
    name: str | None = None,
    color: str | None = None,
    avatar: str | None = None,
) -> AppState:
    """Edit a saved player. Sessions already holding a snapshot are not affected."""
    existing = state.get_saved_player(player_id)
    if existing is None:
        raise SavedPlayerNotFoundError(player_id)

    updates: dict[str, str] = {}
    if name is not None:
        if not name.strip():
            raise InvalidSavedPlayerError("saved player name must not be blank")
        updates["name"] = name.strip()
    if color is not None:
        updates["color"] = color
    if avatar is not None:
        updates["avatar"] = avatar

    edited = existing.model_copy(update=updates)
    return state.model_copy(
        update={"saved_players": tuple(edited if p.id == player_id else p for p in state.saved_players)},
    )


def remove_saved_player(state: AppState, player_id: str) -> AppState:
    if state.get_saved_player(player_id) is None:
        raise SavedPlayerNotFoundError(player_id)
    return state.model_copy(update={"saved_players": tuple(p for p in state.saved_players if p.id != player_id)})


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------


def _require_tournament(state: AppState, tournament_id: str) -> Tournament:
    found = state.get_tournament(tournament_id)
    if found is None:
        raise TournamentNotFoundError(tournament_id)
    return found


def create_tournament(
    state: AppState,
    name: str,
    game_id: str,
    player_ids: Sequence[str],
    *,
    tournament_id: str | None = None,
    now: datetime | None = None,
) -> AppState:
    created = ledger.create_tournament(name, game_id, player_ids, tournament_id=tournament_id, now=now)
    return state.model_copy(update={"tournaments": (*state.tournaments, created)})


def link_session_to_tournament(state: AppState, tournament_id: str, session_id: str) -> AppState:
    """
    Count a finished history session toward a tournament.

    The winner is decided by the tournament's game rules as currently
    resolved (overrides included).
    """
    target = _require_tournament(state, tournament_id)
    finished = state.get_history_session(session_id)
    if finished is None:
        raise HistorySessionNotFoundError(session_id)
    rule_set = resolve_game(state, target.game_id)
    linked = ledger.link_session(target, finished, rule_set.victory_condition)
    return update_tournament(state, tournament_id, lambda _: linked)


def finish_tournament(state: AppState, tournament_id: str, now: datetime | None = None) -> AppState:
    _require_tournament(state, tournament_id)
    return update_tournament(state, tournament_id, lambda t: ledger.finish_tournament(t, now))


def delete_tournament(state: AppState, tournament_id: str) -> AppState:
    _require_tournament(state, tournament_id)
    return state.model_copy(update={"tournaments": tuple(t for t in state.tournaments if t.id != tournament_id)})


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


def toggle_dark_mode(state: AppState) -> AppState:
    return state.model_copy(update={"dark_mode": not state.dark_mode})
