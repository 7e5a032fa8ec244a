"""Root application state container and the results of its actions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

from scorekeeper.logic import app_state
from scorekeeper.logic import tournament as ledger
from scorekeeper.logic.enums import ScoringMode
from scorekeeper.logic.exceptions import ScoreKeeperError
from scorekeeper.logic.session import all_scored_this_round, check_win_condition
from scorekeeper.logic.state import AppState
from scorekeeper.store.codec import dump_state, load_state

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from contextlib import AbstractContextManager
    from datetime import datetime

    from scorekeeper.logic.enums import ErrorCode
    from scorekeeper.logic.rules import GameRuleSet, RuleSetPatch
    from scorekeeper.logic.session import TeamConfig
    from scorekeeper.logic.state import GameSession, Player, SavedPlayer, TournamentStanding
    from shared.storage import StateStorage

logger = structlog.get_logger()


class ActionError(NamedTuple):
    """Why an action was rejected."""

    code: ErrorCode
    message: str


class ActionResult(NamedTuple):
    """
    Result of a store action.

    state is always the store's state after the action: the new state on
    success, the unchanged previous state when error is set.
    """

    state: AppState
    error: ActionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AppStateStore:
    """Root state container.

    Applies reducers from scorekeeper.logic.app_state to the current state,
    converts rejected actions into ActionResult errors, and persists the new
    state after every successful change. Persistence is best-effort: a failed
    write is logged and the in-memory state stays authoritative.
    """

    def __init__(self, storage: StateStorage, *, auto_advance_rounds: bool = False) -> None:
        self._storage = storage
        self._auto_advance_rounds = auto_advance_rounds
        self._state = self._load()

    def _load(self) -> AppState:
        try:
            content = self._storage.load()
        except (OSError, UnicodeDecodeError):
            logger.exception("failed to read persisted state, starting fresh")
            return AppState()
        return load_state(content)

    def _persist(self) -> None:
        try:
            self._storage.save(dump_state(self._state))
        except Exception:
            logger.exception("failed to persist state")

    def _apply(
        self,
        action: str,
        reducer: Callable[..., AppState],
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> ActionResult:
        """Run reducer on the current state; keep the state and report the error if it rejects."""
        try:
            next_state = reducer(self._state, *args, **kwargs)
        except ScoreKeeperError as e:
            logger.warning("action rejected", action=action, error_code=e.code, reason=str(e))
            return ActionResult(self._state, ActionError(code=e.code, message=str(e)))
        self._state = next_state
        self._persist()
        return ActionResult(next_state)

    # --- queries ---

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def current_session(self) -> GameSession | None:
        return self._state.current_session

    @property
    def is_session_active(self) -> bool:
        return self._state.current_session is not None

    def rule_sets(self) -> list[GameRuleSet]:
        return app_state.effective_rule_sets(self._state)

    def resolve_rule_set(self, game_id: str) -> GameRuleSet | None:
        try:
            return app_state.resolve_game(self._state, game_id)
        except ScoreKeeperError:
            return None

    def all_scored_this_round(self) -> bool:
        session = self._state.current_session
        return session is not None and all_scored_this_round(session)

    def check_win_condition(self) -> bool:
        session = self._state.current_session
        if session is None:
            return False
        rule_set = self.resolve_rule_set(session.game_id)
        return rule_set is not None and check_win_condition(session, rule_set)

    def tournament_standings(self, tournament_id: str) -> list[TournamentStanding]:
        found = self._state.get_tournament(tournament_id)
        return ledger.standings(found) if found is not None else []

    def linkable_sessions(self, tournament_id: str) -> list[GameSession]:
        found = self._state.get_tournament(tournament_id)
        return ledger.linkable_sessions(found, self._state.game_history) if found is not None else []

    # --- active session ---

    def start_game(
        self,
        game_id: str,
        players: Sequence[Player],
        teams: Sequence[TeamConfig] = (),
        *,
        session_id: str | None = None,
        now: datetime | None = None,
    ) -> ActionResult:
        result = self._apply(
            "start_game",
            app_state.start_game,
            game_id,
            players,
            teams,
            session_id=session_id,
            now=now,
        )
        if result.ok and result.state.current_session is not None:
            session = result.state.current_session
            logger.info(
                "session started",
                session_id=session.id,
                game_id=game_id,
                participants=len(session.participants),
                team_game=session.is_team_game,
            )
        return result

    def _submit_score(self, state: AppState, participant_id: str, value: float) -> AppState:
        state = app_state.submit_score(state, participant_id, value)
        session = state.current_session
        if not self._auto_advance_rounds or session is None:
            return state
        rule_set = app_state.resolve_game(state, session.game_id)
        if rule_set.scoring_mode == ScoringMode.NUMERIC and all_scored_this_round(session):
            logger.debug("all participants scored, advancing round", round=session.current_round)
            state = app_state.advance_round(state)
        return state

    def submit_score(self, participant_id: str, value: float = 1) -> ActionResult:
        with self._session_context():
            return self._apply("submit_score", self._submit_score, participant_id, value)

    def advance_round(self) -> ActionResult:
        with self._session_context():
            return self._apply("advance_round", app_state.advance_round)

    def finish_game(self, now: datetime | None = None) -> ActionResult:
        with self._session_context():
            result = self._apply("finish_game", app_state.finish_game, now)
            if result.ok:
                logger.info("session finished", history_size=len(result.state.game_history))
            return result

    def quit_game(self) -> ActionResult:
        with self._session_context():
            result = self._apply("quit_game", app_state.quit_game)
            if result.ok:
                logger.info("session discarded")
            return result

    def _session_context(self) -> AbstractContextManager[None]:
        session = self._state.current_session
        return structlog.contextvars.bound_contextvars(session_id=session.id if session is not None else None)

    def delete_history_session(self, session_id: str) -> ActionResult:
        return self._apply("delete_history_session", app_state.delete_history_session, session_id)

    # --- saved players ---

    def add_saved_player(self, player: SavedPlayer) -> ActionResult:
        return self._apply("add_saved_player", app_state.add_saved_player, player)

    def update_saved_player(
        self,
        player_id: str,
        *,
        name: str | None = None,
        color: str | None = None,
        avatar: str | None = None,
    ) -> ActionResult:
        return self._apply(
            "update_saved_player",
            app_state.update_saved_player,
            player_id,
            name=name,
            color=color,
            avatar=avatar,
        )

    def remove_saved_player(self, player_id: str) -> ActionResult:
        return self._apply("remove_saved_player", app_state.remove_saved_player, player_id)

    # --- tournaments ---

    def create_tournament(
        self,
        name: str,
        game_id: str,
        player_ids: Sequence[str],
        *,
        tournament_id: str | None = None,
        now: datetime | None = None,
    ) -> ActionResult:
        return self._apply(
            "create_tournament",
            app_state.create_tournament,
            name,
            game_id,
            player_ids,
            tournament_id=tournament_id,
            now=now,
        )

    def link_session_to_tournament(self, tournament_id: str, session_id: str) -> ActionResult:
        result = self._apply(
            "link_session_to_tournament",
            app_state.link_session_to_tournament,
            tournament_id,
            session_id,
        )
        if result.ok:
            logger.info("session linked to tournament", tournament_id=tournament_id, session_id=session_id)
        return result

    def finish_tournament(self, tournament_id: str, now: datetime | None = None) -> ActionResult:
        return self._apply("finish_tournament", app_state.finish_tournament, tournament_id, now)

    def delete_tournament(self, tournament_id: str) -> ActionResult:
        return self._apply("delete_tournament", app_state.delete_tournament, tournament_id)

    # --- rule sets ---

    def add_custom_rule_set(self, rule_set: GameRuleSet) -> ActionResult:
        return self._apply("add_custom_rule_set", app_state.add_custom_rule_set, rule_set)

    def delete_custom_rule_set(self, game_id: str) -> ActionResult:
        return self._apply("delete_custom_rule_set", app_state.delete_custom_rule_set, game_id)

    def update_rule_override(self, game_id: str, patch: RuleSetPatch) -> ActionResult:
        return self._apply("update_rule_override", app_state.update_rule_override, game_id, patch)

    def reset_rule_override(self, game_id: str) -> ActionResult:
        return self._apply("reset_rule_override", app_state.reset_rule_override, game_id)

    def set_game_order(self, game_order: Sequence[str]) -> ActionResult:
        return self._apply("set_game_order", app_state.set_game_order, game_order)

    # --- preferences ---

    def toggle_dark_mode(self) -> ActionResult:
        return self._apply("toggle_dark_mode", app_state.toggle_dark_mode)
