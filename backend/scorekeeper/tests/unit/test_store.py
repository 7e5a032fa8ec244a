import logging
import math

import pytest
from pydantic import ValidationError

from scorekeeper.logic.enums import ErrorCode, ScoringMode, SessionStatus
from scorekeeper.logic.rules import RuleSetPatch
from scorekeeper.logic.state import AppState
from scorekeeper.store.codec import dump_state, load_state
from scorekeeper.store.store import AppStateStore
from scorekeeper.tests.conftest import FIXED_NOW, create_players, create_rule_set, create_saved_player
from shared.storage import MemoryStateStorage


class _FailingStorage(MemoryStateStorage):
    def save(self, content: str) -> None:
        raise OSError("disk full")


class _UnreadableStorage(MemoryStateStorage):
    def load(self) -> str | None:
        raise OSError("permission denied")


class TestStoreLoading:
    def test_starts_empty_without_persisted_state(self, store):
        assert store.state == AppState()
        assert store.is_session_active is False

    def test_restores_persisted_state(self):
        persisted = AppState(saved_players=(create_saved_player("p1", "Ana"),), dark_mode=False)

        store = AppStateStore(MemoryStateStorage(dump_state(persisted)))

        assert store.state == persisted

    def test_unreadable_storage_starts_fresh(self):
        store = AppStateStore(_UnreadableStorage())

        assert store.state == AppState()


class TestStoreSessionActions:
    @pytest.mark.parametrize(
        "action",
        [
            lambda s: s.submit_score("p1", 10),
            lambda s: s.advance_round(),
            lambda s: s.finish_game(),
            lambda s: s.quit_game(),
        ],
    )
    def test_actions_without_session_are_no_ops(self, store, storage, action):
        before = store.state

        result = action(store)

        assert result.ok is False
        assert result.error.code == ErrorCode.NO_ACTIVE_SESSION
        assert result.state is before
        assert store.state is before
        assert storage.save_count == 0

    def test_second_start_returns_typed_failure(self, store):
        store.start_game("generic", create_players("p1", "p2"), session_id="s1")

        result = store.start_game("uno", create_players("p3"))

        assert result.error.code == ErrorCode.SESSION_ALREADY_ACTIVE
        assert store.current_session.id == "s1"

    def test_full_session_flow(self, store):
        store.start_game("skyjo", create_players("p1", "p2"), session_id="s1")
        store.submit_score("p1", 60)
        store.advance_round()
        store.submit_score("p1", 45)

        assert store.check_win_condition() is True

        result = store.finish_game(now=FIXED_NOW)

        assert result.ok
        assert store.current_session is None
        assert store.state.game_history[0].status == SessionStatus.FINISHED
        assert store.state.game_history[0].players[0].id == "p2"

    def test_winner_takes_all_round_flow(self, store):
        store.start_game("uno", create_players("p1", "p2", "p3"))

        store.submit_score("p2")

        session = store.current_session
        assert session.current_round == 2
        assert session.players[0].id == "p2"
        assert store.advance_round().error.code == ErrorCode.INVALID_SCORING_ACTION

    def test_auto_advance_rounds(self, storage):
        store = AppStateStore(storage, auto_advance_rounds=True)
        store.start_game("generic", create_players("p1", "p2"))

        store.submit_score("p1", 3)
        assert store.current_session.current_round == 1
        assert store.all_scored_this_round() is False

        store.submit_score("p2", 4)
        assert store.current_session.current_round == 2

    def test_manual_rounds_by_default(self, store):
        store.start_game("generic", create_players("p1"))

        store.submit_score("p1", 3)

        assert store.all_scored_this_round() is True
        assert store.current_session.current_round == 1

    def test_check_win_condition_without_session(self, store):
        assert store.check_win_condition() is False


class TestStorePersistence:
    def test_persists_after_every_change(self, store, storage):
        store.add_saved_player(create_saved_player("p1", "Ana"))
        store.toggle_dark_mode()

        assert storage.save_count == 2
        assert load_state(storage.content) == store.state

    def test_rejected_action_does_not_persist(self, store, storage):
        store.remove_saved_player("missing")

        assert storage.save_count == 0

    def test_failed_save_keeps_in_memory_state(self, caplog):
        store = AppStateStore(_FailingStorage())

        with caplog.at_level(logging.ERROR):
            result = store.toggle_dark_mode()

        assert result.ok
        assert store.state.dark_mode is False
        error_records = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert error_records[0].msg["event"] == "failed to persist state"


class TestStoreStateStaysLoadable:
    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_score_rejected_and_state_reloads(self, store, storage, value):
        store.add_saved_player(create_saved_player("p1", "Ana"))
        store.start_game("generic", create_players("p1", "p2"), session_id="s1")
        before = store.state

        result = store.submit_score("p1", value)

        assert result.error.code == ErrorCode.INVALID_SCORING_ACTION
        assert store.state is before
        reloaded = AppStateStore(storage)
        assert reloaded.state == before
        assert reloaded.state.get_saved_player("p1") is not None

    def test_custom_rule_set_override_keeps_state_loadable(self, store, storage):
        store.add_saved_player(create_saved_player("p1", "Ana"))
        store.add_custom_rule_set(create_rule_set("poker_night"))

        with pytest.raises(ValidationError):
            store.update_rule_override("poker_night", RuleSetPatch(victory_condition=None))
        store.update_rule_override("poker_night", RuleSetPatch(winning_score=None, name="Poker"))

        reloaded = AppStateStore(storage)
        assert reloaded.state == store.state
        assert reloaded.resolve_rule_set("poker_night").name == "Poker"

    def test_scoring_mode_switch_during_session_rejected(self, store):
        store.start_game("generic", create_players("p1", "p2"))
        store.submit_score("p1", 5)

        result = store.update_rule_override("generic", RuleSetPatch(scoring_mode=ScoringMode.WINNER_TAKES_ALL))

        assert result.error.code == ErrorCode.RULE_SET_IN_USE
        assert store.resolve_rule_set("generic").scoring_mode == ScoringMode.NUMERIC
        assert store.submit_score("p2", 3).ok
        assert store.advance_round().ok


class TestStoreLogging:
    def test_rejected_action_logs_warning(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            store.submit_score("p1", 1)

        warning_records = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warning_records) == 1
        msg = warning_records[0].msg
        assert msg["event"] == "action rejected"
        assert msg["action"] == "submit_score"
        assert msg["error_code"] == "no_active_session"

    def test_session_actions_bind_session_id(self, store, caplog):
        store.start_game("generic", create_players("p1"), session_id="s1")

        with caplog.at_level(logging.INFO):
            store.finish_game()

        events = [r.msg for r in caplog.records if isinstance(r.msg, dict)]
        finished = next(msg for msg in events if msg["event"] == "session finished")
        assert finished["session_id"] == "s1"


class TestStoreQueries:
    def test_rule_sets_include_custom_and_overrides(self, store):
        store.add_custom_rule_set(create_rule_set("poker_night"))
        store.update_rule_override("uno", RuleSetPatch(winning_score=300))

        ids = [r.id for r in store.rule_sets()]
        assert ids[-1] == "poker_night"
        assert store.resolve_rule_set("uno").winning_score == 300
        assert store.resolve_rule_set("chess") is None

    def test_reset_override(self, store):
        store.update_rule_override("uno", RuleSetPatch(winning_score=300))

        store.reset_rule_override("uno")

        assert store.resolve_rule_set("uno").winning_score is None

    def test_custom_rule_set_lifecycle(self, store):
        store.add_custom_rule_set(create_rule_set("poker_night"))
        store.set_game_order(["poker_night"])

        assert store.rule_sets()[0].id == "poker_night"
        assert store.delete_custom_rule_set("poker_night").ok
        assert store.delete_custom_rule_set("uno").error.code == ErrorCode.BUILTIN_RULE_SET

    def test_saved_player_lifecycle(self, store):
        store.add_saved_player(create_saved_player("p1", "Ana"))
        store.update_saved_player("p1", avatar="crown")

        assert store.state.get_saved_player("p1").avatar == "crown"
        assert store.remove_saved_player("p1").ok
        assert store.state.saved_players == ()

    def test_tournament_flow(self, store):
        store.start_game("generic", create_players("p1", "p2"), session_id="s1")
        store.submit_score("p1", 50)
        store.submit_score("p2", 30)
        store.finish_game()
        store.create_tournament("Friday", "generic", ["p1", "p2"], tournament_id="t1")

        assert [s.id for s in store.linkable_sessions("t1")] == ["s1"]

        assert store.link_session_to_tournament("t1", "s1").ok
        assert store.link_session_to_tournament("t1", "s1").error.code == ErrorCode.SESSION_ALREADY_LINKED

        standings = store.tournament_standings("t1")
        assert [(s.player_id, s.total_points, s.wins) for s in standings] == [("p1", 50, 1), ("p2", 30, 0)]
        assert store.linkable_sessions("t1") == []

        assert store.finish_tournament("t1").ok
        assert store.finish_tournament("t1").error.code == ErrorCode.TOURNAMENT_FINISHED
        assert store.delete_tournament("t1").ok

    def test_queries_for_missing_tournament(self, store):
        assert store.tournament_standings("missing") == []
        assert store.linkable_sessions("missing") == []

    def test_delete_history_session(self, store):
        store.start_game("generic", create_players("p1"), session_id="s1")
        store.finish_game()

        assert store.delete_history_session("s1").ok
        assert store.delete_history_session("s1").error.code == ErrorCode.HISTORY_SESSION_NOT_FOUND
