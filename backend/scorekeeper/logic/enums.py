"""
String enum definitions for score keeping concepts.
"""

from enum import StrEnum


class VictoryCondition(StrEnum):
    """How the final ranking of a game is decided."""

    LOWEST_SCORE = "lowest_score"
    HIGHEST_SCORE = "highest_score"
    TARGET_SCORE = "target_score"  # race to winning_score, ranked like highest_score


class ScoringMode(StrEnum):
    """How scores are entered during a round."""

    NUMERIC = "numeric"  # every participant enters a number each round
    WINNER_TAKES_ALL = "winner_takes_all"  # round winner gets 1, everyone else 0


class SessionStatus(StrEnum):
    """Lifecycle status of a game session."""

    ACTIVE = "active"
    FINISHED = "finished"


class TournamentStatus(StrEnum):
    """Lifecycle status of a tournament."""

    ACTIVE = "active"
    FINISHED = "finished"


class ErrorCode(StrEnum):
    """Error codes returned to callers for rejected actions."""

    UNKNOWN_GAME = "unknown_game"
    SESSION_ALREADY_ACTIVE = "session_already_active"
    NO_ACTIVE_SESSION = "no_active_session"
    INVALID_ROSTER = "invalid_roster"
    UNKNOWN_PARTICIPANT = "unknown_participant"
    ALREADY_SCORED = "already_scored"
    INVALID_SCORING_ACTION = "invalid_scoring_action"
    SAVED_PLAYER_NOT_FOUND = "saved_player_not_found"
    INVALID_SAVED_PLAYER = "invalid_saved_player"
    HISTORY_SESSION_NOT_FOUND = "history_session_not_found"
    TOURNAMENT_NOT_FOUND = "tournament_not_found"
    TOURNAMENT_FINISHED = "tournament_finished"
    SESSION_ALREADY_LINKED = "session_already_linked"
    SESSION_GAME_MISMATCH = "session_game_mismatch"
    RULE_SET_CONFLICT = "rule_set_conflict"
    BUILTIN_RULE_SET = "builtin_rule_set"
    RULE_SET_IN_USE = "rule_set_in_use"
