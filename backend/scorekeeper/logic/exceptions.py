"""Typed domain exceptions for score keeping rule violations.

Domain functions (rules.py, session.py, tournament.py, app_state.py) raise
subclasses of ScoreKeeperError instead of raw ValueError. The store catches
them at its boundary and converts them to ActionError results, so callers
never see an exception for a rejected action.
"""

from scorekeeper.logic.enums import ErrorCode


class ScoreKeeperError(Exception):
    """Base exception for rejected score keeping actions.

    Subclasses pin the ErrorCode reported back to the caller.
    """

    code: ErrorCode = ErrorCode.INVALID_SCORING_ACTION


class UnknownGameError(ScoreKeeperError):
    """Game id does not resolve to any built-in or custom rule set."""

    code = ErrorCode.UNKNOWN_GAME

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"unknown game '{game_id}'")


class SessionAlreadyActiveError(ScoreKeeperError):
    """A new session was requested while another one is still active."""

    code = ErrorCode.SESSION_ALREADY_ACTIVE

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session '{session_id}' is still active; finish or quit it first")


class NoActiveSessionError(ScoreKeeperError):
    """Session action attempted while no session is active."""

    code = ErrorCode.NO_ACTIVE_SESSION


class InvalidRosterError(ScoreKeeperError):
    """Participant list is empty, has duplicate ids, or teams reference unknown players."""

    code = ErrorCode.INVALID_ROSTER


class UnknownParticipantError(ScoreKeeperError):
    """Score submitted for an id that is not a ranked participant of the session."""

    code = ErrorCode.UNKNOWN_PARTICIPANT

    def __init__(self, participant_id: str) -> None:
        self.participant_id = participant_id
        super().__init__(f"unknown participant '{participant_id}'")


class AlreadyScoredError(ScoreKeeperError):
    """Participant already has a score for the current round."""

    code = ErrorCode.ALREADY_SCORED

    def __init__(self, participant_id: str, round_number: int) -> None:
        self.participant_id = participant_id
        self.round_number = round_number
        super().__init__(f"participant '{participant_id}' already scored round {round_number}")


class InvalidScoringActionError(ScoreKeeperError):
    """Action is not valid for the session's scoring mode."""

    code = ErrorCode.INVALID_SCORING_ACTION


class SavedPlayerNotFoundError(ScoreKeeperError):
    code = ErrorCode.SAVED_PLAYER_NOT_FOUND

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"saved player '{player_id}' not found")


class InvalidSavedPlayerError(ScoreKeeperError):
    """Saved player data is invalid (blank name, duplicate id)."""

    code = ErrorCode.INVALID_SAVED_PLAYER


class HistorySessionNotFoundError(ScoreKeeperError):
    code = ErrorCode.HISTORY_SESSION_NOT_FOUND

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session '{session_id}' not found in history")


class TournamentNotFoundError(ScoreKeeperError):
    code = ErrorCode.TOURNAMENT_NOT_FOUND

    def __init__(self, tournament_id: str) -> None:
        self.tournament_id = tournament_id
        super().__init__(f"tournament '{tournament_id}' not found")


class TournamentFinishedError(ScoreKeeperError):
    """Tournament standings are frozen once it is finished."""

    code = ErrorCode.TOURNAMENT_FINISHED

    def __init__(self, tournament_id: str) -> None:
        self.tournament_id = tournament_id
        super().__init__(f"tournament '{tournament_id}' is finished")


class SessionAlreadyLinkedError(ScoreKeeperError):
    code = ErrorCode.SESSION_ALREADY_LINKED

    def __init__(self, tournament_id: str, session_id: str) -> None:
        self.tournament_id = tournament_id
        self.session_id = session_id
        super().__init__(f"session '{session_id}' is already linked to tournament '{tournament_id}'")


class SessionGameMismatchError(ScoreKeeperError):
    """Session was played with a different game than the tournament's."""

    code = ErrorCode.SESSION_GAME_MISMATCH

    def __init__(self, *, tournament_game_id: str, session_game_id: str) -> None:
        self.tournament_game_id = tournament_game_id
        self.session_game_id = session_game_id
        super().__init__(f"session game '{session_game_id}' does not match tournament game '{tournament_game_id}'")


class RuleSetConflictError(ScoreKeeperError):
    """Custom rule set id collides with an existing rule set."""

    code = ErrorCode.RULE_SET_CONFLICT

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"rule set '{game_id}' already exists")


class BuiltinRuleSetError(ScoreKeeperError):
    """Built-in rule sets cannot be deleted."""

    code = ErrorCode.BUILTIN_RULE_SET

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"rule set '{game_id}' is built-in and cannot be deleted")


class RuleSetInUseError(ScoreKeeperError):
    """Rule set is referenced by the active session."""

    code = ErrorCode.RULE_SET_IN_USE

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"rule set '{game_id}' is used by the active session")
