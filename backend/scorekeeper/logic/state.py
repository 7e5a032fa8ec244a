"""
Frozen state models for sessions, saved players, tournaments and the app root.

All models are immutable; transitions build new instances with model_copy.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, computed_field, field_validator

from scorekeeper.logic.enums import SessionStatus, TournamentStatus
from scorekeeper.logic.rules import GameRuleSet, RuleSetPatch


class Player(BaseModel):
    """
    A participant playing as an individual.

    color and avatar are copied from the saved player when the session starts;
    later edits to the saved roster do not reach this snapshot.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["player"] = "player"
    id: str = Field(min_length=1)
    display_name: str
    color: str = ""
    avatar: str = ""
    round_scores: tuple[float, ...] = ()
    position: int = Field(default=1, ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_score(self) -> float:
        return float(sum(self.round_scores))


class Team(BaseModel):
    """A participant made of several players scoring as one."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["team"] = "team"
    id: str = Field(min_length=1)
    display_name: str
    member_ids: tuple[str, ...] = ()
    member_names: tuple[str, ...] = ()  # cached for display, same order as member_ids
    round_scores: tuple[float, ...] = ()
    position: int = Field(default=1, ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_score(self) -> float:
        return float(sum(self.round_scores))


Participant = Annotated[Player | Team, Field(discriminator="kind")]


class GameSession(BaseModel):
    """
    One play-through of a game.

    In team games the teams are the ranked participants; players are still
    carried for identity but never scored.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    game_id: str
    players: tuple[Player, ...] = ()
    teams: tuple[Team, ...] = ()
    current_round: int = Field(default=1, ge=1)
    status: SessionStatus = SessionStatus.ACTIVE
    started_at: datetime
    finished_at: datetime | None = None

    @property
    def is_team_game(self) -> bool:
        return bool(self.teams)

    @property
    def participants(self) -> tuple[Player, ...] | tuple[Team, ...]:
        """Return the ranked participants: teams in team games, players otherwise."""
        return self.teams if self.teams else self.players

    def get_participant(self, participant_id: str) -> Player | Team | None:
        return next((p for p in self.participants if p.id == participant_id), None)

    def has_scored_this_round(self, participant: Player | Team) -> bool:
        return len(participant.round_scores) == self.current_round


class SavedPlayer(BaseModel):
    """Reusable player identity, independent of any session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    color: str = ""
    avatar: str = ""


class TournamentStanding(BaseModel):
    """Cumulative results of one roster player in a tournament."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    total_points: float = 0
    wins: int = 0
    games_played: int = 0


class Tournament(BaseModel):
    """A competition over several finished sessions of one game."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    game_id: str
    player_ids: tuple[str, ...] = ()
    linked_session_ids: tuple[str, ...] = ()
    standings: tuple[TournamentStanding, ...] = ()
    status: TournamentStatus = TournamentStatus.ACTIVE
    created_at: datetime
    finished_at: datetime | None = None


class AppState(BaseModel):
    """
    Root application state, persisted as a single blob.

    Every collection defaults to empty so blobs written by older versions
    (or with null collections) still load.
    """

    model_config = ConfigDict(frozen=True)

    current_session: GameSession | None = None
    saved_players: tuple[SavedPlayer, ...] = ()
    game_history: tuple[GameSession, ...] = ()  # newest first
    tournaments: tuple[Tournament, ...] = ()
    custom_rule_sets: tuple[GameRuleSet, ...] = ()
    rule_overrides: dict[str, RuleSetPatch] = Field(default_factory=dict)
    dark_mode: bool = True
    game_order: tuple[str, ...] = ()

    @field_validator(
        "saved_players",
        "game_history",
        "tournaments",
        "custom_rule_sets",
        "rule_overrides",
        "game_order",
        mode="before",
    )
    @classmethod
    def _null_collection_to_empty(cls, v: object, info: ValidationInfo) -> object:
        if v is None:
            return {} if info.field_name == "rule_overrides" else ()
        return v

    @field_validator("dark_mode", mode="before")
    @classmethod
    def _null_dark_mode_to_default(cls, v: object) -> object:
        return True if v is None else v

    def get_history_session(self, session_id: str) -> GameSession | None:
        return next((s for s in self.game_history if s.id == session_id), None)

    def get_tournament(self, tournament_id: str) -> Tournament | None:
        return next((t for t in self.tournaments if t.id == tournament_id), None)

    def get_saved_player(self, player_id: str) -> SavedPlayer | None:
        return next((p for p in self.saved_players if p.id == player_id), None)
