"""Game rule sets: built-in catalogue, per-game overrides and custom rule sets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

from scorekeeper.logic.enums import ScoringMode, VictoryCondition

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

_CLEARABLE_FIELDS = frozenset({"winning_score"})


class GameRuleSet(BaseModel):
    """
    Scoring rules for one game.

    winning_score is a cap or target depending on victory_condition. allow_negative
    and round_based are hints for score entry; the engine accepts any number.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    victory_condition: VictoryCondition
    winning_score: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    allow_negative: bool = False
    round_based: bool = True
    scoring_mode: ScoringMode = ScoringMode.NUMERIC
    is_custom: bool = False


class RuleSetPatch(BaseModel):
    """
    Partial update of a rule set.

    Only explicitly set fields take part in a merge, so a patch can clear
    winning_score by setting it to None. Serialization keeps only the set
    fields for the same reason. No other field may be set to None.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    victory_condition: VictoryCondition | None = None
    winning_score: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    allow_negative: bool | None = None
    round_based: bool | None = None
    scoring_mode: ScoringMode | None = None

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self) -> RuleSetPatch:
        cleared = sorted(
            name for name in self.model_fields_set if name not in _CLEARABLE_FIELDS and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"only winning_score can be cleared, got None for {', '.join(cleared)}")
        return self

    @model_serializer(mode="wrap")
    def _serialize_set_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if key in self.model_fields_set}

    def changes(self) -> dict[str, Any]:
        """Return the explicitly set fields and their values."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def merged_with(self, newer: RuleSetPatch) -> RuleSetPatch:
        """Return a patch with newer's set fields layered over this one's."""
        return RuleSetPatch(**{**self.changes(), **newer.changes()})


BUILTIN_RULE_SETS: tuple[GameRuleSet, ...] = (
    GameRuleSet(
        id="skyjo",
        name="Skyjo",
        description="Keep your score low to win",
        victory_condition=VictoryCondition.LOWEST_SCORE,
        winning_score=100,
        allow_negative=True,
    ),
    GameRuleSet(
        id="take6",
        name="Take 6",
        description="Avoid picking up penalty cards",
        victory_condition=VictoryCondition.LOWEST_SCORE,
        winning_score=66,
    ),
    GameRuleSet(
        id="uno",
        name="UNO",
        description="Highest score wins",
        victory_condition=VictoryCondition.HIGHEST_SCORE,
        scoring_mode=ScoringMode.WINNER_TAKES_ALL,
    ),
    GameRuleSet(
        id="catan",
        name="Catan",
        description="Highest score wins",
        victory_condition=VictoryCondition.HIGHEST_SCORE,
        scoring_mode=ScoringMode.WINNER_TAKES_ALL,
    ),
    GameRuleSet(
        id="generic",
        name="Generic",
        description="For any tabletop game",
        victory_condition=VictoryCondition.HIGHEST_SCORE,
        allow_negative=True,
    ),
)

BUILTIN_RULE_SET_IDS = frozenset(rule_set.id for rule_set in BUILTIN_RULE_SETS)


def apply_patch(rule_set: GameRuleSet, patch: RuleSetPatch | None) -> GameRuleSet:
    """Return rule_set with the patch's set fields replacing its own, validated."""
    if patch is None:
        return rule_set
    changes = patch.changes()
    if not changes:
        return rule_set
    return GameRuleSet.model_validate({**rule_set.model_dump(), **changes})


def resolve_rule_set(
    game_id: str,
    builtins: Sequence[GameRuleSet] = BUILTIN_RULE_SETS,
    overrides: Mapping[str, RuleSetPatch] | None = None,
    custom_sets: Iterable[GameRuleSet] = (),
) -> GameRuleSet | None:
    """
    Resolve the effective rule set for a game id.

    Custom rule sets are self-contained and win on an exact id match. Otherwise
    the built-in with the same id is returned with its override patch applied.
    Returns None when the id matches neither.
    """
    for custom in custom_sets:
        if custom.id == game_id:
            return custom
    for builtin in builtins:
        if builtin.id == game_id:
            return apply_patch(builtin, (overrides or {}).get(game_id))
    return None


def available_rule_sets(
    builtins: Sequence[GameRuleSet] = BUILTIN_RULE_SETS,
    overrides: Mapping[str, RuleSetPatch] | None = None,
    custom_sets: Sequence[GameRuleSet] = (),
    game_order: Sequence[str] = (),
) -> list[GameRuleSet]:
    """
    List every effective rule set for display.

    Built-ins (with overrides) come first, then custom sets. Ids listed in
    game_order are moved to the front in that order; unknown ids are ignored.
    """
    overrides = overrides or {}
    catalogue = [apply_patch(b, overrides.get(b.id)) for b in builtins]
    custom_ids = {c.id for c in custom_sets}
    # a custom set shadows a built-in with the same id
    catalogue = [r for r in catalogue if r.id not in custom_ids]
    catalogue.extend(custom_sets)

    position = {game_id: index for index, game_id in enumerate(dict.fromkeys(game_order))}
    return sorted(catalogue, key=lambda r: position.get(r.id, len(position)))
