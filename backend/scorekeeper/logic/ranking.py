"""
Ranking of scoreable participants by total score.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from scorekeeper.logic.enums import VictoryCondition
from scorekeeper.logic.state import Player, Team

if TYPE_CHECKING:
    from collections.abc import Sequence

ScoreableT = TypeVar("ScoreableT", Player, Team)


def _sort_key(victory_condition: VictoryCondition):  # noqa: ANN202
    if victory_condition == VictoryCondition.LOWEST_SCORE:
        return lambda entity: entity.total_score
    # highest_score and target_score both rank the biggest total first
    return lambda entity: -entity.total_score


def rank(entities: Sequence[ScoreableT], victory_condition: VictoryCondition) -> tuple[ScoreableT, ...]:
    """
    Sort entities by total score and assign 1-based positions.

    Python's sort is stable, so entities with equal totals keep their input
    order. Every entity gets a distinct position (index + 1); ties do not
    share a rank.
    """
    ordered = sorted(entities, key=_sort_key(victory_condition))
    return tuple(
        entity if entity.position == index else entity.model_copy(update={"position": index})
        for index, entity in enumerate(ordered, start=1)
    )


def leader(entities: Sequence[ScoreableT], victory_condition: VictoryCondition) -> ScoreableT | None:
    """Return the rank-1 entity, or None for an empty sequence."""
    ranked = rank(entities, victory_condition)
    return ranked[0] if ranked else None
