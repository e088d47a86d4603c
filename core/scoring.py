"""
Task scoring: value tiers, stat deltas and value decay.

`score` is a pure function of (task, direction, actor stats): it returns the
raw deltas and never touches the task or the user. Clamping stats to their
bounds (death threshold, max health, max mana) and levelling happen in
`apply_stat_changes`, called by the completion op and the cron processor.
"""
import bisect
import math
from typing import NamedTuple, Optional, Sequence

from core.config import settings
from core.content import ContentCatalog, default_catalog
from core.errors import PreconditionViolation, ValidationError
from core.leveling import calculate_new_level_and_xp
from models.task import Task
from models.user import UserStats

DIRECTIONS = ("up", "down")


class ScoreTier(NamedTuple):
    name: str
    color: str
    lower: float # Inclusive lower bound of task value
    increment: float # Value change per score
    up_factor: float # Reward multiplier when scored up
    down_factor: float # Damage multiplier when scored down


# Ordered by `lower`. Low-value (red) tasks pay more when done; high-value
# (blue) tasks hurt more when failed.
SCORE_TIERS: Sequence[ScoreTier] = (
    ScoreTier("worst", "red", float("-inf"), 1.7, 2.0, 0.5),
    ScoreTier("bad", "orange", -20.0, 1.4, 1.5, 0.75),
    ScoreTier("neutral", "yellow", -10.0, 1.0, 1.0, 1.0),
    ScoreTier("good", "green", 1.0, 0.8, 0.75, 1.5),
    ScoreTier("best", "blue", 10.0, 0.6, 0.5, 2.0),
)


class ScoreDelta(NamedTuple):
    exp: float
    gold: float
    health: float
    mana: float
    new_value: float


ZERO_DELTA_FIELDS = {"exp": 0.0, "gold": 0.0, "health": 0.0, "mana": 0.0}


def zero_delta(value: float) -> ScoreDelta:
    return ScoreDelta(new_value=value, **ZERO_DELTA_FIELDS)


def tier_for(value: float, tiers: Sequence[ScoreTier] = SCORE_TIERS) -> ScoreTier:
    index = bisect.bisect_right([tier.lower for tier in tiers], value) - 1
    return tiers[max(index, 0)]


def clamp_value(value: float) -> float:
    return min(max(value, settings.TASK_VALUE_FLOOR), settings.TASK_VALUE_CEILING)


def level_factor(lvl: int) -> float:
    return math.sqrt(max(1, min(lvl, settings.LEVEL_SCALING_CAP)))


def decay_value(task: Task, times: int = 1, tiers: Sequence[ScoreTier] = SCORE_TIERS) -> float:
    """Value after `times` consecutive downward steps, with no stat effect."""
    value = task.value
    for _ in range(times):
        value = clamp_value(value - tier_for(value, tiers).increment)
    return value


def _reverse_tier(value: float, tiers: Sequence[ScoreTier]) -> ScoreTier:
    """Tier of the value an upward score started from, given the value it ended at."""
    for tier in tiers:
        if tier_for(value - tier.increment, tiers) is tier:
            return tier
    return tier_for(value, tiers)


def _checklist_multiplier(task: Task, direction: str, cron: bool) -> float:
    if not task.capabilities.has_checklist or not task.checklist:
        return 1.0
    if direction == "down" and cron:
        # Partial credit for a missed daily
        return 1.0 - task.checklist_progress()
    return 1.0 + sum(1 for item in task.checklist if item.completed)


def _reward(magnitude: float, task: Task, actor: UserStats, catalog: ContentCatalog):
    scale = magnitude * level_factor(actor.lvl) * catalog.get_class_bonus(actor.class_name, task.type)
    exp = settings.EXP_BASE * scale * (1 + actor.buffs.get("exp", 0.0))
    gold = settings.GOLD_BASE * scale * (1 + actor.buffs.get("gp", 0.0))
    return exp, gold


def score(
    task: Task,
    direction: str,
    actor: UserStats,
    catalog: Optional[ContentCatalog] = None,
    cron: bool = False,
    tiers: Sequence[ScoreTier] = SCORE_TIERS,
) -> ScoreDelta:
    """
    Compute the deltas of one scoring event.

    - up: reward scaled by the tier's `up_factor`, value rises by the tier increment.
    - down on a habit, or on a daily missed through cron (`cron=True`):
      health damage scaled by the tier's `down_factor`, value drops.
    - down on a daily/todo outside cron: unchecking, refunds the previous up.
    - rewards: up costs `value` gold, down is not allowed.
    """
    if direction not in DIRECTIONS:
        raise ValidationError("invalidDirection", direction=direction)
    catalog = catalog or default_catalog

    if task.type == "reward":
        if direction == "down":
            raise PreconditionViolation("rewardCannotScoreDown")
        return ScoreDelta(exp=0.0, gold=-task.value, health=0.0, mana=0.0, new_value=task.value)

    difficulty = settings.DIFFICULTY_MULTIPLIERS.get(task.difficulty, 1)
    checklist = _checklist_multiplier(task, direction, cron)

    if direction == "up":
        tier = tier_for(task.value, tiers)
        exp, gold = _reward(tier.up_factor * difficulty * checklist, task, actor, catalog)
        return ScoreDelta(
            exp=exp,
            gold=gold,
            health=0.0,
            mana=settings.MANA_PER_SCORE,
            new_value=clamp_value(task.value + tier.increment),
        )

    if task.type == "habit" or cron:
        tier = tier_for(task.value, tiers)
        magnitude = tier.down_factor * difficulty * checklist
        damage = settings.HP_DAMAGE_BASE * magnitude / (1 + actor.buffs.get("con", 0.0))
        return ScoreDelta(
            exp=0.0,
            gold=0.0,
            health=-damage,
            mana=-settings.MANA_PER_SCORE if task.type == "habit" else 0.0,
            new_value=clamp_value(task.value - tier.increment),
        )

    # Unchecking a daily/todo
    tier = _reverse_tier(task.value, tiers)
    exp, gold = _reward(tier.up_factor * difficulty * checklist, task, actor, catalog)
    return ScoreDelta(
        exp=-exp,
        gold=-gold,
        health=0.0,
        mana=-settings.MANA_PER_SCORE,
        new_value=clamp_value(task.value - tier.increment),
    )


def apply_stat_changes(
    stats: UserStats,
    exp: float = 0.0,
    gold: float = 0.0,
    health: float = 0.0,
    mana: float = 0.0,
) -> UserStats:
    """
    New stats with the deltas applied once.

    Health is clamped to [DEATH_THRESHOLD, MAX_HEALTH], mana to [0, MAX_MANA],
    gold at 0. Levelling up restores full health.
    """
    new_level, new_exp, _ = calculate_new_level_and_xp(stats.lvl, stats.exp, exp)
    hp = stats.hp + health
    if new_level > stats.lvl:
        hp = settings.MAX_HEALTH
    return stats.model_copy(update={
        "lvl": new_level,
        "exp": new_exp,
        "gp": max(0.0, stats.gp + gold),
        "hp": min(max(hp, settings.DEATH_THRESHOLD), settings.MAX_HEALTH),
        "mp": min(max(stats.mp + mana, 0.0), settings.MAX_MANA),
    })
