"""Unit tests for the score engine."""
import pytest

from core.config import settings
from core.errors import PreconditionViolation, ValidationError
from core.scoring import SCORE_TIERS, apply_stat_changes, decay_value, score, tier_for
from models.task import ChecklistItem
from models.user import UserStats


class FlatCatalog:
    def __init__(self, bonus):
        self.bonus = bonus

    def get_task_type_defaults(self, task_type):
        return {}

    def get_class_bonus(self, class_name, task_type):
        return self.bonus


@pytest.fixture
def stats():
    return UserStats()


@pytest.mark.parametrize("value,name", [
    (-30.0, "worst"),
    (-20.0, "bad"),
    (-10.5, "bad"),
    (-10.0, "neutral"),
    (0.0, "neutral"),
    (1.0, "good"),
    (9.99, "good"),
    (10.0, "best"),
    (21.27, "best"),
])
def test_tier_breakpoints(value, name):
    assert tier_for(value).name == name


def test_tiers_are_ordered():
    lowers = [tier.lower for tier in SCORE_TIERS]
    assert lowers == sorted(lowers)


def test_up_rewards_diminish_with_value(make_task, stats):
    low = score(make_task("habit", value=-25.0), "up", stats)
    mid = score(make_task("habit", value=0.0), "up", stats)
    high = score(make_task("habit", value=15.0), "up", stats)
    assert low.exp > mid.exp > high.exp
    assert low.gold > mid.gold > high.gold


def test_down_damage_grows_with_value(make_task, stats):
    low = score(make_task("habit", value=-25.0), "down", stats)
    high = score(make_task("habit", value=15.0), "down", stats)
    assert high.health < low.health < 0


def test_up_on_neutral_daily(make_task, stats):
    delta = score(make_task("daily"), "up", stats)
    bonus = 1.1  # warrior on dailies
    assert delta.exp == pytest.approx(settings.EXP_BASE * bonus)
    assert delta.gold == pytest.approx(settings.GOLD_BASE * bonus)
    assert delta.health == 0.0
    assert delta.mana == settings.MANA_PER_SCORE
    assert delta.new_value == pytest.approx(1.0)


def test_habit_down_moves_value_and_drains(make_task, stats):
    delta = score(make_task("habit", difficulty="hard"), "down", stats)
    assert delta.new_value == pytest.approx(-1.0)
    assert delta.health == pytest.approx(-settings.HP_DAMAGE_BASE * 2)
    assert delta.mana == -settings.MANA_PER_SCORE
    assert delta.exp == 0.0


def test_score_is_deterministic(make_task, stats):
    task = make_task("habit", value=3.3)
    first = score(task, "down", stats)
    assert score(task, "down", stats) == first
    assert task.value == 3.3


def test_value_clamped_to_ceiling(make_task, stats):
    delta = score(make_task("habit", value=21.0), "up", stats)
    assert delta.new_value == settings.TASK_VALUE_CEILING


def test_value_clamped_to_floor(make_task, stats):
    delta = score(make_task("habit", value=-47.0), "down", stats)
    assert delta.new_value == settings.TASK_VALUE_FLOOR


def test_level_scales_rewards_sub_linearly(make_task):
    task = make_task("todo")
    base = score(task, "up", UserStats(lvl=1))
    assert score(task, "up", UserStats(lvl=4)).exp == pytest.approx(base.exp * 2)
    capped = score(task, "up", UserStats(lvl=settings.LEVEL_SCALING_CAP * 4))
    assert capped.exp == pytest.approx(base.exp * settings.LEVEL_SCALING_CAP ** 0.5)


def test_class_bonus_comes_from_catalog(make_task, stats):
    task = make_task("todo")
    single = score(task, "up", stats, catalog=FlatCatalog(1.0))
    double = score(task, "up", stats, catalog=FlatCatalog(2.0))
    assert double.exp == pytest.approx(single.exp * 2)
    assert double.gold == pytest.approx(single.gold * 2)


def test_buffs_raise_rewards_and_soften_damage(make_task):
    task = make_task("habit")
    plain = UserStats()
    buffed = UserStats(buffs={"exp": 0.5, "con": 1.0})
    assert score(task, "up", buffed).exp == pytest.approx(score(task, "up", plain).exp * 1.5)
    assert score(task, "down", buffed).health == pytest.approx(score(task, "down", plain).health / 2)


def test_checklist_multiplies_completion(make_task, stats):
    items = [ChecklistItem(text="a", completed=True), ChecklistItem(text="b")]
    plain = score(make_task("todo"), "up", stats)
    with_list = score(make_task("todo", checklist=items), "up", stats)
    assert with_list.exp == pytest.approx(plain.exp * 2)


def test_checklist_gives_partial_credit_on_cron_miss(make_task, stats):
    items = [ChecklistItem(text="a", completed=True), ChecklistItem(text="b")]
    full = score(make_task("daily"), "down", stats, cron=True)
    half = score(make_task("daily", checklist=items), "down", stats, cron=True)
    assert half.health == pytest.approx(full.health / 2)


@pytest.mark.parametrize("value", [-25.0, -15.0, 0.0, 5.0, 12.0])
def test_unchecking_reverses_the_up(make_task, stats, value):
    up = score(make_task("daily", value=value), "up", stats)
    down = score(make_task("daily", value=up.new_value, completed=True), "down", stats)
    assert down.new_value == pytest.approx(value)
    assert down.exp == pytest.approx(-up.exp)
    assert down.gold == pytest.approx(-up.gold)
    assert down.health == 0.0


def test_reward_costs_value_in_gold(make_task, stats):
    delta = score(make_task("reward", value=10.0), "up", stats)
    assert delta.gold == -10.0
    assert delta.new_value == 10.0


def test_reward_price_above_value_ceiling_unchanged(make_task, stats):
    delta = score(make_task("reward", value=50.0), "up", stats)
    assert delta.gold == -50.0
    assert delta.new_value == 50.0


def test_free_reward_never_goes_below_floor(make_task, stats):
    delta = score(make_task("reward", value=0.0), "up", stats)
    assert delta.new_value == 0.0
    assert delta.new_value >= settings.TASK_VALUE_FLOOR


def test_reward_cannot_be_scored_down(make_task, stats):
    with pytest.raises(PreconditionViolation):
        score(make_task("reward"), "down", stats)


def test_invalid_direction(make_task, stats):
    with pytest.raises(ValidationError):
        score(make_task("habit"), "sideways", stats)


def test_decay_value_steps_through_tiers(make_task):
    assert decay_value(make_task("todo", value=0.0), times=3) == pytest.approx(-3.0)
    assert decay_value(make_task("todo", value=-47.0), times=2) == settings.TASK_VALUE_FLOOR


class TestApplyStatChanges:
    def test_health_floor_is_death_threshold(self):
        stats = apply_stat_changes(UserStats(hp=3.0), health=-40.0)
        assert stats.hp == settings.DEATH_THRESHOLD

    def test_health_capped_at_max(self):
        assert apply_stat_changes(UserStats(hp=49.0), health=5.0).hp == settings.MAX_HEALTH

    def test_level_up_restores_health(self):
        stats = apply_stat_changes(UserStats(hp=10.0, exp=140.0), exp=20.0)
        assert stats.lvl == 2
        assert stats.exp == pytest.approx(10.0)
        assert stats.hp == settings.MAX_HEALTH

    def test_gold_and_mana_bounds(self):
        stats = apply_stat_changes(UserStats(gp=1.0, mp=99.0), gold=-5.0, mana=5.0)
        assert stats.gp == 0.0
        assert stats.mp == settings.MAX_MANA

    def test_input_untouched(self):
        original = UserStats(hp=20.0)
        apply_stat_changes(original, health=-5.0)
        assert original.hp == 20.0
