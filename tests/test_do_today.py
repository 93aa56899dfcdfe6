# tests/test_do_today.py

from datetime import date, timedelta

from planner.core.do_today import DoTodayFilter
from planner.models.do_today import DoTodayOffEntry
from planner.models.task import RecurringType

from .fakes import TODAY, USER_ID, make_task


def test_exclusion_is_scoped_to_one_day() -> None:
    off = DoTodayFilter()

    assert off.toggle("a", TODAY) is True

    assert off.is_excluded("a", TODAY)
    assert not off.is_excluded("a", TODAY + timedelta(days=1))
    assert off.toggle("a", TODAY) is False
    assert off.excluded_keys(TODAY) == frozenset()


def test_recurring_instances_share_the_template_key() -> None:
    off = DoTodayFilter()
    instance = make_task("i1", original_task_id="t", recurring_type=RecurringType.DAILY)

    off.toggle(instance, TODAY)

    assert off.is_excluded("t", TODAY)
    assert off.is_excluded(instance, TODAY)


def test_toggle_all_excludes_when_most_are_included() -> None:
    off = DoTodayFilter()
    off.toggle("c", TODAY)

    # two of three included
    assert off.toggle_all(["a", "b", "c"], TODAY) is True
    assert off.excluded_keys(TODAY) == {"a", "b", "c"}


def test_toggle_all_includes_when_most_are_excluded() -> None:
    off = DoTodayFilter()
    off.toggle("a", TODAY)
    off.toggle("b", TODAY)

    # one of three included
    assert off.toggle_all(["a", "b", "c"], TODAY) is False
    assert off.excluded_keys(TODAY) == frozenset()


def test_toggle_all_at_exactly_half_excludes() -> None:
    off = DoTodayFilter()
    off.toggle("a", TODAY)

    assert off.toggle_all(["a", "b", "b"], TODAY) is True
    assert off.excluded_keys(TODAY) == {"a", "b"}


def test_load_snapshot_and_forget() -> None:
    other_day = date(2024, 1, 5)
    off = DoTodayFilter()
    off.load([
        DoTodayOffEntry(user_id=USER_ID, task_id="a", off_date=TODAY),
        DoTodayOffEntry(user_id=USER_ID, task_id="a", off_date=other_day),
        DoTodayOffEntry(user_id=USER_ID, task_id="b", off_date=TODAY),
    ])
    snapshot = off.snapshot()

    off.forget("a")

    assert off.excluded_keys(TODAY) == {"b"}
    assert off.excluded_keys(other_day) == frozenset()
    off.restore(snapshot)
    assert [e.key for e in off.entries(USER_ID)] == [
        f"a:{TODAY.isoformat()}", f"b:{TODAY.isoformat()}", f"a:{other_day.isoformat()}",
    ]
