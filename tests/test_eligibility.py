"""Tests for eligibility and priority resolution."""

from datetime import date, timedelta

from next_tasks.tasks.eligibility import (
    default_priority,
    document_priority,
    is_eligible,
    resolve_priority,
    select_eligible,
    select_for_mode,
)
from next_tasks.tasks.models import DEFAULT_PRIORITY_TAGS, SelectionMode, Task
from next_tasks.tasks.parser import parse_tasks

TODAY = date(2024, 2, 1)


def _task(start: str | None = None, priority: int | None = None) -> Task:
    return Task(text="Task", line_index=0, done=False, priority=priority, start=start)


def test_done_task_is_not_eligible() -> None:
    """Test that completed tasks are never eligible."""
    task = Task(text="Done", line_index=0, done=True)
    assert not is_eligible(task, TODAY)


def test_start_date_constraint() -> None:
    """Test future start excludes, today or past includes."""
    assert not is_eligible(_task(start="2024-02-02"), TODAY)
    assert is_eligible(_task(start="2024-02-01"), TODAY)
    assert is_eligible(_task(start="2024-01-15T08:00"), TODAY)


def test_relative_start_is_never_in_the_future_of_itself() -> None:
    """Test today+Nd resolves against today."""
    assert is_eligible(_task(start="today+0d"), TODAY)
    assert not is_eligible(_task(start="today+1d"), TODAY)


def test_unparseable_start_imposes_no_constraint() -> None:
    """Test malformed start dates do not hide a task."""
    assert is_eligible(_task(start="next tuesday"), TODAY)
    assert is_eligible(_task(start="2024-02-30"), TODAY)


def test_eligibility_is_monotonic_in_today() -> None:
    """Test that once eligible, a task stays eligible on later days."""
    tasks = [
        _task(start="2024-02-10"),
        _task(start="2024-01-01"),
        _task(start=None),
        _task(start="garbage"),
    ]
    for task in tasks:
        days = [TODAY + timedelta(days=offset) for offset in range(0, 30)]
        flags = [is_eligible(task, day) for day in days]
        first = flags.index(True) if True in flags else len(flags)
        assert all(flags[first:])


def test_select_modes() -> None:
    """Test single-next returns the first eligible, all-eligible returns all."""
    tasks = parse_tasks(
        """- [x] Already done
- [ ] Later @start(2024-03-01)
- [ ] First eligible
- [ ] Second eligible
"""
    )

    assert [t.text for t in select_eligible(tasks, TODAY)] == ["First eligible", "Second eligible"]
    assert [t.text for t in select_for_mode(tasks, TODAY, SelectionMode.SINGLE_NEXT)] == [
        "First eligible"
    ]
    assert len(select_for_mode(tasks, TODAY, SelectionMode.ALL_ELIGIBLE)) == 2
    assert select_for_mode(tasks[:2], TODAY, SelectionMode.SINGLE_NEXT) == []


def test_resolve_priority_prefers_task_tag() -> None:
    """Test task tag beats document fallback."""
    assert resolve_priority(_task(priority=1), 5, DEFAULT_PRIORITY_TAGS) == 1


def test_resolve_priority_uses_fallback() -> None:
    """Test document priority applies to untagged tasks."""
    assert resolve_priority(_task(), 5, DEFAULT_PRIORITY_TAGS) == 5


def test_resolve_priority_defaults_to_middle_rank() -> None:
    """Test the middle of the tag list is the default."""
    assert resolve_priority(_task(), None, DEFAULT_PRIORITY_TAGS) == 4
    assert resolve_priority(_task(), None, ["a", "b", "c", "d"]) == 2
    assert resolve_priority(_task(), None, ["only"]) == 1


def test_resolve_priority_stays_in_range() -> None:
    """Test out-of-range ranks fall through to the default."""
    tags = ["p1", "p2", "p3"]
    assert resolve_priority(_task(priority=9), 0, tags) == default_priority(tags) == 2
    assert resolve_priority(_task(), None, []) == 1


def test_document_priority_is_first_tag_in_text() -> None:
    """Test the document rank comes from its first tag anywhere."""
    content = "#projects #p5\n- [ ] Task #p1\n"
    assert document_priority(content, DEFAULT_PRIORITY_TAGS) == 5
    assert document_priority("#projects\n", DEFAULT_PRIORITY_TAGS) is None
