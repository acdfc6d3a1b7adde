from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hrdesk.models import NotificationType, Task, TaskPriority, TaskStatus, next_status
from hrdesk.services.notifications import (
    assignment_drafts,
    days_until,
    deadline_drafts,
    mention_drafts,
    status_change_drafts,
)

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def _task(
    *,
    status: TaskStatus = TaskStatus.PENDING,
    created_by: str = "creator@example.com",
    assigned_to: str = "assignee@example.com",
    deadline: datetime | None = None,
) -> Task:
    return Task(
        id=7,
        title="Payroll audit",
        deadline=deadline or NOW + timedelta(days=5),
        priority=TaskPriority.HIGH,
        status=status,
        created_by=created_by,
        assigned_to=assigned_to,
        user_id=1,
    )


def test_status_cycle_never_skips_a_state() -> None:
    seen = [TaskStatus.PENDING]
    for _ in range(6):
        seen.append(next_status(seen[-1]))
    assert seen == [
        TaskStatus.PENDING,
        TaskStatus.IN_PROGRESS,
        TaskStatus.COMPLETED,
        TaskStatus.PENDING,
        TaskStatus.IN_PROGRESS,
        TaskStatus.COMPLETED,
        TaskStatus.PENDING,
    ]


def test_assignment_targets_only_the_assignee() -> None:
    drafts = assignment_drafts(_task())
    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.recipient == "assignee@example.com"
    assert draft.type is NotificationType.ASSIGNMENT
    assert draft.title == "New Task Assignment"
    assert draft.message == 'You have been assigned to task "Payroll audit" by creator@example.com'


def test_completion_by_third_party_notifies_assignee_and_creator() -> None:
    drafts = status_change_drafts(_task(status=TaskStatus.COMPLETED), actor="manager@example.com")
    assert [draft.recipient for draft in drafts] == ["assignee@example.com", "creator@example.com"]
    assert {draft.type for draft in drafts} == {NotificationType.COMPLETED}
    assert drafts[0].message == 'Task "Payroll audit" has been completed by manager@example.com'


def test_in_progress_uses_status_type() -> None:
    drafts = status_change_drafts(_task(status=TaskStatus.IN_PROGRESS), actor="creator@example.com")
    assert [draft.recipient for draft in drafts] == ["assignee@example.com"]
    assert drafts[0].type is NotificationType.STATUS
    assert drafts[0].title == "Task Status Update"
    assert drafts[0].message == 'Task "Payroll audit" is now in progress, updated by creator@example.com'


def test_assignee_acting_is_not_notified() -> None:
    drafts = status_change_drafts(_task(status=TaskStatus.COMPLETED), actor="assignee@example.com")
    assert [draft.recipient for draft in drafts] == ["creator@example.com"]


def test_creator_who_is_assignee_is_not_notified_twice() -> None:
    task = _task(status=TaskStatus.IN_PROGRESS, created_by="same@example.com", assigned_to="same@example.com")
    assert [d.recipient for d in status_change_drafts(task, actor="other@example.com")] == ["same@example.com"]
    assert status_change_drafts(task, actor="same@example.com") == []


def test_wrap_around_to_pending_is_silent() -> None:
    assert status_change_drafts(_task(status=TaskStatus.PENDING), actor="manager@example.com") == []


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (timedelta(hours=1), 1),
        (timedelta(days=1), 1),
        (timedelta(days=1, seconds=1), 2),
        (timedelta(days=2), 2),
        (timedelta(hours=-3), 0),
        (timedelta(days=-1, hours=-1), -1),
    ],
)
def test_days_until_rounds_up(offset: timedelta, expected: int) -> None:
    assert days_until(NOW + offset, NOW) == expected


def test_days_until_treats_naive_values_as_utc() -> None:
    assert days_until((NOW + timedelta(hours=30)).replace(tzinfo=None), NOW) == 2


def test_deadline_window_and_completion() -> None:
    due_soon = _task(deadline=NOW + timedelta(days=1, hours=2))
    drafts = deadline_drafts(due_soon, now=NOW, window_days=2)
    assert len(drafts) == 1
    assert drafts[0].type is NotificationType.DEADLINE
    assert drafts[0].recipient == "assignee@example.com"
    assert drafts[0].message == 'Task "Payroll audit" is due in 2 days'

    far = _task(deadline=NOW + timedelta(days=2, minutes=1))
    assert deadline_drafts(far, now=NOW, window_days=2) == []

    done = _task(status=TaskStatus.COMPLETED, deadline=NOW + timedelta(hours=1))
    assert deadline_drafts(done, now=NOW, window_days=2) == []


def test_overdue_tasks_still_get_deadline_type() -> None:
    overdue = _task(deadline=NOW - timedelta(days=3))
    drafts = deadline_drafts(overdue, now=NOW, window_days=2)
    assert drafts[0].type is NotificationType.DEADLINE
    assert drafts[0].message == 'Task "Payroll audit" is due in -3 days'


def test_mentions_are_addressed_once_each() -> None:
    drafts = mention_drafts(
        _task(),
        actor="author@example.com",
        mentioned=["a@example.com", "b@example.com", "a@example.com"],
    )
    assert [draft.recipient for draft in drafts] == ["a@example.com", "b@example.com"]
    assert drafts[0].title == "New Mention"
    assert drafts[0].message == 'author@example.com mentioned you on task "Payroll audit"'
