from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from hrdesk.models import Notification, NotificationStatus, NotificationType, TaskStatus
from hrdesk.services import NotificationService

pytestmark = pytest.mark.asyncio


async def _seed(session, *, user, task, count: int = 1) -> list[Notification]:
    notifications = [
        Notification(
            user_id=user.id,
            task_id=task.id,
            title=f"Note {index}",
            message=f"Message {index}",
            type=NotificationType.STATUS,
        )
        for index in range(count)
    ]
    session.add_all(notifications)
    await session.commit()
    for notification in notifications:
        await session.refresh(notification)
    return notifications


async def test_list_is_scoped_to_recipient(client, session, allowlist, make_user, make_task, auth_headers):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    task = await make_task(creator=alice, assignee=bob)
    await _seed(session, user=alice, task=task, count=2)
    await _seed(session, user=bob, task=task, count=1)

    response = await client.get("/api/notifications/", headers=auth_headers(alice))

    assert response.status_code == 200
    body = response.json()
    assert body["unread"] == 2
    assert {item["user_id"] for item in body["items"]} == {alice.id}
    assert [item["title"] for item in body["items"]] == ["Note 1", "Note 0"]


async def test_mark_read_is_idempotent_and_owner_only(client, session, allowlist, make_user, make_task, auth_headers):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    task = await make_task(creator=alice, assignee=bob)
    (note,) = await _seed(session, user=alice, task=task)

    stranger = await client.post(f"/api/notifications/{note.id}/read", headers=auth_headers(bob))
    assert stranger.status_code == 404

    for _ in range(2):
        response = await client.post(f"/api/notifications/{note.id}/read", headers=auth_headers(alice))
        assert response.status_code == 200
        assert response.json()["status"] == "read"

    unread = await client.get(
        "/api/notifications/",
        params={"status": "unread"},
        headers=auth_headers(alice),
    )
    assert unread.json() == {"items": [], "unread": 0}


async def test_read_all_leaves_other_users_untouched(client, session, allowlist, make_user, make_task, auth_headers):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    task = await make_task(creator=alice, assignee=bob)
    await _seed(session, user=alice, task=task, count=3)
    await _seed(session, user=bob, task=task, count=2)

    response = await client.post("/api/notifications/read-all", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json() == {"affected": 3}
    bob_view = (await client.get("/api/notifications/", headers=auth_headers(bob))).json()
    assert bob_view["unread"] == 2
    assert {item["status"] for item in bob_view["items"]} == {"unread"}


async def test_delete_one_and_delete_all(client, session, allowlist, make_user, make_task, auth_headers):
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    task = await make_task(creator=alice, assignee=bob)
    first, *_ = await _seed(session, user=alice, task=task, count=3)
    await _seed(session, user=bob, task=task, count=1)

    assert (await client.delete(f"/api/notifications/{first.id}", headers=auth_headers(bob))).status_code == 404
    assert (await client.delete(f"/api/notifications/{first.id}", headers=auth_headers(alice))).status_code == 204

    response = await client.delete("/api/notifications/", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json() == {"affected": 2}

    remaining = (await session.exec(select(Notification))).all()
    assert [note.user_id for note in remaining] == [bob.id]


async def test_deadline_scan_notifies_once_per_day(session, make_user, make_task):
    lead = await make_user("lead@example.com")
    hire = await make_user("hire@example.com")
    now = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)
    due = await make_task(creator=lead, assignee=hire, title="Contract", deadline=now + timedelta(hours=20))
    await make_task(creator=lead, assignee=hire, title="Far away", deadline=now + timedelta(days=10))
    await make_task(
        creator=lead,
        assignee=hire,
        title="Finished",
        deadline=now + timedelta(hours=5),
        status=TaskStatus.COMPLETED,
    )
    service = NotificationService(session)

    first = await service.scan_deadlines(window_days=2, now=now)
    second = await service.scan_deadlines(window_days=2, now=now + timedelta(hours=3))

    assert (first.scanned, first.notified) == (1, 1)
    assert (second.scanned, second.notified) == (1, 0)
    notes = (await session.exec(select(Notification))).all()
    assert len(notes) == 1
    assert notes[0].task_id == due.id
    assert notes[0].user_id == hire.id
    assert notes[0].type is NotificationType.DEADLINE
    assert notes[0].status is NotificationStatus.UNREAD
    assert notes[0].message == 'Task "Contract" is due in 1 days'
