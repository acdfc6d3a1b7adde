from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from hrdesk.models import Notification, NotificationType, Task, TaskStatus, UserRole

pytestmark = pytest.mark.asyncio


def _deadline(days: int = 3) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


async def _notifications_for(session, user_id: int) -> list[Notification]:
    result = await session.exec(
        select(Notification).where(Notification.user_id == user_id).order_by(Notification.id)
    )
    return list(result.all())


async def test_create_task_notifies_assignee(client, session, allowlist, make_user, auth_headers):
    creator = await make_user("lead@example.com", full_name="Team Lead")
    assignee = await make_user("hire@example.com", full_name="New Hire")

    response = await client.post(
        "/api/tasks/",
        json={
            "title": "Prepare onboarding pack",
            "deadline": _deadline(),
            "priority": "high",
            "assigned_to": assignee.email,
        },
        headers=auth_headers(creator),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["created_by"] == creator.email
    assert body["assigned_to"] == assignee.email
    assert body["user_id"] == creator.id

    notifications = await _notifications_for(session, assignee.id)
    assert len(notifications) == 1
    notification = notifications[0]
    assert notification.type is NotificationType.ASSIGNMENT
    assert notification.task_id == body["id"]
    assert notification.message == (
        'You have been assigned to task "Prepare onboarding pack" by lead@example.com'
    )
    assert await _notifications_for(session, creator.id) == []


async def test_create_task_with_unknown_assignee_is_rejected(client, session, allowlist, make_user, auth_headers):
    creator = await make_user("lead@example.com")

    response = await client.post(
        "/api/tasks/",
        json={"title": "Orphan", "deadline": _deadline(), "assigned_to": "ghost@example.com"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    result = await session.exec(select(Task))
    assert result.all() == []


async def test_task_routes_require_allowed_ip(client, allowlist, make_user, auth_headers):
    user = await make_user("lead@example.com")
    headers = {**auth_headers(user), "X-Forwarded-For": "198.51.100.20"}

    response = await client.get("/api/tasks/", headers=headers)

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "ip_not_allowed"
    assert body["details"]["ip"] == "198.51.100.20"


async def test_task_routes_require_authentication(client, allowlist):
    response = await client.get("/api/tasks/", headers={"X-Forwarded-For": "203.0.113.5"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_advance_walks_the_full_cycle(client, session, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    assignee = await make_user("hire@example.com")
    task = await make_task(creator=creator, assignee=assignee, title="Payroll audit")

    seen = []
    for _ in range(4):
        response = await client.post(f"/api/tasks/{task.id}/advance", headers=auth_headers(assignee))
        assert response.status_code == 200
        seen.append(response.json()["status"])

    assert seen == ["in-progress", "completed", "pending", "in-progress"]

    # the assignee acts, so only the creator hears about it; wrap-around is silent
    creator_notes = await _notifications_for(session, creator.id)
    assert [note.type for note in creator_notes] == [
        NotificationType.STATUS,
        NotificationType.COMPLETED,
        NotificationType.STATUS,
    ]
    assert creator_notes[1].message == 'Task "Payroll audit" has been completed by hire@example.com'
    assert await _notifications_for(session, assignee.id) == []


async def test_completion_by_third_party_notifies_both(client, session, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    assignee = await make_user("hire@example.com")
    manager = await make_user("manager@example.com")
    task = await make_task(creator=creator, assignee=assignee, status=TaskStatus.IN_PROGRESS)

    response = await client.post(f"/api/tasks/{task.id}/advance", headers=auth_headers(manager))

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    for user in (creator, assignee):
        notes = await _notifications_for(session, user.id)
        assert [note.type for note in notes] == [NotificationType.COMPLETED]
    assert await _notifications_for(session, manager.id) == []


async def test_patch_rejects_skipping_a_status(client, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    assignee = await make_user("hire@example.com")
    task = await make_task(creator=creator, assignee=assignee)

    response = await client.patch(
        f"/api/tasks/{task.id}",
        json={"status": "completed"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["details"]["current"] == "pending"
    assert body["details"]["allowed"] == "in-progress"


async def test_patch_reassignment_notifies_new_assignee(client, session, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    first = await make_user("first@example.com")
    second = await make_user("second@example.com")
    task = await make_task(creator=creator, assignee=first, title="Benefits review")

    response = await client.patch(
        f"/api/tasks/{task.id}",
        json={"assigned_to": second.email, "priority": "low"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["assigned_to"] == second.email
    assert body["priority"] == "low"
    notes = await _notifications_for(session, second.id)
    assert [note.type for note in notes] == [NotificationType.ASSIGNMENT]
    assert await _notifications_for(session, first.id) == []


async def test_patch_requires_a_field(client, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    task = await make_task(creator=creator, assignee=creator)

    response = await client.patch(f"/api/tasks/{task.id}", json={}, headers=auth_headers(creator))

    assert response.status_code == 422


async def test_list_filters_by_identity_status_and_search(client, allowlist, make_user, make_task, auth_headers):
    lead = await make_user("lead@example.com")
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com")
    soon = datetime.now(timezone.utc) + timedelta(days=1)
    later = datetime.now(timezone.utc) + timedelta(days=9)
    await make_task(creator=lead, assignee=alice, title="Payroll audit", deadline=later)
    await make_task(creator=lead, assignee=bob, title="Office move", deadline=soon)
    await make_task(creator=bob, assignee=bob, title="Payroll export", status=TaskStatus.COMPLETED)
    headers = auth_headers(lead)

    everything = (await client.get("/api/tasks/", headers=headers)).json()
    assert everything["total"] == 3
    assert everything["items"][0]["title"] == "Office move"

    mine = (await client.get("/api/tasks/", params={"identity": alice.email}, headers=headers)).json()
    assert [item["title"] for item in mine["items"]] == ["Payroll audit"]

    done = (await client.get("/api/tasks/", params={"status": "completed"}, headers=headers)).json()
    assert [item["title"] for item in done["items"]] == ["Payroll export"]

    found = (await client.get("/api/tasks/", params={"search": "payroll"}, headers=headers)).json()
    assert found["total"] == 2

    by_person = (await client.get("/api/tasks/", params={"search": "BOB@"}, headers=headers)).json()
    assert by_person["total"] == 2

    page = (await client.get("/api/tasks/", params={"limit": 1, "offset": 1}, headers=headers)).json()
    assert page["total"] == 3
    assert len(page["items"]) == 1


async def test_get_missing_task_returns_404(client, allowlist, make_user, auth_headers):
    user = await make_user("lead@example.com")
    response = await client.get("/api/tasks/999", headers=auth_headers(user))
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


async def test_only_creator_or_admin_may_delete(client, session, allowlist, make_user, make_task, auth_headers):
    creator = await make_user("lead@example.com")
    assignee = await make_user("hire@example.com")
    admin = await make_user("root@example.com", role=UserRole.ADMIN)
    first = await make_task(creator=creator, assignee=assignee)
    second = await make_task(creator=creator, assignee=assignee)

    forbidden = await client.delete(f"/api/tasks/{first.id}", headers=auth_headers(assignee))
    assert forbidden.status_code == 403

    assert (await client.delete(f"/api/tasks/{first.id}", headers=auth_headers(creator))).status_code == 204
    assert (await client.delete(f"/api/tasks/{second.id}", headers=auth_headers(admin))).status_code == 204
    result = await session.exec(select(Task))
    assert result.all() == []
