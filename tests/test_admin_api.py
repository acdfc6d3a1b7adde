from __future__ import annotations

import pytest
from sqlmodel import select

from hrdesk.core.config import get_settings
from hrdesk.models import Comment, EmployeePerformance, Notification, NotificationType, Task, User

pytestmark = pytest.mark.asyncio


@pytest.fixture
def admin_secret(client, monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "admin_username", "admin")
    monkeypatch.setattr(settings, "admin_password", "s3cret")
    return {"adminUsername": "admin", "adminPassword": "s3cret"}


async def test_removal_cascades_to_related_records(client, session, admin_secret, make_user, make_task):
    leaver = await make_user("leaver@example.com")
    stayer = await make_user("stayer@example.com")
    await make_task(creator=leaver, assignee=stayer, title="Handover")
    await make_task(creator=stayer, assignee=leaver, title="Exit interview")
    unrelated = await make_task(creator=stayer, assignee=stayer, title="Budget")
    session.add_all(
        [
            Notification(
                user_id=leaver.id,
                task_id=unrelated.id,
                title="Note",
                message="Message",
                type=NotificationType.STATUS,
            ),
            Comment(task_id=unrelated.id, user_id=leaver.id, content="bye"),
            Comment(task_id=unrelated.id, user_id=stayer.id, content="farewell"),
            EmployeePerformance(employee_id=leaver.id, metric_name="tickets", metric_value=12),
        ]
    )
    await session.commit()

    response = await client.post(
        "/api/admin/delete-users",
        json={"userIds": [leaver.id], **admin_secret},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Users deleted successfully"}
    assert [user.email for user in (await session.exec(select(User))).all()] == [stayer.email]
    assert [task.id for task in (await session.exec(select(Task))).all()] == [unrelated.id]
    assert (await session.exec(select(Notification))).all() == []
    assert [comment.content for comment in (await session.exec(select(Comment))).all()] == ["farewell"]
    assert (await session.exec(select(EmployeePerformance))).all() == []


async def test_missing_user_is_reported_while_others_are_removed(client, session, admin_secret, make_user, make_task):
    leavers = [await make_user(f"leaver{index}@example.com") for index in range(3)]
    stayer = await make_user("stayer@example.com")
    for leaver in leavers:
        task = await make_task(creator=leaver, assignee=stayer)
        session.add(
            Notification(
                user_id=leaver.id,
                task_id=task.id,
                title="Note",
                message="Message",
                type=NotificationType.ASSIGNMENT,
            )
        )
    await session.commit()
    leaver_ids = [leaver.id for leaver in leavers]

    response = await client.post(
        "/api/admin/delete-users",
        json={"userIds": [leaver_ids[0], 9999, *leaver_ids[1:]], **admin_secret},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Some users could not be deleted",
        "details": ["Failed to delete user 9999: User not found"],
    }
    assert [user.email for user in (await session.exec(select(User))).all()] == ["stayer@example.com"]
    assert (await session.exec(select(Task))).all() == []
    assert (await session.exec(select(Notification))).all() == []


async def test_wrong_credentials_are_rejected(client, session, admin_secret, make_user):
    user = await make_user("staff@example.com")

    response = await client.post(
        "/api/admin/delete-users",
        json={"userIds": [user.id], "adminUsername": "admin", "adminPassword": "guess"},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid admin credentials"}
    assert len((await session.exec(select(User))).all()) == 1


async def test_unconfigured_secret_rejects_everything(client, make_user):
    user = await make_user("staff@example.com")
    settings = get_settings()
    assert not settings.admin_credentials_configured

    response = await client.post(
        "/api/admin/delete-users",
        json={"userIds": [user.id], "adminUsername": "", "adminPassword": ""},
    )

    assert response.status_code == 401
