import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.core.services.notifications import create_notification
from app.models.notification import COMMENT_HIDDEN, REPORT_REVIEWED


@pytest_asyncio.fixture
async def inbox(db, paid_user, other_paid_user) -> list[int]:
    created = []
    for i in range(3):
        notification = create_notification(
            db,
            user_id=paid_user["id"],
            notification_type=REPORT_REVIEWED if i % 2 else COMMENT_HIDDEN,
            title=f"Notice {i}",
            message=f"Message {i}",
            metadata={"index": i},
        )
        await db.flush()
        created.append(notification.id)
    create_notification(db, other_paid_user["id"], COMMENT_HIDDEN, "Not yours", "Someone else's")
    await db.commit()
    return created


@pytest.mark.asyncio
async def test_list_newest_first(client: AsyncClient, paid_user, inbox) -> None:
    response = await client.get("/api/v1/notifications", headers=paid_user["headers"])
    assert response.status_code == 200
    body = response.json()
    assert [n["title"] for n in body] == ["Notice 2", "Notice 1", "Notice 0"]
    assert body[0]["metadata"] == {"index": 2}
    assert all(n["is_read"] is False for n in body)

    limited = await client.get("/api/v1/notifications", params={"limit": 1, "offset": 1}, headers=paid_user["headers"])
    assert [n["title"] for n in limited.json()] == ["Notice 1"]

    too_many = await client.get("/api/v1/notifications", params={"limit": 101}, headers=paid_user["headers"])
    assert too_many.status_code == 422


@pytest.mark.asyncio
async def test_mark_read_and_unread_count(client: AsyncClient, paid_user, other_paid_user, inbox) -> None:
    count = await client.get("/api/v1/notifications/unread-count", headers=paid_user["headers"])
    assert count.json() == {"unread_count": 3}

    marked = await client.put(f"/api/v1/notifications/{inbox[0]}/read", headers=paid_user["headers"])
    assert marked.status_code == 200

    unread = await client.get("/api/v1/notifications", params={"unread_only": True}, headers=paid_user["headers"])
    assert [n["id"] for n in unread.json()] == [inbox[2], inbox[1]]

    await client.put("/api/v1/notifications/read-all", headers=paid_user["headers"])
    count = await client.get("/api/v1/notifications/unread-count", headers=paid_user["headers"])
    assert count.json() == {"unread_count": 0}

    theirs = await client.get("/api/v1/notifications/unread-count", headers=other_paid_user["headers"])
    assert theirs.json() == {"unread_count": 1}


@pytest.mark.asyncio
async def test_cannot_touch_other_users_notifications(client: AsyncClient, other_paid_user, inbox) -> None:
    read = await client.put(f"/api/v1/notifications/{inbox[0]}/read", headers=other_paid_user["headers"])
    assert read.status_code == 404
    deleted = await client.delete(f"/api/v1/notifications/{inbox[0]}", headers=other_paid_user["headers"])
    assert deleted.status_code == 404


@pytest.mark.asyncio
async def test_delete_one_and_all(client: AsyncClient, paid_user, other_paid_user, inbox) -> None:
    assert (await client.delete(f"/api/v1/notifications/{inbox[1]}", headers=paid_user["headers"])).status_code == 200
    remaining = (await client.get("/api/v1/notifications", headers=paid_user["headers"])).json()
    assert [n["id"] for n in remaining] == [inbox[2], inbox[0]]

    assert (await client.delete("/api/v1/notifications", headers=paid_user["headers"])).status_code == 200
    assert (await client.get("/api/v1/notifications", headers=paid_user["headers"])).json() == []
    assert len((await client.get("/api/v1/notifications", headers=other_paid_user["headers"])).json()) == 1
