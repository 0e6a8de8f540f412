import aiosmtplib
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select

from app.models.comment import Comment, CommentReport
from app.models.user import Profile


@pytest_asyncio.fixture
async def media_item(client: AsyncClient, admin) -> dict:
    category = await client.post(
        "/api/v1/categories", json={"name": "Sleep", "type": "audio"}, headers=admin["headers"]
    )
    item = await client.post(
        f"/api/v1/categories/{category.json()['id']}/media-items",
        json={"title": "Evening wind-down", "type": "audio", "duration": "20:00"},
        headers=admin["headers"],
    )
    return item.json()


async def _comment(client: AsyncClient, author, media_item, content: str = "Lovely session") -> dict:
    response = await client.post(
        f"/api/v1/media-items/{media_item['id']}/comments", json={"content": content}, headers=author["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _notifications(client: AsyncClient, who) -> list[dict]:
    return (await client.get("/api/v1/notifications", headers=who["headers"])).json()


@pytest.mark.asyncio
async def test_create_and_list_newest_first(client: AsyncClient, media_item, paid_user, other_paid_user) -> None:
    first = await _comment(client, paid_user, media_item, "  First!  ")
    second = await _comment(client, other_paid_user, media_item, "Second")

    assert first["content"] == "First!"
    assert first["author"] == {"user_id": paid_user["id"], "full_name": "Paid User", "avatar_url": None}

    listing = await client.get(f"/api/v1/media-items/{media_item['id']}/comments", headers=paid_user["headers"])
    assert [c["id"] for c in listing.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_comment_validation(client: AsyncClient, media_item, paid_user, user) -> None:
    url = f"/api/v1/media-items/{media_item['id']}/comments"
    assert (await client.post(url, json={"content": ""}, headers=paid_user["headers"])).status_code == 422
    assert (await client.post(url, json={"content": "x" * 2001}, headers=paid_user["headers"])).status_code == 422
    assert (await client.post(url, json={"content": "   "}, headers=paid_user["headers"])).status_code == 400
    assert (await client.post(url, json={"content": "hi"}, headers=user["headers"])).status_code == 402
    missing = "/api/v1/media-items/999/comments"
    assert (await client.post(missing, json={"content": "hi"}, headers=paid_user["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_only_author_can_edit(client: AsyncClient, media_item, paid_user, other_paid_user, admin) -> None:
    comment = await _comment(client, paid_user, media_item)

    denied = await client.patch(
        f"/api/v1/comments/{comment['id']}", json={"content": "hijacked"}, headers=other_paid_user["headers"]
    )
    assert denied.status_code == 403
    by_admin = await client.patch(
        f"/api/v1/comments/{comment['id']}", json={"content": "hijacked"}, headers=admin["headers"]
    )
    assert by_admin.status_code == 403

    edited = await client.patch(
        f"/api/v1/comments/{comment['id']}", json={"content": "Edited"}, headers=paid_user["headers"]
    )
    assert edited.status_code == 200
    assert edited.json()["content"] == "Edited"
    assert edited.json()["updated_at"] is not None


@pytest.mark.asyncio
async def test_author_deletes_own_comment_quietly(
    client: AsyncClient, media_item, paid_user, other_paid_user, email_sender
) -> None:
    comment = await _comment(client, paid_user, media_item)

    denied = await client.delete(f"/api/v1/comments/{comment['id']}", headers=other_paid_user["headers"])
    assert denied.status_code == 403

    deleted = await client.delete(f"/api/v1/comments/{comment['id']}", headers=paid_user["headers"])
    assert deleted.status_code == 200
    assert await _notifications(client, paid_user) == []
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_admin_delete_notifies_author(
    client: AsyncClient, media_item, paid_user, admin, email_sender, session_maker
) -> None:
    comment = await _comment(client, paid_user, media_item, "Something rude")

    deleted = await client.delete(f"/api/v1/comments/{comment['id']}", headers=admin["headers"])
    assert deleted.status_code == 200

    async with session_maker() as session:
        assert await session.get(Comment, comment["id"]) is None

    notifications = await _notifications(client, paid_user)
    assert [n["type"] for n in notifications] == ["comment_deleted"]
    assert notifications[0]["metadata"]["comment_id"] == comment["id"]
    assert len(email_sender.to(paid_user["email"])) == 1


@pytest.mark.asyncio
async def test_hide_and_unhide(
    client: AsyncClient, media_item, paid_user, other_paid_user, admin, email_sender
) -> None:
    comment = await _comment(client, paid_user, media_item, "Spam spam spam")
    url = f"/api/v1/comments/{comment['id']}/visibility"

    assert (await client.patch(url, json={"hidden": True}, headers=other_paid_user["headers"])).status_code == 403

    hidden = await client.patch(url, json={"hidden": True, "reason": "Spam"}, headers=admin["headers"])
    assert hidden.status_code == 200
    assert hidden.json()["is_hidden_by_admin"] is True
    assert hidden.json()["hide_reason"] == "Spam"
    assert hidden.json()["hidden_at"] is not None

    listing_url = f"/api/v1/media-items/{media_item['id']}/comments"
    assert (await client.get(listing_url, headers=other_paid_user["headers"])).json() == []
    admin_view = (await client.get(listing_url, headers=admin["headers"])).json()
    assert [c["id"] for c in admin_view] == [comment["id"]]

    notifications = await _notifications(client, paid_user)
    assert [n["type"] for n in notifications] == ["comment_hidden"]
    mails = email_sender.to(paid_user["email"])
    assert len(mails) == 1
    assert "Spam" in mails[0]["html"]

    unhidden = await client.patch(url, json={"hidden": False}, headers=admin["headers"])
    assert unhidden.json()["is_hidden_by_admin"] is False
    assert unhidden.json()["hide_reason"] is None
    assert len((await client.get(listing_url, headers=other_paid_user["headers"])).json()) == 1
    # unhiding does not notify again
    assert len(await _notifications(client, paid_user)) == 1


@pytest.mark.asyncio
async def test_hide_survives_mail_failure(client: AsyncClient, media_item, paid_user, admin, email_sender) -> None:
    comment = await _comment(client, paid_user, media_item)
    email_sender.fail_with = aiosmtplib.SMTPException("down")

    hidden = await client.patch(
        f"/api/v1/comments/{comment['id']}/visibility", json={"hidden": True}, headers=admin["headers"]
    )
    assert hidden.status_code == 200
    assert hidden.json()["is_hidden_by_admin"] is True


@pytest.mark.asyncio
async def test_hiding_twice_notifies_once(client: AsyncClient, media_item, paid_user, admin, email_sender) -> None:
    comment = await _comment(client, paid_user, media_item)
    url = f"/api/v1/comments/{comment['id']}/visibility"

    first = await client.patch(url, json={"hidden": True, "reason": "Spam"}, headers=admin["headers"])
    second = await client.patch(url, json={"hidden": True, "reason": "Off topic"}, headers=admin["headers"])
    assert second.status_code == 200
    assert second.json()["hide_reason"] == "Off topic"
    assert second.json()["hidden_at"] == first.json()["hidden_at"]

    assert len(await _notifications(client, paid_user)) == 1
    assert len(email_sender.to(paid_user["email"])) == 1


@pytest.mark.asyncio
async def test_banned_author_comments_are_hidden(
    client: AsyncClient, media_item, paid_user, other_paid_user, admin, session_maker
) -> None:
    await _comment(client, paid_user, media_item)
    visible = await _comment(client, other_paid_user, media_item, "Still here")

    async with session_maker() as session:
        profile = (await session.execute(select(Profile).where(Profile.user_id == paid_user["id"]))).scalar_one()
        profile.is_banned = True
        await session.commit()

    listing_url = f"/api/v1/media-items/{media_item['id']}/comments"
    public = (await client.get(listing_url, headers=other_paid_user["headers"])).json()
    assert [c["id"] for c in public] == [visible["id"]]
    assert len((await client.get(listing_url, headers=admin["headers"])).json()) == 2


@pytest.mark.asyncio
async def test_report_comment(client: AsyncClient, media_item, paid_user, other_paid_user, session_maker) -> None:
    comment = await _comment(client, paid_user, media_item)
    url = f"/api/v1/comments/{comment['id']}/report"

    own = await client.post(url, json={"reason": "me"}, headers=paid_user["headers"])
    assert own.status_code == 400

    report = await client.post(url, json={"reason": " Offensive "}, headers=other_paid_user["headers"])
    assert report.status_code == 201
    assert report.json()["status"] == "pending"
    assert report.json()["reason"] == "Offensive"
    assert report.json()["reporter_id"] == other_paid_user["id"]

    duplicate = await client.post(url, json={"reason": "Again"}, headers=other_paid_user["headers"])
    assert duplicate.status_code == 409

    async with session_maker() as session:
        reports = (await session.execute(select(CommentReport))).scalars().all()
        assert len(reports) == 1

    missing = await client.post("/api/v1/comments/999/report", json={"reason": "x"}, headers=paid_user["headers"])
    assert missing.status_code == 404
