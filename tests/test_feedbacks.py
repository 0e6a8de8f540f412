import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_anonymous_feedback_is_stored_and_mailed(client: AsyncClient, email_sender) -> None:
    response = await client.post(
        "/api/v1/feedbacks",
        json={"type": "suggestion", "message": "Add rain sounds", "email": "guest@calmbreath.app"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] is None
    assert body["status"] == "pending"
    assert body["email"] == "guest@calmbreath.app"

    (mail,) = email_sender.to("feedback@calmbreath.app")
    assert mail["subject"] == "Suggestion from Anonymous"
    assert "Add rain sounds" in mail["html"]


@pytest.mark.asyncio
async def test_feedback_from_user_fills_contact_details(client: AsyncClient, user, email_sender) -> None:
    response = await client.post(
        "/api/v1/feedbacks", json={"type": "result", "message": "Sleeping better"}, headers=user["headers"]
    )
    body = response.json()
    assert body["user_id"] == user["id"]
    assert body["email"] == user["email"]
    assert body["user_name"] == "Free User"
    assert email_sender.to("feedback@calmbreath.app")[0]["subject"].endswith("from Free User")


@pytest.mark.asyncio
async def test_feedback_is_saved_when_mail_fails(client: AsyncClient, email_sender) -> None:
    email_sender.fail_with = OSError("network unreachable")
    response = await client.post("/api/v1/feedbacks", json={"type": "problem", "message": "Audio skips"})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_feedback_validation(client: AsyncClient) -> None:
    assert (await client.post("/api/v1/feedbacks", json={"type": "rant", "message": "x"})).status_code == 422
    assert (await client.post("/api/v1/feedbacks", json={"type": "problem", "message": ""})).status_code == 422


@pytest.mark.asyncio
async def test_admin_lists_and_filters(client: AsyncClient, admin, user, paid_user) -> None:
    await client.post("/api/v1/feedbacks", json={"type": "problem", "message": "One"}, headers=user["headers"])
    await client.post("/api/v1/feedbacks", json={"type": "result", "message": "Two"}, headers=paid_user["headers"])
    await client.post("/api/v1/feedbacks", json={"type": "problem", "message": "Three"})

    async def messages(**params) -> list[str]:
        response = await client.get("/api/v1/admin/feedbacks", params=params, headers=admin["headers"])
        assert response.status_code == 200
        return [f["message"] for f in response.json()["data"]]

    assert await messages() == ["Three", "Two", "One"]
    assert await messages(type="problem") == ["Three", "One"]
    assert await messages(user_id=paid_user["id"]) == ["Two"]
    assert await messages(status="resolved") == []

    page = await client.get("/api/v1/admin/feedbacks", params={"items_per_page": 2}, headers=admin["headers"])
    assert page.json()["total_count"] == 3
    assert page.json()["has_more"] is True

    assert (await client.get("/api/v1/admin/feedbacks", headers=user["headers"])).status_code == 403


@pytest.mark.asyncio
async def test_admin_updates_and_deletes(client: AsyncClient, admin) -> None:
    created = (await client.post("/api/v1/feedbacks", json={"type": "problem", "message": "Crash"})).json()
    url = f"/api/v1/admin/feedbacks/{created['id']}"

    review = {"status": "resolved", "admin_notes": "Fixed in 1.2"}
    updated = await client.patch(url, json=review, headers=admin["headers"])
    assert updated.status_code == 200
    body = updated.json()
    assert body["status"] == "resolved"
    assert body["admin_notes"] == "Fixed in 1.2"
    assert body["reviewed_by"] == admin["id"]
    assert body["reviewed_at"] is not None

    resolved = await client.get("/api/v1/admin/feedbacks", params={"status": "resolved"}, headers=admin["headers"])
    assert [f["id"] for f in resolved.json()["data"]] == [created["id"]]

    assert (await client.delete(url, headers=admin["headers"])).status_code == 200
    assert (await client.patch(url, json={"status": "reviewed"}, headers=admin["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_update_rejects_null_status(client: AsyncClient, admin) -> None:
    created = (await client.post("/api/v1/feedbacks", json={"type": "problem", "message": "Crash"})).json()
    url = f"/api/v1/admin/feedbacks/{created['id']}"

    assert (await client.patch(url, json={"status": None}, headers=admin["headers"])).status_code == 422

    notes_only = await client.patch(url, json={"admin_notes": "Looking into it"}, headers=admin["headers"])
    assert notes_only.status_code == 200
    assert notes_only.json()["status"] == "pending"
