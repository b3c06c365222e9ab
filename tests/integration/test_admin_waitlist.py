"""Integration tests for operator waitlist endpoints."""

import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_admin_requires_key(client, db_session):
    response = await client.get("/api/v1/admin/waitlists/main/signups")

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_admin_rejects_wrong_key(client, db_session, admin_headers):
    response = await client.get(
        "/api/v1/admin/waitlists/main/signups",
        headers={"X-Admin-Key": "wrong"},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_list_signups(client, db_session, admin_headers):
    for email in ("one@example.com", "two@example.com"):
        await client.post("/api/v1/waitlists/main/signups", json={"email": email})

    response = await client.get("/api/v1/admin/waitlists/main/signups", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert sorted(item["email"] for item in data) == ["one@example.com", "two@example.com"]
    assert all(item["notification_sent"] is False for item in data)


@pytest.mark.asyncio
async def test_retry_delivers_pending_notifications(client, db_session, notifier, admin_headers):
    """
    Test: Signups whose delivery failed are delivered by a retry run.
    """
    notifier.fail_next(times=2)
    await client.post("/api/v1/waitlists/automations/signups", json={"email": "a@example.com"})
    await client.post("/api/v1/waitlists/automations/signups", json={"email": "b@example.com"})

    response = await client.post(
        "/api/v1/admin/waitlists/automations/notifications/retry",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["attempted"] == 2
    assert data["delivered"] == 2
    assert data["failed"] == 0
    assert sorted(notifier.sent_to) == ["a@example.com", "b@example.com"]

    pending = await client.get(
        "/api/v1/admin/waitlists/automations/signups",
        params={"notification_sent": "false"},
        headers=admin_headers,
    )
    assert pending.json() == []


@pytest.mark.asyncio
async def test_retry_rejected_for_waitlist_without_notifications(client, db_session, admin_headers):
    response = await client.post(
        "/api/v1/admin/waitlists/main/notifications/retry",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_notify_single_signup(client, db_session, notifier, admin_headers):
    notifier.fail_next()
    await client.post("/api/v1/waitlists/automations/signups", json={"email": "solo@example.com"})

    response = await client.post(
        "/api/v1/admin/waitlists/automations/signups/solo@example.com/notify",
        headers=admin_headers,
    )
    repeat = await client.post(
        "/api/v1/admin/waitlists/automations/signups/solo@example.com/notify",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["outcome"] == "notified_now"
    assert repeat.json()["outcome"] == "already_notified"
    assert notifier.sent_to == ["solo@example.com"]


@pytest.mark.asyncio
async def test_notify_unknown_signup_returns_404(client, db_session, admin_headers):
    response = await client.post(
        "/api/v1/admin/waitlists/automations/signups/ghost@example.com/notify",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_notify_failure_returns_502(client, db_session, notifier, admin_headers):
    notifier.fail_next(times=2)
    await client.post("/api/v1/waitlists/automations/signups", json={"email": "flaky@example.com"})

    response = await client.post(
        "/api/v1/admin/waitlists/automations/signups/flaky@example.com/notify",
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
