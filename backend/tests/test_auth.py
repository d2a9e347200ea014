from datetime import timedelta

import pytest
from httpx import AsyncClient

from driving_school.core.security import create_access_token, create_password_reset_token
from driving_school.services.auth_service import auth_service

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin):
    """Test login with the seeded admin"""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["email"] == ADMIN_EMAIL
    assert "hashed_password" not in body["data"]


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient, admin):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "  ADMIN@Test.com ", "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_with_matching_username(client: AsyncClient, admin):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "username": "admin"}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_with_wrong_username(client: AsyncClient, admin):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "username": "someone"}
    )

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_invalid_password(client: AsyncClient, admin):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_missing_fields(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("Missing required fields")
    assert "email" in body["error"]
    assert "password" in body["error"]


@pytest.mark.asyncio
async def test_login_rate_limited_after_five_attempts(client: AsyncClient, admin):
    """The sixth attempt from one IP inside the window is refused"""
    for _ in range(5):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": ADMIN_EMAIL, "password": "wrongpassword"}
        )
        assert response.status_code == 401

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["retry_after"] > 0
    assert "Retry-After" in response.headers


# ==========================================
# Protected routes
# ==========================================

@pytest.mark.asyncio
async def test_protected_route_without_token(client: AsyncClient):
    response = await client.get("/api/v1/candidates")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Not authorized to access this route"}


@pytest.mark.asyncio
async def test_protected_route_with_malformed_token(client: AsyncClient):
    response = await client.get(
        "/api/v1/candidates",
        headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Not authorized to access this route"


@pytest.mark.asyncio
async def test_protected_route_with_expired_token(client: AsyncClient, admin):
    token = create_access_token({"sub": admin.id}, expires_delta=timedelta(minutes=-5))

    response = await client.get(
        "/api/v1/candidates",
        headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Token expired"


@pytest.mark.asyncio
async def test_reset_token_is_not_an_access_token(client: AsyncClient, admin):
    token = create_password_reset_token(admin.id, admin.email)

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_admin(client: AsyncClient):
    token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_me(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == ADMIN_EMAIL
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/auth/logout", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"


# ==========================================
# Password reset
# ==========================================

@pytest.mark.asyncio
async def test_forgot_password_unknown_email_does_not_leak(client: AsyncClient, admin):
    response = await client.post(
        "/api/v1/auth/forgot-password",
        json={"email": "nobody@test.com"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "data" not in body


@pytest.mark.asyncio
async def test_forgot_and_reset_password(client: AsyncClient, admin):
    """Without SMTP the link comes back in the response"""
    response = await client.post(
        "/api/v1/auth/forgot-password",
        json={"email": ADMIN_EMAIL}
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["reset_url"].endswith(data["token"])
    assert "/reset-password?token=" in data["reset_url"]

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": data["token"], "password": "brand-new-pass"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["token"]

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": ADMIN_EMAIL, "password": "brand-new-pass"}
    )
    assert response.status_code == 200

    # The token was issued for the old password and no longer works
    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": data["token"], "password": "another-pass"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Token is invalid or has expired"


@pytest.mark.asyncio
async def test_reset_password_with_garbage_token(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": "garbage", "password": "brand-new-pass"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Token is invalid or has expired"


@pytest.mark.asyncio
async def test_reset_password_too_short(client: AsyncClient, admin):
    token = create_password_reset_token(admin.id, admin.email)

    response = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": token, "password": "abc"}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_forgot_password_rate_limited(client: AsyncClient, admin):
    for _ in range(3):
        response = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@test.com"})
        assert response.status_code == 200

    response = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@test.com"})

    assert response.status_code == 429


@pytest.mark.asyncio
async def test_forgot_password_reports_mail_failure(client: AsyncClient, admin, monkeypatch):
    from driving_school.services.email_service import email_service

    async def failing_send(*args, **kwargs):
        return False

    monkeypatch.setattr(email_service, "smtp_user", "mailer@test.com")
    monkeypatch.setattr(email_service, "smtp_password", "secret")
    monkeypatch.setattr(email_service, "send_password_reset_email", failing_send)

    response = await client.post("/api/v1/auth/forgot-password", json={"email": ADMIN_EMAIL})

    assert response.status_code == 500
    assert response.json()["error"] == "There was an error sending the email. Please try again later."


# ==========================================
# Account settings
# ==========================================

@pytest.mark.asyncio
async def test_update_password_returns_fresh_token(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/settings/password",
        json={"current_password": ADMIN_PASSWORD, "new_password": "changed-pass"},
        headers=auth_headers
    )
    assert response.status_code == 200

    response = await client.put(
        "/api/v1/auth/password",
        json={"current_password": "changed-pass", "new_password": "changed-again"},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["token"]


@pytest.mark.asyncio
async def test_update_password_wrong_current(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/settings/password",
        json={"current_password": "nope", "new_password": "changed-pass"},
        headers=auth_headers
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_update_email_requires_password(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/settings/email",
        json={"email": "new@test.com", "current_password": "nope"},
        headers=auth_headers
    )
    assert response.status_code == 401

    response = await client.put(
        "/api/v1/settings/email",
        json={"email": "New@Test.com", "current_password": ADMIN_PASSWORD},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "new@test.com"


@pytest.mark.asyncio
async def test_update_email_duplicate(client: AsyncClient, auth_headers, session_factory):
    async with session_factory() as session:
        await auth_service.create_admin(session, "Other", "other@test.com", "password123")

    response = await client.put(
        "/api/v1/auth/email",
        json={"email": "other@test.com", "current_password": ADMIN_PASSWORD},
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["error"] == "email already exists"


@pytest.mark.asyncio
async def test_settings_profile_and_name(client: AsyncClient, auth_headers):
    response = await client.put("/api/v1/settings/name", json={"name": "  Head Office "}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Head Office"

    response = await client.get("/api/v1/settings", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Head Office"
    assert data["last_password_change"]
