import pytest

from culturepass_api.app.core.config import settings
from culturepass_api.app.core.db import get_cursor
from culturepass_api.app.core.errors import InvalidResetTokenError
from culturepass_api.app.services.auth_service import AuthService, SessionService
from culturepass_api.app.services.password_reset_service import PasswordResetService

from helpers import PASSWORD, StubNotifier, register, run

NEW_PASSWORD = "n3w-pass"


def test_reset_sends_link_and_changes_password():
    account, session_id = run(AuthService.register("priya", PASSWORD, {"email": "Priya@Example.com"}))
    notifier = StubNotifier()

    token = run(PasswordResetService.request_reset("priya@example.com", notifier))

    assert notifier.sent == [("Priya@Example.com", f"{settings.public_base_url}/reset-password?token={token}")]
    run(PasswordResetService.reset_password(token, NEW_PASSWORD))
    assert run(AuthService.login("priya", NEW_PASSWORD))[0].id == account.id
    assert run(SessionService.resolve(session_id)) is None


def test_unknown_email_sends_nothing():
    notifier = StubNotifier()
    assert run(PasswordResetService.request_reset("nobody@example.com", notifier)) is None
    assert notifier.sent == []


def test_token_works_once():
    run(AuthService.register("priya", PASSWORD, {"email": "priya@example.com"}))
    token = run(PasswordResetService.request_reset("priya@example.com", StubNotifier()))
    run(PasswordResetService.reset_password(token, NEW_PASSWORD))

    with pytest.raises(InvalidResetTokenError):
        run(PasswordResetService.reset_password(token, "third-pass"))
    assert run(AuthService.login("priya", NEW_PASSWORD))


def test_expired_token_is_rejected():
    run(AuthService.register("priya", PASSWORD, {"email": "priya@example.com"}))
    token = run(PasswordResetService.request_reset("priya@example.com", StubNotifier()))
    with get_cursor() as cursor:
        cursor.execute("UPDATE password_reset_tokens SET expires_at = 0 WHERE token = ?", (token,))

    with pytest.raises(InvalidResetTokenError):
        run(PasswordResetService.reset_password(token, NEW_PASSWORD))
    assert run(AuthService.login("priya", PASSWORD))


def test_unknown_token_is_rejected():
    with pytest.raises(InvalidResetTokenError):
        run(PasswordResetService.reset_password("not-a-token", NEW_PASSWORD))


# -- API -------------------------------------------------------------------

def test_forgot_and_reset_password(client, stub_notifier):
    register(client, "priya", email="priya@example.com")

    response = client.post("/api/auth/forgot-password", json={"email": "priya@example.com"})
    assert response.status_code == 200
    assert response.json() == {"message": "If that email exists, a reset link has been sent."}

    reset = client.post(
        "/api/auth/reset-password",
        json={"token": stub_notifier.last_token, "password": NEW_PASSWORD, "confirmPassword": NEW_PASSWORD},
    )
    assert reset.json() == {"ok": True}
    assert client.get("/api/auth/me").status_code == 401

    old = client.post("/api/auth/login", json={"username": "priya", "password": PASSWORD})
    assert old.status_code == 401
    new = client.post("/api/auth/login", json={"username": "priya", "password": NEW_PASSWORD})
    assert new.status_code == 200


def test_forgot_password_for_unknown_email_looks_the_same(client, stub_notifier):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == "If that email exists, a reset link has been sent."
    assert stub_notifier.sent == []


def test_reset_password_errors(client, stub_notifier):
    register(client, "priya", email="priya@example.com")
    client.post("/api/auth/forgot-password", json={"email": "priya@example.com"})
    token = stub_notifier.last_token

    mismatch = client.post(
        "/api/auth/reset-password",
        json={"token": token, "password": NEW_PASSWORD, "confirmPassword": "other"},
    )
    assert mismatch.status_code == 400
    assert mismatch.json()["code"] == "VALIDATION_ERROR"

    unknown = client.post(
        "/api/auth/reset-password",
        json={"token": "nope", "password": NEW_PASSWORD, "confirmPassword": NEW_PASSWORD},
    )
    assert unknown.status_code == 400
    assert unknown.json()["code"] == "INVALID_RESET_TOKEN"
