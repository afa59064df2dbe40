import pytest
import requests

from culturepass_api.app.core.db import get_cursor
from culturepass_api.app.core.errors import (
    FederatedTokenError,
    InvalidCredentialsError,
    UsernameTakenError,
    ValidationError,
)
from culturepass_api.app.core.security import hash_password, verify_password
from culturepass_api.app.services.auth_service import AuthService, SessionService
from culturepass_api.app.services.federated import GoogleTokenVerifier
from culturepass_api.app.services.user_service import UserService

from helpers import PASSWORD, StubVerifier, run


def test_password_hash_verifies_only_the_right_password():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("correct horse", None)
    assert not verify_password("correct horse", "not-a-hash")


def test_register_creates_account_and_session():
    account, session_id = run(AuthService.register("priya", PASSWORD, {"name": "Priya"}))
    assert account.username == "priya"
    assert account.name == "Priya"
    assert account.city == "Sydney"
    assert account.cpid.startswith("CP-U-")
    assert run(SessionService.resolve(session_id)).id == account.id


def test_register_defaults_name_to_username():
    account, _ = run(AuthService.register("kofi", PASSWORD))
    assert account.name == "kofi"


def test_account_never_exposes_password():
    account, _ = run(AuthService.register("priya", PASSWORD))
    dumped = account.model_dump(by_alias=True)
    assert "password" not in dumped
    assert PASSWORD not in str(dumped)


def test_duplicate_username_is_rejected():
    run(AuthService.register("priya", PASSWORD))
    with pytest.raises(UsernameTakenError):
        run(AuthService.register("priya", "another"))


def test_login_with_correct_password():
    registered, _ = run(AuthService.register("priya", PASSWORD))
    account, session_id = run(AuthService.login("priya", PASSWORD))
    assert account.id == registered.id
    assert run(SessionService.resolve(session_id)).id == registered.id


@pytest.mark.parametrize("username, password", [("priya", "wrong"), ("nobody", PASSWORD)])
def test_login_failures_are_invalid_credentials(username, password):
    run(AuthService.register("priya", PASSWORD))
    with pytest.raises(InvalidCredentialsError):
        run(AuthService.login(username, password))


def test_wrong_password_always_fails():
    run(AuthService.register("priya", PASSWORD))
    for _ in range(3):
        with pytest.raises(InvalidCredentialsError):
            run(AuthService.login("priya", PASSWORD + "x"))


def test_federated_account_cannot_use_password_login():
    identity = StubVerifier()
    account, _ = run(AuthService.login_federated("google-sub-1", identity))
    with pytest.raises(InvalidCredentialsError):
        run(AuthService.login(account.username, ""))


def test_logout_destroys_session():
    _, session_id = run(AuthService.register("priya", PASSWORD))
    run(AuthService.logout(session_id))
    assert run(SessionService.resolve(session_id)) is None


def test_unknown_session_resolves_to_nobody():
    assert run(SessionService.resolve("no-such-session")) is None


def test_expired_session_is_treated_as_absent_and_purged():
    _, session_id = run(AuthService.register("priya", PASSWORD))
    with get_cursor() as cursor:
        cursor.execute("UPDATE sessions SET expires_at = 0 WHERE id = ?", (session_id,))

    assert run(SessionService.resolve(session_id)) is None
    with get_cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 0


def test_purge_expired_keeps_live_sessions():
    _, live = run(AuthService.register("priya", PASSWORD))
    _, stale = run(AuthService.login("priya", PASSWORD))
    with get_cursor() as cursor:
        cursor.execute("UPDATE sessions SET expires_at = 0 WHERE id = ?", (stale,))

    assert run(SessionService.purge_expired()) == 1
    assert run(SessionService.resolve(live)) is not None


def test_federated_login_creates_account_once():
    verifier = StubVerifier()
    first, _ = run(AuthService.login_federated("sub-42", verifier))
    second, _ = run(AuthService.login_federated("sub-42", verifier))

    assert first.id == second.id
    assert first.social_provider == "google"
    assert first.name == "Kofi Mensah"
    assert first.email == "kofi@example.com"
    assert len(run(UserService.list_users())) == 1


def test_federated_login_fills_missing_email_only():
    no_email = StubVerifier(email=None)
    account, _ = run(AuthService.login_federated("sub-7", no_email))
    assert account.email == ""

    account, _ = run(AuthService.login_federated("sub-7", StubVerifier(email="first@example.com")))
    assert account.email == "first@example.com"

    account, _ = run(AuthService.login_federated("sub-7", StubVerifier(email="second@example.com")))
    assert account.email == "first@example.com"


def test_federated_login_with_bad_token_fails():
    with pytest.raises(FederatedTokenError):
        run(AuthService.login_federated("bad", StubVerifier()))


def test_username_with_colon_is_rejected():
    with pytest.raises(ValidationError):
        run(AuthService.register("google:sub-42", PASSWORD))
    assert run(UserService.list_users()) == []


def test_federated_login_unaffected_by_colon_username_attempt():
    with pytest.raises(ValidationError):
        run(AuthService.register("google:sub-42", PASSWORD))
    account, _ = run(AuthService.login_federated("sub-42", StubVerifier()))
    assert account.username == "google:sub-42"


def test_federated_login_stores_picture_without_overwriting():
    account, _ = run(AuthService.login_federated("sub-8", StubVerifier(picture=None)))
    assert account.avatar_url == ""

    account, _ = run(AuthService.login_federated("sub-8", StubVerifier(picture="https://img.example.com/a.png")))
    assert account.avatar_url == "https://img.example.com/a.png"

    account, _ = run(AuthService.login_federated("sub-8", StubVerifier(picture="https://img.example.com/b.png")))
    assert account.avatar_url == "https://img.example.com/a.png"


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if self.error:
            raise self.error
        return self.response


GOOD_CLAIMS = {
    "iss": "https://accounts.google.com",
    "aud": "client-123",
    "sub": "1098765",
    "email": "kofi@example.com",
    "name": "Kofi Mensah",
}


def test_google_verifier_returns_identity():
    session = FakeSession(FakeResponse(200, GOOD_CLAIMS))
    verifier = GoogleTokenVerifier(client_id="client-123", tokeninfo_url="https://tokeninfo.test", session=session)

    identity = verifier.verify("id-token")

    assert identity.provider == "google"
    assert identity.subject == "1098765"
    assert identity.email == "kofi@example.com"
    assert session.calls == [("https://tokeninfo.test", {"id_token": "id-token"})]


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(400, {"error": "invalid_token"}),
        FakeResponse(200, dict(GOOD_CLAIMS, iss="https://evil.example")),
        FakeResponse(200, dict(GOOD_CLAIMS, aud="someone-else")),
        FakeResponse(200, dict(GOOD_CLAIMS, sub="")),
    ],
)
def test_google_verifier_rejects_bad_tokens(response):
    verifier = GoogleTokenVerifier(client_id="client-123", session=FakeSession(response))
    with pytest.raises(FederatedTokenError):
        verifier.verify("id-token")


def test_google_verifier_skips_audience_check_without_client_id():
    claims = dict(GOOD_CLAIMS, aud="any-app")
    verifier = GoogleTokenVerifier(session=FakeSession(FakeResponse(200, claims)))
    assert verifier.verify("id-token").subject == "1098765"


def test_google_verifier_maps_network_errors():
    session = FakeSession(error=requests.ConnectionError("down"))
    verifier = GoogleTokenVerifier(session=session)
    with pytest.raises(FederatedTokenError):
        verifier.verify("id-token")
