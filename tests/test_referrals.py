import re

from fastapi.testclient import TestClient

from culturepass_api.app.core.db import get_cursor
from culturepass_api.app.main import app
from culturepass_api.app.services.auth_service import AuthService
from culturepass_api.app.services.referral_service import ReferralService

from helpers import PASSWORD, StubVerifier, register, run

CODE = re.compile(r"^CP-[0-9A-Z]{6}$")


def test_registration_assigns_referral_code():
    account, _ = run(AuthService.register("priya", PASSWORD))
    assert CODE.match(account.referral_code)
    assert account.referred_by is None


def test_registering_with_a_code_links_the_referrer():
    referrer, _ = run(AuthService.register("priya", PASSWORD, {"name": "Priya Sharma"}))
    referred, _ = run(AuthService.register("kofi", PASSWORD, referral_code=referrer.referral_code.lower()))

    assert referred.referred_by == referrer.id
    summary = run(ReferralService.summary(referrer.id))
    assert summary.count == 1
    assert summary.referrals[0].referred_username == "kofi"
    assert summary.referrals[0].status == "completed"


def test_unknown_code_is_ignored_at_registration():
    account, _ = run(AuthService.register("kofi", PASSWORD, referral_code="CP-NOPE00"))
    assert account.referred_by is None
    with get_cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) FROM referrals").fetchone()[0] == 0


def test_member_is_referred_only_once():
    first, _ = run(AuthService.register("priya", PASSWORD))
    second, _ = run(AuthService.register("anjali", PASSWORD))
    referred, _ = run(AuthService.register("kofi", PASSWORD, referral_code=first.referral_code))

    run(ReferralService.record(second.id, referred.id, second.referral_code))

    assert run(ReferralService.summary(first.id)).count == 1
    assert run(ReferralService.summary(second.id)).count == 0


def test_ensure_code_is_stable_and_fills_federated_accounts():
    account, _ = run(AuthService.login_federated("sub-1", StubVerifier()))
    assert account.referral_code is None

    code = run(ReferralService.ensure_code(account.id))
    assert CODE.match(code)
    assert run(ReferralService.ensure_code(account.id)) == code


def test_validate_code():
    referrer, _ = run(AuthService.register("priya", PASSWORD, {"name": "Priya Sharma"}))
    valid = run(ReferralService.validate(f"  {referrer.referral_code} "))
    assert (valid.valid, valid.referrer_name) == (True, "Priya Sharma")
    invalid = run(ReferralService.validate("CP-NOPE00"))
    assert (invalid.valid, invalid.referrer_name) == (False, None)


# -- API -------------------------------------------------------------------

def test_referral_endpoints(client):
    referrer = register(client, "priya", name="Priya Sharma").json()
    code = referrer["referralCode"]

    with TestClient(app) as newcomer:
        assert newcomer.get(f"/api/referrals/validate/{code}").json() == {
            "valid": True,
            "referrerName": "Priya Sharma",
        }
        assert newcomer.get("/api/referrals/validate/CP-NOPE00").json()["valid"] is False

        referred = register(newcomer, "kofi", referralCode=code)
        assert referred.status_code == 201
        assert referred.json()["referredBy"] == referrer["id"]

    mine = client.get("/api/referrals/my").json()
    assert mine["count"] == 1
    assert mine["referrals"][0]["referredName"] == "kofi"

    assert client.post("/api/referrals/generate-code").json() == {"referralCode": code}


def test_referral_endpoints_require_session(client):
    assert client.get("/api/referrals/my").status_code == 401
    assert client.post("/api/referrals/generate-code").status_code == 401
