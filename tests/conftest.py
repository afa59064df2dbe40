import pytest
from fastapi.testclient import TestClient

from culturepass_api.app.core.config import settings
from culturepass_api.app.core.db import init_db
from culturepass_api.app.main import app
from culturepass_api.app.schemas.directory import ArtistCreate, BusinessCreate, OrganisationCreate
from culturepass_api.app.schemas.user import Role
from culturepass_api.app.services.directory_service import ArtistService, BusinessService, OrganisationService
from culturepass_api.app.services.event_service import EventService
from culturepass_api.app.services.federated import get_token_verifier
from culturepass_api.app.services.password_reset_service import get_reset_notifier
from culturepass_api.app.services.user_service import UserService

from helpers import StubNotifier, StubVerifier, event_data, register, run


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file for every test."""
    path = tmp_path / "culturepass-test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    monkeypatch.setattr(settings, "oversell_policy", "reject")
    init_db()
    return path


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_client(client):
    response = register(client, "priya", name="Priya Sharma", email="priya@example.com")
    assert response.status_code == 201
    return client


@pytest.fixture
def admin_client():
    with TestClient(app) as test_client:
        response = register(test_client, "admin")
        assert response.status_code == 201
        run(UserService.set_role(response.json()["id"], Role.ADMIN))
        yield test_client


@pytest.fixture
def make_event():
    def _make(**overrides):
        return run(EventService.create_event(event_data(**overrides)))

    return _make


@pytest.fixture
def make_organisation():
    def _make(submitted_by=None, **overrides):
        data = {
            "name": "Tamil Sangam Sydney",
            "description": "Community association",
            "city": "Sydney",
            "state": "NSW",
        }
        data.update(overrides)
        return run(OrganisationService.create(OrganisationCreate(**data), submitted_by=submitted_by))

    return _make


@pytest.fixture
def make_business():
    def _make(submitted_by=None, **overrides):
        data = {
            "name": "Spice Route Grocers",
            "description": "Indian and Sri Lankan groceries",
            "category": "Grocery",
            "city": "Melbourne",
            "state": "VIC",
        }
        data.update(overrides)
        return run(BusinessService.create(BusinessCreate(**data), submitted_by=submitted_by))

    return _make


@pytest.fixture
def make_artist():
    def _make(submitted_by=None, **overrides):
        data = {
            "name": "Anjali Rao",
            "genre": "Carnatic",
            "bio": "Vocalist",
            "city": "Brisbane",
            "state": "QLD",
        }
        data.update(overrides)
        return run(ArtistService.create(ArtistCreate(**data), submitted_by=submitted_by))

    return _make


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(username=None, password_hash=None, **profile):
        counter["n"] += 1
        return run(UserService.create_user(username or f"user{counter['n']}", password_hash, profile))

    return _make


@pytest.fixture
def stub_verifier():
    verifier = StubVerifier()
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    yield verifier
    app.dependency_overrides.pop(get_token_verifier, None)


@pytest.fixture
def stub_notifier():
    notifier = StubNotifier()
    app.dependency_overrides[get_reset_notifier] = lambda: notifier
    yield notifier
    app.dependency_overrides.pop(get_reset_notifier, None)
