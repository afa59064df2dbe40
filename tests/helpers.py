"""Plain helpers shared by the test modules."""

import asyncio
from datetime import date, timedelta

from culturepass_api.app.core.errors import FederatedTokenError
from culturepass_api.app.schemas.event import EventCreate
from culturepass_api.app.services.federated import FederatedIdentity

PASSWORD = "s3cret-pass"


def run(coro):
    """Run a service coroutine to completion."""
    return asyncio.run(coro)


def register(test_client, username, password=PASSWORD, **profile):
    payload = {"username": username, "password": password, **profile}
    return test_client.post("/api/auth/register", json=payload)


def event_data(**overrides):
    data = {
        "title": "Diwali Night Market",
        "description": "Food stalls, music and fireworks",
        "category": "Festival",
        "date": date.today() + timedelta(days=30),
        "time": "18:00",
        "end_time": "23:00",
        "venue": "Parramatta Park",
        "city": "Sydney",
        "state": "NSW",
        "tickets_available": 100,
    }
    data.update(overrides)
    return EventCreate(**data)


def event_json(**overrides):
    """Event body as the mobile client sends it (camelCase)."""
    data = {
        "title": "Bollywood Beats",
        "description": "Dance night",
        "category": "Dance",
        "date": (date.today() + timedelta(days=10)).isoformat(),
        "time": "20:00",
        "endTime": "23:30",
        "venue": "Metro Theatre",
        "city": "Sydney",
        "state": "NSW",
        "ticketsAvailable": 100,
    }
    data.update(overrides)
    return data


class StubVerifier:
    """Identity provider stand‑in: accepts any token except "bad" and
    uses the token itself as the subject id."""

    def __init__(self, email="kofi@example.com", name="Kofi Mensah", picture="https://img.example.com/kofi.png"):
        self.email = email
        self.name = name
        self.picture = picture

    def verify(self, token):
        if token == "bad":
            raise FederatedTokenError()
        return FederatedIdentity(
            provider="google", subject=token, name=self.name, email=self.email, picture=self.picture
        )


class StubNotifier:
    """Collects reset links instead of mailing them."""

    def __init__(self):
        self.sent = []

    def send(self, email, reset_url):
        self.sent.append((email, reset_url))

    @property
    def last_token(self):
        return self.sent[-1][1].split("token=", 1)[1]
