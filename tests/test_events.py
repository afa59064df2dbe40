from datetime import date

import pytest

from culturepass_api.app.core.config import settings
from culturepass_api.app.core.db import get_cursor
from culturepass_api.app.core.errors import CapacityBelowSoldError, NotFoundError, ValidationError
from culturepass_api.app.schemas.event import EventCategory
from culturepass_api.app.services.counter_service import CounterService
from culturepass_api.app.services.event_service import EventService

from helpers import run


def _titles(events):
    return [event.title for event in events]


def test_listing_hides_unpublished_events(make_event):
    make_event(title="Public")
    make_event(title="Draft", published=False)
    assert _titles(run(EventService.list_events())) == ["Public"]


def test_listing_is_ordered_by_date(make_event):
    make_event(title="Later", date=date(2026, 12, 1))
    make_event(title="Sooner", date=date(2026, 11, 1))
    assert _titles(run(EventService.list_events())) == ["Sooner", "Later"]


def test_filter_by_category_and_city(make_event):
    make_event(title="Sydney Music", category="Music", city="Sydney")
    make_event(title="Melbourne Music", category="Music", city="Melbourne")
    make_event(title="Sydney Food", category="Food", city="Sydney")

    assert _titles(run(EventService.list_events(category=EventCategory.MUSIC, city="Sydney"))) == ["Sydney Music"]
    assert len(run(EventService.list_events(category=EventCategory.MUSIC))) == 2


def test_featured_filter_only_applies_when_true(make_event):
    make_event(title="Headline", featured=True)
    make_event(title="Regular")
    assert _titles(run(EventService.list_events(featured=True))) == ["Headline"]
    assert len(run(EventService.list_events(featured=False))) == 2


def test_search_is_case_insensitive_title_substring(make_event):
    make_event(title="Holi Colour Run")
    make_event(title="Diwali Mela")
    assert _titles(run(EventService.list_events(search="COLOUR"))) == ["Holi Colour Run"]


def test_search_treats_wildcards_literally(make_event):
    make_event(title="50% off Comedy Night")
    make_event(title="Comedy Night")
    assert _titles(run(EventService.list_events(search="50%"))) == ["50% off Comedy Night"]
    assert run(EventService.list_events(search="_")) == []


def test_featured_and_trending_lists(make_event):
    make_event(title="Featured", featured=True)
    make_event(title="Trending", trending=True)
    make_event(title="Hidden Featured", featured=True, published=False)
    assert _titles(run(EventService.list_featured())) == ["Featured"]
    assert _titles(run(EventService.list_trending())) == ["Trending"]


def test_dates_and_by_date(make_event):
    make_event(title="A", date=date(2026, 11, 8))
    make_event(title="B", date=date(2026, 11, 8))
    make_event(title="C", date=date(2026, 11, 1))
    make_event(title="Draft", date=date(2026, 10, 1), published=False)

    assert run(EventService.list_dates()) == ["2026-11-01", "2026-11-08"]
    assert sorted(_titles(run(EventService.list_by_date("2026-11-08")))) == ["A", "B"]


def test_events_by_artist(make_event, make_artist):
    artist = make_artist()
    make_event(title="Concert", artist_id=artist.id)
    make_event(title="Other")
    assert _titles(run(EventService.list_by_artist(artist.id))) == ["Concert"]


def test_update_ignores_tickets_sold(make_event):
    event = make_event(tickets_sold=4)
    updated = run(EventService.update_event(event.id, {"title": "Renamed", "tickets_sold": 99}))
    assert updated.title == "Renamed"
    assert updated.tickets_sold == 4


def test_update_unknown_event_is_not_found():
    with pytest.raises(NotFoundError):
        run(EventService.update_event("missing", {"title": "x"}))


def test_delete_removes_event_and_its_orders(make_event, make_user):
    event = make_event()
    run(CounterService.record_order(make_user().id, event.id, 2, 50.0))
    run(EventService.delete_event(event.id))

    with pytest.raises(NotFoundError):
        run(EventService.get_event(event.id))
    with get_cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) FROM orders").fetchone()[0] == 0


def test_totals(make_event, make_user):
    event = make_event()
    make_event(title="Second")
    run(CounterService.record_order(make_user().id, event.id, 3, 75.0))
    assert run(EventService.totals()) == {"events": 2, "tickets_sold": 3}


def test_capacity_cannot_drop_below_tickets_sold(make_event, make_user):
    event = make_event(tickets_available=10)
    run(CounterService.record_order(make_user().id, event.id, 8, 200.0))

    with pytest.raises(CapacityBelowSoldError):
        run(EventService.update_event(event.id, {"tickets_available": 2, "title": "Renamed"}))

    unchanged = run(EventService.get_event(event.id))
    assert (unchanged.tickets_available, unchanged.tickets_sold, unchanged.title) == (10, 8, "Diwali Night Market")
    assert run(EventService.update_event(event.id, {"tickets_available": 8})).tickets_available == 8


def test_allow_policy_accepts_capacity_below_sold(monkeypatch, make_event, make_user):
    event = make_event(tickets_available=10)
    run(CounterService.record_order(make_user().id, event.id, 8, 200.0))
    monkeypatch.setattr(settings, "oversell_policy", "allow")
    assert run(EventService.update_event(event.id, {"tickets_available": 2})).tickets_available == 2


def test_event_cannot_be_created_oversold(make_event):
    with pytest.raises(ValidationError):
        make_event(tickets_available=5, tickets_sold=6)


def test_events_by_venue_and_mapped(make_event):
    make_event(title="Mapped", venue_id="venue-1", lat=-33.87, lng=151.21)
    make_event(title="Unmapped", venue_id="venue-2")
    make_event(title="Hidden", venue_id="venue-1", lat=-33.0, lng=151.0, published=False)

    assert _titles(run(EventService.list_by_venue("venue-1"))) == ["Mapped"]
    assert _titles(run(EventService.list_mapped())) == ["Mapped"]
