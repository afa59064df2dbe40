import pytest

from culturepass_api.app.core.errors import NotFoundError
from culturepass_api.app.schemas.venue import VenueCreate
from culturepass_api.app.services.venue_service import MapService, VenueService

from helpers import event_json, run

VENUE = {
    "name": "Sydney Town Hall",
    "address": "483 George St, Sydney",
    "state": "NSW",
    "city": "Sydney",
    "lat": -33.8732,
    "lng": 151.2061,
}


def _venue(**overrides):
    return run(VenueService.create_venue(VenueCreate(**{**VENUE, **overrides})))


def test_created_venue_gets_cpid():
    venue = _venue(amenities=["Parking", "Wheelchair access"], capacity=2000)
    assert venue.cpid.startswith("CP-V-")
    fetched = run(VenueService.get_venue(venue.id))
    assert fetched.amenities == ["Parking", "Wheelchair access"]
    assert fetched.capacity == 2000
    assert fetched.approved is True


def test_listing_only_shows_approved_venues_by_name():
    _venue(name="zeta Hall")
    _venue(name="Alpha Theatre")
    _venue(name="Closed Hall", approved=False)
    assert [v.name for v in run(VenueService.list_venues())] == ["Alpha Theatre", "zeta Hall"]


def test_update_venue():
    venue = _venue()
    updated = run(VenueService.update_venue(venue.id, {"phone": "02 9265 9189", "approved": False}))
    assert updated.phone == "02 9265 9189"
    assert updated.approved is False
    assert updated.cpid == venue.cpid
    with pytest.raises(NotFoundError):
        run(VenueService.update_venue("missing", {"phone": "x"}))


def test_events_at_unknown_venue_is_not_found():
    with pytest.raises(NotFoundError):
        run(VenueService.list_events("missing"))


def test_map_data(make_event, make_business):
    venue = _venue()
    make_event(title="On the map", venue_id=venue.id, lat=venue.lat, lng=venue.lng)
    make_event(title="No coordinates")
    business = make_business(lat=-37.81, lng=144.96)

    data = run(MapService.map_data())
    assert [e.title for e in data.events] == ["On the map"]
    assert [v.id for v in data.venues] == [venue.id]
    assert [b.id for b in data.businesses] == [business.id]


# -- API -------------------------------------------------------------------

def test_venue_management_requires_admin(user_client):
    assert user_client.post("/api/venues", json=VENUE).status_code == 403


def test_admin_creates_venue_and_lists_its_events(admin_client, client):
    created = admin_client.post("/api/venues", json={**VENUE, "socialLinks": {"instagram": "@sydneytownhall"}})
    assert created.status_code == 201
    venue = created.json()
    assert venue["cpid"].startswith("CP-V-")
    assert venue["socialLinks"]["instagram"] == "@sydneytownhall"

    admin_client.post("/api/events", json=event_json(venueId=venue["id"], lat=venue["lat"], lng=venue["lng"]))

    assert [v["id"] for v in client.get("/api/venues").json()] == [venue["id"]]
    assert client.get(f"/api/venues/{venue['id']}").json()["name"] == "Sydney Town Hall"
    events = client.get(f"/api/venues/{venue['id']}/events").json()
    assert [e["venueId"] for e in events] == [venue["id"]]

    renamed = admin_client.put(f"/api/venues/{venue['id']}", json={"name": "Town Hall"})
    assert renamed.json()["name"] == "Town Hall"

    map_data = client.get("/api/map/data").json()
    assert set(map_data) == {"events", "venues", "businesses"}
    assert len(map_data["events"]) == 1
    assert map_data["venues"][0]["name"] == "Town Hall"


def test_unknown_venue_is_not_found(client):
    assert client.get("/api/venues/missing").status_code == 404
    assert client.get("/api/venues/missing/events").status_code == 404


def test_venue_coordinates_are_validated(admin_client):
    response = admin_client.post("/api/venues", json={**VENUE, "lat": 120})
    assert response.status_code == 400
