"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database and an in-memory stand-in for Redis; the
DB session and cache dependencies are overridden in ``conftest.client``.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from ridehail.domain.enums import TripStatus, UserRole
from ridehail.infrastructure.cache import cars_key
from ridehail.infrastructure.models import CarModel
from ridehail.services.trip_service import TripService

API = "/api/v1"


def _register_body(n: int, role: str = "passenger") -> dict:
    return {
        "name": f"User {n}",
        "email": f"user{n}@example.com",
        "phone": f"+1999000{n:04d}",
        "password": "password123",
        "role": role,
    }


def _trip_body(driver_id: int, **extra) -> dict:
    body = {
        "driver_id": driver_id,
        "start_address": "123 Main St",
        "end_address": "456 Elm St",
    }
    body.update(extra)
    return body


async def _set_status(session_factory, trip_id: int, status: TripStatus) -> None:
    """Stand-in for the driver-side flow that accepts / completes trips."""
    async with session_factory() as session:
        await TripService(session).advance_status(trip_id, status)
        await session.commit()


# ── Health & auth ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get(f"{API}/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_openapi_documents_error_bodies(client: AsyncClient):
    paths = (await client.get("/openapi.json")).json()["paths"]
    error_ref = "#/components/schemas/ErrorResponse"

    for path, method in [
        (f"{API}/cars", "get"),
        (f"{API}/trips/{{trip_id}}", "delete"),
        (f"{API}/reviews/{{driver_id}}", "post"),
    ]:
        responses = paths[path][method]["responses"]
        for code in ("401", "403", "404"):
            assert responses[code]["content"]["application/json"]["schema"]["$ref"] == error_ref

    for path in (f"{API}/trips", f"{API}/reviews/{{driver_id}}"):
        bad_driver = paths[path]["post"]["responses"]["400"]
        assert bad_driver["content"]["application/json"]["schema"]["$ref"] == error_ref


@pytest.mark.asyncio
async def test_register_returns_user_and_token(client: AsyncClient):
    resp = await client.post(f"{API}/register", json=_register_body(1, "driver"))
    assert resp.status_code == 201
    data = resp.json()
    assert data["user"]["role"] == "driver"
    assert data["user"]["email"] == "user1@example.com"
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]
    assert data["token"]


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_and_phone(client: AsyncClient):
    await client.post(f"{API}/register", json=_register_body(1))
    resp = await client.post(f"{API}/register", json=_register_body(1))
    assert resp.status_code == 422
    fields = {err["loc"][-1] for err in resp.json()["detail"]}
    assert fields == {"email", "phone"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"password": "short"},
        {"role": "admin"},
        {"email": "not-an-email"},
        {"name": ""},
    ],
)
async def test_register_validation(client: AsyncClient, override):
    body = {**_register_body(1), **override}
    resp = await client.post(f"{API}/register", json=body)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_login_and_logout(client: AsyncClient):
    await client.post(f"{API}/register", json=_register_body(1))

    bad = await client.post(
        f"{API}/login", json={"email": "user1@example.com", "password": "wrong-pass"}
    )
    assert bad.status_code == 401

    unknown = await client.post(
        f"{API}/login", json={"email": "ghost@example.com", "password": "password123"}
    )
    assert unknown.status_code == 401

    resp = await client.post(
        f"{API}/login", json={"email": "user1@example.com", "password": "password123"}
    )
    assert resp.status_code == 200
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    assert (await client.get(f"{API}/trips", headers=headers)).status_code == 200
    out = await client.post(f"{API}/logout", headers=headers)
    assert out.status_code == 200
    assert out.json()["message"] == "Logged out"
    assert (await client.get(f"{API}/trips", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_logout_only_revokes_current_token(client: AsyncClient):
    first = (await client.post(f"{API}/register", json=_register_body(1))).json()["token"]
    second = (
        await client.post(
            f"{API}/login", json={"email": "user1@example.com", "password": "password123"}
        )
    ).json()["token"]

    await client.post(f"{API}/logout", headers={"Authorization": f"Bearer {first}"})
    still_valid = await client.get(
        f"{API}/trips", headers={"Authorization": f"Bearer {second}"}
    )
    assert still_valid.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/trips"),
        ("post", "/trips"),
        ("get", "/trips/1"),
        ("patch", "/trips/1"),
        ("delete", "/trips/1"),
        ("get", "/cars"),
        ("post", "/cars"),
        ("delete", "/cars/1"),
        ("get", "/reviews/1"),
        ("post", "/reviews/1"),
        ("post", "/logout"),
    ],
)
async def test_protected_routes_require_token(client: AsyncClient, method, path):
    resp = await client.request(method.upper(), f"{API}{path}", json={})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_token_is_unauthenticated(client: AsyncClient):
    resp = await client.get(f"{API}/trips", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


# ── Trips ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_trip_lifecycle_scenario(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)

    created = await client.post(
        f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers
    )
    assert created.status_code == 201
    trip = created.json()
    assert trip["status"] == "pending"
    assert trip["passenger"] == {"id": passenger.id, "name": passenger.user.name}
    assert trip["driver"]["id"] == driver.id

    patched = await client.patch(
        f"{API}/trips/{trip['id']}",
        json={"start_address": "789 Oak St"},
        headers=passenger.headers,
    )
    assert patched.status_code == 200
    assert patched.json()["start_address"] == "789 Oak St"
    assert patched.json()["end_address"] == "456 Elm St"

    canceled = await client.delete(f"{API}/trips/{trip['id']}", headers=passenger.headers)
    assert canceled.status_code == 200
    assert canceled.json()["message"] == "Trip canceled"

    shown = await client.get(f"{API}/trips/{trip['id']}", headers=passenger.headers)
    assert shown.json()["status"] == "canceled"

    again = await client.patch(
        f"{API}/trips/{trip['id']}",
        json={"start_address": "Anywhere"},
        headers=passenger.headers,
    )
    assert again.status_code == 403

    cancel_again = await client.delete(f"{API}/trips/{trip['id']}", headers=passenger.headers)
    assert cancel_again.status_code == 403


@pytest.mark.asyncio
async def test_client_supplied_status_is_ignored(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    resp = await client.post(
        f"{API}/trips",
        json=_trip_body(driver.id, status="completed"),
        headers=passenger.headers,
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_invalid_driver_ids(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    other_passenger = await make_user(UserRole.PASSENGER)

    for driver_id in (other_passenger.id, passenger.id, 9999):
        resp = await client.post(
            f"{API}/trips", json=_trip_body(driver_id), headers=passenger.headers
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid driver ID"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"driver_id": 1, "start_address": "", "end_address": "B"},
        {"driver_id": 1, "end_address": "B"},
        {"start_address": "A", "end_address": "B"},
    ],
)
async def test_create_trip_validation(client: AsyncClient, make_user, body):
    passenger = await make_user(UserRole.PASSENGER)
    resp = await client.post(f"{API}/trips", json=body, headers=passenger.headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_needs_at_least_one_field(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()

    resp = await client.patch(f"{API}/trips/{trip['id']}", json={}, headers=passenger.headers)
    assert resp.status_code == 422

    resp = await client.patch(
        f"{API}/trips/{trip['id']}", json={"preferences": "No smoking"}, headers=passenger.headers
    )
    assert resp.status_code == 200
    assert resp.json()["preferences"] == "No smoking"


@pytest.mark.asyncio
async def test_trip_visibility(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    stranger = await make_user(UserRole.PASSENGER)
    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()

    assert (await client.get(f"{API}/trips/{trip['id']}", headers=passenger.headers)).status_code == 200
    assert (await client.get(f"{API}/trips/{trip['id']}", headers=driver.headers)).status_code == 200
    assert (await client.get(f"{API}/trips/{trip['id']}", headers=stranger.headers)).status_code == 403
    assert (await client.get(f"{API}/trips/9999", headers=passenger.headers)).status_code == 404


@pytest.mark.asyncio
async def test_driver_cannot_edit_or_cancel(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()

    patched = await client.patch(
        f"{API}/trips/{trip['id']}", json={"end_address": "X"}, headers=driver.headers
    )
    assert patched.status_code == 403
    assert (await client.delete(f"{API}/trips/{trip['id']}", headers=driver.headers)).status_code == 403


@pytest.mark.asyncio
async def test_accepted_trip_is_locked(client: AsyncClient, make_user, session_factory):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()
    await _set_status(session_factory, trip["id"], TripStatus.ACCEPTED)

    patched = await client.patch(
        f"{API}/trips/{trip['id']}", json={"end_address": "X"}, headers=passenger.headers
    )
    assert patched.status_code == 403
    assert (await client.delete(f"{API}/trips/{trip['id']}", headers=passenger.headers)).status_code == 403


@pytest.mark.asyncio
async def test_missing_trip_is_404(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    assert (
        await client.patch(f"{API}/trips/9999", json={"end_address": "X"}, headers=passenger.headers)
    ).status_code == 404
    assert (await client.delete(f"{API}/trips/9999", headers=passenger.headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_trips_filters(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    ids = []
    for _ in range(3):
        resp = await client.post(
            f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers
        )
        ids.append(resp.json()["id"])
    await client.delete(f"{API}/trips/{ids[0]}", headers=passenger.headers)

    everything = (await client.get(f"{API}/trips", headers=passenger.headers)).json()
    assert [t["id"] for t in everything["data"]] == ids
    assert everything["meta"] == {"current_page": 1, "per_page": 10, "total": 3, "last_page": 1}

    pending = (
        await client.get(f"{API}/trips", params={"status": "pending"}, headers=passenger.headers)
    ).json()
    assert [t["id"] for t in pending["data"]] == ids[1:]

    today = datetime.now(timezone.utc).date().isoformat()
    same_day = (
        await client.get(f"{API}/trips", params={"date": today}, headers=passenger.headers)
    ).json()
    assert same_day["meta"]["total"] == 3

    long_ago = (
        await client.get(f"{API}/trips", params={"date": "2001-01-01"}, headers=passenger.headers)
    ).json()
    assert long_ago["data"] == []

    # driver does not see trips addressed to them in this listing
    mine = (await client.get(f"{API}/trips", headers=driver.headers)).json()
    assert mine["meta"]["total"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"status": "flying"}, {"date": "yesterday"}, {"page": 0}])
async def test_list_trips_rejects_bad_filters(client: AsyncClient, make_user, params):
    passenger = await make_user(UserRole.PASSENGER)
    resp = await client.get(f"{API}/trips", params=params, headers=passenger.headers)
    assert resp.status_code == 422


# ── Cars ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_car_scenario(client: AsyncClient, make_user, cache, session_factory):
    owner = await make_user(UserRole.DRIVER)
    other_driver = await make_user(UserRole.DRIVER)

    created = await client.post(
        f"{API}/cars",
        json={"model": "Prius", "brand": "Toyota", "license_plate": "ABC123"},
        headers=owner.headers,
    )
    assert created.status_code == 201
    car = created.json()
    assert car["license_plate"] == "ABC123"

    listed = (await client.get(f"{API}/cars", headers=owner.headers)).json()
    assert [c["id"] for c in listed["data"]] == [car["id"]]
    assert await cache.get(cars_key(owner.id), 1) is not None

    # a row written behind the cache's back stays invisible until invalidation
    async with session_factory() as session:
        session.add(CarModel(user_id=owner.id, model="Corolla", brand="Toyota", license_plate="ZZZ999"))
        await session.commit()
    cached = (await client.get(f"{API}/cars", headers=owner.headers)).json()
    assert len(cached["data"]) == 1

    denied = await client.delete(f"{API}/cars/{car['id']}", headers=other_driver.headers)
    assert denied.status_code == 403

    deleted = await client.delete(f"{API}/cars/{car['id']}", headers=owner.headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Car deleted"
    assert await cache.get(cars_key(owner.id), 1) is None

    fresh = (await client.get(f"{API}/cars", headers=owner.headers)).json()
    assert [c["license_plate"] for c in fresh["data"]] == ["ZZZ999"]


@pytest.mark.asyncio
async def test_creating_a_car_invalidates_list(client: AsyncClient, make_user):
    owner = await make_user(UserRole.DRIVER)
    first = (await client.get(f"{API}/cars", headers=owner.headers)).json()
    assert first["data"] == []

    await client.post(
        f"{API}/cars",
        json={"model": "Model 3", "brand": "Tesla", "license_plate": "EV0042"},
        headers=owner.headers,
    )
    second = (await client.get(f"{API}/cars", headers=owner.headers)).json()
    assert [c["brand"] for c in second["data"]] == ["Tesla"]


@pytest.mark.asyncio
async def test_cars_are_driver_only(client: AsyncClient, make_user):
    passenger = await make_user(UserRole.PASSENGER)
    assert (await client.get(f"{API}/cars", headers=passenger.headers)).status_code == 403
    resp = await client.post(
        f"{API}/cars",
        json={"model": "Prius", "brand": "Toyota", "license_plate": "ABC123"},
        headers=passenger.headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_car_validation_and_missing(client: AsyncClient, make_user):
    owner = await make_user(UserRole.DRIVER)
    resp = await client.post(
        f"{API}/cars", json={"model": "Prius", "brand": "Toyota"}, headers=owner.headers
    )
    assert resp.status_code == 422
    assert (await client.delete(f"{API}/cars/9999", headers=owner.headers)).status_code == 404


# ── Reviews ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_review_scenario(client: AsyncClient, make_user, session_factory):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    body = {"rating": 5, "comment": "Great driver"}

    refused = await client.post(f"{API}/reviews/{driver.id}", json=body, headers=passenger.headers)
    assert refused.status_code == 403

    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()
    await _set_status(session_factory, trip["id"], TripStatus.COMPLETED)

    accepted = await client.post(f"{API}/reviews/{driver.id}", json=body, headers=passenger.headers)
    assert accepted.status_code == 201
    review = accepted.json()
    assert review["rating"] == 5
    assert review["driver"] == {"id": driver.id, "name": driver.user.name}
    assert review["passenger"]["id"] == passenger.id


@pytest.mark.asyncio
async def test_review_list_is_cached_and_invalidated(client: AsyncClient, make_user, session_factory):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    trip = (
        await client.post(f"{API}/trips", json=_trip_body(driver.id), headers=passenger.headers)
    ).json()
    await _set_status(session_factory, trip["id"], TripStatus.COMPLETED)

    empty = (await client.get(f"{API}/reviews/{driver.id}", headers=passenger.headers)).json()
    assert empty["data"] == []

    for rating in (4, 2):
        resp = await client.post(
            f"{API}/reviews/{driver.id}", json={"rating": rating}, headers=passenger.headers
        )
        assert resp.status_code == 201

    listed = (await client.get(f"{API}/reviews/{driver.id}", headers=driver.headers)).json()
    assert [r["rating"] for r in listed["data"]] == [4, 2]
    assert listed["data"][0]["comment"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6, "five"])
async def test_review_rating_bounds(client: AsyncClient, make_user, rating):
    passenger = await make_user(UserRole.PASSENGER)
    driver = await make_user(UserRole.DRIVER)
    resp = await client.post(
        f"{API}/reviews/{driver.id}", json={"rating": rating}, headers=passenger.headers
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_drivers_cannot_review(client: AsyncClient, make_user):
    driver = await make_user(UserRole.DRIVER)
    other = await make_user(UserRole.DRIVER)
    resp = await client.post(f"{API}/reviews/{other.id}", json={"rating": 5}, headers=driver.headers)
    assert resp.status_code == 403
