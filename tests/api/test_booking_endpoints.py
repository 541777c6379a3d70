# This file tests booking creation, role-scoped listing, updates, and deletion.
# It exists to validate price/provider snapshots and the asymmetric booking permissions.
# Sessions are switched by logging in as each party on the same client.

from __future__ import annotations

from tests.api.support import api_test_client, create_service, login, seed_admin, signup


def _book(client, service_id: str, **overrides: object):
    body = {"serviceId": service_id, "date": "2026-11-02", "time": "10:00", **overrides}
    return client.post("/api/v1/booking/create-booking", json=body)


def test_booking_copies_provider_and_price_from_service() -> None:
    with api_test_client() as client:
        provider = signup(client, name="Bea", email="bea@marketplace.io", role="provider")
        service = create_service(client, price=120)
        requester = signup(client, name="Ari", email="ari@marketplace.io")

        response = _book(client, service["id"], notes="Ring the bell")

    assert response.status_code == 201
    booking = response.json()["data"]
    assert booking["userId"] == requester["id"]
    assert booking["providerId"] == provider["id"]
    assert booking["user"]["email"] == "ari@marketplace.io"
    assert booking["provider"]["name"] == "Bea"
    assert booking["service"]["id"] == service["id"]
    assert booking["totalPrice"] == 120
    assert booking["status"] == "pending"
    assert booking["date"] == "2026-11-02"
    assert booking["notes"] == "Ring the bell"


def test_price_change_does_not_touch_existing_booking() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client, price=120)
        signup(client, email="ari@marketplace.io")
        booking = _book(client, service["id"]).json()["data"]

        login(client, email="bea@marketplace.io")
        update_body = {
            "title": service["title"],
            "description": service["description"],
            "category": service["category"],
            "price": 200,
            "duration": service["duration"],
            "availability": service["availability"],
        }
        client.put(f"/api/v1/service/update-service/{service['id']}", json=update_body)
        current = client.get(f"/api/v1/booking/get-booking/{booking['id']}").json()["data"]

    assert current["totalPrice"] == 120
    assert current["service"]["price"] == 200


def test_create_booking_validation_and_missing_service() -> None:
    with api_test_client() as client:
        signup(client, email="ari@marketplace.io")
        no_service = client.post("/api/v1/booking/create-booking", json={"date": "2026-11-02"})
        bad_id = _book(client, "xyz")
        no_date = client.post(
            "/api/v1/booking/create-booking",
            json={"serviceId": "a" * 32, "time": "10:00"},
        )
        bad_date = _book(client, "a" * 32, date="someday")
        missing = _book(client, "a" * 32)

    assert no_service.json()["message"] == "Service is required"
    assert bad_id.json()["message"] == "Invalid service ID"
    assert no_date.json()["message"] == "Date is required"
    assert bad_date.json()["message"] == "Invalid date format"
    assert missing.status_code == 404
    assert missing.json()["message"] == "Service not found"


def test_listing_is_scoped_by_role() -> None:
    with api_test_client() as client:
        provider_p = signup(client, email="p@marketplace.io", role="provider")
        service_p = create_service(client, title="P service")
        signup(client, email="q@marketplace.io", role="provider")
        service_q = create_service(client, title="Q service")

        signup(client, email="ari@marketplace.io")
        _book(client, service_p["id"])
        _book(client, service_q["id"])
        signup(client, email="bo@marketplace.io")
        _book(client, service_p["id"])

        bo_view = client.get("/api/v1/booking/get-bookings").json()
        login(client, email="p@marketplace.io")
        provider_view = client.get("/api/v1/booking/get-bookings").json()
        seed_admin(client)
        admin_view = client.get("/api/v1/booking/get-bookings").json()

    assert bo_view["count"] == 1
    assert provider_view["count"] == 2
    assert all(row["providerId"] == provider_p["id"] for row in provider_view["data"])
    assert admin_view["count"] == 3


def test_read_policy_limits_booking_to_its_parties() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        signup(client, email="ari@marketplace.io")
        booking = _book(client, service["id"]).json()["data"]

        signup(client, email="stranger@marketplace.io")
        stranger = client.get(f"/api/v1/booking/get-booking/{booking['id']}")
        login(client, email="bea@marketplace.io")
        provider = client.get(f"/api/v1/booking/get-booking/{booking['id']}")

    assert stranger.status_code == 403
    assert provider.status_code == 200


def test_only_provider_or_admin_changes_status() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        signup(client, email="ari@marketplace.io")
        booking = _book(client, service["id"]).json()["data"]
        url = f"/api/v1/booking/update-booking/{booking['id']}"

        by_requester = client.put(url, json={"status": "confirmed"})
        notes_by_requester = client.put(url, json={"notes": "Back door"})
        login(client, email="bea@marketplace.io")
        by_provider = client.put(url, json={"status": "confirmed"})

    assert by_requester.status_code == 403
    assert notes_by_requester.status_code == 200
    assert notes_by_requester.json()["data"]["notes"] == "Back door"
    assert by_provider.status_code == 200
    assert by_provider.json()["data"]["status"] == "confirmed"


def test_update_rejects_unknown_fields_and_statuses() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        booking = _book(client, service["id"]).json()["data"]
        url = f"/api/v1/booking/update-booking/{booking['id']}"

        price_change = client.put(url, json={"totalPrice": 1})
        bad_status = client.put(url, json={"status": "archived"})
        empty = client.put(url, json={})

    assert price_change.status_code == 400
    assert price_change.json()["message"] == "Field 'totalPrice' cannot be updated"
    assert bad_status.json()["message"] == "Invalid booking status: archived"
    assert empty.json()["message"] == "No updatable fields provided"


def test_provider_cannot_delete_but_requester_can() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        signup(client, email="ari@marketplace.io")
        booking = _book(client, service["id"]).json()["data"]
        url = f"/api/v1/booking/delete-booking/{booking['id']}"

        login(client, email="bea@marketplace.io")
        by_provider = client.delete(url)
        login(client, email="ari@marketplace.io")
        by_requester = client.delete(url)
        again = client.delete(url)

    assert by_provider.status_code == 403
    assert by_requester.status_code == 200
    assert again.status_code == 404


def test_booking_survives_service_deletion() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        signup(client, email="ari@marketplace.io")
        booking = _book(client, service["id"]).json()["data"]

        login(client, email="bea@marketplace.io")
        client.delete(f"/api/v1/service/delete-service/{service['id']}")
        login(client, email="ari@marketplace.io")
        response = client.get(f"/api/v1/booking/get-booking/{booking['id']}")

    assert response.status_code == 200
    assert response.json()["data"]["service"] is None
    assert response.json()["data"]["serviceId"] == service["id"]


def test_bookings_require_session() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/booking/get-bookings")

    assert response.status_code == 401


def test_overlong_booking_time_is_rejected_on_create_and_update() -> None:
    with api_test_client() as client:
        signup(client, email="bea@marketplace.io", role="provider")
        service = create_service(client)
        signup(client, email="ari@marketplace.io")
        rejected = _book(client, service["id"], time="between ten and eleven am")
        booking = _book(client, service["id"]).json()["data"]
        update = client.put(
            f"/api/v1/booking/update-booking/{booking['id']}",
            json={"time": "sometime after lunch please"},
        )

    assert rejected.status_code == 400
    assert rejected.json()["message"] == "Time cannot be more than 20 characters"
    assert update.status_code == 400
    assert update.json()["message"] == "Time cannot be more than 20 characters"
