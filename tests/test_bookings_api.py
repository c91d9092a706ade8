from bson import ObjectId

from conftest import headers_for, make_booking, make_package, make_user, run


def test_booking_price_is_computed_server_side(client, db, user_headers):
    package = make_package(db, base_price=5000.0, food_price=500.0, accommodation_price=1000.0)
    response = client.post("/api/bookings/", json={
        "package_id": str(package["_id"]),
        "selected_options": {"food": True, "accommodation": False},
        "total_price": 1,
    }, headers=user_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["total_price"] == 5500
    assert data["status"] == "accepted"
    assert data["current_status"] == "upcoming"
    assert data["package"]["to_location"] == "Goa"

    stored = run(db["bookings"].find_one({"_id": ObjectId(data["id"])}))
    assert stored["total_price"] == 5500
    assert stored["package_id"] == package["_id"]


def test_unpriced_add_on_has_no_effect(client, db, user_headers):
    package = make_package(db, base_price=800.0, food_price=0, accommodation_price=None)
    response = client.post("/api/bookings/", json={
        "package_id": str(package["_id"]),
        "selected_options": {"food": True, "accommodation": True},
    }, headers=user_headers)
    assert response.json()["data"]["total_price"] == 800


def test_booking_unknown_package(client, user_headers):
    response = client.post("/api/bookings/", json={"package_id": str(ObjectId())}, headers=user_headers)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Package not found"}


def test_booking_requires_authentication(client, db):
    package = make_package(db)
    response = client.post("/api/bookings/", json={"package_id": str(package["_id"])})
    assert response.status_code == 401


def test_user_bookings_are_self_scoped_and_filterable_by_phase(client, db, user, user_headers):
    other = make_user(db, name="Bob", email="bob@mail.com")
    past = make_package(db, days_from_now=-20, length_days=3)
    running = make_package(db, days_from_now=-1, length_days=4)
    future = make_package(db, days_from_now=15)
    for package in (past, running, future):
        make_booking(db, user, package)
    make_booking(db, other, future)

    response = client.get("/api/bookings/user", headers=user_headers)
    body = response.json()
    assert body["count"] == 3
    assert {b["user_id"] for b in body["data"]} == {str(user["_id"])}

    for phase, package in (("completed", past), ("active", running), ("upcoming", future)):
        response = client.get("/api/bookings/user", params={"status": phase}, headers=user_headers)
        data = response.json()["data"]
        assert [b["package_id"] for b in data] == [str(package["_id"])]
        assert data[0]["current_status"] == phase


def test_persisted_status_and_phase_are_independent(client, db, user, user_headers):
    past = make_package(db, days_from_now=-20, length_days=3)
    booking = make_booking(db, user, past, status="accepted")

    response = client.get(f"/api/bookings/{booking['_id']}", headers=user_headers)
    data = response.json()["data"]
    assert data["status"] == "accepted"
    assert data["current_status"] == "completed"


def test_get_booking_ownership(client, db, user, admin_headers):
    other = make_user(db, name="Bob", email="bob@mail.com")
    booking = make_booking(db, user, make_package(db))

    response = client.get(f"/api/bookings/{booking['_id']}", headers=headers_for(other))
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to access this booking"

    assert client.get(f"/api/bookings/{booking['_id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/bookings/{ObjectId()}", headers=admin_headers).status_code == 404


def test_admin_listing_includes_users_and_pagination(client, db, user, admin_headers):
    package = make_package(db)
    for _ in range(3):
        make_booking(db, user, package)

    response = client.get("/api/bookings/admin", params={"page": 1, "limit": 2}, headers=admin_headers)
    body = response.json()
    assert body["total"] == 3
    assert body["count"] == 2
    assert body["pagination"] == {"current": 1, "pages": 2}
    assert body["data"][0]["user"]["email"] == "alice@mail.com"
    assert body["data"][0]["package"]["from_location"] == "Delhi"


def test_admin_listing_forbidden_for_users(client, user_headers):
    assert client.get("/api/bookings/admin", headers=user_headers).status_code == 403


def test_update_status(client, db, user, admin_headers):
    booking = make_booking(db, user, make_package(db))
    response = client.patch(f"/api/bookings/{booking['_id']}/status", json={"status": "cancelled"},
                            headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"

    # Open transition table: an admin may restore a cancelled booking
    response = client.patch(f"/api/bookings/{booking['_id']}/status", json={"status": "accepted"},
                            headers=admin_headers)
    assert response.json()["data"]["status"] == "accepted"


def test_update_status_rejects_unknown_value(client, db, user, admin_headers):
    booking = make_booking(db, user, make_package(db))
    response = client.patch(f"/api/bookings/{booking['_id']}/status", json={"status": "refunded"},
                            headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status"


def test_update_status_with_strict_transitions(client, db, user, admin_headers, monkeypatch):
    monkeypatch.setattr("config.STRICT_BOOKING_TRANSITIONS", True)
    booking = make_booking(db, user, make_package(db), status="completed")
    response = client.patch(f"/api/bookings/{booking['_id']}/status", json={"status": "accepted"},
                            headers=admin_headers)
    assert response.status_code == 400
    assert run(db["bookings"].find_one({"_id": booking["_id"]}))["status"] == "completed"


def test_update_status_requires_admin(client, db, user, user_headers):
    booking = make_booking(db, user, make_package(db))
    response = client.patch(f"/api/bookings/{booking['_id']}/status", json={"status": "cancelled"},
                            headers=user_headers)
    assert response.status_code == 403


def test_booking_stats_by_package(client, db, user, admin_headers):
    package_a = make_package(db, from_location="Agra")
    package_b = make_package(db, from_location="Bhopal")
    make_booking(db, user, package_a, total_price=1000.0)
    make_booking(db, user, package_a, total_price=2000.0)
    make_booking(db, user, package_b, total_price=500.0)

    response = client.get("/api/bookings/stats/by-package", headers=admin_headers)
    data = response.json()["data"]
    assert [(row["package_id"], row["booking_count"], row["total_revenue"]) for row in data] == [
        (str(package_a["_id"]), 2, 3000.0),
        (str(package_b["_id"]), 1, 500.0),
    ]
    assert data[0]["package_name"] == "Agra"
    assert data[0]["route"] == {"from_location": "Agra", "to_location": "Goa"}


def test_booking_stats_cancelled_revenue_toggle(client, db, user, admin_headers):
    package = make_package(db)
    make_booking(db, user, package, total_price=1000.0)
    make_booking(db, user, package, total_price=400.0, status="cancelled")

    default = client.get("/api/bookings/stats/by-package", headers=admin_headers).json()["data"]
    assert (default[0]["booking_count"], default[0]["total_revenue"]) == (2, 1400.0)

    excluded = client.get("/api/bookings/stats/by-package", params={"include_cancelled": "false"},
                          headers=admin_headers).json()["data"]
    assert (excluded[0]["booking_count"], excluded[0]["total_revenue"]) == (1, 1000.0)


def test_booking_stats_skip_deleted_packages(client, db, user, admin_headers):
    package = make_package(db)
    make_booking(db, user, package)
    run(db["packages"].delete_one({"_id": package["_id"]}))

    response = client.get("/api/bookings/stats/by-package", headers=admin_headers)
    assert response.json() == {"success": True, "count": 0, "data": []}
