import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from auth.jwt_handler import create_access_token
from auth.password_handler import hash_password
from main import app


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db():
    return AsyncMongoMockClient()["travel-booking-test"]


@pytest.fixture
def client(db):
    # Not entered as a context manager, so the startup hook never opens a real connection.
    app.mongodb = db
    return TestClient(app)


def make_user(db, name="Alice", email="alice@mail.com", role="user", password="secret123"):
    doc = {
        "name": name,
        "email": email,
        "password": hash_password(password) if password else None,
        "role": role,
        "created_at": datetime.utcnow(),
    }
    if doc["password"] is None:
        del doc["password"]
    doc["_id"] = run(db["users"].insert_one(doc)).inserted_id
    return doc


def headers_for(user):
    token = create_access_token(str(user["_id"]), role=user["role"])
    return {"Authorization": f"Bearer {token}"}


def make_package(db, days_from_now=10, length_days=5, **fields):
    start = datetime.utcnow().replace(microsecond=0) + timedelta(days=days_from_now)
    doc = {
        "from_location": "Delhi",
        "to_location": "Goa",
        "start_date": start,
        "end_date": start + timedelta(days=length_days),
        "base_price": 5000.0,
        "included_services": {"food": True, "accommodation": True},
        "food_price": 500.0,
        "accommodation_price": 1000.0,
        "description": "Beach trip",
        "created_at": datetime.utcnow(),
    }
    doc.update(fields)
    doc["_id"] = run(db["packages"].insert_one(doc)).inserted_id
    return doc


def make_booking(db, user, package, total_price=5000.0, status="accepted", **fields):
    doc = {
        "user_id": user["_id"],
        "package_id": package["_id"],
        "selected_options": {"food": False, "accommodation": False},
        "total_price": total_price,
        "status": status,
        "booking_date": datetime.utcnow(),
    }
    doc.update(fields)
    doc["_id"] = run(db["bookings"].insert_one(doc)).inserted_id
    return doc


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, name="Admin", email="admin@mail.com", role="admin")


@pytest.fixture
def user_headers(user):
    return headers_for(user)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)
