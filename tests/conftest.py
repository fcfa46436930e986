"""Shared test fixtures.

The environment is set before any project module is imported so that the
engine, settings and boto3 client are built against test values.
"""
import os
import tempfile
from datetime import date, timedelta

_DB_DIR = tempfile.mkdtemp(prefix="eyefem-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.sqlite3")
os.environ["ADMIN_TOKEN"] = "test-token"
os.environ["ADMIN_USER"] = "admin@eyefem.test"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"
os.environ["COOKIE_SECURE"] = "0"
os.environ["SMTP_HOST"] = ""
os.environ["S3_BUCKET"] = ""
os.environ["CALENDARIFIC_API_KEY"] = ""
os.environ["AWS_REGION"] = "ap-south-1"

import pytest

from db import Base, engine, SessionLocal
from admin_auth import ensure_bootstrap_admin
import app as app_module


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh tables (plus the bootstrap admin) for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        ensure_bootstrap_admin(db)
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def future_weekday():
    """A bookable day: a week ahead, moved off Sunday."""
    day = date.today() + timedelta(days=7)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


@pytest.fixture
def booking():
    def _create(day, **overrides):
        data = {
            "first_name": "Asha",
            "last_name": "Verma",
            "email": "asha@example.com",
            "phone": "9876543210",
            "date": day if isinstance(day, str) else day.isoformat(),
            "time": "10:00 AM",
            "reason": "Routine eye exam",
            "age": "34",
            "gender": "Female",
        }
        data.update(overrides)
        return data
    return _create
