"""
Access admin - test configuration and fixtures
"""
from datetime import datetime, timezone

import pytest

from access_admin import create_app
from access_admin.clock import FixedClock
from access_admin.config import TestConfig
from access_admin.errors import DispatchError
from access_admin.extensions import db
from access_admin.models import Application, User, UserRole
from access_admin.services.mailer import DeliveryResult
from access_admin.services.reminder_service import ReminderService

START = datetime(2024, 1, 31, 0, 0, tzinfo=timezone.utc)


class RecordingDispatcher:
    """Dispatcher fake that keeps every message and can be told to fail."""

    provider = "recording"

    def __init__(self):
        self.sent = []
        self.fail_all = False
        self.fail_for = set()

    def send(self, recipients, subject, html, text):
        if self.fail_all or self.fail_for.intersection(recipients):
            raise DispatchError("SMTP relay unavailable")
        self.sent.append({"to": list(recipients), "subject": subject, "html": html, "text": text})
        return DeliveryResult(delivered=True, provider=self.provider)


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def app(clock, dispatcher):
    app = create_app(TestConfig)
    app.extensions["clock"] = clock
    app.extensions["reminder_dispatcher"] = dispatcher
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app, dispatcher, clock):
    return ReminderService(session=db.session, dispatcher=dispatcher, clock=clock)


def _make_user(username, role, password="password123"):
    user = User(username=username, email=f"{username}@example.com", role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app):
    return _make_user("alice", UserRole.ADMIN.value)


@pytest.fixture
def readonly_user(app):
    return _make_user("bob", UserRole.READONLY.value)


@pytest.fixture
def make_application(app):
    def _make(name="Payroll", description=""):
        application = Application(name=name, description=description)
        db.session.add(application)
        db.session.commit()
        return application
    return _make


@pytest.fixture
def login(client):
    def _login(user, password="password123"):
        response = client.post(
            "/api/v1/auth/login", json={"username": user.username, "password": password}
        )
        assert response.status_code == 200, response.get_json()
        return response
    return _login


@pytest.fixture
def admin_client(client, admin_user, login):
    login(admin_user)
    return client


@pytest.fixture
def readonly_client(client, readonly_user, login):
    login(readonly_user)
    return client
