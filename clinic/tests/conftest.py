from decimal import Decimal

import pytest
from django.core.cache import cache

from clinic.models import InventoryItem, User
from clinic.tests.utils import FakeResponse, client_for, create_user


@pytest.fixture(autouse=True)
def _isolated_backends(settings):
    settings.CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}
    settings.CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return create_user("admin@wecare.test", role=User.ROLE_ADMIN, full_name="Clinic Admin")


@pytest.fixture
def patient(db):
    return create_user("juan@example.com", full_name="Juan Dela Cruz", contact_number="+639171234567")


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def patient_client(patient):
    return client_for(patient)


@pytest.fixture
def vaccine(db):
    return InventoryItem.objects.create(name="Verorab 0.5ml", stock=Decimal("10"), low_stock_threshold=3)


@pytest.fixture
def sms_outbox(settings, monkeypatch):
    """Twilio credentials plus a stubbed HTTP call; returns the sent requests."""
    settings.SMS_PROVIDER = "twilio"
    settings.TWILIO_ACCOUNT_SID = "AC0001"
    settings.TWILIO_AUTH_TOKEN = "secret"
    settings.TWILIO_FROM = "+15550001111"
    sent = []

    def fake_post(url, data=None, json=None, auth=None, timeout=None):
        sent.append({"url": url, "data": data, "json": json, "auth": auth})
        return FakeResponse({"sid": f"SM{len(sent):04d}", "status": "queued"}, 201)

    monkeypatch.setattr("clinic.services.sms.requests.post", fake_post)
    return sent
