"""Shared helpers for the clinic test-suite."""
import json

from rest_framework.test import APIClient

from clinic.models import Profile, User

PASSWORD = "Rabies-Clinic-2026"


def create_user(username, role=User.ROLE_PATIENT, password=PASSWORD, **profile):
    email = username if "@" in username else ""
    user = User.objects.create_user(username=username, email=email, password=password, role=role)
    Profile.objects.create(user=user, **profile)
    return user


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


class FakeResponse:
    """Just enough of ``requests.Response`` for the SMS providers."""

    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = json.dumps(payload)

    def json(self):
        return self._payload
