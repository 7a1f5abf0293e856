from decimal import Decimal

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone

from clinic.models import Appointment, InventoryItem, Vaccination
from clinic.services import dashboard
from clinic.tests.utils import create_user

pytestmark = pytest.mark.django_db


def give_doses(patient, count):
    for dose in range(1, count + 1):
        Vaccination.objects.create(patient=patient, dose_number=dose, status="completed",
                                   administered_at=timezone.now())


def test_summary_counts(admin_client, patient):
    Appointment.objects.create(user=patient, full_name="Juan", contact_number="1")
    InventoryItem.objects.create(name="Low", stock=Decimal("2"), low_stock_threshold=5)
    InventoryItem.objects.create(name="Plenty", stock=Decimal("80"))
    give_doses(patient, 1)
    give_doses(create_user("two@example.com"), 2)
    give_doses(create_user("three@example.com"), 3)
    give_doses(create_user("four@example.com"), 3)
    # Scheduled doses do not count towards progress
    Vaccination.objects.create(patient=patient, dose_number=2, status="scheduled")

    r = admin_client.get(reverse("admin_dashboard"))
    assert r.status_code == 200
    data = r.data["data"]
    assert data["appointmentsCount"] == 1
    assert data["inventoryCount"] == 2
    assert [i["name"] for i in data["lowStock"]] == ["Low"]
    assert data["inventoryChart"][1] == {"name": "Plenty", "stock": 80.0, "threshold": 10}
    assert data["doseDistribution"] == {"first": 1, "second": 1, "third": 2}
    assert data["fullyVaccinated"] == 2


def test_summary_is_cached_until_refresh(admin_client):
    InventoryItem.objects.create(name="A", stock=5)
    assert admin_client.get(reverse("admin_dashboard")).data["data"]["inventoryCount"] == 1

    InventoryItem.objects.create(name="B", stock=5)
    assert admin_client.get(reverse("admin_dashboard")).data["data"]["inventoryCount"] == 1
    assert admin_client.get(reverse("admin_dashboard") + "?refresh=1").data["data"]["inventoryCount"] == 2


def test_inventory_changes_invalidate_summary(admin_client):
    assert admin_client.get(reverse("admin_dashboard")).data["data"]["inventoryCount"] == 0
    admin_client.post(reverse("inventory_items"), {"name": "Verorab", "stock": 5}, format="json")
    assert admin_client.get(reverse("admin_dashboard")).data["data"]["inventoryCount"] == 1


def test_refresh_caches_command(admin_client):
    InventoryItem.objects.create(name="A", stock=5)
    call_command("refresh_caches")

    assert cache.get(dashboard.CACHE_KEY)["inventoryCount"] == 1


def test_dashboard_is_admin_only(patient_client):
    assert patient_client.get(reverse("admin_dashboard")).status_code == 403
