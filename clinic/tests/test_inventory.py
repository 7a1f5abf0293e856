from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import AuditEvent, InventoryItem
from clinic.services import inventory

pytestmark = pytest.mark.django_db


def test_create_item_rounds_and_clamps_stock(admin_client):
    r = admin_client.post(reverse("inventory_items"), {"name": "  Verorab  ", "stock": "12.345"}, format="json")
    assert r.status_code == 201
    assert r.data["data"]["name"] == "Verorab"
    assert r.data["data"]["stock"] == 12.35
    assert r.data["data"]["lowStockThreshold"] == 10
    assert AuditEvent.objects.filter(action="inventory_create").exists()

    r = admin_client.post(reverse("inventory_items"), {"name": "Speeda", "stock": "-4"}, format="json")
    assert r.data["data"]["stock"] == 0.0


def test_create_item_requires_name(admin_client):
    r = admin_client.post(reverse("inventory_items"), {"name": "", "stock": 3}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "Name is required"


def test_list_flags_low_stock(admin_client):
    InventoryItem.objects.create(name="Low", stock=Decimal("3"), low_stock_threshold=5)
    InventoryItem.objects.create(name="Edge", stock=Decimal("5"), low_stock_threshold=5)
    InventoryItem.objects.create(name="Plenty", stock=Decimal("50"), low_stock_threshold=5)
    r = admin_client.get(reverse("inventory_items"))
    assert r.status_code == 200
    assert [i["name"] for i in r.data["data"]] == ["Edge", "Low", "Plenty"]
    assert r.data["lowStockCount"] == 2
    assert [i["lowStock"] for i in r.data["data"]] == [True, True, False]


def test_patch_updates_only_given_fields(admin_client):
    item = InventoryItem.objects.create(name="Verorab", stock=Decimal("8"), low_stock_threshold=4)
    r = admin_client.patch(reverse("inventory_item_detail", args=[item.id]), {"stock": 20}, format="json")
    assert r.status_code == 200
    item.refresh_from_db()
    assert item.stock == Decimal("20.00")
    assert item.low_stock_threshold == 4
    assert item.name == "Verorab"


def test_delete_item(admin_client):
    item = InventoryItem.objects.create(name="Old stock", stock=1)
    r = admin_client.delete(reverse("inventory_item_detail", args=[item.id]))
    assert r.status_code == 200
    assert not InventoryItem.objects.filter(id=item.id).exists()
    r = admin_client.patch(reverse("inventory_item_detail", args=[item.id]), {"stock": 2}, format="json")
    assert r.status_code == 404
    assert r.data["error"] == "Inventory item not found"


def test_alerts_cover_low_stock_and_expiry(admin_client):
    today = timezone.localdate()
    InventoryItem.objects.create(name="Expired", stock=40, expiration_date=today - timedelta(days=1))
    InventoryItem.objects.create(name="Soon", stock=40, expiration_date=today + timedelta(days=10))
    InventoryItem.objects.create(name="Later", stock=40, expiration_date=today + timedelta(days=200))
    InventoryItem.objects.create(name="Low", stock=1)

    r = admin_client.get(reverse("inventory_alerts"))
    assert [i["name"] for i in r.data["data"]["lowStock"]] == ["Low"]
    expiring = {i["name"]: i for i in r.data["data"]["expiring"]}
    assert set(expiring) == {"Expired", "Soon"}
    assert expiring["Expired"]["expired"] is True
    assert expiring["Soon"]["expiringSoon"] is True


def test_inventory_is_admin_only(patient_client):
    assert patient_client.get(reverse("inventory_items")).status_code == 403


def test_normalize_stock():
    assert inventory.normalize_stock("1.005") == Decimal("1.01")
    assert inventory.normalize_stock(None) == Decimal("0")
    assert inventory.normalize_stock(-2) == Decimal("0")


def test_failed_audit_write_is_logged_not_raised(admin_client, monkeypatch):
    warnings = []

    def broken(**kwargs):
        raise RuntimeError("audit table locked")

    monkeypatch.setattr("clinic.services.audit.log_action", broken)
    monkeypatch.setattr("clinic.services.audit.logger.warning", lambda msg, *args, **kw: warnings.append(msg % args))
    r = admin_client.post(reverse("inventory_items"), {"name": "Verorab"}, format="json")
    assert r.status_code == 201
    assert InventoryItem.objects.filter(name="Verorab").exists()
    assert warnings == ["audit write failed for inventory_create"]
