from decimal import Decimal

import pytest
from django.core.cache import cache
from django.db import transaction
from django.urls import reverse

from clinic.models import Appointment, InventoryItem, Notification, Profile, SmsDispatch, Vaccination
from clinic.services import appointments, broadcast, dashboard, notifications

pytestmark = pytest.mark.django_db


@pytest.fixture
def appointment(patient):
    return Appointment.objects.create(
        user=patient, full_name="Juan Dela Cruz", contact_number="+639171234567", category="III", animal="dog",
    )


def test_queue_lists_only_open_appointments(admin_client, patient, appointment):
    Appointment.objects.create(user=patient, full_name="Done", contact_number="1", status="settled")
    Appointment.objects.create(user=patient, full_name="Gone", contact_number="1", status="cancelled")
    pending = Appointment.objects.create(user=patient, full_name="Waiting", contact_number="1", status="pending")

    r = admin_client.get(reverse("admin_appointments"))
    assert r.status_code == 200
    assert {a["id"] for a in r.data["data"]} == {str(appointment.id), str(pending.id)}
    assert r.data["pagination"]["total"] == 2


def test_patient_cannot_use_triage(patient_client, appointment):
    assert patient_client.get(reverse("admin_appointments")).status_code == 403
    r = patient_client.post(reverse("admin_appointment_settle", args=[appointment.id]), {}, format="json")
    assert r.status_code == 403
    assert r.data["error"] == "Admin access required"


def test_sms_moves_appointment_to_pending(admin_client, admin_user, patient, appointment, sms_outbox):
    r = admin_client.post(reverse("admin_appointment_sms", args=[appointment.id]), {}, format="json")
    assert r.status_code == 200
    assert r.data["status"] == "pending"

    assert len(sms_outbox) == 1
    assert sms_outbox[0]["data"]["To"] == "+639171234567"
    assert "Juan Dela Cruz" in sms_outbox[0]["data"]["Body"]
    assert sms_outbox[0]["auth"] == ("AC0001", "secret")

    appointment.refresh_from_db()
    assert appointment.status == "pending"
    assert appointment.processed_by == admin_user
    assert Notification.objects.filter(user=patient, payload__status="pending").exists()
    assert SmsDispatch.objects.get().provider_message_id == "SM0001"


def test_sms_with_custom_message(admin_client, appointment, sms_outbox):
    admin_client.post(reverse("admin_appointment_sms", args=[appointment.id]),
                      {"message": "Please come in tomorrow at 9am."}, format="json")
    assert sms_outbox[0]["data"]["Body"] == "Please come in tomorrow at 9am."


def test_failed_sms_leaves_status_alone(admin_client, appointment, settings):
    settings.SMS_PROVIDER = "twilio"
    settings.TWILIO_ACCOUNT_SID = ""
    r = admin_client.post(reverse("admin_appointment_sms", args=[appointment.id]), {}, format="json")
    assert r.status_code == 500
    assert r.data["error"] == "Twilio env vars missing"
    appointment.refresh_from_db()
    assert appointment.status == "submitted"
    assert SmsDispatch.objects.get().status == "failed"


def test_opted_out_patient_is_not_texted(admin_client, patient, appointment, sms_outbox):
    Profile.objects.filter(user=patient).update(sms_opt_out=True)
    r = admin_client.post(reverse("admin_appointment_sms", args=[appointment.id]), {}, format="json")
    assert r.status_code == 409
    assert r.data["error"] == "Patient has opted out of SMS"
    assert sms_outbox == []
    appointment.refresh_from_db()
    assert appointment.status == "submitted"


def test_settle_records_first_dose(admin_client, admin_user, patient, appointment, vaccine):
    r = admin_client.post(reverse("admin_appointment_settle", args=[appointment.id]),
                          {"itemId": str(vaccine.id)}, format="json")
    assert r.status_code == 200
    assert r.data["data"]["status"] == "settled"
    assert r.data["vaccination"]["doseNumber"] == 1

    appointment.refresh_from_db()
    assert appointment.status == "settled"
    assert appointment.settled_at is not None
    assert appointment.processed_by == admin_user

    v = Vaccination.objects.get(patient=patient)
    assert v.status == "completed"
    assert v.appointment == appointment
    assert v.admin_user == admin_user

    vaccine.refresh_from_db()
    assert vaccine.stock == Decimal("9.00")
    assert Notification.objects.filter(user=patient, type=Notification.TYPE_VACCINATION).exists()


def test_settle_with_multi_dose_vial(admin_client, appointment):
    vial = InventoryItem.objects.create(name="Abhayrab 2.5ml", stock=Decimal("2"), doses_per_vial=5)
    admin_client.post(reverse("admin_appointment_settle", args=[appointment.id]),
                      {"itemId": str(vial.id)}, format="json")
    vial.refresh_from_db()
    assert vial.stock == Decimal("1.80")


def test_settle_requires_usable_item(admin_client, appointment):
    r = admin_client.post(reverse("admin_appointment_settle", args=[appointment.id]), {}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "No vaccine items available in inventory."

    InventoryItem.objects.create(name="Empty", stock=0)
    InventoryItem.objects.create(name="Shelved", stock=5, status="inactive")
    r = admin_client.post(reverse("admin_appointment_settle", args=[appointment.id]), {}, format="json")
    assert r.data["error"] == "No vaccine items available in inventory."

    InventoryItem.objects.create(name="Speeda", stock=5)
    r = admin_client.post(reverse("admin_appointment_settle", args=[appointment.id]),
                          {"itemId": "not-a-uuid"}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "Invalid selection"
    appointment.refresh_from_db()
    assert appointment.status == "submitted"


def test_settled_appointment_cannot_be_settled_again(admin_client, appointment, vaccine):
    url = reverse("admin_appointment_settle", args=[appointment.id])
    assert admin_client.post(url, {"itemId": str(vaccine.id)}, format="json").status_code == 200
    r = admin_client.post(url, {"itemId": str(vaccine.id)}, format="json")
    assert r.status_code == 409
    assert Vaccination.objects.count() == 1


def test_vaccine_items_lists_usable_stock(admin_client, vaccine):
    InventoryItem.objects.create(name="Empty", stock=0)
    r = admin_client.get(reverse("vaccine_items"))
    assert [i["name"] for i in r.data["data"]] == ["Verorab 0.5ml"]


@pytest.fixture
def sent(monkeypatch):
    events = []
    monkeypatch.setattr(broadcast, "send", lambda group, event: events.append((group, event["type"])) or True)
    return events


def test_settle_side_effects_wait_for_commit(admin_user, patient, appointment, vaccine, sent,
                                             django_capture_on_commit_callbacks):
    cache.set(dashboard.CACHE_KEY, {"appointmentsCount": 0})
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        appointments.settle(admin_user, appointment.id, vaccine.id)
        assert sent == []
        assert cache.get(dashboard.CACHE_KEY) == {"appointmentsCount": 0}

    assert callbacks
    assert (broadcast.UPDATES_GROUP, "broadcast.refresh") in sent
    assert (broadcast.user_group(patient.id), "notification.unread") in sent
    assert cache.get(dashboard.CACHE_KEY) is None


def test_rolled_back_write_broadcasts_nothing(patient, appointment, sent, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                notifications.notify(patient, Notification.TYPE_APPOINTMENT, {"status": "pending"})
                appointments.set_status(appointment, Appointment.STATUS_PENDING)
                raise RuntimeError("insert failed")
    assert sent == []
    appointment.refresh_from_db()
    assert appointment.status == "submitted"
