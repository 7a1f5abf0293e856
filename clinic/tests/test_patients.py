from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import Appointment, Profile, Vaccination
from clinic.services import vaccinations
from clinic.tests.utils import client_for, create_user

pytestmark = pytest.mark.django_db


def give_doses(patient, count, appointment=None):
    for dose in range(1, count + 1):
        Vaccination.objects.create(patient=patient, dose_number=dose, status="completed",
                                   administered_at=timezone.now(), appointment=appointment)


def test_patients_split_by_progress(admin_client, patient, vaccine):
    give_doses(patient, 2)
    done = create_user("zoe@example.com", full_name="Zoe Bautista", phone="+639170000003")
    give_doses(done, 3)
    create_user("nobody@example.com", full_name="No Doses")

    r = admin_client.get(reverse("list_patients"))
    assert r.status_code == 200
    assert [p["name"] for p in r.data["inProgress"]] == ["Juan Dela Cruz"]
    assert r.data["inProgress"][0]["maxDose"] == 2
    assert r.data["inProgress"][0]["progress"] == "In Progress"
    assert [d["doseNumber"] for d in r.data["inProgress"][0]["doses"]] == [1, 2]
    assert r.data["fully"][0]["name"] == "Zoe Bautista"
    assert r.data["fully"][0]["progress"] == "Fully Vaccinated"
    assert r.data["fully"][0]["contact"] == "+639170000003"
    assert [i["name"] for i in r.data["availableItems"]] == ["Verorab 0.5ml"]


def test_contact_prefers_latest_appointment(admin_client, patient):
    give_doses(patient, 1)
    Appointment.objects.create(user=patient, full_name="Juan", contact_number="+639179999999")
    r = admin_client.get(reverse("list_patients"))
    assert r.data["inProgress"][0]["contact"] == "+639179999999"


def test_record_next_dose(admin_client, admin_user, patient, vaccine):
    appt = Appointment.objects.create(user=patient, full_name="Juan", contact_number="1", status="settled")
    give_doses(patient, 1, appointment=appt)

    r = admin_client.post(reverse("patient_record_vaccination", args=[patient.id]),
                          {"itemId": str(vaccine.id)}, format="json")
    assert r.status_code == 201
    assert r.data["data"]["doseNumber"] == 2
    assert r.data["data"]["appointmentId"] == str(appt.id)
    v = Vaccination.objects.get(patient=patient, dose_number=2)
    assert v.admin_user == admin_user
    vaccine.refresh_from_db()
    assert vaccine.stock == Decimal("9.00")


def test_record_next_dose_stops_at_three(admin_client, patient, vaccine):
    give_doses(patient, 3)
    r = admin_client.post(reverse("patient_record_vaccination", args=[patient.id]),
                          {"itemId": str(vaccine.id)}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "Patient already has all 3 doses"


def test_record_dose_for_unknown_patient(admin_client, vaccine):
    r = admin_client.post(reverse("patient_record_vaccination", args=[99999]),
                          {"itemId": str(vaccine.id)}, format="json")
    assert r.status_code == 404


def test_insert_doses_skips_past_third(admin_client, patient, vaccine):
    r = admin_client.post(reverse("patient_insert_doses", args=[patient.id]), {
        "itemId": str(vaccine.id), "startDose": 2, "numDoses": 3,
    }, format="json")
    assert r.status_code == 201
    assert [d["doseNumber"] for d in r.data["data"]] == [2, 3]
    vaccine.refresh_from_db()
    assert vaccine.stock == Decimal("8.00")


def test_insert_doses_validates_range(admin_client, patient, vaccine):
    r = admin_client.post(reverse("patient_insert_doses", args=[patient.id]), {
        "itemId": str(vaccine.id), "startDose": 4, "numDoses": 1,
    }, format="json")
    assert r.status_code == 400
    assert "startDose" in r.data["fields"]


def test_patient_sms(admin_client, patient, sms_outbox):
    r = admin_client.post(reverse("patient_sms", args=[patient.id]), {"message": "  "}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "Message cannot be empty"

    r = admin_client.post(reverse("patient_sms", args=[patient.id]),
                          {"message": "Your second dose is due on Monday."}, format="json")
    assert r.status_code == 200
    assert sms_outbox[0]["data"]["To"] == "+639171234567"
    assert sms_outbox[0]["data"]["Body"] == "Your second dose is due on Monday."


def test_patient_sms_respects_opt_out(admin_client, patient, sms_outbox):
    Profile.objects.filter(user=patient).update(sms_opt_out=True)
    r = admin_client.post(reverse("patient_sms", args=[patient.id]), {"message": "Reminder"}, format="json")
    assert r.status_code == 409
    assert sms_outbox == []


def test_patient_sms_without_contact(admin_client, sms_outbox):
    nobody = create_user("quiet@example.com")
    r = admin_client.post(reverse("patient_sms", args=[nobody.id]), {"message": "Hello"}, format="json")
    assert r.status_code == 400
    assert r.data["error"] == "No contact number on file for this patient"
    assert sms_outbox == []


def test_vaccination_card_groups_by_appointment(patient, patient_client):
    appt = Appointment.objects.create(user=patient, full_name="Juan Dela Cruz", contact_number="1")
    give_doses(patient, 2, appointment=appt)
    loose = Vaccination.objects.create(patient=patient, dose_number=3, status="completed",
                                       administered_at=timezone.now())

    r = patient_client.get(reverse("vaccination_card"))
    assert r.status_code == 200
    assert r.data["maxDose"] == 3
    cards = {c["key"]: c for c in r.data["data"]}
    assert cards[str(appt.id)]["label"] == "juan_dela_cruz"
    assert cards[str(appt.id)]["maxDose"] == 2
    assert cards[str(loose.id)]["label"] == "vaccination-card"
    assert cards[str(loose.id)]["appointmentId"] is None


def test_vaccination_card_is_per_patient(patient, admin_user):
    give_doses(patient, 1)
    other = create_user("other@example.com")
    r = client_for(other).get(reverse("vaccination_card"))
    assert r.data["data"] == []
    assert client_for(admin_user).get(reverse("vaccination_card")).status_code == 403


def test_card_label():
    assert vaccinations.card_label("Ana Marie O'Neil") == "ana_marie_o_neil"
    assert vaccinations.card_label(None) == "vaccination-card"
    assert vaccinations.card_label("Juan _ Dela Cruz") == "juan_dela_cruz"
    assert vaccinations.card_label("__x__") == "_x_"

