import time

import pytest
from django.urls import reverse

from clinic.models import Message, Notification
from clinic.services import presence
from clinic.tests.utils import client_for, create_user

pytestmark = pytest.mark.django_db


def send(client, recipient, content):
    return client.post(reverse("message_send"), {"recipientId": recipient.id, "content": content}, format="json")


def test_patient_writes_to_admin(patient_client, patient, admin_user):
    r = send(patient_client, admin_user, "Good day, is the clinic open on Sunday?")
    assert r.status_code == 201
    assert r.data["data"]["senderId"] == patient.id
    assert r.data["data"]["readAt"] is None

    note = Notification.objects.get(user=admin_user)
    assert note.type == Notification.TYPE_MESSAGE
    assert note.payload["from"] == str(patient.id)
    assert note.payload["full_name"] == "Juan Dela Cruz"


def test_patients_cannot_message_each_other(patient_client):
    other = create_user("ana@example.com", full_name="Ana")
    r = send(patient_client, other, "hi")
    assert r.status_code == 403
    assert r.data["error"] == "Patients can only message clinic staff"
    assert Message.objects.count() == 0


def test_admin_can_message_patient(admin_client, patient):
    r = send(admin_client, patient, "Your next dose is on Friday.")
    assert r.status_code == 201


def test_content_rules(patient_client, patient, admin_user):
    assert send(patient_client, admin_user, "   ").data["error"] == "Message cannot be empty"
    assert send(patient_client, admin_user, "x" * 2001).status_code == 400

    r = send(patient_client, admin_user, '<img src=x onerror="alert(1)">hello')
    assert r.status_code == 201
    assert r.data["data"]["content"] == "hello"

    r = send(patient_client, patient, "note to self")
    assert r.status_code == 404
    assert r.data["error"] == "Conversation partner not found"


def test_thread_is_ordered_and_marks_read(patient_client, admin_client, patient, admin_user):
    send(patient_client, admin_user, "first")
    send(admin_client, patient, "second")
    send(patient_client, admin_user, "third")

    r = admin_client.get(reverse("message_thread"), {"peer": patient.id})
    assert r.status_code == 200
    assert [m["content"] for m in r.data["data"]] == ["first", "second", "third"]
    assert Message.objects.filter(recipient=admin_user, read_at__isnull=True).count() == 0
    # The admin's own message stays unread for the patient
    assert Message.objects.filter(recipient=patient, read_at__isnull=True).count() == 1


def test_mark_read_endpoint(patient_client, admin_client, patient, admin_user):
    send(admin_client, patient, "one")
    send(admin_client, patient, "two")
    r = patient_client.post(reverse("message_read"), {"peer": admin_user.id}, format="json")
    assert r.data["updated"] == 2
    r = patient_client.post(reverse("message_read"), {"peer": admin_user.id}, format="json")
    assert r.data["updated"] == 0


def test_patient_contacts_are_admins(patient_client, admin_client, patient, admin_user):
    second_admin = create_user("nurse@wecare.test", role="admin", full_name="Aaron Nurse")
    send(admin_client, patient, "hello")
    presence.mark_online(admin_user.id, "tab-1")

    r = patient_client.get(reverse("message_contacts"))
    contacts = r.data["data"]
    assert [c["name"] for c in contacts] == ["Aaron Nurse", "Clinic Admin"]
    by_id = {c["id"]: c for c in contacts}
    assert by_id[admin_user.id]["unread"] == 1
    assert by_id[admin_user.id]["online"] is True
    assert by_id[second_admin.id]["online"] is False


def test_admin_contacts_come_from_recent_messages(admin_client, admin_user, patient):
    quiet = create_user("quiet@example.com", full_name="Quiet Patient")
    chatty = create_user("chatty@example.com", full_name="Chatty Patient")
    send(client_for(patient), admin_user, "older")
    send(client_for(chatty), admin_user, "newer")

    r = admin_client.get(reverse("message_contacts"))
    ids = [c["id"] for c in r.data["data"]]
    assert ids == [chatty.id, patient.id]
    assert quiet.id not in ids


@pytest.fixture
def clock(monkeypatch, settings):
    settings.PRESENCE_TTL_SECONDS = 300
    now = [1_800_000_000.0]
    monkeypatch.setattr(time, "time", lambda: now[0])
    return now


def test_presence_tracks_each_connection(patient, clock):
    presence.mark_online(patient.id, "tab-a")
    presence.mark_online(patient.id, "tab-b")
    presence.mark_offline(patient.id, "tab-a")
    assert presence.is_online(patient.id)
    presence.mark_offline(patient.id, "tab-b")
    assert not presence.is_online(patient.id)


def test_open_socket_stays_online_while_it_keeps_talking(patient, clock):
    presence.mark_online(patient.id, "tab-a")
    clock[0] += 200
    presence.touch(patient.id, "tab-a")
    clock[0] += 200
    assert presence.is_online(patient.id)

    # A second tab opening late must not be dropped when the first one closes
    presence.mark_online(patient.id, "tab-b")
    presence.mark_offline(patient.id, "tab-a")
    assert presence.is_online(patient.id)
    assert presence.online_map([patient.id]) == {patient.id: True}


def test_silent_connection_expires(patient, clock):
    presence.mark_online(patient.id, "tab-a")
    clock[0] += 301
    assert not presence.is_online(patient.id)
    presence.mark_offline(patient.id, "tab-a")
    assert not presence.is_online(patient.id)
