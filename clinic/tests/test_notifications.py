import pytest
from django.urls import reverse

from clinic.models import Notification
from clinic.services import notifications
from clinic.tests.utils import create_user

pytestmark = pytest.mark.django_db


def test_list_and_mark_all_read(patient_client, patient, admin_user):
    for i in range(3):
        notifications.notify(patient, Notification.TYPE_APPOINTMENT, {"appointment_id": str(i), "status": "pending"})
    notifications.notify(admin_user, Notification.TYPE_MESSAGE, {"from": str(patient.id)})

    r = patient_client.get(reverse("notification_list"), {"pageSize": 2})
    assert r.status_code == 200
    assert len(r.data["data"]) == 2
    assert r.data["unread"] == 3
    assert r.data["pagination"] == {"total": 3, "page": 1, "pageSize": 2}
    assert r.data["data"][0]["payload"]["status"] == "pending"

    assert patient_client.get(reverse("notification_unread_count")).data["count"] == 3
    r = patient_client.post(reverse("notification_read_all"))
    assert r.data["updated"] == 3
    assert patient_client.get(reverse("notification_unread_count")).data["count"] == 0
    assert notifications.unread_count(admin_user) == 1


def test_notify_admins_skips_inactive(admin_user):
    retired = create_user("retired@wecare.test", role="admin")
    retired.is_active = False
    retired.save(update_fields=["is_active"])
    rows = notifications.notify_admins(Notification.TYPE_APPOINTMENT, {"status": "submitted"})
    assert [n.user_id for n in rows] == [admin_user.id]


def test_bad_pagination(patient_client):
    r = patient_client.get(reverse("notification_list"), {"page": "abc"})
    assert r.status_code == 400
    assert r.data["error"] == "Invalid pagination parameters"
