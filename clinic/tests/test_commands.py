import pytest
from django.core.management import call_command

from clinic.models import Appointment, Profile, User, Vaccination
from clinic.serializers.appointments import CATEGORY_CHOICES, CIVIL_STATUS_CHOICES, SEX_CHOICES

pytestmark = pytest.mark.django_db


def test_populate_data_uses_form_choices():
    call_command("populate_data", "--patients", "5", "--seed", "7")

    assert User.objects.filter(role=User.ROLE_PATIENT).count() == 5
    assert Appointment.objects.count() == 5
    for profile in Profile.objects.filter(user__role=User.ROLE_PATIENT):
        assert profile.sex in SEX_CHOICES
    for appt in Appointment.objects.all():
        assert appt.sex in SEX_CHOICES
        assert appt.civil_status in CIVIL_STATUS_CHOICES
        assert appt.category in CATEGORY_CHOICES
    assert not Vaccination.objects.exclude(appointment__status=Appointment.STATUS_SETTLED).exists()


def test_populate_data_is_repeatable():
    call_command("populate_data", "--patients", "3", "--seed", "1")
    call_command("populate_data", "--patients", "3", "--seed", "1")
    assert User.objects.filter(role=User.ROLE_PATIENT).count() == 3
