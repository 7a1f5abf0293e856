# clinic/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from clinic.models import User
from clinic.services.accounts import ensure_profile

TEST_SET = [
    ("admin@wecare.test", "admin", "Clinic Admin"),
    ("patient@wecare.test", "patient", "Demo Patient"),
]


class Command(BaseCommand):
    help = "Ensure demo users exist with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="wecare123")

    def handle(self, *args, **opts):
        password = opts["password"]
        for email, role, full_name in TEST_SET:
            u, created = User.objects.get_or_create(
                username=email,
                defaults={"email": email, "role": role, "password": make_password(password), "is_active": True},
            )
            if not created:
                # Reset password, role and active flag
                u.password = make_password(password)
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            profile = ensure_profile(u)
            if not profile.full_name:
                profile.full_name = full_name
                profile.save(update_fields=["full_name", "updated_at"])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
