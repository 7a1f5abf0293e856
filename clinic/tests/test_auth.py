"""
Integration tests for registration, login and password handling.

These cover the session payload handed to the front-end (legacy token,
JWT pair, role and home path) and the reset e-mail round trip.
"""
import re
from urllib.parse import parse_qs, urlparse

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinic.models import AuditEvent, Profile, User
from clinic.tests.utils import PASSWORD, create_user


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.patient = create_user("maria@example.com", full_name="Maria Santos")
        self.admin = create_user("admin@wecare.test", role=User.ROLE_ADMIN, full_name="Clinic Admin")

    def login(self, identifier, password=PASSWORD):
        return self.client.post(reverse("login_view"), {"email": identifier, "password": password}, format="json")

    def test_register_creates_patient_with_profile(self):
        r = self.client.post(reverse("register_view"), {
            "email": "Pedro@Example.com",
            "password": PASSWORD,
            "fullName": "Pedro Reyes",
            "contactNumber": "+639170000001",
            "sex": "Male",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data["role"], "patient")
        self.assertEqual(r.data["home"], "/dashboard/patient")
        self.assertTrue(r.data["token"])
        self.assertTrue(r.data["jwt_access"])
        user = User.objects.get(username="pedro@example.com")
        self.assertEqual(user.profile.full_name, "Pedro Reyes")
        self.assertEqual(user.profile.contact_number, "+639170000001")

    def test_register_rejects_duplicate_email(self):
        r = self.client.post(reverse("register_view"), {
            "email": "maria@example.com", "password": PASSWORD, "fullName": "Maria Again",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(r.data["ok"])

    def test_register_rejects_short_password(self):
        r = self.client.post(reverse("register_view"), {
            "email": "short@example.com", "password": "abc", "fullName": "Short Pass",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", r.data["fields"])
        self.assertFalse(User.objects.filter(username="short@example.com").exists())

    def test_login_returns_tokens_and_home(self):
        r = self.login("maria@example.com")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["home"], "/dashboard/patient")
        self.assertEqual(r.data["user"]["name"], "Maria Santos")
        self.assertTrue(AuditEvent.objects.filter(action="login", user=self.patient).exists())

        r = self.login("admin@wecare.test")
        self.assertEqual(r.data["role"], "admin")
        self.assertEqual(r.data["home"], "/dashboard/admin")

    def test_login_is_case_insensitive(self):
        r = self.login("MARIA@example.com")
        self.assertEqual(r.status_code, status.HTTP_200_OK)

    def test_login_with_wrong_password(self):
        r = self.login("maria@example.com", "not-the-password")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data, {"ok": False, "error": "Invalid email or password"})

    def test_role_in_login_body_is_ignored(self):
        r = self.client.post(reverse("login_view"), {
            "email": "maria@example.com", "password": PASSWORD, "role": "admin",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["role"], "patient")
        self.patient.refresh_from_db()
        self.assertEqual(self.patient.role, "patient")

    def test_me_accepts_token_and_bearer(self):
        session = self.login("maria@example.com").data

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {session['token']}")
        r = client.get(reverse("me_view"))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["profile"]["fullName"], "Maria Santos")

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {session['jwt_access']}")
        r = client.get(reverse("me_view"))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["user"]["id"], self.patient.id)

    def test_me_requires_authentication(self):
        r = self.client.get(reverse("me_view"))
        self.assertIn(r.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(r.data["ok"])

    def test_refresh_and_logout(self):
        session = self.login("maria@example.com").data
        r = self.client.post(reverse("jwt_refresh_view"), {"refresh": session["jwt_refresh"]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIn("jwt_access", r.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Token {session['token']}")
        r = self.client.post(reverse("jwt_logout_view"), {"refresh": session["jwt_refresh"]}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["blacklisted"], 1)

        # The legacy token is revoked on logout
        r = self.client.get(reverse("me_view"))
        self.assertIn(r.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class PasswordResetTests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.user = create_user("ana@example.com", full_name="Ana Cruz")

    def test_forgot_password_mails_link_and_reset_works(self):
        r = self.client.post(reverse("password_forgot_view"), {"email": "ana@example.com"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        link = re.search(r"https?://\S+", mail.outbox[0].body).group(0)
        self.assertIn("/auth/reset-password?", link)
        params = parse_qs(urlparse(link).query)

        r = self.client.post(reverse("password_reset_view"), {
            "uid": params["uid"][0], "token": params["token"][0], "password": "Fresh-Vaccine-77",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Fresh-Vaccine-77"))

    def test_forgot_password_does_not_reveal_unknown_email(self):
        r = self.client.post(reverse("password_forgot_view"), {"email": "ghost@example.com"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 0)

    def test_reset_with_bad_token(self):
        r = self.client.post(reverse("password_reset_view"), {
            "uid": "MQ", "token": "nope", "password": "Fresh-Vaccine-77",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Invalid or expired reset link")

    def test_change_password(self):
        self.client.force_authenticate(user=self.user)
        r = self.client.post(reverse("password_change_view"), {"password": "Another-Strong-88"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Another-Strong-88"))


class ProfileTests(APITestCase):
    def setUp(self) -> None:
        self.user = create_user("liza@example.com", full_name="Liza Flores", phone="+639170000009")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_update_profile_keeps_verified_phone(self):
        r = self.client.post(reverse("profile"), {
            "full_name": "Liza M. Flores", "address": "Purok 2", "phone": "+63000",
        }, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["data"]["fullName"], "Liza M. Flores")
        profile = Profile.objects.get(user=self.user)
        self.assertEqual(profile.phone, "+639170000009")
        self.assertEqual(profile.address, "Purok 2")

    def test_avatar_rejects_non_images(self):
        from django.core.files.uploadedfile import SimpleUploadedFile

        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        r = self.client.post(reverse("profile_avatar"), {"avatar": upload}, format="multipart")
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["error"], "Unsupported file type")
