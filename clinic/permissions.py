"""
Role based permission classes.

The clinic has two areas: the admin area (triage, inventory, patients)
and the patient area.  ``provider`` accounts share the patient area.
"""
from rest_framework.permissions import BasePermission

ADMIN_ROLES = {"admin"}


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in ADMIN_ROLES)


class IsAdminRole(BasePermission):
    """Allow access only to clinic administrators."""
    message = "Admin access required"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_admin(getattr(request, "user", None))


class IsPatientRole(BasePermission):
    """Allow any signed-in non-admin user (patients and providers)."""
    message = "Patient access required"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and not is_admin(user))
