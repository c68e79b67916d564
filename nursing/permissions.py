"""
Role based permission classes for nurses.
"""
from rest_framework.permissions import BasePermission

from nursing.models import Nurse


class IsActiveNurse(BasePermission):
    """Authenticated nurse whose status is Active."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and isinstance(user, Nurse) and user.is_active)


class IsHeadNurse(BasePermission):
    """Head nurses (and superusers) manage other nurses' accounts."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        return bool(getattr(user, "is_superuser", False) or getattr(user, "role", None) == Nurse.ROLE_HEAD)
