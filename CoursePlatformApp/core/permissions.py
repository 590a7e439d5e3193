"""Custom DRF permission classes built on the shared access helpers."""

from rest_framework.request import Request
from typing import Any

from rest_framework.permissions import BasePermission

from CoursePlatformApp.core.access import can_author_courses, is_admin


class IsAdminRole(BasePermission):
    """Allow access only to platform admins."""
    message = "Admin role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        return is_admin(request.user)


class IsCourseAuthor(BasePermission):
    """Allow creating courses to tutors and admins."""
    message = "Tutor or admin role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        return can_author_courses(request.user)
