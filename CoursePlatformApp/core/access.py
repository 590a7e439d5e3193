"""Role & object access helpers.

All authorization decisions for lifecycle events and content mutations live here,
keyed on the typed ``UserRole`` enum instead of ad hoc string comparisons.
"""

from CoursePlatformApp.core.choices import LifecycleEvent, UserRole
from CoursePlatformApp.core.exceptions import AuthorizationError
from CoursePlatformApp.courses.models import Course, Enrollment

# Events the course owner may trigger; every other event is admin-only.
OWNER_EVENTS = frozenset({LifecycleEvent.SUBMIT_FOR_REVIEW, LifecycleEvent.EDIT_AND_RESUBMIT})
ADMIN_EVENTS = frozenset({LifecycleEvent.PUBLISH, LifecycleEvent.REJECT, LifecycleEvent.ARCHIVE})


def role_of(user) -> UserRole | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    try:
        return UserRole(user.role)
    except ValueError:
        return None


def is_admin(user) -> bool:
    return role_of(user) == UserRole.ADMIN


def is_owner(user, course: Course | None) -> bool:
    return bool(user and course and course.creator_id == user.id)


def is_course_tutor(user, course: Course | None) -> bool:
    return bool(user and course and course.tutor_id is not None and course.tutor_id == user.id)


def is_enrolled(user, course: Course | None) -> bool:
    if not (user and course):
        return False
    return Enrollment.objects.filter(course=course, student=user).exists()


def can_author_courses(user) -> bool:
    return role_of(user) in (UserRole.TUTOR, UserRole.ADMIN)


def can_transition(actor, course: Course, event: LifecycleEvent | str) -> bool:
    """Return True if ``actor`` may fire ``event`` on ``course`` (state is not considered)."""
    event = LifecycleEvent(event)
    if event in ADMIN_EVENTS:
        return is_admin(actor)
    if event in OWNER_EVENTS:
        return is_owner(actor, course)
    return False


def can_manage_content(user, course: Course | None) -> bool:
    """Owner, tutor of record and admins may edit modules, materials and assignments."""
    return is_admin(user) or is_owner(user, course) or is_course_tutor(user, course)


def can_grade(user, course: Course | None) -> bool:
    return can_manage_content(user, course)


def can_edit_course(user, course: Course | None) -> bool:
    return can_manage_content(user, course)


def can_delete_course(user, course: Course | None) -> bool:
    return is_admin(user) or is_owner(user, course)


def ensure(allowed: bool, message: str) -> None:
    """Raise AuthorizationError unless ``allowed``."""
    if not allowed:
        raise AuthorizationError(message)
