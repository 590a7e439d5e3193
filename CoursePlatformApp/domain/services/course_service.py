"""Domain service functions for course records and enrollment.

These helpers encapsulate business rules (only tutors/admins author courses,
status is never edited directly, deletion is guarded by learner progress) and
keep view/serializer layers thin. All mutating operations run inside atomic
transactions to ensure consistency of course and enrollment state.
"""
import logging
from typing import Any

from django.db import transaction
from CoursePlatformApp.core.access import (
    can_author_courses, can_delete_course, can_edit_course, ensure, is_admin, is_owner, role_of,
)
from CoursePlatformApp.core.choices import CourseStatus, UserRole
from CoursePlatformApp.core.exceptions import ConflictError, NotFoundError, ValidationError
from CoursePlatformApp.core.storage import delete_files_on_commit
from CoursePlatformApp.courses.models import Course, Enrollment, Material, User
from CoursePlatformApp.learning.models import Submission

logger = logging.getLogger(__name__)

# Fields a caller may set through create/update; status and version are lifecycle-owned.
EDITABLE_FIELDS = frozenset({
    "title", "description", "price", "duration", "level", "is_public",
    "category", "tutor", "requirements", "prerequisites",
})


def get_course(course_id: int, lock: bool = False) -> Course:
    qs = Course.objects.select_for_update() if lock else Course.objects.all()
    try:
        return qs.get(pk=course_id)
    except Course.DoesNotExist:
        raise NotFoundError("Course not found.") from None


def _clean_payload(data: dict[str, Any]) -> dict[str, Any]:
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}.")
    tutor = data.get("tutor")
    if tutor is not None and role_of(tutor) != UserRole.TUTOR:
        raise ValidationError("Assigned tutor must have the tutor role.")
    return data


@transaction.atomic
def create_course(creator: User, data: dict[str, Any]) -> Course:
    """Create a course in DRAFT owned by ``creator``.

    Args:
        creator: Tutor or admin creating (and owning) the course.
        data: Validated payload (title, description, price, ...); status is not accepted.

    Returns:
        The newly created Course instance.
    """
    ensure(can_author_courses(creator), "Only tutors and admins can create courses.")
    course = Course.objects.create(creator=creator, status=CourseStatus.DRAFT, **_clean_payload(data))
    logger.info("Course %s created by user %s", course.pk, creator.pk)
    return course


@transaction.atomic
def update_course(actor: User, course_id: int, data: dict[str, Any], expected_version: int | None = None) -> Course:
    """Update catalog fields of a course (owner, tutor of record, or admin).

    Changing the tutor of record is reserved to the owner and admins.

    Raises:
        ConflictError: ``expected_version`` does not match the stored version.
    """
    course = get_course(course_id, lock=True)
    ensure(can_edit_course(actor, course), "Not allowed to edit this course.")
    data = _clean_payload(data)
    if "tutor" in data:
        ensure(is_owner(actor, course) or is_admin(actor), "Only the owner or an admin can change the tutor of record.")
    if expected_version is not None and course.version != expected_version:
        raise ConflictError(f"Course was modified (version {course.version}, expected {expected_version}).")

    for field, value in data.items():
        setattr(course, field, value)
    course.version += 1
    course.save()
    return course


@transaction.atomic
def delete_course(actor: User, course_id: int) -> None:
    """Delete a course and everything under it (owner or admin).

    A course whose enrollments carry progress is only removed when its owner asks;
    stored material and submission files are deleted after commit.
    """
    course = get_course(course_id, lock=True)
    ensure(can_delete_course(actor, course), "Not allowed to delete this course.")
    if not is_owner(actor, course) and course.enrollments.filter(progress__gt=0).exists():
        raise ConflictError("Course has learners with progress; only its owner can delete it.")

    file_urls = list(
        Material.objects.filter(module__course=course).exclude(file_url="").values_list("file_url", flat=True)
    )
    file_urls += list(
        Submission.objects.filter(assignment__course=course).exclude(file_url="").values_list("file_url", flat=True)
    )
    course.delete()
    delete_files_on_commit(file_urls)
    logger.info("Course %s deleted by user %s (%d files scheduled)", course_id, actor.pk, len(file_urls))


@transaction.atomic
def enroll(student: User, course_id: int) -> Enrollment:
    """Enroll a student in a visible course (idempotent)."""
    course = get_course(course_id)
    ensure(role_of(student) == UserRole.STUDENT, "Only students can enroll.")
    if not course.is_visible:
        raise NotFoundError("Course not found.")
    enrollment, created = Enrollment.objects.get_or_create(course=course, student=student)
    if created:
        logger.info("User %s enrolled in course %s", student.pk, course.pk)
    return enrollment
