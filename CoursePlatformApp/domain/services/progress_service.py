"""Enrollment progress: completed materials plus submitted assignments over all course items."""
import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from CoursePlatformApp.core.access import ensure, is_enrolled
from CoursePlatformApp.core.exceptions import NotFoundError
from CoursePlatformApp.courses.models import Course, Enrollment, Material, User
from CoursePlatformApp.learning.models import Assignment, MaterialCompletion, Submission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressStats:
    total_materials: int
    completed_materials: int
    total_assignments: int
    submitted_assignments: int

    @property
    def total(self) -> int:
        return self.total_materials + self.total_assignments

    @property
    def done(self) -> int:
        return self.completed_materials + self.submitted_assignments

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return round(self.done / self.total * 100)


def course_progress_stats(student: User, course: Course) -> ProgressStats:
    return ProgressStats(
        total_materials=Material.objects.filter(module__course=course).count(),
        completed_materials=MaterialCompletion.objects.filter(
            student=student, material__module__course=course
        ).count(),
        total_assignments=Assignment.objects.filter(course=course).count(),
        submitted_assignments=Submission.objects.filter(student=student, assignment__course=course).count(),
    )


def calculate_course_progress(student: User, course: Course) -> int:
    """Percentage (0-100) of the course's materials and assignments the student has done."""
    return course_progress_stats(student, course).percent


@transaction.atomic
def recalculate_and_update(enrollment: Enrollment) -> Enrollment:
    """Recompute ``enrollment.progress``; stamp ``completed_at`` when it first reaches 100."""
    enrollment = Enrollment.objects.select_for_update().select_related("course", "student").get(pk=enrollment.pk)
    progress = calculate_course_progress(enrollment.student, enrollment.course)
    completed_at = enrollment.completed_at
    if progress >= 100 and completed_at is None:
        completed_at = timezone.now()
    elif progress < 100:
        completed_at = None

    if progress != enrollment.progress or completed_at != enrollment.completed_at:
        enrollment.progress = progress
        enrollment.completed_at = completed_at
        enrollment.save(update_fields=["progress", "completed_at"])
        logger.debug("Enrollment %s progress -> %d", enrollment.pk, progress)
    return enrollment


def refresh_progress(student: User, course: Course) -> Enrollment | None:
    enrollment = Enrollment.objects.filter(student=student, course=course).first()
    if enrollment is None:
        return None
    return recalculate_and_update(enrollment)


@transaction.atomic
def complete_material(student: User, material_id: int) -> MaterialCompletion:
    """Mark a material completed for an enrolled student (idempotent)."""
    try:
        material = Material.objects.select_related("module__course").get(pk=material_id)
    except Material.DoesNotExist:
        raise NotFoundError("Material not found.") from None
    course = material.module.course
    ensure(is_enrolled(student, course), "Enrollment required to complete materials.")

    completion, created = MaterialCompletion.objects.get_or_create(material=material, student=student)
    if created:
        logger.info("User %s completed material %s", student.pk, material.pk)
        refresh_progress(student, course)
    return completion


def recalculate_all() -> int:
    """Recompute progress for every enrollment; returns the number processed."""
    count = 0
    for enrollment in Enrollment.objects.only("pk").iterator():
        recalculate_and_update(enrollment)
        count += 1
    return count
