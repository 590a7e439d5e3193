"""Learning domain models: Assignment, Submission, MaterialCompletion."""

from django.db import models
from django.db.models import Q
from django.conf import settings
from django.core.validators import MinValueValidator

from CoursePlatformApp.courses.models import Course, Material
from CoursePlatformApp.courses.querysets import AssignmentQuerySet, SubmissionQuerySet

from simple_history.models import HistoricalRecords

User = settings.AUTH_USER_MODEL

class Assignment(models.Model):
    """Graded work attached to a course (independent of the module/material tree)."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="assignments")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    max_score = models.PositiveIntegerField(default=100, validators=[MinValueValidator(1)])
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_assignments")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = AssignmentQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(condition=Q(max_score__gte=1), name="ck_assignment_max_score_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk}, max {self.max_score})"


class Submission(models.Model):
    """A student's answer to an assignment (unique per assignment+student).

    ``is_graded`` is true exactly when ``score`` is set; resubmission clears both.
    Prior grades survive in ``history``.
    """
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="submissions")
    content = models.TextField(blank=True)
    file_url = models.CharField(max_length=500, blank=True)
    score = models.PositiveIntegerField(null=True, blank=True)
    feedback = models.TextField(blank=True)
    is_graded = models.BooleanField(default=False)
    graded_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="graded_submissions"
    )
    submitted_at = models.DateTimeField()
    graded_at = models.DateTimeField(null=True, blank=True)
    is_late = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        ordering = ["-submitted_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="uq_assignment_student"),
            models.CheckConstraint(
                condition=Q(is_graded=True, score__isnull=False) | Q(is_graded=False, score__isnull=True),
                name="ck_submission_graded_iff_score",
            ),
        ]

    def __str__(self) -> str:
        state = f"graded {self.score}" if self.is_graded else "ungraded"
        return f"Submission({self.student} -> {self.assignment_id}, {state})"


class MaterialCompletion(models.Model):
    """A student marked a material as completed."""
    material = models.ForeignKey(Material, on_delete=models.CASCADE, related_name="completions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="material_completions")
    completed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["material", "student"], name="uq_material_student"),
        ]
