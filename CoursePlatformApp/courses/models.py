"""Course domain models: Category, Course, Module, Material, CourseTransition, Enrollment."""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator

from simple_history.models import HistoricalRecords

from CoursePlatformApp.core.choices import CourseStatus, LifecycleEvent, MaterialType, UserRole
from CoursePlatformApp.courses.querysets import CourseQuerySet, ModuleQuerySet, MaterialQuerySet


User = settings.AUTH_USER_MODEL

class Category(models.Model):
    name = models.CharField(max_length=120, unique=True)

    class Meta:
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Course(models.Model):
    """A course created by a tutor (or admin) and moved through the publication lifecycle.

    Fields:
        title / description: Catalog text.
        price: Non-negative list price.
        duration: Optional length in hours.
        status: CourseStatus value; only lifecycle events change it.
        is_public: Catalog listing flag, independent of status.
        rejection_reason / rejected_at: Set by the last rejection, cleared on resubmission.
        creator: Owner of the course.
        tutor: Optional tutor of record (may differ from creator).
        requirements / prerequisites: Lists of free-text items.
        version: Incremented on every write, used for optimistic locking.
        history: Audit history (django-simple-history).
    """
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    duration = models.PositiveIntegerField(null=True, blank=True)
    level = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=CourseStatus.choices, default=CourseStatus.DRAFT)
    is_public = models.BooleanField(default=False)
    rejection_reason = models.TextField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    creator = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_courses")
    tutor = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="tutored_courses")
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="courses")
    requirements = models.JSONField(default=list, blank=True)
    prerequisites = models.JSONField(default=list, blank=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = CourseQuerySet.as_manager()

    class Meta:
        indexes = [models.Index(fields=["status"], name="course_status_idx")]

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk}, {self.status})"

    @property
    def is_visible(self) -> bool:
        """Students see a course only when it is published AND public."""
        return self.status == CourseStatus.PUBLISHED and self.is_public


class Module(models.Model):
    """An ordered section of a course; order_index is contiguous from 0 within the course."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="modules")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    order_index = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ModuleQuerySet.as_manager()

    class Meta:
        ordering = ["course", "order_index"]
        constraints = [
            models.UniqueConstraint(fields=["course", "order_index"], name="uq_module_course_order"),
        ]

    def __str__(self) -> str:
        return f"{self.course_id}/{self.order_index}: {self.title}"


class Material(models.Model):
    """A piece of learning content inside a module (file, inline text or external link)."""
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name="materials")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=16, choices=MaterialType.choices)
    file_url = models.CharField(max_length=500, blank=True)
    content = models.TextField(blank=True)
    order_index = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MaterialQuerySet.as_manager()

    class Meta:
        ordering = ["module", "order_index"]
        constraints = [
            models.UniqueConstraint(fields=["module", "order_index"], name="uq_material_module_order"),
        ]

    def __str__(self) -> str:
        return f"{self.module_id}/{self.order_index}: {self.title} [{self.type}]"


class CourseTransition(models.Model):
    """Append-only log of lifecycle transitions, written with the status change."""
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="transitions")
    event = models.CharField(max_length=20, choices=LifecycleEvent.choices)
    from_status = models.CharField(max_length=20, choices=CourseStatus.choices)
    to_status = models.CharField(max_length=20, choices=CourseStatus.choices)
    actor = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="course_transitions")
    actor_role = models.CharField(max_length=16, choices=UserRole.choices)
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.course_id}: {self.from_status} -> {self.to_status} ({self.event})"


class Enrollment(models.Model):
    """A student's enrollment in a course with cached progress percentage.

    Constraints:
        uq_course_student: one enrollment per (course, student).
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="enrollments")
    progress = models.PositiveSmallIntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    enrolled_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["course", "student"], name="uq_course_student"),
        ]

    def __str__(self) -> str:
        return f"{self.student} -> {self.course} ({self.progress}%)"
