"""Custom querysets encapsulating visibility and role-based filtering for courses and their content."""

from django.db.models import Count, QuerySet, Q
from typing import Self


from CoursePlatformApp.core.choices import CourseStatus, UserRole

class CourseQuerySet(QuerySet):
    """QuerySet with helpers for course visibility and ownership."""

    def public_published(self) -> Self:
        """Courses students may see: published AND public."""
        return self.filter(status=CourseStatus.PUBLISHED, is_public=True)

    def pending_review(self) -> Self:
        return self.filter(status=CourseStatus.PENDING_REVIEW)

    def visible_to(self, user) -> Self:
        """Courses visible to user:
        - Anonymous / students: public & published, plus courses they are enrolled in
        - Tutors: public & published, plus courses they created or teach
        - Admins: everything
        """
        if not user or not user.is_authenticated:
            return self.public_published()
        if user.role == UserRole.ADMIN:
            return self.all()
        return self.filter(
            Q(status=CourseStatus.PUBLISHED, is_public=True) |
            Q(creator=user) |
            Q(tutor=user) |
            Q(enrollments__student=user)
        ).distinct()


class ModuleQuerySet(QuerySet):
    """QuerySet helpers for modules."""

    def in_order(self) -> Self:
        return self.order_by("order_index")

    def visible_to(self, user) -> Self:
        """Modules of the courses visible to the user."""
        from CoursePlatformApp.courses.models import Course
        return self.filter(course__in=Course.objects.visible_to(user))


class MaterialQuerySet(QuerySet):
    """QuerySet helpers for materials."""

    def in_order(self) -> Self:
        return self.order_by("order_index")

    def visible_to(self, user) -> Self:
        """Materials of the courses visible to the user."""
        from CoursePlatformApp.courses.models import Course
        return self.filter(module__course__in=Course.objects.visible_to(user))


class AssignmentQuerySet(QuerySet):
    """QuerySet helpers for assignments and their derived grading counts."""

    def with_grading_counts(self) -> Self:
        """Annotate submission_count and ungraded_count, always recomputed from submissions."""
        return self.annotate(
            submission_count=Count("submissions", distinct=True),
            ungraded_count=Count("submissions", filter=Q(submissions__is_graded=False), distinct=True),
        )

    def visible_to(self, user) -> Self:
        """Assignments of courses the user manages or is enrolled in."""
        if not user or not user.is_authenticated:
            return self.none()
        if user.role == UserRole.ADMIN:
            return self.all()
        return self.filter(
            Q(course__creator=user) |
            Q(course__tutor=user) |
            Q(course__enrollments__student=user)
        ).distinct()


class SubmissionQuerySet(QuerySet):
    """QuerySet helpers for filtering submissions by role."""

    def for_student(self, user) -> Self:
        """Submissions belonging to the student."""
        return self.filter(student=user)
