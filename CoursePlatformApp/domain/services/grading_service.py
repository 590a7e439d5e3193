"""Domain service functions for assignments, submissions, and grading.

Enforces role/visibility rules:
- Only the course owner, its tutor of record, or an admin manage assignments and grade.
- Enrolled students submit to assignments of PUBLISHED courses.
Submission grading states:
    ungraded (score NULL) -> graded (score set) -> ungraded again on resubmission.
A resubmission overwrites the answer and clears the previous grade; the old
grade stays in the submission history.
"""

import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from CoursePlatformApp.core.access import can_grade, can_manage_content, ensure, is_enrolled
from CoursePlatformApp.core.choices import CourseStatus
from CoursePlatformApp.core.exceptions import ConflictError, NotFoundError, ValidationError
from CoursePlatformApp.core.storage import delete_files_on_commit, file_storage
from CoursePlatformApp.core.validators import validate_file_size, validate_submission_mime
from CoursePlatformApp.courses.models import Course, User
from CoursePlatformApp.domain.services.progress_service import refresh_progress
from CoursePlatformApp.learning.models import Assignment, Submission

logger = logging.getLogger(__name__)

ASSIGNMENT_FIELDS = frozenset({"title", "description", "due_date", "max_score"})


def get_assignment(assignment_id: int, lock: bool = False) -> Assignment:
    qs = Assignment.objects.select_for_update() if lock else Assignment.objects.all()
    try:
        return qs.select_related("course").get(pk=assignment_id)
    except Assignment.DoesNotExist:
        raise NotFoundError("Assignment not found.") from None


def _validate_assignment_data(data: dict[str, Any]) -> None:
    unknown = set(data) - ASSIGNMENT_FIELDS
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}.")
    if "max_score" in data:
        max_score = data["max_score"]
        if isinstance(max_score, bool) or not isinstance(max_score, int) or max_score < 1:
            raise ValidationError("max_score must be an integer of at least 1.")


@transaction.atomic
def create_assignment(actor: User, course_id: int, data: dict[str, Any]) -> Assignment:
    """Create an assignment under a course (content managers only).

    Args:
        actor: Owner, tutor of record, or admin.
        course_id: Parent course.
        data: ``title`` plus optional ``description``, ``due_date``, ``max_score``.
    """
    try:
        course = Course.objects.get(pk=course_id)
    except Course.DoesNotExist:
        raise NotFoundError("Course not found.") from None
    ensure(can_manage_content(actor, course), "Not allowed to manage assignments of this course.")
    _validate_assignment_data(data)
    if not data.get("title"):
        raise ValidationError("Assignment title is required.")
    assignment = Assignment.objects.create(course=course, created_by=actor, **data)
    logger.info("Assignment %s created in course %s by user %s", assignment.pk, course.pk, actor.pk)
    return assignment


@transaction.atomic
def update_assignment(actor: User, assignment_id: int, data: dict[str, Any]) -> Assignment:
    """Update an assignment; a changed due date recomputes submission lateness."""
    assignment = get_assignment(assignment_id, lock=True)
    ensure(can_manage_content(actor, assignment.course), "Not allowed to manage assignments of this course.")
    _validate_assignment_data(data)
    max_score = data.get("max_score")
    if max_score is not None and assignment.submissions.filter(score__gt=max_score).exists():
        raise ValidationError("Existing grades exceed the new max_score.")
    for field, value in data.items():
        setattr(assignment, field, value)
    assignment.save()
    return assignment


@transaction.atomic
def delete_assignment(actor: User, assignment_id: int) -> None:
    """Delete an assignment with its submissions; stored submission files are removed after commit."""
    assignment = get_assignment(assignment_id, lock=True)
    ensure(can_manage_content(actor, assignment.course), "Not allowed to manage assignments of this course.")
    course_id = assignment.course_id
    file_urls = list(assignment.submissions.exclude(file_url="").values_list("file_url", flat=True))
    assignment.delete()
    delete_files_on_commit(file_urls)
    logger.info("Assignment %s deleted from course %s by user %s", assignment_id, course_id, actor.pk)


@transaction.atomic
def submit(
    student: User,
    assignment_id: int,
    content: str = "",
    file: Any | None = None,
    file_url: str | None = None,
) -> Submission:
    """Create or resubmit a submission.

    Rules:
        - Student must be enrolled and the course PUBLISHED.
        - At least one of content, file or file_url required.
        - On resubmit: the answer is overwritten, grading is cleared and a
          replaced stored file is deleted after commit.
        - Progress of the student's enrollment is recalculated.
    """
    assignment = get_assignment(assignment_id)
    course = assignment.course
    ensure(is_enrolled(student, course), "Enrollment required to submit.")
    if course.status != CourseStatus.PUBLISHED:
        raise ValidationError("Submissions are only accepted for published courses.")
    if not (content or file or file_url):
        raise ValidationError("Empty submission.")

    if file is not None:
        validate_file_size(file)
        validate_submission_mime(file)
        file_url = file_storage.upload(file, f"submissions/{assignment.pk}")

    now = timezone.now()
    is_late = bool(assignment.due_date and now > assignment.due_date)
    try:
        with transaction.atomic():
            submission, created = Submission.objects.select_for_update().get_or_create(
                assignment=assignment,
                student=student,
                defaults={
                    "content": content or "",
                    "file_url": file_url or "",
                    "submitted_at": now,
                    "is_late": is_late,
                },
            )
    except IntegrityError:
        if file is not None:
            file_storage.delete_quietly(file_url)
        raise ConflictError("Submission was created concurrently; retry.") from None

    if not created:
        old_url = submission.file_url
        submission.content = content or ""
        submission.file_url = file_url or ""
        submission.submitted_at = now
        submission.is_late = is_late
        submission.score = None
        submission.feedback = ""
        submission.is_graded = False
        submission.graded_at = None
        submission.graded_by = None
        submission.save()
        if old_url and old_url != submission.file_url:
            delete_files_on_commit([old_url])
        logger.info("Submission %s resubmitted by user %s", submission.pk, student.pk)
    else:
        logger.info("Submission %s created by user %s for assignment %s", submission.pk, student.pk, assignment.pk)

    refresh_progress(student, course)
    return submission


@transaction.atomic
def grade_submission(
    actor: User,
    submission_id: int,
    score: int,
    feedback: str | None = None,
) -> Submission:
    """Grade (or regrade) a submission.

    Validates:
        score is an integer within 0..assignment.max_score inclusive.
    Sets is_graded, graded_at and graded_by; a regrade overwrites the previous grade.

    Raises:
        ValidationError: Score out of range or not an integer.
        AuthorizationError: Actor is not a grader of the course.
    """
    try:
        submission = Submission.objects.select_for_update().select_related("assignment__course").get(
            pk=submission_id
        )
    except Submission.DoesNotExist:
        raise NotFoundError("Submission not found.") from None
    assignment = submission.assignment
    ensure(can_grade(actor, assignment.course), "Not allowed to grade submissions of this course.")
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("Score must be an integer.")
    if not (0 <= score <= assignment.max_score):
        raise ValidationError(f"Score must be between 0 and {assignment.max_score}.")

    submission.score = score
    submission.feedback = feedback or ""
    submission.is_graded = True
    submission.graded_at = timezone.now()
    submission.graded_by = actor
    submission.save()
    logger.info("Submission %s graded %d/%d by user %s", submission.pk, score, assignment.max_score, actor.pk)
    return submission


def assignment_stats(assignment_id: int) -> dict[str, int]:
    """Derived submission counts for an assignment."""
    assignment = Assignment.objects.with_grading_counts().filter(pk=assignment_id).first()
    if assignment is None:
        raise NotFoundError("Assignment not found.")
    return {
        "submission_count": assignment.submission_count,
        "ungraded_count": assignment.ungraded_count,
    }


def list_assignment_submissions(actor: User, assignment_id: int) -> QuerySet[Submission]:
    """Submissions of an assignment: all of them for graders, the student's own otherwise."""
    assignment = get_assignment(assignment_id)
    qs = assignment.submissions.select_related("student", "graded_by")
    if can_grade(actor, assignment.course):
        return qs
    return qs.for_student(actor)
