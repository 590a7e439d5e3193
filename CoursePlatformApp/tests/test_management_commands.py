from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from CoursePlatformApp.courses.models import Enrollment
from CoursePlatformApp.domain.services import course_service, grading_service
from CoursePlatformApp.learning.models import Assignment, Submission

pytestmark = pytest.mark.django_db


@pytest.fixture
def submission(tutor, student, published_course):
    assignment = grading_service.create_assignment(tutor, published_course.pk, {"title": "HW"})
    course_service.enroll(student, published_course.pk)
    return grading_service.submit(student, assignment.pk, content="answer")


def test_recalculate_lateness_fixes_stale_flags(submission):
    # bypass the post_save handler
    Assignment.objects.filter(pk=submission.assignment_id).update(due_date=timezone.now() - timedelta(days=2))
    out = StringIO()
    call_command("recalculate_lateness", stdout=out)
    assert "Updated 1 submissions" in out.getvalue()
    assert Submission.objects.get(pk=submission.pk).is_late


def test_recalculate_progress_rewrites_enrollments(submission, student):
    Enrollment.objects.filter(student=student).update(progress=0, completed_at=None)
    out = StringIO()
    call_command("recalculate_progress", stdout=out)
    assert "Recalculated 1 enrollments" in out.getvalue()
    enrollment = Enrollment.objects.get(student=student)
    assert enrollment.progress == 100
    assert enrollment.completed_at is not None
