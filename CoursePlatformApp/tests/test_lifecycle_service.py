import pytest
from django.core import mail

from CoursePlatformApp.core.choices import CourseStatus, LifecycleEvent, MaterialType, UserRole
from CoursePlatformApp.core.exceptions import AuthorizationError, ConflictError, InvalidTransitionError
from CoursePlatformApp.courses.models import Course, CourseTransition
from CoursePlatformApp.domain.services import content_service, lifecycle_service, ordering

pytestmark = pytest.mark.django_db


def build_tree(tutor, course):
    m1 = content_service.create_module(tutor, course.pk, "Intro")
    m2 = content_service.create_module(tutor, course.pk, "Graphs")
    content_service.create_material(tutor, m1.pk, MaterialType.LINK, {"title": "Slides", "file_url": "https://x/y"})
    content_service.create_material(tutor, m1.pk, MaterialType.DOCUMENT, {"title": "Notes", "content": "text"})
    return m1, m2


def assert_tree_contiguous(course):
    assert ordering.is_contiguous(ordering.MODULES, course.pk)
    for module in course.modules.all():
        assert ordering.is_contiguous(ordering.MATERIALS, module.pk)


def tree_snapshot(course):
    return [
        (module.title, module.order_index, list(module.materials.in_order().values_list("title", "order_index")))
        for module in course.modules.in_order()
    ]


def test_full_review_cycle(tutor, admin, course):
    build_tree(tutor, course)

    course = lifecycle_service.submit_for_review(tutor, course.pk)
    assert course.status == CourseStatus.PENDING_REVIEW
    assert_tree_contiguous(course)
    before_reject = tree_snapshot(course)

    course = lifecycle_service.reject(admin, course.pk, reason="needs more content")
    assert course.status == CourseStatus.REJECTED
    assert course.rejection_reason == "needs more content"
    assert course.rejected_at is not None
    assert tree_snapshot(course) == before_reject
    assert_tree_contiguous(course)

    content_service.create_module(tutor, course.pk, "Extra")
    course = lifecycle_service.submit_for_review(tutor, course.pk)
    assert course.status == CourseStatus.PENDING_REVIEW
    assert course.rejection_reason is None
    assert course.rejected_at is None

    course = lifecycle_service.publish(admin, course.pk)
    assert course.status == CourseStatus.PUBLISHED
    assert_tree_contiguous(course)

    events = list(lifecycle_service.transition_history(course).values_list("event", flat=True))
    assert events == [
        LifecycleEvent.SUBMIT_FOR_REVIEW,
        LifecycleEvent.REJECT,
        LifecycleEvent.EDIT_AND_RESUBMIT,
        LifecycleEvent.SUBMIT_FOR_REVIEW,
        LifecycleEvent.PUBLISH,
    ]


def test_published_only_reached_by_admin(tutor, admin, course):
    lifecycle_service.submit_for_review(tutor, course.pk)
    lifecycle_service.publish(admin, course.pk)
    to_published = CourseTransition.objects.filter(course=course, to_status=CourseStatus.PUBLISHED)
    assert to_published.count() == 1
    assert to_published.get().actor_role == UserRole.ADMIN


@pytest.mark.parametrize("event", [
    LifecycleEvent.SUBMIT_FOR_REVIEW,
    LifecycleEvent.PUBLISH,
    LifecycleEvent.REJECT,
])
def test_outsiders_are_rejected_before_state_check(event, course, other_tutor, student):
    for actor in (other_tutor, student):
        with pytest.raises(AuthorizationError):
            lifecycle_service.apply_transition(actor, course.pk, event)
    course.refresh_from_db()
    assert course.status == CourseStatus.DRAFT
    assert not course.transitions.exists()


def test_owner_cannot_publish_own_course(tutor, course):
    lifecycle_service.submit_for_review(tutor, course.pk)
    with pytest.raises(AuthorizationError):
        lifecycle_service.publish(tutor, course.pk)
    course.refresh_from_db()
    assert course.status == CourseStatus.PENDING_REVIEW


def test_assigned_tutor_cannot_fire_events(tutor, other_tutor, course):
    Course.objects.filter(pk=course.pk).update(tutor=other_tutor)
    with pytest.raises(AuthorizationError):
        lifecycle_service.submit_for_review(other_tutor, course.pk)


@pytest.mark.parametrize("status,event", [
    (CourseStatus.ARCHIVED, LifecycleEvent.PUBLISH),
    (CourseStatus.REJECTED, LifecycleEvent.PUBLISH),
    (CourseStatus.DRAFT, LifecycleEvent.REJECT),
    (CourseStatus.PUBLISHED, LifecycleEvent.REJECT),
    (CourseStatus.ARCHIVED, LifecycleEvent.ARCHIVE),
])
def test_missing_edges_raise_invalid_transition(status, event, admin, course):
    Course.objects.filter(pk=course.pk).update(status=status)
    with pytest.raises(InvalidTransitionError):
        lifecycle_service.apply_transition(admin, course.pk, event)
    course.refresh_from_db()
    assert course.status == status


def test_stale_version_conflicts(tutor, admin, course):
    version = course.version
    lifecycle_service.submit_for_review(tutor, course.pk, expected_version=version)
    with pytest.raises(ConflictError):
        lifecycle_service.publish(admin, course.pk, expected_version=version)
    course.refresh_from_db()
    assert course.status == CourseStatus.PENDING_REVIEW
    assert course.version == version + 1


def test_edit_and_resubmit_returns_to_draft(tutor, admin, course):
    lifecycle_service.submit_for_review(tutor, course.pk)
    lifecycle_service.reject(admin, course.pk)
    course = lifecycle_service.edit_and_resubmit(tutor, course.pk)
    assert course.status == CourseStatus.DRAFT
    assert [t.event for t in lifecycle_service.transition_history(course)][-1] == LifecycleEvent.EDIT_AND_RESUBMIT


def test_reject_without_reason_stores_null(tutor, admin, course):
    lifecycle_service.submit_for_review(tutor, course.pk)
    course = lifecycle_service.reject(admin, course.pk, reason="")
    assert course.rejection_reason is None


def test_archive_is_admin_only_sink(tutor, admin, course):
    with pytest.raises(AuthorizationError):
        lifecycle_service.archive(tutor, course.pk)
    course = lifecycle_service.archive(admin, course.pk)
    assert course.status == CourseStatus.ARCHIVED
    assert lifecycle_service.allowed_events(CourseStatus.ARCHIVED) == []


def test_transitions_leave_visibility_flag_alone(tutor, admin, course):
    assert course.is_public
    course = lifecycle_service.publish(admin, course.pk)
    assert course.is_public
    assert course.is_visible


def test_pending_review_count(tutor, admin, course):
    assert lifecycle_service.pending_review_count() == 0
    lifecycle_service.submit_for_review(tutor, course.pk)
    assert lifecycle_service.pending_review_count() == 1
    lifecycle_service.publish(admin, course.pk)
    assert lifecycle_service.pending_review_count() == 0


def test_review_outcome_is_mailed_after_commit(tutor, admin, course, django_capture_on_commit_callbacks):
    lifecycle_service.submit_for_review(tutor, course.pk)
    with django_capture_on_commit_callbacks(execute=True):
        lifecycle_service.reject(admin, course.pk, reason="too short")
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [tutor.email]
    assert "too short" in mail.outbox[0].body
