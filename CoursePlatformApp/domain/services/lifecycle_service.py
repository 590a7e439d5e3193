"""Course publication state machine.

States: DRAFT (initial), PENDING_REVIEW, PUBLISHED, REJECTED, ARCHIVED (sink).

    DRAFT           --submit_for_review (owner)--> PENDING_REVIEW
    REJECTED        --submit_for_review (owner)--> PENDING_REVIEW   (passes through edit_and_resubmit)
    DRAFT           --publish (admin)------------> PUBLISHED
    PENDING_REVIEW  --publish (admin)------------> PUBLISHED
    PENDING_REVIEW  --reject (admin)-------------> REJECTED
    REJECTED        --edit_and_resubmit (owner)--> DRAFT
    any but ARCHIVED --archive (admin)-----------> ARCHIVED

Only an admin may move a course to PUBLISHED. Authorization is checked before
the current state, so an unauthorized actor always gets AuthorizationError.
Each transition is a compare-and-swap on (id, status, version): status, rejection
metadata, version and the audit row commit together or not at all.
"""

import logging
from dataclasses import dataclass
from functools import partial

from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from CoursePlatformApp.core.access import can_transition, role_of
from CoursePlatformApp.core.choices import CourseStatus, LifecycleEvent
from CoursePlatformApp.core.exceptions import (
    AuthorizationError, ConflictError, InvalidTransitionError, NotFoundError,
)
from CoursePlatformApp.courses.models import Course, CourseTransition, User
from CoursePlatformApp.courses.signals import course_status_changed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    event: LifecycleEvent
    sources: frozenset[CourseStatus]
    target: CourseStatus


TRANSITIONS: dict[LifecycleEvent, Transition] = {
    t.event: t for t in (
        Transition(
            LifecycleEvent.SUBMIT_FOR_REVIEW,
            frozenset({CourseStatus.DRAFT, CourseStatus.REJECTED}),
            CourseStatus.PENDING_REVIEW,
        ),
        Transition(
            LifecycleEvent.PUBLISH,
            frozenset({CourseStatus.DRAFT, CourseStatus.PENDING_REVIEW}),
            CourseStatus.PUBLISHED,
        ),
        Transition(
            LifecycleEvent.REJECT,
            frozenset({CourseStatus.PENDING_REVIEW}),
            CourseStatus.REJECTED,
        ),
        Transition(
            LifecycleEvent.EDIT_AND_RESUBMIT,
            frozenset({CourseStatus.REJECTED}),
            CourseStatus.DRAFT,
        ),
        Transition(
            LifecycleEvent.ARCHIVE,
            frozenset({
                CourseStatus.DRAFT, CourseStatus.PENDING_REVIEW,
                CourseStatus.PUBLISHED, CourseStatus.REJECTED,
            }),
            CourseStatus.ARCHIVED,
        ),
    )
}


def allowed_events(status: CourseStatus | str) -> list[LifecycleEvent]:
    """Events with an edge leaving ``status``."""
    return [event for event, t in TRANSITIONS.items() if status in t.sources]


def _side_fields(event: LifecycleEvent, reason: str | None) -> dict:
    if event == LifecycleEvent.REJECT:
        return {"rejection_reason": reason or None, "rejected_at": timezone.now()}
    if event in (LifecycleEvent.SUBMIT_FOR_REVIEW, LifecycleEvent.PUBLISH):
        return {"rejection_reason": None, "rejected_at": None}
    return {}


def _steps(event: LifecycleEvent, status: str) -> list[tuple[LifecycleEvent, str, CourseStatus]]:
    """Audit steps for ``event`` fired from ``status``."""
    if event == LifecycleEvent.SUBMIT_FOR_REVIEW and status == CourseStatus.REJECTED:
        return [
            (LifecycleEvent.EDIT_AND_RESUBMIT, status, CourseStatus.DRAFT),
            (event, CourseStatus.DRAFT, TRANSITIONS[event].target),
        ]
    return [(event, status, TRANSITIONS[event].target)]


def apply_transition(
    actor: User,
    course_id: int,
    event: LifecycleEvent | str,
    reason: str | None = None,
    expected_version: int | None = None,
) -> Course:
    """Fire ``event`` on the course as ``actor``.

    Raises:
        NotFoundError: Course does not exist.
        AuthorizationError: Actor may not fire this event on this course.
        ConflictError: ``expected_version`` is stale or a concurrent write won the race.
        InvalidTransitionError: No edge for ``event`` from the current status.
    """
    event = LifecycleEvent(event)
    transition = TRANSITIONS[event]

    with transaction.atomic():
        try:
            course = Course.objects.select_for_update().get(pk=course_id)
        except Course.DoesNotExist:
            raise NotFoundError("Course not found.") from None

        if not can_transition(actor, course, event):
            raise AuthorizationError(f"Not allowed to {event.label.lower()} this course.")
        if expected_version is not None and course.version != expected_version:
            raise ConflictError(
                f"Course was modified (version {course.version}, expected {expected_version})."
            )
        if course.status not in transition.sources:
            raise InvalidTransitionError(
                f"Cannot {event.label.lower()} a course in status {course.status}."
            )

        from_status = course.status
        updated = Course.objects.filter(pk=course.pk, status=from_status, version=course.version).update(
            status=transition.target,
            version=F("version") + 1,
            updated_at=timezone.now(),
            **_side_fields(event, reason),
        )
        if updated != 1:
            raise ConflictError("Course status changed concurrently; reload and retry.")

        actor_role = role_of(actor)
        CourseTransition.objects.bulk_create([
            CourseTransition(
                course=course,
                event=step_event,
                from_status=step_from,
                to_status=step_to,
                actor=actor,
                actor_role=actor_role,
                reason=(reason or "") if step_event == LifecycleEvent.REJECT else "",
            )
            for step_event, step_from, step_to in _steps(event, from_status)
        ])
        course.refresh_from_db()
        logger.info(
            "Course %s: %s -> %s by user %s (%s)",
            course.pk, from_status, course.status, actor.pk, event.value,
        )
        transaction.on_commit(partial(
            course_status_changed.send,
            sender=Course,
            course=course,
            event=event,
            from_status=from_status,
            to_status=course.status,
            actor=actor,
            reason=reason,
        ))
    return course


def submit_for_review(actor: User, course_id: int, expected_version: int | None = None) -> Course:
    return apply_transition(actor, course_id, LifecycleEvent.SUBMIT_FOR_REVIEW, expected_version=expected_version)


def publish(actor: User, course_id: int, expected_version: int | None = None) -> Course:
    return apply_transition(actor, course_id, LifecycleEvent.PUBLISH, expected_version=expected_version)


def reject(actor: User, course_id: int, reason: str | None = None, expected_version: int | None = None) -> Course:
    return apply_transition(actor, course_id, LifecycleEvent.REJECT, reason=reason, expected_version=expected_version)


def edit_and_resubmit(actor: User, course_id: int, expected_version: int | None = None) -> Course:
    return apply_transition(actor, course_id, LifecycleEvent.EDIT_AND_RESUBMIT, expected_version=expected_version)


def archive(actor: User, course_id: int, expected_version: int | None = None) -> Course:
    return apply_transition(actor, course_id, LifecycleEvent.ARCHIVE, expected_version=expected_version)


def transition_history(course: Course) -> QuerySet[CourseTransition]:
    """Audit log of the course's transitions, oldest first."""
    return course.transitions.select_related("actor").order_by("created_at", "id")


def pending_review_count() -> int:
    """Number of courses awaiting admin review (pull-based badge count)."""
    return Course.objects.pending_review().count()
