"""Signal receivers notifying course staff about review outcomes."""

import logging
from typing import Any

from django.conf import settings
from django.core.mail import send_mail
from django.dispatch import receiver

from CoursePlatformApp.core.choices import LifecycleEvent
from CoursePlatformApp.courses.models import Course
from CoursePlatformApp.courses.signals import course_status_changed

logger = logging.getLogger(__name__)


def _recipient(course: Course):
    """Tutor of record when assigned, otherwise the creator."""
    return course.tutor or course.creator


@receiver(course_status_changed, sender=Course)
def notify_review_outcome(
    sender: type[Course],
    course: Course,
    event: str,
    reason: str | None = None,
    **kwargs: Any,
) -> None:
    """Email the course's tutor when an admin publishes or rejects it."""
    if event == LifecycleEvent.PUBLISH:
        subject = f"Your course \"{course.title}\" is published"
        body = "An administrator approved and published your course."
    elif event == LifecycleEvent.REJECT:
        subject = f"Your course \"{course.title}\" needs changes"
        body = f"An administrator rejected your course.\n\nReason: {reason or 'No reason provided'}"
    else:
        return

    recipient = _recipient(course)
    if not recipient or not recipient.email:
        return
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient.email])
    except Exception:
        logger.warning("Failed to send %s notification for course %s", event, course.pk, exc_info=True)
    else:
        logger.info("Sent %s notification for course %s to %s", event, course.pk, recipient.email)
