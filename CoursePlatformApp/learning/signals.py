"""Signal handlers for the learning domain (submission lateness follows the assignment due date)."""

from typing import Any

from django.db.models.signals import post_save
from django.dispatch import receiver

from CoursePlatformApp.learning.models import Assignment, Submission


def recompute_lateness(assignment: Assignment) -> int:
    """Align ``is_late`` of the assignment's submissions with its due date; returns rows changed."""
    due_date = assignment.due_date
    subs = Submission.objects.filter(assignment=assignment)
    if due_date is None:
        return subs.filter(is_late=True).update(is_late=False)
    changed = subs.filter(submitted_at__gt=due_date, is_late=False).update(is_late=True)
    changed += subs.filter(submitted_at__lte=due_date, is_late=True).update(is_late=False)
    return changed


@receiver(post_save, sender=Assignment)
def recompute_submission_lateness(
    sender: type[Assignment],
    instance: Assignment,
    created: bool,
    **kwargs: Any,
) -> None:
    """Recalculate is_late for all submissions when an assignment is edited."""
    if created:
        return
    update_fields = kwargs.get("update_fields")
    if update_fields is not None and "due_date" not in update_fields:
        return
    recompute_lateness(instance)
