"""Signals emitted by the course lifecycle.

``course_status_changed`` is sent after the transition's transaction commits with
keyword arguments ``course``, ``event``, ``from_status``, ``to_status``, ``actor``
and ``reason``.
"""

from django.dispatch import Signal

course_status_changed = Signal()
