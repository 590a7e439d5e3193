"""Typed enumerations (TextChoices) for user roles, course statuses, lifecycle events and material types."""
from django.db import models

class UserRole(models.TextChoices):
    """Platform-level role supplied with every authenticated actor."""
    STUDENT = "STUDENT", "Student"
    TUTOR = "TUTOR", "Tutor"
    ADMIN = "ADMIN", "Admin"

class CourseStatus(models.TextChoices):
    """Publication status of a course."""
    DRAFT = "DRAFT", "Draft"
    PENDING_REVIEW = "PENDING_REVIEW", "Pending review"
    PUBLISHED = "PUBLISHED", "Published"
    REJECTED = "REJECTED", "Rejected"
    ARCHIVED = "ARCHIVED", "Archived"

class LifecycleEvent(models.TextChoices):
    """Events that move a course between statuses."""
    SUBMIT_FOR_REVIEW = "SUBMIT_FOR_REVIEW", "Submit for review"
    PUBLISH = "PUBLISH", "Publish"
    REJECT = "REJECT", "Reject"
    EDIT_AND_RESUBMIT = "EDIT_AND_RESUBMIT", "Edit and resubmit"
    ARCHIVE = "ARCHIVE", "Archive"

class MaterialType(models.TextChoices):
    PDF = "PDF", "PDF"
    VIDEO = "VIDEO", "Video"
    AUDIO = "AUDIO", "Audio"
    IMAGE = "IMAGE", "Image"
    DOCUMENT = "DOCUMENT", "Document"
    LINK = "LINK", "Link"

class MoveDirection(models.TextChoices):
    UP = "UP", "Up"
    DOWN = "DOWN", "Down"
