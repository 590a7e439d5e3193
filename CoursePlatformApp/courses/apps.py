"""Courses app configuration (connects lifecycle notification receivers)."""

from django.apps import AppConfig

class CoursesConfig(AppConfig):
    """AppConfig for the course catalog, content tree and lifecycle."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "CoursePlatformApp.courses"

    def ready(self):
        """Import receivers so lifecycle notifications are connected."""
        from CoursePlatformApp.courses import notifications
