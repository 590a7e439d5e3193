"""Learning app configuration (registers signal handlers)."""

from django.apps import AppConfig

class LearningConfig(AppConfig):
    """AppConfig for the learning domain (assignments, submissions, material completion)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "CoursePlatformApp.learning"

    def ready(self):
        """Import signal handlers to connect Django model signals."""
        from CoursePlatformApp.learning import signals
