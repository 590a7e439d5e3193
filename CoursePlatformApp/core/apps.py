"""Core app: startup checks for the upload pipeline."""

from django.apps import AppConfig
from django.conf import settings
from django.core.checks import Error, Tags, register


def upload_pipeline_check(app_configs, **kwargs):
    """libmagic must sniff a PDF header and the upload cap must be positive."""
    errors = []
    try:
        import magic
        if magic.from_buffer(b"%PDF-1.4\n", mime=True) != "application/pdf":
            errors.append(Error("libmagic does not recognise PDF payloads", id="core.E001"))
    except Exception as exc:
        errors.append(Error(f"libmagic not available: {exc}", id="core.E001"))

    if getattr(settings, "MAX_UPLOAD_MB", 0) <= 0:
        errors.append(Error("MAX_UPLOAD_MB must be a positive integer", id="core.E002"))
    return errors


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "CoursePlatformApp.core"

    def ready(self):
        register(upload_pipeline_check, Tags.files)
