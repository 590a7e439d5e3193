"""Validation helpers for uploaded material and submission files."""

from django.conf import settings
from typing import Any

from CoursePlatformApp.core.choices import MaterialType
from CoursePlatformApp.core.exceptions import ValidationError

ALLOWED_MATERIAL_MIME: dict[str, set[str]] = {
    MaterialType.PDF: {"application/pdf"},
    MaterialType.VIDEO: {"video/mp4", "video/webm", "video/quicktime", "video/x-matroska"},
    MaterialType.AUDIO: {"audio/mpeg", "audio/mp4", "audio/ogg", "audio/wav", "audio/x-wav", "audio/webm"},
    MaterialType.IMAGE: {"image/png", "image/jpeg", "image/gif", "image/webp"},
    MaterialType.DOCUMENT: {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
    },
}
ALLOWED_SUBMISSION_MIME: set[str] = ALLOWED_MATERIAL_MIME[MaterialType.DOCUMENT] | {
    "application/zip",
    "image/png",
    "image/jpeg",
}

def validate_file_size(file_obj: Any, max_mb: int | None = None) -> None:
    """Ensure file size does not exceed max_mb megabytes."""
    max_mb = max_mb or settings.MAX_UPLOAD_MB
    if file_obj and file_obj.size > max_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds {max_mb} MB limit.")

def _probe_mime(file_obj: Any) -> str | None:
    """Read initial bytes to detect MIME type using libmagic."""
    if not file_obj:
        return None
    import magic

    header = file_obj.read(4096)
    file_obj.seek(0)
    return magic.from_buffer(header, mime=True)

def validate_material_mime(file_obj: Any, material_type: str) -> None:
    """Validate that an uploaded file matches the declared material type."""
    if material_type == MaterialType.LINK:
        raise ValidationError("Link materials cannot carry an uploaded file.")
    mime = _probe_mime(file_obj)
    allowed = ALLOWED_MATERIAL_MIME.get(material_type, set())
    if mime and mime not in allowed:
        raise ValidationError(f"Unsupported {material_type.lower()} mime: {mime}")

def validate_submission_mime(file_obj: Any) -> None:
    """Validate that a submission attachment has an allowed MIME type."""
    mime = _probe_mime(file_obj)
    if mime and mime not in ALLOWED_SUBMISSION_MIME:
        raise ValidationError(f"Unsupported attachment mime: {mime}")
