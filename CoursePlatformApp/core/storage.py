"""File storage collaborator: upload files and delete them by URL (best effort).

Backed by Django's configured storage (``default_storage``), so a CDN or object
store can be plugged in through ``STORAGES`` without touching the services.
"""

import logging
import uuid
from functools import partial
from pathlib import PurePosixPath
from typing import Any, Iterable

from django.conf import settings
from django.core.files.storage import Storage, default_storage
from django.db import transaction

logger = logging.getLogger(__name__)


class FileStorage:
    """Thin gateway over a Django storage backend."""

    def __init__(self, backend: Storage | None = None) -> None:
        self.backend = backend or default_storage

    def upload(self, file_obj: Any, folder: str) -> str:
        """Store ``file_obj`` under ``folder`` and return its public URL."""
        suffix = PurePosixPath(getattr(file_obj, "name", "") or "").suffix
        name = self.backend.save(f"{folder}/{uuid.uuid4().hex}{suffix}", file_obj)
        logger.info("Stored file %s", name)
        return self.backend.url(name)

    def name_from_url(self, url: str) -> str | None:
        """Map a URL produced by ``upload`` back to a storage name; None for foreign URLs."""
        media_url = settings.MEDIA_URL
        if url.startswith(media_url):
            return url[len(media_url):]
        return None

    def delete(self, url: str) -> None:
        name = self.name_from_url(url)
        if name is None:
            logger.debug("Skipping delete of external URL %s", url)
            return
        self.backend.delete(name)
        logger.info("Deleted file %s", name)

    def delete_quietly(self, url: str) -> bool:
        """Delete ``url``; failures are logged and swallowed (the file may be orphaned)."""
        try:
            self.delete(url)
        except Exception:
            logger.warning("Failed to delete stored file %s; it may be orphaned", url, exc_info=True)
            return False
        return True


file_storage = FileStorage()


def delete_files_on_commit(urls: Iterable[str]) -> None:
    """Schedule best-effort deletion of ``urls`` after the current transaction commits."""
    for url in {u for u in urls if u}:
        transaction.on_commit(partial(file_storage.delete_quietly, url))
