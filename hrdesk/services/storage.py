"""
Blob storage for uploaded documents and images. Callers treat the returned
URL as opaque.
"""
import logging
import os
import re
import uuid
from typing import Protocol

from hrdesk.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StorageError(Exception):
    pass


class BlobStorage(Protocol):
    def save(self, filename: str, content: bytes, content_type: str = "") -> str:
        ...


class LocalBlobStorage:
    def __init__(self, root: str = None, url_prefix: str = None):
        self.root = root or settings.upload_dir
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def save(self, filename: str, content: bytes, content_type: str = "") -> str:
        safe_name = _UNSAFE_CHARS.sub("_", os.path.basename(filename or "upload")) or "upload"
        key = f"{uuid.uuid4().hex}-{safe_name}"
        try:
            os.makedirs(self.root, exist_ok=True)
            with open(os.path.join(self.root, key), "wb") as fh:
                fh.write(content)
        except OSError as e:
            logger.error(f"Storing {filename} failed: {e}")
            raise StorageError(str(e)) from e
        return f"{self.url_prefix}/{key}"


def get_blob_storage() -> BlobStorage:
    return LocalBlobStorage()
