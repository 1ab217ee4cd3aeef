"""
Blob store for evidence files, avatars and advertisement images.

Blobs are plain files under ``BLOB_DIR/<bucket>/<path>`` and are served
read-only under ``PUBLIC_BLOB_URL``. Blobs whose metadata never got written
(or whose metadata was deleted before the blob) are recorded in the
``orphaned_blobs`` collection for periodic cleanup.
"""

import os, logging
from typing import List
from scamguard.core.config import settings
from scamguard.core.errors import ProviderUnavailable, ValidationFailed
from scamguard.storage import utils as store

logger = logging.getLogger(__name__)

BLOB_DIR = settings.BLOB_DIR

EVIDENCE_BUCKET = "evidence"
AVATAR_BUCKET = "avatars"
ADVERTISEMENT_BUCKET = "advertisement"


def _blob_path(bucket: str, path: str) -> str:
    root = os.path.abspath(os.path.join(BLOB_DIR, bucket))
    full = os.path.abspath(os.path.join(root, path))
    if not full.startswith(root + os.sep):
        raise ValidationFailed("Invalid file path.")
    return full


def upload(bucket: str, path: str, data: bytes) -> str:
    """Store ``data`` and return ``path``. Existing blobs are never overwritten."""
    full = _blob_path(bucket, path)
    if os.path.exists(full):
        raise ValidationFailed("A file already exists at this path.")
    try:
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ProviderUnavailable(f"upload of {bucket}/{path} failed: {e}")
    return path


def remove(bucket: str, paths: List[str]) -> None:
    """Remove blobs. Missing blobs are ignored.

    Every path is attempted. If any removal fails, ``ProviderUnavailable`` is
    raised with the paths still present under ``partial_completion["failed_paths"]``.
    """
    failed = []
    for path in paths:
        full = _blob_path(bucket, path)
        try:
            if os.path.exists(full):
                os.remove(full)
        except OSError as e:
            logger.warning("Removal of %s/%s failed: %s", bucket, path, e)
            failed.append(path)
    if failed:
        raise ProviderUnavailable(
            f"removal of {len(failed)} blob(s) in {bucket} failed",
            partial_completion={"failed_paths": failed},
        )


def public_url(bucket: str, path: str) -> str:
    return f"{settings.PUBLIC_BLOB_URL.rstrip('/')}/{bucket}/{path}"


def flag_orphans(bucket: str, paths: List[str], reason: str) -> None:
    """Record blobs that no metadata row points to."""
    if not paths:
        return
    logger.warning("Flagging %d orphaned blob(s) in %s for cleanup: %s", len(paths), bucket, reason)
    try:
        for path in paths:
            store.insert("orphaned_blobs", {"bucket": bucket, "path": path, "reason": reason})
    except ProviderUnavailable:
        # The paths are still in the log line above.
        logger.exception("Could not record orphaned blobs in %s", bucket)
