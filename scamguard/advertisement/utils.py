"""
The advertisement banner configuration.

There is exactly one configuration row, stored under ``ADVERTISEMENT_ID``.
An enabled banner must have both an image and a target URL; this is checked
before any upload or write.
"""

import os, uuid, logging
from typing import Optional
from urllib.parse import urlparse
from scamguard.advertisement import schemas
from scamguard.authentication.schemas import Identity
from scamguard.core.config import settings
from scamguard.core.errors import ProviderUnavailable, ValidationFailed
from scamguard.policy import rules
from scamguard.policy.schemas import Action
from scamguard.storage import blobs, utils as store

logger = logging.getLogger(__name__)

ADVERTISEMENT = "advertisement"
ADVERTISEMENT_ID = 1


def _stored_image_path() -> Optional[str]:
    row = store.get(ADVERTISEMENT, ADVERTISEMENT_ID)
    return row.get("image_path") if row else None


def get_config() -> schemas.AdvertisementConfig:
    row = store.get(ADVERTISEMENT, ADVERTISEMENT_ID)
    if not row:
        return schemas.AdvertisementConfig()
    return schemas.AdvertisementConfig(
        is_enabled=row["is_enabled"],
        image_url=blobs.public_url(blobs.ADVERTISEMENT_BUCKET, row["image_path"]) if row.get("image_path") else None,
        target_url=row.get("target_url"),
    )


def _validate_target_url(target_url: Optional[str]) -> Optional[str]:
    if target_url is None or not target_url.strip():
        return None
    target_url = target_url.strip()
    parsed = urlparse(target_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationFailed("Target URL must be an http(s) URL.")
    return target_url


def save_config(
    identity: Optional[Identity],
    is_enabled: bool,
    target_url: Optional[str] = None,
    image_filename: Optional[str] = None,
    image_data: Optional[bytes] = None,
) -> schemas.AdvertisementConfig:
    """Replace the banner configuration (admin only)."""
    rules.enforce(rules.authorize(identity, Action.MANAGE_ADVERTISEMENT), Action.MANAGE_ADVERTISEMENT)

    current_path = _stored_image_path()
    target_url = _validate_target_url(target_url)
    has_new_image = bool(image_data)
    if is_enabled and not (target_url and (has_new_image or current_path)):
        raise ValidationFailed("An enabled advertisement needs both an image and a target URL.")
    if has_new_image and len(image_data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationFailed("Advertisement image is too large.")

    image_path = current_path
    if has_new_image:
        extension = os.path.splitext(image_filename or "")[1].lower()[:10]
        image_path = blobs.upload(blobs.ADVERTISEMENT_BUCKET, f"{uuid.uuid4().hex}{extension}", image_data)

    row = {"is_enabled": is_enabled, "image_path": image_path, "target_url": target_url}
    try:
        if store.update(ADVERTISEMENT, ADVERTISEMENT_ID, row) is None:
            store.insert(ADVERTISEMENT, row, row_id=ADVERTISEMENT_ID)
    except ProviderUnavailable as e:
        orphaned = [image_path] if has_new_image else []
        blobs.flag_orphans(blobs.ADVERTISEMENT_BUCKET, orphaned, "advertisement config not saved")
        raise ProviderUnavailable(
            f"advertisement save failed: {e.reason}",
            partial_completion={"config_saved": False, "orphaned_blobs": orphaned},
        )

    if has_new_image and current_path and current_path != image_path:
        try:
            blobs.remove(blobs.ADVERTISEMENT_BUCKET, [current_path])
        except ProviderUnavailable:
            blobs.flag_orphans(blobs.ADVERTISEMENT_BUCKET, [current_path], "replaced advertisement image")

    logger.info("Advertisement config saved by %s (enabled=%s)", identity.id, is_enabled)
    return get_config()
