"""
Admin user management (role and ban toggles) and self-service profile edits.

There is no hard delete: removing a user bans them, which can be undone.
An admin can never change their own admin or ban flag, so the last admin
cannot lock themselves out.
"""

import os, uuid, logging
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.core.config import settings
from scamguard.core.errors import NotFound, ProviderUnavailable, ValidationFailed
from scamguard.policy import rules
from scamguard.policy.schemas import Action
from scamguard.storage import blobs
from scamguard.users import utils

logger = logging.getLogger(__name__)


def list_users(identity: Optional[Identity]) -> List[Identity]:
    rules.enforce(rules.authorize(identity, Action.LIST_USERS), Action.LIST_USERS)
    return utils.load_profiles()


def _set_flag(user_id: str, action: Action, field: str, value: bool, identity: Optional[Identity]) -> Identity:
    rules.enforce(rules.authorize(identity, action, user_id), action)
    updated = utils.update_profile(user_id, {field: value})
    if not updated:
        raise NotFound("user_missing")
    logger.info("User %s %s set to %s by %s", user_id, field, value, identity.id)
    return updated


def update_role(user_id: str, is_admin: bool, identity: Optional[Identity]) -> Identity:
    return _set_flag(user_id, Action.SET_USER_ROLE, "is_admin", is_admin, identity)


def update_ban_status(user_id: str, is_banned: bool, identity: Optional[Identity]) -> Identity:
    return _set_flag(user_id, Action.SET_USER_BAN, "is_banned", is_banned, identity)


def delete_user(user_id: str, identity: Optional[Identity]) -> Identity:
    """Bans the user. Account deletion is an out-of-band provider operation."""
    return update_ban_status(user_id, True, identity)


def update_my_profile(
    identity: Optional[Identity],
    full_name: Optional[str] = None,
    phone_number: Optional[str] = None,
    avatar_filename: Optional[str] = None,
    avatar_data: Optional[bytes] = None,
) -> Identity:
    """Update the caller's own profile; a new avatar replaces the old blob."""
    rules.enforce(rules.authorize(identity, Action.UPDATE_OWN_PROFILE), Action.UPDATE_OWN_PROFILE)

    changes = {}
    if full_name is not None:
        changes["full_name"] = full_name.strip() or None
    if phone_number is not None:
        changes["phone_number"] = phone_number.strip() or None

    avatar_path = None
    if avatar_data is not None:
        if not avatar_data:
            raise ValidationFailed("Avatar file is empty.")
        if len(avatar_data) > settings.MAX_UPLOAD_BYTES:
            raise ValidationFailed("Avatar file is too large.")
        extension = os.path.splitext(avatar_filename or "")[1].lower()[:10]
        avatar_path = blobs.upload(blobs.AVATAR_BUCKET, f"{identity.id}/{uuid.uuid4().hex}{extension}", avatar_data)
        changes["avatar_url"] = blobs.public_url(blobs.AVATAR_BUCKET, avatar_path)

    if not changes:
        return identity

    try:
        updated = utils.update_profile(identity.id, changes)
    except ProviderUnavailable as e:
        if avatar_path:
            blobs.flag_orphans(blobs.AVATAR_BUCKET, [avatar_path], "profile update failed")
        raise ProviderUnavailable(
            f"profile update failed: {e.reason}",
            partial_completion={"profile_updated": False, "orphaned_blobs": [avatar_path] if avatar_path else []},
        )
    if not updated:
        # Degraded identity without a provisioned profile row
        if avatar_path:
            blobs.flag_orphans(blobs.AVATAR_BUCKET, [avatar_path], "profile not provisioned")
        raise NotFound("profile_missing")

    if avatar_path and identity.avatar_url:
        _remove_old_avatar(identity.avatar_url)
    return updated


def _remove_old_avatar(avatar_url: str) -> None:
    prefix = blobs.public_url(blobs.AVATAR_BUCKET, "")
    if not avatar_url.startswith(prefix):
        return
    old_path = avatar_url[len(prefix):]
    try:
        blobs.remove(blobs.AVATAR_BUCKET, [old_path])
    except ProviderUnavailable:
        blobs.flag_orphans(blobs.AVATAR_BUCKET, [old_path], "replaced avatar could not be removed")
