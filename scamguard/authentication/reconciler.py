"""
Turns a provider session into the application Identity.

A session can exist before its profile row does (the profile is provisioned
after verification) and the profile store can be unreachable. In both cases
the caller keeps their session but gets a degraded identity: no admin flag,
no ban flag, identifier taken from the session.
"""

import logging
from typing import Optional
from scamguard.authentication.schemas import Identity, Session
from scamguard.core.errors import ProviderUnavailable
from scamguard.users import utils as user_utils

logger = logging.getLogger(__name__)


def degraded_identity(session: Session) -> Identity:
    return Identity(
        id=session.user_id,
        identifier=session.identifier or "user",
        is_admin=False,
        is_banned=False,
        is_verified=False,
    )


def reconcile(session: Optional[Session]) -> Optional[Identity]:
    if session is None:
        return None

    try:
        profile = user_utils.get_profile(session.user_id)
    except ProviderUnavailable as e:
        logger.warning("Profile fetch failed for user %s, using degraded identity: %s", session.user_id, e)
        return degraded_identity(session)

    if profile is None:
        logger.warning("No profile found for user %s, using degraded identity (provisioning lag?)", session.user_id)
        return degraded_identity(session)

    return profile


def is_authenticated(identity: Optional[Identity]) -> bool:
    """Banned identities count as anonymous."""
    return identity is not None and not identity.is_banned


def is_admin(identity: Optional[Identity]) -> bool:
    return is_authenticated(identity) and identity.is_admin
