"""
Identity provider primitives: password hashing, signed session tokens,
token revocation and session-change notifications, plus the FastAPI
dependencies that turn a bearer token into the caller's Identity.
"""

import time, uuid, logging
from typing import Callable, List, Optional
import jwt
from jwt import InvalidTokenError
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from scamguard.authentication import reconciler
from scamguard.authentication.schemas import Identity, Session
from scamguard.core.config import settings
from scamguard.core.errors import ProviderUnavailable
from scamguard.storage import utils as store

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN = "access"
RESET_TOKEN = "reset"
REVOKED_TOKENS = "revoked_tokens"

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

PASSWORD_HASHER = PasswordHasher()

bearer_scheme = HTTPBearer(auto_error=False)

SessionListener = Callable[[str, Optional[Session]], None]
_session_listeners: List[SessionListener] = []


# ────────────────────────────────
# Passwords
# ────────────────────────────────
def hash_password(password: str) -> str:
    return PASSWORD_HASHER.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return PASSWORD_HASHER.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


# ────────────────────────────────
# Tokens
# ────────────────────────────────
def _encode(payload: dict, minutes: int) -> str:
    now = int(time.time())
    body = {"iat": now, "exp": now + minutes * 60, "jti": str(uuid.uuid4())}
    body.update(payload)
    return jwt.encode(body, settings.SECRET_KEY, algorithm=ALGORITHM)


def _decode(token: str, token_type: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat", "sub", "jti"]},
        )
    except InvalidTokenError:
        return None
    if payload.get("typ") != token_type:
        return None
    if is_token_revoked(payload["jti"]):
        return None
    return payload


def create_access_token(user_id: str, identifier: str) -> str:
    return _encode(
        {"sub": user_id, "identifier": identifier, "typ": ACCESS_TOKEN},
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_reset_token(user_id: str) -> str:
    return _encode({"sub": user_id, "typ": RESET_TOKEN}, settings.RESET_TOKEN_EXPIRE_MINUTES)


def verify_reset_token(token: str) -> Optional[str]:
    """Return the user id for a valid reset token and burn it."""
    payload = _decode(token, RESET_TOKEN)
    if payload is None:
        return None
    revoke_token_id(payload["jti"])
    return payload["sub"]


def get_session(token: str) -> Optional[Session]:
    """Decode an access token. Invalid, expired and revoked tokens yield None."""
    payload = _decode(token, ACCESS_TOKEN)
    if payload is None:
        return None
    return Session(
        user_id=payload["sub"],
        identifier=payload.get("identifier", ""),
        token_id=payload["jti"],
        expires_at=payload["exp"],
    )


def is_token_revoked(token_id: str) -> bool:
    return store.get(REVOKED_TOKENS, token_id) is not None


def revoke_token_id(token_id: str) -> None:
    if not is_token_revoked(token_id):
        store.insert(REVOKED_TOKENS, {}, row_id=token_id)


# ────────────────────────────────
# Session change notifications
# ────────────────────────────────
def on_session_change(callback: SessionListener) -> Callable[[], None]:
    """Register ``callback(event, session)``; returns an unsubscribe function."""
    _session_listeners.append(callback)

    def unsubscribe():
        if callback in _session_listeners:
            _session_listeners.remove(callback)

    return unsubscribe


def notify_session_change(event: str, session: Optional[Session]) -> None:
    for callback in list(_session_listeners):
        try:
            callback(event, session)
        except Exception:
            logger.exception("Session listener failed for %s", event)


# ────────────────────────────────
# FastAPI dependencies
# ────────────────────────────────
def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Session]:
    """Session for the bearer token. An unreadable revocation list means no session."""
    if credentials is None:
        return None
    try:
        return get_session(credentials.credentials)
    except ProviderUnavailable as e:
        logger.warning("Token revocation check failed, treating caller as anonymous: %s", e.reason)
        return None


def get_current_identity(session: Optional[Session] = Depends(get_current_session)) -> Optional[Identity]:
    """Resolve the caller. Anonymous callers resolve to None."""
    return reconciler.reconcile(session)
