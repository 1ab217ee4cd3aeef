"""
Account records of the identity provider (credentials, verification state)
and the signup / verify / login / logout / password reset flows.

Accounts are separate from profiles: an account exists from signup, its
profile only from successful verification.
"""

import time, secrets, logging
from typing import Optional
from scamguard.authentication import schemas, security
from scamguard.core.config import settings
from scamguard.core.errors import Forbidden, NotFound, ProviderUnavailable, Unauthenticated, ValidationFailed
from scamguard.notifications.utils import send_email
from scamguard.storage import utils as store
from scamguard.users import utils as user_utils

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"


def get_account_by_identifier(identifier: str) -> Optional[dict]:
    rows = store.select(ACCOUNTS, lambda r: r["identifier"] == identifier)
    return rows[0] if rows else None


def _is_designated_admin(identifier: str) -> bool:
    if not settings.ADMIN_IDENTIFIER:
        return False
    try:
        return schemas.normalize_identifier(settings.ADMIN_IDENTIFIER) == identifier
    except ValueError:
        logger.error("ADMIN_IDENTIFIER %r is not a valid identifier", settings.ADMIN_IDENTIFIER)
        return False


def _new_verification_code() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


def signup(request: schemas.SignupRequest) -> schemas.SignupResponse:
    if get_account_by_identifier(request.identifier):
        raise ValidationFailed("An account with this identifier already exists.")

    code = _new_verification_code()
    store.insert(ACCOUNTS, {
        "identifier": request.identifier,
        "hashed_password": security.hash_password(request.password),
        "is_verified": False,
        "verification_code_hash": security.hash_password(code),
        "verification_expires_at": int(time.time()) + settings.VERIFICATION_CODE_EXPIRE_MINUTES * 60,
    })
    send_email(
        request.identifier,
        f"Verify your {settings.APP_NAME} account",
        f"Your verification code is {code}. It expires in {settings.VERIFICATION_CODE_EXPIRE_MINUTES} minutes.",
    )
    logger.info("Account created for %s, awaiting verification", request.identifier)
    return schemas.SignupResponse(identifier=request.identifier)


def verify(request: schemas.VerifyRequest) -> schemas.Identity:
    """Confirm the signup code, then provision the profile."""
    account = get_account_by_identifier(request.identifier)
    if not account:
        raise ValidationFailed("Invalid or expired verification code.")

    if not account["is_verified"]:
        if account["verification_expires_at"] < time.time():
            raise ValidationFailed("Invalid or expired verification code.")
        if not security.verify_password(request.verification_code, account["verification_code_hash"]):
            raise ValidationFailed("Invalid or expired verification code.")
        store.update(ACCOUNTS, account["id"], {
            "is_verified": True,
            "verification_code_hash": None,
            "verification_expires_at": None,
        })

    profile = user_utils.get_profile(account["id"])
    if profile:
        return profile

    try:
        return user_utils.create_profile(
            account["id"], account["identifier"], is_admin=_is_designated_admin(account["identifier"])
        )
    except ProviderUnavailable as e:
        raise ProviderUnavailable(
            f"profile provisioning failed for {account['id']}: {e.reason}",
            partial_completion={"account_verified": True, "profile_provisioned": False},
        )


def authenticate(identifier: str, password: str) -> dict:
    try:
        identifier = schemas.normalize_identifier(identifier)
    except ValueError:
        raise Unauthenticated("invalid_credentials")
    account = get_account_by_identifier(identifier)
    if not account or not security.verify_password(password, account["hashed_password"]):
        raise Unauthenticated("invalid_credentials")
    if not account["is_verified"]:
        raise Forbidden("account_not_verified")
    return account


def login(identifier: str, password: str) -> schemas.Token:
    account = authenticate(identifier, password)
    token = security.create_access_token(account["id"], account["identifier"])
    security.notify_session_change(security.SIGNED_IN, security.get_session(token))
    return schemas.Token(access_token=token)


def logout(token: str) -> None:
    session = security.get_session(token)
    if session is None:
        raise Unauthenticated("invalid_session")
    security.revoke_token_id(session.token_id)
    security.notify_session_change(security.SIGNED_OUT, session)


def request_password_reset(identifier: str) -> None:
    """Email a reset token if the account exists. Says nothing either way."""
    try:
        identifier = schemas.normalize_identifier(identifier)
    except ValueError:
        return
    account = get_account_by_identifier(identifier)
    if not account:
        logger.info("Password reset requested for unknown identifier")
        return
    reset_token = security.create_reset_token(account["id"])
    send_email(
        account["identifier"],
        f"Reset your {settings.APP_NAME} password",
        f"Use this token to reset your password within {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes: {reset_token}",
    )


def reset_password(request: schemas.PasswordResetConfirm) -> None:
    user_id = security.verify_reset_token(request.token)
    if not user_id:
        raise ValidationFailed("Invalid or expired token.")
    updated = store.update(ACCOUNTS, user_id, {"hashed_password": security.hash_password(request.new_password)})
    if not updated:
        raise NotFound("account_missing")
