from pydantic import BaseModel, field_validator
from email_validator import validate_email, EmailNotValidError
import re
from typing import Optional

PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 \-]{5,18}[0-9]$')


def normalize_identifier(value: str) -> str:
    """Identifiers are email addresses or phone numbers."""
    value = (value or "").strip()
    if not value:
        raise ValueError('Identifier is required')
    if "@" in value:
        try:
            return validate_email(value, check_deliverability=False).normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f'Invalid email address: {e}')
    if not PHONE_PATTERN.match(value):
        raise ValueError('Identifier must be an email address or a phone number')
    return re.sub(r'[ \-]', '', value)


# APPLICATION IDENTITY (profile row + derived flags)
class Identity(BaseModel):
    id: str
    identifier: str
    is_admin: bool = False
    is_banned: bool = False
    is_verified: bool = False
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    avatar_url: Optional[str] = None


# PROVIDER SESSION (what's embedded in the access token)
class Session(BaseModel):
    user_id: str
    identifier: str
    token_id: str
    expires_at: int


# SIGNUP CONTRACT
class SignupRequest(BaseModel):
    identifier: str
    password: str

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, v):
        return normalize_identifier(v)

    # PASSWORD VALIDATION PROCESS
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return validate_password_strength(v)


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not any(c.isalpha() for c in v):
        raise ValueError('Password must contain at least one letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one digit')
    if len(v) > 128:
        raise ValueError('Password cannot exceed 128 characters')
    return v


class SignupResponse(BaseModel):
    identifier: str
    status: str = "pending_verification"


class VerifyRequest(BaseModel):
    identifier: str
    verification_code: str

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, v):
        return normalize_identifier(v)


# TOKEN RESPONSE CONTRACT
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PasswordResetRequest(BaseModel):
    identifier: str


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        return validate_password_strength(v)
