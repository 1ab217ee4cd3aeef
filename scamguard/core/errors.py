"""
Error taxonomy shared by every feature package.

Policy denials and validation failures are raised as these exceptions at the
point of decision, before anything is written. The handler installed by
``install_error_handlers`` renders them with generic messages so a denial
never tells the caller which rule fired.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class ScamGuardError(Exception):
    """Base class for application errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "Request failed."

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or self.detail)
        self.reason = reason

    def public_body(self) -> dict:
        return {"detail": self.detail}


class Unauthenticated(ScamGuardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Authentication required."


class Forbidden(ScamGuardError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Not permitted."


class NotFound(ScamGuardError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found."


class ValidationFailed(ScamGuardError):
    """Malformed caller input. The message is shown to the caller."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    detail = "Validation failed."

    def public_body(self) -> dict:
        return {"detail": self.reason or self.detail}


class ProviderUnavailable(ScamGuardError):
    """A store or identity collaborator failed.

    ``partial_completion`` describes whatever a multi-step operation left
    behind before the failure (for example orphaned blob paths).
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Service temporarily unavailable."

    def __init__(self, reason: Optional[str] = None, partial_completion: Optional[dict] = None) -> None:
        super().__init__(reason)
        self.partial_completion = partial_completion

    def public_body(self) -> dict:
        body = {"detail": self.detail}
        if self.partial_completion is not None:
            body["partial_completion"] = self.partial_completion
        return body


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ScamGuardError)
    async def scamguard_error_handler(request: Request, exc: ScamGuardError):
        if isinstance(exc, ProviderUnavailable):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.reason)
        else:
            logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.reason)
        return JSONResponse(status_code=exc.status_code, content=exc.public_body())

    @app.exception_handler(PydanticValidationError)
    async def model_validation_handler(request: Request, exc: PydanticValidationError):
        messages = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, content={"detail": "; ".join(messages)})
