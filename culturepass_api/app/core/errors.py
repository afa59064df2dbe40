"""
Domain error taxonomy.

Services raise subclasses of :class:`DomainError`; the exception
handlers installed in ``main.py`` turn them into JSON bodies of the
form ``{"error": message, "code": code, "kind": kind}`` with the HTTP
status attached to the error kind.  ``ErrorKind`` is also used by
``culturepass_client`` to classify failed responses, so clients never
have to inspect message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Structured failure categories shared by the API and its clients."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]

    @classmethod
    def from_status(cls, status_code: Optional[int]) -> "ErrorKind":
        """Best‑effort mapping for responses that carry no ``kind`` field."""
        for kind, status in _STATUS_BY_KIND.items():
            if status == status_code:
                return kind
        if status_code is not None and 400 <= status_code < 500:
            return cls.VALIDATION
        return cls.INTERNAL


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class DomainError(Exception):
    """Base error with a kind, a stable machine code and a user‑safe message."""

    kind: ErrorKind = ErrorKind.INTERNAL
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "kind": self.kind.value}


# -- validation (400) ------------------------------------------------------

class ValidationError(DomainError):
    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class InvalidStatusError(ValidationError):
    code = "INVALID_STATUS"
    default_message = "Status must be one of: pending, active, rejected"


class InvalidEntityKindError(ValidationError):
    code = "INVALID_TYPE"
    default_message = "Invalid type"


class InvalidResetTokenError(ValidationError):
    code = "INVALID_RESET_TOKEN"
    default_message = "This reset link has expired or already been used"


# -- authentication (401) --------------------------------------------------

class AuthenticationError(DomainError):
    kind = ErrorKind.AUTHENTICATION
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Login required"


class UnauthenticatedError(AuthenticationError):
    pass


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class FederatedTokenError(AuthenticationError):
    code = "INVALID_FEDERATED_TOKEN"
    default_message = "Invalid identity provider token"


# -- authorization (403) ---------------------------------------------------

class ForbiddenError(DomainError):
    kind = ErrorKind.AUTHORIZATION
    code = "FORBIDDEN"
    default_message = "Admin access required"


# -- not found (404) -------------------------------------------------------

class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"

    def __init__(self, entity: Optional[str] = None, identifier: Optional[str] = None) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found" if entity else None)


# -- conflict (409) --------------------------------------------------------

class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class UsernameTakenError(ConflictError):
    code = "USERNAME_TAKEN"
    default_message = "Username already taken"


class AlreadyMemberError(ConflictError):
    code = "ALREADY_MEMBER"
    default_message = "Already a member of this organisation"


class DuplicateCodeError(ConflictError):
    code = "DUPLICATE_CPID"
    default_message = "Identifier code already assigned"


class SoldOutError(ConflictError):
    code = "SOLD_OUT"
    default_message = "Not enough tickets available"


class CapacityBelowSoldError(ConflictError):
    code = "CAPACITY_BELOW_SOLD"
    default_message = "Tickets available cannot be lower than tickets already sold"
