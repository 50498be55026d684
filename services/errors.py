"""Error taxonomy shared by the service layer and the HTTP surface."""
from __future__ import annotations


class ApplicantError(Exception):
    """Base class for client-facing applicant errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class FieldError(ApplicantError):
    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}

    @property
    def code(self) -> str:
        return type(self).__name__


class MissingField(FieldError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"{field} is required")


class InvalidFormat(FieldError):
    pass


class OutOfRange(FieldError):
    pass


class ValidationError(ApplicantError):
    """One or more field rules were violated."""

    status_code = 400

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("; ".join(error.message for error in errors))
        self.errors = errors


class DuplicateApplication(ApplicantError):
    status_code = 409
    message = "You have already applied for this position"


class IdentifierCollision(ApplicantError):
    """The generated identifier is already taken; the caller should regenerate."""

    def __init__(self, anonymous_id: str) -> None:
        super().__init__()
        self.anonymous_id = anonymous_id


class NotFound(ApplicantError):
    status_code = 404
    message = "Applicant not found"


class InvalidStatus(ApplicantError):
    status_code = 400
    message = "Valid status is required: pending, reviewed, contacted, rejected"
