"""
Error taxonomy shared by the import parser, the valuation scheduler and
the external collaborators.

Every failure the system knows how to explain is a ``KnownError``:

- ImportFormatError: the uploaded export has the wrong shape
- FieldValueError: one field of one line failed validation
- CardParsingError: a set code or language code is not acceptable
- RepositoryError: the backing store failed
- ExternalServiceError: a third-party HTTP call failed

The HTTP layer renders any ``KnownError`` through ``to_detail()``; nothing
in the core retries.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    WRONG_FORMAT = "wrong_format"
    INVALID_VALUE = "invalid_value"

    # Resource failures
    NOT_FOUND = "not_found"

    # Collaborator failures
    REPOSITORY_ERROR = "repository_error"
    EXTERNAL_API_ERROR = "external_api_error"


class FailureDetail(BaseModel):
    """Serializable description of a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(kind=self.kind, message=self.message, detail=self.detail)


# =============================================================================
# IMPORT ERRORS
# =============================================================================


class ImportFormatError(KnownError):
    """The export as a whole does not have the expected shape."""

    def __init__(self, message: str):
        super().__init__(kind=FailureKind.WRONG_FORMAT, message=message)


class FieldValueError(KnownError):
    """A single field of a data line failed type or range validation."""

    def __init__(self, line: int, field: str, value: str):
        self.line = line
        self.field = field
        self.value = value
        super().__init__(
            kind=FailureKind.INVALID_VALUE,
            message=f"Line {line}: invalid {field} '{value}'",
            detail=f"line={line}, field={field}",
        )


class CardParsingError(KnownError):
    """A card attribute could not be built from its text form."""

    def __init__(self, value: str, message: str):
        self.value = value
        super().__init__(kind=FailureKind.INVALID_VALUE, message=message)


class InvalidSetCodeError(CardParsingError):
    def __init__(self, value: str):
        super().__init__(
            value,
            f"set code must be exactly 3 uppercase alphanumeric characters (got {value})",
        )


class InvalidLanguageCodeError(CardParsingError):
    def __init__(self, value: str):
        super().__init__(value, f"invalid language code: {value}")


# =============================================================================
# COLLABORATOR ERRORS
# =============================================================================


class RepositoryError(KnownError):
    """The backing store rejected or failed an operation."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.REPOSITORY_ERROR,
            message=message,
            detail=detail,
            status_code=503,
        )


class ExternalServiceError(KnownError):
    """A third-party HTTP call failed or returned an unusable payload."""

    def __init__(self, service: str, message: str, detail: str | None = None):
        self.service = service
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=f"{service}: {message}",
            detail=detail,
            status_code=502,
        )
