from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CMSError(Exception):
    """Base class for failures of a whole CMS fetch."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(CMSError):
    """Network or HTTP failure, optionally with the server-supplied message."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class SchemaError(CMSError):
    """Envelope without `data`, or a page where every record was rejected."""


class NotFoundError(CMSError):
    """No record matched a detail lookup."""


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    SCHEMA = "schema"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


_KINDS = (
    (NotFoundError, ErrorKind.NOT_FOUND),
    (SchemaError, ErrorKind.SCHEMA),
    (TransportError, ErrorKind.TRANSPORT),
)


@dataclass(frozen=True)
class ErrorInfo:
    kind: ErrorKind
    message: str
    status: int | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> ErrorInfo:
        """Map a failed fetch onto the error taxonomy; non-CMS errors are INTERNAL."""
        if not isinstance(exc, CMSError):
            return cls(ErrorKind.INTERNAL, str(exc) or type(exc).__name__)
        for exc_type, kind in _KINDS:
            if isinstance(exc, exc_type):
                return cls(kind, exc.message, getattr(exc, "status", None))
        return cls(ErrorKind.TRANSPORT, exc.message)
