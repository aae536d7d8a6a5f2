from __future__ import annotations


class JobFormError(Exception):
    """Base class for errors raised by jobform."""


class StorageError(JobFormError):
    """A draft could not be read, written or removed."""


class SubmissionError(JobFormError):
    """The submission boundary rejected or failed to accept a record."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnknownFieldError(JobFormError, KeyError):
    def __init__(self, field: str):
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown field: {self.field}"
