from __future__ import annotations
import asyncio
import logging
from typing import Any, Mapping, Optional

from ..domain import SubmissionState
from ..schemas import JobApplicationRecord, to_wire_dict
from ..security.sanitization import sanitize_record
from .boundary import SubmissionBoundary

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "An error occurred"


class SubmissionController:
    """Drives one record at a time through sanitization to the boundary.

    The latest failure message is retained until ``clear_error`` or the next
    submit. A submit issued while another is in flight is ignored: the
    caller awaits the in-flight call's outcome, and the boundary is not
    called again.
    """

    def __init__(self, boundary: SubmissionBoundary):
        self.boundary = boundary
        self._submitting = False
        self._error: Optional[str] = None
        self._in_flight: Optional[asyncio.Task[JobApplicationRecord]] = None

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def submit_error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> SubmissionState:
        if self._submitting:
            return SubmissionState.submitting
        if self._error is not None:
            return SubmissionState.failed
        return SubmissionState.idle

    def clear_error(self) -> None:
        self._error = None

    async def submit(self, record: JobApplicationRecord | Mapping[str, Any]) -> JobApplicationRecord:
        if self._in_flight is not None:
            logger.info("Submission already in progress; waiting for it instead")
            return await asyncio.shield(self._in_flight)

        self._submitting = True
        self._error = None
        self._in_flight = asyncio.ensure_future(self._run(record))
        return await asyncio.shield(self._in_flight)

    async def _run(self, record: JobApplicationRecord | Mapping[str, Any]) -> JobApplicationRecord:
        try:
            if not isinstance(record, JobApplicationRecord):
                record = JobApplicationRecord.model_validate(to_wire_dict(record))
            sanitized = sanitize_record(record)
            await self.boundary(sanitized)
        except Exception as e:
            # An exception raised without arguments carries no message of its own
            self._error = str(e) if e.args else FALLBACK_ERROR_MESSAGE
            logger.warning("Submission failed: %s", self._error)
            raise
        finally:
            self._submitting = False
            self._in_flight = None
        return sanitized
