from __future__ import annotations
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import Settings, get_settings
from ..errors import SubmissionError
from ..schemas import JobApplicationRecord

logger = logging.getLogger(__name__)

SubmissionBoundary = Callable[[JobApplicationRecord], Awaitable[None]]


class LoggingSubmissionBoundary:
    """Accepts every record and only logs it; stands in for a real endpoint."""

    async def __call__(self, record: JobApplicationRecord) -> None:
        logger.info("Form submitted")
        logger.info(json.dumps(record.to_wire(), ensure_ascii=False))


class HttpSubmissionBoundary:
    """POST the record's JSON to an endpoint; any non-2xx reply is a failure."""

    def __init__(self, url: str, timeout: int = 20, user_agent: str = "jobform/0.1"):
        self.url = url
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def __call__(self, record: JobApplicationRecord) -> None:
        try:
            await asyncio.to_thread(self._post, record.to_wire())
        except requests.RequestException as e:
            raise SubmissionError(f"Could not reach submission endpoint: {e}") from e

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    def _post(self, payload: Dict[str, Any]) -> None:
        resp = requests.post(self.url, json=payload, headers=self.headers, timeout=self.timeout)
        if not resp.ok:
            detail = _error_detail(resp)
            message = f"Submission failed with HTTP {resp.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise SubmissionError(message, status_code=resp.status_code)
        logger.debug("Submitted record to %s (HTTP %s)", self.url, resp.status_code)


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:200]
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return ""


def build_boundary(settings: Settings | None = None) -> SubmissionBoundary:
    settings = settings or get_settings()
    url = (settings.SUBMIT_URL or "").strip()
    if url:
        return HttpSubmissionBoundary(
            url,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            user_agent=settings.USER_AGENT,
        )
    return LoggingSubmissionBoundary()
