from __future__ import annotations
import datetime as dt
import re
from typing import Optional
import dateparser

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: Optional[str]) -> Optional[dt.date]:
    """Parse a strict YYYY-MM-DD date, returning None when it is not one."""
    if not value or not _ISO_DATE_RE.match(value.strip()):
        return None
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        return None


def normalize_date_input(value: Optional[str]) -> str:
    """Rewrite a typed date such as "15/01/2024" or "yesterday" as YYYY-MM-DD.

    ISO dates and text that does not read as a date are returned unchanged,
    so the validation rules still see what the user actually typed.
    """
    if not value or not value.strip():
        return value or ""
    if parse_iso_date(value) is not None:
        return value.strip()
    parsed = dateparser.parse(value, settings={"DATE_ORDER": "DMY"})
    return parsed.date().isoformat() if parsed else value
