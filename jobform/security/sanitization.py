from __future__ import annotations
import logging
import warnings
from typing import Any, Dict, Mapping

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, NavigableString

from ..schemas import JobApplicationRecord

logger = logging.getLogger(__name__)

# Elements whose text is code or hidden content rather than something the user typed
DROP_CONTENT_TAGS = (
    "script",
    "style",
    "template",
    "iframe",
    "noscript",
    "object",
    "embed",
)


def _strip_markup(text: str) -> str:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(text, "html.parser")
    for tag in soup.find_all(list(DROP_CONTENT_TAGS)):
        tag.decompose()
    # Exact type check skips comments, doctypes and processing instructions
    return "".join(
        node.output_ready(formatter="minimal")
        for node in soup.descendants
        if type(node) is NavigableString
    )


def sanitize(value: Any) -> Any:
    """Strip every tag, attribute and tag delimiter from a string.

    Text without a ``<`` holds no markup and is kept as typed, entities
    included. Otherwise the surviving text is re-emitted with ``&``, ``<``
    and ``>`` escaped, so the result never contains a raw delimiter and
    ``sanitize(sanitize(x)) == sanitize(x)``. Non-string values are
    returned unchanged.
    """
    if not isinstance(value, str):
        return value
    if "<" not in value:
        return value.replace(">", "&gt;")
    cleaned = _strip_markup(value)
    logger.debug("Stripped markup from input (%d -> %d chars)", len(value), len(cleaned))
    return cleaned


def sanitize_record(
    record: JobApplicationRecord | Mapping[str, Any],
) -> JobApplicationRecord | Dict[str, Any]:
    """Sanitize the top-level string values of a record.

    Nested lists and mappings are passed through as-is.
    """
    if isinstance(record, JobApplicationRecord):
        updates = {
            name: sanitize(value)
            for name, value in record
            if isinstance(value, str)
        }
        return record.model_copy(update=updates)
    return {key: sanitize(value) for key, value in record.items()}
