from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import HttpUrl, TypeAdapter, ValidationError

from ..schemas import (
    JobApplicationRecord,
    ValidationIssue,
    ValidationResult,
    resolve_field,
    to_wire_dict,
)
from ..utils.dates import parse_iso_date

logger = logging.getLogger(__name__)

PROTOCOL_MESSAGE = "Only HTTP and HTTPS protocols are allowed"
INVALID_URL_MESSAGE = "Must be a valid URL"
INVALID_EMAIL_MESSAGE = "Must be a valid email"
INVALID_PHONE_MESSAGE = "Invalid phone number format"
INVALID_DATE_MESSAGE = "Invalid date"
RESPONSE_BEFORE_APPLIED_MESSAGE = "Response date cannot be before application date"
SALARY_BLANK_MESSAGE = "Salary cannot be empty"

EMAIL_RE = re.compile(
    r"^(?!\.)(?!.*\.\.)([A-Z0-9_'+\-\.]*)[A-Z0-9_+-]@([A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}$",
    re.IGNORECASE,
)
PHONE_RE = re.compile(r"[0-9 ()+\-]*")
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
# URL parsers drop leading C0 controls/space and any tab or newline before reading the scheme
_URL_IGNORED = "".join(chr(c) for c in range(0x21))
_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class Required:
    field: str
    message: str


@dataclass(frozen=True)
class UrlScheme:
    field: str
    allowed: Tuple[str, ...] = ("http", "https")
    message: str = PROTOCOL_MESSAGE
    invalid_message: str = INVALID_URL_MESSAGE


@dataclass(frozen=True)
class EmailFormat:
    field: str
    message: str = INVALID_EMAIL_MESSAGE


@dataclass(frozen=True)
class Pattern:
    field: str
    pattern: re.Pattern
    message: str


@dataclass(frozen=True)
class IsoDate:
    field: str
    message: str = INVALID_DATE_MESSAGE


@dataclass(frozen=True)
class NotBlank:
    field: str
    message: str


@dataclass(frozen=True)
class DateNotBefore:
    """``field`` may not be earlier than ``other``; failures attach to ``field``."""

    field: str
    other: str
    message: str


Rule = Union[Required, UrlScheme, EmailFormat, Pattern, IsoDate, NotBlank, DateNotBefore]


def _text(data: Mapping[str, Any], field: str) -> str:
    value = data.get(field)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@singledispatch
def check(rule: Any, data: Mapping[str, Any]) -> Optional[str]:
    """Evaluate one rule against wire-keyed data; return a message on failure."""
    raise TypeError(f"Unsupported rule type: {type(rule).__name__}")


@check.register
def _(rule: Required, data: Mapping[str, Any]) -> Optional[str]:
    return rule.message if not _text(data, rule.field).strip() else None


@check.register
def _(rule: UrlScheme, data: Mapping[str, Any]) -> Optional[str]:
    raw = _text(data, rule.field)
    value = raw.strip(_URL_IGNORED)
    if not value:
        return rule.invalid_message
    match = _SCHEME_RE.match(re.sub(r"[\t\n\r]", "", value))
    if match is None:
        return rule.invalid_message
    if match.group(1).lower() not in rule.allowed:
        return rule.message
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        return rule.invalid_message
    return None


@check.register
def _(rule: EmailFormat, data: Mapping[str, Any]) -> Optional[str]:
    value = _text(data, rule.field)
    if value == "":
        return None
    return None if EMAIL_RE.match(value) else rule.message


@check.register
def _(rule: Pattern, data: Mapping[str, Any]) -> Optional[str]:
    value = _text(data, rule.field)
    if value == "":
        return None
    return None if rule.pattern.fullmatch(value) else rule.message


@check.register
def _(rule: IsoDate, data: Mapping[str, Any]) -> Optional[str]:
    value = _text(data, rule.field)
    if value == "":
        return None
    return None if parse_iso_date(value) is not None else rule.message


@check.register
def _(rule: NotBlank, data: Mapping[str, Any]) -> Optional[str]:
    value = _text(data, rule.field)
    if value == "":
        return None
    return rule.message if not value.strip() else None


@check.register
def _(rule: DateNotBefore, data: Mapping[str, Any]) -> Optional[str]:
    later = _text(data, rule.field)
    earlier = _text(data, rule.other)
    if not later or not earlier:
        return None
    later_date = parse_iso_date(later)
    earlier_date = parse_iso_date(earlier)
    # Dates that cannot be compared never satisfy the ordering
    if later_date is None or earlier_date is None:
        return rule.message
    return rule.message if later_date < earlier_date else None


def build_rules(strict_optional_text: bool = False) -> Tuple[Rule, ...]:
    rules: List[Rule] = [
        Required("roleTitle", "Role is required"),
        Required("companyName", "Company name is required"),
        Required("roleType", "Role type is required"),
        Required("location", "Location is required"),
        Required("dateApplied", "Date applied is required"),
        UrlScheme("advertLink"),
        IsoDate("responseDate"),
        Required("status", "Status is required"),
        EmailFormat("contactEmail"),
        Pattern("contactPhone", PHONE_RE, INVALID_PHONE_MESSAGE),
    ]
    if strict_optional_text:
        rules.append(NotBlank("salary", SALARY_BLANK_MESSAGE))
    rules.append(DateNotBefore("responseDate", "dateApplied", RESPONSE_BEFORE_APPLIED_MESSAGE))
    return tuple(rules)


DEFAULT_RULES: Tuple[Rule, ...] = build_rules()


def run_rules(rules: Sequence[Rule], data: Mapping[str, Any]) -> List[ValidationIssue]:
    """Evaluate rules in order, keeping only the first failure per path."""
    issues: List[ValidationIssue] = []
    failed: set[str] = set()
    for rule in rules:
        if rule.field in failed:
            continue
        message = check(rule, data)
        if message is not None:
            failed.add(rule.field)
            issues.append(ValidationIssue(path=rule.field, message=message))
    return issues


def _type_issues(exc: ValidationError) -> List[ValidationIssue]:
    issues = []
    for err in exc.errors():
        loc = err.get("loc") or ("",)
        issues.append(ValidationIssue(path=str(loc[0]), message=err.get("msg", "Invalid value")))
    return issues


def validate(
    candidate: JobApplicationRecord | Mapping[str, Any],
    rules: Optional[Sequence[Rule]] = None,
) -> ValidationResult:
    data: Dict[str, Any] = to_wire_dict(candidate)
    issues = run_rules(DEFAULT_RULES if rules is None else rules, data)
    if issues:
        logger.debug("Validation failed for %s", ", ".join(i.path for i in issues))
        return ValidationResult(ok=False, issues=issues)
    try:
        value = JobApplicationRecord.model_validate(data)
    except ValidationError as exc:
        return ValidationResult(ok=False, issues=_type_issues(exc))
    return ValidationResult(ok=True, value=value)


def validate_field(
    candidate: JobApplicationRecord | Mapping[str, Any],
    field: str,
    rules: Optional[Sequence[Rule]] = None,
) -> List[ValidationIssue]:
    path = resolve_field(field) or field
    return validate(candidate, rules).issues_for(path)
