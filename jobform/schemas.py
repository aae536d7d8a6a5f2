from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from .domain import FieldPhase


class JobApplicationRecord(BaseModel):
    """A (possibly incomplete) job application as edited in a form.

    Attributes are snake_case; the camelCase aliases are the draft and
    submission wire shape. Content rules are applied by the validator, not
    here, so a half-filled draft still loads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    role_title: str = ""
    company_name: str = ""
    role_type: str = ""
    location: str = ""
    salary: str = ""
    date_applied: str = ""
    advert_link: str = ""
    cv_used: str = ""
    response_date: str = ""
    status: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    is_linked_in_connection: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_default(cls, value: Any, info) -> Any:
        if value is None:
            return False if info.field_name == "is_linked_in_connection" else ""
        return value

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# wire name -> attribute name, in form order
FIELD_ATTRS: Dict[str, str] = {
    (field.alias or name): name for name, field in JobApplicationRecord.model_fields.items()
}
FIELD_NAMES: List[str] = list(FIELD_ATTRS)
TEXT_FIELDS: List[str] = [
    wire for wire, attr in FIELD_ATTRS.items()
    if JobApplicationRecord.model_fields[attr].annotation is str
]


def resolve_field(name: str) -> Optional[str]:
    """Return the wire name for either a wire or attribute field name."""
    if name in FIELD_ATTRS:
        return name
    for wire, attr in FIELD_ATTRS.items():
        if attr == name:
            return wire
    return None


def to_wire_dict(candidate: JobApplicationRecord | Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a record or a loosely-keyed mapping into wire-named values.

    Missing keys take the record defaults; unknown keys are dropped.
    """
    if isinstance(candidate, JobApplicationRecord):
        return candidate.to_wire()
    data = JobApplicationRecord().to_wire()
    for key, value in candidate.items():
        wire = resolve_field(key)
        if wire is not None:
            data[wire] = value
    return data


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    message: str


class ValidationResult(BaseModel):
    ok: bool
    value: Optional[JobApplicationRecord] = None
    issues: List[ValidationIssue] = Field(default_factory=list)

    def issues_for(self, path: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.path == path]

    def first_message(self, path: str) -> Optional[str]:
        found = self.issues_for(path)
        return found[0].message if found else None


class FieldState(BaseModel):
    """What a presentation layer needs to render one form control."""

    value: Any
    error_message: Optional[str] = None
    touched: bool = False
    phase: FieldPhase = FieldPhase.untouched

    @computed_field
    @property
    def invalid(self) -> bool:
        return self.error_message is not None
