from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Sequence

from .config import Settings, get_settings
from .errors import UnknownFieldError
from .schemas import (
    FIELD_ATTRS,
    FIELD_NAMES,
    FieldState,
    JobApplicationRecord,
    ValidationResult,
    resolve_field,
)
from .storage.draft_storage import DraftStore, FileKeyValueStore
from .submission.boundary import build_boundary
from .submission.controller import SubmissionController
from .validation.phases import FieldPhaseTracker
from .validation.rules import DEFAULT_RULES, Rule, build_rules, validate

logger = logging.getLogger(__name__)


class FormSession:
    """One user's pass over the job application form.

    Edits are applied, validated and autosaved in the order they arrive.
    Submission only reaches the controller once the full rule set passes;
    a successful submit clears the draft and starts a fresh record.
    """

    def __init__(
        self,
        draft_store: DraftStore,
        controller: SubmissionController,
        rules: Optional[Sequence[Rule]] = None,
    ):
        self.draft_store = draft_store
        self.controller = controller
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.record = JobApplicationRecord()
        self.phases = FieldPhaseTracker(FIELD_NAMES)
        self._edited: set[str] = set()
        self._errors: Dict[str, str] = {}

    @property
    def touched(self) -> bool:
        return bool(self._edited)

    @property
    def is_submitting(self) -> bool:
        return self.controller.is_submitting

    @property
    def submit_error(self) -> Optional[str]:
        return self.controller.submit_error

    def clear_error(self) -> None:
        self.controller.clear_error()

    def start(self) -> bool:
        """Restore a saved draft if there is one. The draft is not validated here."""
        draft = self.draft_store.load()
        if draft is None:
            return False
        self.record = draft
        logger.info("Restored saved draft")
        return True

    def edit(self, field: str, value: Any) -> FieldState:
        wire = self._resolve(field)
        self.record = self.record.model_copy(update={FIELD_ATTRS[wire]: value})
        self._edited.add(wire)
        if self.phases.on_change(wire):
            self._revalidate(wire)
        if self.touched:
            self.changed(self.record)
        return self.field_state(wire)

    def blur(self, field: str) -> FieldState:
        wire = self._resolve(field)
        if self.phases.on_blur(wire):
            self._revalidate(wire)
        return self.field_state(wire)

    def changed(self, record: JobApplicationRecord) -> None:
        self.draft_store.save(record)

    async def submit(self) -> ValidationResult:
        """Validate everything, then hand the record to the controller.

        Returns the failing result without submitting when any rule fails.
        Submission errors propagate after being retained on the controller;
        the record and draft are left as they were.
        """
        self.phases.on_submit()
        result = validate(self.record, self.rules)
        self._errors = {}
        for issue in result.issues:
            self._errors.setdefault(issue.path, issue.message)
        if not result.ok:
            logger.info("Submit blocked by %d validation issue(s)", len(result.issues))
            return result

        sanitized = await self.controller.submit(result.value)
        self.draft_store.clear()
        self.reset()
        return ValidationResult(ok=True, value=sanitized)

    def reset(self) -> None:
        self.record = JobApplicationRecord()
        self.phases.reset()
        self._edited.clear()
        self._errors.clear()

    def field_state(self, field: str) -> FieldState:
        wire = self._resolve(field)
        return FieldState(
            value=getattr(self.record, FIELD_ATTRS[wire]),
            error_message=self._errors.get(wire),
            touched=wire in self._edited,
            phase=self.phases.phase(wire),
        )

    def field_states(self) -> Dict[str, FieldState]:
        return {wire: self.field_state(wire) for wire in FIELD_NAMES}

    def _resolve(self, field: str) -> str:
        wire = resolve_field(field)
        if wire is None:
            raise UnknownFieldError(field)
        return wire

    def _revalidate(self, wire: str) -> None:
        message = validate(self.record, self.rules).first_message(wire)
        if message is None:
            self._errors.pop(wire, None)
        else:
            self._errors[wire] = message


def create_session(settings: Optional[Settings] = None) -> FormSession:
    """Wire a session to the configured draft directory and submission boundary."""
    settings = settings or get_settings()
    store = DraftStore(FileKeyValueStore(settings.DRAFT_DIR), key=settings.DRAFT_KEY)
    controller = SubmissionController(build_boundary(settings))
    rules = build_rules(strict_optional_text=settings.STRICT_OPTIONAL_TEXT)
    return FormSession(store, controller, rules=rules)
