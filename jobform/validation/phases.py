from __future__ import annotations
from typing import Dict, Iterable

from ..domain import FieldPhase


class FieldPhaseTracker:
    """Per-field validation timing: check on first blur, then on every change.

    Untouched fields are never checked on change so a user is not told a
    value is wrong while still typing it for the first time.
    """

    def __init__(self, fields: Iterable[str]):
        self._phases: Dict[str, FieldPhase] = {name: FieldPhase.untouched for name in fields}

    def phase(self, field: str) -> FieldPhase:
        return self._phases[field]

    def on_change(self, field: str) -> bool:
        """Record a value change; return whether the field should be validated."""
        current = self._phases[field]
        if current is FieldPhase.untouched:
            return False
        self._phases[field] = FieldPhase.revalidating
        return True

    def on_blur(self, field: str) -> bool:
        if self._phases[field] is FieldPhase.untouched:
            self._phases[field] = FieldPhase.touched
        return True

    def on_submit(self) -> None:
        for name in self._phases:
            self._phases[name] = FieldPhase.revalidating

    def reset(self) -> None:
        for name in self._phases:
            self._phases[name] = FieldPhase.untouched
