from __future__ import annotations
import enum


class Status(enum.StrEnum):
    applied = "Applied"
    interviewing = "Interviewing"
    offer = "Offer"
    rejected = "Rejected"
    withdrawn = "Withdrawn"


class FieldPhase(enum.StrEnum):
    untouched = "untouched"
    touched = "touched"
    revalidating = "revalidating"


class SubmissionState(enum.StrEnum):
    idle = "idle"
    submitting = "submitting"
    failed = "failed"
