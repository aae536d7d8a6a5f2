from __future__ import annotations
import pytest

from jobform.config import get_settings
from jobform.schemas import JobApplicationRecord
from jobform.storage.draft_storage import DraftStore, MemoryKeyValueStore


def make_application(**overrides) -> dict:
    data = {
        "roleTitle": "Software Engineer",
        "companyName": "Tech Corp",
        "roleType": "Full-time",
        "location": "London",
        "salary": "£50,000",
        "advertLink": "https://example.com/job",
        "dateApplied": "2024-01-15",
        "responseDate": "2024-01-20",
        "cvUsed": "CV_2024.pdf",
        "status": "Applied",
        "contactName": "John Doe",
        "contactEmail": "john@example.com",
        "contactPhone": "07123 456789",
        "isLinkedInConnection": False,
    }
    data.update(overrides)
    return data


class RecordingBoundary:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.received: list[JobApplicationRecord] = []

    async def __call__(self, record: JobApplicationRecord) -> None:
        self.received.append(record)
        if self.error is not None:
            raise self.error


@pytest.fixture
def application() -> dict:
    return make_application()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def draft_store(memory_store) -> DraftStore:
    return DraftStore(memory_store)


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
