from __future__ import annotations

import pytest

from duplicate_detection.errors import CustomerStoreError
from duplicate_detection.model import Customer
from duplicate_detection.query import CandidateQuery
from duplicate_detection.store import InMemoryCustomerStore


class RecordingStore(InMemoryCustomerStore):
    """In-memory store that remembers every query it was asked."""

    def __init__(self, customers=()) -> None:
        super().__init__(customers)
        self.queries: list[CandidateQuery] = []

    async def fetch(self, query: CandidateQuery) -> list[Customer]:
        self.queries.append(query)
        return await super().fetch(query)


class FailingStore:
    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self, query: CandidateQuery) -> list[Customer]:
        self.calls += 1
        raise CustomerStoreError("connection refused")


@pytest.fixture
def customers() -> list[Customer]:
    return [
        Customer(id="1", company_name="ΑΕΡΟΠΟΡΙΑ ΑΙΓΑΙΟΥ", telephone="2101234567", afm="094456789"),
        Customer(id="2", company_name="ΑΕΡΟΔΡΟΜΙΟ ΑΘΗΝΩΝ", telephone="6983-50.50.43", afm="999999999"),
        Customer(id="3", company_name="ΤΑΜΑΓΙΑΝΝΗ ΕΠΕ", telephone="6983505043", afm="123456789"),
        Customer(id="4", company_name="Deleted Co", telephone="6983505043", deleted=True),
        Customer(id="5", company_name="Παπαδόπουλος ΑΕ", telephone="2310999888", afm="111111111"),
    ]


@pytest.fixture
def store(customers) -> RecordingStore:
    return RecordingStore(customers)


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()
