"""Public entry points of the duplicate lookup.

`find_potential_duplicates` and `find_exact_phone_matches` never raise: a
failed datastore round trip is logged and yields an empty list. Callers that
need to tell a failed lookup apart from "no duplicates" use `search` /
`search_exact_phone`, which return a DetectionResult with the failure flagged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import Settings
from .model import Customer, CustomerSearchInput, ScoredCustomer
from .query import CandidateQuery, build_search_query, exact_phone_queries
from .ranking import filter_candidates, rank_candidates
from .scoring import score_customers
from .store import CustomerStore


@dataclass
class DetectionResult:
    candidates: list[ScoredCustomer] = field(default_factory=list)
    retrieved: int = 0
    retrieval_failed: bool = False
    error: str | None = None


class _RetrievalFailed(Exception):
    pass


class DuplicateDetector:
    def __init__(
        self,
        store: CustomerStore,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or Settings()
        self._log = logger or logging.getLogger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    # ── General search ─────────────────────────────────────────────────────────

    async def search(
        self,
        search: CustomerSearchInput,
        threshold: int | None = None,
    ) -> DetectionResult:
        threshold = self._settings.default_threshold if threshold is None else threshold
        query = build_search_query(
            search,
            limit=self._settings.search_limit,
            min_phone_digits=self._settings.min_phone_digits,
        )
        if query is None:
            self._log.debug("no usable search criteria, skipping lookup")
            return DetectionResult()

        try:
            customers = await self._fetch(query, operation="find_potential_duplicates")
        except _RetrievalFailed as exc:
            return DetectionResult(retrieval_failed=True, error=str(exc))

        scored = score_customers(search, customers)
        kept = filter_candidates(scored, search, threshold, self._settings)
        self._log.debug(
            "scored %d candidate(s), kept %d at threshold %d",
            len(scored), len(kept), threshold,
        )
        return DetectionResult(candidates=rank_candidates(kept), retrieved=len(customers))

    async def find_potential_duplicates(
        self,
        search: CustomerSearchInput,
        threshold: int | None = None,
    ) -> list[ScoredCustomer]:
        return (await self.search(search, threshold)).candidates

    # ── Exact phone ────────────────────────────────────────────────────────────

    async def search_exact_phone(
        self,
        phone: str,
        company_name: str | None = None,
    ) -> DetectionResult:
        queries = exact_phone_queries(
            phone or "",
            limit=self._settings.exact_phone_limit,
            min_phone_digits=self._settings.min_phone_digits,
        )
        if not queries:
            self._log.debug("phone %r has fewer than %d digits", phone, self._settings.min_phone_digits)
            return DetectionResult()

        customers: list[Customer] = []
        try:
            for query in queries:
                customers = await self._fetch(query, operation="find_exact_phone_matches")
                if customers:
                    break
        except _RetrievalFailed as exc:
            return DetectionResult(retrieval_failed=True, error=str(exc))

        search = CustomerSearchInput(company_name=company_name or "", telephone=phone)
        # no threshold here: every retrieved candidate is returned
        scored = score_customers(search, customers)
        return DetectionResult(candidates=rank_candidates(scored), retrieved=len(customers))

    async def find_exact_phone_matches(
        self,
        phone: str,
        company_name: str | None = None,
    ) -> list[ScoredCustomer]:
        return (await self.search_exact_phone(phone, company_name)).candidates

    # ── Retrieval ──────────────────────────────────────────────────────────────

    async def _fetch(self, query: CandidateQuery, operation: str) -> list[Customer]:
        try:
            customers = await self._store.fetch(query)
        except Exception as exc:
            self._log.exception(
                "candidate retrieval failed",
                extra={"operation": operation, "strategy": query.strategy},
            )
            raise _RetrievalFailed(str(exc) or type(exc).__name__) from exc
        self._log.debug(
            "%s: %s query returned %d candidate(s)",
            operation, query.strategy, len(customers),
        )
        return customers
