from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Iterable
from typing import Protocol

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import CustomerRow
from .errors import CustomerStoreError
from .model import Customer
from .query import CandidateQuery, Equals, ILike, Predicate

logger = logging.getLogger(__name__)

_COLUMNS = ("company_name", "telephone", "afm")


class CustomerStore(Protocol):
    """Read side of the customer datastore used for candidate retrieval."""

    async def fetch(self, query: CandidateQuery) -> list[Customer]:
        ...


# ── In-memory ──────────────────────────────────────────────────────────────────

def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile an ILIKE pattern ('%', '_', '\\' escape) to a full-match regex."""
    out: list[str] = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            out.append(re.escape(next(chars, "\\")))
        elif ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.IGNORECASE | re.DOTALL)


class InMemoryCustomerStore:
    """Evaluates candidate queries over a list held in memory."""

    def __init__(self, customers: Iterable[Customer] = ()) -> None:
        self._customers = list(customers)

    def __len__(self) -> int:
        return len(self._customers)

    def add(self, customer: Customer) -> None:
        self._customers.append(customer)

    async def fetch(self, query: CandidateQuery) -> list[Customer]:
        matchers = [_compile(p) for p in query.any_of]
        rows: list[Customer] = []
        for customer in self._customers:
            if customer.deleted and not query.include_deleted:
                continue
            if any(match(customer) for match in matchers):
                rows.append(customer)
                if len(rows) >= query.limit:
                    break
        return rows


def _compile(predicate: Predicate) -> Callable[[Customer], bool]:
    _check_column(predicate.column)
    if isinstance(predicate, ILike):
        regex = like_to_regex(predicate.pattern)
        return lambda c: regex.fullmatch(getattr(c, predicate.column) or "") is not None
    return lambda c: (getattr(c, predicate.column) or "") == predicate.value


def _check_column(column: str) -> None:
    if column not in _COLUMNS:
        raise CustomerStoreError(f"cannot filter on column {column!r}")


# ── SQL ────────────────────────────────────────────────────────────────────────

class SqlCustomerStore:
    """SQLAlchemy-backed store; blocking I/O runs in a worker thread."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def fetch(self, query: CandidateQuery) -> list[Customer]:
        return await asyncio.to_thread(self._fetch, query)

    def _fetch(self, query: CandidateQuery) -> list[Customer]:
        stmt = select(CustomerRow).where(or_(*[_clause(p) for p in query.any_of]))
        if not query.include_deleted:
            stmt = stmt.where(CustomerRow.deleted.is_(False))
        stmt = stmt.limit(query.limit)
        try:
            with Session(self._engine) as session:
                rows = session.scalars(stmt).all()
                customers = [row.to_customer() for row in rows]
        except SQLAlchemyError as exc:
            raise CustomerStoreError(f"{query.strategy} query failed: {exc}") from exc
        logger.debug("%s query returned %d row(s)", query.strategy, len(customers))
        return customers


def _clause(predicate: Predicate) -> ColumnElement[bool]:
    _check_column(predicate.column)
    column = getattr(CustomerRow, predicate.column)
    if isinstance(predicate, ILike):
        return column.ilike(predicate.pattern, escape="\\")
    if isinstance(predicate, Equals):
        return column == predicate.value
    raise CustomerStoreError(f"unsupported predicate {predicate!r}")
