"""Backend-neutral candidate queries.

Retrieval is deliberately broad: predicates are OR-combined so that anything
plausibly related comes back, and the scorer sorts out the false positives.
Patterns use SQL ILIKE semantics ('%' any run, '_' one char, '\\' escape).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .model import CustomerSearchInput
from .normalize import digits_only, formatted_prefix, normalize_phone

SEARCH_LIMIT = 100
EXACT_PHONE_LIMIT = 10
MIN_PHONE_DIGITS = 5
# from this length on, digits may be separated by anything in the stored value
INTERLEAVED_MIN_DIGITS = 6


@dataclass(frozen=True)
class ILike:
    column: str
    pattern: str


@dataclass(frozen=True)
class Equals:
    column: str
    value: str


Predicate = Union[ILike, Equals]


@dataclass(frozen=True)
class CandidateQuery:
    any_of: tuple[Predicate, ...]
    limit: int
    include_deleted: bool = False
    strategy: str = "search"


# ── Patterns ───────────────────────────────────────────────────────────────────

def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(text: str) -> str:
    return f"%{escape_like(text)}%"


def interleaved(digits: str) -> str:
    """'6912' -> '%6%9%1%2%': matches the digits with any separators between."""
    return "%" + "%".join(digits) + "%"


def starts_with_prefix(prefix: str) -> str:
    return f"{escape_like(prefix)}-%"


# ── General search ─────────────────────────────────────────────────────────────

def build_search_query(
    search: CustomerSearchInput,
    limit: int = SEARCH_LIMIT,
    min_phone_digits: int = MIN_PHONE_DIGITS,
) -> CandidateQuery | None:
    """OR query over name, phone and AFM; None when there is nothing to ask."""
    predicates: list[Predicate] = []

    if search.has_name:
        predicates.append(ILike("company_name", contains(search.company_name.strip())))

    if search.has_phone:
        predicates.extend(_phone_predicates(search.telephone, min_phone_digits))

    if search.has_afm:
        predicates.append(Equals("afm", search.afm.strip()))

    if not predicates:
        return None
    return CandidateQuery(any_of=tuple(predicates), limit=limit)


def _phone_predicates(telephone: str, min_phone_digits: int) -> list[Predicate]:
    predicates: list[Predicate] = []
    prefix = formatted_prefix(telephone)
    if prefix:
        predicates.append(ILike("telephone", starts_with_prefix(prefix)))

    normalized = normalize_phone(telephone)
    if len(normalized) < min_phone_digits:
        return predicates
    if len(normalized) < INTERLEAVED_MIN_DIGITS:
        predicates.append(ILike("telephone", contains(normalized)))
    else:
        predicates.append(ILike("telephone", interleaved(normalized)))
    return predicates


# ── Exact phone lookup ─────────────────────────────────────────────────────────

def exact_phone_queries(
    phone: str,
    limit: int = EXACT_PHONE_LIMIT,
    min_phone_digits: int = MIN_PHONE_DIGITS,
) -> list[CandidateQuery]:
    """Fallback strategies, tried in order until one returns rows.

    broad   literal text, digit run and formatted prefix, OR-combined
    prefix  the formatted prefix alone ('6983-%'); repeats a broad predicate for
            stores that evaluate the OR-combined query differently
    head    the first five digits anywhere in the number
    """
    digits = digits_only(normalize_phone(phone))
    if len(digits) < min_phone_digits:
        return []

    literal = phone.strip()
    prefix = formatted_prefix(phone)

    broad: list[Predicate] = [ILike("telephone", contains(literal))]
    if digits != literal:
        broad.append(ILike("telephone", contains(digits)))
    if prefix:
        broad.append(ILike("telephone", starts_with_prefix(prefix)))

    queries = [CandidateQuery(any_of=tuple(broad), limit=limit, strategy="broad")]
    if prefix:
        queries.append(CandidateQuery(
            any_of=(ILike("telephone", starts_with_prefix(prefix)),),
            limit=limit,
            strategy="prefix",
        ))
    queries.append(CandidateQuery(
        any_of=(ILike("telephone", contains(digits[:5])),),
        limit=limit,
        strategy="head",
    ))
    return queries
