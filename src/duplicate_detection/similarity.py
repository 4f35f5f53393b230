"""Per-field similarity estimators.

Each estimator takes two raw values and returns an int confidence in 0..100.
Empty input on either side always scores 0.
"""
from __future__ import annotations

import math

from rapidfuzz import fuzz

from .normalize import (
    digits_only,
    formatted_prefix,
    normalize_afm,
    normalize_greek_text,
    normalize_phone,
)

FORMATTED_PREFIX_SCORE = 75


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ── Company name ───────────────────────────────────────────────────────────────

def name_similarity(name1: str | None, name2: str | None) -> int:
    if not name1 or not name2:
        return 0
    a = normalize_greek_text(name1).strip()
    b = normalize_greek_text(name2).strip()
    if not a or not b:
        return 0
    if a == b:
        return 100

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    ratio = len(shorter) / len(longer)

    # prefix: a short typed term such as "αερο" against "αεροπορια …"
    if longer.startswith(shorter):
        if len(shorter) >= 4 and ratio >= 0.5:
            return min(round_half_up(60 + ratio * 40), 99)
        if len(shorter) >= 2 and ratio >= 0.15:
            return round_half_up(65 + ratio * 30)

    if shorter in longer:
        if len(shorter) >= 4:
            return round_half_up(65 + ratio * 30)
        if len(shorter) >= 2:
            return round_half_up(65 + ratio * 15)

    # word order does not matter: "Company Inc" vs "Inc Company"
    return round_half_up(fuzz.token_sort_ratio(a, b))


# ── Phone ──────────────────────────────────────────────────────────────────────

def phone_similarity(phone1: str | None, phone2: str | None) -> int:
    if not phone1 or not phone2:
        return 0
    a = normalize_phone(phone1)
    b = normalize_phone(phone2)
    if not a or not b:
        return 0
    if a == b:
        return 100
    return max(_digit_similarity(a, b), _formatted_prefix_similarity(phone1, phone2))


def _digit_similarity(a: str, b: str) -> int:
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)

    if shorter in longer:
        n = len(shorter)
        at_start = longer.startswith(shorter)
        if n >= 7:
            return min(80 + (n - 7) * 5, 90) + (5 if at_start else 0)
        if n >= 5:
            return 70 + (n - 5) * 5 + (4 if at_start else 0)
        return n * 10 if at_start else max(10, n * 10 - 5)

    run = _leading_run(a, b)
    if run >= 7:
        return min(70 + (run - 7) * 10, 100)
    if run >= 5:
        return 50 + (run - 5) * 10
    if run >= 3:
        return 30 + (run - 3) * 10
    return run * 10


def _leading_run(a: str, b: str) -> int:
    run = 0
    for x, y in zip(a, b):
        if x != y:
            break
        run += 1
    return run


def _formatted_prefix_similarity(phone1: str, phone2: str) -> int:
    for formatted, other in ((phone1, phone2), (phone2, phone1)):
        prefix = formatted_prefix(formatted)
        if prefix is None:
            continue
        prefix_digits = digits_only(prefix)
        if other.strip().startswith(prefix) or (
            prefix_digits and digits_only(other).startswith(prefix_digits)
        ):
            return FORMATTED_PREFIX_SCORE
    return 0


# ── Tax id ─────────────────────────────────────────────────────────────────────

def afm_similarity(afm1: str | None, afm2: str | None) -> int:
    # tax ids identify a single entity: no partial credit
    a = normalize_afm(afm1)
    b = normalize_afm(afm2)
    if not a or not b:
        return 0
    return 100 if a == b else 0
