"""Composite scoring of retrieved candidates.

The final score is not one formula but an ordered list of rules; the first rule
whose condition holds produces the score. Floor rules run afterwards so that a
candidate surfaced by a real partial phone/name match never drops out of sight.

The weights, bonus and caps below are business tuning values carried over
as-is; see DESIGN.md.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .model import (
    Customer,
    CustomerSearchInput,
    MatchReasons,
    MatchType,
    OriginalScores,
    ScoredCustomer,
    SimilarityDetails,
    SimilarityResult,
)
from .similarity import afm_similarity, name_similarity, phone_similarity, round_half_up

PHONE_WEIGHT = 0.6
NAME_WEIGHT = 0.4
AFM_WEIGHT = 0.1
COMBINED_BONUS = 15
COMBINED_CAP = 99
PHONE_ONLY_CAP = 90
NAME_ONLY_CAP = 85
WEIGHTED_CAP = 80
FLOOR_SCORE = 30
REASON_THRESHOLD = 30


@dataclass(frozen=True)
class FieldScores:
    name: int = 0
    phone: int = 0
    afm: int = 0


@dataclass(frozen=True)
class SearchContext:
    """Which criteria the operator actually supplied."""

    has_name: bool = False
    has_phone: bool = False

    @classmethod
    def of(cls, search: CustomerSearchInput) -> "SearchContext":
        return cls(has_name=search.has_name, has_phone=search.has_phone)


@dataclass(frozen=True)
class ScoringRule:
    match_type: MatchType
    applies: Callable[[FieldScores, SearchContext], bool]
    score: Callable[[FieldScores], int]


# ── Rules ──────────────────────────────────────────────────────────────────────

def _combined(s: FieldScores) -> int:
    return min(round_half_up(s.phone * PHONE_WEIGHT + s.name * NAME_WEIGHT + COMBINED_BONUS), COMBINED_CAP)


def _phone_only(s: FieldScores) -> int:
    return min(round_half_up(s.phone * 0.9), PHONE_ONLY_CAP)


def _name_only(s: FieldScores) -> int:
    return min(round_half_up(s.name * 0.9), NAME_ONLY_CAP)


def _weighted(s: FieldScores) -> int:
    # only fields that scored at all take part; weights renormalised to 1
    pairs = [
        (s.phone, PHONE_WEIGHT if s.phone > 0 else 0.0),
        (s.name, NAME_WEIGHT if s.name > 0 else 0.0),
        (s.afm, AFM_WEIGHT if s.afm > 0 else 0.0),
    ]
    total = sum(weight for _, weight in pairs)
    if total == 0:
        return 0
    weighted = sum(score * weight / total for score, weight in pairs)
    return min(round_half_up(weighted), WEIGHTED_CAP)


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule(
        MatchType.COMBINED,
        lambda s, ctx: s.name >= 35 and s.phone >= 35,
        _combined,
    ),
    ScoringRule(
        MatchType.PHONE_ONLY,
        lambda s, ctx: ctx.has_phone and s.phone >= 45 and s.name < 30,
        _phone_only,
    ),
    ScoringRule(
        MatchType.NAME_ONLY,
        lambda s, ctx: ctx.has_name and s.name >= 55 and s.phone < 30,
        _name_only,
    ),
    ScoringRule(
        MatchType.WEIGHTED,
        lambda s, ctx: True,
        _weighted,
    ),
)

FLOOR_RULES: tuple[tuple[MatchType, Callable[[FieldScores, SearchContext], bool]], ...] = (
    (MatchType.PHONE_FLOOR, lambda s, ctx: ctx.has_phone and s.phone > 0),
    (MatchType.NAME_FLOOR, lambda s, ctx: ctx.has_name and s.name > 0),
)


def composite_score(scores: FieldScores, context: SearchContext) -> tuple[int, MatchType]:
    for rule in SCORING_RULES:
        if rule.applies(scores, context):
            score, match_type = rule.score(scores), rule.match_type
            break
    else:  # pragma: no cover - the weighted rule always applies
        score, match_type = 0, MatchType.WEIGHTED

    for floor_type, applies in FLOOR_RULES:
        if score < FLOOR_SCORE and applies(scores, context):
            score, match_type = FLOOR_SCORE, floor_type

    return max(0, min(score, 100)), match_type


# ── Per-candidate scoring ──────────────────────────────────────────────────────

def field_scores(search: CustomerSearchInput, customer: Customer) -> FieldScores:
    return FieldScores(
        name=name_similarity(search.company_name, customer.company_name),
        phone=phone_similarity(search.telephone, customer.telephone),
        afm=afm_similarity(search.afm, customer.afm),
    )


def score_customer(search: CustomerSearchInput, customer: Customer) -> ScoredCustomer:
    scores = field_scores(search, customer)
    score, match_type = composite_score(scores, SearchContext.of(search))
    return ScoredCustomer(
        customer=customer,
        similarity_score=score,
        match_type=match_type,
        match_reasons=MatchReasons(
            company_name=scores.name > REASON_THRESHOLD,
            telephone=scores.phone > REASON_THRESHOLD,
            afm=scores.afm > REASON_THRESHOLD,
        ),
        original_scores=OriginalScores(
            phone_similarity=scores.phone,
            name_similarity=scores.name,
            afm_similarity=scores.afm,
        ),
    )


def score_customers(search: CustomerSearchInput, customers: Iterable[Customer]) -> list[ScoredCustomer]:
    return [score_customer(search, c) for c in customers]


def calculate_similarity_score(search: CustomerSearchInput, customer: Customer) -> SimilarityResult:
    """Composite score plus the per-field breakdown, without the ranking metadata."""
    scores = field_scores(search, customer)
    score, _ = composite_score(scores, SearchContext.of(search))
    return SimilarityResult(
        score=score,
        details=SimilarityDetails(name_score=scores.name, phone_score=scores.phone, afm_score=scores.afm),
    )
