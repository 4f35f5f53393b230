from __future__ import annotations

from collections.abc import Iterable

from .config import Settings
from .model import CustomerSearchInput, ScoredCustomer
from .normalize import normalize_greek_text, normalize_phone


def adjusted_threshold(
    search: CustomerSearchInput,
    threshold: int,
    settings: Settings | None = None,
) -> int:
    """Short name terms are weak evidence, so they get a relaxed threshold."""
    settings = settings or Settings()
    name = search.company_name or ""
    if name and len(name) <= settings.short_name_length:
        return max(settings.relaxed_threshold_floor, threshold - settings.short_name_relaxation)
    return threshold


def filter_candidates(
    scored: Iterable[ScoredCustomer],
    search: CustomerSearchInput,
    threshold: int,
    settings: Settings | None = None,
) -> list[ScoredCustomer]:
    settings = settings or Settings()
    relaxed = adjusted_threshold(search, threshold, settings)
    phone_led = bool(normalize_phone(search.telephone))

    def keep(candidate: ScoredCustomer) -> bool:
        if candidate.similarity_score >= relaxed:
            return True
        original = candidate.original_scores
        if phone_led:
            if original.phone_similarity >= settings.phone_fallback_similarity:
                return True
            return search.has_name and original.name_similarity >= settings.name_fallback_similarity
        return original.name_similarity >= 35 and original.phone_similarity >= 35

    kept = [c for c in scored if keep(c)]
    # the caller's own threshold has the last word
    return [c for c in kept if c.similarity_score >= threshold]


def rank_key(candidate: ScoredCustomer) -> tuple[int, int, str]:
    return (
        -candidate.similarity_score,
        0 if candidate.match_reasons.name_and_phone else 1,
        normalize_greek_text(candidate.company_name),
    )


def rank_candidates(scored: Iterable[ScoredCustomer]) -> list[ScoredCustomer]:
    return sorted(scored, key=rank_key)
