from __future__ import annotations

from duplicate_detection.model import Customer, CustomerSearchInput, MatchType
from duplicate_detection.scoring import (
    SCORING_RULES,
    FieldScores,
    SearchContext,
    calculate_similarity_score,
    composite_score,
    score_customer,
    score_customers,
)

BOTH = SearchContext(has_name=True, has_phone=True)
PHONE = SearchContext(has_phone=True)
NAME = SearchContext(has_name=True)
NEITHER = SearchContext()


# ── Rules ──────────────────────────────────────────────────────────────────────

def test_rule_order():
    assert [r.match_type for r in SCORING_RULES] == [
        MatchType.COMBINED, MatchType.PHONE_ONLY, MatchType.NAME_ONLY, MatchType.WEIGHTED,
    ]


def test_combined_moderate_evidence():
    # 40*0.6 + 40*0.4 + 15
    assert composite_score(FieldScores(name=40, phone=40), BOTH) == (55, MatchType.COMBINED)


def test_combined_capped():
    assert composite_score(FieldScores(name=100, phone=100), BOTH) == (99, MatchType.COMBINED)


def test_combined_needs_no_criteria_flags():
    assert composite_score(FieldScores(name=50, phone=50), NEITHER)[1] == MatchType.COMBINED


def test_phone_only():
    assert composite_score(FieldScores(name=10, phone=60), PHONE) == (54, MatchType.PHONE_ONLY)


def test_phone_only_capped():
    assert composite_score(FieldScores(phone=100), PHONE) == (90, MatchType.PHONE_ONLY)


def test_phone_only_needs_phone_criterion():
    score, match_type = composite_score(FieldScores(phone=60), NAME)
    assert match_type == MatchType.WEIGHTED
    assert score == 60


def test_name_only():
    assert composite_score(FieldScores(name=90), NAME) == (81, MatchType.NAME_ONLY)
    assert composite_score(FieldScores(name=100), NAME) == (85, MatchType.NAME_ONLY)


def test_weighted_renormalises_present_fields():
    # 30*0.6 + 50*0.4
    assert composite_score(FieldScores(name=50, phone=30), BOTH) == (38, MatchType.WEIGHTED)


def test_weighted_afm_alone_capped():
    assert composite_score(FieldScores(afm=100), NEITHER) == (80, MatchType.WEIGHTED)


def test_weighted_nothing_scored():
    assert composite_score(FieldScores(), BOTH) == (0, MatchType.WEIGHTED)


def test_phone_floor():
    assert composite_score(FieldScores(phone=20), PHONE) == (30, MatchType.PHONE_FLOOR)


def test_name_floor():
    assert composite_score(FieldScores(name=20), NAME) == (30, MatchType.NAME_FLOOR)


def test_floor_only_for_supplied_criterion():
    assert composite_score(FieldScores(phone=20), NAME) == (20, MatchType.WEIGHTED)


def test_phone_floor_wins_over_name_floor():
    assert composite_score(FieldScores(name=10, phone=10), BOTH) == (30, MatchType.PHONE_FLOOR)


def test_composite_in_range():
    for name in (0, 10, 35, 55, 100):
        for phone in (0, 20, 45, 100):
            for afm in (0, 100):
                for ctx in (BOTH, PHONE, NAME, NEITHER):
                    score, _ = composite_score(FieldScores(name, phone, afm), ctx)
                    assert 0 <= score <= 100


# ── Per-candidate ──────────────────────────────────────────────────────────────

def _customer(**kw) -> Customer:
    kw.setdefault("id", "c1")
    return Customer(**kw)


def test_score_customer_exact_name_and_phone():
    search = CustomerSearchInput(company_name="ACME", telephone="6983505043")
    customer = _customer(company_name="acme", telephone="6983-50.50.43", afm="094456789")
    scored = score_customer(search, customer)

    assert scored.customer is customer
    assert scored.id == "c1"
    assert scored.similarity_score == 99
    assert scored.match_type == MatchType.COMBINED
    assert scored.match_reasons.company_name
    assert scored.match_reasons.telephone
    assert not scored.match_reasons.afm
    assert scored.original_scores.name_similarity == 100
    assert scored.original_scores.phone_similarity == 100
    assert scored.original_scores.afm_similarity == 0


def test_match_reason_needs_more_than_thirty():
    search = CustomerSearchInput(telephone="6911111111")
    at_thirty = score_customer(search, _customer(telephone="6919999999"))
    assert at_thirty.original_scores.phone_similarity == 30
    assert not at_thirty.match_reasons.telephone
    assert at_thirty.similarity_score == 30
    assert at_thirty.match_type == MatchType.WEIGHTED

    above = score_customer(search, _customer(telephone="6911999999"))
    assert above.original_scores.phone_similarity == 40
    assert above.match_reasons.telephone


def test_score_customers_keeps_order():
    search = CustomerSearchInput(afm="094456789")
    customers = [_customer(id="a", afm="1"), _customer(id="b", afm="094456789")]
    assert [s.id for s in score_customers(search, customers)] == ["a", "b"]


def test_calculate_similarity_score_details():
    search = CustomerSearchInput(company_name="ACME", telephone="6983505043", afm="094456789")
    result = calculate_similarity_score(search, _customer(company_name="ACME", afm="094456789"))
    assert result.details.name_score == 100
    assert result.details.phone_score == 0
    assert result.details.afm_score == 100
    # name-only: 100 * 0.9 capped at 85
    assert result.score == 85
