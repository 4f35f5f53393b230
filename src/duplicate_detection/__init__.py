"""Duplicate customer detection: normalise, score and rank likely duplicates."""
from __future__ import annotations

from .detector import DetectionResult, DuplicateDetector
from .errors import CustomerStoreError, DuplicateDetectionError
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
from .normalize import normalize_afm, normalize_greek_text, normalize_phone
from .scoring import calculate_similarity_score, score_customer
from .similarity import afm_similarity, name_similarity, phone_similarity

__all__ = [
    "Customer",
    "CustomerSearchInput",
    "CustomerStoreError",
    "DetectionResult",
    "DuplicateDetectionError",
    "DuplicateDetector",
    "MatchReasons",
    "MatchType",
    "OriginalScores",
    "ScoredCustomer",
    "SimilarityDetails",
    "SimilarityResult",
    "afm_similarity",
    "calculate_similarity_score",
    "name_similarity",
    "normalize_afm",
    "normalize_greek_text",
    "normalize_phone",
    "phone_similarity",
    "score_customer",
]
