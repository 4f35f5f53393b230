from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, Mapping


_TRUTHY = {"1", "true", "t", "yes", "y"}


@dataclass(frozen=True)
class Customer:
    id: str
    company_name: str = ""
    telephone: str = ""
    afm: str = ""                     # Greek tax identification number
    doy: str | None = None            # tax office
    email: str | None = None
    address: str | None = None
    town: str | None = None
    postal_code: str | None = None
    deleted: bool = False

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "Customer":
        """Build a record from a datastore or CSV row; unknown columns are ignored."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in row.items():
            if key not in known:
                continue
            if key == "deleted":
                values[key] = _as_bool(value)
            elif key in ("id", "company_name", "telephone", "afm"):
                values[key] = "" if value is None else str(value).strip()
            else:
                text = None if value is None else str(value).strip()
                values[key] = text or None
        if not values.get("id"):
            raise ValueError("customer row has no id")
        return cls(**values)


@dataclass(frozen=True)
class CustomerSearchInput:
    company_name: str = ""
    telephone: str = ""
    afm: str = ""

    @property
    def has_name(self) -> bool:
        return bool(self.company_name and self.company_name.strip())

    @property
    def has_phone(self) -> bool:
        return bool(self.telephone and self.telephone.strip())

    @property
    def has_afm(self) -> bool:
        return bool(self.afm and self.afm.strip())

    def is_empty(self) -> bool:
        return not (self.has_name or self.has_phone or self.has_afm)


class MatchType(StrEnum):
    COMBINED = "combined"
    PHONE_ONLY = "phone-only"
    NAME_ONLY = "name-only"
    WEIGHTED = "weighted"
    PHONE_FLOOR = "phone-floor"
    NAME_FLOOR = "name-floor"


@dataclass(frozen=True)
class SimilarityDetails:
    name_score: int = 0
    phone_score: int = 0
    afm_score: int = 0


@dataclass(frozen=True)
class SimilarityResult:
    score: int
    details: SimilarityDetails = field(default_factory=SimilarityDetails)


@dataclass(frozen=True)
class OriginalScores:
    phone_similarity: int = 0
    name_similarity: int = 0
    afm_similarity: int = 0


@dataclass(frozen=True)
class MatchReasons:
    company_name: bool = False
    telephone: bool = False
    afm: bool = False

    @property
    def name_and_phone(self) -> bool:
        return self.company_name and self.telephone


@dataclass
class ScoredCustomer:
    """A retrieved customer plus the transient fields of one scoring pass."""

    customer: Customer
    similarity_score: int
    match_type: MatchType
    match_reasons: MatchReasons
    original_scores: OriginalScores

    @property
    def id(self) -> str:
        return self.customer.id

    @property
    def company_name(self) -> str:
        return self.customer.company_name


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY
