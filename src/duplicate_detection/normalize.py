"""Canonical forms for company names, phone numbers and tax ids.

Every comparison in the package goes through these helpers, so a name, phone or
AFM is always compared in the same shape no matter where it came from.
"""
from __future__ import annotations

import re

import phonenumbers
from phonenumbers import NumberParseException

_NON_DIGIT = re.compile(r"\D")

# ── Greek text ─────────────────────────────────────────────────────────────────

_GREEK_ACCENTS = str.maketrans({
    "ά": "α", "έ": "ε", "ή": "η", "ί": "ι", "ϊ": "ι", "ΐ": "ι",
    "ό": "ο", "ύ": "υ", "ϋ": "υ", "ΰ": "υ", "ώ": "ω",
    "Ά": "Α", "Έ": "Ε", "Ή": "Η", "Ί": "Ι", "Ϊ": "Ι",
    "Ό": "Ο", "Ύ": "Υ", "Ϋ": "Υ", "Ώ": "Ω",
})


def normalize_greek_text(text: str | None) -> str:
    """Lower-case and fold accented Greek vowels, e.g. 'Αθήνα' -> 'αθηνα'.

    Punctuation and whitespace are left alone.
    """
    if not text:
        return ""
    return text.translate(_GREEK_ACCENTS).lower()


# ── Tax id ─────────────────────────────────────────────────────────────────────

def normalize_afm(afm: str | None) -> str:
    if not afm:
        return ""
    return _NON_DIGIT.sub("", afm)


# ── Phone ──────────────────────────────────────────────────────────────────────

def digits_only(value: str | None) -> str:
    if not value:
        return ""
    return _NON_DIGIT.sub("", value)


def normalize_phone(phone: str | None) -> str:
    """Digits of a phone number in Greek canonical form.

    Up to 6 digits are returned as typed so partial input keeps matching while
    the operator is still entering it. Mobile (69…) and landline (2…) numbers
    are cut to 10 digits and a leading 30 country code is dropped.
    """
    return _canonical_digits(digits_only(phone))


def _canonical_digits(digits: str) -> str:
    if len(digits) <= 6:
        return digits
    if digits.startswith("69") and len(digits) >= 10:
        return digits[:10]
    if digits.startswith("2") and len(digits) >= 10:
        return digits[:10]
    if digits.startswith("30") and len(digits) > 10:
        # the remainder may itself be a mobile/landline that needs cutting
        return _canonical_digits(digits[2:])
    return digits


def is_formatted_phone(raw: str | None) -> bool:
    """True for the 'DDDD-DD.DD.DD' data-entry style (also while half typed)."""
    if not raw:
        return False
    raw = raw.strip()
    return "-" in raw and ("." in raw or raw.endswith("-"))


def formatted_prefix(raw: str | None) -> str | None:
    """Literal text before the first '-' of a formatted phone, if long enough."""
    if not is_formatted_phone(raw):
        return None
    prefix = raw.strip().split("-", 1)[0].strip()
    return prefix if len(prefix) >= 4 else None


def format_phone_display(raw: str | None, region: str = "GR") -> str:
    """Pretty international form, e.g. '+30 691 234 5678'; raw text if unparseable."""
    if not raw:
        return ""
    try:
        parsed = phonenumbers.parse(raw, region)
    except NumberParseException:
        return raw
    if not (phonenumbers.is_possible_number(parsed) and phonenumbers.is_valid_number(parsed)):
        return raw
    intl = phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL)
    return " ".join(intl.replace("-", " ").split())
