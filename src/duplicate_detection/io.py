from __future__ import annotations

import csv
import logging
from pathlib import Path

import vobject

from .model import Customer

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".vcf")


# ── CSV ────────────────────────────────────────────────────────────────────────

def read_customers_csv(path: Path) -> list[Customer]:
    """Rows need an `id` column; other Customer field names are picked up by name."""
    customers: list[Customer] = []
    skipped = 0
    with path.open("r", newline="", encoding="utf-8-sig") as handle:
        for row in csv.DictReader(handle):
            try:
                customers.append(Customer.from_mapping(row))
            except ValueError:
                skipped += 1
    if skipped:
        logger.debug("%s: %d row(s) without an id skipped", path.name, skipped)
    return customers


# ── vCard ──────────────────────────────────────────────────────────────────────

def _text(component, default: str = "") -> str:
    if component is None:
        return default
    value = component.value
    if isinstance(value, (list, tuple)):
        value = " ".join(str(v) for v in value if v)
    return str(value).strip()


def _customer_from_vcard(vc, label: str, index: int) -> Customer | None:
    company = _text(getattr(vc, "org", None)) or _text(getattr(vc, "fn", None))
    tels = getattr(vc, "tel_list", [])
    emails = getattr(vc, "email_list", [])
    afm = getattr(vc, "x_afm", None)
    adr = getattr(vc, "adr", None)
    if not company and not tels:
        return None

    address = town = postal_code = None
    if adr is not None:
        street = adr.value.street
        address = (" ".join(street) if isinstance(street, list) else street) or None
        town = adr.value.city or None
        postal_code = adr.value.code or None

    return Customer(
        id=_text(getattr(vc, "uid", None)) or f"{label}-{index}",
        company_name=company,
        telephone=_text(tels[0]) if tels else "",
        afm=_text(afm),
        email=_text(emails[0]).lower() if emails else None,
        address=address,
        town=town,
        postal_code=postal_code,
    )


def read_customers_vcf(paths: list[Path]) -> list[Customer]:
    """ORG (or FN) becomes the company name, the first TEL the telephone."""
    customers: list[Customer] = []
    for p in paths:
        label = p.stem
        data = p.read_text(encoding="utf-8", errors="replace")
        skipped = 0
        for index, vc in enumerate(vobject.readComponents(data, ignoreUnreadable=True), start=1):
            if vc.name.upper() != "VCARD":
                continue
            customer = _customer_from_vcard(vc, label, index)
            if customer is None:
                skipped += 1
                continue
            customers.append(customer)
        if skipped:
            logger.debug("%s: %d card(s) without name or phone skipped", label, skipped)
    return customers


# ── Public API ─────────────────────────────────────────────────────────────────

def read_customers(path: Path) -> list[Customer]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return read_customers_csv(path)
    if suffix == ".vcf":
        return read_customers_vcf([path])
    raise ValueError(f"unsupported customer export {path.name!r} (expected .csv or .vcf)")
