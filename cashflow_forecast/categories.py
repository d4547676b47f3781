"""Closed category set and keyword-table classification.

``CATEGORY_RULES`` is an ordered tuple of ``(category, patterns)`` pairs. The
first rule with any matching pattern wins; nothing matching means
``Category.MISCELLANEOUS``. The same table is applied to an external category
label (e.g. an accounting-export account name or a card's own category)
before falling back to the free-text description.
"""

from __future__ import annotations

import re
from decimal import Decimal
from enum import StrEnum


class Category(StrEnum):
    FUEL = "Gas & Fuel"
    TRAVEL = "Travel"
    LEGAL_ACCOUNTING = "Legal & Accounting"
    OFFICE_SUPPLIES = "Office Supplies"
    SOFTWARE = "Software"
    REPAIRS = "Repairs & Maintenance"
    POSTAGE = "Postage & Shipping"
    TAXES = "Taxes & Registration"
    INSURANCE = "Insurance"
    SUBSCRIPTIONS = "Subscriptions"
    INCOME = "Sales & Income"
    OWNER_CONTRIBUTION = "Owner's Contribution"
    OWNER_DISTRIBUTION = "Owner's Distribution"
    TRANSFERS = "Transfers"
    FEES = "Fees"
    MISCELLANEOUS = "Miscellaneous"


def _p(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


CATEGORY_RULES: tuple[tuple[Category, tuple[re.Pattern[str], ...]], ...] = (
    (
        Category.FUEL,
        _p(
            r"\bgas\b",
            r"\bfuel",
            r"\bdiesel\b",
            r"\bvalero\b",
            r"\bshell\b",
            r"\bexxon",
            r"\bchevron\b",
            r"\bpilot\b",
            r"\bloves\b",
            r"\bpetro",
            r"\bsunoco\b",
            r"\bmarathon\b",
        ),
    ),
    (
        Category.TRAVEL,
        _p(
            r"\btravel",
            r"\bairlines?\b",
            r"\bdelta air",
            r"\bunited air",
            r"\bsouthwest\b",
            r"\bhotel",
            r"\bmotel\b",
            r"\bmarriott\b",
            r"\bhilton\b",
            r"\bairbnb\b",
            r"\buber\b",
            r"\blyft\b",
            r"\btaxi",
            r"\bparking\b",
            r"\btolls?\b",
        ),
    ),
    (
        Category.LEGAL_ACCOUNTING,
        _p(
            r"\blegal\b",
            r"\battorney",
            r"\blaw (office|firm|group)",
            r"\baccounting\b",
            r"\baccountant",
            r"\bbookkeep",
            r"\bcpa\b",
            r"\bprofessional fees?\b",
        ),
    ),
    (
        Category.OFFICE_SUPPLIES,
        _p(
            r"\boffice (supplies|depot|max)",
            r"\bstaples\b",
            r"\bsupplies\b",
            r"\bprinter\b",
            r"\btoner\b",
        ),
    ),
    (
        Category.SOFTWARE,
        _p(
            r"\bsoftware\b",
            r"\bgithub\b",
            r"\badobe\b",
            r"\bmicrosoft\b",
            r"\bzoom\b",
            r"\bslack\b",
            r"\baws\b",
            r"\bheroku\b",
            r"\bfront\.com\b",
            r"\bcloudflare\b",
            r"\bdialpad\b",
        ),
    ),
    (
        Category.REPAIRS,
        _p(
            r"\brepairs?\b",
            r"\bmaintenance\b",
            r"\bauto ?zone\b",
            r"\bnapa\b",
            r"\bo'?reilly",
            r"\btire",
            r"\bjiffy lube\b",
            r"\bmechanic",
        ),
    ),
    (
        Category.POSTAGE,
        _p(
            r"\bpostage\b",
            r"\bshipping\b",
            r"\bdelivery\b",
            r"\busps\b",
            r"\bups\b",
            r"\bfedex\b",
            r"\bdhl\b",
            r"\bstamps\.com\b",
        ),
    ),
    (
        Category.TAXES,
        _p(
            r"\btax",
            r"\birs\b",
            r"\brevenue.*department\b",
            r"\bdept\.? of revenue\b",
            r"\bdmv\b",
            r"\bregistration\b",
            r"\blicen[cs]e",
            r"\bifta\b",
        ),
    ),
    (
        Category.INSURANCE,
        _p(
            r"\binsurance\b",
            r"\bgeico\b",
            r"\ballstate\b",
            r"\bprogressive\b",
            r"\bstate farm\b",
            r"\bhendersh",
        ),
    ),
    (
        Category.SUBSCRIPTIONS,
        _p(
            r"\bsubscriptions?\b",
            r"\bdues\b",
            r"\bmembership",
            r"\bspotify\b",
            r"\bnetflix\b",
            r"\bhulu\b",
            r"\bapple\.com\b",
            r"\bgoogle.*storage\b",
            r"\bsquarespace\b",
            r"\bsqsp\b",
        ),
    ),
    (
        Category.INCOME,
        _p(
            r"\bsales\b",
            r"\bincome\b",
            r"\brevenue\b",
            r"\bcommission",
            r"\binvoice\b",
            r"\bpayment.*received\b",
            r"\bmargin freight\b",
        ),
    ),
    (
        Category.OWNER_CONTRIBUTION,
        _p(
            r"\bowner'?s? (contribution|investment|equity)",
            r"\bcapital contribution\b",
        ),
    ),
    (
        Category.OWNER_DISTRIBUTION,
        _p(
            r"\bowner'?s? (distribution|draw|withdrawal)",
            r"\bdraws?\b",
            r"\bdistributions?\b",
        ),
    ),
    (
        Category.TRANSFERS,
        _p(
            r"\btransfer",
            r"\bxfer\b",
            r"\bacct_xfer\b",
            r"\bzelle\b",
        ),
    ),
    (
        Category.FEES,
        _p(
            r"\bfees?\b",
            r"\bservice charge\b",
            r"\boverdraft\b",
            r"\bnsf\b",
            r"\binterest charge",
            r"\bbank charges?\b",
        ),
    ),
)


def match_category(text: str | None) -> Category | None:
    """Return the first rule category matching ``text``, or ``None``."""

    if not text or not text.strip():
        return None
    for category, patterns in CATEGORY_RULES:
        if any(p.search(text) for p in patterns):
            return category
    return None


def classify_category(
    description: str,
    type_label: str,
    amount: Decimal,
    category_hint: str | None = None,
) -> Category:
    """Assign exactly one category to a transaction.

    Order: external hint through the keyword table; transfer-typed rows;
    keyword table against the description; positive or credit-typed rows
    default to income; otherwise miscellaneous.
    """

    hinted = match_category(category_hint)
    if hinted is not None:
        return hinted

    t = (type_label or "").lower()
    if "transfer" in t or "xfer" in t:
        return Category.TRANSFERS

    matched = match_category(description)
    if matched is not None:
        return matched

    if amount > 0 or "credit" in t:
        return Category.INCOME
    return Category.MISCELLANEOUS


__all__ = ["Category", "CATEGORY_RULES", "classify_category", "match_category"]
