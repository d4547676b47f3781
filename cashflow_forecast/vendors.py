"""Vendor normalization for grouping same-vendor activity.

``normalize_vendor_key`` turns a free-text bank description into a stable,
uppercase matching key: processor/ACH prefixes, dates, phone numbers,
reference numbers and digit runs are removed, punctuation collapses to
spaces, and only the first three tokens longer than one character survive.

``extract_vendor_name`` first looks for an explicit company-name field in
ACH-style structured text (``ORIG CO NAME:<x> ORIG ID:``) and only falls back
to the generic normalizer when no such field is present.

``transaction_vendor_key`` combines the two and is the single grouping key used by
recurrence detection and bill matching.
"""

from __future__ import annotations

import re

_MAX_KEY_TOKENS: int = 3

# Prefixes that carry no vendor information. Alphabetic markers need a word
# boundary so e.g. "MCDONALDS" or "POSTAGE" are left alone.
_NOISE_PREFIX_RE = re.compile(
    r"^(?:"
    r"(?:POS (?:DEBIT|PURCHASE|PUR)|POS|DEBIT CARD PURCHASE|CHECKCARD|"
    r"(?:RECURRING )?PURCHASE AUTHORIZED ON|RECURRING PAYMENT AUTHORIZED ON|"
    r"ACH (?:DEBIT|CREDIT|PMT|PAYMENT)|ELECTRONIC PAYMENT|WEB PMTS|"
    r"VISA|MC|DEBIT|PURCHASE)\b"
    r"|ORIG CO NAME:|SQ ?\*|TST ?\*|PAYPAL ?\*|PP ?\*"
    r")\s*"
)

_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Dates: MM/DD, MM/DD/YY, MM/DD/YYYY
    re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"),
    # Phone numbers with separators (bare 10-digit runs fall to the digit rule)
    re.compile(r"\(?\b\d{3}\)?[-.\s]\d{3}[-.\s]\d{4}\b"),
    # Reference fields
    re.compile(r"\bTRANSACTION\s*#?:?\s*\d+"),
    re.compile(r"\bREF(?:ERENCE)?\s*(?:#|NO\.?|NUM)?:?\s*[A-Z]*\d[A-Z\d]*"),
    re.compile(r"\b(?:ORIG )?ID:\s*\S+"),
    re.compile(r"#\s*\d+"),
    # Long digit runs (card tails, store numbers, trace ids)
    re.compile(r"\d{4,}"),
)

_PUNCT_RE = re.compile(r"[^A-Z0-9\s]|_")
_WS_RE = re.compile(r"\s+")

_STRUCTURED_NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ORIG CO NAME:\s*(.+?)\s+ORIG ID:", re.IGNORECASE),
    re.compile(r"\bCO NAME:\s*(.+?)\s+(?:CO ID|ENTRY|DESCR|ID):", re.IGNORECASE),
    re.compile(r"\bCO:\s*(.+?)\s+NAME:", re.IGNORECASE),
)


def _collapse(s: str) -> str:
    return _WS_RE.sub(" ", s).strip()


def _strip_prefixes(s: str) -> str:
    while True:
        stripped = _NOISE_PREFIX_RE.sub("", s, count=1)
        if stripped == s:
            return s
        s = stripped


def _key_tokens(description: str) -> list[str]:
    s = _collapse(description.upper())
    s = _strip_prefixes(s)
    for pattern in _NOISE_PATTERNS:
        s = pattern.sub(" ", s)
    s = _PUNCT_RE.sub(" ", s)
    tokens = [t for t in s.split() if len(t) > 1 and not t.isdigit()]
    return tokens[:_MAX_KEY_TOKENS]


def normalize_vendor_key(description: str | None) -> str:
    """Return the uppercase matching key for ``description``.

    Never empty for non-blank input: when every token is noise, the collapsed
    uppercase description is used as-is.
    """

    if not description:
        return ""
    tokens = _key_tokens(description)
    if tokens:
        return " ".join(tokens)
    return _collapse(description.upper())


def vendor_display_label(description: str | None) -> str:
    """Same pipeline as :func:`normalize_vendor_key`, cased for display."""

    if not description:
        return ""
    tokens = _key_tokens(description)
    if tokens:
        return " ".join(tokens).title()
    return _collapse(description)


def extract_vendor_name(description: str | None) -> str:
    """Best-effort vendor name, preferring structured ACH company fields."""

    if not description:
        return ""
    for pattern in _STRUCTURED_NAME_PATTERNS:
        m = pattern.search(description)
        if m:
            name = _collapse(m.group(1))
            if name:
                return name
    return vendor_display_label(description)


def transaction_vendor_key(description: str | None) -> str:
    """Grouping key shared by recurrence detection and bill matching."""

    return normalize_vendor_key(extract_vendor_name(description))


__all__ = [
    "extract_vendor_name",
    "normalize_vendor_key",
    "vendor_display_label",
    "transaction_vendor_key",
]
