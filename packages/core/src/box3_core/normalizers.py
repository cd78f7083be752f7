"""Identifier normalization for Box 3 asset matching.

LLM extraction reproduces identifiers the way each document prints them:
"ING Bank" on a statement, "ING" on the aangifte, "NL91 INGB 0001 2345 67"
versus "****4567". These helpers turn such strings into comparable tokens.

None of the functions raise. Missing or unparseable input maps to a defined
fallback value.
"""

import re
from typing import NamedTuple, Optional

UNKNOWN_INSTITUTION = "UNKNOWN"

# Alias -> canonical token. Looked up by exact match first, then by
# substring containment in this order.
BANK_NAME_NORMALIZATION: dict[str, str] = {
    # ING
    "ing": "ING",
    "ing bank": "ING",
    "ing-diba": "ING",
    # Rabobank
    "rabobank": "RABO",
    "rabo": "RABO",
    "rabobank nederland": "RABO",
    # ABN AMRO
    "abn amro": "ABNAMRO",
    "abn": "ABNAMRO",
    "abnamro": "ABNAMRO",
    "abn amro bank": "ABNAMRO",
    # de Volksbank group
    "sns": "SNS",
    "sns bank": "SNS",
    "asn": "ASN",
    "asn bank": "ASN",
    "regiobank": "REGIOBANK",
    "de volksbank": "VOLKSBANK",
    # Triodos
    "triodos": "TRIODOS",
    "triodos bank": "TRIODOS",
    # Brokers
    "degiro": "DEGIRO",
    "de giro": "DEGIRO",
    "binck": "BINCK",
    "binckbank": "BINCK",
    "saxo": "SAXO",
    "saxo bank": "SAXO",
    # Neobanks
    "bunq": "BUNQ",
    "knab": "KNAB",
    "revolut": "REVOLUT",
    "n26": "N26",
}

_FULL_IBAN_RE = re.compile(r"([A-Z]{2}\d{2}[A-Z]{4}\d{10})")
_MASKED_LAST4_RE = re.compile(r"\*+(\d{4})$")
_TRAILING_LAST4_RE = re.compile(r"(\d{4})$")

# Dutch street suffixes, applied in order
_ADDRESS_ABBREVIATIONS = (
    ("straat", "str"),
    ("laan", "ln"),
    ("weg", "wg"),
    ("plein", "pln"),
)


class IbanParts(NamedTuple):
    """Account identifiers recovered from a (masked) account string."""

    full: Optional[str] = None
    last4: Optional[str] = None


def normalize_institution_name(name: Optional[str]) -> str:
    """Map a bank or institution name to a canonical token.

    Args:
        name: Institution name as extracted, e.g. "ING Bank N.V.".

    Returns:
        Canonical token such as "ING" or "RABO". Unknown institutions are
        upper-cased, stripped to [A-Z0-9] and cut at 20 characters.
        Empty input gives "UNKNOWN".
    """
    if not name or not name.strip():
        return UNKNOWN_INSTITUTION

    normalized = name.lower().strip()

    if normalized in BANK_NAME_NORMALIZATION:
        return BANK_NAME_NORMALIZATION[normalized]

    for alias, token in BANK_NAME_NORMALIZATION.items():
        if alias in normalized:
            return token

    return re.sub(r"[^A-Z0-9]", "", name.upper())[:20]


def extract_iban(account_masked: Optional[str]) -> IbanParts:
    """Recover the full IBAN and/or last four digits from an account string.

    Handles "NL91INGB0001234567", "NL91 INGB 0001 2345 67", "****4567" and
    "NL**INGB****4567". No match is a valid result, not an error.

    Args:
        account_masked: Account number as found in the document.

    Returns:
        IbanParts with whatever could be recovered.
    """
    if not account_masked:
        return IbanParts()

    cleaned = re.sub(r"\s", "", account_masked).upper()

    iban_match = _FULL_IBAN_RE.search(cleaned)
    if iban_match:
        iban = iban_match.group(1)
        return IbanParts(full=iban, last4=iban[-4:])

    masked_match = _MASKED_LAST4_RE.search(cleaned)
    if masked_match:
        return IbanParts(last4=masked_match.group(1))

    last4_match = _TRAILING_LAST4_RE.search(cleaned)
    if last4_match:
        return IbanParts(last4=last4_match.group(1))

    return IbanParts()


def normalize_address(address: Optional[str]) -> str:
    """Normalize a Dutch street address for comparison.

    "Kerkstraat 12," and "kerkstr. 12" both become "kerkstr 12".
    """
    if not address:
        return ""

    normalized = re.sub(r"\s+", " ", address.lower())
    for long_form, short_form in _ADDRESS_ABBREVIATIONS:
        normalized = normalized.replace(long_form, short_form)
    normalized = re.sub(r"[.,]", "", normalized)
    return normalized.strip()


def normalize_postcode_id(postcode: Optional[str], house_number: Optional[str]) -> Optional[str]:
    """Combine a Dutch postcode and house number into one property key.

    "1234 ab" + "12" and "1234AB" + " 12" both become "1234AB-12". Returns
    None unless both parts are present.
    """
    postcode = re.sub(r"\s", "", postcode or "").upper()
    house_number = re.sub(r"\s", "", house_number or "").upper()
    if not postcode or not house_number:
        return None
    return f"{postcode}-{house_number}"
