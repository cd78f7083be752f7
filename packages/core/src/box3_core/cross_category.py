"""Cross-category duplicate detection.

Some duplicates are classification errors rather than repeated extractions:
the same account extracted once as savings and once as an investment, or an
informal family loan ("vordering") recorded once under investments and once
under other assets.

This pass is advisory. It never merges and never modifies the blueprint;
every match it returns carries a ``review`` recommendation.
"""

from typing import Iterable, Optional, Union

import structlog

from .fingerprint import (
    generate_bank_fingerprint,
    generate_investment_fingerprint,
    generate_other_asset_fingerprint,
    normalize_tax_years,
)
from .matcher import HIGH_MATCH_AMOUNT_TOLERANCE, amounts_within_tolerance
from .models import (
    AssetFingerprint,
    Box3Blueprint,
    DeduplicationMatch,
    InvestmentType,
    MatchLevel,
    OtherAssetType,
    Recommendation,
)

logger = structlog.get_logger()

CROSS_IBAN_SCORE = 80
CROSS_LAST4_SCORE = 60
CROSS_VORDERING_SCORE = 85

VORDERING_KEYWORDS = (
    "vordering",
    "lening",
    "hypotheek",
    "uitgeleend",
    "familielening",
    "aan zoon",
    "aan dochter",
    "aan familie",
)

_VORDERING_OTHER_TYPES = {OtherAssetType.LOANED_MONEY.value, OtherAssetType.CLAIMS.value}


def is_vordering_description(description: Optional[str]) -> bool:
    """Check whether a description suggests a loan or claim."""
    lowered = (description or "").lower()
    return any(keyword in lowered for keyword in VORDERING_KEYWORDS)


def _bank_investment_match(
    bank_id: str,
    bank_fp: AssetFingerprint,
    inv_id: str,
    inv_fp: AssetFingerprint,
) -> Optional[DeduplicationMatch]:
    same_iban = bool(bank_fp.iban_full) and bank_fp.iban_full == inv_fp.iban_full
    same_last4_and_institution = (
        bool(bank_fp.account_last4)
        and bank_fp.account_last4 == inv_fp.account_last4
        and bank_fp.institution_normalized == inv_fp.institution_normalized
    )

    if same_iban:
        level, score = MatchLevel.HIGH, CROSS_IBAN_SCORE
        matched_on = ["iban_full", "cross_category"]
    elif same_last4_and_institution:
        level, score = MatchLevel.POSSIBLE, CROSS_LAST4_SCORE
        matched_on = ["account_last4", "institution", "cross_category"]
    else:
        return None

    return DeduplicationMatch(
        asset_a_id=bank_id,
        asset_b_id=inv_id,
        match_level=level,
        match_score=score,
        matched_on=matched_on,
        conflicts=["Category mismatch: bank_savings vs investments"],
        recommendation=Recommendation.REVIEW,
    )


def detect_cross_category_duplicates(
    blueprint: Box3Blueprint,
    years: Optional[Iterable[Union[str, int]]] = None,
) -> list[DeduplicationMatch]:
    """Detect likely duplicates across asset categories.

    Checks:
    1. Bank vs investment: same full IBAN, or same last 4 digits and
       institution.
    2. Investment vs other asset: both look like a vordering (keyword in the
       description, or investment type ``other`` / other-asset type
       ``loaned_money`` or ``claims``) and at least one shared year's amount
       is within 1%.

    Args:
        blueprint: Blueprint to inspect, typically after deduplication.
        years: Tax years to consider. Defaults to every year in the data.

    Returns:
        Review-level matches; never a merge.
    """
    tax_years = (
        normalize_tax_years(years) if years is not None else blueprint.collect_tax_years()
    )
    assets = blueprint.assets

    banks = [(a.id, generate_bank_fingerprint(a, tax_years)) for a in assets.bank_savings]
    investments = [
        (a.id, a.description, generate_investment_fingerprint(a, tax_years))
        for a in assets.investments
    ]
    others = [
        (a.id, a.description, generate_other_asset_fingerprint(a, tax_years))
        for a in assets.other_assets
    ]

    cross_matches: list[DeduplicationMatch] = []

    for bank_id, bank_fp in banks:
        for inv_id, _, inv_fp in investments:
            match = _bank_investment_match(bank_id, bank_fp, inv_id, inv_fp)
            if match is None:
                continue
            cross_matches.append(match)
            logger.warning(
                "cross_category_duplicate",
                kind="bank_vs_investment",
                bank=bank_id,
                investment=inv_id,
                match_level=match.match_level.value,
            )

    for inv_id, inv_desc, inv_fp in investments:
        inv_is_vordering = (
            is_vordering_description(inv_desc) or inv_fp.asset_type == InvestmentType.OTHER.value
        )
        if not inv_is_vordering:
            continue
        for other_id, other_desc, other_fp in others:
            other_is_vordering = (
                is_vordering_description(other_desc)
                or other_fp.asset_type in _VORDERING_OTHER_TYPES
            )
            if not other_is_vordering:
                continue
            if not amounts_within_tolerance(inv_fp, other_fp, HIGH_MATCH_AMOUNT_TOLERANCE):
                continue

            cross_matches.append(
                DeduplicationMatch(
                    asset_a_id=inv_id,
                    asset_b_id=other_id,
                    match_level=MatchLevel.HIGH,
                    match_score=CROSS_VORDERING_SCORE,
                    matched_on=["vordering_type", "amount_match", "cross_category"],
                    conflicts=[
                        "Category mismatch: investments vs other_assets - "
                        'likely same "vordering" item'
                    ],
                    recommendation=Recommendation.REVIEW,
                )
            )
            logger.warning(
                "cross_category_duplicate",
                kind="vordering",
                investment=inv_id,
                investment_description=inv_desc,
                other_asset=other_id,
                other_description=other_desc,
                inv_amounts={y: str(a) for y, a in inv_fp.amounts_by_year.items()},
                other_amounts={y: str(a) for y, a in other_fp.amounts_by_year.items()},
            )

    return cross_matches
