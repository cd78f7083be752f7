"""Pairwise fingerprint matching: the 4-step deduplication waterfall.

1. EXACT     - same primary identifier and same ownership: merge
2. HIGH      - same institution, last 4 digits and ownership, every shared
               year's amount within 1%: merge
3. POSSIBLE  - same institution plus partial evidence: review, or keep
               separate when ownership differs
4. UNCERTAIN - some similarity, never merged

Tax rules behind the tiers:
- The full IBAN is the primary key for accounts
- Ownership percentage must match before anything is merged
- When in doubt, keep records separate. A duplicate shows up as a total that
  looks too high; a wrong merge silently loses wealth from the return.
"""

from decimal import Decimal
from typing import Optional

from .models import (
    AssetCategory,
    AssetFingerprint,
    DeduplicationMatch,
    MatchLevel,
    Recommendation,
)

# Relative amount tolerances. The exact tier decides on identifiers alone, so
# EXACT_MATCH_AMOUNT_TOLERANCE is never consulted by compare_fingerprints.
# WOZ_VALUE_TOLERANCE replaces the possible-match tolerance for real estate.
EXACT_MATCH_AMOUNT_TOLERANCE = Decimal("0")
HIGH_MATCH_AMOUNT_TOLERANCE = Decimal("0.01")
POSSIBLE_MATCH_AMOUNT_TOLERANCE = Decimal("0.05")
WOZ_VALUE_TOLERANCE = Decimal("0.05")

EXACT_MATCH_SCORE = 100
HIGH_MATCH_SCORE = 85
POSSIBLE_MATCH_SCORE = 60
UNCERTAIN_MATCH_SCORE = 30


def amount_difference(amount_a: Decimal, amount_b: Decimal) -> Decimal:
    """Relative difference ``|a - b| / max(a, b, 1)``."""
    return abs(amount_a - amount_b) / max(amount_a, amount_b, Decimal("1"))


def amounts_within_tolerance(
    fp_a: AssetFingerprint,
    fp_b: AssetFingerprint,
    tolerance: Decimal = HIGH_MATCH_AMOUNT_TOLERANCE,
) -> bool:
    """True when at least one shared year's amounts are within ``tolerance``."""
    for year, amount_a in fp_a.amounts_by_year.items():
        amount_b = fp_b.amounts_by_year.get(year)
        if amount_b and amount_difference(amount_a, amount_b) <= tolerance:
            return True
    return False


def _format_percentage(value: float) -> str:
    return f"{value:g}"


def compare_fingerprints(
    fp_a: AssetFingerprint,
    fp_b: AssetFingerprint,
    id_a: str,
    id_b: str,
) -> Optional[DeduplicationMatch]:
    """Classify the relationship between two fingerprints.

    Tiers are checked strongest first and the first one whose full condition
    set holds wins.

    Args:
        fp_a: Fingerprint of the first asset.
        fp_b: Fingerprint of the second asset.
        id_a: Id of the first asset (kept on merge).
        id_b: Id of the second asset (absorbed on merge).

    Returns:
        The match, or None when the categories differ or nothing matched.
    """
    if fp_a.category != fp_b.category:
        return None

    matched_on: list[str] = []
    conflicts: list[str] = []

    # Step 1: exact - primary identifier + ownership
    has_primary_match = False

    if fp_a.iban_full and fp_a.iban_full == fp_b.iban_full:
        has_primary_match = True
        matched_on.append("iban_full")

    if fp_a.cadastral_id and fp_a.cadastral_id == fp_b.cadastral_id:
        has_primary_match = True
        matched_on.append("cadastral_id")

    if fp_a.postcode_id and fp_a.postcode_id == fp_b.postcode_id:
        has_primary_match = True
        matched_on.append("postcode_house_number")

    if fp_a.address_normalized and fp_a.address_normalized == fp_b.address_normalized:
        has_primary_match = True
        matched_on.append("address_normalized")

    ownership_match = fp_a.ownership_percentage == fp_b.ownership_percentage
    if not ownership_match:
        conflicts.append(
            "ownership_percentage differs: "
            f"{_format_percentage(fp_a.ownership_percentage)}% vs "
            f"{_format_percentage(fp_b.ownership_percentage)}%"
        )

    if has_primary_match and ownership_match:
        return DeduplicationMatch(
            asset_a_id=id_a,
            asset_b_id=id_b,
            match_level=MatchLevel.EXACT,
            match_score=EXACT_MATCH_SCORE,
            matched_on=[*matched_on, "ownership_percentage"],
            conflicts=[],
            recommendation=Recommendation.MERGE,
        )

    # Step 2: high - institution + last4 + every shared year within 1%
    institution_match = fp_a.institution_normalized == fp_b.institution_normalized
    last4_match = bool(fp_a.account_last4) and fp_a.account_last4 == fp_b.account_last4

    review_tolerance = (
        WOZ_VALUE_TOLERANCE
        if fp_a.category == AssetCategory.REAL_ESTATE
        else POSSIBLE_MATCH_AMOUNT_TOLERANCE
    )
    amounts_checked = 0
    amounts_similar = 0
    for year, amount_a in fp_a.amounts_by_year.items():
        amount_b = fp_b.amounts_by_year.get(year)
        if not amount_b:
            continue
        amounts_checked += 1
        diff = amount_difference(amount_a, amount_b)
        if diff <= HIGH_MATCH_AMOUNT_TOLERANCE:
            amounts_similar += 1
            matched_on.append(f"amount_{year}_within_1%")
        elif diff <= review_tolerance:
            conflicts.append(f"amount_{year} differs by {diff * 100:.1f}%")
        else:
            conflicts.append(f"amount_{year} differs significantly: €{amount_a} vs €{amount_b}")

    if institution_match:
        matched_on.append("institution")
    if last4_match:
        matched_on.append("account_last4")

    if (
        institution_match
        and last4_match
        and ownership_match
        and amounts_checked > 0
        and amounts_similar == amounts_checked
    ):
        return DeduplicationMatch(
            asset_a_id=id_a,
            asset_b_id=id_b,
            match_level=MatchLevel.HIGH,
            match_score=HIGH_MATCH_SCORE,
            matched_on=matched_on,
            conflicts=conflicts,
            recommendation=Recommendation.MERGE,
        )

    # Step 3: possible - institution + partial identifier evidence
    if institution_match and (last4_match or amounts_similar > 0):
        return DeduplicationMatch(
            asset_a_id=id_a,
            asset_b_id=id_b,
            match_level=MatchLevel.POSSIBLE,
            match_score=POSSIBLE_MATCH_SCORE,
            matched_on=matched_on,
            conflicts=conflicts,
            recommendation=(
                Recommendation.REVIEW if ownership_match else Recommendation.KEEP_SEPARATE
            ),
        )

    # Step 4: uncertain - some similarity, not enough to act on
    if matched_on:
        return DeduplicationMatch(
            asset_a_id=id_a,
            asset_b_id=id_b,
            match_level=MatchLevel.UNCERTAIN,
            match_score=UNCERTAIN_MATCH_SCORE,
            matched_on=matched_on,
            conflicts=conflicts,
            recommendation=Recommendation.KEEP_SEPARATE,
        )

    return None
