"""Semantic deduplication of a Box 3 blueprint.

Runs the pairwise matcher over every pair of assets within each category and
resolves the merge recommendations into a single asset collection.

Merge resolution is greedy and follows input order: for each ``merge`` match
the second asset is absorbed into the first, unless either one was already
absorbed. A chain of three mutually matching records therefore resolves to a
single survivor (the first), not a pairwise cascade.

Debts are not fingerprinted. They pass through unchanged.
"""

from typing import Iterable, NamedTuple, Optional, Union
from uuid import uuid4

import structlog

from .fingerprint import generate_fingerprint, normalize_tax_years
from .matcher import compare_fingerprints
from .models import (
    AssetCategory,
    AssetFingerprint,
    AuditSeverity,
    AuditTrail,
    Box3Blueprint,
    CategoryCounts,
    DeduplicationMatch,
    DeduplicationResult,
    MatchLevel,
    OwnershipConflict,
    Recommendation,
)

logger = structlog.get_logger()


class DeduplicationOutcome(NamedTuple):
    """Deduplicated blueprint plus the audit result of the run."""

    blueprint: Box3Blueprint
    result: DeduplicationResult


def count_records(blueprint: Box3Blueprint) -> CategoryCounts:
    """Count records per category."""
    return CategoryCounts(
        bank_savings=len(blueprint.assets.bank_savings),
        investments=len(blueprint.assets.investments),
        real_estate=len(blueprint.assets.real_estate),
        other_assets=len(blueprint.assets.other_assets),
        debts=len(blueprint.debts),
    )


def find_category_matches(
    blueprint: Box3Blueprint,
    category: AssetCategory,
    years: list[str],
) -> list[tuple[DeduplicationMatch, AssetFingerprint, AssetFingerprint]]:
    """Compare all pairs within one category, in input order."""
    fingerprinted = [
        (asset.id, generate_fingerprint(category, asset, years))
        for asset in blueprint.assets.for_category(category)
    ]

    found = []
    for i, (id_a, fp_a) in enumerate(fingerprinted):
        for id_b, fp_b in fingerprinted[i + 1 :]:
            match = compare_fingerprints(fp_a, fp_b, id_a, id_b)
            if match is not None:
                found.append((match, fp_a, fp_b))
    return found


def run_semantic_deduplication(
    blueprint: Box3Blueprint,
    years: Optional[Iterable[Union[str, int]]] = None,
) -> DeduplicationOutcome:
    """Run semantic deduplication on a blueprint.

    The input blueprint is not modified. The returned blueprint holds new
    lists containing the surviving asset objects themselves.

    Args:
        blueprint: The blueprint to deduplicate.
        years: Tax years to consider. Defaults to every year found in the
            assets' yearly data.

    Returns:
        DeduplicationOutcome with the deduplicated blueprint and the result.
    """
    tax_years = (
        normalize_tax_years(years) if years is not None else blueprint.collect_tax_years()
    )
    original_count = count_records(blueprint)

    logger.info(
        "dedup_started",
        bank_count=original_count.bank_savings,
        investment_count=original_count.investments,
        real_estate_count=original_count.real_estate,
        other_count=original_count.other_assets,
        years=tax_years,
    )

    trail = AuditTrail(run_id=f"dedup-{uuid4().hex[:12]}")
    trail.metadata["tax_years"] = ",".join(tax_years)

    found = []
    for category in AssetCategory:
        found.extend(find_category_matches(blueprint, category, tax_years))

    ids_to_remove: set[str] = set()
    flagged_ids: list[str] = []
    matches: list[DeduplicationMatch] = []
    ownership_conflicts: list[OwnershipConflict] = []
    items_merged = 0
    items_flagged = 0

    for match, fp_a, fp_b in found:
        id_a, id_b = match.asset_a_id, match.asset_b_id

        if match.recommendation == Recommendation.MERGE:
            if id_a in ids_to_remove or id_b in ids_to_remove:
                logger.debug(
                    "dedup_merge_skipped",
                    asset_a=id_a,
                    asset_b=id_b,
                    reason="already_merged",
                )
            else:
                ids_to_remove.add(id_b)
                match = match.model_copy(update={"merged_into": id_a})
                items_merged += 1
                trail.add_entry(
                    step="merge",
                    action=f"Merged {id_b} into {id_a}",
                    asset_ids=[id_a, id_b],
                    match_level=match.match_level.value,
                    notes=", ".join(match.matched_on),
                )
                logger.info(
                    "dedup_merged",
                    kept=id_a,
                    absorbed=id_b,
                    match_level=match.match_level.value,
                    matched_on=match.matched_on,
                )
        elif match.recommendation == Recommendation.REVIEW:
            flagged_ids.extend([id_a, id_b])
            items_flagged += 1
            trail.add_warning(
                code="REVIEW_MATCH",
                message=f"Possible duplicate: {id_a} and {id_b}",
                asset_ids=[id_a, id_b],
                suggested_action="Confirm whether both records describe the same asset",
            )
            logger.warning(
                "dedup_review_flagged",
                asset_a=id_a,
                asset_b=id_b,
                match_level=match.match_level.value,
                conflicts=match.conflicts,
            )

        ownership_message = next(
            (c for c in match.conflicts if "ownership_percentage" in c), None
        )
        if ownership_message:
            ownership_conflicts.append(
                OwnershipConflict(
                    asset_ids=[id_a, id_b],
                    percentages=[fp_a.ownership_percentage, fp_b.ownership_percentage],
                    message=ownership_message,
                )
            )
            trail.add_warning(
                code="OWNERSHIP_CONFLICT",
                message=ownership_message,
                asset_ids=[id_a, id_b],
                severity=AuditSeverity.INFO,
                requires_review=match.match_level == MatchLevel.POSSIBLE,
                suggested_action="Check the ownership share in the source documents",
            )

        matches.append(match)

    assets = blueprint.assets
    deduplicated = blueprint.model_copy(
        update={
            "assets": assets.model_copy(
                update={
                    category.value: [
                        a for a in assets.for_category(category) if a.id not in ids_to_remove
                    ]
                    for category in AssetCategory
                }
            ),
            # Debt ids never enter the removal set; filtered for consistency
            "debts": [d for d in blueprint.debts if d.id not in ids_to_remove],
        }
    )

    trail.complete()
    result = DeduplicationResult(
        original_count=original_count,
        deduplicated_count=count_records(deduplicated),
        matches_found=matches,
        items_merged=items_merged,
        items_flagged_for_review=items_flagged,
        flagged_asset_ids=flagged_ids,
        ownership_conflicts=ownership_conflicts,
        audit_trail=trail,
    )

    logger.info(
        "dedup_completed",
        items_merged=items_merged,
        items_flagged=items_flagged,
        ownership_conflicts=len(ownership_conflicts),
        original_total=result.original_count.total,
        deduplicated_total=result.deduplicated_count.total,
    )

    return DeduplicationOutcome(blueprint=deduplicated, result=result)
