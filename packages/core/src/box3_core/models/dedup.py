"""Deduplication data models: fingerprints, matches and run results."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .audit import AuditTrail
from .blueprint import AssetCategory


class MatchLevel(str, Enum):
    """Confidence tier of a match, strongest first."""

    EXACT = "exact"
    HIGH = "high"
    POSSIBLE = "possible"
    UNCERTAIN = "uncertain"


class Recommendation(str, Enum):
    """Action implied by a match."""

    MERGE = "merge"
    REVIEW = "review"
    KEEP_SEPARATE = "keep_separate"


class AssetFingerprint(BaseModel):
    """Comparable summary of one asset record.

    Fingerprints are derived on every run and never persisted. Two
    fingerprints are only comparable when their categories match.
    """

    category: AssetCategory
    institution_normalized: str = Field(
        description="Normalized institution token, e.g. 'ING' or 'VASTGOED'"
    )
    iban_full: Optional[str] = None
    account_last4: Optional[str] = None
    address_normalized: Optional[str] = None
    postcode: Optional[str] = None
    postcode_id: Optional[str] = Field(
        default=None,
        description="Postcode plus house number, e.g. '1234AB-12'",
    )
    cadastral_id: Optional[str] = None
    asset_type: Optional[str] = None
    ownership_percentage: float
    amounts_by_year: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Tax year -> amount; zero and missing years are left out",
    )
    fingerprint_hash: str = Field(
        description="Debugging token over category, primary id and ownership. Not used for equality."
    )


class DeduplicationMatch(BaseModel):
    """Relationship found between two asset records."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "asset_a_id": "bank_1",
                    "asset_b_id": "bank_2",
                    "match_level": "exact",
                    "match_score": 100,
                    "matched_on": ["iban_full", "ownership_percentage"],
                    "conflicts": [],
                    "recommendation": "merge",
                    "merged_into": "bank_1",
                }
            ]
        }
    }

    asset_a_id: str
    asset_b_id: str
    match_level: MatchLevel
    match_score: int = Field(ge=0, le=100)
    matched_on: list[str] = Field(default_factory=list)
    conflicts: list[str] = Field(default_factory=list)
    recommendation: Recommendation
    merged_into: Optional[str] = Field(
        default=None,
        description="Kept asset id when the merge was applied; asset_b_id is the absorbed record",
    )


class OwnershipConflict(BaseModel):
    """Two related records disagreeing on ownership percentage."""

    asset_ids: list[str]
    percentages: list[float] = Field(default_factory=list)
    message: str


class CategoryCounts(BaseModel):
    """Record counts per blueprint category."""

    bank_savings: int = 0
    investments: int = 0
    real_estate: int = 0
    other_assets: int = 0
    debts: int = 0

    @property
    def total(self) -> int:
        return (
            self.bank_savings
            + self.investments
            + self.real_estate
            + self.other_assets
            + self.debts
        )


class DeduplicationResult(BaseModel):
    """Audit record of one deduplication run, surfaced to the reviewer."""

    original_count: CategoryCounts
    deduplicated_count: CategoryCounts
    matches_found: list[DeduplicationMatch] = Field(default_factory=list)
    items_merged: int = 0
    items_flagged_for_review: int = 0
    flagged_asset_ids: list[str] = Field(
        default_factory=list,
        description="Ids from every review match, in match order; repeats are expected",
    )
    ownership_conflicts: list[OwnershipConflict] = Field(default_factory=list)
    audit_trail: Optional[AuditTrail] = None
