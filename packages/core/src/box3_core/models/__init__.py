"""Data models for box3-core.

This package provides:
- Blueprint models: assets, debts and data points of a Box 3 dossier (blueprint.py)
- Deduplication models: fingerprints, matches and run results (dedup.py)
- Audit trail models for deduplication runs (audit.py)
"""

from box3_core.models.blueprint import (
    # Enumerations
    AssetCategory,
    SourceType,
    InvestmentType,
    RealEstateType,
    OtherAssetType,
    DebtType,
    # Data points
    DataPoint,
    WozDataPoint,
    BankYearData,
    InvestmentYearData,
    RealEstateYearData,
    OtherAssetYearData,
    DebtYearData,
    # Records
    BankSavingsAsset,
    InvestmentAsset,
    RealEstateAsset,
    OtherAsset,
    Debt,
    AnyAsset,
    Box3Assets,
    Box3Blueprint,
    load_blueprint,
)

from box3_core.models.dedup import (
    MatchLevel,
    Recommendation,
    AssetFingerprint,
    DeduplicationMatch,
    OwnershipConflict,
    CategoryCounts,
    DeduplicationResult,
)

from box3_core.models.audit import (
    AuditSeverity,
    AuditEntry,
    AuditWarning,
    AuditTrail,
)

__all__ = [
    # Enumerations
    "AssetCategory",
    "SourceType",
    "InvestmentType",
    "RealEstateType",
    "OtherAssetType",
    "DebtType",
    "MatchLevel",
    "Recommendation",
    # Data points
    "DataPoint",
    "WozDataPoint",
    "BankYearData",
    "InvestmentYearData",
    "RealEstateYearData",
    "OtherAssetYearData",
    "DebtYearData",
    # Records
    "BankSavingsAsset",
    "InvestmentAsset",
    "RealEstateAsset",
    "OtherAsset",
    "Debt",
    "AnyAsset",
    "Box3Assets",
    "Box3Blueprint",
    "load_blueprint",
    # Deduplication
    "AssetFingerprint",
    "DeduplicationMatch",
    "OwnershipConflict",
    "CategoryCounts",
    "DeduplicationResult",
    # Audit trail
    "AuditSeverity",
    "AuditEntry",
    "AuditWarning",
    "AuditTrail",
]
