"""Box3 Core - Semantic deduplication of Box 3 dossier assets."""

__version__ = "0.1.0"

from .normalizers import extract_iban, normalize_address, normalize_institution_name
from .fingerprint import (
    generate_bank_fingerprint,
    generate_investment_fingerprint,
    generate_other_asset_fingerprint,
    generate_real_estate_fingerprint,
)
from .matcher import compare_fingerprints
from .deduplication import DeduplicationOutcome, run_semantic_deduplication
from .cross_category import detect_cross_category_duplicates
from .models import (
    AssetFingerprint,
    Box3Blueprint,
    DeduplicationMatch,
    DeduplicationResult,
    load_blueprint,
)

__all__ = [
    # Normalizers
    "normalize_institution_name",
    "extract_iban",
    "normalize_address",
    # Fingerprints
    "generate_bank_fingerprint",
    "generate_investment_fingerprint",
    "generate_real_estate_fingerprint",
    "generate_other_asset_fingerprint",
    # Matching
    "compare_fingerprints",
    "run_semantic_deduplication",
    "DeduplicationOutcome",
    "detect_cross_category_duplicates",
    # Models
    "AssetFingerprint",
    "Box3Blueprint",
    "DeduplicationMatch",
    "DeduplicationResult",
    "load_blueprint",
]
