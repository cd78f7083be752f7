"""Fingerprint generation for Box 3 assets.

A fingerprint is a pure function of an asset record and the tax years under
consideration. It carries the normalized identifiers, the ownership
percentage and a year -> amount map that the matcher compares field by field.
"""

import hashlib
import re
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

from .models import (
    AnyAsset,
    AssetCategory,
    AssetFingerprint,
    BankSavingsAsset,
    InvestmentAsset,
    OtherAsset,
    RealEstateAsset,
)
from .normalizers import (
    extract_iban,
    normalize_address,
    normalize_institution_name,
    normalize_postcode_id,
)

REAL_ESTATE_INSTITUTION = "VASTGOED"

# Other assets have no ownership percentage in the source schema;
# they are assumed to be fully owned by the household.
DEFAULT_OTHER_ASSET_OWNERSHIP = 100.0

# Candidate value fields per year, first non-null wins
AMOUNT_FIELDS = ("value_jan_1", "woz_value")


def normalize_tax_years(years: Iterable[Union[str, int]]) -> list[str]:
    """Tax years as strings, order preserved, duplicates dropped."""
    normalized: list[str] = []
    for year in years:
        key = str(year).strip()
        if key and key not in normalized:
            normalized.append(key)
    return normalized


def get_amount_for_year(asset: AnyAsset, year: str) -> Decimal:
    """Peildatum value of an asset for one year, 0 when there is none."""
    year_data = asset.yearly_data.get(year)
    if year_data is None:
        return Decimal("0")

    for field_name in AMOUNT_FIELDS:
        point = getattr(year_data, field_name, None)
        if point is not None and point.amount is not None:
            return point.amount
    return Decimal("0")


def _amounts_by_year(asset: AnyAsset, years: Iterable[Union[str, int]]) -> dict[str, Decimal]:
    # Zero counts as "no data", not as an asset worth nothing
    amounts: dict[str, Decimal] = {}
    for year in normalize_tax_years(years):
        amount = get_amount_for_year(asset, year)
        if amount > 0:
            amounts[year] = amount
    return amounts


def _fingerprint_hash(prefix: str, primary_id: str, ownership: float) -> str:
    token = f"{prefix}:{primary_id}:{ownership:g}"
    return hashlib.md5(token.encode("utf-8")).hexdigest()


def _account_primary_id(iban_full: Optional[str], institution: str, last4: Optional[str]) -> str:
    return iban_full or f"{institution}-{last4 or 'UNKNOWN'}"


def generate_bank_fingerprint(
    asset: BankSavingsAsset, years: Iterable[Union[str, int]]
) -> AssetFingerprint:
    """Fingerprint a bank/savings account. Primary id: full IBAN."""
    iban = extract_iban(asset.account_masked)
    institution = normalize_institution_name(asset.bank_name)
    primary_id = _account_primary_id(iban.full, institution, iban.last4)

    return AssetFingerprint(
        category=AssetCategory.BANK_SAVINGS,
        institution_normalized=institution,
        iban_full=iban.full,
        account_last4=iban.last4,
        ownership_percentage=asset.ownership_percentage,
        amounts_by_year=_amounts_by_year(asset, years),
        fingerprint_hash=_fingerprint_hash("bank", primary_id, asset.ownership_percentage),
    )


def generate_investment_fingerprint(
    asset: InvestmentAsset, years: Iterable[Union[str, int]]
) -> AssetFingerprint:
    """Fingerprint an investment account. Primary id: full IBAN."""
    iban = extract_iban(asset.account_masked)
    institution = normalize_institution_name(asset.institution)
    primary_id = _account_primary_id(iban.full, institution, iban.last4)

    return AssetFingerprint(
        category=AssetCategory.INVESTMENTS,
        institution_normalized=institution,
        iban_full=iban.full,
        account_last4=iban.last4,
        asset_type=asset.type.value if asset.type else None,
        ownership_percentage=asset.ownership_percentage,
        amounts_by_year=_amounts_by_year(asset, years),
        fingerprint_hash=_fingerprint_hash("inv", primary_id, asset.ownership_percentage),
    )


def generate_real_estate_fingerprint(
    asset: RealEstateAsset, years: Iterable[Union[str, int]]
) -> AssetFingerprint:
    """Fingerprint a property.

    Primary id: postcode + house number when both are known, otherwise the
    normalized address. Amounts come from the WOZ value.
    """
    address = normalize_address(asset.address)
    postcode_id = normalize_postcode_id(asset.postcode, asset.house_number)
    primary_id = postcode_id or address

    return AssetFingerprint(
        category=AssetCategory.REAL_ESTATE,
        institution_normalized=REAL_ESTATE_INSTITUTION,
        address_normalized=address or None,
        postcode=asset.postcode,
        postcode_id=postcode_id,
        cadastral_id=asset.cadastral_id,
        asset_type=asset.type.value if asset.type else None,
        ownership_percentage=asset.ownership_percentage,
        amounts_by_year=_amounts_by_year(asset, years),
        fingerprint_hash=_fingerprint_hash("re", primary_id, asset.ownership_percentage),
    )


def generate_other_asset_fingerprint(
    asset: OtherAsset, years: Iterable[Union[str, int]]
) -> AssetFingerprint:
    """Fingerprint an other asset. Primary id: the squashed description."""
    description = re.sub(r"[^a-z0-9]", "", (asset.description or "").lower())[:30] or "unknown"
    ownership = DEFAULT_OTHER_ASSET_OWNERSHIP

    return AssetFingerprint(
        category=AssetCategory.OTHER_ASSETS,
        institution_normalized=description.upper(),
        asset_type=asset.type.value if asset.type else None,
        ownership_percentage=ownership,
        amounts_by_year=_amounts_by_year(asset, years),
        fingerprint_hash=_fingerprint_hash("other", description, ownership),
    )


FINGERPRINT_GENERATORS: dict[AssetCategory, Callable[..., AssetFingerprint]] = {
    AssetCategory.BANK_SAVINGS: generate_bank_fingerprint,
    AssetCategory.INVESTMENTS: generate_investment_fingerprint,
    AssetCategory.REAL_ESTATE: generate_real_estate_fingerprint,
    AssetCategory.OTHER_ASSETS: generate_other_asset_fingerprint,
}


def generate_fingerprint(
    category: AssetCategory, asset: AnyAsset, years: Iterable[Union[str, int]]
) -> AssetFingerprint:
    """Dispatch to the generator for ``category``."""
    return FINGERPRINT_GENERATORS[category](asset, years)
