"""Box 3 dossier data models.

This module describes the "blueprint": the working asset and debt collection
for one household's Box 3 (wealth tax) objection dossier, as produced by the
upstream LLM extraction stage.

The models mirror the categories used by the Belastingdienst:
- Bank- en spaartegoeden (bank_savings)
- Beleggingen (investments)
- Onroerende zaken (real_estate)
- Overige bezittingen (other_assets)
- Schulden (debts)

Only the identifying fields and the numeric ``amount`` of each data point are
read by the deduplication engine. Everything else (source tracking, validation
notes, dossier sections such as the fiscal entity) is carried through as-is.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from ..exceptions import BlueprintValidationError


class AssetCategory(str, Enum):
    """Asset categories of a Box 3 blueprint."""

    BANK_SAVINGS = "bank_savings"
    INVESTMENTS = "investments"
    REAL_ESTATE = "real_estate"
    OTHER_ASSETS = "other_assets"


class SourceType(str, Enum):
    """Where a data point value originated."""

    DOCUMENT = "document"
    EMAIL = "email"
    CLIENT_ESTIMATE = "client_estimate"
    CALCULATION = "calculation"
    ESTIMATE = "estimate"


class InvestmentType(str, Enum):
    """Types of investments (Beleggingen)."""

    STOCKS = "stocks"
    BONDS = "bonds"
    FUNDS = "funds"
    CRYPTO = "crypto"
    OTHER = "other"


class RealEstateType(str, Enum):
    """Types of real estate (Onroerende zaken)."""

    RENTED_RESIDENTIAL = "rented_residential"
    RENTED_COMMERCIAL = "rented_commercial"
    VACATION_HOME = "vacation_home"
    LAND = "land"
    OTHER = "other"


class OtherAssetType(str, Enum):
    """Types of other assets (Overige bezittingen)."""

    VVE_SHARE = "vve_share"
    CLAIMS = "claims"  # Vorderingen
    RIGHTS = "rights"
    CAPITAL_INSURANCE = "capital_insurance"
    LOANED_MONEY = "loaned_money"  # Uitgeleend geld
    CASH = "cash"
    PERIODIC_BENEFITS = "periodic_benefits"
    OTHER = "other"


class DebtType(str, Enum):
    """Types of debts (Schulden)."""

    MORTGAGE_BOX3 = "mortgage_box3"
    MORTGAGE_BOX1_RESIDUAL = "mortgage_box1_residual"
    CONSUMER_CREDIT = "consumer_credit"
    PERSONAL_LOAN = "personal_loan"
    STUDY_LOAN = "study_loan"
    TAX_DEBT = "tax_debt"
    OTHER = "other"


# =============================================================================
# DATA POINTS
# =============================================================================


class DataPoint(BaseModel):
    """A single monetary value with source tracking.

    The deduplication engine only reads ``amount``; the remaining fields
    belong to the extraction layer and are preserved untouched.
    """

    model_config = {"extra": "allow"}

    amount: Optional[Decimal] = Field(
        default=None,
        description="Monetary amount in euros; None when the extraction found no value",
    )
    source_doc_id: Optional[str] = Field(
        default=None,
        description="Identifier of the source document",
    )
    source_type: Optional[SourceType] = None
    source_snippet: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    requires_validation: Optional[bool] = None
    validation_note: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce float and string amounts to Decimal without binary noise.

        Blank, unparseable and non-finite amounts count as no data.
        """
        if isinstance(v, (float, str)):
            try:
                v = Decimal(str(v).strip())
            except InvalidOperation:
                return None
        if isinstance(v, Decimal) and not v.is_finite():
            return None
        return v

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, v: Optional[Decimal]) -> Union[int, float, None]:
        """Emit plain JSON numbers, not strings."""
        if v is None:
            return None
        if v == v.to_integral_value():
            return int(v)
        return float(v)


class WozDataPoint(DataPoint):
    """WOZ valuation with its peildatum (reference date)."""

    reference_date: Optional[str] = None


class _YearData(BaseModel):
    model_config = {"extra": "allow"}

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_amounts(cls, data):
        """Accept a bare number where a data point is expected."""
        if not isinstance(data, Mapping):
            return data
        return {
            key: (
                {"amount": value}
                if key in cls.model_fields
                and isinstance(value, (int, float, Decimal))
                and not isinstance(value, bool)
                else value
            )
            for key, value in data.items()
        }


class BankYearData(_YearData):
    value_jan_1: Optional[DataPoint] = None
    value_dec_31: Optional[DataPoint] = None
    interest_received: Optional[DataPoint] = None
    currency_result: Optional[DataPoint] = None


class InvestmentYearData(_YearData):
    value_jan_1: Optional[DataPoint] = None
    value_dec_31: Optional[DataPoint] = None
    dividend_received: Optional[DataPoint] = None
    deposits: Optional[DataPoint] = None
    withdrawals: Optional[DataPoint] = None
    realized_gains: Optional[DataPoint] = None
    transaction_costs: Optional[DataPoint] = None
    currency_result: Optional[DataPoint] = None


class RealEstateYearData(_YearData):
    woz_value: Optional[WozDataPoint] = None
    economic_value: Optional[DataPoint] = None
    rental_value_jan_1: Optional[DataPoint] = None
    rental_value_dec_31: Optional[DataPoint] = None
    rental_income_gross: Optional[DataPoint] = None
    maintenance_costs: Optional[DataPoint] = None
    property_tax: Optional[DataPoint] = None
    insurance: Optional[DataPoint] = None
    other_costs: Optional[DataPoint] = None


class OtherAssetYearData(_YearData):
    value_jan_1: Optional[DataPoint] = None
    value_dec_31: Optional[DataPoint] = None
    income_received: Optional[DataPoint] = None
    premium_paid: Optional[DataPoint] = None
    interest_received: Optional[DataPoint] = None


class DebtYearData(_YearData):
    value_jan_1: Optional[DataPoint] = None
    value_dec_31: Optional[DataPoint] = None
    interest_paid: Optional[DataPoint] = None
    interest_rate: Optional[DataPoint] = None
    currency_result: Optional[DataPoint] = None


# =============================================================================
# ASSETS AND DEBTS
# =============================================================================


class _BlueprintItem(BaseModel):
    """Fields shared by every asset and debt record."""

    model_config = {"extra": "allow"}

    id: str = Field(description="Stable identifier of the record")
    owner_id: Optional[str] = Field(
        default=None,
        description="Fiscal person owning the record: 'tp_01', 'fp_01' or 'joint'",
    )
    description: str = Field(default="", description="Free-text description")
    country: Optional[str] = Field(default=None, description="Country code (NL, BE, ...)")

    @field_validator("yearly_data", mode="before", check_fields=False)
    @classmethod
    def stringify_year_keys(cls, v):
        """Accept integer tax years as keys."""
        if isinstance(v, Mapping):
            return {str(year): data for year, data in v.items()}
        return v


class BankSavingsAsset(_BlueprintItem):
    """Bank- en spaartegoeden."""

    account_masked: Optional[str] = Field(
        default=None,
        description="Account number as found in the document, possibly masked",
    )
    bank_name: Optional[str] = None
    is_joint_account: bool = False
    ownership_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    is_green_investment: bool = False
    yearly_data: dict[str, BankYearData] = Field(default_factory=dict)


class InvestmentAsset(_BlueprintItem):
    """Beleggingen."""

    institution: Optional[str] = None
    account_masked: Optional[str] = None
    type: Optional[InvestmentType] = None
    ownership_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    yearly_data: dict[str, InvestmentYearData] = Field(default_factory=dict)


class RealEstateAsset(_BlueprintItem):
    """Onroerende zaken."""

    address: str = ""
    postcode: Optional[str] = None
    house_number: Optional[str] = None
    cadastral_id: Optional[str] = Field(
        default=None,
        description="Kadastrale aanduiding, when the source document states it",
    )
    type: Optional[RealEstateType] = None
    ownership_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    ownership_note: Optional[str] = None
    is_dwelling: Optional[bool] = None
    has_rent_protection: Optional[bool] = None
    is_foreign: Optional[bool] = None
    yearly_data: dict[str, RealEstateYearData] = Field(default_factory=dict)

    @field_validator("house_number", mode="before")
    @classmethod
    def coerce_house_number(cls, v):
        if isinstance(v, int):
            return str(v)
        return v


class OtherAsset(_BlueprintItem):
    """Overige bezittingen.

    Note: the source schema has no ownership percentage for these.
    """

    type: Optional[OtherAssetType] = None
    insurance_policy_number: Optional[str] = None
    borrower_name: Optional[str] = None
    yearly_data: dict[str, OtherAssetYearData] = Field(default_factory=dict)


class Debt(_BlueprintItem):
    """Schulden. Debts are not fingerprinted or matched."""

    lender: Optional[str] = None
    linked_asset_id: Optional[str] = None
    ownership_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    debt_type: Optional[DebtType] = None
    yearly_data: dict[str, DebtYearData] = Field(default_factory=dict)


AnyAsset = Union[BankSavingsAsset, InvestmentAsset, RealEstateAsset, OtherAsset]


class Box3Assets(BaseModel):
    """Asset container, one list per category."""

    bank_savings: list[BankSavingsAsset] = Field(default_factory=list)
    investments: list[InvestmentAsset] = Field(default_factory=list)
    real_estate: list[RealEstateAsset] = Field(default_factory=list)
    other_assets: list[OtherAsset] = Field(default_factory=list)

    def for_category(self, category: AssetCategory) -> list[AnyAsset]:
        """Get the asset list for a category."""
        return getattr(self, category.value)


class Box3Blueprint(BaseModel):
    """Complete working collection for one dossier.

    Dossier sections the engine does not interpret (fiscal_entity,
    tax_authority_data, year_summaries, validation_flags, ...) are kept as
    extra fields and passed through unchanged.
    """

    model_config = {"extra": "allow"}

    schema_version: str = "2.0"
    assets: Box3Assets = Field(default_factory=Box3Assets)
    debts: list[Debt] = Field(default_factory=list)

    @field_validator("debts", mode="before")
    @classmethod
    def none_debts_to_empty(cls, v):
        return [] if v is None else v

    def collect_tax_years(self) -> list[str]:
        """All tax years present in asset yearly data, sorted."""
        years: set[str] = set()
        for category in AssetCategory:
            for asset in self.assets.for_category(category):
                years.update(asset.yearly_data.keys())
        return sorted(years)


def load_blueprint(data: Mapping[str, Any]) -> Box3Blueprint:
    """Validate raw extraction output into a Box3Blueprint.

    Args:
        data: Parsed JSON blueprint.

    Returns:
        Validated blueprint.

    Raises:
        BlueprintValidationError: If the data does not match the schema.
    """
    try:
        return Box3Blueprint.model_validate(data)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise BlueprintValidationError(
            f"Blueprint failed validation with {len(errors)} error(s)",
            errors=errors,
        ) from e
