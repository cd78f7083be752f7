"""Tests for the blueprint models and loading."""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from box3_core.exceptions import BlueprintValidationError, Box3Error
from box3_core.models import (
    AssetCategory,
    BankSavingsAsset,
    BankYearData,
    Box3Blueprint,
    DataPoint,
    RealEstateAsset,
    load_blueprint,
)


@pytest.fixture
def raw_blueprint():
    """Blueprint JSON as produced by the extraction stage."""
    return {
        "schema_version": "2.0",
        "fiscal_entity": {"taxpayer": {"id": "tp_01", "name": "J. Jansen"}},
        "assets": {
            "bank_savings": [
                {
                    "id": "bank_1",
                    "owner_id": "joint",
                    "description": "Spaarrekening",
                    "account_masked": "NL91INGB0001234567",
                    "bank_name": "ING",
                    "ownership_percentage": 50,
                    "yearly_data": {
                        "2023": {
                            "value_jan_1": {
                                "amount": 12345.67,
                                "source_doc_id": "doc_3",
                                "source_snippet": "Saldo per 1 januari",
                            },
                            "custom_note": "kept",
                        }
                    },
                }
            ],
            "real_estate": [
                {
                    "id": "re_1",
                    "address": "Kerkstraat 12",
                    "postcode": "1234AB",
                    "house_number": 12,
                    "yearly_data": {
                        "2022": {"woz_value": {"amount": 300000, "reference_date": "2021-01-01"}}
                    },
                }
            ],
        },
        "debts": None,
    }


class TestDataPoint:
    """Tests for DataPoint amount handling."""

    def test_float_amount_is_exact(self):
        """Float input does not carry binary noise into the Decimal."""
        assert DataPoint(amount=0.1).amount == Decimal("0.1")

    def test_string_amount(self):
        assert DataPoint(amount=" 1500.25 ").amount == Decimal("1500.25")

    def test_json_amounts_are_numbers(self):
        assert json.loads(DataPoint(amount=50000).model_dump_json())["amount"] == 50000
        assert json.loads(DataPoint(amount="1500.25").model_dump_json())["amount"] == 1500.25

    @pytest.mark.parametrize("amount", [None, "", "n.v.t.", float("nan")])
    def test_missing_or_unreadable_amount(self, amount):
        """Amounts the extraction could not read count as no data."""
        assert DataPoint(amount=amount).amount is None

    def test_amount_optional(self):
        assert DataPoint(source_doc_id="doc_1").amount is None

    def test_json_null_amount(self):
        assert json.loads(DataPoint(amount=None).model_dump_json())["amount"] is None

    def test_confidence_range(self):
        with pytest.raises(ValidationError):
            DataPoint(amount=1, confidence=1.5)


class TestBareAmounts:
    """Year data accepts a bare number where a data point is expected."""

    def test_bare_number_wrapped(self):
        year = BankYearData.model_validate({"value_jan_1": 50000, "value_dec_31": 1234.5})
        assert year.value_jan_1.amount == Decimal("50000")
        assert year.value_dec_31.amount == Decimal("1234.5")

    def test_bare_woz_value(self):
        asset = RealEstateAsset(id="re", yearly_data={2023: {"woz_value": 400000}})
        assert asset.yearly_data["2023"].woz_value.amount == Decimal("400000")

    def test_unknown_keys_untouched(self):
        """Only data point fields are wrapped; extra keys pass through."""
        year = BankYearData.model_validate({"value_jan_1": 10, "months_held": 12})
        assert year.months_held == 12

    def test_booleans_not_wrapped(self):
        with pytest.raises(ValidationError):
            BankYearData.model_validate({"value_jan_1": True})


class TestAssets:
    """Tests for asset records."""

    def test_int_year_keys(self):
        asset = BankSavingsAsset(id="b", yearly_data={2023: {"value_jan_1": {"amount": 1}}})
        assert list(asset.yearly_data) == ["2023"]

    def test_ownership_range(self):
        with pytest.raises(ValidationError):
            BankSavingsAsset(id="b", ownership_percentage=150)

    def test_id_required(self):
        with pytest.raises(ValidationError):
            BankSavingsAsset(bank_name="ING")

    def test_house_number_coerced(self):
        assert RealEstateAsset(id="re", house_number=12).house_number == "12"

    def test_defaults(self):
        asset = BankSavingsAsset(id="b")
        assert asset.ownership_percentage == 100.0
        assert asset.description == ""
        assert asset.yearly_data == {}


class TestLoadBlueprint:
    """Tests for load_blueprint."""

    def test_valid(self, raw_blueprint):
        blueprint = load_blueprint(raw_blueprint)

        assert isinstance(blueprint, Box3Blueprint)
        bank = blueprint.assets.bank_savings[0]
        assert bank.ownership_percentage == 50.0
        assert bank.yearly_data["2023"].value_jan_1.amount == Decimal("12345.67")
        assert blueprint.assets.real_estate[0].house_number == "12"
        assert blueprint.debts == []

    def test_unknown_fields_pass_through(self, raw_blueprint):
        blueprint = load_blueprint(raw_blueprint)
        data = blueprint.model_dump(mode="json", exclude_unset=True)

        assert data["fiscal_entity"] == raw_blueprint["fiscal_entity"]
        year = data["assets"]["bank_savings"][0]["yearly_data"]["2023"]
        assert year["custom_note"] == "kept"
        assert year["value_jan_1"]["source_snippet"] == "Saldo per 1 januari"
        assert year["value_jan_1"]["amount"] == 12345.67

    def test_collect_tax_years(self, raw_blueprint):
        assert load_blueprint(raw_blueprint).collect_tax_years() == ["2022", "2023"]

    def test_for_category(self, raw_blueprint):
        assets = load_blueprint(raw_blueprint).assets
        assert [a.id for a in assets.for_category(AssetCategory.REAL_ESTATE)] == ["re_1"]
        assert assets.for_category(AssetCategory.INVESTMENTS) == []

    def test_invalid_raises_blueprint_error(self, raw_blueprint):
        del raw_blueprint["assets"]["bank_savings"][0]["id"]

        with pytest.raises(BlueprintValidationError) as exc_info:
            load_blueprint(raw_blueprint)

        error = exc_info.value
        assert isinstance(error, Box3Error)
        assert error.recoverable is True
        assert {"loc": "assets.bank_savings.0.id", "msg": "Field required"} in error.errors
        assert error.details["errors"] == error.errors
        assert "1 error(s)" in str(error)

    def test_bare_and_null_amounts_load(self, raw_blueprint):
        """Extraction output with bare numbers or null amounts is accepted."""
        bank = raw_blueprint["assets"]["bank_savings"][0]
        bank["yearly_data"]["2022"] = {"value_jan_1": 50000}
        bank["yearly_data"]["2023"]["value_dec_31"] = {"amount": None}

        year_data = load_blueprint(raw_blueprint).assets.bank_savings[0].yearly_data

        assert year_data["2022"].value_jan_1.amount == Decimal("50000")
        assert year_data["2023"].value_dec_31.amount is None
