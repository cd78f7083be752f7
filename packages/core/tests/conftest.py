"""Shared fixtures for box3-core tests."""

import pytest
import structlog

from box3_core.models import (
    BankSavingsAsset,
    Box3Assets,
    Box3Blueprint,
    InvestmentAsset,
    OtherAsset,
    RealEstateAsset,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test (or the CLI) applied."""
    yield
    structlog.reset_defaults()


def _yearly(amounts, field="value_jan_1"):
    return {year: {field: {"amount": amount}} for year, amount in (amounts or {}).items()}


@pytest.fixture
def make_bank():
    """Build a BankSavingsAsset; amounts are {year: value_jan_1}."""

    def _make(asset_id, *, account=None, bank_name="ING", ownership=100.0, amounts=None, **extra):
        return BankSavingsAsset(
            id=asset_id,
            account_masked=account,
            bank_name=bank_name,
            ownership_percentage=ownership,
            yearly_data=_yearly(amounts),
            **extra,
        )

    return _make


@pytest.fixture
def make_investment():
    """Build an InvestmentAsset; amounts are {year: value_jan_1}."""

    def _make(
        asset_id,
        *,
        account=None,
        institution="DEGIRO",
        type=None,
        description="",
        ownership=100.0,
        amounts=None,
    ):
        return InvestmentAsset(
            id=asset_id,
            account_masked=account,
            institution=institution,
            type=type,
            description=description,
            ownership_percentage=ownership,
            yearly_data=_yearly(amounts),
        )

    return _make


@pytest.fixture
def make_property():
    """Build a RealEstateAsset; amounts are {year: woz_value}."""

    def _make(
        asset_id,
        *,
        address="",
        postcode=None,
        house_number=None,
        cadastral_id=None,
        ownership=100.0,
        amounts=None,
    ):
        return RealEstateAsset(
            id=asset_id,
            address=address,
            postcode=postcode,
            house_number=house_number,
            cadastral_id=cadastral_id,
            ownership_percentage=ownership,
            yearly_data=_yearly(amounts, field="woz_value"),
        )

    return _make


@pytest.fixture
def make_other():
    """Build an OtherAsset; amounts are {year: value_jan_1}."""

    def _make(asset_id, *, description="", type=None, amounts=None):
        return OtherAsset(
            id=asset_id,
            description=description,
            type=type,
            yearly_data=_yearly(amounts),
        )

    return _make


@pytest.fixture
def make_blueprint():
    """Wrap asset lists into a Box3Blueprint."""

    def _make(
        bank_savings=(),
        investments=(),
        real_estate=(),
        other_assets=(),
        debts=(),
        **extra,
    ):
        return Box3Blueprint(
            assets=Box3Assets(
                bank_savings=list(bank_savings),
                investments=list(investments),
                real_estate=list(real_estate),
                other_assets=list(other_assets),
            ),
            debts=list(debts),
            **extra,
        )

    return _make


@pytest.fixture
def ing_duplicate_blueprint(make_bank, make_blueprint):
    """The same ING account, extracted from a statement and from the aangifte."""
    return make_blueprint(
        bank_savings=[
            make_bank(
                "bank_a",
                account="NL91INGB0001234567",
                bank_name="ING",
                amounts={2023: 50000},
                description="Betaalrekening",
            ),
            make_bank(
                "bank_b",
                account="NL91INGB0001234567",
                bank_name="ING Bank",
                amounts={2023: 50000},
                description="Spaarrekening uit aangifte",
            ),
        ]
    )
