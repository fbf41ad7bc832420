"""
Tests for the Roth-conversion overlay on estate projections.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

import pytest
import pandas as pd
from decimal import Decimal

from calculators.estate_models import (
    AssetComposition,
    AssumptionInputs,
    EstateCalculationInput,
    EstateInputError,
)
from calculators.roth_overlay import (
    apply_roth_overlay,
    balances_at_death,
    normalize_roth_projection,
)


@pytest.fixture
def calc_input():
    return EstateCalculationInput(
        base_estate_value=Decimal("20000000"),
        asset_composition=AssetComposition(
            taxable=Decimal("2000000"),
            tax_deferred=Decimal("4000000"),
            roth=Decimal("500000"),
            illiquid=Decimal("13500000"),
        ),
        assumptions=AssumptionInputs(
            as_of_year=2025,
            current_age=60,
            projected_death_age=85,
            admin_expense_rate=Decimal(0),
            federal_exemption_override=Decimal("13990000"),
        ),
    )


class TestNormalizeRothProjection:
    """Test normalizing Roth projection rows."""

    def test_camel_case_columns(self):
        """camelCase columns are renamed and rows sorted by year."""
        df = normalize_roth_projection([
            {"year": 2031, "traditionalBalance": 100, "rothBalance": 50},
            {"year": 2030, "traditionalBalance": 200, "rothBalance": 25},
        ])

        assert list(df["year"]) == [2030, 2031]
        assert "traditional_balance" in df.columns
        assert "roth_balance" in df.columns

    def test_age_mapped_to_year(self):
        """Age rows are mapped to calendar years."""
        df = normalize_roth_projection(
            [{"age": 85, "traditional_balance": 1, "roth_balance": 2}],
            current_age=60,
            as_of_year=2025,
        )
        assert df.loc[0, "year"] == 2050

    def test_duplicate_year_keeps_last(self):
        """The last row for a year wins."""
        df = normalize_roth_projection(pd.DataFrame([
            {"year": 2040, "traditional_balance": 1, "roth_balance": 1},
            {"year": 2040, "traditional_balance": 9, "roth_balance": 9},
        ]))
        assert len(df) == 1
        assert df.loc[0, "traditional_balance"] == 9

    def test_empty_projection_rejected(self):
        """An empty projection is unusable."""
        with pytest.raises(EstateInputError, match="empty"):
            normalize_roth_projection([])

    def test_missing_columns_rejected(self):
        """Balance columns are required."""
        with pytest.raises(EstateInputError, match="roth_balance"):
            normalize_roth_projection([{"year": 2040, "traditional_balance": 1}])

    def test_missing_year_and_age_rejected(self):
        """Rows need a year or an age."""
        with pytest.raises(EstateInputError, match="year"):
            normalize_roth_projection([{"traditional_balance": 1, "roth_balance": 1}])


class TestBalancesAtDeath:
    """Test picking the death-year row."""

    def test_exact_year(self):
        """The death-year row is used when present."""
        df = normalize_roth_projection([
            {"year": 2049, "traditional_balance": 10, "roth_balance": 20},
            {"year": 2050, "traditional_balance": 30, "roth_balance": 40},
        ])
        balances = balances_at_death(df, 2050)

        assert balances.matched_year == 2050
        assert balances.traditional_balance == Decimal("30.00")
        assert balances.roth_balance == Decimal("40.00")
        assert balances.taxable_balance is None

    def test_nearest_year_prefers_earlier(self):
        """Ties go to the earlier year."""
        df = normalize_roth_projection([
            {"year": 2049, "traditional_balance": 10, "roth_balance": 20},
            {"year": 2051, "traditional_balance": 30, "roth_balance": 40},
        ])
        assert balances_at_death(df, 2050).matched_year == 2049

    def test_negative_balances_floor_at_zero(self):
        """Negative balances are read as zero."""
        df = normalize_roth_projection([{"year": 2050, "traditional_balance": -5, "roth_balance": 1}])
        assert balances_at_death(df, 2050).traditional_balance == Decimal(0)


class TestApplyRothOverlay:
    """Test the baseline vs Roth comparison without growth."""

    def test_conversion_moves_heir_income_tax(self, calc_input):
        """Same total balances, shifted from pre-tax to Roth."""
        result = apply_roth_overlay(calc_input, [
            {"year": 2050, "traditional_balance": 1000000, "roth_balance": 3500000},
        ])

        assert result.baseline.heir_tax_estimate.projected_income_tax == Decimal("1000000.00")
        assert result.with_roth.heir_tax_estimate.projected_income_tax == Decimal("250000.00")
        assert result.with_roth.projected_estate_value == result.baseline.projected_estate_value
        assert result.comparison.tax_savings == Decimal(0)

    def test_conversion_taxes_shrink_estate(self, calc_input):
        """Paying conversion tax leaves less in the estate and lowers estate tax."""
        result = apply_roth_overlay(calc_input, [
            {"year": 2050, "traditional_balance": 0, "roth_balance": 3500000},
        ])

        assert result.with_roth.projected_estate_value == Decimal("19000000.00")
        assert result.comparison.tax_savings == Decimal("400000.00")

    def test_liquidity_uses_roth_balance(self, calc_input):
        """Death-year Roth balance counts as liquid."""
        result = apply_roth_overlay(calc_input, [
            {"year": 2050, "traditional_balance": 1000000, "roth_balance": 3500000},
        ])
        assert result.with_roth.liquidity.available == Decimal("5500000.00")
        assert result.comparison.liquidity_improvement > 0

    def test_taxable_balance_replaces_composition(self, calc_input):
        """A projected taxable balance replaces the current one."""
        result = apply_roth_overlay(calc_input, [
            {"year": 2050, "traditional_balance": 4000000, "roth_balance": 500000, "taxable_balance": 1000000},
        ])
        assert result.balances.taxable_balance == Decimal("1000000.00")
        assert result.with_roth.liquidity.available == Decimal("1500000.00")

    def test_summaries(self, calc_input):
        """Both projections are summarized."""
        result = apply_roth_overlay(calc_input, [
            {"year": 2050, "traditional_balance": 1000000, "roth_balance": 3500000},
        ])
        summaries = result.summaries()

        assert set(summaries) == {"baseline", "with_roth"}
        assert summaries["with_roth"]["assumptions"]["year_of_death"] == 2050


class TestOverlayWithGrowth:
    """Test the overlay when the estate appreciates before death."""

    CENT = Decimal("0.01")

    @pytest.fixture
    def growing_input(self):
        """$10M estate at 5% for 20 years, $4M of it pre-tax."""
        return EstateCalculationInput(
            base_estate_value=Decimal("10000000"),
            asset_composition=AssetComposition(
                tax_deferred=Decimal("4000000"),
                illiquid=Decimal("6000000"),
            ),
            assumptions=AssumptionInputs(
                as_of_year=2025,
                current_age=60,
                projected_death_age=80,
                appreciation_rate=Decimal("5"),
            ),
        )

    @pytest.fixture
    def grown_pretax(self):
        """The $4M pre-tax balance grown at the same 5% for 20 years."""
        return (Decimal("4000000") * Decimal("1.05") ** 20).quantize(Decimal("0.01"))

    def test_no_conversion_leaves_estate_unchanged(self, growing_input, grown_pretax):
        """Balances that grow like the baseline do not move the estate or its tax."""
        result = apply_roth_overlay(growing_input, [
            {"year": 2045, "traditional_balance": str(grown_pretax), "roth_balance": 0},
        ])

        assert abs(result.with_roth.projected_estate_value - result.baseline.projected_estate_value) <= self.CENT
        assert abs(result.comparison.tax_savings) <= self.CENT

    def test_full_conversion_only_moves_heir_tax(self, growing_input, grown_pretax):
        """Converting everything keeps the estate and removes heirs' income tax."""
        result = apply_roth_overlay(growing_input, [
            {"year": 2045, "traditional_balance": 0, "roth_balance": str(grown_pretax)},
        ])

        assert abs(result.with_roth.projected_estate_value - result.baseline.projected_estate_value) <= self.CENT
        assert result.with_roth.heir_tax_estimate.projected_income_tax == Decimal(0)

    def test_conversion_tax_reduces_estate_at_death(self, growing_input, grown_pretax):
        """Death-year balances $1M lower give a projected estate $1M lower."""
        result = apply_roth_overlay(growing_input, [
            {"year": 2045, "traditional_balance": 0, "roth_balance": str(grown_pretax - Decimal("1000000"))},
        ])

        drop = result.baseline.projected_estate_value - result.with_roth.projected_estate_value
        assert abs(drop - Decimal("1000000")) <= self.CENT
        assert result.comparison.tax_savings > 0
