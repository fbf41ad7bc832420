"""
Unit Tests for the Estate Projection Engine

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from calculators.estate_models import (
    AssetComposition,
    AssumptionInputs,
    EstateCalculationInput,
    EstateProfile,
    StrategyInputs,
)
from calculators.estate_projection import (
    appreciation_factor,
    calculate_estate_projection,
    compare_projections,
    resolve_current_age,
    resolve_death_age,
)
from core.hashing import canonical_json_dumps


def make_input(
    base="20000000",
    composition=None,
    strategies=None,
    profile=None,
    **assumptions
) -> EstateCalculationInput:
    defaults = {
        "as_of_year": 2025,
        "current_age": 60,
        "projected_death_age": 85,
        "admin_expense_rate": Decimal(0),
        "federal_exemption_override": Decimal("13990000"),
    }
    defaults.update(assumptions)
    return EstateCalculationInput(
        base_estate_value=Decimal(base),
        asset_composition=composition or AssetComposition(
            taxable=Decimal("2000000"),
            tax_deferred=Decimal("4000000"),
            roth=Decimal("500000"),
            illiquid=Decimal("13500000"),
        ),
        strategies=strategies or StrategyInputs(),
        assumptions=AssumptionInputs(**defaults),
        profile=profile,
    )


class TestTwentyMillionEstate:
    """Single filer, $20M, current-law exclusion, no deductions."""

    @pytest.fixture
    def projection(self):
        return calculate_estate_projection(make_input())

    def test_federal_tax(self, projection):
        """(20M - 13.99M) x 40%, no state tax."""
        assert projection.projected_taxable_estate == Decimal("20000000")
        assert projection.federal_taxable_amount == Decimal("6010000.00")
        assert projection.federal_tax == Decimal("2404000.00")
        assert projection.state_tax == Decimal("0.00")
        assert projection.total_tax == Decimal("2404000.00")

    def test_net_to_heirs(self, projection):
        """Net is taxable estate less total tax."""
        assert projection.net_to_heirs == Decimal("17596000.00")
        assert projection.effective_tax_rate == Decimal("12.02")

    def test_liquidity(self, projection):
        """Required liquidity is 110% of tax plus settlement costs."""
        liquidity = projection.liquidity
        assert liquidity.probate_costs == Decimal("1000000")
        assert liquidity.funeral_cost == Decimal("10000")
        assert liquidity.settlement_expenses == Decimal("1010000")
        # (2,404,000 + 1,010,000) x 110%
        assert liquidity.required == Decimal("3755400.00")
        assert liquidity.available == Decimal("2500000.00")
        assert liquidity.gap == Decimal("1255400.00")
        assert liquidity.insurance_need == Decimal("1255400.00")

    def test_heir_income_tax(self, projection):
        """Heirs owe 25% on the inherited pre-tax balance."""
        heir = projection.heir_tax_estimate
        assert heir.projected_income_tax == Decimal("1000000.00")
        assert heir.net_after_income_tax == Decimal("16596000.00")

    def test_resolved_assumptions(self, projection):
        """Year of death and exclusion are reported back."""
        assumptions = projection.assumptions
        assert assumptions.year_of_death == 2050
        assert assumptions.death_age == 85
        assert assumptions.current_age == 60
        assert assumptions.portability is False
        assert assumptions.federal_exemption == Decimal("13990000")


class TestProjectionRules:
    """Test the individual projection steps."""

    def test_admin_expenses_deducted(self):
        """3% admin expenses come off the taxable estate."""
        projection = calculate_estate_projection(make_input(admin_expense_rate=Decimal("0.03")))
        assert projection.deductions == Decimal("600000.00")
        assert projection.projected_taxable_estate == Decimal("19400000.00")

    def test_sunset_exemption_without_override(self):
        """Without an override the year-of-death exclusion applies."""
        projection = calculate_estate_projection(make_input(federal_exemption_override=None))
        # Year of death 2050 falls back to the 2026 exclusion
        assert projection.assumptions.federal_exemption == Decimal("7000000")
        assert projection.federal_tax == Decimal("5200000.00")

    def test_appreciation(self):
        """5% for two years compounds to 1.1025."""
        projection = calculate_estate_projection(make_input(
            base="10000000",
            appreciation_rate=Decimal("5"),
            projected_death_age=62,
        ))
        assert projection.projected_estate_value == Decimal("11025000.00")
        assert projection.strategy_adjustments.appreciation_factor == Decimal("1.102500")

    def test_gifts_and_trusts_reduce_estate(self):
        """Gifts, annual gifts and trust funding leave the estate."""
        strategies = StrategyInputs(
            lifetime_gifts=Decimal("1000000"),
            annual_gift_amount=Decimal("19000"),
            trust_funding=[{"label": "SLAT", "amount": "2,000,000"}],
        )
        projection = calculate_estate_projection(make_input(strategies=strategies))

        assert projection.strategy_adjustments.annual_gifts == Decimal("475000")
        assert projection.strategy_adjustments.trust_funding == Decimal("2000000")
        assert projection.projected_estate_value == Decimal("16525000.00")

    def test_transfers_larger_than_estate_floor_at_zero(self):
        """Transfers beyond the estate floor everything at zero."""
        strategies = StrategyInputs(lifetime_gifts=Decimal("50000000"))
        projection = calculate_estate_projection(make_input(strategies=strategies))

        assert projection.projected_estate_value == Decimal("0.00")
        assert projection.total_tax == Decimal("0.00")
        assert projection.effective_tax_rate == Decimal("0.00")

    def test_charitable_bequest(self):
        """A bequest equal to the excess removes federal tax."""
        strategies = StrategyInputs(charitable_bequest=Decimal("6010000"))
        projection = calculate_estate_projection(make_input(strategies=strategies))

        assert projection.federal_tax == Decimal("0.00")
        assert projection.charitable_impact.percent_of_estate == Decimal("30.05")
        # Bequest is reserved out of liquid assets
        assert projection.liquidity.charitable_reserve == Decimal("2500000.00")
        assert projection.liquidity.available == Decimal("0.00")

    def test_ilit_counts_toward_liquidity(self):
        """ILIT proceeds cover the liquidity gap."""
        strategies = StrategyInputs(ilit_death_benefit=Decimal("2000000"))
        projection = calculate_estate_projection(make_input(strategies=strategies))

        assert projection.liquidity.available == Decimal("4500000.00")
        assert projection.liquidity.gap == Decimal(0)
        assert projection.liquidity.insurance_need == Decimal(0)

    def test_state_override(self):
        """An explicit state is normalized and taxed."""
        projection = calculate_estate_projection(make_input(state_override="ma"))
        # (20M - 2M) x 16%
        assert projection.state_tax == Decimal("2880000.00")
        assert projection.assumptions.state == "MA"
        assert projection.state_breakdown == {"bracket_0_up_16pct": Decimal("2880000.00")}

    def test_state_from_profile_residence(self):
        """State falls back to the residence's state."""
        profile = EstateProfile(primary_residence={"market_value": 1000000, "state": "wa"})
        projection = calculate_estate_projection(make_input(profile=profile))
        assert projection.assumptions.state == "WA"
        assert projection.state_tax > 0

    def test_liquidity_target_percent(self):
        """A 100% target requires exactly tax plus costs."""
        projection = calculate_estate_projection(make_input(liquidity_target_percent=Decimal("100")))
        assert projection.liquidity.required == Decimal("3414000.00")

    def test_valuation_discount(self):
        """A discount lowers the taxable estate but not the estate value."""
        projection = calculate_estate_projection(make_input(valuation_discount_rate=Decimal("10")))

        # 30% of $20M is discount-eligible, discounted by 10%
        assert projection.strategy_adjustments.valuation_discount == Decimal("600000.00")
        assert projection.projected_taxable_estate == Decimal("19400000.00")
        assert projection.federal_tax == Decimal("2164000.00")
        assert projection.projected_estate_value == Decimal("20000000.00")
        assert projection.liquidity.probate_costs == Decimal("1000000")

    def test_valuation_discount_before_admin_expenses(self):
        """Admin expenses are taken on the discounted value."""
        projection = calculate_estate_projection(make_input(
            valuation_discount_rate=Decimal("10"),
            admin_expense_rate=Decimal("0.03"),
        ))
        assert projection.deductions == Decimal("582000.00")
        assert projection.projected_taxable_estate == Decimal("18818000.00")

    def test_no_valuation_discount_by_default(self):
        """No discount unless a rate is given."""
        projection = calculate_estate_projection(make_input())
        assert projection.strategy_adjustments.valuation_discount == Decimal("0.00")


class TestMarriedCouple:
    """Test portability, DSUE and bypass trusts for a married client."""

    @pytest.fixture
    def profile(self):
        return EstateProfile(
            marital_status="Married",
            dsue_amount="5,000,000",
            life_insurance={"has_policy": True, "coverage_amount": 500000},
            spouse_life_insurance={"has_policy": False, "coverage_amount": 250000},
        )

    def test_portability_defaults_to_marriage(self, profile):
        """Married clients get portability and the profile DSUE."""
        projection = calculate_estate_projection(make_input(profile=profile))

        assert projection.assumptions.portability is True
        assert projection.assumptions.dsue_amount == Decimal("5000000")
        assert projection.federal_tax == Decimal("404000.00")

    def test_portability_disabled(self, profile):
        """Turning portability off drops the DSUE."""
        projection = calculate_estate_projection(make_input(profile=profile, portability=False))
        assert projection.assumptions.dsue_amount == Decimal(0)
        assert projection.federal_tax == Decimal("2404000.00")

    def test_assumption_dsue_wins_over_profile(self, profile):
        """An explicit DSUE replaces the profile's."""
        projection = calculate_estate_projection(make_input(profile=profile, dsue_amount=Decimal("1000000")))
        assert projection.assumptions.dsue_amount == Decimal("1000000")

    def test_zero_assumption_dsue_wins_over_profile(self, profile):
        """An explicit zero DSUE is not replaced by the profile's."""
        projection = calculate_estate_projection(make_input(profile=profile, dsue_amount=Decimal(0)))
        assert projection.assumptions.dsue_amount == Decimal(0)
        assert projection.federal_tax == Decimal("2404000.00")

    def test_bypass_trust(self, profile):
        """A bypass trust doubles the exclusion for a married client."""
        strategies = StrategyInputs(bypass_trust=True)
        projection = calculate_estate_projection(make_input(profile=profile, strategies=strategies, portability=False))
        assert projection.federal_tax == Decimal("0.00")
        assert projection.strategy_adjustments.bypass_trust_applied is True

    def test_two_funerals_and_active_policies_only(self, profile):
        """Two funerals; lapsed policies do not count."""
        projection = calculate_estate_projection(make_input(profile=profile))

        assert projection.liquidity.funeral_cost == Decimal("20000")
        assert projection.liquidity.existing_life_insurance_user == Decimal("500000")
        assert projection.liquidity.existing_life_insurance_spouse == Decimal(0)


class TestAgeResolution:
    """Test current age and death age resolution."""

    def test_explicit_age_wins(self):
        """An explicit age beats the profile."""
        profile = EstateProfile(current_age=40)
        assumptions = AssumptionInputs(current_age=50)
        assert resolve_current_age(assumptions, profile, 2025) == 50

    def test_age_from_date_of_birth(self):
        """Age is derived from the birth year."""
        profile = EstateProfile(date_of_birth=date(1970, 6, 1))
        assert resolve_current_age(AssumptionInputs(), profile, 2025) == 55

    def test_default_age(self):
        """No information gives the default age."""
        assert resolve_current_age(AssumptionInputs(), None, 2025) == 55

    def test_death_age_must_follow_current_age(self):
        """A death age before the current age is ignored."""
        assumptions = AssumptionInputs(projected_death_age=50)
        assert resolve_death_age(assumptions, None, 60) == 93

    def test_death_age_minimum_horizon(self):
        """Old clients get at least five more years."""
        assert resolve_death_age(AssumptionInputs(), None, 91) == 96

    def test_profile_longevity(self):
        """Profile longevity is used when no death age is set."""
        profile = EstateProfile(longevity_age=88)
        assert resolve_death_age(AssumptionInputs(), profile, 60) == 88


class TestInputs:
    """Test input parsing and validation."""

    def test_dict_input_accepted(self):
        """Plain dicts with formatted money are validated."""
        projection = calculate_estate_projection({
            "base_estate_value": "$20,000,000",
            "assumptions": {
                "as_of_year": 2025,
                "current_age": 60,
                "admin_expense_rate": 0,
                "federal_exemption_override": 13990000,
            },
        })
        assert projection.federal_tax == Decimal("2404000.00")

    def test_negative_base_rejected(self):
        """A negative estate fails validation."""
        with pytest.raises(ValidationError):
            calculate_estate_projection({"base_estate_value": -1})

    def test_heir_rate_out_of_range_rejected(self):
        """Heir rate must be a fraction."""
        with pytest.raises(ValidationError):
            AssumptionInputs(assumed_heir_income_tax_rate=Decimal("1.5"))

    def test_valuation_discount_rate_out_of_range_rejected(self):
        """Discount rate must be a percent."""
        with pytest.raises(ValidationError):
            AssumptionInputs(valuation_discount_rate=Decimal("101"))

    def test_identical_inputs_identical_output(self):
        """The projection is deterministic."""
        first = calculate_estate_projection(make_input(state_override="WA"))
        second = calculate_estate_projection(make_input(state_override="WA"))
        assert canonical_json_dumps(first.to_dict()) == canonical_json_dumps(second.to_dict())


class TestHelpers:
    """Test appreciation and comparison helpers."""

    def test_appreciation_factor_no_growth(self):
        """No rate or no years means no growth."""
        assert appreciation_factor(Decimal(0), 30) == Decimal(1)
        assert appreciation_factor(Decimal(5), 0) == Decimal(1)

    def test_compare_projections(self):
        """Savings are baseline tax minus strategy tax."""
        base = calculate_estate_projection(make_input())
        with_gifts = calculate_estate_projection(make_input(strategies=StrategyInputs(
            lifetime_gifts=Decimal("1000000")
        )))

        comparison = compare_projections(base, with_gifts)
        assert comparison.tax_savings == Decimal("400000.00")
        assert comparison.tax_savings_percent == Decimal("16.64")
        assert comparison.net_to_heirs_increase == Decimal("-600000.00")
