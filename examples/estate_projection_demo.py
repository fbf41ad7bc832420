"""
Estate Projection - Usage Example

Projects a married couple's estate, applies a Roth-conversion overlay and
prints the strategy scenarios side by side.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

from decimal import Decimal

import pandas as pd

from calculators.asset_composition import build_asset_composition_from_profile, derive_base_estate_value
from calculators.estate_models import (
    AssumptionInputs,
    EstateCalculationInput,
    EstateProfile,
    StrategyInputs,
)
from calculators.estate_projection import calculate_estate_projection
from calculators.roth_overlay import apply_roth_overlay
from calculators.scenarios import create_calculator_from_profile, scenarios_to_frame


def main():
    """Demonstrate estate projection usage."""

    print("=" * 70)
    print("Estate Projection - Demo")
    print("=" * 70)
    print()

    profile = EstateProfile(
        marital_status="married",
        state="WA",
        current_age=62,
        longevity_age=92,
        traditional_ira="3,200,000",
        roth_ira="400,000",
        taxable_brokerage="2,500,000",
        cash_reserves="150,000",
        business_interests="6,000,000",
        primary_residence={"market_value": 2400000, "mortgage_balance": 400000, "state": "WA"},
        life_insurance={"has_policy": True, "coverage_amount": 1000000},
    )

    composition = build_asset_composition_from_profile(profile)
    base_value = derive_base_estate_value(profile, composition)

    calc_input = EstateCalculationInput(
        base_estate_value=base_value,
        asset_composition=composition,
        strategies=StrategyInputs(
            annual_gift_amount=Decimal("38000"),
            charitable_bequest=Decimal("500000"),
        ),
        assumptions=AssumptionInputs(appreciation_rate=Decimal("4"), as_of_year=2025),
        profile=profile,
    )

    projection = calculate_estate_projection(calc_input)

    print(f"Base estate value:        ${base_value:>15,.2f}")
    print(f"Projected estate ({projection.assumptions.year_of_death}): ${projection.projected_estate_value:>15,.2f}")
    print(f"Federal estate tax:       ${projection.federal_tax:>15,.2f}")
    print(f"State estate tax ({projection.assumptions.state}):    ${projection.state_tax:>15,.2f}")
    print(f"Net to heirs:             ${projection.net_to_heirs:>15,.2f}")
    print(f"Liquidity gap:            ${projection.liquidity.gap:>15,.2f}")
    print(f"Heirs' income tax:        ${projection.heir_tax_estimate.projected_income_tax:>15,.2f}")
    print()

    # Retirement engine output: balances after converting $200k/year for 10 years
    roth_rows = [
        {"age": 62 + i, "traditional_balance": max(0, 3200000 - 200000 * i), "roth_balance": 400000 + 170000 * i}
        for i in range(31)
    ]
    overlay = apply_roth_overlay(calc_input, roth_rows)

    print("Roth conversion overlay:")
    print(f"  Heirs' income tax:      ${overlay.with_roth.heir_tax_estimate.projected_income_tax:>15,.2f}")
    print(f"  Estate tax savings:     ${overlay.comparison.tax_savings:>15,.2f}")
    print()

    scenarios = create_calculator_from_profile(profile, composition, base_value, as_of_year=2025)
    df = scenarios_to_frame(scenarios.run_all_scenarios())

    with pd.option_context("display.float_format", "{:,.0f}".format, "display.width", 120):
        print(df[["title", "savings"]])


if __name__ == "__main__":
    main()
