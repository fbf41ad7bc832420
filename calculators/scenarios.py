"""
Estate Strategy Scenarios

Side-by-side comparisons of common estate-planning moves for a client:
1. 2026 sunset vs current law
2. Portability election vs bypass trust
3. Lifetime gifting of the elevated exemption vs no gifting
4. GRAT/SLAT estate freeze vs no trust
5. ILIT life insurance vs self-funding the tax

Each scenario uses the simple estate tax (40% above the exemption plus the
state schedule) rather than the full projection.

Copyright (c) 2026 Andre. All rights reserved.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union

import pandas as pd

from calculators.estate_models import AssetComposition, EstateProfile
from calculators.estate_tax_config import (
    ASSUMED_LIQUID_SHARE,
    CURRENT_LAW_YEAR,
    FEDERAL_ESTATE_TAX_RATE,
    ILIT_COVERAGE_BUFFER,
    ILIT_PREMIUM_RATE,
    IRS_7520_RATE,
    SUNSET_YEAR,
    YEARS_BETWEEN_DEATHS,
)
from calculators.tax_calculators import get_federal_exemption, get_state_calculator
from utils.logging_config import setup_logger, log_dataframe_info

logger = setup_logger(__name__)

MetricValue = Union[Decimal, str]

SIGNIFICANT_SAVINGS = Decimal("100000")


@dataclass(frozen=True)
class ClientEstateData:
    """Inputs for the strategy scenarios."""

    total_estate_value: Decimal
    spouse_estate_value: Optional[Decimal] = None
    state: Optional[str] = None
    growth_rate: Optional[Decimal] = None  # decimal, e.g. 0.06
    death_year_client: Optional[int] = None
    liquid_assets: Optional[Decimal] = None
    marital_status: Optional[str] = None
    as_of_year: Optional[int] = None

    @property
    def is_married(self) -> bool:
        return self.spouse_estate_value is not None

    @property
    def current_year(self) -> int:
        return self.as_of_year if self.as_of_year is not None else date.today().year


@dataclass(frozen=True)
class ScenarioResult:
    scenario_id: str
    title: str
    summary: str
    metrics: Dict[str, MetricValue] = field(default_factory=dict)
    savings: Optional[Decimal] = None
    action_item: Optional[str] = None
    assumptions: List[str] = field(default_factory=list)


def _grow(value: Decimal, rate: Decimal, years: int) -> Decimal:
    return value * (Decimal(1) + rate) ** max(0, years)


class EstateScenarioCalculator:
    """Runs the strategy scenarios for one client."""

    def __init__(self, data: ClientEstateData):
        self.data = data

    # ===== TAX HELPERS =====

    def federal_estate_tax(self, estate_value: Decimal, exemption: Decimal) -> Decimal:
        return max(Decimal(0), estate_value - exemption) * FEDERAL_ESTATE_TAX_RATE

    def state_estate_tax(self, estate_value: Decimal) -> Decimal:
        calculator = get_state_calculator(self.data.state)
        return calculator.calculate_estate_tax(estate_value, SUNSET_YEAR).tax_owed

    def total_estate_tax(self, estate_value: Decimal, federal_exemption: Decimal) -> Decimal:
        return self.federal_estate_tax(estate_value, federal_exemption) + self.state_estate_tax(estate_value)

    def _exemption(self, year: int) -> Decimal:
        per_person = get_federal_exemption(year)
        return per_person * 2 if self.data.is_married else per_person

    def _years_to_death(self, default: int) -> int:
        if self.data.death_year_client:
            return self.data.death_year_client - self.data.current_year
        return default

    # ===== SCENARIOS =====

    def sunset_vs_current(self) -> ScenarioResult:
        exemption_now = self._exemption(CURRENT_LAW_YEAR)
        exemption_sunset = self._exemption(SUNSET_YEAR)

        tax_now = self.total_estate_tax(self.data.total_estate_value, exemption_now)
        tax_sunset = self.total_estate_tax(self.data.total_estate_value, exemption_sunset)
        increase = tax_sunset - tax_now

        if increase > 0:
            action = (
                f"The {SUNSET_YEAR} sunset will cost your estate an additional ${increase:,.0f}. "
                f"Consider using the increased exemption before {SUNSET_YEAR} through gifting or other strategies."
            )
        else:
            action = "Your estate is below the future exemption threshold. The sunset may not significantly impact your estate tax."

        return ScenarioResult(
            scenario_id="sunset_vs_current",
            title=f"{SUNSET_YEAR} Sunset vs. Current Law",
            summary="Estate tax under current law versus after the TCJA sunset when exemptions drop by about half.",
            metrics={
                "estate_value": self.data.total_estate_value,
                "tax_current_law": tax_now,
                "tax_after_sunset": tax_sunset,
                "additional_tax": increase,
                "percent_increase": (increase / tax_now * 100) if tax_now > 0 else "N/A",
            },
            savings=-increase,
            action_item=action,
            assumptions=[
                f"Current federal exemption: ${exemption_now:,.0f}",
                f"{SUNSET_YEAR} federal exemption: ${exemption_sunset:,.0f}",
                "Estate tax rate: 40% on amounts above exemption",
            ],
        )

    def portability_vs_bypass(self) -> ScenarioResult:
        if not self.data.spouse_estate_value or self.data.marital_status != "married":
            return ScenarioResult(
                scenario_id="portability_vs_bypass",
                title="Portability vs. Bypass Trust",
                summary="This scenario requires married status to compare strategies.",
                metrics={"status": "Not applicable - single or no spouse data"},
            )

        exemption = get_federal_exemption(CURRENT_LAW_YEAR)
        total = self.data.total_estate_value
        growth = self.data.growth_rate or Decimal("0.05")
        years = YEARS_BETWEEN_DEATHS

        # Portability: survivor keeps the full DSUE
        survivor_estate_port = _grow(total, growth, years)
        tax_port = self.total_estate_tax(survivor_estate_port, exemption * 2)

        # Bypass: first exemption funds a trust whose growth escapes the survivor's estate
        trust_funding = min(exemption, total / 2)
        trust_value = _grow(trust_funding, growth, years)
        survivor_estate_bypass = _grow(total - trust_funding, growth, years)
        tax_bypass = self.total_estate_tax(survivor_estate_bypass, exemption)

        savings = tax_port - tax_bypass
        net_port = survivor_estate_port - tax_port
        net_bypass = survivor_estate_bypass - tax_bypass + trust_value
        sheltered_growth = trust_value - trust_funding

        if savings > SIGNIFICANT_SAVINGS:
            action = (
                f"A bypass trust can save ${savings:,.0f} by sheltering ${sheltered_growth:,.0f} of growth "
                f"from estate tax. Consider trust planning over simple portability."
            )
        else:
            action = "Portability appears sufficient for your estate size. A bypass trust may add complexity without significant tax savings."

        return ScenarioResult(
            scenario_id="portability_vs_bypass",
            title="Portability vs. Bypass Trust",
            summary="Portability election versus funding a bypass trust at first death.",
            metrics={
                "estate_tax_portability": tax_port,
                "estate_tax_bypass": tax_bypass,
                "tax_savings_bypass": savings,
                "net_to_heirs_portability": net_port,
                "net_to_heirs_bypass": net_bypass,
                "growth_sheltered": sheltered_growth,
            },
            savings=savings,
            action_item=action,
            assumptions=[
                f"Growth rate: {growth * 100:.1f}% annually",
                f"Years between deaths: {years}",
                f"Trust funding: up to ${trust_funding:,.0f}",
            ],
        )

    def lifetime_gifts(self) -> ScenarioResult:
        years = self._years_to_death(default=20)
        growth = self.data.growth_rate or Decimal("0.06")
        current_value = self.data.total_estate_value
        married = self.data.is_married

        max_gift_per_person = min(
            current_value / (2 if married else 1),
            get_federal_exemption(CURRENT_LAW_YEAR)
        )
        total_gift = max_gift_per_person * 2 if married else max_gift_per_person

        future_exemption = self._exemption(SUNSET_YEAR)

        estate_with_gift = _grow(current_value - total_gift, growth, years)
        gift_value_at_death = _grow(total_gift, growth, years)
        tax_with_gift = self.total_estate_tax(estate_with_gift, future_exemption)

        estate_no_gift = _grow(current_value, growth, years)
        tax_no_gift = self.total_estate_tax(estate_no_gift, future_exemption)

        savings = tax_no_gift - tax_with_gift
        heirs_with_gift = gift_value_at_death + (estate_with_gift - tax_with_gift)
        heirs_no_gift = estate_no_gift - tax_no_gift

        if savings > SIGNIFICANT_SAVINGS:
            action = (
                f"Gifting ${total_gift:,.0f} now could save ${savings:,.0f} in estate taxes. "
                f"The gifted assets would grow to ${gift_value_at_death:,.0f} outside your taxable estate."
            )
        else:
            action = "Your estate may not benefit significantly from large lifetime gifts. Consider annual exclusion gifting instead."

        return ScenarioResult(
            scenario_id="lifetime_gifts",
            title="Lifetime Gifting vs. No Gifting",
            summary="Using the elevated exemption for lifetime gifts versus keeping assets until death.",
            metrics={
                "maximum_gift": total_gift,
                "gift_value_at_death": gift_value_at_death,
                "estate_tax_with_gift": tax_with_gift,
                "estate_tax_no_gift": tax_no_gift,
                "tax_savings": savings,
                "total_to_heirs_with_gift": heirs_with_gift,
                "total_to_heirs_no_gift": heirs_no_gift,
            },
            savings=savings,
            action_item=action,
            assumptions=[
                f"Growth rate: {growth * 100:.1f}% annually",
                f"Years to death: {years}",
                f"Exemption used: ${total_gift:,.0f}",
                "No clawback on gifts made under the elevated exemption",
            ],
        )

    def trust_freeze(self) -> ScenarioResult:
        transfer_value = min(Decimal("5000000"), self.data.total_estate_value * Decimal("0.3"))
        growth = self.data.growth_rate or Decimal("0.08")
        years = self._years_to_death(default=15)

        future_value = _grow(transfer_value, growth, years)
        # Asset assumed to sit above the exemption
        tax_no_trust = self.federal_estate_tax(future_value, Decimal(0))

        hurdle_value = _grow(transfer_value, IRS_7520_RATE, years)
        excess_growth = max(Decimal(0), future_value - hurdle_value)
        savings = tax_no_trust

        if savings > SIGNIFICANT_SAVINGS:
            action = (
                f"A GRAT or SLAT could transfer ${excess_growth:,.0f} of growth tax-free, saving "
                f"${savings:,.0f} in estate taxes. Consider these strategies for high-growth assets."
            )
        else:
            action = "Trust strategies may add complexity without significant benefit for your asset profile."

        return ScenarioResult(
            scenario_id="trust_freeze",
            title="GRAT/SLAT vs. No Trust",
            summary="Estate freeze strategies that shift future growth out of the taxable estate.",
            metrics={
                "asset_value_today": transfer_value,
                "projected_future_value": future_value,
                "growth_above_hurdle": excess_growth,
                "estate_tax_no_trust": tax_no_trust,
                "estate_tax_with_trust": Decimal(0),
                "tax_savings": savings,
                "wealth_transferred_tax_free": excess_growth,
            },
            savings=savings,
            action_item=action,
            assumptions=[
                f"Asset growth rate: {growth * 100:.1f}%",
                f"IRS 7520 rate: {IRS_7520_RATE * 100:.1f}%",
                f"Trust term: {years} years",
                "GRAT zeros out gift value",
                "SLAT uses current exemption",
            ],
        )

    def life_insurance(self) -> ScenarioResult:
        exemption = self._exemption(SUNSET_YEAR)
        growth = self.data.growth_rate or Decimal("0.05")
        projected_estate = _grow(self.data.total_estate_value, growth, 20)
        estate_tax = self.total_estate_tax(projected_estate, exemption)

        liquid_assets = self.data.liquid_assets
        if liquid_assets is None:
            liquid_assets = self.data.total_estate_value * ASSUMED_LIQUID_SHARE

        gap = max(Decimal(0), estate_tax - liquid_assets)
        coverage_ratio = liquid_assets / estate_tax if estate_tax > 0 else Decimal(1)
        insurance_needed = estate_tax * (1 + ILIT_COVERAGE_BUFFER)
        annual_premium = insurance_needed * ILIT_PREMIUM_RATE

        if coverage_ratio < Decimal("0.5"):
            risk = "High"
        elif coverage_ratio < Decimal("0.8"):
            risk = "Medium"
        else:
            risk = "Low"

        if gap > SIGNIFICANT_SAVINGS:
            action = (
                f"Your estate faces a ${gap:,.0f} liquidity shortfall. An ILIT with ${insurance_needed:,.0f} "
                f"of life insurance could prevent forced asset sales."
            )
        else:
            action = "Your liquid assets appear sufficient to cover estate taxes. Life insurance is less critical."

        return ScenarioResult(
            scenario_id="life_insurance",
            title="Estate Liquidity: ILIT vs. Self-Fund",
            summary="Life insurance held in an ILIT versus paying estate tax from estate assets.",
            metrics={
                "projected_estate_tax": estate_tax,
                "liquid_assets_available": liquid_assets,
                "liquidity_gap": gap,
                "liquidity_coverage_percent": coverage_ratio * 100,
                "insurance_recommended": insurance_needed,
                "estimated_annual_premium": annual_premium,
                "estate_disruption_risk": risk,
            },
            savings=gap,
            action_item=action,
            assumptions=[
                "Insurance owned by ILIT (outside estate)",
                f"Premium estimate: {ILIT_PREMIUM_RATE * 100:.0f}% of face value",
                "Tax due within 9 months of death",
            ],
        )

    def run_all_scenarios(self) -> List[ScenarioResult]:
        results = [
            self.sunset_vs_current(),
            self.portability_vs_bypass(),
            self.lifetime_gifts(),
            self.trust_freeze(),
            self.life_insurance(),
        ]
        logger.info(f"Ran {len(results)} estate scenarios for estate ${self.data.total_estate_value:,.0f}")
        return results


def create_calculator_from_profile(
    profile: EstateProfile,
    composition: AssetComposition,
    total_estate_value: Decimal,
    as_of_year: Optional[int] = None,
) -> EstateScenarioCalculator:
    """Scenario calculator seeded from a profile; half the estate is attributed to a spouse."""
    married = profile.is_married()
    current_year = as_of_year if as_of_year is not None else date.today().year
    current_age = profile.current_age or 55
    death_age = profile.longevity_age if profile.longevity_age and profile.longevity_age > current_age else current_age + 25

    return EstateScenarioCalculator(ClientEstateData(
        total_estate_value=total_estate_value,
        spouse_estate_value=total_estate_value / 2 if married else None,
        state=profile.resolved_state(),
        growth_rate=Decimal("0.06"),
        death_year_client=current_year + (death_age - current_age),
        liquid_assets=composition.taxable + composition.roth,
        marital_status=profile.marital_status,
        as_of_year=current_year,
    ))


def scenarios_to_frame(results: List[ScenarioResult]) -> pd.DataFrame:
    """
    One row per scenario: title, savings, action item and every metric.

    Metrics absent from a scenario are NaN.
    """
    records = []
    for result in results:
        record = {
            "scenario_id": result.scenario_id,
            "title": result.title,
            "savings": float(result.savings) if result.savings is not None else None,
            "action_item": result.action_item,
        }
        for name, value in result.metrics.items():
            record[name] = float(value) if isinstance(value, Decimal) else value
        records.append(record)

    df = pd.DataFrame.from_records(records)
    if not df.empty:
        df = df.set_index("scenario_id")
    log_dataframe_info(logger, df, "Estate scenarios")
    return df
