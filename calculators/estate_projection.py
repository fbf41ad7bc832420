"""
Estate Projection Engine

Single-pass, deterministic projection of an estate at the assumed year of
death:
1. Resolve ages and the year of death
2. Appreciate the base estate, remove gifts and trust funding
3. Apply any valuation discount, deduct admin expenses and charitable bequests
4. Federal tax (exclusion by year, DSUE, bypass trust) + state tax (brackets)
5. Liquidity required vs available (taxable, Roth, ILIT, life insurance)
6. Heirs' income tax on inherited tax-deferred balances

Every monetary floor is zero. Identical inputs give identical output.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union, Dict, Any

from calculators.estate_models import (
    AssumptionInputs,
    CharitableImpact,
    EstateCalculationInput,
    EstateProfile,
    EstateProjection,
    HeirTaxEstimate,
    LiquidityBreakdown,
    ResolvedAssumptions,
    StrategyAdjustments,
)
from calculators.estate_tax_config import (
    DEFAULT_CURRENT_AGE,
    DEFAULT_DEATH_AGE,
    FUNERAL_COST_PER_DECEDENT,
    MIN_YEARS_TO_DEATH,
    PROBATE_COST_RATE,
    VALUATION_DISCOUNT_ELIGIBLE_SHARE,
)
from calculators.tax_calculators import get_calculator, get_state_calculator
from utils.logging_config import setup_logger, get_perf_logger

logger = setup_logger(__name__)

CENT = Decimal("0.01")
DOLLAR = Decimal("1")
HUNDRED = Decimal("100")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return Decimal("0.00")
    return _money(part / whole * HUNDRED)


# ===== RESOLUTION HELPERS =====

def resolve_as_of_year(assumptions: AssumptionInputs) -> int:
    return assumptions.as_of_year if assumptions.as_of_year is not None else date.today().year


def resolve_current_age(
    assumptions: AssumptionInputs,
    profile: Optional[EstateProfile],
    as_of_year: int
) -> int:
    """Explicit assumption, then profile age, then age from birth date, else 55."""
    if assumptions.current_age is not None:
        return assumptions.current_age

    if profile is not None:
        if profile.current_age is not None:
            return profile.current_age
        if profile.date_of_birth is not None:
            return max(0, as_of_year - profile.date_of_birth.year)

    return DEFAULT_CURRENT_AGE


def resolve_death_age(
    assumptions: AssumptionInputs,
    profile: Optional[EstateProfile],
    current_age: int
) -> int:
    """Projected death age must lie after the current age to be used."""
    if assumptions.projected_death_age and assumptions.projected_death_age > current_age:
        return assumptions.projected_death_age

    if profile is not None and profile.longevity_age and profile.longevity_age > current_age:
        return profile.longevity_age

    return max(DEFAULT_DEATH_AGE, current_age + MIN_YEARS_TO_DEATH)


def appreciation_factor(rate_percent: Decimal, years: int) -> Decimal:
    if not rate_percent or rate_percent <= 0 or years <= 0:
        return Decimal(1)
    return (Decimal(1) + rate_percent / HUNDRED) ** years


# ===== PROJECTION =====

def calculate_estate_projection(
    calc_input: Union[EstateCalculationInput, Dict[str, Any]]
) -> EstateProjection:
    """
    Project estate value, taxes, liquidity and heirs' net at death.

    Args:
        calc_input: EstateCalculationInput (or a dict accepted by it)

    Returns:
        EstateProjection

    Raises:
        pydantic.ValidationError: If a dict input fails validation
    """
    if isinstance(calc_input, dict):
        calc_input = EstateCalculationInput.model_validate(calc_input)

    with get_perf_logger(logger, "estate_projection", threshold_ms=100):
        projection = _project(calc_input)

    logger.debug(
        f"Estate projection: estate=${projection.projected_estate_value:,.0f} "
        f"tax=${projection.total_tax:,.0f} gap=${projection.liquidity.gap:,.0f} "
        f"year_of_death={projection.assumptions.year_of_death}"
    )
    return projection


def _project(calc_input: EstateCalculationInput) -> EstateProjection:
    composition = calc_input.asset_composition
    strategies = calc_input.strategies
    assumptions = calc_input.assumptions
    profile = calc_input.profile

    married = profile.is_married() if profile is not None else False

    # Ages and year of death
    as_of_year = resolve_as_of_year(assumptions)
    current_age = resolve_current_age(assumptions, profile, as_of_year)
    death_age = resolve_death_age(assumptions, profile, current_age)
    years_to_death = max(0, death_age - current_age)
    year_of_death = as_of_year + years_to_death

    # Gross estate after appreciation and lifetime transfers
    factor = appreciation_factor(assumptions.appreciation_rate, years_to_death)
    appreciated = calc_input.base_estate_value * factor

    lifetime_gifts = strategies.lifetime_gifts
    annual_gifts = strategies.annual_gift_amount * years_to_death
    trust_funding = strategies.total_trust_funding()
    charitable_bequest = strategies.charitable_bequest
    ilit_death_benefit = strategies.ilit_death_benefit

    projected_estate = _money(max(
        Decimal(0),
        appreciated - lifetime_gifts - annual_gifts - trust_funding
    ))

    # Discounts on hard-to-value holdings lower the taxed value, not the estate itself
    valuation_discount = _money(
        projected_estate * VALUATION_DISCOUNT_ELIGIBLE_SHARE * assumptions.valuation_discount_rate / HUNDRED
    )
    discounted_estate = projected_estate - valuation_discount

    # Deductions
    admin_expenses = discounted_estate * assumptions.admin_expense_rate
    deductions = _money(min(discounted_estate, admin_expenses + charitable_bequest))
    taxable_estate = max(Decimal(0), discounted_estate - deductions)

    # Federal
    portability = (
        assumptions.portability if assumptions.portability is not None else married
    )
    if portability:
        dsue_source = assumptions.dsue_amount
        if dsue_source is None and profile is not None:
            dsue_source = profile.dsue_amount
        dsue_amount = max(Decimal(0), dsue_source or Decimal(0))
    else:
        dsue_amount = Decimal(0)

    federal = get_calculator("US").calculate_estate_tax(
        taxable_estate,
        year_of_death,
        exemption_override=assumptions.federal_exemption_override,
        dsue_amount=dsue_amount,
        bypass_trust=strategies.bypass_trust,
        married=married,
    )
    federal_tax = _money(federal.tax_owed)

    # State
    state = assumptions.state_override or (profile.resolved_state() if profile is not None else None)
    state_result = get_state_calculator(state).calculate_estate_tax(taxable_estate, year_of_death)
    state_tax = _money(state_result.tax_owed)

    total_tax = federal_tax + state_tax
    net_to_heirs = max(Decimal(0), taxable_estate - total_tax)

    # Liquidity
    user_coverage = profile.user_life_coverage() if profile is not None else Decimal(0)
    spouse_coverage = profile.spouse_life_coverage() if profile is not None else Decimal(0)

    available_pre_reserve = max(
        Decimal(0),
        composition.taxable + composition.roth + ilit_death_benefit + user_coverage + spouse_coverage
    )
    charitable_reserve = max(Decimal(0), min(charitable_bequest, available_pre_reserve))
    available = _money(available_pre_reserve - charitable_reserve)

    probate_costs = (projected_estate * PROBATE_COST_RATE).quantize(DOLLAR, rounding=ROUND_HALF_UP)
    funeral_cost = FUNERAL_COST_PER_DECEDENT * (2 if married else 1)
    settlement_expenses = probate_costs + funeral_cost

    liquidity_target = assumptions.liquidity_target_percent / HUNDRED
    required = _money(max(Decimal(0), (total_tax + settlement_expenses) * liquidity_target))
    gap = max(Decimal(0), required - available)
    insurance_need = max(Decimal(0), gap - ilit_death_benefit)

    # Heirs' income tax on inherited pre-tax accounts
    heir_rate = assumptions.assumed_heir_income_tax_rate
    projected_income_tax = _money(composition.tax_deferred * heir_rate)
    net_after_income_tax = max(Decimal(0), net_to_heirs - projected_income_tax)

    return EstateProjection(
        projected_estate_value=projected_estate,
        deductions=deductions,
        projected_taxable_estate=taxable_estate,
        federal_taxable_amount=_money(federal.taxable_amount),
        federal_tax=federal_tax,
        state_tax=state_tax,
        total_tax=total_tax,
        net_to_heirs=net_to_heirs,
        effective_tax_rate=_percent(total_tax, projected_estate),
        liquidity=LiquidityBreakdown(
            available=available,
            required=required,
            gap=gap,
            insurance_need=insurance_need,
            ilit_coverage=ilit_death_benefit,
            existing_life_insurance_user=user_coverage,
            existing_life_insurance_spouse=spouse_coverage,
            probate_costs=probate_costs,
            funeral_cost=funeral_cost,
            settlement_expenses=settlement_expenses,
            charitable_reserve=_money(charitable_reserve),
        ),
        heir_tax_estimate=HeirTaxEstimate(
            tax_deferred_balance=composition.tax_deferred,
            assumed_rate=heir_rate,
            projected_income_tax=projected_income_tax,
            net_after_income_tax=net_after_income_tax,
        ),
        charitable_impact=CharitableImpact(
            charitable_bequests=charitable_bequest,
            percent_of_estate=_percent(charitable_bequest, projected_estate),
        ),
        strategy_adjustments=StrategyAdjustments(
            lifetime_gifts=lifetime_gifts,
            annual_gifts=annual_gifts,
            trust_funding=trust_funding,
            appreciation_factor=factor.quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP),
            bypass_trust_applied=strategies.bypass_trust,
            valuation_discount=valuation_discount,
        ),
        assumptions=ResolvedAssumptions(
            year_of_death=year_of_death,
            death_age=death_age,
            current_age=current_age,
            state=state,
            marital_status=profile.marital_status if profile is not None else None,
            portability=portability,
            dsue_amount=dsue_amount,
            federal_exemption=federal.exemption,
            state_exemption=state_result.exemption,
        ),
        state_breakdown={k: _money(v) for k, v in state_result.breakdown.items()},
    )


# ===== COMPARISON =====

@dataclass(frozen=True)
class ProjectionComparison:
    tax_savings: Decimal
    tax_savings_percent: Decimal
    net_to_heirs_increase: Decimal
    net_to_heirs_increase_percent: Decimal
    liquidity_improvement: Decimal


def compare_projections(base: EstateProjection, other: EstateProjection) -> ProjectionComparison:
    """How much `other` improves on `base` (positive = better)."""
    tax_savings = base.total_tax - other.total_tax
    net_increase = other.net_to_heirs - base.net_to_heirs

    return ProjectionComparison(
        tax_savings=tax_savings,
        tax_savings_percent=_percent(tax_savings, base.total_tax),
        net_to_heirs_increase=net_increase,
        net_to_heirs_increase_percent=_percent(net_increase, base.net_to_heirs),
        liquidity_improvement=base.liquidity.gap - other.liquidity.gap,
    )
