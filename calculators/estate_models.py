"""
Estate Projection Data Models

Inputs (validated pydantic models):
- EstateProfile: household snapshot (balances, residence, insurance, ages)
- AssetComposition: taxable / tax-deferred / Roth / illiquid split
- StrategyInputs: gifting, trusts, ILIT, charitable bequest, bypass trust
- AssumptionInputs: death age, liquidity target, heir rate, DSUE, overrides
- EstateCalculationInput: everything the projection needs

Outputs (dataclasses):
- EstateProjection and its nested breakdowns

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from decimal import Decimal
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calculators.estate_tax_config import (
    DEFAULT_LIQUIDITY_TARGET_PERCENT,
    DEFAULT_HEIR_INCOME_TAX_RATE,
    DEFAULT_ADMIN_EXPENSE_RATE,
)


class EstateInputError(ValueError):
    """Raised when a Roth-conversion projection cannot be used for the overlay."""
    pass


def _parse_money(v):
    """Parse money from str/int/float/None, tolerating thousands separators."""
    if v is None or v == "":
        return Decimal(0)
    if isinstance(v, Decimal):
        return v
    if isinstance(v, str):
        v = v.replace(',', '').replace('$', '').strip()
    return Decimal(str(v))


def _check_non_negative(v):
    if v is not None and v < 0:
        raise ValueError(f'Value cannot be negative: {v}')
    return v


def _check_unit_rate(v):
    if v is not None and not (Decimal(0) <= v <= Decimal(1)):
        raise ValueError(f'Rate must be between 0 and 1: {v}')
    return v


# ===== PROFILE =====

class ProfileAsset(BaseModel):
    """One line of the free-form asset list in a financial profile."""

    type: str = ""
    value: Decimal = Decimal(0)
    owner: Optional[str] = None
    name: Optional[str] = None

    @field_validator('value', mode='before')
    @classmethod
    def parse_value(cls, v):
        return _parse_money(v)


class PrimaryResidence(BaseModel):
    market_value: Decimal = Decimal(0)
    mortgage_balance: Decimal = Decimal(0)
    state: Optional[str] = None

    @field_validator('market_value', 'mortgage_balance', mode='before')
    @classmethod
    def parse_amounts(cls, v):
        return _parse_money(v)

    def equity(self) -> Decimal:
        return max(Decimal(0), self.market_value - self.mortgage_balance)


class LifeInsurancePolicy(BaseModel):
    has_policy: bool = False
    coverage_amount: Decimal = Decimal(0)

    @field_validator('coverage_amount', mode='before')
    @classmethod
    def parse_coverage(cls, v):
        return _parse_money(v)

    def coverage(self) -> Decimal:
        """Coverage counted toward estate liquidity (zero without an active policy)."""
        if not self.has_policy:
            return Decimal(0)
        return max(Decimal(0), self.coverage_amount)


class EstateProfile(BaseModel):
    """
    Snapshot of a household's net worth.

    Immutable input to a projection; only profile-edit flows replace it.
    """

    model_config = ConfigDict(frozen=True)

    marital_status: Optional[str] = None
    state: Optional[str] = None
    date_of_birth: Optional[date] = None
    current_age: Optional[int] = None
    longevity_age: Optional[int] = None
    dsue_amount: Decimal = Decimal(0)

    # Structured balances
    cash_reserves: Decimal = Decimal(0)
    savings_balance: Decimal = Decimal(0)
    taxable_brokerage: Decimal = Decimal(0)
    traditional_401k: Decimal = Decimal(0)
    traditional_ira: Decimal = Decimal(0)
    roth_401k: Decimal = Decimal(0)
    roth_ira: Decimal = Decimal(0)
    business_interests: Decimal = Decimal(0)
    personal_property: Decimal = Decimal(0)
    liabilities: Decimal = Decimal(0)

    assets: List[ProfileAsset] = Field(default_factory=list)
    primary_residence: Optional[PrimaryResidence] = None
    life_insurance: Optional[LifeInsurancePolicy] = None
    spouse_life_insurance: Optional[LifeInsurancePolicy] = None

    # Output of the retirement engine, when available
    net_worth_at_longevity: Optional[Decimal] = None

    @field_validator(
        'dsue_amount', 'cash_reserves', 'savings_balance', 'taxable_brokerage',
        'traditional_401k', 'traditional_ira', 'roth_401k', 'roth_ira',
        'business_interests', 'personal_property', 'liabilities',
        mode='before'
    )
    @classmethod
    def parse_balances(cls, v):
        return _parse_money(v)

    @field_validator(
        'dsue_amount', 'cash_reserves', 'savings_balance', 'taxable_brokerage',
        'traditional_401k', 'traditional_ira', 'roth_401k', 'roth_ira',
        'business_interests', 'personal_property', 'liabilities'
    )
    @classmethod
    def non_negative_balances(cls, v):
        return _check_non_negative(v)

    @field_validator('marital_status', mode='before')
    @classmethod
    def normalize_marital_status(cls, v):
        if v is None:
            return None
        return str(v).strip().lower() or None

    @field_validator('state', mode='before')
    @classmethod
    def normalize_state(cls, v):
        if not v:
            return None
        return str(v).strip().upper()

    def is_married(self) -> bool:
        return self.marital_status == "married"

    def resolved_state(self) -> Optional[str]:
        """State of residence, falling back to the primary residence's state."""
        if self.state:
            return self.state
        if self.primary_residence and self.primary_residence.state:
            return self.primary_residence.state.strip().upper()
        return None

    def user_life_coverage(self) -> Decimal:
        return self.life_insurance.coverage() if self.life_insurance else Decimal(0)

    def spouse_life_coverage(self) -> Decimal:
        return self.spouse_life_insurance.coverage() if self.spouse_life_insurance else Decimal(0)


# ===== CALCULATION INPUTS =====

class AssetComposition(BaseModel):
    """Estate balances grouped by how they are taxed and how liquid they are."""

    model_config = ConfigDict(frozen=True)

    taxable: Decimal = Decimal(0)
    tax_deferred: Decimal = Decimal(0)
    roth: Decimal = Decimal(0)
    illiquid: Decimal = Decimal(0)

    @field_validator('taxable', 'tax_deferred', 'roth', 'illiquid', mode='before')
    @classmethod
    def parse_amounts(cls, v):
        return _parse_money(v)

    @field_validator('taxable', 'tax_deferred', 'roth', 'illiquid')
    @classmethod
    def non_negative_amounts(cls, v):
        return _check_non_negative(v)

    def total(self) -> Decimal:
        return self.taxable + self.tax_deferred + self.roth + self.illiquid


class TrustFunding(BaseModel):
    label: str = "Trust Strategy"
    amount: Decimal = Decimal(0)

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return _parse_money(v)

    @field_validator('amount')
    @classmethod
    def non_negative_amount(cls, v):
        return _check_non_negative(v)


class StrategyInputs(BaseModel):
    """Scenario levers the user can toggle before saving a plan."""

    model_config = ConfigDict(frozen=True)

    lifetime_gifts: Decimal = Decimal(0)
    annual_gift_amount: Decimal = Decimal(0)
    trust_funding: List[TrustFunding] = Field(default_factory=list)
    charitable_bequest: Decimal = Decimal(0)
    ilit_death_benefit: Decimal = Decimal(0)
    bypass_trust: bool = False

    @field_validator(
        'lifetime_gifts', 'annual_gift_amount', 'charitable_bequest', 'ilit_death_benefit',
        mode='before'
    )
    @classmethod
    def parse_amounts(cls, v):
        return _parse_money(v)

    @field_validator('lifetime_gifts', 'annual_gift_amount', 'charitable_bequest', 'ilit_death_benefit')
    @classmethod
    def non_negative_amounts(cls, v):
        return _check_non_negative(v)

    def total_trust_funding(self) -> Decimal:
        return sum((item.amount for item in self.trust_funding), start=Decimal(0))


class AssumptionInputs(BaseModel):
    """Projection parameters. Unset values are resolved from the profile or defaults."""

    model_config = ConfigDict(frozen=True)

    federal_exemption_override: Optional[Decimal] = None
    state_override: Optional[str] = None
    portability: Optional[bool] = None
    dsue_amount: Optional[Decimal] = None
    projected_death_age: Optional[int] = None
    current_age: Optional[int] = None
    liquidity_target_percent: Decimal = DEFAULT_LIQUIDITY_TARGET_PERCENT
    appreciation_rate: Decimal = Decimal(0)  # percent per year
    valuation_discount_rate: Decimal = Decimal(0)  # percent, on the discount-eligible share
    assumed_heir_income_tax_rate: Decimal = DEFAULT_HEIR_INCOME_TAX_RATE
    admin_expense_rate: Decimal = DEFAULT_ADMIN_EXPENSE_RATE
    as_of_year: Optional[int] = None

    @field_validator('federal_exemption_override', 'dsue_amount', mode='before')
    @classmethod
    def parse_optional_amounts(cls, v):
        if v is None or v == "":
            return None
        return _parse_money(v)

    @field_validator('federal_exemption_override', 'dsue_amount', 'liquidity_target_percent')
    @classmethod
    def non_negative_amounts(cls, v):
        return _check_non_negative(v)

    @field_validator('assumed_heir_income_tax_rate', 'admin_expense_rate')
    @classmethod
    def rate_in_range(cls, v):
        return _check_unit_rate(v)

    @field_validator('valuation_discount_rate')
    @classmethod
    def percent_in_range(cls, v):
        if not (Decimal(0) <= v <= Decimal(100)):
            raise ValueError(f'Percent must be between 0 and 100: {v}')
        return v

    @field_validator('state_override', mode='before')
    @classmethod
    def normalize_state(cls, v):
        if not v:
            return None
        return str(v).strip().upper()


class EstateCalculationInput(BaseModel):
    """Everything calculate_estate_projection consumes."""

    model_config = ConfigDict(frozen=True)

    base_estate_value: Decimal
    asset_composition: AssetComposition = Field(default_factory=AssetComposition)
    strategies: StrategyInputs = Field(default_factory=StrategyInputs)
    assumptions: AssumptionInputs = Field(default_factory=AssumptionInputs)
    profile: Optional[EstateProfile] = None

    @field_validator('base_estate_value', mode='before')
    @classmethod
    def parse_base(cls, v):
        return _parse_money(v)

    @field_validator('base_estate_value')
    @classmethod
    def non_negative_base(cls, v):
        return _check_non_negative(v)


# ===== RESULTS =====

@dataclass(frozen=True)
class LiquidityBreakdown:
    available: Decimal
    required: Decimal
    gap: Decimal
    insurance_need: Decimal
    ilit_coverage: Decimal
    existing_life_insurance_user: Decimal
    existing_life_insurance_spouse: Decimal
    probate_costs: Decimal
    funeral_cost: Decimal
    settlement_expenses: Decimal
    charitable_reserve: Decimal


@dataclass(frozen=True)
class HeirTaxEstimate:
    tax_deferred_balance: Decimal
    assumed_rate: Decimal
    projected_income_tax: Decimal
    net_after_income_tax: Decimal


@dataclass(frozen=True)
class CharitableImpact:
    charitable_bequests: Decimal
    percent_of_estate: Decimal


@dataclass(frozen=True)
class StrategyAdjustments:
    lifetime_gifts: Decimal
    annual_gifts: Decimal
    trust_funding: Decimal
    appreciation_factor: Decimal
    bypass_trust_applied: bool
    valuation_discount: Decimal = Decimal(0)


@dataclass(frozen=True)
class ResolvedAssumptions:
    year_of_death: int
    death_age: int
    current_age: int
    state: Optional[str]
    marital_status: Optional[str]
    portability: bool
    dsue_amount: Decimal
    federal_exemption: Decimal
    state_exemption: Decimal


@dataclass(frozen=True)
class EstateProjection:
    """
    Result of an estate projection.

    Pure derived data: never mutated, always recomputed from inputs.
    """

    projected_estate_value: Decimal
    deductions: Decimal
    projected_taxable_estate: Decimal
    federal_taxable_amount: Decimal
    federal_tax: Decimal
    state_tax: Decimal
    total_tax: Decimal
    net_to_heirs: Decimal
    effective_tax_rate: Decimal
    liquidity: LiquidityBreakdown
    heir_tax_estimate: HeirTaxEstimate
    charitable_impact: CharitableImpact
    strategy_adjustments: StrategyAdjustments
    assumptions: ResolvedAssumptions
    state_breakdown: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Nested dict suitable for canonical JSON serialisation."""
        return asdict(self)
