"""
Federal Estate Tax Calculator

Implements the federal estate tax as used for projections:
- 40% on the taxable estate above the basic exclusion amount
- Exclusion looked up by year of death (TCJA sunset in 2026)
- Portability: DSUE of a predeceased spouse adds to the exclusion
- Bypass trust for married couples shelters a second exclusion

References:
- IRC §2010 (unified credit, DSUE)
- IRC §2001 (top marginal rate)

Copyright (c) 2026 Andre. All rights reserved.
"""

from decimal import Decimal
from typing import Optional

from calculators.estate_tax_config import (
    FEDERAL_EXEMPTION_BY_YEAR,
    FEDERAL_ESTATE_TAX_RATE,
)
from calculators.tax_calculators.base import (
    EstateTaxCalculator,
    EstateTaxResult,
    register_calculator,
)


def get_federal_exemption(year: int) -> Decimal:
    """
    Per-person federal exclusion for a year of death.

    Years outside the table fall back to the nearest defined year.
    """
    if year in FEDERAL_EXEMPTION_BY_YEAR:
        return FEDERAL_EXEMPTION_BY_YEAR[year]

    first_year = min(FEDERAL_EXEMPTION_BY_YEAR)
    last_year = max(FEDERAL_EXEMPTION_BY_YEAR)
    nearest = first_year if year < first_year else last_year
    return FEDERAL_EXEMPTION_BY_YEAR[nearest]


def resolve_effective_exemption(
    year_of_death: int,
    override: Optional[Decimal] = None,
    dsue_amount: Decimal = Decimal(0),
    bypass_trust: bool = False,
    married: bool = False,
) -> Decimal:
    """
    Exclusion available to the estate after overrides, DSUE and bypass trust.

    A positive override replaces the table value. A bypass trust only
    applies to married decedents and guarantees at least two exclusions.
    """
    if override is not None and override > 0:
        base = override
    else:
        base = get_federal_exemption(year_of_death)

    exemption = base + max(Decimal(0), dsue_amount)
    if bypass_trust and married:
        exemption = max(exemption, base * 2)
    return exemption


@register_calculator("US")
class FederalEstateTaxCalculator(EstateTaxCalculator):
    """
    Federal estate tax.

    Key Rules:
    - Flat 40% on the amount above the effective exclusion
    - No tax when the taxable estate is within the exclusion
    """

    ESTATE_TAX_RATE = FEDERAL_ESTATE_TAX_RATE

    def get_jurisdiction_name(self) -> str:
        return "United States"

    def get_jurisdiction_code(self) -> str:
        return "US"

    def calculate_estate_tax(
        self,
        taxable_estate: Decimal,
        year_of_death: int,
        **kwargs
    ) -> EstateTaxResult:
        """
        Calculate federal estate tax.

        Args:
            taxable_estate: Estate after deductions
            year_of_death: Year used for the exclusion lookup
            **kwargs: Optional parameters:
                - exemption_override: Replaces the table exclusion
                - dsue_amount: Ported exclusion of a predeceased spouse
                - bypass_trust: Whether a credit-shelter trust is used
                - married: Whether the decedent is married

        Returns:
            EstateTaxResult for the United States
        """
        override = kwargs.get("exemption_override")
        dsue_amount = Decimal(kwargs.get("dsue_amount") or 0)
        bypass_trust = bool(kwargs.get("bypass_trust", False))
        married = bool(kwargs.get("married", False))

        base_exemption = get_federal_exemption(year_of_death)
        exemption = resolve_effective_exemption(
            year_of_death,
            override=override,
            dsue_amount=dsue_amount,
            bypass_trust=bypass_trust,
            married=married,
        )

        taxable_amount = self.amount_above_exemption(taxable_estate, exemption)
        tax = taxable_amount * self.ESTATE_TAX_RATE if taxable_amount > 0 else Decimal(0)

        assumptions = [
            f"Federal estate tax rate: {self.ESTATE_TAX_RATE * 100}%",
            f"Basic exclusion for {year_of_death}: ${base_exemption:,.0f}",
        ]
        if override is not None and override > 0:
            assumptions.append(f"Exclusion override: ${override:,.0f}")
        if dsue_amount > 0:
            assumptions.append(f"DSUE (portability): ${dsue_amount:,.0f}")
        if bypass_trust and married:
            assumptions.append("Bypass trust shelters a second exclusion")

        return EstateTaxResult(
            jurisdiction=self.describe(),
            year_of_death=year_of_death,
            taxable_estate=taxable_estate,
            exemption=exemption,
            taxable_amount=taxable_amount,
            tax_owed=tax,
            breakdown={
                "basic_exclusion": base_exemption,
                "dsue_amount": dsue_amount,
                "effective_exemption": exemption,
                "amount_above_exemption": taxable_amount,
                "estate_tax_40pct": tax,
            },
            assumptions=assumptions,
            calculator_version="1.0-US",
        )
