"""
State Estate Tax Calculators

One calculator per state that levies an estate tax. Each applies the state's
exemption and its marginal-rate schedule (flat or tiered) from
calculators.estate_tax_config.STATE_ESTATE_TAX.

States missing from the table owe nothing; see get_state_calculator.

Copyright (c) 2026 Andre. All rights reserved.
"""

from decimal import Decimal
from typing import Dict, Any

from calculators.estate_tax_config import STATE_ESTATE_TAX
from calculators.tax_calculators.base import (
    EstateTaxCalculator,
    EstateTaxResult,
    bracket_amounts,
    register_calculator,
)


class StateEstateTaxCalculator(EstateTaxCalculator):
    """
    Table-driven state estate tax.

    Subclasses only set STATE_CODE.
    """

    STATE_CODE: str = ""

    @property
    def config(self) -> Dict[str, Any]:
        return STATE_ESTATE_TAX[self.STATE_CODE]

    @property
    def exemption(self) -> Decimal:
        return self.config["exemption"]

    def get_jurisdiction_name(self) -> str:
        return self.config["name"]

    def get_jurisdiction_code(self) -> str:
        return self.STATE_CODE

    def is_flat(self) -> bool:
        return len(self.config["brackets"]) == 1

    def calculate_estate_tax(
        self,
        taxable_estate: Decimal,
        year_of_death: int,
        **kwargs
    ) -> EstateTaxResult:
        """
        Calculate state estate tax on the amount above the state exemption.

        State exemptions are not indexed by year in the projection.
        """
        taxable_amount = self.amount_above_exemption(taxable_estate, self.exemption)
        breakdown = bracket_amounts(taxable_amount, self.config["brackets"])
        tax = sum(breakdown.values(), start=Decimal(0))

        top_rate = self.config["brackets"][-1][2]
        schedule = "flat" if self.is_flat() else "graduated"
        assumptions = [
            f"{self.get_jurisdiction_name()} exemption: ${self.exemption:,.0f}",
            f"{schedule.capitalize()} schedule, top rate {top_rate * 100}%",
        ]

        return EstateTaxResult(
            jurisdiction=self.describe(),
            year_of_death=year_of_death,
            taxable_estate=taxable_estate,
            exemption=self.exemption,
            taxable_amount=taxable_amount,
            tax_owed=tax,
            breakdown=breakdown,
            assumptions=assumptions,
            calculator_version=f"1.0-{self.STATE_CODE}",
        )


@register_calculator("CT")
class ConnecticutEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "CT"


@register_calculator("DC")
class DistrictOfColumbiaEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "DC"


@register_calculator("HI")
class HawaiiEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "HI"


@register_calculator("IL")
class IllinoisEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "IL"


@register_calculator("MA")
class MassachusettsEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "MA"


@register_calculator("MD")
class MarylandEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "MD"


@register_calculator("ME")
class MaineEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "ME"


@register_calculator("MN")
class MinnesotaEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "MN"


@register_calculator("NY")
class NewYorkEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "NY"


@register_calculator("OR")
class OregonEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "OR"


@register_calculator("RI")
class RhodeIslandEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "RI"


@register_calculator("VT")
class VermontEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "VT"


@register_calculator("WA")
class WashingtonEstateTaxCalculator(StateEstateTaxCalculator):
    STATE_CODE = "WA"
