"""
Abstract Base Class for Estate Tax Calculators

Defines the interface every jurisdiction (federal or state) implements.
Each calculator takes a taxable estate and the year of death and produces an
EstateTaxResult.

Copyright (c) 2026 Andre. All rights reserved.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Dict, Type, Optional, Sequence, Tuple
from decimal import Decimal

from utils.logging_config import setup_logger

logger = setup_logger(__name__)

# (lower, upper, rate); upper=None means unbounded
Bracket = Tuple[Decimal, Optional[Decimal], Decimal]


@dataclass(frozen=True)
class EstateTaxResult:
    """
    Estate tax owed to one jurisdiction.

    This is the output of jurisdiction-specific calculators.
    """

    jurisdiction: str
    year_of_death: int
    taxable_estate: Decimal
    exemption: Decimal
    taxable_amount: Decimal  # portion above the exemption
    tax_owed: Decimal
    breakdown: Dict[str, Decimal] = field(default_factory=dict)
    assumptions: List[str] = field(default_factory=list)
    calculator_version: str = "1.0"


def calculate_bracket_tax(amount: Decimal, brackets: Sequence[Bracket]) -> Decimal:
    """
    Apply a graduated marginal-rate schedule to an amount.

    Args:
        amount: Amount subject to the schedule (already net of exemption)
        brackets: Ascending (lower, upper, rate) tuples

    Returns:
        Tax on the amount; zero for non-positive amounts
    """
    return sum(bracket_amounts(amount, brackets).values(), start=Decimal(0))


def bracket_amounts(amount: Decimal, brackets: Sequence[Bracket]) -> Dict[str, Decimal]:
    """Tax per bracket, keyed like 'bracket_0_1000000_10pct'."""
    taxes: Dict[str, Decimal] = {}
    remaining = amount

    for lower, upper, rate in brackets:
        if remaining <= 0:
            break

        if upper is None:
            span = remaining
        else:
            span = min(remaining, max(Decimal(0), upper - lower))

        upper_label = "up" if upper is None else f"{upper:.0f}"
        key = f"bracket_{lower:.0f}_{upper_label}_{(rate * 100).normalize():f}pct"
        taxes[key] = span * rate
        remaining -= span

    return taxes


class EstateTaxCalculator(ABC):
    """
    Abstract base class for jurisdiction-specific estate tax calculators.

    Subclasses hold the exemption and rate rules of one jurisdiction.
    """

    @abstractmethod
    def calculate_estate_tax(
        self,
        taxable_estate: Decimal,
        year_of_death: int,
        **kwargs
    ) -> EstateTaxResult:
        """
        Calculate estate tax for a decedent dying in year_of_death.

        Args:
            taxable_estate: Estate value after deductions
            year_of_death: Calendar year used for exemption lookups
            **kwargs: Jurisdiction-specific parameters (e.g. DSUE, overrides)

        Returns:
            EstateTaxResult with tax owed and breakdown
        """
        pass

    @abstractmethod
    def get_jurisdiction_name(self) -> str:
        """Human-readable jurisdiction name (e.g. "Washington")."""
        pass

    @abstractmethod
    def get_jurisdiction_code(self) -> str:
        """Jurisdiction code (e.g. "US", "WA")."""
        pass

    def amount_above_exemption(self, taxable_estate: Decimal, exemption: Decimal) -> Decimal:
        return max(Decimal(0), taxable_estate - exemption)

    def describe(self) -> str:
        return f"{self.get_jurisdiction_name()} ({self.get_jurisdiction_code()})"


class NoEstateTaxCalculator(EstateTaxCalculator):
    """Calculator for jurisdictions without an estate tax (always zero)."""

    def __init__(self, jurisdiction_code: Optional[str] = None):
        self._code = (jurisdiction_code or "").upper()

    def get_jurisdiction_name(self) -> str:
        return "No state estate tax"

    def get_jurisdiction_code(self) -> str:
        return self._code or "NONE"

    def calculate_estate_tax(
        self,
        taxable_estate: Decimal,
        year_of_death: int,
        **kwargs
    ) -> EstateTaxResult:
        return EstateTaxResult(
            jurisdiction=self.describe(),
            year_of_death=year_of_death,
            taxable_estate=taxable_estate,
            exemption=Decimal(0),
            taxable_amount=Decimal(0),
            tax_owed=Decimal(0),
            assumptions=["Jurisdiction levies no estate tax"],
            calculator_version="1.0-NONE",
        )


# Registry of available calculators
_CALCULATOR_REGISTRY: Dict[str, Type[EstateTaxCalculator]] = {}


def register_calculator(jurisdiction_code: str):
    """
    Decorator to register an estate tax calculator class.

    Usage:
        @register_calculator("US")
        class FederalEstateTaxCalculator(EstateTaxCalculator):
            ...
    """
    def decorator(cls: Type[EstateTaxCalculator]):
        _CALCULATOR_REGISTRY[jurisdiction_code.upper()] = cls
        return cls
    return decorator


def get_calculator(jurisdiction_code: str) -> EstateTaxCalculator:
    """
    Factory method to get an estate tax calculator instance.

    Args:
        jurisdiction_code: "US" or a state code (e.g. "WA")

    Returns:
        Instance of the appropriate EstateTaxCalculator subclass

    Raises:
        ValueError: If jurisdiction is not supported
    """
    code = jurisdiction_code.upper()

    if code not in _CALCULATOR_REGISTRY:
        available = ", ".join(list_available_jurisdictions())
        raise ValueError(
            f"Estate tax calculator for '{jurisdiction_code}' not found. "
            f"Available: {available}"
        )

    calculator_class = _CALCULATOR_REGISTRY[code]
    return calculator_class()


def get_state_calculator(state: Optional[str]) -> EstateTaxCalculator:
    """
    Calculator for a state of residence.

    States without an estate tax (and a missing state) get a zero-tax calculator.
    """
    code = (state or "").strip().upper()

    if code and code != "US" and code in _CALCULATOR_REGISTRY:
        return _CALCULATOR_REGISTRY[code]()

    if code:
        logger.debug(f"No estate tax registered for state '{code}', state tax is zero")
    return NoEstateTaxCalculator(code)


def list_available_jurisdictions() -> List[str]:
    """Sorted list of all supported jurisdiction codes."""
    return sorted(_CALCULATOR_REGISTRY.keys())
