"""
Estate Tax Calculator System

Provides federal and state estate tax calculators behind a shared interface.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

from .base import (
    EstateTaxCalculator,
    EstateTaxResult,
    NoEstateTaxCalculator,
    calculate_bracket_tax,
    get_calculator,
    get_state_calculator,
    list_available_jurisdictions,
)
from .federal import FederalEstateTaxCalculator, get_federal_exemption, resolve_effective_exemption
from .state import StateEstateTaxCalculator

__all__ = [
    "EstateTaxCalculator",
    "EstateTaxResult",
    "NoEstateTaxCalculator",
    "FederalEstateTaxCalculator",
    "StateEstateTaxCalculator",
    "calculate_bracket_tax",
    "get_calculator",
    "get_state_calculator",
    "get_federal_exemption",
    "list_available_jurisdictions",
    "resolve_effective_exemption",
]
