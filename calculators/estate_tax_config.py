"""
Estate Tax Configuration

Year-indexed federal exemptions, state estate-tax schedules and the default
assumptions used by the estate projection.

Format of STATE_ESTATE_TAX:
{
    "STATE": {
        "name": "Display name",
        "exemption": Decimal,
        "brackets": [(lower, upper, rate), ...]   # upper=None is the open top bracket
    }
}

Bracket bounds are measured on the amount ABOVE the state exemption.

Copyright (c) 2026 Andre. All rights reserved.
"""

from decimal import Decimal

# ===== FEDERAL =====

# Basic exclusion amount per decedent.
# 2026 reflects the scheduled TCJA sunset.
FEDERAL_EXEMPTION_BY_YEAR = {
    2018: Decimal("11180000"),
    2019: Decimal("11400000"),
    2020: Decimal("11580000"),
    2021: Decimal("11700000"),
    2022: Decimal("12060000"),
    2023: Decimal("12920000"),
    2024: Decimal("13610000"),
    2025: Decimal("13990000"),
    2026: Decimal("7000000"),
}

FEDERAL_ESTATE_TAX_RATE = Decimal("0.40")

CURRENT_LAW_YEAR = 2025
SUNSET_YEAR = 2026

# ===== STATE =====

STATE_ESTATE_TAX = {
    "CT": {
        "name": "Connecticut",
        "exemption": Decimal("12920000"),
        "brackets": [(Decimal(0), None, Decimal("0.12"))],
    },
    "DC": {
        "name": "District of Columbia",
        "exemption": Decimal("4528800"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "HI": {
        "name": "Hawaii",
        "exemption": Decimal("5490000"),
        "brackets": [
            (Decimal(0), Decimal("1000000"), Decimal("0.10")),
            (Decimal("1000000"), Decimal("2000000"), Decimal("0.11")),
            (Decimal("2000000"), Decimal("3000000"), Decimal("0.12")),
            (Decimal("3000000"), Decimal("4000000"), Decimal("0.13")),
            (Decimal("4000000"), Decimal("5000000"), Decimal("0.14")),
            (Decimal("5000000"), Decimal("10000000"), Decimal("0.157")),
            (Decimal("10000000"), None, Decimal("0.20")),
        ],
    },
    "IL": {
        "name": "Illinois",
        "exemption": Decimal("4000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "MA": {
        "name": "Massachusetts",
        "exemption": Decimal("2000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "MD": {
        "name": "Maryland",
        "exemption": Decimal("5000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "ME": {
        "name": "Maine",
        "exemption": Decimal("6410000"),
        "brackets": [
            (Decimal(0), Decimal("3000000"), Decimal("0.08")),
            (Decimal("3000000"), Decimal("6000000"), Decimal("0.10")),
            (Decimal("6000000"), None, Decimal("0.12")),
        ],
    },
    "MN": {
        "name": "Minnesota",
        "exemption": Decimal("3000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "NY": {
        "name": "New York",
        "exemption": Decimal("6580000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "OR": {
        "name": "Oregon",
        "exemption": Decimal("1000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "RI": {
        "name": "Rhode Island",
        "exemption": Decimal("1733264"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "VT": {
        "name": "Vermont",
        "exemption": Decimal("5000000"),
        "brackets": [(Decimal(0), None, Decimal("0.16"))],
    },
    "WA": {
        "name": "Washington",
        "exemption": Decimal("2193000"),
        "brackets": [
            (Decimal(0), Decimal("1000000"), Decimal("0.10")),
            (Decimal("1000000"), Decimal("2000000"), Decimal("0.14")),
            (Decimal("2000000"), Decimal("3000000"), Decimal("0.15")),
            (Decimal("3000000"), Decimal("4000000"), Decimal("0.16")),
            (Decimal("4000000"), Decimal("6000000"), Decimal("0.18")),
            (Decimal("6000000"), Decimal("7000000"), Decimal("0.19")),
            (Decimal("7000000"), Decimal("9000000"), Decimal("0.195")),
            (Decimal("9000000"), None, Decimal("0.20")),
        ],
    },
}

# ===== PROJECTION DEFAULTS =====

DEFAULT_LIQUIDITY_TARGET_PERCENT = Decimal("110")
DEFAULT_HEIR_INCOME_TAX_RATE = Decimal("0.25")
DEFAULT_ADMIN_EXPENSE_RATE = Decimal("0.03")  # admin expenses, debts, fees
PROBATE_COST_RATE = Decimal("0.05")
VALUATION_DISCOUNT_ELIGIBLE_SHARE = Decimal("0.30")  # share of the estate that can take a discount
FUNERAL_COST_PER_DECEDENT = Decimal("10000")

DEFAULT_CURRENT_AGE = 55
DEFAULT_DEATH_AGE = 93
MIN_YEARS_TO_DEATH = 5

# ===== SCENARIO DEFAULTS =====

IRS_7520_RATE = Decimal("0.05")
YEARS_BETWEEN_DEATHS = 10
ILIT_COVERAGE_BUFFER = Decimal("0.10")
ILIT_PREMIUM_RATE = Decimal("0.02")
ASSUMED_LIQUID_SHARE = Decimal("0.20")
