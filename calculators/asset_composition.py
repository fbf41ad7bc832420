"""
Asset Composition Builder

Groups a financial profile's balances into the four buckets the estate
projection needs (taxable, tax-deferred, Roth, illiquid) and derives the base
estate value when no explicit value is supplied.

Copyright (c) 2026 Andre. All rights reserved.
"""

import re
from decimal import Decimal
from typing import Optional

from calculators.estate_models import AssetComposition, EstateProfile
from utils.logging_config import setup_logger

logger = setup_logger(__name__)

TAX_DEFERRED_PATTERN = re.compile(r"(401k|403b|ira|retirement|pension|457|tsp|sep|simple)")
ILLIQUID_PATTERN = re.compile(r"(real|property|business|collectible)")


def classify_asset_type(asset_type: str) -> str:
    """
    Bucket for a free-form asset type label.

    Roth is checked first so "Roth IRA" is not caught by the IRA pattern.
    """
    label = (asset_type or "").lower()
    if "roth" in label:
        return "roth"
    if TAX_DEFERRED_PATTERN.search(label):
        return "tax_deferred"
    if ILLIQUID_PATTERN.search(label):
        return "illiquid"
    return "taxable"


def build_asset_composition_from_profile(profile: EstateProfile) -> AssetComposition:
    """
    Build the estate asset composition from a profile.

    Sources, in order:
    - Free-form asset list (classified by type label; zero values skipped)
    - Structured account balances (traditional/Roth accounts, brokerage, cash, savings)
    - Business interests and personal property (illiquid)
    - Primary residence equity (illiquid, floored at zero)
    """
    buckets = {
        "taxable": Decimal(0),
        "tax_deferred": Decimal(0),
        "roth": Decimal(0),
        "illiquid": Decimal(0),
    }

    for asset in profile.assets:
        if not asset.value:
            continue
        if asset.value < 0:
            logger.warning(f"Skipping negative asset value for '{asset.type}': {asset.value}")
            continue
        buckets[classify_asset_type(asset.type)] += asset.value

    buckets["tax_deferred"] += profile.traditional_401k + profile.traditional_ira
    buckets["roth"] += profile.roth_401k + profile.roth_ira
    buckets["taxable"] += profile.taxable_brokerage + profile.cash_reserves + profile.savings_balance
    buckets["illiquid"] += profile.business_interests + profile.personal_property

    if profile.primary_residence is not None:
        buckets["illiquid"] += profile.primary_residence.equity()

    return AssetComposition(**buckets)


def derive_base_estate_value(
    profile: Optional[EstateProfile],
    composition: AssetComposition,
    estate_plan_value: Optional[Decimal] = None,
    retirement_median_balance: Optional[Decimal] = None,
) -> Decimal:
    """
    Base estate value for a projection, first positive of:

    1. Net worth at longevity from the profile's projections
    2. Value stored on a saved estate plan
    3. Median ending balance of the retirement simulation plus illiquid assets
    4. Composition total less liabilities (floored at zero)
    """
    if profile is not None and profile.net_worth_at_longevity and profile.net_worth_at_longevity > 0:
        return profile.net_worth_at_longevity

    if estate_plan_value is not None and estate_plan_value > 0:
        return Decimal(estate_plan_value)

    if retirement_median_balance is not None and retirement_median_balance > 0:
        return Decimal(retirement_median_balance) + composition.illiquid

    liabilities = profile.liabilities if profile is not None else Decimal(0)
    return max(Decimal(0), composition.total() - liabilities)
