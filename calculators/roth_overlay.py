"""
Roth-Conversion Overlay

Blends a Roth-conversion balance projection (produced by the retirement
income engine) into the estate projection: the projected account balances at
the year of death replace the baseline composition and the estate projection
is re-run. The result carries both the baseline and the with-Roth summary.

Copyright (c) 2026 Andreas Wagner. All rights reserved.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Optional, Union

import pandas as pd

from calculators.estate_models import (
    AssetComposition,
    EstateCalculationInput,
    EstateInputError,
    EstateProjection,
)
from calculators.estate_projection import (
    ProjectionComparison,
    appreciation_factor,
    calculate_estate_projection,
    compare_projections,
)
from utils.logging_config import setup_logger, log_dataframe_info

logger = setup_logger(__name__)

REQUIRED_COLUMNS = ("traditional_balance", "roth_balance")

# Column names as sent by the retirement engine's JSON
COLUMN_ALIASES = {
    "traditionalBalance": "traditional_balance",
    "taxDeferredBalance": "traditional_balance",
    "tax_deferred_balance": "traditional_balance",
    "rothBalance": "roth_balance",
    "taxableBalance": "taxable_balance",
}

RothProjection = Union[pd.DataFrame, Iterable[Dict[str, Any]]]


@dataclass(frozen=True)
class RothBalancesAtDeath:
    year_of_death: int
    matched_year: int
    traditional_balance: Decimal
    roth_balance: Decimal
    taxable_balance: Optional[Decimal] = None


@dataclass(frozen=True)
class RothOverlayResult:
    baseline: EstateProjection
    with_roth: EstateProjection
    balances: RothBalancesAtDeath
    comparison: ProjectionComparison

    def summaries(self) -> Dict[str, Any]:
        """Baseline and with-Roth summaries, shaped for persistence."""
        return {
            "baseline": self.baseline.to_dict(),
            "with_roth": self.with_roth.to_dict(),
        }


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or pd.isna(value):
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def normalize_roth_projection(
    projection: RothProjection,
    current_age: Optional[int] = None,
    as_of_year: Optional[int] = None,
) -> pd.DataFrame:
    """
    Normalise a yearly Roth-conversion projection to a DataFrame.

    Rows keyed by `year`; when only `age` is present it is mapped to a year
    using current_age and as_of_year. Duplicate years keep the last row.

    Raises:
        EstateInputError: If the projection is empty or lacks required columns
    """
    if isinstance(projection, pd.DataFrame):
        df = projection.copy()
    else:
        df = pd.DataFrame(list(projection))

    if df.empty:
        raise EstateInputError("Roth conversion projection is empty")

    df = df.rename(columns=COLUMN_ALIASES)

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise EstateInputError(f"Roth conversion projection missing columns: {', '.join(missing)}")

    if "year" not in df.columns:
        if "age" not in df.columns or current_age is None or as_of_year is None:
            raise EstateInputError("Roth conversion projection needs a 'year' column (or 'age' with current age)")
        df["year"] = as_of_year + (pd.to_numeric(df["age"]) - current_age)

    df["year"] = pd.to_numeric(df["year"], errors="raise").astype(int)
    for col in ("traditional_balance", "roth_balance", "taxable_balance"):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    df = (
        df.sort_values("year")
        .drop_duplicates(subset="year", keep="last")
        .reset_index(drop=True)
    )

    log_dataframe_info(logger, df, "Roth conversion projection")
    return df


def balances_at_death(projection: pd.DataFrame, year_of_death: int) -> RothBalancesAtDeath:
    """
    Projected balances for the year of death.

    Falls back to the nearest projected year (earlier year on ties).
    """
    distance = (projection["year"] - year_of_death).abs()
    row = projection.loc[distance.idxmin()]
    matched_year = int(row["year"])

    if matched_year != year_of_death:
        logger.info(f"Roth projection has no row for {year_of_death}, using {matched_year}")

    taxable = _to_decimal(row["taxable_balance"]) if "taxable_balance" in projection.columns else None

    return RothBalancesAtDeath(
        year_of_death=year_of_death,
        matched_year=matched_year,
        traditional_balance=max(Decimal(0), _to_decimal(row["traditional_balance"]) or Decimal(0)),
        roth_balance=max(Decimal(0), _to_decimal(row["roth_balance"]) or Decimal(0)),
        taxable_balance=max(Decimal(0), taxable) if taxable is not None else None,
    )


def apply_roth_overlay(
    calc_input: EstateCalculationInput,
    projection: RothProjection,
) -> RothOverlayResult:
    """
    Re-run the estate projection with Roth-conversion balances at death.

    The projected tax-deferred and Roth balances (and taxable, when the
    projection has it) replace the baseline composition. Those accounts
    leave the appreciating base and re-enter at their death-year value, so
    the projected estate is (base - current balances) x factor + death-year
    balances.
    """
    if isinstance(calc_input, dict):
        calc_input = EstateCalculationInput.model_validate(calc_input)

    baseline = calculate_estate_projection(calc_input)
    resolved = baseline.assumptions
    as_of_year = resolved.year_of_death - (resolved.death_age - resolved.current_age)

    df = normalize_roth_projection(projection, current_age=resolved.current_age, as_of_year=as_of_year)
    balances = balances_at_death(df, resolved.year_of_death)

    composition = calc_input.asset_composition
    taxable = balances.taxable_balance if balances.taxable_balance is not None else composition.taxable
    overlay_composition = AssetComposition(
        taxable=taxable,
        tax_deferred=balances.traditional_balance,
        roth=balances.roth_balance,
        illiquid=composition.illiquid,
    )

    current_accounts = composition.tax_deferred + composition.roth
    death_accounts = balances.traditional_balance + balances.roth_balance
    if balances.taxable_balance is not None:
        current_accounts += composition.taxable
        death_accounts += balances.taxable_balance

    factor = appreciation_factor(
        calc_input.assumptions.appreciation_rate,
        resolved.death_age - resolved.current_age
    )
    overlay_base = max(Decimal(0), calc_input.base_estate_value - current_accounts + death_accounts / factor)

    overlay_input = calc_input.model_copy(update={
        "base_estate_value": overlay_base,
        "asset_composition": overlay_composition,
        "assumptions": calc_input.assumptions.model_copy(update={
            "as_of_year": as_of_year,
            "current_age": resolved.current_age,
            "projected_death_age": resolved.death_age,
        }),
    })
    with_roth = calculate_estate_projection(overlay_input)

    comparison = compare_projections(baseline, with_roth)
    logger.info(
        f"Roth overlay: heir income tax ${baseline.heir_tax_estimate.projected_income_tax:,.0f} -> "
        f"${with_roth.heir_tax_estimate.projected_income_tax:,.0f}, "
        f"estate tax change ${-comparison.tax_savings:,.0f}"
    )

    return RothOverlayResult(
        baseline=baseline,
        with_roth=with_roth,
        balances=balances,
        comparison=comparison,
    )
