# equity_payoff_engine/diagnostics.py
# Pure functions over the monthly schedule frame. No I/O side effects.

from typing import Dict, Optional, Tuple

import pandas as pd

DATE_COL = "date"
TRIGGER_COL = "assetValueAtTrigger"
REMAINING_COL = "remainingAsset"
UNFUNDED_COL = "unfundedShortfall"


def first_trigger(df: pd.DataFrame) -> Optional[Tuple[int, str, float]]:
    """Return (idx, date, asset_value_at_trigger) of the payoff month, else None."""
    if TRIGGER_COL not in df.columns:
        return None
    mask = df[TRIGGER_COL].notna()
    if not mask.any():
        return None
    idx = int(mask.idxmax())
    row = df.loc[idx]
    return idx, str(row[DATE_COL]), float(row[TRIGGER_COL])


def first_exhaustion(df: pd.DataFrame) -> Optional[Tuple[int, str, float]]:
    """
    First month where holdings hit zero with part of the shortfall left unfunded.
    Returns (idx, date, unfunded_amount) or None.
    """
    mask = (df[REMAINING_COL].astype(float) <= 0.0) & (df[UNFUNDED_COL].astype(float) > 0.0)
    if not mask.any():
        return None
    idx = int(mask.idxmax())
    row = df.loc[idx]
    return idx, str(row[DATE_COL]), float(row[UNFUNDED_COL])


def payoff_breakdown(row: pd.Series) -> Dict[str, float]:
    """Asset value before the payoff should equal the debt retired plus what is left."""
    before = float(row.get(TRIGGER_COL, 0.0))
    debt = float(row.get("debtBalanceAtTrigger", 0.0))
    after = float(row.get("assetValue", 0.0))
    return {"asset_before": before, "debt_retired": debt, "asset_after": after, "components_sum": debt + after}
