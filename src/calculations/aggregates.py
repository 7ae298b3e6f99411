"""Per-entity funding aggregates shared by the insight calculations."""

from __future__ import annotations

import pandas as pd

from src.utils.date_utils import whole_days_between


def funded_mask(deals_df: pd.DataFrame) -> pd.Series:
    """True where a deal carries a funded date."""
    return deals_df['funded_date'].notna()


def safe_rate(numerator: float, denominator: float) -> float:
    """Ratio that resolves an empty denominator to 0."""
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


def group_funding_stats(deals_df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Deal count, funded count and funded fraction per non-missing key.

    Groups keep first-appearance order.
    """
    keyed = deals_df.loc[deals_df[key].notna()]
    if keyed.empty:
        return pd.DataFrame(columns=['total', 'funded', 'funded_rate'])
    stats = (
        keyed.assign(_funded=funded_mask(keyed))
        .groupby(key, sort=False)['_funded']
        .agg(total='size', funded='sum')
    )
    stats['funded'] = stats['funded'].astype(int)
    stats['funded_rate'] = stats['funded'] / stats['total']
    return stats


def aligned_group_stat(deals_df: pd.DataFrame, key: str, stat: str) -> pd.Series:
    """Map a per-group statistic back onto each deal row (NaN where key is missing)."""
    stats = group_funding_stats(deals_df, key)
    if stats.empty:
        return pd.Series(float('nan'), index=deals_df.index, dtype=float)
    lookup = stats[stat].to_dict()
    return deals_df[key].map(lambda k: lookup.get(k, float('nan')) if k is not None else float('nan')).astype(float)


def days_since_deal(deals_df: pd.DataFrame, as_of: pd.Timestamp) -> pd.Series:
    """Whole days from deal date to the evaluation instant."""
    return whole_days_between(deals_df['deal_date'], pd.Timestamp(as_of))


def days_to_fund(deals_df: pd.DataFrame) -> pd.Series:
    """Whole days from deal date to funded date; NaN unless both are present."""
    return whole_days_between(deals_df['deal_date'], deals_df['funded_date'])
