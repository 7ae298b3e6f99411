"""Dashboard summary metrics over the deal book."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import days_to_fund, funded_mask, group_funding_stats, safe_rate
from src.data.loader import normalize_deals_frame
from src.utils.date_utils import month_label, round_half_up


def summary_metrics(deals_df: pd.DataFrame) -> dict[str, float | int]:
    """Headline counts, funding rate (pp, one decimal) and average days to fund."""
    deals = normalize_deals_frame(deals_df)
    total = int(len(deals))
    funded = int(funded_mask(deals).sum()) if total else 0
    cycle = days_to_fund(deals).dropna() if total else pd.Series(dtype=float)
    return {
        'total_deals': total,
        'funded_deals': funded,
        'unfunded_deals': total - funded,
        'funding_rate': round(safe_rate(funded, total) * 100, 1),
        'avg_days_to_fund': round_half_up(cycle.mean()) if not cycle.empty else 0,
    }


def salesperson_performance(deals_df: pd.DataFrame, salespeople_df: pd.DataFrame) -> pd.DataFrame:
    """Per-salesperson totals and funding rate, busiest first."""
    deals = normalize_deals_frame(deals_df)
    funded = funded_mask(deals)
    rows = []
    for sp in salespeople_df.itertuples(index=False):
        mine = deals['salesperson_id'] == sp.id
        total = int(mine.sum())
        funded_count = int((mine & funded).sum())
        rows.append(
            {
                'name': sp.name,
                'total': total,
                'funded': funded_count,
                'unfunded': total - funded_count,
                'funding_rate': safe_rate(funded_count, total) * 100,
            }
        )
    out = pd.DataFrame(rows, columns=['name', 'total', 'funded', 'unfunded', 'funding_rate'])
    return out.sort_values('total', ascending=False, kind='stable').reset_index(drop=True)


def bank_performance(deals_df: pd.DataFrame, top_n: int = 5) -> pd.DataFrame:
    """Busiest banks with their funded counts and funding rate."""
    deals = normalize_deals_frame(deals_df)
    stats = group_funding_stats(deals, 'bank')
    if stats.empty:
        return pd.DataFrame(columns=['bank', 'total', 'funded', 'funding_rate'])
    out = stats.reset_index()
    out['funding_rate'] = out['funded_rate'] * 100
    out = out[['bank', 'total', 'funded', 'funding_rate']]
    return out.sort_values('total', ascending=False, kind='stable').head(top_n).reset_index(drop=True)


def monthly_funded_counts(deals_df: pd.DataFrame) -> pd.DataFrame:
    """Funded deals per calendar month of funded date, chronological."""
    deals = normalize_deals_frame(deals_df)
    funded = deals.loc[funded_mask(deals), 'funded_date']
    if funded.empty:
        return pd.DataFrame(columns=['month', 'funded'])
    counts = funded.dt.to_period('M').value_counts().sort_index()
    return pd.DataFrame(
        {
            'month': [month_label(p) for p in counts.index],
            'funded': counts.astype(int).to_numpy(),
        }
    )
