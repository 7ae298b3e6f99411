"""Process improvement suggestions from salesperson and bank funding rates."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import days_to_fund, funded_mask, group_funding_stats, safe_rate
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import normalize_deals_frame
from src.models.insights import OptimizationSuggestion
from src.utils.date_utils import round_half_up


def salesperson_funding_rates(deals_df: pd.DataFrame, salespeople_df: pd.DataFrame) -> pd.DataFrame:
    """Deal count and funded fraction for every rostered salesperson.

    Rows are ordered by ascending funded fraction, ties keep roster order.
    """
    funded = funded_mask(deals_df)
    rows = []
    for sp in salespeople_df.itertuples(index=False):
        mine = deals_df['salesperson_id'] == sp.id
        count = int(mine.sum())
        rows.append(
            {
                'id': sp.id,
                'name': sp.name,
                'deal_count': count,
                'funded_rate': safe_rate(int((mine & funded).sum()), count),
            }
        )
    out = pd.DataFrame(rows, columns=['id', 'name', 'deal_count', 'funded_rate'])
    return out.sort_values('funded_rate', kind='stable').reset_index(drop=True)


def bank_funding_performance(deals_df: pd.DataFrame) -> pd.DataFrame:
    """Per-bank totals, funded fraction and mean days to fund over funded deals."""
    stats = group_funding_stats(deals_df, 'bank')
    if stats.empty:
        return pd.DataFrame(columns=['bank', 'total', 'funded', 'funded_rate', 'avg_days_to_fund'])
    cycle = pd.DataFrame({'bank': deals_df['bank'], 'days': days_to_fund(deals_df)})
    cycle = cycle.loc[funded_mask(deals_df) & cycle['bank'].notna() & cycle['days'].notna()]
    avg_days = cycle.groupby('bank', sort=False)['days'].mean()
    out = stats.reset_index()
    out['avg_days_to_fund'] = out['bank'].map(avg_days.to_dict()).fillna(0.0).astype(float)
    return out


def suggest_optimizations(
    deals_df: pd.DataFrame,
    salespeople_df: pd.DataFrame,
    finance_managers_df: pd.DataFrame | None = None,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[OptimizationSuggestion]:
    """Suggest salesperson training and bank relationship reviews.

    ``finance_managers_df`` is accepted alongside the salesperson roster so
    callers can pass the full staff lookup; no current rule reads it.
    """
    deals = normalize_deals_frame(deals_df)
    if deals.empty:
        return []

    suggestions: list[OptimizationSuggestion] = []

    rates = salesperson_funding_rates(deals, salespeople_df)
    low = rates.loc[
        (rates['funded_rate'] < thresholds.training_rate_below)
        & (rates['deal_count'] > thresholds.training_min_deals)
    ]
    if not low.empty:
        suggestions.append(
            OptimizationSuggestion(
                type='salesperson_training',
                priority='high',
                description=f'Provide training for {len(low)} low-performing salespeople',
                details=tuple(
                    f'{row.name}: {round_half_up(row.funded_rate * 100)}% funding rate'
                    for row in low.itertuples(index=False)
                ),
                impact='Improve overall funding success rate',
            )
        )

    for row in bank_funding_performance(deals).itertuples(index=False):
        if row.funded_rate >= thresholds.bank_review_rate_below:
            continue
        suggestions.append(
            OptimizationSuggestion(
                type='bank_relationship',
                priority='medium',
                description=f'Review relationship with {row.bank}',
                details=(
                    f'Funding rate: {round_half_up(row.funded_rate * 100)}%',
                    f'Avg days to fund: {round_half_up(row.avg_days_to_fund)}',
                ),
                impact='Improve funding success and speed',
            )
        )

    return suggestions
