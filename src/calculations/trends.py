"""Monthly deal volume and funding trends."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import days_to_fund, funded_mask, safe_rate
from src.data.loader import normalize_deals_frame
from src.models.insights import MonthlyTrend
from src.utils.date_utils import month_label, round_half_up


def monthly_trends(deals_df: pd.DataFrame) -> list[MonthlyTrend]:
    """Bucket dated deals by calendar month of deal date, in chronological order."""
    deals = normalize_deals_frame(deals_df)
    dated = deals.loc[deals['deal_date'].notna()]
    if dated.empty:
        return []

    funded = funded_mask(dated)
    frame = pd.DataFrame(
        {
            'period': dated['deal_date'].dt.to_period('M'),
            'funded': funded,
            'days': days_to_fund(dated).where(funded),
        }
    )
    grouped = frame.groupby('period', sort=True).agg(
        total=('funded', 'size'),
        funded=('funded', 'sum'),
        avg_days=('days', 'mean'),
    )

    out: list[MonthlyTrend] = []
    for period, row in grouped.iterrows():
        total = int(row['total'])
        funded_count = int(row['funded'])
        avg_days = 0 if pd.isna(row['avg_days']) else round_half_up(row['avg_days'])
        out.append(
            MonthlyTrend(
                month=month_label(period),
                period_start=period.start_time,
                total_deals=total,
                funded_deals=funded_count,
                funding_rate=safe_rate(funded_count, total) * 100,
                avg_days_to_fund=avg_days,
            )
        )
    return out
