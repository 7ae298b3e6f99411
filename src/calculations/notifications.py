"""Derived funding notifications for the deal desk."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from src.calculations.aggregates import days_since_deal, funded_mask
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import normalize_deals_frame
from src.utils.date_utils import to_timestamp


@dataclass(frozen=True)
class Notification:
    id: str
    type: str
    title: str
    message: str
    deal_id: int | str
    priority: str
    read: bool = False


def _label(row: pd.Series) -> str:
    return f"{row['customer_name']} ({row['stock_no']})"


def build_notifications(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[Notification]:
    """Pending-funding, funded-today and high-value notices, in that order."""
    deals = normalize_deals_frame(deals_df)
    if deals.empty:
        return []
    as_of_ts = to_timestamp(as_of)
    funded = funded_mask(deals)
    ages = days_since_deal(deals, as_of_ts)
    out: list[Notification] = []

    pending = ~funded & deals['deal_date'].notna() & (ages > thresholds.pending_notice_days)
    for idx, row in deals.loc[pending].iterrows():
        days = int(ages[idx])
        out.append(
            Notification(
                id=f"unfunded-{row['deal_id']}",
                type='warning',
                title='Deal Pending Funding',
                message=f'Deal for {_label(row)} has been pending for {days} days',
                deal_id=row['deal_id'],
                priority='high' if days > thresholds.pending_high_priority_days else 'medium',
            )
        )

    funded_today = funded & (deals['funded_date'].dt.normalize() == as_of_ts.normalize())
    for _, row in deals.loc[funded_today].iterrows():
        out.append(
            Notification(
                id=f"funded-{row['deal_id']}",
                type='success',
                title='Deal Funded',
                message=f'Deal for {_label(row)} was funded today',
                deal_id=row['deal_id'],
                priority='low',
            )
        )

    high_value = ~funded & (deals['amount'] > thresholds.high_value_amount)
    for _, row in deals.loc[high_value].iterrows():
        out.append(
            Notification(
                id=f"high-value-{row['deal_id']}",
                type='info',
                title='High-Value Deal',
                message=f"High-value deal for {_label(row)} - ${row['amount']:,.0f}",
                deal_id=row['deal_id'],
                priority='medium',
            )
        )

    return out


def merge_notifications(existing: list[Notification], new: list[Notification]) -> list[Notification]:
    """Append notifications whose id is not already present, keeping read state."""
    seen = {n.id for n in existing}
    return list(existing) + [n for n in new if n.id not in seen]


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)
