"""Funding probability and urgency estimates for unfunded deals."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import aligned_group_stat, days_since_deal, funded_mask
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import normalize_deals_frame
from src.models.insights import FundingPrediction
from src.utils.date_utils import round_half_up, to_timestamp


def classify_urgency(probability: float, thresholds: InsightThresholds = DEFAULT_THRESHOLDS) -> str:
    """Urgency tier from the unrounded funding probability (strict thresholds)."""
    if probability < thresholds.high_urgency_below:
        return 'high'
    if probability < thresholds.medium_urgency_below:
        return 'medium'
    return 'low'


def _age_multiplier(days: int | None, thresholds: InsightThresholds) -> float:
    if days is None:
        return 1.0
    for limit, factor in thresholds.age_multipliers:
        if days > limit:
            return factor
    return 1.0


def estimated_funding_date(as_of: pd.Timestamp, probability: float) -> pd.Timestamp | None:
    """``as_of`` plus 1/probability days.

    None when funding looks impossible, or when the estimate falls outside
    the representable timestamp range.
    """
    if probability <= 0:
        return None
    try:
        return to_timestamp(as_of) + pd.Timedelta(days=1.0 / probability)
    except (pd.errors.OutOfBoundsDatetime, pd.errors.OutOfBoundsTimedelta, OverflowError):
        return None


def predict_funding(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[FundingPrediction]:
    """Predict funding for each unfunded deal, most urgent first."""
    deals = normalize_deals_frame(deals_df)
    if deals.empty:
        return []

    as_of = to_timestamp(as_of)
    bank_rates = aligned_group_stat(deals, 'bank', 'funded_rate')
    ages = days_since_deal(deals, as_of)
    unfunded = deals.loc[~funded_mask(deals)]

    out: list[FundingPrediction] = []
    for idx, row in unfunded.iterrows():
        days = None if pd.isna(ages[idx]) else int(ages[idx])
        probability = thresholds.base_funding_probability * _age_multiplier(days, thresholds)
        if row['bank'] is not None:
            probability *= bank_rates[idx]

        out.append(
            FundingPrediction(
                deal_id=row['deal_id'],
                customer_name=row['customer_name'],
                stock_no=row['stock_no'],
                days_since_deal=days,
                probability=float(probability),
                funding_probability=round_half_up(probability * 100),
                estimated_funding_date=estimated_funding_date(as_of, probability),
                urgency=classify_urgency(probability, thresholds),
            )
        )

    return sorted(out, key=lambda p: p.funding_probability)
