"""Deal health scoring from historical funding aggregates."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import aligned_group_stat, days_since_deal
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import normalize_deals_frame
from src.models.insights import DealScore
from src.utils.date_utils import round_half_up

RECOMMENDATIONS = {
    'high': 'Review Required',
    'medium': 'Monitor Closely',
    'low': 'Good to Go',
}


def classify_risk_tier(score: float, thresholds: InsightThresholds = DEFAULT_THRESHOLDS) -> str:
    """Map a 0-100 score onto the high/medium/low risk tiers."""
    if score < thresholds.high_risk_below:
        return 'high'
    if score < thresholds.medium_risk_below:
        return 'medium'
    return 'low'


def recommendation_for(tier: str) -> str:
    return RECOMMENDATIONS[tier]


def _age_penalty(days: float, thresholds: InsightThresholds) -> float:
    for limit, penalty in thresholds.age_penalties:
        if days > limit:
            return penalty
    return 0.0


def score_deals(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[DealScore]:
    """Score every deal and return the records sorted by descending score.

    The score starts at ``base_score`` and accumulates customer, bank and
    salesperson funded-fraction bonuses, a deal-age penalty and a stock
    number bonus before being clamped to [0, 100]. Terms that cannot be
    evaluated for a deal are skipped and left out of its factor list.
    """
    deals = normalize_deals_frame(deals_df)
    if deals.empty:
        return []

    customer_counts = aligned_group_stat(deals, 'customer_name', 'total')
    customer_rates = aligned_group_stat(deals, 'customer_name', 'funded_rate')
    bank_rates = aligned_group_stat(deals, 'bank', 'funded_rate')
    sp_rates = aligned_group_stat(deals, 'salesperson_id', 'funded_rate')
    ages = days_since_deal(deals, as_of)

    results: list[DealScore] = []
    for idx, row in deals.iterrows():
        score = thresholds.base_score
        factors: list[str] = []

        if row['customer_name'] is not None and customer_counts[idx] > 1:
            term = customer_rates[idx] * thresholds.customer_history_weight
            score += term
            factors.append(f'Customer History: +{round_half_up(term)}')

        if row['bank'] is not None:
            term = bank_rates[idx] * thresholds.bank_performance_weight
            score += term
            factors.append(f'Bank Performance: +{round_half_up(term)}')

        if row['salesperson_id'] is not None:
            term = sp_rates[idx] * thresholds.salesperson_performance_weight
            score += term
            factors.append(f'Salesperson Performance: +{round_half_up(term)}')

        if not pd.isna(ages[idx]):
            penalty = _age_penalty(ages[idx], thresholds)
            if penalty:
                score -= penalty
                factors.append(f'Deal Age: -{penalty:g}')

        stock = row['stock_no']
        if stock is not None and len(stock) >= thresholds.stock_number_min_length:
            score += thresholds.stock_number_bonus
            factors.append(f'Stock Number: +{thresholds.stock_number_bonus:g}')

        final = round_half_up(max(0.0, min(100.0, score)))
        tier = classify_risk_tier(final, thresholds)
        results.append(
            DealScore(
                deal_id=row['deal_id'],
                customer_name=row['customer_name'],
                stock_no=stock,
                score=final,
                factors=tuple(factors),
                risk=tier,
                recommendation=recommendation_for(tier),
            )
        )

    return sorted(results, key=lambda s: s.score, reverse=True)
