"""Portfolio-level funding risk patterns."""

from __future__ import annotations

import pandas as pd

from src.calculations.aggregates import days_since_deal, funded_mask
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import normalize_deals_frame
from src.models.insights import BankConcentration, RiskFinding


def high_value_unfunded(deals_df: pd.DataFrame, thresholds: InsightThresholds = DEFAULT_THRESHOLDS) -> pd.DataFrame:
    """Unfunded deals whose amount exceeds the high-value cut-off."""
    mask = ~funded_mask(deals_df) & (deals_df['amount'] > thresholds.high_value_amount)
    return deals_df.loc[mask]


def old_unfunded(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> pd.DataFrame:
    """Unfunded deals with a deal date older than the aging cut-off."""
    ages = days_since_deal(deals_df, as_of)
    mask = ~funded_mask(deals_df) & deals_df['deal_date'].notna() & (ages > thresholds.old_unfunded_days)
    return deals_df.loc[mask]


def bank_concentration(
    deals_df: pd.DataFrame,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[BankConcentration]:
    """Banks holding strictly more than the concentration share of all deals.

    The denominator counts every deal, including those with no bank.
    """
    total = len(deals_df)
    banked = deals_df.loc[deals_df['bank'].notna()]
    if banked.empty:
        return []
    numerator, denominator = thresholds.concentration_share
    counts = banked.groupby('bank', sort=False).size()
    return [
        BankConcentration(bank=str(bank), count=int(count))
        for bank, count in counts.items()
        if int(count) * denominator > total * numerator
    ]


def analyze_risks(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> list[RiskFinding]:
    """Evaluate each risk rule independently; only non-empty findings are returned."""
    deals = normalize_deals_frame(deals_df)
    if deals.empty:
        return []

    findings: list[RiskFinding] = []

    high_value = high_value_unfunded(deals, thresholds)
    if not high_value.empty:
        findings.append(
            RiskFinding(
                type='high_value_unfunded',
                severity='high',
                description=f'{len(high_value)} high-value deals pending funding',
                recommendation='Prioritize funding for high-value deals',
                deal_ids=tuple(high_value['deal_id'].tolist()),
            )
        )

    old = old_unfunded(deals, as_of, thresholds)
    if not old.empty:
        findings.append(
            RiskFinding(
                type='old_unfunded',
                severity='medium',
                description=f'{len(old)} deals pending for over {thresholds.old_unfunded_days} days',
                recommendation='Review and follow up on old deals',
                deal_ids=tuple(old['deal_id'].tolist()),
            )
        )

    concentrated = bank_concentration(deals, thresholds)
    if concentrated:
        findings.append(
            RiskFinding(
                type='bank_concentration',
                severity='medium',
                description=f'High concentration in {len(concentrated)} banks',
                recommendation='Diversify bank relationships',
                details=tuple(concentrated),
            )
        )

    return findings
