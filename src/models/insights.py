"""Result records produced by the deal insight calculations."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd


@dataclass(frozen=True)
class DealScore:
    """Health score of a single deal with the factors that produced it."""

    deal_id: int | str
    customer_name: str | None
    stock_no: str | None
    score: int
    factors: tuple[str, ...]
    risk: str
    recommendation: str


@dataclass(frozen=True)
class FundingPrediction:
    """Funding outlook for an unfunded deal.

    ``probability`` is the unrounded fraction that drives urgency and the
    estimated date; ``funding_probability`` is its rounded percentage.
    """

    deal_id: int | str
    customer_name: str | None
    stock_no: str | None
    days_since_deal: int | None
    probability: float
    funding_probability: int
    estimated_funding_date: pd.Timestamp | None
    urgency: str


@dataclass(frozen=True)
class BankConcentration:
    bank: str
    count: int


@dataclass(frozen=True)
class RiskFinding:
    """Aggregate risk pattern found across the deal set."""

    type: str
    severity: str
    description: str
    recommendation: str
    deal_ids: tuple = ()
    details: tuple[BankConcentration, ...] = ()


@dataclass(frozen=True)
class OptimizationSuggestion:
    type: str
    priority: str
    description: str
    details: tuple[str, ...]
    impact: str


@dataclass(frozen=True)
class MonthlyTrend:
    """Deal volume, funding rate and cycle time for one calendar month."""

    month: str
    period_start: pd.Timestamp
    total_deals: int
    funded_deals: int
    funding_rate: float
    avg_days_to_fund: int


@dataclass(frozen=True)
class InsightsReport:
    """All five insight collections computed for one evaluation instant."""

    as_of: pd.Timestamp
    deal_scoring: tuple[DealScore, ...] = field(default_factory=tuple)
    funding_predictions: tuple[FundingPrediction, ...] = field(default_factory=tuple)
    risk_analysis: tuple[RiskFinding, ...] = field(default_factory=tuple)
    optimization_suggestions: tuple[OptimizationSuggestion, ...] = field(default_factory=tuple)
    trends: tuple[MonthlyTrend, ...] = field(default_factory=tuple)
