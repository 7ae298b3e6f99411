"""Build every deal insight collection for one evaluation instant."""

from __future__ import annotations

import pandas as pd

from src.calculations.funding import predict_funding
from src.calculations.optimization import suggest_optimizations
from src.calculations.risk import analyze_risks
from src.calculations.scoring import score_deals
from src.calculations.trends import monthly_trends
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import PEOPLE_COLUMNS, normalize_deals_frame
from src.models.insights import InsightsReport
from src.utils.date_utils import to_timestamp
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)


def build_insights(
    deals_df: pd.DataFrame,
    as_of: pd.Timestamp,
    salespeople_df: pd.DataFrame | None = None,
    finance_managers_df: pd.DataFrame | None = None,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> InsightsReport:
    """Run scoring, predictions, risks, suggestions and trends over one snapshot."""
    as_of_ts = to_timestamp(as_of)
    deals = normalize_deals_frame(deals_df)
    salespeople = salespeople_df if salespeople_df is not None else pd.DataFrame(columns=PEOPLE_COLUMNS)
    finance_managers = (
        finance_managers_df if finance_managers_df is not None else pd.DataFrame(columns=PEOPLE_COLUMNS)
    )

    report = InsightsReport(
        as_of=as_of_ts,
        deal_scoring=tuple(score_deals(deals, as_of_ts, thresholds)),
        funding_predictions=tuple(predict_funding(deals, as_of_ts, thresholds)),
        risk_analysis=tuple(analyze_risks(deals, as_of_ts, thresholds)),
        optimization_suggestions=tuple(
            suggest_optimizations(deals, salespeople, finance_managers, thresholds)
        ),
        trends=tuple(monthly_trends(deals)),
    )
    LOGGER.info(
        'Insights as of %s: %s scores, %s predictions, %s risks, %s suggestions, %s months.',
        as_of_ts.date(),
        len(report.deal_scoring),
        len(report.funding_predictions),
        len(report.risk_analysis),
        len(report.optimization_suggestions),
        len(report.trends),
    )
    return report
