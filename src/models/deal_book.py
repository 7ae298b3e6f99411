"""Deal book container and convenience behavior."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from src.calculations.aggregates import funded_mask
from src.calculations.insights import build_insights
from src.config import DEFAULT_THRESHOLDS, InsightThresholds
from src.data.loader import PEOPLE_COLUMNS, load_input_workbook, normalize_deals_frame
from src.models.insights import InsightsReport


def _empty_people() -> pd.DataFrame:
    return pd.DataFrame(columns=PEOPLE_COLUMNS)


@dataclass
class DealBook:
    """Deals plus the salesperson and finance-manager rosters they reference."""

    deals: pd.DataFrame
    salespeople: pd.DataFrame = field(default_factory=_empty_people)
    finance_managers: pd.DataFrame = field(default_factory=_empty_people)

    def __post_init__(self) -> None:
        self.deals = normalize_deals_frame(self.deals)

    @classmethod
    def from_workbook(cls, path: str) -> DealBook:
        deals, salespeople, finance_managers = load_input_workbook(path)
        return cls(deals, salespeople, finance_managers)

    def funded_deals(self) -> pd.DataFrame:
        """Return deals that carry a funded date."""
        return self.deals.loc[funded_mask(self.deals)].copy()

    def unfunded_deals(self) -> pd.DataFrame:
        """Return deals still awaiting funding."""
        return self.deals.loc[~funded_mask(self.deals)].copy()

    def insights(
        self,
        as_of: pd.Timestamp,
        thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
    ) -> InsightsReport:
        """Compute all insight collections as of the given instant."""
        return build_insights(self.deals, as_of, self.salespeople, self.finance_managers, thresholds)
