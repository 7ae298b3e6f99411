"""Deal and staff domain models."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class Deal:
    """A vehicle sale tracked from sale date through bank funding."""

    deal_id: int | str
    customer_name: str | None = None
    stock_no: str | None = None
    bank: str | None = None
    salesperson_id: int | str | None = None
    finance_manager_id: int | str | None = None
    deal_date: pd.Timestamp | None = None
    funded_date: pd.Timestamp | None = None
    amount: float | None = None
    deal_type: str | None = None
    funding_notes: str | None = None
    created_at: pd.Timestamp | None = None
    updated_at: pd.Timestamp | None = None
    created_by: str | None = None
    updated_by: str | None = None
    funded_by: str | None = None

    @property
    def is_funded(self) -> bool:
        return self.funded_date is not None and not pd.isna(self.funded_date)


@dataclass(frozen=True)
class Salesperson:
    id: int | str
    name: str


@dataclass(frozen=True)
class FinanceManager:
    id: int | str
    name: str
