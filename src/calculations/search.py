"""Deal search, filtering and the unfunded funding queue."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from src.calculations.aggregates import days_since_deal, funded_mask
from src.data.loader import normalize_deals_frame

FUNDED_STATES = {'all', 'funded', 'unfunded'}


@dataclass(frozen=True)
class DealFilter:
    """Optional criteria; unset fields do not filter."""

    date_from: pd.Timestamp | None = None
    date_to: pd.Timestamp | None = None
    funded: str = 'all'
    salesperson_id: int | str | None = None
    finance_manager_id: int | str | None = None
    bank: str | None = None
    min_amount: float | None = None
    max_amount: float | None = None


def _contains(values: pd.Series, term: str) -> pd.Series:
    return values.astype(object).map(lambda v: v is not None and term in str(v).lower())


def _names(deals: pd.DataFrame, key: str, people_df: pd.DataFrame | None) -> pd.Series:
    if people_df is None or people_df.empty:
        return pd.Series(None, index=deals.index, dtype=object)
    lookup = dict(zip(people_df['id'], people_df['name']))
    return deals[key].map(lambda k: lookup.get(k) if k is not None else None)


def search_deals(
    deals_df: pd.DataFrame,
    term: str,
    salespeople_df: pd.DataFrame | None = None,
    finance_managers_df: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """Case-insensitive match on customer, stock number, bank and staff names."""
    deals = normalize_deals_frame(deals_df)
    needle = str(term or '').strip().lower()
    if not needle or deals.empty:
        return deals
    mask = (
        _contains(deals['customer_name'], needle)
        | _contains(deals['stock_no'], needle)
        | _contains(deals['bank'], needle)
        | _contains(_names(deals, 'salesperson_id', salespeople_df), needle)
        | _contains(_names(deals, 'finance_manager_id', finance_managers_df), needle)
    )
    return deals.loc[mask.astype(bool)].reset_index(drop=True)


def filter_deals(deals_df: pd.DataFrame, criteria: DealFilter) -> pd.DataFrame:
    """Apply every set criterion; dates and amount bounds are inclusive."""
    if criteria.funded not in FUNDED_STATES:
        raise ValueError(f'funded must be one of {sorted(FUNDED_STATES)}, got {criteria.funded!r}')
    deals = normalize_deals_frame(deals_df)
    mask = pd.Series(True, index=deals.index)

    if criteria.date_from is not None:
        mask &= deals['deal_date'] >= pd.Timestamp(criteria.date_from)
    if criteria.date_to is not None:
        mask &= deals['deal_date'] <= pd.Timestamp(criteria.date_to)
    if criteria.funded == 'funded':
        mask &= funded_mask(deals)
    elif criteria.funded == 'unfunded':
        mask &= ~funded_mask(deals)
    if criteria.salesperson_id is not None:
        mask &= deals['salesperson_id'] == criteria.salesperson_id
    if criteria.finance_manager_id is not None:
        mask &= deals['finance_manager_id'] == criteria.finance_manager_id
    if criteria.bank:
        mask &= _contains(deals['bank'], criteria.bank.strip().lower()).astype(bool)
    if criteria.min_amount is not None:
        mask &= deals['amount'] >= float(criteria.min_amount)
    if criteria.max_amount is not None:
        mask &= deals['amount'] <= float(criteria.max_amount)

    return deals.loc[mask].reset_index(drop=True)


def unfunded_queue(deals_df: pd.DataFrame, as_of: pd.Timestamp) -> pd.DataFrame:
    """Unfunded deals, oldest sale first, with whole ``days_out`` since sale."""
    deals = normalize_deals_frame(deals_df)
    queue = deals.loc[~funded_mask(deals)].copy()
    queue['days_out'] = days_since_deal(queue, as_of).astype('Int64')
    queue = queue.sort_values('deal_date', kind='stable', na_position='last')
    return queue.reset_index(drop=True)
