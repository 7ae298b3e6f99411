import pandas as pd
import pytest

from src.calculations.search import DealFilter, filter_deals, search_deals, unfunded_queue


def _deals() -> pd.DataFrame:
    return pd.DataFrame(
        {
            'deal_id': [1, 2, 3],
            'customer_name': ['Ann Lee', 'Bob Ray', 'Cal Poe'],
            'stock_no': ['A100', 'B200', 'C300'],
            'bank': ['Chase', 'Ally Financial', None],
            'salesperson_id': [1, 2, 1],
            'finance_manager_id': [1, 1, None],
            'deal_date': pd.to_datetime(['2025-03-20', '2025-03-01', None]),
            'funded_date': pd.to_datetime([None, None, '2025-03-25']),
            'amount': [12_000.0, 48_000.0, 60_000.0],
        }
    )


def test_search_matches_customer_stock_bank_and_staff() -> None:
    salespeople = pd.DataFrame({'id': [1, 2], 'name': ['Dana', 'Eli']})
    fms = pd.DataFrame({'id': [1], 'name': ['Fran']})

    assert search_deals(_deals(), 'lee')['deal_id'].tolist() == [1]
    assert search_deals(_deals(), 'b2')['deal_id'].tolist() == [2]
    assert search_deals(_deals(), 'ALLY')['deal_id'].tolist() == [2]
    assert search_deals(_deals(), 'dana', salespeople, fms)['deal_id'].tolist() == [1, 3]
    assert search_deals(_deals(), 'fran', salespeople, fms)['deal_id'].tolist() == [1, 2]


def test_blank_search_returns_everything() -> None:
    assert len(search_deals(_deals(), '   ')) == 3


def test_filter_combines_criteria() -> None:
    out = filter_deals(_deals(), DealFilter(funded='unfunded', min_amount=20_000))
    assert out['deal_id'].tolist() == [2]

    out = filter_deals(_deals(), DealFilter(date_from=pd.Timestamp('2025-03-01'), date_to=pd.Timestamp('2025-03-20')))
    assert out['deal_id'].tolist() == [1, 2]

    out = filter_deals(_deals(), DealFilter(salesperson_id=1, bank='chase'))
    assert out['deal_id'].tolist() == [1]


def test_filter_rejects_unknown_funded_state() -> None:
    with pytest.raises(ValueError, match='funded must be one of'):
        filter_deals(_deals(), DealFilter(funded='maybe'))


def test_unfunded_queue_oldest_first_with_days_out() -> None:
    out = unfunded_queue(_deals(), pd.Timestamp('2025-03-31'))
    assert out['deal_id'].tolist() == [2, 1]
    assert out['days_out'].tolist() == [30, 11]
