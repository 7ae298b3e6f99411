import logging

import pandas as pd
import pytest

from src.data.loader import deals_from_records, deals_to_frame, load_input_workbook, people_to_frame
from src.data.validator import validate_deals, validate_people
from src.models.deal import Deal, Salesperson


def _write_workbook(path) -> None:
    notes = pd.DataFrame({'Info': ['exported from DMS']})
    deals = pd.DataFrame(
        {
            'Date': [pd.Timestamp('2025-03-01'), pd.Timestamp('2025-03-02'), None, pd.Timestamp('2025-03-04')],
            'Stock #': ['A12345', 'B22', None, 'C33333'],
            'Customer': ['Ann Lee', 'Bo Chen', None, 'Ann Lee'],
            'Salesperson': ['Alice', 'Bob', None, 'Alice'],
            'Finance Manager': ['Frank', None, None, 'Frank'],
            'Lender': ['Chase', 'Ally', None, ' '],
            'Funded': [pd.Timestamp('2025-03-05'), 'pending', None, None],
            'Amount': ['$45,000', 61000, None, '12,500.50'],
            'Notes': [None, None, 'blank line', None],
        }
    )
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        notes.to_excel(writer, sheet_name='Notes', index=False)
        deals.to_excel(writer, sheet_name='Data Master', index=False)


def test_loader_normalizes_aliases_and_derives_rosters(tmp_path) -> None:
    path = tmp_path / 'deal_log.xlsx'
    _write_workbook(path)

    deals, salespeople, finance_managers = load_input_workbook(str(path))

    assert deals['deal_id'].tolist() == [1, 2, 3]
    assert deals['customer_name'].tolist() == ['Ann Lee', 'Bo Chen', 'Ann Lee']
    assert deals['stock_no'].tolist() == ['A12345', 'B22', 'C33333']
    assert deals['bank'].tolist() == ['Chase', 'Ally', None]
    assert deals['amount'].tolist() == [45_000.0, 61_000.0, 12_500.5]
    assert salespeople.to_dict('records') == [{'id': 1, 'name': 'Alice'}, {'id': 2, 'name': 'Bob'}]
    assert finance_managers.to_dict('records') == [{'id': 1, 'name': 'Frank'}]
    assert deals['salesperson_id'].tolist() == [1, 2, 1]
    assert deals['finance_manager_id'].tolist() == [1, None, 1]
    assert pd.api.types.is_datetime64_any_dtype(deals['deal_date'])
    assert deals.loc[0, 'funded_date'] == pd.Timestamp('2025-03-05')
    assert pd.isna(deals.loc[1, 'funded_date'])


def test_loader_warns_on_unparseable_dates(tmp_path, caplog) -> None:
    path = tmp_path / 'deal_log.xlsx'
    _write_workbook(path)
    with caplog.at_level(logging.WARNING, logger='src.data.loader'):
        load_input_workbook(str(path))
    assert '1 funded_date values could not be parsed' in caplog.text


def test_records_accept_camel_case_keys() -> None:
    deals = deals_from_records(
        [
            {'id': 10, 'customerName': 'Ann Lee', 'stockNo': 'A1', 'dealDate': '2025-03-01', 'fundedDate': None},
            {'id': 11, 'customerName': 'Bo Chen', 'dealDate': 'garbage', 'salespersonName': 'Alice'},
        ]
    )
    assert deals['deal_id'].tolist() == [10, 11]
    assert deals.loc[0, 'deal_date'] == pd.Timestamp('2025-03-01')
    assert pd.isna(deals.loc[1, 'deal_date'])
    assert deals['funded_date'].isna().all()


def test_deal_records_round_into_frame() -> None:
    frame = deals_to_frame(
        [
            Deal(deal_id=1, bank='Chase', deal_date=pd.Timestamp('2025-03-01')),
            Deal(deal_id=2, funded_date=pd.Timestamp('2025-03-03')),
        ]
    )
    assert frame['bank'].tolist() == ['Chase', None]
    assert frame['funded_date'].notna().tolist() == [False, True]
    assert people_to_frame([Salesperson(1, 'Alice')]).to_dict('records') == [{'id': 1, 'name': 'Alice'}]


def test_deal_is_funded_property() -> None:
    assert Deal(deal_id=1, funded_date=pd.Timestamp('2025-03-03')).is_funded
    assert not Deal(deal_id=2).is_funded
    assert not Deal(deal_id=3, funded_date=pd.NaT).is_funded


def test_validator_rejects_duplicate_ids() -> None:
    df = pd.DataFrame({'deal_id': [1, 1], 'deal_date': pd.to_datetime(['2025-01-01', '2025-01-02'])})
    with pytest.raises(ValueError, match='Duplicate deal_id'):
        validate_deals(df)


def test_validator_rejects_missing_id_column() -> None:
    with pytest.raises(ValueError, match='Missing required deal columns'):
        validate_deals(pd.DataFrame({'bank': ['Chase']}))


def test_validator_rejects_unparsed_dates() -> None:
    df = pd.DataFrame({'deal_id': [1], 'deal_date': ['2025-01-01']})
    with pytest.raises(ValueError, match='datetime64'):
        validate_deals(df)


def test_validator_returns_quality_warnings() -> None:
    df = pd.DataFrame(
        {
            'deal_id': [1, 2, 3],
            'deal_date': pd.to_datetime(['2025-01-10', None, '2025-01-10']),
            'funded_date': pd.to_datetime(['2025-01-05', None, None]),
            'amount': [100.0, -5.0, None],
        }
    )
    warnings = validate_deals(df)
    assert '1 deals have no deal_date and are excluded from age and trend rules.' in warnings
    assert '1 deals have funded_date before deal_date.' in warnings
    assert '1 deals have a negative amount.' in warnings


def test_validate_people_rejects_duplicate_ids() -> None:
    with pytest.raises(ValueError, match='Duplicate id values found in salespeople'):
        validate_people(pd.DataFrame({'id': [1, 1], 'name': ['A', 'B']}), 'salespeople')
