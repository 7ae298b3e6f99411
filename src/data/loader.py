"""Excel and record loaders with schema normalization."""

from __future__ import annotations

import re
from dataclasses import asdict
from typing import Any, Iterable

import pandas as pd

from src.data.validator import validate_deals, validate_people
from src.models.deal import Deal, FinanceManager, Salesperson
from src.utils.date_utils import coerce_datetime
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEAL_SHEET_PRIORITY = ['Data Master', 'DataMaster', 'DATAMASTER', 'Master', 'All']

DEAL_COLUMNS = [
    'deal_id',
    'customer_name',
    'stock_no',
    'bank',
    'salesperson_id',
    'finance_manager_id',
    'deal_date',
    'funded_date',
    'amount',
    'deal_type',
    'funding_notes',
    'created_at',
    'updated_at',
    'created_by',
    'updated_by',
    'funded_by',
]
DATE_COLUMNS = ['deal_date', 'funded_date', 'created_at', 'updated_at']
TEXT_COLUMNS = ['customer_name', 'stock_no', 'bank', 'deal_type', 'funding_notes', 'created_by', 'updated_by', 'funded_by']
PEOPLE_COLUMNS = ['id', 'name']

# Workbook header aliases, matched after strip().lower().
DEAL_COLUMN_ALIASES = {
    'deal_id': ['deal id', 'deal_id', 'id'],
    'deal_date': ['date', 'deal date', 'delivered', 'delivered date'],
    'stock_no': ['stock #', 'stock', 'stock no'],
    'customer_name': ['name', 'client', 'customer', 'customer name'],
    'salesperson_name': ['salesperson', 'advisor', 'client advisor', 'sales person'],
    'finance_manager_name': ['finance manager', 'f&i manager', 'fi manager'],
    'bank': ['bank', 'lender'],
    'funded_date': ['funded', 'funded date'],
    'amount': ['amount', 'deal amount', 'amount financed'],
    'deal_type': ['type', 'vehicle type'],
    'funding_notes': ['funding notes'],
}

_EXCEL_EPOCH = '1899-12-30'
_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')
_RECORD_KEY_MAP = {'id': 'deal_id'}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [str(c).strip().lower() for c in out.columns]
    return out


def _is_missing(value: Any) -> bool:
    return value is None or (not isinstance(value, (list, tuple, dict)) and bool(pd.isna(value)))


def _clean_text(value: Any) -> str | None:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return None if text in ('', 'nan', 'None') else text


def _object_series(values: list, index: pd.Index) -> pd.Series:
    return pd.Series(values, index=index, dtype=object)


def _pick_deal_sheet(sheet_names: list[str]) -> str:
    for name in DEAL_SHEET_PRIORITY:
        if name in sheet_names:
            return name
    return sheet_names[0]


def _first_alias_column(df: pd.DataFrame, aliases: list[str]) -> pd.Series:
    """Coalesce every alias column present, first non-empty value wins."""
    out = pd.Series(pd.NA, index=df.index, dtype=object)
    for alias in aliases:
        if alias not in df.columns:
            continue
        col = df[alias].astype(object)
        blank = col.isna() | (col.astype(str).str.strip() == '')
        out = out.where(out.notna(), col.where(~blank))
    return out


def to_number(values: pd.Series) -> pd.Series:
    """Coerce numbers and currency strings such as '$45,000' to floats."""
    if pd.api.types.is_numeric_dtype(values):
        return values.astype(float)
    cleaned = values.astype(object).map(
        lambda v: re.sub(r'[,$]', '', v).strip() if isinstance(v, str) else v
    )
    cleaned = cleaned.replace('', pd.NA)
    return pd.to_numeric(cleaned, errors='coerce').astype(float)


def to_dates(values: pd.Series) -> pd.Series:
    """Parse dates, accepting Excel serial day numbers. Bad cells become NaT."""
    if pd.api.types.is_datetime64_any_dtype(values):
        return coerce_datetime(values)
    if pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(values):
        return pd.to_datetime(values, unit='D', origin=_EXCEL_EPOCH, errors='coerce')
    obj = values.astype(object)
    is_serial = obj.map(lambda v: isinstance(v, (int, float)) and not isinstance(v, bool))
    parsed = coerce_datetime(obj.where(~is_serial))
    if is_serial.any():
        serials = pd.to_numeric(obj.where(is_serial), errors='coerce')
        from_serial = pd.to_datetime(serials, unit='D', origin=_EXCEL_EPOCH, errors='coerce')
        parsed = parsed.where(~is_serial, from_serial)
    return parsed


def normalize_deals_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with every canonical deal column present and typed.

    Missing optional columns are added empty, dates are parsed with bad
    values mapped to NaT, and blank text becomes missing.
    """
    out = df.copy()
    for col in DEAL_COLUMNS:
        if col not in out.columns:
            out[col] = pd.NA
    for col in DATE_COLUMNS:
        out[col] = to_dates(out[col])
    out['amount'] = to_number(out['amount'])
    for col in TEXT_COLUMNS:
        out[col] = _object_series([_clean_text(v) for v in out[col]], out.index)
    for col in ['deal_id', 'salesperson_id', 'finance_manager_id']:
        out[col] = _object_series([None if _is_missing(v) else v for v in out[col]], out.index)
    return out.reset_index(drop=True)


def _people_from_names(names: pd.Series) -> tuple[pd.DataFrame, pd.Series]:
    """Assign sequential ids to distinct names in first-appearance order."""
    cleaned = names.astype(object).map(lambda v: str(v).strip() if pd.notna(v) else None)
    distinct = [n for n in dict.fromkeys(cleaned.dropna().tolist()) if n]
    ids = {name: i + 1 for i, name in enumerate(distinct)}
    people = pd.DataFrame({'id': list(ids.values()), 'name': list(ids.keys())}, columns=PEOPLE_COLUMNS)
    refs = _object_series([ids.get(n) if n else None for n in cleaned], names.index)
    return people, refs


def load_input_workbook(path: str) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """Load a dealership deal log and derive the salesperson/F&I rosters.

    Returns ``(deals, salespeople, finance_managers)``.
    """
    sheets = pd.ExcelFile(path).sheet_names
    sheet = _pick_deal_sheet(sheets)
    LOGGER.info('Reading deals from sheet %s of %s', sheet, path)
    raw = _normalize_columns(pd.read_excel(path, sheet_name=sheet))

    picked = pd.DataFrame(
        {canonical: _first_alias_column(raw, aliases) for canonical, aliases in DEAL_COLUMN_ALIASES.items()},
        index=raw.index,
    )

    empty_rows = picked['deal_date'].isna() & picked['stock_no'].isna() & picked['customer_name'].isna()
    if empty_rows.any():
        LOGGER.info('%s empty rows skipped.', int(empty_rows.sum()))
        picked = picked.loc[~empty_rows].reset_index(drop=True)

    if picked['deal_id'].isna().all():
        picked['deal_id'] = range(1, len(picked) + 1)

    salespeople, sp_refs = _people_from_names(picked.pop('salesperson_name'))
    finance_managers, fm_refs = _people_from_names(picked.pop('finance_manager_name'))
    picked['salesperson_id'] = sp_refs
    picked['finance_manager_id'] = fm_refs

    raw_dates = picked[['deal_date', 'funded_date']].copy()
    deals = normalize_deals_frame(picked)
    for col in ['deal_date', 'funded_date']:
        bad = int((raw_dates[col].notna().to_numpy() & deals[col].isna().to_numpy()).sum())
        if bad:
            LOGGER.warning('%s %s values could not be parsed and were treated as missing.', bad, col)

    warnings = validate_deals(deals) + validate_people(salespeople, 'salespeople') + validate_people(
        finance_managers, 'finance managers'
    )
    for warning in warnings:
        LOGGER.warning(warning)

    return deals, salespeople, finance_managers


def _snake_key(key: str) -> str:
    key = _RECORD_KEY_MAP.get(key, key)
    return _CAMEL_RE.sub('_', key).lower()


def deals_from_records(records: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """Build a deals frame from API-style dicts (camelCase or snake_case keys)."""
    rows = [{_snake_key(str(k)): v for k, v in rec.items()} for rec in records]
    df = pd.DataFrame(rows)
    df = df[[c for c in df.columns if c in DEAL_COLUMNS]] if not df.empty else df
    return normalize_deals_frame(df)


def deals_to_frame(deals: Iterable[Deal]) -> pd.DataFrame:
    """Build a deals frame from Deal records, preserving order."""
    rows = [asdict(d) for d in deals]
    return normalize_deals_frame(pd.DataFrame(rows, columns=DEAL_COLUMNS))


def people_to_frame(people: Iterable[Salesperson | FinanceManager]) -> pd.DataFrame:
    """Build an ``id``/``name`` frame from staff records."""
    return pd.DataFrame([{'id': p.id, 'name': p.name} for p in people], columns=PEOPLE_COLUMNS)
