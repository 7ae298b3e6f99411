"""Input data validation for deals and staff rosters."""

from __future__ import annotations

import pandas as pd

DEAL_REQUIRED_COLUMNS = ['deal_id']
DEAL_DATE_COLUMNS = ['deal_date', 'funded_date']
PEOPLE_REQUIRED_COLUMNS = ['id', 'name']


def _missing_columns(df: pd.DataFrame, required: list[str]) -> list[str]:
    cols = set(df.columns)
    return [col for col in required if col not in cols]


def validate_deals(df: pd.DataFrame) -> list[str]:
    """Validate normalized deals data and return non-fatal warnings."""
    missing = _missing_columns(df, DEAL_REQUIRED_COLUMNS)
    if missing:
        raise ValueError(f'Missing required deal columns: {missing}')

    warnings: list[str] = []

    if df['deal_id'].isna().any():
        raise ValueError('Deals contain nulls in deal_id.')

    if df['deal_id'].duplicated().any():
        raise ValueError('Duplicate deal_id values found.')

    for col in DEAL_DATE_COLUMNS:
        if col in df.columns and not pd.api.types.is_datetime64_any_dtype(df[col]):
            raise ValueError(f'Column {col} must be datetime64 dtype.')

    if 'amount' in df.columns and not pd.api.types.is_numeric_dtype(df['amount']):
        raise ValueError('Column amount must be numeric dtype.')

    if 'deal_date' in df.columns:
        no_date = int(df['deal_date'].isna().sum())
        if no_date:
            warnings.append(f'{no_date} deals have no deal_date and are excluded from age and trend rules.')

        if 'funded_date' in df.columns:
            early = int((df['funded_date'] < df['deal_date']).sum())
            if early:
                warnings.append(f'{early} deals have funded_date before deal_date.')

    if 'amount' in df.columns:
        negative = int((df['amount'] < 0).sum())
        if negative:
            warnings.append(f'{negative} deals have a negative amount.')

    return warnings


def validate_people(df: pd.DataFrame, label: str = 'people') -> list[str]:
    """Validate a salesperson or finance-manager roster."""
    missing = _missing_columns(df, PEOPLE_REQUIRED_COLUMNS)
    if missing:
        raise ValueError(f'Missing required {label} columns: {missing}')

    warnings: list[str] = []

    if df['id'].duplicated().any():
        raise ValueError(f'Duplicate id values found in {label}.')

    unnamed = int(df['name'].isna().sum())
    if unnamed:
        warnings.append(f'{unnamed} {label} have no name.')

    return warnings
