"""Audit trail reconstructed from deal timestamps.

The trail is an approximation: each entry only records that a creation,
update or funding timestamp exists on the deal. It carries no field-level
history, so there is no earlier state to restore and no rollback.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from src.data.loader import normalize_deals_frame

SYSTEM_USER = 'System'


@dataclass(frozen=True)
class AuditEntry:
    id: str
    deal_id: int | str
    action: str
    field: str
    timestamp: pd.Timestamp
    user: str
    description: str


def _who(value: str | None) -> str:
    return value or SYSTEM_USER


def build_audit_trail(deals_df: pd.DataFrame) -> list[AuditEntry]:
    """Created/updated/funded entries for every deal, newest first."""
    deals = normalize_deals_frame(deals_df)
    entries: list[AuditEntry] = []
    for _, row in deals.iterrows():
        deal_id = row['deal_id']
        customer = row['customer_name']
        stock = row['stock_no']
        created = row['created_at']
        updated = row['updated_at']
        funded = row['funded_date']

        if not pd.isna(created):
            entries.append(
                AuditEntry(
                    id=f'create-{deal_id}',
                    deal_id=deal_id,
                    action='created',
                    field='deal',
                    timestamp=created,
                    user=_who(row['created_by']),
                    description=f'Deal created for {customer} ({stock})',
                )
            )
        if not pd.isna(updated) and (pd.isna(created) or updated != created):
            entries.append(
                AuditEntry(
                    id=f'update-{deal_id}',
                    deal_id=deal_id,
                    action='updated',
                    field='deal',
                    timestamp=updated,
                    user=_who(row['updated_by']),
                    description=f'Deal updated for {customer}',
                )
            )
        if not pd.isna(funded):
            entries.append(
                AuditEntry(
                    id=f'funded-{deal_id}',
                    deal_id=deal_id,
                    action='funded',
                    field='funded_date',
                    timestamp=funded,
                    user=_who(row['funded_by']),
                    description=f'Deal funded for {customer} ({stock})',
                )
            )

    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


def filter_audit_trail(
    entries: list[AuditEntry],
    *,
    action: str = 'all',
    deal_id: str | None = None,
    user: str = 'all',
    date_from: pd.Timestamp | None = None,
    date_to: pd.Timestamp | None = None,
) -> list[AuditEntry]:
    """Filter entries; ``deal_id`` matches as a substring of the id text."""
    out = list(entries)
    if action != 'all':
        out = [e for e in out if e.action == action]
    if deal_id:
        out = [e for e in out if str(deal_id) in str(e.deal_id)]
    if user != 'all':
        out = [e for e in out if e.user == user]
    if date_from is not None:
        out = [e for e in out if e.timestamp >= pd.Timestamp(date_from)]
    if date_to is not None:
        out = [e for e in out if e.timestamp <= pd.Timestamp(date_to)]
    return out


def audit_users(entries: list[AuditEntry]) -> list[str]:
    return sorted({e.user for e in entries})


def audit_actions(entries: list[AuditEntry]) -> list[str]:
    return sorted({e.action for e in entries})
