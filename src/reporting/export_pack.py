"""Excel export pack builders for deal insights."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from io import BytesIO
from typing import Any

import numpy as np
import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from src.models.insights import InsightsReport

SHEETS = {
    'summary_metadata': 'Summary_Metadata',
    'deal_scores': 'Deal_Scores',
    'funding_predictions': 'Funding_Predictions',
    'risk_findings': 'Risk_Findings',
    'suggestions': 'Suggestions',
    'monthly_trends': 'Monthly_Trends',
}

SCORE_COLUMNS = ['deal_id', 'customer_name', 'stock_no', 'score', 'risk', 'recommendation', 'factors']
PREDICTION_COLUMNS = [
    'deal_id',
    'customer_name',
    'stock_no',
    'days_since_deal',
    'funding_probability',
    'estimated_funding_date',
    'urgency',
]
RISK_COLUMNS = ['type', 'severity', 'description', 'deal_count', 'deal_ids', 'details', 'recommendation']
SUGGESTION_COLUMNS = ['type', 'priority', 'description', 'details', 'impact']
TREND_COLUMNS = ['month', 'total_deals', 'funded_deals', 'funding_rate', 'avg_days_to_fund']


def default_export_filename(as_of: pd.Timestamp) -> str:
    """Return a deterministic export filename."""
    return f'deal_insights_{pd.Timestamp(as_of).date().isoformat()}.xlsx'


def _records_frame(records: tuple, columns: list[str]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([asdict(r) for r in records])


def build_export_context(report: InsightsReport, *, source: str = '') -> dict[str, pd.DataFrame]:
    """Build flat dataframes for each export sheet."""
    scores = _records_frame(report.deal_scoring, SCORE_COLUMNS)
    if not scores.empty:
        scores['factors'] = scores['factors'].map('; '.join)
        scores = scores[SCORE_COLUMNS]

    predictions = _records_frame(report.funding_predictions, PREDICTION_COLUMNS)
    if not predictions.empty:
        predictions = predictions[PREDICTION_COLUMNS]

    risk_rows = [
        {
            'type': r.type,
            'severity': r.severity,
            'description': r.description,
            'deal_count': len(r.deal_ids),
            'deal_ids': ', '.join(str(x) for x in r.deal_ids),
            'details': ', '.join(f'{d.bank} ({d.count})' for d in r.details),
            'recommendation': r.recommendation,
        }
        for r in report.risk_analysis
    ]
    risks = pd.DataFrame(risk_rows, columns=RISK_COLUMNS)

    suggestions = _records_frame(report.optimization_suggestions, SUGGESTION_COLUMNS)
    if not suggestions.empty:
        suggestions['details'] = suggestions['details'].map(' | '.join)
        suggestions = suggestions[SUGGESTION_COLUMNS]

    trends = _records_frame(report.trends, TREND_COLUMNS)
    if not trends.empty:
        trends = trends[TREND_COLUMNS].copy()
        # sheet formats 'rate' columns as a percentage of 1
        trends['funding_rate'] = trends['funding_rate'] / 100.0

    notes: list[str] = []
    if scores.empty:
        notes.append('No deals available for scoring.')
    if predictions.empty:
        notes.append('All deals are funded.')

    metadata = pd.DataFrame(
        [
            {'Field': 'Generated At', 'Value': datetime.now().isoformat(timespec='seconds')},
            {'Field': 'As Of', 'Value': pd.Timestamp(report.as_of).isoformat()},
            {'Field': 'Source', 'Value': str(source)},
            {'Field': 'Scored Deal Count', 'Value': int(len(scores))},
            {'Field': 'Unfunded Deal Count', 'Value': int(len(predictions))},
            {'Field': 'Risk Finding Count', 'Value': int(len(risks))},
            {'Field': 'Suggestion Count', 'Value': int(len(suggestions))},
            {'Field': 'Report Version', 'Value': '1'},
            {'Field': 'Notes', 'Value': ' | '.join(notes) if notes else ''},
        ]
    )

    return {
        'summary_metadata': metadata,
        'deal_scores': scores,
        'funding_predictions': predictions,
        'risk_findings': risks,
        'suggestions': suggestions,
        'monthly_trends': trends,
    }


WHOLE_NUMBER_HEADERS = ('count', 'deals', 'days', 'score', 'probability')


def _number_format(header: str) -> str:
    if 'rate' in header:
        return '0.0%'
    if any(token in header for token in WHOLE_NUMBER_HEADERS):
        return '#,##0'
    return '#,##0.00'


def _format_worksheet(ws) -> None:
    """Bold and freeze the header row, set number formats by header, size columns."""
    ws.freeze_panes = 'A2'
    if ws.max_row <= 0 or ws.max_column <= 0:
        return

    headers: dict[int, str] = {}
    for cell in ws[1]:
        cell.font = Font(bold=True)
        headers[cell.column] = str(cell.value or '').strip().lower()

    for row in ws.iter_rows(min_row=2):
        for cell in row:
            value = cell.value
            if isinstance(value, (pd.Timestamp, datetime)):
                cell.number_format = 'YYYY-MM-DD'
            elif isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
                cell.number_format = _number_format(headers.get(cell.column, ''))

    # widths sampled from the first 200 rows
    for column in ws.iter_cols(max_row=min(ws.max_row, 200)):
        longest = max(len('' if c.value is None else str(c.value)) for c in column)
        ws.column_dimensions[get_column_letter(column[0].column)].width = min(max(10, longest + 2), 60)


def build_export_workbook_bytes(context: dict[str, Any], *, workbook_title: str) -> bytes:
    """Serialize export context into an Excel workbook."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for key, sheet_name in SHEETS.items():
            pd.DataFrame(context.get(key, pd.DataFrame())).to_excel(writer, sheet_name=sheet_name, index=False)

        wb = writer.book
        wb.properties.title = str(workbook_title)

        for sheet_name in SHEETS.values():
            _format_worksheet(writer.sheets[sheet_name])

    return output.getvalue()
