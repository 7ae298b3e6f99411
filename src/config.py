"""Heuristic thresholds for deal insights and their JSON override file."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

THRESHOLDS_FILENAME = '.deal_insights_thresholds.json'


@dataclass(frozen=True)
class InsightThresholds:
    """Weights and cut-offs used by the scoring and advisory rules."""

    base_score: float = 50.0
    customer_history_weight: float = 20.0
    bank_performance_weight: float = 15.0
    salesperson_performance_weight: float = 10.0
    stock_number_bonus: float = 5.0
    stock_number_min_length: int = 6
    # (days_exceeded, penalty), checked in order
    age_penalties: tuple[tuple[int, float], ...] = ((14, 10.0), (7, 5.0))
    high_risk_below: int = 30
    medium_risk_below: int = 60

    base_funding_probability: float = 0.8
    # (days_exceeded, multiplier), checked in order
    age_multipliers: tuple[tuple[int, float], ...] = ((21, 0.3), (14, 0.5), (7, 0.7))
    high_urgency_below: float = 0.3
    medium_urgency_below: float = 0.6

    high_value_amount: float = 50_000.0
    old_unfunded_days: int = 21
    # share expressed as numerator/denominator so the comparison stays exact
    concentration_share: tuple[int, int] = (3, 10)

    training_min_deals: int = 5
    training_rate_below: float = 0.6
    bank_review_rate_below: float = 0.7

    pending_notice_days: int = 7
    pending_high_priority_days: int = 14


DEFAULT_THRESHOLDS = InsightThresholds()

_TUPLE_FIELDS = {'age_penalties', 'age_multipliers', 'concentration_share'}


def _from_json_value(name: str, value: Any) -> Any:
    if name not in _TUPLE_FIELDS:
        return value
    if name == 'concentration_share':
        return tuple(int(x) for x in value)
    return tuple((int(days), float(factor)) for days, factor in value)


def thresholds_from_dict(payload: dict[str, Any]) -> InsightThresholds:
    """Apply a partial override mapping on top of the defaults."""
    known = {f.name for f in fields(InsightThresholds)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f'Unknown threshold keys: {unknown}')
    overrides = {k: _from_json_value(k, v) for k, v in payload.items()}
    return replace(DEFAULT_THRESHOLDS, **overrides)


def load_thresholds(path: str) -> InsightThresholds:
    """Load threshold overrides from disk. Missing file returns defaults."""
    p = Path(path)
    if not p.exists():
        return DEFAULT_THRESHOLDS
    with p.open('r', encoding='utf-8') as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError('Threshold file must contain a JSON object.')
    return thresholds_from_dict(raw)


def save_thresholds(path: str, thresholds: InsightThresholds) -> None:
    """Persist the fields that differ from the defaults."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    defaults = asdict(DEFAULT_THRESHOLDS)
    current = asdict(thresholds)
    diff = {k: v for k, v in current.items() if v != defaults[k]}
    with p.open('w', encoding='utf-8') as f:
        json.dump(diff, f, indent=2, ensure_ascii=True)
