import pandas as pd

from src.calculations.funding import predict_funding
from src.calculations.risk import analyze_risks, bank_concentration

AS_OF = pd.Timestamp('2025-03-31')


def _concentrated_deals(counts: dict[str, int]) -> pd.DataFrame:
    banks = [bank for bank, n in counts.items() for _ in range(n)]
    return pd.DataFrame(
        {
            'deal_id': range(1, len(banks) + 1),
            'bank': banks,
            'deal_date': pd.Timestamp('2025-03-30'),
            'funded_date': pd.Timestamp('2025-03-31'),
        }
    )


def test_concentration_is_strictly_greater_than_share() -> None:
    deals = _concentrated_deals({'A': 31, 'B': 30, 'C': 20, 'D': 19})
    findings = analyze_risks(deals, AS_OF)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.type == 'bank_concentration'
    assert finding.severity == 'medium'
    assert finding.description == 'High concentration in 1 banks'
    assert [(d.bank, d.count) for d in finding.details] == [('A', 31)]
    assert finding.recommendation == 'Diversify bank relationships'


def test_concentration_denominator_includes_deals_without_bank() -> None:
    deals = pd.DataFrame({'deal_id': range(10), 'bank': ['A', 'A', 'A'] + [None] * 7})
    assert bank_concentration(deals) == []
    deals.loc[3, 'bank'] = 'A'
    assert [d.count for d in bank_concentration(deals)] == [4]


def test_high_value_deal_is_both_predicted_and_flagged() -> None:
    deals = pd.DataFrame(
        [
            {'deal_id': 1, 'deal_date': pd.Timestamp('2025-03-21'), 'funded_date': pd.NaT, 'amount': 60_000.0},
            {'deal_id': 2, 'deal_date': pd.Timestamp('2025-03-21'), 'funded_date': pd.Timestamp('2025-03-25'), 'amount': 80_000.0},
            {'deal_id': 3, 'deal_date': pd.Timestamp('2025-03-21'), 'funded_date': pd.NaT, 'amount': 50_000.0},
            {'deal_id': 4, 'deal_date': pd.Timestamp('2025-03-21'), 'funded_date': pd.NaT, 'amount': None},
        ]
    )
    risks = {f.type: f for f in analyze_risks(deals, AS_OF)}
    assert risks['high_value_unfunded'].deal_ids == (1,)
    assert risks['high_value_unfunded'].severity == 'high'
    assert risks['high_value_unfunded'].description == '1 high-value deals pending funding'
    assert 1 in {p.deal_id for p in predict_funding(deals, AS_OF)}


def test_old_unfunded_requires_deal_date_and_age_over_21_days() -> None:
    deals = pd.DataFrame(
        {
            'deal_id': [1, 2, 3, 4],
            'deal_date': pd.to_datetime(['2025-03-09', '2025-03-10', None, '2025-01-01']),
            'funded_date': pd.to_datetime([None, None, None, '2025-01-20']),
        }
    )
    [finding] = analyze_risks(deals, AS_OF)
    assert finding.type == 'old_unfunded'
    assert finding.deal_ids == (1,)
    assert finding.description == '1 deals pending for over 21 days'


def test_rules_fire_independently_in_fixed_order() -> None:
    deals = pd.DataFrame(
        {
            'deal_id': [1, 2, 3],
            'bank': ['Chase', 'Chase', 'Ally'],
            'deal_date': pd.to_datetime(['2025-02-01', '2025-03-30', '2025-03-30']),
            'funded_date': pd.to_datetime([None, None, '2025-03-31']),
            'amount': [75_000.0, 10_000.0, 10_000.0],
        }
    )
    findings = analyze_risks(deals, AS_OF)
    assert [f.type for f in findings] == ['high_value_unfunded', 'old_unfunded', 'bank_concentration']
    assert [d.bank for d in findings[2].details] == ['Chase', 'Ally']


def test_empty_input_returns_no_findings() -> None:
    assert analyze_risks(pd.DataFrame(), AS_OF) == []
