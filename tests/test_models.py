from datetime import date, datetime

import pandas as pd
import pytest

from budget_analytics.categories import EntryType
from budget_analytics.errors import ConfigurationError, ValidationError
from budget_analytics.models import (
    FRAME_COLUMNS,
    BudgetEntry,
    BudgetLimitConfig,
    Period,
    RecurringExpenseRule,
    ledger_frame,
    parse_amount,
    parse_date,
    validate_rule,
)


def test_from_record_parses_loose_values():
    entry = BudgetEntry.from_record({
        'id': 'abc',
        'date': '2025-01-05',
        'type': 'revenus',
        'category': 'salaire',
        'amount': '8500',
        'isRecurring': False,
    })
    assert entry.date == date(2025, 1, 5)
    assert entry.type is EntryType.REVENUS
    assert entry.amount == 8500.0
    assert entry.description is None
    assert entry.display_description == 'Salaire'


def test_from_record_missing_field_raises():
    with pytest.raises(ValidationError, match='amount'):
        BudgetEntry.from_record({'id': 'x', 'date': '2025-01-01', 'type': 'revenus', 'category': 'salaire'})


@pytest.mark.parametrize('amount', ['abc', -5, float('nan'), True, None])
def test_malformed_amounts_are_rejected(amount):
    with pytest.raises(ValidationError):
        BudgetEntry('x', date(2025, 1, 1), 'revenus', 'salaire', amount)


def test_category_must_match_type():
    with pytest.raises(ValidationError):
        BudgetEntry.create('2025-01-01', 'epargne', 'loyer', 100)


def test_parse_helpers():
    assert parse_date(datetime(2025, 3, 4, 10, 30)) == date(2025, 3, 4)
    assert parse_date(pd.Timestamp('2025-03-04')) == date(2025, 3, 4)
    assert parse_amount("1'250.50") == 1250.5
    with pytest.raises(ValidationError):
        parse_date('04/03/2025')


def test_create_assigns_unique_ids():
    first = BudgetEntry.create('2025-01-01', 'revenus', 'salaire', 1)
    second = BudgetEntry.create('2025-01-01', 'revenus', 'salaire', 1)
    assert first.id and second.id and first.id != second.id


def test_to_record_round_trips():
    entry = BudgetEntry('e1', date(2025, 2, 3), 'depenses_variables', 'restaurants', 42.5, 'Pizza', False)
    assert BudgetEntry.from_record(entry.to_record()) == entry


def test_recurring_rule_validation():
    rule = RecurringExpenseRule.from_record({'id': 'r1', 'amount': '1500', 'category': 'loyer', 'dayOfMonth': '5'})
    assert rule.amount == 1500.0
    assert rule.day_of_month == 5
    with pytest.raises(ValidationError):
        validate_rule(RecurringExpenseRule('r2', 10, 'alimentation'))
    with pytest.raises(ValidationError):
        validate_rule(RecurringExpenseRule('r3', 10, 'loyer', day_of_month=32))


def test_limit_config_defaults_and_merge():
    config = BudgetLimitConfig.default()
    assert config.categories['alimentation'] == 0.0
    assert config.long_term == {'epargne': 0.0, 'investissements': 0.0}

    merged = BudgetLimitConfig.from_dict({'categories': {'restaurants': '200'}, 'longTerm': {'epargne': 10000}})
    assert merged.categories['restaurants'] == 200.0
    assert merged.categories['alimentation'] == 0.0
    assert merged.long_term['epargne'] == 10000.0
    assert BudgetLimitConfig.from_dict(merged.to_dict()) == merged


@pytest.mark.parametrize('payload', [
    {'categories': {'restaurants': -1}},
    {'epargne': {'pilier3': 'lots'}},
    {'investissements': [1, 2]},
])
def test_invalid_limits_raise_configuration_error(payload):
    with pytest.raises(ConfigurationError):
        BudgetLimitConfig.from_dict(payload)


def test_period_validation_and_labels():
    assert Period(2025, month=1).label() == 'janvier 2025'
    assert Period(2025, quarter='Q1').label() == 'Q1 (Jan-Mar) 2025'
    assert Period(2025).label() == 'Année 2025'
    assert Period(2025, quarter=4).months() == (10, 11, 12)
    assert len(Period(2025).months()) == 12
    with pytest.raises(ValidationError):
        Period(2025, month=1, quarter=1)
    with pytest.raises(ValidationError):
        Period(2025, month=13)
    with pytest.raises(ValidationError):
        Period(2025, quarter='Q5')


def test_ledger_frame_keeps_input_order_and_handles_empty():
    entries = [
        BudgetEntry('b', date(2025, 2, 1), 'revenus', 'salaire', 10),
        BudgetEntry('a', date(2024, 1, 1), 'revenus', 'salaire', 20),
    ]
    frame = ledger_frame(entries)
    assert list(frame['id']) == ['b', 'a']
    assert list(frame['year']) == [2025, 2024]

    empty = ledger_frame([])
    assert empty.empty
    assert list(empty.columns) == FRAME_COLUMNS
