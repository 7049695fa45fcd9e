import logging
from datetime import date

from budget_analytics import services
from budget_analytics.aggregation import monthly_rollup
from budget_analytics.models import BudgetEntry, BudgetLimitConfig, RecurringExpenseRule
from budget_analytics.persistence import InMemoryBudgetStore


def _build_store():
    store = InMemoryBudgetStore()
    store.save_entry('alice', BudgetEntry('1', date(2025, 3, 2), 'revenus', 'salaire', 8500))
    store.save_recurring_rules('alice', [
        RecurringExpenseRule('rent', 1500, 'loyer', 1),
        RecurringExpenseRule('phone', 49.9, 'telephonie', 28),
    ])
    return store


def test_unavailable_store_degrades_to_empty_data(caplog):
    store = _build_store()
    store.available = False
    with caplog.at_level(logging.WARNING, logger='budget_analytics'):
        ledger = services.load_ledger(store, 'alice')
    assert ledger == []
    assert services.load_rules(store, 'alice') == []
    assert services.load_limits(store, 'alice') == BudgetLimitConfig.default()
    assert 'unavailable' in caplog.text
    # Aggregates over the degraded ledger still work.
    assert monthly_rollup(ledger, 2025)['solde'].sum() == 0


def test_apply_recurring_expenses_saves_new_entries():
    store = _build_store()
    created = services.apply_recurring_expenses(store, 'alice', date(2025, 3, 10))
    assert [e.id for e in created] == ['recurring_rent_2025_03', 'recurring_phone_2025_03']
    assert len(store.load_entries('alice')) == 3

    again = services.apply_recurring_expenses(store, 'alice', date(2025, 3, 11))
    assert again == []
    assert len(store.load_entries('alice')) == 3


def test_apply_recurring_expenses_skips_existing_ids():
    store = _build_store()
    # A manual (non-recurring) entry that happens to share a materialized id.
    store.save_entry('alice', BudgetEntry('recurring_rent_2025_03', date(2025, 2, 28), 'depenses_fixes', 'loyer', 1500))
    created = services.apply_recurring_expenses(store, 'alice', date(2025, 3, 10))
    assert [e.id for e in created] == ['recurring_phone_2025_03']


def test_apply_recurring_without_rules():
    store = InMemoryBudgetStore()
    assert services.apply_recurring_expenses(store, 'bob', date(2025, 3, 10)) == []


def test_export_ledger(tmp_path):
    store = _build_store()
    path = services.export_ledger(store, 'alice', tmp_path, today=date(2025, 3, 31))
    assert path == tmp_path / 'budget_export_2025-03-31.csv'
    assert path.read_text(encoding='utf-8').splitlines()[1] == '2025-03-02,revenus,Salaire,8500,"Salaire"'
