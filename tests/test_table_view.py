from datetime import date, timedelta

import pytest

from budget_analytics.errors import ValidationError
from budget_analytics.models import BudgetEntry
from budget_analytics.table_view import (
    CSV_HEADERS,
    TableQuery,
    export_csv,
    export_filename,
    query,
    read_csv_export,
    write_csv_export,
)


def _build_entries(count, start=date(2025, 1, 1)):
    return [
        BudgetEntry(f'e{i}', start + timedelta(days=i), 'depenses_variables', 'alimentation', 10 + i)
        for i in range(count)
    ]


@pytest.mark.parametrize('count', [0, 5, 20, 21, 45])
def test_second_page_size(count):
    page = query(_build_entries(count), TableQuery(page=2, page_size=20))
    assert len(page.items) == min(20, max(0, page.total_items - 20))
    assert page.total_items == count


def test_total_pages_and_page_past_end():
    entries = _build_entries(45)
    page = query(entries, TableQuery(page=3, page_size=20))
    assert page.total_pages == 3
    assert len(page.items) == 5
    assert query(entries, TableQuery(page=9)).items == []
    assert query([], TableQuery()).total_pages == 0


def test_default_sort_is_date_descending():
    entries = _build_entries(3)
    page = query(entries)
    assert [e.id for e in page.items] == ['e2', 'e1', 'e0']


def test_sort_is_stable_for_equal_keys():
    same_day = date(2025, 6, 1)
    entries = [
        BudgetEntry('a', same_day, 'revenus', 'salaire', 100),
        BudgetEntry('b', same_day, 'revenus', 'salaire', 50),
        BudgetEntry('c', same_day, 'revenus', 'salaire', 100),
    ]
    assert [e.id for e in query(entries, TableQuery(sort_order='asc')).items] == ['a', 'b', 'c']
    assert [e.id for e in query(entries, TableQuery(sort_order='desc')).items] == ['a', 'b', 'c']
    by_amount = query(entries, TableQuery(sort_by='amount', sort_order='desc')).items
    assert [e.id for e in by_amount] == ['a', 'c', 'b']


def test_year_filter_applies_before_type_filter():
    entries = [
        BudgetEntry('x', date(2024, 3, 1), 'revenus', 'salaire', 1),
        BudgetEntry('y', date(2025, 3, 1), 'revenus', 'salaire', 2),
        BudgetEntry('z', date(2025, 4, 1), 'epargne', 'pilier3', 3),
    ]
    page = query(entries, TableQuery(year=2025, filter_type='revenus'))
    assert [e.id for e in page.items] == ['y']
    assert page.total_items == 1


@pytest.mark.parametrize('kwargs', [
    {'sort_by': 'category'},
    {'sort_order': 'up'},
    {'filter_type': 'salary'},
    {'page': 0},
    {'page_size': 0},
])
def test_invalid_query_parameters(kwargs):
    with pytest.raises(ValidationError):
        TableQuery(**kwargs)


def test_export_csv_layout():
    entries = [
        BudgetEntry('1', date(2025, 1, 1), 'depenses_fixes', 'loyer', 1500),
        BudgetEntry('2', date(2025, 1, 8), 'depenses_variables', 'restaurants', 42.5, 'Dîner "chez Léa"'),
    ]
    lines = export_csv(entries).split('\n')
    assert lines[0] == 'Date,Type,Catégorie,Montant,Description'
    assert lines[1] == '2025-01-01,depenses_fixes,Loyer,1500,"Loyer"'
    assert lines[2] == '2025-01-08,depenses_variables,Restaurants,42.5,"Dîner ""chez Léa"""'


def test_export_csv_round_trip():
    entries = [
        BudgetEntry('1', date(2025, 1, 5), 'revenus', 'salaire', 8500, 'Janvier'),
        BudgetEntry('2', date(2025, 2, 3), 'depenses_variables', 'bars_sorties', 37.9, 'Apéro, "le" vendredi'),
        BudgetEntry('3', date(2025, 2, 4), 'epargne', 'pilier3', 587.33),
    ]
    frame = read_csv_export(export_csv(entries))
    assert list(frame.columns) == CSV_HEADERS
    recovered = list(frame.itertuples(index=False, name=None))
    assert recovered == [
        ('2025-01-05', 'revenus', 'Salaire', '8500', 'Janvier'),
        ('2025-02-03', 'depenses_variables', 'Bars & Sorties', '37.9', 'Apéro, "le" vendredi'),
        ('2025-02-04', 'epargne', 'Troisième pilier', '587.33', 'Troisième pilier'),
    ]


def test_export_csv_keeps_full_precision_and_label_fallback():
    entries = [
        BudgetEntry.create(date(2025, 1, 1), 'depenses_fixes', 'loyer', 1500),
        BudgetEntry.create(date(2025, 1, 2), 'depenses_variables', 'alimentation', 12.345, 'Marché'),
        BudgetEntry.create(date(2025, 1, 3), 'investissements', 'crypto', 0.004, 'Satoshis'),
    ]
    frame = read_csv_export(export_csv(entries))
    assert [float(value) for value in frame['Montant']] == [1500.0, 12.345, 0.004]
    assert list(frame['Montant'])[0] == '1500'
    assert list(frame['Description']) == ['Loyer', 'Marché', 'Satoshis']


def test_write_csv_export(tmp_path):
    path = write_csv_export(_build_entries(2), tmp_path / 'exports', today=date(2025, 7, 14))
    assert path.name == export_filename(date(2025, 7, 14)) == 'budget_export_2025-07-14.csv'
    text = path.read_text(encoding='utf-8')
    assert text.startswith('Date,Type,Catégorie')
    assert len(text.split('\n')) == 3
