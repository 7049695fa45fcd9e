"""Monthly, yearly and per-category rollups of the ledger.

All functions are pure: they take a ledger snapshot plus parameters and
return a new DataFrame / dict without touching their inputs.
"""

from __future__ import annotations

from datetime import date
from functools import reduce
from operator import add
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .categories import (
    BALANCE,
    BREAKDOWN,
    ENTRY_TYPES,
    category_color,
    category_label,
    sign_for,
    signed_types,
)
from .models import BudgetEntry, ledger_frame

TYPE_COLUMNS: List[str] = [etype.value for etype in ENTRY_TYPES]
BREAKDOWN_COLUMNS = ['name', 'value', 'type', 'category', 'fill']
MONTH_SHORT_NAMES = [
    'janv.', 'févr.', 'mars', 'avr.', 'mai', 'juin',
    'juil.', 'août', 'sept.', 'oct.', 'nov.', 'déc.',
]


def _type_matrix(frame: pd.DataFrame, key: str, index: Sequence[int]) -> pd.DataFrame:
    """Sum ``amount`` per ``(key, type)`` and lay it out with one column per type."""
    if frame.empty:
        matrix = pd.DataFrame(0.0, index=list(index), columns=TYPE_COLUMNS)
    else:
        matrix = (
            frame.groupby([key, 'type'])['amount']
            .sum()
            .unstack('type')
            .reindex(index=list(index), columns=TYPE_COLUMNS)
            .fillna(0.0)
            .astype(float)
        )
    matrix.index.name = key
    matrix.columns.name = None
    return matrix


def _add_balance(table: pd.DataFrame) -> pd.DataFrame:
    """Append ``solde``: balance-positive types minus balance-negative types."""
    inflow = [etype.value for etype in signed_types(BALANCE, 1)]
    outflow = [etype.value for etype in signed_types(BALANCE, -1)]
    table['solde'] = (
        reduce(add, (table[col] for col in inflow))
        - reduce(add, (table[col] for col in outflow))
    )
    return table


def monthly_rollup(entries: Iterable[BudgetEntry], year: int) -> pd.DataFrame:
    """Per-type totals and ``solde`` for each calendar month of ``year``.

    Always returns 12 rows indexed by month number (1 = January), in calendar
    order, whether or not a month has data.
    """
    frame = ledger_frame(entries)
    frame = frame[frame['year'] == int(year)]
    table = _type_matrix(frame, 'month', range(1, 13))
    table = _add_balance(table)
    table.insert(0, 'name', MONTH_SHORT_NAMES)
    return table


def yearly_rollup(entries: Iterable[BudgetEntry], years: Iterable[int]) -> pd.DataFrame:
    """One row per requested year (in request order) with the same columns as the monthly rollup."""
    requested = [int(y) for y in years]
    frame = ledger_frame(entries)
    frame = frame[frame['year'].isin(requested)]
    table = _type_matrix(frame, 'year', requested)
    return _add_balance(table)


def category_breakdown(entries: Iterable[BudgetEntry], year: int) -> pd.DataFrame:
    """Signed totals per ``(type, category)`` observed in ``year``.

    Expense categories carry negative values, every other type positive ones.
    Zero rows are dropped; rows are sorted by ``value`` descending and each row
    gets a palette colour by its position after sorting.
    """
    frame = ledger_frame(entries)
    frame = frame[frame['year'] == int(year)].copy()
    if frame.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    signs = {col: sign_for(col, BREAKDOWN) for col in TYPE_COLUMNS}
    frame['value'] = frame['amount'].abs() * frame['type'].map(signs)
    grouped = (
        frame.groupby(['type', 'category'], sort=False)['value']
        .sum()
        .reset_index()
    )
    grouped = grouped[grouped['value'] != 0]
    grouped = grouped.sort_values('value', ascending=False, kind='stable').reset_index(drop=True)
    grouped['name'] = [
        category_label(etype, category)
        for etype, category in zip(grouped['type'], grouped['category'])
    ]
    grouped['fill'] = [category_color(i) for i in range(len(grouped))]
    return grouped[BREAKDOWN_COLUMNS]


def top_expenses(entries: Iterable[BudgetEntry], year: int, limit: Optional[int] = None) -> pd.DataFrame:
    """Expense rows of the breakdown, largest magnitude first."""
    breakdown = category_breakdown(entries, year)
    if breakdown.empty:
        return breakdown
    expenses = breakdown[breakdown['value'] < 0]
    expenses = expenses.sort_values('value', key=lambda s: s.abs(), ascending=False, kind='stable')
    if limit is not None:
        expenses = expenses.head(limit)
    return expenses.reset_index(drop=True)


def type_totals(entries: Iterable[BudgetEntry], year: int, month: Optional[int] = None) -> Dict[str, float]:
    """Dashboard summary: total magnitude per type for a year or one of its months."""
    frame = ledger_frame(entries)
    mask = frame['year'] == int(year)
    if month is not None:
        mask &= frame['month'] == int(month)
    sums = frame[mask].groupby('type')['amount'].sum()
    return {col: float(sums.get(col, 0.0)) for col in TYPE_COLUMNS}


def get_available_years(entries: Iterable[BudgetEntry]) -> List[int]:
    """Distinct years present in the ledger, most recent first (may be empty)."""
    frame = ledger_frame(entries)
    return sorted({int(y) for y in frame['year'].unique()}, reverse=True)


def available_years(entries: Iterable[BudgetEntry], default: Optional[int] = None) -> List[int]:
    """Like :func:`get_available_years` but never empty: falls back to ``default`` or this year."""
    years = get_available_years(entries)
    if years:
        return years
    return [default if default is not None else date.today().year]
