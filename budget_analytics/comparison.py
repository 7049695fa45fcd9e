"""Period-to-period comparison of the ledger.

A period is a year, optionally narrowed to a month or a quarter.  Both
periods are resolved against the same ledger snapshot and totalled either
per entry type or per category key, always as absolute sums.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .categories import (
    GROWTH_TYPES,
    TYPE_LABELS,
    category_label,
    coerce_type,
    types_for_category,
)
from .config import SIGNIFICANT_CHANGE_THRESHOLD
from .errors import ValidationError
from .models import BudgetEntry, Period, ledger_frame

NOT_AVAILABLE = 'N/A'
UNCATEGORIZED_KEY = 'Autre'
GRANULARITIES = {'types', 'categories'}

PeriodLike = Union[Period, Mapping[str, Any]]
ImprovementRule = Callable[[str, float], bool]

TYPE_COLUMNS = [etype.value for etype in TYPE_LABELS]


def as_period(value: PeriodLike) -> Period:
    """Accept a :class:`Period` or a ``{year, month?, quarter?}`` mapping."""
    if isinstance(value, Period):
        return value
    if isinstance(value, Mapping):
        if 'year' not in value:
            raise ValidationError("A period needs a year")
        return Period(value['year'], value.get('month'), value.get('quarter'))
    raise ValidationError(f"Cannot interpret {value!r} as a period.")


def _period_mask(frame: pd.DataFrame, period: Period) -> pd.Series:
    return (frame['year'] == period.year) & frame['month'].isin(period.months())


def resolve_period_entries(entries: Iterable[BudgetEntry], period: PeriodLike) -> List[BudgetEntry]:
    """Entries dated inside ``period``, in ledger order."""
    period = as_period(period)
    ledger = list(entries)
    frame = ledger_frame(ledger)
    positions = np.flatnonzero(_period_mask(frame, period).to_numpy())
    return [ledger[i] for i in positions]


def _absolute_totals(frame: pd.DataFrame, column: str) -> pd.Series:
    if frame.empty:
        return pd.Series(dtype=float)
    keys = frame[column].fillna(UNCATEGORIZED_KEY) if column == 'category' else frame[column]
    return frame['amount'].abs().groupby(keys, sort=False).sum()


def compare_by_type(
    entries: Iterable[BudgetEntry], period1: PeriodLike, period2: PeriodLike
) -> Dict[str, Dict[str, float]]:
    """Absolute totals per entry type for both periods (every type present, 0 when empty)."""
    p1, p2 = as_period(period1), as_period(period2)
    frame = ledger_frame(entries)
    result: Dict[str, Dict[str, float]] = {}
    for name, period in (('period1', p1), ('period2', p2)):
        totals = _absolute_totals(frame[_period_mask(frame, period)], 'type')
        result[name] = {col: float(totals.get(col, 0.0)) for col in TYPE_COLUMNS}
    return result


def compare_by_category(
    entries: Iterable[BudgetEntry], period1: PeriodLike, period2: PeriodLike
) -> Dict[str, Dict[str, float]]:
    """Absolute totals per category key, unioned over both periods."""
    p1, p2 = as_period(period1), as_period(period2)
    frame = ledger_frame(entries)
    totals1 = _absolute_totals(frame[_period_mask(frame, p1)], 'category')
    totals2 = _absolute_totals(frame[_period_mask(frame, p2)], 'category')

    keys: List[str] = list(totals1.index)
    seen = set(keys)
    keys += [key for key in totals2.index if key not in seen]
    return {
        'period1': {key: float(totals1.get(key, 0.0)) for key in keys},
        'period2': {key: float(totals2.get(key, 0.0)) for key in keys},
    }


def compare_periods(
    entries: Iterable[BudgetEntry],
    period1: PeriodLike,
    period2: PeriodLike,
    granularity: str = 'types',
) -> Dict[str, Any]:
    if granularity not in GRANULARITIES:
        raise ValidationError(f"Unknown comparison granularity '{granularity}'.")
    if granularity == 'types':
        result: Dict[str, Any] = compare_by_type(entries, period1, period2)
        result['is_detailed'] = False
    else:
        result = compare_by_category(entries, period1, period2)
        result['is_detailed'] = True
    return result


# ---------------------------------------------------------------------------
# Improvement rules
# ---------------------------------------------------------------------------


def improvement_for_type(key: str, difference: float) -> bool:
    """Income, savings and investments improve when they grow; expenses when they shrink."""
    if coerce_type(key) in GROWTH_TYPES:
        return difference > 0
    return difference < 0


def decrease_is_improvement(key: str, difference: float) -> bool:
    """Reference rule for detailed category rows: any decrease counts as good.

    This also labels a drop in a savings or investment category as an
    improvement; use :func:`improvement_by_category_type` to classify those by
    the direction of their own type instead.
    """
    return difference < 0


def improvement_by_category_type(key: str, difference: float) -> bool:
    """Classify a category row by the type its key belongs to."""
    types = types_for_category(key)
    if not types:
        return decrease_is_improvement(key, difference)
    return improvement_for_type(types[0].value, difference)


def _default_rule(key: str) -> ImprovementRule:
    try:
        coerce_type(key)
    except ValidationError:
        return decrease_is_improvement
    return improvement_for_type


def diff_and_classify(
    value1: float,
    value2: float,
    semantics: str,
    rule: Optional[ImprovementRule] = None,
) -> Dict[str, Any]:
    """Difference, percentage change and improvement flag between two totals.

    ``semantics`` is the row key: an entry type for type rows or a category
    key for detailed rows.  Without an explicit ``rule``, type keys use
    :func:`improvement_for_type` and anything else :func:`decrease_is_improvement`.
    The percentage is ``"N/A"`` when ``value1`` is zero.
    """
    difference = value2 - value1
    percentage: Union[float, str]
    if value1 == 0:
        percentage = NOT_AVAILABLE
    else:
        percentage = (difference / value1) * 100
    classify = rule or _default_rule(semantics)
    return {
        'difference': difference,
        'percentage': percentage,
        'improved': bool(classify(semantics, difference)),
    }


def _row_name(key: str, detailed: bool) -> str:
    if not detailed:
        return TYPE_LABELS[coerce_type(key)]
    types = types_for_category(key)
    if not types:
        return key
    if len(types) > 1:
        # Detailed rows key on the bare category, so a shared key such as
        # ``autres`` sums every type that has it.
        return key.replace('_', ' ').capitalize()
    return category_label(types[0], key)


def comparison_rows(comparison: Mapping[str, Any], rule: Optional[ImprovementRule] = None) -> List[Dict[str, Any]]:
    """Table rows for a :func:`compare_periods` result, largest absolute change first."""
    detailed = bool(comparison.get('is_detailed', False))
    if rule is None:
        rule = decrease_is_improvement if detailed else improvement_for_type
    period1 = comparison['period1']
    period2 = comparison['period2']

    rows: List[Dict[str, Any]] = []
    for key in period1:
        value1 = period1[key]
        value2 = period2.get(key, 0.0)
        row = {
            'name': _row_name(key, detailed),
            'key': key,
            'value1': value1,
            'value2': value2,
        }
        row.update(diff_and_classify(value1, value2, key, rule=rule))
        rows.append(row)
    return sorted(rows, key=lambda row: abs(row['difference']), reverse=True)


def significant_changes(
    rows: Iterable[Mapping[str, Any]], min_delta: float = SIGNIFICANT_CHANGE_THRESHOLD
) -> List[Mapping[str, Any]]:
    """Rows whose absolute difference reaches ``min_delta``."""
    return [row for row in rows if abs(row['difference']) >= min_delta]
