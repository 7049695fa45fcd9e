"""Progress of spending, saving and investing against configured limits."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from .categories import EntryType, category_label, coerce_type
from .errors import ValidationError
from .models import BudgetEntry, BudgetLimitConfig, ledger_frame

# Section of the limit configuration holding each type's monthly limits.
LIMIT_SECTIONS = {
    EntryType.DEPENSES_VARIABLES: 'categories',
    EntryType.EPARGNE: 'epargne',
    EntryType.INVESTISSEMENTS: 'investissements',
}
LONG_TERM_TYPES = {EntryType.EPARGNE, EntryType.INVESTISSEMENTS}

# Gauge bands, in percent of the limit.
OVER_THRESHOLD = 100
WARNING_THRESHOLD = 80
CAUTION_THRESHOLD = 60


@dataclass
class LimitProgress:
    spent: float
    limit: float
    remaining: float
    percentage: Optional[float]
    over_budget: bool
    configured: bool


@dataclass
class GoalProgress:
    total: float
    goal: float
    remaining: float
    percentage: Optional[float]
    goal_reached: bool
    configured: bool


def limit_for(config: BudgetLimitConfig, entry_type: Any, category: str) -> float:
    """Configured monthly limit, 0 when the type or category has none."""
    section = LIMIT_SECTIONS.get(coerce_type(entry_type))
    if section is None:
        return 0.0
    return float(getattr(config, section).get(category, 0.0))


def _month_total(frame: pd.DataFrame, entry_type: EntryType, category: str, today: date) -> float:
    mask = (
        (frame['type'] == entry_type.value)
        & (frame['category'] == category)
        & (frame['year'] == today.year)
        & (frame['month'] == today.month)
    )
    return float(frame.loc[mask, 'amount'].sum())


def _build_progress(spent: float, limit: float) -> LimitProgress:
    remaining = limit - spent
    if limit == 0:
        # Unset limit: nothing to measure against.
        return LimitProgress(spent, limit, remaining, None, False, False)
    return LimitProgress(
        spent=spent,
        limit=limit,
        remaining=remaining,
        percentage=spent / limit * 100,
        over_budget=remaining < 0,
        configured=True,
    )


def progress(
    entries: Iterable[BudgetEntry],
    limit_config: BudgetLimitConfig,
    entry_type: Any,
    category: str,
    now: Union[date, datetime],
) -> LimitProgress:
    """Current-month total of one ``(type, category)`` against its limit."""
    etype = coerce_type(entry_type)
    today = now.date() if isinstance(now, datetime) else now
    spent = _month_total(ledger_frame(entries), etype, category, today)
    return _build_progress(spent, limit_for(limit_config, etype, category))


def alert_level(result: LimitProgress) -> str:
    """``unset``, ``ok``, ``caution`` (>60%), ``warning`` (>80%) or ``over`` (>100%)."""
    if not result.configured or result.percentage is None:
        return 'unset'
    if result.percentage > OVER_THRESHOLD:
        return 'over'
    if result.percentage > WARNING_THRESHOLD:
        return 'warning'
    if result.percentage > CAUTION_THRESHOLD:
        return 'caution'
    return 'ok'


def monthly_progress(
    entries: Iterable[BudgetEntry],
    limit_config: BudgetLimitConfig,
    now: Union[date, datetime],
) -> pd.DataFrame:
    """One row per configured monthly limit; unconfigured limits are skipped."""
    today = now.date() if isinstance(now, datetime) else now
    frame = ledger_frame(entries)
    rows: List[dict] = []
    for etype, section in LIMIT_SECTIONS.items():
        for category, limit in getattr(limit_config, section).items():
            if not limit:
                continue
            result = _build_progress(_month_total(frame, etype, category, today), float(limit))
            row = {
                'type': etype.value,
                'category': category,
                'name': category_label(etype, category),
            }
            row.update(asdict(result))
            row['level'] = alert_level(result)
            rows.append(row)
    columns = ['type', 'category', 'name', 'spent', 'limit', 'remaining',
               'percentage', 'over_budget', 'configured', 'level']
    return pd.DataFrame(rows, columns=columns)


def long_term_progress(
    entries: Iterable[BudgetEntry],
    limit_config: BudgetLimitConfig,
    entry_type: Any,
) -> GoalProgress:
    """All-time savings or investments total against the long-term goal."""
    etype = coerce_type(entry_type)
    if etype not in LONG_TERM_TYPES:
        raise ValidationError(f"No long-term goal exists for type '{etype.value}'.")
    frame = ledger_frame(entries)
    total = float(frame.loc[frame['type'] == etype.value, 'amount'].sum())
    goal = float(limit_config.long_term.get(etype.value, 0.0))
    remaining = goal - total
    if goal == 0:
        return GoalProgress(total, goal, remaining, None, False, False)
    percentage = total / goal * 100
    return GoalProgress(
        total=total,
        goal=goal,
        remaining=remaining,
        percentage=percentage,
        goal_reached=percentage >= 100,
        configured=True,
    )
