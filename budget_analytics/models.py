"""Ledger records: budget entries, recurring rules, limits and periods."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .categories import (
    EntryType,
    category_label,
    coerce_type,
    validate_category,
)
from .errors import ConfigurationError, ValidationError

FRAME_COLUMNS = ['id', 'date', 'year', 'month', 'type', 'category', 'amount', 'description', 'is_recurring']

MONTH_NAMES = [
    'janvier', 'février', 'mars', 'avril', 'mai', 'juin',
    'juillet', 'août', 'septembre', 'octobre', 'novembre', 'décembre',
]
QUARTER_MONTHS = {
    1: (1, 2, 3),
    2: (4, 5, 6),
    3: (7, 8, 9),
    4: (10, 11, 12),
}
QUARTER_NAMES = {
    1: 'Q1 (Jan-Mar)',
    2: 'Q2 (Avr-Juin)',
    3: 'Q3 (Juil-Sept)',
    4: 'Q4 (Oct-Déc)',
}


def parse_date(value: Any) -> date:
    """Coerce ISO strings, datetimes and pandas timestamps to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, 'to_pydatetime'):
        return value.to_pydatetime().date()
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"Unparseable date '{value}'.")


def parse_amount(value: Any) -> float:
    """Coerce an amount magnitude; strings such as ``"8500"`` are accepted."""
    if isinstance(value, bool):
        raise ValidationError(f"Malformed amount '{value}'.")
    if isinstance(value, str):
        value = value.strip().replace("'", '').replace('’', '')
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed amount '{value}'.") from None
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError(f"Malformed amount '{value}'.")
    if amount < 0:
        raise ValidationError(f"Amount must be a non-negative magnitude, got {amount}.")
    return amount


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class BudgetEntry:
    """One dated, typed, categorized money movement.

    ``amount`` is always a magnitude; direction comes from ``type``.
    """

    id: str
    date: date
    type: EntryType
    category: str
    amount: float
    description: Optional[str] = None
    is_recurring: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Entry id cannot be empty")
        self.id = str(self.id)
        self.date = parse_date(self.date)
        self.type = coerce_type(self.type)
        self.category = validate_category(self.type, self.category)
        self.amount = parse_amount(self.amount)
        if self.description is not None:
            self.description = str(self.description)
        self.is_recurring = bool(self.is_recurring)

    @classmethod
    def create(
        cls,
        date: Union[date, str],
        type: Union[EntryType, str],
        category: str,
        amount: Union[float, str],
        description: Optional[str] = None,
        is_recurring: bool = False,
    ) -> 'BudgetEntry':
        """Build a new entry with a freshly assigned id."""
        return cls(new_id(), date, type, category, amount, description, is_recurring)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'BudgetEntry':
        """Parse a loose record (storage row, JSON payload, form data)."""
        try:
            entry_id = record['id']
            raw_date = record['date']
            raw_type = record['type']
            category = record['category']
            raw_amount = record['amount']
        except KeyError as exc:
            raise ValidationError(f"Budget entry record is missing field {exc}.") from None
        recurring = record.get('is_recurring', record.get('isRecurring', False))
        description = record.get('description')
        if isinstance(description, float) and math.isnan(description):
            description = None
        return cls(
            id=entry_id,
            date=raw_date,
            type=raw_type,
            category=category,
            amount=raw_amount,
            description=description or None,
            is_recurring=bool(recurring),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'type': self.type.value,
            'category': self.category,
            'amount': self.amount,
            'description': self.description,
            'is_recurring': self.is_recurring,
        }

    @property
    def category_label(self) -> str:
        return category_label(self.type, self.category)

    @property
    def display_description(self) -> str:
        return self.description or self.category_label


@dataclass
class RecurringExpenseRule:
    """Monthly fixed-expense template; ``category`` is a ``depenses_fixes`` key."""

    id: str
    amount: float
    category: str
    day_of_month: int = 1

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'RecurringExpenseRule':
        try:
            day = record.get('day_of_month', record.get('dayOfMonth', 1))
            rule = cls(
                id=str(record['id']),
                amount=record['amount'],
                category=record['category'],
                day_of_month=day,
            )
        except KeyError as exc:
            raise ValidationError(f"Recurring rule record is missing field {exc}.") from None
        return validate_rule(rule)

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'category': self.category,
            'day_of_month': self.day_of_month,
        }


def validate_rule(rule: RecurringExpenseRule) -> RecurringExpenseRule:
    """Configuration-entry boundary check for recurring rules.

    Normalizes ``amount`` and ``day_of_month`` in place and returns the rule.
    """
    if not rule.id:
        raise ValidationError("Recurring rule id cannot be empty")
    rule.category = validate_category(EntryType.DEPENSES_FIXES, rule.category)
    rule.amount = parse_amount(rule.amount)
    try:
        day = int(rule.day_of_month)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid day of month '{rule.day_of_month}'.") from None
    if not 1 <= day <= 31:
        raise ValidationError(f"Day of month must be between 1 and 31, got {day}.")
    rule.day_of_month = day
    return rule


def _default_limits(keys: Iterable[str]) -> Dict[str, float]:
    return {key: 0.0 for key in keys}


@dataclass
class BudgetLimitConfig:
    """Monthly limits per category plus long-term totals; 0 means "not configured"."""

    categories: Dict[str, float] = field(default_factory=lambda: _default_limits(
        ['alimentation', 'restaurants', 'bars_sorties', 'loisirs', 'shopping', 'entretien']
    ))
    epargne: Dict[str, float] = field(default_factory=lambda: _default_limits(
        ['compte_epargne', 'pilier3']
    ))
    investissements: Dict[str, float] = field(default_factory=lambda: _default_limits(
        ['bourse', 'crypto', 'immobilier', 'crowdfunding']
    ))
    long_term: Dict[str, float] = field(default_factory=lambda: _default_limits(
        ['epargne', 'investissements']
    ))

    SECTIONS = ('categories', 'epargne', 'investissements', 'long_term')

    @classmethod
    def default(cls) -> 'BudgetLimitConfig':
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'BudgetLimitConfig':
        """Merge ``data`` over the defaults; ``longTerm`` is accepted as an alias."""
        config = cls()
        if not data:
            return config
        if not isinstance(data, Mapping):
            raise ConfigurationError("Budget limit configuration must be a mapping")
        for section in cls.SECTIONS:
            raw = data.get(section)
            if raw is None and section == 'long_term':
                raw = data.get('longTerm')
            if raw is None:
                continue
            if not isinstance(raw, Mapping):
                raise ConfigurationError(f"Budget limit section '{section}' must be a mapping")
            target = getattr(config, section)
            for key, value in raw.items():
                target[str(key)] = _parse_limit(section, key, value)
        return config

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {section: dict(getattr(self, section)) for section in self.SECTIONS}


def _parse_limit(section: str, key: Any, value: Any) -> float:
    if value is None or value == '':
        return 0.0
    try:
        limit = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Limit '{section}.{key}' is not numeric: {value!r}") from None
    if math.isnan(limit) or limit < 0:
        raise ConfigurationError(f"Limit '{section}.{key}' must be a non-negative number, got {value!r}")
    return limit


@dataclass(frozen=True)
class Period:
    """A year, optionally narrowed to one month or one quarter."""

    year: int
    month: Optional[int] = None
    quarter: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, 'year', int(self.year))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid period year '{self.year}'.") from None
        if self.month is not None and self.quarter is not None:
            raise ValidationError("A period accepts a month or a quarter, not both")
        if self.month is not None:
            try:
                month = int(self.month)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid period month '{self.month}'.") from None
            if not 1 <= month <= 12:
                raise ValidationError(f"Period month must be between 1 and 12, got {month}.")
            object.__setattr__(self, 'month', month)
        if self.quarter is not None:
            object.__setattr__(self, 'quarter', _parse_quarter(self.quarter))

    def months(self) -> tuple:
        if self.month is not None:
            return (self.month,)
        if self.quarter is not None:
            return QUARTER_MONTHS[self.quarter]
        return tuple(range(1, 13))

    def label(self) -> str:
        if self.month is not None:
            return f"{MONTH_NAMES[self.month - 1]} {self.year}"
        if self.quarter is not None:
            return f"{QUARTER_NAMES[self.quarter]} {self.year}"
        return f"Année {self.year}"


def _parse_quarter(value: Any) -> int:
    text = str(value).strip().upper()
    if text.startswith('Q'):
        text = text[1:]
    if text in {'1', '2', '3', '4'}:
        return int(text)
    raise ValidationError(f"Quarter must be one of Q1-Q4, got '{value}'.")


def ledger_frame(entries: Iterable[BudgetEntry]) -> pd.DataFrame:
    """Snapshot the ledger as a DataFrame, one row per entry in input order."""
    rows: List[Dict[str, Any]] = []
    for entry in entries:
        rows.append({
            'id': entry.id,
            'date': pd.Timestamp(entry.date),
            'year': entry.date.year,
            'month': entry.date.month,
            'type': entry.type.value,
            'category': entry.category,
            'amount': float(entry.amount),
            'description': entry.description,
            'is_recurring': entry.is_recurring,
        })
    if not rows:
        return pd.DataFrame({
            'id': pd.Series(dtype=object),
            'date': pd.Series(dtype='datetime64[ns]'),
            'year': pd.Series(dtype='int64'),
            'month': pd.Series(dtype='int64'),
            'type': pd.Series(dtype=object),
            'category': pd.Series(dtype=object),
            'amount': pd.Series(dtype=float),
            'description': pd.Series(dtype=object),
            'is_recurring': pd.Series(dtype=bool),
        })
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)

