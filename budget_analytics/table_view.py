"""Filtered, sorted and paginated ledger table plus CSV export."""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from .categories import ENTRY_TYPES, category_label
from .config import DEFAULT_PAGE_SIZE
from .errors import ValidationError
from .models import BudgetEntry, ledger_frame

ALL_TYPES = 'all'
SORT_KEYS = {'date', 'amount'}
SORT_ORDERS = {'asc', 'desc'}
CSV_HEADERS = ['Date', 'Type', 'Catégorie', 'Montant', 'Description']


@dataclass
class TableQuery:
    year: Optional[int] = None
    filter_type: str = ALL_TYPES
    sort_by: str = 'date'
    sort_order: str = 'desc'
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_KEYS:
            raise ValidationError(f"Cannot sort by '{self.sort_by}'.")
        if self.sort_order not in SORT_ORDERS:
            raise ValidationError(f"Unknown sort order '{self.sort_order}'.")
        self.filter_type = str(self.filter_type)
        if self.filter_type != ALL_TYPES and self.filter_type not in {t.value for t in ENTRY_TYPES}:
            raise ValidationError(f"Unknown type filter '{self.filter_type}'.")
        if int(self.page) < 1:
            raise ValidationError("Page numbers start at 1")
        if int(self.page_size) < 1:
            raise ValidationError("Page size must be at least 1")
        self.page = int(self.page)
        self.page_size = int(self.page_size)


@dataclass
class TablePage:
    items: List[BudgetEntry]
    total_items: int
    total_pages: int


def query(entries: Iterable[BudgetEntry], params: Optional[TableQuery] = None) -> TablePage:
    """Filter by year, then by type, stable-sort, then cut one page.

    Entries with equal sort keys keep their ledger order.  A page past the end
    yields an empty ``items`` list.
    """
    params = params or TableQuery()
    ledger = list(entries)
    frame = ledger_frame(ledger)
    frame['position'] = np.arange(len(frame))

    if params.year:
        frame = frame[frame['year'] == int(params.year)]
    if params.filter_type != ALL_TYPES:
        frame = frame[frame['type'] == params.filter_type]

    frame = frame.sort_values(
        params.sort_by,
        ascending=params.sort_order == 'asc',
        kind='stable',
    )

    total_items = len(frame)
    total_pages = int(np.ceil(total_items / params.page_size))
    start = (params.page - 1) * params.page_size
    window = frame['position'].to_numpy()[start:start + params.page_size]
    return TablePage(
        items=[ledger[i] for i in window],
        total_items=total_items,
        total_pages=total_pages,
    )


def _format_amount(amount: float) -> str:
    text = repr(float(amount))
    return text[:-2] if text.endswith('.0') else text


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def export_csv(entries: Iterable[BudgetEntry]) -> str:
    """CSV text: header row first, one row per entry, ``\\n``-joined.

    Only the description is quoted (embedded quotes doubled) and falls back to
    the category label; amounts are written unrounded. The category is
    written as its human label.
    """
    lines = [','.join(CSV_HEADERS)]
    for entry in entries:
        lines.append(','.join([
            entry.date.isoformat(),
            entry.type.value,
            category_label(entry.type, entry.category),
            _format_amount(entry.amount),
            _quote(entry.display_description),
        ]))
    return '\n'.join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"budget_export_{today.isoformat()}.csv"


def write_csv_export(
    entries: Iterable[BudgetEntry],
    directory: Union[str, Path],
    today: Optional[date] = None,
) -> Path:
    """Write the export under ``directory`` and return its path."""
    target = Path(directory) / export_filename(today)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open('w', encoding='utf-8', newline='') as handle:
        handle.write(export_csv(entries))
    return target


def read_csv_export(text: str) -> pd.DataFrame:
    """Parse export text back into a DataFrame of strings."""
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
