"""Persistence collaborator contract and an in-memory implementation.

Every call is scoped to one owner.  Stores that cannot reach their backend
raise :class:`~budget_analytics.errors.NotAvailable`; the service layer turns
that into an empty dataset.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Dict, List

from .errors import NotAvailable
from .models import BudgetEntry, BudgetLimitConfig, RecurringExpenseRule, validate_rule


class BudgetStore(ABC):
    """Owner-scoped storage of entries, recurring rules and limits."""

    @abstractmethod
    def load_entries(self, owner_id: str) -> List[BudgetEntry]:
        ...

    @abstractmethod
    def save_entry(self, owner_id: str, entry: BudgetEntry) -> BudgetEntry:
        """Create or replace the entry with the same id."""

    @abstractmethod
    def delete_entry(self, owner_id: str, entry_id: str) -> None:
        ...

    @abstractmethod
    def load_recurring_rules(self, owner_id: str) -> List[RecurringExpenseRule]:
        ...

    @abstractmethod
    def save_recurring_rules(self, owner_id: str, rules: List[RecurringExpenseRule]) -> None:
        """Replace the owner's whole rule set."""

    @abstractmethod
    def load_limits(self, owner_id: str) -> BudgetLimitConfig:
        ...

    @abstractmethod
    def save_limits(self, owner_id: str, config: BudgetLimitConfig) -> None:
        ...


class InMemoryBudgetStore(BudgetStore):
    """Dict-backed store; set ``available = False`` to simulate an outage."""

    def __init__(self) -> None:
        self.available = True
        self._entries: Dict[str, Dict[str, BudgetEntry]] = {}
        self._rules: Dict[str, List[RecurringExpenseRule]] = {}
        self._limits: Dict[str, BudgetLimitConfig] = {}

    def _check(self) -> None:
        if not self.available:
            raise NotAvailable("In-memory store is switched off")

    def load_entries(self, owner_id: str) -> List[BudgetEntry]:
        self._check()
        return [copy.copy(e) for e in self._entries.get(owner_id, {}).values()]

    def save_entry(self, owner_id: str, entry: BudgetEntry) -> BudgetEntry:
        self._check()
        self._entries.setdefault(owner_id, {})[entry.id] = copy.copy(entry)
        return entry

    def delete_entry(self, owner_id: str, entry_id: str) -> None:
        self._check()
        self._entries.get(owner_id, {}).pop(entry_id, None)

    def load_recurring_rules(self, owner_id: str) -> List[RecurringExpenseRule]:
        self._check()
        return [copy.copy(r) for r in self._rules.get(owner_id, [])]

    def save_recurring_rules(self, owner_id: str, rules: List[RecurringExpenseRule]) -> None:
        self._check()
        self._rules[owner_id] = [validate_rule(copy.copy(r)) for r in rules]

    def load_limits(self, owner_id: str) -> BudgetLimitConfig:
        self._check()
        stored = self._limits.get(owner_id)
        return copy.deepcopy(stored) if stored is not None else BudgetLimitConfig.default()

    def save_limits(self, owner_id: str, config: BudgetLimitConfig) -> None:
        self._check()
        self._limits[owner_id] = copy.deepcopy(config)
