"""Entry types, their category lookup table and the sign convention.

Every entry has one of five closed types and a category key that must belong
to that type's set.  Amounts are stored as magnitudes; the direction of a
movement is derived from its type by :func:`sign_for`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from .errors import ValidationError


class EntryType(str, Enum):
    REVENUS = 'revenus'
    DEPENSES_FIXES = 'depenses_fixes'
    DEPENSES_VARIABLES = 'depenses_variables'
    EPARGNE = 'epargne'
    INVESTISSEMENTS = 'investissements'

    def __str__(self) -> str:
        return self.value


# Declaration order is the column order used by every rollup.
ENTRY_TYPES: List[EntryType] = list(EntryType)
EXPENSE_TYPES = {EntryType.DEPENSES_FIXES, EntryType.DEPENSES_VARIABLES}
GROWTH_TYPES = {EntryType.REVENUS, EntryType.EPARGNE, EntryType.INVESTISSEMENTS}

TYPE_LABELS: Dict[EntryType, str] = {
    EntryType.REVENUS: 'Revenus',
    EntryType.DEPENSES_FIXES: 'Dépenses fixes',
    EntryType.DEPENSES_VARIABLES: 'Dépenses variables',
    EntryType.EPARGNE: 'Épargne',
    EntryType.INVESTISSEMENTS: 'Investissements',
}

TYPE_COLORS: Dict[str, str] = {
    'revenus': '#10b981',
    'depenses_fixes': '#ef4444',
    'depenses_variables': '#f97316',
    'epargne': '#3b82f6',
    'investissements': '#8b5cf6',
    'solde': '#6b7280',
}

CATEGORY_COLORS: List[str] = [
    '#ef4444', '#f97316', '#f59e0b', '#eab308', '#84cc16', '#22c55e',
    '#10b981', '#14b8a6', '#06b6d4', '#0ea5e9', '#3b82f6', '#6366f1',
    '#8b5cf6', '#a855f7', '#c026d3', '#d946ef', '#ec4899', '#f43f5e',
    '#dc2626', '#ea580c', '#d97706', '#ca8a04', '#65a30d', '#16a34a',
    '#059669', '#0d9488', '#0891b2', '#0284c7', '#2563eb', '#4f46e5',
    '#7c3aed', '#9333ea', '#a21caf', '#be185d', '#be123c', '#991b1b',
]

BUDGET_CATEGORIES: Dict[EntryType, Dict[str, str]] = {
    EntryType.REVENUS: {
        'salaire': 'Salaire',
        'revenus_locatifs': 'Revenus locatifs',
        'activite_secondaire': 'Activité secondaire',
        'dividendes': 'Dividendes',
        'indemnites': 'Indemnités & allocations',
        'remboursements': 'Remboursements',
        'ventes': 'Ventes occasionnelles',
        'cadeaux': 'Cadeaux / Bonus',
        'autres': 'Autres revenus',
    },
    EntryType.DEPENSES_FIXES: {
        'loyer': 'Loyer',
        'abonnements': 'Abonnements',
        'assurances': 'Assurances',
        'credits': 'Crédits / Prêts',
        'telephonie': 'Téléphonie & Internet',
    },
    EntryType.DEPENSES_VARIABLES: {
        'alimentation': 'Alimentation',
        'restaurants': 'Restaurants',
        'bars_sorties': 'Bars & Sorties',
        'loisirs': 'Loisirs & Activités',
        'sante': 'Santé',
        'shopping': 'Shopping',
        'deplacements': 'Déplacements ponctuels',
        'vacances': 'Vacances',
        'evenements': 'Événements / Cadeaux',
        'entretien': 'Entretien logement',
        'imprevus': 'Imprévus',
    },
    EntryType.EPARGNE: {
        'compte_epargne': 'Compte épargne',
        'pilier3': 'Troisième pilier',
        'fonds_secours': 'Fonds de secours',
        'projets_long_terme': 'Projets long terme',
    },
    EntryType.INVESTISSEMENTS: {
        'bourse': 'Bourse',
        'crypto': 'Crypto',
        'immobilier': 'Immobilier',
        'crowdfunding': 'Crowdfunding',
        'autres': 'Autres',
    },
}

# Sign contexts
DISPLAY = 'display'
BALANCE = 'balance'
BREAKDOWN = 'breakdown'
SIGN_CONTEXTS = {DISPLAY, BALANCE, BREAKDOWN}


def coerce_type(value: Any) -> EntryType:
    """Return the :class:`EntryType` for ``value`` or raise ``ValidationError``."""
    if isinstance(value, EntryType):
        return value
    try:
        return EntryType(str(value).strip())
    except ValueError:
        raise ValidationError(f"Unknown entry type '{value}'.") from None


def validate_category(entry_type: Any, category: Any) -> str:
    """Check that ``category`` belongs to the category set of ``entry_type``."""
    etype = coerce_type(entry_type)
    key = str(category).strip() if category is not None else ''
    if key not in BUDGET_CATEGORIES[etype]:
        raise ValidationError(f"Category '{category}' is not allowed for type '{etype.value}'.")
    return key


def category_label(entry_type: Any, category: str) -> str:
    """Human label for a category, falling back to the raw key."""
    try:
        etype = coerce_type(entry_type)
    except ValidationError:
        return category
    return BUDGET_CATEGORIES[etype].get(category, category)


def types_for_category(category: str) -> List[EntryType]:
    """All types whose category set contains ``category`` (``autres`` has two)."""
    return [etype for etype, mapping in BUDGET_CATEGORIES.items() if category in mapping]


def category_color(index: int) -> str:
    return CATEGORY_COLORS[index % len(CATEGORY_COLORS)]


def sign_for(entry_type: Any, context: str = DISPLAY) -> int:
    """Direction (+1 / -1) of an entry type in a given context.

    ``display`` and ``breakdown``: income, savings and investments are
    additive, the two expense types subtractive.

    ``balance``: only income is additive; savings and investments leave the
    disposable balance exactly like expenses do, so
    ``solde = revenus - (depenses_fixes + depenses_variables + epargne + investissements)``.
    """
    if context not in SIGN_CONTEXTS:
        raise ValueError(f"Unknown sign context '{context}'.")
    etype = coerce_type(entry_type)
    if context == BALANCE:
        return 1 if etype is EntryType.REVENUS else -1
    return -1 if etype in EXPENSE_TYPES else 1


def signed_types(context: str, sign: int) -> List[EntryType]:
    """Types carrying ``sign`` in ``context``, in declaration order."""
    return [etype for etype in ENTRY_TYPES if sign_for(etype, context) == sign]
