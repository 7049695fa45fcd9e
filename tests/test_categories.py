import pytest

from budget_analytics.categories import (
    BALANCE,
    BREAKDOWN,
    BUDGET_CATEGORIES,
    CATEGORY_COLORS,
    DISPLAY,
    ENTRY_TYPES,
    EntryType,
    category_color,
    category_label,
    coerce_type,
    sign_for,
    signed_types,
    types_for_category,
    validate_category,
)
from budget_analytics.errors import ValidationError


def test_every_type_has_a_category_set():
    assert set(BUDGET_CATEGORIES) == set(ENTRY_TYPES)
    assert 'loyer' in BUDGET_CATEGORIES[EntryType.DEPENSES_FIXES]
    assert 'pilier3' in BUDGET_CATEGORIES[EntryType.EPARGNE]


def test_coerce_type_accepts_strings_and_rejects_unknown():
    assert coerce_type('revenus') is EntryType.REVENUS
    assert coerce_type(' epargne ') is EntryType.EPARGNE
    with pytest.raises(ValidationError):
        coerce_type('salary')


def test_validate_category_is_scoped_by_type():
    assert validate_category('depenses_fixes', 'loyer') == 'loyer'
    with pytest.raises(ValidationError):
        validate_category('revenus', 'loyer')
    with pytest.raises(ValidationError):
        validate_category('revenus', None)


def test_category_label_falls_back_to_key():
    assert category_label('depenses_fixes', 'telephonie') == 'Téléphonie & Internet'
    assert category_label('depenses_fixes', 'inconnu') == 'inconnu'
    assert category_label('not-a-type', 'loyer') == 'loyer'


def test_autres_belongs_to_income_and_investments():
    assert types_for_category('autres') == [EntryType.REVENUS, EntryType.INVESTISSEMENTS]
    assert types_for_category('nope') == []


def test_display_and_breakdown_signs():
    for context in (DISPLAY, BREAKDOWN):
        assert sign_for('revenus', context) == 1
        assert sign_for('epargne', context) == 1
        assert sign_for('investissements', context) == 1
        assert sign_for('depenses_fixes', context) == -1
        assert sign_for('depenses_variables', context) == -1


def test_balance_sign_treats_savings_as_outflow():
    assert sign_for('revenus', BALANCE) == 1
    assert signed_types(BALANCE, -1) == [
        EntryType.DEPENSES_FIXES,
        EntryType.DEPENSES_VARIABLES,
        EntryType.EPARGNE,
        EntryType.INVESTISSEMENTS,
    ]


def test_sign_for_rejects_unknown_context():
    with pytest.raises(ValueError):
        sign_for('revenus', 'chart')


def test_category_colors_cycle():
    assert len(CATEGORY_COLORS) == 36
    assert category_color(0) == CATEGORY_COLORS[0]
    assert category_color(36) == CATEGORY_COLORS[0]
    assert category_color(37) == CATEGORY_COLORS[1]
