"""
dugsi/store.py
──────────────
UI state for the Dugsi admin screens as pure reducers.

Each screen owns one immutable state value and changes it only through
``reducer(state, action) -> new state``.  Nothing here is global: callers
keep the current state wherever their request or session lives and pass
it back in.

Reducers
────────
dashboard_reducer   family list: selection, tab, filters, dialogs
sheet_reducer       family detail sheet: edit dialogs, shift change, tabs
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from django.db import models

from .types import AdvancedFilters, FilterSpec, Tab, ViewMode


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


# ── Dashboard ─────────────────────────────────────────────────────────────────

class DashboardAction(models.TextChoices):
    TOGGLE_FAMILY_SELECTION    = 'toggle_family_selection',    'Toggle family selection'
    SET_FAMILY_SELECTION       = 'set_family_selection',       'Set family selection'
    CLEAR_FAMILY_SELECTION     = 'clear_family_selection',     'Clear family selection'
    UPDATE_FILTERS             = 'update_filters',             'Update filters'
    SET_SEARCH_QUERY           = 'set_search_query',           'Set search query'
    SET_ADVANCED_FILTERS       = 'set_advanced_filters',       'Set advanced filters'
    RESET_FILTERS              = 'reset_filters',              'Reset filters'
    SET_VIEW_MODE              = 'set_view_mode',              'Set view mode'
    SET_ACTIVE_TAB             = 'set_active_tab',             'Set active tab'
    SET_DIALOG_OPEN            = 'set_dialog_open',            'Open or close a dialog'
    SET_LINK_SUBSCRIPTION_DATA = 'set_link_subscription_data', 'Set link-subscription dialog data'
    SET_VERIFY_BANK_DATA       = 'set_verify_bank_data',       'Set verify-bank dialog data'
    RESET                      = 'reset',                      'Reset'


class DashboardDialog(models.TextChoices):
    DELETE            = 'delete',           'Delete families'
    LINK_SUBSCRIPTION = 'linkSubscription', 'Link subscription'
    ADVANCED_FILTERS  = 'advancedFilters',  'Advanced filters'
    VERIFY_BANK       = 'verifyBank',       'Verify bank account'


_DIALOG_FIELDS = {
    DashboardDialog.DELETE:            'is_delete_dialog_open',
    DashboardDialog.LINK_SUBSCRIPTION: 'is_link_subscription_dialog_open',
    DashboardDialog.ADVANCED_FILTERS:  'show_advanced_filters',
    DashboardDialog.VERIFY_BANK:       'is_verify_bank_dialog_open',
}


@dataclass(frozen=True)
class VerifyBankData:
    payment_intent_id: str
    parent_email: str


@dataclass(frozen=True)
class DashboardUIState:
    selected_family_keys: frozenset = frozenset()
    view_mode: str = ViewMode.GRID
    active_tab: str = Tab.ALL
    filters: FilterSpec = field(default_factory=FilterSpec)
    show_advanced_filters: bool = False
    is_delete_dialog_open: bool = False
    is_link_subscription_dialog_open: bool = False
    link_subscription_parent_email: Optional[str] = None
    is_verify_bank_dialog_open: bool = False
    verify_bank_data: Optional[VerifyBankData] = None


def dashboard_reducer(state, action):
    """Return the state that results from applying *action* to *state*."""
    kind, payload = action.type, action.payload

    if kind == DashboardAction.TOGGLE_FAMILY_SELECTION:
        return replace(state, selected_family_keys=state.selected_family_keys ^ {payload})

    if kind == DashboardAction.SET_FAMILY_SELECTION:
        return replace(state, selected_family_keys=frozenset(payload or ()))

    if kind == DashboardAction.CLEAR_FAMILY_SELECTION:
        return replace(state, selected_family_keys=frozenset())

    if kind == DashboardAction.UPDATE_FILTERS:
        # payload: dict of FilterSpec fields to overwrite
        return replace(state, filters=replace(state.filters, **payload))

    if kind == DashboardAction.SET_SEARCH_QUERY:
        return replace(state, filters=replace(state.filters, search_query=payload or ''))

    if kind == DashboardAction.SET_ADVANCED_FILTERS:
        return replace(state, filters=replace(state.filters, advanced=payload or AdvancedFilters()))

    if kind == DashboardAction.RESET_FILTERS:
        return replace(state, filters=FilterSpec(), selected_family_keys=frozenset())

    if kind == DashboardAction.SET_VIEW_MODE:
        if payload not in ViewMode.values:
            raise ValueError(f'Unknown view mode: {payload!r}')
        return replace(state, view_mode=payload)

    if kind == DashboardAction.SET_ACTIVE_TAB:
        return replace(state, active_tab=payload, filters=replace(state.filters, tab=payload))

    if kind == DashboardAction.SET_DIALOG_OPEN:
        dialog, is_open = payload
        if dialog not in _DIALOG_FIELDS:
            raise ValueError(f'Unknown dashboard dialog: {dialog!r}')
        return replace(state, **{_DIALOG_FIELDS[dialog]: bool(is_open)})

    if kind == DashboardAction.SET_LINK_SUBSCRIPTION_DATA:
        return replace(state, link_subscription_parent_email=payload)

    if kind == DashboardAction.SET_VERIFY_BANK_DATA:
        # payload: VerifyBankData, a dict with the same keys, or None
        if payload and not isinstance(payload, VerifyBankData):
            payload = VerifyBankData(**payload)
        return replace(state, verify_bank_data=payload or None)

    if kind == DashboardAction.RESET:
        return DashboardUIState()

    raise ValueError(f'Unknown dashboard action: {kind!r}')


# ── Family detail sheet ───────────────────────────────────────────────────────

class SheetAction(models.TextChoices):
    OPEN_EDIT_PARENT  = 'open_edit_parent',  'Open edit parent'
    CLOSE_EDIT_PARENT = 'close_edit_parent', 'Close edit parent'
    OPEN_EDIT_CHILD   = 'open_edit_child',   'Open edit child'
    CLOSE_EDIT_CHILD  = 'close_edit_child',  'Close edit child'
    SET_DIALOG        = 'set_dialog',        'Open or close a dialog'
    SET_SHIFT_POPOVER = 'set_shift_popover', 'Show shift popover'
    SET_PENDING_SHIFT = 'set_pending_shift', 'Set pending shift change'
    SET_ACTIVE_TAB    = 'set_active_tab',    'Set active tab'
    RESET             = 'reset',             'Reset'


class SheetDialog(models.TextChoices):
    ADD_CHILD                = 'add_child',                'Add child'
    PAYMENT_LINK             = 'payment_link',             'Payment link'
    WITHDRAW_FAMILY          = 'withdraw_family',          'Withdraw family'
    CONSOLIDATE_SUBSCRIPTION = 'consolidate_subscription', 'Consolidate subscription'


class SheetTab(models.TextChoices):
    OVERVIEW = 'overview', 'Overview'
    BILLING  = 'billing',  'Billing'
    HISTORY  = 'history',  'History'


@dataclass(frozen=True)
class EditParentDialog:
    open: bool = False
    parent_number: int = 1
    is_adding: bool = False


@dataclass(frozen=True)
class EditChildDialog:
    open: bool = False
    student_id: Optional[str] = None


@dataclass(frozen=True)
class PendingShift:
    new_shift: str
    previous_shift: Optional[str]


@dataclass(frozen=True)
class SheetUIState:
    edit_parent_dialog: EditParentDialog = field(default_factory=EditParentDialog)
    edit_child_dialog: EditChildDialog = field(default_factory=EditChildDialog)
    add_child_dialog: bool = False
    payment_link_dialog: bool = False
    withdraw_family_dialog: bool = False
    consolidate_subscription_dialog: bool = False
    shift_popover: bool = False
    pending_shift: Optional[PendingShift] = None
    active_tab: str = SheetTab.OVERVIEW


def sheet_reducer(state, action):
    kind, payload = action.type, action.payload

    if kind == SheetAction.OPEN_EDIT_PARENT:
        parent_number, is_adding = payload
        if parent_number not in (1, 2):
            raise ValueError(f'Parent number must be 1 or 2, got {parent_number!r}')
        return replace(state, edit_parent_dialog=EditParentDialog(True, parent_number, bool(is_adding)))

    if kind == SheetAction.CLOSE_EDIT_PARENT:
        # keeps parent_number/is_adding so the closing animation shows the same form
        return replace(state, edit_parent_dialog=replace(state.edit_parent_dialog, open=False))

    if kind == SheetAction.OPEN_EDIT_CHILD:
        return replace(state, edit_child_dialog=EditChildDialog(True, payload))

    if kind == SheetAction.CLOSE_EDIT_CHILD:
        return replace(state, edit_child_dialog=replace(state.edit_child_dialog, open=False))

    if kind == SheetAction.SET_DIALOG:
        dialog, is_open = payload
        if dialog not in SheetDialog.values:
            raise ValueError(f'Unknown sheet dialog: {dialog!r}')
        return replace(state, **{f'{dialog}_dialog': bool(is_open)})

    if kind == SheetAction.SET_SHIFT_POPOVER:
        return replace(state, shift_popover=bool(payload))

    if kind == SheetAction.SET_PENDING_SHIFT:
        return replace(state, pending_shift=payload)

    if kind == SheetAction.SET_ACTIVE_TAB:
        return replace(state, active_tab=payload)

    if kind == SheetAction.RESET:
        return SheetUIState()

    raise ValueError(f'Unknown sheet action: {kind!r}')
