from dataclasses import FrozenInstanceError, replace

from django.test import SimpleTestCase

from dugsi.store import (
    Action,
    DashboardAction,
    DashboardDialog,
    DashboardUIState,
    EditParentDialog,
    PendingShift,
    SheetAction,
    SheetDialog,
    SheetTab,
    SheetUIState,
    VerifyBankData,
    dashboard_reducer,
    sheet_reducer,
)
from dugsi.types import AdvancedFilters, FilterSpec, Shift, Tab, ViewMode


def dispatch(reducer, state, *actions):
    for kind, payload in actions:
        state = reducer(state, Action(kind, payload))
    return state


class DashboardReducerTests(SimpleTestCase):

    def setUp(self):
        self.state = DashboardUIState()

    def test_defaults(self):
        self.assertEqual(self.state.view_mode, ViewMode.GRID)
        self.assertEqual(self.state.active_tab, Tab.ALL)
        self.assertEqual(self.state.filters, FilterSpec())
        self.assertEqual(self.state.selected_family_keys, frozenset())

    def test_toggle_selection_twice_restores(self):
        state = dispatch(dashboard_reducer, self.state,
                         (DashboardAction.TOGGLE_FAMILY_SELECTION, 'fam-1'))
        self.assertEqual(state.selected_family_keys, {'fam-1'})
        state = dashboard_reducer(state, Action(DashboardAction.TOGGLE_FAMILY_SELECTION, 'fam-1'))
        self.assertEqual(state.selected_family_keys, frozenset())

    def test_set_and_clear_selection(self):
        state = dispatch(dashboard_reducer, self.state,
                         (DashboardAction.SET_FAMILY_SELECTION, ['a', 'b', 'a']))
        self.assertEqual(state.selected_family_keys, {'a', 'b'})
        state = dashboard_reducer(state, Action(DashboardAction.CLEAR_FAMILY_SELECTION))
        self.assertEqual(state.selected_family_keys, frozenset())

    def test_previous_state_is_untouched(self):
        dashboard_reducer(self.state, Action(DashboardAction.SET_SEARCH_QUERY, 'ali'))
        self.assertEqual(self.state.filters.search_query, '')

    def test_filter_updates(self):
        advanced = AdvancedFilters(has_health_info=True)
        state = dispatch(
            dashboard_reducer, self.state,
            (DashboardAction.SET_SEARCH_QUERY, 'ali'),
            (DashboardAction.SET_ADVANCED_FILTERS, advanced),
            (DashboardAction.UPDATE_FILTERS, {'quick_shift': Shift.MORNING}),
        )
        self.assertEqual(state.filters, FilterSpec(search_query='ali', advanced=advanced,
                                                   quick_shift=Shift.MORNING))

    def test_reset_filters_clears_selection(self):
        state = dispatch(
            dashboard_reducer, self.state,
            (DashboardAction.SET_SEARCH_QUERY, 'ali'),
            (DashboardAction.TOGGLE_FAMILY_SELECTION, 'fam-1'),
            (DashboardAction.SET_VIEW_MODE, ViewMode.TABLE),
            (DashboardAction.RESET_FILTERS, None),
        )
        self.assertEqual(state.filters, FilterSpec())
        self.assertEqual(state.selected_family_keys, frozenset())
        self.assertEqual(state.view_mode, ViewMode.TABLE)

    def test_active_tab_drives_filter_tab(self):
        state = dashboard_reducer(self.state, Action(DashboardAction.SET_ACTIVE_TAB, Tab.CHURNED))
        self.assertEqual(state.active_tab, Tab.CHURNED)
        self.assertEqual(state.filters.tab, Tab.CHURNED)

    def test_view_mode_validated(self):
        with self.assertRaises(ValueError):
            dashboard_reducer(self.state, Action(DashboardAction.SET_VIEW_MODE, 'kanban'))

    def test_dialogs(self):
        state = dispatch(
            dashboard_reducer, self.state,
            (DashboardAction.SET_DIALOG_OPEN, (DashboardDialog.DELETE, True)),
            (DashboardAction.SET_DIALOG_OPEN, (DashboardDialog.ADVANCED_FILTERS, True)),
            (DashboardAction.SET_LINK_SUBSCRIPTION_DATA, 'parent@example.com'),
            (DashboardAction.SET_VERIFY_BANK_DATA, {'payment_intent_id': 'pi_1', 'parent_email': 'p@x.com'}),
        )
        self.assertTrue(state.is_delete_dialog_open)
        self.assertTrue(state.show_advanced_filters)
        self.assertFalse(state.is_link_subscription_dialog_open)
        self.assertEqual(state.link_subscription_parent_email, 'parent@example.com')
        self.assertEqual(state.verify_bank_data, VerifyBankData('pi_1', 'p@x.com'))

        state = dashboard_reducer(state, Action(DashboardAction.SET_DIALOG_OPEN, (DashboardDialog.DELETE, False)))
        self.assertFalse(state.is_delete_dialog_open)

    def test_verify_bank_data_is_immutable(self):
        data = VerifyBankData(payment_intent_id='pi_2', parent_email='p@x.com')
        state = dashboard_reducer(self.state, Action(DashboardAction.SET_VERIFY_BANK_DATA, data))
        self.assertIs(state.verify_bank_data, data)
        self.assertEqual(hash(state), hash(replace(state)))
        with self.assertRaises(FrozenInstanceError):
            state.verify_bank_data.parent_email = 'other@x.com'

        state = dashboard_reducer(state, Action(DashboardAction.SET_VERIFY_BANK_DATA, None))
        self.assertIsNone(state.verify_bank_data)

    def test_unknown_dialog(self):
        with self.assertRaises(ValueError):
            dashboard_reducer(self.state, Action(DashboardAction.SET_DIALOG_OPEN, ('export', True)))

    def test_reset(self):
        state = dispatch(
            dashboard_reducer, self.state,
            (DashboardAction.SET_ACTIVE_TAB, Tab.PAUSED),
            (DashboardAction.RESET, None),
        )
        self.assertEqual(state, DashboardUIState())

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            dashboard_reducer(self.state, Action('explode'))


class SheetReducerTests(SimpleTestCase):

    def setUp(self):
        self.state = SheetUIState()

    def test_edit_parent_open_and_close(self):
        state = sheet_reducer(self.state, Action(SheetAction.OPEN_EDIT_PARENT, (2, True)))
        self.assertEqual(state.edit_parent_dialog, EditParentDialog(open=True, parent_number=2, is_adding=True))

        state = sheet_reducer(state, Action(SheetAction.CLOSE_EDIT_PARENT))
        self.assertEqual(state.edit_parent_dialog, EditParentDialog(open=False, parent_number=2, is_adding=True))

    def test_edit_parent_number_validated(self):
        with self.assertRaises(ValueError):
            sheet_reducer(self.state, Action(SheetAction.OPEN_EDIT_PARENT, (3, False)))

    def test_edit_child_keeps_student_on_close(self):
        state = sheet_reducer(self.state, Action(SheetAction.OPEN_EDIT_CHILD, 'reg-7'))
        self.assertTrue(state.edit_child_dialog.open)
        state = sheet_reducer(state, Action(SheetAction.CLOSE_EDIT_CHILD))
        self.assertFalse(state.edit_child_dialog.open)
        self.assertEqual(state.edit_child_dialog.student_id, 'reg-7')

    def test_dialog_flags(self):
        state = sheet_reducer(self.state, Action(SheetAction.SET_DIALOG, (SheetDialog.WITHDRAW_FAMILY, True)))
        self.assertTrue(state.withdraw_family_dialog)
        self.assertFalse(state.add_child_dialog)

        with self.assertRaises(ValueError):
            sheet_reducer(self.state, Action(SheetAction.SET_DIALOG, ('refund', True)))

    def test_shift_change_flow(self):
        pending = PendingShift(new_shift=Shift.AFTERNOON, previous_shift=Shift.MORNING)
        state = dispatch(
            sheet_reducer, self.state,
            (SheetAction.SET_SHIFT_POPOVER, True),
            (SheetAction.SET_PENDING_SHIFT, pending),
            (SheetAction.SET_SHIFT_POPOVER, False),
        )
        self.assertFalse(state.shift_popover)
        self.assertEqual(state.pending_shift, pending)

        state = sheet_reducer(state, Action(SheetAction.SET_PENDING_SHIFT, None))
        self.assertIsNone(state.pending_shift)

    def test_tabs_and_reset(self):
        state = sheet_reducer(self.state, Action(SheetAction.SET_ACTIVE_TAB, SheetTab.BILLING))
        self.assertEqual(state.active_tab, SheetTab.BILLING)
        self.assertEqual(sheet_reducer(state, Action(SheetAction.RESET)), SheetUIState())

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            sheet_reducer(self.state, Action('explode'))
