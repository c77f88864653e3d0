"""Tests for the wizard step registry and navigator.

Tests cover:
1. Registry construction (order, duplicates, empty)
2. Initial state resolution
3. Bounded navigation and change notifications
4. Progress and derived display values
5. Re-entrant navigation from the change callback
"""
import os
import sys
import unittest
from unittest.mock import Mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from creditdesk.data_structures import Step, WizardState
from creditdesk.exceptions import EmptyStepRegistryError, DuplicateStepError, WizardError
from creditdesk.wizard import (
    StepRegistry, WizardNavigator, default_credit_steps,
    STATUS_DONE, STATUS_CURRENT, STATUS_PENDING
)


def make_steps(count):
    return [Step(id=f"s{i}", title=f"Step {i}") for i in range(count)]


class TestStepRegistry(unittest.TestCase):

    def test_order_preserved(self):
        registry = StepRegistry(make_steps(3))
        self.assertEqual(registry.ids, ["s0", "s1", "s2"])
        self.assertEqual(len(registry), 3)
        self.assertEqual(registry[1].title, "Step 1")

    def test_index_of(self):
        registry = StepRegistry(make_steps(3))
        self.assertEqual(registry.index_of("s2"), 2)
        self.assertEqual(registry.index_of("missing"), -1)
        self.assertEqual(registry.index_of(None), -1)
        self.assertIn("s0", registry)
        self.assertNotIn("missing", registry)

    def test_empty_rejected(self):
        with self.assertRaises(EmptyStepRegistryError):
            StepRegistry([])

    def test_duplicate_rejected(self):
        steps = [Step(id="a", title="A"), Step(id="a", title="A again")]
        with self.assertRaises(DuplicateStepError) as ctx:
            StepRegistry(steps)
        self.assertEqual(ctx.exception.details['step_id'], "a")
        self.assertIsInstance(ctx.exception, WizardError)

    def test_source_list_changes_do_not_leak(self):
        steps = make_steps(2)
        registry = StepRegistry(steps)
        steps.append(Step(id="extra", title="Extra"))
        self.assertEqual(len(registry), 2)

    def test_default_credit_steps(self):
        content = Mock()
        registry = default_credit_steps(icons={"prod": "$"}, contents={"prod": content})
        self.assertEqual(registry.ids, ["info", "codeu", "prod", "firm", "supp"])
        self.assertEqual(registry[2].title, "Información del producto")
        self.assertEqual(registry[2].icon, "$")
        self.assertIs(registry[2].content, content)
        self.assertIsNone(registry[0].content)


class TestInitialState(unittest.TestCase):

    def test_defaults_to_first_step(self):
        nav = WizardNavigator(make_steps(5))
        self.assertEqual(nav.active_index, 0)
        self.assertEqual(nav.active_id, "s0")
        self.assertTrue(nav.is_first)
        self.assertFalse(nav.is_last)
        self.assertEqual(nav.progress_percent, 0)

    def test_initial_step_id(self):
        """Third step of five: middle of the wizard."""
        nav = WizardNavigator(make_steps(5), initial_step_id="s2")
        self.assertEqual(nav.active_index, 2)
        self.assertFalse(nav.is_first)
        self.assertFalse(nav.is_last)
        self.assertEqual(nav.progress_percent, 50)
        self.assertEqual(nav.state, WizardState(active_id="s2", active_index=2))

    def test_unknown_initial_id_falls_back(self):
        nav = WizardNavigator(make_steps(5), initial_step_id="nope")
        self.assertEqual(nav.active_index, 0)
        self.assertEqual(nav.active_id, "s0")

    def test_accepts_registry(self):
        registry = StepRegistry(make_steps(2))
        nav = WizardNavigator(registry)
        self.assertIs(nav.registry, registry)

    def test_empty_steps_fail_fast(self):
        with self.assertRaises(EmptyStepRegistryError):
            WizardNavigator([])

    def test_no_notification_on_construction(self):
        callback = Mock()
        WizardNavigator(make_steps(3), initial_step_id="s1", on_step_changed=callback)
        callback.assert_not_called()


class TestNavigation(unittest.TestCase):

    def setUp(self):
        self.callback = Mock()
        self.nav = WizardNavigator(make_steps(5), on_step_changed=self.callback)

    def test_go_to(self):
        self.nav.go_to(3)
        self.assertEqual(self.nav.active_index, 3)
        self.assertEqual(self.nav.active_id, "s3")
        self.callback.assert_called_once_with("s3")

    def test_go_to_out_of_range_is_noop(self):
        self.nav.go_to(2)
        self.callback.reset_mock()
        for index in (-1, -10, 5, 99):
            with self.subTest(index=index):
                self.nav.go_to(index)
                self.assertEqual(self.nav.active_index, 2)
        self.callback.assert_not_called()

    def test_next_and_previous(self):
        self.nav.next()
        self.nav.next()
        self.assertEqual(self.nav.active_index, 2)
        self.nav.previous()
        self.assertEqual(self.nav.active_index, 1)
        self.assertEqual([c.args[0] for c in self.callback.call_args_list], ["s1", "s2", "s1"])

    def test_previous_at_first_is_noop(self):
        self.nav.previous()
        self.assertEqual(self.nav.active_index, 0)
        self.callback.assert_not_called()

    def test_next_at_last_is_noop(self):
        self.nav.go_to(4)
        self.callback.reset_mock()
        self.nav.next()
        self.assertEqual(self.nav.active_index, 4)
        self.assertTrue(self.nav.is_last)
        self.callback.assert_not_called()

    def test_first_and_last(self):
        self.nav.last()
        self.assertEqual(self.nav.active_index, 4)
        self.assertEqual(self.nav.progress_percent, 100)
        self.nav.first()
        self.assertEqual(self.nav.active_index, 0)
        self.assertEqual(self.nav.progress_percent, 0)

    def test_go_to_id(self):
        self.nav.go_to_id("s3")
        self.assertEqual(self.nav.active_index, 3)
        self.nav.go_to_id("unknown")
        self.assertEqual(self.nav.active_index, 3)

    def test_same_index_notifies(self):
        self.nav.go_to(0)
        self.callback.assert_called_once_with("s0")

    def test_progress_recomputed_each_step(self):
        expected = [0, 25, 50, 75, 100]
        for index, percent in enumerate(expected):
            self.nav.go_to(index)
            self.assertEqual(self.nav.progress_percent, percent)

    def test_progress_rounds_half_up(self):
        nav = WizardNavigator(make_steps(9), initial_step_id="s1")
        self.assertEqual(nav.progress_percent, 13)  # 12.5

    def test_step_status(self):
        self.nav.go_to(2)
        self.assertEqual(
            [self.nav.step_status(i) for i in range(5)],
            [STATUS_DONE, STATUS_DONE, STATUS_CURRENT, STATUS_PENDING, STATUS_PENDING]
        )

    def test_position_label(self):
        self.nav.go_to(1)
        self.assertEqual(self.nav.position_label, "Paso 2 de 5")
        self.assertEqual(self.nav.step_count, 5)

    def test_works_without_callback(self):
        nav = WizardNavigator(make_steps(3))
        nav.next()
        self.assertEqual(nav.active_id, "s1")


class TestSingleStep(unittest.TestCase):

    def test_single_step_is_static(self):
        callback = Mock()
        nav = WizardNavigator(make_steps(1), on_step_changed=callback)
        self.assertTrue(nav.is_first)
        self.assertTrue(nav.is_last)
        for move in (nav.next, nav.previous, nav.next, nav.last):
            move()
            self.assertEqual(nav.active_index, 0)
            self.assertEqual(nav.progress_percent, 0)


class TestReentrancy(unittest.TestCase):

    def test_navigation_from_callback_is_deferred(self):
        """A go_to issued by the callback runs after the current transition."""
        seen = []

        def on_change(step_id):
            seen.append((step_id, nav.active_id))
            if step_id == "s1":
                nav.next()
                # Still on s1 until this callback returns
                seen.append(("after-next", nav.active_id))

        nav = WizardNavigator(make_steps(4), on_step_changed=on_change)
        nav.next()

        self.assertEqual(nav.active_id, "s2")
        self.assertEqual(seen, [("s1", "s1"), ("after-next", "s1"), ("s2", "s2")])

    def test_callback_error_propagates_and_clears_queue(self):
        def on_change(step_id):
            nav.next()
            raise RuntimeError("boom")

        nav = WizardNavigator(make_steps(4), on_step_changed=on_change)
        with self.assertRaises(RuntimeError):
            nav.next()
        self.assertEqual(nav.active_index, 1)

        nav.on_step_changed = None
        nav.next()
        self.assertEqual(nav.active_index, 2)


if __name__ == '__main__':
    unittest.main()
