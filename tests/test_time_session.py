from __future__ import annotations

import sys
import unittest
from datetime import date, datetime, time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.time_engine import ClockConvention, TimeRange
from core.time_session import (
    Blur,
    ExternalValue,
    PickerOptions,
    PickSuggestion,
    RawInput,
    SessionSnapshot,
    SessionState,
    TimeInputController,
    ValidityClass,
    reduce_session,
)

DAY = date(2024, 3, 14)


def at(hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(2024, 3, 14, hour, minute, second)


def fixed_clock() -> datetime:
    return at(8, 0)


class ReduceSessionTest(unittest.TestCase):
    def setUp(self) -> None:
        self.options = PickerOptions()

    def test_raw_input_masks_and_opens_drop_down(self) -> None:
        step = reduce_session(SessionSnapshot(), RawInput("945a"), self.options, DAY)
        self.assertEqual(step.snapshot.draft, "09:45 A")
        self.assertTrue(step.snapshot.drop_down_open)
        self.assertFalse(step.commit)

    def test_rejected_input_is_a_no_op(self) -> None:
        before = SessionSnapshot(draft="09")
        step = reduce_session(before, RawInput("09x"), self.options, DAY)
        self.assertIs(step.snapshot, before)

    def test_blur_with_valid_text_commits(self) -> None:
        before = SessionSnapshot(draft="09:45 AM", drop_down_open=True)
        step = reduce_session(before, Blur(), self.options, DAY)
        self.assertTrue(step.commit)
        self.assertEqual(step.value, at(9, 45))
        self.assertFalse(step.snapshot.drop_down_open)

    def test_external_value_overwrites_draft(self) -> None:
        before = SessionSnapshot(draft="11:1")
        step = reduce_session(before, ExternalValue(at(21, 30)), self.options, DAY)
        self.assertEqual(step.snapshot.draft, "09:30 PM")
        self.assertEqual(step.snapshot.committed, at(21, 30))

    def test_pick_forces_seconds_to_zero(self) -> None:
        step = reduce_session(SessionSnapshot(), PickSuggestion(at(10, 30, 42)), self.options, DAY)
        self.assertTrue(step.commit)
        self.assertEqual(step.value, at(10, 30))
        self.assertEqual(step.snapshot.draft, "10:30 AM")

    def test_unknown_event_raises(self) -> None:
        with self.assertRaises(TypeError):
            reduce_session(SessionSnapshot(), object(), self.options, DAY)  # type: ignore[arg-type]


class TimeInputControllerTest(unittest.TestCase):
    def _make(self, **kwargs) -> tuple[TimeInputController, list]:
        changes: list = []
        controller = TimeInputController(on_change=changes.append, clock=fixed_clock, **kwargs)
        return controller, changes

    def test_starts_empty_and_hidden(self) -> None:
        controller, changes = self._make()
        self.assertEqual(controller.display_text, "")
        self.assertEqual(controller.state, SessionState.EMPTY)
        self.assertFalse(controller.is_drop_down_visible)
        self.assertEqual(controller.validity_class, ValidityClass.NEUTRAL)
        self.assertEqual(changes, [])

    def test_typing_then_blur_commits_once(self) -> None:
        controller, changes = self._make()
        controller.on_raw_input("945am")
        self.assertEqual(controller.display_text, "09:45 AM")
        self.assertTrue(controller.is_drop_down_visible)
        self.assertEqual(controller.state, SessionState.TYPING)
        self.assertEqual(controller.validity_class, ValidityClass.VALID)

        controller.on_blur()
        self.assertEqual(changes, [at(9, 45)])
        self.assertFalse(controller.is_drop_down_visible)

        # Host echoes the value back; a second blur has nothing new to commit.
        controller.set_value(changes[-1])
        self.assertEqual(controller.state, SessionState.COMMITTED)
        controller.on_blur()
        self.assertEqual(changes, [at(9, 45)])

    def test_malformed_input_reverts_to_committed_value(self) -> None:
        controller, changes = self._make(value=at(9, 30))
        self.assertEqual(controller.display_text, "09:30 AM")

        controller.on_raw_input("1")
        self.assertEqual(controller.display_text, "1")
        controller.on_raw_input("1x")
        self.assertEqual(controller.display_text, "1")

        controller.on_blur()
        self.assertEqual(controller.display_text, "09:30 AM")
        self.assertEqual(changes, [])

    def test_out_of_range_text_is_flagged_and_reverted(self) -> None:
        controller, changes = self._make(time_range=TimeRange(time(10, 0), time(17, 0)))
        controller.on_raw_input("0600pm")
        self.assertEqual(controller.display_text, "06:00 PM")
        self.assertEqual(controller.validity_class, ValidityClass.INVALID)

        controller.on_click_outside()
        self.assertEqual(controller.display_text, "")
        self.assertEqual(changes, [])

    def test_partial_text_is_neutral(self) -> None:
        controller, _ = self._make()
        controller.on_raw_input("09:4")
        self.assertEqual(controller.validity_class, ValidityClass.NEUTRAL)

    def test_clearing_text_commits_none_once(self) -> None:
        controller, changes = self._make(value=at(9, 30))
        controller.on_raw_input("")
        controller.on_blur()
        self.assertEqual(changes, [None])

        controller.set_value(None)
        controller.on_blur()
        self.assertEqual(changes, [None])

    def test_picking_current_value_does_not_commit(self) -> None:
        controller, changes = self._make(value=at(9, 30))
        controller.on_focus_affordance()
        self.assertTrue(controller.is_drop_down_visible)

        controller.on_pick_suggestion(at(9, 30, 15))
        self.assertEqual(changes, [])
        self.assertFalse(controller.is_drop_down_visible)

    def test_picking_new_value_commits(self) -> None:
        controller, changes = self._make(value=at(9, 30))
        committed: list = []
        controller.value_committed.connect(committed.append)
        controller.on_pick_suggestion(at(11, 0))
        self.assertEqual(changes, [at(11, 0)])
        self.assertEqual(committed, [at(11, 0)])
        self.assertEqual(controller.display_text, "11:00 AM")

    def test_focus_affordance_keeps_text(self) -> None:
        controller, _ = self._make()
        controller.on_raw_input("07")
        controller.on_blur()
        controller.on_focus_affordance()
        self.assertEqual(controller.display_text, "")
        self.assertTrue(controller.is_drop_down_visible)

    def test_suggestions_follow_the_draft(self) -> None:
        controller, _ = self._make(time_range=TimeRange(time(6, 0), time(20, 0)))
        self.assertEqual(controller.suggestions[0], at(8, 0))

        controller.on_raw_input("0215p")
        self.assertEqual(controller.suggestions[0], at(14, 30))
        self.assertEqual(controller.suggestions[-1], at(20, 0))

    def test_drop_down_hidden_without_suggestions(self) -> None:
        controller, _ = self._make(time_range=TimeRange(time(17, 0), time(10, 0)))
        controller.on_focus_affordance()
        self.assertTrue(controller.snapshot.drop_down_open)
        self.assertEqual(controller.suggestions, [])
        self.assertFalse(controller.is_drop_down_visible)

    def test_convention_change_resyncs_text(self) -> None:
        controller, _ = self._make(value=at(21, 30))
        self.assertEqual(controller.display_text, "09:30 PM")
        texts: list[str] = []
        controller.display_text_changed.connect(texts.append)

        controller.set_convention(ClockConvention.TWENTY_FOUR_HOUR)
        self.assertEqual(controller.display_text, "21:30")
        self.assertEqual(texts, ["21:30"])
        self.assertEqual(controller.placeholder_text, "08:00")

    def test_external_value_overrides_typing(self) -> None:
        controller, _ = self._make()
        controller.on_raw_input("11:1")
        controller.set_value(at(15, 0))
        self.assertEqual(controller.display_text, "03:00 PM")
        self.assertEqual(controller.state, SessionState.COMMITTED)

    def test_state_changes_are_signalled(self) -> None:
        controller, _ = self._make()
        transitions: list[tuple] = []
        controller.state_changed.connect(lambda old, new: transitions.append((old, new)))
        controller.on_raw_input("9")
        controller.set_value(at(9, 0))
        self.assertEqual(
            transitions,
            [
                (SessionState.EMPTY, SessionState.TYPING),
                (SessionState.TYPING, SessionState.COMMITTED),
            ],
        )

    def test_invalid_interval_raises(self) -> None:
        with self.assertRaises(ValueError):
            TimeInputController(interval_minutes=0)


if __name__ == "__main__":
    unittest.main()
