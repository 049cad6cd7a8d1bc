from __future__ import annotations

import importlib.util
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.time_engine import ClockConvention, mask_time_input

H12 = ClockConvention.TWELVE_HOUR
H24 = ClockConvention.TWENTY_FOUR_HOUR


def _type_progressively(keys: str, convention: ClockConvention) -> str:
    text = ""
    for key in keys:
        masked = mask_time_input(text + key, convention)
        if masked is not None:
            text = masked
    return text


class MaskTwelveHourTest(unittest.TestCase):
    def test_unpunctuated_input_is_masked(self) -> None:
        self.assertEqual(mask_time_input("945a", H12), "09:45 A")
        self.assertEqual(mask_time_input("945am", H12), "09:45 AM")
        self.assertEqual(mask_time_input("1230pm", H12), "12:30 PM")

    def test_separators_and_case_are_normalized(self) -> None:
        self.assertEqual(mask_time_input("9 45 a", H12), mask_time_input("9:45a", H12))
        self.assertEqual(mask_time_input("  09:45 pm ", H12), "09:45 PM")

    def test_leading_hour_digit_is_padded(self) -> None:
        self.assertEqual(mask_time_input("3", H12), "03")
        self.assertEqual(mask_time_input("2", H12), "02")
        self.assertEqual(mask_time_input("1", H12), "1")
        self.assertEqual(mask_time_input("0", H12), "0")

    def test_hour_zero_and_overflow_are_clamped(self) -> None:
        self.assertEqual(mask_time_input("00", H12), "01")
        self.assertEqual(mask_time_input("13", H12), "12")
        self.assertEqual(mask_time_input("19", H12), "12")

    def test_minute_padding_and_clamping(self) -> None:
        self.assertEqual(mask_time_input("097", H12), "09:07")
        self.assertEqual(mask_time_input("0959", H12), "09:59")
        self.assertEqual(mask_time_input("094", H12), "09:4")
        self.assertEqual(mask_time_input("0900", H12), "09:00")

    def test_meridiem_rules(self) -> None:
        self.assertEqual(mask_time_input("0945X", H12), "09:45")
        self.assertEqual(mask_time_input("0945P", H12), "09:45 P")
        self.assertEqual(mask_time_input("0945PX", H12), "09:45 P")
        self.assertEqual(mask_time_input("0945pm", H12), "09:45 PM")

    def test_non_digit_in_hour_or_minute_is_rejected(self) -> None:
        self.assertIsNone(mask_time_input("a", H12))
        self.assertIsNone(mask_time_input("1a", H12))
        self.assertIsNone(mask_time_input("09a", H12))
        self.assertIsNone(mask_time_input("09:4x", H12))

    def test_embedded_newline_is_rejected(self) -> None:
        self.assertIsNone(mask_time_input("123\n4", H12))
        self.assertIsNone(mask_time_input("09\n45", H24))
        self.assertEqual(mask_time_input("123\n", H12), "12:3")

    def test_empty_input(self) -> None:
        self.assertEqual(mask_time_input("", H12), "")
        self.assertEqual(mask_time_input("   ", H12), "")

    def test_progressive_typing_matches_direct_mask(self) -> None:
        self.assertEqual(_type_progressively("945am", H12), "09:45 AM")
        self.assertEqual(_type_progressively("9x45a", H12), "09:45 A")


class MaskTwentyFourHourTest(unittest.TestCase):
    def test_overflowing_hour_is_clamped(self) -> None:
        self.assertEqual(mask_time_input("2500", H24), "23:00")

    def test_hour_zero_is_kept(self) -> None:
        self.assertEqual(mask_time_input("00", H24), "00")
        self.assertEqual(mask_time_input("0030", H24), "00:30")

    def test_leading_digit_threshold(self) -> None:
        self.assertEqual(mask_time_input("2", H24), "2")
        self.assertEqual(mask_time_input("3", H24), "03")
        self.assertEqual(mask_time_input("745", H24), "07:45")

    def test_meridiem_never_appears(self) -> None:
        self.assertEqual(mask_time_input("0945am", H24), "09:45")


class MaskIdempotenceTest(unittest.TestCase):
    SAMPLES = ["", "1", "3", "00", "13", "945a", "945am", "0959", "097", "1230pm", "0945PX", "2500", "745", "123\n4", "123\n"]

    def test_masking_its_own_output_is_stable(self) -> None:
        for convention in (H12, H24):
            for raw in self.SAMPLES:
                masked = mask_time_input(raw, convention)
                if masked is None:
                    continue
                with self.subTest(raw=raw, convention=convention):
                    self.assertEqual(mask_time_input(masked, convention), masked)


class ModuleLoadTest(unittest.TestCase):
    def test_module_loads_from_a_clean_interpreter_state(self) -> None:
        name = "time_engine_clean_load"
        spec = importlib.util.spec_from_file_location(name, ROOT / "src" / "core" / "time_engine.py")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        finally:
            sys.modules.pop(name, None)
        self.assertIsNone(module.UNBOUNDED.min_time)
        self.assertIsNone(module.UNBOUNDED.max_time)


if __name__ == "__main__":
    unittest.main()
