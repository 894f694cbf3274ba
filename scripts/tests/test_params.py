"""Tests for splitter parameters and presets."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scripts.voice_splitter.params import (
    SplitterParameters,
    all_preset_names,
    get_parameters,
    load_parameters,
)


class TestValidation(unittest.TestCase):
    def test_defaults_valid(self):
        p = SplitterParameters()
        self.assertEqual(p.beam_size, 2)
        self.assertTrue(p.allows_new_voices)

    def test_new_voice_probability_range(self):
        with self.assertRaises(ValueError):
            SplitterParameters(new_voice_probability=0.0)
        with self.assertRaises(ValueError):
            SplitterParameters(new_voice_probability=1.5)
        SplitterParameters(new_voice_probability=1.0)

    def test_beam_size(self):
        with self.assertRaises(ValueError):
            SplitterParameters(beam_size=0)
        with self.assertRaises(ValueError):
            SplitterParameters(beam_size=2.5)

    def test_zero_voice_cap_allowed(self):
        self.assertFalse(SplitterParameters(max_voices=0).allows_new_voices)
        self.assertFalse(SplitterParameters(max_voices=-1).allows_new_voices)

    def test_model_parameters(self):
        for bad in (
            {"pitch_std": 0},
            {"gap_std": -1},
            {"pitch_history_length": 0},
            {"min_gap_score": 0},
            {"max_overlap_ratio": 1.0},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    SplitterParameters(**bad)

    def test_rejects_non_numbers(self):
        for bad in (
            {"pitch_std": "4"},
            {"gap_std": None},
            {"max_voices": True},
            {"pitch_history_length": 6.0},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    SplitterParameters(**bad)

    def test_rejects_non_finite(self):
        for bad in (
            {"pitch_std": float("nan")},
            {"gap_std": float("nan")},
            {"gap_std": float("inf")},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    SplitterParameters(**bad)

    def test_immutable(self):
        p = SplitterParameters()
        with self.assertRaises(AttributeError):
            p.beam_size = 3


class TestOverrides(unittest.TestCase):
    def test_with_overrides_ignores_none(self):
        p = SplitterParameters()
        self.assertIs(p.with_overrides(beam_size=None), p)
        q = p.with_overrides(beam_size=7, max_voices=None)
        self.assertEqual(q.beam_size, 7)
        self.assertEqual(q.max_voices, p.max_voices)

    def test_with_overrides_validates(self):
        with self.assertRaises(ValueError):
            SplitterParameters().with_overrides(beam_size=0)

    def test_sort_key_distinguishes(self):
        a = SplitterParameters(beam_size=1).sort_key()
        b = SplitterParameters(beam_size=2).sort_key()
        self.assertLess(a, b)

    def test_to_dict(self):
        d = SplitterParameters().to_dict()
        self.assertEqual(d["beam_size"], 2)
        self.assertIn("max_overlap_ratio", d)


class TestPresets(unittest.TestCase):
    def test_registry(self):
        names = all_preset_names()
        for name in ("default", "strict", "tolerant", "wide_beam"):
            self.assertIn(name, names)

    def test_lookup(self):
        self.assertEqual(get_parameters("strict").beam_size, 1)
        self.assertEqual(get_parameters("tolerant").max_overlap_ratio, 0.5)

    def test_unknown(self):
        with self.assertRaises(KeyError):
            get_parameters("nope")


class TestLoadParameters(unittest.TestCase):
    def test_from_dict(self):
        p = load_parameters({"preset": "wide_beam", "max_voices": 4})
        self.assertEqual(p.beam_size, 25)
        self.assertEqual(p.max_voices, 4)

    def test_from_file(self):
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as f:
            json.dump({"beam_size": 3, "pitch_std": 6.0}, f)
            tmp_path = Path(f.name)
        try:
            p = load_parameters(tmp_path)
            self.assertEqual(p.beam_size, 3)
            self.assertEqual(p.pitch_std, 6.0)
        finally:
            tmp_path.unlink()

    def test_unknown_key(self):
        with self.assertRaises(ValueError):
            load_parameters({"beam": 3})

    def test_not_an_object(self):
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as f:
            json.dump([1, 2], f)
            tmp_path = Path(f.name)
        try:
            with self.assertRaises(ValueError):
                load_parameters(tmp_path)
        finally:
            tmp_path.unlink()

    def test_string_value_is_value_error(self):
        with self.assertRaises(ValueError):
            load_parameters({"pitch_std": "4"})

    def test_nan_from_file(self):
        with tempfile.NamedTemporaryFile(suffix=".json", mode="w", delete=False) as f:
            f.write('{"gap_std": NaN}')
            tmp_path = Path(f.name)
        try:
            with self.assertRaises(ValueError):
                load_parameters(tmp_path)
        finally:
            tmp_path.unlink()

    def test_preset_must_be_string(self):
        with self.assertRaises(ValueError):
            load_parameters({"preset": 3})

    def test_dict_not_mutated(self):
        data = {"preset": "strict"}
        load_parameters(data)
        self.assertEqual(data, {"preset": "strict"})


if __name__ == "__main__":
    unittest.main()
