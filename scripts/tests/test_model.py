"""Tests for the note data model."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scripts.voice_splitter.model import (
    Note,
    Score,
    TICKS_PER_BEAT,
    Track,
    group_by_onset,
    pitch_to_name,
)


class TestNote(unittest.TestCase):
    def test_end_tick(self):
        n = Note(pitch=60, velocity=80, start_tick=480, duration=240)
        self.assertEqual(n.end_tick, 720)

    def test_note_name(self):
        self.assertEqual(Note(pitch=60, velocity=80, start_tick=0, duration=1).note_name, "C4")

    def test_identity_equality(self):
        a = Note(pitch=60, velocity=80, start_tick=0, duration=480)
        b = Note(pitch=60, velocity=80, start_tick=0, duration=480)
        self.assertNotEqual(a, b)
        self.assertEqual(a, a)
        self.assertEqual(len({a, b}), 2)

    def test_frozen(self):
        n = Note(pitch=60, velocity=80, start_tick=0, duration=480)
        with self.assertRaises(AttributeError):
            n.pitch = 61

    def test_sort_key(self):
        n = Note(pitch=62, velocity=90, start_tick=10, duration=20)
        self.assertEqual(n.sort_key, (10, 62, 20, 90))


class TestScore(unittest.TestCase):
    def setUp(self):
        self.upper = Track(name="upper", notes=[
            Note(pitch=72, velocity=80, start_tick=480, duration=480, voice="upper"),
            Note(pitch=71, velocity=80, start_tick=0, duration=480, voice="upper"),
        ])
        self.lower = Track(name="lower", notes=[
            Note(pitch=48, velocity=80, start_tick=0, duration=960, voice="lower"),
        ])
        self.score = Score(tracks=[self.upper, self.lower])

    def test_all_notes_sorted(self):
        self.assertEqual([n.pitch for n in self.score.all_notes], [48, 71, 72])

    def test_counts(self):
        self.assertEqual(self.score.num_voices, 2)
        self.assertEqual(self.score.total_notes, 3)
        self.assertEqual(self.score.ticks_per_beat, TICKS_PER_BEAT)

    def test_track_sorted_notes(self):
        self.assertEqual([n.pitch for n in self.upper.sorted_notes], [71, 72])

    def test_empty_score(self):
        self.assertEqual(Score().all_notes, [])
        self.assertEqual(Score().total_notes, 0)


class TestGroupByOnset(unittest.TestCase):
    def test_batches_chronological_and_pitch_sorted(self):
        notes = [
            Note(pitch=64, velocity=80, start_tick=480, duration=480),
            Note(pitch=72, velocity=80, start_tick=0, duration=480),
            Note(pitch=48, velocity=80, start_tick=0, duration=480),
        ]
        batches = group_by_onset(notes)
        self.assertEqual(len(batches), 2)
        self.assertEqual([n.pitch for n in batches[0]], [48, 72])
        self.assertEqual([n.pitch for n in batches[1]], [64])

    def test_empty(self):
        self.assertEqual(group_by_onset([]), [])


class TestPitchToName(unittest.TestCase):
    def test_names(self):
        self.assertEqual(pitch_to_name(69), "A4")
        self.assertEqual(pitch_to_name(61), "C#4")
        self.assertEqual(pitch_to_name(0), "C-1")


if __name__ == "__main__":
    unittest.main()
