"""Tests for MIDI loader."""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scripts.voice_splitter.loaders.midi_loader import load_midi


def _msg(type_, time, channel=0, note=60, velocity=80, program=0):
    return MagicMock(
        type=type_, time=time, channel=channel, note=note,
        velocity=velocity, program=program,
    )


def _track(msgs):
    track = MagicMock()
    track.__iter__ = lambda self: iter(msgs)
    return track


class TestMidiLoader(unittest.TestCase):
    """Test MIDI loading with a mocked mido module."""

    def _make_mock_midi(self):
        """Two tracks: soprano on ch0, a held bass on ch3, drums on ch9."""
        soprano = _track([
            _msg("program_change", 0, channel=0, program=19),
            _msg("note_on", 0, channel=0, note=72),
            _msg("note_off", 480, channel=0, note=72, velocity=0),
            _msg("note_on", 0, channel=0, note=74),
            _msg("note_on", 480, channel=0, note=74, velocity=0),
        ])
        bass = _track([
            _msg("note_on", 0, channel=3, note=48, velocity=90),
            _msg("note_on", 0, channel=9, note=36),
            _msg("note_off", 120, channel=9, note=36),
            _msg("note_off", 840, channel=3, note=48),
        ])
        mock_midi = MagicMock()
        mock_midi.tracks = [soprano, bass]
        mock_midi.ticks_per_beat = 480
        return mock_midi

    def _load(self):
        mock_mido = MagicMock()
        mock_mido.MidiFile.return_value = self._make_mock_midi()
        with patch.dict("sys.modules", {"mido": mock_mido}):
            return load_midi("/fake/path.mid")

    def test_tracks_per_track_and_channel(self):
        score = self._load()
        names = [t.name for t in score.tracks]
        self.assertEqual(names, ["track_0_ch_0", "track_1_ch_3"])

    def test_note_timing(self):
        score = self._load()
        soprano = score.tracks[0].notes
        self.assertEqual([(n.pitch, n.start_tick, n.duration) for n in soprano],
                         [(72, 0, 480), (74, 480, 480)])
        bass = score.tracks[1].notes
        self.assertEqual([(n.pitch, n.start_tick, n.duration) for n in bass], [(48, 0, 960)])

    def test_velocity_from_note_on(self):
        score = self._load()
        self.assertEqual(score.tracks[1].notes[0].velocity, 90)

    def test_metadata(self):
        score = self._load()
        self.assertEqual(score.ticks_per_beat, 480)
        self.assertEqual(score.source_file, "/fake/path.mid")
        self.assertEqual(score.tracks[0].program, 19)

    def test_program_scoped_to_track(self):
        first = _track([
            _msg("note_on", 0, channel=0, note=72),
            _msg("note_off", 480, channel=0, note=72),
        ])
        second = _track([
            _msg("program_change", 0, channel=0, program=40),
            _msg("note_on", 0, channel=0, note=48),
            _msg("note_off", 480, channel=0, note=48),
        ])
        mock_midi = MagicMock()
        mock_midi.tracks = [first, second]
        mock_midi.ticks_per_beat = 480
        mock_mido = MagicMock()
        mock_mido.MidiFile.return_value = mock_midi
        with patch.dict("sys.modules", {"mido": mock_mido}):
            score = load_midi("/fake/path.mid")
        self.assertEqual([t.program for t in score.tracks], [0, 40])

    def test_gold_voice_label(self):
        score = self._load()
        for track in score.tracks:
            for n in track.notes:
                self.assertEqual(n.voice, track.name)

    def test_import_error(self):
        """Ensure ImportError when mido is not available."""
        with patch.dict("sys.modules", {"mido": None}):
            with self.assertRaises(ImportError):
                load_midi("/fake/path.mid")


if __name__ == "__main__":
    unittest.main()
