"""Load Score from a standard MIDI file using mido."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple, Union

from ..model import Note, Score, Track

# Channel 10 (index 9) is percussion and carries no pitched voice.
_DRUM_CHANNEL = 9


def _voice_name(track_index: int, channel: int) -> str:
    return f"track_{track_index}_ch_{channel}"


def load_midi(source: Union[str, Path]) -> Score:
    """Load a Score from a .mid file.

    Requires the ``mido`` package.  Every (track, channel) pair that holds
    notes becomes one gold-standard voice.

    Args:
        source: Path to a .mid file.

    Returns:
        A Score with one Track per (track, channel) pair, drums excluded.
    """
    try:
        import mido
    except ImportError as exc:
        raise ImportError(
            "mido is required for MIDI loading. Install with: pip install mido"
        ) from exc

    mid = mido.MidiFile(str(source))

    voice_notes: Dict[Tuple[int, int], List[Note]] = {}
    programs: Dict[Tuple[int, int], int] = {}

    for track_index, track in enumerate(mid.tracks):
        abs_tick = 0
        # (channel, pitch) -> [(start_tick, velocity), ...] for stacked note-ons
        pending: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
        for msg in track:
            abs_tick += msg.time
            if msg.type == "program_change":
                programs[(track_index, msg.channel)] = msg.program
            elif msg.type == "note_on" and msg.velocity > 0:
                pending.setdefault((msg.channel, msg.note), []).append(
                    (abs_tick, msg.velocity)
                )
            elif msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
                starts = pending.get((msg.channel, msg.note))
                if not starts:
                    continue
                start, velocity = starts.pop(0)
                if msg.channel == _DRUM_CHANNEL or abs_tick <= start:
                    continue
                key = (track_index, msg.channel)
                voice_notes.setdefault(key, []).append(
                    Note(
                        pitch=msg.note,
                        velocity=velocity,
                        start_tick=start,
                        duration=abs_tick - start,
                        voice=_voice_name(track_index, msg.channel),
                        channel=msg.channel,
                    )
                )

    tracks: List[Track] = []
    for key in sorted(voice_notes):
        track_index, channel = key
        tracks.append(
            Track(
                name=_voice_name(track_index, channel),
                channel=channel,
                program=programs.get(key, 0),
                notes=sorted(voice_notes[key], key=lambda n: (n.start_tick, n.pitch)),
            )
        )

    return Score(
        tracks=tracks,
        ticks_per_beat=mid.ticks_per_beat,
        source_file=str(source),
    )
