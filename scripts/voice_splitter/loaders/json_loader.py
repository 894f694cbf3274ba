"""Load a Score from a JSON note list."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from ..model import TICKS_PER_BEAT, Note, Score, Track


def _parse_note(note_data: dict, voice_name: str, channel: int) -> Note:
    """Parse a single note dict."""
    try:
        return Note(
            pitch=int(note_data["pitch"]),
            velocity=int(note_data.get("velocity", 80)),
            start_tick=int(note_data["start_tick"]),
            duration=int(note_data.get("duration", 0)),
            voice=voice_name,
            channel=channel,
        )
    except KeyError as exc:
        raise ValueError(f"note in track {voice_name!r} is missing {exc.args[0]!r}") from exc
    except TypeError as exc:
        raise ValueError(f"note in track {voice_name!r} has a non-numeric field: {exc}") from exc


def load_json(source: Union[str, Path, dict]) -> Score:
    """Load a Score from a JSON file or pre-parsed dict.

    The document holds ``"tracks"``, each with a ``"name"`` and a list of
    ``"notes"`` (``pitch``, ``start_tick``, ``duration``, optional
    ``velocity``).  Each track is one gold-standard voice.

    Args:
        source: File path (str or Path) or already-parsed dict.

    Returns:
        A Score with one Track per JSON track.
    """
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        with open(path) as fh:
            data = json.load(fh)

    tracks: List[Track] = []
    for idx, track_data in enumerate(data.get("tracks", [])):
        name = track_data.get("name", f"voice_{idx}")
        channel = track_data.get("channel", idx)
        program = track_data.get("program", 0)
        notes = [
            _parse_note(nd, name, channel)
            for nd in track_data.get("notes", [])
        ]
        tracks.append(Track(name=name, channel=channel, program=program, notes=notes))

    source_file = "" if isinstance(source, dict) else str(source)

    return Score(
        tracks=tracks,
        ticks_per_beat=data.get("ticks_per_beat", TICKS_PER_BEAT),
        source_file=source_file,
    )
