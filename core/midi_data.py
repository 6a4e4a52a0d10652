#!/usr/bin/env python3
"""
MIDI Data Model - semantic events and recorded tracks
Events are what the input source delivers; tracks own the recorded events
plus their offset on the shared timeline.
"""

import math
import uuid
import warnings
from typing import List, Optional, Iterable
from dataclasses import dataclass, replace
from enum import Enum

from .errors import InvalidEventRange

MIN_MIDI_VALUE = 0
MAX_MIDI_VALUE = 127


class EventType(Enum):
    """MIDI event types for internal representation"""
    NOTE_ON = "NoteOn"
    NOTE_OFF = "NoteOff"
    ELAPSED_TIME = "ElapsedTime"
    CONTROL_CHANGE = "ControlChange"


def _clamp_midi(value: int, what: str) -> int:
    clamped = max(MIN_MIDI_VALUE, min(MAX_MIDI_VALUE, int(value)))
    if clamped != value:
        warnings.warn(f"{what} {value} clamped to {clamped}", InvalidEventRange, stacklevel=4)
    return clamped


def _whole_millis(value) -> int:
    """Round half-up to whole milliseconds, never below zero"""
    millis = math.floor(value + 0.5)
    if millis < 0:
        warnings.warn(f"elapsed time {value} clamped to 0", InvalidEventRange, stacklevel=4)
        return 0
    return millis


@dataclass
class MidiEvent:
    """
    A single semantic MIDI event.
    `value` holds milliseconds for ELAPSED_TIME and the controller value
    for CONTROL_CHANGE; note events use `note`, `velocity` and `instrument`.
    """
    event_type: EventType
    note: int = 0                       # MIDI pitch (0-127)
    velocity: int = 0                   # Velocity (0-127)
    value: int = 0
    instrument: Optional[int] = None    # Index into the instrument table

    def __post_init__(self):
        """Ensure valid ranges"""
        self.note = _clamp_midi(self.note, "note")
        self.velocity = _clamp_midi(self.velocity, "velocity")
        if self.event_type == EventType.ELAPSED_TIME:
            self.value = _whole_millis(self.value)
        else:
            self.value = _clamp_midi(self.value, "control value")

    @classmethod
    def note_on(cls, note: int, velocity: int, instrument: Optional[int] = None) -> 'MidiEvent':
        return cls(EventType.NOTE_ON, note=note, velocity=velocity, instrument=instrument)

    @classmethod
    def note_off(cls, note: int, velocity: int = 0, instrument: Optional[int] = None) -> 'MidiEvent':
        return cls(EventType.NOTE_OFF, note=note, velocity=velocity, instrument=instrument)

    @classmethod
    def elapsed_time(cls, millis) -> 'MidiEvent':
        return cls(EventType.ELAPSED_TIME, value=millis)

    @classmethod
    def control_change(cls, value: int) -> 'MidiEvent':
        return cls(EventType.CONTROL_CHANGE, value=value)

    @property
    def is_note(self) -> bool:
        return self.event_type in (EventType.NOTE_ON, EventType.NOTE_OFF)

    @property
    def is_elapsed_time(self) -> bool:
        return self.event_type == EventType.ELAPSED_TIME

    @property
    def millis(self) -> int:
        """Elapsed milliseconds, zero for anything but ELAPSED_TIME"""
        return self.value if self.is_elapsed_time else 0

    def with_instrument(self, instrument: int) -> 'MidiEvent':
        """Copy of this event tagged with an instrument index"""
        return replace(self, instrument=instrument)


def content_time_of(events: Iterable[MidiEvent]) -> int:
    """Sum of the elapsed-time deltas in a sequence of events"""
    return sum(event.millis for event in events)


class Track:
    """
    A recorded sequence of events placed on the timeline at `offset_time`.
    `raw_content` is the source of truth; `content` (rendered tokens) and
    `content_time` are caches replaced together with it.
    """

    def __init__(self, track_id: Optional[str] = None, offset_time: int = 0,
                 main_instrument: str = ""):
        self.id = track_id or str(uuid.uuid4())
        self.offset_time = max(0, int(offset_time))
        self.main_instrument = main_instrument

        self._raw_content: List[MidiEvent] = []
        self._content = ""
        self._content_time = 0

    @property
    def raw_content(self) -> List[MidiEvent]:
        """Recorded events (a copy; use replace_content to change them)"""
        return list(self._raw_content)

    @property
    def content(self) -> str:
        """Rendered token string of the raw content"""
        return self._content

    @property
    def content_time(self) -> int:
        """Total elapsed time covered by the track's own events, in ms"""
        return self._content_time

    @property
    def end_time(self) -> int:
        return self.offset_time + self._content_time

    @property
    def display_name(self) -> str:
        if self.main_instrument:
            name = f"Track - {self.main_instrument} is the main instrument"
            return f"{name} - {self._content}" if self._content else name
        if self._content:
            return f"Track - {self._content}"
        return f"Track {self.id}"

    def replace_content(self, raw_content: Iterable[MidiEvent], rendered_content: str):
        """Swap raw and rendered content in one step, recomputing content_time"""
        raw = list(raw_content)
        self._raw_content = raw
        self._content = rendered_content
        self._content_time = content_time_of(raw)

    def __repr__(self) -> str:
        return (f"Track(id={self.id!r}, offset_time={self.offset_time}, "
                f"content_time={self._content_time}, events={len(self._raw_content)})")
