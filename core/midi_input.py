"""Translation of incoming mido messages into semantic MIDI events"""

import logging
import math
import time
from typing import Callable, List, Optional

import mido

from .midi_data import MidiEvent

logger = logging.getLogger(__name__)


def event_from_message(message: mido.Message) -> Optional[MidiEvent]:
    """Semantic event for a single mido message, or None if it carries none"""
    if message.type == "note_on" and message.velocity > 0:
        return MidiEvent.note_on(message.note, message.velocity)
    if message.type in ("note_on", "note_off"):
        # note_on with velocity 0 is a note-off
        return MidiEvent.note_off(message.note, message.velocity)
    if message.type == "control_change":
        return MidiEvent.control_change(message.value)
    return None


class MidoInputAdapter:
    """
    Turns a timestamped stream of mido messages into MidiEvents, inserting
    an elapsed-time delta before every message that arrives at least half a
    millisecond after the last emitted one. Rounding remainders carry over,
    so emitted deltas stay within half a millisecond of the clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._last_time: Optional[float] = None
        self._carry_ms = 0.0

    def reset(self, timestamp: Optional[float] = None):
        """Measure the next delta from `timestamp` (default: now)"""
        self._last_time = self.clock() if timestamp is None else timestamp
        self._carry_ms = 0.0

    def translate(self, message: mido.Message, timestamp: Optional[float] = None) -> List[MidiEvent]:
        """Events for one message received at `timestamp` seconds"""
        now = self.clock() if timestamp is None else timestamp
        if self._last_time is None:
            self._last_time = now

        events = []
        delta_ms = (now - self._last_time) * 1000.0 + self._carry_ms
        self._last_time = now
        whole_ms = math.floor(delta_ms + 0.5)
        if whole_ms > 0:
            events.append(MidiEvent.elapsed_time(whole_ms))
            self._carry_ms = delta_ms - whole_ms
        else:
            self._carry_ms = max(0.0, delta_ms)

        event = event_from_message(message)
        if event is not None:
            events.append(event)
        else:
            logger.debug(f"Ignoring {message.type} message")
        return events
