import logging

import mido

from .midi_data import MidiEvent, EventType

logger = logging.getLogger(__name__)


class MidoPlaybackSink:
    """Plays live note events on an already opened mido output port"""

    def __init__(self, outport):
        self.outport = outport

    def __call__(self, event: MidiEvent):
        """Send a note event now; other events are ignored"""
        if not event.is_note:
            return
        channel = (event.instrument or 0) % 16
        if event.event_type == EventType.NOTE_ON:
            msg = mido.Message("note_on", note=event.note, velocity=event.velocity, channel=channel)
        else:
            msg = mido.Message("note_off", note=event.note, velocity=event.velocity, channel=channel)
        self.outport.send(msg)

    def panic(self):
        """All notes off on every channel"""
        for ch in range(16):
            self.outport.send(mido.Message("control_change", channel=ch, control=123, value=0))
        logger.debug("Sent all-notes-off")
