"""
Recording session - captures live MIDI events into a track.

Only one session records at a time. Events are buffered privately and
written into the target track in a single step when recording stops.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from .errors import NoDeviceSelected
from .midi_data import MidiEvent, EventType, Track
from .tokens import TokenEncoder, instrument_from_control

logger = logging.getLogger(__name__)

PlaybackSink = Callable[[MidiEvent], object]


class RecordingState(Enum):
    IDLE = "idle"
    RECORDING = "recording"


class RecordingSession:
    """
    Live capture state: the global instrument selection plus, while
    recording, the target track and its pending buffer.
    The session holds a reference to the track; the store keeps ownership.
    """

    def __init__(self, encoder: TokenEncoder, playback_sink: Optional[PlaybackSink] = None,
                 on_instrument_change: Optional[Callable[[int], None]] = None):
        self.encoder = encoder
        self.playback_sink = playback_sink
        self.on_instrument_change = on_instrument_change

        self.selected_instrument = 0
        self.state = RecordingState.IDLE
        self.track: Optional[Track] = None
        self.raw_buffer: List[MidiEvent] = []
        self.content = ""
        self.drop_next_elapsed = False

    @property
    def is_recording(self) -> bool:
        return self.state == RecordingState.RECORDING

    @property
    def active_track_id(self) -> Optional[str]:
        return self.track.id if self.track is not None else None

    @property
    def preview(self) -> str:
        """Live token string of the track being recorded"""
        return self.content

    def start(self, track: Track, device_selected: bool = True):
        """Begin recording into `track`, resuming from its existing content"""
        if not device_selected:
            raise NoDeviceSelected()
        if self.is_recording:
            self.stop()

        self.track = track
        self.raw_buffer = track.raw_content
        self.content = track.content
        # Drop the dead time between pressing record and the first note
        self.drop_next_elapsed = True
        self.state = RecordingState.RECORDING
        logger.info(f"Recording into track {track.id}")

    def select_instrument(self, instrument: int):
        count = len(self.encoder.instrument_tokens)
        self.selected_instrument = max(0, min(count - 1, instrument))
        if self.on_instrument_change is not None:
            self.on_instrument_change(self.selected_instrument)

    def on_event(self, event: MidiEvent) -> Optional[MidiEvent]:
        """
        Consume one event from the input source.
        Returns the event as stored in the buffer, or None when it was not recorded.
        """
        if event.event_type == EventType.CONTROL_CHANGE:
            self.select_instrument(
                instrument_from_control(event.value, len(self.encoder.instrument_tokens)))
            return None
        if not self.is_recording:
            return None
        if self.drop_next_elapsed and event.is_elapsed_time:
            self.drop_next_elapsed = False
            return None

        if event.is_note:
            event = event.with_instrument(self.selected_instrument)
        self.raw_buffer.append(event)
        self.content += self.encoder.encode(event, self.selected_instrument)
        self._forward(event)
        return event

    def _forward(self, event: MidiEvent):
        if self.playback_sink is None:
            return
        try:
            self.playback_sink(event)
        except Exception as e:
            logger.error(f"Playback sink failed for {event.event_type.value}: {e}")

    def stop(self) -> Optional[Track]:
        """Flush the buffer into the target track and go idle"""
        if not self.is_recording:
            return None
        track = self.track
        track.replace_content(self.raw_buffer, self.content)
        logger.info(f"Stopped recording track {track.id}: {len(self.raw_buffer)} events, "
                    f"{track.content_time} ms")
        self._reset()
        return track

    def cancel(self):
        """Go idle without touching the target track"""
        if self.is_recording:
            logger.info(f"Discarded recording for track {self.track.id}")
        self._reset()

    def _reset(self):
        self.state = RecordingState.IDLE
        self.track = None
        self.raw_buffer = []
        self.content = ""
        self.drop_next_elapsed = False
