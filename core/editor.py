"""
Composition editor - the process-wide editing session.

Holds the track store, the recording session and the playing role, and
exposes the operations the surrounding UI drives. Recording and playing are
mutually exclusive across all tracks.
"""

import logging
from typing import Callable, Optional

from config.settings import CompositionSettings
from .errors import CompositionError
from .import_export import TrackImporter, TimelineExporter
from .midi_data import MidiEvent, Track
from .recording import RecordingSession, PlaybackSink
from .timeline import TimelineMerger, export_prompt
from .tokens import TokenEncoder
from .track_store import TrackStore

logger = logging.getLogger(__name__)

# notifier(message, level) with level in "info", "warning", "error"
Notifier = Callable[[str, str], None]


class CompositionEditor:
    """Editing session over a set of tracks"""

    def __init__(self, settings: Optional[CompositionSettings] = None,
                 notifier: Optional[Notifier] = None,
                 playback_sink: Optional[PlaybackSink] = None):
        self.settings = settings or CompositionSettings()
        self.notifier = notifier

        self.encoder = TokenEncoder.from_settings(self.settings)
        self.merger = TimelineMerger(self.encoder, self.settings.start_token)
        self.store = TrackStore(self.settings.minimal_total_time)
        self.recorder = RecordingSession(self.encoder, playback_sink,
                                         on_instrument_change=self._show_instrument)

        self.input_device: Optional[str] = None
        self.playing_track_id: Optional[str] = None
        self.submitted_prompt = ""

    def _notify(self, message: str, level: str = "info"):
        if self.notifier is not None:
            self.notifier(message, level)

    def _show_instrument(self, instrument: int):
        name = self.settings.instruments[instrument].name
        logger.debug(f"Instrument selected: {name}")
        self._notify(f"Instrument: {name}")

    # Input

    def select_input_device(self, name: Optional[str]):
        self.input_device = name or None
        logger.info(f"Input device: {self.input_device or 'none'}")

    def handle_midi_message(self, event: MidiEvent) -> Optional[MidiEvent]:
        return self.recorder.on_event(event)

    @property
    def recording_track_id(self) -> Optional[str]:
        return self.recorder.active_track_id

    @property
    def selected_instrument(self) -> int:
        return self.recorder.selected_instrument

    # Roles

    def stop_recording(self) -> Optional[Track]:
        track = self.recorder.stop()
        if track is not None:
            self.store.recompute_total_time()
        return track

    def toggle_record(self, track_id: str) -> bool:
        """Start recording into a track, or stop if it is already recording"""
        if self.recording_track_id == track_id:
            self.stop_recording()
            return True
        try:
            track = self.store.require(track_id)
            previous = self.recorder.track
            self.recorder.start(track, device_selected=self.input_device is not None)
        except CompositionError as e:
            logger.warning(f"Cannot record: {e}")
            self._notify(str(e), "warning")
            return False
        self.playing_track_id = None
        if previous is not None:
            self.store.recompute_total_time()
        return True

    def toggle_play(self, track_id: str) -> bool:
        """Switch the playing role to a track, or off if it is already playing"""
        self.stop_recording()
        if self.playing_track_id == track_id:
            self.playing_track_id = None
            return True
        if track_id not in self.store:
            logger.debug(f"toggle_play: no track {track_id}")
            return False
        self.playing_track_id = track_id
        return True

    # Tracks

    def add_track(self, main_instrument: str = "") -> Track:
        return self.store.add_track(main_instrument)

    def remove_track(self, track_id: str) -> bool:
        if self.recording_track_id == track_id:
            self.recorder.cancel()
        if self.playing_track_id == track_id:
            self.playing_track_id = None
        return self.store.remove_track(track_id)

    def move_track(self, track_id: str, delta_time: int) -> int:
        snap = self.settings.time_unit_ms if self.settings.snap_moves else None
        return self.store.move_track(track_id, delta_time, snap_ms=snap)

    def move_play_start(self, delta_time: int) -> int:
        return self.store.move_play_start(delta_time)

    def clear_all(self):
        self.recorder.cancel()
        self.playing_track_id = None
        self.store.clear()

    def track_preview(self, track_id: str) -> str:
        """Token string shown for a track, live while it is recording"""
        if self.recording_track_id == track_id:
            return self.recorder.preview
        track = self.store.get(track_id)
        return track.content if track is not None else ""

    # Files and export

    def import_track(self, filename: str, offset_time: int = 0) -> Track:
        """Load a MIDI file into a new track placed at offset_time"""
        events = TrackImporter.load_file(filename, instrument=self.selected_instrument)
        track = self.store.add_track()
        track.offset_time = max(0, int(offset_time))
        track.replace_content(events, self.encoder.encode_all(events, self.selected_instrument))
        self.store.recompute_total_time()
        logger.info(f"Imported {filename} into track {track.id} at {track.offset_time} ms")
        return track

    def export_prompt(self) -> str:
        """Flush any recording, stop both roles and merge every track"""
        self.stop_recording()
        self.playing_track_id = None
        self.submitted_prompt = export_prompt(self.store, self.merger, self.selected_instrument)
        return self.submitted_prompt

    def export_midi(self, filename: str):
        self.stop_recording()
        TimelineExporter.save_file(self.store.tracks, self.settings, filename)
