"""Core MIDI timeline functionality"""
from .errors import CompositionError, NoDeviceSelected, UnknownTrack, InvalidEventRange
from .midi_data import MidiEvent, EventType, Track
from .velocity import VelocityQuantizer
from .tokens import TokenEncoder
from .recording import RecordingSession, RecordingState
from .track_store import TrackStore
from .timeline import TimelineMerger, export_prompt
from .editor import CompositionEditor
from .import_export import TrackImporter, TimelineExporter

__all__ = [
    'CompositionError', 'NoDeviceSelected', 'UnknownTrack', 'InvalidEventRange',
    'MidiEvent', 'EventType', 'Track',
    'VelocityQuantizer', 'TokenEncoder',
    'RecordingSession', 'RecordingState',
    'TrackStore', 'TimelineMerger', 'export_prompt',
    'CompositionEditor',
    'TrackImporter', 'TimelineExporter'
]
