"""MIDI file import/export functionality"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import pretty_midi

from .midi_data import MidiEvent, EventType, Track

logger = logging.getLogger(__name__)


class TrackImporter:
    @staticmethod
    def events_from_midi(pm: pretty_midi.PrettyMIDI, instrument: Optional[int] = None) -> List[MidiEvent]:
        """
        Flatten every note of a PrettyMIDI object into note on/off events
        separated by elapsed-time deltas in milliseconds.
        """
        # (time ms, order, event): at one instant note-offs of earlier notes come
        # first, then note-ons, then the offs of zero-length notes
        timed: List[Tuple[int, int, MidiEvent]] = []
        for pm_instrument in pm.instruments:
            for note in pm_instrument.notes:
                start = int(round(note.start * 1000))
                end = max(start, int(round(note.end * 1000)))
                timed.append((start, 1, MidiEvent.note_on(note.pitch, note.velocity, instrument)))
                off_order = 2 if end == start else 0
                timed.append((end, off_order, MidiEvent.note_off(note.pitch, 0, instrument)))
        timed.sort(key=lambda item: (item[0], item[1]))

        events: List[MidiEvent] = []
        last_time = 0
        for time_ms, _, event in timed:
            if time_ms > last_time:
                events.append(MidiEvent.elapsed_time(time_ms - last_time))
                last_time = time_ms
            events.append(event)
        return events

    @staticmethod
    def load_file(filename: str, instrument: Optional[int] = None) -> List[MidiEvent]:
        """Load a MIDI file as a list of events"""
        pm = pretty_midi.PrettyMIDI(filename)
        events = TrackImporter.events_from_midi(pm, instrument)
        logger.info(f"Loaded {filename}: {len(events)} events")
        return events


class TimelineExporter:
    @staticmethod
    def _notes_of(track: Track) -> Iterable[Tuple[int, pretty_midi.Note]]:
        """(instrument index, note) pairs of a track at absolute time"""
        pending: Dict[Tuple[int, int], List[Tuple[float, int]]] = {}
        current_ms = track.offset_time
        for event in track.raw_content:
            if event.is_elapsed_time:
                current_ms += event.value
                continue
            if not event.is_note:
                continue
            key = (event.instrument or 0, event.note)
            if event.event_type == EventType.NOTE_ON and event.velocity > 0:
                pending.setdefault(key, []).append((current_ms / 1000.0, event.velocity))
            elif pending.get(key):
                start, velocity = pending[key].pop(0)
                yield key[0], pretty_midi.Note(velocity=velocity, pitch=event.note,
                                               start=start, end=current_ms / 1000.0)
        # Close dangling notes at the end of the track
        for (instrument, pitch), starts in pending.items():
            for start, velocity in starts:
                yield instrument, pretty_midi.Note(velocity=velocity, pitch=pitch,
                                                   start=start, end=track.end_time / 1000.0)

    @staticmethod
    def to_pretty_midi(tracks: Iterable[Track], settings) -> pretty_midi.PrettyMIDI:
        """Render tracks at their offsets into a PrettyMIDI object"""
        pm = pretty_midi.PrettyMIDI()
        for track_number, track in enumerate(tracks, 1):
            instruments: Dict[int, pretty_midi.Instrument] = {}
            for index, note in TimelineExporter._notes_of(track):
                index = max(0, min(len(settings.instruments) - 1, index))
                if index not in instruments:
                    instrument_type = settings.instruments[index]
                    instruments[index] = pretty_midi.Instrument(
                        program=instrument_type.program,
                        is_drum=instrument_type.is_drum,
                        name=f"Track {track_number} {instrument_type.name}",
                    )
                instruments[index].notes.append(note)
            for instrument in instruments.values():
                instrument.notes.sort(key=lambda n: (n.start, n.pitch))
                pm.instruments.append(instrument)
        return pm

    @staticmethod
    def save_file(tracks: Iterable[Track], settings, filename: str):
        """Save tracks to a MIDI file"""
        pm = TimelineExporter.to_pretty_midi(tracks, settings)
        pm.write(filename)
        logger.info(f"Saved {len(pm.instruments)} instruments to {filename}")
