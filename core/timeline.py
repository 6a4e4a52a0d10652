#!/usr/bin/env python3
"""
Timeline Merger - compiles independently recorded tracks into one prompt.

Tracks are laid out at their offsets and merged into a single stream in
two passes:
  1. every instant at which some track has activity (its offset and each
     point an elapsed-time delta lands on) becomes a slot in a sorted
     timestamp skeleton, replayed as elapsed-time deltas;
  2. every note is attached to the first slot whose timestamp is at or
     after the note's absolute time. A slot keeps its notes in insertion
     order, so waits resolve before notes at the same instant and notes
     sharing an instant keep track order, then event order.
"""

import bisect
import logging
from typing import Iterable, List, Optional, Sequence

from .midi_data import MidiEvent, Track
from .tokens import TokenEncoder

logger = logging.getLogger(__name__)

DEFAULT_START_TOKEN = "<pad>"


def sort_tracks(tracks: Iterable[Track]) -> List[Track]:
    """Tracks by offset; tracks sharing an offset keep their store order"""
    return sorted(tracks, key=lambda track: track.offset_time)


def track_timestamps(track: Track) -> List[int]:
    """Absolute instants of a track: its offset and every elapsed-time landing point"""
    timestamps = [track.offset_time]
    elapsed = 0
    for event in track.raw_content:
        if event.is_elapsed_time:
            elapsed += event.value
            timestamps.append(track.offset_time + elapsed)
    return timestamps


def build_skeleton(tracks: Sequence[Track]) -> List[int]:
    """Globally sorted timestamps of all tracks, duplicates kept"""
    timestamps: List[int] = []
    for track in tracks:
        timestamps.extend(track_timestamps(track))
    timestamps.sort()
    return timestamps


class TimelineMerger:
    """Merges a set of tracks into one time-ordered token stream"""

    def __init__(self, encoder: TokenEncoder, start_token: str = DEFAULT_START_TOKEN):
        self.encoder = encoder
        self.start_token = start_token

    def merge_events(self, tracks: Iterable[Track]) -> List[MidiEvent]:
        """All tracks as one event stream with elapsed-time deltas"""
        ordered = sort_tracks(tracks)
        timestamps = build_skeleton(ordered)
        if not timestamps:
            return []

        # One slot per timestamp, each collecting the notes that land on it
        slots: List[List[MidiEvent]] = [[] for _ in timestamps]
        for track in ordered:
            current_time = track.offset_time
            for event in track.raw_content:
                if event.is_elapsed_time:
                    current_time += event.value
                elif event.is_note:
                    index = bisect.bisect_left(timestamps, current_time)
                    slots[min(index, len(slots) - 1)].append(event)

        merged: List[MidiEvent] = []
        previous = 0
        for timestamp, notes in zip(timestamps, slots):
            delta = timestamp - previous
            previous = timestamp
            # Duplicate instants give zero-length waits, which encode to nothing
            if delta > 0:
                merged.append(MidiEvent.elapsed_time(delta))
            merged.extend(notes)
        return merged

    def merge(self, tracks: Iterable[Track], selected_instrument: Optional[int] = None) -> str:
        """Prompt string for the tracks played together from their offsets"""
        events = self.merge_events(tracks)
        body = self.encoder.encode_all(events, selected_instrument)
        return f"{self.start_token} {body}".strip()


def export_prompt(track_store, merger: TimelineMerger, selected_instrument: Optional[int] = None) -> str:
    """Merged prompt for every track in the store"""
    tracks = track_store.tracks
    prompt = merger.merge(tracks, selected_instrument)
    logger.info(f"Exported {len(tracks)} tracks: "
                f"{merger.encoder.wait_time_ms(prompt)} ms, {len(prompt)} characters")
    return prompt
