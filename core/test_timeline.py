#!/usr/bin/env python3
"""Unit tests for merging tracks into one timeline prompt."""

import unittest

from config.settings import CompositionSettings
from core.midi_data import MidiEvent, Track
from core.timeline import TimelineMerger, build_skeleton, export_prompt, track_timestamps
from core.tokens import TokenEncoder
from core.track_store import TrackStore


def make_track(offset_time, events):
    track = Track(offset_time=offset_time)
    track.replace_content(events, "")
    return track


class TimelineMergerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.encoder = TokenEncoder.from_settings(CompositionSettings())
        self.merger = TimelineMerger(self.encoder)

    def test_empty_store_yields_start_marker(self) -> None:
        self.assertEqual(self.merger.merge([]), "<pad>")
        self.assertEqual(self.merger.merge_events([]), [])

    def test_offset_only_track_contributes_its_instant(self) -> None:
        self.assertEqual(self.merger.merge([make_track(1000, [])]), "<pad> t125")
        self.assertEqual(self.merger.merge([make_track(0, [])]), "<pad>")

    def test_single_track_at_zero_matches_direct_encoding(self) -> None:
        events = [
            MidiEvent.elapsed_time(120),
            MidiEvent.note_on(60, 100),
            MidiEvent.note_on(64, 90),
            MidiEvent.elapsed_time(500),
            MidiEvent.elapsed_time(1700),
            MidiEvent.note_off(60),
            MidiEvent.note_off(64),
            MidiEvent.elapsed_time(33),
        ]
        direct = ("<pad> " + self.encoder.encode_all(events)).strip()
        self.assertEqual(self.merger.merge([make_track(0, events)]), direct)

    def test_disjoint_tracks_are_joined_by_one_connecting_wait(self) -> None:
        first = make_track(0, [
            MidiEvent.note_on(60, 64), MidiEvent.elapsed_time(500), MidiEvent.note_off(60),
        ])
        second = make_track(1500, [
            MidiEvent.note_on(64, 64), MidiEvent.elapsed_time(250), MidiEvent.note_off(64),
        ])
        prompt = self.merger.merge([second, first])
        self.assertEqual(prompt, "<pad> pi:3c:7 t63 pi:3c:0 t125 pi:40:7 t31 pi:40:0")

        gap = prompt.split("pi:3c:0 ")[1].split(" pi:40:7")[0]
        self.assertEqual(self.encoder.wait_time_ms(gap), second.offset_time - first.end_time)

    def test_scenario_note_then_offset_track(self) -> None:
        first = make_track(0, [MidiEvent.note_on(60, 64), MidiEvent.elapsed_time(500)])
        second = make_track(500, [MidiEvent.note_on(64, 64)])

        events = self.merger.merge_events([first, second])
        kinds = [(e.event_type.value, e.note if e.is_note else e.value) for e in events]
        self.assertEqual(kinds, [("NoteOn", 60), ("ElapsedTime", 500), ("NoteOn", 64)])
        self.assertEqual(self.merger.merge([first, second]), "<pad> pi:3c:7 t63 pi:40:7")

    def test_shared_instant_emits_one_wait_and_adjacent_notes(self) -> None:
        first = make_track(0, [MidiEvent.elapsed_time(500), MidiEvent.note_on(60, 64)])
        second = make_track(500, [MidiEvent.note_on(64, 64)])
        prompt = self.merger.merge([first, second])
        self.assertEqual(prompt, "<pad> t63 pi:3c:7 pi:40:7")

    def test_notes_at_one_instant_keep_their_order(self) -> None:
        chord = make_track(0, [MidiEvent.note_on(p, 64) for p in (60, 64, 67)])
        self.assertEqual(self.merger.merge([chord]), "<pad> pi:3c:7 pi:40:7 pi:43:7")

    def test_tracks_sharing_an_offset_keep_store_order(self) -> None:
        a = make_track(200, [MidiEvent.note_on(60, 64)])
        b = make_track(200, [MidiEvent.note_on(72, 64)])
        self.assertEqual(self.merger.merge([a, b]), "<pad> t25 pi:3c:7 pi:48:7")
        self.assertEqual(self.merger.merge([b, a]), "<pad> t25 pi:48:7 pi:3c:7")

    def test_interleaved_tracks_are_globally_ordered(self) -> None:
        a = make_track(0, [
            MidiEvent.note_on(60, 64), MidiEvent.elapsed_time(400), MidiEvent.note_on(62, 64),
        ])
        b = make_track(200, [
            MidiEvent.note_on(70, 64), MidiEvent.elapsed_time(400), MidiEvent.note_on(72, 64),
        ])
        events = self.merger.merge_events([a, b])
        notes = [e.note for e in events if e.is_note]
        self.assertEqual(notes, [60, 70, 62, 72])
        waits = [e.value for e in events if e.is_elapsed_time]
        self.assertEqual(waits, [200, 200, 200])

    def test_recorded_instruments_survive_export(self) -> None:
        track = make_track(0, [MidiEvent.note_on(60, 64, instrument=5)])
        self.assertEqual(self.merger.merge([track], selected_instrument=0), "<pad> b:3c:7")

    def test_merge_does_not_mutate_tracks(self) -> None:
        track = make_track(100, [MidiEvent.note_on(60, 64), MidiEvent.elapsed_time(100)])
        before = track.raw_content
        self.merger.merge([track])
        self.assertEqual(track.raw_content, before)
        self.assertEqual(track.offset_time, 100)

    def test_timestamps_and_skeleton(self) -> None:
        a = make_track(100, [MidiEvent.elapsed_time(50), MidiEvent.note_on(60, 1), MidiEvent.elapsed_time(50)])
        b = make_track(0, [MidiEvent.elapsed_time(150)])
        self.assertEqual(track_timestamps(a), [100, 150, 200])
        self.assertEqual(build_skeleton([a, b]), [0, 100, 150, 150, 200])

    def test_export_prompt_uses_every_track_in_store(self) -> None:
        store = TrackStore()
        track = store.add_track()
        track.replace_content([MidiEvent.note_on(60, 64)], "pi:3c:7 ")
        later = store.add_track()
        later.replace_content([MidiEvent.note_on(62, 64)], "pi:3e:7 ")
        store.move_track(later.id, 1000)
        self.assertEqual(export_prompt(store, self.merger), "<pad> pi:3c:7 t125 pi:3e:7")

    def test_custom_start_token(self) -> None:
        merger = TimelineMerger(self.encoder, start_token="<start>")
        self.assertEqual(merger.merge([]), "<start>")


if __name__ == "__main__":
    unittest.main()
