#!/usr/bin/env python3
"""Unit tests for the mido input and playback boundaries."""

import unittest
from unittest import mock

import mido

from core.midi_data import MidiEvent, EventType
from core.midi_input import MidoInputAdapter, event_from_message
from core.midi_playback import MidoPlaybackSink


class MidoInputAdapterTests(unittest.TestCase):
    def test_messages_become_semantic_events(self) -> None:
        on = event_from_message(mido.Message("note_on", note=60, velocity=100))
        self.assertEqual((on.event_type, on.note, on.velocity), (EventType.NOTE_ON, 60, 100))

        silent = event_from_message(mido.Message("note_on", note=60, velocity=0))
        self.assertEqual(silent.event_type, EventType.NOTE_OFF)

        off = event_from_message(mido.Message("note_off", note=61, velocity=20))
        self.assertEqual((off.event_type, off.note), (EventType.NOTE_OFF, 61))

        control = event_from_message(mido.Message("control_change", control=1, value=90))
        self.assertEqual((control.event_type, control.value), (EventType.CONTROL_CHANGE, 90))

        self.assertIsNone(event_from_message(mido.Message("program_change", program=3)))

    def test_deltas_are_inserted_between_messages(self) -> None:
        adapter = MidoInputAdapter()
        adapter.reset(10.0)
        first = adapter.translate(mido.Message("note_on", note=60, velocity=100), 10.25)
        self.assertEqual(first, [MidiEvent.elapsed_time(250), MidiEvent.note_on(60, 100)])

        second = adapter.translate(mido.Message("note_off", note=60), 10.75)
        self.assertEqual(second, [MidiEvent.elapsed_time(500), MidiEvent.note_off(60, 64)])

    def test_first_message_without_reset_has_no_delta(self) -> None:
        adapter = MidoInputAdapter(clock=lambda: 42.0)
        events = adapter.translate(mido.Message("note_on", note=60, velocity=1))
        self.assertEqual(events, [MidiEvent.note_on(60, 1)])

    def test_sub_millisecond_remainders_carry_over(self) -> None:
        adapter = MidoInputAdapter()
        adapter.reset(0.0)
        deltas = []
        for timestamp in (0.0014, 0.0028, 0.0042):
            events = adapter.translate(mido.Message("note_on", note=60, velocity=1), timestamp)
            deltas.extend(event.value for event in events if event.is_elapsed_time)
        self.assertEqual(deltas, [1, 2, 1])
        self.assertEqual(sum(deltas), 4)

    def test_near_simultaneous_messages_get_no_zero_delta(self) -> None:
        adapter = MidoInputAdapter()
        adapter.reset(0.0)
        first = adapter.translate(mido.Message("note_on", note=60, velocity=1), 0.0004)
        self.assertEqual(first, [MidiEvent.note_on(60, 1)])
        second = adapter.translate(mido.Message("note_on", note=64, velocity=1), 0.0008)
        self.assertEqual(second, [MidiEvent.elapsed_time(1), MidiEvent.note_on(64, 1)])

    def test_unsupported_messages_still_advance_time(self) -> None:
        adapter = MidoInputAdapter()
        adapter.reset(0.0)
        events = adapter.translate(mido.Message("program_change", program=3), 0.5)
        self.assertEqual(events, [MidiEvent.elapsed_time(500)])


class MidoPlaybackSinkTests(unittest.TestCase):
    def setUp(self) -> None:
        self.port = mock.Mock()
        self.sink = MidoPlaybackSink(self.port)

    def test_note_events_are_sent_on_instrument_channel(self) -> None:
        self.sink(MidiEvent.note_on(60, 100, instrument=17))
        self.sink(MidiEvent.note_off(60, 0, instrument=2))
        sent = [call.args[0] for call in self.port.send.call_args_list]
        self.assertEqual(sent, [
            mido.Message("note_on", note=60, velocity=100, channel=1),
            mido.Message("note_off", note=60, velocity=0, channel=2),
        ])

    def test_non_note_events_are_ignored(self) -> None:
        self.sink(MidiEvent.elapsed_time(100))
        self.sink(MidiEvent.control_change(3))
        self.port.send.assert_not_called()

    def test_panic_silences_every_channel(self) -> None:
        self.sink.panic()
        self.assertEqual(self.port.send.call_count, 16)


if __name__ == "__main__":
    unittest.main()
