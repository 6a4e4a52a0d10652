"""
Token encoding of semantic MIDI events.

Note events become "<instrument>:<note hex>:<velocity bin hex> " and elapsed
time becomes bounded wait tokens "t<units> ". Encoding is a pure function of
its inputs.
"""

import re
import warnings
from typing import Iterable, Optional, Sequence

from .errors import InvalidEventRange
from .midi_data import MidiEvent, EventType
from .velocity import VelocityQuantizer

WAIT_TOKEN = re.compile(r"(?<!\S)t(\d+)(?!\S)")


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer round(numerator / denominator) with halves rounded towards +inf"""
    return (2 * numerator + denominator) // (2 * denominator)


def instrument_from_control(value: int, count: int) -> int:
    """Instrument index selected by a 0-127 controller value"""
    value = max(0, min(127, int(value)))
    return round_half_up(value * (count - 1), 127)


class TokenEncoder:
    """Encodes MidiEvents into prompt tokens"""

    def __init__(self, instrument_tokens: Sequence[str], time_unit_ms: int = 8,
                 max_wait_units: int = 125, quantizer: Optional[VelocityQuantizer] = None):
        if not instrument_tokens:
            raise ValueError("instrument token table must not be empty")
        self.instrument_tokens = list(instrument_tokens)
        self.time_unit_ms = time_unit_ms
        self.max_wait_units = max_wait_units
        self.quantizer = quantizer or VelocityQuantizer()

    @classmethod
    def from_settings(cls, settings) -> 'TokenEncoder':
        return cls(
            settings.instrument_tokens,
            time_unit_ms=settings.time_unit_ms,
            max_wait_units=settings.max_wait_units,
            quantizer=VelocityQuantizer.from_settings(settings),
        )

    def time_units(self, millis: int) -> int:
        """Whole wait units in `millis`"""
        return round_half_up(max(0, int(millis)), self.time_unit_ms)

    def resolve_instrument(self, event: MidiEvent, selected_instrument: Optional[int] = None) -> int:
        """
        Instrument index used for a note event.
        The instrument recorded on the event wins; the live selection only
        fills in for events that carry none.
        """
        instrument = event.instrument if event.instrument is not None else selected_instrument
        if instrument is None:
            return 0
        clamped = max(0, min(len(self.instrument_tokens) - 1, instrument))
        if clamped != instrument:
            warnings.warn(f"instrument {instrument} clamped to {clamped}", InvalidEventRange, stacklevel=3)
        return clamped

    def encode_note(self, event: MidiEvent, selected_instrument: Optional[int] = None) -> str:
        token = self.instrument_tokens[self.resolve_instrument(event, selected_instrument)]
        velocity_bin = self.quantizer.quantize(event.velocity)
        return f"{token}:{event.note:x}:{velocity_bin:x} "

    def encode_elapsed(self, millis: int) -> str:
        units = self.time_units(millis)
        full, remainder = divmod(units, self.max_wait_units)
        tokens = f"t{self.max_wait_units} " * full
        if remainder > 0:
            tokens += f"t{remainder} "
        return tokens

    def encode(self, event: MidiEvent, selected_instrument: Optional[int] = None) -> str:
        if event.is_note:
            return self.encode_note(event, selected_instrument)
        if event.event_type == EventType.ELAPSED_TIME:
            return self.encode_elapsed(event.value)
        return ""

    def encode_all(self, events: Iterable[MidiEvent], selected_instrument: Optional[int] = None) -> str:
        return "".join(self.encode(event, selected_instrument) for event in events)

    def wait_time_ms(self, tokens: str) -> int:
        """Total elapsed time expressed by the wait tokens of a token string"""
        return sum(int(units) for units in WAIT_TOKEN.findall(tokens)) * self.time_unit_ms
