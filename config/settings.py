"""Composition settings and preferences"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass
class InstrumentType:
    """One entry of the instrument table: display name, prompt token, GM program"""
    name: str
    token: str
    program: int = 0
    is_drum: bool = False


def default_instruments() -> List[InstrumentType]:
    return [
        InstrumentType("Piano", "pi", 0),
        InstrumentType("Percussion", "p", 0, is_drum=True),
        InstrumentType("Drum", "d", 0, is_drum=True),
        InstrumentType("Tuba", "t", 58),
        InstrumentType("Marimba", "m", 12),
        InstrumentType("Bass", "b", 33),
        InstrumentType("Guitar", "g", 24),
        InstrumentType("Violin", "v", 40),
        InstrumentType("Trumpet", "tr", 56),
        InstrumentType("Sax", "s", 65),
        InstrumentType("Flute", "f", 73),
        InstrumentType("Lead", "l", 80),
        InstrumentType("Pad", "pa", 88),
    ]


@dataclass
class CompositionSettings:
    # Timing settings
    time_unit_ms: int = 8           # 1000 / 125 = 8ms per wait unit
    max_wait_units: int = 125       # largest single wait token
    minimal_total_time: int = 5000  # timeline floor in ms
    snap_moves: bool = True         # snap track moves to the time unit grid

    # Velocity settings
    velocity_events: int = 128
    velocity_bins: int = 12
    velocity_exp: float = 0.5

    # Prompt settings
    start_token: str = "<pad>"
    instruments: List[InstrumentType] = field(default_factory=default_instruments)

    # Logging settings
    log_level: str = "INFO"
    log_file: Optional[str] = "midi_compose.log"

    def __post_init__(self):
        self.instruments = [
            item if isinstance(item, InstrumentType) else InstrumentType(**item)
            for item in self.instruments
        ]
        if self.time_unit_ms <= 0:
            raise ValueError(f"time_unit_ms must be positive, got {self.time_unit_ms}")
        if self.max_wait_units <= 0:
            raise ValueError(f"max_wait_units must be positive, got {self.max_wait_units}")
        if self.minimal_total_time < 0:
            raise ValueError(f"minimal_total_time must not be negative, got {self.minimal_total_time}")
        if not self.instruments:
            raise ValueError("instrument table must not be empty")

    @property
    def instrument_names(self) -> List[str]:
        return [instrument.name for instrument in self.instruments]

    @property
    def instrument_tokens(self) -> List[str]:
        return [instrument.token for instrument in self.instruments]

    @classmethod
    def load(cls, config_path: str = "config.json") -> 'CompositionSettings':
        """Load settings from file, ignoring unknown keys"""
        if os.path.exists(config_path):
            try:
                with open(config_path, 'r') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading settings from {config_path}: {e}")
                return cls()
            if not isinstance(data, dict):
                logger.error(f"Settings in {config_path} must be a JSON object")
                return cls()
            known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
            ignored = sorted(set(data) - set(known))
            if ignored:
                logger.warning(f"Ignoring unknown settings: {', '.join(ignored)}")
            try:
                return cls(**known)
            except (TypeError, ValueError) as e:
                logger.error(f"Invalid settings in {config_path}: {e}")
                return cls()
        return cls()  # Return defaults

    def save(self, config_path: str = "config.json"):
        """Save settings to file"""
        with open(config_path, 'w') as f:
            json.dump(asdict(self), f, indent=2)
        logger.info(f"Saved settings to {config_path}")
