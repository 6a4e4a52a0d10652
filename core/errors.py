"""Error kinds raised by the composition core"""


class CompositionError(Exception):
    """Base class for recoverable composition errors"""


class NoDeviceSelected(CompositionError):
    """Recording was requested without an input device"""

    def __init__(self, message: str = "Please select a MIDI device first"):
        super().__init__(message)


class UnknownTrack(CompositionError):
    """An operation referenced a track id that is not in the store"""

    def __init__(self, track_id: str):
        self.track_id = track_id
        super().__init__(f"Unknown track: {track_id}")


class InvalidEventRange(UserWarning):
    """Emitted when out-of-range MIDI data is clamped"""
