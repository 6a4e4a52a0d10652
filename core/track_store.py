"""Ordered store of tracks on a shared timeline"""

import logging
from typing import Iterator, List, Optional

from .errors import UnknownTrack
from .midi_data import Track
from .tokens import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_MINIMAL_TOTAL_TIME = 5000


def snap_to_grid(delta_time: int, grid_ms: int) -> int:
    """Round a time delta half-up to a multiple of grid_ms"""
    return round_half_up(delta_time, grid_ms) * grid_ms


class TrackStore:
    """
    Owns every track, in display order.
    total_time is the end of the furthest track, never shorter than
    the configured minimal timeline length.
    """

    def __init__(self, minimal_total_time: int = DEFAULT_MINIMAL_TOTAL_TIME):
        self.minimal_total_time = minimal_total_time
        self._tracks: List[Track] = []
        self.total_time = minimal_total_time
        self.play_start_time = 0

    @property
    def tracks(self) -> List[Track]:
        return list(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def __contains__(self, track_id: str) -> bool:
        return self.get(track_id) is not None

    def get(self, track_id: str) -> Optional[Track]:
        for track in self._tracks:
            if track.id == track_id:
                return track
        return None

    def require(self, track_id: str) -> Track:
        track = self.get(track_id)
        if track is None:
            raise UnknownTrack(track_id)
        return track

    def add_track(self, main_instrument: str = "") -> Track:
        """Append an empty track with a fresh id"""
        track = Track(main_instrument=main_instrument)
        while track.id in self:
            track = Track(main_instrument=main_instrument)
        self._tracks.append(track)
        logger.debug(f"Added track {track.id}")
        return track

    def remove_track(self, track_id: str) -> bool:
        """Remove a track by id. Returns True if it was present."""
        track = self.get(track_id)
        if track is None:
            logger.debug(f"remove_track: no track {track_id}")
            return False
        self._tracks.remove(track)
        self.recompute_total_time()
        return True

    def move_track(self, track_id: str, delta_time: int, snap_ms: Optional[int] = None) -> int:
        """
        Shift a track's offset by delta_time, clamped so the offset stays
        non-negative and the track starts no later than the current total_time.
        Returns the delta actually applied.
        """
        track = self.get(track_id)
        if track is None:
            logger.debug(f"move_track: no track {track_id}")
            return 0

        if snap_ms:
            delta_time = snap_to_grid(delta_time, snap_ms)
        applied = min(max(delta_time, -track.offset_time), self.total_time - track.offset_time)
        track.offset_time += applied
        self.recompute_total_time()
        return applied

    def move_play_start(self, delta_time: int) -> int:
        """Shift the play-start cursor, clamped to [0, total_time]"""
        applied = min(max(delta_time, -self.play_start_time), self.total_time - self.play_start_time)
        self.play_start_time += applied
        return applied

    def recompute_total_time(self) -> int:
        ends = [track.end_time for track in self._tracks]
        self.total_time = max([self.minimal_total_time] + ends)
        self.play_start_time = min(self.play_start_time, self.total_time)
        return self.total_time

    def clear(self):
        """Drop every track and reset the timeline"""
        self._tracks.clear()
        self.total_time = self.minimal_total_time
        self.play_start_time = 0
        logger.info("Cleared all tracks")
