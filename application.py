import logging
from typing import List, Optional, Sequence

from config.settings import CompositionSettings
from core.editor import CompositionEditor, Notifier
from core.midi_data import Track

logger = logging.getLogger(__name__)


class MidiApplication:
    """Central application controller"""

    def __init__(self, config_path: str = "config.json", notifier: Optional[Notifier] = None):
        self.config_path = config_path
        self.settings = CompositionSettings.load(config_path)
        self.editor = CompositionEditor(self.settings, notifier=notifier)

    def save_settings(self, config_path: Optional[str] = None):
        """Save current settings to file"""
        path = config_path or self.config_path
        try:
            self.settings.save(path)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    def new_document(self):
        """Start over with an empty timeline"""
        self.editor.clear_all()

    def load_tracks(self, filenames: Sequence[str], offsets: Sequence[int] = ()) -> List[Track]:
        """Import MIDI files as tracks; missing offsets default to 0"""
        tracks = []
        for i, filename in enumerate(filenames):
            offset = offsets[i] if i < len(offsets) else 0
            try:
                tracks.append(self.editor.import_track(filename, offset))
            except (OSError, ValueError, EOFError) as e:
                logger.error(f"Failed to load MIDI {filename}: {e}")
        return tracks

    def save_document(self, filename: str) -> bool:
        """Save all tracks as one MIDI file"""
        try:
            self.editor.export_midi(filename)
            return True
        except OSError as e:
            logger.error(f"Failed to save MIDI {filename}: {e}")
            return False

    def export_prompt(self) -> str:
        return self.editor.export_prompt()
