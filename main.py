#!/usr/bin/env python3
"""
MICO - MIDI Compose timeline compiler entry point
Imports MIDI files as tracks at their offsets and prints the merged prompt
"""
import sys
import logging
import argparse

logger = logging.getLogger(__name__)


def check_python_version():
    """Check Python version compatibility"""
    if sys.version_info < (3, 8):
        print(f"Python 3.8+ required. Current: {sys.version_info.major}.{sys.version_info.minor}")
        return False
    return True


def check_dependencies():
    """Check for required packages"""
    required = ['numpy', 'mido', 'pretty_midi']
    missing = []

    for pkg in required:
        try:
            __import__(pkg)
        except ImportError:
            missing.append(pkg)
            logger.warning(f"{pkg} missing")
    return missing


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Merge MIDI files into one timeline prompt")
    parser.add_argument('files', nargs='*', help="MIDI files, one track each")
    parser.add_argument('--offset', type=int, action='append', default=[],
                        help="track offset in ms, repeat once per file")
    parser.add_argument('--config', default="config.json", help="settings file")
    parser.add_argument('--midi-out', help="also write the merged tracks to this MIDI file")
    parser.add_argument('--log-level', help="override the configured log level")
    return parser


def main(argv=None):
    """Main entry point"""
    if not check_python_version():
        return 1

    missing = check_dependencies()
    if missing:
        print(f"Missing dependencies: {', '.join(missing)}")
        print(f"Install with: pip install {' '.join(missing)}")
        return 1

    from application import MidiApplication
    from utils.logging import setup_logging

    args = build_parser().parse_args(argv)
    app = MidiApplication(args.config)
    setup_logging(args.log_level or app.settings.log_level, app.settings.log_file)

    app.load_tracks(args.files, args.offset)
    prompt = app.export_prompt()
    print(prompt)

    if args.midi_out and not app.save_document(args.midi_out):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
