"""Utility modules"""

from mixpoint.utils.audio import AudioDecodeError, load_audio, get_audio_duration
from mixpoint.utils.logging import setup_logging

__all__ = [
    "AudioDecodeError",
    "load_audio",
    "get_audio_duration",
    "setup_logging",
]
