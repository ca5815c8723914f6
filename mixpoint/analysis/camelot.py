"""
Camelot Wheel conversion module

Converts estimated keys to Camelot notation for the transition report.
"""

from typing import Dict, Optional, Tuple

from mixpoint.models import Key, MAJOR, MINOR

# (pitch class, mode) -> Camelot code
KEY_TO_CAMELOT: Dict[Tuple[int, str], str] = {
    # Major keys (B column)
    (0, MAJOR): "8B",
    (7, MAJOR): "9B",
    (2, MAJOR): "10B",
    (9, MAJOR): "11B",
    (4, MAJOR): "12B",
    (11, MAJOR): "1B",
    (6, MAJOR): "2B",
    (1, MAJOR): "3B",
    (8, MAJOR): "4B",
    (3, MAJOR): "5B",
    (10, MAJOR): "6B",
    (5, MAJOR): "7B",
    # Minor keys (A column)
    (9, MINOR): "8A",
    (4, MINOR): "9A",
    (11, MINOR): "10A",
    (6, MINOR): "11A",
    (1, MINOR): "12A",
    (8, MINOR): "1A",
    (3, MINOR): "2A",
    (10, MINOR): "3A",
    (5, MINOR): "4A",
    (0, MINOR): "5A",
    (7, MINOR): "6A",
    (2, MINOR): "7A",
}

# Reverse mapping for getting key from Camelot
CAMELOT_TO_KEY: Dict[str, Tuple[int, str]] = {v: k for k, v in KEY_TO_CAMELOT.items()}


def key_to_camelot(key: Optional[Key]) -> Optional[str]:
    """
    Convert a key to Camelot notation.

    Args:
        key: Estimated key, or None when unknown

    Returns:
        Camelot notation (e.g., "8A", "11B"), or None for an unknown key
    """
    if key is None:
        return None
    return KEY_TO_CAMELOT[(key.root, key.mode)]


def camelot_to_key(camelot: str) -> Optional[Key]:
    """
    Convert Camelot notation to a key.

    Args:
        camelot: Camelot notation (e.g., "8A", "8b")

    Returns:
        Key, or None when the code is not on the wheel
    """
    entry = CAMELOT_TO_KEY.get(camelot.strip().upper())
    if entry is None:
        return None
    return Key(*entry)
