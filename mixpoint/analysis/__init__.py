"""Audio analysis module"""

from mixpoint.analysis.analyzer import analyze_audio, suggest_transition
from mixpoint.analysis.bpm import estimate_bpm
from mixpoint.analysis.key import estimate_key, format_key, parse_key
from mixpoint.analysis.energy import compute_energy_curve
from mixpoint.analysis.camelot import key_to_camelot
from mixpoint.analysis.transition import (
    bpm_compatibility,
    find_best_transition,
    key_compatibility,
    normalize_min_max,
)

__all__ = [
    "analyze_audio",
    "suggest_transition",
    "estimate_bpm",
    "estimate_key",
    "format_key",
    "parse_key",
    "compute_energy_curve",
    "key_to_camelot",
    "bpm_compatibility",
    "find_best_transition",
    "key_compatibility",
    "normalize_min_max",
]
