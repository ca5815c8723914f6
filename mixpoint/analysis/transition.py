"""
Transition scoring module

Combines tempo, key and energy-curve alignment to find the best point
to mix out of one track and into another.
"""

from typing import Optional, Tuple, Union

import numpy as np
import structlog

from mixpoint.analysis.key import parse_key
from mixpoint.models import Key, TrackAnalysis, TransitionSuggestion

logger = structlog.get_logger()

BPM_WEIGHT = 0.4
KEY_WEIGHT = 0.3
ENERGY_WEIGHT = 0.3

LEVEL_WEIGHT = 0.6
RISE_WEIGHT = 0.4

NEUTRAL_SCORE = 0.5
FLAT_CURVE_EPSILON = 1e-12

# Rows of A scored per block in the pair search
SEARCH_BLOCK_ROWS = 256


def clamp01(value):
    return np.clip(value, 0.0, 1.0)


def bpm_compatibility(bpm_a: float, bpm_b: float) -> float:
    """
    Score tempo compatibility from the relative BPM difference.

    Within 3% mixes cleanly, 6% needs a small stretch, 10% a moderate
    one; anything wider is a poor match. Unknown tempo is neutral.
    """
    if bpm_a <= 0 or bpm_b <= 0:
        return NEUTRAL_SCORE

    average = 0.5 * (bpm_a + bpm_b)
    rel_diff = abs(bpm_a - bpm_b) / average

    if rel_diff <= 0.03:
        return 1.0
    elif rel_diff <= 0.06:
        return 0.7
    elif rel_diff <= 0.10:
        return 0.4
    else:
        return 0.15


def key_compatibility(
    key_a: Union[Key, str, None],
    key_b: Union[Key, str, None]
) -> float:
    """
    Score harmonic compatibility from the pitch-class distance of the roots.

    Same root 1.0, fourth/fifth 0.85, minor-third (relative) 0.75,
    semitone 0.6, tritone 0.2, anything else 0.4. Unknown key is neutral.
    """
    key_a = parse_key(key_a)
    key_b = parse_key(key_b)
    if key_a is None or key_b is None:
        return NEUTRAL_SCORE

    diff = abs(key_a.root - key_b.root) % 12

    if diff == 0:
        return 1.0
    if diff in (5, 7):
        return 0.85
    if diff in (3, 9):
        return 0.75
    if diff == 6:
        return 0.2
    if diff in (1, 11):
        return 0.6
    return 0.4


def normalize_min_max(values) -> np.ndarray:
    """Scale to [0, 1]; a flat curve maps to all zeros."""
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return np.zeros(0)

    low = np.min(values)
    high = np.max(values)
    if high - low < FLAT_CURVE_EPSILON:
        return np.zeros(len(values))
    return (values - low) / (high - low)


def _slopes(curve: np.ndarray) -> np.ndarray:
    return np.diff(curve, prepend=curve[0])


def energy_alignment_matrix(
    norm_a: np.ndarray,
    norm_b: np.ndarray,
    start: int = 0,
    stop: Optional[int] = None
) -> np.ndarray:
    """
    Energy score for every (exit window in A, entry window in B) pair.

    Favors leaving A at a quiet point while its energy falls and
    entering B at a loud point while its energy rises. Only rows
    start..stop of A are scored; slopes still use the window before
    `start`.
    """
    falling_a = np.maximum(0.0, -_slopes(norm_a))[start:stop]
    rising_b = np.maximum(0.0, _slopes(norm_b))

    exit_level = 1.0 - norm_a[start:stop]
    entry_level = norm_b
    level = clamp01(np.outer(exit_level, entry_level))
    rise = clamp01(np.outer(falling_a, rising_b))

    return LEVEL_WEIGHT * level + RISE_WEIGHT * rise


def search_energy_alignment(
    norm_a: np.ndarray,
    norm_b: np.ndarray,
    block_rows: int = SEARCH_BLOCK_ROWS
) -> Tuple[int, int, float]:
    """
    Best (window in A, window in B, score) over all pairs.

    Rows of A are scored a block at a time so memory stays at
    block_rows x |B|. Within a block argmax keeps the first row-major
    maximum, and a later block only wins with a strictly greater score.
    """
    best_a, best_b, best_score = 0, 0, -np.inf
    for start in range(0, len(norm_a), block_rows):
        block = energy_alignment_matrix(norm_a, norm_b, start, start + block_rows)
        row, col = np.unravel_index(int(np.argmax(block)), block.shape)
        if block[row, col] > best_score:
            best_a, best_b, best_score = start + int(row), int(col), float(block[row, col])
    return best_a, best_b, best_score


def find_best_transition(a: TrackAnalysis, b: TrackAnalysis) -> TransitionSuggestion:
    """
    Find the best transition window between two analyzed tracks.

    Every pair of energy windows is scored; ties keep the first maximum
    in row-major (window of A, then window of B) order.

    Args:
        a: Analysis of the outgoing track
        b: Analysis of the incoming track

    Returns:
        TransitionSuggestion with a 0-10 score, or an all-zero
        suggestion when either energy curve is unusable
    """
    if (
        a.energy_curve.is_empty
        or b.energy_curve.is_empty
        or a.window_seconds <= 0
        or b.window_seconds <= 0
    ):
        logger.debug(
            "Transition skipped: missing energy curve",
            windows_a=len(a.energy_curve),
            windows_b=len(b.energy_curve),
        )
        return TransitionSuggestion()

    bpm_score = bpm_compatibility(a.bpm, b.bpm)
    key_score = key_compatibility(a.key, b.key)

    norm_a = normalize_min_max(a.energy_curve.values)
    norm_b = normalize_min_max(b.energy_curve.values)

    best_a, best_b, best_score = search_energy_alignment(norm_a, norm_b)
    energy_score = float(clamp01(best_score))

    total = (
        BPM_WEIGHT * bpm_score +
        KEY_WEIGHT * key_score +
        ENERGY_WEIGHT * energy_score
    )

    suggestion = TransitionSuggestion(
        score=float(clamp01(total)) * 10.0,
        time_a=int(best_a) * a.window_seconds,
        time_b=int(best_b) * b.window_seconds,
        bpm_component=bpm_score,
        key_component=key_score,
        energy_component=energy_score,
        index_a=int(best_a),
        index_b=int(best_b),
    )

    logger.debug("Transition scored", **suggestion.to_dict())
    return suggestion
