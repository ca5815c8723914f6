"""
Data records shared by the analyzers.

All records are frozen: analyzers build them once and never mutate them.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

MAJOR = "major"
MINOR = "minor"

# Shared enharmonic spellings for the black keys
NOTE_NAMES = [
    "C", "C#/Db", "D", "D#/Eb", "E", "F", "F#/Gb", "G", "G#/Ab", "A", "A#/Bb", "B"
]

UNKNOWN_KEY_LABEL = "unknown"


def _readonly(samples) -> np.ndarray:
    array = np.array(samples, dtype=np.float64)
    if array.ndim > 1:
        raise ValueError(f"Expected 1-D mono samples, got shape {array.shape}")
    array = array.reshape(-1)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class AudioBuffer:
    """Mono samples in [-1, 1] plus the sample rate and source channel count."""
    samples: np.ndarray
    sample_rate: int
    channels: int = 1

    def __post_init__(self):
        object.__setattr__(self, "samples", _readonly(self.samples))

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class EnergyCurve:
    """RMS value per fixed-length window."""
    values: np.ndarray
    window_seconds: float

    def __post_init__(self):
        object.__setattr__(self, "values", _readonly(self.values))

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0


@dataclass(frozen=True)
class Key:
    """Tonal root as a pitch class (0 = C) and a mode."""
    root: int
    mode: str = MAJOR

    def __post_init__(self):
        if self.mode not in (MAJOR, MINOR):
            raise ValueError(f"Unknown mode: {self.mode}")
        object.__setattr__(self, "root", int(self.root) % 12)

    @property
    def root_name(self) -> str:
        return NOTE_NAMES[self.root]

    @property
    def label(self) -> str:
        return f"{self.root_name} {self.mode}"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class TrackAnalysis:
    """
    Per-track analysis results.

    A bpm of 0.0 means the tempo could not be estimated; a key of None
    means the key could not be estimated.
    """
    bpm: float
    key: Optional[Key]
    energy_curve: EnergyCurve
    duration: float = 0.0
    frames: int = 0
    sample_rate: int = 0
    channels: int = 0

    @property
    def window_seconds(self) -> float:
        return self.energy_curve.window_seconds

    @property
    def key_label(self) -> str:
        return self.key.label if self.key is not None else UNKNOWN_KEY_LABEL


@dataclass(frozen=True)
class TransitionSuggestion:
    """Best mix point between two tracks, score on a 0-10 scale."""
    score: float = 0.0
    time_a: float = 0.0
    time_b: float = 0.0
    bpm_component: float = 0.0
    key_component: float = 0.0
    energy_component: float = 0.0
    index_a: int = 0
    index_b: int = 0

    def to_dict(self) -> dict:
        return {
            "score": round(self.score, 3),
            "timeA": self.time_a,
            "timeB": self.time_b,
            "bpmComponent": round(self.bpm_component, 3),
            "keyComponent": round(self.key_component, 3),
            "energyComponent": round(self.energy_component, 3),
        }
