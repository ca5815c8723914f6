"""
Shared synthetic signals for analyzer tests.
"""

import numpy as np
import pytest

from mixpoint.models import AudioBuffer

SAMPLE_RATE = 44100


def make_click_track(bpm: float = 120.0, seconds: float = 12.0, sample_rate: int = SAMPLE_RATE) -> AudioBuffer:
    """Single-sample impulses at every beat."""
    samples = np.zeros(int(seconds * sample_rate))
    period = int(round(sample_rate * 60.0 / bpm))
    samples[::period] = 0.9
    return AudioBuffer(samples=samples, sample_rate=sample_rate)


def make_sine(freq: float = 440.0, seconds: float = 0.5, sample_rate: int = SAMPLE_RATE, amplitude: float = 0.5) -> AudioBuffer:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return AudioBuffer(samples=amplitude * np.sin(2 * np.pi * freq * t), sample_rate=sample_rate)


@pytest.fixture
def click_track():
    return make_click_track()


@pytest.fixture
def sine_440():
    return make_sine(440.0)


@pytest.fixture
def silence():
    return AudioBuffer(samples=np.zeros(SAMPLE_RATE * 2), sample_rate=SAMPLE_RATE)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
