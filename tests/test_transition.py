"""
Tests for transition scoring: tempo, key and energy alignment.
"""

import numpy as np
import pytest

from mixpoint.analysis.transition import (
    bpm_compatibility,
    energy_alignment_matrix,
    search_energy_alignment,
    find_best_transition,
    key_compatibility,
    normalize_min_max,
)
from mixpoint.models import EnergyCurve, Key, MAJOR, MINOR, TrackAnalysis, TransitionSuggestion


def make_track(curve, bpm=128.0, key=Key(9, MINOR), window_seconds=0.5):
    return TrackAnalysis(
        bpm=bpm,
        key=key,
        energy_curve=EnergyCurve(values=np.asarray(curve, dtype=float), window_seconds=window_seconds),
    )


class TestBpmCompatibility:
    """Relative tempo difference thresholds."""

    def test_identical(self):
        assert bpm_compatibility(128, 128) == 1.0

    def test_within_three_percent(self):
        assert bpm_compatibility(120, 122) == 1.0

    def test_small_stretch(self):
        assert bpm_compatibility(120, 126) == 0.7

    def test_moderate_stretch(self):
        assert bpm_compatibility(120, 130) == 0.4

    def test_large_mismatch(self):
        assert bpm_compatibility(100, 140) == 0.15

    @pytest.mark.parametrize("bpm_a,bpm_b", [(0, 120), (120, 0), (0, 0), (-5, 120)])
    def test_unknown_is_neutral(self, bpm_a, bpm_b):
        assert bpm_compatibility(bpm_a, bpm_b) == 0.5

    def test_symmetric(self):
        assert bpm_compatibility(120, 126) == bpm_compatibility(126, 120)


class TestKeyCompatibility:
    """Harmonic distance between roots."""

    @pytest.mark.parametrize("root_b,expected", [
        (0, 1.0),    # same root
        (7, 0.85),   # fifth
        (5, 0.85),   # fourth
        (9, 0.75),   # relative
        (3, 0.75),
        (6, 0.2),    # tritone
        (1, 0.6),    # semitone
        (11, 0.6),
        (2, 0.4),
        (4, 0.4),
        (8, 0.4),
        (10, 0.4),
    ])
    def test_distance_rules(self, root_b, expected):
        assert key_compatibility(Key(0, MAJOR), Key(root_b, MAJOR)) == expected

    def test_mode_does_not_matter(self):
        assert key_compatibility(Key(9, MINOR), Key(9, MAJOR)) == 1.0

    def test_unknown_is_neutral(self):
        assert key_compatibility(None, Key(0, MAJOR)) == 0.5
        assert key_compatibility(Key(0, MAJOR), None) == 0.5
        assert key_compatibility("unknown", "C major") == 0.5

    def test_accepts_labels(self):
        assert key_compatibility("A minor", "E minor") == 0.85

    def test_sharp_label_is_not_read_as_natural(self):
        """A C#/Db label is one semitone from C, not the same key."""
        assert key_compatibility("C#/Db major", "C major") == 0.6

    def test_symmetric_for_all_pairs(self):
        keys = [Key(root, mode) for root in range(12) for mode in (MAJOR, MINOR)] + [None]
        for key_a in keys:
            for key_b in keys:
                assert key_compatibility(key_a, key_b) == key_compatibility(key_b, key_a)


class TestNormalizeMinMax:
    """Min-max scaling of energy curves."""

    def test_scales_to_unit_range(self):
        assert normalize_min_max([1.0, 2.0, 3.0]).tolist() == [0.0, 0.5, 1.0]

    def test_flat_curve_is_all_zero(self):
        assert normalize_min_max([0.3, 0.3, 0.3]).tolist() == [0.0, 0.0, 0.0]

    def test_nearly_flat_curve_is_all_zero(self):
        assert normalize_min_max([0.3, 0.3 + 1e-13]).tolist() == [0.0, 0.0]

    def test_empty(self):
        assert len(normalize_min_max([])) == 0

    def test_idempotent(self, rng):
        once = normalize_min_max(rng.uniform(0, 1, 50))
        twice = normalize_min_max(once)
        assert np.allclose(once, twice)


class TestEnergyAlignment:
    """Per-pair energy scores."""

    def test_quiet_exit_loud_entry_scores_level(self):
        scores = energy_alignment_matrix(np.array([1.0, 0.0]), np.array([0.0, 1.0]))

        # A falls 1 -> 0 and B rises 0 -> 1 at index 1
        assert scores[1, 1] == pytest.approx(0.6 + 0.4)
        assert scores[0, 0] == pytest.approx(0.0)

    def test_first_window_has_no_slope(self):
        scores = energy_alignment_matrix(np.array([0.0, 1.0]), np.array([1.0, 0.0]))
        assert scores[0, 0] == pytest.approx(0.6)


class TestBlockedSearch:
    """Row-blocked pair search matches the full score matrix."""

    @pytest.mark.parametrize("block_rows", [1, 2, 3, 7, 1000])
    def test_matches_full_matrix_with_ties(self, rng, block_rows):
        """Curves with few distinct levels tie often; the first row-major maximum still wins."""
        for _ in range(25):
            norm_a = rng.integers(0, 3, rng.integers(1, 30)) / 2.0
            norm_b = rng.integers(0, 3, rng.integers(1, 30)) / 2.0

            full = energy_alignment_matrix(norm_a, norm_b)
            expected = np.unravel_index(int(np.argmax(full)), full.shape)

            best_a, best_b, best_score = search_energy_alignment(norm_a, norm_b, block_rows=block_rows)

            assert (best_a, best_b) == (int(expected[0]), int(expected[1]))
            assert best_score == full[expected]

    def test_slopes_cross_block_boundaries(self):
        """The drop into row 2 counts even when row 2 starts a new block."""
        norm_a = np.array([1.0, 1.0, 0.0])
        norm_b = np.array([0.0, 1.0])

        block = energy_alignment_matrix(norm_a, norm_b, 2, 4)

        assert block.shape == (1, 2)
        assert block[0, 1] == pytest.approx(1.0)
        assert search_energy_alignment(norm_a, norm_b, block_rows=2) == (2, 1, pytest.approx(1.0))

    def test_blocks_stay_bounded(self, monkeypatch):
        """No scored block is taller than block_rows."""
        from mixpoint.analysis import transition

        shapes = []
        real_matrix = transition.energy_alignment_matrix

        def recording_matrix(*args):
            block = real_matrix(*args)
            shapes.append(block.shape)
            return block

        monkeypatch.setattr(transition, "energy_alignment_matrix", recording_matrix)
        search_energy_alignment(np.linspace(1, 0, 100), np.linspace(0, 1, 50), block_rows=16)

        assert len(shapes) == 7
        assert max(rows for rows, _ in shapes) == 16
        assert all(cols == 50 for _, cols in shapes)


class TestFindBestTransition:
    """Exhaustive search over window pairs."""

    def test_falling_into_rising_picks_final_windows(self):
        """A fades to silence and B builds from silence: mix at both ends."""
        track_a = make_track([4.0, 3.0, 2.0, 1.0, 0.0])
        track_b = make_track([0.0, 1.0, 2.0, 3.0, 4.0])

        suggestion = find_best_transition(track_a, track_b)

        assert suggestion.index_a == 4
        assert suggestion.index_b == 4
        assert suggestion.time_a == pytest.approx(2.0)
        assert suggestion.time_b == pytest.approx(2.0)
        assert suggestion.bpm_component == 1.0
        assert suggestion.key_component == 1.0
        assert suggestion.energy_component == pytest.approx(0.625)
        assert suggestion.score == pytest.approx(8.875)

    def test_timestamps_use_each_tracks_window(self):
        track_a = make_track([1.0, 0.0], window_seconds=2.0)
        track_b = make_track([0.0, 1.0], window_seconds=0.25)

        suggestion = find_best_transition(track_a, track_b)

        assert suggestion.time_a == pytest.approx(2.0)
        assert suggestion.time_b == pytest.approx(0.25)

    def test_ties_keep_first_in_row_major_order(self):
        """Every window of a flat A ties; the first row and first loud B window win."""
        track_a = make_track([1.0, 1.0, 1.0])
        track_b = make_track([0.0, 1.0, 1.0])

        suggestion = find_best_transition(track_a, track_b)

        assert (suggestion.index_a, suggestion.index_b) == (0, 1)
        assert suggestion.energy_component == pytest.approx(0.6)

    def test_unknown_tempo_and_key_are_neutral(self):
        track_a = make_track([0.5, 0.5], bpm=0.0, key=None)
        track_b = make_track([0.5, 0.5], bpm=0.0, key=None)

        suggestion = find_best_transition(track_a, track_b)

        assert suggestion.bpm_component == 0.5
        assert suggestion.key_component == 0.5
        assert suggestion.energy_component == 0.0
        assert suggestion.score == pytest.approx(3.5)
        assert (suggestion.time_a, suggestion.time_b) == (0.0, 0.0)

    def test_score_within_bounds(self, rng):
        for _ in range(20):
            track_a = make_track(rng.uniform(0, 1, rng.integers(1, 40)), bpm=rng.uniform(60, 200))
            track_b = make_track(rng.uniform(0, 1, rng.integers(1, 40)), bpm=rng.uniform(60, 200))

            suggestion = find_best_transition(track_a, track_b)

            assert 0.0 <= suggestion.score <= 10.0
            for component in (suggestion.bpm_component, suggestion.key_component, suggestion.energy_component):
                assert 0.0 <= component <= 1.0


class TestFindBestTransitionSoftFailure:
    """Unusable curves give an all-zero suggestion."""

    def test_empty_curve_a(self):
        assert find_best_transition(make_track([]), make_track([1.0, 2.0])) == TransitionSuggestion()

    def test_empty_curve_b(self):
        assert find_best_transition(make_track([1.0]), make_track([])) == TransitionSuggestion()

    def test_non_positive_window(self):
        track_a = make_track([1.0, 0.0], window_seconds=0.0)
        track_b = make_track([0.0, 1.0])
        assert find_best_transition(track_a, track_b).score == 0.0
