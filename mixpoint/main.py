"""
Command-line entry point: analyze two tracks and report the best transition
"""

import argparse
import sys
from typing import List, Optional

import structlog

from mixpoint.analysis.analyzer import analyze_audio
from mixpoint.analysis.camelot import key_to_camelot
from mixpoint.analysis.transition import find_best_transition
from mixpoint.config import settings
from mixpoint.models import TrackAnalysis, TransitionSuggestion
from mixpoint.utils.audio import AudioDecodeError, load_audio
from mixpoint.utils.logging import setup_logging

logger = structlog.get_logger()


def format_time(seconds: float) -> str:
    """Format seconds as mm:ss, rounded to the nearest second."""
    if seconds < 0:
        seconds = 0
    total = int(seconds + 0.5)
    return f"{total // 60:02d}:{total % 60:02d}"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser"""
    parser = argparse.ArgumentParser(
        prog="mixpoint",
        description="Suggest the best point to mix from one track into another",
    )
    parser.add_argument("track_a", help="Track to mix out of")
    parser.add_argument("track_b", help="Track to mix into")
    parser.add_argument("--window-seconds", type=float, default=settings.energy_window_seconds,
                        help=f"Energy window size in seconds (default: {settings.energy_window_seconds})")
    parser.add_argument("--min-bpm", type=float, default=settings.min_bpm,
                        help=f"Lowest tempo considered (default: {settings.min_bpm})")
    parser.add_argument("--max-bpm", type=float, default=settings.max_bpm,
                        help=f"Highest tempo considered (default: {settings.max_bpm})")
    parser.add_argument("--log-level", default=settings.log_level,
                        help=f"Logging level (default: {settings.log_level})")
    return parser


def format_track_report(label: str, path: str, analysis: TrackAnalysis) -> List[str]:
    """Human-readable summary lines for one analyzed track."""
    lines = [
        f"Track {label}: {path}",
        f"  Sample rate: {analysis.sample_rate} Hz",
        f"  Channels   : {analysis.channels} (converted to mono)",
        f"  Frames     : {analysis.frames}",
        f"  Duration   : {analysis.duration:.2f} s ({format_time(analysis.duration)})",
    ]

    if analysis.bpm <= 0:
        lines.append("  BPM        : (could not estimate)")
    else:
        lines.append(f"  BPM        : {analysis.bpm:.2f}")

    curve = analysis.energy_curve
    if curve.is_empty:
        lines.append("  Energy     : (could not compute)")
    else:
        lines.append(f"  Energy     : windows={len(curve)} windowSec={curve.window_seconds}")
        lines.append(f"               min={curve.values.min():.6f} max={curve.values.max():.6f}")

    camelot = key_to_camelot(analysis.key)
    key_line = f"  Key        : {analysis.key_label}"
    if camelot:
        key_line += f" ({camelot})"
    lines.append(key_line)
    return lines


def format_suggestion_report(suggestion: TransitionSuggestion) -> List[str]:
    """Human-readable summary lines for a transition suggestion."""
    return [
        "",
        "=== Suggested transition ===",
        f"  Mix out of Track A at {format_time(suggestion.time_a)}"
        f" -> into Track B at {format_time(suggestion.time_b)}",
        f"  Compatibility score: {suggestion.score:.2f} / 10",
        f"    BPM component   : {suggestion.bpm_component * 10:.2f} / 10",
        f"    Key component   : {suggestion.key_component * 10:.2f} / 10",
        f"    Energy component: {suggestion.energy_component * 10:.2f} / 10",
    ]


def main(argv: Optional[List[str]] = None) -> int:
    """Analyze two tracks and print the suggested transition"""
    args = create_parser().parse_args(argv)
    setup_logging(args.log_level, settings.log_file)

    analyses = []
    try:
        for label, path in (("A", args.track_a), ("B", args.track_b)):
            audio = load_audio(
                path,
                target_peak=settings.target_peak,
                target_sample_rate=settings.target_sample_rate,
            )
            analysis = analyze_audio(
                audio,
                window_seconds=args.window_seconds,
                min_bpm=args.min_bpm,
                max_bpm=args.max_bpm,
            )
            print("\n".join(format_track_report(label, path, analysis)))
            analyses.append(analysis)
    except AudioDecodeError as e:
        logger.error("Decoding failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    track_a, track_b = analyses
    if not track_a.energy_curve.is_empty and not track_b.energy_curve.is_empty:
        suggestion = find_best_transition(track_a, track_b)
        print("\n".join(format_suggestion_report(suggestion)))

    print("Analysis completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
