"""
scenecut.export.timecode - Timecode math utilities.

Handles conversion between seconds, frame counts, SMPTE non-drop-frame
timecodes and SRT timestamps at integer frame rates. Frame counts are the
unit of truth for frame-accurate exporters; seconds are converted with a
single rounding rule (half away from zero) everywhere.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from fractions import Fraction

from scenecut.exceptions import TimecodeError

Seconds = int | float | Fraction | Decimal


def _check_fps(fps: int) -> None:
    if isinstance(fps, bool) or not isinstance(fps, int) or fps <= 0:
        raise TimecodeError(f"fps must be a positive integer, got {fps!r}")


def to_decimal(seconds: Seconds) -> Decimal:
    """Convert a seconds value to an exact Decimal.

    Floats go through their shortest repr so that ``2.3`` becomes
    ``Decimal("2.3")`` rather than its binary expansion.

    Raises:
        TimecodeError: If the value is negative or not finite
    """
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise TimecodeError(f"Non-finite duration: {seconds}")
    if isinstance(seconds, Fraction):
        value = Decimal(seconds.numerator) / Decimal(seconds.denominator)
    elif isinstance(seconds, Decimal):
        if not seconds.is_finite():
            raise TimecodeError(f"Non-finite duration: {seconds}")
        value = seconds
    else:
        value = Decimal(repr(seconds)) if isinstance(seconds, float) else Decimal(seconds)
    if value < 0:
        raise TimecodeError(f"Negative duration: {seconds}")
    return value


def to_fraction(seconds: Seconds) -> Fraction:
    """Convert a seconds value to an exact Fraction (same rules as to_decimal)."""
    if isinstance(seconds, Fraction):
        if seconds < 0:
            raise TimecodeError(f"Negative duration: {seconds}")
        return seconds
    return Fraction(to_decimal(seconds))


def duration_to_frames(seconds: Seconds, fps: int) -> int:
    """Convert a duration in seconds to a whole frame count.

    Rounds half away from zero: 0.5s at 25fps is 13 frames.

    Args:
        seconds: Duration in seconds (>= 0)
        fps: Frames per second

    Returns:
        Frame count
    """
    _check_fps(fps)
    frames = to_decimal(seconds) * fps
    return int(frames.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def frames_to_timecode(total_frames: int, fps: int) -> str:
    """Convert frame count to non-drop-frame timecode.

    Args:
        total_frames: Total number of frames (>= 0)
        fps: Frames per second

    Returns:
        Timecode string in HH:MM:SS:FF format
    """
    _check_fps(fps)
    if total_frames < 0:
        raise TimecodeError(f"Negative frame count: {total_frames}")

    ff = total_frames % fps
    total_seconds = total_frames // fps
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600

    return f"{hh:02d}:{mm:02d}:{ss:02d}:{ff:02d}"


def timecode_to_frames(timecode: str, fps: int) -> int:
    """Convert non-drop-frame timecode to frame count.

    Args:
        timecode: Timecode string in HH:MM:SS:FF format
        fps: Frames per second

    Returns:
        Frame count
    """
    _check_fps(fps)
    parts = timecode.split(":")
    if len(parts) != 4:
        raise TimecodeError(f"Malformed timecode: {timecode!r}")
    try:
        hh, mm, ss, ff = (int(p) for p in parts)
    except ValueError as e:
        raise TimecodeError(f"Malformed timecode: {timecode!r}") from e

    return (hh * 3600 + mm * 60 + ss) * fps + ff


def seconds_to_srt_time(seconds: Seconds, offset_seconds: Seconds = 0) -> str:
    """Convert seconds to an SRT timestamp.

    Whole seconds and milliseconds are floored independently after the
    offset is added.

    Args:
        seconds: Position in seconds (>= 0)
        offset_seconds: Fixed start offset added to every timestamp

    Returns:
        Timestamp string in HH:MM:SS,mmm format
    """
    total = to_decimal(seconds) + to_decimal(offset_seconds)

    whole = int(total.to_integral_value(rounding=ROUND_FLOOR))
    ms = int(((total - whole) * 1000).to_integral_value(rounding=ROUND_FLOOR))

    hrs = whole // 3600
    mins = (whole % 3600) // 60
    secs = whole % 60

    return f"{hrs:02d}:{mins:02d}:{secs:02d},{ms:03d}"
