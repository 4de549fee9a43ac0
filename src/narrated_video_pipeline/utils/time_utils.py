"""
Time utility functions for the narrated video pipeline.
"""

from datetime import datetime
from typing import Optional


def _split_units(seconds: float, fraction_digits: int):
    """Split seconds into (hours, minutes, seconds, fraction) after rounding."""
    if seconds < 0:
        raise ValueError("Timestamp cannot be negative")

    scale = 10 ** fraction_digits
    total_units = int(round(seconds * scale))

    whole_seconds, fraction = divmod(total_units, scale)
    hours, remainder = divmod(whole_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return hours, minutes, secs, fraction


def format_ass_timestamp(seconds: float) -> str:
    """
    Format seconds in the ASS timestamp grammar (H:MM:SS.cc).

    Args:
        seconds: Offset from media start

    Returns:
        Timestamp with centisecond resolution
    """
    hours, minutes, secs, centis = _split_units(seconds, 2)
    return f"{hours}:{minutes:02d}:{secs:02d}.{centis:02d}"


def format_srt_timestamp(seconds: float) -> str:
    """
    Format seconds in the SRT timestamp grammar (HH:MM:SS,mmm).

    Args:
        seconds: Offset from media start

    Returns:
        Timestamp with millisecond resolution
    """
    hours, minutes, secs, millis = _split_units(seconds, 3)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """Milliseconds since the Unix epoch for ``moment`` (now when omitted)."""
    moment = moment or datetime.now()
    return int(moment.timestamp() * 1000)
