"""Capture time inference from filenames and year folders.

Patterns are tried in a fixed order and the first one yielding a valid
instant wins:

1. ``YYYYMMDD_HHMMSS``          e.g. ``20210529_155539.jpg``, ``IMG_20210529_155539.jpg``
2. ``YYYYMMDDHHMMSS[mmm]``      e.g. ``CameraZOOM-20131224200623261.jpg``
                                (a digit run of exactly 14 or 17 digits)
3. ``_YYYYMMDDHHMMSS_``         e.g. ``DJI_20250308180700_0070_D.jpg``
4. parent ``Photos from YYYY``  e.g. ``Photos from 2024/P01020304.jpg`` (year only)

All fields are read as UTC wall-clock values. A match with an impossible
calendar value (month 13, day 32, ...) only fails that pattern; the next one
is tried.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimestampMatch:
    """An inferred capture instant and the pattern that produced it."""
    timestamp: datetime
    pattern: str


@dataclass(frozen=True)
class TimestampPattern:
    """One ordered inference attempt.

    Attributes:
        name: Pattern label used in logs and matches
        regex: Compiled expression searched in the chosen subject
        subject: Extracts the searched string from the media path
        build: Builds a datetime from a match; may raise ValueError
    """
    name: str
    regex: re.Pattern
    subject: Callable[[Path], str]
    build: Callable[[re.Match], datetime]

    def attempt(self, path: Path) -> Optional[TimestampMatch]:
        match = self.regex.search(self.subject(path))
        if not match:
            return None

        try:
            timestamp = self.build(match)
        except ValueError as e:
            logger.debug(f"Rejected timestamp candidate: {{'path': {str(path)!r}, 'pattern': {self.name!r}, 'value': {match.group(0)!r}, 'error': {str(e)!r}}}")
            return None

        return TimestampMatch(timestamp=timestamp, pattern=self.name)


def _file_stem(path: Path) -> str:
    return path.stem


def _parent_name(path: Path) -> str:
    return path.parent.name


def _datetime_from_groups(match: re.Match) -> datetime:
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def _datetime_with_millis(match: re.Match) -> datetime:
    timestamp = _datetime_from_groups(match)
    millis = match.group(7)
    if millis:
        timestamp = timestamp.replace(microsecond=int(millis) * 1000)
    return timestamp


def _start_of_year(match: re.Match) -> datetime:
    return datetime(int(match.group(1)), 1, 1, tzinfo=timezone.utc)


TIMESTAMP_PATTERNS: List[TimestampPattern] = [
    TimestampPattern(
        name="date_underscore_time",
        regex=re.compile(r'(\d{4})(\d{2})(\d{2})_(\d{2})(\d{2})(\d{2})'),
        subject=_file_stem,
        build=_datetime_from_groups,
    ),
    TimestampPattern(
        name="continuous_digits",
        regex=re.compile(r'(?<!\d)(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{3})?(?!\d)'),
        subject=_file_stem,
        build=_datetime_with_millis,
    ),
    TimestampPattern(
        name="embedded_digits",
        regex=re.compile(r'_(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})_'),
        subject=_file_stem,
        build=_datetime_from_groups,
    ),
    TimestampPattern(
        name="year_folder",
        regex=re.compile(r'^Photos from (\d{4})$'),
        subject=_parent_name,
        build=_start_of_year,
    ),
]


def match_capture_time(
    path: Path,
    patterns: Optional[List[TimestampPattern]] = None,
) -> Optional[TimestampMatch]:
    """Run the ordered patterns against a media path.

    Args:
        path: Media file path (only its name and parent directory name are used)
        patterns: Override of the pattern list, mainly for tests

    Returns:
        First successful TimestampMatch, or None
    """
    for pattern in patterns if patterns is not None else TIMESTAMP_PATTERNS:
        result = pattern.attempt(path)
        if result is not None:
            logger.debug(f"Time inferred: {{'file': {path.name!r}, 'pattern': {result.pattern!r}, 'timestamp': {result.timestamp.isoformat()!r}}}")
            return result

    return None


def infer_capture_time(path: Path) -> Optional[datetime]:
    """Capture instant inferred from ``path``, or None if nothing matched."""
    result = match_capture_time(path)
    return result.timestamp if result else None
