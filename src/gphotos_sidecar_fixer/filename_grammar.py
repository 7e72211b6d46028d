"""Filename grammar for Takeout media and sidecar names.

The final ``.``-separated component of a name is its outer extension. The
export tool disambiguates duplicate logical names with a trailing ``(n)`` on
the stem (``IMG_1234(1).jpg``) and marks user-edited copies with a localized
token (``IMG_1234-edited.jpg``, ``IMG_1234-editada.jpg``).

Parsing never fails: names that do not fit the grammar get the "no suffix,
no marker" defaults.
"""

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Sequence, Tuple

DEFAULT_EDITED_MARKERS: Tuple[str, ...] = ("-edited", "-editada")

SEQUENCE_SUFFIX_RE = re.compile(r'\((\d+)\)$')
STACKED_SEQUENCE_RE = re.compile(r'\(\d+\)\(\d+\)$')


@dataclass(frozen=True)
class ParsedFilename:
    """Components of a single filename.

    Attributes:
        name: The filename as given
        stem: Name without the outer extension
        extension: Outer extension, lower-cased, without the dot ('' if none)
        sequence_suffix: Integer from a trailing ``(n)`` on the stem
        sequence_token: The literal ``(n)`` token ('' if none)
        edited: True if the stem carries an edited marker
        ambiguous_sequence: True for stacked markers such as ``(1)(2)``
    """
    name: str
    stem: str
    extension: str
    sequence_suffix: Optional[int] = None
    sequence_token: str = ""
    edited: bool = False
    ambiguous_sequence: bool = False

    @property
    def base_stem(self) -> str:
        """Stem with the sequence token removed."""
        if self.sequence_token:
            return self.stem[:-len(self.sequence_token)]
        return self.stem


def split_sequence_suffix(stem: str) -> Tuple[str, str]:
    """Split a trailing ``(n)`` token off a stem.

    Returns:
        ``(stem_without_token, token)``; token is '' when absent

    Examples:
        >>> split_sequence_suffix("IMG_1234(1)")
        ('IMG_1234', '(1)')
        >>> split_sequence_suffix("IMG_1234")
        ('IMG_1234', '')
    """
    match = SEQUENCE_SUFFIX_RE.search(stem)
    if not match:
        return stem, ""
    return stem[:match.start()], match.group(0)


def find_edited_marker(stem: str, markers: Sequence[str] = DEFAULT_EDITED_MARKERS) -> Optional[str]:
    """Return the edited marker present in ``stem`` (case-insensitive), if any."""
    lowered = stem.lower()
    for marker in markers:
        if marker.lower() in lowered:
            return marker
    return None


def strip_edited_marker(stem: str, markers: Sequence[str] = DEFAULT_EDITED_MARKERS) -> Optional[str]:
    """Remove the last occurrence of an edited marker from ``stem``.

    Returns:
        The original's stem, or None if no marker is present or nothing
        would be left after stripping
    """
    marker = find_edited_marker(stem, markers)
    if marker is None:
        return None

    position = stem.lower().rfind(marker.lower())
    stripped = stem[:position] + stem[position + len(marker):]
    return stripped or None


def parse_filename(name: str, edited_markers: Sequence[str] = DEFAULT_EDITED_MARKERS) -> ParsedFilename:
    """Parse a filename into stem, sequence suffix, extension and edited marker.

    Args:
        name: Filename (a full path is accepted; only its last part is used)
        edited_markers: Marker substrings identifying edited derivatives

    Returns:
        ParsedFilename
    """
    name = PurePath(name).name
    pure = PurePath(name) if name else None

    if pure is None:
        return ParsedFilename(name="", stem="", extension="")

    stem = pure.stem
    extension = pure.suffix[1:].lower()

    _, token = split_sequence_suffix(stem)
    sequence_suffix = int(token[1:-1]) if token else None

    return ParsedFilename(
        name=name,
        stem=stem,
        extension=extension,
        sequence_suffix=sequence_suffix,
        sequence_token=token,
        edited=find_edited_marker(stem, edited_markers) is not None,
        ambiguous_sequence=bool(STACKED_SEQUENCE_RE.search(stem)),
    )
