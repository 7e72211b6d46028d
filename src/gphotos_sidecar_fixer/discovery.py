"""File discovery for Google Takeout export trees.

Walks a root directory and classifies every file as media (by extension),
JSON sidecar, or other. Album ``metadata.json`` files and Takeout bookkeeping
JSON files are not sidecars.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidRootError
from .filename_grammar import DEFAULT_EDITED_MARKERS, ParsedFilename, parse_filename
from .common.path_utils import is_takeout_metadata_file, should_scan_file
from .sidecar_names import sidecar_target_name, METADATA_SEGMENT

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_EXTENSIONS = (
    'jpg', 'jpeg', 'png', 'gif', 'webp', 'heic',
    'mov', 'mp4', '3gp', 'avi', 'mkv', 'webm',
)

YEAR_FOLDER_RE = re.compile(r'^Photos from \d+$')

MISWRITTEN_SIDECAR_RE = re.compile(
    rf'^(?P<media>.+)\.{re.escape(METADATA_SEGMENT)}\((?P<num>\d+)\)\.json$'
)


@dataclass(frozen=True)
class MediaFile:
    """A discovered media file. Never renamed by the fixer."""
    path: Path
    parsed: ParsedFilename

    @property
    def stem(self) -> str:
        return self.parsed.stem


@dataclass(frozen=True)
class SidecarFile:
    """A discovered JSON sidecar.

    Attributes:
        path: Sidecar path
        target_name: Media filename the sidecar describes, when derivable from
            a canonical or miswritten-sequence name
        sequence_suffix: Sequence number found on the metadata segment
    """
    path: Path
    target_name: Optional[str] = None
    sequence_suffix: Optional[int] = None

    @property
    def media_name(self) -> Optional[str]:
        """Filename of the media file this sidecar describes.

        A miswritten sequence sidecar names the ``(n)`` duplicate, e.g.
        ``IMG_1.jpg.supplemental-metadata(3).json`` describes ``IMG_1(3).jpg``.
        """
        if self.target_name is None or self.sequence_suffix is None:
            return self.target_name
        target = PurePath(self.target_name)
        return f"{target.stem}({self.sequence_suffix}){target.suffix}"


@dataclass
class DiscoveredTree:
    """Result of walking an export tree."""
    root: Path
    media: List[MediaFile] = field(default_factory=list)
    sidecars: List[SidecarFile] = field(default_factory=list)
    other: List[Path] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.media) + len(self.sidecars) + len(self.other)


def make_media_file(path: Path, edited_markers: Sequence[str] = DEFAULT_EDITED_MARKERS) -> MediaFile:
    return MediaFile(path=path, parsed=parse_filename(path.name, edited_markers))


def make_sidecar_file(path: Path) -> SidecarFile:
    """Classify a sidecar path by its name."""
    target = sidecar_target_name(path.name)
    if target is not None:
        return SidecarFile(path=path, target_name=target)

    match = MISWRITTEN_SIDECAR_RE.match(path.name)
    if match:
        return SidecarFile(
            path=path,
            target_name=match.group('media'),
            sequence_suffix=int(match.group('num')),
        )

    return SidecarFile(path=path)


def is_year_folder(directory: Path) -> bool:
    """``Photos from 2019`` style folder created by the export."""
    return bool(YEAR_FOLDER_RE.match(directory.name))


def discover_tree(
    root: Path,
    media_extensions: Iterable[str] = SUPPORTED_MEDIA_EXTENSIONS,
    year_folders_only: bool = False,
    edited_markers: Sequence[str] = DEFAULT_EDITED_MARKERS,
) -> DiscoveredTree:
    """Walk ``root`` and classify files.

    Files are visited in sorted path order so repeated runs over the same
    tree produce the same action order.

    Args:
        root: Export root directory
        media_extensions: Lower-case extensions (without dot) counted as media
        year_folders_only: Only consider files directly inside ``Photos from YYYY``
        edited_markers: Edited-derivative markers for media parsing

    Returns:
        DiscoveredTree

    Raises:
        InvalidRootError: Root is missing or not a directory
    """
    if not root.exists():
        raise InvalidRootError(f"Root directory does not exist: {root}", path=str(root))
    if not root.is_dir():
        raise InvalidRootError(f"Root path is not a directory: {root}", path=str(root))

    extensions = {ext.lower().lstrip('.') for ext in media_extensions}
    tree = DiscoveredTree(root=root)

    logger.info(f"Starting file discovery: {{'path': {str(root)!r}, 'year_folders_only': {year_folders_only}}}")

    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file():
            continue

        if not should_scan_file(file_path):
            tree.other.append(file_path)
            continue

        if year_folders_only and not is_year_folder(file_path.parent):
            tree.other.append(file_path)
            continue

        suffix = file_path.suffix.lower().lstrip('.')
        if suffix == 'json':
            if is_takeout_metadata_file(file_path):
                tree.other.append(file_path)
            else:
                tree.sidecars.append(make_sidecar_file(file_path))
        elif suffix in extensions:
            tree.media.append(make_media_file(file_path, edited_markers))
        else:
            tree.other.append(file_path)

    logger.info(f"Files discovered: {{'total': {tree.total_files}, 'media': {len(tree.media)}, 'sidecars': {len(tree.sidecars)}, 'other': {len(tree.other)}}}")
    return tree
