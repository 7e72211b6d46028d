"""Relocation of sidecars into a parallel metadata tree.

After reconciliation the sidecars can be moved out of the media tree into a
directory mirroring it, so a metadata-application tool sees a media-only tree
while the corrected sidecars stay on disk for auditing::

    /exports/Takeout/Photos from 2021/IMG_1.jpg.supplemental-metadata.json
    -> /exports/metadata/Photos from 2021/IMG_1.jpg.supplemental-metadata.json
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from .actions import Action, ActionKind, PassResult
from .errors import InvalidRootError
from .executor import Executor

logger = logging.getLogger(__name__)

METADATA_DIR_NAME = "metadata"


def default_metadata_dir(root: Path) -> Path:
    """``metadata/`` next to the (resolved) root directory."""
    return root.resolve().parent / METADATA_DIR_NAME


def resolve_metadata_dir(root: Path, metadata_dir: Optional[Path] = None) -> Path:
    """Absolute relocation target for ``root``.

    Args:
        root: Export root
        metadata_dir: Requested target, ``default_metadata_dir(root)`` when omitted

    Returns:
        Resolved target directory

    Raises:
        InvalidRootError: Target is the root itself or lies inside it
    """
    resolved_root = root.resolve()
    target = metadata_dir if metadata_dir is not None else default_metadata_dir(resolved_root)
    target = target.resolve()

    if target == resolved_root or resolved_root in target.parents:
        raise InvalidRootError(
            f"Metadata directory must be outside the root: {target}",
            path=str(root),
            metadata_dir=str(target),
        )
    return target


def relocation_target(sidecar: Path, root: Path, metadata_dir: Path) -> Path:
    """Mirror ``sidecar``'s path relative to ``root`` under ``metadata_dir``."""
    return metadata_dir / sidecar.relative_to(root)


def relocate_sidecars(
    sidecars: Iterable[Path],
    root: Path,
    executor: Executor,
    metadata_dir: Optional[Path] = None,
    result: Optional[PassResult] = None,
) -> PassResult:
    """Move every sidecar into the mirrored metadata tree.

    Args:
        sidecars: Sidecar paths under ``root`` as they are after reconciliation
        root: Export root
        executor: Executor applying (or recording) the moves
        metadata_dir: Target tree root, defaults to ``default_metadata_dir(root)``
        result: PassResult to append to, created when omitted

    Returns:
        PassResult with one record per sidecar

    Raises:
        InvalidRootError: Target is the root itself or lies inside it
    """
    target_root = resolve_metadata_dir(root, metadata_dir)
    logger.info(f"Relocating sidecars: {{'root': {str(root)!r}, 'metadata_dir': {str(target_root)!r}}}")

    result = result if result is not None else PassResult()
    for sidecar in sidecars:
        action = Action(
            kind=ActionKind.RELOCATE,
            source=sidecar,
            destination=relocation_target(sidecar, root, target_root),
        )
        result.track(executor.apply(action))

    logger.info(f"Relocation complete: {{'moved': {len(result.log.fixes)}, 'errors': {len(result.log.errors)}}}")
    return result
