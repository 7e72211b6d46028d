"""Pairing reconciliation between media files and their sidecars.

Two independent corruption classes are handled here:

Sequence-suffix misplacement
    For ``IMG_1234(1).jpg`` the export tool writes
    ``IMG_1234.jpg.supplemental-metadata(1).json`` instead of
    ``IMG_1234(1).jpg.supplemental-metadata.json``. The wrong-form sidecar is
    moved to the canonical name.

Edited-derivative fill-in
    ``IMG_1234-edited.jpg`` gets no sidecar from the export tool, although it
    shares the original's capture metadata. The original's canonical sidecar
    is copied to the edited file's canonical name.

Both checks run for every media file; neither assumes the other did not
apply.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .actions import (
    Action, ActionKind, ActionRecord, ErrorKind, PairState, PassResult, RecordStatus,
)
from .discovery import MediaFile
from .executor import Executor
from .filename_grammar import DEFAULT_EDITED_MARKERS, strip_edited_marker
from .progress import ProgressTracker
from .sidecar_names import canonical_sidecar_path, miswritten_sequence_sidecar_path

logger = logging.getLogger(__name__)


@dataclass
class PairingOutcome:
    """Result of one reconciliation step for one media file.

    Attributes:
        media: The media file
        state: State reached by this step
        sidecar: Canonical sidecar path involved, if any
        record: Fix or error record, None when nothing was done
    """
    media: MediaFile
    state: PairState
    sidecar: Optional[Path] = None
    record: Optional[ActionRecord] = None


def _state_after(record: ActionRecord) -> PairState:
    if record.status is RecordStatus.FIX:
        return PairState.CORRECTED
    if record.kind == ErrorKind.CONFLICT.value:
        return PairState.CONFLICT
    return PairState.UNRESOLVED


def reconcile_sequence_suffix(media: MediaFile, executor: Executor) -> PairingOutcome:
    """Move a miswritten sequence sidecar to its canonical name.

    Args:
        media: Media file, e.g. ``IMG_1234(1).jpg``
        executor: Executor applying (or recording) the move

    Returns:
        PairingOutcome with state UNCLASSIFIED (no sequence suffix),
        CANONICAL, CORRECTED, CONFLICT or UNRESOLVED
    """
    if not media.parsed.sequence_token:
        return PairingOutcome(media=media, state=PairState.UNCLASSIFIED)

    canonical = canonical_sidecar_path(media.path)

    if media.parsed.ambiguous_sequence:
        if executor.exists(canonical):
            return PairingOutcome(media=media, state=PairState.CANONICAL, sidecar=canonical)
        logger.warning(f"Stacked sequence markers: {{'media': {str(media.path)!r}}}")
        record = ActionRecord.error(
            ErrorKind.UNRESOLVED,
            f"Ambiguous sequence marker in image: {media.path}",
            source=media.path,
        )
        return PairingOutcome(media=media, state=PairState.UNRESOLVED, record=record)

    wrong = miswritten_sequence_sidecar_path(media.path)

    if executor.exists(wrong):
        logger.debug(f"Sequence mismatch: {{'media': {media.path.name!r}, 'sidecar': {wrong.name!r}}}")
        record = executor.apply(Action(kind=ActionKind.MOVE, source=wrong, destination=canonical))
        return PairingOutcome(media=media, state=_state_after(record), sidecar=canonical, record=record)

    if executor.exists(canonical):
        return PairingOutcome(media=media, state=PairState.CANONICAL, sidecar=canonical)

    record = ActionRecord.error(
        ErrorKind.UNRESOLVED,
        f"Metadata file: {wrong} does not exist for image: {media.path}",
        source=wrong,
        destination=canonical,
    )
    return PairingOutcome(media=media, state=PairState.UNRESOLVED, sidecar=canonical, record=record)


def fill_edited_sidecar(
    media: MediaFile,
    executor: Executor,
    markers: Sequence[str] = DEFAULT_EDITED_MARKERS,
) -> PairingOutcome:
    """Copy the original's sidecar for an edited derivative.

    Args:
        media: Media file, e.g. ``IMG_1234-edited.jpg``
        executor: Executor applying (or recording) the copy
        markers: Edited-derivative markers

    Returns:
        PairingOutcome with state UNCLASSIFIED (not edited), CANONICAL,
        EDITED_MISSING (original has no sidecar), CORRECTED or CONFLICT
    """
    original_stem = strip_edited_marker(media.stem, markers)
    if original_stem is None:
        return PairingOutcome(media=media, state=PairState.UNCLASSIFIED)

    edited_sidecar = canonical_sidecar_path(media.path)
    if executor.exists(edited_sidecar):
        return PairingOutcome(media=media, state=PairState.CANONICAL, sidecar=edited_sidecar)

    original = media.path.with_name(f"{original_stem}{media.path.suffix}")
    original_sidecar = canonical_sidecar_path(original)
    if not executor.exists(original_sidecar):
        logger.info(f"No sidecar to share with edited file: {{'media': {str(media.path)!r}, 'expected': {original_sidecar.name!r}}}")
        return PairingOutcome(media=media, state=PairState.EDITED_MISSING, sidecar=edited_sidecar)

    record = executor.apply(Action(kind=ActionKind.COPY, source=original_sidecar, destination=edited_sidecar))
    return PairingOutcome(media=media, state=_state_after(record), sidecar=edited_sidecar, record=record)


def reconcile_sequence_suffixes(
    media_files: Iterable[MediaFile],
    executor: Executor,
    progress: Optional[ProgressTracker] = None,
    result: Optional[PassResult] = None,
) -> PassResult:
    """Sequence-suffix pass over all media files."""
    result = result if result is not None else PassResult()
    for media in media_files:
        result.track(reconcile_sequence_suffix(media, executor).record)
        if progress is not None:
            progress.increment()
    logger.info(f"Sequence pass complete: {{'fixes': {len(result.log.fixes)}, 'errors': {len(result.log.errors)}}}")
    return result


def fill_edited_sidecars(
    media_files: Iterable[MediaFile],
    executor: Executor,
    markers: Sequence[str] = DEFAULT_EDITED_MARKERS,
    progress: Optional[ProgressTracker] = None,
    result: Optional[PassResult] = None,
) -> PassResult:
    """Edited-derivative pass over all media files."""
    result = result if result is not None else PassResult()
    for media in media_files:
        result.track(fill_edited_sidecar(media, executor, markers).record)
        if progress is not None:
            progress.increment()
    logger.info(f"Edited pass complete: {{'fixes': {len(result.log.fixes)}, 'errors': {len(result.log.errors)}}}")
    return result
