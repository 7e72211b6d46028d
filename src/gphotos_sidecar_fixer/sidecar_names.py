"""Canonical sidecar naming and repair of truncated sidecar names.

Canonical layout::

    IMG_1234.jpg                      IMG_1234.jpg.supplemental-metadata.json
    IMG_1234(1).jpg                   IMG_1234(1).jpg.supplemental-metadata.json

The export tool truncates long names, so the metadata segment shows up in
shortened forms (``IMG_1234.jpg.suppl.json``, ``IMG_1234.jpg.supplemental-me.json``)
and, for duplicates, with the sequence marker on the wrong segment
(``IMG_1234.jpg.supplemental-metadata(1).json``).
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .actions import Action, ActionKind, ActionRecord, PairState, PassResult, RecordStatus
from .executor import Executor
from .filename_grammar import parse_filename, split_sequence_suffix

logger = logging.getLogger(__name__)

METADATA_SUFFIX = "supplemental-metadata.json"
METADATA_SEGMENT = "supplemental-metadata"

MISWRITTEN_SEGMENT_RE = re.compile(r'^supplemental-metadata\(\d+\)$')

# name.ext.<metadata segment>.json needs at least this many components
MIN_SIDECAR_COMPONENTS = 4


@dataclass
class CorrectionOutcome:
    """Result of correcting one sidecar name.

    Attributes:
        state: Final state (CANONICAL, CORRECTED, CONFLICT)
        path: Path to use for downstream pairing
        record: Action record, None when nothing had to be done
    """
    state: PairState
    path: Path
    record: Optional[ActionRecord] = None


def canonical_sidecar_name(media_name: str) -> str:
    """``IMG_1234.jpg`` -> ``IMG_1234.jpg.supplemental-metadata.json``."""
    return f"{media_name}.{METADATA_SUFFIX}"


def canonical_sidecar_path(media_path: Path) -> Path:
    """Canonical sidecar path, beside the media file."""
    return media_path.with_name(canonical_sidecar_name(media_path.name))


def miswritten_sequence_sidecar_path(media_path: Path) -> Optional[Path]:
    """Path the export tool uses for a sequence-numbered media file's sidecar.

    ``IMG_1234(1).jpg`` -> ``IMG_1234.jpg.supplemental-metadata(1).json``

    Returns:
        The wrong-form path, or None if the media stem has no ``(n)`` marker
    """
    parsed = parse_filename(media_path.name)
    if not parsed.sequence_token:
        return None

    name = f"{parsed.base_stem}{media_path.suffix}.{METADATA_SEGMENT}{parsed.sequence_token}.json"
    return media_path.with_name(name)


def is_canonical_sidecar_name(name: str) -> bool:
    """True if ``name`` ends with the canonical metadata suffix."""
    return name.endswith(f".{METADATA_SUFFIX}")


def sidecar_target_name(name: str) -> Optional[str]:
    """Media filename a canonical sidecar describes, None for other names."""
    if not is_canonical_sidecar_name(name):
        return None
    target = name[:-(len(METADATA_SUFFIX) + 1)]
    return target or None


def corrected_sidecar_name(name: str) -> str:
    """Repair a truncated sidecar filename.

    The last two dot-separated components (truncated metadata segment and
    outer extension) are replaced with the canonical suffix; everything before
    them is kept as is. A ``(n)`` marker on the truncated segment is carried
    over onto the full segment so the sequence number survives.

    Names that already end with the canonical suffix, names already in the
    export tool's sequence form and names with fewer than four components are
    returned unchanged.

    Examples:
        >>> corrected_sidecar_name("IMG_1234.jpg.suppl-met.json")
        'IMG_1234.jpg.supplemental-metadata.json'
        >>> corrected_sidecar_name("IMG_1234.jpg.supplemental-me(1).json")
        'IMG_1234.jpg.supplemental-metadata(1).json'
        >>> corrected_sidecar_name("IMG_1234.json")
        'IMG_1234.json'
    """
    if name.endswith(METADATA_SUFFIX):
        return name

    components = name.split('.')
    if len(components) < MIN_SIDECAR_COMPONENTS:
        return name

    segment = components[-2]
    if MISWRITTEN_SEGMENT_RE.match(segment):
        return name

    _, token = split_sequence_suffix(segment)
    head = '.'.join(components[:-2])
    return f"{head}.{METADATA_SEGMENT}{token}.json"


def classify_sidecar_name(name: str) -> PairState:
    """CANONICAL, DIVERGENT or SEQUENCE_MISMATCHED for a sidecar filename.

    Names the corrector cannot classify (fewer than four components) count
    as CANONICAL.
    """
    components = name.split('.')
    if len(components) >= 2 and MISWRITTEN_SEGMENT_RE.match(components[-2]):
        return PairState.SEQUENCE_MISMATCHED
    if corrected_sidecar_name(name) != name:
        return PairState.DIVERGENT
    return PairState.CANONICAL


def fix_divergent_sidecar(path: Path, executor: Executor) -> CorrectionOutcome:
    """Rename a divergent sidecar to its corrected name.

    Args:
        path: Sidecar path
        executor: Executor applying (or recording) the move

    Returns:
        CorrectionOutcome; ``path`` is the corrected path when the move was
        applied and the original path otherwise
    """
    state = classify_sidecar_name(path.name)
    if state is not PairState.DIVERGENT:
        return CorrectionOutcome(state=state, path=path)

    corrected_name = corrected_sidecar_name(path.name)
    destination = path.with_name(corrected_name)
    logger.debug(f"Divergent sidecar: {{'path': {str(path)!r}, 'corrected': {corrected_name!r}}}")

    record = executor.apply(Action(kind=ActionKind.MOVE, source=path, destination=destination))
    if record.status is RecordStatus.ERROR:
        return CorrectionOutcome(state=PairState.CONFLICT, path=path, record=record)

    return CorrectionOutcome(state=PairState.CORRECTED, path=destination, record=record)


def correct_sidecar_names(
    sidecars: Iterable[Path],
    executor: Executor,
    result: Optional[PassResult] = None,
) -> PassResult:
    """Correction pass over all sidecar paths."""
    result = result if result is not None else PassResult()
    for path in sidecars:
        result.track(fix_divergent_sidecar(path, executor).record)
    logger.info(f"Name correction pass complete: {{'fixes': {len(result.log.fixes)}, 'errors': {len(result.log.errors)}}}")
    return result
