"""Sidecar synthesis for media files that have none.

The synthesized document mimics the fields of a Takeout sidecar that a
metadata tool reads for the capture time::

    {
      "title": "20210529_155539.jpg",
      "description": "Metadata inferred from 20210529_155539",
      "imageViews": "1",
      "creationTime":   {"timestamp": "1622303739", "formatted": "May 29, 2021, 3:55:39 PM UTC"},
      "photoTakenTime": {"timestamp": "1622303739", "formatted": "May 29, 2021, 3:55:39 PM UTC"}
    }
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .actions import Action, ActionKind, ActionRecord, ErrorKind, PairState, PassResult, RecordStatus
from .discovery import MediaFile
from .executor import Executor
from .pairing import PairingOutcome
from .progress import ProgressTracker
from .sidecar_names import canonical_sidecar_path
from .timestamp_inference import infer_capture_time

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_timestamp(timestamp: datetime) -> str:
    """Takeout-style formatted time, e.g. ``May 29, 2021, 3:55:39 PM UTC``.

    Month names are spelled out here so the result does not depend on the
    process locale.
    """
    ts = timestamp.astimezone(timezone.utc)
    hour = ts.hour % 12 or 12
    meridiem = "AM" if ts.hour < 12 else "PM"
    return (
        f"{MONTH_ABBREVIATIONS[ts.month - 1]} {ts.day}, {ts.year}, "
        f"{hour}:{ts.minute:02d}:{ts.second:02d} {meridiem} UTC"
    )


def timestamp_block(timestamp: datetime) -> Dict[str, str]:
    """``{"timestamp": <epoch seconds>, "formatted": <text>}`` block."""
    return {
        "timestamp": str(int(timestamp.timestamp())),
        "formatted": format_timestamp(timestamp),
    }


def build_sidecar_document(media_path: Path, timestamp: datetime) -> Dict[str, Any]:
    """Minimal sidecar document for ``media_path`` captured at ``timestamp``."""
    return {
        "title": media_path.name,
        "description": f"Metadata inferred from {media_path.stem}",
        "imageViews": "1",
        "creationTime": timestamp_block(timestamp),
        "photoTakenTime": timestamp_block(timestamp),
    }


def synthesize_sidecar(media: MediaFile, executor: Executor) -> PairingOutcome:
    """Write an inferred sidecar for a media file lacking a canonical one.

    Returns:
        PairingOutcome with state CANONICAL (sidecar already present, nothing
        written), CORRECTED (sidecar written or recorded), CONFLICT or
        UNRESOLVED (no timestamp could be inferred)
    """
    sidecar = canonical_sidecar_path(media.path)
    if executor.exists(sidecar):
        return PairingOutcome(media=media, state=PairState.CANONICAL, sidecar=sidecar)

    timestamp = infer_capture_time(media.path)
    if timestamp is None:
        logger.info(f"Cannot infer capture time: {{'media': {str(media.path)!r}}}")
        record = ActionRecord.error(
            ErrorKind.INFERENCE_FAILURE,
            f"Unable to infer metadata for {media.path}",
            source=media.path,
        )
        return PairingOutcome(media=media, state=PairState.UNRESOLVED, record=record)

    document = build_sidecar_document(media.path, timestamp)
    content = json.dumps(document, indent=2, ensure_ascii=False)
    record = executor.apply(Action(kind=ActionKind.WRITE, source=sidecar, content=content))

    state = PairState.CORRECTED if record.status is RecordStatus.FIX else PairState.CONFLICT
    return PairingOutcome(media=media, state=state, sidecar=sidecar, record=record)


def synthesize_missing_sidecars(
    media_files: Iterable[MediaFile],
    executor: Executor,
    progress: Optional[ProgressTracker] = None,
    result: Optional[PassResult] = None,
) -> PassResult:
    """Synthesis pass over all media files."""
    result = result if result is not None else PassResult()
    for media in media_files:
        result.track(synthesize_sidecar(media, executor).record)
        if progress is not None:
            progress.increment()
    logger.info(f"Synthesis pass complete: {{'written': {len(result.log.fixes)}, 'errors': {len(result.log.errors)}}}")
    return result
