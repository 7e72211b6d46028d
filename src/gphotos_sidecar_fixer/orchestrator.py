"""Run orchestration: discovery, reconciliation passes and relocation.

Passes run in a fixed order over the discovered tree:

1. Sidecar name correction (truncated metadata segments)
2. Sequence-suffix reconciliation
3. Edited-derivative fill-in
4. Sidecar synthesis (optional)
5. Unresolved-media and orphaned-sidecar listing
6. Relocation into the metadata tree (optional)

Each pass returns its records as a value; the orchestrator threads them into
one ``RunResult`` and keeps an inventory of sidecar paths current from what
each pass created or moved away.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from .actions import ActionLog, ErrorKind, PassResult, RecordStatus
from .common import LogContext
from .discovery import SUPPORTED_MEDIA_EXTENSIONS, MediaFile, discover_tree, make_sidecar_file
from .errors import FilesystemError, RunAbortedError
from .executor import Executor
from .filename_grammar import DEFAULT_EDITED_MARKERS
from .pairing import fill_edited_sidecars, reconcile_sequence_suffixes
from .progress import ProgressTracker
from .relocation import relocate_sidecars, resolve_metadata_dir
from .sidecar_names import canonical_sidecar_path, correct_sidecar_names
from .synthesizer import synthesize_missing_sidecars

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Everything one run produced.

    Attributes:
        root: Export root
        commit: Whether fixes were applied to disk
        log: Records of the reconciliation passes, in order
        relocation: Records of the relocation pass
        unresolved: Media files left without a canonical sidecar
        orphaned: Sidecars whose media file does not exist beside them
        metadata_dir: Relocation target, None if relocation did not run
        media_count: Media files discovered
        sidecar_count: Sidecars discovered
    """
    root: Path
    commit: bool
    log: ActionLog = field(default_factory=ActionLog)
    relocation: ActionLog = field(default_factory=ActionLog)
    unresolved: List[Path] = field(default_factory=list)
    orphaned: List[Path] = field(default_factory=list)
    metadata_dir: Optional[Path] = None
    media_count: int = 0
    sidecar_count: int = 0

    @property
    def fixes(self) -> List[str]:
        return self.log.fixes

    @property
    def errors(self) -> List[str]:
        return self.log.errors + self.relocation.errors

    @property
    def relocated(self) -> List[Path]:
        """Destinations of sidecars moved into the metadata tree."""
        return [
            r.destination for r in self.relocation.records
            if r.status is RecordStatus.FIX and r.destination is not None
        ]


class SidecarFixer:
    """Reconciles one export tree with its sidecars."""

    def __init__(
        self,
        root: Path,
        executor: Executor,
        edited_markers: Sequence[str] = DEFAULT_EDITED_MARKERS,
        media_extensions: Iterable[str] = SUPPORTED_MEDIA_EXTENSIONS,
        year_folders_only: bool = False,
        progress_interval: int = 1000,
    ):
        """Initialize the fixer.

        Args:
            root: Export root directory
            executor: Commit or dry-run executor, fixed for the whole run
            edited_markers: Edited-derivative markers
            media_extensions: Extensions counted as media
            year_folders_only: Restrict the run to ``Photos from YYYY`` folders
            progress_interval: Log progress every N media files
        """
        self.root = root
        self.executor = executor
        self.edited_markers = tuple(edited_markers)
        self.media_extensions = tuple(media_extensions)
        self.year_folders_only = year_folders_only
        self.progress_interval = progress_interval

    def execute(
        self,
        generate_metadata: bool = False,
        relocate_metadata: bool = False,
        metadata_dir: Optional[Path] = None,
    ) -> RunResult:
        """Run every pass over the tree.

        Args:
            generate_metadata: Synthesize sidecars for media without one
            relocate_metadata: Move sidecars into the metadata tree afterwards
            metadata_dir: Relocation target, defaults to ``metadata`` next to root;
                must lie outside root

        Returns:
            RunResult

        Raises:
            InvalidRootError: Root is missing or not a directory, or the
                metadata directory lies inside it
            RunAbortedError: A filesystem operation failed; carries the
                partial result
        """
        result = RunResult(root=self.root, commit=self.executor.commit)

        with LogContext(logger, root=str(self.root), commit=self.executor.commit):
            logger.info(f"Starting run: {{'root': {str(self.root)!r}, 'commit': {self.executor.commit}, 'generate_metadata': {generate_metadata}, 'relocate_metadata': {relocate_metadata}}}")
            target = resolve_metadata_dir(self.root, metadata_dir) if relocate_metadata else None
            try:
                self._run(result, generate_metadata, target)
            except FilesystemError as e:
                logger.error(f"Run aborted: {{'error': {e.message!r}, 'fixes': {len(result.fixes)}, 'errors': {len(result.errors)}}}")
                raise RunAbortedError(
                    f"Run aborted: {e.message}",
                    result=result,
                    **e.context,
                ) from e

            error_counts = {kind.value: len(result.log.errors_of(kind)) for kind in ErrorKind}
            logger.info(f"Run complete: {{'fixes': {len(result.fixes)}, 'errors': {error_counts}, 'unresolved': {len(result.unresolved)}}}")

        return result

    def _run(
        self,
        result: RunResult,
        generate_metadata: bool,
        metadata_dir: Optional[Path],
    ) -> None:
        tree = discover_tree(
            self.root,
            media_extensions=self.media_extensions,
            year_folders_only=self.year_folders_only,
            edited_markers=self.edited_markers,
        )
        result.media_count = len(tree.media)
        result.sidecar_count = len(tree.sidecars)
        sidecars: Set[Path] = {s.path for s in tree.sidecars}

        media_passes = 3 if generate_metadata else 2
        progress = ProgressTracker(
            total_files=len(tree.media) * media_passes,
            log_interval=self.progress_interval,
        )

        self._run_pass(
            result.log, sidecars,
            lambda r: correct_sidecar_names(sorted(sidecars), self.executor, result=r),
        )
        self._run_pass(
            result.log, sidecars,
            lambda r: reconcile_sequence_suffixes(tree.media, self.executor, progress=progress, result=r),
        )
        self._run_pass(
            result.log, sidecars,
            lambda r: fill_edited_sidecars(
                tree.media, self.executor, self.edited_markers, progress=progress, result=r,
            ),
        )
        if generate_metadata:
            self._run_pass(
                result.log, sidecars,
                lambda r: synthesize_missing_sidecars(tree.media, self.executor, progress=progress, result=r),
            )
        progress.log_final_summary()

        result.unresolved = self._unresolved_media(tree.media)
        result.orphaned = self._orphaned_sidecars(sidecars)

        if metadata_dir is not None:
            result.metadata_dir = metadata_dir
            self._run_pass(
                result.relocation, sidecars,
                lambda r: relocate_sidecars(sorted(sidecars), self.root, self.executor, metadata_dir, result=r),
            )

    @staticmethod
    def _run_pass(log: ActionLog, sidecars: Set[Path], run) -> None:
        """Run one pass, folding its records and path changes into the run.

        The records are folded in even when the pass raises, so an aborted
        run still reports what was already done.
        """
        pass_result = PassResult()
        try:
            run(pass_result)
        finally:
            log.extend(pass_result.log)
            sidecars.difference_update(pass_result.removed)
            sidecars.update(pass_result.created)

    def _unresolved_media(self, media_files: List[MediaFile]) -> List[Path]:
        unresolved = [
            media.path for media in media_files
            if not self.executor.exists(canonical_sidecar_path(media.path))
        ]
        if unresolved:
            logger.info(f"Media without metadata: {{'count': {len(unresolved)}}}")
        return unresolved

    def _orphaned_sidecars(self, sidecars: Set[Path]) -> List[Path]:
        orphaned = []
        for path in sorted(sidecars):
            media_name = make_sidecar_file(path).media_name
            if media_name is not None and not self.executor.exists(path.with_name(media_name)):
                orphaned.append(path)
        if orphaned:
            logger.info(f"Metadata without media: {{'count': {len(orphaned)}}}")
        return orphaned
