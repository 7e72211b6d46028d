"""Plain-text run summary printed at the end of every run."""

from pathlib import Path
from typing import List, Sequence, Union

from .orchestrator import RunResult


def numbered(items: Sequence[Union[str, Path]]) -> List[str]:
    """``[i/n] item`` lines, 1-indexed."""
    total = len(items)
    return [f"[{index}/{total}] {item}" for index, item in enumerate(items, start=1)]


def _section(title: str, items: Sequence[Union[str, Path]]) -> List[str]:
    if not items:
        return []
    return ["", title, *numbered(items)]


def format_tally(result: RunResult, aborted: bool = False) -> str:
    """One-line count of fixes, errors and media without metadata."""
    mode = "commit" if result.commit else "dry-run"
    status = "aborted" if aborted else "finished"
    return (
        f"Run {status} ({mode}): {len(result.fixes)} fixes, "
        f"{len(result.errors)} errors, "
        f"{len(result.unresolved)} files without metadata"
    )


def format_summary(result: RunResult, aborted: bool = False) -> str:
    """Render the run summary.

    Sections with nothing to list are left out; the tally line is always
    present.

    Args:
        result: Result of a finished or aborted run
        aborted: True when the run stopped on a fatal error

    Returns:
        Summary text without a trailing newline
    """
    errors = result.errors
    fixes = result.fixes
    relocated = result.relocated

    lines: List[str] = []
    lines += _section(f"Process finalized with {len(errors)} errors:", errors)
    lines += _section(f"Process finalized with {len(fixes)} fixes:", fixes)
    lines += _section(f"Metadata not found for {len(result.unresolved)} files:", result.unresolved)
    lines += _section(f"Media not found for {len(result.orphaned)} metadata files:", result.orphaned)
    if result.metadata_dir is not None:
        lines += _section(f"Metadata files moved to {result.metadata_dir}:", relocated)

    if not result.commit and fixes:
        lines += ["", "Dry run: nothing was changed on disk. Run with --save to apply the fixes."]

    lines += ["", format_tally(result, aborted=aborted)]
    return "\n".join(lines).lstrip("\n")
