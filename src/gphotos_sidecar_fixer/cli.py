"""CLI command for reconciling Takeout sidecar names."""

import logging
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import SidecarFixerConfig
from .errors import InvalidRootError, RunAbortedError
from .executor import make_executor
from .orchestrator import SidecarFixer
from .summary import format_summary
from .common import setup_logging, ConfigLoader
from .common.config_utils import resolve_config_path

# Application name derived from package name
_package = __package__ or "gphotos_sidecar_fixer"
APP_NAME = _package.replace('_', '-').replace('.', '-')


def fix_command(
    config: 'SidecarFixerConfig',
    root_override: Optional[Path] = None,
    commit_override: Optional[bool] = None,
    generate_metadata_override: Optional[bool] = None,
    relocate_metadata_override: Optional[bool] = None,
    metadata_dir_override: Optional[Path] = None,
) -> int:
    """Reconcile sidecars under a Takeout root and print the run summary.

    Args:
        config: Configuration object
        root_override: Optional override for the root directory
        commit_override: Optional override for commit mode
        generate_metadata_override: Optional override for sidecar synthesis
        relocate_metadata_override: Optional override for the relocation pass
        metadata_dir_override: Optional override for the relocation target

    Returns:
        Exit code (0 for a completed run, even with recorded errors)
    """
    # Use __package__ to avoid __main__ when run as module
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    fixer_config = config.fixer
    root = root_override if root_override else resolve_config_path(fixer_config.root_path)
    commit = commit_override if commit_override is not None else fixer_config.commit
    generate_metadata = generate_metadata_override if generate_metadata_override is not None else fixer_config.generate_metadata
    relocate_metadata = relocate_metadata_override if relocate_metadata_override is not None else fixer_config.relocate_metadata
    metadata_dir = metadata_dir_override if metadata_dir_override else resolve_config_path(fixer_config.metadata_dir)

    if root is None:
        logger.error("No root directory given (pass ROOT or set fixer.root_path)")
        return 1

    logger.info(f"Configuration: {{'root': {str(root)!r}, 'commit': {commit}, 'generate_metadata': {generate_metadata}, 'relocate_metadata': {relocate_metadata}, 'metadata_dir': {(str(metadata_dir) if metadata_dir else None)!r}}}")

    fixer = SidecarFixer(
        root=root,
        executor=make_executor(commit),
        edited_markers=fixer_config.edited_markers,
        media_extensions=fixer_config.media_extensions,
        year_folders_only=fixer_config.year_folders_only,
        progress_interval=fixer_config.progress_interval,
    )

    try:
        result = fixer.execute(
            generate_metadata=generate_metadata,
            relocate_metadata=relocate_metadata,
            metadata_dir=metadata_dir,
        )
    except InvalidRootError as e:
        logger.error(f"Invalid root directory: {{'path': {str(root)!r}, 'error': {e.message!r}}}")
        return 1
    except RunAbortedError as e:
        logger.error(f"Fatal filesystem error: {e.message}")
        print(format_summary(e.result, aborted=True))
        return 1
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return 1

    print(format_summary(result))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Repair Google Takeout sidecar names and fill in missing metadata files"
    )
    parser.add_argument(
        "root",
        type=Path,
        nargs="?",
        help="Takeout directory to process (overrides config)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging, including the operations a dry run would perform"
    )
    parser.add_argument(
        "-s", "--save",
        action="store_true",
        help="Apply fixes to disk (dry run is the default)"
    )
    parser.add_argument(
        "-g", "--generate-metadata",
        action="store_true",
        help="Write sidecars inferred from file names where none exist"
    )
    parser.add_argument(
        "-c", "--clean-metadata",
        action="store_true",
        help="Move sidecars out of the media tree into a separate metadata directory"
    )
    parser.add_argument(
        "-m", "--metadata-dir",
        type=Path,
        required=False,
        help="Target directory for --clean-metadata (default: 'metadata' next to ROOT)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the fixer command."""
    args = build_parser().parse_args(argv)

    # Load config
    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=SidecarFixerConfig
    )

    config = loader.load(defaults_path=args.config)

    # Setup logging with config values
    level = "DEBUG" if args.verbose else config.logging.level
    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(
        level=level,
        format=config.logging.format,
        log_file=log_file,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )

    return fix_command(
        config=config,
        root_override=args.root.resolve() if args.root else None,
        commit_override=True if args.save else None,
        generate_metadata_override=True if args.generate_metadata else None,
        relocate_metadata_override=True if args.clean_metadata else None,
        metadata_dir_override=args.metadata_dir.resolve() if args.metadata_dir else None,
    )


if __name__ == "__main__":
    sys.exit(main())
