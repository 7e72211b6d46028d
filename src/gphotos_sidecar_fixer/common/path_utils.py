"""Path utilities for consistent path handling."""

from pathlib import Path

# System files to exclude (cross-platform)
SYSTEM_FILES = {
    'thumbs.db',      # Windows thumbnail cache
    'desktop.ini',    # Windows folder settings
    '.ds_store',      # macOS folder metadata
    'icon\r',         # macOS custom folder icon (has literal carriage return!)
}

# Takeout bookkeeping files that are JSON but describe no single media file
TAKEOUT_METADATA_FILES = {
    'metadata.json',
    'print-subscriptions.json',
    'shared_album_comments.json',
    'user-generated-memory-titles.json',
}

TEMP_EXTENSIONS = {'.tmp', '.temp', '.cache', '.bak', '.swp'}


def should_scan_file(path: Path) -> bool:
    """
    Determine if a file takes part in reconciliation at all.
    
    Excludes system files (Thumbs.db, .DS_Store, desktop.ini, Icon\\r) and
    temporary files. Hidden files are kept: Takeout exports contain valid
    media such as ``.facebook_865716343.jpg``.
    
    Args:
        path: Path to check
        
    Returns:
        True if the file should be considered
    """
    filename = path.name.lower()
    
    if filename in SYSTEM_FILES:
        return False
    
    if path.suffix.lower() in TEMP_EXTENSIONS:
        return False
    
    return True


def is_takeout_metadata_file(path: Path) -> bool:
    """Return True for album/account JSON files that are not sidecars."""
    return path.name.lower() in TAKEOUT_METADATA_FILES
