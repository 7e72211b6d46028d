"""Configuration models for the sidecar fixer."""

from typing import List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .common import LoggingConfig
from .discovery import SUPPORTED_MEDIA_EXTENSIONS
from .filename_grammar import DEFAULT_EDITED_MARKERS


class FixerConfig(BaseModel):
    """Reconciliation run configuration."""

    model_config = ConfigDict(extra='forbid')

    root_path: str = Field(
        default="",
        description="Root of the extracted Takeout tree (usually given on the command line)"
    )
    commit: bool = Field(
        default=False,
        description="Apply fixes to disk; when false only report what would be done"
    )
    generate_metadata: bool = Field(
        default=False,
        description="Write inferred sidecars for media files that have none"
    )
    relocate_metadata: bool = Field(
        default=False,
        description="Move sidecars into a parallel metadata tree after reconciliation"
    )
    metadata_dir: str | None = Field(
        default=None,
        description="Target of the relocation pass (default: 'metadata' next to the root)"
    )
    year_folders_only: bool = Field(
        default=False,
        description="Only process files directly inside 'Photos from YYYY' folders"
    )
    edited_markers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EDITED_MARKERS),
        description="Stem markers of user-edited derivatives"
    )
    media_extensions: List[str] = Field(
        default_factory=lambda: list(SUPPORTED_MEDIA_EXTENSIONS),
        description="File extensions treated as media"
    )
    progress_interval: int = Field(
        default=1000,
        ge=0,
        description="Log progress every N media files (0 disables)"
    )

    @field_validator('edited_markers', 'media_extensions', mode='before')
    @classmethod
    def split_string_list(cls, v):
        """Accept a single value where a list is expected (env overrides)."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v

    @field_validator('media_extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower().lstrip('.') for ext in v]


class SidecarFixerConfig(BaseModel):
    """Root configuration for the sidecar fixer."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    fixer: FixerConfig = Field(default_factory=FixerConfig)
