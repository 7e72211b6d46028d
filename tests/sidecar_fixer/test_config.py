"""Tests for fixer configuration models."""

import pytest
from pydantic import ValidationError

from gphotos_sidecar_fixer.config import FixerConfig, SidecarFixerConfig
from gphotos_sidecar_fixer.discovery import SUPPORTED_MEDIA_EXTENSIONS


class TestFixerConfig:
    """Test FixerConfig defaults and validation."""
    
    def test_defaults(self):
        config = FixerConfig()
        assert config.commit is False
        assert config.generate_metadata is False
        assert config.relocate_metadata is False
        assert config.metadata_dir is None
        assert config.year_folders_only is False
        assert config.edited_markers == ["-edited", "-editada"]
        assert config.media_extensions == list(SUPPORTED_MEDIA_EXTENSIONS)
        assert config.progress_interval == 1000
    
    def test_extensions_normalized(self):
        config = FixerConfig(media_extensions=[".JPG", "Mp4"])
        assert config.media_extensions == ["jpg", "mp4"]
    
    def test_string_lists_split(self):
        config = FixerConfig(edited_markers="-edited, -bearbeitet")
        assert config.edited_markers == ["-edited", "-bearbeitet"]
    
    def test_negative_interval_rejected(self):
        with pytest.raises(ValidationError):
            FixerConfig(progress_interval=-1)
    
    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            FixerConfig(dry_run=True)


class TestSidecarFixerConfig:
    """Test the root configuration."""
    
    def test_sections(self):
        config = SidecarFixerConfig(**{
            "logging": {"level": "debug"},
            "fixer": {"commit": True},
        })
        assert config.logging.level == "DEBUG"
        assert config.fixer.commit is True
    
    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            SidecarFixerConfig(**{"scanner": {}})
