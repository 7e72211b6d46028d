"""Tests for sidecar synthesis."""

import json
from datetime import datetime, timezone
from pathlib import Path

from gphotos_sidecar_fixer.actions import ErrorKind, PairState
from gphotos_sidecar_fixer.discovery import make_media_file
from gphotos_sidecar_fixer.executor import CommitExecutor, DryRunExecutor
from gphotos_sidecar_fixer.synthesizer import (
    build_sidecar_document,
    format_timestamp,
    synthesize_missing_sidecars,
    synthesize_sidecar,
    timestamp_block,
)


def touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDocument:
    """Test the synthesized document shape."""
    
    def test_format_timestamp(self):
        ts = datetime(2021, 5, 29, 15, 55, 39, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "May 29, 2021, 3:55:39 PM UTC"
    
    def test_format_midnight(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "Jan 1, 2024, 12:00:00 AM UTC"
    
    def test_timestamp_block(self):
        ts = datetime(2021, 5, 29, 15, 55, 39, tzinfo=timezone.utc)
        assert timestamp_block(ts) == {
            "timestamp": "1622303739",
            "formatted": "May 29, 2021, 3:55:39 PM UTC",
        }
    
    def test_millis_truncated_to_seconds(self):
        ts = datetime(2013, 12, 24, 20, 6, 23, 261000, tzinfo=timezone.utc)
        assert timestamp_block(ts)["timestamp"] == str(int(datetime(2013, 12, 24, 20, 6, 23, tzinfo=timezone.utc).timestamp()))
    
    def test_document_keys(self):
        ts = datetime(2021, 5, 29, 15, 55, 39, tzinfo=timezone.utc)
        document = build_sidecar_document(Path("20210529_155539.jpg"), ts)
        
        assert document["title"] == "20210529_155539.jpg"
        assert document["description"] == "Metadata inferred from 20210529_155539"
        assert document["imageViews"] == "1"
        assert document["creationTime"] == document["photoTakenTime"]
        assert isinstance(document["photoTakenTime"]["timestamp"], str)


class TestSynthesizeSidecar:
    """Test synthesis for single media files."""
    
    def test_writes_inferred_sidecar(self, tmp_path):
        media = make_media_file(touch(tmp_path / "20210529_155539.jpg"))
        
        outcome = synthesize_sidecar(media, CommitExecutor())
        
        sidecar = tmp_path / "20210529_155539.jpg.supplemental-metadata.json"
        assert outcome.state is PairState.CORRECTED
        assert outcome.record.description == "20210529_155539.jpg.supplemental-metadata.json written"
        document = json.loads(sidecar.read_text(encoding="utf-8"))
        assert document["photoTakenTime"]["timestamp"] == "1622303739"
    
    def test_existing_sidecar_is_noop(self, tmp_path):
        media = make_media_file(touch(tmp_path / "20210529_155539.jpg"))
        sidecar = touch(tmp_path / "20210529_155539.jpg.supplemental-metadata.json", '{"original": true}')
        
        outcome = synthesize_sidecar(media, CommitExecutor())
        
        assert outcome.state is PairState.CANONICAL
        assert outcome.record is None
        assert sidecar.read_text(encoding="utf-8") == '{"original": true}'
    
    def test_inference_failure(self, tmp_path):
        media = make_media_file(touch(tmp_path / "Album" / "IMG_1234.jpg"))
        
        outcome = synthesize_sidecar(media, CommitExecutor())
        
        assert outcome.state is PairState.UNRESOLVED
        assert outcome.record.kind == ErrorKind.INFERENCE_FAILURE.value
        assert outcome.record.description == f"Unable to infer metadata for {media.path}"
        assert not (tmp_path / "Album" / "IMG_1234.jpg.supplemental-metadata.json").exists()
    
    def test_year_folder_sidecar(self, tmp_path):
        media = make_media_file(touch(tmp_path / "Photos from 2024" / "P01020304.jpg"))
        
        synthesize_sidecar(media, CommitExecutor())
        
        sidecar = tmp_path / "Photos from 2024" / "P01020304.jpg.supplemental-metadata.json"
        document = json.loads(sidecar.read_text(encoding="utf-8"))
        assert document["creationTime"]["formatted"] == "Jan 1, 2024, 12:00:00 AM UTC"
    
    def test_dry_run_writes_nothing(self, tmp_path):
        media = make_media_file(touch(tmp_path / "20210529_155539.jpg"))
        
        outcome = synthesize_sidecar(media, DryRunExecutor())
        
        assert outcome.state is PairState.CORRECTED
        assert not outcome.sidecar.exists()


class TestSynthesisPass:
    """Test the synthesis pass."""
    
    def test_pass(self, tmp_path):
        media = [
            make_media_file(touch(tmp_path / "20210529_155539.jpg")),
            make_media_file(touch(tmp_path / "IMG_1234.jpg")),
        ]
        
        result = synthesize_missing_sidecars(media, CommitExecutor())
        
        assert len(result.log.fixes) == 1
        assert len(result.log.errors) == 1
        assert result.created == [tmp_path / "20210529_155539.jpg.supplemental-metadata.json"]
