"""End-to-end tests for a full reconciliation run."""

import errno
import json
import os
from pathlib import Path

import pytest

from gphotos_sidecar_fixer.errors import InvalidRootError, RunAbortedError
from gphotos_sidecar_fixer.executor import CommitExecutor, DryRunExecutor
from gphotos_sidecar_fixer.orchestrator import SidecarFixer


def touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def build_export(root: Path) -> Path:
    """A small export tree exercising every corruption class."""
    year = root / "Photos from 2021"
    touch(year / "IMG_1234.jpg")
    touch(year / "IMG_1234.jpg.suppl-met.json", '{"title": "IMG_1234.jpg"}')
    touch(year / "IMG_1234(1).jpg")
    touch(year / "IMG_1234.jpg.supplemental-metadata(1).json", '{"title": "IMG_1234(1).jpg"}')
    touch(year / "20210529_155539.jpg")
    touch(year / "20210529_155539.jpg.supplemental-metadata.json", '{"title": "20210529_155539.jpg"}')
    touch(year / "20210529_155539-editada.jpg")
    touch(year / "CameraZOOM-20131224200623261.jpg")
    touch(year / "VID_0001.mp4")
    touch(root / "Album" / "metadata.json", '{"title": "Album"}')
    return root


def fixer(root: Path, executor) -> SidecarFixer:
    return SidecarFixer(root=root, executor=executor, progress_interval=0)


class TestCommitRun:
    """Test a committed run over a corrupted tree."""
    
    def test_repairs_tree(self, tmp_path):
        root = build_export(tmp_path / "Takeout")
        year = root / "Photos from 2021"
        
        result = fixer(root, CommitExecutor()).execute()
        
        assert result.fixes == [
            "IMG_1234.jpg.suppl-met.json moved to IMG_1234.jpg.supplemental-metadata.json",
            "IMG_1234.jpg.supplemental-metadata(1).json moved to IMG_1234(1).jpg.supplemental-metadata.json",
            "20210529_155539.jpg.supplemental-metadata.json copied to "
            "20210529_155539-editada.jpg.supplemental-metadata.json",
        ]
        assert result.errors == []
        assert (year / "IMG_1234.jpg.supplemental-metadata.json").exists()
        assert json.loads((year / "IMG_1234(1).jpg.supplemental-metadata.json").read_text())["title"] == "IMG_1234(1).jpg"
        assert (year / "20210529_155539-editada.jpg.supplemental-metadata.json").exists()
        assert result.unresolved == [
            year / "CameraZOOM-20131224200623261.jpg",
            year / "VID_0001.mp4",
        ]
        assert result.media_count == 6
        assert result.sidecar_count == 3
        assert result.orphaned == []
    
    def test_second_run_is_clean(self, tmp_path):
        """Test that reconciliation is idempotent."""
        root = build_export(tmp_path / "Takeout")
        fixer(root, CommitExecutor()).execute()
        
        second = fixer(root, CommitExecutor()).execute()
        
        assert second.fixes == []
        assert second.errors == []
    
    def test_idempotent_with_synthesis(self, tmp_path):
        root = tmp_path / "Takeout"
        touch(root / "Photos from 2021" / "20210529_155539.jpg")
        touch(root / "Photos from 2021" / "IMG_1234(1).jpg")
        touch(root / "Photos from 2021" / "IMG_1234.jpg.supplemental-metadata(1).json")
        fixer(root, CommitExecutor()).execute(generate_metadata=True)
        
        second = fixer(root, CommitExecutor()).execute(generate_metadata=True)
        
        assert second.fixes == []
        assert second.errors == []
        assert second.unresolved == []
    
    def test_generate_metadata(self, tmp_path):
        root = build_export(tmp_path / "Takeout")
        year = root / "Photos from 2021"
        
        result = fixer(root, CommitExecutor()).execute(generate_metadata=True)
        
        written = year / "CameraZOOM-20131224200623261.jpg.supplemental-metadata.json"
        assert json.loads(written.read_text())["photoTakenTime"]["formatted"] == "Dec 24, 2013, 8:06:23 PM UTC"
        # VID_0001 only has the year folder to go by
        assert (year / "VID_0001.mp4.supplemental-metadata.json").exists()
        assert result.unresolved == []
        assert "CameraZOOM-20131224200623261.jpg.supplemental-metadata.json written" in result.fixes
    
    def test_relocation(self, tmp_path):
        root = build_export(tmp_path / "Takeout")
        
        result = fixer(root, CommitExecutor()).execute(relocate_metadata=True)
        
        metadata = tmp_path / "metadata" / "Photos from 2021"
        assert result.metadata_dir == tmp_path / "metadata"
        assert sorted(p.name for p in metadata.iterdir()) == [
            "20210529_155539-editada.jpg.supplemental-metadata.json",
            "20210529_155539.jpg.supplemental-metadata.json",
            "IMG_1234(1).jpg.supplemental-metadata.json",
            "IMG_1234.jpg.supplemental-metadata.json",
        ]
        assert not list((root / "Photos from 2021").glob("*.json"))
        assert len(result.relocated) == 4
        assert (root / "Album" / "metadata.json").exists()
    
    def test_relocation_from_relative_root(self, tmp_path, monkeypatch):
        """Test that "." relocates next to the directory it names."""
        root = build_export(tmp_path / "Takeout")
        monkeypatch.chdir(root)
        
        result = fixer(Path("."), CommitExecutor()).execute(relocate_metadata=True)
        
        assert result.metadata_dir == tmp_path / "metadata"
        assert not (root / "metadata").exists()
        assert (tmp_path / "metadata" / "Photos from 2021" / "IMG_1234.jpg.supplemental-metadata.json").exists()
        assert not list(root.rglob("*.supplemental-metadata.json"))
    
    def test_orphaned_sidecars_reported(self, tmp_path):
        root = tmp_path / "Takeout"
        touch(root / "IMG_1.jpg")
        touch(root / "IMG_1.jpg.supplemental-metadata.json")
        touch(root / "IMG_2.jpg.supplemental-metadata.json")
        touch(root / "IMG_3.jpg.supplemental-metadata(1).json")
        touch(root / "IMG_4.jpg.suppl.json")
        
        result = fixer(root, DryRunExecutor()).execute()
        
        assert result.orphaned == [
            root / "IMG_2.jpg.supplemental-metadata.json",
            root / "IMG_3.jpg.supplemental-metadata(1).json",
            root / "IMG_4.jpg.supplemental-metadata.json",
        ]


class TestDryRun:
    """Test that dry runs report what a commit would do."""
    
    def test_dry_run_matches_commit(self, tmp_path):
        dry_root = build_export(tmp_path / "dry" / "Takeout")
        commit_root = build_export(tmp_path / "commit" / "Takeout")
        
        dry = fixer(dry_root, DryRunExecutor()).execute(generate_metadata=True, relocate_metadata=True)
        committed = fixer(commit_root, CommitExecutor()).execute(generate_metadata=True, relocate_metadata=True)
        
        assert dry.fixes == committed.fixes
        assert dry.errors == committed.errors
        assert [p.name for p in dry.relocated] == [p.name for p in committed.relocated]
        assert dry.commit is False
    
    def test_dry_run_leaves_tree_untouched(self, tmp_path):
        root = build_export(tmp_path / "Takeout")
        before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))
        
        fixer(root, DryRunExecutor()).execute(generate_metadata=True, relocate_metadata=True)
        
        assert sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*")) == before


class TestErrorsAndAborts:
    """Test error accumulation and fatal errors."""
    
    def test_errors_do_not_stop_the_run(self, tmp_path):
        root = tmp_path / "Takeout"
        touch(root / "IMG_5(1).jpg")
        touch(root / "IMG_6.jpg.suppl.json")
        touch(root / "IMG_6.jpg.supplemental-metadata.json")
        touch(root / "IMG_7.jpg.s.json")
        
        result = fixer(root, CommitExecutor()).execute()
        
        assert len(result.errors) == 2
        assert result.fixes == ["IMG_7.jpg.s.json moved to IMG_7.jpg.supplemental-metadata.json"]
    
    def test_invalid_root(self, tmp_path):
        with pytest.raises(InvalidRootError):
            fixer(tmp_path / "absent", DryRunExecutor()).execute()
    
    def test_fatal_error_keeps_partial_result(self, tmp_path, monkeypatch):
        root = tmp_path / "Takeout"
        touch(root / "A.jpg.suppl.json")
        touch(root / "IMG_1(1).jpg")
        touch(root / "IMG_1.jpg.supplemental-metadata(1).json")
        
        real_rename = os.rename
        calls = []
        
        def rename_once(source, destination):
            calls.append(source)
            if len(calls) > 1:
                raise OSError(errno.ENOSPC, "No space left on device")
            real_rename(source, destination)
        
        monkeypatch.setattr(os, "rename", rename_once)
        
        with pytest.raises(RunAbortedError) as excinfo:
            fixer(root, CommitExecutor()).execute()
        
        partial = excinfo.value.result
        assert partial.fixes == ["A.jpg.suppl.json moved to A.jpg.supplemental-metadata.json"]
        assert (root / "A.jpg.supplemental-metadata.json").exists()


class TestMetadataDirOutsideRoot:
    """Test that relocation never targets the export tree itself."""
    
    def test_root_named_metadata_is_refused(self, tmp_path):
        root = build_export(tmp_path / "metadata")
        before = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*"))
        
        with pytest.raises(InvalidRootError):
            fixer(root, CommitExecutor()).execute(relocate_metadata=True)
        
        assert sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*")) == before
    
    def test_metadata_dir_inside_root_is_refused(self, tmp_path):
        root = build_export(tmp_path / "Takeout")
        
        with pytest.raises(InvalidRootError):
            fixer(root, CommitExecutor()).execute(
                relocate_metadata=True,
                metadata_dir=root / "Photos from 2021" / "metadata",
            )
        
        assert (root / "Photos from 2021" / "IMG_1234.jpg.suppl-met.json").exists()
    
    def test_metadata_dir_ignored_without_relocation(self, tmp_path):
        root = build_export(tmp_path / "metadata")
        
        result = fixer(root, CommitExecutor()).execute()
        
        assert result.metadata_dir is None
        assert result.errors == []
