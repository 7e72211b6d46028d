"""Tests for progress tracking."""

import logging

from gphotos_sidecar_fixer.progress import ProgressTracker, format_duration


class TestProgressTracker:
    """Test counters and periodic logging."""
    
    def test_counts(self):
        tracker = ProgressTracker(total_files=10, log_interval=0)
        tracker.increment()
        tracker.increment(3)
        
        progress = tracker.get_progress()
        assert progress["files_processed"] == 4
        assert progress["remaining_files"] == 6
        assert progress["percentage"] == 40.0
    
    def test_zero_total(self):
        tracker = ProgressTracker(total_files=0, log_interval=0)
        assert tracker.get_progress()["percentage"] == 0.0
    
    def test_logs_every_interval(self, caplog):
        tracker = ProgressTracker(total_files=4, log_interval=2, label="Reconciling")
        with caplog.at_level(logging.INFO, logger="gphotos_sidecar_fixer.progress"):
            for _ in range(4):
                tracker.increment()
        
        lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Reconciling: ")]
        assert len(lines) == 2
        assert lines[0].startswith("Reconciling: 2/4 (50.0%)")
    
    def test_final_summary(self, caplog):
        tracker = ProgressTracker(total_files=1, log_interval=0)
        tracker.increment()
        with caplog.at_level(logging.INFO, logger="gphotos_sidecar_fixer.progress"):
            tracker.log_final_summary()
        assert "Reconciling complete: 1/1 files" in caplog.text


class TestFormatDuration:
    """Test human-readable durations."""
    
    def test_values(self):
        assert format_duration(0) == "0s"
        assert format_duration(59) == "59s"
        assert format_duration(60) == "1m"
        assert format_duration(8130) == "2h 15m 30s"
