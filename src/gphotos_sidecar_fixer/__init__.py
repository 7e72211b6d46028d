"""Google Takeout sidecar name reconciliation."""

from .config import SidecarFixerConfig, FixerConfig
from .executor import CommitExecutor, DryRunExecutor, make_executor
from .orchestrator import RunResult, SidecarFixer
from .timestamp_inference import infer_capture_time

__version__ = "0.1.0"

__all__ = [
    'SidecarFixer',
    'RunResult',
    'SidecarFixerConfig',
    'FixerConfig',
    'CommitExecutor',
    'DryRunExecutor',
    'make_executor',
    'infer_capture_time',
]
