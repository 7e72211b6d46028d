"""Action records and the per-pass action log.

Every proposed repair is an ``Action`` (kind, source, optional destination).
Applying it yields an ``ActionRecord`` that lands in the run's fix list or
error list. Records are append-only and live for a single run.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class ActionKind(str, Enum):
    """Kinds of mutating actions."""
    COPY = "copy"
    MOVE = "move"
    WRITE = "write"
    RELOCATE = "relocate"


class ErrorKind(str, Enum):
    """Categories of non-fatal, per-file errors."""
    UNRESOLVED = "unresolved"
    CONFLICT = "conflict"
    INFERENCE_FAILURE = "inference_failure"


class RecordStatus(str, Enum):
    FIX = "fix"
    ERROR = "error"


class PairState(str, Enum):
    """Reconciliation state of a sidecar/media pair.

    ``UNCLASSIFIED`` moves to one of the classified states (``CANONICAL``,
    ``DIVERGENT``, ``SEQUENCE_MISMATCHED``, ``EDITED_MISSING``) and ends in
    ``CORRECTED``, ``CONFLICT`` or ``UNRESOLVED``. ``CANONICAL`` and
    ``EDITED_MISSING`` are terminal when no action applies.
    """
    UNCLASSIFIED = "unclassified"
    CANONICAL = "canonical"
    DIVERGENT = "divergent"
    SEQUENCE_MISMATCHED = "sequence_mismatched"
    EDITED_MISSING = "edited_missing"
    CORRECTED = "corrected"
    CONFLICT = "conflict"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Action:
    """A mutating filesystem action.

    Attributes:
        kind: What to do
        source: Source path (the written file itself for WRITE)
        destination: Target path for COPY, MOVE and RELOCATE
        content: Text to write for WRITE
    """
    kind: ActionKind
    source: Path
    destination: Optional[Path] = None
    content: Optional[str] = None

    @property
    def target(self) -> Path:
        """Path the action creates."""
        return self.destination if self.destination is not None else self.source

    def describe(self) -> str:
        """Human-readable description used in the fix list."""
        if self.kind is ActionKind.COPY:
            return f"{self.source.name} copied to {self.target.name}"
        if self.kind is ActionKind.MOVE:
            return f"{self.source.name} moved to {self.target.name}"
        if self.kind is ActionKind.RELOCATE:
            return f"{self.source} moved to {self.target}"
        return f"{self.target.name} written"


@dataclass(frozen=True)
class ActionRecord:
    """Outcome of one action or one failed classification."""
    status: RecordStatus
    description: str
    kind: str
    source: Optional[Path] = None
    destination: Optional[Path] = None

    @classmethod
    def fix(cls, action: Action) -> "ActionRecord":
        return cls(
            status=RecordStatus.FIX,
            description=action.describe(),
            kind=action.kind.value,
            source=action.source,
            destination=action.destination,
        )

    @classmethod
    def error(
        cls,
        kind: ErrorKind,
        description: str,
        source: Optional[Path] = None,
        destination: Optional[Path] = None,
    ) -> "ActionRecord":
        return cls(
            status=RecordStatus.ERROR,
            description=description,
            kind=kind.value,
            source=source,
            destination=destination,
        )


@dataclass
class ActionLog:
    """Ordered records produced by one reconciliation pass."""
    records: List[ActionRecord] = field(default_factory=list)

    def append(self, record: Optional[ActionRecord]) -> None:
        if record is not None:
            self.records.append(record)

    def extend(self, other: "ActionLog") -> "ActionLog":
        """Append another log's records, keeping order."""
        self.records.extend(other.records)
        return self

    @property
    def fixes(self) -> List[str]:
        return [r.description for r in self.records if r.status is RecordStatus.FIX]

    @property
    def errors(self) -> List[str]:
        return [r.description for r in self.records if r.status is RecordStatus.ERROR]

    def errors_of(self, kind: ErrorKind) -> List[ActionRecord]:
        return [
            r for r in self.records
            if r.status is RecordStatus.ERROR and r.kind == kind.value
        ]

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class PassResult:
    """What one pass over the tree produced.

    ``created`` and ``removed`` list sidecar paths the pass added or moved
    away, so the orchestrator can keep its sidecar inventory current without
    rescanning (which would miss dry-run changes).
    """
    log: ActionLog = field(default_factory=ActionLog)
    created: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)

    def track(self, record: Optional[ActionRecord]) -> None:
        """Append a record and note the sidecar paths a fix touched."""
        self.log.append(record)
        if record is None or record.status is not RecordStatus.FIX:
            return
        if record.kind in (ActionKind.MOVE.value, ActionKind.RELOCATE.value):
            self.removed.append(record.source)
            self.created.append(record.destination)
        elif record.kind == ActionKind.COPY.value:
            self.created.append(record.destination)
        elif record.kind == ActionKind.WRITE.value:
            self.created.append(record.source)
