"""Executors apply actions to the filesystem, or pretend to.

Decision logic never touches the filesystem directly for mutations; it builds
``Action`` objects and hands them to an executor chosen once per run:

- ``CommitExecutor`` performs the copy/move/write and records it.
- ``DryRunExecutor`` records the action and keeps an in-memory overlay of the
  files it would have created or removed, so later existence checks in the
  same run see the tree as it would look after commit.

Both refuse to overwrite: an action whose destination already exists is
recorded as a conflict error and skipped.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Set

from .actions import Action, ActionKind, ActionRecord, ErrorKind
from .errors import wrap_os_error

logger = logging.getLogger(__name__)


class Executor(ABC):
    """Applies actions and reports each one as an ``ActionRecord``."""

    commit: bool = False

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Whether ``path`` exists as far as this run is concerned."""

    @abstractmethod
    def _perform(self, action: Action) -> None:
        """Carry out an action whose preconditions were checked."""

    def apply(self, action: Action) -> ActionRecord:
        """Check preconditions, perform the action and record it.

        Raises:
            FilesystemError: The underlying filesystem operation failed
        """
        if action.kind is not ActionKind.WRITE and not self.exists(action.source):
            logger.warning(f"Action source missing: {{'kind': {action.kind.value!r}, 'source': {str(action.source)!r}}}")
            return ActionRecord.error(
                ErrorKind.UNRESOLVED,
                f"Metadata file: {action.source} does not exist",
                source=action.source,
                destination=action.destination,
            )

        if self.exists(action.target):
            logger.warning(f"Destination already exists: {{'kind': {action.kind.value!r}, 'destination': {str(action.target)!r}}}")
            return ActionRecord.error(
                ErrorKind.CONFLICT,
                f"Metadata file already exists: {action.target}",
                source=action.source,
                destination=action.destination,
            )

        self._perform(action)
        record = ActionRecord.fix(action)
        logger.info(f"Fix recorded: {{'kind': {action.kind.value!r}, 'commit': {self.commit}, 'description': {record.description!r}}}")
        return record


class CommitExecutor(Executor):
    """Executor that mutates the filesystem."""

    commit = True

    def exists(self, path: Path) -> bool:
        return path.exists()

    def _perform(self, action: Action) -> None:
        try:
            if action.kind is ActionKind.COPY:
                shutil.copy2(action.source, action.target)
            elif action.kind is ActionKind.MOVE:
                os.rename(action.source, action.target)
            elif action.kind is ActionKind.RELOCATE:
                action.target.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(action.source), str(action.target))
            elif action.kind is ActionKind.WRITE:
                # Exclusive create: never replaces a file that appeared meanwhile
                with open(action.target, 'x', encoding='utf-8') as f:
                    f.write(action.content or "")
        except OSError as e:
            raise wrap_os_error(
                e,
                action.kind.value,
                source=str(action.source),
                destination=str(action.target),
            ) from e


class DryRunExecutor(Executor):
    """Executor that only records what would happen."""

    commit = False

    def __init__(self) -> None:
        self._created: Set[Path] = set()
        self._removed: Set[Path] = set()

    def exists(self, path: Path) -> bool:
        if path in self._created:
            return True
        if path in self._removed:
            return False
        return path.exists()

    def _perform(self, action: Action) -> None:
        if action.kind is ActionKind.COPY:
            logger.debug(f"cp {action.source} {action.target}")
        elif action.kind in (ActionKind.MOVE, ActionKind.RELOCATE):
            logger.debug(f"mv {action.source} {action.target}")
            self._removed.add(action.source)
            self._created.discard(action.source)
        elif action.kind is ActionKind.WRITE:
            logger.debug(f"{action.target} << {action.content}")

        self._created.add(action.target)
        self._removed.discard(action.target)


def make_executor(commit: bool) -> Executor:
    """Pick the executor for a run."""
    return CommitExecutor() if commit else DryRunExecutor()
