"""Per-job working directories."""
from __future__ import annotations

import logging
import shutil
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ..exceptions import WorkspaceError

LOGGER = logging.getLogger(__name__)

WORKDIR_PREFIX = "latex-"


def new_job_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Job:
    """One request lifecycle: its identifier, directory and evolving source."""

    job_id: str
    workdir: Path
    source: str = ""
    attempts: int = 0
    last_error: Optional[str] = None
    fixes_applied: int = 0

    def record_attempt(self) -> int:
        self.attempts += 1
        return self.attempts


def remove_workdir(path: Path) -> None:
    """Best-effort removal; failures are logged and swallowed."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        LOGGER.warning("Failed to remove job directory %s: %s", path, exc)


@contextmanager
def job_workspace(root: Path, source: str = "", job_id: Optional[str] = None) -> Iterator[Job]:
    """
    Create ``<root>/latex-<job_id>`` and remove it when the block exits.

    Cleanup runs on every exit path, including exceptions raised inside the
    block.
    """
    job_id = job_id or new_job_id()
    workdir = Path(root) / f"{WORKDIR_PREFIX}{job_id}"
    try:
        workdir.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise WorkspaceError(f"Could not create working directory {workdir}: {exc}") from exc
    LOGGER.debug("Created job directory %s", workdir)
    try:
        yield Job(job_id=job_id, workdir=workdir, source=source)
    finally:
        remove_workdir(workdir)


__all__ = ["Job", "job_workspace", "new_job_id", "remove_workdir"]
