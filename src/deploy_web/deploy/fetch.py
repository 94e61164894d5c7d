"""Shallow-clone repositories into the scratch area."""

from __future__ import annotations

import os
import shutil
import threading
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

import git  # GitPython
import structlog

from deploy_web.core.exceptions import FetchError
from deploy_web.utils.logging import mask_url
from deploy_web.utils.metrics import CLONE_DURATION, CLONE_RESULTS


logger = structlog.get_logger()

CLONE_FAILED_MESSAGE = (
    "There was a problem cloning from github.  Does that github repo exist?  "
    "Does it begin with http?"
)


class _PathLock:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class GitFetcher:
    """Clones a repo at depth 1 into the target path.

    Fetches for the same target are serialized. A clone is written to a unique
    staging directory and renamed into place only once complete, so an existing
    git checkout at the target is always whole. Such a checkout is reused and
    never replaced, since another activation may still be deploying from it.
    """

    def __init__(self, depth: int = 1):
        self.depth = depth
        self._locks: Dict[Path, _PathLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _hold(self, path: Path) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(path)
            if entry is None:
                entry = self._locks[path] = _PathLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[path]

    @staticmethod
    def is_checkout(path: Path) -> bool:
        return (path / ".git").exists()

    def fetch(self, git_url: str, dest_path: Path) -> Path:
        dest_path = Path(dest_path)
        with self._hold(dest_path.resolve()):
            if self.is_checkout(dest_path):
                logger.info("Reusing existing checkout", repo=mask_url(git_url), dest=str(dest_path))
                CLONE_RESULTS.labels(result="reused").inc()
                return dest_path

            dest_path.parent.mkdir(parents=True, exist_ok=True)
            staging = dest_path.parent / f".{dest_path.name}.{uuid.uuid4().hex}.partial"

            logger.info("Cloning repository", repo=mask_url(git_url), dest=str(dest_path), depth=self.depth)
            start = time.monotonic()
            try:
                git.Repo.clone_from(git_url, str(staging), depth=self.depth)
                self._move_into_place(staging, dest_path)
            except (git.exc.GitError, OSError, ValueError) as exc:
                # Transport errors can echo credentials back; only the masked form is logged
                logger.warning("Clone failed", repo=mask_url(git_url), error=mask_url(str(exc)))
                shutil.rmtree(staging, ignore_errors=True)
                CLONE_RESULTS.labels(result="failed").inc()
                raise FetchError(CLONE_FAILED_MESSAGE, code="clone_failed") from exc

            duration = time.monotonic() - start
            CLONE_DURATION.observe(duration)
            CLONE_RESULTS.labels(result="cloned").inc()
            logger.info(
                "Repository cloned",
                repo=mask_url(git_url),
                dest=str(dest_path),
                duration_seconds=round(duration, 3),
            )
            return dest_path

    @staticmethod
    def _move_into_place(staging: Path, dest_path: Path) -> None:
        """Rename staging onto dest_path, clearing any non-checkout leftover there."""
        previous = None
        if dest_path.exists():
            previous = dest_path.parent / f".{dest_path.name}.{uuid.uuid4().hex}.old"
            os.rename(dest_path, previous)
        try:
            os.rename(staging, dest_path)
        except OSError:
            if previous is not None:
                os.rename(previous, dest_path)
            raise
        if previous is not None:
            shutil.rmtree(previous, ignore_errors=True)
