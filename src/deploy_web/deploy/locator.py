"""Map a git URL onto the local directories a repository may live in."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Tuple

import structlog

from deploy_web.core.exceptions import InputError
from deploy_web.core.models import RepoLocation
from deploy_web.utils.logging import mask_url


logger = structlog.get_logger()

INVALID_URL_MESSAGE = "Invalid GitHub repo url: expected https://<host>/<org>/<repo>"

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_UNSAFE_SEGMENTS = {"", ".", ".."}


def split_repo_url(git_url: str) -> Tuple[str, str]:
    """Extract (org, name) from e.g. https://github.com/org/name.

    The first path token is the host; org and name are the next two.
    """
    remainder = _SCHEME.sub("", git_url.strip(), count=1)
    parts = remainder.split("/")
    org = parts[1] if len(parts) > 1 else ""
    name = parts[2] if len(parts) > 2 else ""
    if org in _UNSAFE_SEGMENTS or name in _UNSAFE_SEGMENTS:
        raise InputError(INVALID_URL_MESSAGE, code="invalid_git_url")
    return org, name


class RepoLocator:
    """Decides between the pre-installed copy of a repo and a fresh clone."""

    def __init__(self, preinstalled_root: Path, scratch_root: Path):
        self.preinstalled_root = Path(preinstalled_root)
        self.scratch_root = Path(scratch_root)

    def location_for(self, git_url: str) -> RepoLocation:
        org, name = split_repo_url(git_url)
        return RepoLocation(
            org=org,
            name=name,
            cache_path=self.preinstalled_root / org / name,
            temp_path=self.scratch_root / org / name,
        )

    def locate(self, git_url: str) -> Tuple[RepoLocation, bool]:
        """Return the location and whether a pre-installed copy exists."""
        location = self.location_for(git_url)
        hit = location.cache_path.exists()
        logger.info(
            "Repository located",
            repo=mask_url(git_url),
            org=location.org,
            name=location.name,
            cache_hit=hit,
            path=str(location.cache_path if hit else location.temp_path),
        )
        return location, hit
