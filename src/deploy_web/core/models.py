"""Core data models for Deploy Web."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_FILE_NAME = "manifest.yaml"
DEFAULT_MANIFEST_PATH = "."


class ActivationContext(BaseModel):
    """Values the hosting platform supplies for one activation."""

    model_config = ConfigDict(frozen=True)

    activation_id: Optional[str] = None
    api_host: Optional[str] = None
    api_key: Optional[str] = None


class DeployRequest(BaseModel):
    """Parameters of a deploy activation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    gitUrl: Optional[str] = None
    manifestPath: Optional[str] = None
    envData: Optional[Dict[str, Any]] = None
    wskApiHost: Optional[str] = None
    wskAuth: Optional[str] = None
    ow_method: Optional[str] = Field(None, alias="__ow_method")

    @property
    def manifest_path(self) -> str:
        return self.manifestPath or DEFAULT_MANIFEST_PATH


class RepoLocation(BaseModel):
    """Where a repository lives locally, derived from its git URL alone."""

    model_config = ConfigDict(frozen=True)

    org: str
    name: str
    cache_path: Path
    temp_path: Path


class ResolvedDeployDescriptor(BaseModel):
    """Everything the deploy tool needs, after the repo has been resolved."""

    repoDir: Path
    usingTemp: bool
    manifestPath: str = DEFAULT_MANIFEST_PATH
    manifestFileName: str = MANIFEST_FILE_NAME
    wskAuth: Optional[str] = None
    wskApiHost: Optional[str] = None
    envData: Optional[Dict[str, Any]] = None

    @property
    def project_dir(self) -> Path:
        return self.repoDir / self.manifestPath

    @property
    def manifest_file(self) -> Path:
        return self.project_dir / self.manifestFileName


class ResponseEnvelope(BaseModel):
    """HTTP-shaped web action result with a base64 encoded JSON body."""

    statusCode: int
    headers: Dict[str, str] = Field(default_factory=lambda: {"Content-Type": "application/json"})
    body: str

    def decoded_body(self) -> Dict[str, Any]:
        return json.loads(base64.b64decode(self.body))

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
