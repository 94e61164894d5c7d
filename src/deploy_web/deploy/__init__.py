"""Deploy primitives: locate or clone a repo, then hand it to wskdeploy."""

from .credentials import resolve_wsk_credentials
from .envelope import on_failure, on_success
from .fetch import GitFetcher
from .invoker import WskDeployInvoker
from .locator import RepoLocator, split_repo_url
from .pipeline import DeployPipeline, activation_context, create_pipeline

__all__ = [
    "DeployPipeline",
    "GitFetcher",
    "RepoLocator",
    "WskDeployInvoker",
    "activation_context",
    "create_pipeline",
    "on_failure",
    "on_success",
    "resolve_wsk_credentials",
    "split_repo_url",
]
