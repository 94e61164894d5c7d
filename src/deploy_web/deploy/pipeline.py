"""Deploy pipeline: validate, resolve the repo, run the deploy, wrap the result."""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Mapping, Optional, Protocol, Tuple

import structlog
from pydantic import ValidationError

from deploy_web.core.config import Settings
from deploy_web.core.exceptions import (
    DeployError,
    DeployWebError,
    FetchError,
    InputError,
    MethodNotAllowedError,
)
from deploy_web.core.models import (
    MANIFEST_FILE_NAME,
    ActivationContext,
    DeployRequest,
    RepoLocation,
    ResolvedDeployDescriptor,
    ResponseEnvelope,
)
from deploy_web.deploy.credentials import resolve_wsk_credentials
from deploy_web.deploy.envelope import on_failure, on_success
from deploy_web.deploy.fetch import CLONE_FAILED_MESSAGE, GitFetcher
from deploy_web.deploy.invoker import WskDeployInvoker
from deploy_web.deploy.locator import RepoLocator
from deploy_web.utils.logging import mask_url
from deploy_web.utils.metrics import ACTIVATION_COUNT


logger = structlog.get_logger()

MISSING_GIT_URL_MESSAGE = "Please enter the GitHub repo url in params"
INVALID_MANIFEST_PATH_MESSAGE = "Invalid manifestPath: must be a relative path inside the repo"


class Locator(Protocol):
    def locate(self, git_url: str) -> Tuple[RepoLocation, bool]: ...


class Fetcher(Protocol):
    def fetch(self, git_url: str, dest_path: Path) -> Any: ...


class DeployInvoker(Protocol):
    def invoke(self, descriptor: ResolvedDeployDescriptor) -> Any: ...


class DeployPipeline:
    """Runs one deploy activation end to end.

    Every outcome leaves through ``handle`` as a ResponseEnvelope: 200 with the
    deploy tool's result, or the failing error's status (400 for input, clone
    and deploy failures alike).
    """

    def __init__(self, locator: Locator, fetcher: Fetcher, invoker: DeployInvoker):
        self.locator = locator
        self.fetcher = fetcher
        self.invoker = invoker

    def handle(self, params: Mapping[str, Any], context: ActivationContext) -> ResponseEnvelope:
        try:
            result = self.run(params, context)
        except DeployWebError as exc:
            logger.warning(
                "Deploy activation failed",
                error_type=exc.__class__.__name__,
                code=exc.code,
                error=exc.message,
                status_code=exc.status_code,
            )
            ACTIVATION_COUNT.labels(outcome="failure", error=exc.__class__.__name__).inc()
            return on_failure(exc.status_code, exc, context.activation_id)

        logger.info("Deploy activation succeeded")
        ACTIVATION_COUNT.labels(outcome="success", error="").inc()
        return on_success(result, context.activation_id)

    def run(self, params: Mapping[str, Any], context: ActivationContext) -> Any:
        request = self.parse_request(params)
        descriptor = self.resolve(request, context)
        return self.deploy(descriptor)

    @staticmethod
    def parse_request(params: Mapping[str, Any]) -> DeployRequest:
        git_url = params.get("gitUrl")
        if not git_url or (isinstance(git_url, str) and not git_url.strip()):
            raise InputError(MISSING_GIT_URL_MESSAGE, code="missing_git_url")

        try:
            request = DeployRequest.model_validate(dict(params))
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            raise InputError(f"Invalid params: {', '.join(fields)}", code="invalid_params") from exc

        method = (request.ow_method or "post").lower()
        if method != "post":
            raise MethodNotAllowedError(f"Method {method.upper()} not allowed; use POST", code="method_not_allowed")

        if not _is_relative_inside(request.manifest_path):
            raise InputError(INVALID_MANIFEST_PATH_MESSAGE, code="invalid_manifest_path")
        return request

    def resolve(self, request: DeployRequest, context: ActivationContext) -> ResolvedDeployDescriptor:
        api_host, auth = resolve_wsk_credentials(request, context)
        location, hit = self.locator.locate(request.gitUrl)

        if hit:
            repo_dir, using_temp = location.cache_path, False
        else:
            try:
                self.fetcher.fetch(request.gitUrl, location.temp_path)
            except FetchError:
                raise
            except Exception as exc:
                logger.warning("Fetcher raised an unexpected error", repo=mask_url(request.gitUrl), error_type=exc.__class__.__name__)
                raise FetchError(CLONE_FAILED_MESSAGE, code="clone_failed") from exc
            repo_dir, using_temp = location.temp_path, True

        descriptor = ResolvedDeployDescriptor(
            repoDir=repo_dir,
            usingTemp=using_temp,
            manifestPath=request.manifest_path,
            manifestFileName=MANIFEST_FILE_NAME,
            wskAuth=auth,
            wskApiHost=api_host,
            envData=request.envData,
        )
        # Symlinks inside the checkout can still point elsewhere
        if not descriptor.project_dir.resolve().is_relative_to(repo_dir.resolve()):
            raise InputError(INVALID_MANIFEST_PATH_MESSAGE, code="invalid_manifest_path")
        return descriptor

    def deploy(self, descriptor: ResolvedDeployDescriptor) -> Any:
        try:
            return self.invoker.invoke(descriptor)
        except DeployWebError:
            raise
        except Exception as exc:
            logger.exception("Deploy tool raised an unexpected error")
            raise DeployError(str(exc) or exc.__class__.__name__, code="deploy_failed") from exc


def _is_relative_inside(manifest_path: str) -> bool:
    """True for paths like "src" or "a/./b"; false for absolute paths or any ".."."""
    posix = PurePosixPath(manifest_path.replace("\\", "/"))
    if posix.is_absolute() or PureWindowsPath(manifest_path).drive:
        return False
    return ".." not in posix.parts


def activation_context(settings: Settings, activation_id: Optional[str] = None) -> ActivationContext:
    return ActivationContext(
        activation_id=activation_id or settings.activation_id,
        api_host=settings.api_host,
        api_key=settings.api_key,
    )


def create_pipeline(settings: Settings) -> DeployPipeline:
    """Production wiring: filesystem locator, git fetcher, wskdeploy invoker."""
    return DeployPipeline(
        locator=RepoLocator(settings.preinstalled_root, settings.scratch_root),
        fetcher=GitFetcher(depth=1),
        invoker=WskDeployInvoker(settings.wskdeploy_path, timeout=settings.deploy_timeout_seconds),
    )
