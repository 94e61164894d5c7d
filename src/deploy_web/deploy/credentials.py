"""Resolve the OpenWhisk API host and auth key for a deploy."""

from __future__ import annotations

from typing import Optional, Tuple

from deploy_web.core.models import ActivationContext, DeployRequest


def resolve_wsk_credentials(
    request: DeployRequest, context: ActivationContext
) -> Tuple[Optional[str], Optional[str]]:
    """Return (api_host, auth), preferring request params over the activation context.

    Nothing is validated here; wskdeploy rejects bad credentials itself.
    """
    api_host = request.wskApiHost or context.api_host
    auth = request.wskAuth or context.api_key
    return api_host, auth
