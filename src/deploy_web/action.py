"""OpenWhisk action entry point."""

from typing import Any, Dict

import structlog
from structlog.contextvars import clear_contextvars

from deploy_web.core.config import Settings
from deploy_web.deploy.pipeline import activation_context, create_pipeline
from deploy_web.utils.logging import bind_activation_context, setup_logging


def main(params: Dict[str, Any]) -> Dict[str, Any]:
    """Deploy the manifest found in ``params["gitUrl"]``.

    Params:
        gitUrl: repo holding the manifest and the elements to deploy
        manifestPath: (optional) directory of manifest.yaml inside the repo
        envData: (optional) values exported to wskdeploy, e.g. service credentials
        wskApiHost / wskAuth: (optional) override the activation's API host and key
    """
    settings = Settings()
    setup_logging(settings.log_level, settings.log_format)

    clear_contextvars()
    context = activation_context(settings)
    bind_activation_context(context.activation_id, params.get("gitUrl"))
    structlog.get_logger().info("Deploy activation started")

    envelope = create_pipeline(settings).handle(params, context)
    return envelope.to_dict()
