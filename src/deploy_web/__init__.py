"""Deploy Web - OpenWhisk action that deploys a manifest straight from a git repo."""

__version__ = "0.1.0"
__author__ = "Deploy Web Team"

from deploy_web.core.config import Settings
from deploy_web.core.models import DeployRequest, ResponseEnvelope

__all__ = ["Settings", "DeployRequest", "ResponseEnvelope", "__version__"]
