"""Run wskdeploy against a resolved repository."""

from __future__ import annotations

import json
import os
import subprocess
from typing import Any, Dict, List, Optional

import structlog

from deploy_web.core.exceptions import DeployError
from deploy_web.core.models import ResolvedDeployDescriptor


logger = structlog.get_logger()


class WskDeployInvoker:
    """Deploys a manifest by shelling out to the wskdeploy binary."""

    def __init__(self, executable: str = "wskdeploy", timeout: Optional[float] = None):
        self.executable = executable
        self.timeout = timeout

    def build_command(self, descriptor: ResolvedDeployDescriptor) -> List[str]:
        cmd = [
            self.executable,
            "-v",
            "-m", descriptor.manifestFileName,
            "-p", str(descriptor.project_dir),
        ]
        if descriptor.wskApiHost:
            cmd.extend(["--apihost", descriptor.wskApiHost])
        if descriptor.wskAuth:
            cmd.extend(["--auth", descriptor.wskAuth])
        return cmd

    @staticmethod
    def build_env(descriptor: ResolvedDeployDescriptor) -> Dict[str, str]:
        """Process env plus envData, which manifests reference as ${NAME}."""
        env = os.environ.copy()
        for key, value in (descriptor.envData or {}).items():
            env[str(key)] = value if isinstance(value, str) else json.dumps(value)
        return env

    @staticmethod
    def _loggable(cmd: List[str]) -> str:
        masked = list(cmd)
        for i, arg in enumerate(masked[:-1]):
            if arg == "--auth":
                masked[i + 1] = "[REDACTED]"
        return " ".join(masked)

    def invoke(self, descriptor: ResolvedDeployDescriptor) -> Dict[str, Any]:
        if not descriptor.manifest_file.is_file():
            raise DeployError(
                f"Error loading {descriptor.manifestFileName} from {descriptor.manifestPath}. "
                f"Is the manifestPath correct?",
                code="manifest_not_found",
            )

        cmd = self.build_command(descriptor)
        logger.info(
            "Running wskdeploy",
            command=self._loggable(cmd),
            using_temp=descriptor.usingTemp,
            env_keys=sorted((descriptor.envData or {}).keys()),
        )

        try:
            result = subprocess.run(
                cmd,
                input="y",  # answers the deployment confirmation prompt
                capture_output=True,
                text=True,
                cwd=str(descriptor.project_dir),
                env=self.build_env(descriptor),
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise DeployError(f"wskdeploy executable not found: {self.executable}", code="wskdeploy_missing")
        except subprocess.TimeoutExpired:
            logger.error("wskdeploy timed out", timeout=self.timeout)
            raise DeployError(f"wskdeploy timed out after {self.timeout}s", code="wskdeploy_timeout")

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            logger.error("wskdeploy failed", returncode=result.returncode, stderr=result.stderr, stdout=result.stdout)
            detail = (result.stderr or "").strip() or output
            raise DeployError(f"Error running wskdeploy: {detail}", code="wskdeploy_failed")

        # wskdeploy reports some failures on stdout with a zero exit code
        if any(line.lstrip().startswith("Error:") for line in output.splitlines()):
            logger.error("wskdeploy reported an error", stdout=output)
            raise DeployError(output, code="wskdeploy_failed")

        logger.info("wskdeploy completed", project_dir=str(descriptor.project_dir))
        return {"status": "success", "success": True}
