"""Build the web action response envelope."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

from deploy_web.core.models import ResponseEnvelope

JSON_HEADERS = {"Content-Type": "application/json"}


def _encode(payload: Dict[str, Any]) -> str:
    raw = json.dumps(payload, default=str).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _error_message(err: BaseException) -> Optional[str]:
    message = getattr(err, "message", None)
    if message is None and err.args:
        message = str(err)
    return message or None


def on_success(result: Any, activation_id: Optional[str]) -> ResponseEnvelope:
    return ResponseEnvelope(
        statusCode=200,
        headers=dict(JSON_HEADERS),
        body=_encode({"status": result, "activationId": activation_id}),
    )


def on_failure(
    status_code: int,
    err: BaseException,
    activation_id: Optional[str],
    message: Optional[str] = None,
) -> ResponseEnvelope:
    """Failure envelope; `error` is left out when the exception has no message."""
    payload: Dict[str, Any] = {}
    error = _error_message(err)
    if error:
        payload["error"] = error
    payload["activationId"] = activation_id
    if message:
        payload["message"] = message
    return ResponseEnvelope(
        statusCode=status_code,
        headers=dict(JSON_HEADERS),
        body=_encode(payload),
    )
