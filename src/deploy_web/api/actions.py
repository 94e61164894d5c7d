"""HTTP surface for the deploy action.

``/deploy`` behaves like the OpenWhisk web action: the envelope is unpacked
into a real HTTP response. ``/invoke`` returns the envelope itself, as a
blocking action invoke would.
"""

from __future__ import annotations

import base64
import json
import uuid
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from deploy_web.core.models import ResponseEnvelope
from deploy_web.deploy.pipeline import DeployPipeline, activation_context
from deploy_web.utils.logging import bind_activation_context


router = APIRouter()
logger = structlog.get_logger()

ACTIVATION_HEADER = "X-Activation-Id"
# Method gating is the pipeline's job, so every verb is routed to it
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def _read_params(request: Request) -> Dict[str, Any]:
    params: Dict[str, Any] = dict(request.query_params)
    raw = await request.body()
    if raw:
        try:
            body = json.loads(raw)
        except ValueError:
            body = None
        if isinstance(body, dict):
            params.update(body)
    params["__ow_method"] = request.method.lower()
    return params


async def _run_activation(request: Request) -> ResponseEnvelope:
    settings = request.app.state.settings
    pipeline: DeployPipeline = request.app.state.pipeline

    activation_id = request.headers.get(ACTIVATION_HEADER) or settings.activation_id or uuid.uuid4().hex
    request.state.activation_id = activation_id
    context = activation_context(settings, activation_id)
    params = await _read_params(request)
    bind_activation_context(context.activation_id, params.get("gitUrl") if isinstance(params.get("gitUrl"), str) else None)

    return await run_in_threadpool(pipeline.handle, params, context)


@router.api_route("/deploy", methods=ALL_METHODS)
async def deploy_web_action(request: Request) -> Response:
    envelope = await _run_activation(request)
    return Response(
        content=base64.b64decode(envelope.body),
        status_code=envelope.statusCode,
        headers=envelope.headers,
    )


@router.api_route("/invoke", methods=ALL_METHODS)
async def invoke_action(request: Request) -> JSONResponse:
    envelope = await _run_activation(request)
    return JSONResponse(envelope.to_dict())
