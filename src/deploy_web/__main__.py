"""CLI entrypoints (deploy-web serve, deploy-web invoke)."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional


def _parse_env_data(raw: Optional[str]):
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"--env-data must be JSON: {exc}")
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError("--env-data must be a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deploy-web", description="Deploy an OpenWhisk manifest from a git repo")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("serve", help="Run the HTTP server")

    cmd_invoke = sub.add_parser("invoke", help="Run one deploy activation locally")
    cmd_invoke.add_argument("--git-url", required=True, help="Repository holding the manifest")
    cmd_invoke.add_argument("--manifest-path", help="Directory of manifest.yaml inside the repo")
    cmd_invoke.add_argument("--env-data", type=_parse_env_data, help="JSON object exported to wskdeploy")
    cmd_invoke.add_argument("--api-host", help="OpenWhisk API host")
    cmd_invoke.add_argument("--auth", help="OpenWhisk auth key")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "serve":
        from deploy_web.main import run
        run()
        return 0

    if args.cmd == "invoke":
        from deploy_web.action import main as action_main
        from deploy_web.core.models import ResponseEnvelope

        params = {"gitUrl": args.git_url, "__ow_method": "post"}
        if args.manifest_path:
            params["manifestPath"] = args.manifest_path
        if args.env_data is not None:
            params["envData"] = args.env_data
        if args.api_host:
            params["wskApiHost"] = args.api_host
        if args.auth:
            params["wskAuth"] = args.auth

        envelope = ResponseEnvelope(**action_main(params))
        print(json.dumps({"statusCode": envelope.statusCode, "body": envelope.decoded_body()}, indent=2))
        return 0 if envelope.statusCode == 200 else 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
