"""File summary CLI.

Usage:
    python -m filesummary summarize URI --token TOKEN
    python -m filesummary smoketest [--env ENV] [--base-url URL]
    python -m filesummary serve [--host HOST] [--port PORT]

summarize runs the pipeline in-process against the configured upstreams and
prints the summary (or the error envelope) as JSON.

smoketest probes a deployed instance with the failure cases that need no
credentials: missing uri (400), malformed uri (400) and missing token (401).

Exit codes:
    0: Success / all probes passed
    1: Upstream failure / a probe failed / internal error
    2: Invalid request (400 or 401) / bad configuration
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from filesummary.config import ConfigError, ServiceConfig
from filesummary.services.summary.errors import (
    MUST_CONTAIN_BEARER_MESSAGE,
    MUST_SPECIFY_URI_MESSAGE,
    FileSummaryError,
    UpstreamError,
)

FILE_SUMMARY_PATH = "/fileSummaryV1"
LOCAL_BASE_URL = "http://localhost:8010/broad-dsde-dev/us-central1"
SMOKETEST_DATA_OBJECT_URI = "dos://dg.4503/preview_dos.json"
SMOKETEST_MALFORMED_URI = "somethingNotValidURL"
DEPLOYED_ENVIRONMENTS = ("dev", "staging", "alpha", "perf", "prod")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


def _output_json(data: dict[str, Any]) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def choose_base_url(env: str) -> str:
    """Default deployment URL for an environment; anything else is local."""
    if env in DEPLOYED_ENVIRONMENTS:
        return f"https://us-central1-broad-dsde-{env}.cloudfunctions.net"
    return LOCAL_BASE_URL


def cmd_summarize(args: argparse.Namespace) -> int:
    """Execute the summarize command.

    Exit codes:
        0: summary produced
        1: upstream failure
        2: invalid request or configuration
    """
    from filesummary.services.summary.service import create_default_file_summary_service

    try:
        svc = create_default_file_summary_service(ServiceConfig.from_env())
    except ConfigError as exc:
        _output_json({"code": "CONFIG_ERROR", "message": str(exc), "details": None})
        return 2

    authorization = f"Bearer {args.token}" if args.token else None

    try:
        summary = svc.summarize({"uri": args.uri}, authorization)
    except FileSummaryError as exc:
        _output_json({"code": exc.code, "message": exc.message, "details": exc.to_details()})
        return 1 if isinstance(exc, UpstreamError) else 2

    _output_json(summary.to_response())
    return 0


@dataclass(frozen=True)
class SmokeProbe:
    """One unauthenticated request and the response it must produce."""

    name: str
    body: dict[str, Any]
    expected_status: int
    expected_marker: str


SMOKE_PROBES: tuple[SmokeProbe, ...] = (
    SmokeProbe(
        name="missing uri",
        body={"notValid": SMOKETEST_DATA_OBJECT_URI},
        expected_status=400,
        expected_marker=MUST_SPECIFY_URI_MESSAGE,
    ),
    SmokeProbe(
        name="malformed uri",
        body={"uri": SMOKETEST_MALFORMED_URI},
        expected_status=400,
        expected_marker=MUST_SPECIFY_URI_MESSAGE,
    ),
    SmokeProbe(
        name="missing bearer token",
        body={"uri": SMOKETEST_DATA_OBJECT_URI},
        expected_status=401,
        expected_marker=MUST_CONTAIN_BEARER_MESSAGE,
    ),
)


def run_smoketest(base_url: str, client: httpx.Client) -> list[dict[str, Any]]:
    """Run every smoke probe against base_url.

    Returns:
        One result dict per probe with name, pass flag and observed status.
    """
    url = f"{base_url.rstrip('/')}{FILE_SUMMARY_PATH}"
    results: list[dict[str, Any]] = []

    for probe in SMOKE_PROBES:
        try:
            response = client.post(url, json=probe.body)
        except httpx.RequestError as exc:
            results.append({"name": probe.name, "pass": False, "error": str(exc), "status": None})
            continue

        passed = (
            response.status_code == probe.expected_status
            and probe.expected_marker in response.text
        )
        results.append({"name": probe.name, "pass": passed, "status": response.status_code})

    return results


def cmd_smoketest(
    args: argparse.Namespace,
    client_factory: Callable[[], httpx.Client] | None = None,
) -> int:
    """Execute the smoketest command.

    Exit codes:
        0: all probes passed
        1: at least one probe failed
    """
    base_url = args.base_url or choose_base_url(args.env)
    factory = client_factory or (lambda: httpx.Client(timeout=30.0))

    with factory() as client:
        results = run_smoketest(base_url, client)

    passed = all(r["pass"] for r in results)
    _output_json({"base_url": base_url, "pass": passed, "probes": results})
    return 0 if passed else 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the API with uvicorn."""
    import uvicorn

    from filesummary.api.main import create_app
    from filesummary.api.middleware.request_id import RequestIdLogFilter

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(RequestIdLogFilter())

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="filesummary",
        description="Resolve gs://, dos:// and drs:// URIs to metadata and signed URLs",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Summarize one URI in-process against the configured upstreams",
    )
    summarize_parser.add_argument("uri", help="gs://, dos:// or drs:// URI")
    summarize_parser.add_argument(
        "--token",
        required=False,
        default=None,
        help="Bearer token (without the 'Bearer ' prefix)",
    )

    smoketest_parser = subparsers.add_parser(
        "smoketest",
        help="Probe a deployed instance with unauthenticated failure cases",
    )
    smoketest_parser.add_argument(
        "--env",
        default="local",
        help="Environment picking the default base URL (local, dev, staging, alpha, perf, prod)",
    )
    smoketest_parser.add_argument(
        "--base-url",
        metavar="URL",
        default=None,
        help="Base URL of the deployment (overrides --env)",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8010)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            return 0

        if args.command == "summarize":
            return cmd_summarize(args)

        if args.command == "smoketest":
            return cmd_smoketest(args)

        if args.command == "serve":
            return cmd_serve(args)

        parser.print_help()
        return 0

    except Exception as e:
        _output_json({"code": "INTERNAL_ERROR", "message": str(e), "details": None})
        return 1


if __name__ == "__main__":
    sys.exit(main())
