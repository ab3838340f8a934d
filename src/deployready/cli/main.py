# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""DeployReady CLI."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from typing import Any

from ..config import (
    DeploySettings,
    HttpSettings,
    load_deploy_settings,
    load_http_settings,
    load_poll_settings,
)
from ..environment.models import EnvironmentReport
from ..errors import DeployReadyError, EnvironmentCheckError, InvalidTargetError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models.poll import PollResult, PollStatus
from ..poll.policy import PollPolicy
from ..runtime import DeployReady

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_CANCELLED = 130


def _non_negative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed


def _add_poll_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--interval", type=_non_negative_float, help="Seconds between probes (default 60)")
    parser.add_argument("--max-wait", type=_non_negative_float, help="Give up after this many seconds (default 3600)")
    parser.add_argument("--max-attempts", type=int, help="Give up after this many probes")
    parser.add_argument("--ready-status", type=int, help="HTTP status that means ready (default 200)")
    parser.add_argument("--method", choices=["HEAD", "GET"], help="Probe method (default HEAD)")
    parser.add_argument(
        "--verify-ssl",
        action="store_true",
        help="Validate TLS certificates (off by default while certificates propagate)",
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    common.add_argument("--log-level", help="Logging level (default INFO)")
    common.add_argument("--region", help="AWS region passed to child processes (default us-east-1)")
    common.add_argument("--working-dir", help="Terraform working directory (default 01-website)")

    parser = argparse.ArgumentParser(
        prog="deployready",
        description="Provision a static website with Terraform and wait until it serves traffic",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    wait = subparsers.add_parser("wait", parents=[common], help="Poll a URL until it returns the ready status")
    wait.add_argument("url", nargs="?", help="Target URL (default: https://www.<var.domain_name>)")
    _add_poll_arguments(wait)

    subparsers.add_parser("check-env", parents=[common], help="Validate required tools and AWS credentials")

    apply = subparsers.add_parser("apply", parents=[common], help="Check the environment, then terraform init + apply")
    apply.add_argument("--wait", action="store_true", help="Wait for the site after applying")
    apply.add_argument("--url", help="Target URL for --wait (default: derived from var.domain_name)")
    _add_poll_arguments(apply)

    subparsers.add_parser("destroy", parents=[common], help="terraform init + destroy")
    return parser


def build_policy(args: argparse.Namespace) -> PollPolicy:
    """Layer CLI flags over environment-backed PollSettings. Raises ValueError for invalid bounds."""
    settings = load_poll_settings()
    if getattr(args, "interval", None) is not None:
        settings.interval = args.interval
    if getattr(args, "max_wait", None) is not None:
        settings.max_wait = args.max_wait
    if getattr(args, "max_attempts", None) is not None:
        settings.max_attempts = args.max_attempts
    if getattr(args, "ready_status", None) is not None:
        settings.ready_status = args.ready_status
    return PollPolicy.from_settings(settings)


def _apply_overrides(args: argparse.Namespace) -> tuple[HttpSettings, DeploySettings]:
    http_settings: HttpSettings = load_http_settings()
    if getattr(args, "verify_ssl", False):
        http_settings.verify_ssl = True
    if getattr(args, "method", None):
        http_settings.probe_method = args.method

    deploy_settings: DeploySettings = load_deploy_settings()
    if args.region:
        deploy_settings.region = args.region
    if args.working_dir:
        deploy_settings.working_dir = args.working_dir
    return http_settings, deploy_settings


def _print_json(data: Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _print_poll_result(result: PollResult) -> None:
    if result.status is PollStatus.READY:
        print(f"NOTE: URL is reachable: {result.url} ({result.attempts} attempt(s), {result.elapsed:.1f}s)")
        return
    if result.status is PollStatus.CANCELLED:
        print(f"WARNING: Wait for {result.url} cancelled after {result.attempts} attempt(s)")
        return
    print(f"ERROR: {result.url} {result.reason or 'did not become ready'}")
    reason = result.last_error_reason
    if reason:
        print(f"ERROR: Last failure: {reason}")


def _print_environment(report: EnvironmentReport) -> None:
    for check in report.checks:
        label = "NOTE" if check.ok else "ERROR"
        detail = f" ({check.detail})" if check.detail else ""
        print(f"{label}: {check.name}: {'ok' if check.ok else 'failed'}{detail}")
    if report.ok:
        print("NOTE: Environment validation successful.")
    else:
        print("ERROR: Environment check failed.")


def _poll_exit_code(result: PollResult) -> int:
    if result.status is PollStatus.READY:
        return EXIT_OK
    if result.status is PollStatus.CANCELLED:
        return EXIT_CANCELLED
    return EXIT_FAILED


def _emit_result(args: argparse.Namespace, result: PollResult) -> int:
    if args.json:
        _print_json(result)
    else:
        _print_poll_result(result)
    return _poll_exit_code(result)


def _cmd_wait(app: DeployReady, args: argparse.Namespace) -> int:
    return _emit_result(args, app.wait_until_ready(args.url))


def _cmd_check_env(app: DeployReady, args: argparse.Namespace) -> int:
    report = app.check_environment()
    if args.json:
        _print_json(report)
    else:
        _print_environment(report)
    return EXIT_OK if report.ok else EXIT_FAILED


def _cmd_apply(app: DeployReady, args: argparse.Namespace) -> int:
    try:
        result = app.provision(wait=args.wait, url=args.url)
    except EnvironmentCheckError as exc:
        if args.json:
            _print_json({"status": "ENVIRONMENT_CHECK_FAILED", "environment": exc.report.to_dict()})
        else:
            _print_environment(exc.report)
            print("ERROR: Environment check failed. Exiting.")
        return EXIT_FAILED
    if result is None:
        if args.json:
            _print_json({"status": "APPLIED"})
        else:
            print("NOTE: Website provisioning complete.")
        return EXIT_OK
    return _emit_result(args, result)


def _cmd_destroy(app: DeployReady, args: argparse.Namespace) -> int:
    app.teardown()
    if args.json:
        _print_json({"status": "DESTROYED"})
    else:
        print("NOTE: Website infrastructure destruction complete.")
    return EXIT_OK


_COMMANDS: dict[str, Callable[[DeployReady, argparse.Namespace], int]] = {
    "wait": _cmd_wait,
    "check-env": _cmd_check_env,
    "apply": _cmd_apply,
    "destroy": _cmd_destroy,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        policy = build_policy(args)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INVALID

    http_settings, deploy_settings = _apply_overrides(args)
    probes = args.command == "wait" or (args.command == "apply" and args.wait)
    http_client = create_default_http_client(http_settings) if probes else None

    with DeployReady(
        http_client=http_client,
        http_settings=http_settings,
        deploy_settings=deploy_settings,
        policy=policy,
    ) as app:
        try:
            return _COMMANDS[args.command](app, args)
        except InvalidTargetError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_INVALID
        except DeployReadyError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return EXIT_FAILED
        except KeyboardInterrupt:
            print("WARNING: Interrupted.", file=sys.stderr)
            return EXIT_CANCELLED


if __name__ == "__main__":
    raise SystemExit(main())
