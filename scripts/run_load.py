#!/usr/bin/env python3
"""
Run a load plan against a site

Usage:
  python scripts/run_load.py --plan <path> [--users N] [--iterations N] [--log-level LEVEL] [--json-logs]

Examples:
  python scripts/run_load.py --plan plans/umami.yaml
  LOAD_EGGS_USER=editor LOAD_EGGS_PASS=secret python scripts/run_load.py --plan plans/umami.yaml --users 8

Credentials from LOAD_EGGS_USER / LOAD_EGGS_PASS (environment or .env)
override the login section of the plan.
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from application.executor.load_runner import LoadRunner, RunSummary
from application.ports.logger import LoggerPort
from application.ports.loguru_logger import LoguruLogger
from domain.exceptions import ConfigurationError
from domain.plan import LoadPlan
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.plan.yaml_loader import YamlPlanLoader
from infrastructure.secrets.env_secret_provider import EnvSecretProvider

ENV_FILE = Path.cwd() / ".env"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate pages and load static assets under load")
    parser.add_argument("--plan", type=str, required=True)
    parser.add_argument("--users", type=int)
    parser.add_argument("--iterations", type=int)
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    return parser


def _apply_overrides(plan: LoadPlan, args: argparse.Namespace, secrets: EnvSecretProvider) -> LoadPlan:
    if args.users is not None:
        plan = replace(plan, users=args.users)
    if args.iterations is not None:
        plan = replace(plan, iterations=args.iterations)
    overrides = secrets.login_overrides()
    if plan.login is not None and overrides:
        plan = replace(plan, login=replace(plan.login, **overrides))
    return plan


def _print_summary(summary: RunSummary) -> None:
    print("\n=== Result ===")
    print(f"Steps: {len(summary.steps)}")
    print(f"Failed: {len(summary.failures)}")
    print(f"Asset failures: {summary.asset_failures}")
    for record in summary.failures:
        print(f"  user {record.user} #{record.iteration} {record.name}: {record.error_message}")


def main() -> None:
    args = _build_parser().parse_args()

    logger: LoggerPort
    if args.json_logs:
        logger = ConsoleLogger()
    else:
        setup_console_logging(level=args.log_level)
        logger = LoguruLogger()

    try:
        plan = YamlPlanLoader().load_from_file(args.plan)
        plan = _apply_overrides(plan, args, EnvSecretProvider(ENV_FILE))
        summary = LoadRunner(logger=logger).run(plan)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}")
        sys.exit(2)

    _print_summary(summary)
    sys.exit(0 if summary.ok else 1)


if __name__ == "__main__":
    main()
