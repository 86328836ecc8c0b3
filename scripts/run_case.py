#!/usr/bin/env python3
"""Run one database benchmark case and print its results as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from cott.config import settings
from cott.core.errors import ConfigurationError
from cott.core.orchestrator import CaseOrchestrator, run_case
from cott.models import TestCase

logger = logging.getLogger(__name__)


def _parse_env(pairs: list[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {pair!r}")
        env[key] = value
    return env


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("case_file", nargs="?", help="Test case JSON file")
    parser.add_argument("--component-type", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Component env var (repeatable)",
    )
    parser.add_argument(
        "--max-rows",
        type=int,
        default=None,
        help="Largest sweep step (default: SWEEP_MAX_ROWS)",
    )
    parser.add_argument("--output", "-o", default=None, help="Write results JSON here")
    return parser


def _load_test_case(args: argparse.Namespace) -> TestCase:
    data: dict = {}
    if args.case_file:
        data = json.loads(Path(args.case_file).read_text(encoding="utf-8"))
    if args.component_type is not None:
        data["component-type"] = args.component_type
    if args.port is not None:
        data["port"] = args.port
    if args.env:
        env = dict(data.get("env-vars") or {})
        env.update(_parse_env(args.env))
        data["env-vars"] = env
    return TestCase.model_validate(data)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )

    try:
        test_case = _load_test_case(args)
        results = asyncio.run(
            run_case(test_case, CaseOrchestrator(sweep_max_rows=args.max_rows))
        )
    except (ConfigurationError, ValidationError, argparse.ArgumentTypeError) as e:
        logger.error("Invalid test case: %s", e)
        return 2

    payload = results.model_dump_json(indent=2, by_alias=True)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        logger.info("Results written to %s", args.output)
    else:
        print(payload)

    if results.errors:
        logger.warning("Case finished with %d error(s)", len(results.errors))
    return 0


if __name__ == "__main__":
    sys.exit(main())
