# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import asyncio
import logging
import sys
from typing import Optional

from vpa_acceptance.config import SuiteConfig
from vpa_acceptance.orchestrator import ComponentSuite
from vpa_acceptance.provisioning import AtmosProvisioner
from vpa_acceptance.utils import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m vpa_acceptance",
        description="Acceptance tests for the vertical-pod-autoscaler component",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run", help="Deploy dependencies, run both scenarios, tear down"
    )
    _add_common_args(run_parser)
    run_parser.add_argument("--kubeconfig", type=str, default=None)
    run_parser.add_argument("--kube-context", type=str, default=None)
    run_parser.add_argument(
        "--run-timeout",
        type=float,
        default=None,
        help="Outer deadline in seconds for the basic scenario",
    )
    run_parser.add_argument(
        "--skip-destroy-component",
        action="store_true",
        default=None,
        help="Leave the component deployed for debugging",
    )

    setup_parser = subparsers.add_parser("setup", help="Deploy suite dependencies")
    _add_common_args(setup_parser)

    teardown_parser = subparsers.add_parser(
        "teardown", help="Destroy suite dependencies"
    )
    _add_common_args(teardown_parser)

    return parser


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=str, default=None, help="Suite definition YAML file"
    )
    parser.add_argument("--stack", type=str, default=None)
    parser.add_argument("--atmos-bin", type=str, default="atmos")
    parser.add_argument(
        "--atmos-base-path", type=str, default=None, help="Sets ATMOS_BASE_PATH"
    )
    parser.add_argument(
        "--skip-deploy-dependencies", action="store_true", default=None
    )
    parser.add_argument(
        "--skip-destroy-dependencies", action="store_true", default=None
    )


def build_suite(args: argparse.Namespace) -> ComponentSuite:
    config = SuiteConfig.from_yaml(args.config) if args.config else SuiteConfig()
    config = config.with_overrides(
        stack=args.stack,
        kubeconfig=getattr(args, "kubeconfig", None),
        kube_context=getattr(args, "kube_context", None),
        run_timeout=getattr(args, "run_timeout", None),
        skip_deploy_dependencies=args.skip_deploy_dependencies,
        skip_destroy_dependencies=args.skip_destroy_dependencies,
        skip_destroy_component=getattr(args, "skip_destroy_component", None),
    )
    provisioner = AtmosProvisioner(
        atmos_bin=args.atmos_bin, base_path=args.atmos_base_path
    )
    return ComponentSuite(provisioner=provisioner, config=config)


async def cmd_run_async(args: argparse.Namespace) -> int:
    suite = build_suite(args)
    failures = 0
    try:
        await suite.setup_suite()
        for name, scenario in (
            ("basic", suite.run_basic),
            ("enabled-flag", suite.run_enabled_flag),
        ):
            try:
                await scenario()
                print(f"PASSED {name}")
            except Exception as e:
                logger.exception(f"Scenario {name} failed: {e}")
                print(f"FAILED {name}: {e}")
                failures += 1
    finally:
        try:
            await suite.teardown_suite()
        finally:
            suite.provisioner.close()
    return 1 if failures else 0


async def cmd_setup_async(args: argparse.Namespace) -> int:
    suite = build_suite(args)
    try:
        await suite.setup_suite()
    finally:
        suite.provisioner.close()
    return 0


async def cmd_teardown_async(args: argparse.Namespace) -> int:
    suite = build_suite(args)
    try:
        await suite.teardown_suite()
    finally:
        suite.provisioner.close()
    return 0


def main(argv: Optional[list] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "run": cmd_run_async,
        "setup": cmd_setup_async,
        "teardown": cmd_teardown_async,
    }

    handler = handlers.get(args.command)
    if handler:
        return asyncio.run(handler(args))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
