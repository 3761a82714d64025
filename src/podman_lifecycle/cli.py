"""Command-line interface for podman-lifecycle."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from podman_lifecycle import __version__
from podman_lifecycle.config import DEFAULT_IMAGE, STOP_TIMEOUT, WAIT_TIMEOUT, default_endpoint
from podman_lifecycle.core.errors import LifecycleError
from podman_lifecycle.core.images import PullOptions, PullPolicy
from podman_lifecycle.core.session import Session
from podman_lifecycle.utils.logger import logger
from podman_lifecycle.workflow import run_workflow


def _add_endpoint_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--url",
        default=None,
        help="Endpoint URI (default: $CONTAINER_HOST or the runtime-directory socket)"
    )
    parser.add_argument(
        "--runtime-dir",
        default=None,
        help="Runtime directory root holding podman/podman.sock (default: $XDG_RUNTIME_DIR)"
    )


def _resolve_endpoint(args: argparse.Namespace) -> str:
    return args.url or default_endpoint(args.runtime_dir)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the podman-lifecycle CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = argparse.ArgumentParser(
        prog="podman-lifecycle",
        description="Drive a container through its lifecycle over the Podman API"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # Full lifecycle walk-through
    run_parser = subparsers.add_parser(
        "run",
        help="Pull, create, start, inspect and stop a container"
    )
    _add_endpoint_arguments(run_parser)
    run_parser.add_argument(
        "--image",
        default=DEFAULT_IMAGE,
        help=f"Image reference, or rootfs path with --rootfs (default: {DEFAULT_IMAGE})"
    )
    run_parser.add_argument(
        "--rootfs",
        action="store_true",
        help="Treat --image as a root filesystem path on the remote host"
    )
    run_parser.add_argument(
        "--pull-policy",
        choices=[p.value for p in PullPolicy],
        default=PullPolicy.MISSING.value,
        help="When to pull the image (default: missing)"
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=WAIT_TIMEOUT,
        help=f"Seconds to wait for the container to run (default: {WAIT_TIMEOUT:g})"
    )
    run_parser.add_argument(
        "--stop-timeout",
        type=int,
        default=STOP_TIMEOUT,
        help=f"Seconds the remote waits before killing on stop (default: {STOP_TIMEOUT})"
    )

    # Connectivity check
    ping_parser = subparsers.add_parser(
        "ping",
        help="Check that the remote service answers"
    )
    _add_endpoint_arguments(ping_parser)

    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    args = parser.parse_args(argv)

    if args.command == "run":
        print("Welcome to the podman-lifecycle walk-through")
        try:
            with Session.establish(_resolve_endpoint(args)) as session:
                run_workflow(
                    session,
                    args.image,
                    pull_options=PullOptions(policy=PullPolicy(args.pull_policy)),
                    rootfs=args.rootfs,
                    wait_timeout=args.timeout,
                    stop_timeout=args.stop_timeout,
                )
        except LifecycleError as e:
            logger.error(f"Workflow aborted: {e}")
            print(e, file=sys.stderr)
            return 1
        return 0

    elif args.command == "ping":
        endpoint = _resolve_endpoint(args)
        try:
            with Session.establish(endpoint) as session:
                alive = session.ping()
                info = session.version()
        except LifecycleError as e:
            print(e, file=sys.stderr)
            return 1
        if not alive:
            print(f"{endpoint}: no answer to ping", file=sys.stderr)
            return 1
        print(f"{endpoint}: OK (version {info.get('Version', 'unknown')})")
        return 0

    elif args.command == "version":
        print(f"podman-lifecycle version {__version__}")
        return 0

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
