"""Driver CLI commands."""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from devpod_k8s.config import get_driver_config
from devpod_k8s.errors import DriverError
from devpod_k8s.infra import KubectlError
from devpod_k8s.logging import setup_logging
from devpod_k8s.models import ContainerInfo
from devpod_k8s.runtimes.kubernetes import KubernetesDriver, create_driver


def read_container_info(path: str) -> ContainerInfo:
    """Read a run request from a file, or stdin for ``-``."""
    if path == "-":
        raw = sys.stdin.read()
    else:
        with open(path, encoding="utf-8") as f:
            raw = f.read()
    return ContainerInfo.from_json(raw)


async def run(driver: KubernetesDriver, info: ContainerInfo) -> None:
    await driver.run_dev_container(
        info.parsed_config,
        info.merged_config,
        info.image_name,
        info.workspace_mount,
        info.labels,
        info.image_details,
    )
    print(driver.get_id(info.labels))


async def start(driver: KubernetesDriver, identity: str) -> None:
    await driver.start_dev_container(identity, [])
    print(f"Dev container '{identity}' started")


async def stop(driver: KubernetesDriver, identity: str) -> None:
    result = await driver.stop_dev_container(identity)
    print(f"Dev container '{identity}': {result.status.value}")


async def delete(driver: KubernetesDriver, identity: str) -> None:
    result = await driver.delete_dev_container(identity)
    print(f"Dev container '{identity}': {result.status.value}")


async def status(driver: KubernetesDriver, identity: str) -> None:
    found = await driver.find_dev_container(identity)
    if found is None:
        print(f"Dev container '{identity}' not found")
        sys.exit(1)
    print(found.model_dump_json())


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run devcontainers as Kubernetes pods",
        prog="devpod-k8s",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    run_parser = subparsers.add_parser("run", help="Create or recreate a dev container")
    run_parser.add_argument(
        "--input", "-i",
        default="-",
        help="Container info JSON file (default: stdin)",
    )

    # start/stop/status commands
    for name, help_text in (
        ("start", "Start a dev container from its stored configuration"),
        ("stop", "Delete the pod, keeping the volume"),
        ("status", "Show pod and volume state"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("id", help="Dev container ID")

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete the pod and its volume")
    delete_parser.add_argument("id", help="Dev container ID")
    delete_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Skip confirmation",
    )

    args = parser.parse_args(argv)

    config = get_driver_config()
    setup_logging(config.logging)
    driver = create_driver(config)

    try:
        if args.command == "run":
            try:
                info = read_container_info(args.input)
            except (OSError, ValidationError) as e:
                print(f"Error: invalid input: {e}", file=sys.stderr)
                sys.exit(1)
            asyncio.run(run(driver, info))

        elif args.command == "start":
            asyncio.run(start(driver, args.id))

        elif args.command == "stop":
            asyncio.run(stop(driver, args.id))

        elif args.command == "status":
            asyncio.run(status(driver, args.id))

        elif args.command == "delete":
            if not args.force:
                confirm = input(f"Delete dev container '{args.id}' and its volume? [y/N]: ")
                if confirm.lower() != "y":
                    print("Cancelled")
                    sys.exit(0)
            asyncio.run(delete(driver, args.id))

    except (DriverError, KubectlError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
