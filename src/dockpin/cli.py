"""Command line entry point.

Usage:
    dockpin apt pin [-s dockpin-apt.pkgs] [-p dockpin-apt.lock] [--base-image IMAGE]
    dockpin apt install [-p dockpin-apt.lock]
    dockpin docker pin [-f Dockerfile]
    dockpin docker check [-f Dockerfile]
    dockpin docker resolve IMAGE
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from dockpin import __version__
from dockpin.backends import DockerAptResolver, DockerDigestResolver, DpkgInstaller
from dockpin.config import (
    DEFAULT_DOCKERFILE,
    DEFAULT_LOCK_FILE,
    DEFAULT_SELECTION_FILE,
    DockpinConfig,
)
from dockpin.errors import DockpinError
from dockpin.fetch import DEFAULT_CACHE_DIR
from dockpin.observability import StructuredLogger
from dockpin.workflows import (
    check_images,
    install_packages,
    pin_images,
    pin_packages,
    resolve_image,
)


def cmd_apt_pin(
    args: argparse.Namespace, config: DockpinConfig, logger: StructuredLogger
) -> None:
    pin_packages(config, resolver=DockerAptResolver(), logger=logger)


def cmd_apt_install(
    args: argparse.Namespace, config: DockpinConfig, logger: StructuredLogger
) -> None:
    install_packages(config, installer=DpkgInstaller(), logger=logger)


def cmd_docker_pin(
    args: argparse.Namespace, config: DockpinConfig, logger: StructuredLogger
) -> None:
    pin_images(config, resolver=DockerDigestResolver(), logger=logger)


def cmd_docker_check(
    args: argparse.Namespace, config: DockpinConfig, logger: StructuredLogger
) -> None:
    check_images(config, resolver=DockerDigestResolver(), logger=logger)


def cmd_docker_resolve(
    args: argparse.Namespace, config: DockpinConfig, logger: StructuredLogger
) -> None:
    print(resolve_image(args.image, resolver=DockerDigestResolver()))


def build_parser() -> argparse.ArgumentParser:
    # Leaf commands accept the shared flags too, e.g. `dockpin docker pin -f -`.
    dockerfile_flag = argparse.ArgumentParser(add_help=False)
    dockerfile_flag.add_argument("-f", "--dockerfile", default=argparse.SUPPRESS)
    pin_file_flag = argparse.ArgumentParser(add_help=False)
    pin_file_flag.add_argument("-p", "--pin-file", default=argparse.SUPPRESS)

    parser = argparse.ArgumentParser(
        prog="dockpin",
        description="A tool for pinning Docker image and apt package versions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-f",
        "--dockerfile",
        default=DEFAULT_DOCKERFILE,
        help="Path to your Dockerfile (or - for stdin)",
    )
    parser.add_argument("--log-file", type=Path, help="Write structured log records as JSON lines")
    sub = parser.add_subparsers(dest="group", required=True)

    apt = sub.add_parser("apt", help="Pinning and installing apt packages")
    apt.add_argument(
        "-p",
        "--pin-file",
        default=DEFAULT_LOCK_FILE,
        help="File with pinned package versions",
    )
    apt_sub = apt.add_subparsers(dest="command", required=True)
    apt_pin = apt_sub.add_parser(
        "pin",
        help="Pin which versions to install (but don't install them)",
        parents=[dockerfile_flag, pin_file_flag],
    )
    apt_pin.add_argument(
        "-s",
        "--selection-file",
        default=DEFAULT_SELECTION_FILE,
        help="File with packages to be installed",
    )
    apt_pin.add_argument(
        "--base-image",
        default=None,
        help="Docker image you're going to use dockpin in, so we can figure out your "
        "additional dependencies.",
    )
    apt_pin.set_defaults(handler=cmd_apt_pin)
    apt_install = apt_sub.add_parser(
        "install", help="Install the pinned versions", parents=[pin_file_flag]
    )
    apt_install.add_argument(
        "--cache-dir",
        type=Path,
        default=DEFAULT_CACHE_DIR,
        help="Directory for downloaded package files",
    )
    apt_install.set_defaults(handler=cmd_apt_install)

    docker = sub.add_parser("docker", help="Pinning docker base images in a Dockerfile")
    docker_sub = docker.add_subparsers(dest="command", required=True)
    docker_sub.add_parser(
        "pin",
        help="Update the Dockerfile to pin the current digest of the images",
        parents=[dockerfile_flag],
    ).set_defaults(handler=cmd_docker_pin)
    docker_sub.add_parser(
        "check",
        help="Check if any base image in a Dockerfile is not the latest tagged image",
        parents=[dockerfile_flag],
    ).set_defaults(handler=cmd_docker_check)
    resolve = docker_sub.add_parser(
        "resolve", help="Prints the current digest of the given base image"
    )
    resolve.add_argument("image", help="Image reference, e.g. ubuntu:20.04")
    resolve.set_defaults(handler=cmd_docker_resolve)
    return parser


def config_from_args(args: argparse.Namespace) -> DockpinConfig:
    return DockpinConfig(
        dockerfile=args.dockerfile,
        lock_file=getattr(args, "pin_file", DEFAULT_LOCK_FILE),
        selection_file=getattr(args, "selection_file", DEFAULT_SELECTION_FILE),
        base_image=getattr(args, "base_image", None) or None,
        cache_dir=getattr(args, "cache_dir", DEFAULT_CACHE_DIR),
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = StructuredLogger(stream=sys.stderr)
    try:
        args.handler(args, config_from_args(args), logger)
    except DockpinError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        if args.log_file is not None:
            logger.to_json_lines(args.log_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
