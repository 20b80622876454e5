"""Command line interface for the Nuxt App Hosting adapter."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable
import os
import sys

import yaml

from .build import DEFAULT_COMMAND, build, build_command
from .bundle import (
    generate_output_directory,
    populate_output_bundle_options,
    validate_output_directory,
)
from .command_runner import RecordingCommandRunner, SubprocessCommandRunner
from .config_loader import ConfigCache, FileConfigLoader, NuxtConfigLoader


COMMAND_ENV_VAR = "APPHOSTING_NUXT_COMMAND"


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="apphosting-nuxt", description="Package a Nuxt build as an App Hosting output bundle")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build the application and assemble the output bundle")
    build_parser.add_argument("--project-root", type=Path, default=None, help="Nuxt project directory (default: cwd)")
    build_parser.add_argument(
        "--command",
        dest="build_command",
        default=None,
        help=f"Package manager used to run the build (default: ${COMMAND_ENV_VAR} or {DEFAULT_COMMAND})",
    )
    build_parser.add_argument("--config-file", type=Path, help="Read the resolved Nuxt config from a TOML/JSON/YAML file")
    build_parser.add_argument("--dry-run", action="store_true", help="Print the build command and bundle layout without running them")
    build_parser.add_argument("--verbose", action="store_true", help="Print the resolved configuration and bundle paths")

    config_parser = subparsers.add_parser("config", help="Print the resolved Nuxt configuration")
    config_parser.add_argument("--project-root", type=Path, default=None, help="Nuxt project directory (default: cwd)")
    config_parser.add_argument("--config-file", type=Path, help="Read the resolved Nuxt config from a TOML/JSON/YAML file")

    return parser.parse_args(list(argv))


def _make_cache(args: Namespace) -> ConfigCache:
    if args.config_file:
        return ConfigCache(FileConfigLoader(args.config_file))
    return ConfigCache(NuxtConfigLoader(SubprocessCommandRunner()))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    project_root = (args.project_root or Path.cwd()).resolve()

    try:
        if args.command == "build":
            return _handle_build(args, project_root)
        if args.command == "config":
            return _handle_config(args, project_root)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    raise ValueError(f"Unknown command: {args.command}")


def _handle_build(args: Namespace, project_root: Path) -> int:
    cache = _make_cache(args)
    command = args.build_command or os.environ.get(COMMAND_ENV_VAR) or DEFAULT_COMMAND
    config = cache.load_or_get(project_root)
    options = populate_output_bundle_options(project_root, config.wants_backend)

    if args.verbose or args.dry_run:
        print(f"Server rendering: {'enabled' if config.wants_backend else 'disabled'}")
        print(f"Base URL: {config.base_url}")
        print(f"Output bundle: {options.output_directory}")
        print(f"Manifest: {options.bundle_yaml_path}")

    if args.dry_run:
        runner = RecordingCommandRunner()
        build(project_root, cache, command=command, runner=runner)
        for line in runner.iter_formatted():
            print(line)
        return 0

    print(f"Building Nuxt application: {' '.join(build_command(config.wants_backend, command))}")
    build(project_root, cache, command=command)
    generate_output_directory(project_root, options, cache)
    validate_output_directory(options)
    print(f"Output bundle written to {options.output_directory}")
    return 0


def _handle_config(args: Namespace, project_root: Path) -> int:
    config = _make_cache(args).load_or_get(project_root)
    print(yaml.safe_dump(config.to_mapping(), sort_keys=False), end="")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
