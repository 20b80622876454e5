"""Invocation of the Nuxt build command."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .command_runner import CommandResult, CommandRunner, SubprocessCommandRunner
from .config_loader import ConfigCache
from .errors import BuildError


DEFAULT_COMMAND = "npm"

BUILD_ENVIRONMENT: Dict[str, str] = {"NITRO_PRESET": "node"}


def select_build_subcommand(wants_backend: bool) -> str:
    """``build`` produces a server bundle, ``generate`` a static site."""

    return "build" if wants_backend else "generate"


def build_command(wants_backend: bool, command: str = DEFAULT_COMMAND) -> List[str]:
    return [command, "run", select_build_subcommand(wants_backend)]


def build(
    project_root: Path,
    cache: ConfigCache,
    *,
    command: str = DEFAULT_COMMAND,
    runner: CommandRunner | None = None,
) -> CommandResult:
    """Run the framework build in ``project_root`` and wait for it to finish.

    Output of the child process goes straight to the inherited streams.
    Raises :class:`BuildError` on a non-zero exit; whatever the build left on
    disk is kept.
    """

    runner = runner or SubprocessCommandRunner()
    config = cache.load_or_get(project_root)
    args = build_command(config.wants_backend, command)
    result = runner.run(
        args,
        cwd=Path(project_root),
        env=BUILD_ENVIRONMENT,
        check=False,
        note="Build Nuxt application",
        stream=True,
    )
    if result.returncode != 0:
        raise BuildError("Was unable to build your Nuxt application.")
    return result


__all__ = ["BUILD_ENVIRONMENT", "DEFAULT_COMMAND", "build", "build_command", "select_build_subcommand"]
