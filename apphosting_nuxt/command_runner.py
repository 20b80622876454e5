"""Child-process execution for the build command and config resolution."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import subprocess


@dataclass
class CommandResult:
    """Outcome of a child process."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    streamed: bool = False


class CommandError(RuntimeError):
    """Raised when a checked command exits with a non-zero status."""

    def __init__(self, result: CommandResult):
        message = f"Command failed with exit code {result.returncode}: {' '.join(map(shlex.quote, result.command))}"
        if result.streamed:
            message = f"{message}\nstdout/stderr already streamed above."
        else:
            message = f"{message}\nstderr: {result.stderr.strip()}"
        super().__init__(message)
        self.result = result


class CommandRunner:
    """Interface shared by the real and the recording runner."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)


class SubprocessCommandRunner(CommandRunner):
    """Runs commands with :mod:`subprocess`, blocking until they exit.

    ``env`` entries are layered over the current process environment. With
    ``stream=True`` the child inherits stdin/stdout/stderr; otherwise output
    is captured as text.
    """

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        process = subprocess.run(
            list(command),
            cwd=str(cwd) if cwd else None,
            env=self._merge_environment(env),
            capture_output=not stream,
            text=True,
            check=False,
        )
        result = CommandResult(
            command=list(command),
            returncode=process.returncode,
            stdout="" if stream else process.stdout,
            stderr="" if stream else process.stderr,
            streamed=stream,
        )
        if check and result.returncode != 0:
            raise CommandError(result)
        return result


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    stream: bool


@dataclass
class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them.

    ``outputs`` maps a program name (``command[0]``) to the stdout handed
    back for it; ``returncode`` is reported for every recorded command.
    """

    outputs: Dict[str, str] = field(default_factory=dict)
    returncode: int = 0
    commands: List[RecordedCommand] = field(default_factory=list)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        self.commands.append(
            RecordedCommand(
                command=list(command),
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else {},
                note=note,
                stream=stream,
            )
        )
        stdout = "" if stream else self.outputs.get(command[0], "")
        result = CommandResult(
            command=list(command),
            returncode=self.returncode,
            stdout=stdout,
            stderr="",
            streamed=stream,
        )
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if record.cwd:
                parts.append(f"(cwd={record.cwd})")
            for key, value in sorted(record.env.items()):
                parts.append(f"{key}={shlex.quote(value)}")
            parts.append(self.format_command(record.command))
            yield " ".join(parts)


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
]
