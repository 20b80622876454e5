"""Resolution and caching of the Nuxt configuration values the adapter needs."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping
import json
import textwrap
import tomllib

import yaml

from .command_runner import CommandRunner, SubprocessCommandRunner


ConfigLoader = Callable[[Any], Mapping[str, Any]]


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``."""

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(FILE_LOADERS))
        raise ValueError(
            f"Unsupported configuration file extension: {suffix}. Supported: {supported}"
        )

    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    with path.open(mode, **kwargs) as handle:
        data = loader(handle)

    if not isinstance(data, Mapping):
        raise TypeError(f"Configuration file '{path}' must contain a mapping at the root")

    return data


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """The subset of the resolved Nuxt options used for packaging."""

    wants_backend: bool = True
    base_url: str = "/"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResolvedConfig":
        ssr = data.get("ssr", True)
        if not isinstance(ssr, bool):
            raise TypeError("ssr must be a boolean")

        app_section = data.get("app") or {}
        if not isinstance(app_section, Mapping):
            raise TypeError("app must be a mapping")
        base_url = app_section.get("baseURL", "/")
        if not isinstance(base_url, str):
            raise TypeError("app.baseURL must be a string")

        return cls(wants_backend=ssr, base_url=base_url or "/")

    def to_mapping(self) -> Dict[str, Any]:
        return {"ssr": self.wants_backend, "app": {"baseURL": self.base_url}}


# Runs in the project root so that @nuxt/kit resolves from its node_modules.
_NUXT_CONFIG_SCRIPT = textwrap.dedent(
    """
    import { loadNuxtConfig } from "@nuxt/kit";
    const options = await loadNuxtConfig({ cwd: process.cwd() });
    console.log(JSON.stringify({ ssr: options.ssr, app: { baseURL: options.app.baseURL } }));
    """
).strip()


class NuxtConfigLoader:
    """Resolves the project's Nuxt configuration through ``@nuxt/kit``.

    ``@nuxt/kit`` is imported from the project's own ``node_modules``. It is a
    transitive dependency of ``nuxt``, so strict layouts such as pnpm's only
    expose it when the project lists it directly (or hoists it); otherwise
    node fails and :class:`CommandError` propagates. Use
    :class:`FileConfigLoader` with a pre-resolved config in that case.
    """

    def __init__(self, runner: CommandRunner | None = None, *, node: str = "node") -> None:
        self._runner = runner or SubprocessCommandRunner()
        self._node = node

    def __call__(self, project_root: Path) -> ResolvedConfig:
        result = self._runner.run(
            [self._node, "--input-type=module", "--eval", _NUXT_CONFIG_SCRIPT],
            cwd=project_root,
            note="Resolve Nuxt configuration",
        )
        # Nuxt may log while loading modules; the JSON payload is the last line.
        lines = [line for line in result.stdout.splitlines() if line.strip()]
        payload = json.loads(lines[-1] if lines else "")
        if not isinstance(payload, Mapping):
            raise TypeError("Resolved Nuxt configuration must be a JSON object")
        return ResolvedConfig.from_mapping(payload)


class FileConfigLoader:
    """Reads an already-resolved configuration from a TOML, JSON or YAML file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def __call__(self, project_root: Path) -> ResolvedConfig:
        path = self._path if self._path.is_absolute() else Path(project_root) / self._path
        return ResolvedConfig.from_mapping(load_config_file(path))


class ConfigCache:
    """Holds the resolved configuration for one project.

    The first :meth:`load_or_get` call invokes the loader; every later call
    returns that same object, whatever ``project_root`` it is given. Use one
    cache per project.
    """

    def __init__(self, loader: Callable[[Path], ResolvedConfig] | None = None) -> None:
        self._loader = loader or NuxtConfigLoader()
        self._config: ResolvedConfig | None = None

    @property
    def loaded(self) -> bool:
        return self._config is not None

    def load_or_get(self, project_root: Path) -> ResolvedConfig:
        if self._config is None:
            self._config = self._loader(Path(project_root))
        return self._config


def get_config(project_root: Path, cache: ConfigCache) -> ResolvedConfig:
    """Return the cached configuration, loading it on first use."""

    return cache.load_or_get(project_root)


__all__ = [
    "ConfigCache",
    "FILE_LOADERS",
    "FileConfigLoader",
    "NuxtConfigLoader",
    "ResolvedConfig",
    "get_config",
    "load_config_file",
]
