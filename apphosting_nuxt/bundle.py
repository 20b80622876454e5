"""Assembly of the App Hosting output bundle from Nuxt's ``.output`` directory."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List
import os
import posixpath
import shutil

import yaml

from .config_loader import ConfigCache
from .errors import OutputStructureError


OUTPUT_BUNDLE_DIRNAME = ".apphosting"
NUXT_OUTPUT_DIRNAME = ".output"
SPA_FALLBACK_PAGE = "200.html"


@dataclass(frozen=True, slots=True)
class OutputBundleOptions:
    bundle_yaml_path: Path
    output_directory: Path
    client_directory: Path
    server_directory: Path
    wants_backend: bool


def populate_output_bundle_options(project_root: Path, wants_backend: bool) -> OutputBundleOptions:
    """Return the output bundle paths for a project rooted at ``project_root``."""

    output_bundle_dir = Path(project_root) / OUTPUT_BUNDLE_DIRNAME
    return OutputBundleOptions(
        bundle_yaml_path=output_bundle_dir / "bundle.yaml",
        output_directory=output_bundle_dir,
        client_directory=output_bundle_dir / "public",
        server_directory=output_bundle_dir / "server",
        wants_backend=wants_backend,
    )


def _url_join(base_url: str, name: str) -> str:
    joined = posixpath.normpath(posixpath.join(base_url, name))
    # normpath keeps a leading "//"
    if joined.startswith("/"):
        joined = "/" + joined.lstrip("/")
    return joined


def _relative(path: Path, project_root: Path) -> str:
    return os.path.normpath(os.path.relpath(path, project_root))


def build_bundle_manifest(
    options: OutputBundleOptions,
    project_root: Path,
    base_url: str,
) -> Dict[str, Any]:
    """Describe the bundle for the hosting platform.

    ``staticAssets`` and ``serverDirectory`` are filesystem paths relative to
    the project root. Rewrites are URL patterns and always use forward
    slashes.
    """

    rewrites: List[Dict[str, str]] = []
    if not options.wants_backend:
        rewrites.append(
            {
                "source": _url_join(base_url, "**"),
                "destination": _url_join(base_url, SPA_FALLBACK_PAGE),
            }
        )

    return {
        "staticAssets": [_relative(options.client_directory, project_root)],
        "serverDirectory": _relative(options.server_directory, project_root) if options.wants_backend else None,
        "rewrites": rewrites,
    }


def generate_bundle_yaml(options: OutputBundleOptions, project_root: Path, cache: ConfigCache) -> None:
    base_url = cache.load_or_get(project_root).base_url
    manifest = build_bundle_manifest(options, Path(project_root), base_url)
    with options.bundle_yaml_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(manifest, handle, sort_keys=False, default_flow_style=False)


def _clear_symlink_collisions(source: Path, destination: Path) -> None:
    """Remove bundle entries that a symlink in ``source`` is about to replace.

    ``os.symlink`` refuses to overwrite, so links are recreated from scratch.
    """

    for dirpath, dirnames, filenames in os.walk(source):
        current = Path(dirpath)
        for name in [*dirnames, *filenames]:
            link = current / name
            if not link.is_symlink():
                continue
            target = destination / link.relative_to(source)
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)


def generate_output_directory(project_root: Path, options: OutputBundleOptions, cache: ConfigCache) -> None:
    """Copy the server and client code from ``.output`` into the bundle and write ``bundle.yaml``.

    Files already in the bundle are overwritten when the build produced a file
    at the same path and left alone otherwise.
    """

    out_dir = Path(project_root) / NUXT_OUTPUT_DIRNAME
    _clear_symlink_collisions(out_dir, options.output_directory)
    shutil.copytree(out_dir, options.output_directory, symlinks=True, dirs_exist_ok=True)
    generate_bundle_yaml(options, project_root, cache)


def validate_output_directory(options: OutputBundleOptions) -> None:
    if not options.output_directory.exists() or not options.bundle_yaml_path.exists():
        raise OutputStructureError("Output directory is not of expected structure")


__all__ = [
    "NUXT_OUTPUT_DIRNAME",
    "OUTPUT_BUNDLE_DIRNAME",
    "OutputBundleOptions",
    "build_bundle_manifest",
    "generate_bundle_yaml",
    "generate_output_directory",
    "populate_output_bundle_options",
    "validate_output_directory",
]
