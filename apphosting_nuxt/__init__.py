"""Package a Nuxt build as a Firebase App Hosting output bundle."""
from __future__ import annotations

from .build import DEFAULT_COMMAND, build
from .bundle import (
    OutputBundleOptions,
    generate_bundle_yaml,
    generate_output_directory,
    populate_output_bundle_options,
    validate_output_directory,
)
from .config_loader import ConfigCache, ResolvedConfig, get_config
from .errors import AdapterError, BuildError, OutputStructureError

__all__ = [
    "AdapterError",
    "BuildError",
    "ConfigCache",
    "DEFAULT_COMMAND",
    "OutputBundleOptions",
    "OutputStructureError",
    "ResolvedConfig",
    "build",
    "generate_bundle_yaml",
    "generate_output_directory",
    "get_config",
    "populate_output_bundle_options",
    "validate_output_directory",
]
