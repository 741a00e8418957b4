"""Settings file and cargo-3ds package metadata."""

from .metadata import (
    METADATA_KEY,
    configs_from_metadata,
    load_cargo_metadata,
    merge_package_config,
    metadata_for_target,
    parse_package_config,
)
from .settings import (
    DEFAULT_MESSAGE_FORMAT,
    DEFAULT_SETTINGS,
    SETTINGS_FILE_NAME,
    load_settings,
    resolve_settings,
)

__all__ = [
    "DEFAULT_MESSAGE_FORMAT",
    "DEFAULT_SETTINGS",
    "METADATA_KEY",
    "SETTINGS_FILE_NAME",
    "configs_from_metadata",
    "load_cargo_metadata",
    "load_settings",
    "merge_package_config",
    "metadata_for_target",
    "parse_package_config",
    "resolve_settings",
]
