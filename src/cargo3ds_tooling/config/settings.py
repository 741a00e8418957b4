"""Tool settings: defaults plus optional cargo-3ds.yaml overrides.

cargo-3ds.yaml (all keys optional, working directory):
- target: rust target triple (default armv6k-nintendo-3ds)
- message_format: format used when --message-format is not given (must start with json)
- smdhtool, 3dsxtool, 3dslink: program names or paths
- icon, romfs_dir: conventional per-package paths, relative to the package manifest dir
- default_icon, libctru_dir: paths relative to $DEVKITPRO
- link_libs: space separated libraries linked into every target
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from cargo3ds_tooling.errors import ConfigurationError

log = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "cargo-3ds.yaml"

DEFAULT_MESSAGE_FORMAT = "json-render-diagnostics"

DEFAULT_SETTINGS: dict[str, str] = {
    "target": "armv6k-nintendo-3ds",
    "message_format": DEFAULT_MESSAGE_FORMAT,
    "smdhtool": "smdhtool",
    "3dsxtool": "3dsxtool",
    "3dslink": "3dslink",
    "icon": "icon.png",
    "romfs_dir": "romfs",
    "default_icon": "libctru/default_icon.png",
    "libctru_dir": "libctru/lib",
    "link_libs": "ctru",
}


def resolve_settings(settings: dict[str, Any] | None) -> dict[str, str]:
    """Return settings dict with defaults filled. Unknown keys are dropped."""
    if settings is None:
        return dict(DEFAULT_SETTINGS)
    out = dict(DEFAULT_SETTINGS)
    out.update({k: str(v) for k, v in settings.items() if k in out and v is not None})
    return out


def load_settings(project_root: Path) -> dict[str, str]:
    """Load project_root/cargo-3ds.yaml if present and resolve against defaults."""
    path = project_root / SETTINGS_FILE_NAME
    if not path.is_file():
        return resolve_settings(None)
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Could not read {path}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping of settings"
        raise ConfigurationError(msg)
    for key in data:
        if key not in DEFAULT_SETTINGS:
            log.warning("Ignoring unknown setting %r in %s", key, path)
    settings = resolve_settings(data)
    if not settings["message_format"].startswith("json"):
        msg = f"{path}: message_format must be a JSON format, got {settings['message_format']!r}"
        raise ConfigurationError(msg)
    log.debug("Loaded settings from %s", path)
    return settings
