"""cargo-3ds package metadata from `cargo metadata`.

Each workspace package may carry a [package.metadata.cargo-3ds] table:

    [package.metadata.cargo-3ds]
    romfs_dir = "romfs"          # applies to every target of the package
    icon = "icon.png"
    examples.hello.icon = "hello.png"
    tests.integration.romfs_dir = "test-romfs"
    lib.romfs_dir = "lib-romfs"  # unit test executable

Target tables override the package-wide values. Paths are relative to the
package manifest directory.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import TYPE_CHECKING, Any

from cargo3ds_tooling.errors import ConfigurationError, ToolFailedError
from cargo3ds_tooling.helpers import print_command

if TYPE_CHECKING:
    from cargo3ds_tooling.command.context import BuildContext

log = logging.getLogger(__name__)

METADATA_KEY = "cargo-3ds"
TARGET_KEYS = ("icon", "romfs_dir", "description")
# Accepted spelling -> canonical key.
TARGET_KEY_ALIASES = {"romfs-dir": "romfs_dir"}


def target_metadata(raw: Any) -> dict[str, str]:
    """Normalize one target table: canonical keys, string values, unknown keys dropped."""
    if not isinstance(raw, dict):
        return {}
    out: dict[str, str] = {}
    for key, value in raw.items():
        key = TARGET_KEY_ALIASES.get(key, key)
        if key in TARGET_KEYS and value is not None and not isinstance(value, dict):
            out[key] = str(value)
    return out


def _target_tables(raw: Any) -> dict[str, dict[str, str]]:
    if not isinstance(raw, dict):
        return {}
    return {name: target_metadata(t) for name, t in raw.items()}


def parse_package_config(raw: Any) -> dict[str, Any]:
    """Parse a cargo-3ds table into {"default", "examples", "tests", "lib"}."""
    raw = raw if isinstance(raw, dict) else {}
    lib = raw.get("lib")
    return {
        "default": target_metadata(raw),
        "examples": _target_tables(raw.get("examples")),
        "tests": _target_tables(raw.get("tests")),
        "lib": target_metadata(lib) if isinstance(lib, dict) else None,
    }


def merge_package_config(base: dict[str, Any], other: dict[str, Any]) -> dict[str, Any]:
    """Merge `other` over `base`; keys set in `other` win, per target."""
    out = {
        "default": {**base["default"], **other["default"]},
        "examples": {k: dict(v) for k, v in base["examples"].items()},
        "tests": {k: dict(v) for k, v in base["tests"].items()},
        "lib": dict(base["lib"]) if base["lib"] is not None else None,
    }
    for section in ("examples", "tests"):
        for name, meta in other[section].items():
            out[section][name] = {**out[section].get(name, {}), **meta}
    if other["lib"] is not None:
        out["lib"] = {**(out["lib"] or {}), **other["lib"]}
    return out


def configs_from_metadata(metadata: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Map package id -> merged cargo-3ds config for every package in `cargo metadata` output."""
    result: dict[str, dict[str, Any]] = {}
    for package in metadata.get("packages") or []:
        config = parse_package_config(None)
        if package.get("description"):
            config["default"]["description"] = package["description"]
        raw = (package.get("metadata") or {}).get(METADATA_KEY)
        if raw is not None:
            config = merge_package_config(config, parse_package_config(raw))
        result[package["id"]] = config
    return result


def metadata_for_target(
    config: dict[str, Any], kinds: list[str], name: str, test: bool
) -> dict[str, str]:
    """Package metadata merged with the table for one build target.

    Example targets use examples.<name>, integration tests tests.<name>, and a
    library built in test mode uses lib. Other targets only get package values.
    """
    specific: dict[str, str] = {}
    if "example" in kinds:
        specific = config["examples"].get(name, {})
    elif "test" in kinds:
        specific = config["tests"].get(name, {})
    elif test and config["lib"] is not None and any(k in ("lib", "rlib", "dylib") for k in kinds):
        specific = config["lib"]
    return {**config["default"], **specific}


def load_cargo_metadata(ctx: BuildContext) -> dict[str, Any]:
    """Run `cargo metadata --format-version 1 --no-deps` and return the parsed JSON."""
    cmd = [*ctx.cargo_command(), "metadata", "--format-version", "1", "--no-deps"]
    if ctx.verbose:
        print_command(cmd)
    try:
        r = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(ctx.cwd),
            env=dict(ctx.environ),
        )
    except FileNotFoundError as e:
        msg = f"{cmd[0]} not found in PATH"
        raise ConfigurationError(msg) from e
    if r.returncode != 0:
        if r.stderr:
            log.error("%s", r.stderr.strip())
        raise ToolFailedError("cargo metadata", r.returncode)
    try:
        return json.loads(r.stdout)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse `cargo metadata` output: {e}"
        raise ConfigurationError(msg) from e
