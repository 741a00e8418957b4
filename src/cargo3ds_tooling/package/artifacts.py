"""Correlate built executables with package metadata (CTRConfig per artifact)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cargo3ds_tooling.build.messages import BuildMessage, CompilerArtifact
from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.config.metadata import configs_from_metadata, metadata_for_target
from cargo3ds_tooling.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Unspecified Author"
DEFAULT_DESCRIPTION = "Homebrew Application"


@dataclass(frozen=True)
class CTRConfig:
    """Everything smdhtool/3dsxtool/3dslink need for one executable."""

    name: str
    authors: tuple[str, ...]
    description: str
    icon_path: Path
    target_path: Path
    cargo_manifest_path: Path
    romfs_dir: Path | None = None

    @property
    def author(self) -> str:
        return self.authors[0] if self.authors else DEFAULT_AUTHOR

    @property
    def manifest_dir(self) -> Path:
        return self.cargo_manifest_path.parent

    def path_3dsx(self) -> Path:
        return self.target_path.with_suffix(".3dsx")

    def path_smdh(self) -> Path:
        return self.target_path.with_suffix(".smdh")


def artifact_name(artifact: CompilerArtifact, package_name: str) -> str:
    """Display name: "<name> tests" in test mode, "<name> - <package> example" for examples."""
    kinds = artifact.target_kinds
    if artifact.test and any(k in ("bin", "lib", "rlib", "dylib") for k in kinds):
        return f"{artifact.target_name} tests"
    if "example" in kinds:
        return f"{artifact.target_name} - {package_name} example"
    return artifact.target_name


def resolve_icon(
    configured: str | None, manifest_dir: Path, ctx: BuildContext
) -> Path:
    """Configured icon (must exist) -> <manifest dir>/icon.png -> libctru default icon."""
    if configured:
        icon = manifest_dir / configured
        if not icon.is_file():
            msg = f"Icon at {icon} does not exist"
            raise ConfigurationError(msg)
        return icon
    conventional = manifest_dir / ctx.settings["icon"]
    if conventional.is_file():
        return conventional
    return ctx.devkitpro() / ctx.settings["default_icon"]


def resolve_romfs(configured: str | None, manifest_dir: Path, ctx: BuildContext) -> Path | None:
    """Configured RomFS dir (must exist) -> <manifest dir>/romfs if present -> None."""
    if configured:
        romfs = manifest_dir / configured
        if not romfs.is_dir():
            msg = f"Could not find configured RomFS dir: {romfs}"
            raise ConfigurationError(msg)
        return romfs
    default = manifest_dir / ctx.settings["romfs_dir"]
    return default if default.is_dir() else None


def get_artifact_configs(
    metadata: dict[str, Any],
    messages: list[BuildMessage],
    ctx: BuildContext,
) -> list[CTRConfig]:
    """One CTRConfig per executable artifact of a workspace member, in build order.

    `metadata` is `cargo metadata` JSON output.
    """
    packages = {p["id"]: p for p in metadata.get("packages") or []}
    members = set(metadata.get("workspace_members") or [])
    package_configs = configs_from_metadata(metadata)

    configs: list[CTRConfig] = []
    for message in messages:
        if not isinstance(message, CompilerArtifact) or message.executable is None:
            continue
        package = packages.get(message.package_id)
        if package is None or message.package_id not in members:
            log.debug("Skipping %s: not a workspace member", message.package_id)
            continue

        manifest_path = Path(package["manifest_path"])
        manifest_dir = manifest_path.parent
        merged = metadata_for_target(
            package_configs[message.package_id],
            message.target_kinds,
            message.target_name,
            message.test,
        )
        configs.append(
            CTRConfig(
                name=artifact_name(message, package["name"]),
                authors=tuple(package.get("authors") or ()),
                description=merged.get("description") or DEFAULT_DESCRIPTION,
                icon_path=resolve_icon(merged.get("icon"), manifest_dir, ctx),
                target_path=message.executable,
                cargo_manifest_path=manifest_path,
                romfs_dir=resolve_romfs(merged.get("romfs_dir"), manifest_dir, ctx),
            )
        )
        log.debug("Artifact %s -> %s", message.target_name, message.executable)
    return configs


def placeholder_config(ctx: BuildContext) -> CTRConfig:
    """Stand-in config for dry runs, where there is no build output to correlate.

    Icon and RomFS are resolved for the package in the working directory.
    """
    return CTRConfig(
        name="<name>",
        authors=(),
        description=DEFAULT_DESCRIPTION,
        icon_path=resolve_icon(None, ctx.cwd, ctx),
        target_path=ctx.cwd / "target" / ctx.target / "<executable>.elf",
        cargo_manifest_path=ctx.cwd / "Cargo.toml",
        romfs_dir=resolve_romfs(None, ctx.cwd, ctx),
    )
