"""Artifact correlation, devkitPro tool callbacks and post-build dispatch."""

from .artifacts import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    CTRConfig,
    artifact_name,
    get_artifact_configs,
    placeholder_config,
    resolve_icon,
    resolve_romfs,
)
from .dispatch import package_artifact, run_callback, select_single_config
from .scaffold import scaffold_project
from .tools import build_3dsx, build_smdh, link, link_args

__all__ = [
    "DEFAULT_AUTHOR",
    "DEFAULT_DESCRIPTION",
    "CTRConfig",
    "artifact_name",
    "build_3dsx",
    "build_smdh",
    "get_artifact_configs",
    "link",
    "link_args",
    "package_artifact",
    "placeholder_config",
    "resolve_icon",
    "resolve_romfs",
    "run_callback",
    "scaffold_project",
    "select_single_config",
]
