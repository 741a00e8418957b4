"""Pytest fixtures for cargo3ds_tooling tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from cargo3ds_tooling.command.context import BuildContext


@pytest.fixture
def devkitpro(tmp_path: Path) -> Path:
    """Fake $DEVKITPRO with libctru/lib and the default icon."""
    root = tmp_path / "devkitpro"
    (root / "libctru" / "lib").mkdir(parents=True)
    (root / "libctru" / "default_icon.png").write_bytes(b"png")
    return root


@pytest.fixture
def sysroot(tmp_path: Path) -> Path:
    """Fake sysroot with a prebuilt std for the 3DS target."""
    root = tmp_path / "sysroot"
    (root / "lib" / "rustlib" / "armv6k-nintendo-3ds").mkdir(parents=True)
    return root


@pytest.fixture
def ctx(tmp_path: Path, devkitpro: Path, sysroot: Path) -> BuildContext:
    """BuildContext with DEVKITPRO/SYSROOT set and no custom runner (runner check pre-answered)."""
    c = BuildContext(
        environ={"DEVKITPRO": str(devkitpro), "SYSROOT": str(sysroot)},
        cwd=tmp_path,
    )
    c.custom_runner = False
    return c


@pytest.fixture
def runner_ctx(ctx: BuildContext) -> BuildContext:
    """Same as ctx, but a target runner is configured in cargo config."""
    ctx.custom_runner = True
    return ctx


def make_artifact(
    name: str = "hello",
    package_id: str = "hello 0.1.0 (path+file:///ws/hello)",
    kind: str = "bin",
    executable: str | None = "/ws/target/armv6k-nintendo-3ds/debug/hello.elf",
    test: bool = False,
) -> dict[str, Any]:
    """A `compiler-artifact` JSON message as cargo prints it."""
    return {
        "reason": "compiler-artifact",
        "package_id": package_id,
        "manifest_path": "/ws/hello/Cargo.toml",
        "target": {"kind": [kind], "crate_types": [kind], "name": name, "test": True},
        "profile": {"opt_level": "0", "test": test},
        "features": [],
        "filenames": [executable] if executable else [],
        "executable": executable,
        "fresh": False,
    }


@pytest.fixture
def workspace(tmp_path: Path) -> dict[str, Any]:
    """`cargo metadata` output for a one-package workspace at tmp_path/hello."""
    pkg_dir = tmp_path / "hello"
    pkg_dir.mkdir()
    (pkg_dir / "Cargo.toml").write_text('[package]\nname = "hello"\n')
    package_id = "hello 0.1.0 (path+file:///ws/hello)"
    return {
        "packages": [
            {
                "id": package_id,
                "name": "hello",
                "authors": ["Ferris <ferris@example.com>", "Second Author"],
                "description": None,
                "manifest_path": str(pkg_dir / "Cargo.toml"),
                "metadata": None,
            }
        ],
        "workspace_members": [package_id],
        "version": 1,
    }


@pytest.fixture
def artifact():
    """Factory for compiler-artifact messages (see make_artifact)."""
    return make_artifact
