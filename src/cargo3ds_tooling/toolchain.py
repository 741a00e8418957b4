"""Rust toolchain probing: sysroot lookup and nightly/version check."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from cargo3ds_tooling.errors import ConfigurationError

if TYPE_CHECKING:
    from cargo3ds_tooling.command.context import BuildContext

MINIMUM_RUSTC_VERSION = (1, 63, 0)
MINIMUM_COMMIT_DATE = "2022-06-15"
NIGHTLY_SUFFIXES = ("-nightly", "-dev")


def _rustc(ctx: BuildContext) -> str:
    return ctx.environ.get("RUSTC") or "rustc"


def _run_rustc(ctx: BuildContext, *args: str) -> str:
    rustc = _rustc(ctx)
    try:
        r = subprocess.run(
            [rustc, *args],
            capture_output=True,
            text=True,
            cwd=str(ctx.cwd),
            env=dict(ctx.environ),
        )
    except FileNotFoundError as e:
        msg = f"{rustc} not found in PATH"
        raise ConfigurationError(msg) from e
    if r.returncode != 0:
        msg = f"Failed to run `{rustc} {' '.join(args)}`: {r.stderr.strip()}"
        raise ConfigurationError(msg)
    return r.stdout


def find_sysroot(ctx: BuildContext) -> Path:
    """Sysroot of the active toolchain: $SYSROOT, else `rustc --print sysroot`."""
    sysroot = ctx.environ.get("SYSROOT") or _run_rustc(ctx, "--print", "sysroot")
    return Path(sysroot.strip())


def has_prebuilt_std(ctx: BuildContext) -> bool:
    """Whether the sysroot ships a std for the target (else -Zbuild-std is needed)."""
    return (find_sysroot(ctx) / "lib" / "rustlib" / ctx.target).exists()


def parse_version_verbose(output: str) -> dict[str, str]:
    """Parse `rustc -vV` key: value lines (release, commit-date, host, ...)."""
    info: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            info[key.strip()] = value.strip()
    return info


def release_version(release: str) -> tuple[int, int, int]:
    """Numeric part of a rustc release: "1.80.0-nightly" -> (1, 80, 0). Raises ValueError."""
    numbers = release.split("-", 1)[0].split(".")
    if len(numbers) != 3:
        msg = f"expected MAJOR.MINOR.PATCH, got {release!r}"
        raise ValueError(msg)
    major, minor, patch = (int(n) for n in numbers)
    return major, minor, patch


def check_rust_version(ctx: BuildContext) -> None:
    """Require a nightly rustc at least MINIMUM_RUSTC_VERSION, built after MINIMUM_COMMIT_DATE."""
    info = parse_version_verbose(_run_rustc(ctx, "-vV"))
    release = info.get("release", "")
    if not release.endswith(NIGHTLY_SUFFIXES):
        msg = (
            "cargo-3ds requires a nightly rustc version.\n"
            "Please run `rustup override set nightly` to use nightly in the current directory."
        )
        raise ConfigurationError(msg)

    try:
        old_version = release_version(release) < MINIMUM_RUSTC_VERSION
    except ValueError as e:
        msg = f"Could not parse rustc release {release!r}"
        raise ConfigurationError(msg) from e
    commit_date = info.get("commit-date", "")
    # "unknown" for locally built toolchains
    old_commit = commit_date[:1].isdigit() and commit_date < MINIMUM_COMMIT_DATE

    if old_version or old_commit:
        msg = (
            f"cargo-3ds requires rustc nightly version >= {MINIMUM_COMMIT_DATE}\n"
            "Please run `rustup update nightly` to upgrade your nightly version"
        )
        raise ConfigurationError(msg)
