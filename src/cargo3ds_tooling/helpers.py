"""Shared helpers for cargo3ds_tooling (command echo, env flags).

Used by build, command, config and package modules.
"""

from __future__ import annotations

import shlex
import sys
from collections.abc import Mapping, Sequence
from typing import TextIO

# --- Command echo ---


def format_command(argv: Sequence[str], env: Mapping[str, str] | None = None) -> str:
    """Shell-quoted command line with extra env vars first (e.g. RUSTFLAGS='-L..' cargo build)."""
    parts = [f"{k}={shlex.quote(v)}" for k, v in (env or {}).items()]
    parts.extend(shlex.quote(a) for a in argv)
    return " ".join(parts)


def print_command(
    argv: Sequence[str],
    env: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Echo a command before it runs (verbose mode). Goes to stderr."""
    out = stream if stream is not None else sys.stderr
    print("Running command:", file=out)
    print(f"   {format_command(argv, env)}", file=out)
    print(file=out)


# --- Environment ---


def append_env_flags(environ: Mapping[str, str], name: str, flags: str) -> str:
    """Existing value of env var `name` with `flags` appended (never overwritten)."""
    existing = environ.get(name, "").strip()
    flags = flags.strip()
    if not existing:
        return flags
    if not flags:
        return existing
    return f"{existing} {flags}"

