"""Spawn cargo and read its stdout as a stream of build messages.

Two modes, chosen before spawning:
- SILENT: messages are parsed, nothing reaches our stdout.
- TEE: every raw line is also written to our stdout as it arrives.

Stdin and stderr are inherited. Stdout is read line by line so the tee is
live and cargo never blocks on a full pipe.
"""

from __future__ import annotations

import enum
import subprocess
import sys
from collections.abc import Iterable
from typing import BinaryIO

from cargo3ds_tooling.build.invocation import CargoInvocation
from cargo3ds_tooling.build.messages import BuildMessage, parse_message
from cargo3ds_tooling.command.model import CargoCmd, Test
from cargo3ds_tooling.errors import ConfigurationError


class StreamMode(enum.Enum):
    SILENT = "silent"
    TEE = "tee"


def select_stream_mode(cmd: CargoCmd, requested_format: str | None) -> StreamMode:
    """TEE when the user asked for a message format, or for doc tests (rustdoc errors go to stdout)."""
    if requested_format is not None:
        return StreamMode.TEE
    match cmd:
        case Test(doc=True):
            return StreamMode.TEE
    return StreamMode.SILENT


def read_messages(stream: Iterable[bytes], tee: BinaryIO | None = None) -> list[BuildMessage]:
    """Parse every line of `stream`, copying raw bytes to `tee` first when given."""
    messages: list[BuildMessage] = []
    for raw in stream:
        if tee is not None:
            tee.write(raw)
            tee.flush()
        messages.append(parse_message(raw))
    return messages


def run_cargo(
    invocation: CargoInvocation,
    mode: StreamMode,
    env: dict[str, str] | None = None,
    cwd: str | None = None,
) -> tuple[int, list[BuildMessage]]:
    """Run the invocation to completion. Returns (returncode, messages)."""
    tee = sys.stdout.buffer if mode is StreamMode.TEE else None
    try:
        proc = subprocess.Popen(
            invocation.argv,
            env=invocation.full_env(env),
            cwd=cwd,
            stdout=subprocess.PIPE,
        )
    except FileNotFoundError as e:
        msg = f"{invocation.argv[0]} not found in PATH"
        raise ConfigurationError(msg) from e

    with proc:
        assert proc.stdout is not None  # For type-checkers.
        messages = read_messages(proc.stdout, tee)
        returncode = proc.wait()
    return returncode, messages
