"""Error taxonomy for cargo-3ds tooling.

Library code raises these; only the CLI entry point turns them into an
``error: ...`` line on stderr and a process exit code.
"""

from __future__ import annotations

from pathlib import Path


class Cargo3dsError(Exception):
    """Base error. ``exit_code`` is what the process exits with."""

    exit_code = 1


class ConfigurationError(Cargo3dsError):
    """Missing environment variable, missing configured resource, bad settings file."""


class ValidationError(Cargo3dsError):
    """Unsupported message format, bad command line, unroutable command."""


class StreamError(Cargo3dsError):
    """Build tool stdout could not be decoded as a message stream."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw

    def __str__(self) -> str:
        base = super().__str__()
        if self.raw:
            return f"{base}\nraw output: `{self.raw}`"
        return base


class ArtifactError(Cargo3dsError):
    """Zero or several executables where exactly one was expected."""

    def __init__(self, message: str, paths: list[Path] | None = None) -> None:
        super().__init__(message)
        self.paths = list(paths or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.paths:
            return base
        listing = "\n".join(f"  {p}" for p in self.paths)
        return f"{base}\n{listing}"


class ToolFailedError(Cargo3dsError):
    """An external tool exited non-zero; its exit code is propagated."""

    def __init__(self, tool: str, returncode: int | None) -> None:
        code = returncode if returncode is not None and returncode > 0 else 1
        super().__init__(f"`{tool}` failed with exit status {returncode}")
        self.tool = tool
        self.exit_code = code
