"""Cargo JSON build messages (one per stdout line)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from cargo3ds_tooling.errors import StreamError


@dataclass(frozen=True)
class CompilerArtifact:
    """A `compiler-artifact` message. `executable` is None for libraries and build scripts."""

    package_id: str
    target_name: str
    target_kinds: list[str]
    test: bool
    executable: Path | None = None
    manifest_path: Path | None = None
    filenames: list[Path] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> CompilerArtifact:
        target = data.get("target") or {}
        profile = data.get("profile") or {}
        executable = data.get("executable")
        manifest = data.get("manifest_path")
        return cls(
            package_id=str(data.get("package_id", "")),
            target_name=str(target.get("name", "")),
            target_kinds=[str(k) for k in target.get("kind") or []],
            test=bool(profile.get("test", False)),
            executable=Path(executable) if executable else None,
            manifest_path=Path(manifest) if manifest else None,
            filenames=[Path(f) for f in data.get("filenames") or []],
        )


@dataclass(frozen=True)
class BuildFinished:
    success: bool


@dataclass(frozen=True)
class OtherMessage:
    """Any other JSON message (compiler-message, build-script-executed, ...)."""

    reason: str
    data: dict[str, Any]


@dataclass(frozen=True)
class TextLine:
    """Non-JSON stdout line (rustdoc prints plain text for doctest failures)."""

    text: str


BuildMessage = Union[CompilerArtifact, BuildFinished, OtherMessage, TextLine]


def parse_message(raw: bytes | str) -> BuildMessage:
    """Parse one stdout line. A line that looks like JSON but doesn't decode raises StreamError."""
    line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    line = line.rstrip("\r\n")
    if not line.lstrip().startswith("{"):
        return TextLine(line)
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        msg = f"Malformed build message from cargo: {e}"
        raise StreamError(msg, raw=line) from e
    if not isinstance(data, dict):
        msg = "Build message is not a JSON object"
        raise StreamError(msg, raw=line)

    reason = str(data.get("reason", ""))
    if reason == "compiler-artifact":
        return CompilerArtifact.from_json(data)
    if reason == "build-finished":
        return BuildFinished(success=bool(data.get("success", False)))
    return OtherMessage(reason=reason, data=data)
