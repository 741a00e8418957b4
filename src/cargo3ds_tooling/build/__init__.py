"""Cargo invocation, build message parsing and the stdout stream reader."""

from .invocation import CargoInvocation, link_flags, make_cargo_command
from .messages import (
    BuildFinished,
    BuildMessage,
    CompilerArtifact,
    OtherMessage,
    TextLine,
    parse_message,
)
from .stream import StreamMode, read_messages, run_cargo, select_stream_mode

__all__ = [
    "BuildFinished",
    "BuildMessage",
    "CargoInvocation",
    "CompilerArtifact",
    "OtherMessage",
    "StreamMode",
    "TextLine",
    "link_flags",
    "make_cargo_command",
    "parse_message",
    "read_messages",
    "run_cargo",
    "select_stream_mode",
]
