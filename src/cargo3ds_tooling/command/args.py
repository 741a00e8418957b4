"""Argument splitting and --message-format extraction over flat token lists."""

from __future__ import annotations

import enum

from cargo3ds_tooling.errors import ValidationError

SEPARATOR = "--"
MESSAGE_FORMAT_FLAG = "--message-format"


class SplitMode(enum.Enum):
    """Where tool arguments end and executable arguments begin.

    CARGO: at the first bare `--`.
    EXE: at the first bare `--` or the first token not starting with `-`.

    In both modes the `--` separator itself is dropped.
    """

    CARGO = "cargo"
    EXE = "exe"


def split_args(args: list[str], mode: SplitMode = SplitMode.CARGO) -> tuple[list[str], list[str]]:
    """Split `args` into (tool_args, exe_args).

    Only the first separator is significant; later `--` tokens stay in exe_args.
    Without a boundary, everything is a tool argument.
    """
    for i, arg in enumerate(args):
        if arg == SEPARATOR:
            return list(args[:i]), list(args[i + 1 :])
        if mode is SplitMode.EXE and not arg.startswith("-"):
            return list(args[:i]), list(args[i:])
    return list(args), []


def extract_message_format(args: list[str]) -> str | None:
    """Remove the first --message-format flag (and its value) from `args` in place.

    Accepts `--message-format=<fmt>` and `--message-format <fmt>`. Returns the
    format, or None when the flag is absent. Raises ValidationError for a
    missing value or a format that is not JSON.
    """
    pos = next((i for i, a in enumerate(args) if a.startswith(MESSAGE_FORMAT_FLAG)), None)
    if pos is None:
        return None

    flag = args.pop(pos)
    _, sep, value = flag.partition("=")
    if not sep:
        if pos >= len(args):
            msg = f"`{MESSAGE_FORMAT_FLAG}` requires a value"
            raise ValidationError(msg)
        value = args.pop(pos)

    if not value.startswith("json"):
        msg = "non-JSON `message-format` is not supported"
        raise ValidationError(msg)
    return value
