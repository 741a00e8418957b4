"""Shared CLI flag parsing for cargo-3ds's own flags mixed with cargo passthrough args."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cargo3ds_tooling.errors import ValidationError

# (key, flag strings, default, converter). converter None => switch (no value).
FlagSpec = tuple[str, tuple[str, ...], Any, Callable[[str], Any] | None]


def parse_flags(argv: list[str], *specs: FlagSpec) -> tuple[dict[str, Any], list[str]]:
    """Pull recognized flags out of argv in one pass; everything else is kept in order.

    Each spec is (key, flags, default, converter), e.g.
    ("retries", ("--retries",), None, int) or ("server", ("-s", "--server"), False, None).
    A callable default is called (use `list` for repeatable flags; values are appended).
    `--flag value` and `--flag=value` are equivalent. The first bare `--` ends flag
    parsing; it and the tokens after it are kept verbatim.
    Returns (dict of key -> value, remaining argv).
    """
    result: dict[str, Any] = {}
    by_flag: dict[str, FlagSpec] = {}
    for spec in specs:
        key, flags, default, _converter = spec
        result[key] = default() if callable(default) else default
        for flag in flags:
            by_flag[flag] = spec

    rest: list[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            rest.extend(argv[i:])
            break
        name, sep, inline = arg.partition("=") if arg.startswith("--") else (arg, "", "")
        spec = by_flag.get(name)
        if spec is None:
            rest.append(arg)
            i += 1
            continue

        key, _flags, _default, converter = spec
        if converter is None:
            if sep:
                msg = f"`{name}` does not take a value"
                raise ValidationError(msg)
            result[key] = True
            i += 1
            continue

        if sep:
            raw = inline
            i += 1
        elif i + 1 < len(argv):
            raw = argv[i + 1]
            i += 2
        else:
            msg = f"`{name}` requires a value"
            raise ValidationError(msg)
        try:
            value = converter(raw)
        except ValueError as e:
            msg = f"invalid value {raw!r} for `{name}`: {e}"
            raise ValidationError(msg) from e

        if isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = value
    return result, rest


def non_negative_int(s: str) -> int:
    """Converter for counts like --retries."""
    value = int(s)
    if value < 0:
        msg = "must not be negative"
        raise ValueError(msg)
    return value
