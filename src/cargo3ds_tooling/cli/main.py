"""Main CLI entry point for cargo-3ds."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from cargo3ds_tooling import __version__, pipeline
from cargo3ds_tooling.cli.parse_common import non_negative_int, parse_flags
from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import (
    Build,
    BuildOptions,
    CargoCmd,
    New,
    Passthrough,
    Run,
    RunOptions,
    Test,
)
from cargo3ds_tooling.config.settings import load_settings
from cargo3ds_tooling.errors import Cargo3dsError, ValidationError

USAGE = """\
Usage: cargo 3ds [-v] [--dry-run] [--config KEY=VALUE] <command> [options] [cargo args] [-- exe args]
Commands:
  build                 - Build a 3dsx (cargo build + smdhtool + 3dsxtool)
  run [-a ADDR] [-0 ARGV0] [-s] [--retries N]
                        - Build a 3dsx and send it to the device with 3dslink
  test [--no-run] [--doc] [run options]
                        - Build the test executable and send it to the device
  new <path>            - cargo new, then set up romfs, ctru-rs and main.rs
  <other>               - Any other cargo subcommand, run for the 3DS target
Global options:
  -v, --verbose         - Print every command before running it
  --dry-run             - Print cargo and devkitPro tool commands instead of running them
  --config KEY=VALUE    - Forwarded to cargo as --config (repeatable)
  -h, --help / -V, --version"""

GLOBAL_FLAGS = (
    ("verbose", ("-v", "--verbose"), False, None),
    ("dry_run", ("--dry-run",), False, None),
    ("config", ("--config",), list, str),
)

RUN_FLAGS = (
    ("address", ("-a", "--address"), None, str),
    ("argv0", ("-0", "--argv0"), None, str),
    ("server", ("-s", "--server"), False, None),
    ("retries", ("--retries",), None, non_negative_int),
)

TEST_FLAGS = (
    ("no_run", ("--no-run",), False, None),
    ("doc", ("--doc",), False, None),
)


def _parse_global(argv: list[str]) -> tuple[dict[str, Any], list[str]]:
    """Flags before the subcommand. Returns (options, argv starting at the subcommand)."""
    opts: dict[str, Any] = {
        "verbose": False,
        "dry_run": False,
        "config": [],
        "help": False,
        "version": False,
    }
    i = 0
    while i < len(argv) and argv[i].startswith("-"):
        arg = argv[i]
        if arg in ("-h", "--help"):
            opts["help"] = True
        elif arg in ("-V", "--version"):
            opts["version"] = True
        elif arg in ("-v", "--verbose"):
            opts["verbose"] = True
        elif arg == "--dry-run":
            opts["dry_run"] = True
        elif arg.startswith("--config="):
            opts["config"].append(arg.split("=", 1)[1])
        elif arg == "--config":
            if i + 1 >= len(argv):
                msg = "`--config` requires a value"
                raise ValidationError(msg)
            i += 1
            opts["config"].append(argv[i])
        else:
            msg = f"unexpected argument `{arg}` before the command"
            raise ValidationError(msg)
        i += 1
    return opts, argv[i:]


def _run_options(flags: dict[str, Any], passthrough: list[str]) -> RunOptions:
    return RunOptions(
        build=BuildOptions(passthrough=passthrough),
        address=flags["address"],
        argv0=flags["argv0"],
        server=flags["server"],
        retries=flags["retries"],
    )


def parse_command_line(argv: list[str]) -> tuple[CargoCmd | None, dict[str, Any]]:
    """Parse `cargo 3ds` arguments (without the leading `3ds`) into a command and global options.

    The command is None when only --help/--version was requested.
    """
    opts, rest = _parse_global(argv)
    if opts["help"] or opts["version"]:
        return None, opts
    if not rest:
        msg = "no command given"
        raise ValidationError(msg)

    sub, args = rest[0], rest[1:]
    cmd: CargoCmd
    if sub == "build":
        flags, passthrough = parse_flags(args, *GLOBAL_FLAGS)
        cmd = Build(BuildOptions(passthrough=passthrough))
    elif sub == "run":
        flags, passthrough = parse_flags(args, *GLOBAL_FLAGS, *RUN_FLAGS)
        cmd = Run(_run_options(flags, passthrough))
    elif sub == "test":
        flags, passthrough = parse_flags(args, *GLOBAL_FLAGS, *RUN_FLAGS, *TEST_FLAGS)
        cmd = Test(
            _run_options(flags, passthrough),
            no_run=flags["no_run"],
            doc=flags["doc"],
        )
    elif sub == "new":
        flags, passthrough = parse_flags(args, *GLOBAL_FLAGS)
        pos = next((i for i, a in enumerate(passthrough) if not a.startswith("-")), None)
        if pos is None:
            msg = "`new` requires a path"
            raise ValidationError(msg)
        path = passthrough.pop(pos)
        cmd = New(path=path, options=BuildOptions(passthrough=passthrough))
    else:
        # Unknown subcommands are forwarded to cargo verbatim.
        return Passthrough([sub, *args]), opts

    opts["verbose"] = opts["verbose"] or flags["verbose"]
    opts["dry_run"] = opts["dry_run"] or flags["dry_run"]
    opts["config"] = [*opts["config"], *flags["config"]]
    return cmd, opts


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]
    # cargo runs `cargo-3ds 3ds <args>` for `cargo 3ds <args>`
    if argv[:1] == ["3ds"]:
        argv = argv[1:]

    try:
        cmd, opts = parse_command_line(argv)
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    if cmd is None:
        if opts["version"]:
            print(f"cargo-3ds {__version__}")
        else:
            print(USAGE)
        sys.exit(0)

    configure_logging(opts["verbose"])
    try:
        ctx = BuildContext(
            settings=load_settings(Path.cwd()),
            config_overrides=opts["config"],
            verbose=opts["verbose"],
            dry_run=opts["dry_run"],
        )
        rc = pipeline.run(cmd, ctx)
    except Cargo3dsError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    sys.exit(rc)


if __name__ == "__main__":
    main()
