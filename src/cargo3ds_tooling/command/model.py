"""Command model: the closed set of `cargo 3ds` actions and what each implies.

A command is exactly one of Build, Run, Test, New or Passthrough. Each
non-passthrough variant owns an options bag (the tokens left over after
cargo-3ds flags were parsed). Capability queries are plain functions that
match on the variant.

`run` has two modes. With a runner configured for the target in cargo
config, cargo itself runs the executable (`cargo run`) and cargo-3ds does
nothing afterwards. Without one, cargo cannot execute a 3DS binary, so the
command becomes `cargo build` and the result is packaged and sent to the
device with 3dslink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from cargo3ds_tooling.command.args import SplitMode, extract_message_format, split_args
from cargo3ds_tooling.command.context import BuildContext

log = logging.getLogger(__name__)


@dataclass
class BuildOptions:
    """Options bag: passthrough tokens plus the split policy used on them."""

    passthrough: list[str] = field(default_factory=list)
    split_mode: SplitMode = SplitMode.CARGO

    def cargo_args(self) -> list[str]:
        return split_args(self.passthrough, self.split_mode)[0]

    def exe_args(self) -> list[str]:
        return split_args(self.passthrough, self.split_mode)[1]


@dataclass
class RunOptions:
    """Build options plus the 3dslink settings."""

    build: BuildOptions = field(default_factory=BuildOptions)
    address: str | None = None
    argv0: str | None = None
    server: bool = False
    retries: int | None = None


@dataclass
class Build:
    options: BuildOptions = field(default_factory=BuildOptions)


@dataclass
class Run:
    options: RunOptions = field(default_factory=RunOptions)


@dataclass
class Test:
    options: RunOptions = field(default_factory=RunOptions)
    no_run: bool = False
    doc: bool = False


@dataclass
class New:
    path: str
    options: BuildOptions = field(default_factory=BuildOptions)


@dataclass
class Passthrough:
    """Any other cargo subcommand. tokens[0] is the subcommand; the rest is forwarded as-is."""

    tokens: list[str]

    def __post_init__(self) -> None:
        if not self.tokens:
            msg = "Passthrough command needs at least the subcommand name"
            raise ValueError(msg)


CargoCmd = Union[Build, Run, Test, New, Passthrough]


def _unknown(cmd: object) -> TypeError:
    return TypeError(f"Not a cargo-3ds command: {cmd!r}")


def build_options(cmd: CargoCmd) -> BuildOptions | None:
    """The options bag of a variant (None for Passthrough)."""
    match cmd:
        case Build(options=options) | New(options=options):
            return options
        case Run(options=run) | Test(options=run):
            return run.build
        case Passthrough():
            return None
    raise _unknown(cmd)


def run_options(cmd: CargoCmd) -> RunOptions | None:
    match cmd:
        case Run(options=run) | Test(options=run):
            return run
        case Build() | New() | Passthrough():
            return None
    raise _unknown(cmd)


def should_compile(cmd: CargoCmd) -> bool:
    """Whether the cargo invocation compiles code. Unknown subcommands are assumed to."""
    match cmd:
        case Build() | Run() | Test() | Passthrough():
            return True
        case New():
            return False
    raise _unknown(cmd)


def should_produce_artifact(cmd: CargoCmd) -> bool:
    """Whether a 3dsx should be built from the cargo output."""
    match cmd:
        case Build() | Run():
            return True
        case Test(doc=True):
            log.info("Documentation tests requested, no 3dsx will be built")
            return False
        case Test():
            return True
        case New() | Passthrough():
            return False
    raise _unknown(cmd)


def should_deploy_to_device(cmd: CargoCmd) -> bool:
    """Whether the built 3dsx is sent to the device (before custom-runner handling)."""
    match cmd:
        case Run():
            return True
        case Test(no_run=no_run):
            return not no_run
        case Build() | New() | Passthrough():
            return False
    raise _unknown(cmd)


def subcommand_name(cmd: CargoCmd, ctx: BuildContext) -> str:
    """The cargo subcommand to invoke. `run` falls back to `build` without a custom runner."""
    match cmd:
        case Build():
            return "build"
        case Run():
            return "run" if ctx.custom_runner else "build"
        case Test():
            return "test"
        case New():
            return "new"
        case Passthrough(tokens=tokens):
            return tokens[0]
    raise _unknown(cmd)


def cargo_args(cmd: CargoCmd) -> list[str]:
    """Arguments forwarded to cargo after the subcommand."""
    match cmd:
        case New(path=path, options=options):
            return [path, *options.cargo_args()]
        case Passthrough(tokens=tokens):
            return tokens[1:]
        case Build(options=options):
            return options.cargo_args()
        case Run(options=run) | Test(options=run):
            return run.build.cargo_args()
    raise _unknown(cmd)


def exe_args(cmd: CargoCmd) -> list[str]:
    """Arguments for the produced executable (empty for commands that never run one)."""
    run = run_options(cmd)
    return run.build.exe_args() if run is not None else []


def take_message_format(cmd: CargoCmd) -> str | None:
    """Extract --message-format from the command's tokens (destructive)."""
    match cmd:
        case New():
            return None
        case Passthrough(tokens=tokens):
            rest = tokens[1:]
            fmt = extract_message_format(rest)
            tokens[1:] = rest
            return fmt
        case Build(options=options):
            return extract_message_format(options.passthrough)
        case Run(options=run) | Test(options=run):
            return extract_message_format(run.build.passthrough)
    raise _unknown(cmd)
