"""Build the cargo invocation for a command (program, args, extra env).

Nothing is spawned here apart from toolchain probes (sysroot, runner).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import (
    CargoCmd,
    Run,
    Test,
    cargo_args,
    exe_args,
    should_compile,
    subcommand_name,
)
from cargo3ds_tooling.helpers import append_env_flags
from cargo3ds_tooling.toolchain import has_prebuilt_std

DOCTEST_DIR = "target/doctests"


@dataclass
class CargoInvocation:
    """A fully specified cargo command. `env` holds only the variables cargo-3ds sets."""

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)

    def full_env(self, base: dict[str, str] | None = None) -> dict[str, str]:
        return {**(base if base is not None else os.environ), **self.env}


def link_flags(ctx: BuildContext) -> str:
    """-L<libctru dir> -l<lib>... for RUSTFLAGS. Raises ConfigurationError without $DEVKITPRO."""
    lib_dir = ctx.devkitpro() / ctx.settings["libctru_dir"]
    libs = " ".join(f"-l{lib}" for lib in ctx.settings["link_libs"].split())
    return f"-L{lib_dir} {libs}".strip()


def make_cargo_command(cmd: CargoCmd, ctx: BuildContext, message_format: str) -> CargoInvocation:
    """Create the cargo command for `cmd`, but don't execute it.

    Compiling commands get --target, --message-format and the libctru link
    flags; -Zbuild-std is added when the sysroot has no std for the target.
    """
    argv = [*ctx.cargo_command(), subcommand_name(cmd, ctx)]
    env: dict[str, str] = {}

    if should_compile(cmd):
        flags = link_flags(ctx)
        argv += ["--target", ctx.target, "--message-format", message_format]
        if not has_prebuilt_std(ctx):
            print("No pre-build std found, using build-std", file=sys.stderr)
            # test is always built since we can't tell whether the crate uses #![feature(test)]
            argv.append("-Zbuild-std=std,test")
        env["RUSTFLAGS"] = append_env_flags(ctx.environ, "RUSTFLAGS", flags)

    match cmd:
        case Test(doc=True, no_run=no_run):
            argv.append("--doc")
            doc_flags = f"{link_flags(ctx)} -Zunstable-options --persist-doctests {DOCTEST_DIR}"
            # cargo rejects `--doc --no-run`, so rustdoc gets --no-run instead
            if no_run or not ctx.custom_runner:
                doc_flags += " --no-run"
            env["RUSTDOCFLAGS"] = append_env_flags(ctx.environ, "RUSTDOCFLAGS", doc_flags)
        case Test(no_run=no_run):
            if no_run or not ctx.custom_runner:
                argv.append("--no-run")

    argv += cargo_args(cmd)

    match cmd:
        case Run() | Test(no_run=False) if ctx.custom_runner:
            exe = exe_args(cmd)
            if exe:
                argv += ["--", *exe]

    return CargoInvocation(argv=argv, env=env)
