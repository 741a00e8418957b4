"""One `cargo 3ds` run: format -> cargo invocation -> stream -> post-build dispatch."""

from __future__ import annotations

import logging

from cargo3ds_tooling.build.invocation import make_cargo_command
from cargo3ds_tooling.build.stream import run_cargo, select_stream_mode
from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import CargoCmd, take_message_format
from cargo3ds_tooling.helpers import print_command
from cargo3ds_tooling.package.dispatch import run_callback
from cargo3ds_tooling.toolchain import check_rust_version

log = logging.getLogger(__name__)


def run(cmd: CargoCmd, ctx: BuildContext) -> int:
    """Run the whole pipeline. Returns cargo's exit code on build failure, else 0.

    A dry run echoes the cargo command and hands an empty message list to the
    post-build step.

    Raises Cargo3dsError subclasses for every other failure.
    """
    check_rust_version(ctx)

    requested = take_message_format(cmd)
    mode = select_stream_mode(cmd, requested)
    invocation = make_cargo_command(cmd, ctx, requested or ctx.settings["message_format"])

    if ctx.verbose or ctx.dry_run:
        print_command(invocation.argv, invocation.env)
    if ctx.dry_run:
        run_callback(cmd, ctx, [])
        return 0
    log.debug("Reading cargo output in %s mode", mode.value)

    returncode, messages = run_cargo(invocation, mode, env=dict(ctx.environ), cwd=str(ctx.cwd))
    if returncode != 0:
        return returncode if returncode > 0 else 1

    run_callback(cmd, ctx, messages)
    return 0
