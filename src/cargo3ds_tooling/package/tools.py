"""devkitPro native tools: smdhtool, 3dsxtool, 3dslink.

Each tool runs with inherited stdio; a non-zero exit raises ToolFailedError
carrying the tool's exit code. In a dry run the command is only echoed.
"""

from __future__ import annotations

import subprocess
import sys

from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import RunOptions
from cargo3ds_tooling.errors import ConfigurationError, ToolFailedError
from cargo3ds_tooling.helpers import print_command
from cargo3ds_tooling.package.artifacts import CTRConfig


def _run_tool(cmd: list[str], ctx: BuildContext) -> None:
    if ctx.verbose or ctx.dry_run:
        print_command(cmd)
    if ctx.dry_run:
        return
    try:
        r = subprocess.run(cmd, cwd=str(ctx.cwd), env=dict(ctx.environ))
    except FileNotFoundError as e:
        msg = f"{cmd[0]} command failed, most likely due to '{cmd[0]}' not being in $PATH"
        raise ConfigurationError(msg) from e
    if r.returncode != 0:
        raise ToolFailedError(cmd[0], r.returncode)


def build_smdh(config: CTRConfig, ctx: BuildContext) -> None:
    """smdhtool --create <name> <description> <author> <icon> <out.smdh>"""
    _run_tool(
        [
            ctx.settings["smdhtool"],
            "--create",
            config.name,
            config.description,
            config.author,
            str(config.icon_path),
            str(config.path_smdh()),
        ],
        ctx,
    )


def build_3dsx(config: CTRConfig, ctx: BuildContext) -> None:
    """3dsxtool <exe> <out.3dsx> --smdh=<out.smdh> [--romfs=<dir>]"""
    cmd = [
        ctx.settings["3dsxtool"],
        str(config.target_path),
        str(config.path_3dsx()),
        f"--smdh={config.path_smdh()}",
    ]
    if config.romfs_dir is not None:
        print(f"Adding RomFS from {config.romfs_dir}", file=sys.stderr)
        cmd.append(f"--romfs={config.romfs_dir}")
    _run_tool(cmd, ctx)


def link_args(run: RunOptions) -> list[str]:
    """3dslink flags for the run options, including escaped executable args.

    3dslink wants the executable args after `--args --`, and one more `--`
    in front of the first of them that starts with `-`.
    """
    args: list[str] = []
    if run.address is not None:
        args += ["--address", run.address]
    if run.argv0 is not None:
        args += ["--arg0", run.argv0]
    if run.retries is not None:
        args += ["--retries", str(run.retries)]
    if run.server:
        args.append("--server")

    exe = run.build.exe_args()
    if exe:
        args += ["--args", "--"]
        escaped = False
        for arg in exe:
            if arg.startswith("-") and not escaped:
                args += ["--", arg]
                escaped = True
            else:
                args.append(arg)
    return args


def link(config: CTRConfig, run: RunOptions, ctx: BuildContext) -> None:
    """Send the 3dsx to the device: 3dslink <out.3dsx> <flags>"""
    _run_tool([ctx.settings["3dslink"], str(config.path_3dsx()), *link_args(run)], ctx)
