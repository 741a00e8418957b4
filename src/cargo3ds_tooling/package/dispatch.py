"""Post-build dispatch: package and deploy the single built executable.

Outcomes, in order:
- the command would deploy but a custom runner is configured: nothing to do,
  cargo's runner already executed the artifact;
- `new`: scaffold the project;
- no artifact expected: nothing to do;
- exactly one executable: smdhtool + 3dsxtool, then 3dslink if deploying;
- zero or several executables: ArtifactError listing the candidates.

A dry run has no build output, so a placeholder config stands in for the
executable and the tool commands are only echoed.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from cargo3ds_tooling.build.messages import BuildMessage
from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import (
    CargoCmd,
    New,
    Run,
    Test,
    should_deploy_to_device,
    should_produce_artifact,
)
from cargo3ds_tooling.config.metadata import load_cargo_metadata
from cargo3ds_tooling.errors import ArtifactError
from cargo3ds_tooling.package.artifacts import (
    CTRConfig,
    get_artifact_configs,
    placeholder_config,
)
from cargo3ds_tooling.package.scaffold import scaffold_project
from cargo3ds_tooling.package.tools import build_3dsx, build_smdh, link

log = logging.getLogger(__name__)


def select_single_config(configs: list[CTRConfig]) -> CTRConfig:
    """The only config, or ArtifactError naming what was (not) found."""
    if not configs:
        msg = "No executable found from build command output!"
        raise ArtifactError(msg)
    if len(configs) > 1:
        msg = (
            "Multiple executables found from build command output; "
            "select one with --bin, --example, --test or --lib:"
        )
        raise ArtifactError(msg, paths=[c.target_path for c in configs])
    return configs[0]


def package_artifact(config: CTRConfig, ctx: BuildContext) -> None:
    """Build the .smdh and then the .3dsx next to the executable."""
    print(f"Building smdh: {config.path_smdh()}", file=sys.stderr)
    build_smdh(config, ctx)
    print(f"Building 3dsx: {config.path_3dsx()}", file=sys.stderr)
    build_3dsx(config, ctx)


def run_callback(
    cmd: CargoCmd,
    ctx: BuildContext,
    messages: list[BuildMessage],
    load_metadata: Callable[[BuildContext], dict[str, Any]] = load_cargo_metadata,
) -> CTRConfig | None:
    """Run the post-build step for `cmd`. Returns the packaged config, if any."""
    deploy = should_deploy_to_device(cmd)
    if deploy and ctx.custom_runner:
        log.info("Custom runner configured for %s, skipping 3dsx and 3dslink", ctx.target)
        return None

    match cmd:
        case New(path=path):
            if ctx.dry_run:
                print(f"Would set up 3DS project in {ctx.cwd / path}", file=sys.stderr)
            else:
                scaffold_project(ctx.cwd / path)
            return None

    if not should_produce_artifact(cmd):
        return None

    if ctx.dry_run:
        config = placeholder_config(ctx)
    else:
        print("Getting metadata", file=sys.stderr)
        configs = get_artifact_configs(load_metadata(ctx), messages, ctx)
        config = select_single_config(configs)
    package_artifact(config, ctx)

    if deploy:
        match cmd:
            case Run(options=run) | Test(options=run):
                print("Running 3dslink", file=sys.stderr)
                link(config, run, ctx)
    return config
