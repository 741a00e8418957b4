"""Command model, argument splitting and the per-invocation context."""

from .args import SEPARATOR, SplitMode, extract_message_format, split_args
from .context import BuildContext
from .model import (
    Build,
    BuildOptions,
    CargoCmd,
    New,
    Passthrough,
    Run,
    RunOptions,
    Test,
    build_options,
    cargo_args,
    exe_args,
    run_options,
    should_compile,
    should_deploy_to_device,
    should_produce_artifact,
    subcommand_name,
    take_message_format,
)

__all__ = [
    "SEPARATOR",
    "Build",
    "BuildContext",
    "BuildOptions",
    "CargoCmd",
    "New",
    "Passthrough",
    "Run",
    "RunOptions",
    "SplitMode",
    "Test",
    "build_options",
    "cargo_args",
    "exe_args",
    "extract_message_format",
    "run_options",
    "should_compile",
    "should_deploy_to_device",
    "should_produce_artifact",
    "split_args",
    "subcommand_name",
    "take_message_format",
]
