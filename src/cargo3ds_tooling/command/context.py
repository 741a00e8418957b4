"""Per-invocation context: settings, cargo overrides, environment, runner probe.

With `dry_run` set, cargo and the devkitPro tools are echoed instead of
spawned. Read-only probes (rustc, the runner check) still run because the
echoed commands depend on them.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

from cargo3ds_tooling.config.settings import resolve_settings
from cargo3ds_tooling.errors import ConfigurationError
from cargo3ds_tooling.helpers import print_command

log = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """Everything one `cargo 3ds` invocation needs besides the command itself."""

    settings: dict[str, str] = field(default_factory=lambda: resolve_settings(None))
    config_overrides: list[str] = field(default_factory=list)
    verbose: bool = False
    dry_run: bool = False
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    cwd: Path = field(default_factory=Path.cwd)

    @property
    def target(self) -> str:
        return self.settings["target"]

    @property
    def cargo_program(self) -> str:
        return self.environ.get("CARGO") or "cargo"

    def cargo_command(self) -> list[str]:
        """cargo program plus --config overrides; the subcommand goes after this."""
        return [self.cargo_program, *(f"--config={c}" for c in self.config_overrides)]

    def devkitpro(self) -> Path:
        """Toolchain root from $DEVKITPRO. Raises ConfigurationError if unset."""
        value = self.environ.get("DEVKITPRO")
        if not value:
            msg = "DEVKITPRO is not defined as an environment variable"
            raise ConfigurationError(msg)
        return Path(value)

    @cached_property
    def custom_runner(self) -> bool:
        """Whether target.<target>.runner is set in cargo config. Probed once."""
        cmd = [
            *self.cargo_command(),
            "config",
            "-Zunstable-options",
            "get",
            f"target.{self.target}.runner",
        ]
        if self.verbose:
            print_command(cmd)
        try:
            r = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                cwd=str(self.cwd),
                env=dict(self.environ),
            )
            configured = r.returncode == 0
        except OSError as e:
            log.debug("cargo config probe failed: %s", e)
            configured = False
        log.debug("Custom runner is %sconfigured", "" if configured else "not ")
        return configured
