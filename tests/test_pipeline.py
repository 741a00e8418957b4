"""Tests for cargo3ds_tooling.pipeline (end-to-end run with cargo mocked)."""

from unittest.mock import patch

import pytest

from cargo3ds_tooling.build.messages import BuildFinished
from cargo3ds_tooling.command.context import BuildContext
from cargo3ds_tooling.command.model import Build, BuildOptions, New, Run, RunOptions, Test
from cargo3ds_tooling.errors import ValidationError

PIPELINE = "cargo3ds_tooling.pipeline"


class TestRun:
    def test_success_runs_callback(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.build.stream import StreamMode
        from cargo3ds_tooling.pipeline import run

        messages = [BuildFinished(True)]
        with (
            patch(f"{PIPELINE}.check_rust_version") as m_check,
            patch(f"{PIPELINE}.run_cargo", return_value=(0, messages)) as m_cargo,
            patch(f"{PIPELINE}.run_callback") as m_callback,
        ):
            cmd = Build()
            assert run(cmd, ctx) == 0
        m_check.assert_called_once_with(ctx)
        invocation, mode = m_cargo.call_args[0]
        assert mode is StreamMode.SILENT
        assert "json-render-diagnostics" in invocation.argv
        m_callback.assert_called_once_with(cmd, ctx, messages)

    def test_requested_format_is_used_and_teed(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.build.stream import StreamMode
        from cargo3ds_tooling.pipeline import run

        cmd = Build(BuildOptions(["--message-format=json", "--release"]))
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo", return_value=(0, [])) as m_cargo,
            patch(f"{PIPELINE}.run_callback"),
        ):
            run(cmd, ctx)
        invocation, mode = m_cargo.call_args[0]
        assert mode is StreamMode.TEE
        fmt = invocation.argv.index("--message-format")
        assert invocation.argv[fmt + 1] == "json"
        assert invocation.argv.count("--message-format") == 1
        assert invocation.argv[-1] == "--release"

    def test_settings_format_is_default(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.pipeline import run

        ctx.settings["message_format"] = "json-diagnostic-short"
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo", return_value=(0, [])) as m_cargo,
            patch(f"{PIPELINE}.run_callback"),
        ):
            run(Build(), ctx)
        assert "json-diagnostic-short" in m_cargo.call_args[0][0].argv

    def test_build_failure_returns_cargo_code(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.pipeline import run

        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo", return_value=(101, [])),
            patch(f"{PIPELINE}.run_callback") as m_callback,
        ):
            assert run(Test(), ctx) == 101
        m_callback.assert_not_called()

    def test_killed_cargo_returns_one(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.pipeline import run

        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo", return_value=(-9, [])),
            patch(f"{PIPELINE}.run_callback"),
        ):
            assert run(Build(), ctx) == 1

    def test_bad_format_fails_before_cargo(self, ctx: BuildContext) -> None:
        from cargo3ds_tooling.pipeline import run

        cmd = Build(BuildOptions(["--message-format=human"]))
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo") as m_cargo,
        ):
            with pytest.raises(ValidationError):
                run(cmd, ctx)
        m_cargo.assert_not_called()

    def test_verbose_prints_command(
        self, ctx: BuildContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from cargo3ds_tooling.pipeline import run

        ctx.verbose = True
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo", return_value=(0, [])),
            patch(f"{PIPELINE}.run_callback"),
        ):
            run(New("demo"), ctx)
        err = capsys.readouterr().err
        assert "Running command:" in err
        assert "cargo new demo" in err

    def test_dry_run_echoes_without_spawning(
        self, ctx: BuildContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from cargo3ds_tooling.pipeline import run

        ctx.dry_run = True
        cmd = Build(BuildOptions(["--release"]))
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo") as m_cargo,
            patch(f"{PIPELINE}.run_callback") as m_callback,
        ):
            assert run(cmd, ctx) == 0
        m_cargo.assert_not_called()
        m_callback.assert_called_once_with(cmd, ctx, [])
        err = capsys.readouterr().err
        assert "cargo build --target armv6k-nintendo-3ds" in err
        assert "RUSTFLAGS=" in err

    def test_dry_run_run_echoes_every_tool(
        self, ctx: BuildContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from cargo3ds_tooling.pipeline import run

        ctx.dry_run = True
        cmd = Run(RunOptions(build=BuildOptions(["--", "arg"]), address="10.0.0.2"))
        with (
            patch(f"{PIPELINE}.check_rust_version"),
            patch(f"{PIPELINE}.run_cargo") as m_cargo,
            patch("cargo3ds_tooling.package.tools.subprocess.run") as m_tool,
        ):
            assert run(cmd, ctx) == 0
        m_cargo.assert_not_called()
        m_tool.assert_not_called()
        err = capsys.readouterr().err
        assert "cargo build" in err
        assert "smdhtool --create" in err
        assert "3dsxtool" in err
        assert "3dslink" in err
        assert "--address 10.0.0.2 --args -- arg" in err
