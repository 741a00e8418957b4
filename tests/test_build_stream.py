"""Tests for cargo3ds_tooling.build.messages and build.stream."""

import io
import json
import sys
from pathlib import Path

import pytest

from cargo3ds_tooling.command.model import Build, Test
from cargo3ds_tooling.errors import ConfigurationError, StreamError


class TestParseMessage:
    def test_compiler_artifact(self, artifact) -> None:
        from cargo3ds_tooling.build.messages import CompilerArtifact, parse_message

        msg = parse_message(json.dumps(artifact()).encode() + b"\n")
        assert isinstance(msg, CompilerArtifact)
        assert msg.target_name == "hello"
        assert msg.target_kinds == ["bin"]
        assert msg.test is False
        assert msg.executable == Path("/ws/target/armv6k-nintendo-3ds/debug/hello.elf")

    def test_library_has_no_executable(self, artifact) -> None:
        from cargo3ds_tooling.build.messages import parse_message

        msg = parse_message(json.dumps(artifact(kind="lib", executable=None)))
        assert msg.executable is None

    def test_build_finished(self) -> None:
        from cargo3ds_tooling.build.messages import BuildFinished, parse_message

        assert parse_message('{"reason":"build-finished","success":true}') == BuildFinished(True)

    def test_other_message(self) -> None:
        from cargo3ds_tooling.build.messages import OtherMessage, parse_message

        msg = parse_message('{"reason":"compiler-message","message":{}}')
        assert isinstance(msg, OtherMessage)
        assert msg.reason == "compiler-message"

    def test_plain_text_line(self) -> None:
        from cargo3ds_tooling.build.messages import TextLine, parse_message

        assert parse_message(b"running 1 test\n") == TextLine("running 1 test")

    def test_malformed_json_keeps_raw_line(self) -> None:
        from cargo3ds_tooling.build.messages import parse_message

        with pytest.raises(StreamError) as exc:
            parse_message(b'{"reason": "compiler-art\n')
        assert exc.value.raw == '{"reason": "compiler-art'
        assert "raw output" in str(exc.value)


class TestSelectStreamMode:
    def test_silent_by_default(self) -> None:
        from cargo3ds_tooling.build.stream import StreamMode, select_stream_mode

        assert select_stream_mode(Build(), None) is StreamMode.SILENT

    def test_tee_when_format_requested(self) -> None:
        from cargo3ds_tooling.build.stream import StreamMode, select_stream_mode

        assert select_stream_mode(Build(), "json") is StreamMode.TEE

    def test_tee_for_doc_tests(self) -> None:
        from cargo3ds_tooling.build.stream import StreamMode, select_stream_mode

        assert select_stream_mode(Test(doc=True), None) is StreamMode.TEE


class TestReadMessages:
    def test_tee_copies_raw_lines(self, artifact) -> None:
        from cargo3ds_tooling.build.messages import BuildFinished, CompilerArtifact
        from cargo3ds_tooling.build.stream import read_messages

        lines = [
            json.dumps(artifact()).encode() + b"\n",
            b'{"reason":"build-finished","success":true}\n',
        ]
        tee = io.BytesIO()
        messages = read_messages(lines, tee)
        assert tee.getvalue() == b"".join(lines)
        assert isinstance(messages[0], CompilerArtifact)
        assert messages[1] == BuildFinished(True)

    def test_silent_writes_nothing(self) -> None:
        from cargo3ds_tooling.build.stream import read_messages

        assert len(read_messages([b"text\n"])) == 1

    def test_line_is_teed_before_parse_error(self) -> None:
        from cargo3ds_tooling.build.stream import read_messages

        tee = io.BytesIO()
        with pytest.raises(StreamError):
            read_messages([b"{broken\n"], tee)
        assert tee.getvalue() == b"{broken\n"


class TestRunCargo:
    def test_reads_child_stdout(self) -> None:
        from cargo3ds_tooling.build.invocation import CargoInvocation
        from cargo3ds_tooling.build.messages import BuildFinished
        from cargo3ds_tooling.build.stream import StreamMode, run_cargo

        script = 'print(\'{"reason":"build-finished","success":false}\'); raise SystemExit(101)'
        inv = CargoInvocation(argv=[sys.executable, "-c", script])
        rc, messages = run_cargo(inv, StreamMode.SILENT)
        assert rc == 101
        assert messages == [BuildFinished(False)]

    def test_extra_env_reaches_child(self) -> None:
        from cargo3ds_tooling.build.invocation import CargoInvocation
        from cargo3ds_tooling.build.messages import TextLine
        from cargo3ds_tooling.build.stream import StreamMode, run_cargo

        script = "import os; print(os.environ['RUSTFLAGS'])"
        inv = CargoInvocation(argv=[sys.executable, "-c", script], env={"RUSTFLAGS": "-lctru"})
        rc, messages = run_cargo(inv, StreamMode.SILENT, env={"PATH": "/usr/bin"})
        assert rc == 0
        assert messages == [TextLine("-lctru")]

    def test_missing_program(self) -> None:
        from cargo3ds_tooling.build.invocation import CargoInvocation
        from cargo3ds_tooling.build.stream import StreamMode, run_cargo

        inv = CargoInvocation(argv=["definitely-not-cargo-3ds-xyz"])
        with pytest.raises(ConfigurationError, match="not found"):
            run_cargo(inv, StreamMode.SILENT)
