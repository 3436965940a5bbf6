"""Tests for gplay.output.console module."""

from __future__ import annotations

import pytest

from gplay.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"
        assert str(Style.DEFAULT) == "default"


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("committed")
        console.error("upload failed")
        console.warning("no images")
        console.info("edit open")
        assert console.messages == [
            "OK committed",
            "error: upload failed",
            "warning: no images",
            "info: edit open",
        ]

    def test_debug_always_captured(self) -> None:
        console = MockConsole()
        console.debug("state: idle -> edit_open")
        assert console.outputs[0].style == Style.DEBUG
        assert console.outputs[0].message == "debug: state: idle -> edit_open"

    def test_helpers(self) -> None:
        console = MockConsole()
        console.header("en-US")
        console.newline()
        console.error("x")
        console.success("y")

        assert console.has_error()
        assert console.has_success()
        assert console.count(Style.HEADER) == 1
        assert len(console.find("en-")) == 1
        assert console.text == "en-US\n\nerror: x\nOK y"

        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("ok")


class TestRichConsole:
    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("secret detail")
        assert "secret detail" not in capsys.readouterr().out

        RichConsole(verbose=True).debug("shown detail")
        assert "debug: shown detail" in capsys.readouterr().out

    def test_markup_in_messages_is_escaped(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("bad path [red]x[/red].apk")
        out = capsys.readouterr().out
        assert "error:" in out
        assert "[red]x[/red].apk" in out

    def test_print_plain(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().print("phoneScreenshots: 1.png", Style.DIM)
        assert "phoneScreenshots: 1.png" in capsys.readouterr().out
