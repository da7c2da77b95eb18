"""Tests for the CLI output manager.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON and plain rendering of data and tables
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from oauthbridge import output as output_module
from oauthbridge.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("oauthbridge.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("oauthbridge.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_is_plain_on_tty_without_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_is_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDetection:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_color_allowed(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


class TestDataOutput:
    def test_json_response(self, capsys):
        OutputManager(format=OutputFormat.JSON).render({"id": "u1", "n": 2})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"id": "u1", "n": 2}
        assert captured.err == ""

    def test_plain_response_dict(self, capsys):
        OutputManager(format=OutputFormat.PLAIN).render({"id": "u1", "provider": "acme"})
        assert capsys.readouterr().out == "id\tu1\nprovider\tacme\n"

    def test_plain_response_nested_values_are_json(self, capsys):
        OutputManager(format=OutputFormat.PLAIN).render({"token": {"scope": "openid"}})
        assert capsys.readouterr().out == "token\t{\"scope\": \"openid\"}\n"

    def test_plain_response_list(self, capsys):
        OutputManager(format=OutputFormat.PLAIN).render(["a", "b"])
        assert capsys.readouterr().out == "a\nb\n"

    def test_json_table(self, capsys):
        OutputManager(format=OutputFormat.JSON).render_table(
            ["ID", "Name"], [["acme", "Acme ID"], ["gh", "GitHub"]]
        )
        assert json.loads(capsys.readouterr().out) == [
            {"ID": "acme", "Name": "Acme ID"},
            {"ID": "gh", "Name": "GitHub"},
        ]

    def test_plain_table(self, capsys):
        OutputManager(format=OutputFormat.PLAIN).render_table(["ID", "Name"], [["acme", "Acme ID"]])
        assert capsys.readouterr().out == "ID\tName\nacme\tAcme ID\n"


class TestDiagnostics:
    def test_messages_go_to_stderr(self, capsys):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.info("loading")
        mgr.warning("careful")
        mgr.error("broken")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "loading\nWarning: careful\nError: broken\n"

    def test_quiet_suppresses_info_and_success(self, capsys):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("loading")
        mgr.success("done")
        mgr.error("still shown")
        assert capsys.readouterr().err == "Error: still shown\n"

    def test_debug_needs_verbose(self, capsys):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        assert capsys.readouterr().err == ""

        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("shown")
        assert mgr.is_verbose
        assert capsys.readouterr().err == "[debug] shown\n"


class TestGlobalInstance:
    def test_lazy_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_module_helpers_delegate(self, capsys):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.write("hello")
        output_module.warning("hm")
        captured = capsys.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == "Warning: hm\n"
