"""Tests for formatters and the extension registry."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from acmefmt.formatters import (
    DEFAULT_FORMATTERS, CommandFormatter, FormatterError, FormatterRegistry,
    GoImportsFormatter, build_formatter, file_ext,
)


def _done(returncode=0, stdout=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


class TestFileExt:
    @pytest.mark.parametrize("path,ext", [
        ("main.go", "go"),
        ("/src/pkg/util.py", "py"),
        ("/src/archive.tar.gz", "gz"),
        ("Makefile", ""),
        ("/src/v1.2/Makefile", ""),
        ("/src/.profile", "profile"),
    ])
    def test_ext(self, path, ext):
        assert file_ext(path) == ext


class TestCommandFormatter:
    @patch("acmefmt.formatters.subprocess.run")
    def test_returns_output(self, mock_run):
        mock_run.return_value = _done(stdout=b"formatted\n")

        out = CommandFormatter("yapf").format("/src/a.py")

        assert out == b"formatted\n"
        assert mock_run.call_args[0][0] == ["yapf", "/src/a.py"]

    @patch("acmefmt.formatters.subprocess.run")
    def test_args_come_before_path(self, mock_run):
        mock_run.return_value = _done(stdout=b"")
        CommandFormatter("rustfmt", ["--emit", "stdout"]).format("x.rs")
        assert mock_run.call_args[0][0] == ["rustfmt", "--emit", "stdout", "x.rs"]

    @patch("acmefmt.formatters.subprocess.run")
    def test_nonzero_exit_raises_with_output(self, mock_run):
        mock_run.return_value = _done(returncode=1, stdout=b"syntax error")

        with pytest.raises(FormatterError) as exc_info:
            CommandFormatter("yapf").format("/src/a.py")
        assert exc_info.value.output == b"syntax error"

    def test_missing_binary_raises(self):
        with pytest.raises(FormatterError):
            CommandFormatter("acmefmt-no-such-formatter").format("/src/a.py")


class TestGoImportsFormatter:
    @patch("acmefmt.formatters.subprocess.run")
    def test_runs_in_file_directory(self, mock_run):
        mock_run.return_value = _done(stdout=b"package main\n")

        out = GoImportsFormatter("goimports").format("/src/cmd/main.go")

        assert out == b"package main\n"
        assert mock_run.call_args.kwargs["cwd"] == "/src/cmd"

    @patch("acmefmt.formatters.subprocess.run")
    def test_failure_runs_go_build_for_diagnostics(self, mock_run):
        mock_run.side_effect = [
            _done(returncode=2, stdout=b"main.go:3:1: expected declaration"),
            _done(returncode=1, stdout=b"# command-line-arguments\n./main.go:3: bad\n"),
        ]

        with pytest.raises(FormatterError):
            GoImportsFormatter("goimports").format("/src/main.go")

        assert mock_run.call_count == 2
        assert mock_run.call_args_list[1][0][0] == ["go", "build", "/src/main.go"]

    @patch("acmefmt.formatters.subprocess.run")
    def test_missing_go_toolchain_still_raises_formatter_error(self, mock_run):
        mock_run.side_effect = [_done(returncode=2), FileNotFoundError("go")]

        with pytest.raises(FormatterError):
            GoImportsFormatter("goimports").format("/src/main.go")


class TestBuildFormatter:
    def test_default_kind(self):
        fmt = build_formatter({"command": "yapf"})
        assert type(fmt) is CommandFormatter
        assert fmt.command == "yapf"

    def test_goimports_kind(self):
        assert isinstance(build_formatter(DEFAULT_FORMATTERS["go"]), GoImportsFormatter)

    def test_string_args_are_split(self):
        fmt = build_formatter({"command": "black", "args": "-q -"})
        assert fmt.args == ["-q", "-"]

    def test_missing_command(self):
        with pytest.raises(ValueError):
            build_formatter({"args": ["-q"]})

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            build_formatter({"command": "x", "kind": "magic"})


class TestFormatterRegistry:
    def test_requires_default(self):
        with pytest.raises(ValueError):
            FormatterRegistry({"go": MagicMock()})

    def test_lookup_by_extension(self):
        go, default = MagicMock(), MagicMock()
        registry = FormatterRegistry({"go": go, "anyext": default})

        assert registry.lookup("/src/main.go") == (go, False)
        assert registry.lookup("/src/README") == (default, True)
        assert registry.lookup("/src/notes.txt") == (default, True)

    def test_anyext_extension_is_not_special_cased(self):
        default = MagicMock()
        registry = FormatterRegistry({"anyext": default})
        assert registry.lookup("/src/weird.anyext") == (default, True)

    def test_from_config_defaults(self):
        registry = FormatterRegistry.from_config(DEFAULT_FORMATTERS)

        assert registry.extensions() == ["anyext", "elm", "go", "py", "rs"]
        assert "go" in registry
        assert registry["py"].command == "yapf"
        assert registry["anyext"].command == "aeol"
