"""
Formatters — wrappers around external formatting commands, and the
extension-keyed registry that picks one per saved file.
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

DEFAULT_KEY = "anyext"

# extension -> formatter entry, overridable from the config file
DEFAULT_FORMATTERS: dict[str, dict] = {
    "go": {"kind": "goimports", "command": "goimports"},
    "py": {"command": "yapf"},
    "rs": {"command": "fmtrust"},
    "elm": {"command": "elmfmt"},
    DEFAULT_KEY: {"command": "aeol"},
}


class FormatterError(Exception):
    """Raised when a formatter fails; carries the command's output."""

    def __init__(self, message: str, output: bytes = b"") -> None:
        super().__init__(message)
        self.output = output


class Formatter(ABC):
    """Formats one file and returns the formatted bytes."""

    @abstractmethod
    def format(self, path: str) -> bytes:
        """Return the formatted content of *path*.

        Raises
        ------
        FormatterError
            If the formatter cannot produce usable output.
        """


class CommandFormatter(Formatter):
    """Run ``command *args path`` and take its combined output."""

    def __init__(self, command: str, args: list[str] | tuple[str, ...] = ()) -> None:
        self.command = command
        self.args = list(args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.command!r}, {self.args!r})"

    def build_cmd(self, path: str) -> list[str]:
        return [self.command, *self.args, path]

    def _run(self, path: str, cwd: str | None = None) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                self.build_cmd(path),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise FormatterError(f"{self.command} {path}: {exc}") from exc

    def format(self, path: str) -> bytes:
        proc = self._run(path)
        if proc.returncode != 0:
            logger.error(
                "[Formatter] %s %s: exit status %d\n%s",
                self.command, path, proc.returncode,
                proc.stdout.decode("utf-8", errors="replace"),
            )
            raise FormatterError(
                f"{self.command} {path}: exit status {proc.returncode}",
                output=proc.stdout,
            )
        return proc.stdout


class GoImportsFormatter(CommandFormatter):
    """goimports, run from the file's directory.

    goimports reports syntax errors poorly, so on failure the file is
    compiled with ``go build`` from a neutral directory (keeping paths
    absolute) and the compiler's diagnostics are logged instead.
    """

    build_dir = "/var/run"
    _BUILD_HEADER = b"# command-line-arguments\n"

    def format(self, path: str) -> bytes:
        proc = self._run(path, cwd=os.path.dirname(os.path.abspath(path)))
        if proc.returncode == 0:
            return proc.stdout

        diagnostics = self._build_diagnostics(path)
        if diagnostics.startswith(self._BUILD_HEADER):
            logger.error("[Formatter] %s", diagnostics.decode("utf-8", errors="replace"))
        else:
            logger.error(
                "[Formatter] %s %s: exit status %d\n%s",
                self.command, path, proc.returncode,
                proc.stdout.decode("utf-8", errors="replace"),
            )
        raise FormatterError(
            f"{self.command} {path}: exit status {proc.returncode}",
            output=proc.stdout,
        )

    def _build_diagnostics(self, path: str) -> bytes:
        try:
            proc = subprocess.run(
                ["go", "build", os.path.abspath(path)],
                cwd=self.build_dir if os.path.isdir(self.build_dir) else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            logger.debug("[Formatter] go build unavailable: %s", exc)
            return b""
        return proc.stdout


_KINDS = {
    "command": CommandFormatter,
    "goimports": GoImportsFormatter,
}


def build_formatter(spec: dict) -> Formatter:
    """Build a formatter from a ``{command, args, kind}`` mapping."""
    command = spec.get("command")
    if not command:
        raise ValueError(f"formatter entry without a command: {spec!r}")
    kind = spec.get("kind", "command")
    cls = _KINDS.get(kind)
    if cls is None:
        raise ValueError(f"unknown formatter kind {kind!r}")
    args = spec.get("args") or []
    if isinstance(args, str):
        args = args.split()
    return cls(str(command), [str(a) for a in args])


def file_ext(path: str) -> str:
    """Return the text after the last ``.`` of *path*'s base name, or ``""``."""
    name = os.path.basename(path)
    n = name.rfind(".")
    if n == -1:
        return ""
    return name[n + 1:]


class FormatterRegistry:
    """Formatters keyed by file extension, with an ``anyext`` default.

    Parameters
    ----------
    formatters:
        Mapping of extension (without the dot) to formatter; must contain
        :data:`DEFAULT_KEY`.
    """

    def __init__(self, formatters: dict[str, Formatter]) -> None:
        if DEFAULT_KEY not in formatters:
            raise ValueError(f"formatter registry needs an {DEFAULT_KEY!r} entry")
        self._formatters = dict(formatters)

    def __contains__(self, ext: str) -> bool:
        return ext in self._formatters

    def __getitem__(self, ext: str) -> Formatter:
        return self._formatters[ext]

    def extensions(self) -> list[str]:
        return sorted(self._formatters)

    def lookup(self, path: str) -> tuple[Formatter, bool]:
        """Return ``(formatter, used_default)`` for *path*."""
        ext = file_ext(path)
        if ext and ext != DEFAULT_KEY and ext in self._formatters:
            return self._formatters[ext], False
        return self._formatters[DEFAULT_KEY], True

    @classmethod
    def from_config(cls, specs: dict[str, dict]) -> "FormatterRegistry":
        """Build a registry from ``{ext: {command, args, kind}}``."""
        return cls({ext: build_formatter(spec) for ext, spec in specs.items()})
