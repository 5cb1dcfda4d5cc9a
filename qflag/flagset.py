"""Low-level parser of single-dash and double-dash flags for one command."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Iterable, Optional, TextIO

from .errors import QFlagError


class ErrorHandling(IntEnum):
    """What a FlagSet does when parsing fails."""

    CONTINUE_ON_ERROR = 0
    EXIT_ON_ERROR = 1
    PANIC_ON_ERROR = 2


class _HelpRequested(QFlagError):
    """-h or -help was given but no such flag is defined."""


@dataclass(frozen=True)
class _Definition:
    name: str
    parse_value: Callable[[Any], None]
    is_bool: bool


_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError("parse error")


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class FlagSet:
    """A named set of flags and the arguments left over after parsing.

    Every flag is known by one name; a flag with a long and a short name is
    defined twice. Both ``-name`` and ``--name`` are accepted, with the value
    either in the same argument after ``=`` or in the next argument. Boolean
    flags take no separate argument and receive a ``bool``; other flags
    receive the raw text.
    """

    def __init__(
        self,
        name: str,
        error_handling: ErrorHandling = ErrorHandling.CONTINUE_ON_ERROR,
        *,
        output: Optional[TextIO] = None,
        usage: Optional[Callable[[], None]] = None,
    ) -> None:
        self._name = name
        self._error_handling = ErrorHandling(error_handling)
        self._output = output
        self.usage = usage
        self._formal: dict[str, _Definition] = {}
        self._actual: set[str] = set()
        self._args: list[str] = []
        self._parsed = False

    @property
    def name(self) -> str:
        """The name of the set, normally the command's name."""
        return self._name

    @property
    def error_handling(self) -> ErrorHandling:
        """How parse failures are handled."""
        return self._error_handling

    @property
    def output(self) -> TextIO:
        """Where error messages and the default usage are written."""
        return self._output if self._output is not None else sys.stderr

    @output.setter
    def output(self, stream: Optional[TextIO]) -> None:
        self._output = stream

    @property
    def parsed(self) -> bool:
        """Whether parse has been called."""
        return self._parsed

    @property
    def args(self) -> list[str]:
        """The arguments that remain after the flags."""
        return list(self._args)

    @property
    def nflag(self) -> int:
        """How many distinct flag names were set on the command line."""
        return len(self._actual)

    def __contains__(self, name: object) -> bool:
        return name in self._formal

    def define(self, name: str, parse_value: Callable[[Any], None], is_bool: bool = False) -> None:
        """Register a flag; ``parse_value`` stores the value or raises ValueError."""
        if name in self._formal:
            prefix = f"{self._name} " if self._name else ""
            raise ValueError(f"{prefix}flag redefined: {name}")
        self._formal[name] = _Definition(name, parse_value, bool(is_bool))

    def parse(self, args: Iterable[str]) -> None:
        """Parse flags from ``args``; what follows them is kept in ``args``."""
        self._parsed = True
        self._args = list(args)
        try:
            while self._parse_one():
                pass
        except QFlagError as exc:
            self._fail(exc)

    def _fail(self, error: QFlagError) -> None:
        is_help = isinstance(error, _HelpRequested)
        if not is_help:
            print(error, file=self.output)
            self._show_usage()
        if self._error_handling is ErrorHandling.CONTINUE_ON_ERROR:
            raise error
        if self._error_handling is ErrorHandling.EXIT_ON_ERROR:
            sys.exit(0 if is_help else 2)
        raise RuntimeError(str(error)) from error

    def _show_usage(self) -> None:
        if self.usage is not None:
            self.usage()
            return
        out = self.output
        print(f"Usage of {self._name}:" if self._name else "Usage:", file=out)
        for flag_name in sorted(self._formal):
            print(f"  -{flag_name}", file=out)

    def _parse_one(self) -> bool:
        if not self._args:
            return False
        arg = self._args[0]
        if len(arg) < 2 or arg[0] != "-":
            return False
        minuses = 1
        if arg[1] == "-":
            minuses = 2
            if len(arg) == 2:
                del self._args[0]
                return False
        body = arg[minuses:]
        if not body or body[0] in "-=":
            raise QFlagError(f"bad flag syntax: {arg}")

        del self._args[0]
        name, sep, value = body.partition("=")
        has_value = bool(sep)

        definition = self._formal.get(name)
        if definition is None:
            if name in ("help", "h"):
                self._show_usage()
                raise _HelpRequested("flag: help requested")
            raise QFlagError(f"flag provided but not defined: -{name}")

        if definition.is_bool:
            text = value if has_value else "true"
            try:
                definition.parse_value(_parse_bool(text))
            except (ValueError, TypeError) as exc:
                raise QFlagError(
                    f"invalid boolean value {_quote(text)} for -{name}: {exc}"
                ) from exc
        else:
            if not has_value:
                if not self._args:
                    raise QFlagError(f"flag needs an argument: -{name}")
                value = self._args.pop(0)
            try:
                definition.parse_value(value)
            except (ValueError, TypeError) as exc:
                raise QFlagError(
                    f"invalid value {_quote(value)} for flag -{name}: {exc}"
                ) from exc

        self._actual.add(name)
        return True