"""Process-wide default command and shortcuts that act on it."""

from __future__ import annotations

import os
import sys
import threading
from datetime import timedelta
from typing import Iterable, Optional, Sequence, Union

from .cmd import Cmd
from .flags import BoolFlag, DurationFlag, EnumFlag, FloatFlag, IntFlag, StringFlag
from .flagset import ErrorHandling
from .types import ExampleInfo

_lock = threading.Lock()
_default: Optional[Cmd] = None


def _program_names() -> tuple[str, str]:
    program = sys.argv[0] if sys.argv else ""
    long_name = os.path.basename(program) if program else ""
    if not long_name:
        return "app", "a"
    return long_name, long_name[0]


def default_command() -> Cmd:
    """The shared command named after the running program; exits on parse errors."""
    global _default
    with _lock:
        if _default is None:
            long_name, short_name = _program_names()
            _default = Cmd(long_name, short_name, ErrorHandling.EXIT_ON_ERROR)
        return _default


def add_string(long_name: str, short_name: str, default: str, usage: str) -> StringFlag:
    """Define a string flag on the default command."""
    return default_command().add_string(long_name, short_name, default, usage)


def add_int(long_name: str, short_name: str, default: int, usage: str) -> IntFlag:
    """Define an integer flag on the default command."""
    return default_command().add_int(long_name, short_name, default, usage)


def add_bool(long_name: str, short_name: str, default: bool, usage: str) -> BoolFlag:
    """Define a boolean flag on the default command."""
    return default_command().add_bool(long_name, short_name, default, usage)


def add_float(long_name: str, short_name: str, default: float, usage: str) -> FloatFlag:
    """Define a float flag on the default command."""
    return default_command().add_float(long_name, short_name, default, usage)


def add_duration(long_name: str, short_name: str, default: Union[timedelta, str],
                 usage: str) -> DurationFlag:
    """Define a duration flag on the default command."""
    return default_command().add_duration(long_name, short_name, default, usage)


def add_enum(long_name: str, short_name: str, default: str, usage: str,
             options: Optional[Iterable[str]]) -> EnumFlag:
    """Define an enum flag on the default command."""
    return default_command().add_enum(long_name, short_name, default, usage, options)


def bind_string(flag: StringFlag, long_name: str, short_name: str, default: str,
                usage: str) -> None:
    """Register an existing string flag on the default command."""
    default_command().bind_string(flag, long_name, short_name, default, usage)


def bind_int(flag: IntFlag, long_name: str, short_name: str, default: int, usage: str) -> None:
    """Register an existing integer flag on the default command."""
    default_command().bind_int(flag, long_name, short_name, default, usage)


def bind_bool(flag: BoolFlag, long_name: str, short_name: str, default: bool,
              usage: str) -> None:
    """Register an existing boolean flag on the default command."""
    default_command().bind_bool(flag, long_name, short_name, default, usage)


def bind_float(flag: FloatFlag, long_name: str, short_name: str, default: float,
               usage: str) -> None:
    """Register an existing float flag on the default command."""
    default_command().bind_float(flag, long_name, short_name, default, usage)


def bind_duration(flag: DurationFlag, long_name: str, short_name: str,
                  default: Union[timedelta, str], usage: str) -> None:
    """Register an existing duration flag on the default command."""
    default_command().bind_duration(flag, long_name, short_name, default, usage)


def bind_enum(flag: EnumFlag, long_name: str, short_name: str, default: str, usage: str,
              options: Optional[Iterable[str]]) -> None:
    """Register an existing enum flag on the default command."""
    default_command().bind_enum(flag, long_name, short_name, default, usage, options)


def parse(argv: Optional[Sequence[str]] = None) -> None:
    """Parse ``argv`` (default: the process arguments) once; later calls do nothing."""
    arguments = sys.argv[1:] if argv is None else list(argv)
    default_command().parse(arguments)


def add_sub_cmd(*args: Cmd) -> None:
    """Attach subcommands to the default command."""
    default_command().add_sub_cmd(*args)


def args() -> list[str]:
    """Non-flag arguments left after parsing."""
    return default_command().args


def arg(i: int) -> str:
    """The i-th non-flag argument, or "" when out of range."""
    return default_command().arg(i)


def narg() -> int:
    """Number of non-flag arguments."""
    return default_command().narg


def nflag() -> int:
    """Number of flag names given on the command line."""
    return default_command().nflag


def print_usage() -> None:
    """Print the help of the default command."""
    default_command().print_usage()


def flag_exists(name: str) -> bool:
    """Whether the default command defines a flag with this long or short name."""
    return default_command().flag_exists(name)


def get_use_chinese() -> bool:
    """Whether help text is in Chinese."""
    return default_command().use_chinese


def set_use_chinese(use_chinese: bool) -> None:
    """Choose Chinese or English help text."""
    default_command().use_chinese = use_chinese


def add_note(note: str) -> None:
    """Add a note to the help text."""
    default_command().add_note(note)


def add_example(example: ExampleInfo) -> None:
    """Add a usage example to the help text."""
    default_command().add_example(example)


def get_examples() -> list[ExampleInfo]:
    """A copy of the examples of the default command."""
    return default_command().examples