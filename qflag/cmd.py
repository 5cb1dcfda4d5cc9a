"""Commands: flag definitions, subcommands, parsing and help output."""

from __future__ import annotations

import re
import sys
import threading
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, Union

from .errors import FlagParseError, PanicRecoveredError, QFlagError, SubCommandParseError
from .flags import (
    BaseFlag,
    BoolFlag,
    DurationFlag,
    EnumFlag,
    FloatFlag,
    IntFlag,
    StringFlag,
    parse_duration,
)
from .flagset import ErrorHandling, FlagSet
from .help import generate_help_info, get_executable_path, has_cycle, join_errors
from .registry import FlagMeta, FlagRegistry
from .types import (
    CHINESE_TEMPLATE,
    ENGLISH_TEMPLATE,
    HELP_FLAG_NAME,
    HELP_FLAG_SHORT_NAME,
    INVALID_FLAG_CHARS,
    SHOW_INSTALL_PATH_FLAG_NAME,
    SHOW_INSTALL_PATH_FLAG_SHORT_NAME,
    ExampleInfo,
    FlagType,
)

_INT_MIN = -(1 << 63)
_INT_MAX = (1 << 63) - 1
_OCTAL = re.compile(r"0[0-7]+")
_INT_BODY = re.compile(r"[0-9A-Za-z_]+")
_FLOAT_TEXT = re.compile(r"[+-]?[0-9A-Za-z_.]+([eEpP][+-]?[0-9_]+)?")


def _parse_int(text: str) -> int:
    """Parse an integer the way the command line accepts it: 0x, 0o, 0b and leading-0 octal."""
    body = text[1:] if text[:1] in ("+", "-") else text
    if not body or not _INT_BODY.fullmatch(body):
        raise ValueError("parse error")
    prefixed = body[:2].lower() in ("0x", "0o", "0b")
    if "_" in body and not prefixed:
        raise ValueError("parse error")
    try:
        value = int(body, 8) if _OCTAL.fullmatch(body) else int(body, 0)
    except ValueError:
        raise ValueError("parse error") from None
    if text.startswith("-"):
        value = -value
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError("value out of range")
    return value


def _parse_float(text: str) -> float:
    """Parse a float, rejecting whitespace and reporting overflow."""
    if not text or not _FLOAT_TEXT.fullmatch(text) or "_" in text:
        raise ValueError("parse error")
    lowered = text.lower()
    try:
        if "0x" in lowered:
            if "p" not in lowered:
                raise ValueError("parse error")
            value = float.fromhex(text)
        else:
            value = float(text)
    except (ValueError, OverflowError):
        raise ValueError("parse error") from None
    if value in (float("inf"), float("-inf")) and "inf" not in lowered:
        raise ValueError("value out of range")
    return value


def _to_duration(value: Union[timedelta, str]) -> timedelta:
    return value if isinstance(value, timedelta) else parse_duration(value)


class Cmd:
    """A command with typed flags, optional subcommands and generated help."""

    def __init__(
        self,
        long_name: str,
        short_name: str = "",
        error_handling: ErrorHandling = ErrorHandling.CONTINUE_ON_ERROR,
    ) -> None:
        if not long_name:
            raise ValueError("cmd long name cannot be empty")
        self._lock = threading.RLock()
        self._fs = FlagSet(long_name, error_handling, usage=self.print_usage)
        self._registry = FlagRegistry()
        self._long_name = long_name
        self._short_name = short_name
        self._description = ""
        self._usage = ""
        self._use_chinese = False
        self._notes: list[str] = []
        self._examples: list[ExampleInfo] = []
        self._sub_cmds: list[Cmd] = []
        self._parent: Optional[Cmd] = None
        self._args: list[str] = []
        self._help_flag = BoolFlag()
        self._install_path_flag = BoolFlag()
        self._reserved: set[str] = set()
        self._builtins_started = False
        self._parse_started = False

    # --- plain properties -------------------------------------------------

    @property
    def long_name(self) -> str:
        return self._long_name

    @property
    def short_name(self) -> str:
        return self._short_name

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, text: str) -> None:
        with self._lock:
            self._description = text

    @property
    def usage(self) -> str:
        """Custom help text; when empty the help is generated."""
        return self._usage

    @usage.setter
    def usage(self, text: str) -> None:
        with self._lock:
            self._usage = text

    @property
    def use_chinese(self) -> bool:
        with self._lock:
            return self._use_chinese

    @use_chinese.setter
    def use_chinese(self, value: bool) -> None:
        with self._lock:
            self._use_chinese = bool(value)

    @property
    def notes(self) -> list[str]:
        with self._lock:
            return list(self._notes)

    @property
    def examples(self) -> list[ExampleInfo]:
        with self._lock:
            return list(self._examples)

    @property
    def sub_cmds(self) -> list["Cmd"]:
        with self._lock:
            return list(self._sub_cmds)

    @property
    def parent(self) -> Optional["Cmd"]:
        """The command this one was added to, or None for a root command."""
        return self._parent

    @property
    def registry(self) -> FlagRegistry:
        """The flags defined on this command."""
        return self._registry

    @property
    def args(self) -> list[str]:
        """The arguments that were not consumed as flags."""
        return list(self._args)

    def arg(self, i: int) -> str:
        """The i-th non-flag argument, or "" when out of range."""
        return self._args[i] if 0 <= i < len(self._args) else ""

    @property
    def narg(self) -> int:
        return len(self._args)

    @property
    def nflag(self) -> int:
        """How many flag names were given on the command line."""
        return self._fs.nflag

    def flag_exists(self, name: str) -> bool:
        """Whether a flag with this long or short name is defined."""
        return self._registry.get_by_name(name) is not None

    def add_note(self, note: str) -> None:
        with self._lock:
            self._notes.append(note)

    def add_example(self, example: ExampleInfo) -> None:
        with self._lock:
            self._examples.append(example)

    # --- help -------------------------------------------------------------

    def _init_builtin_flags(self) -> None:
        with self._lock:
            if self._builtins_started:
                return
            self._builtins_started = True
            chinese = self._use_chinese
        self.bind_bool(
            self._help_flag, HELP_FLAG_NAME, HELP_FLAG_SHORT_NAME, False,
            "显示帮助信息" if chinese else "Show help information",
        )
        self.bind_bool(
            self._install_path_flag, SHOW_INSTALL_PATH_FLAG_NAME,
            SHOW_INSTALL_PATH_FLAG_SHORT_NAME, False,
            "显示安装路径" if chinese else "Show install path",
        )
        with self._lock:
            self._reserved.update((
                HELP_FLAG_NAME, HELP_FLAG_SHORT_NAME,
                SHOW_INSTALL_PATH_FLAG_NAME, SHOW_INSTALL_PATH_FLAG_SHORT_NAME,
            ))
        self.add_note((CHINESE_TEMPLATE if chinese else ENGLISH_TEMPLATE).default_note)

    def print_usage(self) -> None:
        """Print the custom usage if set, otherwise the generated help."""
        self._init_builtin_flags()
        print(self._usage if self._usage else generate_help_info(self))

    # --- subcommands ------------------------------------------------------

    def add_sub_cmd(self, *args: "Cmd") -> None:
        """Attach subcommands; on any error none of them is added."""
        with self._lock:
            if not args:
                raise QFlagError("subcommand list cannot be empty")
            names: set[str] = set()
            for existing in self._sub_cmds:
                names.add(existing.long_name.lower())
                names.add(existing.short_name.lower())
            errors: list[QFlagError] = []
            accepted: list[Cmd] = []
            for sub in args:
                if sub is None:
                    errors.append(QFlagError("Subcommand cannot be nil"))
                    continue
                if has_cycle(self, sub):
                    errors.append(QFlagError(
                        f"Cyclic reference detected: Command {sub.long_name} "
                        "already exists in the command chain"
                    ))
                    continue
                long_key = sub.long_name.lower()
                if long_key in names:
                    errors.append(QFlagError(f"Subcommand {sub.long_name} already exists"))
                    continue
                names.add(long_key)
                short_key = sub.short_name.lower()
                if short_key in names:
                    errors.append(QFlagError(f"Subcommand {sub.short_name} already exists"))
                    continue
                names.add(short_key)
                accepted.append(sub)
            if errors:
                joined = join_errors(errors)
                raise QFlagError(f"Failed to add subcommands: {joined}") from joined
            for sub in accepted:
                sub._parent = self
                self._sub_cmds.append(sub)

    # --- parsing ----------------------------------------------------------

    def parse(self, args: Iterable[str] = ()) -> None:
        """Parse ``args`` once; later calls do nothing.

        Handles -h/--help and -sip/--show-install-path, dispatches to a
        subcommand named by the first remaining argument, and checks enum
        flags against their options.
        """
        with self._lock:
            if self._parse_started:
                return
            self._parse_started = True
        try:
            self._parse(list(args))
        except QFlagError:
            raise
        except Exception as exc:
            raise PanicRecoveredError(exc) from exc

    def _parse(self, args: list[str]) -> None:
        self._init_builtin_flags()
        try:
            self._fs.parse(args)
        except QFlagError as exc:
            raise FlagParseError(exc) from exc

        exits = self._fs.error_handling is not ErrorHandling.CONTINUE_ON_ERROR
        if self._help_flag.get():
            if exits:
                self.print_usage()
                sys.exit(0)
            return
        if self._install_path_flag.get():
            if exits:
                print(get_executable_path())
                sys.exit(0)
            return

        self._args.extend(self._fs.args)
        if self._args:
            for sub in self.sub_cmds:
                if self._args[0] in (sub.long_name, sub.short_name):
                    try:
                        sub.parse(self._args[1:])
                    except QFlagError as exc:
                        raise SubCommandParseError(exc) from exc
                    return

        failure: Optional[ValueError] = None
        for meta in self._registry.all_flags:
            if meta.flag_type is FlagType.ENUM and isinstance(meta.flag, EnumFlag):
                try:
                    meta.flag.is_check(meta.flag.get())
                except ValueError as exc:
                    failure = exc
        if failure is not None:
            raise QFlagError(str(failure)) from failure

    # --- flag definition --------------------------------------------------

    def _validate_names(self, long_name: str, short_name: str) -> None:
        if any(ch in INVALID_FLAG_CHARS for ch in long_name):
            raise ValueError(f"The flag name '{long_name}' contains illegal characters")
        if not long_name:
            raise ValueError("Flag name cannot be empty")
        if self._registry.get_by_name(long_name) is not None:
            raise ValueError(f"Flag long name {long_name} already exists")
        if self._registry.get_by_name(short_name) is not None:
            raise ValueError(f"Flag short name {short_name} already exists")
        if long_name in self._reserved:
            raise ValueError(f"Flag long name {long_name} is reserved")
        if short_name in self._reserved:
            raise ValueError(f"Flag short name {short_name} is reserved")

    def _register(
        self,
        flag: Optional[BaseFlag[Any]],
        kind: type,
        long_name: str,
        short_name: str,
        default: Any,
        usage: str,
        convert: Callable[[Any], Any],
        *,
        is_bool: bool = False,
        options: Optional[Iterable[str]] = None,
    ) -> None:
        if flag is None:
            raise TypeError(f"{kind.__name__} cannot be None")
        if not isinstance(flag, kind):
            raise TypeError(f"expected {kind.__name__}, got {type(flag).__name__}")
        with self._lock:
            self._validate_names(long_name, short_name)
            if isinstance(flag, EnumFlag):
                flag._bind(self, long_name, short_name, default, usage, list(options or ()))
            else:
                flag._bind(self, long_name, short_name, default, usage)

            def store(raw: Any) -> None:
                flag._store(convert(raw))

            if short_name:
                self._fs.define(short_name, store, is_bool)
            self._fs.define(long_name, store, is_bool)
            self._registry.register_flag(FlagMeta(flag))

    def bind_string(self, flag: StringFlag, long_name: str, short_name: str,
                    default: str, usage: str) -> None:
        """Register ``flag`` as a string flag on this command."""
        self._register(flag, StringFlag, long_name, short_name, str(default), usage, str)

    def bind_int(self, flag: IntFlag, long_name: str, short_name: str,
                 default: int, usage: str) -> None:
        """Register ``flag`` as an integer flag on this command."""
        self._register(flag, IntFlag, long_name, short_name, int(default), usage, _parse_int)

    def bind_bool(self, flag: BoolFlag, long_name: str, short_name: str,
                  default: bool, usage: str) -> None:
        """Register ``flag`` as a boolean flag on this command."""
        self._register(flag, BoolFlag, long_name, short_name, bool(default), usage, bool,
                       is_bool=True)

    def bind_float(self, flag: FloatFlag, long_name: str, short_name: str,
                   default: float, usage: str) -> None:
        """Register ``flag`` as a float flag on this command."""
        self._register(flag, FloatFlag, long_name, short_name, float(default), usage,
                       _parse_float)

    def bind_duration(self, flag: DurationFlag, long_name: str, short_name: str,
                      default: Union[timedelta, str], usage: str) -> None:
        """Register ``flag`` as a duration flag on this command."""
        self._register(flag, DurationFlag, long_name, short_name, _to_duration(default), usage,
                       parse_duration)

    def bind_enum(self, flag: EnumFlag, long_name: str, short_name: str, default: str,
                  usage: str, options: Optional[Iterable[str]]) -> None:
        """Register ``flag`` as an enum flag limited to ``options`` (case-insensitive)."""
        self._register(flag, EnumFlag, long_name, short_name, str(default), usage, str,
                       options=options)

    def add_string(self, long_name: str, short_name: str, default: str, usage: str) -> StringFlag:
        flag = StringFlag()
        self.bind_string(flag, long_name, short_name, default, usage)
        return flag

    def add_int(self, long_name: str, short_name: str, default: int, usage: str) -> IntFlag:
        flag = IntFlag()
        self.bind_int(flag, long_name, short_name, default, usage)
        return flag

    def add_bool(self, long_name: str, short_name: str, default: bool, usage: str) -> BoolFlag:
        flag = BoolFlag()
        self.bind_bool(flag, long_name, short_name, default, usage)
        return flag

    def add_float(self, long_name: str, short_name: str, default: float, usage: str) -> FloatFlag:
        flag = FloatFlag()
        self.bind_float(flag, long_name, short_name, default, usage)
        return flag

    def add_duration(self, long_name: str, short_name: str, default: Union[timedelta, str],
                     usage: str) -> DurationFlag:
        flag = DurationFlag()
        self.bind_duration(flag, long_name, short_name, default, usage)
        return flag

    def add_enum(self, long_name: str, short_name: str, default: str, usage: str,
                 options: Optional[Iterable[str]]) -> EnumFlag:
        flag = EnumFlag()
        self.bind_enum(flag, long_name, short_name, default, usage, options)
        return flag

    def __repr__(self) -> str:
        return f"Cmd(long_name={self._long_name!r}, short_name={self._short_name!r})"