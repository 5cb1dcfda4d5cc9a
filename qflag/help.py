"""Help text generation and helpers for command trees."""

from __future__ import annotations

import math
import os
import sys
from datetime import timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, Sequence

from .errors import QFlagError
from .flags import format_duration
from .registry import FlagRegistry
from .types import CHINESE_TEMPLATE, ENGLISH_TEMPLATE, ExampleInfo, FlagInfo, HelpTemplate


class _Command(Protocol):
    """What the help generator needs from a command."""

    long_name: str
    short_name: str
    description: str
    use_chinese: bool
    sub_cmds: Sequence["_Command"]
    parent: Optional["_Command"]
    registry: FlagRegistry
    notes: Sequence[str]
    examples: Sequence[ExampleInfo]


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign = "-" if value < 0 else ""
    parts = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parts.digits)
    exp = len(digits) + int(parts.exponent) - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp):02d}"
    if exp >= 0:
        if len(digits) <= exp + 1:
            return sign + digits + "0" * (exp + 1 - len(digits))
        return f"{sign}{digits[:exp + 1]}.{digits[exp + 1:]}"
    return f"{sign}0.{'0' * (-exp - 1)}{digits}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, timedelta):
        return format_duration(value)
    return str(value)


def sort_with_short_name_priority(a_has_short: bool, b_has_short: bool, a_name: str, b_name: str,
                                  a_short: str, b_short: str) -> bool:
    """Return True when a sorts before b: short names first, then long, then short name."""
    if a_has_short != b_has_short:
        return a_has_short
    if a_name != b_name:
        return a_name < b_name
    return a_short < b_short


def sort_key(long_name: str, short_name: str) -> tuple[bool, str, str]:
    """Sort key giving the same order as sort_with_short_name_priority."""
    return (not short_name, long_name, short_name)


def _collect_flags(cmd: _Command) -> list[FlagInfo]:
    return [
        FlagInfo(meta.long_name, meta.short_name, meta.usage, _format_value(meta.default))
        for meta in cmd.registry.all_flags
    ]


def full_command_path(cmd: _Command) -> str:
    """The names from the root command down to ``cmd``, separated by spaces."""
    names = []
    current: Optional[_Command] = cmd
    while current is not None:
        names.append(current.long_name)
        current = current.parent
    return " ".join(reversed(names))


def _header(cmd: _Command, tpl: HelpTemplate) -> str:
    if cmd.short_name:
        text = tpl.cmd_name_with_short % (cmd.long_name, cmd.short_name)
    else:
        text = tpl.cmd_name % cmd.long_name
    if cmd.description:
        text += tpl.cmd_description % cmd.description
    return text


def _usage_line(cmd: _Command, tpl: HelpTemplate, flags: list[FlagInfo]) -> str:
    line = tpl.usage_prefix + full_command_path(cmd)
    if cmd.sub_cmds:
        line += tpl.usage_sub_cmd
    line += tpl.usage_info_with_options if flags else tpl.usage_info_without_options
    return line


def _flag_width(info: FlagInfo) -> int:
    if info.short_flag:
        return _byte_len(info.short_flag) + _byte_len(info.long_flag) + 5
    return _byte_len(info.long_flag) + 2


def _options(tpl: HelpTemplate, flags: list[FlagInfo]) -> str:
    if not flags:
        return ""
    ordered = sorted(flags, key=lambda f: sort_key(f.long_flag, f.short_flag))
    desc_start = max(_flag_width(f) for f in ordered) + 5
    lines = [tpl.options_header]
    for info in ordered:
        if info.short_flag:
            opt_part = tpl.option_with_short % (info.long_flag, info.short_flag)
        else:
            opt_part = tpl.option_long_only % info.long_flag
        padding = max(desc_start - _byte_len(opt_part), 1)
        lines.append(tpl.option_default % (opt_part, padding, "", info.usage, info.def_value))
    return "".join(lines)


def _sub_cmds(cmd: _Command, tpl: HelpTemplate) -> str:
    subs = sorted(cmd.sub_cmds, key=lambda c: sort_key(c.long_name, c.short_name))
    if not subs:
        return ""
    width = max(
        _byte_len(sub.long_name) + (_byte_len(sub.short_name) + 5 if sub.short_name else 0)
        for sub in subs
    )
    lines = [tpl.sub_cmds_header]
    for sub in subs:
        name = f"{sub.long_name}, {sub.short_name}" if sub.short_name else sub.long_name
        lines.append(f"  {name:<{width}}\t{sub.description}\n")
    return "".join(lines)


def _examples(cmd: _Command, tpl: HelpTemplate) -> str:
    examples = list(cmd.examples)
    if not examples:
        return ""
    items = [
        tpl.example_item % (number, example.description, example.usage)
        for number, example in enumerate(examples, start=1)
    ]
    return tpl.examples_header + "\n".join(items)


def _notes(cmd: _Command, tpl: HelpTemplate) -> str:
    notes = list(cmd.notes)
    if not notes:
        return ""
    return tpl.notes_header + "".join(
        tpl.note_item % (number, note) for number, note in enumerate(notes, start=1)
    )


def generate_help_info(cmd: _Command) -> str:
    """Build the full help text of a command."""
    tpl = CHINESE_TEMPLATE if cmd.use_chinese else ENGLISH_TEMPLATE
    flags = _collect_flags(cmd)
    return "".join((
        _header(cmd, tpl),
        _usage_line(cmd, tpl, flags),
        _options(tpl, flags),
        _sub_cmds(cmd, tpl),
        _examples(cmd, tpl),
        _notes(cmd, tpl),
    ))


def has_cycle(parent: Optional[_Command], child: Optional[_Command]) -> bool:
    """True if ``parent`` is reachable from ``child`` through children or parents."""
    if parent is None or child is None:
        return False
    visited: set[int] = set()

    def search(current: _Command) -> bool:
        if id(current) in visited:
            return False
        visited.add(id(current))
        if current is parent:
            return True
        if any(search(sub) for sub in current.sub_cmds):
            return True
        return current.parent is not None and search(current.parent)

    return search(child)


def join_errors(errors: Iterable[BaseException]) -> Optional[BaseException]:
    """Merge errors into one, dropping duplicates by message; None if there are none."""
    errors = list(errors)
    if not errors:
        return None
    if len(errors) == 1:
        return errors[0]
    unique: dict[str, BaseException] = {}
    for error in errors:
        unique.setdefault(str(error), error)
    lines = [f"A total of {len(unique)} unique errors:\n"]
    lines.extend(f"  {number}. {message}\n" for number, message in enumerate(unique, start=1))
    return QFlagError("Merged error message:\n" + "".join(lines))


def get_executable_path() -> str:
    """Absolute path of the running program."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    try:
        return os.path.abspath(program)
    except (OSError, ValueError):
        return program