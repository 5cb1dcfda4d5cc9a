"""Shared types: flag kinds, help templates, examples and validators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Optional

INVALID_FLAG_CHARS = " !@#$%^&*(){}[]|\\;:'\"<>,.?/"

HELP_FLAG_NAME = "help"
HELP_FLAG_SHORT_NAME = "h"
SHOW_INSTALL_PATH_FLAG_NAME = "show-install-path"
SHOW_INSTALL_PATH_FLAG_SHORT_NAME = "sip"


class FlagType(IntEnum):
    """Kind of value a flag holds."""

    INT = 1
    STRING = 2
    BOOL = 3
    FLOAT = 4
    SLICE = 5
    ENUM = 6
    DURATION = 7


@dataclass(frozen=True)
class FlagInfo:
    """One flag as shown in the help text."""

    long_flag: str
    short_flag: str
    usage: str
    def_value: str


@dataclass(frozen=True)
class ExampleInfo:
    """A usage example shown in the help text."""

    description: str
    usage: str


class Validator:
    """Checks a flag value before it is stored.

    Either subclass it and override ``validate``, or wrap a callable that
    raises ValueError (or returns False) for an unacceptable value.
    """

    _check: Optional[Callable[[Any], object]] = None

    def __init__(self, check: Optional[Callable[[Any], object]] = None) -> None:
        self._check = check

    def validate(self, value: Any) -> None:
        """Raise ValueError when ``value`` is not acceptable."""
        if self._check is not None and self._check(value) is False:
            raise ValueError(f"value {value!r} rejected")


@dataclass(frozen=True)
class HelpTemplate:
    """%-style format strings used to build the help text."""

    cmd_name: str
    cmd_name_with_short: str
    cmd_description: str
    usage_prefix: str
    usage_sub_cmd: str
    usage_info_with_options: str
    usage_info_without_options: str
    options_header: str
    option_with_short: str
    option_long_only: str
    option_default: str
    sub_cmds_header: str
    sub_cmd: str
    sub_cmd_with_short: str
    notes_header: str
    note_item: str
    default_note: str
    examples_header: str
    example_item: str


ENGLISH_TEMPLATE = HelpTemplate(
    cmd_name="Name: %s\n\n",
    cmd_name_with_short="Name: %s(%s)\n\n",
    cmd_description="Desc: %s\n\n",
    usage_prefix="Usage: ",
    usage_sub_cmd=" [subcmd]",
    usage_info_with_options=" [options] [arguments]\n\n",
    usage_info_without_options=" [arguments]\n\n",
    options_header="Options:\n",
    option_with_short="  --%s, -%s",
    option_long_only="  --%s",
    option_default="%s%*s%s (default: %s)\n",
    sub_cmds_header="\nSubCmds:\n",
    sub_cmd="  %s\t%s\n",
    sub_cmd_with_short="  %s, %s\t%s\n",
    notes_header="\nNotes:\n",
    note_item="  %d. %s\n",
    default_note=(
        "In the case where both long options and short options are used at the same time,\n"
        " the option specified last shall take precedence."
    ),
    examples_header="\nExamples:\n",
    example_item="  %d. %s\n    %s\n",
)

CHINESE_TEMPLATE = HelpTemplate(
    cmd_name="名称: %s\n\n",
    cmd_name_with_short="名称: %s(%s)\n\n",
    cmd_description="描述: %s\n\n",
    usage_prefix="用法: ",
    usage_sub_cmd=" [子命令]",
    usage_info_with_options=" [选项] [参数]\n\n",
    usage_info_without_options=" [参数]\n\n",
    options_header="选项:\n",
    option_with_short="  --%s, -%s",
    option_long_only="  --%s",
    option_default="%s%*s%s (默认值: %s)\n",
    sub_cmds_header="\n子命令:\n",
    sub_cmd="  %s\t%s\n",
    sub_cmd_with_short="  %s, %s\t%s\n",
    notes_header="\n注意事项:\n",
    note_item="  %d、%s\n",
    default_note="当长选项和短选项同时使用时，最后指定的选项将优先生效。",
    examples_header="\n示例:\n",
    example_item="  %d、%s\n    %s\n",
)