from datetime import timedelta

import pytest

from qflag.cmd import Cmd
from qflag.errors import (
    FlagParseError,
    PanicRecoveredError,
    QFlagError,
    SubCommandParseError,
)
from qflag.flags import IntFlag, StringFlag
from qflag.flagset import ErrorHandling
from qflag.help import get_executable_path
from qflag.types import CHINESE_TEMPLATE, ENGLISH_TEMPLATE, ExampleInfo, FlagType

CONT = ErrorHandling.CONTINUE_ON_ERROR
EXIT = ErrorHandling.EXIT_ON_ERROR
PANIC = ErrorHandling.PANIC_ON_ERROR


@pytest.mark.parametrize(
    "name,short,mode", [("test", "t", CONT), ("app", "a", EXIT), ("tool", "tl", PANIC)]
)
def test_new_cmd(name, short, mode):
    cmd = Cmd(name, short, mode)
    assert cmd.long_name == name
    assert cmd.short_name == short


def test_empty_long_name_rejected():
    with pytest.raises(ValueError):
        Cmd("")


def test_flag_binding():
    cmd = Cmd("test", "t")
    s = cmd.add_string("string", "s", "default", "test string flag")
    i = cmd.add_int("int", "i", 123, "test int flag")
    b = cmd.add_bool("bool", "b", False, "test bool flag")
    f = cmd.add_float("float", "f", 3.14, "test float flag")
    cmd.parse(["--string", "value", "--int", "456", "--bool", "--float", "2.718"])
    assert s.get() == "value"
    assert i.get() == 456
    assert b.get() is True
    assert f.get() == 2.718


def test_sub_command():
    parent = Cmd("parent", "p")
    child = Cmd("child", "c")
    parent.add_sub_cmd(child)
    parent.parse(["child", "arg1", "arg2"])
    assert child.args == ["arg1", "arg2"]
    assert child.parent is parent


def test_sub_command_by_short_name():
    parent = Cmd("parent", "p")
    child = Cmd("child", "c")
    verbose = child.add_bool("verbose", "v", False, "")
    parent.add_sub_cmd(child)
    parent.parse(["c", "-v", "x"])
    assert verbose.get() is True
    assert child.args == ["x"]


def test_sub_command_error_is_wrapped():
    parent = Cmd("parent", "p")
    child = Cmd("child", "c")
    parent.add_sub_cmd(child)
    with pytest.raises(SubCommandParseError) as info:
        parent.parse(["child", "--nope"])
    assert "not defined" in str(info.value)


def test_usage_and_description():
    cmd = Cmd("test", "t")
    cmd.usage = "Custom usage message"
    cmd.description = "Test description"
    assert cmd.usage == "Custom usage message"
    assert cmd.description == "Test description"


@pytest.mark.parametrize("name", ["continue", "exit", "panic"])
def test_error_handling_undefined_flag(name):
    cmd = Cmd("test", "t", CONT)
    with pytest.raises(FlagParseError) as info:
        cmd.parse(["--invalid"])
    assert "not defined" in str(info.value)


def test_panic_mode_recovers():
    cmd = Cmd("test", "t", PANIC)
    with pytest.raises(PanicRecoveredError) as info:
        cmd.parse(["--invalid"])
    assert "not defined" in str(info.value)


def test_exit_mode_on_invalid_flag():
    cmd = Cmd("test", "t", EXIT)
    with pytest.raises(SystemExit) as info:
        cmd.parse(["--invalid"])
    assert info.value.code == 2


def test_string_flag():
    cmd = Cmd("test", "t")
    assert cmd.add_string("string", "s", "default", "x").get_default() == "default"

    cmd = Cmd("test", "t")
    flag = cmd.add_string("string", "s", "default", "x")
    cmd.parse(["--string", "value"])
    assert flag.get() == "value"

    cmd = Cmd("test", "t")
    flag = cmd.add_string("string", "s", "default", "x")
    cmd.parse(["-s", "short"])
    assert flag.get() == "short"


def test_int_flag():
    cmd = Cmd("test", "t")
    assert cmd.add_int("int", "i", 123, "x").get() == 123

    cmd = Cmd("test", "t")
    flag = cmd.add_int("int", "i", 123, "x")
    cmd.parse(["--int", "456"])
    assert flag.get() == 456

    cmd = Cmd("test", "t")
    flag = cmd.add_int("int", "i", 123, "x")
    cmd.parse(["-i", "789"])
    assert flag.get() == 789


@pytest.mark.parametrize("text,expected", [("0x10", 16), ("010", 8), ("-5", -5), ("0b11", 3)])
def test_int_flag_bases(text, expected):
    cmd = Cmd("test", "t")
    flag = cmd.add_int("int", "i", 0, "x")
    cmd.parse(["--int", text])
    assert flag.get() == expected


def test_bool_flag():
    cmd = Cmd("test", "t")
    assert cmd.add_bool("bool", "b", False, "x").get() is False

    cmd = Cmd("test", "t")
    flag = cmd.add_bool("bool", "b", False, "x")
    cmd.parse(["--bool"])
    assert flag.get() is True

    cmd = Cmd("test", "t")
    flag = cmd.add_bool("bool", "b", False, "x")
    cmd.parse(["-b"])
    assert flag.get() is True


def test_float_flag():
    cmd = Cmd("test", "t")
    assert cmd.add_float("float", "f", 3.14, "x").get() == 3.14

    cmd = Cmd("test", "t")
    flag = cmd.add_float("float", "f", 3.14, "x")
    cmd.parse(["--float", "2.718"])
    assert flag.get() == 2.718

    cmd = Cmd("test", "t")
    flag = cmd.add_float("float", "f", 3.14, "x")
    cmd.parse(["-f", "1.618"])
    assert flag.get() == 1.618


def test_float_overflow_is_error():
    cmd = Cmd("test", "t")
    cmd.add_float("float", "f", 0.0, "x")
    with pytest.raises(FlagParseError):
        cmd.parse(["--float", "1e400"])


def test_enum_flag():
    options = ["debug", "test", "prod"]
    cmd = Cmd("test", "t")
    assert cmd.add_enum("mode", "m", "test", "test", options).get_default() == "test"

    cmd = Cmd("test", "t")
    flag = cmd.add_enum("mode", "m", "test", "test", options)
    cmd.parse(["--mode", "prod"])
    assert flag.get() == "prod"

    cmd = Cmd("test", "t")
    flag = cmd.add_enum("mode", "m", "test", "test", options)
    cmd.parse(["-m", "debug"])
    assert flag.get() == "debug"

    cmd = Cmd("test", "t")
    flag = cmd.add_enum("mode", "m", "test", "test", options)
    with pytest.raises(QFlagError) as info:
        cmd.parse(["--mode", "invalid"])
    assert "invalid enum value 'invalid'" in str(info.value)
    assert flag.get_default() == "test"


def test_enum_flag_case_insensitive():
    cmd = Cmd("test", "t")
    flag = cmd.add_enum("mode", "m", "test", "", ["Debug", "Prod"])
    cmd.parse(["--mode", "PROD"])
    assert flag.get() == "PROD"
    assert flag.type is FlagType.ENUM


def test_duration_flag():
    cmd = Cmd("test", "t")
    assert cmd.add_duration("duration", "d", timedelta(seconds=5), "x").get() == timedelta(seconds=5)

    cmd = Cmd("test", "t")
    flag = cmd.add_duration("duration", "d", timedelta(seconds=5), "x")
    cmd.parse(["--duration", "1m30s"])
    assert flag.get() == timedelta(seconds=90)

    cmd = Cmd("test", "t")
    flag = cmd.add_duration("duration", "d", timedelta(seconds=5), "x")
    cmd.parse(["-d", "2h"])
    assert flag.get() == timedelta(hours=2)

    cmd = Cmd("test", "t")
    flag = cmd.add_duration("duration", "d", timedelta(seconds=5), "x")
    with pytest.raises(FlagParseError):
        cmd.parse(["--duration", "invalid"])
    assert flag.get_default() == timedelta(seconds=5)


def test_string_flag_without_short():
    cmd = Cmd("test", "t")
    flag = cmd.add_string("string-flag", "", "default", "x")
    cmd.parse(["--string-flag", "test-value"])
    assert flag.get() == "test-value"
    assert flag.short_name == ""


@pytest.mark.parametrize(
    "adder,long_name,short,default,argv,expected",
    [
        ("add_string", "string-flag", "sf", "default", ["--string-flag", "test-value"], "test-value"),
        ("add_string", "sf", "s", "default", ["-s", "test-value"], "test-value"),
        ("add_int", "int-flag", "if", 100, ["--int-flag", "200"], 200),
        ("add_int", "ci", "i", 100, ["-i", "200"], 200),
        ("add_bool", "bool-flag", "bl", False, ["--bool-flag"], True),
        ("add_bool", "ct", "b", False, ["-b"], True),
        ("add_float", "float-flag", "ff", 3.14, ["--float-flag", "6.28"], 6.28),
        ("add_float", "cf", "f", 3.14, ["-f", "6.28"], 6.28),
    ],
)
def test_long_and_short_flags(adder, long_name, short, default, argv, expected):
    cmd = Cmd("test", "t")
    flag = getattr(cmd, adder)(long_name, short, default, "usage")
    cmd.parse(argv)
    assert flag.get() == expected


def test_parse_error_on_bad_int():
    cmd = Cmd("test", "t")
    cmd.add_int("int-flag", "i", 0, "x")
    with pytest.raises(FlagParseError) as info:
        cmd.parse(["--int-flag", "not-a-number"])
    assert "not-a-number" in str(info.value)


def test_help_flag_continue_returns(capsys):
    cmd = Cmd("test", "t")
    cmd.add_string("string-flag", "s", "", "x")
    assert cmd.parse(["--help"]) is None
    assert cmd.args == []
    assert capsys.readouterr().out == ""


def test_help_flag_exit_prints_usage(capsys):
    cmd = Cmd("test", "t", EXIT)
    with pytest.raises(SystemExit) as info:
        cmd.parse(["-h"])
    assert info.value.code == 0
    assert "Name: test(t)" in capsys.readouterr().out


def test_show_install_path_exit(capsys):
    cmd = Cmd("test", "t", EXIT)
    with pytest.raises(SystemExit) as info:
        cmd.parse(["-sip"])
    assert info.value.code == 0
    assert capsys.readouterr().out.strip() == get_executable_path()


def test_cmd_name_and_short():
    assert Cmd("testcmd").long_name == "testcmd"
    assert Cmd("x", "tc").short_name == "tc"


def test_cmd_description_and_usage():
    cmd = Cmd("x")
    cmd.description = "测试描述"
    cmd.usage = "测试用法"
    assert cmd.description == "测试描述"
    assert cmd.usage == "测试用法"


def test_cmd_args_copy():
    cmd = Cmd("x")
    cmd.parse(["arg1", "arg2"])
    result = cmd.args
    assert result == ["arg1", "arg2"]
    result.append("other")
    assert cmd.args == ["arg1", "arg2"]
    assert cmd.narg == 2


@pytest.mark.parametrize("i,want", [(0, "arg0"), (1, "arg1"), (3, ""), (-1, "")])
def test_cmd_arg(i, want):
    cmd = Cmd("x")
    cmd.parse(["arg0", "arg1", "arg2"])
    assert cmd.arg(i) == want


def test_int_flag_methods():
    cmd = Cmd("test", "t")
    flag = cmd.add_int("intflag", "i", 100, "整数标志测试")
    assert flag.long_name == "intflag"
    assert flag.short_name == "i"
    assert flag.usage == "整数标志测试"
    assert flag.get_default() == 100
    assert flag.type is FlagType.INT
    assert flag.cmd is cmd
    for value in (0, -1, 2147483647):
        flag.set(value)
        assert flag.get() == value


def test_string_flag_methods():
    cmd = Cmd("test", "t")
    flag = cmd.add_string("strflag", "s", "default string", "字符串标志测试")
    assert flag.long_name == "strflag"
    assert flag.short_name == "s"
    assert flag.usage == "字符串标志测试"
    assert flag.get_default() == "default string"
    assert flag.type is FlagType.STRING
    for value in ("", "long_string_with_special_chars_!@#$%^&*()"):
        flag.set(value)
        assert flag.get() == value


def test_bool_flag_methods():
    cmd = Cmd("test", "t")
    flag = cmd.add_bool("boolflag", "b", True, "布尔标志测试")
    assert flag.long_name == "boolflag"
    assert flag.get_default() is True
    assert flag.type is FlagType.BOOL
    flag.set(False)
    assert flag.get() is False
    flag.set(True)
    assert flag.get() is True


def test_float_flag_methods():
    cmd = Cmd("test", "t")
    flag = cmd.add_float("floatflag", "f", 3.14, "浮点数标志测试")
    assert flag.long_name == "floatflag"
    assert flag.usage == "浮点数标志测试"
    assert flag.get_default() == 3.14
    assert flag.type is FlagType.FLOAT
    for value in (0.0, -1.5, 1.7976931348623157e308):
        flag.set(value)
        assert flag.get() == value


def test_builtin_help_flags_bound():
    cmd = Cmd("test", "t", EXIT)
    assert not cmd.flag_exists("help")
    cmd.parse([])
    for name in ("help", "h", "show-install-path", "sip"):
        assert cmd.flag_exists(name)
    assert cmd.notes == [ENGLISH_TEMPLATE.default_note]


def test_builtin_note_in_chinese():
    cmd = Cmd("test", "t")
    cmd.use_chinese = True
    cmd.add_note("自定义")
    cmd.parse([])
    assert cmd.notes == ["自定义", CHINESE_TEMPLATE.default_note]


def test_print_usage_custom(capsys):
    cmd = Cmd("test", "t", EXIT)
    cmd.usage = "自定义用法信息"
    cmd.print_usage()
    assert capsys.readouterr().out == "自定义用法信息\n"


def test_print_usage_generated(capsys):
    cmd = Cmd("test2", "t2", EXIT)
    cmd.description = "测试描述"
    cmd.add_bool("verbose", "v", False, "详细输出")
    cmd.add_int("count", "cc", 0, "重复次数")
    cmd.print_usage()
    out = capsys.readouterr().out
    assert "Name: test2(t2)" in out
    assert "Desc: 测试描述" in out
    assert "--verbose, -v" in out
    assert "--count, -cc" in out
    assert "Usage: test2 [options] [arguments]" in out


def test_print_usage_with_sub_cmd(capsys):
    parent = Cmd("parent", "0t", EXIT)
    parent.add_sub_cmd(Cmd("child", "xd", EXIT))
    parent.print_usage()
    out = capsys.readouterr().out
    assert "Usage: parent [subcmd] [options] [arguments]" in out
    assert "child, xd" in out


def test_add_sub_cmd_errors():
    parent = Cmd("parent", "p")
    parent.add_sub_cmd(Cmd("child", "c"))
    with pytest.raises(QFlagError, match="already exists"):
        parent.add_sub_cmd(Cmd("CHILD", "x"))
    with pytest.raises(QFlagError, match="Cyclic reference"):
        parent.add_sub_cmd(parent)
    with pytest.raises(QFlagError, match="cannot be nil"):
        parent.add_sub_cmd(None)
    with pytest.raises(QFlagError, match="cannot be empty"):
        parent.add_sub_cmd()
    assert [c.long_name for c in parent.sub_cmds] == ["child"]


def test_add_sub_cmd_all_or_nothing():
    parent = Cmd("parent", "p")
    with pytest.raises(QFlagError):
        parent.add_sub_cmd(Cmd("a", "a"), None)
    assert parent.sub_cmds == []


def test_add_sub_cmd_reverse_cycle():
    cmd1, cmd2, cmd3 = Cmd("cmd1", "c1"), Cmd("cmd2", "c2"), Cmd("cmd3", "c3")
    cmd1.add_sub_cmd(cmd2)
    cmd2.add_sub_cmd(cmd3)
    with pytest.raises(QFlagError, match="Cyclic reference"):
        cmd3.add_sub_cmd(cmd1)


def test_nested_cmd_help(capsys):
    cmd1 = Cmd("cmd1", "c1", EXIT)
    cmd1.description = "一级命令描述"
    cmd1.add_string("config", "c", "config.json", "配置文件路径")
    cmd2 = Cmd("cmd2", "c2", EXIT)
    cmd2.add_int("port", "p", 8080, "服务端口号")
    cmd3 = Cmd("cmd3", "", EXIT)
    cmd3.description = "三级命令描述"
    cmd3.add_bool("verbose", "", False, "详细输出模式")
    cmd3.use_chinese = True
    cmd2.use_chinese = True
    cmd3.add_example(ExampleInfo("示例1", "echo 111"))
    cmd3.add_example(ExampleInfo("示例2", "echo 222"))
    cmd1.add_sub_cmd(cmd2)
    cmd2.add_sub_cmd(cmd3)
    cmd2.add_sub_cmd(Cmd("ssssssscmd4", "ccccc4"), Cmd("acmd5", "ccccc5"))
    cmd3.add_sub_cmd(Cmd("randomizer", "rz"), Cmd("generator", "gn"), Cmd("processor", "ps"))
    cmd3.add_note("注意事项4")
    cmd1.parse([])

    cmd3.print_usage()
    out = capsys.readouterr().out
    assert "名称: cmd3" in out
    assert "用法: cmd1 cmd2 cmd3 [子命令] [选项] [参数]" in out
    assert "--verbose" in out
    assert "1、示例1" in out
    assert "echo 222" in out
    assert "1、注意事项4" in out
    assert "显示帮助信息" in out


def test_parse_only_once():
    cmd = Cmd("x")
    flag = cmd.add_int("n", "", 0, "")
    cmd.parse(["--n", "1", "a"])
    cmd.parse(["--n", "2", "b"])
    assert flag.get() == 1
    assert cmd.args == ["a"]


def test_nflag_counts_given_names():
    cmd = Cmd("x")
    cmd.add_int("num", "n", 0, "")
    cmd.add_bool("on", "o", False, "")
    cmd.parse(["--num", "3", "-o"])
    assert cmd.nflag == 2


def test_flag_validation_errors():
    cmd = Cmd("x")
    cmd.add_string("dup", "d", "", "")
    with pytest.raises(ValueError, match="already exists"):
        cmd.add_string("dup", "e", "", "")
    with pytest.raises(ValueError, match="already exists"):
        cmd.add_string("other", "d", "", "")
    with pytest.raises(ValueError, match="illegal characters"):
        cmd.add_string("bad name", "b", "", "")
    with pytest.raises(ValueError, match="cannot be empty"):
        cmd.add_string("", "b", "", "")
    with pytest.raises(TypeError):
        cmd.bind_int(None, "n", "", 0, "")
    with pytest.raises(TypeError):
        cmd.bind_int(StringFlag(), "n", "", 0, "")


def test_bind_int_uses_given_object():
    cmd = Cmd("x")
    flag = IntFlag()
    cmd.bind_int(flag, "num", "n", 7, "")
    cmd.parse(["-n", "9"])
    assert flag.get() == 9
    assert flag.get_default() == 7


def test_user_defined_help_conflicts_on_parse():
    cmd = Cmd("x")
    cmd.add_bool("help", "", False, "")
    with pytest.raises(PanicRecoveredError, match="already exists"):
        cmd.parse([])