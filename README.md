# qflag

A small library for defining command-line flags that come in pairs: a long
name used as `--name` and an optional short name used as `-n` (either form is
accepted with one or two dashes, and a value may follow as `--name=value` or
as the next argument). Each command gets built-in `-h/--help` and
`-sip/--show-install-path` flags, can carry nested subcommands, and produces
its own help text in English or Chinese.

The package has no dependencies outside the standard library.

## Defining a command

```python
from datetime import timedelta

from qflag.cmd import Cmd
from qflag.types import ExampleInfo

cmd = Cmd("app", "a")
cmd.description = "Example application"

config = cmd.add_string("config", "c", "/etc/app.conf", "Configuration file")
port = cmd.add_int("port", "p", 8080, "Port to listen on")
verbose = cmd.add_bool("verbose", "v", False, "Verbose output")
ratio = cmd.add_float("ratio", "r", 0.5, "Sampling ratio")
timeout = cmd.add_duration("timeout", "t", timedelta(seconds=5), "Request timeout")
mode = cmd.add_enum("mode", "m", "test", "Run mode", ["debug", "test", "prod"])

cmd.add_example(ExampleInfo("Start in production", "app --mode prod -p 80"))
cmd.add_note("Values given later on the command line win.")

cmd.parse(["--port", "9000", "-v", "--timeout", "1m30s", "input.txt"])

port.get()       # 9000
verbose.get()    # True
timeout.get()    # timedelta(seconds=90)
cmd.args         # ["input.txt"]
cmd.narg         # 1
cmd.arg(0)       # "input.txt"
cmd.arg(5)       # ""
cmd.nflag        # 3
```

Each `add_*` method creates and returns a flag object; the matching `bind_*`
method (`bind_string`, `bind_int`, `bind_bool`, `bind_float`,
`bind_duration`, `bind_enum`) registers a flag object you created yourself,
such as `StringFlag()` from `qflag.flags`.

A short name may be left empty, in which case only the long form is accepted.
Defining a flag raises `ValueError` when its long name is empty or contains
spaces or punctuation, when its long or short name is already taken, or,
once the built-in flags are in place (after the first `parse` or
`print_usage`), when it uses one of the reserved names `help`, `h`,
`show-install-path` or `sip`.

`Cmd.parse` works once per command; later calls do nothing. Integers accept
`0x`, `0o`, `0b` and leading-zero octal forms; booleans take no separate
argument but accept `--flag=false`. Durations use the `ns`, `us`, `ms`, `s`,
`m` and `h` units (for example `1h30m` or `300ms`) and are stored as
`timedelta`. Enum values are compared case-insensitively; a value outside
the allowed set makes `parse` raise.

## Flag objects

Every flag has `long_name`, `short_name`, `usage`, `type` (a
`qflag.types.FlagType`), `get_default()`, `get()` and `set(value)`.
`DurationFlag.set` also takes a string, with units in any case, and refuses
empty and negative durations; `EnumFlag.set` checks the value against the
options first, and `EnumFlag.is_check(value)` does only the check.

## Validators

Any flag can be given a validator, either a `qflag.types.Validator` subclass
whose `validate(value)` raises `ValueError` for an unacceptable value, or a
plain callable that returns `False` (or raises) to reject a value:

```python
from qflag.types import Validator


class Positive(Validator):
    def validate(self, value):
        if value <= 0:
            raise ValueError("value must be positive")


port.set_validator(Positive())
port.set(-1)   # ValueError: invalid value for port: value must be positive
```

Validators run on `set`; values read from the command line are stored
without them.

## Subcommands

```python
root = Cmd("tool", "t")
build = Cmd("build", "b")
build.description = "Build the project"
release = build.add_bool("release", "r", False, "Optimised build")

root.add_sub_cmd(build)
root.parse(["build", "--release", "src"])

release.get()   # True
build.args      # ["src"]
```

When the first argument left after the flags matches a subcommand's long or
short name, the rest of the arguments are handed to that subcommand.
`add_sub_cmd` accepts several commands at once and adds none of them if any
is `None`, clashes with an existing name (ignoring case), or would create a
cycle in the command tree.

## Help text

`cmd.print_usage()` prints the custom text set on `cmd.usage` if there is
one, and otherwise a generated page listing the command's name, description,
usage line, options with their defaults, subcommands, examples and notes.
Set `cmd.use_chinese = True` before parsing to have it generated in Chinese.
The same text is available as a string from
`qflag.help.generate_help_info(cmd)`.

A `Cmd` is created with `ErrorHandling.CONTINUE_ON_ERROR` by default (from
`qflag.flagset`): then `--help` and `--show-install-path` only set their
flags and `parse` returns. With `EXIT_ON_ERROR` or `PANIC_ON_ERROR`, `--help`
prints the help page and exits, and `--show-install-path` prints the
absolute path of the running program and exits.

## The default command

`qflag.commandline` holds a shared command named after the running program,
created with `EXIT_ON_ERROR`, and module-level functions that act on it
(`add_string`, `add_int`, ..., `bind_*`, `parse`, `add_sub_cmd`, `args`,
`arg`, `narg`, `nflag`, `print_usage`, `flag_exists`, `get_use_chinese`,
`set_use_chinese`, `add_note`, `add_example`, `get_examples`):

```python
from qflag import commandline

name = commandline.add_string("name", "n", "world", "Who to greet")
commandline.parse()
print(f"hello {name.get()}")
```

`commandline.parse()` reads `sys.argv[1:]` unless given a list, and only
parses the first time it is called. Because this command exits on errors,
bad arguments print a message and the help page and end the program with
status 2.

## Errors

Exceptions from `qflag.errors` derive from `QFlagError`:

- `FlagParseError` when a command's own arguments cannot be parsed;
- `SubCommandParseError` when a subcommand fails to parse;
- `PanicRecoveredError` when an unexpected exception occurs during parsing;
- `QFlagError` itself for invalid enum values and rejected `add_sub_cmd` calls;
- `ValidationError`, built with `new_validation_error(message, *args)`, for
  your own validation failures.

Flag definition problems and values rejected by `set` raise `ValueError`.

## Limits

There are no list-valued flags (`FlagType.SLICE` exists but no flag class
uses it), and no groups of mutually exclusive flags.