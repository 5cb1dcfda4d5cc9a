"""Typed flag objects and the duration syntax they accept."""

from __future__ import annotations

import re
import threading
from datetime import timedelta
from decimal import Decimal
from fractions import Fraction
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Generic, Iterable, Optional, TypeVar, Union

from .types import FlagType, Validator

if TYPE_CHECKING:
    from .cmd import Cmd

T = TypeVar("T")

_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NANOS = (1 << 63) - 1
_NUMBER = re.compile(r"\d+\.?\d*|\.\d+")
_UNIT = re.compile(r"[^\d.]+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "1h30m", "1.5s" or "300ms".

    Accepted units are ns, us (or µs), ms, s, m and h; a lone "0" needs none.
    Nanosecond parts are rounded to the nearest microsecond.
    """
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f'invalid duration "{text}"')

    total = 0
    while rest:
        number = _NUMBER.match(rest)
        if number is None:
            raise ValueError(f'invalid duration "{text}"')
        rest = rest[number.end():]
        unit_match = _UNIT.match(rest)
        if unit_match is None:
            raise ValueError(f'missing unit in duration "{text}"')
        unit = unit_match.group()
        rest = rest[unit_match.end():]
        scale = _NANOS_PER_UNIT.get(unit)
        if scale is None:
            raise ValueError(f'unknown unit "{unit}" in duration "{text}"')
        total += int(Fraction(Decimal(number.group())) * scale)
        if total > _MAX_NANOS + 1:
            raise ValueError(f'invalid duration "{text}"')

    if not negative and total > _MAX_NANOS:
        raise ValueError(f'invalid duration "{text}"')
    nanos = -total if negative else total
    return timedelta(microseconds=round(Fraction(nanos, 1000)))


def _to_nanoseconds(value: Union[timedelta, int]) -> int:
    if isinstance(value, timedelta):
        return ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000
    return int(value)


def _fixed(amount: int, scale: int) -> str:
    whole, frac = divmod(amount, scale)
    if not frac:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{str(frac).zfill(digits).rstrip('0')}"


def format_duration(value: Union[timedelta, int]) -> str:
    """Render a timedelta (or integer nanoseconds) as e.g. "1m30s" or "2h0m0s"."""
    nanos = _to_nanoseconds(value)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    amount = abs(nanos)
    if amount < 1_000:
        return f"{sign}{amount}ns"
    if amount < 1_000_000:
        return f"{sign}{_fixed(amount, 1_000)}\u00b5s"
    if amount < 1_000_000_000:
        return f"{sign}{_fixed(amount, 1_000_000)}ms"

    minutes, second_nanos = divmod(amount, 60 * 1_000_000_000)
    text = f"{_fixed(second_nanos, 1_000_000_000)}s"
    if minutes:
        hours, minutes = divmod(minutes, 60)
        text = f"{minutes}m{text}"
        if hours:
            text = f"{hours}h{text}"
    return sign + text


class BaseFlag(Generic[T]):
    """Common state of every flag: names, default, current value, validator."""

    flag_type: ClassVar[Optional[FlagType]] = None
    zero: ClassVar[Any] = None

    def __init__(self, long_name: str = "", short_name: str = "",
                 default: Optional[T] = None, usage: str = "") -> None:
        self._lock = threading.Lock()
        self._cmd: Optional["Cmd"] = None
        self._long_name = long_name
        self._short_name = short_name
        self._usage = usage
        self._default: T = self.zero if default is None else default
        self._value: T = self._default
        self._validator: Optional[Validator] = None

    @property
    def cmd(self) -> Optional["Cmd"]:
        """The command this flag is registered on, if any."""
        return self._cmd

    @property
    def long_name(self) -> str:
        return self._long_name

    @property
    def short_name(self) -> str:
        return self._short_name

    @property
    def usage(self) -> str:
        return self._usage

    @property
    def type(self) -> Optional[FlagType]:
        return self.flag_type

    def get_default(self) -> T:
        """Return the default value."""
        return self._default

    def get(self) -> T:
        """Return the current value."""
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        """Store ``value`` after running the validator, if one is set."""
        with self._lock:
            if self._validator is not None:
                try:
                    self._validator.validate(value)
                except (ValueError, TypeError) as exc:
                    raise ValueError(f"invalid value for {self._long_name}: {exc}") from exc
            self._value = value

    def set_validator(self, validator: Union[Validator, Callable[[Any], object], None]) -> None:
        """Install a validator; a plain callable is wrapped in a Validator."""
        if validator is not None and not hasattr(validator, "validate"):
            validator = Validator(validator)
        self._validator = validator

    def _bind(self, cmd: "Cmd", long_name: str, short_name: str, default: T, usage: str) -> None:
        with self._lock:
            self._cmd = cmd
            self._long_name = long_name
            self._short_name = short_name
            self._default = default
            self._usage = usage
            self._value = default

    def _store(self, value: T) -> None:
        """Store a value taken from the command line, skipping the validator."""
        with self._lock:
            self._value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(long_name={self._long_name!r}, value={self.get()!r})"


class IntFlag(BaseFlag[int]):
    """Flag holding an integer."""

    flag_type = FlagType.INT
    zero = 0


class StringFlag(BaseFlag[str]):
    """Flag holding a string."""

    flag_type = FlagType.STRING
    zero = ""


class BoolFlag(BaseFlag[bool]):
    """Flag holding a boolean."""

    flag_type = FlagType.BOOL
    zero = False


class FloatFlag(BaseFlag[float]):
    """Flag holding a float."""

    flag_type = FlagType.FLOAT
    zero = 0.0


class DurationFlag(BaseFlag[timedelta]):
    """Flag holding a time span."""

    flag_type = FlagType.DURATION
    zero = timedelta(0)

    def set(self, value: Union[str, timedelta]) -> None:
        """Set from a timedelta, or parse a string (units are case-insensitive)."""
        if isinstance(value, timedelta):
            super().set(value)
            return
        if value == "":
            raise ValueError("duration cannot be empty")
        try:
            duration = parse_duration(value.lower())
        except ValueError as exc:
            raise ValueError(
                f"invalid duration format: {exc} (valid units: ns/us/ms/s/m/h)"
            ) from exc
        if duration < timedelta(0):
            raise ValueError("negative duration not allowed")
        super().set(duration)

    def __str__(self) -> str:
        return format_duration(self.get())


def _normalise_options(options: Optional[Iterable[str]]) -> dict[str, None]:
    return dict.fromkeys(option.lower() for option in (options or ()))


class EnumFlag(BaseFlag[str]):
    """String flag restricted to a set of case-insensitive options."""

    flag_type = FlagType.ENUM
    zero = ""

    def __init__(self, long_name: str = "", short_name: str = "", default: Optional[str] = None,
                 usage: str = "", options: Optional[Iterable[str]] = None) -> None:
        super().__init__(long_name, short_name, default, usage)
        self._options = _normalise_options(options)

    @property
    def options(self) -> tuple[str, ...]:
        """The allowed values, lower-cased, in the order given."""
        return tuple(self._options)

    def is_check(self, value: str) -> None:
        """Raise ValueError unless ``value`` is one of the options (any case)."""
        if not self._options:
            return
        lowered = value.lower()
        if lowered not in self._options:
            choices = " ".join(self._options)
            raise ValueError(f"invalid enum value '{lowered}', options are [{choices}]")

    def set(self, value: str) -> None:
        """Check ``value`` against the options, then store it."""
        self.is_check(value)
        super().set(value)

    def _bind(self, cmd: "Cmd", long_name: str, short_name: str, default: str, usage: str,
              options: Optional[Iterable[str]] = None) -> None:
        super()._bind(cmd, long_name, short_name, default, usage)
        self._options = _normalise_options(options)

    def __str__(self) -> str:
        return self.get()