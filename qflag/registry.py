"""Registry of the flags defined on one command, indexed by long and short name."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from .flags import BaseFlag
from .types import FlagType


@dataclass(frozen=True)
class FlagMeta:
    """Metadata view of one registered flag."""

    flag: BaseFlag[Any]

    @property
    def long_name(self) -> str:
        return self.flag.long_name

    @property
    def short_name(self) -> str:
        return self.flag.short_name

    @property
    def usage(self) -> str:
        return self.flag.usage

    @property
    def flag_type(self) -> Optional[FlagType]:
        return self.flag.type

    @property
    def default(self) -> Any:
        return self.flag.get_default()

    @property
    def value(self) -> Any:
        return self.flag.get()


class FlagRegistry:
    """Keeps every flag of a command, in definition order, with name indexes."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_long: dict[str, FlagMeta] = {}
        self._by_short: dict[str, FlagMeta] = {}
        self._all: list[FlagMeta] = []

    def register_flag(self, meta: FlagMeta) -> None:
        """Add a flag; raise ValueError if its long or short name is taken."""
        with self._lock:
            long_name = meta.long_name
            short_name = meta.short_name
            if long_name in self._by_long:
                raise ValueError(f"flag {long_name} already exists")
            if short_name and short_name in self._by_short:
                raise ValueError(f"short flag {short_name} already exists")
            self._by_long[long_name] = meta
            if short_name:
                self._by_short[short_name] = meta
            self._all.append(meta)

    def get_by_long(self, long_name: str) -> Optional[FlagMeta]:
        """Return the flag with this long name, or None."""
        with self._lock:
            return self._by_long.get(long_name)

    def get_by_short(self, short_name: str) -> Optional[FlagMeta]:
        """Return the flag with this short name, or None."""
        with self._lock:
            return self._by_short.get(short_name)

    def get_by_name(self, name: str) -> Optional[FlagMeta]:
        """Look a flag up by long name first, then by short name."""
        meta = self.get_by_long(name)
        if meta is not None:
            return meta
        return self.get_by_short(name)

    @property
    def all_flags(self) -> list[FlagMeta]:
        """All flags in the order they were registered."""
        with self._lock:
            return list(self._all)

    @property
    def long_flags(self) -> dict[str, FlagMeta]:
        """Mapping of long names to flags."""
        with self._lock:
            return dict(self._by_long)

    @property
    def short_flags(self) -> dict[str, FlagMeta]:
        """Mapping of short names to flags."""
        with self._lock:
            return dict(self._by_short)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get_by_name(name) is not None

    def __iter__(self) -> Iterator[FlagMeta]:
        return iter(self.all_flags)

    def __len__(self) -> int:
        with self._lock:
            return len(self._all)