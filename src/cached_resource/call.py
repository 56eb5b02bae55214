"""Structured view of one finder call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

RELOAD_OPTION = "reload"


@dataclass(frozen=True)
class CallArguments:
    positional: Tuple[Any, ...]
    reload: bool = False

    @classmethod
    def parse(cls, arguments: Sequence[Any]) -> "CallArguments":
        """
        Split ``reload`` out of a trailing options mapping.

        The mapping is copied, never mutated. If nothing is left in it after
        ``reload`` is removed, it is dropped, so downstream arguments match
        what an uncached caller would have sent.
        """
        positional = list(arguments)
        if not positional or not isinstance(positional[-1], Mapping):
            return cls(positional=tuple(positional))

        options = dict(positional.pop())
        reload = bool(options.pop(RELOAD_OPTION, False))
        if options:
            positional.append(options)
        return cls(positional=tuple(positional), reload=reload)
