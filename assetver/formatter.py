from __future__ import annotations

import string
from dataclasses import dataclass

from .errors import InvalidFormatPattern


DEFAULT_PATTERN = "{path}?{version}"

STYLE_PRINTF = "printf"
STYLE_NAMED = "named"

_NAMED_FIELDS = ("path", "version")


def _named_fields(pattern: str) -> list[tuple[str, str | None, str | None]]:
    try:
        parsed = list(string.Formatter().parse(pattern))
    except ValueError as exc:
        raise InvalidFormatPattern(pattern, str(exc)) from exc
    return [(name, spec, conv) for _, name, spec, conv in parsed if name is not None]


def _printf_slots(pattern: str) -> int:
    slots = 0
    i = 0
    while i < len(pattern):
        if pattern[i] == "%":
            nxt = pattern[i + 1] if i + 1 < len(pattern) else ""
            if nxt == "s":
                slots += 1
            elif nxt != "%":
                raise InvalidFormatPattern(pattern, f"unsupported conversion '%{nxt}'")
            i += 2
            continue
        i += 1
    return slots


@dataclass(frozen=True)
class FormatPattern:
    """A validated two-slot URL template (path first, version second)."""

    text: str
    style: str

    @classmethod
    def parse(cls, text: str) -> "FormatPattern":
        if not isinstance(text, str) or not text:
            raise InvalidFormatPattern(str(text), "pattern is empty")
        if "%s" not in text:
            fields = _named_fields(text)
        else:
            fields = []
        if fields:
            names = [name for name, _, _ in fields]
            if sorted(names) != sorted(_NAMED_FIELDS):
                raise InvalidFormatPattern(text, "expected exactly one {path} and one {version}")
            if any(spec or conv for _, spec, conv in fields):
                raise InvalidFormatPattern(text, "format specs and conversions are not allowed")
            return cls(text, STYLE_NAMED)
        slots = _printf_slots(text)
        if slots != 2:
            raise InvalidFormatPattern(text, f"expected 2 placeholders, found {slots}")
        return cls(text, STYLE_PRINTF)


class UrlFormatter:
    def __init__(self, pattern: str | FormatPattern = DEFAULT_PATTERN) -> None:
        if not isinstance(pattern, FormatPattern):
            pattern = FormatPattern.parse(pattern)
        self.pattern = pattern

    def apply(self, path: str, version: str) -> str:
        if self.pattern.style == STYLE_NAMED:
            return self.pattern.text.format(path=path, version=version)
        return self.pattern.text % (path, version)

    def __repr__(self) -> str:
        return f"UrlFormatter({self.pattern.text!r})"


def format_url(pattern: str, path: str, version: str) -> str:
    """Validate ``pattern`` and substitute ``path`` and ``version`` into it."""
    return UrlFormatter(pattern).apply(path, version)
