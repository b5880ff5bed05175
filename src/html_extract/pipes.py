"""Reusable pipe classes for transform pipelines.

Pipes are pydantic models: their configuration is passed as constructor
keyword arguments (the ``payload`` of a :class:`~html_extract.pipeline.PipeSpec`)
and validated there. ``base_url`` is filled in by the pipeline when the caller
supplies one.
"""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field

_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


class Pipe(BaseModel, ABC):
    model_config = ConfigDict(extra="forbid")

    base_url: Optional[str] = None

    @abstractmethod
    def transform(self, value: Any) -> Any:
        ...


class ParseAsUrlPipe(Pipe):
    """Resolve a (possibly relative) URL against ``base_url``."""

    def transform(self, value: Any) -> Any:
        if not self.base_url:
            raise ValueError("base_url is required for ParseAsUrlPipe")
        return urljoin(self.base_url, value)


class RegexReplacePipe(Pipe):
    regex: str = ""
    replacement: str = ""
    flags: str = Field(default="", description="Any of 'i', 'm', 's', 'x'")
    count: int = Field(default=0, ge=0, description="0 replaces every match")

    def transform(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        flags = 0
        for letter in self.flags.lower():
            if letter not in _REGEX_FLAGS:
                raise ValueError(f"Unknown regex flag: {letter!r}")
            flags |= _REGEX_FLAGS[letter]
        return re.sub(self.regex, self.replacement, value, count=self.count, flags=flags)


class NumberNormalizePipe(Pipe):
    """Parse counts like ``"1,2k"`` or ``"3m"`` into integers (0 when unparsable)."""

    def transform(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip().lower().replace(",", ".")
        match = re.match(r"[-+]?\d*\.?\d+", text)
        if not match:
            return 0
        number = float(match.group(0))
        if text.endswith("k") or text.endswith("rb"):
            number *= 1_000
        elif text.endswith("m"):
            number *= 1_000_000
        return round(number)


class QueryAppendPipe(Pipe):
    """Set query parameters on a URL, replacing existing keys."""

    query_params: dict[str, str] = Field(default_factory=dict)

    def transform(self, value: Any) -> Any:
        parts = urlsplit(value)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        query.update(self.query_params)
        return urlunsplit(parts._replace(query=urlencode(query)))


class StripPipe(Pipe):
    chars: Optional[str] = None

    def transform(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return value.strip(self.chars)


DEFAULT_DATE_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y at %I:%M %p",
    "%Y/%m/%d",
    "%m/%d/%Y",
)


class DateFormatPipe(Pipe):
    """
    Parse a date string into a Unix timestamp in seconds.

    ISO 8601 and RFC 2822 dates are tried first, then ``formats`` in order.
    Dates without a timezone are read as UTC. Unparsable input yields the
    current time.
    """

    formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))

    def _parse(self, text: str) -> Optional[datetime]:
        iso = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            return datetime.fromisoformat(iso)
        except ValueError:
            pass
        try:
            return parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            pass
        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    def transform(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        parsed = self._parse(value.strip())
        if parsed is None:
            return time.time()
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()


BUILTIN_PIPES: dict[str, type[Pipe]] = {
    "ParseAsUrlPipe": ParseAsUrlPipe,
    "RegexReplacePipe": RegexReplacePipe,
    "NumberNormalizePipe": NumberNormalizePipe,
    "QueryAppendPipe": QueryAppendPipe,
    "StripPipe": StripPipe,
    "DateFormatPipe": DateFormatPipe,
}
