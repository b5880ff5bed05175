"""Tests for html_extract.pipes."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from html_extract.pipeline import PipeSpec, compile_transform
from html_extract.pipes import (
    BUILTIN_PIPES,
    DateFormatPipe,
    NumberNormalizePipe,
    ParseAsUrlPipe,
    Pipe,
    QueryAppendPipe,
    RegexReplacePipe,
    StripPipe,
)


class TestParseAsUrlPipe:
    def test_resolves_relative(self):
        pipe = ParseAsUrlPipe(base_url="https://x.com/list/")
        assert pipe.transform("item/1") == "https://x.com/list/item/1"

    def test_root_relative(self):
        pipe = ParseAsUrlPipe(base_url="https://x.com/list/")
        assert pipe.transform("/a") == "https://x.com/a"

    def test_absolute_unchanged(self):
        pipe = ParseAsUrlPipe(base_url="https://x.com")
        assert pipe.transform("https://other.com/b") == "https://other.com/b"

    def test_requires_base_url(self):
        with pytest.raises(ValueError, match="base_url is required"):
            ParseAsUrlPipe().transform("/a")

    def test_base_url_injected_by_pipeline(self):
        assert compile_transform(ParseAsUrlPipe)("/a", "https://x.com") == "https://x.com/a"


class TestRegexReplacePipe:
    def test_replaces_all(self):
        pipe = RegexReplacePipe(regex=r"\s+", replacement=" ")
        assert pipe.transform("a   b\n\tc") == "a b c"

    def test_count(self):
        pipe = RegexReplacePipe(regex="o", replacement="0", count=1)
        assert pipe.transform("foo") == "f0o"

    def test_ignore_case_flag(self):
        pipe = RegexReplacePipe(regex="price:", replacement="", flags="i")
        assert pipe.transform("PRICE: 10") == " 10"

    def test_unknown_flag(self):
        pipe = RegexReplacePipe(regex="a", flags="q")
        with pytest.raises(ValueError, match="Unknown regex flag"):
            pipe.transform("a")

    def test_non_string_passthrough(self):
        assert RegexReplacePipe(regex="1").transform(1) == 1

    def test_payload_via_pipe_spec(self):
        pipeline = compile_transform(PipeSpec(RegexReplacePipe, {"regex": r"\$", "replacement": ""}))
        assert pipeline("$19.99") == "19.99"


class TestNumberNormalizePipe:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("15", 15),
            ("1,2k", 1200),
            ("2.5K", 2500),
            ("3m", 3_000_000),
            ("4rb", 4000),
            ("  7 ", 7),
            ("n/a", 0),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert NumberNormalizePipe().transform(raw) == expected

    def test_non_string_passthrough(self):
        assert NumberNormalizePipe().transform(12) == 12


class TestQueryAppendPipe:
    def test_appends(self):
        pipe = QueryAppendPipe(query_params={"b": "2"})
        assert pipe.transform("https://x.com/p?a=1") == "https://x.com/p?a=1&b=2"

    def test_replaces_existing_key(self):
        pipe = QueryAppendPipe(query_params={"a": "9"})
        assert pipe.transform("https://x.com/p?a=1") == "https://x.com/p?a=9"

    def test_url_without_query(self):
        pipe = QueryAppendPipe(query_params={"page": "2"})
        assert pipe.transform("https://x.com/p") == "https://x.com/p?page=2"


class TestStripPipe:
    def test_whitespace(self):
        assert StripPipe().transform("  a  ") == "a"

    def test_chars(self):
        assert StripPipe(chars="$ ").transform(" $5$ ") == "5"


class TestDateFormatPipe:
    JAN_15 = datetime(2024, 1, 15, tzinfo=timezone.utc).timestamp()
    JAN_15_1030 = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc).timestamp()

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-01-15", JAN_15),
            ("2024-01-15T10:30:00Z", JAN_15_1030),
            ("2024-01-15T12:30:00+02:00", JAN_15_1030),
            ("Mon, 15 Jan 2024 10:30:00 +0000", JAN_15_1030),
            ("Jan 15, 2024", JAN_15),
            ("  15 January 2024 ", JAN_15),
            ("Jan 15, 2024 at 10:30 AM", JAN_15_1030),
        ],
    )
    def test_parses(self, raw, expected):
        assert DateFormatPipe().transform(raw) == expected

    def test_custom_formats(self):
        pipe = DateFormatPipe(formats=["%d.%m.%Y"])
        assert pipe.transform("15.01.2024") == self.JAN_15

    def test_unparsable_is_now(self):
        with patch("html_extract.pipes.time.time", return_value=1700000000.0):
            assert DateFormatPipe().transform("yesterday-ish") == 1700000000.0

    def test_after_regex_in_chain(self):
        pipeline = compile_transform([
            PipeSpec(RegexReplacePipe, {"regex": "Last post: (.+)", "replacement": r"\1"}),
            DateFormatPipe,
        ])
        assert pipeline("Last post: Jan 15, 2024") == self.JAN_15

    def test_non_string_passthrough(self):
        assert DateFormatPipe().transform(5) == 5


class TestPipeConfig:
    def test_base_pipe_is_abstract(self):
        with pytest.raises(TypeError):
            Pipe()

    def test_unknown_payload_key_rejected(self):
        with pytest.raises(ValidationError):
            RegexReplacePipe(pattern="a")

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            RegexReplacePipe(regex="a", count=-1)

    def test_registry(self):
        assert BUILTIN_PIPES["ParseAsUrlPipe"] is ParseAsUrlPipe
        assert set(BUILTIN_PIPES) == {
            "ParseAsUrlPipe",
            "RegexReplacePipe",
            "NumberNormalizePipe",
            "QueryAppendPipe",
            "StripPipe",
            "DateFormatPipe",
        }
