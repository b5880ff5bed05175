"""html-extract - schema-driven HTML extraction with XPath and CSS selectors."""

__version__ = "0.1.0"

from html_extract.extractor import HtmlParser, get_origin
from html_extract.fetcher import FetchError, check_proxy, fetch_html
from html_extract.models import (
    ExtractionField,
    FetchOptions,
    FetchResponse,
    PaginationPage,
    ProxyConfig,
    RetryOnErrors,
)
from html_extract.pipeline import PipeSpec, Pipeline, apply_transform, compile_transform
from html_extract.useragents import random_user_agent

_default_parser = HtmlParser()

extract_single = _default_parser.extract_single
extract_multiple = _default_parser.extract_multiple
extract_text = _default_parser.extract_text
extract_attributes = _default_parser.extract_attributes
exists = _default_parser.exists
count = _default_parser.count
extract_structured = _default_parser.extract_structured
extract_structured_list = _default_parser.extract_structured_list
extract_pagination = _default_parser.extract_pagination

__all__ = [
    "ExtractionField",
    "FetchError",
    "FetchOptions",
    "FetchResponse",
    "HtmlParser",
    "PaginationPage",
    "PipeSpec",
    "Pipeline",
    "ProxyConfig",
    "RetryOnErrors",
    "apply_transform",
    "check_proxy",
    "compile_transform",
    "count",
    "exists",
    "extract_attributes",
    "extract_multiple",
    "extract_pagination",
    "extract_single",
    "extract_structured",
    "extract_structured_list",
    "extract_text",
    "fetch_html",
    "get_origin",
    "random_user_agent",
]
