"""Command-line interface for html-extract."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from html_extract.config import Settings
from html_extract.extractor import HtmlParser
from html_extract.fetcher import FetchError, fetch_html
from html_extract.pipes import BUILTIN_PIPES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="html-extract",
        description="Fetch a page and extract structured data with XPath/CSS selectors.",
    )
    parser.add_argument("url", help="URL to fetch")
    parser.add_argument(
        "-s", "--schema",
        default=None,
        help="Path to a JSON schema file mapping field names to selector definitions",
    )
    parser.add_argument(
        "--container",
        default=None,
        help="Container selector; extracts one record per matching container",
    )
    parser.add_argument(
        "--pagination",
        default=None,
        help="Pagination container selector; extracts href/text pairs, or the --schema fields when given",
    )
    parser.add_argument(
        "--css",
        action="store_true",
        help="Treat --container/--pagination as CSS selectors instead of XPath",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Base URL for resolving relative links (default: the fetched URL)",
    )
    parser.add_argument(
        "--random-user-agent",
        action="store_true",
        help="Rotate through a pool of browser user agents",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Retry attempts for transient network errors (default: from .env or 3)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def _resolve_transform(spec: Any) -> Any:
    """Map pipe names from a JSON schema onto the built-in pipe classes."""
    if isinstance(spec, list):
        return [_resolve_transform(item) for item in spec]
    if isinstance(spec, str):
        if spec not in BUILTIN_PIPES:
            available = ", ".join(sorted(BUILTIN_PIPES))
            raise ValueError(f"Unknown pipe '{spec}'. Available: {available}")
        return BUILTIN_PIPES[spec]
    if isinstance(spec, dict) and isinstance(spec.get("class"), str):
        return {"class": _resolve_transform(spec["class"]), "payload": spec.get("payload") or {}}
    raise ValueError(f"Unsupported transform in schema: {spec!r}")


def load_schema(path: Path) -> dict[str, dict]:
    schema = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(schema, dict):
        raise ValueError("Schema file must contain a JSON object")
    for definition in schema.values():
        if "transform" in definition:
            definition["transform"] = _resolve_transform(definition["transform"])
    return schema


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.schema is None and args.pagination is None:
        parser.error("--schema is required unless --pagination is given")

    settings = Settings.from_env()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Apply CLI overrides
    overrides = {}
    if args.retries is not None:
        overrides["retries"] = args.retries
    if args.random_user_agent:
        overrides["use_random_user_agent"] = True
    if overrides:
        settings = replace(settings, **overrides)

    schema = None
    if args.schema:
        try:
            schema = load_schema(Path(args.schema))
        except (OSError, ValueError) as exc:
            parser.error(f"could not load schema: {exc}")

    options = settings.fetch_options(
        verbose=args.verbose,
        ignore_ssl_errors=args.insecure,
    )
    try:
        response = fetch_html(args.url, options)
    except FetchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    base_url = args.base_url or args.url
    selector_type = "css" if args.css else "xpath"
    html_parser = HtmlParser()

    if args.pagination:
        pages = html_parser.extract_pagination(
            response.data, args.pagination, selector_type,
            verbose=args.verbose, base_url=base_url, schema=schema,
        )
        result: Any = pages if schema is not None else [page.model_dump() for page in pages]
    elif args.container:
        result = html_parser.extract_structured_list(
            response.data, args.container, schema, selector_type,
            verbose=args.verbose, base_url=base_url,
        )
    else:
        result = html_parser.extract_structured(
            response.data, schema, verbose=args.verbose, base_url=base_url,
        )

    output = json.dumps(result, indent=2, ensure_ascii=False, default=str)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Output written to {args.output}", file=sys.stderr)
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
