"""Schema-driven extraction over XPath and CSS selectors.

Every public method takes raw HTML text and parses it afresh, so calls share
no state. Malformed HTML, bad selectors and failing transforms never raise
out of an extraction: they degrade to ``None``, ``[]``, ``False`` or ``0``.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Mapping, Optional, Union
from urllib.parse import urljoin, urlsplit

from html_extract.backends import get_backend
from html_extract.backends.base import NodeHandle, SelectorError
from html_extract.models import ExtractionField, PaginationPage
from html_extract.pipeline import compile_transform
from html_extract.values import extract_values

ExtractionSchema = Mapping[str, Union[ExtractionField, Mapping[str, Any]]]

# Pagination fields read the first linked anchor in (or at) each container.
PAGINATION_ANCHOR = "descendant-or-self::a[@href]"


def resolve_url(href: str, base_url: str) -> str:
    """Absolutize *href* against *base_url*; absolute or unresolvable hrefs come back unchanged."""
    if "://" in href:
        return href
    try:
        return urljoin(base_url, href)
    except ValueError:
        return href


_DEFAULT_PORTS = {"http": 80, "https": 443}


def get_origin(url: str) -> str:
    """
    Scheme, host and non-default port of *url*, e.g. ``https://example.com``.

    Useful for deriving a ``base_url`` from a page URL. Raises ValueError
    when *url* has no scheme or host.
    """
    parts = urlsplit(url.strip())
    host = parts.hostname
    if not parts.scheme or not host:
        raise ValueError(f"Cannot determine the origin of {url!r}")
    if ":" in host:
        host = f"[{host}]"
    origin = f"{parts.scheme}://{host}"
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme):
        origin += f":{port}"
    return origin


def normalize_schema(schema: ExtractionSchema) -> dict[str, ExtractionField]:
    """Validate every field definition, keeping the schema's order."""
    fields: dict[str, ExtractionField] = {}
    for name, definition in schema.items():
        if isinstance(definition, ExtractionField):
            fields[name] = definition
        else:
            fields[name] = ExtractionField.model_validate(definition)
    return fields


def pagination_schema(
    base_url: Optional[str] = None,
    schema: Optional[ExtractionSchema] = None,
) -> dict[str, ExtractionField]:
    """
    Fields for pagination extraction: *schema* when given, else ``href``/``text``
    from the first linked anchor. An ``href`` field without its own transform
    is resolved against *base_url*.
    """
    if schema is None:
        fields = {
            "href": ExtractionField(selector=PAGINATION_ANCHOR, type="xpath", attribute="href"),
            "text": ExtractionField(selector=PAGINATION_ANCHOR, type="xpath"),
        }
    else:
        fields = normalize_schema(schema)

    href = fields.get("href")
    if base_url and href is not None and href.transform is None:
        resolver = compile_transform(partial(resolve_url, base_url=base_url))
        fields["href"] = href.model_copy(update={"transform": resolver})
    return fields


class HtmlParser:
    """Extracts values, records and lists of records from HTML.

    The logger is injected; ``verbose=True`` on a call raises swallowed
    failures from DEBUG to WARNING.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def _report(self, verbose: bool, msg: str, *args: Any) -> None:
        self.logger.log(logging.WARNING if verbose else logging.DEBUG, msg, *args)

    def _run_query(self, html: str, selector: str, type: str) -> list[NodeHandle]:
        return get_backend(type).query(html, selector)

    def _query(self, html: str, selector: str, type: str, verbose: bool) -> list[NodeHandle]:
        try:
            return self._run_query(html, selector, type)
        except (SelectorError, ValueError) as exc:
            self._report(verbose, "Query %r (%s) failed: %s", selector, type, exc)
            return []

    # ------------------------------------------------------------------
    # Single values
    # ------------------------------------------------------------------

    def extract_single(
        self,
        html: str,
        selector: str,
        type: str = "xpath",
        attribute: Optional[str] = None,
        *,
        raw: bool = False,
        verbose: bool = False,
        base_url: Optional[str] = None,
        transform: Any = None,
    ) -> Any:
        """Value of the first match, or None."""
        pipeline = compile_transform(transform) if transform is not None else None
        nodes = self._query(html, selector, type, verbose)
        value = extract_values(nodes, attribute, raw, multiple=False)
        if value is None or pipeline is None:
            return value
        try:
            return pipeline(value, base_url)
        except Exception as exc:
            self._report(verbose, "Transform failed for %r: %s", selector, exc)
            return None

    def extract_multiple(
        self,
        html: str,
        selector: str,
        type: str = "xpath",
        attribute: Optional[str] = None,
        *,
        raw: bool = False,
        verbose: bool = False,
        base_url: Optional[str] = None,
        transform: Any = None,
    ) -> list:
        """Values of every match; empty values and values whose transform fails are dropped."""
        pipeline = compile_transform(transform) if transform is not None else None
        nodes = self._query(html, selector, type, verbose)
        values = extract_values(nodes, attribute, raw, multiple=True)
        if pipeline is None:
            return values

        results = []
        for value in values:
            try:
                results.append(pipeline(value, base_url))
            except Exception as exc:
                self._report(verbose, "Transform failed for %r on %r: %s", selector, value, exc)
        return results

    def extract_text(
        self,
        html: str,
        selector: str,
        type: str = "xpath",
        *,
        verbose: bool = False,
        base_url: Optional[str] = None,
        transform: Any = None,
    ) -> Any:
        return self.extract_single(
            html, selector, type, verbose=verbose, base_url=base_url, transform=transform
        )

    def extract_attributes(
        self,
        html: str,
        selector: str,
        attribute: str,
        type: str = "xpath",
        *,
        verbose: bool = False,
        base_url: Optional[str] = None,
        transform: Any = None,
    ) -> list:
        return self.extract_multiple(
            html, selector, type, attribute, verbose=verbose, base_url=base_url, transform=transform
        )

    def exists(self, html: str, selector: str, type: str = "xpath", *, verbose: bool = False) -> bool:
        return len(self._query(html, selector, type, verbose)) > 0

    def count(self, html: str, selector: str, type: str = "xpath", *, verbose: bool = False) -> int:
        return len(self._query(html, selector, type, verbose))

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def _extract_field(self, html: str, field: ExtractionField, base_url: Optional[str]) -> Any:
        nodes = self._run_query(html, field.selector, field.type)
        value = extract_values(nodes, field.attribute, field.raw, field.multiple)
        if not value:
            return field.empty_value()
        if field.transform is not None:
            return field.transform.apply(value, base_url)
        return value

    def extract_structured(
        self,
        html: str,
        schema: ExtractionSchema,
        *,
        verbose: bool = False,
        base_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Build one record from *html*.

        Every schema field is present in the result. A field whose selector or
        transform fails gets None (``[]`` for ``multiple`` fields) and the
        remaining fields are still extracted.
        """
        fields = normalize_schema(schema)
        record: dict[str, Any] = {}
        for name, field in fields.items():
            try:
                record[name] = self._extract_field(html, field, base_url)
            except Exception as exc:
                self._report(verbose, "Field %r (%s) failed: %s", name, field.selector, exc)
                record[name] = field.empty_value()
        return record

    def extract_structured_list(
        self,
        html: str,
        container_selector: str,
        schema: ExtractionSchema,
        container_type: str = "xpath",
        *,
        verbose: bool = False,
        base_url: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Build one record per container matched by *container_selector*.

        Each container is serialized and extracted on its own, so schema
        selectors are written relative to the container (e.g. ``.//h2``).
        """
        fields = normalize_schema(schema)
        containers = self._query(html, container_selector, container_type, verbose)
        self.logger.debug("Found %d containers for %r", len(containers), container_selector)

        records = []
        for container in containers:
            fragment = container.outer_html
            records.append(
                self.extract_structured(fragment, fields, verbose=verbose, base_url=base_url)
            )
        return records

    def extract_pagination(
        self,
        html: str,
        container_selector: str,
        container_type: str = "xpath",
        *,
        verbose: bool = False,
        base_url: Optional[str] = None,
        schema: Optional[ExtractionSchema] = None,
    ) -> Union[list[PaginationPage], list[dict[str, Any]]]:
        """
        Collect ``href``/``text`` pairs from pagination containers.

        Relative hrefs are resolved against *base_url* when given. Containers
        without a usable link (e.g. "jump to page" placeholders) are skipped.

        A custom *schema* replaces the default fields; records then come back
        as dicts, still filtered on whichever of ``href``/``text`` it declares.
        """
        fields = pagination_schema(base_url, schema)
        records = self.extract_structured_list(
            html,
            container_selector,
            fields,
            container_type,
            verbose=verbose,
            base_url=base_url,
        )
        required = [key for key in ("href", "text") if key in fields]
        kept = [record for record in records if all(record.get(key) for key in required)]
        self.logger.debug("Kept %d of %d pagination entries", len(kept), len(records))

        if schema is not None:
            return kept
        return [PaginationPage(href=record["href"], text=record["text"]) for record in kept]

    @staticmethod
    def get_origin(url: str) -> str:
        return get_origin(url)
