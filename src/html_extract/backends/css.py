"""CSS selector backend built on BeautifulSoup (soupsieve)."""

from __future__ import annotations

from typing import Optional

import soupsieve
from bs4 import BeautifulSoup, Tag

from html_extract.backends.base import NodeHandle, NodeKind, SelectorBackend, SelectorError


class SoupNode(NodeHandle):
    kind = NodeKind.ELEMENT

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def text_content(self) -> str:
        return self._tag.get_text()

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        # Multi-valued attributes such as class come back as lists.
        if isinstance(value, list):
            return " ".join(value)
        return value

    @property
    def outer_html(self) -> str:
        return str(self._tag)


class CssBackend(SelectorBackend):
    name = "css"

    def query(self, html: str, selector: str) -> list[NodeHandle]:
        soup = BeautifulSoup(html, "lxml")
        try:
            tags = soup.select(selector)
        except (soupsieve.SelectorSyntaxError, ValueError, NotImplementedError) as exc:
            raise SelectorError(f"Invalid CSS selector {selector!r}: {exc}") from exc
        return [SoupNode(tag) for tag in tags]
