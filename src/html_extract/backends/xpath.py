"""XPath backend built on lxml."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from lxml import etree
from lxml import html as lxml_html

from html_extract.backends.base import NodeHandle, NodeKind, SelectorBackend, SelectorError

logger = logging.getLogger(__name__)

# lxml refuses str input that carries an encoding declaration.
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def _serialize(element: Any) -> str:
    if element is None:
        return ""
    return lxml_html.tostring(element, encoding="unicode", with_tail=False)


class LxmlElementNode(NodeHandle):
    kind = NodeKind.ELEMENT

    def __init__(self, element: Any) -> None:
        self._element = element

    @property
    def text_content(self) -> str:
        return self._element.text_content()

    def get_attribute(self, name: str) -> Optional[str]:
        return self._element.get(name)

    @property
    def outer_html(self) -> str:
        return _serialize(self._element)


class LxmlStringNode(NodeHandle):
    """A text or attribute node; lxml hands these back as smart strings."""

    def __init__(self, result: str, kind: NodeKind) -> None:
        self._result = result
        self.kind = kind

    @property
    def text_content(self) -> str:
        return str(self._result)

    def get_attribute(self, name: str) -> Optional[str]:
        return None

    @property
    def outer_html(self) -> str:
        getparent = getattr(self._result, "getparent", None)
        if getparent is None:
            return ""
        owner = getparent()
        # Tail text belongs to the parent of the element it trails.
        if owner is not None and getattr(self._result, "is_tail", False):
            owner = owner.getparent()
        return _serialize(owner)


def _wrap(result: Any) -> Optional[NodeHandle]:
    if isinstance(result, etree._Element):
        return LxmlElementNode(result)
    if isinstance(result, str):
        if getattr(result, "is_attribute", False):
            return LxmlStringNode(result, NodeKind.ATTRIBUTE)
        return LxmlStringNode(result, NodeKind.TEXT)
    return None


def parse_fragment(html: str) -> Any:
    """Parse *html* and return the fragment root (the lone element of a fragment, else <html>)."""
    try:
        return lxml_html.fromstring(_XML_DECLARATION.sub("", html, count=1))
    except (etree.ParserError, ValueError) as exc:
        raise SelectorError(f"Could not parse HTML: {exc}") from exc


class XPathBackend(SelectorBackend):
    name = "xpath"

    def query(self, html: str, selector: str) -> list[NodeHandle]:
        root = parse_fragment(html)
        try:
            result = root.xpath(selector)
        except etree.XPathError as exc:
            raise SelectorError(f"Invalid XPath {selector!r}: {exc}") from exc

        # Scalar results (string(), count(), boolean()) are not node-sets.
        if not isinstance(result, list):
            if isinstance(result, str) and result:
                return [LxmlStringNode(result, NodeKind.TEXT)]
            logger.debug("XPath %r returned %r, not a node-set", selector, result)
            return []

        nodes = []
        for item in result:
            node = _wrap(item)
            if node is not None:
                nodes.append(node)
        return nodes
