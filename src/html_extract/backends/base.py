"""Abstract base classes for selector backends and the nodes they return."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class SelectorError(Exception):
    """Raised when a backend cannot parse the document or evaluate a selector."""


class NodeKind(str, Enum):
    ELEMENT = "element"
    TEXT = "text"
    ATTRIBUTE = "attribute"


class NodeHandle(ABC):
    """One match from a selector query.

    Handles are only valid for the extraction call that produced them.
    """

    kind: NodeKind = NodeKind.ELEMENT

    @property
    @abstractmethod
    def text_content(self) -> str:
        """Concatenated text of the node and its descendants."""
        ...

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        """Attribute value on an element node, or None when absent."""
        ...

    @property
    @abstractmethod
    def outer_html(self) -> str:
        """Serialized markup of the element, or of the owning element for text/attribute nodes."""
        ...

    @property
    def value(self) -> str:
        """The node's own value: text for text nodes, the value for attribute nodes."""
        return self.text_content

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value}>"


class SelectorBackend(ABC):
    """Contract for selector engines (XPath, CSS)."""

    name: str

    @abstractmethod
    def query(self, html: str, selector: str) -> list[NodeHandle]:
        """
        Parse *html* and return the nodes matched by *selector*, in document order.

        Relative selectors are evaluated against the root of the parsed
        fragment, so a serialized container can be queried with the same
        relative paths that were written against it.

        Raises:
            SelectorError: the document is empty or the selector is malformed.
        """
        ...
