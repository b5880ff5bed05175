"""Turn matched nodes into string values.

Per node, the representation is chosen in this order:

1. ``raw`` -> serialized markup (the owning element's markup for text and
   attribute nodes); ``attribute`` is ignored.
2. text or attribute node -> the node's own value.
3. ``attribute`` given -> that attribute of the element (None when absent).
4. otherwise -> the element's trimmed text content.

Multiple mode drops values that come out empty or missing.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from html_extract.backends.base import NodeHandle, NodeKind


def node_value(
    node: NodeHandle,
    attribute: Optional[str] = None,
    raw: bool = False,
) -> Optional[str]:
    if raw:
        return node.outer_html
    if node.kind is NodeKind.TEXT:
        return node.value.strip()
    if node.kind is NodeKind.ATTRIBUTE:
        return node.value
    if attribute:
        return node.get_attribute(attribute)
    return node.text_content.strip()


def extract_values(
    nodes: Sequence[NodeHandle],
    attribute: Optional[str] = None,
    raw: bool = False,
    multiple: bool = False,
) -> Union[str, list[str], None]:
    """Return the first match's value (None when empty), or every non-empty value when *multiple*."""
    if multiple:
        values = []
        for node in nodes:
            value = node_value(node, attribute, raw)
            if value:
                values.append(value)
        return values

    if not nodes:
        return None
    return node_value(nodes[0], attribute, raw) or None
