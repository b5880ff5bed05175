"""Selector backend registry and factory with lazy imports."""

from __future__ import annotations

import importlib
import logging

from html_extract.backends.base import NodeHandle, NodeKind, SelectorBackend, SelectorError

logger = logging.getLogger(__name__)

_BACKEND_REGISTRY: dict[str, str] = {
    "xpath": "html_extract.backends.xpath.XPathBackend",
    "css": "html_extract.backends.css.CssBackend",
}


def get_backend(name: str) -> SelectorBackend:
    """Instantiate a selector backend by name. Uses lazy imports."""
    if name not in _BACKEND_REGISTRY:
        available = ", ".join(sorted(_BACKEND_REGISTRY))
        raise ValueError(f"Unknown selector type '{name}'. Available: {available}")

    module_path, class_name = _BACKEND_REGISTRY[name].rsplit(".", 1)
    module = importlib.import_module(module_path)
    backend_class = getattr(module, class_name)
    return backend_class()


def list_backends() -> list[str]:
    return sorted(_BACKEND_REGISTRY)


def query(html: str, selector: str, kind: str = "xpath") -> list[NodeHandle]:
    """Run *selector* against *html*; malformed input yields no matches."""
    backend = get_backend(kind)
    try:
        return backend.query(html, selector)
    except SelectorError as exc:
        logger.debug("Selector query failed: %s", exc)
        return []


__all__ = [
    "NodeHandle",
    "NodeKind",
    "SelectorBackend",
    "SelectorError",
    "get_backend",
    "list_backends",
    "query",
]
