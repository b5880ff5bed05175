"""Transform pipelines: compile a transform spec once, apply it per value.

A spec may be a plain callable, an object with a ``transform`` method, a class
whose instances have one (built fresh for every value), a :class:`PipeSpec`
carrying its configuration, or a list mixing any of these. Classes
without a ``transform`` method (``int``, ``float``) are called like functions.
Everything is resolved up front into a :class:`Pipeline`, so applying it never
inspects the spec shape again.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import BaseModel


Stage = Callable[[Any, Optional[str]], Any]


class TransformSpecError(ValueError):
    """Raised when a transform spec has a shape that cannot be compiled."""


@dataclass(frozen=True)
class PipeSpec:
    """A pipe class plus the configuration applied to each fresh instance."""

    cls: type
    payload: Mapping[str, Any] = field(default_factory=dict)


def _coerce(value: Any) -> Any:
    """Turn a node handle that slipped through into its text."""
    if value is None or isinstance(value, str):
        return value
    text = getattr(value, "text_content", None)
    if text is None:
        return value
    return text() if callable(text) else text


class Pipeline:
    """An ordered chain of stages applied left to right."""

    __slots__ = ("_stages",)

    def __init__(self, stages: Iterable[Stage] = ()) -> None:
        self._stages = tuple(stages)

    def __call__(self, value: Any, base_url: Optional[str] = None) -> Any:
        for stage in self._stages:
            value = stage(_coerce(value), base_url)
        return value

    def apply(self, value: Any, base_url: Optional[str] = None) -> Any:
        """Run the pipeline, element-wise when *value* is a list."""
        if isinstance(value, list):
            return [self(item, base_url) for item in value]
        return self(value, base_url)

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        return f"Pipeline(stages={len(self._stages)})"


def _function_stage(func: Callable[[Any], Any]) -> Stage:
    def stage(value: Any, base_url: Optional[str]) -> Any:
        return func(value)

    return stage


def _instance_stage(instance: Any) -> Stage:
    def stage(value: Any, base_url: Optional[str]) -> Any:
        return instance.transform(value)

    return stage


def _build(cls: type, payload: Mapping[str, Any]) -> Any:
    """Pydantic pipes take the payload as constructor arguments; other classes get it assigned."""
    if issubclass(cls, BaseModel):
        return cls(**payload)
    instance = cls()
    for key, item in payload.items():
        setattr(instance, key, item)
    return instance


def _class_stage(cls: type, payload: Mapping[str, Any]) -> Stage:
    if not callable(getattr(cls, "transform", None)):
        raise TransformSpecError(f"{cls.__name__} does not define a transform() method")
    if inspect.isabstract(cls):
        raise TransformSpecError(f"{cls.__name__} is abstract and cannot be used as a pipe")
    payload = dict(payload)

    def stage(value: Any, base_url: Optional[str]) -> Any:
        instance = _build(cls, payload)
        if base_url is not None and hasattr(instance, "base_url"):
            instance.base_url = base_url
        return instance.transform(value)

    return stage


def _compile_stage(spec: Any) -> Stage:
    if isinstance(spec, Pipeline):
        return spec
    if isinstance(spec, (list, tuple)):
        return Pipeline(_compile_stage(item) for item in spec)
    if isinstance(spec, PipeSpec):
        return _class_stage(spec.cls, spec.payload)
    if isinstance(spec, Mapping):
        if "class" not in spec:
            raise TransformSpecError("Pipe mapping needs a 'class' entry")
        return _class_stage(spec["class"], spec.get("payload") or {})
    if isinstance(spec, type) and callable(getattr(spec, "transform", None)):
        return _class_stage(spec, {})
    if callable(getattr(spec, "transform", None)):
        return _instance_stage(spec)
    if callable(spec):
        return _function_stage(spec)
    raise TransformSpecError(f"Unsupported transform spec: {spec!r}")


def compile_transform(spec: Any) -> Pipeline:
    """Resolve *spec* into a single :class:`Pipeline`."""
    if isinstance(spec, Pipeline):
        return spec
    if isinstance(spec, (list, tuple)):
        return Pipeline(_compile_stage(item) for item in spec)
    return Pipeline([_compile_stage(spec)])


def apply_transform(value: Any, spec: Any, base_url: Optional[str] = None) -> Any:
    """Compile *spec* and apply it to *value* (element-wise for lists)."""
    return compile_transform(spec).apply(value, base_url)
