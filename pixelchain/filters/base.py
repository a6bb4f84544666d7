# PixelChain Filters - Base Classes
"""
Base classes for the filter system.

All filters are frozen dataclasses: their parameters are fixed at construction
and a filter can be applied to any number of images. Filters never modify the
image they receive.

A filter implements :meth:`Filter.apply`, which raises a
:class:`~pixelchain.errors.PixelChainError` if the effect can not be applied.
:meth:`Filter.run` wraps it and turns such errors into a skipped
:class:`FilterResult` carrying the unchanged input image, after reporting the
reason to the context's diagnostics sink.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable
import json

from pixelchain.color import Color
from pixelchain.diagnostics import Diagnostic, DiagnosticsSink, LoggingDiagnostics
from pixelchain.errors import PixelChainError
from pixelchain.geometry import Box, Point, Rectangle
from pixelchain.image import Image

SERIALIZE = 'serialize'
"Field metadata key, set to False for runtime collaborators which are not serialized"


def collaborator(default: Any = None) -> Any:
    """Declares a dataclass field holding a runtime collaborator (not serialized)."""
    return field(default=default, compare=False, repr=False, metadata={SERIALIZE: False})


@dataclass
class FilterContext:
    """Context object passed through filter pipelines.

    Carries the diagnostics sink filters report skipped effects to. A branch
    created for a nested pipeline shares its parent's sink and remembers its
    name and parent.
    """

    diagnostics: DiagnosticsSink = field(default_factory=LoggingDiagnostics)
    name: str | None = None
    _parent: 'FilterContext | None' = field(default=None, repr=False)

    @property
    def parent(self) -> 'FilterContext | None':
        return self._parent

    def branch(self, name: str | None = None) -> 'FilterContext':
        """Create a child context reporting to the same diagnostics sink."""
        return FilterContext(diagnostics=self.diagnostics, name=name, _parent=self)

    def warn(self, message: str, source: str = '', payload: Any = None) -> None:
        """Report a non-fatal problem to the diagnostics sink."""
        self.diagnostics.emit(Diagnostic(message=message, source=source, payload=payload))


@dataclass(frozen=True)
class FilterResult:
    """Outcome of running a filter.

    ``image`` is the transformed image if ``applied`` is True, otherwise the
    unchanged input image and ``reason`` tells why the effect was skipped.
    """

    image: Image
    applied: bool = True
    reason: str | None = None
    payload: Any = None

    @property
    def skipped(self) -> bool:
        return not self.applied


# Global registry
FILTER_REGISTRY: dict[str, type['Filter']] = {}


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Decorator to register a filter class."""
    FILTER_REGISTRY[cls.__name__] = cls
    # Also register lowercase version
    FILTER_REGISTRY[cls.__name__.lower()] = cls
    return cls


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Color):
        return value.to_hex()
    if isinstance(value, (Point, Box, Rectangle)):
        return value.to_dict()
    if isinstance(value, Filter):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class Filter(ABC):
    """Base class for all filters.

    Example:
        @register_filter
        @dataclass(frozen=True)
        class MyFilter(Filter):
            level: int = 10

            def apply(self, image: Image, context: FilterContext | None = None) -> Image:
                if self.level < 0:
                    raise UnusableInput('level must not be negative')
                ...
    """

    @abstractmethod
    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        """Apply filter to image and return result.

        :param image: The input image, never modified.
        :param context: Optional context carrying the diagnostics sink.
        :returns: The processed image.
        :raises PixelChainError: If the effect can not be applied.
        """

    def run(self, image: Image, context: FilterContext | None = None) -> FilterResult:
        """Apply the filter, degrading to the unchanged input on failure.

        Errors of the :class:`~pixelchain.errors.PixelChainError` family are
        reported to the context's diagnostics sink and produce a skipped
        result. Other exceptions are programming errors and propagate.
        """
        context = context if context is not None else FilterContext()
        try:
            result = self.apply(image, context)
        except PixelChainError as e:
            context.warn(e.message, source=self.type, payload=e.payload)
            return FilterResult(image=image, applied=False, reason=e.message, payload=e.payload)
        return FilterResult(image=result)

    def __call__(self, image: Image, context: FilterContext | None = None) -> Image:
        return self.apply(image, context)

    def _coerce(self, name: str, converter: Callable[[Any], Any]) -> None:
        """Converts a field value in ``__post_init__`` of a frozen filter."""
        value = getattr(self, name)
        if value is not None:
            object.__setattr__(self, name, converter(value))

    @property
    def type(self) -> str:
        """Filter type name for serialization."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Serialize filter to dictionary."""
        data = {}
        for f in fields(self):
            if f.name.startswith('_') or not f.metadata.get(SERIALIZE, True):
                continue
            data[f.name] = _serialize_value(getattr(self, f.name))
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        """Serialize filter to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Deserialize filter from dictionary."""
        data = data.copy()  # Don't modify original
        filter_type = data.pop('type', cls.__name__)

        filter_cls = FILTER_REGISTRY.get(filter_type) or FILTER_REGISTRY.get(filter_type.lower())
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")
        if filter_cls.from_dict.__func__ is not Filter.from_dict.__func__:
            data['type'] = filter_type
            return filter_cls.from_dict(data)
        return filter_cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        """Deserialize filter from JSON string."""
        return cls.from_dict(json.loads(json_str))


__all__ = [
    'Filter',
    'FilterContext',
    'FilterResult',
    'FILTER_REGISTRY',
    'register_filter',
    'collaborator',
]
