# PixelChain Filters - Pipeline
"""
FilterPipeline for chaining multiple filters.

A pipeline (also called a transformation) is an ordered list of filters, each
added with a priority. Filters run in ascending priority order, filters with
equal priority in the order they were added. Every filter consumes the
previous filter's output. A filter which can not apply its effect is skipped,
the following filters still run on the unchanged image.

The pipeline holds no image state, the same pipeline can process any number
of images.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

from pixelchain.image import Image
from .base import Filter, FilterContext, FilterResult, register_filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineStep:
    """A filter with its position in a pipeline."""

    filter: Filter
    priority: int = 0
    order: int = 0
    "Insertion index, breaks priority ties"


@dataclass(frozen=True)
class PipelineResult(FilterResult):
    """Outcome of a pipeline run with the result of every single filter."""

    results: list[FilterResult] = field(default_factory=list)

    @property
    def skipped_filters(self) -> list[FilterResult]:
        return [r for r in self.results if r.skipped]


@register_filter
@dataclass(frozen=True)
class FilterPipeline(Filter):
    """Chain of filters applied in priority order.

    Example::

        pipeline = FilterPipeline()
        pipeline.add(UnsharpMask(amount=80), priority=2)
        pipeline.add(SepiaFast(), priority=1)
        result = pipeline.run(image)
    """

    steps: list[PipelineStep] = field(default_factory=list)

    @classmethod
    def of(cls, *filters: Filter) -> 'FilterPipeline':
        """Creates a pipeline running ``filters`` in the given order."""
        return cls().extend(filters)

    def add(self, filter: Filter, priority: int = 0) -> 'FilterPipeline':
        """Add filter to pipeline (chainable)."""
        if not isinstance(filter, Filter):
            raise TypeError(f"Expected a Filter, got {type(filter).__name__}")
        self.steps.append(PipelineStep(filter=filter, priority=int(priority), order=len(self.steps)))
        return self

    def append(self, filter: Filter) -> 'FilterPipeline':
        """Add filter with default priority (chainable)."""
        return self.add(filter)

    def extend(self, filters) -> 'FilterPipeline':
        """Add multiple filters with default priority (chainable)."""
        for f in filters:
            self.add(f)
        return self

    @property
    def ordered_steps(self) -> list[PipelineStep]:
        return sorted(self.steps, key=lambda step: (step.priority, step.order))

    @property
    def filters(self) -> list[Filter]:
        """The filters in execution order."""
        return [step.filter for step in self.ordered_steps]

    def run(self, image: Image, context: FilterContext | None = None) -> PipelineResult:
        """Run all filters in sequence.

        :returns: The final image plus the result of every filter
        """
        context = context if context is not None else FilterContext()
        results = []
        current = image
        for step in self.ordered_steps:
            logger.debug("applying %s (priority %d)", step.filter.type, step.priority)
            result = step.filter.run(current, context)
            if result.skipped:
                logger.debug("%s skipped: %s", step.filter.type, result.reason)
            results.append(result)
            current = result.image
        return PipelineResult(image=current, results=results)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        """Apply all filters in sequence, skipping filters which fail."""
        return self.run(image, context).image

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Filter]:
        return iter(self.filters)

    def __getitem__(self, index: int) -> Filter:
        return self.filters[index]

    def to_dict(self) -> dict[str, Any]:
        """Serialize pipeline to dictionary."""
        return {
            'type': 'FilterPipeline',
            'filters': [
                {'priority': step.priority, 'filter': step.filter.to_dict()}
                for step in self.ordered_steps
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'FilterPipeline':
        """Deserialize pipeline from dictionary."""
        pipeline = cls()
        for entry in data.get('filters', []):
            pipeline.add(Filter.from_dict(entry['filter']), entry.get('priority', 0))
        return pipeline


Transformation = FilterPipeline
"Alternative name of :class:`FilterPipeline`"

__all__ = ['FilterPipeline', 'Transformation', 'PipelineStep', 'PipelineResult']
