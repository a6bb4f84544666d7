"""
Tests the filter base class, serialization and the priority ordered pipeline
"""

import json
import logging
from dataclasses import FrozenInstanceError, dataclass

import numpy as np
import pytest

from pixelchain import Image, host
from pixelchain.errors import UnusableInput
from pixelchain.filters import (
    FILTER_REGISTRY,
    Brightness,
    Filter,
    FilterContext,
    FilterPipeline,
    MaskBorder,
    Negate,
    Opacity,
    ReplaceColors,
    Reflection,
    Transformation,
    register_filter,
)


@register_filter
@dataclass(frozen=True)
class RecordStep(Filter):
    """Reports its name to the context's diagnostics sink."""

    name: str = ''

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        context.warn(self.name, source=self.type)
        return image


@register_filter
@dataclass(frozen=True)
class Broken(Filter):
    """Fails with a programming error."""

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        raise RuntimeError('bug')


class TestFilterBase:
    """Running single filters."""

    def test_registered(self):
        assert FILTER_REGISTRY['Brightness'] is Brightness
        assert FILTER_REGISTRY['brightness'] is Brightness
        assert 'FilterPipeline' in FILTER_REGISTRY

    def test_filters_are_immutable(self):
        f = Brightness(level=5)
        with pytest.raises(FrozenInstanceError):
            # noinspection PyDataclass
            f.level = 10

    def test_input_is_not_modified(self, solid_red_image):
        before = solid_red_image.copy()
        Negate().apply(solid_red_image)
        assert solid_red_image == before

    def test_call(self, solid_red_image):
        assert Negate()(solid_red_image) == host.negate(solid_red_image)

    def test_run_reports_skipped_effect(self, solid_red_image, context, diagnostics):
        result = Opacity(opacity=150).run(solid_red_image, context)
        assert result.skipped
        assert result.image is solid_red_image
        assert '150' in result.reason
        assert len(diagnostics) == 1
        assert diagnostics.diagnostics[0].source == 'Opacity'

    def test_apply_raises(self, solid_red_image):
        with pytest.raises(UnusableInput):
            Opacity(opacity=150).apply(solid_red_image)

    def test_programming_errors_propagate(self, solid_red_image, context):
        with pytest.raises(RuntimeError):
            Broken().run(solid_red_image, context)

    def test_default_diagnostics_log_warnings(self, solid_red_image, caplog):
        with caplog.at_level(logging.WARNING, logger='pixelchain'):
            Opacity(opacity=-1).run(solid_red_image)
        assert any('Opacity' in record.getMessage() for record in caplog.records)


class TestFilterContext:
    """Context branches and diagnostics."""

    def test_branch_shares_diagnostics(self, context, diagnostics):
        child = context.branch('inner')
        assert child.name == 'inner'
        assert child.parent is context
        assert child.diagnostics is context.diagnostics
        child.warn('hello', source='Inner')
        assert diagnostics.messages == ['hello']
        assert diagnostics.diagnostics[0].source == 'Inner'

    def test_root_context_has_no_parent(self, context):
        assert context.parent is None
        assert context.name is None


class TestFilterSerialization:
    """Dictionary and JSON round trips."""

    def test_to_dict(self):
        assert Brightness(level=5).to_dict() == {'level': 5, 'type': 'Brightness'}

    def test_colors_are_serialized_as_hex(self):
        data = ReplaceColors(from_color='#00ff00', to_color=(0, 0, 255)).to_dict()
        assert data['from_color'] == '#00ff00'
        assert Filter.from_dict(data) == ReplaceColors(from_color='#00ff00', to_color='#0000ff')

    def test_from_dict_lowercase_type(self):
        assert Filter.from_dict({'type': 'brightness', 'level': 7}) == Brightness(level=7)

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            Filter.from_dict({'type': 'NoSuchFilter'})

    def test_json_round_trip(self):
        f = MaskBorder(width=3, color='#123456')
        assert Filter.from_json(f.to_json()) == f
        r = Reflection(height='25%', gap=4)
        assert Filter.from_json(r.to_json()) == r


class TestFilterPipeline:
    """Ordering, chaining and failure isolation."""

    def test_priority_order(self, context, diagnostics):
        pipeline = FilterPipeline()
        pipeline.add(RecordStep('c'), priority=3)
        pipeline.add(RecordStep('a'), priority=1)
        pipeline.add(RecordStep('b'), priority=2)
        pipeline.run(Image.create(2, 2), context)
        assert diagnostics.messages == ['a', 'b', 'c']

    def test_equal_priority_keeps_insertion_order(self, context, diagnostics):
        pipeline = FilterPipeline().add(RecordStep('x'), 1).add(RecordStep('y'), 0).add(RecordStep('z'), 1)
        pipeline.run(Image.create(2, 2), context)
        assert diagnostics.messages == ['y', 'x', 'z']

    def test_filters_are_chained(self, solid_red_image):
        pipeline = FilterPipeline()
        pipeline.add(Negate(), priority=2)
        pipeline.add(Brightness(level=-55), priority=1)
        expected = host.negate(host.brightness(solid_red_image, -55))
        assert pipeline.apply(solid_red_image) == expected

    def test_failed_filter_is_skipped(self, solid_red_image, context, diagnostics):
        pipeline = FilterPipeline.of(Opacity(opacity=500), Negate())
        result = pipeline.run(solid_red_image, context)
        assert result.image == host.negate(solid_red_image)
        assert len(result.results) == 2
        assert [r.image for r in result.skipped_filters] == [solid_red_image]
        assert len(diagnostics) == 1

    def test_empty_pipeline_returns_input(self, solid_red_image):
        result = FilterPipeline().run(solid_red_image)
        assert result.image is solid_red_image
        assert result.results == []

    def test_pipeline_is_reusable(self, solid_red_image, gradient_image):
        pipeline = FilterPipeline.of(Negate())
        assert pipeline.apply(solid_red_image) == host.negate(solid_red_image)
        assert pipeline.apply(gradient_image) == host.negate(gradient_image)

    def test_rejects_non_filters(self):
        with pytest.raises(TypeError):
            # noinspection PyTypeChecker
            FilterPipeline().add(lambda image: image)

    def test_sequence_protocol(self):
        pipeline = FilterPipeline().add(Negate(), 5).add(Brightness(level=1), 1)
        assert len(pipeline) == 2
        assert pipeline[0] == Brightness(level=1)
        assert list(pipeline) == [Brightness(level=1), Negate()]
        assert Transformation is FilterPipeline

    def test_nested_pipeline(self, solid_red_image):
        inner = FilterPipeline.of(Negate(), Negate())
        outer = FilterPipeline.of(inner, Brightness(level=-5))
        assert outer.apply(solid_red_image) == host.brightness(solid_red_image, -5)

    def test_serialization(self, gradient_image):
        pipeline = FilterPipeline()
        pipeline.add(Negate(), priority=2)
        pipeline.add(Brightness(level=20), priority=1)
        data = json.loads(pipeline.to_json())
        assert data['filters'][0] == {'priority': 1, 'filter': {'level': 20, 'type': 'Brightness'}}
        restored = Filter.from_dict(data)
        assert isinstance(restored, FilterPipeline)
        assert restored.apply(gradient_image) == pipeline.apply(gradient_image)
        assert np.array_equal(restored.apply(gradient_image).pixels,
                              host.negate(host.brightness(gradient_image, 20)).pixels)
