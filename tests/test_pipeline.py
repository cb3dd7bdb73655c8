"""Integration tests for the full pipeline."""

import numpy as np
import pytest
from PIL import Image

from apexcolor import (
    Color,
    Cropping,
    EmptyInputError,
    ExtractionConfig,
    MASK_WHITE,
    ProminentColorPipeline,
    kmeans,
    kmeans_with_all,
    kmeans_with_args,
)
from apexcolor.image import from_array, from_pil
from apexcolor.masking import DEBUG_MARKER_COLOR, apply_mask
from apexcolor.preprocess import prepare_image
from apexcolor.sampling import sample_colors

from conftest import WHITE, make_image


def no_crop(**kwargs) -> ExtractionConfig:
    return ExtractionConfig(cropping=Cropping.NONE, **kwargs)


class TestScenarios:
    """End-to-end behaviour on small synthetic images."""

    def test_white_background_is_masked(self, white_columns_image):
        config = no_crop(k=3, background_masks=[MASK_WHITE])
        colors = ProminentColorPipeline(config).process(white_columns_image)

        assert len(colors) == 1
        assert colors[0].color == Color(10, 10, 10)
        assert colors[0].count == 8

    def test_two_colors_bypass_clustering(self):
        image = make_image(1, 101, (200, 30, 30))
        image[0, 50] = (30, 30, 200)
        pipeline = ProminentColorPipeline(no_crop(k=2, resize_width=200))

        colors = pipeline.process(image)

        assert [(c.color, c.count) for c in colors] == [
            (Color(200, 30, 30), 100),
            (Color(30, 30, 200), 1),
        ]
        assert pipeline.last_result.shortcut == "few_colors"

    def test_flat_image(self):
        image = make_image(10, 10, (100, 150, 200))
        pipeline = ProminentColorPipeline(no_crop(k=3))

        colors = pipeline.process(image)

        assert len(colors) == 1
        assert colors[0].color == Color(100, 150, 200)
        assert colors[0].count == 100
        assert pipeline.last_result.shortcut == "single_color"

    def test_k_larger_than_distinct_colors(self, three_color_image):
        colors = ProminentColorPipeline(no_crop(k=5)).process(three_color_image)

        assert [c.count for c in colors] == [15, 10, 5]
        assert [c.color for c in colors] == [Color(120, 40, 40), Color(40, 120, 40), Color(40, 40, 120)]

    def test_everything_masked(self):
        with pytest.raises(EmptyInputError):
            ProminentColorPipeline(no_crop()).process(make_image(5, 5, WHITE))

    def test_fully_transparent(self):
        image = np.zeros((4, 4, 4), dtype=np.uint8)
        with pytest.raises(EmptyInputError):
            ProminentColorPipeline(no_crop()).process(image)

    def test_interior_white_survives(self, clipart_image):
        colors = ProminentColorPipeline(no_crop()).process(clipart_image)

        assert [(c.color, c.count) for c in colors] == [
            (Color(200, 30, 30), 96),
            (Color(255, 255, 255), 4),
        ]


class TestResultProperties:
    """Weights and sizes of clustered results."""

    @pytest.mark.parametrize("k", [1, 2, 3, 6])
    def test_weights_sum_to_usable_pixels(self, k):
        rng = np.random.default_rng(k)
        image = rng.integers(0, 8, (30, 30, 3), dtype=np.uint8) * 32
        config = no_crop(k=k, seed=5)

        colors = ProminentColorPipeline(config).process(image)

        prepared = from_pil(prepare_image(Image.fromarray(image), config.cropping, config.resize_width))
        sample_set = sample_colors(apply_mask(prepared, config.background_masks).image)

        assert len(colors) == min(k, len(sample_set))
        assert all(c.count > 0 for c in colors)
        assert sum(c.count for c in colors) == sample_set.total

    def test_seed_makes_runs_reproducible(self):
        image = np.random.default_rng(0).integers(0, 256, (24, 24, 3), dtype=np.uint8)
        config = no_crop(k=4, seed=123)

        first = ProminentColorPipeline(config).process(image)
        second = ProminentColorPipeline(config).process(image)

        assert first == second

    def test_explicit_rng(self):
        image = np.random.default_rng(1).integers(0, 256, (16, 16, 3), dtype=np.uint8)
        pipeline = ProminentColorPipeline(no_crop(k=3))

        first = pipeline.process(image, rng=np.random.default_rng(7))
        second = pipeline.process(image, rng=np.random.default_rng(7))

        assert first == second

    @pytest.mark.parametrize("overrides", [
        {"seeding": "random"},
        {"aggregation": "mean"},
        {"distance": "lab"},
        {"seeding": "random", "aggregation": "mean", "distance": "lab"},
    ])
    def test_variants(self, overrides):
        image = np.random.default_rng(2).integers(0, 256, (20, 20, 3), dtype=np.uint8)
        config = no_crop(k=3, seed=1, background_masks=[], **overrides)
        colors = ProminentColorPipeline(config).process(image)

        assert len(colors) == 3
        assert sum(c.count for c in colors) == 400


class TestDebugSnapshot:
    """Masked snapshot collection."""

    def test_snapshot_recorded(self, clipart_image):
        pipeline = ProminentColorPipeline(no_crop(debug_snapshot=True))
        pipeline.process(clipart_image)

        assert len(pipeline.debug_stages) == 1
        name, snapshot = pipeline.debug_stages[0]
        assert name == "masked"
        assert snapshot.shape == (20, 20, 3)
        assert tuple(snapshot[0, 0]) == DEBUG_MARKER_COLOR
        assert tuple(snapshot[10, 10]) == WHITE

    def test_no_snapshot_by_default(self, clipart_image):
        pipeline = ProminentColorPipeline(no_crop())
        pipeline.process(clipart_image)
        assert pipeline.debug_stages == []


class TestEntryPoints:
    """Convenience functions and input types."""

    def test_kmeans_from_file(self, clipart_image, tmp_path):
        path = tmp_path / "clipart.png"
        Image.fromarray(clipart_image).save(path)

        colors = kmeans(path)

        # Center crop leaves the red square with its white hole
        assert [c.hex for c in colors] == ["C81E1E", "FFFFFF"]
        assert [c.count for c in colors] == [96, 4]

    def test_kmeans_from_pil(self, clipart_image):
        colors = kmeans(Image.fromarray(clipart_image))
        assert colors[0].hex == "C81E1E"

    def test_kmeans_from_raster(self, clipart_image):
        colors = kmeans(from_array(clipart_image))
        assert colors[0].hex == "C81E1E"

    def test_kmeans_with_args(self, three_color_image):
        colors = kmeans_with_args(three_color_image, k=2, cropping="none", seed=3)
        assert len(colors) == 2
        assert sum(c.count for c in colors) == 30

    def test_kmeans_with_all_overrides_k(self, three_color_image):
        config = no_crop(k=3)
        colors = kmeans_with_all(1, three_color_image, config)

        assert len(colors) == 1
        assert colors[0].count == 30
        assert config.k == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            kmeans(tmp_path / "nope.png")
