"""Integration tests for the three-filter map generation pipeline."""
from __future__ import annotations

import numpy as np
import pytest

from albedo_maps.core.config import FilterParameters
from albedo_maps.core.errors import InvalidInput, OutOfRangeWrite
from albedo_maps.core.pixel_grid import PixelGrid
from albedo_maps.modules import map_pipeline
from albedo_maps.modules.map_pipeline import GeneratedMapSet, MapStatus, generate


@pytest.fixture(scope="module")
def albedo() -> PixelGrid:
    rng = np.random.default_rng(42)
    samples = np.concatenate([rng.random((9, 12, 3)), np.ones((9, 12, 1))], axis=-1)
    return PixelGrid(samples).freeze()


@pytest.fixture(scope="module")
def full_set(albedo: PixelGrid) -> GeneratedMapSet:
    return generate(albedo, FilterParameters(ao_sample_count=8), rng=np.random.default_rng(0))


def test_all_three_maps_generated(full_set: GeneratedMapSet) -> None:
    assert full_set.complete
    assert set(full_set.maps) == {"normal", "height", "ao"}
    assert all(outcome.status is MapStatus.GENERATED for outcome in full_set.outcomes.values())
    assert full_set.failures == {}
    assert full_set.skipped == ()


def test_outputs_match_source_dimensions(albedo: PixelGrid, full_set: GeneratedMapSet) -> None:
    for grid in full_set.maps.values():
        assert grid.size == albedo.size
        assert grid.frozen


def test_zero_strengths_are_reported_as_skipped(albedo: PixelGrid) -> None:
    params = FilterParameters(normal_strength=0.0, height_strength=0.0, ao_bias=0.0)
    result = generate(albedo, params)
    assert result.maps == {}
    assert set(result.skipped) == {"normal", "height", "ao"}
    assert result.failures == {}
    assert not result.complete


def test_partial_skip_keeps_remaining_maps(albedo: PixelGrid) -> None:
    result = generate(albedo, FilterParameters(height_strength=0.0, ao_sample_count=2))
    assert set(result.maps) == {"normal", "ao"}
    assert result.height is None
    assert result.outcomes["height"].status is MapStatus.SKIPPED


def test_zero_sized_source_raises_invalid_input() -> None:
    empty = PixelGrid(np.zeros((0, 4, 4), dtype=np.float32))
    with pytest.raises(InvalidInput):
        generate(empty, FilterParameters())


def test_failed_filter_does_not_abort_siblings(albedo: PixelGrid, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(grid: PixelGrid, strength: float) -> PixelGrid:
        raise OutOfRangeWrite(grid.width, 0, grid.width, grid.height)

    monkeypatch.setattr(map_pipeline.normal_map, "generate", broken)
    result = generate(albedo, FilterParameters(ao_sample_count=2), rng=np.random.default_rng(1))
    assert result.normal is None
    assert result.outcomes["normal"].status is MapStatus.FAILED
    assert isinstance(result.failures["normal"], OutOfRangeWrite)
    assert set(result.maps) == {"height", "ao"}


def test_thread_pool_matches_sequential_run(albedo: PixelGrid) -> None:
    params = FilterParameters(ao_sample_count=4)
    sequential = generate(albedo, params, rng=np.random.default_rng(5))
    threaded = generate(albedo, params, rng=np.random.default_rng(5), max_workers=3)
    for name in ("normal", "height", "ao"):
        assert sequential.maps[name] == threaded.maps[name]


def test_writable_source_is_not_mutated(albedo: PixelGrid) -> None:
    source = albedo.copy()
    before = source.samples.copy()
    generate(source, FilterParameters(ao_sample_count=2))
    np.testing.assert_array_equal(source.samples, before)
    assert not source.frozen


def test_uniform_source_properties() -> None:
    samples = np.empty((4, 4, 4), dtype=np.float32)
    samples[...] = (0.5, 0.5, 0.5, 1.0)
    result = generate(PixelGrid(samples), FilterParameters(height_strength=2.0, ao_sample_count=16))
    np.testing.assert_allclose(result.normal.samples, np.broadcast_to([0.5, 0.5, 1.0, 1.0], (4, 4, 4)), atol=1e-6)
    np.testing.assert_allclose(result.height.samples[..., :3], 1.0, atol=1e-6)
    np.testing.assert_allclose(result.ao.samples[..., :3], 1.0, atol=1e-6)


def test_failed_filter_does_not_abort_siblings_on_thread_pool(
    albedo: PixelGrid, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken(grid: PixelGrid, strength: float) -> PixelGrid:
        raise RuntimeError("height filter exploded")

    monkeypatch.setattr(map_pipeline.height_map, "generate", broken)
    result = generate(albedo, FilterParameters(ao_sample_count=2), rng=np.random.default_rng(1), max_workers=3)
    assert result.height is None
    assert result.outcomes["height"].status is MapStatus.FAILED
    assert isinstance(result.failures["height"], RuntimeError)
    assert set(result.maps) == {"normal", "ao"}
    assert result.outcomes["normal"].status is MapStatus.GENERATED
    assert result.outcomes["ao"].status is MapStatus.GENERATED


def test_skipped_map_is_logged_as_warning(albedo: PixelGrid, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="albedo_maps.pipeline"):
        generate(albedo, FilterParameters(ao_bias=0.0, ao_sample_count=2))
    assert any(record.levelname == "WARNING" and "ao" in record.getMessage() for record in caplog.records)
