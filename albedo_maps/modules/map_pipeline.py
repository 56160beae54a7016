"""Run the normal, height and ambient occlusion filters over one source grid."""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import numpy as np

from ..core.config import FilterParameters
from ..core.errors import InvalidInput
from ..core.pixel_grid import PixelGrid
from ..core.utils_parallel import run_isolated
from .geometry_maps import ambient_occlusion, height_map
from .surface_maps import normal_map

LOGGER = logging.getLogger("albedo_maps.pipeline")

MAP_NAMES = ("normal", "height", "ao")

FilterFn = Callable[[], Optional[PixelGrid]]


class MapStatus(str, enum.Enum):
    GENERATED = "generated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MapOutcome:
    """Result of one filter run: generated, skipped by configuration, or failed."""

    status: MapStatus
    error: Optional[Exception] = None
    elapsed: float = 0.0


@dataclass
class GeneratedMapSet:
    """Output grids of one :func:`generate` call, keyed by map name."""

    normal: Optional[PixelGrid] = None
    height: Optional[PixelGrid] = None
    ao: Optional[PixelGrid] = None
    outcomes: Dict[str, MapOutcome] = field(default_factory=dict)

    @property
    def maps(self) -> Dict[str, PixelGrid]:
        """Produced grids only, in normal/height/ao order."""

        produced = {name: getattr(self, name) for name in MAP_NAMES}
        return {name: grid for name, grid in produced.items() if grid is not None}

    @property
    def failures(self) -> Dict[str, Exception]:
        return {
            name: outcome.error
            for name, outcome in self.outcomes.items()
            if outcome.status is MapStatus.FAILED and outcome.error is not None
        }

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(name for name, outcome in self.outcomes.items() if outcome.status is MapStatus.SKIPPED)

    @property
    def complete(self) -> bool:
        """True when all three maps were produced."""

        return len(self.maps) == len(MAP_NAMES)


def _filters(source: PixelGrid, params: FilterParameters, rng: np.random.Generator) -> Dict[str, FilterFn]:
    return {
        "normal": lambda: normal_map.generate(source, params.normal_strength),
        "height": lambda: height_map.generate(source, params.height_strength),
        "ao": lambda: ambient_occlusion.generate(
            source,
            params.ao_sample_radius,
            params.ao_bias,
            params.ao_sample_count,
            rng=rng,
            offset_mode=params.ao_offset_mode,
        ),
    }


def _timed(name: str, fn: FilterFn) -> Callable[[], tuple[Optional[PixelGrid], float]]:
    def run() -> tuple[Optional[PixelGrid], float]:
        start = time.perf_counter()
        result = fn()
        elapsed = time.perf_counter() - start
        LOGGER.debug("%s filter finished in %.3fs", name, elapsed)
        return result, elapsed

    return run


def _validate_source(source: PixelGrid) -> None:
    if source.width <= 0 or source.height <= 0:
        raise InvalidInput(f"Source grid must have positive dimensions, got {source.width}x{source.height}")


def generate(
    source: PixelGrid,
    params: Optional[FilterParameters] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    max_workers: Optional[int] = None,
) -> GeneratedMapSet:
    """Derive the normal, height and AO maps of *source*.

    The filters are independent: a zero strength or bias skips one map, and a
    filter that raises is recorded as failed without touching the others. A
    source with zero width or height raises :class:`InvalidInput`.
    """

    _validate_source(source)
    params = params or FilterParameters()
    if rng is None:
        rng = np.random.default_rng()
    if not source.frozen:
        source = source.copy().freeze()

    tasks = {name: _timed(name, fn) for name, fn in _filters(source, params, rng).items()}
    results = run_isolated(tasks, max_workers=max_workers)

    result_set = GeneratedMapSet()
    for name in MAP_NAMES:
        result = results[name]
        if isinstance(result, Exception):
            result_set.outcomes[name] = MapOutcome(MapStatus.FAILED, error=result)
            continue
        grid, elapsed = result
        if grid is None:
            LOGGER.warning("Skipping %s map: disabled by configuration", name)
            result_set.outcomes[name] = MapOutcome(MapStatus.SKIPPED, elapsed=elapsed)
            continue
        setattr(result_set, name, grid)
        result_set.outcomes[name] = MapOutcome(MapStatus.GENERATED, elapsed=elapsed)

    LOGGER.info(
        "Generated %s/%s maps for %sx%s source",
        len(result_set.maps),
        len(MAP_NAMES),
        source.width,
        source.height,
    )
    return result_set
