"""Configuration module for the albedo map generator."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional


# Relative to the working directory at the time the config is built.
OUTPUT_DIR_NAME = "DownloadedImages"
LOG_FILE_NAME = "generation.log"
DEFAULT_FILE_NAME = "DownloadedImage.png"

NORMAL_STRENGTH = 1.0
HEIGHT_STRENGTH = 1.0
AO_SAMPLE_RADIUS = 1.0
AO_BIAS = 0.5
AO_SAMPLE_COUNT = 64
AO_OFFSET_MODES = ("truncate", "round")

REQUEST_TIMEOUT = 30.0

MAP_SUFFIXES: Dict[str, str] = {
    "normal": "_NormalMap",
    "height": "_HeightMap",
    "ao": "_AOMap",
}


@dataclass(frozen=True)
class FilterParameters:
    """Per-filter settings passed explicitly into :func:`generate`.

    A zero ``normal_strength`` or ``height_strength`` skips that map, a zero
    ``ao_bias`` skips the AO map.
    """

    normal_strength: float = NORMAL_STRENGTH
    height_strength: float = HEIGHT_STRENGTH
    ao_sample_radius: float = AO_SAMPLE_RADIUS
    ao_bias: float = AO_BIAS
    ao_sample_count: int = AO_SAMPLE_COUNT
    ao_offset_mode: str = "truncate"

    def __post_init__(self) -> None:
        for name in ("normal_strength", "height_strength", "ao_sample_radius", "ao_bias"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if self.normal_strength < 0:
            raise ValueError(f"normal_strength must be >= 0, got {self.normal_strength}")
        if self.height_strength < 0:
            raise ValueError(f"height_strength must be >= 0, got {self.height_strength}")
        if self.ao_sample_radius <= 0:
            raise ValueError(f"ao_sample_radius must be > 0, got {self.ao_sample_radius}")
        if isinstance(self.ao_sample_count, bool) or int(self.ao_sample_count) != self.ao_sample_count:
            raise ValueError(f"ao_sample_count must be an integer, got {self.ao_sample_count!r}")
        if self.ao_sample_count < 1:
            raise ValueError(f"ao_sample_count must be >= 1, got {self.ao_sample_count}")
        if self.ao_offset_mode not in AO_OFFSET_MODES:
            raise ValueError(f"ao_offset_mode must be one of {AO_OFFSET_MODES}, got {self.ao_offset_mode!r}")


@dataclass
class PipelineConfig:
    """Runtime configuration for the command line generator.

    ``file_name`` of ``None`` stores the source under its own name when it has
    one, and under :data:`DEFAULT_FILE_NAME` otherwise.
    """

    output_path: Path = field(default_factory=lambda: Path.cwd() / OUTPUT_DIR_NAME)
    file_name: Optional[str] = None
    normal_strength: float = NORMAL_STRENGTH
    height_strength: float = HEIGHT_STRENGTH
    ao_sample_radius: float = AO_SAMPLE_RADIUS
    ao_bias: float = AO_BIAS
    ao_sample_count: int = AO_SAMPLE_COUNT
    ao_offset_mode: str = "truncate"
    random_seed: Optional[int] = None
    threads: int = 1
    request_timeout: float = REQUEST_TIMEOUT
    log_file: Path = field(default_factory=lambda: Path.cwd() / LOG_FILE_NAME)

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration as a plain dictionary."""

        return {
            "PATH_OUTPUT": self.output_path,
            "FILE_NAME": self.file_name,
            "NORMAL_STRENGTH": self.normal_strength,
            "HEIGHT_STRENGTH": self.height_strength,
            "AO_SAMPLE_RADIUS": self.ao_sample_radius,
            "AO_BIAS": self.ao_bias,
            "AO_SAMPLE_COUNT": self.ao_sample_count,
            "AO_OFFSET_MODE": self.ao_offset_mode,
            "RANDOM_SEED": self.random_seed,
            "THREADS": self.threads,
            "REQUEST_TIMEOUT": self.request_timeout,
            "LOG_FILE": self.log_file,
        }


def build_config(overrides: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    """Create a configuration dictionary with optional overrides.

    Keys that the configuration does not know are ignored.
    """

    config = PipelineConfig()
    if overrides:
        mutable: MutableMapping[str, object] = config.as_dict()
        for key, value in overrides.items():
            if key in mutable:
                mutable[key] = value
        return dict(mutable)
    return config.as_dict()


def filter_parameters_from_config(cfg: Mapping[str, object]) -> FilterParameters:
    """Extract the :class:`FilterParameters` stored in a configuration dictionary."""

    return FilterParameters(
        normal_strength=float(cfg["NORMAL_STRENGTH"]),  # type: ignore[arg-type]
        height_strength=float(cfg["HEIGHT_STRENGTH"]),  # type: ignore[arg-type]
        ao_sample_radius=float(cfg["AO_SAMPLE_RADIUS"]),  # type: ignore[arg-type]
        ao_bias=float(cfg["AO_BIAS"]),  # type: ignore[arg-type]
        ao_sample_count=int(cfg["AO_SAMPLE_COUNT"]),  # type: ignore[arg-type]
        ao_offset_mode=str(cfg["AO_OFFSET_MODE"]),
    )
