"""Command line interface for the albedo map generator."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np

from .core import config
from .core.errors import SourceError
from .core.utils_io import save_generated_maps, write_source_bytes
from .modules.map_pipeline import generate
from .modules.sources import load_source

LOGGER = logging.getLogger("albedo_maps.main_generate")


def _configure_logging(log_path: Path, *, verbose: bool = False) -> None:
    """Log to *log_path* and to the console; ``verbose`` adds filter timings."""

    log_path.parent.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.FileHandler(log_path, encoding="utf-8", delay=True),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate normal, height and AO maps from an albedo image")
    parser.add_argument("source", help="Image URL, data:image/...;base64 URI or local file path")
    parser.add_argument(
        "--file-name",
        default=None,
        help=f"Name used to store the source image (default: the source's own name, else {config.DEFAULT_FILE_NAME})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Directory to write the source and its maps (default: ./{config.OUTPUT_DIR_NAME})",
    )
    parser.add_argument("--normal-strength", type=float, default=config.NORMAL_STRENGTH, help="Normal map strength (0 disables)")
    parser.add_argument("--height-strength", type=float, default=config.HEIGHT_STRENGTH, help="Height map strength (0 disables)")
    parser.add_argument("--ao-bias", type=float, default=config.AO_BIAS, help="AO bias (0 disables)")
    parser.add_argument("--ao-samples", type=int, default=config.AO_SAMPLE_COUNT, help="AO samples per pixel")
    parser.add_argument("--ao-radius", type=float, default=config.AO_SAMPLE_RADIUS, help="AO sampling radius in pixels")
    parser.add_argument(
        "--ao-offset-mode",
        choices=config.AO_OFFSET_MODES,
        default="truncate",
        help="How continuous AO offsets become pixel offsets",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible AO maps")
    parser.add_argument("--threads", type=int, default=1, help="Number of filters to run concurrently")
    parser.add_argument("--log-file", type=Path, default=None, help=f"Log file path (default: ./{config.LOG_FILE_NAME})")
    parser.add_argument("--verbose", action="store_true", help="Also log per-filter timings")
    return parser.parse_args(argv)


def build_runtime_config(args: argparse.Namespace) -> Dict[str, object]:
    overrides: Dict[str, object] = {
        "FILE_NAME": args.file_name,
        "NORMAL_STRENGTH": args.normal_strength,
        "HEIGHT_STRENGTH": args.height_strength,
        "AO_SAMPLE_RADIUS": args.ao_radius,
        "AO_BIAS": args.ao_bias,
        "AO_SAMPLE_COUNT": args.ao_samples,
        "AO_OFFSET_MODE": args.ao_offset_mode,
        "RANDOM_SEED": args.seed,
        "THREADS": args.threads,
    }
    if args.output is not None:
        overrides["PATH_OUTPUT"] = args.output.resolve()
    if args.log_file is not None:
        overrides["LOG_FILE"] = args.log_file
    return config.build_config(overrides)


def run(source: str, cfg: Dict[str, object]) -> int:
    """Acquire *source*, generate its maps and write them; return an exit status."""

    try:
        params = config.filter_parameters_from_config(cfg)
    except ValueError as exc:
        LOGGER.error("Invalid filter parameters: %s", exc)
        return 1

    try:
        image = load_source(source, timeout=float(cfg["REQUEST_TIMEOUT"]))  # type: ignore[arg-type]
    except SourceError as exc:
        LOGGER.error("%s", exc)
        return 1

    file_name = cfg["FILE_NAME"] or image.name or config.DEFAULT_FILE_NAME
    source_path = Path(cfg["PATH_OUTPUT"]) / str(file_name)  # type: ignore[arg-type]
    write_source_bytes(image.data, source_path)

    rng = np.random.default_rng(cfg["RANDOM_SEED"])  # type: ignore[arg-type]
    result = generate(image.grid, params, rng=rng, max_workers=int(cfg["THREADS"]))  # type: ignore[arg-type]
    save_generated_maps(result.maps, source_path)

    for name, error in result.failures.items():
        LOGGER.error("Failed to generate %s map: %s", name, error)
    return 1 if result.failures else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    cfg = build_runtime_config(args)
    _configure_logging(Path(cfg["LOG_FILE"]), verbose=args.verbose)  # type: ignore[arg-type]
    LOGGER.info(
        "CLI flags resolved -> normal=%s, height=%s, ao_bias=%s, ao_samples=%s",
        args.normal_strength,
        args.height_strength,
        args.ao_bias,
        args.ao_samples,
    )
    return run(args.source, cfg)


if __name__ == "__main__":
    raise SystemExit(main())
