"""I/O helpers for persisting source images and generated maps."""
from __future__ import annotations

import io
import logging
import os
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional

from .config import MAP_SUFFIXES
from .pixel_grid import PixelGrid

LOGGER = logging.getLogger("albedo_maps.io")

MAP_EXTENSION = ".png"

_LOCK_REGISTRY: dict[Path, threading.Lock] = {}
_LOCK_REGISTRY_GUARD = threading.Lock()


def ensure_dir(path: Path) -> Path:
    """Ensure that *path* exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def _thread_lock_for(target: Path) -> threading.Lock:
    with _LOCK_REGISTRY_GUARD:
        return _LOCK_REGISTRY.setdefault(target, threading.Lock())


@contextmanager
def file_lock(path: Path, *, poll_interval: float = 0.05) -> Iterator[None]:
    """Hold exclusive write access to the map or source image at *path*.

    Threads of this process serialise on an in-memory lock; other processes
    (for example two CLI runs sharing an output directory) serialise on a
    ``<name>.lock`` sidecar created with ``O_EXCL``.
    """

    sidecar = path.with_name(path.name + ".lock")
    with _thread_lock_for(sidecar):
        while True:
            try:
                os.close(os.open(sidecar, os.O_CREAT | os.O_EXCL | os.O_WRONLY))
                break
            except FileExistsError:
                time.sleep(poll_interval)
        try:
            yield
        finally:
            sidecar.unlink(missing_ok=True)


def _replace_atomically(destination: Path, payload: bytes) -> Path:
    temp_dir = ensure_dir(destination.parent / ".tmp_maps")
    temp_path = temp_dir / f"{destination.name}.tmp"
    with file_lock(destination):
        temp_path.write_bytes(payload)
        os.replace(temp_path, destination)
    return destination


def atomic_save(grid: PixelGrid, path: Path | str) -> Path:
    """Encode *grid* as PNG and write it to *path* through a temporary file."""

    destination = Path(path)
    ensure_dir(destination.parent)
    buffer = io.BytesIO()
    grid.to_image().save(buffer, format="PNG")
    return _replace_atomically(destination, buffer.getvalue())


def write_source_bytes(data: bytes, path: Path | str) -> Path:
    """Store the raw bytes of a downloaded source image at *path*."""

    destination = Path(path)
    ensure_dir(destination.parent)
    _replace_atomically(destination, data)
    LOGGER.info("Image saved to: %s", destination)
    return destination


def map_output_path(source_path: Path | str, suffix: str) -> Path:
    """Return ``<dir>/<stem><suffix>.png`` for the map derived from *source_path*."""

    source = Path(source_path)
    return source.with_name(f"{source.stem}{suffix}{MAP_EXTENSION}")


def save_generated_maps(
    maps: Mapping[str, PixelGrid],
    source_path: Path | str,
    *,
    suffixes: Optional[Mapping[str, str]] = None,
) -> Dict[str, Path]:
    """Persist every grid in *maps* next to *source_path* and return the paths."""

    suffixes = suffixes or MAP_SUFFIXES
    written: Dict[str, Path] = {}
    for name, grid in maps.items():
        destination = atomic_save(grid, map_output_path(source_path, suffixes[name]))
        LOGGER.info("Generated map saved to: %s", destination)
        written[name] = destination
    return written
