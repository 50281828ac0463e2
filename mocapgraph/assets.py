"""Locating the assets folder by its placeholder file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

ASSETS_DIR = "assets"
PLACEHOLDER = Path(ASSETS_DIR) / "DO NOT remove this placeholder file"

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]


def locate_assets(start: Optional[PathLike] = None) -> Optional[Path]:
    """Walk up from ``start`` (default: working directory) to find the assets folder."""
    path = (Path.cwd() if start is None else Path(start)).absolute()
    for candidate in (path, *path.parents):
        if (candidate / PLACEHOLDER).exists():
            found = candidate / ASSETS_DIR
            _log.debug("Assets folder path: %s", found)
            return found
    return None


def find_asset(filename: PathLike, start: Optional[PathLike] = None) -> Path:
    """Resolve ``filename`` inside the assets folder; unchanged if there is none."""
    assets = locate_assets(start)
    return Path(filename) if assets is None else assets / filename