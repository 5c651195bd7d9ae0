"""
Recursive discovery of Terraform files under a root path.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Union

from .extractor import extract_file
from .models import ScanResult


logger = logging.getLogger(__name__)

CONFIG_EXTENSION = ".tf"


class ScanError(Exception):
    """Raised when the tree cannot be walked or a file cannot be read."""


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_config_files(
    root: Union[str, Path], extension: str = CONFIG_EXTENSION
) -> Iterator[Path]:
    """Yield files under ``root`` ending in ``extension``.

    Directories whose name starts with ``.`` are pruned along with their
    whole subtree. Listing errors are raised, not skipped.
    """
    root = Path(root)
    if root.is_file():
        if root.suffix == extension:
            yield root
        return

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix == extension and not path.is_dir():
                yield path


def scan_tree(root: Union[str, Path], extension: str = CONFIG_EXTENSION) -> ScanResult:
    """Extract declarations from every config file under ``root``."""
    result = ScanResult()
    try:
        for path in iter_config_files(root, extension):
            logger.debug("Scanning %s", path)
            for declaration in extract_file(path):
                result.add(declaration)
    except OSError as e:
        raise ScanError(str(e)) from e

    logger.info(
        "Collected %d modules and %d providers under %s",
        len(result.modules),
        len(result.providers),
        root,
    )
    return result
