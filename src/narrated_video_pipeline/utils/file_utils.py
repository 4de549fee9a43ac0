"""
File utility functions for the narrated video pipeline.
"""

import errno
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from ..logging_config import get_logger

logger = get_logger(__name__)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to create

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Directory ensured", path=str(path))
    return path


def create_unique_directory(parent: Union[str, Path], prefix: str) -> Path:
    """
    Create a new, uniquely named directory under ``parent``.

    The random suffix comes from ``tempfile.mkdtemp`` so two callers using the
    same prefix never receive the same directory.

    Args:
        parent: Directory that will hold the new directory
        prefix: Leading part of the directory name

    Returns:
        Path to the created directory
    """
    parent = ensure_directory(parent)
    path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(parent)))
    logger.debug("Unique directory created", path=str(path))
    return path


def remove_directory(path: Union[str, Path]) -> bool:
    """
    Recursively remove a directory.

    Args:
        path: Directory to remove

    Returns:
        True if something was removed, False if the directory was already gone

    Raises:
        OSError: If the directory exists but cannot be removed
    """
    path = Path(path)
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        if e.errno == errno.ENOENT:
            return False
        raise
    logger.debug("Directory removed", path=str(path))
    return True


def safe_filename(filename: str, max_length: int = 255) -> str:
    """
    Create a safe filename by removing/replacing problematic characters.

    Args:
        filename: Original filename
        max_length: Maximum length for the filename

    Returns:
        Safe filename string
    """
    safe_chars = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_."
    safe_name = "".join(c if c in safe_chars else "_" for c in filename)

    if len(safe_name) > max_length:
        name, ext = os.path.splitext(safe_name)
        safe_name = name[:max_length - len(ext)] + ext

    return safe_name


def is_within_directory(directory: Union[str, Path], candidate: Union[str, Path]) -> bool:
    """Check that ``candidate`` resolves to a location inside ``directory``."""
    directory = Path(directory).resolve()
    candidate = Path(candidate).resolve()
    return candidate == directory or directory in candidate.parents
