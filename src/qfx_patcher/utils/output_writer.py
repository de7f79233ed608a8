"""Writes patched exports to disk."""

import logging
import os
from typing import Optional, Set

from ..models.core import PatcherConfig


logger = logging.getLogger(__name__)

# Replaced on every platform
PATH_SEPARATORS = ('/', '\\')


def safe_file_name(output_name: str) -> str:
    """Flatten an output identifier into a single path component.

    The institution part of the identifier comes from the export itself, so
    path separators in it are replaced rather than followed.
    """
    name = output_name
    for separator in PATH_SEPARATORS:
        name = name.replace(separator, '_')
    if name != output_name:
        logger.warning(f"Output name '{output_name}' contains path separators, using '{name}'")
    return name


class OutputWriter:
    """Places patched files next to their source or in an output directory"""

    def __init__(self, config: PatcherConfig):
        self.config = config
        self._written: Set[str] = set()

    def output_path(self, source_path: str, output_name: str) -> str:
        """Full path for an output identifier, keeping the source extension"""
        directory = self.config.output_directory or os.path.dirname(source_path) or '.'
        _, ext = os.path.splitext(source_path)
        return os.path.join(
            os.path.expanduser(directory),
            f"{safe_file_name(output_name)}{self.config.output_suffix}{ext or '.qfx'}"
        )

    def was_written(self, path: str) -> bool:
        """True if this writer already produced ``path`` during the run"""
        return os.path.abspath(path) in self._written

    def write(self, path: str, text: str, encoding: Optional[str] = None) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, 'w', encoding=encoding or 'utf-8', newline='') as f:
            f.write(text)

        self._written.add(os.path.abspath(path))
        logger.info(f"Wrote {path}")
        return path
