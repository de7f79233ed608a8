"""Candidate file enumeration."""

import logging
import os
from typing import List, Tuple

from ..models.core import PatcherConfig


logger = logging.getLogger(__name__)


class FileScanner:
    """Lists export files in a directory and filters out non-candidates"""

    def __init__(self, config: PatcherConfig):
        self.config = config
        self.extensions = {ext.lower() for ext in config.extensions}
        self.processed_marker = config.processed_marker.lower()

    def is_candidate(self, file_path: str) -> bool:
        """Check extension and skip files already carrying the processed marker"""
        name = os.path.basename(file_path).lower()
        _, ext = os.path.splitext(name)
        if ext not in self.extensions:
            return False
        if self.processed_marker and self.processed_marker in name:
            return False
        return True

    def scan_directory(self, directory: str, recursive: bool = False) -> Tuple[List[str], List[str]]:
        """
        Scan directory for export files

        Args:
            directory: Directory path to scan
            recursive: Whether to scan subdirectories recursively

        Returns:
            Tuple of (candidate paths, skipped paths), both sorted
        """
        if not os.path.exists(directory):
            raise FileNotFoundError(f"Directory not found: {directory}")

        if not os.path.isdir(directory):
            raise ValueError(f"Path is not a directory: {directory}")

        found_files = []
        if recursive:
            for root, dirs, files in os.walk(directory):
                found_files.extend(os.path.join(root, file) for file in files)
        else:
            for item in os.listdir(directory):
                item_path = os.path.join(directory, item)
                if os.path.isfile(item_path):
                    found_files.append(item_path)

        return self.partition(sorted(found_files))

    def partition(self, file_paths: List[str]) -> Tuple[List[str], List[str]]:
        """Split paths into candidates and skipped files, keeping order"""
        candidates, skipped = [], []
        for file_path in file_paths:
            if self.is_candidate(file_path):
                candidates.append(file_path)
            else:
                logger.info(f"SKIPPING: {os.path.basename(file_path)}")
                skipped.append(file_path)
        return candidates, skipped
