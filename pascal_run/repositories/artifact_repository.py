from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pascal_run.domain.models import Platform, SourceFile

logger = logging.getLogger(__name__)

# Byproducts the compiler leaves next to the source
INTERMEDIATE_SUFFIXES = (".o", ".ppu", ".compiled")


@dataclass
class ArtifactRepository:
    """
    Repository pattern: encapsulates where build outputs live and how they are removed.
    """
    platform: Platform

    def executable_path(self, source: SourceFile) -> Path:
        suffix = ".exe" if self.platform is Platform.WINDOWS else ""
        return source.directory / f"{source.base_name}{suffix}"

    def intermediate_paths(self, source: SourceFile) -> list[Path]:
        return [source.directory / f"{source.base_name}{ext}" for ext in INTERMEDIATE_SUFFIXES]

    @staticmethod
    def is_writable_dir(directory: Path) -> bool:
        return directory.is_dir() and os.access(directory, os.W_OK)

    @staticmethod
    def remove_stale_executable(exe_path: Path) -> bool:
        """Single delete attempt. True when nothing is left at exe_path."""
        try:
            exe_path.unlink()
            logger.debug("Removed stale executable %s", exe_path)
        except FileNotFoundError:
            pass
        return not exe_path.exists()

    def delete_intermediates(self, source: SourceFile) -> list[Path]:
        """Delete whatever intermediates exist. Missing files are not an error."""
        deleted: list[Path] = []
        for path in self.intermediate_paths(source):
            if not path.exists():
                continue
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Failed to delete %s: %s", path, e)
                continue
            logger.info("Cleaned up: %s", path)
            deleted.append(path)
        return deleted
