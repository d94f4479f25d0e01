"""
CatalogScanner - Groups source images in a directory into artifacts.
"""

import logging
import os
import time
from typing import Dict, Iterable, List, Optional

from .artifact import Artifact
from .errors import DerivgenError, InvalidInputDirectory
from .filename_parser import matches_catalog_id, parse_view_name
from .image_backend import ImageBackend
from .view import View


DEFAULT_POSES = ('main', 'top', 'bottom', 'profile')


class CatalogScanner:
    """
    Scans a flat input directory and produces one Artifact per catalog id.

    Ids are taken from the filenames actually present. max_catalog_id is
    an optional sanity guard, not a loop bound.
    """

    def __init__(
        self,
        image_backend: ImageBackend,
        max_catalog_id: Optional[int] = None,
        known_poses: Iterable[str] = DEFAULT_POSES,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize scanner.

        Args:
            image_backend: Backend used to read source dimensions
            max_catalog_id: Ignore ids above this value (None = no limit)
            known_poses: Poses considered normal; others are accepted but logged
            logger: Optional logger instance
        """
        self.backend = image_backend
        self.max_catalog_id = max_catalog_id or None
        self.known_poses = {p.lower() for p in known_poses}
        self.logger = logger or logging.getLogger(__name__)
        self.scan_duration_seconds = 0.0
        self.skipped_files: List[str] = []

    def scan(self, input_dir: str, limit: Optional[int] = None) -> List[Artifact]:
        """
        Scan input_dir and group its images by catalog id.

        Args:
            input_dir: Directory holding the source images
            limit: Optional limit on number of artifacts (for testing)

        Returns:
            Artifacts in ascending catalog id order
        """
        start_time = time.time()
        self.skipped_files = []
        filenames = self._list_files(input_dir)

        artifacts: Dict[int, Artifact] = {}
        for filename in filenames:
            parsed = parse_view_name(filename)
            if parsed is None:
                self._skip(filename, "name does not match '{id}__{pose}.ext'")
                continue

            if self.max_catalog_id and parsed.catalog_id > self.max_catalog_id:
                self._skip(filename, f"catalog id above {self.max_catalog_id}")
                continue

            view = self._make_view(input_dir, filename, parsed.pose)
            if view is None:
                continue

            artifact = artifacts.get(parsed.catalog_id)
            if artifact is None:
                artifact = artifacts[parsed.catalog_id] = Artifact(catalog_id=parsed.catalog_id)
            artifact.add_view(view)

        result = [artifacts[catalog_id] for catalog_id in sorted(artifacts)]
        if limit and len(result) > limit:
            self.logger.info(f"Limit of {limit} reached, keeping first {limit} catalog ids")
            result = result[:limit]

        self._finish(result, start_time)
        return result

    def scan_range(self, input_dir: str, first: int, last: int) -> List[Artifact]:
        """
        Scan an inclusive catalog id range.

        For each id, every file whose basename starts with ``{id}__`` is
        collected. Ids without files produce no artifact.

        Args:
            input_dir: Directory holding the source images
            first: First catalog id
            last: Last catalog id, inclusive

        Returns:
            Artifacts in ascending catalog id order
        """
        start_time = time.time()
        self.skipped_files = []
        filenames = self._list_files(input_dir)

        result = []
        for catalog_id in range(first, last + 1):
            artifact = None
            for filename in filenames:
                if not matches_catalog_id(filename, catalog_id):
                    continue

                parsed = parse_view_name(filename)
                if parsed is None:
                    self._skip(filename, "no '__{pose}' after catalog id")
                    continue

                view = self._make_view(input_dir, filename, parsed.pose)
                if view is None:
                    continue

                if artifact is None:
                    artifact = Artifact(catalog_id=catalog_id)
                artifact.add_view(view)

            if artifact is not None:
                result.append(artifact)

        self._finish(result, start_time)
        return result

    def _list_files(self, input_dir: str) -> List[str]:
        """Sorted names of regular files directly inside input_dir."""
        if not os.path.isdir(input_dir) or not os.access(input_dir, os.R_OK | os.X_OK):
            raise InvalidInputDirectory(input_dir)

        try:
            with os.scandir(input_dir) as entries:
                return sorted(
                    entry.name for entry in entries
                    if entry.is_file() and not entry.name.startswith('.')
                )
        except OSError as e:
            raise InvalidInputDirectory(input_dir) from e

    def _make_view(self, input_dir: str, filename: str, pose: str) -> Optional[View]:
        """Build a View, or None if the file cannot be read."""
        source_path = os.path.realpath(os.path.join(input_dir, filename))
        try:
            width, height = self.backend.read_size(source_path)
        except DerivgenError as e:
            self._skip(filename, str(e))
            return None

        if pose not in self.known_poses:
            self.logger.debug(f"  {filename}: unrecognized pose '{pose}', keeping it")

        return View(pose=pose, source_path=source_path, width=width, height=height)

    def _skip(self, filename: str, reason: str) -> None:
        self.skipped_files.append(filename)
        self.logger.warning(f"  Skipping {filename}: {reason}")

    def _finish(self, artifacts: List[Artifact], start_time: float) -> None:
        self.scan_duration_seconds = time.time() - start_time
        total_views = sum(len(artifact.views) for artifact in artifacts)

        self.logger.info(
            f"Scan complete: {len(artifacts)} catalog ids, {total_views} images, "
            f"{len(self.skipped_files)} skipped ({self.scan_duration_seconds:.1f}s)"
        )
