"""
Derivative generators - Produce main images, thumbnails and tile sets
for artifacts.
"""

import abc
import logging
import os
from typing import Optional

from .artifact import Artifact
from .errors import DerivgenError
from .generation_stats import GenerationStats
from .image_backend import ImageBackend
from .tiler import Tiler


class DerivativeGenerator(abc.ABC):
    """
    Base class for a derivative stage.

    Subclasses implement generate(), which handles one artifact and must
    not raise for per-artifact failures.
    """

    stage = ''

    def __init__(
        self,
        output_dir: str,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.output_dir = os.path.abspath(output_dir)
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)
        self.stats = GenerationStats(stage=self.stage)

    def reset_stats(self, total_to_process: int = 0) -> GenerationStats:
        """Start a fresh set of counters for a new pass."""
        self.stats = GenerationStats(stage=self.stage, total_to_process=total_to_process)
        return self.stats

    @abc.abstractmethod
    def generate(self, artifact: Artifact) -> bool:
        """
        Produce this stage's derivatives for one artifact.

        Failures for the artifact are logged and counted in self.stats
        rather than raised.

        Args:
            artifact: Artifact to process

        Returns:
            True if the stage completed for the artifact
        """


class ResizedImageGenerator(DerivativeGenerator):
    """
    Writes one bounded JPEG per artifact from the view with a given pose.

    Used for both the main image ('main' pose, 2000px, main/) and the
    thumbnail ('top' pose, 500px, thumbs/).
    """

    def __init__(
        self,
        image_backend: ImageBackend,
        output_dir: str,
        required_pose: str,
        subdir: str,
        max_size: int,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            image_backend: Backend used to resize and encode
            output_dir: Root output directory
            required_pose: Pose whose view is used as the source
            subdir: Subdirectory of output_dir that receives the files
            max_size: Maximum length of the longer edge
            dry_run: If True, log what would be written without writing
            logger: Optional logger instance
        """
        self.stage = subdir
        super().__init__(output_dir, dry_run=dry_run, logger=logger)
        self.backend = image_backend
        self.required_pose = required_pose.lower()
        self.subdir = subdir
        self.max_size = max_size

    def output_path(self, artifact: Artifact) -> str:
        """Absolute path of the derivative for an artifact."""
        return os.path.join(self.output_dir, self.subdir, f"{artifact.catalog_id}.jpg")

    def generate(self, artifact: Artifact) -> bool:
        """
        Write the derivative for one artifact.

        Returns:
            True if a file was written (or would be, in dry-run mode)
        """
        view = artifact.view_for(self.required_pose)
        if view is None:
            self.logger.debug(
                f"Catalog {artifact.catalog_id}: no '{self.required_pose}' view, "
                f"skipping {self.subdir}"
            )
            self.stats.record_skipped()
            return False

        dest = self.output_path(artifact)

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Would write: {dest}")
            self.stats.record_processed()
            artifact.mark_stage(self.stage)
            return True

        try:
            width, height = self.backend.resize_to_file(view.source_path, dest, self.max_size)
        except DerivgenError as e:
            error_msg = f"Error writing {self.subdir} for catalog {artifact.catalog_id}: {e}"
            self.logger.error(error_msg)
            self.stats.record_error(error_msg)
            return False

        self.stats.record_processed()
        artifact.mark_stage(self.stage)
        self.logger.debug(f"Wrote {dest} ({width}x{height})")
        return True


class TileSetGenerator(DerivativeGenerator):
    """
    Builds a tile pyramid for every view of an artifact.

    Output goes to ``{output_dir}/tiles/{catalog_id}/{pose}``.
    """

    stage = 'tiles'

    def __init__(
        self,
        tiler: Tiler,
        output_dir: str,
        tile_size: int = 256,
        tile_format: str = 'jpg',
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            tiler: Tiler that builds each pyramid
            output_dir: Root output directory
            tile_size: Tile edge length in pixels
            tile_format: Tile image format
            dry_run: If True, log what would be built without building
            logger: Optional logger instance
        """
        super().__init__(output_dir, dry_run=dry_run, logger=logger)
        self.tiler = tiler
        self.tile_size = tile_size
        self.tile_format = tile_format

    def output_dir_for(self, artifact: Artifact, pose: str) -> str:
        """Absolute tile directory for one pose of an artifact."""
        return os.path.join(self.output_dir, 'tiles', str(artifact.catalog_id), pose)

    def generate(self, artifact: Artifact) -> bool:
        """
        Tile every view of one artifact.

        Returns:
            True if every view was tiled
        """
        all_ok = True
        seen_poses = set()
        for view in artifact.views:
            # Later views with a repeated pose would land in the same directory
            if view.pose in seen_poses:
                self.logger.debug(
                    f"Catalog {artifact.catalog_id}: duplicate '{view.pose}' view, "
                    f"tiling first only"
                )
                continue
            seen_poses.add(view.pose)

            dest = self.output_dir_for(artifact, view.pose)

            if self.dry_run:
                self.logger.info(f"[DRY RUN] Would tile: {view.source_path} -> {dest}")
                self.stats.record_processed()
                continue

            try:
                self.tiler.make_tiles(
                    view.source_path,
                    dest,
                    tile_size=self.tile_size,
                    tile_format=self.tile_format,
                    overwrite=True,
                )
            except (DerivgenError, OSError) as e:
                error_msg = f"Error tiling catalog {artifact.catalog_id} '{view.pose}': {e}"
                self.logger.error(error_msg)
                self.stats.record_error(error_msg)
                all_ok = False
                continue

            self.stats.record_processed()
            self.logger.debug(f"Tiled {view.format_status()} -> {dest}")

        artifact.mark_stage(self.stage)
        return all_ok
