"""
Pipeline - Runs directory preparation, scan, derivative stages and
manifest write in order.
"""

import enum
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .artifact import Artifact
from .config import PipelineConfig
from .derivative_generator import (
    DerivativeGenerator,
    ResizedImageGenerator,
    TileSetGenerator,
)
from .errors import ConfigurationError, InvalidInputDirectory
from .generation_stats import GenerationStats
from .image_backend import ImageBackend
from .manifest import MANIFEST_FILENAME, Manifest
from .scanner import CatalogScanner
from .tiler import Tiler, VipsTiler


OUTPUT_SUBDIRS = ('main', 'thumbs', 'tiles')


class PipelineState(enum.Enum):
    INITIALIZING = 'initializing'
    DIRECTORIES_PREPARED = 'directories_prepared'
    SCANNED = 'scanned'
    MAIN_GENERATED = 'main_generated'
    THUMBS_GENERATED = 'thumbs_generated'
    TILES_GENERATED = 'tiles_generated'
    MANIFEST_WRITTEN = 'manifest_written'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class PipelineResult:
    """
    Outcome of a pipeline run.

    Attributes:
        state: Final state
        artifacts: Scanned artifacts in catalog id order
        manifest: Manifest that was written
        manifest_path: Where it was written
        stage_stats: Counters per stage name
    """
    state: PipelineState
    artifacts: List[Artifact] = field(default_factory=list)
    manifest: Optional[Manifest] = None
    manifest_path: Optional[str] = None
    stage_stats: Dict[str, GenerationStats] = field(default_factory=dict)

    @property
    def total_errors(self) -> int:
        return sum(stats.errors for stats in self.stage_stats.values())


class Pipeline:
    """
    Drives a full run over one input directory.

    States advance linearly from INITIALIZING to DONE. Only configuration
    and input directory problems stop the run; per-artifact failures are
    logged and counted in the stage stats.
    """

    def __init__(
        self,
        config: PipelineConfig,
        image_backend: Optional[ImageBackend] = None,
        tiler: Optional[Tiler] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize pipeline.

        Args:
            config: Run configuration
            image_backend: Image backend (default: Pillow backend at config.quality)
            tiler: Tiler (default: VipsTiler from config)
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.backend = image_backend or ImageBackend(quality=config.quality, logger=self.logger)
        self.tiler = tiler or VipsTiler(
            command=config.vips_command,
            overlap=config.tile_overlap,
            timeout=config.tile_timeout,
            logger=self.logger,
        )
        self.state = PipelineState.INITIALIZING
        self.artifacts: List[Artifact] = []
        self.stage_stats: Dict[str, GenerationStats] = {}

    @property
    def input_dir(self) -> str:
        return os.path.abspath(self.config.input_dir)

    @property
    def output_dir(self) -> str:
        return os.path.abspath(self.config.output_dir)

    @property
    def manifest_path(self) -> str:
        return os.path.join(self.output_dir, MANIFEST_FILENAME)

    def _advance(self, state: PipelineState) -> None:
        self.logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> PipelineResult:
        """
        Run every stage.

        Raises:
            ConfigurationError: If settings are missing or invalid
            InvalidInputDirectory: If the input path is not a readable directory
        """
        self._check_config()
        self.prepare_directories()
        self.scan()

        self.run_stage(self.main_generator(), PipelineState.MAIN_GENERATED)
        self.run_stage(self.thumbnail_generator(), PipelineState.THUMBS_GENERATED)
        self.run_stage(self.tile_generator(), PipelineState.TILES_GENERATED)

        manifest = self.write_manifest()
        self._advance(PipelineState.DONE)

        return PipelineResult(
            state=self.state,
            artifacts=self.artifacts,
            manifest=manifest,
            manifest_path=self.manifest_path,
            stage_stats=self.stage_stats,
        )

    def _check_config(self) -> None:
        errors = self.config.validate()
        if errors:
            self._advance(PipelineState.FAILED)
            raise ConfigurationError('; '.join(errors))

        if not os.path.isdir(self.config.input_dir):
            self._advance(PipelineState.FAILED)
            raise InvalidInputDirectory(self.config.input_dir)

    def prepare_directories(self) -> None:
        """Create the output subdirectories. Existing content is left alone."""
        for subdir in OUTPUT_SUBDIRS:
            os.makedirs(os.path.join(self.output_dir, subdir), exist_ok=True)
        self._advance(PipelineState.DIRECTORIES_PREPARED)

    def scan(self) -> List[Artifact]:
        """Group input images into artifacts."""
        scanner = CatalogScanner(
            self.backend,
            max_catalog_id=self.config.max_catalog_id,
            known_poses=self.config.known_poses,
            logger=self.logger,
        )
        try:
            self.artifacts = scanner.scan(self.input_dir, limit=self.config.limit)
        except InvalidInputDirectory:
            self._advance(PipelineState.FAILED)
            raise
        self._advance(PipelineState.SCANNED)
        return self.artifacts

    def main_generator(self) -> ResizedImageGenerator:
        return ResizedImageGenerator(
            self.backend,
            self.output_dir,
            required_pose=self.config.main_pose,
            subdir='main',
            max_size=self.config.main_size,
            dry_run=self.config.dry_run,
            logger=self.logger,
        )

    def thumbnail_generator(self) -> ResizedImageGenerator:
        return ResizedImageGenerator(
            self.backend,
            self.output_dir,
            required_pose=self.config.thumb_pose,
            subdir='thumbs',
            max_size=self.config.thumb_size,
            dry_run=self.config.dry_run,
            logger=self.logger,
        )

    def tile_generator(self) -> TileSetGenerator:
        return TileSetGenerator(
            self.tiler,
            self.output_dir,
            tile_size=self.config.tile_size,
            tile_format=self.config.tile_format,
            dry_run=self.config.dry_run,
            logger=self.logger,
        )

    def run_stage(
        self,
        generator: DerivativeGenerator,
        next_state: PipelineState
    ) -> GenerationStats:
        """
        Run one generator over every artifact.

        With workers > 1 artifacts are handed to a bounded thread pool.
        Artifacts are independent within a stage, and each one is handled
        by a single worker.
        """
        if isinstance(generator, TileSetGenerator):
            total = sum(len(set(a.poses)) for a in self.artifacts)
        else:
            total = len(self.artifacts)
        stats = generator.reset_stats(total_to_process=total)

        self.logger.info(f"Generating {generator.stage}: {len(self.artifacts)} catalog ids")

        if self.config.workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                # list() drains the iterator so worker exceptions surface here
                list(executor.map(generator.generate, self.artifacts))
        else:
            for artifact in self.artifacts:
                generator.generate(artifact)

        stats.finish()
        self.stage_stats[generator.stage] = stats
        self.logger.info(
            f"Stage {generator.stage} complete: {stats.processed} written, "
            f"{stats.skipped} skipped, {stats.errors} errors "
            f"({stats.elapsed_seconds:.1f}s)"
        )
        self._advance(next_state)
        return stats

    def write_manifest(self) -> Manifest:
        """Build the manifest from scanned views and write it."""
        manifest = Manifest.from_artifacts(self.artifacts)
        manifest.save(self.manifest_path, logger=self.logger)
        self._advance(PipelineState.MANIFEST_WRITTEN)
        return manifest
