"""
PipelineConfig - Settings for a derivative generation run.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ConfigurationError
from .scanner import DEFAULT_POSES


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


@dataclass
class PipelineConfig:
    """
    Configuration for a pipeline run.

    Attributes:
        input_dir: Directory of source images
        output_dir: Directory receiving main/, thumbs/, tiles/ and manifest.yml
        main_size: Longer-edge bound for main images
        thumb_size: Longer-edge bound for thumbnails
        main_pose: Pose used for main images
        thumb_pose: Pose used for thumbnails
        tile_size: Tile edge length for tile pyramids
        tile_format: Tile image format
        tile_overlap: Tile overlap in pixels
        tile_timeout: Seconds before a tiling process is killed (None = no limit)
        vips_command: Tiling executable
        quality: JPEG quality for main images and thumbnails
        max_catalog_id: Ignore catalog ids above this (None or 0 = no limit)
        known_poses: Poses considered normal
        workers: Artifacts processed in parallel within a stage
        limit: Process only the first N catalog ids (testing)
        dry_run: Log what would be written without writing derivatives
    """
    input_dir: str = ''
    output_dir: str = ''
    main_size: int = 2000
    thumb_size: int = 500
    main_pose: str = 'main'
    thumb_pose: str = 'top'
    tile_size: int = 256
    tile_format: str = 'jpg'
    tile_overlap: int = 0
    tile_timeout: Optional[float] = None
    vips_command: str = 'vips'
    quality: int = 85
    max_catalog_id: Optional[int] = 631
    known_poses: List[str] = field(default_factory=lambda: list(DEFAULT_POSES))
    workers: int = 1
    limit: Optional[int] = None
    dry_run: bool = False

    TILE_FORMATS = ('jpg', 'jpeg', 'png', 'webp')

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """
        Create configuration from DERIVGEN_* environment variables.

        Directories are not read from the environment; they come from the
        command line.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        defaults = cls()
        return cls(
            main_size=_env_int('DERIVGEN_MAIN_SIZE', defaults.main_size),
            thumb_size=_env_int('DERIVGEN_THUMB_SIZE', defaults.thumb_size),
            tile_size=_env_int('DERIVGEN_TILE_SIZE', defaults.tile_size),
            tile_format=os.environ.get('DERIVGEN_TILE_FORMAT', defaults.tile_format),
            tile_timeout=_env_float('DERIVGEN_TILE_TIMEOUT', defaults.tile_timeout),
            vips_command=os.environ.get('DERIVGEN_VIPS', defaults.vips_command),
            quality=_env_int('DERIVGEN_QUALITY', defaults.quality),
            max_catalog_id=_env_int('DERIVGEN_MAX_CATALOG_ID', defaults.max_catalog_id),
            workers=_env_int('DERIVGEN_WORKERS', defaults.workers),
        )

    @property
    def has_directories(self) -> bool:
        """True if both input and output directories are set."""
        return bool(self.input_dir and self.input_dir.strip()
                    and self.output_dir and self.output_dir.strip())

    def validate(self) -> List[str]:
        """
        Validate settings.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.has_directories:
            errors.append("must provide input and output directory")
        if self.main_size <= 0:
            errors.append(f"main size must be positive, got {self.main_size}")
        if self.thumb_size <= 0:
            errors.append(f"thumbnail size must be positive, got {self.thumb_size}")
        if self.tile_size <= 0:
            errors.append(f"tile size must be positive, got {self.tile_size}")
        if self.tile_overlap < 0:
            errors.append(f"tile overlap cannot be negative, got {self.tile_overlap}")
        if self.tile_format.lower().lstrip('.') not in self.TILE_FORMATS:
            errors.append(f"unsupported tile format: {self.tile_format}")
        if not 1 <= self.quality <= 100:
            errors.append(f"quality must be between 1 and 100, got {self.quality}")
        if self.workers < 1:
            errors.append(f"workers must be at least 1, got {self.workers}")
        if self.max_catalog_id is not None and self.max_catalog_id < 0:
            errors.append(f"max catalog id cannot be negative, got {self.max_catalog_id}")
        if self.tile_timeout is not None and self.tile_timeout <= 0:
            errors.append(f"tile timeout must be positive, got {self.tile_timeout}")

        return errors
