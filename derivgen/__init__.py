"""
Catalog derivative generation

Turns a flat directory of catalog photographs named {catalogId}__{pose}.ext
into display images, thumbnails, deep-zoom tile pyramids and a YAML
manifest of image dimensions.

Stages:
    1. Scan: group source images by catalog id
    2. Generate: main images, thumbnails, tile sets
    3. Manifest: write per-catalog dimensions to manifest.yml
"""

__version__ = "1.0.0"

from .errors import (
    DerivgenError,
    ConfigurationError,
    InvalidInputDirectory,
    ImageBackendError,
    TileGenerationError,
)
from .filename_parser import ParsedName, parse_view_name, matches_catalog_id
from .view import View
from .artifact import Artifact
from .image_backend import ImageBackend
from .tiler import Tiler, VipsTiler
from .scanner import CatalogScanner
from .generation_stats import GenerationStats
from .derivative_generator import ResizedImageGenerator, TileSetGenerator
from .manifest import Manifest
from .config import PipelineConfig
from .pipeline import Pipeline, PipelineResult, PipelineState
from .reporter import Reporter

__all__ = [
    "DerivgenError",
    "ConfigurationError",
    "InvalidInputDirectory",
    "ImageBackendError",
    "TileGenerationError",
    "ParsedName",
    "parse_view_name",
    "matches_catalog_id",
    "View",
    "Artifact",
    "ImageBackend",
    "Tiler",
    "VipsTiler",
    "CatalogScanner",
    "GenerationStats",
    "ResizedImageGenerator",
    "TileSetGenerator",
    "Manifest",
    "PipelineConfig",
    "Pipeline",
    "PipelineResult",
    "PipelineState",
    "Reporter",
]
