"""
Tiler - Deep-zoom tile pyramid generation.

The pipeline only depends on the Tiler interface. VipsTiler runs the
external ``vips dzsave`` command.
"""

import abc
import logging
import os
import shutil
from typing import Optional

import sh

from .errors import TileGenerationError


class Tiler(abc.ABC):
    """
    Interface for producing a tile pyramid from one source image.
    """

    @abc.abstractmethod
    def make_tiles(
        self,
        source_path: str,
        output_dir: str,
        tile_size: int = 256,
        tile_format: str = 'jpg',
        overwrite: bool = True
    ) -> None:
        """
        Build a tile pyramid for source_path inside output_dir.

        Args:
            source_path: Absolute path of the source image
            output_dir: Directory that receives the pyramid
            tile_size: Edge length of each tile in pixels
            tile_format: Tile file format (extension without dot)
            overwrite: Replace any existing pyramid in output_dir

        Raises:
            TileGenerationError: If the pyramid could not be built
        """


class VipsTiler(Tiler):
    """
    Tiler backed by the libvips command line tool.

    Produces ``{output_dir}/{name}.dzi`` and ``{output_dir}/{name}_files/``,
    where name is the last component of output_dir.
    """

    def __init__(
        self,
        command: str = 'vips',
        overlap: int = 0,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize tiler.

        Args:
            command: Name or path of the vips executable
            overlap: Tile overlap in pixels
            timeout: Seconds before a single invocation is killed (None = no limit)
            logger: Optional logger instance
        """
        self.command = command
        self.overlap = overlap
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._vips = None

    def _get_command(self) -> sh.Command:
        """Resolve the vips executable on first use."""
        if self._vips is None:
            try:
                self._vips = sh.Command(self.command)
            except sh.CommandNotFound as e:
                raise TileGenerationError(f"Tiling command not found: {self.command}") from e
        return self._vips

    def build_args(
        self,
        source_path: str,
        output_dir: str,
        tile_size: int,
        tile_format: str
    ) -> list:
        """Arguments passed to the vips executable."""
        output_base = os.path.join(output_dir, os.path.basename(output_dir.rstrip(os.sep)))
        return [
            'dzsave',
            source_path,
            output_base,
            '--tile-size', str(tile_size),
            '--overlap', str(self.overlap),
            '--suffix', f".{tile_format.lstrip('.')}",
        ]

    def make_tiles(
        self,
        source_path: str,
        output_dir: str,
        tile_size: int = 256,
        tile_format: str = 'jpg',
        overwrite: bool = True
    ) -> None:
        vips = self._get_command()

        if overwrite and os.path.isdir(output_dir):
            shutil.rmtree(output_dir)
        os.makedirs(output_dir, exist_ok=True)

        args = self.build_args(source_path, output_dir, tile_size, tile_format)
        self.logger.debug(f"Running: {self.command} {' '.join(args)}")

        kwargs = {}
        if self.timeout:
            kwargs['_timeout'] = self.timeout

        try:
            vips(*args, **kwargs)
        except sh.TimeoutException as e:
            raise TileGenerationError(
                f"Tiling timed out after {self.timeout}s: {source_path}"
            ) from e
        except sh.ErrorReturnCode as e:
            stderr = e.stderr.decode('utf-8', errors='replace').strip()
            raise TileGenerationError(
                f"Tiling failed for {source_path} (exit {getattr(e, 'exit_code', '?')}): {stderr}"
            ) from e
