"""
ImageBackend - Reads image dimensions and writes resized JPEG derivatives.
"""

import logging
import os
import tempfile
from typing import Optional, Tuple

from PIL import Image

from .errors import ImageBackendError


# Source scans can exceed Pillow's decompression bomb limit
Image.MAX_IMAGE_PIXELS = None


class ImageBackend:
    """
    Image decode/resize/encode using Pillow.
    """

    def __init__(
        self,
        quality: int = 85,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize image backend.

        Args:
            quality: JPEG quality for output (default: 85)
            logger: Optional logger instance
        """
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def read_size(self, path: str) -> Tuple[int, int]:
        """
        Read pixel dimensions of an image without decoding it.

        Args:
            path: Image file path

        Returns:
            Tuple of (width, height)
        """
        try:
            with Image.open(path) as img:
                return img.size
        except Exception as e:
            raise ImageBackendError(f"Cannot read {path}: {e}") from e

    @staticmethod
    def target_size(size: Tuple[int, int], max_size: int) -> Tuple[int, int]:
        """
        Compute the bounded output size for a source size.

        The longer edge is brought down to max_size with the aspect ratio
        kept. Sources that already fit are returned unchanged.

        Args:
            size: Source (width, height)
            max_size: Maximum length of the longer edge

        Returns:
            Tuple of (width, height)
        """
        width, height = size
        longest = max(width, height)
        if longest <= max_size:
            return (width, height)

        # Integer arithmetic keeps the longer edge exactly at max_size
        return (
            max(1, width * max_size // longest),
            max(1, height * max_size // longest),
        )

    def resize_to_file(
        self,
        source_path: str,
        dest_path: str,
        max_size: int
    ) -> Tuple[int, int]:
        """
        Write a JPEG copy of source_path bounded to max_size.

        The file is written to a temporary name in the destination directory
        and moved into place, so a failed write never leaves a partial file.

        Args:
            source_path: Original image
            dest_path: Output JPEG path
            max_size: Maximum length of the longer edge

        Returns:
            Tuple of (width, height) actually written
        """
        dest_dir = os.path.dirname(dest_path) or '.'
        tmp_path = None
        try:
            with Image.open(source_path) as img:
                img = self._convert_color_mode(img)
                new_size = self.target_size(img.size, max_size)
                if new_size != img.size:
                    img = img.resize(new_size, Image.Resampling.LANCZOS)

                fd, tmp_path = tempfile.mkstemp(suffix='.jpg', dir=dest_dir)
                with os.fdopen(fd, 'wb') as f:
                    img.save(f, format='JPEG', quality=self.quality, optimize=True)

            os.replace(tmp_path, dest_path)
            tmp_path = None
            return new_size

        except Exception as e:
            self.logger.debug(f"Resize failed for {source_path}: {e}")
            raise ImageBackendError(f"Cannot resize {source_path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to RGB, flattening transparency onto white."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img
