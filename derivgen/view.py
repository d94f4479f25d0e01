"""
View - One parsed source image of a catalog item.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class View:
    """
    A single source photograph of a catalog item.

    Attributes:
        pose: Lower-cased view angle token (e.g., 'main', 'top', 'profile')
        source_path: Absolute, resolved path to the original file
        width: Pixel width read from the source
        height: Pixel height read from the source
    """
    pose: str
    source_path: str
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"View dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def size(self) -> tuple:
        """(width, height) tuple."""
        return (self.width, self.height)

    def to_manifest_dict(self) -> dict:
        """Manifest form of the view. The source path is left out."""
        return {
            'face': self.pose,
            'width': self.width,
            'height': self.height,
        }

    def format_status(self) -> str:
        """Human-readable one-liner, e.g. "main 3000x2000 (7__main.tif)"."""
        filename = os.path.basename(self.source_path)
        return f"{self.pose} {self.width}x{self.height} ({filename})"
