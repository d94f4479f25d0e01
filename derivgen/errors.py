"""
Exception types raised by derivgen.
"""


class DerivgenError(Exception):
    """Base class for derivgen errors."""


class ConfigurationError(DerivgenError):
    """Input or output directory missing, or a setting is invalid."""


class InvalidInputDirectory(DerivgenError):
    """Input path is not a readable directory."""

    def __init__(self, path: str):
        super().__init__(f"invalid directory: {path}")
        self.path = path


class ImageBackendError(DerivgenError):
    """An image could not be read, resized or written."""


class TileGenerationError(DerivgenError):
    """The tiling tool failed, timed out or could not be started."""
