"""
Filename parsing for catalog source images.

Source files are named ``{catalogId}__{pose}.ext`` or
``{catalogId}__{pose}__{modifier}.ext``.
"""

import os
import re
from typing import NamedTuple, Optional


# Captures: (catalog_id, pose, remainder before the extension)
VIEW_NAME_PATTERN = re.compile(r'^(\d+)__([a-z]+)([^.]*)', re.IGNORECASE)


class ParsedName(NamedTuple):
    """Result of parsing a source filename."""
    catalog_id: int
    pose: str
    modifier: Optional[str] = None


def parse_view_name(path: str) -> Optional[ParsedName]:
    """
    Parse the catalog id and pose from a source path.

    Only the basename is considered. The pose is the run of letters after
    the first ``__`` and is lower-cased; anything after a second ``__`` is
    the modifier.

    Args:
        path: Path or filename of a source image

    Returns:
        ParsedName, or None if the name does not follow the grammar
    """
    filename = os.path.basename(path)
    match = VIEW_NAME_PATTERN.match(filename)
    if not match:
        return None

    catalog_id, pose, remainder = match.groups()
    if int(catalog_id) <= 0:
        return None

    modifier = None
    if '__' in remainder:
        modifier = remainder.split('__', 1)[1] or None

    return ParsedName(int(catalog_id), pose.lower(), modifier)


def matches_catalog_id(path: str, catalog_id: int) -> bool:
    """True if the basename starts with ``{catalog_id}__``."""
    filename = os.path.basename(path).lower()
    return filename.startswith(f"{catalog_id}__")
