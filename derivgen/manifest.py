"""
Manifest - Per-catalog image dimensions, written as YAML.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from .artifact import Artifact


MANIFEST_FILENAME = 'manifest.yml'


@dataclass
class Manifest:
    """
    Ordered manifest entries, one per scanned artifact.

    Each entry has the form ``{cat: int, images: [{face, width, height}]}``.
    Entries never carry source paths.

    Attributes:
        entries: Manifest entries in ascending catalog id order
    """
    entries: List[dict] = field(default_factory=list)

    @classmethod
    def from_artifacts(cls, artifacts: Iterable[Artifact]) -> 'Manifest':
        """
        Build a manifest from scanned artifacts.

        Entries are sorted by catalog id, so the order does not depend on
        the order artifacts finished processing.
        """
        ordered = sorted(artifacts, key=lambda a: a.catalog_id)
        return cls(entries=[artifact.to_manifest_entry() for artifact in ordered])

    @property
    def total_artifacts(self) -> int:
        """Number of catalog ids in the manifest."""
        return len(self.entries)

    @property
    def total_views(self) -> int:
        """Number of images across all catalog ids."""
        return sum(len(entry['images']) for entry in self.entries)

    @property
    def catalog_ids(self) -> List[int]:
        return [entry['cat'] for entry in self.entries]

    def get_entry(self, catalog_id: int) -> Optional[dict]:
        """Get the entry for a catalog id, or None."""
        for entry in self.entries:
            if entry['cat'] == catalog_id:
                return entry
        return None

    def to_list(self) -> List[dict]:
        """Plain list form, suitable for serialization."""
        return [
            {
                'cat': entry['cat'],
                'images': [
                    {
                        'face': image['face'],
                        'width': image['width'],
                        'height': image['height'],
                    }
                    for image in entry['images']
                ],
            }
            for entry in self.entries
        ]

    def to_yaml(self) -> str:
        """Serialize to a YAML document."""
        return yaml.safe_dump(
            self.to_list(),
            default_flow_style=False,
            sort_keys=False,
        )

    @classmethod
    def from_list(cls, data: Optional[list]) -> 'Manifest':
        """Create from the plain list form."""
        return cls(entries=[
            {
                'cat': int(entry['cat']),
                'images': [
                    {
                        'face': str(image['face']),
                        'width': int(image['width']),
                        'height': int(image['height']),
                    }
                    for image in entry.get('images') or []
                ],
            }
            for entry in data or []
        ])

    def save(self, filepath: str, logger: Optional[logging.Logger] = None) -> None:
        """Save manifest to a YAML file."""
        logger = logger or logging.getLogger(__name__)
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_yaml())

        logger.info(
            f"Manifest saved: {path} ({self.total_artifacts} catalog ids, "
            f"{self.total_views} images)"
        )

    @classmethod
    def load(cls, filepath: str) -> 'Manifest':
        """Load manifest from a YAML file."""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return cls.from_list(data)
