"""
Artifact - All source views of one catalog item.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from .view import View


@dataclass
class Artifact:
    """
    Source views grouped under one catalog id.

    Attributes:
        catalog_id: Positive catalog id
        views: Views in directory scan order
        completed_stages: Names of derivative stages that have run
    """
    catalog_id: int
    views: List[View] = field(default_factory=list)
    completed_stages: Set[str] = field(default_factory=set)

    def add_view(self, view: View) -> None:
        """Append a view. Only used while scanning."""
        self.views.append(view)

    def view_for(self, pose: str) -> Optional[View]:
        """
        Get the first view with the given pose.

        Args:
            pose: Pose name, compared case-insensitively

        Returns:
            The view, or None if the artifact has no such pose
        """
        pose = pose.lower()
        for view in self.views:
            if view.pose == pose:
                return view
        return None

    def has_pose(self, pose: str) -> bool:
        """Check if any view has the given pose."""
        return self.view_for(pose) is not None

    @property
    def poses(self) -> List[str]:
        """Poses in view order, duplicates included."""
        return [view.pose for view in self.views]

    def mark_stage(self, stage: str) -> None:
        """Record that a derivative stage has run for this artifact."""
        self.completed_stages.add(stage)

    def to_manifest_entry(self) -> dict:
        """Manifest entry: catalog id and per-view dimensions."""
        return {
            'cat': self.catalog_id,
            'images': [view.to_manifest_dict() for view in self.views],
        }
