"""
Reporter - Human-readable summary of a pipeline run.
"""

import sys
from collections import Counter
from typing import Optional, TextIO

from .pipeline import PipelineResult


class Reporter:
    """
    Prints run summaries to a text stream.
    """

    STAGE_LABELS = (
        ('main', 'Main images'),
        ('thumbs', 'Thumbnails'),
        ('tiles', 'Tile sets'),
    )

    def __init__(self, output: Optional[TextIO] = None):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
        """
        self.output = output or sys.stdout

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_duration(self, seconds: float) -> str:
        """Format duration as human-readable string."""
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds / 60:.1f} minutes"
        else:
            return f"{seconds / 3600:.1f} hours"

    def report_summary(self, result: PipelineResult) -> None:
        """Print counts per stage and per pose."""
        self._print("=" * 60)
        self._print("RUN SUMMARY")
        self._print("=" * 60)
        self._print(f"  Catalog ids: {len(result.artifacts):,}")
        self._print(f"  Images:      {sum(len(a.views) for a in result.artifacts):,}")
        if result.manifest_path:
            self._print(f"  Manifest:    {result.manifest_path}")
        self._print()

        poses = Counter(pose for a in result.artifacts for pose in a.poses)
        if poses:
            self._print("  Poses:")
            for pose, count in sorted(poses.items()):
                self._print(f"    {pose:<12} {count:>8,}")
            self._print()

        self._print(f"  {'Stage':<14} {'Written':>9} {'Skipped':>9} {'Errors':>9} {'Time':>16}")
        self._print(f"  {'-' * 14} {'-' * 9} {'-' * 9} {'-' * 9} {'-' * 16}")
        for stage, label in self.STAGE_LABELS:
            stats = result.stage_stats.get(stage)
            if stats is None:
                continue
            self._print(
                f"  {label:<14} {stats.processed:>9,} {stats.skipped:>9,} "
                f"{stats.errors:>9,} {self._format_duration(stats.elapsed_seconds):>16}"
            )

        if result.total_errors:
            self._print()
            self._print(f"  {result.total_errors} errors:")
            for stage, _ in self.STAGE_LABELS:
                stats = result.stage_stats.get(stage)
                if stats is None:
                    continue
                for message in stats.error_details:
                    self._print(f"    {message}")

        self._print("=" * 60)
