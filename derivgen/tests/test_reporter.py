"""Tests for Reporter class."""

import io

import pytest

from derivgen.generation_stats import GenerationStats
from derivgen.manifest import Manifest
from derivgen.pipeline import PipelineResult, PipelineState
from derivgen.reporter import Reporter


class TestReporter:
    """Tests for Reporter class."""

    @pytest.fixture
    def result(self, sample_artifacts):
        tiles = GenerationStats(stage='tiles', processed=2)
        tiles.record_error("Error tiling catalog 12 'bottom': exit 1")
        return PipelineResult(
            state=PipelineState.DONE,
            artifacts=sorted(sample_artifacts, key=lambda a: a.catalog_id),
            manifest=Manifest.from_artifacts(sample_artifacts),
            manifest_path='/out/manifest.yml',
            stage_stats={
                'main': GenerationStats(stage='main', processed=1, skipped=1),
                'thumbs': GenerationStats(stage='thumbs', processed=1, skipped=1),
                'tiles': tiles,
            },
        )

    def test_init_default_output(self):
        """Test default output is stdout."""
        import sys
        reporter = Reporter()
        assert reporter.output == sys.stdout

    def test_init_output_only(self):
        """Test the reporter takes just an output stream."""
        output = io.StringIO()
        reporter = Reporter(output)

        assert reporter.output is output
        assert not hasattr(reporter, 'logger')

    def test_format_duration(self):
        """Test duration formatting."""
        reporter = Reporter()

        assert reporter._format_duration(30) == '30.0 seconds'
        assert reporter._format_duration(90) == '1.5 minutes'
        assert reporter._format_duration(3600) == '1.0 hours'

    def test_report_summary(self, result):
        """Test summary report generation."""
        output = io.StringIO()

        Reporter(output=output).report_summary(result)

        text = output.getvalue()
        assert 'RUN SUMMARY' in text
        assert 'Catalog ids: 2' in text
        assert 'Images:      3' in text
        assert '/out/manifest.yml' in text
        assert 'Main images' in text
        assert 'Tile sets' in text

    def test_report_summary_lists_poses(self, result):
        """Test pose counts are shown."""
        output = io.StringIO()

        Reporter(output=output).report_summary(result)

        lines = [line.split() for line in output.getvalue().splitlines()]
        assert ['bottom', '1'] in lines
        assert ['main', '1'] in lines

    def test_report_summary_lists_errors(self, result):
        """Test error messages are printed."""
        output = io.StringIO()

        Reporter(output=output).report_summary(result)

        assert "1 errors:" in output.getvalue()
        assert "Error tiling catalog 12 'bottom'" in output.getvalue()

    def test_report_summary_empty(self):
        """Test a run with nothing scanned."""
        output = io.StringIO()

        Reporter(output=output).report_summary(PipelineResult(state=PipelineState.DONE))

        assert 'Catalog ids: 0' in output.getvalue()
