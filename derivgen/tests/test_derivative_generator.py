"""Tests for derivative generators."""

import os
from unittest.mock import MagicMock

import pytest
from PIL import Image

from derivgen.artifact import Artifact
from derivgen.errors import ImageBackendError, TileGenerationError
from derivgen.derivative_generator import (
    DerivativeGenerator, ResizedImageGenerator, TileSetGenerator,
)
from derivgen.image_backend import ImageBackend
from derivgen.view import View


@pytest.fixture
def artifact(input_dir, make_image):
    """Artifact 7 with real main and top images."""
    main = make_image('7__main.tif', size=(400, 200), directory=input_dir)
    top = make_image('7__top.tif', size=(120, 90), directory=input_dir)
    return Artifact(catalog_id=7, views=[
        View(pose='main', source_path=main, width=400, height=200),
        View(pose='top', source_path=top, width=120, height=90),
    ])


class TestDerivativeGenerator:
    """Tests for the DerivativeGenerator base class."""

    def test_base_is_abstract(self, output_dir):
        """Test the base class cannot be instantiated."""
        with pytest.raises(TypeError):
            DerivativeGenerator(output_dir)

    def test_subclass_stage(self, output_dir):
        """Test a subclass providing generate() gets its own stage counters."""
        class Noop(DerivativeGenerator):
            stage = 'noop'

            def generate(self, artifact):
                return True

        gen = Noop(output_dir)

        assert gen.generate(Artifact(catalog_id=1)) is True
        assert gen.stats.stage == 'noop'


class TestResizedImageGenerator:
    """Tests for ResizedImageGenerator class."""

    def make_generator(self, output_dir, backend=None, **kwargs):
        os.makedirs(os.path.join(output_dir, kwargs.get('subdir', 'main')), exist_ok=True)
        params = dict(required_pose='main', subdir='main', max_size=100)
        params.update(kwargs)
        return ResizedImageGenerator(backend or ImageBackend(), output_dir, **params)

    def test_init(self, output_dir, logger):
        """Test generator initialization."""
        gen = ResizedImageGenerator(
            ImageBackend(), output_dir, required_pose='TOP', subdir='thumbs',
            max_size=500, logger=logger,
        )

        assert gen.stage == 'thumbs'
        assert gen.required_pose == 'top'
        assert gen.output_dir == os.path.abspath(output_dir)

    def test_output_path(self, output_dir, artifact):
        """Test derivative path layout."""
        gen = self.make_generator(output_dir, subdir='thumbs')

        assert gen.output_path(artifact) == os.path.join(
            os.path.abspath(output_dir), 'thumbs', '7.jpg')

    def test_generate_writes_bounded_image(self, output_dir, artifact):
        """Test the main view is resized and written."""
        gen = self.make_generator(output_dir)

        assert gen.generate(artifact) is True

        with Image.open(os.path.join(output_dir, 'main', '7.jpg')) as img:
            assert img.size == (100, 50)
        assert gen.stats.processed == 1
        assert 'main' in artifact.completed_stages

    def test_generate_never_upscales(self, output_dir, artifact):
        """Test a source smaller than the bound keeps its size."""
        gen = self.make_generator(output_dir, required_pose='top', subdir='thumbs', max_size=500)

        gen.generate(artifact)

        with Image.open(os.path.join(output_dir, 'thumbs', '7.jpg')) as img:
            assert img.size == (120, 90)

    def test_generate_missing_pose_is_noop(self, output_dir, artifact):
        """Test artifacts without the pose are skipped silently."""
        backend = MagicMock(spec=ImageBackend)
        gen = self.make_generator(output_dir, backend=backend, required_pose='bottom')

        assert gen.generate(artifact) is False

        backend.resize_to_file.assert_not_called()
        assert gen.stats.skipped == 1
        assert gen.stats.errors == 0
        assert os.listdir(os.path.join(output_dir, 'main')) == []

    def test_generate_uses_first_matching_view(self, output_dir):
        """Test only the first view with the pose is used."""
        backend = MagicMock(spec=ImageBackend)
        backend.resize_to_file.return_value = (10, 10)
        artifact = Artifact(catalog_id=3, views=[
            View(pose='main', source_path='/src/3__main.tif', width=10, height=10),
            View(pose='main', source_path='/src/3__main__b.tif', width=10, height=10),
        ])
        gen = self.make_generator(output_dir, backend=backend)

        gen.generate(artifact)

        backend.resize_to_file.assert_called_once_with(
            '/src/3__main.tif', gen.output_path(artifact), 100)

    def test_generate_handles_errors(self, output_dir, artifact):
        """Test backend errors are counted, not raised."""
        backend = MagicMock(spec=ImageBackend)
        backend.resize_to_file.side_effect = ImageBackendError("decode failed")
        gen = self.make_generator(output_dir, backend=backend)

        assert gen.generate(artifact) is False

        assert gen.stats.errors == 1
        assert 'decode failed' in gen.stats.error_details[0]
        assert 'main' not in artifact.completed_stages

    def test_generate_dry_run(self, output_dir, artifact):
        """Test dry run writes nothing."""
        backend = MagicMock(spec=ImageBackend)
        gen = self.make_generator(output_dir, backend=backend, dry_run=True)

        assert gen.generate(artifact) is True

        backend.resize_to_file.assert_not_called()
        assert gen.stats.processed == 1

    def test_reset_stats(self, output_dir):
        """Test counters can be reset between passes."""
        gen = self.make_generator(output_dir)
        gen.stats.processed = 5

        stats = gen.reset_stats(total_to_process=3)

        assert stats is gen.stats
        assert stats.processed == 0
        assert stats.total_to_process == 3
        assert stats.stage == 'main'


class TestTileSetGenerator:
    """Tests for TileSetGenerator class."""

    def test_output_dir_for(self, output_dir, mock_tiler, artifact):
        """Test per-pose tile directory layout."""
        gen = TileSetGenerator(mock_tiler, output_dir)

        assert gen.output_dir_for(artifact, 'top') == os.path.join(
            os.path.abspath(output_dir), 'tiles', '7', 'top')

    def test_generate_tiles_every_view(self, output_dir, mock_tiler, artifact):
        """Test the tiler is called once per pose with the right parameters."""
        gen = TileSetGenerator(mock_tiler, output_dir, tile_size=256, tile_format='jpg')

        assert gen.generate(artifact) is True

        assert mock_tiler.make_tiles.call_count == 2
        first = mock_tiler.make_tiles.call_args_list[0]
        assert first.args == (artifact.views[0].source_path, gen.output_dir_for(artifact, 'main'))
        assert first.kwargs == {'tile_size': 256, 'tile_format': 'jpg', 'overwrite': True}
        assert gen.stats.processed == 2

    def test_generate_continues_after_failure(self, output_dir, mock_tiler, artifact):
        """Test one failed view does not stop the others."""
        mock_tiler.make_tiles.side_effect = [TileGenerationError("exit 1"), None]
        gen = TileSetGenerator(mock_tiler, output_dir)

        assert gen.generate(artifact) is False

        assert mock_tiler.make_tiles.call_count == 2
        assert gen.stats.errors == 1
        assert gen.stats.processed == 1

    def test_generate_handles_os_errors(self, output_dir, mock_tiler, artifact):
        """Test filesystem errors from the tiler are absorbed."""
        mock_tiler.make_tiles.side_effect = PermissionError("read-only")
        gen = TileSetGenerator(mock_tiler, output_dir)

        assert gen.generate(artifact) is False
        assert gen.stats.errors == 2

    def test_generate_duplicate_pose_tiled_once(self, output_dir, mock_tiler):
        """Test a repeated pose only tiles its first view."""
        artifact = Artifact(catalog_id=3, views=[
            View(pose='main', source_path='/src/3__main.tif', width=10, height=10),
            View(pose='main', source_path='/src/3__main__b.tif', width=10, height=10),
        ])
        gen = TileSetGenerator(mock_tiler, output_dir)

        gen.generate(artifact)

        mock_tiler.make_tiles.assert_called_once()
        assert mock_tiler.make_tiles.call_args.args[0] == '/src/3__main.tif'

    def test_generate_dry_run(self, output_dir, mock_tiler, artifact):
        """Test dry run does not call the tiler."""
        gen = TileSetGenerator(mock_tiler, output_dir, dry_run=True)

        gen.generate(artifact)

        mock_tiler.make_tiles.assert_not_called()
        assert gen.stats.processed == 2
