"""
Pytest fixtures for derivgen tests.
"""

import os

import pytest


@pytest.fixture
def make_image(tmp_path):
    """Fixture returning a factory that writes a solid-color image file."""
    from PIL import Image

    def _make(name, size=(100, 80), directory=None, mode='RGB', color='red'):
        directory = directory or (tmp_path / 'input')
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(str(directory), name)

        fmt = None
        ext = os.path.splitext(name)[1].lower()
        if ext in ('.tif', '.tiff'):
            fmt = 'TIFF'
        elif ext in ('.jpg', '.jpeg'):
            fmt = 'JPEG'
        elif ext == '.png':
            fmt = 'PNG'

        if mode == 'RGBA' and fmt == 'JPEG':
            mode = 'RGB'
        Image.new(mode, size, color=color).save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def input_dir(tmp_path):
    """Fixture providing an empty input directory."""
    path = tmp_path / 'input'
    path.mkdir()
    return str(path)


@pytest.fixture
def output_dir(tmp_path):
    """Fixture providing an output directory path (not created)."""
    return str(tmp_path / 'output')


@pytest.fixture
def sample_input_dir(input_dir, make_image):
    """
    Fixture providing a small catalog:
        3: main, top
        12: bottom only
        15: main, profile
    plus one file that does not follow the naming scheme.
    """
    make_image('3__main.tif', size=(400, 300), directory=input_dir)
    make_image('3__top.tif', size=(120, 90), directory=input_dir)
    make_image('12__bottom.tif', size=(200, 100), directory=input_dir)
    make_image('15__main.jpg', size=(300, 600), directory=input_dir)
    make_image('15__profile__retake.jpg', size=(50, 40), directory=input_dir)
    make_image('notes.png', size=(10, 10), directory=input_dir)
    return input_dir


@pytest.fixture
def image_backend():
    """Fixture providing the Pillow image backend."""
    from derivgen.image_backend import ImageBackend
    return ImageBackend()


@pytest.fixture
def mock_tiler():
    """Fixture providing a tiler that records calls without running vips."""
    from unittest.mock import MagicMock
    from derivgen.tiler import Tiler
    return MagicMock(spec=Tiler)


@pytest.fixture
def sample_artifacts():
    """Fixture providing artifacts built by hand, out of catalog order."""
    from derivgen.artifact import Artifact
    from derivgen.view import View

    a12 = Artifact(catalog_id=12, views=[
        View(pose='bottom', source_path='/data/src/12__bottom.tif', width=200, height=100),
    ])
    a7 = Artifact(catalog_id=7, views=[
        View(pose='main', source_path='/data/src/7__main.tif', width=3000, height=2000),
        View(pose='top', source_path='/data/src/7__top.tif', width=1200, height=900),
    ])
    return [a12, a7]


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
