"""Pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

from PIL import Image

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication for tests that need Qt objects."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])

    yield app


@pytest.fixture
def make_image():
    """Factory writing a small solid-colour image file."""
    def _make(path, size=(40, 20), color=(200, 50, 50), orientation=None):
        path = Path(path)
        img = Image.new("RGB", size, color)
        kwargs = {}
        if orientation is not None:
            exif = Image.Exif()
            exif[0x0112] = orientation
            kwargs["exif"] = exif
        img.save(path, **kwargs)
        return path

    return _make


@pytest.fixture
def image_folder(tmp_path, make_image):
    """A working folder with two PNG images."""
    folder = tmp_path / "images"
    folder.mkdir()
    make_image(folder / "a.png")
    make_image(folder / "b.png")
    return folder


@pytest.fixture
def sample_annotations_file(image_folder):
    """Write an annotations.json for the two images in image_folder."""
    json_path = image_folder / "annotations.json"
    json_path.write_text(
        '[\n'
        '  {"imagefilename": "a.png", "annotation": [\n'
        '    {"label": "cat", "coordinates": {"x": 3.9, "y": 2, "width": 20, "height": 40.1}}\n'
        '  ]},\n'
        '  {"imagefilename": "b.png", "annotation": []}\n'
        ']\n'
    )
    return json_path
