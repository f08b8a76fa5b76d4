"""
Pytest configuration and fixtures for Product Catalog Builder tests.

Provides shared fixtures for the Flask app, in-memory image uploads and a
recording sink that captures draw calls instead of producing a PDF.
"""

import io
import shutil
import tempfile
from pathlib import Path
from typing import List

import pytest
from PIL import Image

from catalog import create_app
from catalog.config import AppConfig
from catalog.models import ImageUpload


def make_image_bytes(color=(255, 255, 255), size=(100, 100), mode='RGB', image_format='PNG') -> bytes:
    """Encode a solid-colour image"""
    img = Image.new(mode, size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=image_format)
    return buf.getvalue()


def make_upload(filename='image.png', color=(255, 255, 255), size=(100, 100), mode='RGB') -> ImageUpload:
    image_format = 'JPEG' if filename.lower().endswith(('.jpg', '.jpeg')) else 'PNG'
    return ImageUpload(filename=filename, data=make_image_bytes(color, size, mode, image_format))


class RecordingSink:
    """Sink that records every draw call in order."""

    CHAR_WIDTH_RATIO = 0.5

    def __init__(self):
        self.calls = []
        self.saved = False

    def fill_rect(self, x, y, width, height, color):
        self.calls.append(('fill_rect', x, y, width, height, tuple(color)))

    def draw_line(self, x1, y1, x2, y2, color, width):
        self.calls.append(('draw_line', x1, y1, x2, y2, tuple(color), width))

    def draw_image(self, image, x, y, width, height):
        self.calls.append(('draw_image', image, x, y, width, height))

    def draw_text(self, lines, x, y, font_size, bold=False, color=(0, 0, 0), align='center'):
        self.calls.append(('draw_text', tuple(lines), x, y, font_size, bold))

    def add_page(self):
        self.calls.append(('add_page',))

    def wrap_text(self, text, max_width, font_size, bold=False) -> List[str]:
        """Greedy word wrap assuming every character is half the font size wide"""
        max_chars = max(1, int(max_width / (font_size * self.CHAR_WIDTH_RATIO)))
        lines, current = [], ""
        for word in text.split():
            candidate = f"{current} {word}".strip()
            if len(candidate) > max_chars and current:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines

    def save(self, target=None):
        self.saved = True
        return b"recorded"

    def named(self, name):
        return [call for call in self.calls if call[0] == name]

    @property
    def page_count(self):
        return 1 + len(self.named('add_page'))


@pytest.fixture(scope='session')
def log_dir():
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def app(log_dir):
    """Create and configure a test Flask application."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'LOG_FILE': str(log_dir / 'test.log'),
    })
    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture
def test_config():
    """Default configuration independent of any YAML on disk."""
    return AppConfig(SECRET_KEY='test-key', FLASK_ENV='testing', DEBUG=False)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def white_logo():
    return make_upload('logo.png', color=(255, 255, 255), size=(100, 100))


@pytest.fixture
def dark_logo():
    return make_upload('logo.png', color=(10, 20, 30), size=(64, 48))


@pytest.fixture
def upload_factory():
    """Build ImageUpload objects on demand."""
    return make_upload
