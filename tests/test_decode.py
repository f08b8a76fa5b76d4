"""
Unit tests for upload checks and image decoding.
"""

from unittest.mock import patch

import pytest

from catalog.decode import check_upload, decode_all, decode_image, to_data_url
from catalog.errors import (
    DecodeError, FileTooLargeError, ImageDecodeError, InvalidImageFormatError, ValidationError
)
from catalog.models import ImageUpload


class TestCheckUpload:
    """Test size and extension guards."""

    def test_accepts_small_png(self, upload_factory):
        check_upload(upload_factory('a.png'), max_size=1024 * 1024, allowed_extensions=['.png'])

    def test_rejects_large_file(self):
        upload = ImageUpload('huge.jpg', b'x' * 2048)

        with pytest.raises(FileTooLargeError) as exc_info:
            check_upload(upload, max_size=1024)

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.details['filename'] == 'huge.jpg'

    def test_rejects_unknown_extension(self):
        upload = ImageUpload('notes.txt', b'hello')

        with pytest.raises(InvalidImageFormatError) as exc_info:
            check_upload(upload, allowed_extensions=['.png', '.jpg'])

        assert isinstance(exc_info.value, DecodeError)

    def test_extension_check_is_case_insensitive(self, upload_factory):
        check_upload(upload_factory('PHOTO.PNG'), allowed_extensions=['.png'])


class TestDecodeImage:
    """Test single image decoding."""

    def test_png_decodes_to_rgb(self, upload_factory):
        decoded = decode_image(upload_factory('red.png', color=(255, 0, 0), size=(30, 20)))

        assert decoded.filename == 'red.png'
        assert decoded.format == 'PNG'
        assert decoded.size == (30, 20)
        assert decoded.raster.mode == 'RGB'
        assert decoded.raster.getpixel((0, 0)) == (255, 0, 0)
        assert decoded.data_url.startswith('data:image/png;base64,')

    def test_jpeg_data_url(self, upload_factory):
        decoded = decode_image(upload_factory('photo.jpg', color=(10, 10, 10)))

        assert decoded.format == 'JPEG'
        assert decoded.data_url.startswith('data:image/jpeg;base64,')

    def test_transparency_is_kept(self, upload_factory):
        decoded = decode_image(upload_factory('logo.png', color=(0, 0, 0, 0), mode='RGBA'))

        assert decoded.raster.mode == 'RGBA'

    def test_grayscale_is_converted(self, upload_factory):
        decoded = decode_image(upload_factory('gray.png', color=128, mode='L'))

        assert decoded.raster.mode == 'RGB'
        assert decoded.raster.getpixel((0, 0)) == (128, 128, 128)

    def test_garbage_raises_decode_error(self):
        with pytest.raises(ImageDecodeError) as exc_info:
            decode_image(ImageUpload('broken.png', b'not an image at all'))

        error = exc_info.value
        assert error.message == "Couldn't read an image – please try different files."
        assert 'broken.png' not in error.message
        assert error.details['filename'] == 'broken.png'

    def test_truncated_png_raises_decode_error(self, upload_factory):
        data = upload_factory('cut.png', size=(200, 200)).data

        with pytest.raises(ImageDecodeError):
            decode_image(ImageUpload('cut.png', data[:len(data) // 2]))

    def test_to_data_url_round_trips_bytes(self):
        assert to_data_url(b'abc', 'PNG') == 'data:image/png;base64,YWJj'


class TestDecodeAll:
    """Test ordered, short-circuiting batch decoding."""

    def test_preserves_input_order(self, upload_factory):
        uploads = [upload_factory(f'{i}.png', color=(i * 20, 0, 0)) for i in range(4)]

        decoded = decode_all(uploads)

        assert [d.filename for d in decoded] == ['0.png', '1.png', '2.png', '3.png']

    def test_stops_at_first_failure(self, upload_factory):
        uploads = [
            upload_factory('ok.png'),
            ImageUpload('bad.png', b'garbage'),
            upload_factory('never.png'),
        ]

        with patch('catalog.decode.decode_image', wraps=decode_image) as spy:
            with pytest.raises(ImageDecodeError):
                decode_all(uploads)

        assert [call.args[0].filename for call in spy.call_args_list] == ['ok.png', 'bad.png']

    def test_empty_batch(self):
        assert decode_all([]) == []
