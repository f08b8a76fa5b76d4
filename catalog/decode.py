"""
Image decoding for uploaded logos and product images.

Turns raw upload blobs into DecodedImage records (data URL plus raster).
Batches are decoded sequentially in input order and stop at the first
failure.
"""

import base64
import io
from pathlib import Path
from typing import List, Optional

from PIL import Image
from loguru import logger

from .errors import FileTooLargeError, ImageDecodeError, InvalidImageFormatError
from .models import DecodedImage, ImageUpload


MIME_TYPES = {
    'PNG': 'image/png',
    'JPEG': 'image/jpeg',
    'GIF': 'image/gif',
    'BMP': 'image/bmp',
    'WEBP': 'image/webp',
}


def check_upload(upload: ImageUpload,
                 max_size: Optional[int] = None,
                 allowed_extensions: Optional[List[str]] = None) -> None:
    """Reject uploads that are too large or do not look like images"""
    if max_size is not None and len(upload.data) > max_size:
        raise FileTooLargeError(
            filename=upload.filename,
            size_mb=len(upload.data) / (1024 * 1024),
            limit_mb=max_size / (1024 * 1024)
        )

    if allowed_extensions:
        file_ext = Path(upload.filename).suffix.lower()
        if file_ext not in allowed_extensions:
            raise InvalidImageFormatError(upload.filename, f"Extension: {file_ext}")


def to_data_url(data: bytes, image_format: str) -> str:
    """Encode raw image bytes as a base64 data URL"""
    mime = MIME_TYPES.get(image_format, 'application/octet-stream')
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_image(upload: ImageUpload) -> DecodedImage:
    """
    Decode a single upload.

    The blob is verified first, then reopened and fully loaded since
    ``verify()`` leaves the image unusable.
    """
    try:
        Image.open(io.BytesIO(upload.data)).verify()

        raster = Image.open(io.BytesIO(upload.data))
        raster.load()
    except Exception as e:
        raise ImageDecodeError(upload.filename, str(e))

    image_format = raster.format or 'PNG'

    # Normalise exotic modes to something both the sampler and the PDF sink accept
    if raster.mode in ('RGBA', 'LA') or (raster.mode == 'P' and 'transparency' in raster.info):
        raster = raster.convert('RGBA')
    elif raster.mode != 'RGB':
        raster = raster.convert('RGB')

    logger.debug(f"Decoded image {upload.filename}: {image_format} {raster.size} {raster.mode}")

    return DecodedImage(
        filename=upload.filename,
        format=image_format,
        data_url=to_data_url(upload.data, image_format),
        raster=raster,
    )


def decode_all(uploads: List[ImageUpload]) -> List[DecodedImage]:
    """Decode uploads one after another, stopping at the first failure"""
    decoded = []
    for index, upload in enumerate(uploads):
        try:
            decoded.append(decode_image(upload))
        except ImageDecodeError as e:
            logger.warning(f"Image {index + 1}/{len(uploads)} failed to decode: "
                           f"{upload.filename} ({e.details.get('reason')})")
            raise
    return decoded
