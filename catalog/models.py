"""
Data model for catalog inputs and placed entries
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple

from PIL import Image


class RGBColor(NamedTuple):
    """An RGB triple with 0-255 channels"""
    r: int
    g: int
    b: int


LIGHT_BACKGROUND = RGBColor(242, 242, 242)
DARK_BACKGROUND = RGBColor(0, 77, 64)


@dataclass
class ImageUpload:
    """A raw image blob as received from the file picker"""
    filename: str
    data: bytes


@dataclass
class DecodedImage:
    """An uploaded image decoded into a data URL and a raster"""
    filename: str
    format: str
    data_url: str
    raster: Image.Image

    @property
    def size(self):
        return self.raster.size


@dataclass
class Product:
    """One product block of the input form"""
    name: str = ""
    price: str = ""
    description: str = ""
    images: List[ImageUpload] = field(default_factory=list)

    def missing_fields(self) -> List[str]:
        """Names of the required fields this product lacks"""
        missing = []
        if not self.name.strip():
            missing.append('name')
        if not self.price.strip():
            missing.append('price')
        if not self.images:
            missing.append('images')
        return missing


@dataclass(frozen=True)
class CatalogEntry:
    """One (product, image) pair placed in a single grid cell"""
    name: str
    price: str
    description: str
    image: DecodedImage

    @property
    def has_description(self) -> bool:
        return bool(self.description.strip())


def flatten_product(product: Product, images: List[DecodedImage]) -> List[CatalogEntry]:
    """Expand a product into one entry per image, in upload order"""
    return [
        CatalogEntry(
            name=product.name,
            price=product.price,
            description=product.description,
            image=image,
        )
        for image in images
    ]


def empty_inputs() -> List[Product]:
    """The input list a fresh or just-submitted form starts from"""
    return [Product()]
