"""
Logo color sampling.

Averages a logo over a small fixed grid and chooses the catalog background
from the logo's perceived brightness: bright logos get a dark teal page,
everything else stays light grey.
"""

import math
from typing import Tuple

import numpy as np
from PIL import Image
from loguru import logger

from .models import RGBColor, LIGHT_BACKGROUND, DARK_BACKGROUND


DEFAULT_GRID_SIZE = 40
DEFAULT_BRIGHTNESS_THRESHOLD = 180.0

# ITU-R BT.601 luma weights in thousandths, kept integral so gray levels map exactly
LUMA_WEIGHTS: Tuple[int, int, int] = (299, 587, 114)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average_color(image: Image.Image, grid_size: int = DEFAULT_GRID_SIZE) -> RGBColor:
    """
    Mean RGB of the image after resampling it to a grid_size x grid_size grid.

    Bilinear resampling keeps a constant field constant, so a solid colour
    logo averages to exactly its own colour whatever its dimensions. Pillow
    resamples RGBA premultiplied and returns straight colour, so partially
    transparent pixels keep their hue and only fully transparent ones read
    as black, the same as a canvas ``getImageData`` readback.
    """
    sample = image.convert('RGBA').resize((grid_size, grid_size), Image.Resampling.BILINEAR)
    pixels = np.asarray(sample, dtype=np.float64).reshape(-1, 4)
    rgb = pixels[:, :3]
    # resize is a no-op copy at grid size, so clear hidden colour under alpha 0 here
    rgb[pixels[:, 3] == 0] = 0
    r, g, b = rgb.mean(axis=0)
    return RGBColor(_round_half_up(r), _round_half_up(g), _round_half_up(b))


def perceived_brightness(color: RGBColor) -> float:
    """Luma of an RGB colour on a 0-255 scale"""
    return sum(weight * channel for weight, channel in zip(LUMA_WEIGHTS, color)) / 1000


def background_for_brightness(brightness: float,
                              threshold: float = DEFAULT_BRIGHTNESS_THRESHOLD) -> RGBColor:
    """Dark background only when strictly brighter than the threshold"""
    return DARK_BACKGROUND if brightness > threshold else LIGHT_BACKGROUND


def compute_background(image: Image.Image,
                       threshold: float = DEFAULT_BRIGHTNESS_THRESHOLD,
                       grid_size: int = DEFAULT_GRID_SIZE) -> RGBColor:
    """Pick the catalog background colour for a logo"""
    mean = average_color(image, grid_size)
    brightness = perceived_brightness(mean)
    background = background_for_brightness(brightness, threshold)

    logger.info(f"Logo mean color {tuple(mean)} brightness {brightness:.1f} -> background {tuple(background)}")
    return background
