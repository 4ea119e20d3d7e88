"""Image metadata, decoding and encoding backed by Pillow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener

logger = logging.getLogger(__name__)

register_heif_opener()

# EXIF orientations that rotate the image by 90 or 270 degrees
ROTATED_ORIENTATIONS = {5, 6, 7, 8}

# Output format per source extension; anything else is written as PNG
OUTPUT_FORMATS = {
    ".heic": "HEIF",
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}
DEFAULT_OUTPUT_FORMAT = "PNG"

# Pillow modes JPEG can store directly
_JPEG_MODES = {"RGB", "L", "CMYK"}

_DECODE_ERRORS = (OSError, ValueError, UnidentifiedImageError)


@dataclass(frozen=True)
class ImageDimensions:
    """Pixel dimensions of an image file as stored, plus its EXIF orientation."""

    width: int
    height: int
    orientation: int = 1

    @property
    def is_rotated(self) -> bool:
        """True when the orientation swaps width and height."""
        return self.orientation in ROTATED_ORIENTATIONS

    @property
    def oriented_size(self) -> Tuple[int, int]:
        """(width, height) as the image is displayed."""
        if self.is_rotated:
            return (self.height, self.width)
        return (self.width, self.height)


def output_format(path: Path) -> str:
    """Pick the Pillow format name used to re-encode an image."""
    return OUTPUT_FORMATS.get(Path(path).suffix.lower(), DEFAULT_OUTPUT_FORMAT)


def read_dimensions(path: Path) -> Optional[ImageDimensions]:
    """
    Read pixel dimensions and orientation without decoding pixel data.

    Args:
        path: Path to the image file

    Returns:
        ImageDimensions, or None if the file cannot be opened
    """
    try:
        with Image.open(path) as img:
            width, height = img.size
            orientation = img.getexif().get(ExifTags.Base.Orientation, 1)
    except FileNotFoundError:
        logger.debug(f"Image not found: {path}")
        return None
    except _DECODE_ERRORS as e:
        logger.warning(f"Cannot read image metadata from {path}: {e}")
        return None

    if not isinstance(orientation, int):
        orientation = 1
    return ImageDimensions(width=width, height=height, orientation=orientation)


def decode(path: Path) -> Optional[Image.Image]:
    """
    Decode an image file with its EXIF orientation applied.

    Returns:
        Decoded image, or None on failure
    """
    try:
        with Image.open(path) as img:
            img.load()
            return ImageOps.exif_transpose(img)
    except _DECODE_ERRORS as e:
        logger.error(f"Cannot decode image {path}: {e}")
        return None


def resize(image: Image.Image, scale: float) -> Image.Image:
    """Resize an image by a factor; a factor of 1 returns the image untouched."""
    if scale == 1.0:
        return image
    width = max(1, round(image.width * scale))
    height = max(1, round(image.height * scale))
    return image.resize((width, height), Image.Resampling.LANCZOS)


def encode(image: Image.Image, destination: Path, fmt: str) -> bool:
    """
    Write an image to disk in the given format.

    Args:
        image: Decoded image
        destination: Output file path; its folder must exist
        fmt: Pillow format name (PNG, JPEG, HEIF)

    Returns:
        True if the file was written
    """
    if fmt == "JPEG" and image.mode not in _JPEG_MODES:
        image = image.convert("RGB")

    try:
        image.save(destination, format=fmt)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Cannot write {fmt} image to {destination}: {e}")
        return False

    logger.debug(f"Wrote {fmt} image to {destination}")
    return True
