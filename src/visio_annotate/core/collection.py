"""Operations over the ordered image collection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .models import Annotation, AnnotatedImage

logger = logging.getLogger(__name__)


def marked(images: List[AnnotatedImage]) -> List[AnnotatedImage]:
    """Images flagged by the user, in collection order."""
    return [image for image in images if image.marked]


def active_index(images: List[AnnotatedImage]) -> Optional[int]:
    """Index of the active image, or None."""
    return next((i for i, image in enumerate(images) if image.active), None)


def active_image(images: List[AnnotatedImage]) -> Optional[AnnotatedImage]:
    """The active image, or None."""
    index = active_index(images)
    return images[index] if index is not None else None


def find_image(images: List[AnnotatedImage], path: Path) -> Optional[AnnotatedImage]:
    """Find an image by path."""
    key = Path(path).resolve()
    return next((image for image in images if image.key == key), None)


def pending_count(images: List[AnnotatedImage]) -> int:
    """Number of images excluded from export (disabled)."""
    return sum(1 for image in images if not image.enabled)


def remove_active_annotation(images: List[AnnotatedImage]) -> Optional[Annotation]:
    """
    Remove the selected annotation of the active image.

    Returns:
        The removed annotation, or None if nothing was removed
    """
    image = active_image(images)
    if image is None:
        return None
    return image.remove_active_annotation()


def activate(images: List[AnnotatedImage], image: AnnotatedImage) -> bool:
    """
    Make the given image the active one.

    Returns:
        True if the image is part of the collection
    """
    if image not in images:
        return False

    for candidate in images:
        candidate.active = candidate == image
    return True


def toggle_marked(images: List[AnnotatedImage], image: AnnotatedImage) -> bool:
    """Flip the marked flag of an image in the collection."""
    for candidate in images:
        if candidate == image:
            candidate.marked = not candidate.marked
            return True
    return False


def activate_next(images: List[AnnotatedImage], reverse: bool = False) -> bool:
    """
    Move the active flag to the adjacent image.

    There is no wraparound: at either end of the collection, or when no
    image is active, nothing changes.

    Args:
        images: Image collection
        reverse: Move to the previous image instead of the next one

    Returns:
        True if the active image changed
    """
    index = active_index(images)
    if index is None:
        return False

    target = index - 1 if reverse else index + 1
    if not 0 <= target < len(images):
        return False

    images[index].active = False
    images[target].active = True
    logger.debug(f"Activated {images[target].short_name}")
    return True
