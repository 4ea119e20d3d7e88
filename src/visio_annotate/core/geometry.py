"""Coordinate helpers shared by the data model and the view."""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, QSizeF


def scaled_point(point: QPointF, factor: float) -> QPointF:
    """Scale a point by a factor."""
    return QPointF(point.x() * factor, point.y() * factor)


def scaled_size(size: QSizeF, factor: float) -> QSizeF:
    """Scale a size by a factor."""
    return QSizeF(size.width() * factor, size.height() * factor)


def scaled_rect(rect: QRectF, factor: float) -> QRectF:
    """
    Scale every component of a rectangle by a factor.

    Used to convert between view coordinates and image-native pixels.

    Args:
        rect: Rectangle to scale
        factor: Multiplier applied to origin and extents

    Returns:
        New scaled rectangle
    """
    return QRectF(
        rect.x() * factor,
        rect.y() * factor,
        rect.width() * factor,
        rect.height() * factor,
    )


def scale_factor(viewport_width: float, image_width: float) -> Optional[float]:
    """Ratio of the viewport width to the image width, or None for empty images."""
    if image_width <= 0:
        return None
    return viewport_width / image_width


def draft_rect(start: QPointF, current: QPointF, from_centre: bool = True) -> QRectF:
    """
    Compute the rectangle described by a drag gesture.

    The result uses the centre-origin convention of annotations: the
    rectangle's origin is the centre of the box.

    Args:
        start: Point where the drag started
        current: Current pointer position
        from_centre: If True the start point is the box centre,
            otherwise it is one of the corners

    Returns:
        Rectangle with centre origin and full extents
    """
    if from_centre:
        width = abs(start.x() - current.x()) * 2
        height = abs(start.y() - current.y()) * 2
        return QRectF(start.x(), start.y(), width, height)

    width = current.x() - start.x()
    height = current.y() - start.y()
    centre_x = start.x() + width / 2.0
    centre_y = start.y() + height / 2.0
    return QRectF(centre_x, centre_y, abs(width), abs(height))
