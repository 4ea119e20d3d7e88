"""Data models for Visio Annotate annotations."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PyQt6.QtCore import QPointF, QRectF, QSizeF

from . import imaging
from .geometry import scaled_rect

logger = logging.getLogger(__name__)

LABEL_PREFIX = "label_"

# Coordinate keys of the annotations file, in rectangle order
COORDINATE_KEYS = ("x", "y", "width", "height")


def _wire_number(value: float) -> Union[int, float]:
    """Write integral coordinates without a trailing '.0'."""
    if float(value).is_integer():
        return int(value)
    return value


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class Annotation:
    """
    A single labelled bounding box.

    ``coordinates`` holds four numbers in image-native pixels. Movement and
    rendering read the origin as the centre of the box, while the
    annotations file stores the very same four numbers under ``x``/``y``
    (documented there as the top-left corner). The numbers are never
    converted between the two readings, so a load/save cycle keeps them
    unchanged.

    Identity is the generated ``id``; two annotations with equal label and
    coordinates are still different annotations.
    """

    label: str
    coordinates: QRectF
    id: str = field(default_factory=_new_id)
    selected: bool = False
    moving: bool = False
    # Numbers as read from the annotations file, keyed by coordinate name
    _wire_values: Dict[str, Union[int, float]] = field(
        init=False, default_factory=dict, repr=False
    )

    def __post_init__(self) -> None:
        """Take a private copy of the rectangle."""
        self.coordinates = QRectF(self.coordinates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Annotation):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def origin(self) -> QPointF:
        return self.coordinates.topLeft()

    @property
    def size(self) -> QSizeF:
        return self.coordinates.size()

    @property
    def width(self) -> float:
        return self.coordinates.width()

    @property
    def height(self) -> float:
        return self.coordinates.height()

    def scaled(self, factor: float) -> Annotation:
        """Return a copy with coordinates scaled by a factor; the id is kept."""
        return dataclasses.replace(self, coordinates=scaled_rect(self.coordinates, factor))

    def _rect_values(self) -> tuple:
        rect = self.coordinates
        return (rect.x(), rect.y(), rect.width(), rect.height())

    def _wire_value(self, key: str, value: float) -> Union[int, float]:
        """Write a number back as it was read unless it has changed since."""
        stored = self._wire_values.get(key)
        if stored is not None and float(stored) == value:
            return stored
        return _wire_number(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the annotations file representation."""
        return {
            "label": self.label,
            "coordinates": {
                key: self._wire_value(key, value)
                for key, value in zip(COORDINATE_KEYS, self._rect_values())
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Annotation:
        """
        Create an annotation from its file representation.

        A fresh id is generated; ids are not stored on disk.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        label = data["label"]
        if not isinstance(label, str):
            raise TypeError(f"label must be a string, got {type(label).__name__}")
        if not label:
            raise ValueError("label must not be empty")

        coords = data["coordinates"]
        raw = [coords[key] for key in COORDINATE_KEYS]
        annotation = cls(label=label, coordinates=QRectF(*(float(v) for v in raw)))
        annotation._wire_values = {
            key: value for key, value in zip(COORDINATE_KEYS, raw)
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        }
        return annotation


@dataclass(eq=False)
class AnnotatedImage:
    """
    One image file and its ordered annotations.

    Two entries are the same image when their resolved paths are equal.
    The image owns its annotations and keeps at most one of them selected
    and at most one moving.
    """

    path: Path
    annotations: List[Annotation] = field(default_factory=list)
    enabled: bool = True
    active: bool = False
    marked: bool = False

    def __post_init__(self) -> None:
        """Normalise the path used as identity."""
        self.path = Path(self.path)
        self._key = self.path.resolve()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnnotatedImage):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    @property
    def key(self) -> Path:
        """Resolved path identifying this image."""
        return self._key

    @property
    def short_name(self) -> str:
        """File name component of the path."""
        return self.path.name

    @property
    def file_exists(self) -> bool:
        return self.path.is_file()

    @property
    def has_active_annotation(self) -> bool:
        return any(a.selected for a in self.annotations)

    @property
    def active_annotation(self) -> Optional[Annotation]:
        """The selected annotation, if any."""
        return next((a for a in self.annotations if a.selected), None)

    @property
    def size(self) -> Optional[QSizeF]:
        """
        Pixel size as displayed, with EXIF rotation taken into account.

        Returns:
            Size of the image, or None if its metadata cannot be read
        """
        dimensions = imaging.read_dimensions(self.path)
        if dimensions is None:
            return None
        width, height = dimensions.oriented_size
        return QSizeF(width, height)

    def _next_label(self) -> str:
        labels = {a.label for a in self.annotations}
        count = 1
        while f"{LABEL_PREFIX}{count}" in labels:
            count += 1
        return f"{LABEL_PREFIX}{count}"

    def add_annotation(self, coordinates: QRectF) -> Annotation:
        """
        Append a new annotation and select it.

        The label is ``label_<n>`` with the smallest n not already used by
        this image.

        Args:
            coordinates: Rectangle in image-native pixels

        Returns:
            The new annotation
        """
        annotation = Annotation(label=self._next_label(), coordinates=coordinates)
        self.annotations.append(annotation)
        self.toggle(annotation)
        logger.debug(f"Added {annotation.label} to {self.short_name}")
        return annotation

    def toggle(self, annotation: Annotation) -> None:
        """Select the given annotation and deselect every other one."""
        for a in self.annotations:
            a.selected = a.id == annotation.id

    def begin_moving(self, annotation: Annotation) -> None:
        """Select the annotation and mark it as the one being moved."""
        self.toggle(annotation)
        for a in self.annotations:
            a.moving = a.id == annotation.id

    def move(self, annotation: Annotation, new_origin: QPointF) -> None:
        """
        Finish a move by placing the annotation at a new origin.

        Args:
            annotation: Annotation to move
            new_origin: New origin, already in image-native pixels
        """
        for a in self.annotations:
            a.moving = False
            if a.id == annotation.id:
                a.coordinates.moveTo(new_origin)

    def rename(self, annotation: Annotation, label: str) -> bool:
        """
        Change the label of an annotation.

        Returns:
            True if the annotation was found and the label is not empty
        """
        if not label.strip():
            logger.warning("Cannot rename annotation to an empty label")
            return False

        for a in self.annotations:
            if a.id == annotation.id:
                a.label = label
                return True
        return False

    def remove(self, annotation: Annotation) -> None:
        """Remove an annotation by id."""
        self.annotations = [a for a in self.annotations if a.id != annotation.id]

    def remove_active_annotation(self) -> Optional[Annotation]:
        """Remove and return the selected annotation, if any."""
        active = self.active_annotation
        if active is not None:
            self.remove(active)
        return active

    def export_image(self, destination: Path, scale: float = 1.0) -> Optional[AnnotatedImage]:
        """
        Re-encode the image file to a destination path.

        The output format follows the source extension (HEIC, PNG, JPEG;
        PNG for anything else).

        Args:
            destination: Output file path
            scale: Resize factor applied to pixels and annotations

        Returns:
            The exported image entry, or None if decoding or writing failed
        """
        image = imaging.decode(self.path)
        if image is None:
            return None

        image = imaging.resize(image, scale)
        if not imaging.encode(image, Path(destination), imaging.output_format(self.path)):
            return None

        return AnnotatedImage(
            path=Path(destination),
            annotations=[a.scaled(scale) for a in self.annotations],
            enabled=self.enabled,
            marked=self.marked,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to an annotations file entry."""
        return {
            "imagefilename": self.short_name,
            "annotation": [a.to_dict() for a in self.annotations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], folder: Path) -> AnnotatedImage:
        """
        Create an image entry from an annotations file entry.

        Args:
            data: Entry with ``imagefilename`` and ``annotation`` keys
            folder: Working folder the file name is resolved against

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        filename = data["imagefilename"]
        if not isinstance(filename, str) or not filename:
            raise ValueError("imagefilename must be a non-empty string")

        entries = data["annotation"]
        if not isinstance(entries, list):
            raise TypeError("annotation must be a list")

        return cls(
            path=Path(folder) / filename,
            annotations=[Annotation.from_dict(entry) for entry in entries],
        )
