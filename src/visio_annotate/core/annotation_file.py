"""Reading and writing the annotations.json sidecar file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import AnnotatedImage

logger = logging.getLogger(__name__)

ANNOTATIONS_FILE_NAME = "annotations.json"


class AnnotationsFile:
    """
    Handler for the annotations file of a folder.

    The file stores every image of the folder, in collection order, even
    when it has no annotations.

    JSON structure (array of image entries):
    [
        {
            "imagefilename": "cat and dog.png",
            "annotation": [
                {
                    "label": "cat",
                    "coordinates": {
                        "x": 3.9,   // top-left x
                        "y": 2.0,   // top-left y
                        "width": 20.0,
                        "height": 40.1
                    }
                }
            ]
        }
    ]

    Image file names are resolved against the folder the file is loaded
    from.
    """

    def __init__(self, file_name: str = ANNOTATIONS_FILE_NAME) -> None:
        """
        Initialize the handler.

        Args:
            file_name: Name of the annotations file inside a folder
        """
        self.file_name = file_name

    def get_path(self, folder: Path) -> Path:
        """Path of the annotations file in a folder."""
        return Path(folder) / self.file_name

    def exists(self, folder: Path) -> bool:
        return self.get_path(folder).is_file()

    def load(self, folder: Path) -> Optional[List[AnnotatedImage]]:
        """
        Load annotated images from a folder's annotations file.

        Malformed entries are skipped.

        Args:
            folder: Folder containing the annotations file

        Returns:
            List of images, or None if the file is missing or unreadable
        """
        path = self.get_path(folder)
        if not path.is_file():
            logger.debug(f"No annotations file found in {folder}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing annotations JSON {path}: {e}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading annotations file {path}: {e}")
            return None

        if not isinstance(data, list):
            logger.error(f"Invalid annotations format in {path}")
            return None

        images: List[AnnotatedImage] = []
        seen = set()
        for entry in data:
            try:
                image = AnnotatedImage.from_dict(entry, Path(folder))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid entry in {path}: {e}")
                continue

            if image.key in seen:
                logger.warning(f"Skipping duplicate entry for {image.short_name} in {path}")
                continue
            seen.add(image.key)
            images.append(image)

        total = sum(len(image.annotations) for image in images)
        logger.info(f"Loaded {total} annotations for {len(images)} images from {path}")
        return images

    def save(self, folder: Path, images: List[AnnotatedImage]) -> bool:
        """
        Write annotated images to a folder's annotations file.

        Args:
            folder: Destination folder
            images: Images to write, in order

        Returns:
            True if the file was written
        """
        path = self.get_path(folder)
        data: List[Dict[str, Any]] = [image.to_dict() for image in images]

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing annotations file {path}: {e}")
            return False

        total = sum(len(entry["annotation"]) for entry in data)
        logger.info(f"Saved {total} annotations for {len(data)} images to {path}")
        return True
