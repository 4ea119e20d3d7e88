"""Working folder scanning, reconciliation and change notification."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from PyQt6.QtCore import QFileSystemWatcher, QObject, pyqtSignal

from .models import AnnotatedImage

logger = logging.getLogger(__name__)

# Supported image extensions (compared case-insensitively)
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".heic"}


def is_image(path: Path) -> bool:
    """Check whether a path has a recognised image extension."""
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def list_images(folder: Path) -> List[Path]:
    """
    List the image files of a folder.

    Hidden files and sub-folders are skipped.

    Args:
        folder: Folder to scan

    Returns:
        Image paths sorted by file name, empty if the folder cannot be read
    """
    try:
        entries = list(Path(folder).iterdir())
    except OSError as e:
        logger.error(f"Error scanning directory {folder}: {e}")
        return []

    files = [
        entry for entry in entries
        if not entry.name.startswith(".") and entry.is_file() and is_image(entry)
    ]
    return sorted(files, key=lambda p: p.name)


def reconcile(images: List[AnnotatedImage], files: List[Path]) -> bool:
    """
    Bring the image collection in line with a folder listing.

    Entries whose file is gone are dropped; files without an entry are
    appended with no annotations. Existing entries keep their position and
    content. A renamed file therefore shows up as a removal plus a new,
    empty entry.

    Args:
        images: Collection to update in place
        files: Current image files of the folder

    Returns:
        True if the collection changed
    """
    listed = {}
    for file in files:
        listed.setdefault(Path(file).resolve(), Path(file))

    kept = [image for image in images if image.key in listed]
    removed = len(images) - len(kept)

    known = {image.key for image in kept}
    added = 0
    for key, file in listed.items():
        if key not in known:
            kept.append(AnnotatedImage(path=file))
            known.add(key)
            added += 1

    if not removed and not added:
        return False

    images[:] = kept
    logger.info(f"Reconciled images: {added} added, {removed} removed")
    return True


class FolderWatcher(QObject):
    """
    Watches a folder and reports changes to its entries.

    ``folder_changed`` is emitted from the thread that owns the watcher.
    Receivers living in another thread get the notification through Qt's
    queued delivery, so state owned by that thread is only touched there.
    """

    folder_changed = pyqtSignal()

    def __init__(self, folder: Path, parent: Optional[QObject] = None) -> None:
        """
        Initialize the watcher.

        Args:
            folder: Folder to watch
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self.folder = Path(folder)
        self._watcher = QFileSystemWatcher(self)
        self._watcher.directoryChanged.connect(self._on_directory_changed)

    def start(self) -> bool:
        """
        Start watching the folder.

        Returns:
            True if the folder is being watched
        """
        if not self.folder.is_dir():
            logger.warning(f"Cannot watch non-existent directory: {self.folder}")
            return False

        path = str(self.folder)
        if path in self._watcher.directories():
            return True

        if not self._watcher.addPath(path):
            logger.error(f"Failed to watch directory: {self.folder}")
            return False

        logger.info(f"Started watching directory: {self.folder}")
        return True

    def stop(self) -> None:
        """Stop watching the folder."""
        directories = self._watcher.directories()
        if directories:
            self._watcher.removePaths(directories)
            logger.info(f"Stopped watching directory: {self.folder}")

    def is_active(self) -> bool:
        return bool(self._watcher.directories())

    def _on_directory_changed(self, path: str) -> None:
        logger.debug(f"Detected change in {path}")
        self.folder_changed.emit()


def subscribe(
    folder: Path,
    callback: Callable[[], None],
    parent: Optional[QObject] = None
) -> Optional[FolderWatcher]:
    """
    Watch a folder and call back whenever its contents change.

    Args:
        folder: Folder to watch
        callback: Called with no arguments on every change
        parent: Optional Qt parent for the watcher

    Returns:
        Running watcher, or None if the folder cannot be watched
    """
    watcher = FolderWatcher(folder, parent)
    if not watcher.start():
        watcher.deleteLater()
        return None

    watcher.folder_changed.connect(callback)
    return watcher
