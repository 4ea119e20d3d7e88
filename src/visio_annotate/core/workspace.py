"""Workspace state shared by the view and the folder watcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from PyQt6.QtCore import QObject, QPointF, QRectF, QSizeF, pyqtSignal

from . import collection
from .annotation_file import AnnotationsFile
from .config import WorkspaceSettings, WorkspaceSettingsManager
from .geometry import scale_factor, scaled_point, scaled_rect
from .models import Annotation, AnnotatedImage
from .watcher import FolderWatcher, list_images, reconcile, subscribe

logger = logging.getLogger(__name__)


@dataclass
class NavigationState:
    """Visibility of the navigation panel."""

    navigator_visible: bool = False


class Workspace(QObject):
    """
    Owner of the working folder, its images and its settings.

    All mutation goes through this object on the thread that owns it. The
    folder watcher is a child of the workspace, so its change notifications
    arrive on the same thread as user commands.
    """

    images_changed = pyqtSignal()
    settings_changed = pyqtSignal()
    folders_changed = pyqtSignal()
    export_finished = pyqtSignal(bool)

    def __init__(
        self,
        annotations_file: Optional[AnnotationsFile] = None,
        parent: Optional[QObject] = None
    ) -> None:
        """
        Initialize an empty workspace.

        Args:
            annotations_file: Handler for annotations.json files
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self.annotations_file = annotations_file or AnnotationsFile()

        self.working_folder: Optional[Path] = None
        self.output_folder: Optional[Path] = None
        self.images: List[AnnotatedImage] = []
        self.settings = WorkspaceSettings()
        self.navigation = NavigationState()

        # View parameters, not persisted
        self.viewport_size = QSizeF(0, 0)
        self.draft_coords: Optional[QRectF] = None
        self.drag_from_centre = True
        self.show_images_in_sidebar = True
        self.cancel_synthetics_process = False

        self._watcher: Optional[FolderWatcher] = None
        self._settings_manager: Optional[WorkspaceSettingsManager] = None

    # === Folders ===

    def set_working_folder(self, folder: Path) -> bool:
        """
        Open a folder for annotation.

        Loads workspace settings and annotations.json when present, syncs
        the image list with the folder contents and activates the first
        image.

        Args:
            folder: Folder to open

        Returns:
            True if the folder was opened
        """
        folder = Path(folder)
        if not folder.is_dir():
            logger.warning(f"Not a directory, ignoring working folder: {folder}")
            return False

        self._stop_watcher()
        self._watcher = subscribe(folder, self.refresh_images, parent=self)
        if self._watcher is None:
            logger.warning(f"Changes to {folder} will not be picked up automatically")

        self.working_folder = folder
        self._settings_manager = WorkspaceSettingsManager(folder)
        self.settings = self._settings_manager.load()
        self.images = self.annotations_file.load(folder) or []
        reconcile(self.images, list_images(folder))

        self.navigation.navigator_visible = True
        if self.images:
            collection.activate(self.images, self.images[0])

        logger.info(f"Opened working folder {folder} with {len(self.images)} images")
        self.folders_changed.emit()
        self.settings_changed.emit()
        self.images_changed.emit()
        return True

    def unset_working_folder(self) -> None:
        """Close the working folder and forget its images and settings."""
        self._stop_watcher()
        self.images = []
        self.settings = WorkspaceSettings()
        self._settings_manager = None
        self.working_folder = None
        self.output_folder = None

        logger.info("Closed working folder")
        self.folders_changed.emit()
        self.settings_changed.emit()
        self.images_changed.emit()

    def set_output_folder(self, folder: Path) -> bool:
        """
        Set the folder exports are written to.

        Returns:
            True if the folder exists and was set
        """
        folder = Path(folder)
        if not folder.is_dir():
            logger.warning(f"Not a directory, ignoring output folder: {folder}")
            return False

        self.output_folder = folder
        self.folders_changed.emit()
        return True

    def unset_output_folder(self) -> None:
        self.output_folder = None
        self.folders_changed.emit()

    def _stop_watcher(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher.deleteLater()
            self._watcher = None

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_active()

    # === Settings ===

    def update_settings(self, **kwargs: Any) -> bool:
        """
        Update workspace settings and write them to the working folder.

        Unknown names and invalid values are logged and ignored. Writing
        is best-effort: a failure is logged and reported through the
        return value only.

        Args:
            **kwargs: Setting names and their new values

        Returns:
            True if the settings changed and were persisted
        """
        if not self.settings.update(**kwargs):
            return False

        self.settings_changed.emit()
        return self._save_settings()

    def _save_settings(self) -> bool:
        if self._settings_manager is None:
            return False
        return self._settings_manager.save(self.settings)

    # === Folder sync ===

    def refresh_images(self) -> bool:
        """
        Sync the image list with the working folder.

        Safe to call repeatedly; nothing changes when the folder has not.

        Returns:
            True if the image list changed
        """
        if self.working_folder is None:
            return False

        changed = reconcile(self.images, list_images(self.working_folder))
        if changed:
            self.images_changed.emit()
        return changed

    # === Persistence ===

    def save(self) -> bool:
        """Write annotations.json to the working folder."""
        if self.working_folder is None:
            logger.warning("No working folder, nothing to save")
            return False
        return self.annotations_file.save(self.working_folder, self.images)

    def export(self) -> bool:
        """
        Export the workspace.

        Without an output folder only annotations.json is written to the
        working folder. Otherwise every image is re-encoded into the output
        folder, followed by an annotations.json describing the exported
        copies. The first image that fails stops the export and no
        annotations file is written.

        Returns:
            True if the export completed
        """
        if self.output_folder is None:
            logger.info("No output folder set, saving annotations only")
            ok = self.save()
            self.export_finished.emit(ok)
            return ok

        exported: List[AnnotatedImage] = []
        for image in self.images:
            destination = self.output_folder / image.short_name
            result = image.export_image(destination, self.settings.export_scale)
            if result is None:
                logger.error(
                    f"Export aborted: failed to export {image.short_name} "
                    f"({len(exported)} of {len(self.images)} images written)"
                )
                self.export_finished.emit(False)
                return False
            exported.append(result)

        ok = self.annotations_file.save(self.output_folder, exported)
        if ok:
            logger.info(f"Exported {len(exported)} images to {self.output_folder}")
        self.export_finished.emit(ok)
        return ok

    # === Images ===

    @property
    def active_image_index(self) -> Optional[int]:
        return collection.active_index(self.images)

    @property
    def active_image(self) -> Optional[AnnotatedImage]:
        return collection.active_image(self.images)

    @property
    def marked_images(self) -> List[AnnotatedImage]:
        return collection.marked(self.images)

    @property
    def pending_images(self) -> int:
        """Number of images disabled for export."""
        return collection.pending_count(self.images)

    @property
    def current_scale_factor(self) -> Optional[float]:
        """
        Ratio between the viewport and the active image.

        Returns:
            Scale factor, or None without an active image or its size
        """
        image = self.active_image
        if image is None:
            return None
        size = image.size
        if size is None:
            return None
        return scale_factor(self.viewport_size.width(), size.width())

    def find_image(self, path: Path) -> Optional[AnnotatedImage]:
        return collection.find_image(self.images, path)

    def activate_image(self, image: AnnotatedImage) -> bool:
        """Make an image the active one."""
        if not collection.activate(self.images, image):
            return False
        self.images_changed.emit()
        return True

    def toggle_marked(self, image: AnnotatedImage) -> bool:
        if not collection.toggle_marked(self.images, image):
            return False
        self.images_changed.emit()
        return True

    def activate_next_image(self) -> bool:
        if not collection.activate_next(self.images):
            return False
        self.images_changed.emit()
        return True

    def activate_previous_image(self) -> bool:
        if not collection.activate_next(self.images, reverse=True):
            return False
        self.images_changed.emit()
        return True

    def toggle_navigator(self) -> None:
        self.navigation.navigator_visible = not self.navigation.navigator_visible

    # === Annotations ===

    def _view_to_image_factor(self) -> Optional[float]:
        factor = self.current_scale_factor
        if factor is None or factor <= 0:
            return None
        return 1 / factor

    def add_annotation(self, view_rect: QRectF) -> Optional[Annotation]:
        """
        Add an annotation drawn in view coordinates to the active image.

        Args:
            view_rect: Rectangle in viewport coordinates

        Returns:
            The new annotation, or None without an active, measurable image
        """
        image = self.active_image
        factor = self._view_to_image_factor()
        if image is None or factor is None:
            return None

        annotation = image.add_annotation(scaled_rect(view_rect, factor))
        self.images_changed.emit()
        return annotation

    def select_annotation(self, annotation: Annotation) -> None:
        image = self.active_image
        if image is not None:
            image.toggle(annotation)
            self.images_changed.emit()

    def begin_moving_annotation(self, annotation: Annotation) -> None:
        image = self.active_image
        if image is not None:
            image.begin_moving(annotation)
            self.images_changed.emit()

    def move_annotation(self, annotation: Annotation, view_origin: QPointF) -> bool:
        """
        Finish moving an annotation to an origin given in view coordinates.

        Returns:
            True if the annotation was moved
        """
        image = self.active_image
        factor = self._view_to_image_factor()
        if image is None or factor is None:
            return False

        image.move(annotation, scaled_point(view_origin, factor))
        self.images_changed.emit()
        return True

    def remove_active_annotation(self) -> Optional[Annotation]:
        """Remove the selected annotation of the active image."""
        removed = collection.remove_active_annotation(self.images)
        if removed is not None:
            self.images_changed.emit()
        return removed
