"""Configuration management for Visio Annotate."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Default application configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")

# Per-workspace settings live in a hidden folder inside the working folder
WORKSPACE_DIR_NAME = ".visioannotate"
WORKSPACE_FILE_NAME = "workspace.json"


def _is_valid_scale(value: Any) -> bool:
    """Export scale must be a finite, positive number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


@dataclass
class WorkspaceSettings:
    """
    Settings stored with a working folder.

    Written to ``.visioannotate/workspace.json`` whenever they change.
    """

    show_annotation_labels: bool = True
    export_scale: float = 1.0  # Resize factor applied to exported images

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "showAnnotationLabels": self.show_annotation_labels,
            "exportScale": self.export_scale,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WorkspaceSettings:
        """Create settings from dictionary."""
        export_scale = data.get("exportScale", 1.0)
        if not _is_valid_scale(export_scale):
            logger.warning(f"Invalid export scale {export_scale!r}, using 1.0")
            export_scale = 1.0

        return cls(
            show_annotation_labels=bool(data.get("showAnnotationLabels", True)),
            export_scale=float(export_scale),
        )

    def update(self, **kwargs: Any) -> bool:
        """
        Apply new values, ignoring unknown names and invalid values.

        Args:
            **kwargs: Setting names and their new values

        Returns:
            True if any setting was changed
        """
        names = {f.name for f in fields(self)}
        changed = False
        for key, value in kwargs.items():
            if key not in names:
                logger.warning(f"Unknown workspace setting: {key}")
                continue

            if key == "export_scale":
                if not _is_valid_scale(value):
                    logger.warning(f"Ignoring invalid export scale {value!r}")
                    continue
                value = float(value)
            elif key == "show_annotation_labels" and not isinstance(value, bool):
                logger.warning(f"Ignoring non-boolean show_annotation_labels {value!r}")
                continue

            if getattr(self, key) != value:
                setattr(self, key, value)
                changed = True
        return changed


class WorkspaceSettingsManager:
    """Loads and saves the settings of one working folder."""

    def __init__(self, folder: Path) -> None:
        """
        Initialize with a working folder.

        Args:
            folder: Working folder the settings belong to
        """
        self.folder = Path(folder)
        self.settings_dir = self.folder / WORKSPACE_DIR_NAME
        self.settings_path = self.settings_dir / WORKSPACE_FILE_NAME

    def load(self) -> WorkspaceSettings:
        """
        Load settings from the workspace file.

        A missing, unreadable or invalid file yields default settings.

        Returns:
            WorkspaceSettings instance
        """
        if not self.settings_path.is_file():
            logger.info(f"Workspace settings not found at {self.settings_path}, using defaults")
            return WorkspaceSettings()

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing workspace settings: {e}")
            return WorkspaceSettings()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading workspace settings: {e}")
            return WorkspaceSettings()

        if not isinstance(data, dict):
            logger.error(f"Invalid workspace settings in {self.settings_path}")
            return WorkspaceSettings()

        logger.info(f"Loaded workspace settings from {self.settings_path}")
        return WorkspaceSettings.from_dict(data)

    def save(self, settings: WorkspaceSettings) -> bool:
        """
        Write settings to the workspace file, creating its folder if needed.

        Returns:
            True if save was successful
        """
        try:
            self.settings_dir.mkdir(exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving workspace settings: {e}")
            return False

        logger.debug(f"Saved workspace settings to {self.settings_path}")
        return True


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores user preferences that are not tied to a working folder.
    """

    drag_from_centre: bool = True  # New boxes grow from the drag start point
    show_images_in_sidebar: bool = True
    max_recent_folders: int = 10  # Number of recent folders to remember (0 = disabled)
    recent_folders: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "dragFromCentre": self.drag_from_centre,
            "showImagesInSidebar": self.show_images_in_sidebar,
            "maxRecentFolders": self.max_recent_folders,
            "recentFolders": self.recent_folders,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        return cls(
            drag_from_centre=data.get("dragFromCentre", True),
            show_images_in_sidebar=data.get("showImagesInSidebar", True),
            max_recent_folders=data.get("maxRecentFolders", 10),
            recent_folders=list(data.get("recentFolders", [])),
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

        if not isinstance(data, dict):
            logger.error(f"Invalid config file {self.config_path}")
            return AppConfig()

        logger.info(f"Loaded configuration from {self.config_path}")
        return AppConfig.from_dict(data)

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self._config.to_dict(), f, default_flow_style=False)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error saving config: {e}")
            return False

        logger.info(f"Saved configuration to {self.config_path}")
        return True

    def update(self, **kwargs: Any) -> None:
        """
        Update configuration with new values.

        Args:
            **kwargs: Key-value pairs to update
        """
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")
        self.save()

    def add_recent_folder(self, folder: Path) -> None:
        """
        Move a folder to the front of the recent folders list.

        Args:
            folder: Working folder that was opened
        """
        config = self.config
        if config.max_recent_folders <= 0:
            return

        path = str(Path(folder).resolve())
        recent = [p for p in config.recent_folders if p != path]
        recent.insert(0, path)
        config.recent_folders = recent[:config.max_recent_folders]
        self.save()
