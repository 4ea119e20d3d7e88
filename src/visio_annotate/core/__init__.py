"""Core business logic modules for Visio Annotate."""

from .models import Annotation, AnnotatedImage
from .config import AppConfig, ConfigManager, WorkspaceSettings, WorkspaceSettingsManager
from .annotation_file import AnnotationsFile
from .watcher import FolderWatcher
from .workspace import Workspace

__all__ = [
    "Annotation",
    "AnnotatedImage",
    "AppConfig",
    "ConfigManager",
    "WorkspaceSettings",
    "WorkspaceSettingsManager",
    "AnnotationsFile",
    "FolderWatcher",
    "Workspace",
]
