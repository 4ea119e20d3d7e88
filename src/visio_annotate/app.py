"""Application bootstrap for Visio Annotate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QCoreApplication

from .core.config import ConfigManager
from .core.workspace import Workspace

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="visio-annotate",
        description="Open an image folder for annotation and export it.",
    )
    parser.add_argument("folder", type=Path, help="Working folder containing images")
    parser.add_argument("--output", type=Path, help="Folder to export images into")
    parser.add_argument("--export", action="store_true", help="Export and exit")
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and follow changes to the working folder",
    )
    parser.add_argument("--config", type=Path, help="Application config file")
    return parser.parse_args(argv)


def create_application(argv: List[str]) -> QCoreApplication:
    """
    Create and configure the Qt application.

    Returns:
        Configured QCoreApplication instance
    """
    app = QCoreApplication.instance() or QCoreApplication(argv)
    app.setApplicationName("Visio Annotate")
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName("Visio Annotate")
    return app


def create_workspace(config_manager: ConfigManager) -> Workspace:
    """Create a workspace with the view preferences from the app config."""
    workspace = Workspace()
    config = config_manager.config
    workspace.drag_from_centre = config.drag_from_centre
    workspace.show_images_in_sidebar = config.show_images_in_sidebar
    return workspace


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run Visio Annotate.

    Returns:
        Exit code
    """
    args = parse_args(argv)
    logger.info("Starting Visio Annotate")

    app = create_application(sys.argv[:1])
    config_manager = ConfigManager(args.config) if args.config else ConfigManager()
    workspace = create_workspace(config_manager)

    if not workspace.set_working_folder(args.folder):
        logger.error(f"Cannot open working folder: {args.folder}")
        return 1
    config_manager.add_recent_folder(args.folder)

    if args.output is not None and not workspace.set_output_folder(args.output):
        logger.error(f"Cannot use output folder: {args.output}")
        return 1

    if args.export:
        return 0 if workspace.export() else 1

    if args.watch:
        workspace.images_changed.connect(
            lambda: logger.info(f"{len(workspace.images)} images in workspace")
        )
        return app.exec()

    for image in workspace.images:
        logger.info(f"{image.short_name}: {len(image.annotations)} annotations")
    return 0


def main() -> None:
    """Main entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
