"""Application entry point and setup for the lens ray-diagram tutor."""

import logging
import sys

from PySide6.QtWidgets import QApplication

from lenstutor.core.levels import LevelRepository
from lenstutor.core.progress import ProgressStore
from lenstutor.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load the level catalog and saved progress, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Lens Tutor")
    app.setApplicationDisplayName("Lens Ray Diagram Tutor")

    levels = LevelRepository()
    progress_store = ProgressStore(level_count=len(levels))
    logging.info("Progress file: %s", progress_store.file_path)

    window = MainWindow(levels=levels, progress_store=progress_store)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
