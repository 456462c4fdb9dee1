"""Allow running TomatoClock as a module: python -m tomatoclock."""

import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .log import configure_logging, install_excepthook
from .app import TomatoClockApp


def main() -> None:
    logger = configure_logging()
    install_excepthook(logger)
    init_db()
    logger.info("TomatoClock ready!")

    app = QApplication(sys.argv)
    app.setApplicationName("TomatoClock")
    app.setOrganizationName("TomatoClock")
    app.setQuitOnLastWindowClosed(False)

    tray = TomatoClockApp()
    tray.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
