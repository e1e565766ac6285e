"""
ProductCatalog: desktop application for managing a personal product catalog.

This package provides:

- :mod:`ProductCatalog.core` – Record stores, the catalog engine, local accounts and category summaries.
- :mod:`ProductCatalog.ui` – A PySide6-based UI with sign-in, sign-up and catalog pages.
- :mod:`ProductCatalog.settings` – Settings management with schema validation and price formatting.
- :mod:`ProductCatalog.status` – Status codes and the exceptions raised across the application.
- :mod:`ProductCatalog.log` – In-app logging with a log viewer.

Use :func:`ProductCatalog.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('ProductCatalog requires Python 3.11 or higher.')

__version__ = '0.1.0'
__description__ = 'ProductCatalog: desktop application for managing a personal product catalog.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the ProductCatalog GUI application and enter its event loop.

    Initializes the QApplication, shows the main window, and starts the Qt event loop.
    """
    from .ui import app
    from .ui import main
    from .ui.actions import signals
    app = app.Application(sys.argv)
    main.show()

    # Restore the signed-in user, if any
    QtCore.QTimer.singleShot(100, signals.initializationRequested)

    sys.exit(app.exec())


if __name__ == '__main__':
    exec_()
