"""Application-wide Qt signals and utility slots for ProductCatalog.

This module provides:
    - show_logs slot: opens the in-app log viewer.
    - Signals: custom Qt signals for configuration changes, the session lifecycle,
      page navigation (showSignIn, showSignUp, showCatalog), logs and errors.
"""
import logging

from PySide6 import QtCore


@QtCore.Slot()
def show_logs() -> None:
    """
    Opens the log viewer dialog.
    """
    from ..log import view

    try:
        view.show()
    except RuntimeError as ex:
        logging.debug(f'Could not show the log viewer: {ex}')


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config, session and UI events."""
    initializationRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)
    metadataChanged = QtCore.Signal(str, object)

    signedIn = QtCore.Signal(str)
    signedOut = QtCore.Signal()

    showSignIn = QtCore.Signal()
    showSignUp = QtCore.Signal()
    showCatalog = QtCore.Signal()
    showLogs = QtCore.Signal()

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        self.showLogs.connect(show_logs)

        self.signedIn.connect(lambda email: logging.info(f'Signed in as {email}'))
        self.signedOut.connect(lambda: logging.info('Signed out'))


signals = Signals()
