"""Main window composition and UI entry points for ProductCatalog.

This module defines:
    - show(): initialize and display the main window
    - Page: indexes of the stacked pages
    - MainWindow: window switching between the sign-in, sign-up and catalog pages
"""
import enum
import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets

from . import ui
from .actions import signals
from .auth import SignInWidget, SignUpWidget
from .catalog import CatalogWidget
from ..core import session
from ..settings import lib
from ..status import status

widget = None


def show():
    global widget

    if widget is None:
        widget = MainWindow()

    widget.show()


class Page(enum.IntEnum):
    SignIn = 0
    SignUp = 1
    Catalog = 2


class MainWindow(QtWidgets.QMainWindow):
    """Top-level window. The current page follows the session signals."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ProductCatalogMainWindow')

        self.stack = None
        self.sign_in_widget = None
        self.sign_up_widget = None
        self.catalog_widget = None

        self._create_ui()
        self._connect_signals()
        self.update_title()

        self.resize(ui.Size.DefaultWidth(1.5), ui.Size.DefaultHeight(1.5))

    def _create_ui(self) -> None:
        self.stack = QtWidgets.QStackedWidget(parent=self)
        self.setCentralWidget(self.stack)

        self.sign_in_widget = SignInWidget(parent=self.stack)
        self.sign_up_widget = SignUpWidget(parent=self.stack)
        self.catalog_widget = CatalogWidget(parent=self.stack)

        self.stack.insertWidget(Page.SignIn.value, self.sign_in_widget)
        self.stack.insertWidget(Page.SignUp.value, self.sign_up_widget)
        self.stack.insertWidget(Page.Catalog.value, self.catalog_widget)
        self.stack.setCurrentIndex(Page.SignIn.value)

    def _connect_signals(self) -> None:
        signals.initializationRequested.connect(self.restore_session)

        signals.showSignIn.connect(lambda: self.set_page(Page.SignIn))
        signals.showSignUp.connect(lambda: self.set_page(Page.SignUp))
        signals.showCatalog.connect(lambda: self.set_page(Page.Catalog))

        signals.signedIn.connect(self.on_signed_in)
        signals.signedOut.connect(self.on_signed_out)
        signals.error.connect(lambda message: self.statusBar().showMessage(message, 5000))

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key == 'name':
                self.update_title()

        signals.metadataChanged.connect(metadata_changed)

    @QtCore.Slot()
    def update_title(self) -> None:
        self.setWindowTitle(lib.settings['name'] or lib.app_name)

    def set_page(self, page: Page) -> None:
        if page == Page.SignIn:
            self.sign_in_widget.clear()
        elif page == Page.SignUp:
            self.sign_up_widget.clear()
        self.stack.setCurrentIndex(page.value)

    @QtCore.Slot()
    def restore_session(self) -> None:
        """Open the catalog of a user who is still signed in."""
        try:
            email = session.get_gate().get_current_user()
        except status.SessionUnavailableException:
            return
        if not email:
            return
        logging.info(f'Restoring the session of {email}')
        self.on_signed_in(email)

    @QtCore.Slot(str)
    def on_signed_in(self, email: str) -> None:
        self.catalog_widget.set_owner(email)
        signals.showCatalog.emit()

    @QtCore.Slot()
    def on_signed_out(self) -> None:
        self.catalog_widget.set_owner(None)
        signals.showSignIn.emit()
