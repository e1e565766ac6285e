"""Sign-in and sign-up pages.

Both pages talk to the shared :class:`~ProductCatalog.core.session.SessionGate`
and report failures inline with a colored message label.
"""
import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets

from . import ui
from ..core import session
from ..status import status
from .actions import signals


class AuthWidget(QtWidgets.QWidget):
    """Base layout shared by the sign-in and sign-up pages."""
    title = ''
    submit_label = ''
    link_label = ''

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.email_editor = None
        self.password_editor = None
        self.submit_button = None
        self.link_button = None
        self.message_label = None

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        self.layout().setContentsMargins(o, o, o, o)
        self.layout().setSpacing(ui.Size.Indicator(2.0))
        self.layout().setAlignment(QtCore.Qt.AlignCenter)

        label = QtWidgets.QLabel(self.title, parent=self)
        font = label.font()
        font.setPixelSize(ui.Size.LargeText(1.5))
        label.setFont(font)
        self.layout().addWidget(label, 0, QtCore.Qt.AlignCenter)

        self.email_editor = QtWidgets.QLineEdit(parent=self)
        self.email_editor.setPlaceholderText('Email')
        self.layout().addWidget(self.email_editor)

        self.password_editor = QtWidgets.QLineEdit(parent=self)
        self.password_editor.setPlaceholderText('Password')
        self.password_editor.setEchoMode(QtWidgets.QLineEdit.Password)
        self.layout().addWidget(self.password_editor)

        self._create_extra_fields()

        self.submit_button = QtWidgets.QPushButton(self.submit_label, parent=self)
        self.submit_button.setDefault(True)
        self.layout().addWidget(self.submit_button)

        self.message_label = QtWidgets.QLabel(parent=self)
        self.message_label.setWordWrap(True)
        self.layout().addWidget(self.message_label)

        self.link_button = QtWidgets.QPushButton(self.link_label, parent=self)
        self.link_button.setFlat(True)
        self.layout().addWidget(self.link_button)

    def _create_extra_fields(self) -> None:
        pass

    def _connect_signals(self) -> None:
        self.submit_button.clicked.connect(self.submit)
        self.password_editor.returnPressed.connect(self.submit)

    def set_message(self, message: str, color: ui.Color = ui.Color.Error) -> None:
        ui.set_message_style(self.message_label, color)
        self.message_label.setText(message)

    def set_busy(self, busy: bool) -> None:
        self.submit_button.setEnabled(not busy)
        self.submit_button.setText('Processing...' if busy else self.submit_label)

    @QtCore.Slot()
    def clear(self) -> None:
        """Reset the editors and the message."""
        self.email_editor.clear()
        self.password_editor.clear()
        self.message_label.clear()

    @QtCore.Slot()
    def submit(self) -> None:
        raise NotImplementedError('Abstract method must be implemented by subclasses.')


class SignInWidget(AuthWidget):
    """Sign-in page. Emits ``signals.signedIn`` through the session gate on success."""
    title = 'Sign In'
    submit_label = 'Sign In'
    link_label = "Don't have an account? Sign Up"

    def _connect_signals(self) -> None:
        super()._connect_signals()
        self.link_button.clicked.connect(signals.showSignUp)

    @QtCore.Slot()
    def submit(self) -> None:
        self.set_busy(True)
        try:
            session.get_gate().sign_in(self.email_editor.text(), self.password_editor.text())
        except status.BaseStatusException as ex:
            self.set_message(ex.status_message)
            return
        finally:
            self.set_busy(False)
        self.clear()


class SignUpWidget(AuthWidget):
    """Sign-up page registering a new account."""
    title = 'Sign Up'
    submit_label = 'Sign Up'
    link_label = 'Already have an account? Sign In'

    def _create_extra_fields(self) -> None:
        self.confirm_editor = QtWidgets.QLineEdit(parent=self)
        self.confirm_editor.setPlaceholderText('Confirm Password')
        self.confirm_editor.setEchoMode(QtWidgets.QLineEdit.Password)
        self.layout().addWidget(self.confirm_editor)

    def _connect_signals(self) -> None:
        self.submit_button.clicked.connect(self.submit)
        self.confirm_editor.returnPressed.connect(self.submit)
        self.link_button.clicked.connect(signals.showSignIn)

    @QtCore.Slot()
    def clear(self) -> None:
        super().clear()
        self.confirm_editor.clear()

    @QtCore.Slot()
    def submit(self) -> None:
        self.set_busy(True)
        try:
            user = session.get_gate().sign_up(
                self.email_editor.text(),
                self.password_editor.text(),
                self.confirm_editor.text()
            )
        except status.ValidationException as ex:
            self.set_message(f'Please enter a valid {" and ".join(ex.fields)}.')
            return
        except status.BaseStatusException as ex:
            self.set_message(ex.status_message)
            return
        finally:
            self.set_busy(False)

        logging.debug(f'Signed up {user.email}')
        self.clear()
        self.set_message('Signup successful! You can now log in.', ui.Color.Success)
