"""Log view and dialog for displaying and interacting with log messages.

This module provides:
    - LogTableView: table view for formatted log entries
    - LogDialog: window with level filtering and clear actions
    - show(): display the shared log dialog
"""
import logging

from PySide6 import QtCore, QtWidgets

from .model import Columns, LogTableModel
from ..ui import ui

widget = None


def show():
    """Show the log dialog, creating it on first use.

    Raises:
        RuntimeError: If no QApplication is running.
    """
    global widget

    if not QtWidgets.QApplication.instance():
        raise RuntimeError('The log viewer requires a QApplication instance.')

    if widget is None:
        widget = LogDialog()

    widget.view.model().refresh()
    widget.show()
    widget.raise_()


class LogTableView(QtWidgets.QTableView):
    """A QTableView displaying log messages from LogTableModel."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setWordWrap(True)

        self.setModel(LogTableModel(parent=self))
        self._init_headers()

    def _init_headers(self):
        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        header.setDefaultSectionSize(ui.Size.DefaultWidth(0.25))
        header.setSectionResizeMode(Columns.Date.value, QtWidgets.QHeaderView.Interactive)
        header.setSectionResizeMode(Columns.Module.value, QtWidgets.QHeaderView.Interactive)
        header.setSectionResizeMode(Columns.Level.value, QtWidgets.QHeaderView.Interactive)
        header.setSectionResizeMode(Columns.Message.value, QtWidgets.QHeaderView.Stretch)

        vheader = self.verticalHeader()
        vheader.setDefaultSectionSize(ui.Size.RowHeight(1.0))
        vheader.setHidden(True)


class LogDialog(QtWidgets.QDialog):
    """Non-modal window listing the in-app log tank."""

    levels = (
        ('Debug', logging.DEBUG),
        ('Info', logging.INFO),
        ('Warning', logging.WARNING),
        ('Error', logging.ERROR),
    )

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setWindowTitle('Logs')

        self.level_combo = None
        self.view = None

        self._create_ui()
        self._connect_signals()

    def _create_ui(self):
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(0.5)
        self.layout().setContentsMargins(o, o, o, o)

        row = QtWidgets.QHBoxLayout()
        self.level_combo = QtWidgets.QComboBox(self)
        for name, level in self.levels:
            self.level_combo.addItem(name, level)
        row.addWidget(self.level_combo)
        row.addStretch(1)

        self.clear_button = QtWidgets.QPushButton('Clear', self)
        row.addWidget(self.clear_button)
        self.layout().addLayout(row)

        self.view = LogTableView(parent=self)
        self.layout().addWidget(self.view, 1)

    def _connect_signals(self):
        model = self.view.model()
        self.level_combo.currentIndexChanged.connect(
            lambda idx: model.set_minimum_level(self.level_combo.itemData(idx))
        )
        self.clear_button.clicked.connect(model.clear_logs)

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.5),
            ui.Size.DefaultHeight(0.8)
        )
