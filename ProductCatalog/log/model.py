import enum
import logging
import re
from typing import Any

from PySide6 import QtCore, QtGui

from .log import get_handler


class Columns(enum.IntEnum):
    """Defines the column indexes for log table data."""
    Date = 0
    Module = 1
    Level = 2
    Message = 3


def parse_record(levelno: int, text: str) -> dict[str, Any]:
    """Split a formatted tank record into its date, module, level and message parts.

    Records that do not follow the log format are returned with the whole text as message.
    """
    match = LogTableModel.re_log_pattern.match(text)
    if not match:
        return {
            'date': '',
            'module': '',
            'level': logging.getLevelName(levelno),
            'levelno': levelno,
            'message': text,
        }
    return {
        'date': match.group('date'),
        'module': match.group('module'),
        'level': match.group('level').strip(),
        'levelno': levelno,
        'message': match.group('message').strip(),
    }


class LogTableModel(QtCore.QAbstractTableModel):
    """
    A model for displaying log messages fetched from the TankHandler.
    """

    re_log_pattern = re.compile(
        r'^\[(?P<date>[^\]]+)\]\s+<(?P<module>[^>]+)>\s+(?P<level>[^:]+):\s+(?P<message>.*)$',
        flags=re.DOTALL
    )

    def __init__(self, parent: Any = None, minimum_level: int = logging.NOTSET):
        super().__init__(parent=parent)
        self._logs: list[dict[str, Any]] = []
        self._minimum_level = minimum_level

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._logs)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return Columns(section).name
        return None

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or index.row() >= len(self._logs):
            return None

        entry = self._logs[index.row()]

        if role == QtCore.Qt.DisplayRole:
            if index.column() == Columns.Date:
                return entry['date']
            elif index.column() == Columns.Module:
                return entry['module']
            elif index.column() == Columns.Level:
                return entry['level']
            elif index.column() == Columns.Message:
                return entry['message']
        elif role == QtCore.Qt.ForegroundRole:
            if entry['levelno'] >= logging.ERROR:
                return QtGui.QColor(220, 70, 70)
            if entry['levelno'] >= logging.WARNING:
                return QtGui.QColor(230, 160, 40)
        elif role == QtCore.Qt.ToolTipRole:
            return entry['message']
        return None

    @QtCore.Slot(int)
    def set_minimum_level(self, level: int) -> None:
        self._minimum_level = level
        self.refresh()

    @QtCore.Slot()
    def refresh(self) -> None:
        """Reload every record at or above the minimum level from the log tank."""
        try:
            handler = get_handler()
        except RuntimeError as ex:
            logging.debug(f'Cannot refresh logs: {ex}')
            return

        self.beginResetModel()
        self._logs = [
            parse_record(lvl, msg) for lvl, msg in handler.tank if lvl >= self._minimum_level
        ]
        self.endResetModel()

    @QtCore.Slot()
    def clear_logs(self) -> None:
        try:
            get_handler().clear_logs()
        except RuntimeError:
            logging.warning('TankHandler not found; cannot clear underlying logs.')

        self.beginResetModel()
        self._logs = []
        self.endResetModel()
