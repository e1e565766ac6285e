"""UI sizing and message utilities for ProductCatalog.

This module provides:
    - Size: standardized size constants and scaling logic
    - Color: standardized colors for status messages
    - message helpers that show errors and confirmations
"""
import enum
import math

from PySide6 import QtWidgets, QtGui


class Size(enum.Enum):
    """Enumeration of size values used for UI scaling."""
    LargeText = 16.0
    Indicator = 4.0
    Margin = 18.0
    RowHeight = 34.0
    DefaultWidth = 640.0
    DefaultHeight = 480.0

    def __new__(cls, value):
        obj = object.__new__(cls)
        obj._value_ = float(value)
        return obj

    def __call__(self, multiplier=1.0, apply_scale=True):
        """
        Returns the scaled size value.

        Args:
            multiplier (float): A multiplier to apply to the size.
            apply_scale (bool): If True, applies UI scaling factors.

        Returns:
            int: The scaled size.
        """
        if apply_scale:
            return round(self.size(self._value_) * float(multiplier))
        return round(self._value_ * float(multiplier))

    @classmethod
    def size(cls, value, ui_scale_factor=1.0, dpi=72.0):
        """Scale a value by DPI and UI scale factor."""
        return math.ceil(float(value) * (float(dpi) / 72.0)) * float(ui_scale_factor)


class Color(enum.Enum):
    """Colors used for status feedback."""
    Error = (220, 70, 70)
    Success = (70, 170, 100)
    Disabled = (150, 150, 150)

    def __call__(self) -> QtGui.QColor:
        return QtGui.QColor(*self.value)


def set_message_style(label: QtWidgets.QLabel, color: Color) -> None:
    """Color a feedback label."""
    label.setStyleSheet(f'color: {color().name()};')


def show_error(parent: QtWidgets.QWidget, title: str, message: str) -> None:
    """Show a modal error message box."""
    QtWidgets.QMessageBox.critical(parent, title, message)


def confirm(parent: QtWidgets.QWidget, title: str, message: str) -> bool:
    """Ask a yes/no question and return True when the user accepts."""
    res = QtWidgets.QMessageBox.question(
        parent,
        title,
        message,
        QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        QtWidgets.QMessageBox.No
    )
    return res == QtWidgets.QMessageBox.Yes
