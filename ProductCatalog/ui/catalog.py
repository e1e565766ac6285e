"""Catalog page: product table, product form and per-category summary.

This module provides:
    - ProductModel: table model listing the catalog's products
    - SummaryModel: table model showing the per-category summary DataFrame
    - ProductForm: editors for the product drafts
    - CatalogWidget: page wiring the models and form to a CatalogEngine
"""
import enum
import logging
from typing import Any, List, Optional

import pandas as pd
from PySide6 import QtCore, QtWidgets

from . import ui
from ..core import session
from ..core import store
from ..core.catalog import CatalogEngine, Drafts, EditState
from ..settings import lib
from ..settings import locale
from ..status import status
from .actions import signals


class Columns(enum.IntEnum):
    Name = 0
    Price = 1
    Description = 2
    Category = 3


def format_price(value: Any) -> str:
    """Format a price with the locale and currency of the settings."""
    return locale.format_price(value, lib.settings['locale'], lib.settings['currency'] or None)


class ProductModel(QtCore.QAbstractTableModel):
    """Lists products, one row per product. The product id is stored in ``Qt.UserRole``."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: List[store.Product] = []

        signals.metadataChanged.connect(self.on_metadata_changed)

    @QtCore.Slot(list)
    def set_products(self, products: List[store.Product]) -> None:
        self.beginResetModel()
        self._data = list(products)
        self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.set_products([])

    @QtCore.Slot(str, object)
    def on_metadata_changed(self, key: str, value: object) -> None:
        if key not in ('locale', 'currency') or not self._data:
            return
        self.dataChanged.emit(
            self.index(0, Columns.Price.value),
            self.index(self.rowCount() - 1, Columns.Price.value)
        )

    def product(self, row: int) -> Optional[store.Product]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        return len(self._data)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        return len(Columns)

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return Columns(section).name
        return None

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        product = self.product(index.row()) if index.isValid() else None
        if product is None:
            return None

        if role == QtCore.Qt.UserRole:
            return product.id

        column = index.column()
        if role == QtCore.Qt.DisplayRole:
            if column == Columns.Name.value:
                return product.name
            if column == Columns.Price.value:
                return format_price(product.price)
            if column == Columns.Description.value:
                return product.description
            if column == Columns.Category.value:
                return product.category
        elif role == QtCore.Qt.TextAlignmentRole and column == Columns.Price.value:
            return QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter
        elif role == QtCore.Qt.ToolTipRole:
            return f'{product.name}\n{product.description}\nCategory: {product.category}'
        return None


class SummaryModel(QtCore.QAbstractTableModel):
    """Shows the DataFrame returned by :meth:`CatalogEngine.summary`."""

    headers = ('Category', 'Products', 'Total', 'Average')

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._df = pd.DataFrame()

    def set_summary(self, df: pd.DataFrame) -> None:
        self.beginResetModel()
        self._df = df
        self.endResetModel()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        return len(self._df.index)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        return len(self.headers)

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return self.headers[section]
        return None

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or role != QtCore.Qt.DisplayRole:
            return None

        row = self._df.iloc[index.row()]
        if index.column() == 0:
            return row['category']
        if index.column() == 1:
            return f'{row["products"]}'
        if index.column() == 2:
            return format_price(row['total'])
        if index.column() == 3:
            return format_price(row['average'])
        return None


class ProductForm(QtWidgets.QWidget):
    """Editors for the product drafts.

    Signals:
        draftChanged (str, str): Emitted with the field name and its new text.
        submitRequested: Emitted when the submit button is clicked.
        cancelRequested: Emitted when the cancel button is clicked.
    """
    draftChanged = QtCore.Signal(str, str)
    submitRequested = QtCore.Signal()
    cancelRequested = QtCore.Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.title_label = None
        self.name_editor = None
        self.price_editor = None
        self.description_editor = None
        self.category_editor = None
        self.submit_button = None
        self.cancel_button = None

        self._create_ui()
        self._connect_signals()
        self.set_editing(False)

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Indicator(1.0))

        self.title_label = QtWidgets.QLabel(parent=self)
        self.layout().addWidget(self.title_label)

        self.name_editor = QtWidgets.QLineEdit(parent=self)
        self.name_editor.setPlaceholderText('Product Name')
        self.layout().addWidget(self.name_editor)

        self.price_editor = QtWidgets.QLineEdit(parent=self)
        self.price_editor.setPlaceholderText('Price')
        self.layout().addWidget(self.price_editor)

        self.description_editor = QtWidgets.QPlainTextEdit(parent=self)
        self.description_editor.setPlaceholderText('Description')
        self.description_editor.setFixedHeight(ui.Size.RowHeight(2.0))
        self.layout().addWidget(self.description_editor)

        self.category_editor = QtWidgets.QLineEdit(parent=self)
        self.category_editor.setPlaceholderText('Category')
        self.layout().addWidget(self.category_editor)

        row = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(row)
        row.layout().setContentsMargins(0, 0, 0, 0)

        self.submit_button = QtWidgets.QPushButton(parent=row)
        self.submit_button.setDefault(True)
        row.layout().addWidget(self.submit_button, 1)

        self.cancel_button = QtWidgets.QPushButton('Cancel', parent=row)
        row.layout().addWidget(self.cancel_button, 0)

        self.layout().addWidget(row)

    def _connect_signals(self) -> None:
        self.name_editor.textChanged.connect(lambda v: self.draftChanged.emit('name', v))
        self.price_editor.textChanged.connect(lambda v: self.draftChanged.emit('price', v))
        self.description_editor.textChanged.connect(
            lambda: self.draftChanged.emit('description', self.description_editor.toPlainText())
        )
        self.category_editor.textChanged.connect(lambda v: self.draftChanged.emit('category', v))

        self.submit_button.clicked.connect(self.submitRequested)
        self.cancel_button.clicked.connect(self.cancelRequested)

    def editors(self) -> dict:
        return {
            'name': self.name_editor,
            'price': self.price_editor,
            'description': self.description_editor,
            'category': self.category_editor,
        }

    def drafts(self) -> Drafts:
        """Return the current editor values."""
        return Drafts(
            name=self.name_editor.text(),
            price=self.price_editor.text(),
            description=self.description_editor.toPlainText(),
            category=self.category_editor.text(),
        )

    def set_drafts(self, drafts: Drafts) -> None:
        """Show the drafts in the editors without emitting draftChanged."""
        for editor in self.editors().values():
            editor.blockSignals(True)
        try:
            self.name_editor.setText(drafts.name)
            self.price_editor.setText(drafts.price)
            self.description_editor.setPlainText(drafts.description)
            self.category_editor.setText(drafts.category)
        finally:
            for editor in self.editors().values():
                editor.blockSignals(False)
        self.mark_invalid(())

    def set_editing(self, editing: bool) -> None:
        self.title_label.setText('Edit Product' if editing else 'Add New Product')
        self.submit_button.setText('Update Product' if editing else 'Add Product')
        self.cancel_button.setVisible(editing)

    def mark_invalid(self, fields) -> None:
        """Highlight the editors of the given fields and reset the others."""
        for k, editor in self.editors().items():
            if k in fields:
                editor.setStyleSheet(f'border: 1px solid {ui.Color.Error().name()};')
            else:
                editor.setStyleSheet('')


class CatalogWidget(QtWidgets.QWidget):
    """The signed-in page. Owns the catalog engine of the current user."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.engine: Optional[CatalogEngine] = None

        self.welcome_label = None
        self.name_label = None
        self.form = None
        self.message_label = None
        self.count_label = None
        self.empty_label = None
        self.view = None
        self.summary_view = None
        self.edit_button = None
        self.delete_button = None
        self.logout_button = None
        self.logs_button = None

        self._create_ui()
        self._connect_signals()
        self.update_name()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        self.layout().setContentsMargins(o, o, o, o)
        self.layout().setSpacing(ui.Size.Indicator(2.0))

        header = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(header)
        header.layout().setContentsMargins(0, 0, 0, 0)

        self.welcome_label = QtWidgets.QLabel(parent=header)
        font = self.welcome_label.font()
        font.setPixelSize(ui.Size.LargeText(1.25))
        self.welcome_label.setFont(font)
        header.layout().addWidget(self.welcome_label, 1)

        self.logs_button = QtWidgets.QPushButton('Logs', parent=header)
        header.layout().addWidget(self.logs_button, 0)
        self.logout_button = QtWidgets.QPushButton('Logout', parent=header)
        header.layout().addWidget(self.logout_button, 0)

        self.layout().addWidget(header)

        self.name_label = QtWidgets.QLabel(parent=self)
        self.layout().addWidget(self.name_label)

        self.form = ProductForm(parent=self)
        self.layout().addWidget(self.form)

        self.message_label = QtWidgets.QLabel(parent=self)
        self.message_label.setWordWrap(True)
        self.layout().addWidget(self.message_label)

        self.count_label = QtWidgets.QLabel(parent=self)
        self.layout().addWidget(self.count_label)

        self.empty_label = QtWidgets.QLabel('No products found. Add your first product above!', parent=self)
        ui.set_message_style(self.empty_label, ui.Color.Disabled)
        self.layout().addWidget(self.empty_label)

        self.view = QtWidgets.QTableView(parent=self)
        self.view.setModel(ProductModel(parent=self.view))
        self.view.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.view.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.view.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.view.verticalHeader().setHidden(True)
        self.view.verticalHeader().setDefaultSectionSize(ui.Size.RowHeight(1.0))
        self.view.horizontalHeader().setSectionResizeMode(
            Columns.Description.value, QtWidgets.QHeaderView.Stretch
        )
        self.layout().addWidget(self.view, 2)

        row = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(row)
        row.layout().setContentsMargins(0, 0, 0, 0)
        row.layout().addStretch(1)
        self.edit_button = QtWidgets.QPushButton('Edit', parent=row)
        row.layout().addWidget(self.edit_button)
        self.delete_button = QtWidgets.QPushButton('Delete', parent=row)
        row.layout().addWidget(self.delete_button)
        self.layout().addWidget(row)

        self.summary_view = QtWidgets.QTableView(parent=self)
        self.summary_view.setModel(SummaryModel(parent=self.summary_view))
        self.summary_view.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.summary_view.verticalHeader().setHidden(True)
        self.summary_view.horizontalHeader().setSectionResizeMode(QtWidgets.QHeaderView.Stretch)
        self.layout().addWidget(self.summary_view, 1)

    def _connect_signals(self) -> None:
        self.form.draftChanged.connect(self.on_draft_changed)
        self.form.submitRequested.connect(self.submit)
        self.form.cancelRequested.connect(self.cancel_edit)

        self.edit_button.clicked.connect(self.edit_selected)
        self.delete_button.clicked.connect(self.delete_selected)
        self.view.doubleClicked.connect(lambda index: self.edit_product(index.data(QtCore.Qt.UserRole)))

        self.logout_button.clicked.connect(self.logout)
        self.logs_button.clicked.connect(signals.showLogs)

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key == 'name':
                self.update_name()
            elif key in ('locale', 'currency'):
                self.update_summary()

        signals.metadataChanged.connect(metadata_changed)

    @QtCore.Slot()
    def update_name(self) -> None:
        self.name_label.setText(lib.settings['name'] or 'Product Management System')

    def set_owner(self, email: Optional[str]) -> None:
        """Create the engine for the signed-in user and load their catalog.

        Passing None tears down the current engine.
        """
        if self.engine is not None:
            self.engine.deleteLater()
            self.engine = None

        self.view.model().clear_data()
        self.summary_view.model().set_summary(pd.DataFrame())
        self.form.set_drafts(Drafts())
        self.form.set_editing(False)
        self.message_label.clear()

        if not email:
            self.welcome_label.clear()
            self.update_count([])
            return

        self.welcome_label.setText(f'Welcome, {email}!')
        try:
            self.engine = CatalogEngine(store.get_store(email), owner=email, parent=self)
            self.engine.catalogChanged.connect(self.on_catalog_changed)
            self.engine.editSessionChanged.connect(self.on_edit_session_changed)
            self.engine.busyChanged.connect(self.on_busy_changed)
            self.engine.load_catalog()
        except status.StoreUnavailableException as ex:
            self.set_message(ex.status_message)
            self.update_count([])

    def set_message(self, message: str, color: ui.Color = ui.Color.Error) -> None:
        ui.set_message_style(self.message_label, color)
        self.message_label.setText(message)

    def update_count(self, products: List[store.Product]) -> None:
        self.count_label.setText(f'Your Products ({len(products)})')
        self.empty_label.setVisible(not products)
        self.view.setHidden(not products)

    def update_summary(self) -> None:
        if self.engine is None:
            return
        self.summary_view.model().set_summary(self.engine.summary())

    @QtCore.Slot(list)
    def on_catalog_changed(self, products: List[store.Product]) -> None:
        self.view.model().set_products(products)
        self.update_count(products)
        self.update_summary()

    @QtCore.Slot(object)
    def on_edit_session_changed(self, product: Optional[store.Product]) -> None:
        self.form.set_editing(product is not None)
        self.form.set_drafts(self.engine.drafts)

    @QtCore.Slot(bool)
    def on_busy_changed(self, busy: bool) -> None:
        self.form.setEnabled(not busy)
        self.edit_button.setEnabled(not busy)
        self.delete_button.setEnabled(not busy)

    @QtCore.Slot(str, str)
    def on_draft_changed(self, field: str, value: str) -> None:
        if self.engine is None:
            return
        self.engine.update_drafts(**{field: value})

    def selected_id(self) -> Optional[int]:
        index = self.view.selectionModel().currentIndex()
        if not index.isValid():
            return None
        return index.data(QtCore.Qt.UserRole)

    @QtCore.Slot()
    def submit(self) -> None:
        if self.engine is None:
            return

        editing = self.engine.state == EditState.Editing
        try:
            self.engine.submit()
        except status.ValidationException as ex:
            self.form.mark_invalid(ex.fields)
            if 'price' in ex.fields and len(ex.fields) == 1:
                self.set_message('Please enter a valid, non-negative price.')
            else:
                self.set_message(ex.status_message)
            return
        except status.StoreUnavailableException as ex:
            self.set_message(ex.status_message)
            ui.show_error(self, 'Product Store', ex.status_message)
            return
        except status.BaseStatusException as ex:
            self.set_message(ex.status_message)
            return

        self.form.set_drafts(self.engine.drafts)
        self.set_message('Product updated.' if editing else 'Product added.', ui.Color.Success)

    @QtCore.Slot()
    def cancel_edit(self) -> None:
        if self.engine is None:
            return
        self.engine.cancel_edit()
        self.form.set_drafts(self.engine.drafts)
        self.message_label.clear()

    @QtCore.Slot()
    def edit_selected(self) -> None:
        self.edit_product(self.selected_id())

    def edit_product(self, product_id: Optional[int]) -> None:
        if self.engine is None or product_id is None:
            return
        try:
            self.engine.begin_edit(product_id)
        except status.NotFoundException as ex:
            self.set_message(ex.status_message)
            return
        self.form.set_drafts(self.engine.drafts)
        self.message_label.clear()

    @QtCore.Slot()
    def delete_selected(self) -> None:
        self.delete_product(self.selected_id())

    def delete_product(self, product_id: Optional[int]) -> None:
        if self.engine is None or product_id is None:
            return

        if lib.settings['confirm_delete'] and not ui.confirm(
                self, 'Delete Product', 'Are you sure you want to delete this product?'):
            return

        try:
            self.engine.remove(product_id)
        except status.StoreUnavailableException as ex:
            self.set_message(ex.status_message)
            ui.show_error(self, 'Product Store', ex.status_message)
            return
        except status.BaseStatusException as ex:
            self.set_message(ex.status_message)
            return
        self.set_message('Product deleted.', ui.Color.Success)

    @QtCore.Slot()
    def logout(self) -> None:
        try:
            session.get_gate().sign_out()
        except status.SessionUnavailableException as ex:
            logging.error(f'Could not sign out: {ex}')
