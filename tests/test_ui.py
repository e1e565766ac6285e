"""Tests for the catalog page widgets and models.

Run:
    python -m unittest tests.test_ui
"""
import decimal
from unittest.mock import patch

from PySide6 import QtCore

from ProductCatalog.core import session
from ProductCatalog.core.catalog import Drafts, EditState
from ProductCatalog.core.store import Product
from ProductCatalog.settings import lib
from ProductCatalog.ui.auth import SignInWidget, SignUpWidget
from ProductCatalog.ui.catalog import CatalogWidget, Columns, ProductForm, ProductModel
from tests.base import BaseTestCase

OWNER = 'a@x.com'


class ProductModelTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.model = ProductModel()
        self.model.set_products([
            Product(1, 'Pen', decimal.Decimal('1.5'), 'Blue ink', 'Stationery'),
            Product(2, 'Cup', decimal.Decimal('3'), 'Mug', 'Kitchen'),
        ])

    def test_rows_and_columns(self):
        self.assertEqual(self.model.rowCount(), 2)
        self.assertEqual(self.model.columnCount(), len(Columns))
        self.assertEqual(self.model.headerData(0, QtCore.Qt.Horizontal), 'Name')

    def test_display(self):
        index = self.model.index(0, Columns.Price.value)
        self.assertEqual(self.model.data(index), '$1.50')
        index = self.model.index(1, Columns.Category.value)
        self.assertEqual(self.model.data(index), 'Kitchen')
        self.assertEqual(self.model.data(index, QtCore.Qt.UserRole), 2)

    def test_currency_setting(self):
        lib.settings['currency'] = 'EUR'
        index = self.model.index(0, Columns.Price.value)
        self.assertIn('€', self.model.data(index))


class ProductFormTests(BaseTestCase):

    def test_drafts_round_trip(self):
        form = ProductForm()
        drafts = Drafts('Pen', '1.50', 'Blue ink', 'Stationery')
        form.set_drafts(drafts)
        self.assertEqual(form.drafts(), drafts)

    def test_set_drafts_does_not_emit(self):
        form = ProductForm()
        changes = []
        form.draftChanged.connect(lambda k, v: changes.append((k, v)))
        form.set_drafts(Drafts('Pen', '1', 'd', 'c'))
        self.assertEqual(changes, [])

        form.name_editor.setText('Pencil')
        self.assertEqual(changes, [('name', 'Pencil')])

    def test_editing_labels(self):
        form = ProductForm()
        self.assertEqual(form.submit_button.text(), 'Add Product')
        form.set_editing(True)
        self.assertEqual(form.submit_button.text(), 'Update Product')
        self.assertEqual(form.title_label.text(), 'Edit Product')


class CatalogWidgetTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.widget = CatalogWidget()
        self.widget.set_owner(OWNER)

    def tearDown(self) -> None:
        self.widget.set_owner(None)
        self.widget.deleteLater()
        super().tearDown()

    def fill_form(self, name, price, description, category):
        form = self.widget.form
        form.name_editor.setText(name)
        form.price_editor.setText(price)
        form.description_editor.setPlainText(description)
        form.category_editor.setText(category)

    def test_welcome_and_empty_catalog(self):
        self.assertEqual(self.widget.welcome_label.text(), f'Welcome, {OWNER}!')
        self.assertEqual(self.widget.count_label.text(), 'Your Products (0)')

    def test_add_product(self):
        self.fill_form('Pen', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()

        self.assertEqual(self.widget.count_label.text(), 'Your Products (1)')
        self.assertEqual(self.widget.view.model().rowCount(), 1)
        self.assertEqual(self.widget.form.drafts(), Drafts())
        self.assertEqual(self.widget.summary_view.model().rowCount(), 1)

    def test_add_invalid_product(self):
        self.fill_form('', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()

        self.assertEqual(self.widget.count_label.text(), 'Your Products (0)')
        self.assertEqual(self.widget.message_label.text(), 'Please fill in all fields.')
        self.assertEqual(self.widget.form.drafts().price, '1.50')

    def test_edit_product(self):
        self.fill_form('Pen', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()
        product_id = self.widget.engine.products[0].id

        self.widget.edit_product(product_id)
        self.assertEqual(self.widget.engine.state, EditState.Editing)
        self.assertEqual(self.widget.form.name_editor.text(), 'Pen')
        self.assertEqual(self.widget.form.submit_button.text(), 'Update Product')

        self.widget.form.price_editor.setText('2.00')
        self.widget.submit()
        self.assertEqual(self.widget.engine.products[0].price, decimal.Decimal('2.00'))
        self.assertEqual(self.widget.engine.state, EditState.Idle)

    def test_delete_product_with_confirmation(self):
        self.fill_form('Pen', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()
        product_id = self.widget.engine.products[0].id

        with patch('ProductCatalog.ui.ui.confirm', return_value=False):
            self.widget.delete_product(product_id)
        self.assertEqual(len(self.widget.engine.products), 1)

        with patch('ProductCatalog.ui.ui.confirm', return_value=True):
            self.widget.delete_product(product_id)
        self.assertEqual(self.widget.engine.products, [])
        self.assertEqual(self.widget.count_label.text(), 'Your Products (0)')

    def test_delete_without_confirmation(self):
        lib.settings['confirm_delete'] = False
        self.fill_form('Pen', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()
        product_id = self.widget.engine.products[0].id

        with patch('ProductCatalog.ui.ui.confirm') as confirm:
            self.widget.delete_product(product_id)
        confirm.assert_not_called()
        self.assertEqual(self.widget.engine.products, [])

    def test_catalog_persists_across_sessions(self):
        self.fill_form('Pen', '1.50', 'Blue ink', 'Stationery')
        self.widget.submit()

        self.widget.set_owner(None)
        self.assertIsNone(self.widget.engine)
        self.widget.set_owner(OWNER)
        self.assertEqual([p.name for p in self.widget.engine.products], ['Pen'])

        self.widget.set_owner('b@x.com')
        self.assertEqual(self.widget.engine.products, [])


class AuthWidgetTests(BaseTestCase):

    def test_sign_up_then_sign_in(self):
        sign_up = SignUpWidget()
        sign_up.email_editor.setText(OWNER)
        sign_up.password_editor.setText('pw')
        sign_up.confirm_editor.setText('pw')
        sign_up.submit()
        self.assertEqual(sign_up.message_label.text(), 'Signup successful! You can now log in.')
        self.assertIsNotNone(session.get_gate().get_user(OWNER))

        sign_in = SignInWidget()
        sign_in.email_editor.setText(OWNER)
        sign_in.password_editor.setText('pw')
        sign_in.submit()
        self.assertEqual(session.get_gate().get_current_user(), OWNER)

    def test_sign_up_password_mismatch(self):
        sign_up = SignUpWidget()
        sign_up.email_editor.setText(OWNER)
        sign_up.password_editor.setText('pw')
        sign_up.confirm_editor.setText('other')
        sign_up.submit()
        self.assertEqual(sign_up.message_label.text(), 'Passwords do not match.')

    def test_sign_in_invalid_credentials(self):
        sign_in = SignInWidget()
        sign_in.email_editor.setText(OWNER)
        sign_in.password_editor.setText('pw')
        sign_in.submit()
        self.assertEqual(sign_in.message_label.text(), 'Invalid email or password.')
        self.assertIsNone(session.get_gate().get_current_user())
