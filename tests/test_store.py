"""Tests for the JSON and SQLite record stores.

Run:
    python -m unittest tests.test_store
"""
import decimal
import json
import sqlite3
from unittest.mock import patch

from ProductCatalog.core import store
from ProductCatalog.settings import lib
from ProductCatalog.status import status
from tests.base import BaseTestCase

OWNER = 'a@x.com'
OTHER_OWNER = 'b@x.com'


class StoreTestsMixin:
    """Behavior shared by every record store. Subclasses implement ``make_store``."""
    backend: str

    def make_store(self, owner: str = OWNER) -> store.RecordStore:
        return store.get_store(owner, backend=self.backend)

    def setUp(self) -> None:
        super().setUp()
        self.store = self.make_store()

    def test_empty_store_lists_nothing(self):
        self.assertEqual(self.store.list(), [])

    def test_create_then_list(self):
        product = self.store.create('Pen', '1.50', 'Blue ink', 'Office')
        self.assertIsInstance(product.id, int)
        self.assertEqual(product.price, decimal.Decimal('1.50'))

        products = self.store.list()
        self.assertEqual(products, [product])

    def test_create_assigns_unique_ids(self):
        ids = [self.store.create(f'P{i}', i, '', 'Cat').id for i in range(5)]
        self.assertEqual(len(set(ids)), 5)
        self.assertEqual([p.id for p in self.store.list()], ids)

    def test_create_strips_fields(self):
        product = self.store.create('  Pen ', ' 2 ', ' Blue ', ' Office ')
        self.assertEqual(product.name, 'Pen')
        self.assertEqual(product.description, 'Blue')
        self.assertEqual(product.category, 'Office')
        self.assertEqual(product.price, decimal.Decimal('2'))

    def test_create_allows_empty_description(self):
        product = self.store.create('Pen', '1', '', 'Office')
        self.assertEqual(self.store.list()[0].description, '')
        self.assertEqual(product.description, '')

    def test_create_rejects_invalid_fields(self):
        with self.assertRaises(status.ValidationException) as ctx:
            self.store.create('', '-1', 'x', ' ')
        self.assertEqual(ctx.exception.fields, ('name', 'price', 'category'))
        self.assertEqual(self.store.list(), [])

    def test_price_keeps_precision(self):
        self.store.create('Bolt', '0.105', '', 'Hardware')
        self.assertEqual(self.store.list()[0].price, decimal.Decimal('0.105'))

    def test_update(self):
        product = self.store.create('Pen', '1.50', 'Blue ink', 'Office')
        self.store.update(product.id, 'Pen', '2.00', 'Blue ink', 'Office')

        products = self.store.list()
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].id, product.id)
        self.assertEqual(products[0].price, decimal.Decimal('2.00'))

    def test_update_missing_id(self):
        self.store.create('Pen', '1.50', 'Blue ink', 'Office')
        with self.assertRaises(status.NotFoundException):
            self.store.update(999, 'Pen', '2.00', 'Blue ink', 'Office')
        self.assertEqual(self.store.list()[0].price, decimal.Decimal('1.50'))

    def test_delete(self):
        a = self.store.create('A', 1, 'a', 'X')
        b = self.store.create('B', 2, 'b', 'X')
        self.store.delete(a.id)
        self.assertEqual(self.store.list(), [b])

    def test_delete_is_idempotent(self):
        a = self.store.create('A', 1, 'a', 'X')
        self.store.delete(a.id)
        self.store.delete(a.id)
        self.store.delete(12345)
        self.assertEqual(self.store.list(), [])

    def test_owners_are_isolated(self):
        self.store.create('Pen', 1, 'a', 'Office')
        other = self.make_store(OTHER_OWNER)
        self.assertEqual(other.list(), [])

        other.create('Cup', 2, 'b', 'Kitchen')
        self.assertEqual([p.name for p in self.store.list()], ['Pen'])
        self.assertEqual([p.name for p in other.list()], ['Cup'])

    def test_similar_emails_are_isolated(self):
        self.make_store('a+b@x.com').create('Secret', 1, 'a', 'Office')
        self.assertEqual(self.make_store('a_b@x.com').list(), [])
        self.assertEqual([p.name for p in self.make_store('a+b@x.com').list()], ['Secret'])

    def test_writes_are_durable(self):
        product = self.store.create('Pen', '1.50', 'Blue ink', 'Office')
        reopened = self.make_store()
        self.assertEqual(reopened.list(), [product])


class JsonStoreTests(StoreTestsMixin, BaseTestCase):
    backend = store.Backend.Json.value

    def test_document_format(self):
        product = self.store.create('Pen', '1.50', 'Blue ink', 'Office')
        path = lib.settings.catalog_json_path(OWNER)
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data, [{
            'id': product.id,
            'name': 'Pen',
            'price': '1.50',
            'description': 'Blue ink',
            'category': 'Office',
        }])

    def test_ids_are_monotonic(self):
        a = self.store.create('A', 1, '', 'X')
        b = self.store.create('B', 1, '', 'X')
        c = self.store.create('C', 1, '', 'X')
        self.assertLess(a.id, b.id)
        self.assertLess(b.id, c.id)

    def test_corrupt_document(self):
        path = lib.settings.catalog_json_path(OWNER)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('{not json', encoding='utf-8')

        with self.assertRaises(status.StoreUnavailableException):
            self.store.list()
        with self.assertRaises(status.StoreUnavailableException):
            self.store.create('Pen', 1, '', 'Office')

    def test_failed_write_keeps_document(self):
        self.store.create('Pen', 1, '', 'Office')
        with patch('ProductCatalog.core.store.os.replace', side_effect=OSError('disk full')):
            with self.assertRaises(status.StoreUnavailableException):
                self.store.create('Cup', 2, '', 'Kitchen')

        self.assertEqual([p.name for p in self.store.list()], ['Pen'])
        leftovers = list(lib.settings.catalog_json_path(OWNER).parent.glob('*.tmp'))
        self.assertEqual(leftovers, [])


class SqliteStoreTests(StoreTestsMixin, BaseTestCase):
    backend = store.Backend.Sqlite.value

    def test_price_is_stored_as_text(self):
        self.store.create('Pen', '1.50', '', 'Office')
        conn = sqlite3.connect(str(lib.settings.catalog_db_path))
        try:
            row = conn.execute('SELECT price, typeof(price) FROM products').fetchone()
        finally:
            conn.close()
        self.assertEqual(row, ('1.50', 'text'))

    def test_unavailable_database(self):
        with patch.object(store.SqliteStore, 'connection', side_effect=sqlite3.OperationalError('locked')):
            with self.assertRaises(status.StoreUnavailableException):
                self.store.list()
            with self.assertRaises(status.StoreUnavailableException):
                self.store.create('Pen', 1, '', 'Office')
            with self.assertRaises(status.StoreUnavailableException):
                self.store.delete(1)

    def test_cannot_update_other_owners_product(self):
        product = self.store.create('Pen', 1, '', 'Office')
        other = self.make_store(OTHER_OWNER)
        with self.assertRaises(status.NotFoundException):
            other.update(product.id, 'Pen', 5, '', 'Office')
        other.delete(product.id)
        self.assertEqual(self.store.list(), [product])


class ParsePriceTests(BaseTestCase):

    def test_valid_prices(self):
        self.assertEqual(store.parse_price('1.50'), decimal.Decimal('1.50'))
        self.assertEqual(store.parse_price(' 3 '), decimal.Decimal('3'))
        self.assertEqual(store.parse_price(0), decimal.Decimal('0'))
        self.assertEqual(store.parse_price(1.1), decimal.Decimal('1.1'))
        self.assertEqual(store.parse_price(decimal.Decimal('2.25')), decimal.Decimal('2.25'))

    def test_invalid_prices(self):
        for value in (None, True, '', '   ', 'abc', '-0.01', 'NaN', 'inf', -1):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    store.parse_price(value)


class GetStoreTests(BaseTestCase):

    def test_backend_from_settings(self):
        self.assertIsInstance(store.get_store(OWNER), store.SqliteStore)

        lib.settings.set_section('store', {'backend': 'json'})
        s = store.get_store(OWNER)
        self.assertIsInstance(s, store.JsonStore)
        self.assertEqual(s.path, lib.settings.catalog_json_path(OWNER))
        self.assertNotEqual(
            lib.settings.catalog_json_path('a+b@x.com'),
            lib.settings.catalog_json_path('a_b@x.com')
        )

    def test_partial_backend_cannot_be_created(self):
        class ListOnlyStore(store.RecordStore):
            def list(self):
                return []

        with self.assertRaises(TypeError):
            ListOnlyStore(OWNER)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            store.get_store(OWNER, backend='csv')
