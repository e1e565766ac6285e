"""Tests for the per-category catalog summary.

Run:
    python -m unittest tests.test_summary
"""
import decimal
import unittest

from ProductCatalog.core import summary
from ProductCatalog.core.store import Product


def product(id_, price, category):
    return Product(id_, f'P{id_}', decimal.Decimal(price), '', category)


class SummaryTests(unittest.TestCase):

    def test_to_frame(self):
        df = summary.to_frame([product(1, '1.50', 'Office')])
        self.assertEqual(list(df.columns), summary.PRODUCT_COLUMNS)
        self.assertEqual(df.iloc[0]['price'], decimal.Decimal('1.50'))

    def test_empty_catalog(self):
        df = summary.get_summary([])
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), summary.SUMMARY_COLUMNS)

    def test_grouping(self):
        df = summary.get_summary([
            product(1, '0.10', 'Office'),
            product(2, '0.20', 'Office'),
            product(3, '5', 'Kitchen'),
        ])
        self.assertEqual(list(df.columns), summary.SUMMARY_COLUMNS)
        self.assertEqual(list(df['category']), ['Kitchen', 'Office'])
        self.assertEqual(list(df['products']), [1, 2])

        office = df[df['category'] == 'Office'].iloc[0]
        self.assertEqual(office['total'], decimal.Decimal('0.30'))
        self.assertEqual(office['average'], decimal.Decimal('0.15'))
