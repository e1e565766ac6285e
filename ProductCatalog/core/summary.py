"""Per-category aggregation of the product catalog.

Summaries are computed with pandas from the catalog's in-memory products and
are meant for display only. Prices are aggregated as Decimals to keep their
precision.
"""
import decimal
from typing import Iterable, List

import pandas as pd

from .store import Product

PRODUCT_COLUMNS: List[str] = ['id', 'name', 'price', 'description', 'category']
SUMMARY_COLUMNS: List[str] = ['category', 'products', 'total', 'average']


def to_frame(products: Iterable[Product]) -> pd.DataFrame:
    """Convert products to a DataFrame with one row per product.

    The price column holds ``decimal.Decimal`` objects.
    """
    rows = [
        [p.id, p.name, p.price, p.description, p.category] for p in products
    ]
    return pd.DataFrame(rows, columns=PRODUCT_COLUMNS)


def get_summary(products: Iterable[Product]) -> pd.DataFrame:
    """Return product count, price total and average price per category.

    Args:
        products: The catalog's products.

    Returns:
        pandas.DataFrame: Columns ``category``, ``products``, ``total`` and ``average``,
        sorted by category. Empty, with the same columns, for an empty catalog.
    """
    df = to_frame(products)
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    grouped = df.groupby('category', sort=True)['price']
    summary = pd.DataFrame({
        'products': grouped.size(),
        'total': grouped.agg(lambda s: sum(s, decimal.Decimal(0))),
    })
    summary['average'] = [
        total / count for total, count in zip(summary['total'], summary['products'])
    ]
    summary = summary.reset_index()
    return summary[SUMMARY_COLUMNS]
