"""
Core package for ProductCatalog providing the product catalog logic.

This package includes:

- :mod:`ProductCatalog.core.store` – Record stores persisting an owner's products as JSON or SQLite.
- :mod:`ProductCatalog.core.catalog` – The catalog engine keeping the in-memory catalog and edit session in sync with a store.
- :mod:`ProductCatalog.core.session` – Local user accounts and the current sign-in session.
- :mod:`ProductCatalog.core.summary` – Per-category aggregation of the catalog using pandas.
"""
