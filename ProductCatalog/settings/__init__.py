"""
Settings package: configuration API and locale formatting.

This package provides:

- :mod:`ProductCatalog.settings.lib` – Configuration paths, schema validation and the settings API.
- :mod:`ProductCatalog.settings.locale` – Babel based price formatting.
"""
