"""
User interface package for ProductCatalog.

This package includes:

- :mod:`ProductCatalog.ui.actions` – Application-wide signals.
- :mod:`ProductCatalog.ui.app` – The QApplication subclass.
- :mod:`ProductCatalog.ui.auth` – Sign-in and sign-up pages.
- :mod:`ProductCatalog.ui.catalog` – The product model, form and catalog page.
- :mod:`ProductCatalog.ui.main` – The main window switching between pages.
"""
