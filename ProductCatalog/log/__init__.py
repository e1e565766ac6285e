"""
Logging subsystem: handlers, models, and views for application logging.

Modules:

- :mod:`ProductCatalog.log.log` – Log handler integrating with Python logging.
- :mod:`ProductCatalog.log.model` – Table model listing the in-memory log tank.
- :mod:`ProductCatalog.log.view` – Qt view and dialog for browsing log messages.
"""
