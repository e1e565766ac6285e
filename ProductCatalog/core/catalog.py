"""Catalog engine: in-memory product list and edit session synchronized with a record store.

The engine owns the only in-memory copy of the catalog. Every mutation goes to
the record store first and is followed by :meth:`CatalogEngine.load_catalog`,
which replaces the whole in-memory list with what the store reports. The list
is never patched locally, so ids and normalization applied by the store are
always reflected.

The edit session is a small state machine:

- ``Idle``: no product is being edited, submitting creates a new product.
- ``Editing``: exactly one existing product is referenced, submitting updates it.

``begin_edit`` moves to ``Editing`` (only for ids in the catalog), a successful
``submit`` or ``cancel_edit`` returns to ``Idle``, and a ``submit`` rejected
before the store write leaves the session untouched. A ``submit`` whose write
succeeded returns to ``Idle`` even when the reload fails. Whenever the catalog is reloaded and the edited product
is gone, the session is cleared.
"""
import contextlib
import dataclasses
import decimal
import enum
import logging
from typing import Any, List, Optional

import pandas as pd
from PySide6 import QtCore

from . import summary
from .store import FIELDS, Product, RecordStore, parse_price
from ..status import status


class EditState(enum.StrEnum):
    """States of the edit session."""
    Idle = 'idle'
    Editing = 'editing'


@dataclasses.dataclass(frozen=True)
class Drafts:
    """User-entered values of the product form. The price is kept as text."""
    name: str = ''
    price: str = ''
    description: str = ''
    category: str = ''

    @classmethod
    def from_product(cls, product: Product) -> 'Drafts':
        return cls(
            name=product.name,
            price=str(product.price),
            description=product.description,
            category=product.category,
        )

    def validate(self) -> decimal.Decimal:
        """Check that every field is filled in and the price is a non-negative number.

        Returns:
            decimal.Decimal: The parsed price.

        Raises:
            status.ValidationException: Naming every invalid field.
        """
        invalid = [f for f in FIELDS if not str(getattr(self, f) or '').strip()]

        price = None
        if 'price' not in invalid:
            try:
                price = parse_price(self.price)
            except ValueError:
                invalid.append('price')

        if invalid:
            raise status.ValidationException(
                f'Invalid fields: {", ".join(invalid)}.',
                fields=[f for f in FIELDS if f in invalid]
            )
        return price


class CatalogEngine(QtCore.QObject):
    """Owns the catalog list and edit session and mediates all access to the record store.

    Signals:
        catalogChanged (list): Emitted with the refreshed products after every load.
        editSessionChanged (object): Emitted with the edited Product, or None when idle.
        busyChanged (bool): Emitted when an operation starts and finishes.
    """
    catalogChanged = QtCore.Signal(list)
    editSessionChanged = QtCore.Signal(object)
    busyChanged = QtCore.Signal(bool)

    def __init__(self, store: RecordStore, owner: Optional[str] = None,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self.store = store
        self.owner = owner

        self._products: List[Product] = []
        self._editing: Optional[Product] = None
        self._drafts = Drafts()
        self._busy = False

    @property
    def products(self) -> List[Product]:
        """A copy of the in-memory catalog."""
        return list(self._products)

    @property
    def editing(self) -> Optional[Product]:
        """The product being edited, or None."""
        return self._editing

    @property
    def drafts(self) -> Drafts:
        return self._drafts

    @property
    def state(self) -> EditState:
        return EditState.Editing if self._editing is not None else EditState.Idle

    @property
    def is_busy(self) -> bool:
        return self._busy

    def find(self, product_id: int) -> Optional[Product]:
        """Return the in-memory product with the given id, or None."""
        return next((p for p in self._products if p.id == product_id), None)

    @contextlib.contextmanager
    def _operation(self, name: str):
        if self._busy:
            raise status.BusyException(f'Cannot {name} while another operation is running.')

        self._busy = True
        self.busyChanged.emit(True)
        try:
            yield
        finally:
            self._busy = False
            self.busyChanged.emit(False)

    def _set_session(self, product: Optional[Product], drafts: Drafts) -> None:
        changed = product != self._editing
        self._editing = product
        self._drafts = drafts
        if changed:
            self.editSessionChanged.emit(product)

    def _refresh(self) -> List[Product]:
        products = self.store.list()
        self._products = list(products)
        logging.debug(f'Catalog refreshed: {len(self._products)} product(s)')

        if self._editing is not None:
            current = self.find(self._editing.id)
            if current is None:
                logging.info(f'Product {self._editing.id} no longer exists, leaving edit mode')
                self._set_session(None, Drafts())
            else:
                self._editing = current

        self.catalogChanged.emit(self.products)
        return self.products

    def load_catalog(self) -> List[Product]:
        """Replace the in-memory catalog with the record store's contents.

        Returns:
            list[Product]: The refreshed catalog.

        Raises:
            status.StoreUnavailableException: If the store cannot be read. The previous
                catalog is kept.
        """
        with self._operation('load the catalog'):
            return self._refresh()

    def begin_create(self) -> Drafts:
        """Leave edit mode and reset the drafts."""
        self._set_session(None, Drafts())
        return self._drafts

    def begin_edit(self, product_id: int) -> Drafts:
        """Start editing a product of the current catalog.

        Returns:
            Drafts: The product's fields, copied into the drafts.

        Raises:
            status.NotFoundException: If the id is not in the catalog. The session is unchanged.
        """
        product = self.find(product_id)
        if product is None:
            raise status.NotFoundException(f'Cannot edit product {product_id}.')

        self._set_session(product, Drafts.from_product(product))
        logging.debug(f'Editing product {product_id}')
        return self._drafts

    def update_drafts(self, **fields: Any) -> Drafts:
        """Store user input in the drafts.

        Raises:
            KeyError: If a field name is unknown.
        """
        unknown = set(fields) - set(FIELDS)
        if unknown:
            raise KeyError(f'Unknown draft fields: {sorted(unknown)}')

        self._drafts = dataclasses.replace(
            self._drafts, **{k: '' if v is None else str(v) for k, v in fields.items()}
        )
        return self._drafts

    def submit(self, drafts: Optional[Drafts] = None) -> List[Product]:
        """Create or update a product from the drafts, then reload the catalog.

        In edit mode the edited product is updated, otherwise a new product is
        created. Once the store accepts the write the edit session is cleared,
        even when the following reload fails.

        Args:
            drafts: The form values. Defaults to the engine's current drafts.

        Returns:
            list[Product]: The refreshed catalog.

        Raises:
            status.ValidationException: If a field is empty or the price is invalid.
            status.NotFoundException: If the edited product was removed from the store.
            status.StoreUnavailableException: If the store cannot be written or read.
        """
        drafts = drafts if drafts is not None else self._drafts
        with self._operation('save the product'):
            price = drafts.validate()
            fields = (drafts.name.strip(), price, drafts.description.strip(), drafts.category.strip())

            if self._editing is not None:
                self.store.update(self._editing.id, *fields)
            else:
                self.store.create(*fields)

            # Drafts are cleared once the write is durable, even if the reload fails
            try:
                return self._refresh()
            finally:
                self._set_session(None, Drafts())

    def remove(self, product_id: int) -> List[Product]:
        """Delete a product and reload the catalog. Removing an absent id is not an error.

        Confirmation is up to the caller.

        Returns:
            list[Product]: The refreshed catalog.

        Raises:
            status.StoreUnavailableException: If the store cannot be written or read.
        """
        with self._operation('remove the product'):
            self.store.delete(product_id)

            if self._editing is not None and self._editing.id == product_id:
                self._set_session(None, Drafts())
            return self._refresh()

    def cancel_edit(self) -> None:
        """Leave edit mode and reset the drafts."""
        self._set_session(None, Drafts())

    def summary(self) -> pd.DataFrame:
        """Per-category count, total and average price of the in-memory catalog."""
        return summary.get_summary(self._products)
