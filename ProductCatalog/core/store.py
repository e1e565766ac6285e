"""
Record stores holding the product catalog.

A record store is the durable source of truth for an owner's products. Two
interchangeable implementations are provided:

- :class:`JsonStore` keeps the whole catalog in a single JSON document that is
  read and rewritten wholesale on every mutation. Writes go to a temporary file
  that atomically replaces the document.
- :class:`SqliteStore` keeps one row per product in a shared SQLite database,
  scoped by owner.

For both, a write is committed before the call returns, so the next
:meth:`RecordStore.list` call sees it. Prices are persisted as text to keep
their full decimal precision.
"""
import abc
import dataclasses
import decimal
import enum
import json
import logging
import os
import pathlib
import sqlite3
import tempfile
import time
from typing import Any, Dict, List, Optional, Tuple

from ..settings import lib
from ..status import status

FIELDS: Tuple[str, ...] = ('name', 'price', 'description', 'category')


class Backend(enum.StrEnum):
    """Available record store implementations."""
    Sqlite = 'sqlite'
    Json = 'json'


class Table(enum.StrEnum):
    """Enum for database tables."""
    Products = 'products'


@dataclasses.dataclass(frozen=True)
class Product:
    """A single catalog record."""
    id: int
    name: str
    price: decimal.Decimal
    description: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON serializable representation, keeping the price as text."""
        return {
            'id': self.id,
            'name': self.name,
            'price': str(self.price),
            'description': self.description,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Create a product from its serialized form.

        Raises:
            KeyError: If a field is missing.
            ValueError: If the id or the price cannot be parsed.
        """
        return cls(
            id=int(data['id']),
            name=str(data['name']),
            price=parse_price(data['price']),
            description=str(data.get('description') or ''),
            category=str(data['category']),
        )


def parse_price(value: Any) -> decimal.Decimal:
    """Parse a price into a non-negative, finite Decimal.

    Floats are converted through their shortest text form so that ``1.1`` becomes
    ``Decimal('1.1')`` and not its binary expansion.

    Args:
        value: A Decimal, int, float or text.

    Returns:
        decimal.Decimal: The parsed price.

    Raises:
        ValueError: If the value is empty, not a number, not finite or negative.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f'Invalid price: {value!r}')

    if isinstance(value, decimal.Decimal):
        price = value
    elif isinstance(value, (int, float)):
        price = decimal.Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise ValueError('Price is empty')
        try:
            price = decimal.Decimal(text)
        except decimal.InvalidOperation as ex:
            raise ValueError(f'Invalid price: "{text}"') from ex

    if not price.is_finite():
        raise ValueError(f'Price must be a finite number, got "{price}"')
    if price < 0:
        raise ValueError(f'Price must not be negative, got "{price}"')
    return price


def clean_fields(name: Any, price: Any, description: Any, category: Any) -> Tuple[str, decimal.Decimal, str, str]:
    """Validate and normalize product fields before they are persisted.

    Text fields are stripped. The name and the category must not be empty, the
    description may be.

    Returns:
        tuple: The cleaned (name, price, description, category).

    Raises:
        status.ValidationException: Naming every invalid field.
    """
    invalid: List[str] = []

    name = '' if name is None else str(name).strip()
    description = '' if description is None else str(description).strip()
    category = '' if category is None else str(category).strip()

    if not name:
        invalid.append('name')
    try:
        price = parse_price(price)
    except ValueError:
        invalid.append('price')
    if not category:
        invalid.append('category')

    if invalid:
        raise status.ValidationException(f'Invalid fields: {", ".join(invalid)}.', fields=invalid)
    return name, price, description, category


class RecordStore(abc.ABC):
    """Interface of a durable, keyed product collection belonging to one owner."""

    def __init__(self, owner: str) -> None:
        self.owner = owner

    @abc.abstractmethod
    def list(self) -> List[Product]:
        """Return every product of the owner in insertion order.

        Raises:
            status.StoreUnavailableException: If the backing medium cannot be read.
        """

    @abc.abstractmethod
    def create(self, name: Any, price: Any, description: Any, category: Any) -> Product:
        """Persist a new product and return it with its assigned id.

        Raises:
            status.ValidationException: If a required field is missing or malformed.
            status.StoreUnavailableException: If the backing medium cannot be written.
        """

    @abc.abstractmethod
    def update(self, product_id: int, name: Any, price: Any, description: Any, category: Any) -> None:
        """Replace the fields of an existing product.

        Raises:
            status.ValidationException: If a required field is missing or malformed.
            status.NotFoundException: If no product has the given id.
            status.StoreUnavailableException: If the backing medium cannot be written.
        """

    @abc.abstractmethod
    def delete(self, product_id: int) -> None:
        """Remove a product. Removing an absent id does nothing.

        Raises:
            status.StoreUnavailableException: If the backing medium cannot be written.
        """


class JsonStore(RecordStore):
    """Whole-document store: the entire catalog is the unit of persistence."""

    def __init__(self, path: pathlib.Path, owner: str) -> None:
        super().__init__(owner)
        self.path = pathlib.Path(path)

    def _read(self) -> List[Product]:
        if not self.path.exists():
            return []
        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise TypeError(f'Expected a list of products, got {type(data).__name__}')
            return [Product.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError) as ex:
            raise status.StoreUnavailableException(f'Could not read "{self.path}": {ex}') from ex

    def _write(self, products: List[Product]) -> None:
        tmp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                    'w', encoding='utf-8', dir=self.path.parent, suffix='.tmp', delete=False
            ) as f:
                tmp_path = f.name
                json.dump([p.to_dict() for p in products], f, indent=4, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
            logging.debug(f'Wrote {len(products)} product(s) to "{self.path}"')
        except OSError as ex:
            raise status.StoreUnavailableException(f'Could not write "{self.path}": {ex}') from ex
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    @staticmethod
    def _next_id(products: List[Product]) -> int:
        # Millisecond timestamp, bumped to stay above every existing id
        last = max((p.id for p in products), default=0)
        return max(time.time_ns() // 1_000_000, last + 1)

    def list(self) -> List[Product]:
        products = self._read()
        logging.debug(f'Loaded {len(products)} product(s) from "{self.path}"')
        return products

    def create(self, name: Any, price: Any, description: Any, category: Any) -> Product:
        name, price, description, category = clean_fields(name, price, description, category)
        products = self._read()
        product = Product(self._next_id(products), name, price, description, category)
        self._write(products + [product])
        logging.info(f'Created product {product.id} ("{product.name}")')
        return product

    def update(self, product_id: int, name: Any, price: Any, description: Any, category: Any) -> None:
        name, price, description, category = clean_fields(name, price, description, category)
        products = self._read()
        for idx, product in enumerate(products):
            if product.id == product_id:
                products[idx] = dataclasses.replace(
                    product, name=name, price=price, description=description, category=category
                )
                break
        else:
            raise status.NotFoundException(f'No product with id {product_id}.')

        self._write(products)
        logging.info(f'Updated product {product_id}')

    def delete(self, product_id: int) -> None:
        products = self._read()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            logging.debug(f'Product {product_id} already absent, nothing to delete')
            return
        self._write(remaining)
        logging.info(f'Deleted product {product_id}')


class SqliteStore(RecordStore):
    """Row-oriented store backed by a SQLite database shared by all owners."""

    def __init__(self, db_path: pathlib.Path, owner: str) -> None:
        super().__init__(owner)
        self.db_path = pathlib.Path(db_path)
        self._initialize_schema_if_needed()

    def connection(self) -> sqlite3.Connection:
        """Return a new connection to the catalog database."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path), timeout=2.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_schema_if_needed(self) -> None:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            conn.execute(
                f'CREATE TABLE IF NOT EXISTS {Table.Products.value} ('
                'id INTEGER PRIMARY KEY AUTOINCREMENT, '
                'owner TEXT NOT NULL, '
                'name TEXT NOT NULL, '
                'price TEXT NOT NULL, '
                "description TEXT NOT NULL DEFAULT '', "
                'category TEXT NOT NULL)'
            )
            conn.execute(
                f'CREATE INDEX IF NOT EXISTS idx_{Table.Products.value}_owner '
                f'ON {Table.Products.value} (owner)'
            )
            conn.commit()
        except (OSError, sqlite3.Error) as ex:
            raise status.StoreUnavailableException(
                f'Could not initialize "{self.db_path}": {ex}'
            ) from ex
        finally:
            if conn:
                conn.close()

    def list(self) -> List[Product]:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            rows = conn.execute(
                f'SELECT id, name, price, description, category FROM {Table.Products.value} '
                'WHERE owner = ? ORDER BY id',
                (self.owner,)
            ).fetchall()
            products = [Product.from_dict(dict(row)) for row in rows]
        except (OSError, sqlite3.Error, ValueError) as ex:
            raise status.StoreUnavailableException(f'Could not read "{self.db_path}": {ex}') from ex
        finally:
            if conn:
                conn.close()

        logging.debug(f'Loaded {len(products)} product(s) for "{self.owner}"')
        return products

    def create(self, name: Any, price: Any, description: Any, category: Any) -> Product:
        name, price, description, category = clean_fields(name, price, description, category)
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            cursor = conn.execute(
                f'INSERT INTO {Table.Products.value} (owner, name, price, description, category) '
                'VALUES (?, ?, ?, ?, ?)',
                (self.owner, name, str(price), description, category)
            )
            conn.commit()
            product = Product(cursor.lastrowid, name, price, description, category)
        except (OSError, sqlite3.Error) as ex:
            if conn:
                conn.rollback()
            raise status.StoreUnavailableException(f'Could not write "{self.db_path}": {ex}') from ex
        finally:
            if conn:
                conn.close()

        logging.info(f'Created product {product.id} ("{product.name}")')
        return product

    def update(self, product_id: int, name: Any, price: Any, description: Any, category: Any) -> None:
        name, price, description, category = clean_fields(name, price, description, category)
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            cursor = conn.execute(
                f'UPDATE {Table.Products.value} SET name = ?, price = ?, description = ?, category = ? '
                'WHERE id = ? AND owner = ?',
                (name, str(price), description, category, product_id, self.owner)
            )
            conn.commit()
            updated = cursor.rowcount
        except (OSError, sqlite3.Error) as ex:
            if conn:
                conn.rollback()
            raise status.StoreUnavailableException(f'Could not write "{self.db_path}": {ex}') from ex
        finally:
            if conn:
                conn.close()

        if not updated:
            raise status.NotFoundException(f'No product with id {product_id}.')
        logging.info(f'Updated product {product_id}')

    def delete(self, product_id: int) -> None:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            cursor = conn.execute(
                f'DELETE FROM {Table.Products.value} WHERE id = ? AND owner = ?',
                (product_id, self.owner)
            )
            conn.commit()
            deleted = cursor.rowcount
        except (OSError, sqlite3.Error) as ex:
            if conn:
                conn.rollback()
            raise status.StoreUnavailableException(f'Could not write "{self.db_path}": {ex}') from ex
        finally:
            if conn:
                conn.close()

        if deleted:
            logging.info(f'Deleted product {product_id}')
        else:
            logging.debug(f'Product {product_id} already absent, nothing to delete')


def get_store(owner: str, backend: Optional[str] = None) -> RecordStore:
    """Return the record store of an owner.

    Args:
        owner: The signed-in user's email.
        backend: 'sqlite' or 'json'. Read from the "store" settings section when omitted.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = backend or lib.settings.get_section('store').get('backend', Backend.Sqlite.value)
    if backend == Backend.Json:
        return JsonStore(lib.settings.catalog_json_path(owner), owner)
    if backend == Backend.Sqlite:
        return SqliteStore(lib.settings.catalog_db_path, owner)
    raise ValueError(f'Unknown store backend "{backend}", must be one of {[b.value for b in Backend]}')
