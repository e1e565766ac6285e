"""
Local user accounts and the current sign-in session.

The session gate keeps two SQLite tables: ``users`` with the registered accounts
and ``session`` holding at most one row, the email of the signed-in user. The
catalog uses the current user only to select the owner's store and to show who
is signed in.

Passwords are stored as salted PBKDF2 hashes.
"""
import dataclasses
import enum
import hashlib
import hmac
import logging
import pathlib
import re
import secrets
import sqlite3
from typing import Optional

from PySide6 import QtCore

from ..settings import lib
from ..status import status

HASH_NAME = 'sha256'
HASH_ITERATIONS = 120_000
SALT_BYTES = 16

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+$')


class Table(enum.StrEnum):
    """Enum for database tables."""
    Users = 'users'
    Session = 'session'


@dataclasses.dataclass(frozen=True)
class User:
    """A registered account."""
    id: int
    email: str
    password_hash: str


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    """Return a ``salt$hash`` string for the password, both parts hex encoded."""
    salt = salt or secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(HASH_NAME, password.encode('utf-8'), salt, HASH_ITERATIONS)
    return f'{salt.hex()}${digest.hex()}'


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a hash created by :func:`hash_password`."""
    try:
        salt_hex, digest_hex = password_hash.split('$', 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        logging.warning('Stored password hash is malformed.')
        return False
    expected = hash_password(password, salt=salt).split('$', 1)[1]
    return hmac.compare_digest(expected, digest_hex)


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


class SessionGate(QtCore.QObject):
    """Credential store with lookup, create, set-current and clear operations."""

    def __init__(self, db_path: Optional[pathlib.Path] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self.db_path = pathlib.Path(db_path) if db_path else lib.settings.users_db_path
        self._initialize_schema_if_needed()

    def connection(self) -> sqlite3.Connection:
        """Return a new connection to the user database."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self.db_path), timeout=2.0)

    def _initialize_schema_if_needed(self) -> None:
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            conn.execute(
                f'CREATE TABLE IF NOT EXISTS {Table.Users.value} ('
                'id INTEGER PRIMARY KEY AUTOINCREMENT, '
                'email TEXT UNIQUE NOT NULL, '
                'password_hash TEXT NOT NULL)'
            )
            conn.execute(
                f'CREATE TABLE IF NOT EXISTS {Table.Session.value} ('
                'id INTEGER PRIMARY KEY AUTOINCREMENT, '
                'email TEXT)'
            )
            conn.commit()
        except (OSError, sqlite3.Error) as ex:
            raise status.SessionUnavailableException(f'Could not initialize "{self.db_path}": {ex}') from ex
        finally:
            if conn:
                conn.close()

    def get_user(self, email: str) -> Optional[User]:
        """Look up an account by email.

        Raises:
            status.SessionUnavailableException: If the database cannot be read.
        """
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            row = conn.execute(
                f'SELECT id, email, password_hash FROM {Table.Users.value} WHERE email = ?',
                (normalize_email(email),)
            ).fetchone()
        except (OSError, sqlite3.Error) as ex:
            raise status.SessionUnavailableException(str(ex)) from ex
        finally:
            if conn:
                conn.close()

        if not row:
            return None
        return User(*row)

    def create_user(self, email: str, password: str) -> User:
        """Register a new account.

        Raises:
            status.UserExistsException: If the email is already registered.
            status.SessionUnavailableException: If the database cannot be written.
        """
        email = normalize_email(email)
        password_hash = hash_password(password)
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            cursor = conn.execute(
                f'INSERT INTO {Table.Users.value} (email, password_hash) VALUES (?, ?)',
                (email, password_hash)
            )
            conn.commit()
            user_id = cursor.lastrowid
        except sqlite3.IntegrityError as ex:
            raise status.UserExistsException(email) from ex
        except (OSError, sqlite3.Error) as ex:
            raise status.SessionUnavailableException(str(ex)) from ex
        finally:
            if conn:
                conn.close()

        logging.info(f'Created user "{email}"')
        return User(user_id, email, password_hash)

    def set_current_user(self, email: str) -> None:
        """Make the email the only current session."""
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            conn.execute(f'DELETE FROM {Table.Session.value}')
            conn.execute(f'INSERT INTO {Table.Session.value} (email) VALUES (?)', (normalize_email(email),))
            conn.commit()
        except (OSError, sqlite3.Error) as ex:
            if conn:
                conn.rollback()
            raise status.SessionUnavailableException(str(ex)) from ex
        finally:
            if conn:
                conn.close()

    def get_current_user(self) -> Optional[str]:
        """Return the signed-in email, or None."""
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            row = conn.execute(f'SELECT email FROM {Table.Session.value} LIMIT 1').fetchone()
        except (OSError, sqlite3.Error) as ex:
            raise status.SessionUnavailableException(str(ex)) from ex
        finally:
            if conn:
                conn.close()
        return row[0] if row else None

    def clear_current_user(self) -> None:
        """Remove the current session."""
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self.connection()
            conn.execute(f'DELETE FROM {Table.Session.value}')
            conn.commit()
        except (OSError, sqlite3.Error) as ex:
            raise status.SessionUnavailableException(str(ex)) from ex
        finally:
            if conn:
                conn.close()

    def sign_up(self, email: str, password: str, confirm_password: str) -> User:
        """Validate the sign-up form and register the account.

        Raises:
            status.PasswordMismatchException: If the passwords differ.
            status.ValidationException: If the email or the password is missing or malformed.
            status.UserExistsException: If the email is already registered.
        """
        if password != confirm_password:
            raise status.PasswordMismatchException

        email = normalize_email(email)
        invalid = []
        if not EMAIL_PATTERN.match(email):
            invalid.append('email')
        if not password:
            invalid.append('password')
        if invalid:
            raise status.ValidationException(f'Invalid fields: {", ".join(invalid)}.', fields=invalid)

        if self.get_user(email):
            raise status.UserExistsException(email)
        return self.create_user(email, password)

    def sign_in(self, email: str, password: str) -> str:
        """Check the credentials and make the user current.

        Returns:
            str: The signed-in email.

        Raises:
            status.InvalidCredentialsException: If the user is unknown or the password is wrong.
        """
        user = self.get_user(email)
        if user is None or not verify_password(password or '', user.password_hash):
            raise status.InvalidCredentialsException

        self.set_current_user(user.email)

        from ..ui.actions import signals
        signals.signedIn.emit(user.email)
        return user.email

    def sign_out(self) -> None:
        """Clear the current session."""
        self.clear_current_user()

        from ..ui.actions import signals
        signals.signedOut.emit()


gate: Optional[SessionGate] = None


def get_gate() -> SessionGate:
    """Return the shared session gate, creating it on first use."""
    global gate
    if gate is None:
        gate = SessionGate()
    return gate
