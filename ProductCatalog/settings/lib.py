"""Settings library for the catalog configuration.

Provides:
    - Schema validation and enforcement for catalog.json structure.
    - Loading, saving, reverting, and managing application settings.
    - Application paths for the user database and the per-user product stores.
"""

import hashlib
import json
import logging
import pathlib
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'ProductCatalog'

STORE_BACKENDS: List[str] = ['sqlite', 'json']

METADATA_KEYS: List[str] = [
    'name',
    'locale',
    'currency',
    'confirm_delete',
]

CONFIG_SCHEMA: Dict[str, Any] = {
    'store': {
        'type': dict,
        'required': True,
        'item_schema': {
            'backend': {'type': str, 'required': True, 'allowed_values': STORE_BACKENDS},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'item_schema': {
            'name': {'type': str, 'required': True},
            'locale': {'type': str, 'required': True},
            'currency': {'type': str, 'required': True},
            'confirm_delete': {'type': bool, 'required': True},
        }
    },
}


def owner_digest(owner: str) -> str:
    """Return a file-name safe key of an owner's email.

    Distinct normalized emails always map to distinct keys.

    Args:
        owner (str): The owner's email address.

    Returns:
        str: Hex SHA-256 digest of the stripped, lowercased email.
    """
    owner = owner.strip().lower()
    if not owner:
        raise ValueError('Cannot derive a file name from an empty owner')
    return hashlib.sha256(owner.encode('utf-8')).hexdigest()


def _validate_section(section_name: str, section: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Validate a single configuration section against its item schema.

    Args:
        section_name: Name of the section, used in error messages.
        section: The section data.
        item_schema: Mapping of keys to their type, required and allowed value rules.

    Raises:
        ValueError: If a required key is missing or a value is not allowed.
        TypeError: If a value has the wrong type.
    """
    logging.debug(f'Validating "{section_name}" section.')
    for key, spec in item_schema.items():
        if key not in section:
            if spec.get('required'):
                msg: str = f'"{section_name}" is missing required key "{key}".'
                logging.error(msg)
                raise ValueError(msg)
            continue

        value = section[key]
        # bool is a subclass of int, check it explicitly
        if not isinstance(value, spec['type']) or (spec['type'] is not bool and isinstance(value, bool)):
            msg = f'"{section_name}.{key}" must be {spec["type"].__name__}, got {type(value).__name__}.'
            logging.error(msg)
            raise TypeError(msg)

        allowed = spec.get('allowed_values')
        if allowed and value not in allowed:
            msg = f'"{section_name}.{key}" must be one of {allowed}, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure default templates and directories exist.

    This class initializes paths for the configuration template, the user settings file,
    the user database and the product stores. It verifies the presence of the template
    and copies it into the user data directory when no configuration exists yet.
    """

    def __init__(self) -> None:
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.config_template: pathlib.Path = self.template_dir / 'catalog.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.db_dir: pathlib.Path = self.config_dir / 'db'
        self.catalog_dir: pathlib.Path = self.db_dir / 'catalogs'

        self.config_path: pathlib.Path = self.config_dir / 'catalog.json'
        self.users_db_path: pathlib.Path = self.db_dir / 'users.db'
        self.catalog_db_path: pathlib.Path = self.db_dir / 'catalog.db'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and prepare configuration directories and files.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required directories and templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.config_template.exists():
            msg = f'Missing config template: {self.config_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        for path in (self.config_dir, self.db_dir, self.catalog_dir):
            if not path.exists():
                logging.debug(f'Creating directory: {path}')
                path.mkdir(parents=True, exist_ok=True)

        if not self.config_path.exists():
            logging.debug(f'Copying default config from template to {self.config_path}')
            shutil.copy(self.config_template, self.config_path)

    def catalog_json_path(self, owner: str) -> pathlib.Path:
        """Path of the JSON product store belonging to an owner."""
        return self.catalog_dir / f'{owner_digest(owner)}.json'

    def revert_config_to_template(self) -> None:
        """Restore catalog.json from the default template file.

        Raises:
            FileNotFoundError: If the template file is missing.
        """
        logging.debug(f'Reverting config to template: {self.config_template}')
        if not self.config_template.exists():
            msg: str = f'Config template not found: {self.config_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        shutil.copy(self.config_template, self.config_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save catalog.json sections.
    Metadata values are also available with item access, e.g. ``settings['locale']``.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the configuration.

        Args:
            config_path: Optional path to a custom catalog.json file.
        """
        super().__init__()

        self.config_path: pathlib.Path = pathlib.Path(config_path) if config_path else self.config_path

        self._signals_blocked: bool = False

        self.config_data: Dict[str, Any] = {k: {} for k in CONFIG_SCHEMA}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = CONFIG_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.config_data['metadata'].get(key)
        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None
        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = CONFIG_SCHEMA['metadata']['item_schema'][key]['type']
        if not isinstance(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')
            value = _type(value)

        self.config_data['metadata'][key] = value
        self.save_section('metadata')

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    def block_signals(self, v: bool) -> None:
        """Enable or disable emission of configuration change signals."""
        self._signals_blocked = v

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload the configuration from disk, emitting UI update signals."""
        self.load_config()

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        for section in CONFIG_SCHEMA:
            signals.configSectionChanged.emit(section)
        for k, v in self.config_data.get('metadata', {}).items():
            signals.metadataChanged.emit(k, v)

    def load_config(self) -> Dict[str, Any]:
        """Load catalog.json from disk and validate against schema.

        Returns:
            The loaded configuration dictionary.

        Raises:
            status.ConfigNotFoundException: If catalog.json is missing.
            status.ConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading config from "{self.config_path}"')
        if not self.config_path.exists():
            raise status.ConfigNotFoundException(str(self.config_path))

        try:
            with self.config_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_config_data(data)
        except (ValueError, TypeError) as ex:
            raise status.ConfigInvalidException(str(ex)) from ex

        self.config_data = data
        return self.config_data

    def validate_config_data(self, data: Dict[str, Any] = None) -> None:
        """Validate configuration data against CONFIG_SCHEMA.

        Args:
            data (dict, optional): Data to validate. Defaults to self.config_data.

        Raises:
            ValueError: If a required section or key is missing, or a value is not allowed.
            TypeError: If a section or value has the wrong type.
        """
        if data is None:
            data = self.config_data
        if not isinstance(data, dict) or not data:
            raise ValueError('Config data is empty.')

        for field, specs in CONFIG_SCHEMA.items():
            if field not in data:
                if specs.get('required'):
                    raise ValueError(f'Missing required field: {field}')
                continue

            if not isinstance(data[field], specs['type']):
                raise TypeError(f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            _validate_section(field, data[field], specs['item_schema'])

        logging.debug('Config data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of a configuration section.

        Raises:
            KeyError: If section_name is not in the configuration.
        """
        return self.config_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a configuration section.

        The previous value is restored when validation fails.

        Raises:
            ValueError: If section_name is unknown or the data is invalid.
            TypeError: If the data has the wrong types.
        """
        if section_name not in CONFIG_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data: Dict[str, Any] = self.config_data.get(section_name, {}).copy()

        self.config_data[section_name] = new_data
        try:
            self.validate_config_data()
            self.save_section(section_name)
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.config_data[section_name] = current_section_data
            raise

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def reload_section(self, section_name: str) -> None:
        """Reload a configuration section from disk.

        Raises:
            ValueError: If section_name is unknown or the file contents are invalid.
        """
        if section_name not in CONFIG_SCHEMA:
            msg: str = f'Unknown section_name for reload: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        logging.debug(f'Reloading section "{section_name}" from disk.')
        with self.config_path.open('r', encoding='utf-8') as f:
            data: Dict[str, Any] = json.load(f)
        self.validate_config_data(data=data)
        self.config_data[section_name] = data[section_name]

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Raises:
            ValueError: If section_name is invalid or not present in the template.
        """
        if section_name not in CONFIG_SCHEMA:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.config_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        if section_name not in template_data:
            msg = f'No template-based revert logic for section "{section_name}".'
            logging.error(msg)
            raise ValueError(msg)

        self.config_data[section_name] = template_data[section_name]
        self.save_section(section_name)

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to catalog.json.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in CONFIG_SCHEMA:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        original_data: Dict[str, Any] = {}
        if self.config_path.exists():
            with self.config_path.open('r', encoding='utf-8') as f:
                original_data = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.config_data[section_name]

        with self.config_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
