# tests/test_log.py
"""
Integration tests for ProductCatalog.log
(covers TankHandler, the Qt bridge, setup helpers and the log table model).

Run:
    python -m unittest tests.test_log
"""
import logging
from typing import List

from PySide6 import QtCore
from PySide6.QtCore import QtMsgType

from ProductCatalog.log.log import (
    TankHandler,
    qt_message_handler,
    set_logging_level,
    setup_logging,
)
from ProductCatalog.log.model import Columns, LogTableModel, parse_record
from ProductCatalog.ui.actions import signals
from tests.base import BaseTestCase


class LogModuleTests(BaseTestCase):
    """
    Each test starts with a fresh root logger configured by
    setup_logging(enable_stream_handler=False).
    """

    def setUp(self) -> None:
        super().setUp()

        # enable logging
        logging.disable(logging.NOTSET)

        setup_logging(enable_stream_handler=False,
                      enable_qt_handler=False,
                      log_level=logging.DEBUG)

        self.root_logger = logging.getLogger()
        self.tank: TankHandler = next(
            h for h in self.root_logger.handlers if isinstance(h, TankHandler)
        )

    def test_set_logging_level_accepts_valid_levels(self):
        set_logging_level(logging.ERROR)
        self.assertEqual(self.root_logger.level, logging.ERROR)
        for h in self.root_logger.handlers:
            self.assertEqual(h.level, logging.ERROR)

    def test_set_logging_level_rejects_non_int(self):
        with self.assertRaises(ValueError):
            set_logging_level("INFO")  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            set_logging_level(True)

    def test_set_logging_level_rejects_unknown(self):
        with self.assertRaises(ValueError):
            set_logging_level(1234)

    def test_tank_handler_stores_and_filters(self):
        logging.debug("dbg message")
        logging.warning("warn message")
        self.assertEqual(len(self.tank.tank), 2)
        warnings: List[str] = self.tank.get_logs(logging.WARNING)
        self.assertEqual(len(warnings), 1)
        self.assertIn("warn message", warnings[0])
        self.tank.clear_logs()
        self.assertEqual(len(self.tank.tank), 0)

    def test_emit_triggers_showLogs_on_error(self):
        triggered: list[bool] = []

        def _slot() -> None:
            triggered.append(True)

        signals.showLogs.connect(_slot)
        try:
            logging.warning("should not emit signal")
            self.assertFalse(triggered)
            logging.error("should emit signal")
            self.assertTrue(triggered)
        finally:
            signals.showLogs.disconnect(_slot)

    def test_qt_message_handler_maps_to_logging(self):
        qt_message_handler(QtMsgType.QtInfoMsg, None, "Qt info")
        qt_message_handler(QtMsgType.QtWarningMsg, None, "Qt warn ")
        msgs = self.tank.get_logs()
        self.assertTrue(any("Qt info" in m for m in msgs))
        self.assertTrue(any(m.endswith("Qt warn") for m in msgs))

    def test_qt_message_handler_fatal_exits(self):
        with self.assertRaises(SystemExit):
            qt_message_handler(QtMsgType.QtFatalMsg, None, "fatal")

    def test_setup_logging_installs_tank_handler_only(self):
        self.assertEqual(
            [type(h) for h in self.root_logger.handlers],
            [TankHandler],
        )


class LogTableModelTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        logging.disable(logging.NOTSET)
        setup_logging(enable_stream_handler=False,
                      enable_qt_handler=False,
                      log_level=logging.DEBUG)
        self.model = LogTableModel()

    def test_parse_record(self):
        record = parse_record(logging.INFO, '[2025-01-01 10:00:00] <store>  INFO:  Created product 1')
        self.assertEqual(record['date'], '2025-01-01 10:00:00')
        self.assertEqual(record['module'], 'store')
        self.assertEqual(record['level'], 'INFO')
        self.assertEqual(record['message'], 'Created product 1')

    def test_parse_unformatted_record(self):
        record = parse_record(logging.WARNING, 'plain text')
        self.assertEqual(record['level'], 'WARNING')
        self.assertEqual(record['message'], 'plain text')

    def test_refresh_reads_tank(self):
        logging.info('first message')
        logging.warning('second message')
        self.model.refresh()

        self.assertEqual(self.model.rowCount(), 2)
        self.assertEqual(self.model.columnCount(), len(Columns))
        index = self.model.index(1, Columns.Message.value)
        self.assertEqual(self.model.data(index, QtCore.Qt.DisplayRole), 'second message')
        index = self.model.index(0, Columns.Level.value)
        self.assertEqual(self.model.data(index, QtCore.Qt.DisplayRole), 'INFO')

    def test_minimum_level(self):
        logging.debug('debug message')
        logging.warning('warning message')
        self.model.set_minimum_level(logging.WARNING)
        self.assertEqual(self.model.rowCount(), 1)

    def test_clear_logs(self):
        logging.info('message')
        self.model.refresh()
        self.model.clear_logs()
        self.assertEqual(self.model.rowCount(), 0)
        self.model.refresh()
        self.assertEqual(self.model.rowCount(), 0)
