"""
Unit tests for logging setup.
"""

import logging
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from types import SimpleNamespace
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from logging_utils import LoggingConfig, setup_logging


class TestLoggingSetup(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self.saved_handlers = root.handlers[:]
        self.saved_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            root.addHandler(handler)
        root.setLevel(self.saved_level)

    def test_defaults_without_config(self):
        cfg = LoggingConfig()
        self.assertEqual(cfg.log_file, "cinemate.log")
        self.assertEqual(cfg.third_party_levels["discord"], logging.WARNING)

    def test_console_only(self):
        config = SimpleNamespace(ENABLE_FILE_LOGGING=False, LOG_LEVEL=logging.ERROR)
        logger = setup_logging(config)
        handlers = logging.getLogger().handlers
        self.assertEqual(len(handlers), 1)
        self.assertEqual(handlers[0].level, logging.ERROR)
        self.assertEqual(logger.name, "cinemate")
        self.assertEqual(logging.getLogger("aiohttp").level, logging.WARNING)

    def test_rotating_file_handler(self):
        with tempfile.TemporaryDirectory() as logs_dir:
            config = SimpleNamespace(ENABLE_CONSOLE_LOGGING=False, LOGS_DIR=logs_dir, LOG_FILE="test.log")
            setup_logging(config)
            handlers = logging.getLogger().handlers
            self.assertEqual(len(handlers), 1)
            self.assertIsInstance(handlers[0], RotatingFileHandler)
            self.assertTrue(os.path.exists(os.path.join(logs_dir, "test.log")))
            handlers[0].close()
            logging.getLogger().removeHandler(handlers[0])


if __name__ == '__main__':
    unittest.main()
