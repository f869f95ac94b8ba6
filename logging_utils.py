# logging_utils.py
"""
Logging setup: rotating file log plus console output
"""

import logging
import os
import platform
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


class LoggingConfig:
    """Logging settings read from a config module"""

    def __init__(self, config_module=None):
        self.config = config_module

        self.log_level = self._get_config_value('LOG_LEVEL', logging.INFO)
        self.max_bytes = self._get_config_value('MAX_LOG_SIZE', 5*1024*1024)  # 5MB
        self.backup_count = self._get_config_value('LOG_BACKUP_COUNT', 3)
        self.logs_dir = self._get_config_value('LOGS_DIR', 'logs')
        self.log_file = self._get_config_value('LOG_FILE', 'cinemate.log')

        self.enable_file_logging = self._get_config_value('ENABLE_FILE_LOGGING', True)
        self.enable_console_logging = self._get_config_value('ENABLE_CONSOLE_LOGGING', True)
        self.detailed_file_logs = self._get_config_value('DETAILED_FILE_LOGS', True)

        # Third-party library log levels
        self.third_party_levels = {
            'discord': self._get_config_value('DISCORD_LOG_LEVEL', logging.WARNING),
            'discord.http': self._get_config_value('DISCORD_HTTP_LOG_LEVEL', logging.WARNING),
            'aiohttp': self._get_config_value('AIOHTTP_LOG_LEVEL', logging.WARNING),
        }

    def _get_config_value(self, key: str, default):
        """Get configuration value with fallback to default"""
        if self.config and hasattr(self.config, key):
            return getattr(self.config, key)
        return default


class EnhancedLogger:
    """Configures the root logger once per process"""

    def __init__(self, config_module=None):
        self.config = LoggingConfig(config_module)
        self.logger = None
        self._setup_complete = False

    def setup_logging(self) -> logging.Logger:
        if self._setup_complete:
            return self.logger

        if self.config.enable_file_logging:
            os.makedirs(self.config.logs_dir, exist_ok=True)

        formatters = self._create_formatters()
        handlers = []

        if self.config.enable_file_logging:
            file_handler = self._create_file_handler(formatters['detailed'])
            if file_handler:
                handlers.append(file_handler)

        if self.config.enable_console_logging:
            handlers.append(self._create_console_handler(formatters['simple']))

        self._setup_root_logger(handlers)
        self._configure_third_party_loggers()

        self.logger = logging.getLogger("cinemate")
        self._setup_complete = True
        return self.logger

    def _create_formatters(self) -> dict:
        return {
            'detailed': logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            ),
            'simple': logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s'
            ),
        }

    def _create_file_handler(self, formatter) -> Optional[RotatingFileHandler]:
        """Create file handler with rotation"""
        log_path = os.path.join(self.config.logs_dir, self.config.log_file)
        try:
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=self.config.max_bytes,
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
        except OSError as e:
            print(f"Warning: Could not setup file logging at {log_path}: {e}")
            return None

        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG if self.config.detailed_file_logs else self.config.log_level)
        return file_handler

    def _create_console_handler(self, formatter) -> logging.StreamHandler:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(self.config.log_level)
        return console_handler

    def _setup_root_logger(self, handlers: list):
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)

        # Replace handlers from any earlier setup
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

        for handler in handlers:
            root_logger.addHandler(handler)

    def _configure_third_party_loggers(self):
        """Keep library loggers quiet unless configured otherwise"""
        for logger_name, level in self.config.third_party_levels.items():
            logging.getLogger(logger_name).setLevel(level)


def setup_logging(config_module=None) -> logging.Logger:
    """Setup logging and return the main logger"""
    return EnhancedLogger(config_module).setup_logging()


def log_system_info(logger: logging.Logger, additional_info: dict = None):
    """Log interpreter and platform details at startup"""
    logger.info("=" * 50)
    logger.info(f"Python Version: {sys.version.split()[0]}")
    logger.info(f"Platform: {platform.platform()}")

    if additional_info:
        logger.info("-" * 30)
        for key, value in additional_info.items():
            logger.info(f"{key}: {value}")

    logger.info("=" * 50)
