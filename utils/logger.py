"""
Настройка логирования
"""
import os
import logging
import sys
from typing import Optional
from config.settings import settings

class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консоли"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record):
        message = super().format(record)
        if sys.stdout.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            message = f"{color}{message}{self.COLORS['RESET']}"
        return message

def setup_logger(name: str = "budgetbot", log_file: Optional[str] = None) -> logging.Logger:
    """Настройка логгера"""

    log_file = log_file or settings.logging.file_path
    if not log_file:
        log_dir = os.path.join(os.path.dirname(__file__), '..', 'logs')
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{name}.log")

    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Повторный вызов не должен дублировать обработчики
    logger.handlers.clear()

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    console_formatter = ColoredFormatter(settings.logging.format)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger

# Глобальный логгер
logger = setup_logger()
