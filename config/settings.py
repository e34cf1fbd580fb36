"""
Конфигурация приложения с валидацией и типизацией
"""
import os
from dataclasses import dataclass
from typing import Optional, List
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Загружаем переменные окружения
load_dotenv()

@dataclass
class DatabaseConfig:
    """Конфигурация базы данных"""
    host: Optional[str] = None
    port: str = "5432"
    name: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    min_pool_size: int = 5
    max_pool_size: int = 20
    command_timeout: int = 60

    @property
    def url(self) -> Optional[str]:
        """Генерирует URL для подключения к базе данных"""
        if all([self.host, self.name, self.user, self.password]):
            return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"
        return None

    @property
    def is_configured(self) -> bool:
        """Проверяет, настроена ли база данных"""
        return self.url is not None

@dataclass
class BotConfig:
    """Конфигурация бота"""
    token: str
    rate_limit_requests: int = 30
    rate_limit_window: int = 60  # секунд

    def validate(self) -> List[str]:
        """Валидация конфигурации бота"""
        errors = []
        if not self.token:
            errors.append("BOT_TOKEN is required")
        if self.rate_limit_requests <= 0:
            errors.append("rate_limit_requests must be positive")
        return errors

@dataclass
class ReminderConfig:
    """Параметры напоминаний"""
    due_soon_days: int = 3
    upcoming_days: int = 30
    page_size: int = 10

@dataclass
class LoggingConfig:
    """Конфигурация логирования"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None

class Settings:
    """Основные настройки приложения"""

    def __init__(self):
        self.bot = BotConfig(
            token=os.environ.get('BOT_TOKEN', ''),
            rate_limit_requests=int(os.environ.get('RATE_LIMIT_REQUESTS', '30')),
            rate_limit_window=int(os.environ.get('RATE_LIMIT_WINDOW', '60'))
        )

        self.database = DatabaseConfig(
            host=os.environ.get('DATABASE_HOST'),
            port=os.environ.get('DATABASE_PORT', '5432'),
            name=os.environ.get('DATABASE_NAME'),
            user=os.environ.get('DATABASE_USER'),
            password=os.environ.get('DATABASE_PASSWORD')
        )

        self.reminders = ReminderConfig(
            due_soon_days=int(os.environ.get('REMINDER_DUE_SOON_DAYS', '3')),
            upcoming_days=int(os.environ.get('REMINDER_UPCOMING_DAYS', '30')),
            page_size=int(os.environ.get('REMINDER_PAGE_SIZE', '10'))
        )

        self.logging = LoggingConfig(
            level=os.environ.get('LOG_LEVEL', 'INFO'),
            file_path=os.environ.get('LOG_FILE')
        )

    def validate(self) -> List[str]:
        """Валидация всех настроек, возвращает список проблем"""
        errors = self.bot.validate()
        for error in errors:
            logger.error(f"Configuration error: {error}")

        if not self.database.is_configured:
            logger.warning("⚠️ Database is not configured. Reminders cannot be stored.")

        return errors

# Глобальный экземпляр настроек
settings = Settings()
