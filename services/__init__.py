"""
Сервисы
"""
from .database_service import DatabaseService
from .user_service import UserService
from .reminder_repository import ReminderRepository, ReminderFilter
from .reminder_service import ReminderService

__all__ = [
    'DatabaseService',
    'UserService',
    'ReminderRepository',
    'ReminderFilter',
    'ReminderService'
]
