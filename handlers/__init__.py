"""
Обработчики команд и сообщений
"""
from .base_handler import BaseHandler
from .reminder_handler import ReminderHandler

__all__ = [
    'BaseHandler',
    'ReminderHandler'
]
