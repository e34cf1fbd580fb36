"""
Модели данных
"""
from .user import User
from .reminder import (
    Reminder,
    ReminderCategory,
    ReminderStatus,
    ReminderSummary,
    RecurringInterval
)

__all__ = [
    'User',
    'Reminder',
    'ReminderCategory',
    'ReminderStatus',
    'ReminderSummary',
    'RecurringInterval'
]
