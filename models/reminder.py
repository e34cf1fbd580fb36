"""
Модель напоминания
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

class ReminderCategory(Enum):
    """Категории напоминаний"""
    BILL = "bill"
    SUBSCRIPTION = "subscription"
    TAX = "tax"
    INVESTMENT = "investment"
    INSURANCE = "insurance"
    OTHER = "other"

class RecurringInterval(Enum):
    """Периодичность повторяющихся напоминаний"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

class ReminderStatus(Enum):
    """Хранимый статус напоминания"""
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"

def _parse_datetime(value: Any) -> Optional[datetime]:
    # asyncpg отдает datetime, JSON отдает строку
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))

@dataclass
class Reminder:
    """Модель напоминания"""
    user_id: int
    title: str
    due_date: datetime
    id: Optional[int] = None
    description: Optional[str] = None
    category: ReminderCategory = ReminderCategory.BILL
    amount: Optional[Decimal] = None
    is_recurring: bool = False
    recurring_interval: RecurringInterval = RecurringInterval.MONTHLY
    status: ReminderStatus = ReminderStatus.PENDING
    created_at: Optional[datetime] = None
    source_reminder_id: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.status == ReminderStatus.COMPLETED

    @property
    def effective_interval(self) -> Optional[RecurringInterval]:
        """Периодичность имеет смысл только для повторяющихся напоминаний"""
        return self.recurring_interval if self.is_recurring else None

    def to_dict(self) -> dict:
        """Преобразует в словарь (колонки таблицы reminders)"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'description': self.description,
            'due_date': self.due_date,
            'category': self.category.value,
            'amount': self.amount,
            'is_recurring': self.is_recurring,
            'recurring_interval': self.recurring_interval.value,
            'status': self.status.value,
            'created_at': self.created_at,
            'source_reminder_id': self.source_reminder_id
        }

    def to_api_dict(self) -> Dict[str, Any]:
        """Представление для клиента"""
        return {
            'id': self.id,
            'owner': self.user_id,
            'title': self.title,
            'description': self.description,
            'dueDate': self.due_date.isoformat(),
            'category': self.category.value,
            'amount': float(self.amount) if self.amount is not None else None,
            'isRecurring': self.is_recurring,
            'recurringInterval': self.recurring_interval.value,
            'status': self.status.value,
            'createdAt': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Reminder':
        """Создает из строки таблицы reminders"""
        amount = data.get('amount')
        return cls(
            id=data.get('id'),
            user_id=data['user_id'],
            title=data['title'],
            description=data.get('description'),
            due_date=_parse_datetime(data['due_date']),
            category=ReminderCategory(data.get('category') or 'bill'),
            amount=Decimal(str(amount)) if amount is not None else None,
            is_recurring=bool(data.get('is_recurring', False)),
            recurring_interval=RecurringInterval(data.get('recurring_interval') or 'monthly'),
            status=ReminderStatus(data.get('status') or 'pending'),
            created_at=_parse_datetime(data.get('created_at')),
            source_reminder_id=data.get('source_reminder_id')
        )

@dataclass
class ReminderSummary:
    """Сводка по напоминаниям пользователя"""
    total_pending: int = 0
    total_overdue: int = 0
    upcoming_total: Decimal = Decimal('0')
    by_category: Dict[str, int] = field(default_factory=dict)

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            'totalPending': self.total_pending,
            'totalOverdue': self.total_overdue,
            'upcomingTotal': float(self.upcoming_total),
            'byCategoryMap': dict(self.by_category)
        }
