"""
Карточка напоминания: статус для отображения

Статус карточки вычисляется при каждом показе только из срока и флагов
"оплачено"/"просрочено". Хранимый статус напоминания здесь не читается
и не меняется, поэтому карточка может расходиться с записью в базе,
если флаги взяты из устаревшего чтения.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Union
from config.settings import settings
from models.reminder import Reminder, ReminderStatus
from utils import DerivationInputError

ONE_DAY = timedelta(days=1)

STATUS_ICONS = {
    'paid': '✅',
    'overdue': '🔴',
    'due-soon': '🟠',
    'upcoming': '🟢',
}

@dataclass(frozen=True)
class ReminderDisplay:
    """Надпись, класс статуса и число оставшихся дней"""
    label: str
    status_class: str
    days_remaining: int

@dataclass(frozen=True)
class ReminderCard:
    """Данные карточки для вывода пользователю"""
    title: str
    category: str
    due_date_text: str
    amount_text: str
    display: ReminderDisplay

    @property
    def can_mark_paid(self) -> bool:
        return self.display.status_class != 'paid'

def days_until(due_date: datetime, now: datetime) -> int:
    """Оставшиеся дни, округленные вверх"""
    return math.ceil((due_date - now) / ONE_DAY)

def present_reminder(due_date: datetime, amount: Union[Decimal, float, int], is_paid: bool,
                     is_overdue: bool, now: Optional[datetime] = None) -> ReminderDisplay:
    """Статус для показа: Paid, Overdue, Due soon или "N days left" """
    if due_date is None:
        raise DerivationInputError("due_date is required to present a reminder")
    if amount is None:
        raise DerivationInputError("amount is required to present a reminder")

    days_remaining = days_until(due_date, now or datetime.now())

    if is_paid:
        return ReminderDisplay("Paid", "paid", days_remaining)
    if is_overdue:
        return ReminderDisplay("Overdue", "overdue", days_remaining)
    if days_remaining <= settings.reminders.due_soon_days:
        return ReminderDisplay("Due soon", "due-soon", days_remaining)
    return ReminderDisplay(f"{days_remaining} days left", "upcoming", days_remaining)

def format_money(amount: Union[Decimal, float, int]) -> str:
    return f"${float(amount):,.2f}"

def build_reminder_card(reminder: Reminder, now: Optional[datetime] = None) -> ReminderCard:
    """Карточка по снимку напоминания; флаги берутся из прочитанного статуса"""
    display = present_reminder(
        reminder.due_date,
        reminder.amount,
        is_paid=reminder.status == ReminderStatus.COMPLETED,
        is_overdue=reminder.status == ReminderStatus.OVERDUE,
        now=now
    )
    return ReminderCard(
        title=reminder.title,
        category=reminder.category.value,
        due_date_text=reminder.due_date.strftime("%b %d, %Y"),
        amount_text=format_money(reminder.amount),
        display=display
    )

def render_reminder_card(card: ReminderCard) -> str:
    """Текст карточки для сообщения"""
    icon = STATUS_ICONS.get(card.display.status_class, '•')
    return (
        f"{icon} {card.title} · {card.display.label}\n"
        f"   🏷 {card.category}  📅 {card.due_date_text}  💰 {card.amount_text}"
    )
