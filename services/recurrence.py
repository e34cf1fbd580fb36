"""
Генерация следующего напоминания для повторяющихся платежей
"""
from datetime import datetime, timedelta
from typing import Optional
from dateutil.relativedelta import relativedelta
from models.reminder import Reminder, RecurringInterval, ReminderStatus

# relativedelta сам прижимает день к концу более короткого месяца
_STEPS = {
    RecurringInterval.DAILY: timedelta(days=1),
    RecurringInterval.WEEKLY: timedelta(days=7),
    RecurringInterval.MONTHLY: relativedelta(months=1),
    RecurringInterval.YEARLY: relativedelta(years=1),
}

def advance_due_date(due_date: datetime, interval: RecurringInterval) -> datetime:
    """Сдвигает срок ровно на один интервал"""
    return due_date + _STEPS[interval]

def build_successor(reminder: Reminder) -> Optional[Reminder]:
    """
    Следующее напоминание для завершенного повторяющегося.

    Для разовых напоминаний возвращает None. Новое напоминание ссылается
    на исходное через source_reminder_id, по которому хранилище
    не дает создать второго преемника.
    """
    if not reminder.is_recurring:
        return None

    return Reminder(
        user_id=reminder.user_id,
        title=reminder.title,
        description=reminder.description,
        due_date=advance_due_date(reminder.due_date, reminder.recurring_interval),
        category=reminder.category,
        amount=reminder.amount,
        is_recurring=True,
        recurring_interval=reminder.recurring_interval,
        status=ReminderStatus.PENDING,
        source_reminder_id=reminder.id
    )
