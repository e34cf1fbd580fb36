"""
Правило вычисления хранимого статуса напоминания
"""
from datetime import datetime
from models.reminder import Reminder, ReminderStatus

def derive_status(due_date: datetime, current_status: ReminderStatus, now: datetime) -> ReminderStatus:
    """
    Статус, который нужно сохранить перед записью напоминания.

    Завершенное напоминание остается завершенным. Ожидающее с истекшим
    сроком становится просроченным. Остальное не меняется, поэтому
    повторное применение дает тот же результат.
    """
    if current_status == ReminderStatus.COMPLETED:
        return ReminderStatus.COMPLETED
    if current_status == ReminderStatus.PENDING and due_date < now:
        return ReminderStatus.OVERDUE
    return current_status

def apply_status_rule(reminder: Reminder, now: datetime) -> Reminder:
    """Применяет правило к напоминанию на месте"""
    reminder.status = derive_status(reminder.due_date, reminder.status, now)
    return reminder
