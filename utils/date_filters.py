"""
Фильтры по датам для выборок напоминаний
"""
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union
from dateutil.relativedelta import relativedelta
from config.settings import settings
from utils.validators import Validator

DateRange = Tuple[datetime, datetime]

DATE_RANGES = (
    'current-month',
    'last-month',
    'last-3-months',
    'last-6-months',
    'current-year',
    'last-week',
    'year-to-date',
    'upcoming',
)

def _start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)

def _end_of_month(moment: datetime) -> datetime:
    return _end_of_day(_start_of_month(moment) + relativedelta(months=1, days=-1))

def get_date_filter(date_range: Optional[str] = None,
                    start_date: Union[str, datetime, None] = None,
                    end_date: Union[str, datetime, None] = None,
                    now: Optional[datetime] = None) -> Optional[DateRange]:
    """
    Возвращает интервал (начало, конец) для фильтра по сроку.

    Явно заданные start_date и end_date имеют приоритет над date_range;
    конец произвольного интервала расширяется до конца дня.
    Неизвестный date_range означает отсутствие фильтра.
    """
    if start_date and end_date:
        start = Validator.validate_due_date(start_date)
        end = _end_of_day(Validator.validate_due_date(end_date))
        return start, end

    if not date_range:
        return None

    now = now or datetime.now()
    month_start = _start_of_month(now)

    if date_range == 'current-month':
        return month_start, _end_of_month(now)

    if date_range == 'last-month':
        previous = month_start - relativedelta(months=1)
        return previous, _end_of_month(previous)

    if date_range == 'last-3-months':
        return month_start - relativedelta(months=2), _end_of_month(now)

    if date_range == 'last-6-months':
        return month_start - relativedelta(months=5), _end_of_month(now)

    if date_range == 'current-year':
        year_start = month_start.replace(month=1)
        return year_start, _end_of_day(now.replace(month=12, day=31))

    if date_range == 'last-week':
        return now - timedelta(days=7), now

    if date_range == 'year-to-date':
        return month_start.replace(month=1), now

    if date_range == 'upcoming':
        return now, now + timedelta(days=settings.reminders.upcoming_days)

    return None
