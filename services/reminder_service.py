"""
Сервис для работы с напоминаниями

Все операции записи проходят через этот сервис: здесь проверяются
входные данные и владелец, а перед каждой записью пересчитывается
хранимый статус.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from config.settings import settings
from models.reminder import (
    Reminder, ReminderCategory, ReminderStatus, ReminderSummary, RecurringInterval
)
from services.recurrence import build_successor
from services.reminder_repository import ReminderFilter, ReminderRepository, reminder_repository
from services.status_rules import apply_status_rule
from services.user_service import UserService, user_service
from utils import (
    logger, Validator, ValidationError, OwnerNotFoundError, NotFoundError, AuthorizationError
)
from utils.date_filters import get_date_filter

MAX_PAGE_SIZE = 100

@dataclass
class ReminderPage:
    """Страница списка напоминаний со сводкой"""
    results: List[Reminder]
    page: int
    total_pages: int
    count: int
    total: int
    summary: ReminderSummary = field(default_factory=ReminderSummary)

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            'results': [reminder.to_api_dict() for reminder in self.results],
            'page': self.page,
            'totalPages': self.total_pages,
            'count': self.count,
            'total': self.total,
            'summary': self.summary.to_api_dict()
        }

@dataclass
class CompletionResult:
    """Результат завершения: исходное напоминание и его преемник"""
    reminder: Reminder
    next: Optional[Reminder] = None

def parse_reminder_payload(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Проверяет тело запроса и возвращает поля модели.

    При partial=True проверяются только переданные ключи, иначе title
    и dueDate обязательны, а для остальных подставляются значения
    по умолчанию. Лишние ключи (id, owner, createdAt) игнорируются.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Reminder payload must be an object")

    fields: Dict[str, Any] = {}

    if not partial or 'title' in payload:
        fields['title'] = Validator.validate_length(payload.get('title'), 1, 200, "Title")
    if not partial or 'dueDate' in payload:
        fields['due_date'] = Validator.validate_due_date(payload.get('dueDate'))
    if not partial or 'description' in payload:
        fields['description'] = Validator.validate_description(payload.get('description'))
    if not partial or 'amount' in payload:
        fields['amount'] = Validator.validate_optional_amount(payload.get('amount'))

    if payload.get('category') is not None:
        fields['category'] = Validator.validate_enum(payload['category'], ReminderCategory, "Category")
    elif not partial:
        fields['category'] = ReminderCategory.BILL

    if payload.get('isRecurring') is not None:
        fields['is_recurring'] = Validator.validate_bool(payload['isRecurring'], "isRecurring")
    elif not partial:
        fields['is_recurring'] = False

    if payload.get('recurringInterval') is not None:
        fields['recurring_interval'] = Validator.validate_enum(
            payload['recurringInterval'], RecurringInterval, "Recurring interval"
        )
    elif not partial:
        fields['recurring_interval'] = RecurringInterval.MONTHLY

    if payload.get('status') is not None:
        fields['status'] = Validator.validate_enum(payload['status'], ReminderStatus, "Status")

    return fields

def parse_statuses(status: Optional[str]) -> Optional[List[ReminderStatus]]:
    """Статус фильтра: одно значение, список через запятую или all"""
    if not status or status == 'all':
        return None
    return [
        Validator.validate_enum(part, ReminderStatus, "Status")
        for part in status.split(',') if part
    ] or None

class ReminderService:
    """Сервис для работы с напоминаниями"""

    def __init__(self, repository: ReminderRepository = reminder_repository,
                 users: UserService = user_service):
        self.repository = repository
        self.users = users

    async def create_reminder(self, user_id: int, payload: Dict[str, Any],
                              now: Optional[datetime] = None) -> Reminder:
        """Создание нового напоминания"""
        fields = parse_reminder_payload(payload)

        if not await self.users.is_user_exists(user_id):
            raise OwnerNotFoundError(f"User {user_id} not found", error_code="owner_not_found")

        reminder = Reminder(user_id=user_id, created_at=datetime.now(), **fields)
        apply_status_rule(reminder, now or datetime.now())

        saved = await self.repository.insert(reminder)
        logger.info(f"Создано напоминание {saved.id}: {saved.title} для пользователя {user_id} "
                    f"(статус {saved.status.value})")
        return saved

    async def get_reminder(self, reminder_id: int, user_id: int) -> Reminder:
        """Получение напоминания владельцем"""
        reminder = await self.repository.get(reminder_id)
        if reminder is None:
            raise NotFoundError("Reminder not found", error_code="not_found")
        if reminder.user_id != user_id:
            raise AuthorizationError("Not authorized to access this reminder", error_code="forbidden")
        return reminder

    async def update_reminder(self, reminder_id: int, user_id: int, payload: Dict[str, Any],
                              now: Optional[datetime] = None) -> Reminder:
        """Частичное обновление напоминания"""
        fields = parse_reminder_payload(payload, partial=True)
        if not fields:
            raise ValidationError("Nothing to update")

        reminder = await self.get_reminder(reminder_id, user_id)
        previous_status = reminder.status

        # Новый срок пересчитывает статус, если его не задали явно
        if 'due_date' in fields and 'status' not in fields and not reminder.is_completed:
            fields['status'] = ReminderStatus.PENDING

        completing = (fields.get('status') == ReminderStatus.COMPLETED
                      and previous_status != ReminderStatus.COMPLETED)
        if completing:
            fields['status'] = previous_status

        now = now or datetime.now()
        for name, value in fields.items():
            setattr(reminder, name, value)
        apply_status_rule(reminder, now)

        updated = await self.repository.update(reminder)
        if updated is None:
            raise NotFoundError("Reminder not found", error_code="not_found")
        logger.info(f"Обновлено напоминание {reminder_id} (статус {updated.status.value})")

        if completing:
            result = await self._complete(updated, now)
            return result.reminder
        return updated

    async def delete_reminder(self, reminder_id: int, user_id: int) -> bool:
        """Удаление напоминания"""
        await self.get_reminder(reminder_id, user_id)
        deleted = await self.repository.delete(reminder_id)
        if deleted:
            logger.info(f"Удалено напоминание: {reminder_id}")
        return deleted

    async def bulk_delete_reminders(self, reminder_ids: Sequence[int], user_id: int) -> int:
        """Удаление нескольких напоминаний; все должны принадлежать пользователю"""
        if not reminder_ids:
            raise ValidationError("No reminder IDs provided for deletion")

        ids = list(dict.fromkeys(reminder_ids))
        owned = await self.repository.count(ReminderFilter(user_id=user_id, ids=ids))
        if owned != len(ids):
            raise AuthorizationError(
                "Not authorized to delete one or more of the requested reminders",
                error_code="forbidden"
            )

        deleted = await self.repository.delete_many(ids, user_id)
        logger.info(f"Удалено {deleted} напоминаний пользователя {user_id}")
        return deleted

    async def complete_reminder(self, reminder_id: int, user_id: int,
                                now: Optional[datetime] = None) -> CompletionResult:
        """Отметка об оплате; для повторяющихся создается следующее напоминание"""
        reminder = await self.get_reminder(reminder_id, user_id)
        return await self._complete(reminder, now or datetime.now())

    async def _complete(self, reminder: Reminder, now: datetime) -> CompletionResult:
        successor = build_successor(reminder)
        if successor is not None:
            apply_status_rule(successor, now)
        completed, next_reminder = await self.repository.complete(reminder.id, successor)
        if completed is None:
            raise NotFoundError("Reminder not found", error_code="not_found")

        if next_reminder is not None:
            logger.info(f"Напоминание {completed.id} завершено, следующее {next_reminder.id} "
                        f"на {next_reminder.due_date.isoformat()}")
        else:
            logger.info(f"Напоминание {completed.id} завершено")
        return CompletionResult(reminder=completed, next=next_reminder)

    async def list_reminders(self, user_id: int, page: int = 1, limit: Optional[int] = None,
                             date_range: Optional[str] = None, start_date: Optional[str] = None,
                             end_date: Optional[str] = None, category: Optional[str] = None,
                             status: Optional[str] = None,
                             now: Optional[datetime] = None) -> ReminderPage:
        """Список напоминаний пользователя с фильтрами, пагинацией и сводкой"""
        now = now or datetime.now()
        if limit is None:
            limit = settings.reminders.page_size
        if page < 1:
            raise ValidationError("Page must be a positive number")
        if not (1 <= limit <= MAX_PAGE_SIZE):
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        query_filter = ReminderFilter(user_id=user_id)
        statuses = parse_statuses(status)

        if date_range == 'upcoming':
            # Ближайшие и уже просроченные
            query_filter.due_to = now + timedelta(days=settings.reminders.upcoming_days)
            if statuses is None:
                query_filter.exclude_status = ReminderStatus.COMPLETED
        elif date_range or (start_date and end_date):
            date_filter = get_date_filter(date_range, start_date, end_date, now=now)
            if date_filter:
                query_filter.due_from, query_filter.due_to = date_filter

        if category and category != 'all':
            query_filter.category = Validator.validate_enum(category, ReminderCategory, "Category")

        query_filter.statuses = statuses

        results = await self.repository.find(query_filter, limit=limit, offset=(page - 1) * limit)
        total = await self.repository.count(query_filter)
        summary = await self.get_summary(user_id, now=now)

        return ReminderPage(
            results=results,
            page=page,
            total_pages=math.ceil(total / limit),
            count=len(results),
            total=total,
            summary=summary
        )

    async def get_summary(self, user_id: int, now: Optional[datetime] = None) -> ReminderSummary:
        """Сводка: ожидающие, просроченные и сумма ближайших платежей"""
        now = now or datetime.now()

        total_pending = await self.repository.count(ReminderFilter(
            user_id=user_id, statuses=[ReminderStatus.PENDING], due_from=now
        ))
        total_overdue = await self.repository.count(ReminderFilter(
            user_id=user_id, statuses=[ReminderStatus.OVERDUE]
        ))
        upcoming = await self.repository.find(ReminderFilter(
            user_id=user_id,
            exclude_status=ReminderStatus.COMPLETED,
            due_from=now,
            due_to=now + timedelta(days=settings.reminders.upcoming_days)
        ))

        by_category: Dict[str, int] = {}
        for reminder in upcoming:
            by_category[reminder.category.value] = by_category.get(reminder.category.value, 0) + 1

        return ReminderSummary(
            total_pending=total_pending,
            total_overdue=total_overdue,
            upcoming_total=sum((r.amount for r in upcoming if r.amount is not None), Decimal('0')),
            by_category=by_category
        )

# Глобальный экземпляр сервиса
reminder_service = ReminderService()
