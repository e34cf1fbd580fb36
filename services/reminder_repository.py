"""
Хранилище напоминаний в PostgreSQL

Только SQL и преобразование строк. Бизнес-правила (валидация, статусы,
повторения) живут в ReminderService.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple
from models.reminder import Reminder, ReminderCategory, ReminderStatus
from services.database_service import db_service, DatabaseService
from utils import logger, DatabaseError

INSERT_COLUMNS = (
    'user_id', 'title', 'description', 'due_date', 'category', 'amount',
    'is_recurring', 'recurring_interval', 'status', 'created_at', 'source_reminder_id'
)

UPDATABLE_COLUMNS = (
    'title', 'description', 'due_date', 'category', 'amount',
    'is_recurring', 'recurring_interval', 'status'
)

@dataclass
class ReminderFilter:
    """Условия выборки напоминаний одного пользователя"""
    user_id: int
    statuses: Optional[Sequence[ReminderStatus]] = None
    exclude_status: Optional[ReminderStatus] = None
    category: Optional[ReminderCategory] = None
    due_from: Optional[datetime] = None
    due_to: Optional[datetime] = None
    ids: Optional[Sequence[int]] = None

    def matches(self, reminder: Reminder) -> bool:
        """Проверка записи в памяти (та же семантика, что у SQL)"""
        if reminder.user_id != self.user_id:
            return False
        if self.statuses is not None and reminder.status not in self.statuses:
            return False
        if self.exclude_status is not None and reminder.status == self.exclude_status:
            return False
        if self.category is not None and reminder.category != self.category:
            return False
        if self.due_from is not None and reminder.due_date < self.due_from:
            return False
        if self.due_to is not None and reminder.due_date > self.due_to:
            return False
        if self.ids is not None and reminder.id not in self.ids:
            return False
        return True

def build_where(query_filter: ReminderFilter) -> Tuple[str, List[Any]]:
    """Формирует WHERE часть запроса и список параметров"""
    conditions = ["user_id = $1"]
    params: List[Any] = [query_filter.user_id]

    def add(condition: str, value: Any):
        params.append(value)
        conditions.append(condition.format(n=len(params)))

    if query_filter.statuses is not None:
        add("status = ANY(${n})", [status.value for status in query_filter.statuses])
    if query_filter.exclude_status is not None:
        add("status <> ${n}", query_filter.exclude_status.value)
    if query_filter.category is not None:
        add("category = ${n}", query_filter.category.value)
    if query_filter.due_from is not None:
        add("due_date >= ${n}", query_filter.due_from)
    if query_filter.due_to is not None:
        add("due_date <= ${n}", query_filter.due_to)
    if query_filter.ids is not None:
        add("id = ANY(${n})", list(query_filter.ids))

    return " AND ".join(conditions), params

class ReminderRepository:
    """Репозиторий напоминаний"""

    def __init__(self, db: DatabaseService = db_service):
        self.db = db

    @staticmethod
    def _insert_query() -> str:
        placeholders = ', '.join(f"${i}" for i in range(1, len(INSERT_COLUMNS) + 1))
        return f"INSERT INTO reminders ({', '.join(INSERT_COLUMNS)}) VALUES ({placeholders})"

    @staticmethod
    def _insert_values(reminder: Reminder) -> List[Any]:
        row = reminder.to_dict()
        row['created_at'] = reminder.created_at or datetime.now()
        return [row[column] for column in INSERT_COLUMNS]

    async def insert(self, reminder: Reminder) -> Reminder:
        """Сохранение нового напоминания"""
        try:
            result = await self.db.fetch_one(
                self._insert_query() + " RETURNING *", *self._insert_values(reminder)
            )
        except Exception as e:
            logger.error(f"Ошибка создания напоминания: {e}")
            raise DatabaseError(f"Не удалось создать напоминание: {e}")

        if not result:
            raise DatabaseError("Не удалось создать напоминание")
        return Reminder.from_dict(dict(result))

    async def get(self, reminder_id: int) -> Optional[Reminder]:
        """Получение напоминания по ID"""
        try:
            result = await self.db.fetch_one("SELECT * FROM reminders WHERE id = $1", reminder_id)
        except Exception as e:
            logger.error(f"Ошибка получения напоминания {reminder_id}: {e}")
            raise DatabaseError(f"Не удалось получить напоминание: {e}")

        return Reminder.from_dict(dict(result)) if result else None

    async def update(self, reminder: Reminder) -> Optional[Reminder]:
        """Запись изменяемых полей напоминания"""
        row = reminder.to_dict()
        set_parts = [f"{column} = ${i}" for i, column in enumerate(UPDATABLE_COLUMNS, 1)]
        values = [row[column] for column in UPDATABLE_COLUMNS]
        values.append(reminder.id)

        query = f"""
            UPDATE reminders
            SET {', '.join(set_parts)}
            WHERE id = ${len(values)}
            RETURNING *
        """
        try:
            result = await self.db.fetch_one(query, *values)
        except Exception as e:
            logger.error(f"Ошибка обновления напоминания {reminder.id}: {e}")
            raise DatabaseError(f"Не удалось обновить напоминание: {e}")

        return Reminder.from_dict(dict(result)) if result else None

    async def delete(self, reminder_id: int) -> bool:
        """Удаление напоминания"""
        try:
            result = await self.db.execute("DELETE FROM reminders WHERE id = $1", reminder_id)
        except Exception as e:
            logger.error(f"Ошибка удаления напоминания {reminder_id}: {e}")
            raise DatabaseError(f"Не удалось удалить напоминание: {e}")

        return result == "DELETE 1"

    async def delete_many(self, reminder_ids: Sequence[int], user_id: int) -> int:
        """Удаление нескольких напоминаний пользователя"""
        try:
            result = await self.db.execute(
                "DELETE FROM reminders WHERE id = ANY($1) AND user_id = $2",
                list(reminder_ids), user_id
            )
        except Exception as e:
            logger.error(f"Ошибка массового удаления напоминаний: {e}")
            raise DatabaseError(f"Не удалось удалить напоминания: {e}")

        # asyncpg возвращает статус вида "DELETE 3"
        return int(result.split()[-1])

    async def find(self, query_filter: ReminderFilter, limit: Optional[int] = None,
                   offset: int = 0) -> List[Reminder]:
        """Выборка напоминаний по сроку (ближайшие первыми)"""
        where, params = build_where(query_filter)
        query = f"SELECT * FROM reminders WHERE {where} ORDER BY due_date ASC, id ASC"
        if limit is not None:
            params.extend([limit, offset])
            query += f" LIMIT ${len(params) - 1} OFFSET ${len(params)}"

        try:
            results = await self.db.fetch_all(query, *params)
        except Exception as e:
            logger.error(f"Ошибка получения напоминаний пользователя {query_filter.user_id}: {e}")
            raise DatabaseError(f"Не удалось получить напоминания: {e}")

        return [Reminder.from_dict(dict(row)) for row in results]

    async def count(self, query_filter: ReminderFilter) -> int:
        """Количество напоминаний по фильтру"""
        where, params = build_where(query_filter)
        try:
            return await self.db.fetch_val(f"SELECT COUNT(*) FROM reminders WHERE {where}", *params)
        except Exception as e:
            logger.error(f"Ошибка подсчета напоминаний пользователя {query_filter.user_id}: {e}")
            raise DatabaseError(f"Не удалось посчитать напоминания: {e}")

    async def complete(self, reminder_id: int,
                       successor: Optional[Reminder] = None) -> Tuple[Optional[Reminder], Optional[Reminder]]:
        """
        Отмечает напоминание завершенным и сохраняет преемника в одной транзакции.

        Преемник уникален по source_reminder_id: при повторном вызове
        возвращается уже созданная запись.
        """
        try:
            async with self.db.transaction() as conn:
                row = await conn.fetchrow(
                    "UPDATE reminders SET status = $1 WHERE id = $2 RETURNING *",
                    ReminderStatus.COMPLETED.value, reminder_id
                )
                if not row:
                    return None, None

                if successor is None:
                    return Reminder.from_dict(dict(row)), None

                next_row = await conn.fetchrow(
                    self._insert_query() + " ON CONFLICT (source_reminder_id) DO NOTHING RETURNING *",
                    *self._insert_values(successor)
                )
                if not next_row:
                    next_row = await conn.fetchrow(
                        "SELECT * FROM reminders WHERE source_reminder_id = $1", reminder_id
                    )
        except Exception as e:
            logger.error(f"Ошибка завершения напоминания {reminder_id}: {e}")
            raise DatabaseError(f"Не удалось завершить напоминание: {e}")

        return Reminder.from_dict(dict(row)), Reminder.from_dict(dict(next_row))

# Глобальный экземпляр репозитория
reminder_repository = ReminderRepository()
