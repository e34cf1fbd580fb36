"""
Общие фикстуры тестов
"""
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock
import pytest
from models.reminder import Reminder, ReminderStatus
from services.reminder_repository import ReminderFilter
from services.reminder_service import ReminderService
from utils.rate_limiter import rate_limiter

OWNER_ID = 1001
OTHER_USER_ID = 2002
NOW = datetime(2024, 3, 10, 12, 0)

class InMemoryReminderRepository:
    """Репозиторий в памяти с тем же интерфейсом, что и ReminderRepository"""

    def __init__(self):
        self.rows: Dict[int, Reminder] = {}
        self._next_id = 1

    async def insert(self, reminder: Reminder) -> Reminder:
        stored = replace(reminder, id=self._next_id, created_at=reminder.created_at or datetime.now())
        self._next_id += 1
        self.rows[stored.id] = stored
        return replace(stored)

    async def get(self, reminder_id: int) -> Optional[Reminder]:
        stored = self.rows.get(reminder_id)
        return replace(stored) if stored else None

    async def update(self, reminder: Reminder) -> Optional[Reminder]:
        if reminder.id not in self.rows:
            return None
        self.rows[reminder.id] = replace(reminder)
        return replace(reminder)

    async def delete(self, reminder_id: int) -> bool:
        return self.rows.pop(reminder_id, None) is not None

    async def delete_many(self, reminder_ids, user_id: int) -> int:
        doomed = [i for i in reminder_ids if i in self.rows and self.rows[i].user_id == user_id]
        for reminder_id in doomed:
            del self.rows[reminder_id]
        return len(doomed)

    async def find(self, query_filter: ReminderFilter, limit=None, offset: int = 0):
        matches = sorted(
            (r for r in self.rows.values() if query_filter.matches(r)),
            key=lambda r: (r.due_date, r.id)
        )
        if limit is not None:
            matches = matches[offset:offset + limit]
        return [replace(r) for r in matches]

    async def count(self, query_filter: ReminderFilter) -> int:
        return sum(1 for r in self.rows.values() if query_filter.matches(r))

    async def complete(self, reminder_id: int, successor: Optional[Reminder] = None):
        stored = self.rows.get(reminder_id)
        if stored is None:
            return None, None
        stored.status = ReminderStatus.COMPLETED
        if successor is None:
            return replace(stored), None

        existing = next(
            (r for r in self.rows.values() if r.source_reminder_id == reminder_id), None
        )
        if existing is None:
            existing = await self.insert(successor)
        return replace(stored), replace(existing)

def make_update(text: str, user_id: int = OWNER_ID):
    """Текстовое сообщение Telegram с асинхронным reply_text"""
    update = MagicMock()
    update.effective_user.id = user_id
    update.message.text = text
    update.message.reply_text = AsyncMock()
    return update

def last_reply(update) -> str:
    return update.message.reply_text.call_args[0][0]

class FakeUserService:
    """Проверка владельцев без базы данных"""

    def __init__(self, *user_ids: int):
        self.user_ids = set(user_ids)

    async def is_user_exists(self, user_id: int) -> bool:
        return user_id in self.user_ids

@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.requests.clear()
    yield
    rate_limiter.requests.clear()

@pytest.fixture
def repository():
    return InMemoryReminderRepository()

@pytest.fixture
def users():
    return FakeUserService(OWNER_ID, OTHER_USER_ID)

@pytest.fixture
def service(repository, users):
    return ReminderService(repository=repository, users=users)
