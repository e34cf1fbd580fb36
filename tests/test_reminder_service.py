"""
Тесты сервиса напоминаний
"""
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock
import pytest
from conftest import NOW, OTHER_USER_ID, OWNER_ID
from handlers.reminder_card import build_reminder_card
from models.reminder import ReminderCategory, ReminderStatus, RecurringInterval
from utils import (
    AuthorizationError, DatabaseError, NotFoundError, OwnerNotFoundError, ValidationError
)

def payload(**overrides):
    data = {
        'title': "Electricity",
        'dueDate': (NOW + timedelta(days=10)).isoformat(),
        'amount': 120.5,
    }
    data.update(overrides)
    return data

@pytest.mark.asyncio
async def test_create_keeps_pending_for_future_due_date(service, repository):
    """Тест создания напоминания с будущим сроком"""
    real_now = datetime.now()
    reminder = await service.create_reminder(OWNER_ID, {
        'title': "Netflix",
        'dueDate': real_now + timedelta(days=2),
        'isRecurring': False,
        'status': "pending",
        'amount': 15.99,
    })

    assert reminder.id is not None
    assert reminder.status == ReminderStatus.PENDING
    assert repository.rows[reminder.id].status == ReminderStatus.PENDING

    card = build_reminder_card(reminder, now=real_now)
    assert card.display.label == "Due soon"

@pytest.mark.asyncio
async def test_create_with_past_due_date_is_stored_overdue(service, repository):
    """Тест создания напоминания с прошедшим сроком"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate=(NOW - timedelta(days=1)).isoformat(), status="pending"), now=NOW
    )

    assert reminder.status == ReminderStatus.OVERDUE
    assert repository.rows[reminder.id].status == ReminderStatus.OVERDUE

@pytest.mark.asyncio
async def test_create_completed_in_the_past_stays_completed(service):
    """Тест создания завершенного напоминания"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate=(NOW - timedelta(days=5)).isoformat(), status="completed"), now=NOW
    )
    assert reminder.status == ReminderStatus.COMPLETED

@pytest.mark.asyncio
async def test_create_applies_defaults(service):
    """Тест значений по умолчанию"""
    reminder = await service.create_reminder(
        OWNER_ID, {'title': "Insurance", 'dueDate': "2024-04-01T00:00:00"}, now=NOW
    )

    assert reminder.category == ReminderCategory.BILL
    assert reminder.is_recurring is False
    assert reminder.recurring_interval == RecurringInterval.MONTHLY
    assert reminder.effective_interval is None
    assert reminder.amount is None
    assert reminder.description is None
    assert reminder.status == ReminderStatus.PENDING
    assert reminder.created_at is not None

@pytest.mark.asyncio
async def test_create_accepts_utc_suffix(service):
    """Тест срока с суффиксом Z"""
    reminder = await service.create_reminder(OWNER_ID, payload(dueDate="2030-01-01T10:00:00Z"), now=NOW)
    assert reminder.due_date.tzinfo is None
    assert reminder.due_date.year in (2029, 2030)

@pytest.mark.asyncio
@pytest.mark.parametrize("bad", [
    {'title': None},
    {'title': "   "},
    {'dueDate': None},
    {'dueDate': "next tuesday"},
    {'category': "groceries"},
    {'category': "Bill"},
    {'recurringInterval': "hourly"},
    {'status': "paid"},
    {'amount': -5},
    {'amount': "ten"},
    {'isRecurring': "yes"},
    {'title': "x" * 201},
])
async def test_create_rejects_invalid_payload(service, repository, bad):
    """Тест некорректных данных при создании"""
    with pytest.raises(ValidationError):
        await service.create_reminder(OWNER_ID, payload(**bad), now=NOW)
    assert repository.rows == {}

@pytest.mark.asyncio
async def test_create_requires_title_key(service):
    """Тест обязательного названия"""
    data = payload()
    del data['title']
    with pytest.raises(ValidationError):
        await service.create_reminder(OWNER_ID, data, now=NOW)

@pytest.mark.asyncio
async def test_create_for_unknown_owner_fails(service, repository):
    """Тест создания для неизвестного пользователя"""
    with pytest.raises(OwnerNotFoundError):
        await service.create_reminder(99999, payload(), now=NOW)
    assert repository.rows == {}

@pytest.mark.asyncio
async def test_get_reminder_checks_existence_and_owner(service):
    """Тест получения напоминания владельцем"""
    reminder = await service.create_reminder(OWNER_ID, payload(), now=NOW)

    assert (await service.get_reminder(reminder.id, OWNER_ID)).title == "Electricity"
    with pytest.raises(NotFoundError):
        await service.get_reminder(reminder.id + 100, OWNER_ID)
    with pytest.raises(AuthorizationError):
        await service.get_reminder(reminder.id, OTHER_USER_ID)

@pytest.mark.asyncio
async def test_moving_due_date_forward_clears_overdue(service):
    """Тест переноса срока вперед"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate=(NOW - timedelta(days=1)).isoformat()), now=NOW
    )
    assert reminder.status == ReminderStatus.OVERDUE

    updated = await service.update_reminder(
        reminder.id, OWNER_ID, {'dueDate': (NOW + timedelta(days=7)).isoformat()}, now=NOW
    )
    assert updated.status == ReminderStatus.PENDING

@pytest.mark.asyncio
async def test_moving_due_date_back_escalates(service):
    """Тест переноса срока назад"""
    reminder = await service.create_reminder(OWNER_ID, payload(), now=NOW)

    updated = await service.update_reminder(
        reminder.id, OWNER_ID, {'dueDate': (NOW - timedelta(hours=1)).isoformat()}, now=NOW
    )
    assert updated.status == ReminderStatus.OVERDUE

@pytest.mark.asyncio
async def test_update_of_completed_reminder_keeps_it_completed(service):
    """Тест обновления завершенного напоминания"""
    reminder = await service.create_reminder(OWNER_ID, payload(status="completed"), now=NOW)

    updated = await service.update_reminder(
        reminder.id, OWNER_ID, {'dueDate': (NOW - timedelta(days=3)).isoformat()}, now=NOW
    )
    assert updated.status == ReminderStatus.COMPLETED

@pytest.mark.asyncio
async def test_update_without_due_date_keeps_overdue(service):
    """Тест обновления без изменения срока"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate=(NOW - timedelta(days=1)).isoformat()), now=NOW
    )

    updated = await service.update_reminder(reminder.id, OWNER_ID, {'title': "Power bill"}, now=NOW)

    assert updated.title == "Power bill"
    assert updated.status == ReminderStatus.OVERDUE

@pytest.mark.asyncio
async def test_update_requires_fields_and_ownership(service):
    """Тест проверок при обновлении"""
    reminder = await service.create_reminder(OWNER_ID, payload(), now=NOW)

    with pytest.raises(ValidationError):
        await service.update_reminder(reminder.id, OWNER_ID, {}, now=NOW)
    with pytest.raises(ValidationError):
        await service.update_reminder(reminder.id, OWNER_ID, {'title': ""}, now=NOW)
    with pytest.raises(AuthorizationError):
        await service.update_reminder(reminder.id, OTHER_USER_ID, {'title': "Mine"}, now=NOW)

@pytest.mark.asyncio
async def test_update_to_completed_spawns_successor(service, repository):
    """Тест завершения через обновление"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate="2024-03-15T00:00:00", isRecurring=True, recurringInterval="weekly"),
        now=NOW
    )

    updated = await service.update_reminder(reminder.id, OWNER_ID, {'status': "completed"}, now=NOW)

    assert updated.status == ReminderStatus.COMPLETED
    successors = [r for r in repository.rows.values() if r.source_reminder_id == reminder.id]
    assert len(successors) == 1
    assert successors[0].due_date == datetime(2024, 3, 22)

@pytest.mark.asyncio
async def test_complete_recurring_monthly_reminder(service, repository):
    """Тест завершения ежемесячного напоминания"""
    reminder = await service.create_reminder(OWNER_ID, {
        'title': "Gym",
        'dueDate': "2024-03-15T00:00:00",
        'category': "subscription",
        'amount': 40,
        'isRecurring': True,
        'recurringInterval': "monthly",
    }, now=NOW)

    result = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)

    assert result.reminder.status == ReminderStatus.COMPLETED
    assert repository.rows[reminder.id].status == ReminderStatus.COMPLETED

    successor = result.next
    assert successor is not None
    assert successor.id != reminder.id
    assert successor.due_date == datetime(2024, 4, 15)
    assert successor.status == ReminderStatus.PENDING
    assert successor.user_id == OWNER_ID
    assert successor.title == "Gym"
    assert successor.category == ReminderCategory.SUBSCRIPTION
    assert successor.amount == Decimal('40')
    assert successor.is_recurring is True
    assert successor.recurring_interval == RecurringInterval.MONTHLY

@pytest.mark.asyncio
async def test_complete_is_idempotent_for_successor(service, repository):
    """Тест повторного завершения"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate="2024-01-31T00:00:00", isRecurring=True), now=NOW
    )

    first = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)
    second = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)

    assert first.next.id == second.next.id
    assert first.next.due_date == datetime(2024, 2, 29)
    assert len(repository.rows) == 2

@pytest.mark.asyncio
async def test_complete_one_time_reminder_has_no_successor(service, repository):
    """Тест завершения разового напоминания"""
    reminder = await service.create_reminder(OWNER_ID, payload(), now=NOW)

    result = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)

    assert result.reminder.status == ReminderStatus.COMPLETED
    assert result.next is None
    assert len(repository.rows) == 1

@pytest.mark.asyncio
async def test_complete_requires_owner(service, repository):
    """Тест завершения чужого напоминания"""
    reminder = await service.create_reminder(OWNER_ID, payload(isRecurring=True), now=NOW)

    with pytest.raises(AuthorizationError):
        await service.complete_reminder(reminder.id, OTHER_USER_ID, now=NOW)
    assert repository.rows[reminder.id].status == ReminderStatus.PENDING
    assert len(repository.rows) == 1

@pytest.mark.asyncio
async def test_delete_reminder(service, repository):
    """Тест удаления напоминания"""
    reminder = await service.create_reminder(OWNER_ID, payload(), now=NOW)

    with pytest.raises(AuthorizationError):
        await service.delete_reminder(reminder.id, OTHER_USER_ID)
    assert await service.delete_reminder(reminder.id, OWNER_ID) is True
    assert repository.rows == {}

@pytest.mark.asyncio
async def test_bulk_delete(service, repository):
    """Тест массового удаления"""
    mine = [await service.create_reminder(OWNER_ID, payload(title=f"Bill {i}"), now=NOW) for i in range(3)]
    theirs = await service.create_reminder(OTHER_USER_ID, payload(title="Not mine"), now=NOW)

    with pytest.raises(ValidationError):
        await service.bulk_delete_reminders([], OWNER_ID)
    with pytest.raises(AuthorizationError):
        await service.bulk_delete_reminders([mine[0].id, theirs.id], OWNER_ID)
    assert len(repository.rows) == 4

    deleted = await service.bulk_delete_reminders([mine[0].id, mine[1].id], OWNER_ID)
    assert deleted == 2
    assert set(repository.rows) == {mine[2].id, theirs.id}

@pytest.mark.asyncio
async def test_list_sorts_and_paginates(service):
    """Тест сортировки и пагинации списка"""
    for days in (9, 1, 5):
        await service.create_reminder(
            OWNER_ID, payload(title=f"In {days} days", dueDate=(NOW + timedelta(days=days)).isoformat()),
            now=NOW
        )
    await service.create_reminder(OTHER_USER_ID, payload(title="Foreign"), now=NOW)

    first = await service.list_reminders(OWNER_ID, page=1, limit=2, now=NOW)
    second = await service.list_reminders(OWNER_ID, page=2, limit=2, now=NOW)

    assert [r.title for r in first.results] == ["In 1 days", "In 5 days"]
    assert [r.title for r in second.results] == ["In 9 days"]
    assert first.total == 3
    assert first.total_pages == 2
    assert first.count == 2
    assert second.count == 1

@pytest.mark.asyncio
async def test_list_filters_by_status_and_category(service):
    """Тест фильтров по статусу и категории"""
    await service.create_reminder(OWNER_ID, payload(title="Late", dueDate=(NOW - timedelta(days=2)).isoformat()), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Paid", status="completed"), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Tax", category="tax"), now=NOW)

    open_page = await service.list_reminders(OWNER_ID, status="pending,overdue", now=NOW)
    assert {r.title for r in open_page.results} == {"Late", "Tax"}

    overdue_page = await service.list_reminders(OWNER_ID, status="overdue", now=NOW)
    assert [r.title for r in overdue_page.results] == ["Late"]

    tax_page = await service.list_reminders(OWNER_ID, category="tax", now=NOW)
    assert [r.title for r in tax_page.results] == ["Tax"]

    everything = await service.list_reminders(OWNER_ID, status="all", category="all", now=NOW)
    assert everything.total == 3

@pytest.mark.asyncio
async def test_list_upcoming_excludes_completed_and_far_future(service):
    """Тест списка ближайших напоминаний"""
    await service.create_reminder(OWNER_ID, payload(title="Late", dueDate=(NOW - timedelta(days=2)).isoformat()), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Soon"), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Done", status="completed"), now=NOW)
    await service.create_reminder(
        OWNER_ID, payload(title="Far", dueDate=(NOW + timedelta(days=60)).isoformat()), now=NOW
    )

    page = await service.list_reminders(OWNER_ID, date_range='upcoming', now=NOW)

    assert [r.title for r in page.results] == ["Late", "Soon"]

@pytest.mark.asyncio
async def test_list_by_custom_date_range(service):
    """Тест произвольного интервала дат"""
    await service.create_reminder(OWNER_ID, payload(title="March", dueDate="2024-03-20T10:00:00"), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="April", dueDate="2024-04-02T10:00:00"), now=NOW)

    page = await service.list_reminders(
        OWNER_ID, start_date="2024-03-01", end_date="2024-03-31", now=NOW
    )
    assert [r.title for r in page.results] == ["March"]

    page = await service.list_reminders(OWNER_ID, date_range='current-month', now=NOW)
    assert [r.title for r in page.results] == ["March"]

@pytest.mark.asyncio
async def test_list_rejects_bad_arguments(service):
    """Тест некорректных параметров списка"""
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, page=0, now=NOW)
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, limit=1000, now=NOW)
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, limit=0, now=NOW)
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, category="food", now=NOW)
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, status="pending,paid", now=NOW)
    with pytest.raises(ValidationError):
        await service.list_reminders(OWNER_ID, status="pending, overdue", now=NOW)

@pytest.mark.asyncio
async def test_summary(service):
    """Тест сводки"""
    await service.create_reminder(OWNER_ID, payload(title="Late", dueDate=(NOW - timedelta(days=2)).isoformat()), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Rent", amount="900"), now=NOW)
    await service.create_reminder(
        OWNER_ID, payload(title="Netflix", amount=15.5, category="subscription"), now=NOW
    )
    await service.create_reminder(OWNER_ID, payload(title="Free trial", amount=None, category="subscription"), now=NOW)
    await service.create_reminder(OWNER_ID, payload(title="Done", status="completed"), now=NOW)
    await service.create_reminder(
        OWNER_ID, payload(title="Far", dueDate=(NOW + timedelta(days=90)).isoformat()), now=NOW
    )

    summary = await service.get_summary(OWNER_ID, now=NOW)

    assert summary.total_pending == 4
    assert summary.total_overdue == 1
    assert summary.upcoming_total == Decimal('915.5')
    assert summary.by_category == {'bill': 1, 'subscription': 2}

    page = await service.list_reminders(OWNER_ID, now=NOW)
    assert page.summary == summary
    assert page.to_api_dict()['summary']['upcomingTotal'] == 915.5

@pytest.mark.asyncio
async def test_successor_already_past_due_is_stored_overdue(service):
    """Тест просроченного следующего напоминания"""
    reminder = await service.create_reminder(
        OWNER_ID, payload(dueDate="2024-03-01T00:00:00", isRecurring=True, recurringInterval="weekly"),
        now=NOW
    )

    result = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)

    assert result.next.due_date == datetime(2024, 3, 8)
    assert result.next.status == ReminderStatus.OVERDUE

@pytest.mark.asyncio
async def test_complete_propagates_storage_failure(service, repository, monkeypatch):
    """Тест ошибки хранилища при завершении: результата нет, запись не изменена"""
    reminder = await service.create_reminder(OWNER_ID, payload(isRecurring=True), now=NOW)
    monkeypatch.setattr(repository, 'complete', AsyncMock(side_effect=DatabaseError("insert failed")))

    result = None
    with pytest.raises(DatabaseError):
        result = await service.complete_reminder(reminder.id, OWNER_ID, now=NOW)

    assert result is None
    assert repository.rows[reminder.id].status == ReminderStatus.PENDING
    assert len(repository.rows) == 1
