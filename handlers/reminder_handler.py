"""
Обработчик напоминаний
"""
from datetime import datetime
from typing import List, Optional
from telegram import Update, ReplyKeyboardMarkup, KeyboardButton
from telegram.ext import ContextTypes
from handlers.base_handler import BaseHandler, BACK_BUTTON
from handlers.reminder_card import build_reminder_card, render_reminder_card
from models.reminder import Reminder, ReminderCategory, ReminderStatus, RecurringInterval
from services.reminder_service import ReminderService, reminder_service
from utils import ValidationError
from utils.validators import Validator

MENU = "⏰ Reminders"
ADD = "➕ Add reminder"
LIST = "📋 Reminder list"
PAY = "✅ Mark as paid"
DELETE = "🗑️ Delete reminder"
SKIP = "Skip"
ONE_TIME = "One-time"

COMMANDS = (MENU, ADD, LIST, PAY, DELETE)
MAX_LISTED = 50

STEP_KEYS = (
    'reminder_step', 'reminder_title', 'reminder_description', 'reminder_amount',
    'reminder_due_date', 'reminder_category', 'reminder_choices'
)

class ReminderHandler(BaseHandler):
    """Обработчик напоминаний"""

    def __init__(self, service: ReminderService = reminder_service):
        super().__init__()
        self.service = service

    async def handle(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Основной метод обработки"""
        if not await self.check_user_access(update, context):
            return

        try:
            text = update.message.text.strip()
            user_id = update.effective_user.id
            step = context.user_data.get('reminder_step')

            if text == BACK_BUTTON:
                self._clear_reminder_data(context)
                await update.message.reply_text("🏠 Main menu", reply_markup=self.get_main_menu_keyboard())
            elif text == MENU:
                await self._show_reminders_menu(update, context, user_id)
            elif text == ADD:
                await self._start_reminder_creation(update, context)
            elif text == LIST:
                await self._show_reminders_list(update, context, user_id)
            elif text == PAY:
                await self._start_choice(update, context, user_id, 'complete')
            elif text == DELETE:
                await self._start_choice(update, context, user_id, 'delete')
            elif step:
                await self._process_step(update, context, user_id, step, text)
            else:
                await update.message.reply_text(
                    "❌ Unknown command",
                    reply_markup=self.get_main_menu_keyboard()
                )

        except Exception as e:
            self._clear_reminder_data(context)
            await self.handle_error(update, context, e)

    async def show_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Показ ближайших напоминаний по команде /reminders"""
        if not await self.check_user_access(update, context):
            return
        try:
            await self._show_reminders_menu(update, context, update.effective_user.id)
        except Exception as e:
            await self.handle_error(update, context, e)

    def is_active(self, context: ContextTypes.DEFAULT_TYPE) -> bool:
        """Идет ли диалог с напоминаниями"""
        return bool(context.user_data.get('reminder_step'))

    def _format_reminder(self, reminder: Reminder, now: datetime) -> str:
        if reminder.amount is not None:
            return render_reminder_card(build_reminder_card(reminder, now=now))
        # Без суммы карточку не строим, показываем строку из списка уведомлений
        return (
            f"• {reminder.title} · {reminder.status.value}\n"
            f"   🏷 {reminder.category.value}  📅 {reminder.due_date.strftime('%b %d, %Y')}"
        )

    async def _show_reminders_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE, user_id: int):
        """Показ ближайших напоминаний"""
        self._clear_reminder_data(context)
        now = datetime.now()
        page = await self.service.list_reminders(user_id, limit=5, date_range='upcoming', now=now)

        if not page.results:
            message = "⏰ Reminders\n\nYou have no upcoming reminders."
        else:
            lines = ["⏰ Upcoming reminders:\n"]
            lines.extend(self._format_reminder(reminder, now) for reminder in page.results)
            if page.total > page.count:
                lines.append(f"... and {page.total - page.count} more")

            summary = page.summary
            lines.append(
                f"\n📊 Pending: {summary.total_pending} · Overdue: {summary.total_overdue} · "
                f"Next 30 days: {self.format_amount(summary.upcoming_total)}"
            )
            message = "\n".join(lines)

        await update.message.reply_text(message, reply_markup=self.get_main_menu_keyboard())

    async def _show_reminders_list(self, update: Update, context: ContextTypes.DEFAULT_TYPE, user_id: int):
        """Показ всех напоминаний, сгруппированных по статусу"""
        self._clear_reminder_data(context)
        now = datetime.now()
        page = await self.service.list_reminders(user_id, limit=MAX_LISTED, now=now)

        if not page.results:
            await update.message.reply_text(
                "📋 You have no reminders yet.",
                reply_markup=self.get_main_menu_keyboard()
            )
            return

        sections = [
            ("🔴 Overdue", ReminderStatus.OVERDUE),
            ("⏳ Pending", ReminderStatus.PENDING),
            ("✅ Completed", ReminderStatus.COMPLETED),
        ]
        lines = ["📋 Your reminders:"]
        for heading, status in sections:
            group = [r for r in page.results if r.status == status]
            if group:
                lines.append(f"\n{heading}")
                lines.extend(self._format_reminder(reminder, now) for reminder in group)

        await update.message.reply_text("\n".join(lines), reply_markup=self.get_main_menu_keyboard())

    async def _start_reminder_creation(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Начало создания напоминания"""
        self._clear_reminder_data(context)
        context.user_data['reminder_step'] = 'title'
        await update.message.reply_text(
            "⏰ New reminder\n\nEnter the reminder title:",
            reply_markup=self.get_back_keyboard()
        )

    async def _start_choice(self, update: Update, context: ContextTypes.DEFAULT_TYPE, user_id: int, action: str):
        """Выбор напоминания для оплаты или удаления"""
        self._clear_reminder_data(context)
        status = 'pending,overdue' if action == 'complete' else None
        page = await self.service.list_reminders(user_id, limit=MAX_LISTED, status=status)

        if not page.results:
            await update.message.reply_text(
                "📋 There is nothing to choose from.",
                reply_markup=self.get_main_menu_keyboard()
            )
            return

        context.user_data['reminder_step'] = f'{action}_choice'
        context.user_data['reminder_choices'] = [reminder.id for reminder in page.results]

        prompt = "Which reminder is paid?" if action == 'complete' else "Which reminder should be deleted?"
        labels = [f"{r.title} ({r.due_date.strftime('%b %d')})" for r in page.results]
        await update.message.reply_text(prompt, reply_markup=self.create_numbered_keyboard(labels))

    async def _process_step(self, update: Update, context: ContextTypes.DEFAULT_TYPE,
                            user_id: int, step: str, text: str):
        """Обработка очередного шага диалога"""
        processors = {
            'title': self._process_reminder_title,
            'description': self._process_reminder_description,
            'amount': self._process_reminder_amount,
            'due_date': self._process_reminder_due_date,
            'category': self._process_reminder_category,
            'recurrence': self._process_reminder_recurrence,
            'complete_choice': self._process_complete_choice,
            'delete_choice': self._process_delete_choice,
        }
        processor = processors.get(step)
        if processor is None:
            self._clear_reminder_data(context)
            return

        try:
            await processor(update, context, user_id, text)
        except ValidationError as e:
            await update.message.reply_text(f"❌ {e.message}", reply_markup=self.get_back_keyboard())

    async def _process_reminder_title(self, update, context, user_id: int, text: str):
        """Обработка ввода названия"""
        context.user_data['reminder_title'] = Validator.validate_length(text, 1, 200, "Title")
        context.user_data['reminder_step'] = 'description'
        await update.message.reply_text(
            f"📝 Title: {context.user_data['reminder_title']}\n\nEnter a description (or '{SKIP}'):",
            reply_markup=self._skip_keyboard()
        )

    async def _process_reminder_description(self, update, context, user_id: int, text: str):
        """Обработка ввода описания"""
        description = None if text.lower() == SKIP.lower() else Validator.validate_description(text)
        context.user_data['reminder_description'] = description
        context.user_data['reminder_step'] = 'amount'
        await update.message.reply_text(
            f"📄 Description: {description or 'none'}\n\nEnter the amount (or '{SKIP}'):",
            reply_markup=self._skip_keyboard()
        )

    async def _process_reminder_amount(self, update, context, user_id: int, text: str):
        """Обработка ввода суммы"""
        amount = None if text.lower() == SKIP.lower() else Validator.validate_amount(text)
        context.user_data['reminder_amount'] = amount
        context.user_data['reminder_step'] = 'due_date'
        amount_text = self.format_amount(amount) if amount is not None else 'none'
        await update.message.reply_text(
            f"💰 Amount: {amount_text}\n\nEnter the due date as DD.MM.YYYY (e.g. 15.09.2025):",
            reply_markup=self.get_back_keyboard()
        )

    async def _process_reminder_due_date(self, update, context, user_id: int, text: str):
        """Обработка ввода срока"""
        due_date = Validator.validate_date(text)
        context.user_data['reminder_due_date'] = due_date
        context.user_data['reminder_step'] = 'category'
        await update.message.reply_text(
            f"📅 Due date: {self.format_date(due_date)}\n\nChoose a category:",
            reply_markup=self.create_keyboard_from_list([c.value for c in ReminderCategory], columns=3)
        )

    async def _process_reminder_category(self, update, context, user_id: int, text: str):
        """Обработка выбора категории"""
        category = Validator.validate_enum(text, ReminderCategory, "Category")
        context.user_data['reminder_category'] = category.value
        context.user_data['reminder_step'] = 'recurrence'
        options = [ONE_TIME] + [i.value.capitalize() for i in RecurringInterval]
        await update.message.reply_text(
            f"🏷 Category: {category.value}\n\nHow often does it repeat?",
            reply_markup=self.create_keyboard_from_list(options, columns=3)
        )

    async def _process_reminder_recurrence(self, update, context, user_id: int, text: str):
        """Обработка выбора периодичности и сохранение напоминания"""
        interval: Optional[RecurringInterval] = None
        if text != ONE_TIME:
            interval = Validator.validate_enum(text.lower(), RecurringInterval, "Recurrence")

        payload = {
            'title': context.user_data['reminder_title'],
            'description': context.user_data.get('reminder_description'),
            'amount': context.user_data.get('reminder_amount'),
            'dueDate': context.user_data['reminder_due_date'],
            'category': context.user_data['reminder_category'],
            'isRecurring': interval is not None,
        }
        if interval is not None:
            payload['recurringInterval'] = interval.value

        reminder = await self.service.create_reminder(user_id, payload)
        self._clear_reminder_data(context)

        response = "✅ Reminder created!\n\n"
        response += f"📝 {reminder.title}\n"
        response += f"📅 Due: {self.format_date(reminder.due_date)}\n"
        if reminder.amount is not None:
            response += f"💰 Amount: {self.format_amount(reminder.amount)}\n"
        response += f"🏷 Category: {reminder.category.value}\n"
        response += f"🔁 Repeats: {reminder.effective_interval.value if reminder.effective_interval else 'no'}\n"
        if reminder.status == ReminderStatus.OVERDUE:
            response += "⚠️ The due date has already passed, the reminder is overdue.\n"

        await update.message.reply_text(response, reply_markup=self.get_main_menu_keyboard())

    def _pick_choice(self, context, text: str) -> int:
        choices: List[int] = context.user_data.get('reminder_choices') or []
        number = Validator.validate_choice(text.split()[0] if text.split() else text, len(choices), "Number")
        return choices[number - 1]

    async def _process_complete_choice(self, update, context, user_id: int, text: str):
        """Отметка выбранного напоминания как оплаченного"""
        reminder_id = self._pick_choice(context, text)
        result = await self.service.complete_reminder(reminder_id, user_id)
        self._clear_reminder_data(context)

        response = f"✅ Marked as paid: {result.reminder.title}"
        if result.next is not None:
            response += f"\n🔁 Next reminder: {self.format_date(result.next.due_date)}"
        await update.message.reply_text(response, reply_markup=self.get_main_menu_keyboard())

    async def _process_delete_choice(self, update, context, user_id: int, text: str):
        """Удаление выбранного напоминания"""
        reminder_id = self._pick_choice(context, text)
        await self.service.delete_reminder(reminder_id, user_id)
        self._clear_reminder_data(context)
        await update.message.reply_text("🗑️ Reminder deleted", reply_markup=self.get_main_menu_keyboard())

    def _skip_keyboard(self) -> ReplyKeyboardMarkup:
        return ReplyKeyboardMarkup(
            [[KeyboardButton(SKIP)], [KeyboardButton(BACK_BUTTON)]],
            resize_keyboard=True
        )

    def _clear_reminder_data(self, context: ContextTypes.DEFAULT_TYPE):
        """Очистка данных диалога"""
        for key in STEP_KEYS:
            context.user_data.pop(key, None)
