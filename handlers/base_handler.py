"""
Базовый обработчик
"""
from abc import ABC, abstractmethod
from telegram import Update, ReplyKeyboardMarkup, KeyboardButton
from telegram.ext import ContextTypes
from typing import List
from handlers.reminder_card import format_money
from utils import (
    logger, check_rate_limit, ValidationError, DatabaseError, RateLimitError,
    NotFoundError, AuthorizationError, OwnerNotFoundError
)

MAIN_MENU = [
    ["⏰ Reminders", "📋 Reminder list"],
    ["➕ Add reminder", "✅ Mark as paid"],
    ["🗑️ Delete reminder", "ℹ️ Help"]
]

BACK_BUTTON = "🔙 Back"

class BaseHandler(ABC):
    """Базовый класс для всех обработчиков"""

    def __init__(self):
        self.logger = logger

    async def handle_error(self, update: Update, context: ContextTypes.DEFAULT_TYPE, error: Exception):
        """Обработка ошибок"""
        user_id = update.effective_user.id if update.effective_user else 0

        if isinstance(error, (RateLimitError, ValidationError, NotFoundError, AuthorizationError)):
            text = f"❌ {error.message}"
        elif isinstance(error, OwnerNotFoundError):
            text = "❌ You are not registered yet. Send /start first."
        elif isinstance(error, DatabaseError):
            text = "❌ Database error. Please try again later."
        else:
            text = "❌ Something went wrong. Please try again later."

        await update.message.reply_text(text, reply_markup=self.get_main_menu_keyboard())
        self.logger.error(f"Ошибка для пользователя {user_id}: {error}")

    async def check_user_access(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
        """Проверка доступа пользователя"""
        try:
            check_rate_limit(update.effective_user.id)
            return True
        except RateLimitError as e:
            await self.handle_error(update, context, e)
            return False

    def get_main_menu_keyboard(self) -> ReplyKeyboardMarkup:
        """Получение клавиатуры главного меню"""
        keyboard = [[KeyboardButton(text) for text in row] for row in MAIN_MENU]
        return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)

    def get_back_keyboard(self) -> ReplyKeyboardMarkup:
        """Получение клавиатуры с кнопкой назад"""
        return ReplyKeyboardMarkup([[KeyboardButton(BACK_BUTTON)]], resize_keyboard=True)

    def format_amount(self, amount) -> str:
        """Форматирование суммы"""
        return format_money(amount)

    def format_date(self, date_obj) -> str:
        """Форматирование даты"""
        if hasattr(date_obj, 'strftime'):
            return date_obj.strftime("%d.%m.%Y")
        return str(date_obj)

    def create_keyboard_from_list(self, items: List[str], columns: int = 2) -> ReplyKeyboardMarkup:
        """Создание клавиатуры из списка элементов"""
        keyboard = []
        for i in range(0, len(items), columns):
            row = items[i:i + columns]
            keyboard.append([KeyboardButton(item) for item in row])
        keyboard.append([KeyboardButton(BACK_BUTTON)])
        return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)

    def create_numbered_keyboard(self, items: List[str]) -> ReplyKeyboardMarkup:
        """Создание нумерованной клавиатуры"""
        keyboard = [[KeyboardButton(f"{i}. {item}")] for i, item in enumerate(items, 1)]
        keyboard.append([KeyboardButton(BACK_BUTTON)])
        return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)

    @abstractmethod
    async def handle(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Основной метод обработки"""
        pass
