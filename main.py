"""
Главный файл приложения BudgetBot
"""
import sys
from telegram.ext import Application, CommandHandler, MessageHandler, filters
from config.settings import settings
from handlers import ReminderHandler
from handlers.reminder_handler import COMMANDS
from services.database_service import db_service
from services.user_service import user_service
from utils import logger, ConfigurationError

HELP_BUTTON = "ℹ️ Help"

reminder_handler = ReminderHandler()

HELP_TEXT = """
🤖 BudgetBot - bills and subscriptions reminders

📋 Commands:
/start - register and open the menu
/reminders - upcoming reminders
/help - this help

⏰ Reminders:
• Add bills, subscriptions, taxes and other payments
• Recurring reminders roll over to the next date when paid
• Cards show Paid, Overdue, Due soon or the days left
"""

async def start_command(update, context):
    """Обработчик команды /start"""
    try:
        user_id = update.effective_user.id
        username = update.effective_user.username or update.effective_user.first_name or str(user_id)

        user = await user_service.get_user(user_id)
        if not user:
            await user_service.create_user(user_id=user_id, username=username)
            logger.info(f"Создан новый пользователь: {username} (ID: {user_id})")

        await update.message.reply_text(
            f"🤖 Welcome to BudgetBot, {username}!\n\n"
            "I keep track of your bills and subscriptions.\n"
            "Choose an action from the menu below:",
            reply_markup=reminder_handler.get_main_menu_keyboard()
        )

    except Exception as e:
        logger.error(f"Ошибка в команде /start: {e}")
        await reminder_handler.handle_error(update, context, e)

async def help_command(update, context):
    """Обработчик команды /help"""
    await update.message.reply_text(HELP_TEXT)

async def reminders_command(update, context):
    """Обработчик команды /reminders"""
    await reminder_handler.show_menu(update, context)

async def error_handler(update, context):
    """Обработчик ошибок"""
    logger.error(f"Ошибка: {context.error}")

    if update and update.effective_message:
        await update.effective_message.reply_text(
            "❌ Something went wrong. Please try again later.",
            reply_markup=reminder_handler.get_main_menu_keyboard()
        )

async def message_handler(update, context):
    """Основной обработчик сообщений"""
    text = update.message.text.strip()

    if text == HELP_BUTTON:
        await help_command(update, context)
    elif text in COMMANDS or reminder_handler.is_active(context):
        await reminder_handler.handle(update, context)
    else:
        await update.message.reply_text(
            "❌ Unknown command. Use the menu or /help.",
            reply_markup=reminder_handler.get_main_menu_keyboard()
        )

async def initialize_services(application: Application):
    """Инициализация сервисов"""
    logger.info("Инициализация сервисов...")
    await db_service.initialize()
    await db_service.init_schema()
    logger.info("✅ Все сервисы инициализированы")

async def cleanup_services(application: Application):
    """Очистка ресурсов"""
    logger.info("Очистка ресурсов...")
    await db_service.close()
    logger.info("✅ Ресурсы очищены")

def build_application() -> Application:
    """Создание приложения и регистрация обработчиков"""
    errors = settings.validate()
    if errors:
        raise ConfigurationError(f"Configuration validation failed: {errors}")
    if not settings.database.is_configured:
        raise ConfigurationError("Database is not configured")

    application = (
        Application.builder()
        .token(settings.bot.token)
        .post_init(initialize_services)
        .post_shutdown(cleanup_services)
        .build()
    )

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("reminders", reminders_command))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, message_handler))
    application.add_error_handler(error_handler)

    logger.info("✅ Обработчики добавлены")
    return application

def main():
    """Главная функция"""
    logger.info("🚀 Запуск BudgetBot...")
    try:
        application = build_application()
        logger.info("🤖 BudgetBot запущен и готов к работе!")
        application.run_polling(allowed_updates=["message"], drop_pending_updates=True)
    except ConfigurationError as e:
        logger.error(f"❌ {e.message}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("🛑 Получен сигнал остановки")
    finally:
        logger.info("👋 BudgetBot остановлен")

if __name__ == "__main__":
    main()
