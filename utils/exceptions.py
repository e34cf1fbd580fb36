"""
Кастомные исключения
"""
from typing import Optional

class BudgetBotException(Exception):
    """Базовое исключение для BudgetBot"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

class DatabaseError(BudgetBotException):
    """Ошибка базы данных"""
    pass

class ValidationError(BudgetBotException):
    """Ошибка валидации данных"""
    pass

class OwnerNotFoundError(BudgetBotException):
    """Владелец напоминания не найден"""
    pass

class NotFoundError(BudgetBotException):
    """Запись не найдена"""
    pass

class AuthorizationError(BudgetBotException):
    """Ошибка авторизации"""
    pass

class DerivationInputError(BudgetBotException):
    """Некорректные входные данные для расчета статуса отображения"""
    pass

class RateLimitError(BudgetBotException):
    """Ошибка превышения лимита запросов"""
    pass

class ConfigurationError(BudgetBotException):
    """Ошибка конфигурации"""
    pass
