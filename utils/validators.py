"""
Валидаторы для входных данных
"""
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union
from utils.exceptions import ValidationError

E = TypeVar('E', bound=Enum)

class Validator:
    """Базовый класс валидатора"""

    @staticmethod
    def validate_not_empty(value: Optional[str], field_name: str = "Field") -> str:
        """Проверка на пустое значение"""
        if value is None or not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field_name} is required", error_code="required")
        return value.strip()

    @staticmethod
    def validate_length(value: Optional[str], min_length: int = 1, max_length: int = 255,
                        field_name: str = "Field") -> str:
        """Проверка длины строки"""
        value = Validator.validate_not_empty(value, field_name)
        if len(value) < min_length:
            raise ValidationError(f"{field_name} must be at least {min_length} characters")
        if len(value) > max_length:
            raise ValidationError(f"{field_name} must be at most {max_length} characters")
        return value

    @staticmethod
    def validate_amount(value: Union[str, int, float, Decimal, None]) -> Decimal:
        """Валидация суммы (неотрицательная величина, без валюты)"""
        if value is None or isinstance(value, bool):
            raise ValidationError("Amount must be a number", error_code="amount")

        if isinstance(value, str):
            value = value.strip().replace(',', '.')
            if not value:
                raise ValidationError("Amount must be a number", error_code="amount")

        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError("Amount must be a number", error_code="amount")

        if not amount.is_finite():
            raise ValidationError("Amount must be a finite number", error_code="amount")
        if amount < 0:
            raise ValidationError("Amount must not be negative", error_code="amount")
        if amount > Decimal('999999999.99'):
            raise ValidationError("Amount is too large", error_code="amount")
        return amount

    @staticmethod
    def validate_optional_amount(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
        """Сумма необязательна: None и пустая строка означают отсутствие"""
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Validator.validate_amount(value)

    @staticmethod
    def validate_date(date_str: str, format_str: str = "%d.%m.%Y") -> date:
        """Валидация даты в пользовательском формате"""
        if not date_str or not date_str.strip():
            raise ValidationError("Date is required", error_code="required")

        try:
            return datetime.strptime(date_str.strip(), format_str).date()
        except ValueError:
            raise ValidationError(f"Invalid date. Use the format {format_str}")

    @staticmethod
    def validate_due_date(value: Union[str, date, datetime, None]) -> datetime:
        """Валидация срока: datetime, date или строка ISO-8601"""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Due date is required", error_code="required")

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, datetime.min.time())
        elif isinstance(value, str):
            text = value.strip()
            # fromisoformat в старых версиях не понимает суффикс Z
            if text.endswith('Z'):
                text = text[:-1] + '+00:00'
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError("Due date must be an ISO-8601 date", error_code="due_date")
        else:
            raise ValidationError("Due date must be an ISO-8601 date", error_code="due_date")

        # Храним наивное локальное время
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    @staticmethod
    def validate_enum(value: Any, enum_cls: Type[E], field_name: str = "Field") -> E:
        """Значение должно входить в закрытое перечисление"""
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            try:
                return enum_cls(value)
            except ValueError:
                pass
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", error_code="enum")

    @staticmethod
    def validate_bool(value: Any, field_name: str = "Field") -> bool:
        """Булево значение без неявного приведения"""
        if not isinstance(value, bool):
            raise ValidationError(f"{field_name} must be true or false", error_code="bool")
        return value

    @staticmethod
    def validate_description(description: Optional[str]) -> Optional[str]:
        """Описание необязательно"""
        if description is None or not str(description).strip():
            return None
        return Validator.validate_length(str(description), 1, 500, "Description")

    @staticmethod
    def validate_choice(choice_str: str, max_choice: int, field_name: str = "Choice") -> int:
        """Валидация выбора из нумерованного списка"""
        if not choice_str or not choice_str.strip():
            raise ValidationError(f"{field_name} is required")

        try:
            choice = int(choice_str.strip().rstrip('.'))
        except ValueError:
            raise ValidationError(f"Invalid {field_name.lower()}")

        if not (1 <= choice <= max_choice):
            raise ValidationError(f"{field_name} must be between 1 and {max_choice}")
        return choice
