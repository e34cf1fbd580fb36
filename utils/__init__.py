"""
Утилиты для BudgetBot
"""
from .logger import logger, setup_logger
from .exceptions import (
    BudgetBotException,
    DatabaseError,
    ValidationError,
    OwnerNotFoundError,
    NotFoundError,
    AuthorizationError,
    DerivationInputError,
    RateLimitError,
    ConfigurationError
)
from .validators import Validator
from .rate_limiter import rate_limiter, check_rate_limit

__all__ = [
    'logger',
    'setup_logger',
    'BudgetBotException',
    'DatabaseError',
    'ValidationError',
    'OwnerNotFoundError',
    'NotFoundError',
    'AuthorizationError',
    'DerivationInputError',
    'RateLimitError',
    'ConfigurationError',
    'Validator',
    'rate_limiter',
    'check_rate_limit'
]
